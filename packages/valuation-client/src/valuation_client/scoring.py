from typing import Optional

from valuation_client.transforms import WizardLike, as_wizard

BASE_CONFIDENCE = 30
MAX_CONFIDENCE = 100


def score_confidence(wizard: Optional[WizardLike]) -> int:
    """
    Score how complete the wizard answers are, from 30 (nothing) to 100.

    Only the presence of a value counts, not its magnitude; a reported
    revenue of zero scores the same as any other revenue.
    """
    wizard = as_wizard(wizard)
    score = BASE_CONFIDENCE

    if wizard.step1 is not None:
        score += 20

    financials = wizard.financials
    if financials is not None:
        if financials.revenue is not None:
            score += 15
        if financials.monthly_burn_rate is not None:
            score += 10
        if financials.funding_raised is not None:
            score += 5

    traction = wizard.traction
    if traction is not None:
        if traction.customer_count is not None:
            score += 10
        if traction.growth_rate is not None:
            score += 10
        if traction.unique_value:
            score += 5

    extras = wizard.extras
    if extras is not None:
        if extras.uploaded_files:
            score += 10
        if extras.linkedin_url:
            score += 2
        if extras.website_url:
            score += 3

    return min(score, MAX_CONFIDENCE)


def confidence_label(score: float) -> str:
    if score >= 80:
        return "High Confidence"
    if score >= 60:
        return "Good Confidence"
    if score >= 40:
        return "Moderate Confidence"
    return "Initial Estimate"


def format_currency(amount: float) -> str:
    """Compact dollar formatting: $1.25B, $3.40M, $950K, $999."""
    if amount >= 1e9:
        return f"${amount / 1e9:.2f}B"
    if amount >= 1e6:
        return f"${amount / 1e6:.2f}M"
    if amount >= 1e3:
        return f"${amount / 1e3:.0f}K"
    if float(amount).is_integer():
        return f"${int(amount):,}"
    return f"${amount:,.3f}".rstrip("0").rstrip(".")
