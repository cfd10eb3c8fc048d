"""
Payload Transforms
==================

Reshapes data between the wizard form model and the backends' schemas.

There are three outgoing shapes and one incoming repair step:

- ``to_new_api_payload``: external "new" valuation API (amounts in thousands)
- ``to_backend_payload``: legacy local FastAPI backend (raw wizard values)
- ``api_response_to_report``: normalises whatever the new API returned into
  a ``ValuationReport``, falling back to a synthesised report for the old
  flat response format.
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional, Union

from valuation_client.models.report import ValuationReport
from valuation_client.models.wizard import WizardData
from valuation_client.utils.json import sanitize_for_json

logger = logging.getLogger(__name__)

STAGE_MAPPINGS = {
    "idea": "Idea",
    "mvp": "MVP",
    "launched": "Launched",
    "growth": "Growth",
}

INDUSTRY_MAPPINGS = {
    "saas": "SaaS",
    "ecommerce": "E-commerce",
    "fintech": "Fintech/SaaS",
    "healthtech": "HealthTech",
    "edtech": "EdTech",
    "ai": "AI/ML",
    "biotech": "Biotech",
    "cleantech": "CleanTech",
    "gaming": "Gaming",
    "other": "Other",
}

# "$120M–$160M", "$950K-$1.2M", "$5-$8" (no unit means thousands)
FINAL_RANGE_PATTERN = re.compile(r"\$(\d+(?:\.\d+)?)([KMB])?[–-]\$(\d+(?:\.\d+)?)([KMB])?")
UNIT_MULTIPLIERS = {"K": 1_000, "M": 1_000_000, "B": 1_000_000_000}

WizardLike = Union[WizardData, Dict[str, Any]]


def as_wizard(wizard: Optional[WizardLike]) -> WizardData:
    if wizard is None:
        return WizardData()
    if isinstance(wizard, WizardData):
        return wizard
    return WizardData.model_validate(wizard)


def round_half_up(value: float) -> int:
    """Round half toward +inf, so -2.5 becomes -2 and 2.5 becomes 3."""
    return int(math.floor(value + 0.5))


def _thousands(value: Optional[float]) -> int:
    return round_half_up((value or 0) / 1000)


# ---------------------------------------------------------------------------
# Outgoing payloads
# ---------------------------------------------------------------------------


def to_new_api_payload(wizard: WizardLike) -> Dict[str, Any]:
    """Build the external valuation API payload. Money is sent in thousands."""
    wizard = as_wizard(wizard)
    step1 = wizard.step1

    payload: Dict[str, Any] = {
        "name": (step1 and step1.business_name) or "Unknown Company",
        "country": (step1 and step1.country) or "United States",
        "industry": INDUSTRY_MAPPINGS.get((step1 and step1.industry) or "other", "Other"),
        "stage": STAGE_MAPPINGS.get((step1 and step1.stage) or "idea", "Idea"),
        "productLaunched": bool(step1 and step1.is_launched),
    }

    financials = wizard.financials
    if financials is not None:
        payload["revenue12m"] = _thousands(financials.revenue)
        payload["burnRate"] = _thousands(financials.monthly_burn_rate)
        payload["netProfit"] = _thousands(financials.net_profit_loss)
        payload["fundingRaised"] = _thousands(financials.funding_raised)
        payload["amountToRaise"] = _thousands(financials.planning_to_raise)
    else:
        for key in ("revenue12m", "burnRate", "netProfit", "fundingRaised", "amountToRaise"):
            payload[key] = 0

    return sanitize_for_json(payload)


def to_backend_payload(wizard: WizardLike) -> Dict[str, Any]:
    """Build the legacy local-backend payload. Skipped steps are left out entirely."""
    wizard = as_wizard(wizard)
    step1 = wizard.step1

    payload: Dict[str, Any] = {
        "companyName": (step1 and step1.business_name) or "Unknown Company",
        "country": (step1 and step1.country) or "Unknown",
        "industry": (step1 and step1.industry) or "other",
        "stage": (step1 and step1.stage) or "idea",
        "isLaunched": bool(step1 and step1.is_launched),
    }

    financials = wizard.financials
    if financials is not None:
        payload["revenue"] = financials.revenue or 0
        payload["monthlyBurnRate"] = financials.monthly_burn_rate or 0
        payload["netProfitLoss"] = financials.net_profit_loss or 0
        payload["fundingRaised"] = financials.funding_raised or 0
        payload["planningToRaise"] = financials.planning_to_raise or 0

    traction = wizard.traction
    if traction is not None:
        payload["customerCount"] = traction.customer_count or 0
        payload["growthRate"] = traction.growth_rate or 0
        payload["growthPeriod"] = traction.growth_period or "monthly"
        payload["uniqueValue"] = traction.unique_value or ""
        payload["competitors"] = traction.competitors or ""

    extras = wizard.extras
    if extras is not None:
        payload["linkedinUrl"] = extras.linkedin_url or ""
        payload["crunchbaseUrl"] = extras.crunchbase_url or ""
        payload["websiteUrl"] = extras.website_url or ""
        payload["uploadedFiles"] = extras.uploaded_files or []

    return sanitize_for_json(payload)


# ---------------------------------------------------------------------------
# Incoming responses
# ---------------------------------------------------------------------------


def _paragraph_order(key: str):
    suffix = key[len("paragraph"):]
    return (0, int(suffix), key) if suffix.isdigit() else (1, 0, key)


def parse_strategic_context(value: Any) -> Any:
    """
    Flatten a strategic context that arrived as a JSON string.

    Two encodings are understood::

        {"strategicContext": {"paragraph1": "...", "paragraph2": "..."}}
        {"strategicValuationContext": [{"paragraph": "..."}, ...]}

    Anything else (including undecodable JSON) is returned unchanged.
    """
    if not isinstance(value, str):
        return value
    if "strategicContext" not in value and "strategicValuationContext" not in value:
        return value

    try:
        parsed = json.loads(value)
    except ValueError:
        logger.debug("Strategic context looked like JSON but did not decode; keeping raw text")
        return value

    if not isinstance(parsed, dict):
        return value

    nested = parsed.get("strategicContext")
    if isinstance(nested, dict):
        keys = sorted((k for k in nested if k.startswith("paragraph")), key=_paragraph_order)
        return "\n\n".join(str(nested[k]) for k in keys)

    legacy = parsed.get("strategicValuationContext")
    if isinstance(legacy, list):
        return "\n\n".join(
            str(item.get("paragraph", "")) for item in legacy if isinstance(item, dict)
        )

    return value


def parse_final_range(text: str) -> Optional[Dict[str, float]]:
    """Parse ``"$120M–$160M"`` into ``{"lower": 120.0, "upper": 160.0}`` (millions)."""
    match = FINAL_RANGE_PATTERN.search(text)
    if not match:
        return None

    lower_num, lower_unit, upper_num, upper_unit = match.groups()
    lower = float(lower_num) * UNIT_MULTIPLIERS.get(lower_unit, 1_000)
    upper = float(upper_num) * UNIT_MULTIPLIERS.get(upper_unit, 1_000)
    return {"lower": lower / 1_000_000, "upper": upper / 1_000_000}


def _range_from_calculations(calculations: List[Dict[str, Any]]) -> Optional[Dict[str, float]]:
    ranges = [c.get("valuationRange") for c in calculations if isinstance(c, dict)]
    ranges = [r for r in ranges if isinstance(r, dict) and "lower" in r and "upper" in r]
    if not ranges:
        return None
    return {
        "lower": min(r["lower"] for r in ranges),
        "upper": max(r["upper"] for r in ranges),
    }


def _is_structured(response: Dict[str, Any]) -> bool:
    return all(
        response.get(key) is not None
        for key in ("businessSummary", "recommendedMethods", "calculations")
    )


def api_response_to_report(response: Dict[str, Any], wizard: Optional[WizardLike] = None) -> ValuationReport:
    """
    Normalise a valuation API response into a ``ValuationReport``.

    Structured responses are passed through with the strategic context
    flattened and a string ``finalRange`` parsed into numbers. Flat legacy
    responses get a report synthesised from their headline figures.
    """
    wizard = as_wizard(wizard)

    if not _is_structured(response):
        return build_fallback_report(response, wizard)

    report = dict(response)
    strategic_context = parse_strategic_context(response.get("strategicContext"))
    report["strategicContext"] = strategic_context or response.get("strategicContext")

    final_valuation = response.get("finalValuation")
    if isinstance(final_valuation, dict) and isinstance(final_valuation.get("finalRange"), str):
        final_valuation = dict(final_valuation)
        raw_range = final_valuation["finalRange"]
        parsed = parse_final_range(raw_range)
        if parsed is None:
            logger.warning(f"Could not parse final range {raw_range!r}; deriving it from calculations")
            parsed = _range_from_calculations(response.get("calculations") or [])
        final_valuation["finalRange"] = parsed
        report["finalValuation"] = final_valuation

    return ValuationReport.model_validate(report)


def build_fallback_report(response: Dict[str, Any], wizard: WizardData) -> ValuationReport:
    """Synthesise a full report from the flat legacy response format."""
    business_name = wizard.business_name or "Your Company"
    data = response.get("additionalProp1")
    if not isinstance(data, dict) or not data:
        data = response

    industry = data.get("industry") or "technology"
    revenue = data.get("revenue12m") or 0
    growth = data.get("growthRate") or 0
    funding = data.get("fundingRaised") or 0
    differentiator = data.get("differentiator") or "strong differentiation"

    return ValuationReport.model_validate({
        "businessSummary": {
            "summary": (
                f"{business_name} is a {industry} startup in the {data.get('stage') or 'growth'} stage. "
                "Based on the provided data, the company shows promising potential in its market segment."
            ),
            "stageAssessment": data.get("stage") or "Growth",
            "keyStrengths": [
                "Strong market positioning",
                "Solid revenue foundation",
                "Clear growth trajectory",
                "Experienced leadership team",
            ],
            "weaknessesOrRisks": [
                "Market competition",
                "Scaling challenges",
                "Customer acquisition costs",
            ],
        },
        "recommendedMethods": {
            "recommendedMethods": [
                {
                    "method": "Revenue Multiple",
                    "confidence": 0.85,
                    "reason": f"Strong revenue of ${revenue}K provides solid basis",
                },
                {
                    "method": "Market Comparable",
                    "confidence": 0.78,
                    "reason": f"Good comparable companies exist in {industry}",
                },
                {
                    "method": "Growth Analysis",
                    "confidence": 0.72,
                    "reason": f"{growth}% growth rate indicates strong momentum",
                },
            ],
        },
        "calculations": [
            {
                "method": "Revenue Multiple Analysis",
                "valuationRange": {
                    "lower": max(5, round_half_up(revenue * 0.003)),
                    "upper": max(8, round_half_up(revenue * 0.005)),
                },
                "explanation": f"Based on industry revenue multiples for {industry} companies",
                "calculation": f"Annual Revenue (${revenue}K) × Industry Multiple (3-5x) × Growth Factor",
                "narrative": (
                    "This method values the company based on revenue multiples from comparable "
                    "companies in the same industry and stage."
                ),
            },
        ],
        "competitorAnalysis": {
            "competitors": ["Industry Leader 1", "Industry Leader 2", "Emerging Competitor"],
            "competitorBenchmarks": [],
            "commentary": (
                f"The competitive landscape in {industry} shows healthy market dynamics with room for "
                f"multiple players. {business_name} has positioned itself well with {differentiator}."
            ),
        },
        "strategicContext": (
            f"{business_name} operates in the {industry} sector. The company has raised ${funding}K "
            "to date and is positioned for continued growth in this expanding market."
        ),
        "finalValuation": {
            "finalRange": {
                "lower": max(4, round_half_up(revenue * 0.0035)),
                "upper": max(7, round_half_up(revenue * 0.0055)),
            },
            "methodComparisons": (
                "Revenue multiple and customer value methods show convergent ranges indicating "
                "consistent valuation"
            ),
            "justification": f"Valuation reflects current metrics including ${revenue}K revenue",
            "recommendations": [
                "Continue focus on customer acquisition and retention",
                "Optimize unit economics and reduce burn rate",
                "Build strategic partnerships to accelerate growth",
                "Prepare detailed metrics for investor presentations",
                "Consider expanding to adjacent markets",
            ],
        },
    })
