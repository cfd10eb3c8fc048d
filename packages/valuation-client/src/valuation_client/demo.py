"""
Demo-mode report data.

Used when the backend URL is ``"demo"`` and by the bundled demo server, so a
full report can be produced without any analysis backend running.
"""

from typing import Any, Dict, Iterator, Optional

from valuation_client.models.report import ValuationReport
from valuation_client.transforms import WizardLike, as_wizard

STAGE_STATUS_MESSAGES = {
    1: "Analyzing business summary...",
    2: "Selecting valuation methods...",
    3: "Running valuation calculations...",
    4: "Benchmarking competitors...",
    5: "Building strategic context...",
    6: "Finalizing valuation range...",
}


def generate_demo_report(wizard: Optional[WizardLike] = None) -> ValuationReport:
    wizard = as_wizard(wizard)
    business_name = wizard.business_name or "Demo Company"
    industry = (wizard.step1 and wizard.step1.industry) or "saas"

    return ValuationReport.model_validate({
        "businessSummary": {
            "summary": (
                f"{business_name} is a {industry} startup with promising market potential. "
                "The company demonstrates strong fundamentals and is positioned well within its industry sector."
            ),
            "stageAssessment": "Growth",
            "keyStrengths": [
                "Strong market opportunity",
                "Experienced founding team",
                "Clear value proposition",
                "Scalable business model",
            ],
            "weaknessesOrRisks": [
                "Competitive market landscape",
                "Customer acquisition costs",
                "Market timing considerations",
            ],
        },
        "recommendedMethods": {
            "recommendedMethods": [
                {"method": "Revenue Multiple", "confidence": 0.85, "reason": "Strong revenue metrics available"},
                {"method": "DCF Analysis", "confidence": 0.78, "reason": "Predictable cash flow patterns"},
                {"method": "Market Comparable", "confidence": 0.72, "reason": "Good comparable companies exist"},
            ],
        },
        "calculations": [
            {
                "method": "Revenue Multiple",
                "valuationRange": {"lower": 8, "upper": 12},
                "explanation": "Based on industry revenue multiples and growth projections",
                "calculation": "Annual Revenue × Industry Multiple (4-6x) × Growth Factor (2x)",
                "narrative": "This method values the company based on revenue multiples from comparable companies.",
            },
            {
                "method": "DCF Analysis",
                "valuationRange": {"lower": 10, "upper": 15},
                "explanation": "Discounted cash flow analysis over 5-year period",
                "calculation": "NPV of projected cash flows with 12% discount rate",
                "narrative": "DCF provides intrinsic value based on projected cash generation capability.",
            },
        ],
        "competitorAnalysis": {
            "competitors": ["CompetitorA", "CompetitorB", "CompetitorC"],
            "competitorBenchmarks": [],
            "commentary": "The competitive landscape shows healthy market dynamics with room for multiple players.",
        },
        "strategicContext": (
            "This valuation reflects strong growth potential in an expanding market. The company is "
            "well-positioned to capture market share and scale operations effectively."
        ),
        "finalValuation": {
            "finalRange": {"lower": 9, "upper": 14},
            "methodComparisons": "Revenue multiple and DCF methods show convergent ranges",
            "justification": "Valuation reflects current metrics with growth potential upside",
            "recommendations": [
                "Focus on customer acquisition efficiency",
                "Strengthen unit economics",
                "Build strategic partnerships",
                "Prepare for next funding round",
            ],
        },
    })


def iter_demo_chunks(wizard: Optional[WizardLike] = None) -> Iterator[Dict[str, Any]]:
    """
    Yield the demo report in the six-stage streaming protocol.

    Each stage is announced by a ``{"status": "starting", ...}`` chunk and
    followed by its data chunk. Stage 3 emits one chunk per calculation.
    """
    report = generate_demo_report(wizard).to_wire()

    def starting(stage: int) -> Dict[str, Any]:
        return {"status": "starting", "stage": stage, "message": STAGE_STATUS_MESSAGES[stage]}

    yield starting(1)
    yield {"stage": 1, "businessSummary": report["businessSummary"]}

    yield starting(2)
    yield {"stage": 2, "recommendedMethods": report["recommendedMethods"]}

    yield starting(3)
    for calculation in report["calculations"]:
        yield {"stage": 3, "calculation": calculation}

    yield starting(4)
    yield {"stage": 4, "competitorAnalysis": report["competitorAnalysis"]}

    yield starting(5)
    yield {"stage": 5, "strategicContext": report["strategicContext"]}

    yield starting(6)
    yield {"stage": 6, "finalValuation": report["finalValuation"]}
