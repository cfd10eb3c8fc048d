"""
Convenience re-exports of data models.

Wizard input lives in ``models.wizard``, the analysis report in
``models.report`` and the cloud API contracts in ``models.cloud``.
"""

from valuation_client.models.cloud import (
    CalculateRequest,
    CalculateResponse,
    RecommendRequest,
    RecommendResponse,
    SaveInputRequest,
    StartupInput,
    UploadResponse,
)
from valuation_client.models.report import (
    BusinessSummary,
    Calculation,
    CompetitorAnalysis,
    FinalValuation,
    MethodRecommendation,
    RecommendedMethods,
    ValuationRange,
    ValuationReport,
)
from valuation_client.models.wizard import (
    Extras,
    FinancialSnapshot,
    ProductTraction,
    QuickStart,
    WizardData,
)

__all__ = [
    "BusinessSummary",
    "CalculateRequest",
    "CalculateResponse",
    "Calculation",
    "CompetitorAnalysis",
    "Extras",
    "FinalValuation",
    "FinancialSnapshot",
    "MethodRecommendation",
    "ProductTraction",
    "QuickStart",
    "RecommendRequest",
    "RecommendResponse",
    "RecommendedMethods",
    "SaveInputRequest",
    "StartupInput",
    "UploadResponse",
    "ValuationRange",
    "ValuationReport",
    "WizardData",
]
