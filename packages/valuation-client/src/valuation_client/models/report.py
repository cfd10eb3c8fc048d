from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ReportSection(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class BusinessSummary(ReportSection):
    summary: str = ""
    stage_assessment: str = ""
    key_strengths: List[str] = Field(default_factory=list)
    weaknesses_or_risks: List[str] = Field(default_factory=list)


class MethodRecommendation(ReportSection):
    method: str
    confidence: float = Field(0.0, description="Confidence between 0 and 1")
    reason: str = ""


class RecommendedMethods(ReportSection):
    recommended_methods: List[MethodRecommendation] = Field(default_factory=list)


class ValuationRange(ReportSection):
    """Lower/upper bound, in millions."""

    lower: float
    upper: float


class Calculation(ReportSection):
    method: str
    valuation_range: ValuationRange
    explanation: str = ""
    calculation: str = ""
    narrative: str = ""


class CompetitorAnalysis(ReportSection):
    competitors: List[str] = Field(default_factory=list)
    competitor_benchmarks: List[Any] = Field(default_factory=list)
    commentary: Optional[str] = None


class FinalValuation(ReportSection):
    final_range: Optional[ValuationRange] = None
    method_comparisons: Optional[str] = None
    justification: Optional[str] = None
    recommendations: List[str] = Field(default_factory=list)


class ValuationReport(ReportSection):
    """The report shape the analysis backends return and the PDF renders."""

    business_summary: BusinessSummary = Field(default_factory=BusinessSummary)
    recommended_methods: RecommendedMethods = Field(default_factory=RecommendedMethods)
    calculations: List[Calculation] = Field(default_factory=list)
    competitor_analysis: Optional[CompetitorAnalysis] = None
    strategic_context: Optional[str] = None
    final_valuation: FinalValuation = Field(default_factory=FinalValuation)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
