from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WizardStep(BaseModel):
    """Base for wizard steps: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class QuickStart(WizardStep):
    business_name: Optional[str] = Field(None, description="Company or product name")
    country: Optional[str] = Field(None, description="Country of incorporation")
    industry: Optional[str] = Field(None, description="Industry key (saas, fintech, ...)")
    stage: Optional[str] = Field(None, description="Stage key (idea, mvp, launched, growth)")
    is_launched: Optional[bool] = Field(None, description="Whether the product is live")


class FinancialSnapshot(WizardStep):
    revenue: Optional[float] = Field(None, description="Revenue over the last 12 months")
    monthly_burn_rate: Optional[float] = Field(None, description="Monthly cash burn")
    net_profit_loss: Optional[float] = Field(None, description="Net profit (negative for loss)")
    funding_raised: Optional[float] = Field(None, description="Total funding raised to date")
    planning_to_raise: Optional[float] = Field(None, description="Amount of the next raise")
    skip_financials: Optional[bool] = Field(None, description="User skipped this step")


class ProductTraction(WizardStep):
    customer_count: Optional[int] = Field(None, description="Number of paying customers")
    growth_rate: Optional[float] = Field(None, description="Growth rate in percent")
    growth_period: Optional[str] = Field(None, description="Period the growth rate refers to")
    unique_value: Optional[str] = Field(None, description="Differentiator in the user's words")
    competitors: Optional[str] = Field(None, description="Free-text list of competitors")
    skip_traction: Optional[bool] = Field(None, description="User skipped this step")


class Extras(WizardStep):
    linkedin_url: Optional[str] = None
    crunchbase_url: Optional[str] = None
    website_url: Optional[str] = None
    uploaded_files: Optional[List[Any]] = None
    skip_extras: Optional[bool] = None


class WizardData(WizardStep):
    """Everything the four-step wizard collected. Any step may be missing."""

    step1: Optional[QuickStart] = None
    step2: Optional[FinancialSnapshot] = None
    step3: Optional[ProductTraction] = None
    step4: Optional[Extras] = None

    @property
    def financials(self) -> Optional[FinancialSnapshot]:
        """Step 2, unless it is missing or was skipped."""
        if self.step2 is not None and not self.step2.skip_financials:
            return self.step2
        return None

    @property
    def traction(self) -> Optional[ProductTraction]:
        if self.step3 is not None and not self.step3.skip_traction:
            return self.step3
        return None

    @property
    def extras(self) -> Optional[Extras]:
        if self.step4 is not None and not self.step4.skip_extras:
            return self.step4
        return None

    @property
    def business_name(self) -> Optional[str]:
        return self.step1.business_name if self.step1 else None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
