"""
Request/response contracts for the cloud valuation API.

Field names are the API's own (``userID``, ``valuationID``), so these models
do not use an alias generator.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class StartupInput(BaseModel):
    """Free-form startup metrics; unknown keys are passed through."""

    revenue: Optional[float] = None
    customers: Optional[int] = None
    teamSize: Optional[int] = None
    marketSize: Optional[float] = None
    industry: Optional[str] = None
    stage: Optional[str] = None
    fundingRaised: Optional[float] = None
    burnRate: Optional[float] = None
    growthRate: Optional[float] = None

    model_config = ConfigDict(extra="allow")


class SaveInputRequest(BaseModel):
    userID: str = Field(..., description="Owner of the saved input")
    currentInput: StartupInput


class UploadResponse(BaseModel):
    bucket: str
    key: str
    message: str = ""


class RecommendRequest(BaseModel):
    userID: str
    bucket: str
    key: str


class RecommendResponse(BaseModel):
    recommendedMethods: List[str] = Field(default_factory=list)
    summary: str = ""
    overallStage: str = ""


class CalculateRequest(BaseModel):
    userID: str
    valuationID: str
    method: str


class CalculateResponse(BaseModel):
    valuation: float
    details: Any = None
    method: str = ""
