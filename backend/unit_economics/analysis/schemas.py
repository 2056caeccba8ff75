import math
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator

IDEA_PATTERN = r"^[a-zA-Zа-яА-Я0-9\s\-.,!?()]+$"
TEXT_PATTERN = r"^[a-zA-Zа-яА-Я0-9\s\-.,!?()/$%]+$"

METRIC_NAMES = ("cac", "ltv", "churn_rate", "payback_period", "unit_margin", "ltv_cac_ratio")
INSIGHT_NAMES = ("industry_benchmarks", "competitive_analysis", "growth_potential")
REQUIRED_SECTIONS = ("metrics", "recommendations", "assumptions", "risk_factors", "market_insights")


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    startup_idea: str = Field(..., min_length=10, max_length=1000, pattern=IDEA_PATTERN)
    description: str = Field(..., min_length=50, max_length=2000, pattern=TEXT_PATTERN)
    additional_info: Optional[str] = Field(None, max_length=500, pattern=TEXT_PATTERN)

    @field_validator("startup_idea", "description", "additional_info", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Metric(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: Union[StrictInt, StrictFloat]
    explanation: str

    @field_validator("value")
    @classmethod
    def finite(cls, v):
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("metric value must be a finite number")
        return v


class Metrics(BaseModel):
    model_config = ConfigDict(extra="allow")

    cac: Metric
    ltv: Metric
    churn_rate: Metric
    payback_period: Metric
    unit_margin: Metric
    ltv_cac_ratio: Metric


class MarketInsights(BaseModel):
    model_config = ConfigDict(extra="allow")

    industry_benchmarks: str
    competitive_analysis: str
    growth_potential: str


class AnalysisResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    metrics: Metrics
    recommendations: list[str]
    assumptions: list[str]
    risk_factors: list[str]
    market_insights: MarketInsights
