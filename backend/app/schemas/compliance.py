"""Compliance check and claim risk API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.base import CodeType, FactorSeverity, RiskLevel, Severity
from app.schemas.encounter import ComplianceFlag, Encounter, Patient


# ==============================================================================
# Requests
# ==============================================================================


class ComplianceCheckRequest(BaseModel):
    """Request for an enhanced compliance check."""

    encounter: Encounter = Field(..., description="Encounter under review")
    transcript: str = Field(default="", max_length=500_000, description="Visit transcript text")


class RiskAssessmentRequest(BaseModel):
    """Request for a claim denial risk assessment."""

    encounter: Encounter = Field(..., description="Encounter under review")
    prior_flags: list[ComplianceFlag] = Field(default_factory=list, description="Flags recorded for the encounter")
    patient: Patient | None = Field(None, description="Patient, omitted if unknown")
    historical_encounters: list[Encounter] | None = Field(
        None, description="Prior encounters of the patient, omitted if unavailable"
    )


class PortfolioRequest(BaseModel):
    """Request for portfolio-level risk analytics."""

    encounters: list[Encounter] = Field(default_factory=list, description="Encounters to aggregate")
    flags: list[ComplianceFlag] = Field(default_factory=list, description="Flags across those encounters")
    total_patients: int = Field(default=0, ge=0, description="Number of patients in the practice")
    window_days: int | None = Field(None, ge=1, le=3650, description="Trend window in days")


# ==============================================================================
# Responses
# ==============================================================================


class FlagResponse(BaseModel):
    """A flag raised by a violated compliance rule."""

    type: str = Field(..., description="Rule identifier")
    severity: Severity = Field(..., description="Flag severity")
    message: str
    explanation: str
    remediation: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class CodeSuggestionResponse(BaseModel):
    """A suggested ICD-10 or CPT code."""

    code: str
    description: str
    type: CodeType
    confidence: int = Field(..., ge=0, le=100)
    documentation_requirements: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ComplianceCheckResponse(BaseModel):
    """Flags, code suggestions and risk score for an encounter."""

    flags: list[FlagResponse]
    suggestions: list[CodeSuggestionResponse]
    risk_score: int = Field(..., ge=0, le=100, description="0-100, higher is riskier")

    model_config = {"from_attributes": True}


class RiskFactorResponse(BaseModel):
    score: float = Field(..., ge=0, le=100)
    severity: FactorSeverity
    category: str
    issues: list[str]

    model_config = {"from_attributes": True}


class RiskFactorsResponse(BaseModel):
    documentation: RiskFactorResponse
    coding: RiskFactorResponse
    compliance: RiskFactorResponse
    historical: RiskFactorResponse

    model_config = {"from_attributes": True}


class RecommendationResponse(BaseModel):
    category: str
    priority: FactorSeverity
    title: str
    description: str
    actions: list[str]
    estimated_impact: str

    model_config = {"from_attributes": True}


class RiskAssessmentResponse(BaseModel):
    """Claim denial risk assessment."""

    encounter_id: str | None
    overall_risk_score: int = Field(..., ge=0, le=100)
    risk_level: RiskLevel
    risk_factors: RiskFactorsResponse
    recommendations: list[RecommendationResponse]
    last_updated: datetime

    model_config = {"from_attributes": True}


class PortfolioSummaryResponse(BaseModel):
    total_encounters: int
    completed_encounters: int
    high_risk_encounters: int
    avg_risk_score: int
    total_patients: int

    model_config = {"from_attributes": True}


class RiskDistributionResponse(BaseModel):
    low: int
    medium: int
    high: int
    critical: int

    model_config = {"from_attributes": True}


class PortfolioTrendsResponse(BaseModel):
    encounter_volume: int
    avg_risk_trend: float
    compliance_rate: float
    high_risk_rate: float

    model_config = {"from_attributes": True}


class RiskFactorCountResponse(BaseModel):
    type: str
    count: int

    model_config = {"from_attributes": True}


class PortfolioReportResponse(BaseModel):
    """Portfolio-level claim risk analytics."""

    summary: PortfolioSummaryResponse
    risk_distribution: RiskDistributionResponse
    trends: PortfolioTrendsResponse
    top_risk_factors: list[RiskFactorCountResponse]
    recommendations: list[RecommendationResponse]
    last_updated: datetime

    model_config = {"from_attributes": True}


class ICD10EntryResponse(BaseModel):
    """ICD-10 reference entry."""

    code: str
    description: str
    category: str
    required_documentation: list[str]
    excluded_codes: list[str]
    common_combinations: list[str]
    billability_requirements: list[str]

    model_config = {"from_attributes": True}


class CPTEntryResponse(BaseModel):
    """CPT reference entry."""

    code: str
    description: str
    category: str
    required_elements: list[str]
    time_requirements: str | None
    documentation_requirements: list[str]
    modifiers: list[str]
    typical_icd10_combinations: list[str]

    model_config = {"from_attributes": True}


class GuidelineResponse(BaseModel):
    """CMS documentation guideline."""

    id: str
    title: str
    category: str
    description: str
    requirements: list[str]
    audit_risks: list[str]
    effective_date: str
    last_updated: str

    model_config = {"from_attributes": True}


class RuleResponse(BaseModel):
    """A compliance rule in the evaluated catalog."""

    id: str
    name: str
    category: str
    severity: Severity
    description: str
    message: str
    remediation: list[str]

    model_config = {"from_attributes": True}
