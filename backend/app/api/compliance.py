"""Compliance and Claim Risk API Endpoints.

Exposes the compliance engine to the application layer:
- Enhanced compliance check (rule flags, code suggestions, risk score)
- Claim denial risk assessment with recommendations
- Portfolio analytics across encounters
- ICD-10/CPT reference entries, CMS guidelines and the compliance rule catalog

The endpoints are stateless. Callers load encounters and flags from their
own storage and persist the returned scores and flags themselves.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from app.schemas.base import CodeType
from app.schemas.compliance import (
    ComplianceCheckRequest,
    ComplianceCheckResponse,
    CPTEntryResponse,
    GuidelineResponse,
    ICD10EntryResponse,
    PortfolioReportResponse,
    PortfolioRequest,
    RiskAssessmentRequest,
    RiskAssessmentResponse,
    RuleResponse,
)
from app.services.compliance_engine import ComplianceEngine, get_compliance_engine
from app.services.knowledge_base import ICD10Entry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/compliance", tags=["Compliance"])


@router.post(
    "/evaluate",
    response_model=ComplianceCheckResponse,
    summary="Enhanced compliance check",
    description="Evaluate compliance rules, suggest ICD-10/CPT codes and score an encounter.",
)
async def evaluate_compliance(
    request: ComplianceCheckRequest,
    engine: ComplianceEngine = Depends(get_compliance_engine),
) -> ComplianceCheckResponse:
    """Run the enhanced compliance check for one encounter.

    The returned risk_score uses the engine convention (higher = more
    risk) and can be stored as the encounter's claim risk score as is.
    """
    result = engine.evaluate_compliance(request.encounter, request.transcript)
    return ComplianceCheckResponse.model_validate(result)


@router.post(
    "/risk-assessment",
    response_model=RiskAssessmentResponse,
    summary="Claim denial risk assessment",
    description="Score documentation, coding, compliance and historical risk factors.",
)
async def assess_claim_denial_risk(
    request: RiskAssessmentRequest,
    engine: ComplianceEngine = Depends(get_compliance_engine),
) -> RiskAssessmentResponse:
    """Assess claim denial risk for one encounter."""
    assessment = engine.assess_claim_denial_risk(
        request.encounter,
        request.prior_flags,
        request.patient,
        request.historical_encounters,
    )
    return RiskAssessmentResponse.model_validate(assessment)


@router.post(
    "/portfolio",
    response_model=PortfolioReportResponse,
    summary="Portfolio risk analytics",
    description="Aggregate claim risk metrics and system-wide recommendations across encounters.",
)
async def portfolio_report(
    request: PortfolioRequest,
    engine: ComplianceEngine = Depends(get_compliance_engine),
) -> PortfolioReportResponse:
    """Build the analytics dashboard report for a set of encounters."""
    report = engine.portfolio_report(
        request.encounters,
        request.flags,
        total_patients=request.total_patients,
        window_days=request.window_days,
    )
    return PortfolioReportResponse.model_validate(report)


@router.get(
    "/reference/{kind}/{code}",
    response_model=ICD10EntryResponse | CPTEntryResponse,
    summary="Reference entry lookup",
)
async def get_reference_entry(
    kind: CodeType,
    code: str,
    engine: ComplianceEngine = Depends(get_compliance_engine),
) -> ICD10EntryResponse | CPTEntryResponse:
    """Get the documentation requirements of an ICD-10 or CPT code."""
    entry = engine.get_reference_entry(code.upper(), kind)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"{kind.value} code not found: {code}")
    if isinstance(entry, ICD10Entry):
        return ICD10EntryResponse.model_validate(entry)
    return CPTEntryResponse.model_validate(entry)


@router.get(
    "/guidelines",
    response_model=list[GuidelineResponse],
    summary="List CMS guidelines",
)
async def list_guidelines(
    category: str | None = Query(None, description="Exact guideline category (Documentation, Clinical)"),
    engine: ComplianceEngine = Depends(get_compliance_engine),
) -> list[GuidelineResponse]:
    """List CMS documentation guidelines, optionally filtered by category."""
    return [GuidelineResponse.model_validate(g) for g in engine.list_guidelines(category)]


@router.get(
    "/rules",
    response_model=list[RuleResponse],
    summary="List compliance rules",
)
async def list_rules(
    category: str | None = Query(None, description="Exact rule category (Documentation, Clinical)"),
    engine: ComplianceEngine = Depends(get_compliance_engine),
) -> list[RuleResponse]:
    """List the compliance rules evaluated by the enhanced check."""
    return [RuleResponse.model_validate(r) for r in engine.list_rules(category)]
