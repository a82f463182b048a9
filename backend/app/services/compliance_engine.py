"""Encounter Compliance Engine.

Entry point used by the application layer. It wires the rule evaluator,
code suggester, risk factor assessors and aggregator to an explicitly
provided KnowledgeBase:

- evaluate_compliance: rule flags, code suggestions and a risk score
- assess_claim_denial_risk: multi-factor assessment with recommendations
- get_reference_entry / list_guidelines / list_rules: reference data lookups
- portfolio_report: aggregate metrics across encounters

All scores follow one convention: higher = more risk. The engine keeps no
per-call state, so one instance can serve concurrent callers.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
import logging
import threading

from app.core.config import Settings, settings as default_settings
from app.schemas.base import CodeType, Severity
from app.schemas.encounter import ComplianceFlag, Encounter, Patient
from app.services.code_suggester import CodeSuggestion, suggest_cpt, suggest_icd10
from app.services.compliance_rules import ComplianceRule, Flag, evaluate_rules
from app.services.knowledge_base import (
    CPTEntry,
    Guideline,
    ICD10Entry,
    KnowledgeBase,
    build_default_knowledge_base,
)
from app.services.risk_aggregator import (
    PortfolioReport,
    RiskAssessment,
    RiskFactors,
    build_portfolio_report,
    build_risk_assessment,
)
from app.services.risk_factors import (
    assess_coding_accuracy,
    assess_compliance_score,
    assess_documentation_quality,
    assess_historical_patterns,
    clamp_score,
)

logger = logging.getLogger(__name__)

# Risk points added per raised flag
FLAG_SEVERITY_PENALTIES: dict[Severity, int] = {
    Severity.CRITICAL: 25,
    Severity.HIGH: 15,
    Severity.MEDIUM: 10,
    Severity.LOW: 5,
}
BASELINE_RISK = 10
MISSING_ASSESSMENT_PENALTY = 20
MISSING_PLAN_PENALTY = 15
SHORT_TRANSCRIPT_PENALTY = 20
MIN_TRANSCRIPT_LENGTH = 100


@dataclass
class ComplianceCheckResult:
    """Result of an enhanced compliance check."""

    flags: list[Flag] = field(default_factory=list)
    suggestions: list[CodeSuggestion] = field(default_factory=list)
    risk_score: int = 0  # 0-100, higher is riskier


def calculate_check_risk_score(flags: Sequence[Flag], encounter: Encounter, transcript: str) -> int:
    """Risk score of a compliance check from raised flags and missing note sections."""
    score = BASELINE_RISK
    for flag in flags:
        score += FLAG_SEVERITY_PENALTIES[flag.severity]

    notes = encounter.soap_notes
    if notes is None or not notes.assessment:
        score += MISSING_ASSESSMENT_PENALTY
    if notes is None or not notes.plan:
        score += MISSING_PLAN_PENALTY
    if len(transcript) < MIN_TRANSCRIPT_LENGTH:
        score += SHORT_TRANSCRIPT_PENALTY

    return int(clamp_score(score))


class ComplianceEngine:
    """Deterministic compliance checking and claim denial risk scoring."""

    def __init__(self, knowledge_base: KnowledgeBase, config: Settings | None = None) -> None:
        """Initialize the engine.

        Args:
            knowledge_base: Reference catalogs and rule set to evaluate
            config: Engine settings, defaults to the application settings
        """
        self.knowledge_base = knowledge_base
        self.config = config or default_settings
        logger.info(f"Compliance engine initialized: {knowledge_base.get_stats()}")

    def _bounded(self, transcript: str) -> str:
        return transcript[: self.config.max_transcript_chars]

    def evaluate_compliance(self, encounter: Encounter, transcript: str) -> ComplianceCheckResult:
        """Run the rule catalog and code suggesters against an encounter.

        Args:
            encounter: Encounter under review
            transcript: Visit transcript text

        Returns:
            ComplianceCheckResult with flags, ICD-10 then CPT suggestions, and
            a 0-100 risk score.
        """
        text = self._bounded(transcript)
        flags = evaluate_rules(self.knowledge_base.rules, encounter, text)
        suggestions = suggest_icd10(self.knowledge_base, text)
        suggestions.extend(suggest_cpt(self.knowledge_base, encounter, text))
        risk_score = calculate_check_risk_score(flags, encounter, text)

        logger.debug(
            f"Compliance check for encounter {encounter.id}: {len(flags)} flags, "
            f"{len(suggestions)} suggestions, risk {risk_score}"
        )
        return ComplianceCheckResult(flags=flags, suggestions=suggestions, risk_score=risk_score)

    def assess_claim_denial_risk(
        self,
        encounter: Encounter,
        prior_flags: Sequence[ComplianceFlag],
        patient: Patient | None,
        historical_encounters: Sequence[Encounter] | None,
        now: datetime | None = None,
    ) -> RiskAssessment:
        """Multi-factor claim denial risk assessment.

        Args:
            encounter: Encounter under review
            prior_flags: Compliance flags recorded for this encounter
            patient: Patient the encounter belongs to, None if unknown
            historical_encounters: Prior encounters of the patient, None if
                the history could not be loaded
            now: Reference time, defaults to the current UTC time

        Returns:
            RiskAssessment with the four factors, overall score, risk level
            and recommendations.
        """
        factors = RiskFactors(
            documentation=assess_documentation_quality(
                encounter, prior_flags, now=now, delay_days=self.config.documentation_delay_days
            ),
            coding=assess_coding_accuracy(encounter),
            compliance=assess_compliance_score(prior_flags),
            historical=assess_historical_patterns(
                patient, encounter, historical_encounters, now=now, window_months=self.config.history_window_months
            ),
        )
        assessment = build_risk_assessment(encounter.id, factors, now=now)

        logger.info(
            f"Claim denial risk for encounter {encounter.id}: "
            f"{assessment.overall_risk_score} ({assessment.risk_level.value})"
        )
        return assessment

    def get_reference_entry(self, code: str, kind: CodeType) -> ICD10Entry | CPTEntry | None:
        """Get the reference entry of a code, None if it is not catalogued."""
        return self.knowledge_base.get_entry(code, kind)

    def list_guidelines(self, category: str | None = None) -> list[Guideline]:
        """List CMS guidelines, optionally filtered by exact category."""
        if category:
            return [g for g in self.knowledge_base.guidelines if g.category == category]
        return list(self.knowledge_base.guidelines)

    def list_rules(self, category: str | None = None) -> list[ComplianceRule]:
        """List the compliance rules the engine evaluates, optionally filtered by exact category."""
        if category:
            return [r for r in self.knowledge_base.rules if r.category == category]
        return list(self.knowledge_base.rules)

    def portfolio_report(
        self,
        encounters: Sequence[Encounter],
        flags: Sequence[ComplianceFlag],
        total_patients: int = 0,
        now: datetime | None = None,
        window_days: int | None = None,
    ) -> PortfolioReport:
        """Aggregate claim risk metrics across encounters."""
        return build_portfolio_report(
            encounters,
            flags,
            total_patients=total_patients,
            now=now,
            window_days=window_days or self.config.portfolio_window_days,
        )

    def get_stats(self) -> dict:
        """Get statistics about the engine's catalogs."""
        return self.knowledge_base.get_stats()


# ============================================================================
# Default Engine
# ============================================================================

# Singleton instance and lock
_engine: ComplianceEngine | None = None
_engine_lock = threading.Lock()


def get_compliance_engine() -> ComplianceEngine:
    """Get the engine built from the bundled knowledge base."""
    global _engine
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = ComplianceEngine(build_default_knowledge_base())
    return _engine


def reset_compliance_engine() -> None:
    """Reset the default engine (for testing)."""
    global _engine
    with _engine_lock:
        _engine = None
