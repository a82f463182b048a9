"""Claim Denial Risk Factor Assessors.

Four independent scorers, each mapping its inputs to a 0-100 sub-score
(higher = more risk), a severity bucket and a list of findings:

- Documentation quality: SOAP completeness, open flags, chief complaint, delay
- Coding accuracy: missing/unspecified codes, E/M level support, modifiers
- Compliance: unresolved and high-severity flags, recurring issues
- Historical patterns: prior high-risk encounters, utilization, complexity

Assessors never raise for well-formed input. Missing patient or history
data yields a degraded but valid factor.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
import calendar
import logging

from app.schemas.base import EncounterStatus, FactorSeverity, Severity
from app.schemas.encounter import ComplianceFlag, Encounter, Patient

logger = logging.getLogger(__name__)

DOCUMENTATION_QUALITY = "Documentation Quality"
CODING_ACCURACY = "Coding Accuracy"
COMPLIANCE = "Compliance"
HISTORICAL_PATTERNS = "Historical Patterns"

HIGH_SEVERITIES = frozenset({Severity.HIGH, Severity.CRITICAL})
HIGH_LEVEL_EM_CODES = frozenset({"99214", "99215", "99204", "99205"})
PREVENTIVE_VISIT_CODES = frozenset({"99381", "99382", "99383", "99384", "99385", "99386", "99387"})
CHRONIC_CONDITION_PREFIXES = ("E11", "I10", "M79", "F32", "G93")

MIN_SOAP_LENGTH = 100
MIN_SOAP_LENGTH_HIGH_LEVEL_EM = 200
HIGH_RISK_ENCOUNTER_SCORE = 70
MAX_RECENT_ENCOUNTERS = 10
MAX_DISTINCT_DIAGNOSES = 15


@dataclass
class RiskFactor:
    """A scored risk factor."""

    score: float  # 0-100, higher is riskier
    severity: FactorSeverity
    category: str
    issues: list[str] = field(default_factory=list)


def clamp_score(score: float) -> float:
    """Clamp a score into [0, 100]."""
    return max(0.0, min(100.0, score))


def severity_for_score(score: float) -> FactorSeverity:
    if score > 70:
        return FactorSeverity.HIGH
    if score > 40:
        return FactorSeverity.MEDIUM
    return FactorSeverity.LOW


def _make_factor(score: float, category: str, issues: list[str]) -> RiskFactor:
    score = clamp_score(score)
    return RiskFactor(score=score, severity=severity_for_score(score), category=category, issues=issues)


def resolve_now(now: datetime | None) -> datetime:
    """Reference time as an aware UTC datetime; naive values are taken as UTC."""
    if now is None:
        return datetime.now(UTC)
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now


def subtract_months(moment: datetime, months: int) -> datetime:
    """Go back a number of calendar months, clamping the day of month."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


# ============================================================================
# Documentation Quality
# ============================================================================


def assess_documentation_quality(
    encounter: Encounter,
    flags: Sequence[ComplianceFlag],
    now: datetime | None = None,
    delay_days: int = 30,
) -> RiskFactor:
    """Score documentation completeness and timeliness."""
    now = resolve_now(now)
    score = 0.0
    issues: list[str] = []

    if encounter.soap_text_length() < MIN_SOAP_LENGTH:
        score += 25
        issues.append("Insufficient SOAP notes documentation")

    open_high_flags = [f for f in flags if f.severity in HIGH_SEVERITIES and not f.is_resolved]
    score += len(open_high_flags) * 15
    if open_high_flags:
        issues.append(f"{len(open_high_flags)} unresolved critical compliance issues")

    if not encounter.chief_complaint.strip():
        score += 20
        issues.append("Missing chief complaint")

    if encounter.status != EncounterStatus.COMPLETED and now - encounter.appointment_time > timedelta(days=delay_days):
        score += 30
        issues.append(f"Documentation delayed beyond {delay_days} days")

    return _make_factor(score, DOCUMENTATION_QUALITY, issues)


# ============================================================================
# Coding Accuracy
# ============================================================================


def _is_unspecified(code: str) -> bool:
    return ".9" in code or "unspecified" in code.lower()


def assess_coding_accuracy(encounter: Encounter) -> RiskFactor:
    """Score code presence, specificity and level-of-service support."""
    score = 0.0
    issues: list[str] = []
    icd_codes = encounter.icd_codes
    cpt_codes = encounter.cpt_codes

    if not icd_codes:
        score += 40
        issues.append("No ICD-10 codes assigned")
    elif any(_is_unspecified(code) for code in icd_codes):
        score += 20
        issues.append("Contains unspecified diagnosis codes")

    if not cpt_codes:
        score += 35
        issues.append("No CPT codes assigned")
    elif any(code in HIGH_LEVEL_EM_CODES for code in cpt_codes):
        if encounter.soap_text_length() < MIN_SOAP_LENGTH_HIGH_LEVEL_EM:
            score += 30
            issues.append("High-level E/M code may lack supporting documentation")

    # Preventive visit billed alongside a problem diagnosis needs a modifier
    has_preventive_visit = any(code in PREVENTIVE_VISIT_CODES for code in cpt_codes)
    has_problem_diagnosis = any(not code.upper().startswith("Z") for code in icd_codes)
    if has_preventive_visit and has_problem_diagnosis:
        score += 25
        issues.append("Preventive visit with problem diagnosis may require modifier")

    return _make_factor(score, CODING_ACCURACY, issues)


# ============================================================================
# Compliance
# ============================================================================


def assess_compliance_score(flags: Sequence[ComplianceFlag]) -> RiskFactor:
    """Score the compliance flag history of an encounter."""
    total = len(flags)
    if total == 0:
        return RiskFactor(score=0.0, severity=FactorSeverity.LOW, category=COMPLIANCE, issues=[])

    unresolved = sum(1 for f in flags if not f.is_resolved)
    high_severity = sum(1 for f in flags if f.severity in HIGH_SEVERITIES)
    issues: list[str] = []

    score = (unresolved / total) * 50
    score += high_severity * 10

    if unresolved:
        issues.append(f"{unresolved} unresolved compliance flags")
    if high_severity:
        issues.append(f"{high_severity} high-severity compliance issues")

    distinct_types = {f.flag_type for f in flags}
    if len(distinct_types) < total / 2:
        score += 15
        issues.append("Recurring compliance issues detected")

    return _make_factor(score, COMPLIANCE, issues)


# ============================================================================
# Historical Patterns
# ============================================================================


def _score_history(
    prior: Sequence[Encounter],
    now: datetime,
    window_months: int,
) -> RiskFactor:
    score = 0.0
    issues: list[str] = []

    high_risk = [e for e in prior if e.claim_risk_score > HIGH_RISK_ENCOUNTER_SCORE]
    if high_risk:
        risk_rate = len(high_risk) / len(prior)
        score += risk_rate * 40
        issues.append(f"{round(risk_rate * 100)}% of historical encounters had high claim risk")

    window_start = subtract_months(now, window_months)
    recent = [e for e in prior if e.appointment_time > window_start]
    if len(recent) > MAX_RECENT_ENCOUNTERS:
        score += 20
        issues.append("High frequency of recent encounters may indicate over-utilization")

    diagnoses = {code for e in prior for code in e.icd_codes if code}
    if len(diagnoses) > MAX_DISTINCT_DIAGNOSES:
        score += 15
        issues.append("Complex medical history with multiple diagnoses")

    if any(code.startswith(CHRONIC_CONDITION_PREFIXES) for code in diagnoses):
        score += 5
        issues.append("Patient has chronic conditions requiring enhanced documentation")

    return _make_factor(score, HISTORICAL_PATTERNS, issues)


def assess_historical_patterns(
    patient: Patient | None,
    encounter: Encounter,
    history: Sequence[Encounter] | None,
    now: datetime | None = None,
    window_months: int = 6,
) -> RiskFactor:
    """Score the patient's encounter history.

    Args:
        patient: Patient the encounter belongs to, None if unknown
        encounter: Encounter under review (excluded from history)
        history: Prior encounters of the patient, None if unavailable
        now: Reference time, defaults to the current UTC time
        window_months: Window for the over-utilization check

    Returns:
        RiskFactor; a fixed low-risk factor for unknown patients and a
        fixed medium-risk factor when history cannot be analysed.
    """
    if patient is None:
        return RiskFactor(
            score=10.0,
            severity=FactorSeverity.LOW,
            category=HISTORICAL_PATTERNS,
            issues=["Patient data unavailable for historical analysis"],
        )

    try:
        if history is None:
            raise LookupError(f"No encounter history available for patient {patient.id}")
        prior = [
            e for e in history
            if (encounter.id is None or e.id != encounter.id)
            and (e.patient_id is None or e.patient_id == patient.id)
        ]
        return _score_history(prior, resolve_now(now), window_months)
    except Exception as e:
        logger.warning(f"Historical pattern analysis failed for encounter {encounter.id}: {e}")
        return RiskFactor(
            score=20.0,
            severity=FactorSeverity.MEDIUM,
            category=HISTORICAL_PATTERNS,
            issues=["Unable to complete historical analysis"],
        )
