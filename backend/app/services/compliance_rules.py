"""Compliance Rule Catalog and Evaluator.

Each rule is a pure predicate over an encounter and its transcript that
returns True when the documentation violates the rule. Evaluating the
catalog yields one flag per violated rule, in catalog order.

Rules:
- missing-physical-exam: no examination findings in transcript or objective note
- missing-pain-scale: pain complaint without a 0-10 pain rating
- insufficient-history: fewer than 4 of the 8 HPI elements documented
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
import logging
import re

from app.schemas.base import Severity
from app.schemas.encounter import ComplianceFlag, Encounter

logger = logging.getLogger(__name__)

RuleCheck = Callable[[Encounter, str], bool]


@dataclass(frozen=True)
class ComplianceRule:
    """A compliance rule with its remediation guidance."""

    id: str
    name: str
    category: str
    severity: Severity
    description: str
    check: RuleCheck  # Returns True on violation
    message: str
    explanation: str
    remediation: tuple[str, ...] = ()


@dataclass
class Flag:
    """A flag raised by a violated rule."""

    type: str
    severity: Severity
    message: str
    explanation: str
    remediation: list[str] = field(default_factory=list)

    def to_compliance_flag(self, encounter_id: str | None = None) -> ComplianceFlag:
        """Record form of this flag, as stored by the application."""
        return ComplianceFlag(
            flag_type=self.type,
            severity=self.severity,
            message=self.message,
            explanation=self.explanation,
            encounter_id=encounter_id,
        )


# ============================================================================
# Rule Predicates
# ============================================================================

EXAM_TERMS = ("examination", "physical exam", "vital signs")
PAIN_TERMS = ("pain", "hurt")
PAIN_SCALE_TERMS = ("scale", "/10", "out of 10")
PAIN_RATING_PATTERN = re.compile(r"\b([0-9]|10)\s*(/|out\s+of)\s*10\b")

# History of present illness elements
HPI_ELEMENT_PATTERNS: dict[str, re.Pattern[str]] = {
    "duration": re.compile(r"duration|how long|started|began", re.IGNORECASE),
    "location": re.compile(r"location|where|area", re.IGNORECASE),
    "quality": re.compile(r"quality|type|kind|character", re.IGNORECASE),
    "severity": re.compile(r"severity|scale|intensity", re.IGNORECASE),
    "timing": re.compile(r"timing|when|frequency", re.IGNORECASE),
    "context": re.compile(r"context|caused|triggered", re.IGNORECASE),
    "modifying_factors": re.compile(r"modifying|better|worse|aggravat", re.IGNORECASE),
    "associated_symptoms": re.compile(r"associated|symptoms|accompan", re.IGNORECASE),
}
MIN_HPI_ELEMENTS = 4


def check_missing_physical_exam(encounter: Encounter, transcript: str) -> bool:
    text = transcript.lower()
    if any(term in text for term in EXAM_TERMS):
        return False
    objective = encounter.soap_notes.objective.lower() if encounter.soap_notes else ""
    return "exam" not in objective


def check_missing_pain_scale(encounter: Encounter, transcript: str) -> bool:
    text = transcript.lower()
    has_pain_complaint = any(term in text for term in PAIN_TERMS)
    if not has_pain_complaint:
        return False
    has_pain_scale = any(term in text for term in PAIN_SCALE_TERMS) or bool(PAIN_RATING_PATTERN.search(text))
    return not has_pain_scale


def find_hpi_elements(transcript: str) -> list[str]:
    """Return the names of the HPI elements mentioned in the transcript."""
    return [name for name, pattern in HPI_ELEMENT_PATTERNS.items() if pattern.search(transcript)]


def check_insufficient_history(encounter: Encounter, transcript: str) -> bool:
    return len(find_hpi_elements(transcript)) < MIN_HPI_ELEMENTS


# ============================================================================
# Default Rule Catalog
# ============================================================================

DEFAULT_RULES: tuple[ComplianceRule, ...] = (
    ComplianceRule(
        id="missing-physical-exam",
        name="Missing Physical Examination",
        category="Documentation",
        severity=Severity.CRITICAL,
        description="Physical examination findings are required for most E/M services",
        check=check_missing_physical_exam,
        message="Missing physical examination findings",
        explanation="Physical examination documentation is required for proper billing and medical necessity",
        remediation=(
            "Document relevant physical examination findings",
            "Include vital signs if appropriate",
            "Note normal and abnormal findings",
        ),
    ),
    ComplianceRule(
        id="missing-pain-scale",
        name="Missing Pain Scale Assessment",
        category="Clinical",
        severity=Severity.HIGH,
        description="Pain scale assessment required for pain-related encounters",
        check=check_missing_pain_scale,
        message="Pain scale assessment not documented",
        explanation="Standardized pain scale (0-10) required for pain management and billing compliance",
        remediation=(
            "Document pain scale rating (0-10)",
            "Note pain characteristics and location",
            "Assess functional impact of pain",
        ),
    ),
    ComplianceRule(
        id="insufficient-history",
        name="Insufficient History of Present Illness",
        category="Documentation",
        severity=Severity.MEDIUM,
        description="History of present illness lacks required elements",
        check=check_insufficient_history,
        message="History of present illness needs more detail",
        explanation=(
            "Detailed history requires 4+ elements: location, quality, severity, duration, "
            "timing, context, modifying factors, associated symptoms"
        ),
        remediation=(
            "Document pain/symptom location and character",
            "Note onset, duration, and timing",
            "Assess aggravating and alleviating factors",
            "Document associated symptoms",
        ),
    ),
)


def evaluate_rules(
    rules: Sequence[ComplianceRule],
    encounter: Encounter,
    transcript: str,
) -> list[Flag]:
    """Evaluate every rule and return a flag for each violation.

    Args:
        rules: Rule catalog, evaluated in order
        encounter: Encounter under review
        transcript: Visit transcript text

    Returns:
        Flags in catalog order.
    """
    flags: list[Flag] = []
    for rule in rules:
        if rule.check(encounter, transcript):
            flags.append(
                Flag(
                    type=rule.id,
                    severity=rule.severity,
                    message=rule.message,
                    explanation=rule.explanation,
                    remediation=list(rule.remediation),
                )
            )

    logger.debug(f"Evaluated {len(rules)} rules for encounter {encounter.id}: {len(flags)} violations")
    return flags
