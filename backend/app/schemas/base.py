"""Base schemas and enums for the compliance risk engine."""

from enum import Enum


class EncounterStatus(str, Enum):
    """Lifecycle status of a patient encounter."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Severity(str, Enum):
    """Canonical severity of a compliance flag."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class LLMSeverity(str, Enum):
    """Severity vocabulary emitted by the LLM compliance checker."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class FactorSeverity(str, Enum):
    """Severity bucket of a single risk factor."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskLevel(str, Enum):
    """Qualitative claim denial risk level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CodeType(str, Enum):
    """Code system of a code suggestion or reference entry."""

    ICD10 = "icd10"
    CPT = "cpt"


class UserAction(str, Enum):
    """Clinician response to a raised flag."""

    ACCEPT = "accept"
    DISMISS = "dismiss"


LLM_SEVERITY_MAP: dict[LLMSeverity, Severity] = {
    LLMSeverity.INFO: Severity.LOW,
    LLMSeverity.WARNING: Severity.MEDIUM,
    LLMSeverity.ERROR: Severity.HIGH,
}


def map_llm_severity(value: str | LLMSeverity) -> Severity:
    """Translate an LLM-sourced severity into the canonical vocabulary.

    Raises:
        ValueError: If the value is not one of info/warning/error.
    """
    try:
        llm_severity = LLMSeverity(value.lower() if isinstance(value, str) else value)
    except ValueError:
        raise ValueError(f"Unknown LLM severity: {value!r}") from None
    return LLM_SEVERITY_MAP[llm_severity]
