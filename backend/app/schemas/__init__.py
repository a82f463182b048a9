"""Pydantic schemas for the Encounter Compliance Risk Engine."""

from app.schemas.base import (
    CodeType,
    EncounterStatus,
    FactorSeverity,
    LLMSeverity,
    RiskLevel,
    Severity,
    UserAction,
    map_llm_severity,
)
from app.schemas.encounter import ComplianceFlag, Encounter, Patient, SOAPNotes

__all__ = [
    # Enums
    "CodeType",
    "EncounterStatus",
    "FactorSeverity",
    "LLMSeverity",
    "RiskLevel",
    "Severity",
    "UserAction",
    "map_llm_severity",
    # Records
    "ComplianceFlag",
    "Encounter",
    "Patient",
    "SOAPNotes",
]
