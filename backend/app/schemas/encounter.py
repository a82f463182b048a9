"""Encounter, patient and compliance flag schemas.

These are the records the engine consumes from the surrounding application.
The engine never persists them; it only reads them and computes new values
(flags, suggestions, claim risk score) for the caller to store.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.schemas.base import EncounterStatus, Severity, UserAction, map_llm_severity


class SOAPNotes(BaseModel):
    """Structured clinical note."""

    subjective: str = Field(default="", description="Subjective section")
    objective: str = Field(default="", description="Objective section (exam, vitals)")
    assessment: str = Field(default="", description="Assessment section")
    plan: str = Field(default="", description="Plan section")

    def text_length(self) -> int:
        """Total number of characters across all four sections."""
        return len(self.subjective) + len(self.objective) + len(self.assessment) + len(self.plan)


class Patient(BaseModel):
    """Patient reference."""

    id: str = Field(..., description="Patient identifier")
    name: str = Field(default="", description="Patient name")
    mrn: str | None = Field(None, description="Medical record number")


class Encounter(BaseModel):
    """A physician encounter as stored by the application."""

    id: str | None = Field(None, description="Encounter identifier")
    patient_id: str | None = Field(None, description="Patient identifier")
    status: EncounterStatus = Field(default=EncounterStatus.SCHEDULED, description="Encounter status")
    appointment_time: datetime = Field(..., description="Scheduled appointment time")
    encounter_type: str = Field(default="", description="Visit type (Follow-up, Annual Physical, ...)")
    chief_complaint: str = Field(default="", description="Chief complaint, may be empty")
    soap_notes: SOAPNotes | None = Field(None, description="Structured SOAP note")
    icd_codes: list[str] = Field(default_factory=list, description="Assigned ICD-10 codes")
    cpt_codes: list[str] = Field(default_factory=list, description="Assigned CPT codes")
    claim_risk_score: int = Field(default=0, ge=0, le=100, description="Stored claim risk score")

    model_config = {"from_attributes": True}

    @field_validator("appointment_time")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("icd_codes", "cpt_codes", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def soap_text_length(self) -> int:
        """Length of the SOAP note text, 0 when notes are absent."""
        return self.soap_notes.text_length() if self.soap_notes else 0


class ComplianceFlag(BaseModel):
    """A previously recorded compliance flag."""

    flag_type: str = Field(..., description="Identifier of the rule that raised the flag")
    severity: Severity = Field(..., description="Canonical severity")
    message: str = Field(default="", description="Short description")
    explanation: str = Field(default="", description="Why the flag matters")
    is_resolved: bool = Field(default=False, description="Whether the flag was resolved")
    user_action: UserAction | None = Field(None, description="Clinician action (accept/dismiss)")
    encounter_id: str | None = Field(None, description="Encounter the flag belongs to")

    model_config = {"from_attributes": True}

    @classmethod
    def from_llm_flag(cls, payload: dict[str, Any], encounter_id: str | None = None) -> "ComplianceFlag":
        """Build a flag from the LLM compliance checker's output.

        The LLM reports severities as info/warning/error; they are mapped
        to the canonical four-level vocabulary here. Unknown severities
        raise ValueError.
        """
        return cls(
            flag_type=payload["type"],
            severity=map_llm_severity(payload["severity"]),
            message=payload.get("message", ""),
            explanation=payload.get("explanation", ""),
            encounter_id=encounter_id,
        )
