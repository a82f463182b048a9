"""Tests for Pydantic schemas."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from app.schemas import (
    ComplianceFlag,
    Encounter,
    EncounterStatus,
    LLMSeverity,
    Severity,
    SOAPNotes,
    UserAction,
    map_llm_severity,
)
from app.schemas.compliance import PortfolioRequest, RiskAssessmentRequest


class TestEnums:
    """Test enum definitions."""

    def test_encounter_status_values(self) -> None:
        assert [s.value for s in EncounterStatus] == ["scheduled", "in_progress", "completed", "cancelled"]

    def test_severity_values(self) -> None:
        assert [s.value for s in Severity] == ["low", "medium", "high", "critical"]

    def test_user_action_values(self) -> None:
        assert UserAction.ACCEPT.value == "accept"
        assert UserAction.DISMISS.value == "dismiss"


class TestLLMSeverityMapping:
    """Test translation of LLM-sourced severities."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("info", Severity.LOW),
            ("warning", Severity.MEDIUM),
            ("error", Severity.HIGH),
            ("WARNING", Severity.MEDIUM),
            (LLMSeverity.ERROR, Severity.HIGH),
        ],
    )
    def test_known_values(self, value, expected) -> None:
        assert map_llm_severity(value) == expected

    def test_unknown_value_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown LLM severity"):
            map_llm_severity("fatal")

    def test_flag_from_llm_output(self) -> None:
        """LLM flags are stored with canonical severities."""
        flag = ComplianceFlag.from_llm_flag(
            {"type": "missing-ros", "severity": "error", "message": "Review of systems missing"},
            encounter_id="enc-1",
        )

        assert flag.flag_type == "missing-ros"
        assert flag.severity == Severity.HIGH
        assert flag.message == "Review of systems missing"
        assert flag.explanation == ""
        assert flag.encounter_id == "enc-1"
        assert flag.is_resolved is False

    def test_flag_from_llm_output_with_unknown_severity(self) -> None:
        with pytest.raises(ValueError):
            ComplianceFlag.from_llm_flag({"type": "x", "severity": "fatal"})


class TestEncounter:
    """Test the Encounter record."""

    def test_defaults(self) -> None:
        encounter = Encounter(appointment_time=datetime(2025, 1, 1, tzinfo=UTC))

        assert encounter.status == EncounterStatus.SCHEDULED
        assert encounter.chief_complaint == ""
        assert encounter.soap_notes is None
        assert encounter.icd_codes == []
        assert encounter.cpt_codes == []
        assert encounter.claim_risk_score == 0

    def test_naive_time_is_utc(self) -> None:
        encounter = Encounter(appointment_time=datetime(2025, 1, 1, 9, 30))

        assert encounter.appointment_time == datetime(2025, 1, 1, 9, 30, tzinfo=UTC)

    def test_aware_time_is_kept(self) -> None:
        eastern = timezone(timedelta(hours=-5))
        encounter = Encounter(appointment_time=datetime(2025, 1, 1, 9, 30, tzinfo=eastern))

        assert encounter.appointment_time.utcoffset() == timedelta(hours=-5)

    def test_null_codes_are_empty(self) -> None:
        encounter = Encounter(appointment_time=datetime(2025, 1, 1, tzinfo=UTC), icd_codes=None, cpt_codes=None)

        assert encounter.icd_codes == []
        assert encounter.cpt_codes == []

    @pytest.mark.parametrize("score", [-1, 101])
    def test_claim_risk_score_bounds(self, score) -> None:
        with pytest.raises(ValidationError):
            Encounter(appointment_time=datetime(2025, 1, 1, tzinfo=UTC), claim_risk_score=score)

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Encounter(appointment_time=datetime(2025, 1, 1, tzinfo=UTC), status="billed")

    def test_soap_text_length(self) -> None:
        encounter = Encounter(
            appointment_time=datetime(2025, 1, 1, tzinfo=UTC),
            soap_notes=SOAPNotes(subjective="abc", objective="de", assessment="f", plan=""),
        )

        assert encounter.soap_text_length() == 6

    def test_soap_text_length_without_notes(self) -> None:
        assert Encounter(appointment_time=datetime(2025, 1, 1, tzinfo=UTC)).soap_text_length() == 0


class TestRequests:
    """Test request schemas."""

    def test_risk_assessment_request_defaults(self) -> None:
        request = RiskAssessmentRequest(encounter={"appointment_time": "2025-01-01T09:00:00Z"})

        assert request.prior_flags == []
        assert request.patient is None
        assert request.historical_encounters is None

    def test_portfolio_window_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            PortfolioRequest(window_days=0)
