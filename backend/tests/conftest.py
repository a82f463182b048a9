"""Pytest configuration and fixtures for backend tests."""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.schemas.base import EncounterStatus, Severity
from app.schemas.encounter import ComplianceFlag, Encounter, SOAPNotes
from app.services.compliance_engine import ComplianceEngine, reset_compliance_engine
from app.services.knowledge_base import build_default_knowledge_base

# Fixed reference time so date-based scoring is deterministic
NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)

COMPLETE_SOAP = SOAPNotes(
    subjective="Patient reports lower back pain for six weeks, worse with bending, rated 6/10.",
    objective="Physical exam: lumbar paraspinal tenderness, normal gait. Vital signs stable.",
    assessment="Mechanical low back pain without radiculopathy.",
    plan="Physical therapy referral, NSAIDs as needed, follow up in four weeks.",
)


@pytest.fixture
def now() -> datetime:
    """Reference time used by date-based scorers."""
    return NOW


@pytest.fixture
def make_encounter() -> Callable[..., Encounter]:
    """Factory for encounters with sensible defaults.

    Defaults describe a completed, fully documented and coded visit
    one day before NOW.
    """

    def _make(**overrides: Any) -> Encounter:
        fields: dict[str, Any] = {
            "id": "enc-1",
            "patient_id": "pat-1",
            "status": EncounterStatus.COMPLETED,
            "appointment_time": NOW - timedelta(days=1),
            "encounter_type": "Office Visit",
            "chief_complaint": "Lower back pain",
            "soap_notes": COMPLETE_SOAP,
            "icd_codes": ["M54.5"],
            "cpt_codes": ["99213"],
        }
        fields.update(overrides)
        return Encounter(**fields)

    return _make


@pytest.fixture
def make_flag() -> Callable[..., ComplianceFlag]:
    """Factory for previously recorded compliance flags."""

    def _make(flag_type: str = "missing-pain-scale", severity: Severity = Severity.MEDIUM, **overrides: Any) -> ComplianceFlag:
        return ComplianceFlag(flag_type=flag_type, severity=severity, message=flag_type, **overrides)

    return _make


@pytest.fixture
def engine() -> ComplianceEngine:
    """Engine built from the bundled knowledge base."""
    return ComplianceEngine(build_default_knowledge_base())


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client.

    The default engine is reset so every test starts from a fresh one.
    """
    reset_compliance_engine()
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    reset_compliance_engine()
