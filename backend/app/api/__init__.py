"""API routers for the Encounter Compliance Risk Engine."""

from app.api.compliance import router as compliance_router

__all__ = [
    "compliance_router",
]
