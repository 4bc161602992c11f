"""API routes."""

from social_insurance_engine.api.routes.health import router as health_router
from social_insurance_engine.api.routes.premiums import router as premiums_router

__all__ = ["health_router", "premiums_router"]
