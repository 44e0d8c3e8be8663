"""System endpoints for the Murmur API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from murmur.api.v1.dependencies import SessionDep
from murmur.core.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health")
async def health(db: SessionDep) -> dict[str, str]:
    """Report liveness plus a round-trip to the database."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as err:
        logger.exception("Database health check failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from err
    return {"status": "ok", "database": "ok"}


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return the public, non-secret limits clients need to render forms."""
    return {
        "app": {"name": settings.app_name, "version": settings.app_version},
        "limits": {
            "murmur_max_length": settings.murmur_max_length,
            "default_page_size": settings.default_page_size,
            "max_page_size": settings.max_page_size,
            "notifications_page_size": settings.notifications_page_size,
            "trending_window_hours": settings.trending_window_hours,
        },
        "auth": {
            "jwt_algorithm": settings.jwt_algorithm,
            "access_token_expire_minutes": settings.access_token_expire_minutes,
        },
    }
