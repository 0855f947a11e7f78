"""
Health check endpoints.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, status

from bmvt.core.config import settings
from bmvt.core.responses import error_response, success_response
from bmvt.db.session import check_database_health
from bmvt.services.chat_broadcaster import broadcaster

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", summary="Health Check")
def health_check():
    """
    Check the API and its database.

    Returns 503 when the database cannot be reached.
    """
    db_health = check_database_health()
    body = {
        "status": "healthy" if db_health["status"] == "healthy" else "unhealthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": settings.app_version,
        "environment": settings.environment,
        "database": db_health,
        "chatSubscribers": broadcaster.count(),
    }
    if db_health["status"] != "healthy":
        logger.error(f"Database health check failed: {db_health.get('error')}")
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Base de données indisponible", body)
    return success_response(body)
