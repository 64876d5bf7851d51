"""
Health controller - liveness endpoint for monitoring.
"""

import logging

from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from kingdom_hospital import __version__
from kingdom_hospital.core.api_utils import api_response
from kingdom_hospital.db.session import SessionLocal

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api")


@health_bp.route("/health", methods=["GET"])
def health_check():
    """
    Report liveness and whether the database answers ``SELECT 1``.

    Returns 200 when the database is reachable, 503 otherwise. No
    authentication (monitoring endpoint).
    """
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        database_ok = True
    except SQLAlchemyError as e:
        logger.error(
            "Health check: database unreachable",
            extra={"context": {"endpoint": "/api/health", "error": str(e)}},
            exc_info=True,
        )
        database_ok = False
    finally:
        db.close()

    data = {
        "status": "healthy" if database_ok else "degraded",
        "database": "ok" if database_ok else "unreachable",
        "version": __version__,
    }
    if database_ok:
        return api_response(True, "Service healthy", data)
    return api_response(False, "Database unreachable", data, 503)
