import logging
import time

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import func
from sqlalchemy.orm import Session

from dlv_api.config import settings
from dlv_api.database import get_db
from dlv_api.models.auth_session import AuthSession
from dlv_api.models.citizen import Citizen
from dlv_api.models.license_application import LicenseApplication
from dlv_api.utils.timeutils import to_iso, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health", tags=["Health"])

STARTED_AT = time.monotonic()


def _probe(db: Session, model) -> str | None:
    """Run a trivial count against a table; return the error text on failure."""
    try:
        db.query(func.count(model.id)).limit(1).scalar()
        return None
    except Exception as exc:
        db.rollback()
        logger.warning("Health probe on %s failed: %s", model.__tablename__, exc)
        return str(exc)


@router.get("")
def health(db: Session = Depends(get_db)):
    error = _probe(db, Citizen)
    payload = {
        "status": "healthy",
        "timestamp": to_iso(utcnow()),
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
        "database": "disconnected" if error else "connected",
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "environment": settings.APP_ENV,
    }
    if error:
        payload["database_error"] = error
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload)
    return JSONResponse(status_code=status.HTTP_200_OK, content=payload)


@router.get("/detailed")
def detailed_health(db: Session = Depends(get_db)):
    errors = {
        "citizens": _probe(db, Citizen),
        "sessions": _probe(db, AuthSession),
        "applications": _probe(db, LicenseApplication),
    }
    checks = {
        "citizens_table": errors["citizens"] is None,
        "auth_sessions_table": errors["sessions"] is None,
        "license_applications_table": errors["applications"] is None,
    }
    checks["database"] = all(checks.values())
    healthy = checks["database"]

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "degraded",
            "timestamp": to_iso(utcnow()),
            "checks": checks,
            "errors": {name: message for name, message in errors.items() if message},
        },
    )
