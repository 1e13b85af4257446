import logging

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from dlv_api.database import get_db
from dlv_api.models.citizen import Citizen, CitizenStatus
from dlv_api.services.auth_service import decode_access_token
from dlv_api.utils.response import ApiError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _resolve_citizen(token: str, db: Session) -> Citizen:
    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        logger.info("Token verification failed: %s", exc)
        raise ApiError(status.HTTP_403_FORBIDDEN, "Invalid token", "TOKEN_VERIFICATION_FAILED")

    citizen_id = payload.get("citizenId")
    citizen = None
    if citizen_id is not None:
        citizen = (
            db.query(Citizen)
            .filter(Citizen.id == citizen_id, Citizen.status == CitizenStatus.ACTIVE.value)
            .first()
        )
    if not citizen:
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "Invalid or expired token", "INVALID_TOKEN")
    return citizen


def get_current_citizen(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Citizen:
    if not credentials or not credentials.credentials:
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "Access token is required", "MISSING_TOKEN")
    return _resolve_citizen(credentials.credentials, db)


def get_optional_citizen(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Citizen | None:
    if not credentials or not credentials.credentials:
        return None
    try:
        return _resolve_citizen(credentials.credentials, db)
    except ApiError as exc:
        logger.info("Optional auth ignored: %s", exc.error)
        return None
