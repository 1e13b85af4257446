"""National-ID OTP authentication.

Lifecycle of an auth session (one per transaction id):

    PENDING --verify ok--------------> VERIFIED
    PENDING --past otp_expires_at----> EXPIRED
    PENDING --verify after 3 misses--> FAILED
    PENDING --wrong otp--------------> PENDING (attempts + 1)

VERIFIED, EXPIRED and FAILED are terminal. Every failure is raised as an
`ApiError` so routers can hand it straight to `handle_exception`.
"""
import logging
import secrets
import uuid
from datetime import timedelta
from time import time

from fastapi import status
from jose import jwt
from sqlalchemy.orm import Session

from dlv_api.config import settings
from dlv_api.models.auth_session import AuthSessionStatus
from dlv_api.models.citizen import Citizen, CitizenStatus
from dlv_api.schemas.citizen import profile_payload
from dlv_api.services.auth_session_store import AuthSessionRecord, AuthSessionStore
from dlv_api.utils.response import ApiError
from dlv_api.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


def generate_transaction_id() -> str:
    return f"txn_{uuid.uuid4().hex[:8]}_{int(time() * 1000)}"


def generate_otp() -> str:
    if not settings.is_production:
        return settings.DEV_OTP_CODE
    return str(100000 + secrets.randbelow(900000))


def create_access_token(citizen: Citizen, transaction_id: str) -> str:
    expire = utcnow() + timedelta(hours=settings.TOKEN_EXPIRE_HOURS)
    payload = {
        "sub": str(citizen.id),
        "citizenId": citizen.id,
        "nationalId": citizen.national_id,
        "transactionId": transaction_id,
        "exp": expire,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.ALGORITHM])


def find_active_citizen(db: Session, national_id: str) -> Citizen | None:
    return (
        db.query(Citizen)
        .filter(Citizen.national_id == national_id, Citizen.status == CitizenStatus.ACTIVE.value)
        .first()
    )


def deliver_otp(citizen: Citizen, otp_code: str) -> str:
    """Simulated SMS gateway; returns the destination shown to the user."""
    destination = citizen.phone_number or citizen.full_name
    logger.info("Sending OTP to %s (citizen_id=%s)", destination, citizen.id)
    if settings.is_development:
        logger.debug("Development OTP for %s: %s", destination, otp_code)
    return destination


def _is_expired(record: AuthSessionRecord) -> bool:
    return utcnow() > record.otp_expires_at


def initiate(db: Session, store: AuthSessionStore, national_id: str) -> tuple[AuthSessionRecord, Citizen]:
    citizen = find_active_citizen(db, national_id)
    if not citizen:
        raise ApiError(status.HTTP_404_NOT_FOUND, "National ID not found in the system", "CITIZEN_NOT_FOUND")

    record = store.create(
        AuthSessionRecord(
            citizen_id=citizen.id,
            transaction_id=generate_transaction_id(),
            otp_code=generate_otp(),
            otp_expires_at=utcnow() + timedelta(minutes=settings.OTP_TTL_MINUTES),
            status=AuthSessionStatus.PENDING.value,
            attempts=0,
        )
    )
    logger.info("Auth session %s opened for citizen_id=%s", record.transaction_id, citizen.id)
    if settings.is_development:
        logger.info("OTP for %s: %s", national_id, record.otp_code)
    return record, citizen


def send_otp(db: Session, store: AuthSessionStore, transaction_id: str) -> tuple[AuthSessionRecord, Citizen, str]:
    record = store.get(transaction_id)
    if not record or record.status != AuthSessionStatus.PENDING.value:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Invalid or expired transaction", "INVALID_TRANSACTION")

    citizen = db.get(Citizen, record.citizen_id)
    if not citizen:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Invalid or expired transaction", "INVALID_TRANSACTION")

    if _is_expired(record):
        store.update(transaction_id, status=AuthSessionStatus.EXPIRED.value)
        logger.info("Auth session %s expired before OTP delivery", transaction_id)
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Transaction has expired", "TRANSACTION_EXPIRED")

    destination = deliver_otp(citizen, record.otp_code)
    return record, citizen, destination


def verify_otp(db: Session, store: AuthSessionStore, transaction_id: str, otp: str) -> tuple[str, dict]:
    record = store.get(transaction_id)
    if not record:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Invalid transaction ID", "INVALID_TRANSACTION")

    if record.status != AuthSessionStatus.PENDING.value:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Transaction is not in pending state", "INVALID_SESSION_STATUS")

    if _is_expired(record):
        store.update(transaction_id, status=AuthSessionStatus.EXPIRED.value)
        logger.info("Auth session %s expired before verification", transaction_id)
        raise ApiError(status.HTTP_400_BAD_REQUEST, "OTP has expired", "OTP_EXPIRED")

    if record.attempts >= settings.OTP_MAX_ATTEMPTS:
        store.update(transaction_id, status=AuthSessionStatus.FAILED.value)
        logger.warning("Auth session %s failed after %s attempts", transaction_id, record.attempts)
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Too many attempts. Please start over.", "TOO_MANY_ATTEMPTS")

    if not secrets.compare_digest(otp, record.otp_code):
        attempts = record.attempts + 1
        store.update(transaction_id, attempts=attempts)
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "Invalid OTP",
            "INVALID_OTP",
            attemptsRemaining=max(settings.OTP_MAX_ATTEMPTS - attempts, 0),
        )

    citizen = db.get(Citizen, record.citizen_id)
    if not citizen:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Invalid transaction ID", "INVALID_TRANSACTION")

    # Token and profile are built first so a failure leaves the session PENDING
    token = create_access_token(citizen, transaction_id)
    user_data = profile_payload(citizen)

    store.update(transaction_id, status=AuthSessionStatus.VERIFIED.value)
    logger.info("Auth session %s verified for citizen_id=%s", transaction_id, citizen.id)
    return token, user_data


def session_status(store: AuthSessionStore, transaction_id: str) -> AuthSessionRecord:
    record = store.get(transaction_id)
    if not record:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Session not found", "SESSION_NOT_FOUND")
    return record
