from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from dlv_api.config import settings
from dlv_api.database import get_db
from dlv_api.schemas.auth import InitiateAuth, SendOtp, VerifyOtp
from dlv_api.services import auth_service
from dlv_api.services.auth_session_store import AuthSessionStore, build_session_store
from dlv_api.utils.response import create_response, handle_exception
from dlv_api.utils.timeutils import to_iso
from dlv_api.utils.validators import validate_national_id, validate_otp, validate_transaction_id

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def get_session_store(db: Session = Depends(get_db)) -> AuthSessionStore:
    return build_session_store(db, settings.AUTH_SESSION_BACKEND)


# Step 1: national ID lookup opens a PENDING session
@router.post("/initiate")
def initiate_auth(
    body: InitiateAuth | None = None,
    db: Session = Depends(get_db),
    store: AuthSessionStore = Depends(get_session_store),
):
    try:
        national_id = validate_national_id(body.nationalId if body else None)
        record, _ = auth_service.initiate(db, store, national_id)

        data = {"transactionId": record.transaction_id}
        if settings.is_development:
            data["debug"] = {"otp": record.otp_code}
        return create_response("Authentication initiated successfully", data)
    except Exception as exc:
        return handle_exception(exc, "Authentication initiation failed")


# Step 2: simulated SMS delivery
@router.post("/send-otp")
def send_otp(
    body: SendOtp | None = None,
    db: Session = Depends(get_db),
    store: AuthSessionStore = Depends(get_session_store),
):
    try:
        transaction_id = validate_transaction_id(body.transactionId if body else None)
        record, _, destination = auth_service.send_otp(db, store, transaction_id)

        data = {"transactionId": transaction_id, "phoneNumber": destination}
        if settings.is_development:
            data["debug"] = {"otp": record.otp_code, "phone": destination}
        return create_response(f"OTP sent successfully to {destination}", data)
    except Exception as exc:
        return handle_exception(exc, "Failed to send OTP", "OTP_SEND_FAILED")


# Step 3: OTP check issues the access token
@router.post("/verify-otp")
def verify_otp(
    body: VerifyOtp | None = None,
    db: Session = Depends(get_db),
    store: AuthSessionStore = Depends(get_session_store),
):
    try:
        transaction_id = validate_transaction_id(body.transactionId if body else None)
        otp = validate_otp(body.otp if body else None)
        token, user_data = auth_service.verify_otp(db, store, transaction_id, otp)

        return create_response(
            "Authentication successful",
            {"token": token, "userData": user_data},
        )
    except Exception as exc:
        return handle_exception(exc, "OTP verification failed", "VERIFICATION_FAILED")


@router.get("/status/{transaction_id}")
def auth_status(transaction_id: str, store: AuthSessionStore = Depends(get_session_store)):
    try:
        record = auth_service.session_status(store, transaction_id)
        return create_response(
            data={
                "transactionId": transaction_id,
                "status": record.status,
                "attempts": record.attempts,
                "expiresAt": to_iso(record.otp_expires_at),
            },
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to get session status", "STATUS_CHECK_FAILED")
