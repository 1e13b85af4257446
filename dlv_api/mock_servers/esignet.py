"""Mock eSignet-style identity provider.

Simulates the external OTP authenticator the portal can delegate to.
Everything lives in memory; the OTP is always 123456.
"""
import logging
import random
import string
import threading
from datetime import timedelta
from time import time

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from dlv_api.config import settings
from dlv_api.services.session_sweeper import SessionSweeper
from dlv_api.utils.timeutils import to_iso, utcnow

logger = logging.getLogger(__name__)

MOCK_OTP = "123456"
OTP_TTL = timedelta(minutes=5)
MAX_ATTEMPTS = 3


class AuthorizeRequest(BaseModel):
    clientId: str | None = None
    scope: str | None = None
    responseType: str | None = None
    redirectUri: str | None = None
    claims: dict | None = None


class SendOtpRequest(BaseModel):
    transactionId: str
    individualId: str | None = None
    otpChannels: list[str] = []


class Challenge(BaseModel):
    authFactorType: str | None = None
    challenge: str | None = None


class AuthenticateRequest(BaseModel):
    transactionId: str
    challengeList: list[Challenge] = []


class EsignetRegistry:
    def __init__(self):
        self.sessions: dict[str, dict] = {}
        self.otp_store: dict[str, dict] = {}
        self._lock = threading.Lock()

    @staticmethod
    def new_transaction_id() -> str:
        suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
        return f"txn_{suffix}_{int(time() * 1000)}"

    def authorize(self, request: AuthorizeRequest) -> str:
        transaction_id = self.new_transaction_id()
        with self._lock:
            self.sessions[transaction_id] = {
                **request.model_dump(),
                "status": "initiated",
                "createdAt": utcnow(),
            }
        return transaction_id

    def send_otp(self, request: SendOtpRequest) -> bool:
        with self._lock:
            session = self.sessions.get(request.transactionId)
            if session is None:
                return False
            self.otp_store[request.transactionId] = {
                "otp": MOCK_OTP,
                "individualId": request.individualId,
                "expiresAt": utcnow() + OTP_TTL,
                "attempts": 0,
            }
            session["status"] = "otp-sent"
            session["individualId"] = request.individualId
        return True

    def authenticate(self, request: AuthenticateRequest) -> tuple[bool, str]:
        with self._lock:
            if request.transactionId not in self.sessions:
                return False, "Invalid transaction ID"
            stored = self.otp_store.get(request.transactionId)
            if stored is None:
                return False, "No OTP found for this transaction"
            if utcnow() > stored["expiresAt"]:
                return False, "OTP has expired"

            stored["attempts"] += 1
            if stored["attempts"] > MAX_ATTEMPTS:
                return False, "Too many attempts"

            provided = request.challengeList[0].challenge if request.challengeList else None
            if provided != stored["otp"]:
                return False, "Invalid OTP"

            self.sessions[request.transactionId]["status"] = "authenticated"
            del self.otp_store[request.transactionId]
        return True, "Authentication successful"

    def status(self, transaction_id: str) -> dict | None:
        with self._lock:
            return self.sessions.get(transaction_id)

    def evict_older_than(self, max_age: timedelta) -> int:
        cutoff = utcnow() - max_age
        with self._lock:
            stale = [tid for tid, session in self.sessions.items() if session["createdAt"] < cutoff]
            for transaction_id in stale:
                self.sessions.pop(transaction_id, None)
                self.otp_store.pop(transaction_id, None)
        return len(stale)


registry = EsignetRegistry()
sweeper = SessionSweeper(
    lambda: registry.evict_older_than(timedelta(minutes=settings.ESIGNET_SESSION_MAX_AGE_MINUTES)),
    interval_minutes=settings.ESIGNET_SWEEP_INTERVAL_MINUTES,
)

app = FastAPI(title="Mock eSignet Backend")


@app.on_event("startup")
async def startup_event():
    await sweeper.start()


@app.on_event("shutdown")
async def shutdown_event():
    await sweeper.stop()


@app.get("/health")
def health():
    return {"status": "healthy", "service": "esignet-backend"}


@app.post("/authorize")
def authorize(body: AuthorizeRequest):
    transaction_id = registry.authorize(body)
    logger.info("Authorization %s initiated for client %s", transaction_id, body.clientId)
    return {"transactionId": transaction_id, "status": "success", "message": "Authentication initiated"}


@app.post("/send-otp")
def send_otp(body: SendOtpRequest):
    if not registry.send_otp(body):
        return JSONResponse(status_code=400, content={"error": "Invalid transaction ID"})
    return {
        "transactionId": body.transactionId,
        "status": "success",
        "message": f"OTP sent to {', '.join(body.otpChannels)}",
    }


@app.post("/authenticate")
def authenticate(body: AuthenticateRequest):
    ok, message = registry.authenticate(body)
    if not ok:
        return JSONResponse(status_code=400, content={"error": message, "authStatus": "FAILED"})
    return {"transactionId": body.transactionId, "authStatus": "SUCCESS", "message": message}


@app.get("/auth-status/{transaction_id}")
def auth_status(transaction_id: str):
    session = registry.status(transaction_id)
    if session is None:
        return JSONResponse(status_code=404, content={"error": "Session not found"})
    return {
        "transactionId": transaction_id,
        "status": session["status"],
        "individualId": session.get("individualId"),
        "createdAt": to_iso(session["createdAt"]),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8089)
