import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure predictable environment variables for tests before importing the app.
BASE_DIR = Path(__file__).resolve().parents[1]
TEST_DB_PATH = BASE_DIR / "test.db"

if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ.setdefault("DATABASE_URL", f"sqlite:///{TEST_DB_PATH}")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["APP_ENV"] = "development"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["AUTH_SESSION_BACKEND"] = "database"

import dlv_api.main as main  # noqa: E402  (import after env vars are set)
from dlv_api.database import SessionLocal  # noqa: E402
from dlv_api.models.auth_session import AuthSession  # noqa: E402
from dlv_api.models.citizen import Citizen  # noqa: E402
from dlv_api.models.license_application import LicenseApplication  # noqa: E402
from dlv_api.services.auth_session_store import memory_session_store  # noqa: E402
from seed import seed_citizens  # noqa: E402

PRIMARY_NATIONAL_ID = "1234567890123456"
SECONDARY_NATIONAL_ID = "2345678901234567"


@pytest.fixture()
def client(monkeypatch):
    """Provide a TestClient with startup seeding patched out for isolation."""
    monkeypatch.setattr(main, "run_seed", lambda *args, **kwargs: None)

    with TestClient(main.app) as test_client:
        yield test_client


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def citizens():
    """Reset tables and load the demo citizens; returns their national IDs."""
    session = SessionLocal()
    try:
        session.query(LicenseApplication).delete()
        session.query(AuthSession).delete()
        session.query(Citizen).delete()
        session.commit()
        national_ids = [citizen.national_id for citizen in seed_citizens(session)]
        session.commit()
    finally:
        session.close()
    memory_session_store.clear()
    return national_ids


def login(client, national_id: str = PRIMARY_NATIONAL_ID) -> str:
    initiated = client.post("/api/auth/initiate", json={"nationalId": national_id}).json()
    transaction_id = initiated["transactionId"]
    client.post("/api/auth/send-otp", json={"transactionId": transaction_id})
    verified = client.post(
        "/api/auth/verify-otp",
        json={"transactionId": transaction_id, "otp": initiated["debug"]["otp"]},
    ).json()
    return verified["token"]


@pytest.fixture()
def auth_headers(client, citizens):
    return {"Authorization": f"Bearer {login(client)}"}
