"""Mock national identity registry used during portal development."""
import logging
import threading

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from dlv_api.utils.timeutils import to_iso, utcnow

logger = logging.getLogger(__name__)


class IdentityRegistration(BaseModel):
    id: str | None = None
    fullName: str | None = None
    dateOfBirth: str | None = None
    address: str | None = None
    phoneNumber: str | None = None
    email: str | None = None
    photo: str | None = None
    status: str | None = None


TEST_IDENTITIES = [
    IdentityRegistration(
        id="1234567890123456",
        fullName="Jean Baptiste Ndayisenga",
        dateOfBirth="1990-05-15",
        address="Bujumbura, Rohero, Zone 1, Avenue de la Paix 123",
        phoneNumber="+257 79 123 456",
        email="jean.ndayisenga@example.com",
        status="ACTIVE",
    ),
    IdentityRegistration(
        id="9876543210987654",
        fullName="Marie Claire Uwimana",
        dateOfBirth="1985-12-03",
        address="Gitega, Centre-ville, Quartier 1, Rue de la République 45",
        phoneNumber="+257 68 987 654",
        email="marie.uwimana@example.com",
        status="ACTIVE",
    ),
]

_identities: dict[str, dict] = {}
_lock = threading.Lock()


def register_identity(body: IdentityRegistration) -> dict:
    identity = {
        "id": body.id,
        "fullName": body.fullName,
        "dateOfBirth": body.dateOfBirth or "1990-01-01",
        "address": body.address or "Default Address",
        "phoneNumber": body.phoneNumber or "+257 79 000 000",
        "email": body.email or f"{body.id}@example.com",
        "photo": body.photo or "",
        "status": body.status or "ACTIVE",
        "createdAt": to_iso(utcnow()),
    }
    with _lock:
        _identities[body.id] = identity
    return identity


def reset_identities() -> None:
    with _lock:
        _identities.clear()
    for identity in TEST_IDENTITIES:
        register_identity(identity)


reset_identities()

app = FastAPI(title="Mock Identity System")


@app.get("/health")
def health():
    return {"status": "healthy", "service": "mock-identity-system"}


@app.post("/identity/register", status_code=201)
def register(body: IdentityRegistration):
    if not body.id or not body.fullName:
        return JSONResponse(status_code=400, content={"error": "ID and fullName are required"})
    register_identity(body)
    logger.info("Registered mock identity %s", body.id)
    return {"message": "Identity registered successfully", "id": body.id}


# Declared before /identity/{identity_id} so "list" is not read as an id
@app.get("/identity/list")
def list_identities():
    with _lock:
        identities = list(_identities.values())
    return {"identities": identities, "total": len(identities)}


@app.get("/identity/{identity_id}")
def get_identity(identity_id: str):
    with _lock:
        identity = _identities.get(identity_id)
    if identity is None:
        return JSONResponse(status_code=404, content={"error": "Identity not found"})
    return identity


@app.delete("/identity/{identity_id}")
def delete_identity(identity_id: str):
    with _lock:
        removed = _identities.pop(identity_id, None)
    if removed is None:
        return JSONResponse(status_code=404, content={"error": "Identity not found"})
    return {"message": "Identity deleted successfully"}


if __name__ == "__main__":
    import uvicorn

    for identity in TEST_IDENTITIES:
        print(f"- {identity.id}: {identity.fullName}")
    uvicorn.run(app, host="0.0.0.0", port=8088)
