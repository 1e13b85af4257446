"""Storage adapters for OTP authentication sessions.

The auth flow only ever needs three primitives: create a session, fetch it
by transaction id, and apply a partial update. Both adapters exchange plain
`AuthSessionRecord` values so the state machine never touches ORM rows.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol

from sqlalchemy.orm import Session

from dlv_api.models.auth_session import AuthSession
from dlv_api.utils.timeutils import utcnow

_MUTABLE_FIELDS = {"otp_code", "otp_expires_at", "status", "attempts"}


@dataclass(frozen=True)
class AuthSessionRecord:
    citizen_id: int
    transaction_id: str
    otp_code: str
    otp_expires_at: datetime
    status: str
    attempts: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuthSessionStore(Protocol):
    def create(self, record: AuthSessionRecord) -> AuthSessionRecord: ...

    def get(self, transaction_id: str) -> AuthSessionRecord | None: ...

    def update(self, transaction_id: str, **changes) -> AuthSessionRecord | None: ...


def _check_fields(changes: dict) -> None:
    unknown = set(changes) - _MUTABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update auth session fields: {sorted(unknown)}")


class MemoryAuthSessionStore:
    """Process-local store, handy for demos and single-worker deployments."""

    def __init__(self):
        self._sessions: dict[str, AuthSessionRecord] = {}
        self._lock = threading.Lock()

    def create(self, record: AuthSessionRecord) -> AuthSessionRecord:
        now = utcnow()
        stored = replace(record, created_at=record.created_at or now, updated_at=now)
        with self._lock:
            if stored.transaction_id in self._sessions:
                raise ValueError(f"Duplicate transaction id {stored.transaction_id}")
            self._sessions[stored.transaction_id] = stored
        return stored

    def get(self, transaction_id: str) -> AuthSessionRecord | None:
        with self._lock:
            return self._sessions.get(transaction_id)

    def update(self, transaction_id: str, **changes) -> AuthSessionRecord | None:
        _check_fields(changes)
        with self._lock:
            current = self._sessions.get(transaction_id)
            if current is None:
                return None
            updated = replace(current, updated_at=utcnow(), **changes)
            self._sessions[transaction_id] = updated
            return updated

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


class SqlAuthSessionStore:
    """Sessions persisted in the `auth_sessions` table."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _to_record(row: AuthSession) -> AuthSessionRecord:
        return AuthSessionRecord(
            citizen_id=row.citizen_id,
            transaction_id=row.transaction_id,
            otp_code=row.otp_code,
            otp_expires_at=row.otp_expires_at,
            status=row.status,
            attempts=row.attempts or 0,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _row(self, transaction_id: str) -> AuthSession | None:
        return (
            self.db.query(AuthSession)
            .filter(AuthSession.transaction_id == transaction_id)
            .first()
        )

    def create(self, record: AuthSessionRecord) -> AuthSessionRecord:
        row = AuthSession(
            citizen_id=record.citizen_id,
            transaction_id=record.transaction_id,
            otp_code=record.otp_code,
            otp_expires_at=record.otp_expires_at,
            status=record.status,
            attempts=record.attempts,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return self._to_record(row)

    def get(self, transaction_id: str) -> AuthSessionRecord | None:
        row = self._row(transaction_id)
        return self._to_record(row) if row else None

    def update(self, transaction_id: str, **changes) -> AuthSessionRecord | None:
        _check_fields(changes)
        row = self._row(transaction_id)
        if row is None:
            return None
        for field, value in changes.items():
            setattr(row, field, value)
        row.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(row)
        return self._to_record(row)


memory_session_store = MemoryAuthSessionStore()


def build_session_store(db: Session, backend: str) -> AuthSessionStore:
    if backend == "memory":
        return memory_session_store
    if backend == "database":
        return SqlAuthSessionStore(db)
    raise ValueError(f"Unknown auth session backend: {backend}")
