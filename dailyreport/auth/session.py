"""
Cookie-backed sessions.

There is no server-side session table: the whole SessionData snapshot is
sealed into the cookie with Fernet (AES + HMAC via the cryptography
library), so the cookie is both encrypted and tamper-evident. Anything that
fails to decode is treated as "no session".

SessionCodec is the only place that knows about the sealing primitive.
"""

from __future__ import annotations

import base64
import json
import time
from typing import Any, Callable, Dict, Optional, Protocol

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from fastapi import Request, Response
from pydantic import ValidationError as PydanticValidationError

from dailyreport.auth.models import SessionData, SessionUser
from dailyreport.core.config import AppConfig
from dailyreport.utils.logger import get_logger

logger = get_logger(__name__)

_KEY_INFO = b"dailyreport-session-cookie"


def now_ms() -> int:
    return int(time.time() * 1000)


class SessionCodec(Protocol):
    def encode(self, payload: Dict[str, Any]) -> str:
        ...

    def decode(self, token: str) -> Optional[Dict[str, Any]]:
        ...


def derive_fernet_key(secret: str) -> bytes:
    """Stretch the configured secret into a urlsafe base64 Fernet key."""
    hkdf = HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=_KEY_INFO)
    return base64.urlsafe_b64encode(hkdf.derive(secret.encode("utf-8")))


class FernetSessionCodec:
    """Seal session payloads as Fernet tokens."""

    def __init__(self, secret: str, ttl_seconds: Optional[int] = None):
        self._fernet = Fernet(derive_fernet_key(secret))
        self.ttl_seconds = ttl_seconds

    def encode(self, payload: Dict[str, Any]) -> str:
        raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        return self._fernet.encrypt(raw.encode("utf-8")).decode("ascii")

    def decode(self, token: str) -> Optional[Dict[str, Any]]:
        """Return the payload, or None for tampered, foreign, stale or garbled tokens."""
        try:
            raw = self._fernet.decrypt(token.encode("ascii"), ttl=self.ttl_seconds)
            data = json.loads(raw.decode("utf-8"))
        except (InvalidToken, ValueError):
            return None
        return data if isinstance(data, dict) else None


class Session:
    """
    Mutable session handle for one request.

    save() hands the current state to the persist callback (for HTTP
    requests: writes or deletes the cookie on the outgoing response).
    """

    def __init__(self, data: SessionData, persist: Callable[[SessionData], None]):
        self.data = data
        self._persist = persist

    def clear(self) -> None:
        self.data = SessionData()

    def save(self) -> None:
        self._persist(self.data.model_copy())


class SessionManager:
    """Create, validate, refresh and destroy cookie sessions."""

    def __init__(
        self,
        config: AppConfig,
        codec: Optional[SessionCodec] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.config = config
        self.cookie_name = config.cookie_name
        self.timeout_seconds = config.session_timeout_seconds
        self.codec = codec or FernetSessionCodec(
            config.session_secret, ttl_seconds=config.session_timeout_seconds
        )
        self._clock = clock

    def open(
        self,
        cookie_value: Optional[str],
        persist: Optional[Callable[[SessionData], None]] = None,
    ) -> Session:
        """Load a session from a raw cookie value. Never raises."""
        data = SessionData()
        if cookie_value:
            payload = self.codec.decode(cookie_value)
            if payload is None:
                logger.debug("Discarding undecodable session cookie")
            else:
                try:
                    data = SessionData(**payload)
                except PydanticValidationError:
                    logger.debug("Discarding session cookie with unexpected payload")
        return Session(data, persist or (lambda _data: None))

    def get_session(self, request: Request, response: Response) -> Session:
        """Session for the current request; saving writes Set-Cookie on response."""
        return self.open(
            request.cookies.get(self.cookie_name),
            lambda data: self.write_cookie(response, data),
        )

    def is_valid(self, session: Session) -> bool:
        data = session.data
        if not data.sales_id or not data.expires_at:
            return False
        return data.expires_at > self._clock()

    def set_data(self, session: Session, user: SessionUser) -> None:
        """Populate the session from a login snapshot and persist it."""
        session.data = SessionData(**user.model_dump(), expires_at=self._new_expiry())
        session.save()

    def refresh(self, session: Session) -> None:
        """Slide the expiry forward. Invalid sessions are left untouched."""
        if self.is_valid(session):
            session.data.expires_at = self._new_expiry()
            session.save()

    def destroy(self, session: Session) -> None:
        session.clear()
        session.save()

    def snapshot(self, session: Session) -> SessionData:
        return session.data.model_copy()

    def write_cookie(self, response: Response, data: SessionData) -> None:
        secure = self.config.is_production
        if data.is_empty():
            response.delete_cookie(
                self.cookie_name,
                path="/",
                secure=secure,
                httponly=True,
                samesite="lax",
            )
            return
        response.set_cookie(
            key=self.cookie_name,
            value=self.codec.encode(data.model_dump(exclude_none=True)),
            max_age=self.timeout_seconds,
            path="/",
            secure=secure,
            httponly=True,
            samesite="lax",
        )

    def _new_expiry(self) -> int:
        return self._clock() + self.timeout_seconds * 1000
