"""
Authentication and role guards.

Guards only decide. They return an AuthResult carrying either the session
snapshot or the error (with a ready-to-send envelope); the calling route
decides how to respond.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from dailyreport.auth.models import SessionData
from dailyreport.auth.session import Session, SessionManager
from dailyreport.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DailyReportError,
    ServerError,
)
from dailyreport.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthResult:
    session: Optional[SessionData] = None
    error: Optional[DailyReportError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        return 200 if self.error is None else self.error.status_code

    @property
    def payload(self) -> Optional[Dict[str, Any]]:
        return None if self.error is None else self.error.to_envelope()


def require_authenticated(manager: SessionManager, session: Session) -> AuthResult:
    """Pass with a refreshed snapshot when the session is valid, else 401."""
    try:
        if not manager.is_valid(session):
            return AuthResult(error=AuthenticationError())
        manager.refresh(session)
        return AuthResult(session=manager.snapshot(session))
    except Exception as e:
        logger.error("Authentication check failed", error=str(e))
        return AuthResult(error=ServerError())


def require_manager(manager: SessionManager, session: Session) -> AuthResult:
    """As require_authenticated, plus 403 for non-managers."""
    result = require_authenticated(manager, session)
    if not result.ok:
        return result
    if not result.session.is_manager:
        return AuthResult(error=AuthorizationError())
    return result
