"""
FastAPI routes for authentication.

Prefix: /api/auth

- POST /login    rate-limited credential check, issues the session cookie
- POST /logout   always clears the session
- GET  /session  current user; sliding expiry
"""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict

from dailyreport.auth.models import SessionData, SessionUser
from dailyreport.auth.passwords import hash_password, verify_password
from dailyreport.auth.rate_limiter import get_client_ip
from dailyreport.auth.session import Session, SessionManager
from dailyreport.models.sales import SalesRecord
from dailyreport.utils.exceptions import (
    InvalidCredentialsError,
    RateLimitError,
    SessionExpiredError,
    ValidationError,
)
from dailyreport.utils.logger import get_logger
from .auth_middleware import get_session, get_session_manager

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sales_code: Optional[str] = None
    password: Optional[str] = None


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Verified against when the sales code is unknown so both failure paths cost one bcrypt check
    return hash_password("dummy-password-for-unknown-sales-code")


def _user_summary(user: SessionData) -> Dict[str, Any]:
    return {
        "sales_id": user.sales_id,
        "sales_code": user.sales_code,
        "sales_name": user.sales_name,
        "email": user.email,
        "department": user.department,
        "is_manager": user.is_manager,
    }


def _expires_iso(expires_at_ms: int) -> str:
    dt = datetime.fromtimestamp(expires_at_ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _check_credentials(store, sales_code: str, password: str) -> Optional[SalesRecord]:
    record = store.find_by_code(sales_code)
    if record is None:
        verify_password(password, _dummy_hash())
        return None
    if not verify_password(password, record.password_hash):
        return None
    return record


@router.post("/login")
async def login(
    request: Request,
    body: Optional[LoginRequest] = None,
    session: Session = Depends(get_session),
    manager: SessionManager = Depends(get_session_manager),
) -> Dict[str, Any]:
    """
    Log in with sales code and password.

    Request (JSON):
        { "sales_code": "S001", "password": "..." }

    Response:
        { "status": "success",
          "data": { "user": {...}, "session_id": "<sales_id>" } }
    """
    body = body or LoginRequest()
    details = []
    if not body.sales_code:
        details.append({"field": "sales_code", "message": "Sales code is required"})
    if not body.password:
        details.append({"field": "password", "message": "Password is required"})
    if details:
        raise ValidationError("Please enter your sales code and password", details=details)

    state = request.app.state
    client_ip = get_client_ip(request.headers, state.config.trust_proxy)
    limit = state.rate_limiter.check(client_ip)
    if not limit.success:
        logger.warning(
            "Login rate limit exceeded",
            client_ip=client_ip,
            retry_after=limit.retry_after_seconds,
        )
        raise RateLimitError(limit.retry_after_seconds)

    # bcrypt is CPU-bound; keep it off the event loop
    record = await run_in_threadpool(
        _check_credentials, state.sales_store, body.sales_code, body.password
    )
    if record is None:
        logger.info("Login failed", client_ip=client_ip, remaining=limit.remaining_points)
        raise InvalidCredentialsError()

    state.rate_limiter.reset(client_ip)

    manager.set_data(
        session,
        SessionUser(
            sales_id=record.id,
            sales_code=record.sales_code,
            sales_name=record.sales_name,
            email=record.email,
            department=record.department,
            is_manager=record.is_manager,
        ),
    )
    logger.info("Login succeeded", sales_id=record.id, client_ip=client_ip)

    user = _user_summary(session.data)
    if record.manager_id:
        boss = await run_in_threadpool(state.sales_store.find_by_id, record.manager_id)
        if boss is not None:
            user["manager"] = {"sales_id": boss.id, "sales_name": boss.sales_name}

    return {
        "status": "success",
        "data": {"user": user, "session_id": session.data.sales_id or ""},
    }


@router.post("/logout")
async def logout(
    session: Session = Depends(get_session),
    manager: SessionManager = Depends(get_session_manager),
) -> Dict[str, Any]:
    """Destroy the current session. Succeeds even when nobody is logged in."""
    sales_id = session.data.sales_id
    manager.destroy(session)
    if sales_id:
        logger.info("Logged out", sales_id=sales_id)
    return {"status": "success", "data": {"message": "Logged out"}}


@router.get("/session")
async def check_session(
    session: Session = Depends(get_session),
    manager: SessionManager = Depends(get_session_manager),
) -> Dict[str, Any]:
    """
    Return the current user and session expiry.

    A successful check slides the expiry forward.
    """
    if not manager.is_valid(session):
        raise SessionExpiredError()

    manager.refresh(session)
    return {
        "status": "success",
        "data": {
            "user": _user_summary(session.data),
            "session_expires_at": _expires_iso(session.data.expires_at),
        },
    }
