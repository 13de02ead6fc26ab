"""
Auth "middleware" helpers.

- get_session / require_login / require_manager_role are FastAPI
  dependencies for API routes. They run the guards and raise the guard's
  error; the app's exception handler renders the envelope.
- PageGateASGI redirects page requests before any handler runs.
"""

from __future__ import annotations

from typing import Iterable, Optional

from fastapi import Depends, Request, Response
from fastapi.responses import RedirectResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from dailyreport.auth.guards import require_authenticated, require_manager
from dailyreport.auth.models import SessionData
from dailyreport.auth.session import Session, SessionManager

LOGIN_PATH = "/login"
HOME_PATH = "/"
MANAGER_ONLY_PREFIXES = ("/sales",)

# Never gated here: API routes check auth themselves
PUBLIC_PREFIXES = ("/api/", "/static/")
PUBLIC_ROUTES = {"/api", "/favicon.ico", "/docs", "/redoc", "/openapi.json"}


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_session(
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
) -> Session:
    """
    Session bound to this request; saves land as Set-Cookie on the response.

    The response is also kept on request.state so error handlers can carry
    a refreshed cookie onto the error they render.
    """
    request.state.session_response = response
    return manager.get_session(request, response)


def require_login(
    session: Session = Depends(get_session),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionData:
    """
    Dependency for routes that need a logged-in user.

    Raises AuthenticationError (401) if the session is missing or expired;
    otherwise refreshes it and returns the snapshot.
    """
    result = require_authenticated(manager, session)
    if not result.ok:
        raise result.error
    return result.session


def require_manager_role(
    session: Session = Depends(get_session),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionData:
    """Dependency for manager-only routes (401 / 403)."""
    result = require_manager(manager, session)
    if not result.ok:
        raise result.error
    return result.session


def is_public_path(path: str) -> bool:
    return path in PUBLIC_ROUTES or any(path.startswith(p) for p in PUBLIC_PREFIXES)


def resolve_page_redirect(
    path: str,
    session_valid: bool,
    is_manager: bool,
    manager_prefixes: Iterable[str] = MANAGER_ONLY_PREFIXES,
) -> Optional[str]:
    """
    Where a page request should be sent instead, or None to let it through.

    - login page while logged in -> home
    - any other page while logged out -> login page
    - manager-only pages for non-managers -> home
    """
    if path == LOGIN_PATH:
        return HOME_PATH if session_valid else None
    if not session_valid:
        return LOGIN_PATH
    if any(path == p or path.startswith(p + "/") for p in manager_prefixes) and not is_manager:
        return HOME_PATH
    return None


class PageGateASGI:
    """Raw ASGI page gate; avoids BaseHTTPMiddleware request stream wrapping."""

    def __init__(self, app: ASGIApp, session_manager: SessionManager):
        self.app = app
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return
        path = scope.get("path") or ""
        if is_public_path(path):
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        session = self.session_manager.open(request.cookies.get(self.session_manager.cookie_name))
        valid = self.session_manager.is_valid(session)
        target = resolve_page_redirect(path, valid, bool(session.data.is_manager))
        if target is None:
            await self.app(scope, receive, send)
            return

        response = RedirectResponse(url=target, status_code=302)
        await response(scope, receive, send)


def carry_session_cookie(request: Request, response: Response) -> Response:
    """Copy Set-Cookie written by get_session onto a response built elsewhere."""
    pending = getattr(request.state, "session_response", None)
    if pending is not None:
        for key, value in pending.raw_headers:
            if key == b"set-cookie":
                response.raw_headers.append((key, value))
    return response
