"""FastAPI application for the sales daily report system"""

from __future__ import annotations

import time
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dailyreport import __version__
from dailyreport.auth.rate_limiter import LoginRateLimiter, create_login_rate_limiter
from dailyreport.auth.session import SessionManager, now_ms
from dailyreport.core.config import AppConfig, load_config
from dailyreport.services.sales_store import SalesStore
from dailyreport.utils.exceptions import (
    ConfigError,
    DailyReportError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from dailyreport.utils.logger import get_logger, setup_logging
from .auth_middleware import PageGateASGI, carry_session_cookie
from .auth_routes import router as auth_router
from .page_routes import router as page_router
from .sales_routes import router as sales_router

logger = get_logger(__name__)


def _field_name(loc) -> str:
    return ".".join(str(part) for part in loc if part not in ("body", "query", "path"))


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DailyReportError)
    async def handle_app_error(request: Request, exc: DailyReportError) -> JSONResponse:
        if isinstance(exc, ConfigError):
            logger.error("Configuration error during request", path=request.url.path, error=exc.message)
            exc = ServerError()
        headers = None
        if isinstance(exc, RateLimitError):
            headers = {"Retry-After": str(exc.retry_after)}
        response = JSONResponse(status_code=exc.status_code, content=exc.to_envelope(), headers=headers)
        return carry_session_cookie(request, response)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
            for err in exc.errors()
        ]
        error = ValidationError(details=details)
        response = JSONResponse(status_code=error.status_code, content=error.to_envelope())
        return carry_session_cookie(request, response)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=True)
        error = ServerError()
        return JSONResponse(status_code=error.status_code, content=error.to_envelope())


def create_app(
    config: Optional[AppConfig] = None,
    sales_store: Optional[SalesStore] = None,
    rate_limiter: Optional[LoginRateLimiter] = None,
    clock_ms: Callable[[], int] = now_ms,
    monotonic: Callable[[], float] = time.monotonic,
) -> FastAPI:
    """
    Build the application.

    Configuration is validated here, once, before anything is served; an
    invalid session secret raises ConfigError and the process never starts.
    Collaborators can be injected (tests pass fake clocks and temp stores).
    """
    config = config or load_config()
    setup_logging(config.log_level, json_logs=config.is_production)

    session_manager = SessionManager(config, clock=clock_ms)

    app = FastAPI(
        title="Sales Daily Report",
        description="Daily report management for sales teams",
        version=__version__,
    )
    app.state.config = config
    app.state.session_manager = session_manager
    app.state.rate_limiter = rate_limiter or create_login_rate_limiter(clock=monotonic)
    app.state.sales_store = sales_store or SalesStore.in_dir(config.data_dir)

    _register_exception_handlers(app)
    app.add_middleware(PageGateASGI, session_manager=session_manager)

    app.include_router(auth_router)
    app.include_router(sales_router)
    app.include_router(page_router)

    @app.get("/api/health")
    async def health() -> dict:
        return {"status": "success", "data": {"environment": config.environment}}

    logger.info(
        "Application configured",
        environment=config.environment,
        trust_proxy=config.trust_proxy,
    )
    return app
