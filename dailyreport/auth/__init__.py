"""Authentication: passwords, rate limiting, sessions and guards"""

from .guards import AuthResult, require_authenticated, require_manager
from .passwords import PasswordValidation, hash_password, validate_password, verify_password
from .rate_limiter import (
    ConsumeResult,
    InMemoryRateLimitStore,
    LoginRateLimiter,
    RateLimitStore,
    create_login_rate_limiter,
    get_client_ip,
)
from .session import FernetSessionCodec, Session, SessionCodec, SessionManager

__all__ = [
    "AuthResult",
    "require_authenticated",
    "require_manager",
    "PasswordValidation",
    "hash_password",
    "validate_password",
    "verify_password",
    "ConsumeResult",
    "InMemoryRateLimitStore",
    "LoginRateLimiter",
    "RateLimitStore",
    "create_login_rate_limiter",
    "get_client_ip",
    "FernetSessionCodec",
    "Session",
    "SessionCodec",
    "SessionManager",
]
