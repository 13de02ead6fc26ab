"""
Application configuration.

All values are loaded from environment variables (typically via .env):

- ENVIRONMENT      development | test | production (default: development)
- SESSION_SECRET   session cookie key, at least 32 characters
                   (required when ENVIRONMENT=production)
- TRUST_PROXY      "true" to key login rate limits on X-Forwarded-For / X-Real-IP
- DATA_DIR         directory holding the JSON record store (default: data)
- LOG_LEVEL        logging level (default: INFO)
- ALLOW_SEED       "true" to allow scripts/seed_sales.py in production

validate_config() is side-effect free and returns ConfigOk or ConfigErr so
the startup checks can be exercised with a plain dict. load_config() is the
process-start wrapper that reads os.environ and fails fast.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple, Union

from dotenv import load_dotenv

from dailyreport.utils.exceptions import ConfigError
from dailyreport.utils.logger import get_logger

logger = get_logger(__name__)

SESSION_SECRET_MIN_LENGTH = 32
SESSION_COOKIE_NAME = "sales_daily_report_session"
SESSION_TIMEOUT_SECONDS = 30 * 60

# Only ever used outside production
DEVELOPMENT_SESSION_SECRET = "complex_password_at_least_32_characters_long_for_development"

PRODUCTION = "production"


@dataclass(frozen=True)
class AppConfig:
    environment: str = "development"
    session_secret: str = DEVELOPMENT_SESSION_SECRET
    trust_proxy: bool = False
    cookie_name: str = SESSION_COOKIE_NAME
    session_timeout_seconds: int = SESSION_TIMEOUT_SECONDS
    data_dir: Path = Path("data")
    log_level: str = "INFO"
    allow_seed: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment == PRODUCTION


@dataclass(frozen=True)
class ConfigOk:
    config: AppConfig
    warnings: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ConfigErr:
    reason: str


ConfigResult = Union[ConfigOk, ConfigErr]


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def validate_config(env: Mapping[str, str]) -> ConfigResult:
    """
    Build an AppConfig from an environment mapping.

    A missing secret is fatal in production and replaced by the development
    fallback elsewhere. A secret shorter than 32 characters is fatal in
    every environment.
    """
    environment = (env.get("ENVIRONMENT") or "development").strip().lower()
    secret = env.get("SESSION_SECRET") or ""
    warnings: list[str] = []

    if not secret:
        if environment == PRODUCTION:
            return ConfigErr(
                "SESSION_SECRET environment variable must be set in production. "
                f"Generate a strong random string with at least {SESSION_SECRET_MIN_LENGTH} characters."
            )
        secret = DEVELOPMENT_SESSION_SECRET
        warnings.append(
            "SESSION_SECRET is not set; using the built-in development key. "
            "Never run like this in production."
        )
    elif len(secret) < SESSION_SECRET_MIN_LENGTH:
        return ConfigErr(
            f"SESSION_SECRET must be at least {SESSION_SECRET_MIN_LENGTH} characters long. "
            f"Current length: {len(secret)}."
        )

    config = AppConfig(
        environment=environment,
        session_secret=secret,
        trust_proxy=_flag(env.get("TRUST_PROXY")),
        data_dir=Path(env.get("DATA_DIR") or "data"),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        allow_seed=_flag(env.get("ALLOW_SEED")),
    )
    return ConfigOk(config=config, warnings=tuple(warnings))


def load_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Validate configuration once at process start.

    Reads .env into the process environment when no mapping is given.
    Raises ConfigError instead of starting with a weak or missing key.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    result = validate_config(env)
    if isinstance(result, ConfigErr):
        raise ConfigError(result.reason)

    for warning in result.warnings:
        logger.warning(warning, environment=result.config.environment)
    return result.config
