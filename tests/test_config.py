import pytest

from dailyreport.core.config import (
    DEVELOPMENT_SESSION_SECRET,
    SESSION_SECRET_MIN_LENGTH,
    ConfigErr,
    ConfigOk,
    load_config,
    validate_config,
)
from dailyreport.utils.exceptions import ConfigError

STRONG_SECRET = "s" * SESSION_SECRET_MIN_LENGTH


def test_production_requires_secret():
    result = validate_config({"ENVIRONMENT": "production"})
    assert isinstance(result, ConfigErr)
    assert "SESSION_SECRET" in result.reason


def test_short_secret_is_fatal_everywhere():
    for environment in ("development", "test", "production"):
        result = validate_config({"ENVIRONMENT": environment, "SESSION_SECRET": "short"})
        assert isinstance(result, ConfigErr), environment
        assert "at least 32" in result.reason


def test_development_falls_back_with_warning():
    result = validate_config({})
    assert isinstance(result, ConfigOk)
    assert result.config.environment == "development"
    assert result.config.session_secret == DEVELOPMENT_SESSION_SECRET
    assert len(result.config.session_secret) >= SESSION_SECRET_MIN_LENGTH
    assert result.warnings


def test_production_with_secret():
    result = validate_config(
        {"ENVIRONMENT": "Production", "SESSION_SECRET": STRONG_SECRET, "TRUST_PROXY": "TRUE"}
    )
    assert isinstance(result, ConfigOk)
    assert result.config.is_production
    assert result.config.trust_proxy is True
    assert result.config.session_secret == STRONG_SECRET
    assert result.warnings == ()


def test_trust_proxy_defaults_off():
    result = validate_config({"TRUST_PROXY": "yes"})
    assert result.config.trust_proxy is False


def test_load_config_fails_fast():
    with pytest.raises(ConfigError):
        load_config({"ENVIRONMENT": "production"})


def test_load_config_returns_config():
    config = load_config({"SESSION_SECRET": STRONG_SECRET, "DATA_DIR": "/tmp/reports"})
    assert config.session_secret == STRONG_SECRET
    assert str(config.data_dir) == "/tmp/reports"
