import pytest

from dailyreport.auth.guards import require_authenticated, require_manager
from dailyreport.auth.models import SessionUser
from dailyreport.auth.session import SessionManager
from dailyreport.core.config import AppConfig


@pytest.fixture
def manager(clock):
    return SessionManager(AppConfig(environment="test"), clock=clock.ms)


def logged_in(manager, is_manager=False):
    session = manager.open(None)
    manager.set_data(
        session,
        SessionUser(
            sales_id="id-1",
            sales_code="S001",
            sales_name="Hanako Sato",
            email="sato@example.com",
            department="Sales 1",
            is_manager=is_manager,
        ),
    )
    return session


def test_anonymous_is_rejected_with_401(manager):
    result = require_authenticated(manager, manager.open(None))
    assert not result.ok
    assert result.status_code == 401
    assert result.payload == {
        "status": "error",
        "error": {"code": "AUTH_UNAUTHORIZED", "message": "Authentication is required"},
    }


def test_authenticated_session_is_refreshed(manager, clock):
    session = logged_in(manager)
    clock.advance(900)

    result = require_authenticated(manager, session)

    assert result.ok
    assert result.payload is None
    assert result.session.sales_id == "id-1"
    assert result.session.expires_at == clock.ms() + 1800 * 1000


def test_expired_session_is_rejected(manager, clock):
    session = logged_in(manager)
    clock.advance(1800)
    assert require_authenticated(manager, session).status_code == 401


def test_manager_guard_forbids_non_managers(manager):
    result = require_manager(manager, logged_in(manager, is_manager=False))
    assert result.status_code == 403
    assert result.payload["error"]["code"] == "AUTH_FORBIDDEN"


def test_manager_guard_propagates_401(manager):
    result = require_manager(manager, manager.open(None))
    assert result.status_code == 401


def test_manager_guard_passes_managers(manager):
    result = require_manager(manager, logged_in(manager, is_manager=True))
    assert result.ok
    assert result.session.is_manager is True


class ExplodingManager(SessionManager):
    def is_valid(self, session):
        raise RuntimeError("boom")


def test_unexpected_failure_becomes_500(clock):
    manager = ExplodingManager(AppConfig(environment="test"), clock=clock.ms)
    result = require_authenticated(manager, manager.open(None))
    assert result.status_code == 500
    assert result.payload["error"]["code"] == "SERVER_ERROR"
