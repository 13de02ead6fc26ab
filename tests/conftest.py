from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from dailyreport.auth.passwords import hash_password
from dailyreport.core.config import AppConfig
from dailyreport.models.sales import SalesRecord
from dailyreport.services.sales_store import SalesStore

MANAGER_PASSWORD = "Manager123!x"
SALES_PASSWORD = "Password123!"


class FakeClock:
    """Controllable time source for sessions (ms) and rate limits (seconds)."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def monotonic(self) -> float:
        return self.now

    def ms(self) -> int:
        return int(self.now * 1000)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(environment="test", data_dir=tmp_path, log_level="WARNING")


@pytest.fixture
def sales_store(config: AppConfig) -> SalesStore:
    store = SalesStore.in_dir(config.data_dir)
    boss = store.create(
        SalesRecord(
            sales_code="MGR001",
            sales_name="Taro Yamada",
            email="yamada@example.com",
            password_hash=hash_password(MANAGER_PASSWORD),
            department="Sales 1",
            is_manager=True,
        )
    )
    store.create(
        SalesRecord(
            sales_code="S001",
            sales_name="Hanako Sato",
            email="sato@example.com",
            password_hash=hash_password(SALES_PASSWORD),
            department="Sales 1",
            manager_id=boss.id,
        )
    )
    return store


def build_client(config: AppConfig, store: SalesStore, clock: FakeClock) -> TestClient:
    from dailyreport_web.app import create_app

    app = create_app(
        config=config,
        sales_store=store,
        clock_ms=clock.ms,
        monotonic=clock.monotonic,
    )
    return TestClient(app)


@pytest.fixture
def client(config: AppConfig, sales_store: SalesStore, clock: FakeClock) -> TestClient:
    return build_client(config, sales_store, clock)


def login(client: TestClient, sales_code: str, password: str, **kwargs):
    return client.post(
        "/api/auth/login",
        json={"sales_code": sales_code, "password": password},
        **kwargs,
    )
