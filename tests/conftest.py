"""Pytest configuration and fixtures."""

from collections.abc import Callable, Generator
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from inventory_service.api.v1.admin import get_job_gate
from inventory_service.config import Settings
from inventory_service.infrastructure.database.connection import get_session_factory
from inventory_service.infrastructure.database.models import Base, CronJob, Product
from inventory_service.main import create_app
from inventory_service.services.job_dispatch import JobDispatcher, get_job_dispatcher
from inventory_service.services.job_gate import JobGate
from shared.constants import SYNC_NEXT_7_DAYS, SYNC_NEXT_30_DAYS, SYNC_TODAY


class FakeCelery:
    """Records send_task calls instead of talking to a broker."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    def send_task(
        self, name: str, args: Any = None, kwargs: Any = None, queue: Any = None
    ) -> Any:
        self.sent.append({"name": name, "args": args, "kwargs": kwargs, "queue": queue})
        return SimpleNamespace(id=f"task-{len(self.sent)}")


@pytest.fixture
def test_settings() -> Settings:
    """Get test settings with overrides."""
    return Settings(
        app_env="test",
        debug=True,
        postgres_host="localhost",
        postgres_port=5432,
        postgres_user="test",
        postgres_password="test",
        postgres_db="test_db",
        redis_host="localhost",
        redis_port=6379,
        provider_api_base_url="https://provider.test",
        provider_api_key="test-key",
    )


@pytest.fixture
def sync_engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """SQLite database file with the full schema created."""
    engine = create_engine(f"sqlite:///{tmp_path / 'inventory.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sync_engine: Engine) -> async_sessionmaker[AsyncSession]:
    """Async session factory on the same SQLite file.

    NullPool opens a fresh connection per session, so sessions work from
    any event loop, including the one TestClient runs the app on.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{sync_engine.url.database}", poolclass=NullPool
    )
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def seed(sync_engine: Engine) -> Callable[..., None]:
    """Insert model instances synchronously."""

    def _seed(*rows: Any) -> None:
        with Session(sync_engine) as session:
            session.add_all(rows)
            session.commit()

    return _seed


@pytest.fixture
def seeded_jobs(seed: Callable[..., None]) -> None:
    """The three scheduled sync jobs, with syncToday disabled."""
    seed(
        CronJob(name=SYNC_NEXT_30_DAYS, is_enabled=True),
        CronJob(name=SYNC_NEXT_7_DAYS, is_enabled=True, last_executed=datetime(2024, 1, 1)),
        CronJob(name=SYNC_TODAY, is_enabled=False),
    )


@pytest.fixture
def seeded_products(seed: Callable[..., None]) -> None:
    seed(
        Product(id=14, name="City walking tour", available_days=["MONDAY", "WEDNESDAY"]),
        Product(id=15, name="Harbour cruise", available_days=["SATURDAY", "SUNDAY"]),
    )


@pytest.fixture
def fake_celery() -> FakeCelery:
    return FakeCelery()


@pytest.fixture
def app(
    test_settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    fake_celery: FakeCelery,
) -> Any:
    """Create test application wired to SQLite and a fake Celery producer."""
    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_job_gate] = lambda: JobGate(session_factory)
    app.dependency_overrides[get_job_dispatcher] = lambda: JobDispatcher(
        fake_celery, test_settings.sync_max_horizon_days
    )
    return app


@pytest.fixture
def client(app: Any) -> TestClient:
    """Create synchronous test client."""
    return TestClient(app)


@pytest.fixture
def slot_payload() -> dict[str, Any]:
    """A provider slot with two pax types."""
    return {
        "startDate": "2024-01-08",
        "startTime": "09:00",
        "endTime": "11:00",
        "providerSlotId": "slot-14-20240108-0900",
        "remaining": 20,
        "currencyCode": "EUR",
        "paxAvailability": [
            {
                "type": "ADULT",
                "name": "Adult",
                "description": "Ages 18+",
                "min": 1,
                "max": 10,
                "remaining": 12,
                "price": {
                    "finalPrice": 45.0,
                    "originalPrice": 50.0,
                    "currencyCode": "EUR",
                    "discount": 5.0,
                },
            },
            {
                "type": "CHILD",
                "name": "Child",
                "remaining": 8,
                "price": {
                    "finalPrice": 20.0,
                    "originalPrice": 20.0,
                    "currencyCode": "EUR",
                },
            },
        ],
    }
