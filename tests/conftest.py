"""Pytest fixtures."""

from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from cloudguard.config import Settings, get_settings
from cloudguard.database import build_engine, build_session_factory, create_schema
from cloudguard.main import create_app
from cloudguard.repositories.alerts import (
    InMemoryAlertRepository,
    SqlAlchemyAlertRepository,
)
from cloudguard.routers.dependencies import get_alert_manager
from cloudguard.services.alerts import AlertManager
from cloudguard.services.audit import AuditLog


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    """Reset cached settings around each test.

    Yields
    ------
    None
        Clears the settings cache before and after the test.
    """
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def repository() -> InMemoryAlertRepository:
    """Return an empty in-memory repository.

    Returns
    -------
    InMemoryAlertRepository
        Isolated repository.
    """
    return InMemoryAlertRepository()


@pytest.fixture()
def audit_log() -> AuditLog:
    """Return an empty audit log.

    Returns
    -------
    AuditLog
        Isolated audit log with default capacity.
    """
    return AuditLog()


@pytest.fixture()
def manager(repository: InMemoryAlertRepository, audit_log: AuditLog) -> AlertManager:
    """Return a manager over the isolated stores.

    Parameters
    ----------
    repository : InMemoryAlertRepository
        Repository fixture.
    audit_log : AuditLog
        Audit log fixture.

    Returns
    -------
    AlertManager
        Manager under test.
    """
    return AlertManager(repository, audit_log)


@pytest.fixture()
async def sql_repository(tmp_path: Path) -> AsyncIterator[SqlAlchemyAlertRepository]:
    """Create a SQLite-backed repository.

    Parameters
    ----------
    tmp_path : Path
        Temporary directory for the test database.

    Yields
    ------
    SqlAlchemyAlertRepository
        Repository over a fresh schema.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_schema(engine)
    yield SqlAlchemyAlertRepository(build_session_factory(engine))
    await engine.dispose()


@pytest.fixture()
async def client(manager: AlertManager) -> AsyncIterator[AsyncClient]:
    """Create a test HTTP client over the isolated manager.

    Parameters
    ----------
    manager : AlertManager
        Manager fixture served by the application.

    Yields
    ------
    AsyncClient
        Configured test client.
    """
    app = create_app(Settings())
    app.dependency_overrides[get_alert_manager] = lambda: manager
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://testserver",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
