"""Unit tests for engine and session lifecycle."""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytest_mock import MockerFixture
from sqlalchemy.exc import OperationalError

from tenantry.infrastructure.database import session as session_module
from tenantry.infrastructure.database.session import (
    _holder,
    check_database_connection,
    close_database,
    create_database_engine,
    get_async_session,
)


@pytest.fixture(autouse=True)
def reset_manager() -> Generator[None]:
    """Forget engines created by other tests."""
    _holder.forget()
    yield
    _holder.forget()


@pytest.fixture
def mock_session(mocker: MockerFixture) -> MagicMock:
    """Session returned by a patched session factory."""
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=session)
    context.__aexit__ = AsyncMock(return_value=False)
    factory = MagicMock(return_value=context)
    mocker.patch.object(session_module, "get_session_factory", return_value=factory)
    return session


@pytest.mark.unit
class TestGetAsyncSession:
    """Transaction handling of the session context manager."""

    async def test_commits_on_success(self, mock_session: MagicMock) -> None:
        """Leaving the block normally commits."""
        async with get_async_session() as session:
            assert session is mock_session

        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_awaited()

    async def test_rolls_back_on_error(self, mock_session: MagicMock) -> None:
        """An exception rolls back and propagates."""
        with pytest.raises(RuntimeError, match="boom"):
            async with get_async_session():
                raise RuntimeError("boom")

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()


@pytest.mark.unit
class TestEngine:
    """Engine creation and disposal."""

    async def test_pool_settings(self) -> None:
        """The engine uses the configured pool size without connecting."""
        engine = create_database_engine()
        try:
            assert engine.pool.size() == 10  # type: ignore[attr-defined]
            assert engine.url.drivername == "postgresql+asyncpg"
        finally:
            await engine.dispose()

    async def test_engine_is_shared_until_closed(self) -> None:
        """The manager hands out one engine until the database is closed."""
        engine = _holder.engine

        assert _holder.engine is engine
        assert _holder.sessions is _holder.sessions

        await close_database()

        assert _holder.engine is not engine
        await close_database()


@pytest.mark.unit
async def test_check_connection_reports_failure(mocker: MockerFixture) -> None:
    """Connection errors are reported instead of raised."""
    engine = MagicMock()
    engine.connect.side_effect = OperationalError(
        "SELECT 1", {}, Exception("connection refused")
    )
    mocker.patch.object(session_module, "get_engine", return_value=engine)

    is_healthy, error = await check_database_connection()

    assert is_healthy is False
    assert error is not None
    assert "connection refused" in error
