"""Fixtures for tests that drive the full application over ASGI."""

from collections.abc import AsyncGenerator, Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tenantry.api.main import create_app
from tenantry.core.config import Settings
from tenantry.domain.tenant import TenantRegistry
from tenantry.domain.users import NewUser, UserRecord

BASE_URL = "http://tenant.test"


class TeapotError(Exception):
    """Unhandled error that carries its own status code."""

    status_code = 418


class BrokenStore:
    """User store whose database is unreachable."""

    async def create(self, user: NewUser) -> UserRecord:
        raise ConnectionError("could not connect to server at 10.0.0.5")


def add_failing_routes(app: FastAPI) -> None:
    """Routes that raise, to exercise the unhandled error path."""

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("kaboom")

    @app.get("/teapot")
    async def teapot() -> None:
        raise TeapotError


type AppFactory = Callable[..., FastAPI]


@pytest.fixture
def make_app() -> AppFactory:
    """Build an app with test-only failing routes."""

    def factory(
        settings: Settings | None = None, registry: TenantRegistry | None = None
    ) -> FastAPI:
        app = create_app(settings or Settings(), registry=registry)
        add_failing_routes(app)
        return app

    return factory


type ClientFactory = Callable[..., AsyncClient]


def client_for(app: FastAPI, base_url: str = BASE_URL) -> AsyncClient:
    """An HTTP client talking to ``app`` in process.

    Server errors are answered by the app instead of re-raised, as they
    would be behind a real server.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    return AsyncClient(transport=transport, base_url=base_url)


@pytest.fixture
def make_client() -> ClientFactory:
    """Build clients for apps other than the default one."""
    return client_for


@pytest.fixture
def app(make_app: AppFactory) -> FastAPI:
    """Application with default development settings."""
    return make_app()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Client for the default application."""
    async with client_for(app) as async_client:
        yield async_client


@pytest.fixture
def broken_registry() -> TenantRegistry:
    """Registry whose tenants cannot store users."""
    return TenantRegistry(lambda _domain: BrokenStore())
