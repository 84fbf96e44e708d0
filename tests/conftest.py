"""Shared pytest fixtures."""

from collections.abc import AsyncGenerator, Callable, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from sessionapi.app import App
from sessionapi.config import Config
from sessionapi.core.core import Core
from sessionapi.web.server import create_fastapi_app

ADMIN_LOGIN = "admin"
ADMIN_PASSWORD = "publish"


def build_config(**overrides: object) -> Config:
    """Build a memory-backed config that ignores .env and environment leftovers."""
    values: dict[str, object] = {
        "database_url": "memory://",
        "api_prefix": "/api/v2",
        "session_cookie_name": "SESSIONAPI_SID",
        "admin_username": ADMIN_LOGIN,
        "admin_password": ADMIN_PASSWORD,
    }
    values.update(overrides)
    return Config(_env_file=None, **values)  # type: ignore[call-arg]


@pytest.fixture
def make_config() -> Callable[..., Config]:
    """Factory for configs with overridden settings."""
    return build_config


@pytest.fixture
def config(make_config: Callable[..., Config]) -> Config:
    return make_config()


@pytest_asyncio.fixture
async def core(config: Config) -> AsyncGenerator[Core]:
    """Started Core on the memory backend."""
    core = Core(config)
    async with core.lifespan():
        yield core


@pytest_asyncio.fixture
async def app(config: Config) -> AsyncGenerator[App]:
    app = App(config)
    async with app.lifespan():
        yield app


@pytest.fixture
def client(config: Config) -> Generator[TestClient]:
    """HTTP client against a freshly started application."""
    with TestClient(create_fastapi_app(App(config), config)) as client:
        yield client
