from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from toolkeeper.app.api import create_app
from toolkeeper.app.config import Settings, bind_settings
from toolkeeper.app.container import AppContainer, compose
from toolkeeper.app.startup import migrate
from toolkeeper.infrastructure.http import NamedClientFactory

TEST_LOGGER = "toolkeeper.tests"


def make_settings_data(tmp_path: Path, **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "app": {"model_api": {"host": "http://model", "port": 8001}},
        "connection_strings": {"default": f"sqlite:///{tmp_path / 'toolkeeper.db'}"},
        "logging": {"directory": str(tmp_path / "Logs")},
    }
    data.update(overrides)
    return data


def healthy_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"status": "ok"})


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return bind_settings(make_settings_data(tmp_path))


@pytest.fixture
def test_logger() -> logging.Logger:
    return logging.getLogger(TEST_LOGGER)


@pytest.fixture
def compose_with_transport(test_logger):
    """Return a composer whose model API client uses ``handler``."""

    def _factory(handler: Callable[[httpx.Request], httpx.Response] = healthy_handler):
        def _compose(settings: Settings, logger: logging.Logger) -> AppContainer:
            clients = NamedClientFactory(transport=httpx.MockTransport(handler))
            return compose(settings, logger, clients=clients)

        return _compose

    return _factory


@pytest.fixture
def container(settings, test_logger, compose_with_transport):
    built = compose_with_transport()(settings, test_logger)
    yield built
    asyncio.run(built.aclose())


@pytest.fixture
def migrated_container(container):
    migrate(container)
    return container


@pytest.fixture
def app(migrated_container):
    return create_app(migrated_container)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
