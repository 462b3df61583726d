"""Startup sequence for the ToolKeeper service.

The orchestrator walks a fixed sequence of states, each the precondition of
the next::

    COMPOSE -> PROBE -> MIGRATE -> ASSEMBLE -> SERVE

- COMPOSE builds the container. Failure is fatal.
- PROBE sends one health request to the model API. The outcome is reported
  on stdout and in the log and never changes control flow; there is no retry.
- MIGRATE applies pending schema migrations. Failure is fatal.
- ASSEMBLE builds the FastAPI application and its middleware pipeline.
- SERVE runs uvicorn until the process is stopped.

Probe and migrate run once, sequentially, in the same event loop that then
serves requests, so no request is accepted before assembly completes.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol, TextIO

import uvicorn
from fastapi import FastAPI

from toolkeeper.app.api import create_app
from toolkeeper.app.config import ServerSettings, Settings
from toolkeeper.app.container import AppContainer, compose
from toolkeeper.infrastructure.db import SchemaMigrator
from toolkeeper.infrastructure.http import (MODEL_API_CLIENT, ProbeResult,
                                            probe_health)


class StartupState(str, Enum):
    COMPOSE = "compose"
    PROBE = "probe"
    MIGRATE = "migrate"
    ASSEMBLE = "assemble"
    SERVE = "serve"


class StartupError(Exception):
    """Raised when a fatal startup state fails; the process must not serve."""

    def __init__(self, state: StartupState, cause: BaseException) -> None:
        super().__init__(f"Startup failed during {state.value}: {cause}")
        self.state = state
        self.cause = cause


class Server(Protocol):
    async def serve(self) -> Any: ...


ServerFactory = Callable[[FastAPI, ServerSettings], Server]
Composer = Callable[[Settings, logging.Logger], AppContainer]


def uvicorn_server(app: FastAPI, server: ServerSettings) -> uvicorn.Server:
    """Build a uvicorn server that logs through the application's handlers."""
    config = uvicorn.Config(app, host=server.host, port=server.port, log_config=None)
    return uvicorn.Server(config)


def migrate(container: AppContainer) -> list[str]:
    """Apply pending migrations on a session of their own."""
    with container.session_factory.session() as conn:
        return SchemaMigrator(conn).apply_pending()


class StartupOrchestrator:
    """Runs the startup sequence for already bound settings.

    Args:
        settings: Bound settings.
        logger: Application logger from the logging subsystem.
        stdout: Stream receiving the settings dump and probe output.
        composer: Builds the container; tests pass a stub.
        server_factory: Builds the server for the SERVE state.
    """

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        *,
        stdout: TextIO | None = None,
        composer: Composer = compose,
        server_factory: ServerFactory = uvicorn_server,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.stdout = stdout if stdout is not None else sys.stdout
        self.composer = composer
        self.server_factory = server_factory
        self.history: list[StartupState] = []
        self.probe_result: ProbeResult | None = None
        self.applied_migrations: list[str] = []
        self.app: FastAPI | None = None

    @property
    def state(self) -> StartupState | None:
        return self.history[-1] if self.history else None

    def _enter(self, state: StartupState) -> None:
        self.history.append(state)
        self.logger.debug("Startup state: %s", state.value)

    def _echo(self, text: str) -> None:
        print(text, file=self.stdout, flush=True)

    def _fail(self, state: StartupState, exc: BaseException) -> StartupError:
        self.logger.critical("Startup aborted during %s: %s", state.value, exc)
        return StartupError(state, exc)

    # -------------------- states --------------------
    def compose(self) -> AppContainer:
        self._enter(StartupState.COMPOSE)
        try:
            return self.composer(self.settings, self.logger)
        except Exception as exc:
            raise self._fail(StartupState.COMPOSE, exc) from exc

    async def probe(self, container: AppContainer) -> ProbeResult:
        self._enter(StartupState.PROBE)
        self._echo(container.settings.model_dump_json())
        model_api = container.settings.app.model_api
        try:
            client = container.clients.get(MODEL_API_CLIENT)
            result = await probe_health(client, model_api.health_path)
        except Exception as exc:
            # The probe is diagnostic only; nothing it raises may stop startup.
            result = ProbeResult(ok=False, error=str(exc) or type(exc).__name__)
        if result.body:
            self._echo(result.body)
        if result.ok:
            self.logger.info("Model API health check succeeded (%s)", result.status_code)
        else:
            self._echo(result.message)
            self.logger.warning("Model API health check failed: %s", result.message)
        self.probe_result = result
        return result

    def migrate(self, container: AppContainer) -> list[str]:
        self._enter(StartupState.MIGRATE)
        try:
            applied = migrate(container)
        except Exception as exc:
            raise self._fail(StartupState.MIGRATE, exc) from exc
        if applied:
            self.logger.info("Applied %d migration(s): %s", len(applied), ", ".join(applied))
        else:
            self.logger.info("Database schema is up to date")
        self.applied_migrations = applied
        return applied

    def assemble(self, container: AppContainer) -> FastAPI:
        self._enter(StartupState.ASSEMBLE)
        try:
            self.app = create_app(container)
        except Exception as exc:
            raise self._fail(StartupState.ASSEMBLE, exc) from exc
        return self.app

    async def serve(self, app: FastAPI) -> None:
        self._enter(StartupState.SERVE)
        server = self.server_factory(app, self.settings.server)
        self.logger.info(
            "Serving on %s:%s", self.settings.server.host, self.settings.server.port
        )
        try:
            await server.serve()
        except (Exception, SystemExit) as exc:
            # uvicorn reports a failed bind with sys.exit(1).
            raise self._fail(StartupState.SERVE, exc) from exc

    # -------------------- sequence --------------------
    async def run(self) -> None:
        """Run every state in order; returns when the server stops."""
        container = self.compose()
        try:
            await self.probe(container)
            self.migrate(container)
            app = self.assemble(container)
            await self.serve(app)
        finally:
            await container.aclose()


__all__ = [
    "StartupError",
    "StartupOrchestrator",
    "StartupState",
    "migrate",
    "uvicorn_server",
]
