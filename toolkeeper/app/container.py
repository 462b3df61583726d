"""Composition root for ToolKeeper.

Builds, once per process, every long-lived collaborator the request pipeline
needs and wires them together explicitly:

- the bound :class:`~toolkeeper.app.config.Settings`;
- the application logger;
- the named outbound HTTP clients;
- the persistence session factory;
- the service registry mapping abstract capabilities to concrete services.

Anything that fails here is a startup-fatal wiring problem; nothing is
resolved lazily at request time.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from toolkeeper.app.config import Settings
from toolkeeper.infrastructure.db import SessionFactory, SqliteSessionFactory
from toolkeeper.infrastructure.db.repositories import (EmployeeRepository,
                                                       ToolKitRepository,
                                                       ToolRepository)
from toolkeeper.infrastructure.http import (MODEL_API_CLIENT,
                                            NamedClientFactory,
                                            build_base_url)
from toolkeeper.services import (AbstractEmployeeService,
                                 AbstractToolKitService, AbstractToolService,
                                 EmployeeService, ToolKitService, ToolService)

T = TypeVar("T")
ServiceFactory = Callable[[sqlite3.Connection], Any]

# Capabilities the route handlers resolve per request.
REQUIRED_CAPABILITIES: tuple[type, ...] = (
    AbstractEmployeeService,
    AbstractToolKitService,
    AbstractToolService,
)


class CompositionError(Exception):
    """Raised when the dependency graph cannot be built."""


class DuplicateBindingError(CompositionError):
    """Raised when a capability is bound more than once."""


class MissingBindingError(CompositionError):
    """Raised when a required capability has no binding."""


class ServiceRegistry:
    """Maps abstract capabilities to factories of concrete services.

    Bindings are transient: :meth:`create` builds a fresh instance each time,
    on top of the session owned by the caller's unit of work.
    """

    def __init__(self) -> None:
        self._bindings: dict[type, ServiceFactory] = {}

    def bind(self, capability: type[T], factory: Callable[[sqlite3.Connection], T]) -> None:
        if capability in self._bindings:
            raise DuplicateBindingError(f"{capability.__name__} is already bound")
        self._bindings[capability] = factory

    def is_bound(self, capability: type) -> bool:
        return capability in self._bindings

    def require(self, capabilities: Iterable[type]) -> None:
        """Fail unless every capability in ``capabilities`` has a binding."""
        missing = [c.__name__ for c in capabilities if c not in self._bindings]
        if missing:
            raise MissingBindingError("No binding for: " + ", ".join(missing))

    def create(self, capability: type[T], session: sqlite3.Connection) -> T:
        try:
            factory = self._bindings[capability]
        except KeyError:
            raise MissingBindingError(f"No binding for: {capability.__name__}") from None
        return factory(session)


def register_domain_services(registry: ServiceRegistry) -> ServiceRegistry:
    """Bind the tool kit, tool and employee services."""
    registry.bind(
        AbstractEmployeeService,
        lambda conn: EmployeeService(EmployeeRepository(conn)),
    )
    registry.bind(
        AbstractToolKitService,
        lambda conn: ToolKitService(
            ToolKitRepository(conn), EmployeeRepository(conn), ToolRepository(conn)
        ),
    )
    registry.bind(
        AbstractToolService,
        lambda conn: ToolService(ToolRepository(conn), ToolKitRepository(conn)),
    )
    return registry


def build_named_clients(
    settings: Settings, clients: NamedClientFactory | None = None
) -> NamedClientFactory:
    """Register the model API client; its base address is fixed here."""
    clients = clients if clients is not None else NamedClientFactory()
    model_api = settings.app.model_api
    clients.register(
        MODEL_API_CLIENT,
        build_base_url(model_api.host, model_api.port),
        timeout=model_api.timeout_seconds,
    )
    return clients


def build_session_factory(settings: Settings) -> SqliteSessionFactory:
    return SqliteSessionFactory.from_connection_string(settings.connection_strings.default)


@dataclass(frozen=True)
class AppContainer:
    """Long-lived collaborators shared by the whole process."""

    settings: Settings
    logger: logging.Logger
    clients: NamedClientFactory
    session_factory: SessionFactory
    services: ServiceRegistry

    async def aclose(self) -> None:
        await self.clients.aclose()


def compose(
    settings: Settings,
    logger: logging.Logger,
    *,
    clients: NamedClientFactory | None = None,
    session_factory: SessionFactory | None = None,
    services: ServiceRegistry | None = None,
) -> AppContainer:
    """Build the application container.

    The keyword arguments replace individual collaborators, which is how
    tests swap the network transport or the persistence backend.

    Raises:
        CompositionError: If any collaborator cannot be built or a required
            capability is left unbound.
    """
    try:
        registry = services if services is not None else register_domain_services(ServiceRegistry())
        registry.require(REQUIRED_CAPABILITIES)
        factory = session_factory if session_factory is not None else build_session_factory(settings)
        named_clients = build_named_clients(settings, clients)
    except CompositionError:
        raise
    except Exception as exc:
        raise CompositionError(str(exc)) from exc
    return AppContainer(
        settings=settings,
        logger=logger,
        clients=named_clients,
        session_factory=factory,
        services=registry,
    )


__all__ = [
    "AppContainer",
    "CompositionError",
    "DuplicateBindingError",
    "MissingBindingError",
    "REQUIRED_CAPABILITIES",
    "ServiceRegistry",
    "build_named_clients",
    "build_session_factory",
    "compose",
    "register_domain_services",
]
