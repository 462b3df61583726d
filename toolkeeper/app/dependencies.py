"""Shared FastAPI dependencies for ToolKeeper request handlers.

Each request gets its own persistence session, released when the request
finishes (committed on success, rolled back on failure), and fresh service
instances resolved from the container's registry.
"""

from __future__ import annotations

import sqlite3
from typing import Annotated, Iterator

from fastapi import Depends, Request

from toolkeeper.app.container import AppContainer
from toolkeeper.services import (AbstractEmployeeService,
                                 AbstractToolKitService, AbstractToolService)

__all__ = [
    "get_container",
    "get_session",
    "get_employee_service",
    "get_tool_kit_service",
    "get_tool_service",
    "ContainerDep",
    "SessionDep",
    "EmployeeServiceDep",
    "ToolKitServiceDep",
    "ToolServiceDep",
]


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


ContainerDep = Annotated[AppContainer, Depends(get_container)]


def get_session(container: ContainerDep) -> Iterator[sqlite3.Connection]:
    """Provide a connection owned by the current request."""

    with container.session_factory.session() as conn:
        yield conn


# Released before the response is sent; a failed commit becomes an error response.
SessionDep = Annotated[sqlite3.Connection, Depends(get_session, scope="function")]


def get_employee_service(
    container: ContainerDep, session: SessionDep
) -> AbstractEmployeeService:
    return container.services.create(AbstractEmployeeService, session)


def get_tool_kit_service(
    container: ContainerDep, session: SessionDep
) -> AbstractToolKitService:
    return container.services.create(AbstractToolKitService, session)


def get_tool_service(
    container: ContainerDep, session: SessionDep
) -> AbstractToolService:
    return container.services.create(AbstractToolService, session)


# Annotated dependency types for route signatures
EmployeeServiceDep = Annotated[AbstractEmployeeService, Depends(get_employee_service)]
ToolKitServiceDep = Annotated[AbstractToolKitService, Depends(get_tool_kit_service)]
ToolServiceDep = Annotated[AbstractToolService, Depends(get_tool_service)]
