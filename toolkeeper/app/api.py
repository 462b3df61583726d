"""FastAPI application exposing the ToolKeeper services.

The application is assembled by :func:`create_app` from a composed
:class:`~toolkeeper.app.container.AppContainer`; the startup orchestrator
calls it once migrations have been applied.
"""

from __future__ import annotations

from fastapi import APIRouter, FastAPI, Query, status
from fastapi.middleware.cors import CORSMiddleware

from toolkeeper import __version__
from toolkeeper.app.config import CorsSettings
from toolkeeper.app.container import AppContainer
from toolkeeper.app.dependencies import (EmployeeServiceDep, ToolKitServiceDep,
                                         ToolServiceDep)
from toolkeeper.app.middleware import ErrorHandlingMiddleware
from toolkeeper.services.dto import (EmployeeCreateDTO, EmployeeDTO,
                                     ToolCreateDTO, ToolDTO, ToolKitAssignDTO,
                                     ToolKitCreateDTO, ToolKitDetailDTO,
                                     ToolKitDTO, ToolMoveDTO)

employees_router = APIRouter(prefix="/api/employees", tags=["employees"])
tool_kits_router = APIRouter(prefix="/api/tool-kits", tags=["tool-kits"])
tools_router = APIRouter(prefix="/api/tools", tags=["tools"])
meta_router = APIRouter(tags=["meta"])


@meta_router.get("/")
async def root():
    """API root endpoint with welcome message and links."""
    return {
        "name": "ToolKeeper API",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "employees": "/api/employees",
            "tool_kits": "/api/tool-kits",
            "tools": "/api/tools",
            "health": "/health",
        },
    }


@meta_router.get("/health")
async def health():
    """Liveness endpoint for orchestrators and load balancers."""
    return {"status": "ok", "service": "toolkeeper"}


# --- Employees ---


@employees_router.get("", response_model=list[EmployeeDTO])
def list_employees(service: EmployeeServiceDep) -> list[EmployeeDTO]:
    return service.list_employees()


@employees_router.get("/{employee_id}", response_model=EmployeeDTO)
def get_employee(employee_id: int, service: EmployeeServiceDep) -> EmployeeDTO:
    return service.get_employee(employee_id)


@employees_router.post("", response_model=EmployeeDTO, status_code=status.HTTP_201_CREATED)
def create_employee(payload: EmployeeCreateDTO, service: EmployeeServiceDep) -> EmployeeDTO:
    return service.create_employee(payload)


# --- Tool kits ---


@tool_kits_router.get("", response_model=list[ToolKitDTO])
def list_tool_kits(
    service: ToolKitServiceDep,
    employee_id: int | None = Query(None, description="Only kits issued to this employee"),
) -> list[ToolKitDTO]:
    return service.list_tool_kits(employee_id=employee_id)


@tool_kits_router.get("/{tool_kit_id}", response_model=ToolKitDetailDTO)
def get_tool_kit(tool_kit_id: int, service: ToolKitServiceDep) -> ToolKitDetailDTO:
    return service.get_tool_kit(tool_kit_id)


@tool_kits_router.post("", response_model=ToolKitDTO, status_code=status.HTTP_201_CREATED)
def create_tool_kit(payload: ToolKitCreateDTO, service: ToolKitServiceDep) -> ToolKitDTO:
    return service.create_tool_kit(payload)


@tool_kits_router.put("/{tool_kit_id}/employee", response_model=ToolKitDTO)
def assign_tool_kit(
    tool_kit_id: int, payload: ToolKitAssignDTO, service: ToolKitServiceDep
) -> ToolKitDTO:
    """Issue a kit to an employee, or return it when ``employee_id`` is null."""
    return service.assign_employee(tool_kit_id, payload.employee_id)


# --- Tools ---


@tools_router.get("", response_model=list[ToolDTO])
def list_tools(
    service: ToolServiceDep,
    tool_kit_id: int | None = Query(None, description="Only tools in this kit"),
) -> list[ToolDTO]:
    return service.list_tools(tool_kit_id=tool_kit_id)


@tools_router.get("/{tool_id}", response_model=ToolDTO)
def get_tool(tool_id: int, service: ToolServiceDep) -> ToolDTO:
    return service.get_tool(tool_id)


@tools_router.post("", response_model=ToolDTO, status_code=status.HTTP_201_CREATED)
def create_tool(payload: ToolCreateDTO, service: ToolServiceDep) -> ToolDTO:
    return service.create_tool(payload)


@tools_router.put("/{tool_id}/tool-kit", response_model=ToolDTO)
def move_tool(tool_id: int, payload: ToolMoveDTO, service: ToolServiceDep) -> ToolDTO:
    return service.move_tool(tool_id, payload.tool_kit_id)


ROUTERS = (meta_router, employees_router, tool_kits_router, tools_router)


def add_cors(app: FastAPI, cors: CorsSettings) -> None:
    # Browsers reject a wildcard origin combined with credentials.
    allow_all_origins = "*" in cors.allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.allowed_origins,
        allow_credentials=not allow_all_origins,
        allow_methods=cors.allowed_methods,
        allow_headers=cors.allowed_headers,
    )


def create_app(container: AppContainer) -> FastAPI:
    """Assemble the request pipeline around ``container``.

    Middleware order, outermost first: error handling, CORS, route dispatch.
    Starlette wraps later ``add_middleware`` calls around earlier ones, so the
    error handler is added last.
    """
    app = FastAPI(title="ToolKeeper API", version=__version__)
    app.state.container = container
    for router in ROUTERS:
        app.include_router(router)
    add_cors(app, container.settings.cors)
    app.add_middleware(ErrorHandlingMiddleware, logger=container.logger)
    return app


__all__ = ["ROUTERS", "add_cors", "create_app"]
