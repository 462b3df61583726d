from __future__ import annotations

from typing import Any

from toolkeeper.infrastructure.db.repositories import (DuplicateRecordError,
                                                       EmployeeRepository,
                                                       ToolKitRepository,
                                                       ToolRepository)
from toolkeeper.infrastructure.observability import get_logger
from toolkeeper.services.dto import (ToolKitCreateDTO, ToolKitDetailDTO,
                                     ToolKitDTO)
from toolkeeper.services.errors import (ConflictError, InvalidOperationError,
                                        NotFoundError)
from toolkeeper.services.interfaces import AbstractToolKitService
from toolkeeper.services.tools import _row_to_dto as _tool_row_to_dto

_logger = get_logger(__name__)


def _row_to_dto(row: dict[str, Any]) -> ToolKitDTO:
    return ToolKitDTO(
        id=int(row["id"]),
        name=str(row["name"]),
        description=row.get("description"),
        employee_id=row.get("employee_id"),
        created_at=str(row["created_at"]),
    )


class ToolKitService(AbstractToolKitService):
    """Service layer for tool kits and the employee each kit is issued to."""

    def __init__(
        self,
        repository: ToolKitRepository,
        employees: EmployeeRepository,
        tools: ToolRepository,
    ) -> None:
        self._repository = repository
        self._employees = employees
        self._tools = tools

    def list_tool_kits(self, *, employee_id: int | None = None) -> list[ToolKitDTO]:
        return [_row_to_dto(row) for row in self._repository.list(employee_id=employee_id)]

    def get_tool_kit(self, tool_kit_id: int) -> ToolKitDetailDTO:
        row = self._repository.get(tool_kit_id)
        if row is None:
            raise NotFoundError("Tool kit", tool_kit_id)
        tools = [_tool_row_to_dto(t) for t in self._tools.list(tool_kit_id=tool_kit_id)]
        return ToolKitDetailDTO(**_row_to_dto(row).model_dump(), tools=tools)

    def create_tool_kit(self, data: ToolKitCreateDTO) -> ToolKitDTO:
        self._require_employee(data.employee_id)
        try:
            tool_kit_id = self._repository.add(data.name, data.description, data.employee_id)
        except DuplicateRecordError as exc:
            raise ConflictError(f"Tool kit '{data.name}' already exists") from exc
        _logger.info("Created tool kit %d (%s)", tool_kit_id, data.name)
        return _row_to_dto(self._repository.get(tool_kit_id))

    def assign_employee(self, tool_kit_id: int, employee_id: int | None) -> ToolKitDTO:
        if not self._repository.exists(tool_kit_id):
            raise NotFoundError("Tool kit", tool_kit_id)
        self._require_employee(employee_id)
        self._repository.set_employee(tool_kit_id, employee_id)
        if employee_id is None:
            _logger.info("Returned tool kit %d", tool_kit_id)
        else:
            _logger.info("Issued tool kit %d to employee %d", tool_kit_id, employee_id)
        return _row_to_dto(self._repository.get(tool_kit_id))

    def _require_employee(self, employee_id: int | None) -> None:
        if employee_id is not None and not self._employees.exists(employee_id):
            raise InvalidOperationError(f"Employee {employee_id} does not exist")
