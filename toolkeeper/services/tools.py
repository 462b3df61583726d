from __future__ import annotations

from typing import Any

from toolkeeper.infrastructure.db.repositories import (DuplicateRecordError,
                                                       ToolKitRepository,
                                                       ToolRepository)
from toolkeeper.infrastructure.observability import get_logger
from toolkeeper.services.dto import ToolCreateDTO, ToolDTO
from toolkeeper.services.errors import (ConflictError, InvalidOperationError,
                                        NotFoundError)
from toolkeeper.services.interfaces import AbstractToolService

_logger = get_logger(__name__)


def _row_to_dto(row: dict[str, Any]) -> ToolDTO:
    return ToolDTO(
        id=int(row["id"]),
        name=str(row["name"]),
        serial_number=str(row["serial_number"]),
        tool_kit_id=row.get("tool_kit_id"),
        condition=row.get("condition") or "good",
        created_at=str(row["created_at"]),
    )


class ToolService(AbstractToolService):
    """Service layer for individual tools."""

    def __init__(self, repository: ToolRepository, tool_kits: ToolKitRepository) -> None:
        self._repository = repository
        self._tool_kits = tool_kits

    def list_tools(self, *, tool_kit_id: int | None = None) -> list[ToolDTO]:
        return [_row_to_dto(row) for row in self._repository.list(tool_kit_id=tool_kit_id)]

    def get_tool(self, tool_id: int) -> ToolDTO:
        row = self._repository.get(tool_id)
        if row is None:
            raise NotFoundError("Tool", tool_id)
        return _row_to_dto(row)

    def create_tool(self, data: ToolCreateDTO) -> ToolDTO:
        self._require_tool_kit(data.tool_kit_id)
        try:
            tool_id = self._repository.add(
                data.name, data.serial_number, data.tool_kit_id, data.condition
            )
        except DuplicateRecordError as exc:
            raise ConflictError(
                f"Tool with serial number '{data.serial_number}' already exists"
            ) from exc
        _logger.info("Created tool %d (%s)", tool_id, data.serial_number)
        return self.get_tool(tool_id)

    def move_tool(self, tool_id: int, tool_kit_id: int | None) -> ToolDTO:
        self.get_tool(tool_id)
        self._require_tool_kit(tool_kit_id)
        self._repository.set_tool_kit(tool_id, tool_kit_id)
        _logger.info("Moved tool %d to tool kit %s", tool_id, tool_kit_id)
        return self.get_tool(tool_id)

    def _require_tool_kit(self, tool_kit_id: int | None) -> None:
        if tool_kit_id is not None and not self._tool_kits.exists(tool_kit_id):
            raise InvalidOperationError(f"Tool kit {tool_kit_id} does not exist")
