from __future__ import annotations

from typing import Any

from ..connection import iso_utcnow
from .base import BaseRepository


class ToolRepository(BaseRepository):
    _COLUMNS = "id, name, serial_number, tool_kit_id, condition, created_at"

    def add(
        self,
        name: str,
        serial_number: str,
        tool_kit_id: int | None = None,
        condition: str = "good",
    ) -> int:
        return self._execute_insert(
            "INSERT INTO tools (name, serial_number, tool_kit_id, condition, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (name, serial_number, tool_kit_id, condition, iso_utcnow()),
        )

    def list(self, *, tool_kit_id: int | None = None) -> list[dict[str, Any]]:
        if tool_kit_id is None:
            return self._fetch_all_as_dicts(
                f"SELECT {self._COLUMNS} FROM tools ORDER BY id"
            )
        return self._fetch_all_as_dicts(
            f"SELECT {self._COLUMNS} FROM tools WHERE tool_kit_id = ? ORDER BY id",
            (tool_kit_id,),
        )

    def get(self, tool_id: int) -> dict[str, Any] | None:
        return self._fetch_one_as_dict(
            f"SELECT {self._COLUMNS} FROM tools WHERE id = ?", (tool_id,)
        )

    def set_tool_kit(self, tool_id: int, tool_kit_id: int | None) -> None:
        self._execute(
            "UPDATE tools SET tool_kit_id = ? WHERE id = ?", (tool_kit_id, tool_id)
        )
