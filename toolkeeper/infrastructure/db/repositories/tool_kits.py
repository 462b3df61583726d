from __future__ import annotations

from typing import Any

from ..connection import iso_utcnow
from .base import BaseRepository


class ToolKitRepository(BaseRepository):
    _COLUMNS = "id, name, description, employee_id, created_at"

    def add(
        self,
        name: str,
        description: str | None = None,
        employee_id: int | None = None,
    ) -> int:
        return self._execute_insert(
            "INSERT INTO tool_kits (name, description, employee_id, created_at) VALUES (?, ?, ?, ?)",
            (name, description, employee_id, iso_utcnow()),
        )

    def list(self, *, employee_id: int | None = None) -> list[dict[str, Any]]:
        if employee_id is None:
            return self._fetch_all_as_dicts(
                f"SELECT {self._COLUMNS} FROM tool_kits ORDER BY id"
            )
        return self._fetch_all_as_dicts(
            f"SELECT {self._COLUMNS} FROM tool_kits WHERE employee_id = ? ORDER BY id",
            (employee_id,),
        )

    def get(self, tool_kit_id: int) -> dict[str, Any] | None:
        return self._fetch_one_as_dict(
            f"SELECT {self._COLUMNS} FROM tool_kits WHERE id = ?", (tool_kit_id,)
        )

    def exists(self, tool_kit_id: int) -> bool:
        return self._fetch_scalar(
            "SELECT 1 FROM tool_kits WHERE id = ?", (tool_kit_id,)
        ) is not None

    def set_employee(self, tool_kit_id: int, employee_id: int | None) -> None:
        self._execute(
            "UPDATE tool_kits SET employee_id = ? WHERE id = ?",
            (employee_id, tool_kit_id),
        )
