from __future__ import annotations

from typing import Any

from ..connection import iso_utcnow
from .base import BaseRepository


class EmployeeRepository(BaseRepository):
    _COLUMNS = "id, full_name, position, email, created_at"

    def add(
        self, full_name: str, position: str | None = None, email: str | None = None
    ) -> int:
        return self._execute_insert(
            "INSERT INTO employees (full_name, position, email, created_at) VALUES (?, ?, ?, ?)",
            (full_name, position, email, iso_utcnow()),
        )

    def list(self) -> list[dict[str, Any]]:
        return self._fetch_all_as_dicts(
            f"SELECT {self._COLUMNS} FROM employees ORDER BY id"
        )

    def get(self, employee_id: int) -> dict[str, Any] | None:
        return self._fetch_one_as_dict(
            f"SELECT {self._COLUMNS} FROM employees WHERE id = ?", (employee_id,)
        )

    def exists(self, employee_id: int) -> bool:
        return self._fetch_scalar(
            "SELECT 1 FROM employees WHERE id = ?", (employee_id,)
        ) is not None
