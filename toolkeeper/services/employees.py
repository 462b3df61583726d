from __future__ import annotations

from typing import Any

from toolkeeper.infrastructure.db.repositories import (DuplicateRecordError,
                                                       EmployeeRepository)
from toolkeeper.infrastructure.observability import get_logger
from toolkeeper.services.dto import EmployeeCreateDTO, EmployeeDTO
from toolkeeper.services.errors import ConflictError, NotFoundError
from toolkeeper.services.interfaces import AbstractEmployeeService

_logger = get_logger(__name__)


def _row_to_dto(row: dict[str, Any]) -> EmployeeDTO:
    """Convert a database row to an EmployeeDTO."""
    return EmployeeDTO(
        id=int(row["id"]),
        full_name=str(row["full_name"]),
        position=row.get("position"),
        email=row.get("email"),
        created_at=str(row["created_at"]),
    )


class EmployeeService(AbstractEmployeeService):
    """Service layer for employees who can hold tool kits."""

    def __init__(self, repository: EmployeeRepository) -> None:
        self._repository = repository

    def list_employees(self) -> list[EmployeeDTO]:
        rows = self._repository.list()
        _logger.debug("Listed %d employees", len(rows))
        return [_row_to_dto(row) for row in rows]

    def get_employee(self, employee_id: int) -> EmployeeDTO:
        row = self._repository.get(employee_id)
        if row is None:
            raise NotFoundError("Employee", employee_id)
        return _row_to_dto(row)

    def create_employee(self, data: EmployeeCreateDTO) -> EmployeeDTO:
        try:
            employee_id = self._repository.add(data.full_name, data.position, data.email)
        except DuplicateRecordError as exc:
            raise ConflictError(f"Employee with email '{data.email}' already exists") from exc
        _logger.info("Created employee %d", employee_id)
        return self.get_employee(employee_id)
