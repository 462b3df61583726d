"""Abstract service capabilities bound in the service registry.

Route handlers depend on these types only; the composition root decides
which concrete class fulfils each one.
"""

from __future__ import annotations

import abc

from .dto import (EmployeeCreateDTO, EmployeeDTO, ToolCreateDTO, ToolDTO,
                  ToolKitCreateDTO, ToolKitDetailDTO, ToolKitDTO)


class AbstractEmployeeService(abc.ABC):
    @abc.abstractmethod
    def list_employees(self) -> list[EmployeeDTO]: ...

    @abc.abstractmethod
    def get_employee(self, employee_id: int) -> EmployeeDTO: ...

    @abc.abstractmethod
    def create_employee(self, data: EmployeeCreateDTO) -> EmployeeDTO: ...


class AbstractToolKitService(abc.ABC):
    @abc.abstractmethod
    def list_tool_kits(self, *, employee_id: int | None = None) -> list[ToolKitDTO]: ...

    @abc.abstractmethod
    def get_tool_kit(self, tool_kit_id: int) -> ToolKitDetailDTO: ...

    @abc.abstractmethod
    def create_tool_kit(self, data: ToolKitCreateDTO) -> ToolKitDTO: ...

    @abc.abstractmethod
    def assign_employee(self, tool_kit_id: int, employee_id: int | None) -> ToolKitDTO: ...


class AbstractToolService(abc.ABC):
    @abc.abstractmethod
    def list_tools(self, *, tool_kit_id: int | None = None) -> list[ToolDTO]: ...

    @abc.abstractmethod
    def get_tool(self, tool_id: int) -> ToolDTO: ...

    @abc.abstractmethod
    def create_tool(self, data: ToolCreateDTO) -> ToolDTO: ...

    @abc.abstractmethod
    def move_tool(self, tool_id: int, tool_kit_id: int | None) -> ToolDTO: ...
