"""
Centralized DTOs and input models for ToolKeeper services.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ToolCondition = Literal["good", "worn", "damaged", "lost"]


# --- Employee DTOs ---
class EmployeeDTO(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int
    full_name: str
    position: str | None = None
    email: str | None = None
    created_at: str


class EmployeeCreateDTO(BaseModel):
    model_config = ConfigDict(extra="forbid")

    full_name: str = Field(min_length=1)
    position: str | None = None
    email: str | None = None


# --- Tool DTOs ---
class ToolDTO(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int
    name: str
    serial_number: str
    tool_kit_id: int | None = None
    condition: ToolCondition = "good"
    created_at: str


class ToolCreateDTO(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    serial_number: str = Field(min_length=1)
    tool_kit_id: int | None = None
    condition: ToolCondition = "good"


class ToolMoveDTO(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tool_kit_id: int | None = None


# --- Tool kit DTOs ---
class ToolKitDTO(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int
    name: str
    description: str | None = None
    employee_id: int | None = None
    created_at: str


class ToolKitDetailDTO(ToolKitDTO):
    tools: list[ToolDTO] = Field(default_factory=list)


class ToolKitCreateDTO(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    description: str | None = None
    employee_id: int | None = None


class ToolKitAssignDTO(BaseModel):
    model_config = ConfigDict(extra="forbid")

    employee_id: int | None = None
