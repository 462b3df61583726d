from .base import BaseRepository, DuplicateRecordError
from .employees import EmployeeRepository
from .tool_kits import ToolKitRepository
from .tools import ToolRepository

__all__ = [
    "BaseRepository",
    "DuplicateRecordError",
    "EmployeeRepository",
    "ToolKitRepository",
    "ToolRepository",
]
