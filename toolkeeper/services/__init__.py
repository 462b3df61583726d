"""Domain services for tool kits, tools and employees."""

from .employees import EmployeeService
from .errors import (ConflictError, InvalidOperationError, NotFoundError,
                     ServiceError)
from .interfaces import (AbstractEmployeeService, AbstractToolKitService,
                         AbstractToolService)
from .tool_kits import ToolKitService
from .tools import ToolService

__all__ = [
    "AbstractEmployeeService",
    "AbstractToolKitService",
    "AbstractToolService",
    "ConflictError",
    "EmployeeService",
    "InvalidOperationError",
    "NotFoundError",
    "ServiceError",
    "ToolKitService",
    "ToolService",
]
