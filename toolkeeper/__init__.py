"""
ToolKeeper package initializer.

This package provides the backend service that tracks tool kits, the tools
they contain and the employees they are issued to.

The package exposes a ``__version__`` attribute indicating the installed
version of ToolKeeper. The version is read from pyproject.toml via
importlib.metadata – this is the single source of truth.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("toolkeeper")
except PackageNotFoundError:
    # Package is not installed (running from source without pip install -e .)
    __version__ = "0.0.0.dev"

__all__: list[str] = ["__version__"]
