"""HTTP adapters for ToolKeeper.

This package provides the shared outbound clients used to reach dependent
services and the health probe run at startup.
"""

from .client import (
    MODEL_API_CLIENT,
    ClientRegistrationError,
    NamedClientFactory,
    ProbeResult,
    build_base_url,
    probe_health,
)

__all__ = [
    "ClientRegistrationError",
    "MODEL_API_CLIENT",
    "NamedClientFactory",
    "ProbeResult",
    "build_base_url",
    "probe_health",
]
