"""Named outbound HTTP clients for ToolKeeper.

Each logical dependency gets one long-lived :class:`httpx.AsyncClient` whose
base address is fixed when the client is registered. Clients are shared by
all in-flight requests and closed together on shutdown.

Usage:
    clients = NamedClientFactory()
    clients.register("model_api", "http://model:8001", timeout=10.0)
    result = await probe_health(clients.get("model_api"), "health")
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

import httpx

from toolkeeper.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

MODEL_API_CLIENT = "model_api"


class ClientRegistrationError(Exception):
    """Raised when a named client is registered twice, misconfigured or unknown."""


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single health request against a dependency."""

    ok: bool
    status_code: int | None = None
    body: str = ""
    error: str | None = None

    @property
    def message(self) -> str:
        """Human-readable summary, used for startup output."""
        if self.ok:
            return self.body
        return self.error or "health check failed"


def build_base_url(host: str, port: int | str) -> str:
    """Join ``host`` and ``port`` into a base address.

    A host without a scheme is treated as plain HTTP.

    Raises:
        ClientRegistrationError: If ``host`` is empty or ``port`` is missing.
    """
    host = (host or "").strip().rstrip("/")
    if not host:
        raise ClientRegistrationError("Outbound dependency host is not configured")
    if port in (None, ""):
        raise ClientRegistrationError("Outbound dependency port is not configured")
    if not urlsplit(host).scheme:
        host = f"http://{host}"
    return ":".join((host, str(port)))


class NamedClientFactory:
    """Registry of shared, named async HTTP clients."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Initialize an empty factory.

        Args:
            transport: Optional transport handed to every client, used by
                tests to stub the network.
        """
        self._transport = transport
        self._clients: dict[str, httpx.AsyncClient] = {}

    def register(self, name: str, base_url: str, *, timeout: float = 10.0) -> httpx.AsyncClient:
        """Create the client for ``name`` once and return it."""
        if name in self._clients:
            raise ClientRegistrationError(f"Client '{name}' is already registered")
        client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=self._transport,
        )
        self._clients[name] = client
        logger.debug("Registered HTTP client %s -> %s", name, base_url)
        return client

    def get(self, name: str) -> httpx.AsyncClient:
        try:
            return self._clients[name]
        except KeyError:
            raise ClientRegistrationError(f"No client registered as '{name}'") from None

    def __contains__(self, name: object) -> bool:
        return name in self._clients

    async def aclose(self) -> None:
        """Close every registered client."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()


async def probe_health(client: httpx.AsyncClient, path: str = "health") -> ProbeResult:
    """Issue one GET against ``path`` and describe the outcome.

    Transport failures (connection refused, timeouts) and non-success
    statuses are reported through the result, never raised.
    """
    try:
        response = await client.get(path.lstrip("/"))
    except httpx.HTTPError as exc:
        return ProbeResult(ok=False, error=str(exc) or type(exc).__name__)

    body = response.text
    if response.is_success:
        return ProbeResult(ok=True, status_code=response.status_code, body=body)
    return ProbeResult(
        ok=False,
        status_code=response.status_code,
        body=body,
        error=f"Health check returned status {response.status_code}",
    )


__all__ = [
    "ClientRegistrationError",
    "MODEL_API_CLIENT",
    "NamedClientFactory",
    "ProbeResult",
    "build_base_url",
    "probe_health",
]
