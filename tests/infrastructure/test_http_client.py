"""Tests for named outbound clients and the health probe."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from toolkeeper.infrastructure.http import (ClientRegistrationError,
                                            NamedClientFactory, ProbeResult,
                                            build_base_url, probe_health)


class TestBuildBaseUrl:
    def test_joins_host_and_port(self):
        assert build_base_url("http://model", 8001) == "http://model:8001"

    def test_adds_scheme_when_missing(self):
        assert build_base_url("model", "8001") == "http://model:8001"

    def test_keeps_https_scheme(self):
        assert build_base_url("https://model/", 443) == "https://model:443"

    @pytest.mark.parametrize("host", ["", "   "])
    def test_empty_host_fails(self, host):
        with pytest.raises(ClientRegistrationError):
            build_base_url(host, 8001)

    def test_missing_port_fails(self):
        with pytest.raises(ClientRegistrationError):
            build_base_url("http://model", "")


class TestNamedClientFactory:
    def test_register_returns_shared_client(self):
        async def _test():
            factory = NamedClientFactory()
            client = factory.register("model_api", "http://model:8001")
            assert factory.get("model_api") is client
            assert "model_api" in factory
            await factory.aclose()
            assert "model_api" not in factory

        asyncio.run(_test())

    def test_duplicate_name_fails(self):
        async def _test():
            factory = NamedClientFactory()
            factory.register("model_api", "http://model:8001")
            with pytest.raises(ClientRegistrationError):
                factory.register("model_api", "http://other:8001")
            await factory.aclose()

        asyncio.run(_test())

    def test_unknown_name_fails(self):
        with pytest.raises(ClientRegistrationError):
            NamedClientFactory().get("missing")


def _probe(handler, path: str = "health") -> tuple[ProbeResult, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    async def _test():
        factory = NamedClientFactory(transport=httpx.MockTransport(_record))
        client = factory.register("model_api", "http://model:8001", timeout=1.0)
        try:
            return await probe_health(client, path)
        finally:
            await factory.aclose()

    return asyncio.run(_test()), seen


class TestProbeHealth:
    def test_success(self):
        result, seen = _probe(lambda request: httpx.Response(200, text='{"status":"ok"}'))

        assert result.ok is True
        assert result.status_code == 200
        assert result.body == '{"status":"ok"}'
        assert result.error is None
        assert result.message == '{"status":"ok"}'
        assert [str(r.url) for r in seen] == ["http://model:8001/health"]
        assert seen[0].method == "GET"

    def test_leading_slash_in_path_is_relative_to_base(self):
        _, seen = _probe(lambda request: httpx.Response(200), path="/health")

        assert str(seen[0].url) == "http://model:8001/health"

    def test_non_success_status(self):
        result, _ = _probe(lambda request: httpx.Response(503, text="warming up"))

        assert result.ok is False
        assert result.status_code == 503
        assert result.body == "warming up"
        assert "503" in result.message

    def test_connection_refused(self):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        result, _ = _probe(refuse)

        assert result.ok is False
        assert result.status_code is None
        assert result.message == "Connection refused"

    def test_timeout(self):
        def stall(request):
            raise httpx.ReadTimeout("timed out", request=request)

        result, _ = _probe(stall)

        assert result.ok is False
        assert "timed out" in result.message
