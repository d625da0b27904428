"""Tests for EsbClient routing and health checks."""

from unittest.mock import patch

import aiohttp
import pytest

from deptflow.adapters.esb.client import ENDPOINT_ROUTES, EsbClient, EsbError, UnknownEndpointError

SESSION = "deptflow.adapters.esb.client.aiohttp.ClientSession"


def _client():
    return EsbClient("http://esb1:3001/", "http://esb2:3002", timeout_seconds=1)


class TestRouting:
    def test_routes(self):
        client = _client()
        assert client.url_for("/api/identify-products") == "http://esb1:3001/api/identify-products"
        assert client.url_for("/api/check-delivery") == "http://esb2:3002/api/check-delivery"

    def test_esb1_serves_data_analysis_and_finance(self):
        esb1 = sorted(e for e, esb in ENDPOINT_ROUTES.items() if esb == "esb1")
        assert esb1 == [
            "/api/analyze-replenishment",
            "/api/compute-replenishment",
            "/api/evaluate-profitability",
            "/api/identify-products",
        ]

    def test_unknown_endpoint(self):
        with pytest.raises(UnknownEndpointError, match="Unknown ESB endpoint: /api/nope"):
            _client().url_for("/api/nope")


class TestCall:
    @pytest.mark.asyncio
    async def test_returns_envelope(self, fake_aiohttp):
        envelope = {"success": True, "transformed": {"esb": "ESB2", "endpoint": "verify-stock"}}
        session, calls = fake_aiohttp([(200, envelope)])
        with patch(SESSION, session):
            result = await _client().call("/api/verify-stock", {"physicalCount": "18"})
        assert result == envelope
        method, url, kwargs = calls[0]
        assert (method, url) == ("POST", "http://esb2:3002/api/verify-stock")
        assert kwargs["json"] == {"physicalCount": "18"}

    @pytest.mark.asyncio
    async def test_http_error(self, fake_aiohttp):
        session, _ = fake_aiohttp([(500, "Internal Server Error")])
        with patch(SESSION, session):
            with pytest.raises(EsbError) as exc:
                await _client().call("/api/identify-products", {})
        assert exc.value.status == 500
        assert exc.value.body == "Internal Server Error"

    @pytest.mark.asyncio
    async def test_connection_error_propagates(self, fake_aiohttp):
        session, _ = fake_aiohttp([aiohttp.ClientConnectionError("refused")])
        with patch(SESSION, session):
            with pytest.raises(aiohttp.ClientError):
                await _client().call("/api/identify-products", {})

    @pytest.mark.asyncio
    async def test_unknown_endpoint_makes_no_request(self, fake_aiohttp):
        session, calls = fake_aiohttp([])
        with patch(SESSION, session):
            with pytest.raises(UnknownEndpointError):
                await _client().call("/api/unknown", {})
        assert calls == []


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, fake_aiohttp):
        session, calls = fake_aiohttp([(200, {"status": "healthy", "esb": "ESB1", "port": 3001})])
        with patch(SESSION, session):
            result = await _client().check_health("esb1")
        assert result["status"] == "healthy"
        assert calls[0][:2] == ("GET", "http://esb1:3001/health")

    @pytest.mark.asyncio
    async def test_unreachable(self, fake_aiohttp):
        session, _ = fake_aiohttp([aiohttp.ClientConnectionError("refused")])
        with patch(SESSION, session):
            result = await _client().check_health("esb2")
        assert result == {"status": "unhealthy", "error": "refused"}

    @pytest.mark.asyncio
    async def test_http_error(self, fake_aiohttp):
        session, _ = fake_aiohttp([(503, "down")])
        with patch(SESSION, session):
            result = await _client().check_health("esb2")
        assert result == {"status": "unhealthy", "error": "HTTP 503"}

    @pytest.mark.asyncio
    async def test_unknown_esb(self):
        result = await _client().check_health("esb3")
        assert result["status"] == "unhealthy"
