"""ESB client that routes transform calls to ESB1 or ESB2 by endpoint."""

import asyncio
import json
import sys
from typing import Any, Dict, Optional

import aiohttp

from deptflow.config import CONFIG

# Static endpoint -> ESB table
ENDPOINT_ROUTES: Dict[str, str] = {
    # ESB1: Data Analysis & Finance
    "/api/identify-products": "esb1",
    "/api/evaluate-profitability": "esb1",
    "/api/compute-replenishment": "esb1",
    "/api/analyze-replenishment": "esb1",
    # ESB2: Commercial, Marketing, IT, Logistics, Merchandising
    "/api/propose-promotion": "esb2",
    "/api/prepare-instore": "esb2",
    "/api/update-physical-prices": "esb2",
    "/api/prepare-materials": "esb2",
    "/api/update-prices": "esb2",
    "/api/create-replenishment": "esb2",
    "/api/verify-stock": "esb2",
    "/api/process-replenishment": "esb2",
    "/api/check-delivery": "esb2",
    "/api/handle-return": "esb2",
    "/api/update-stock-systems": "esb2",
}


def _log(msg: str):
    print(msg, file=sys.stderr)


class UnknownEndpointError(ValueError):
    def __init__(self, endpoint: str):
        super().__init__(f"Unknown ESB endpoint: {endpoint}")
        self.endpoint = endpoint


class EsbError(RuntimeError):
    def __init__(self, url: str, status: int, body: str = ""):
        super().__init__(f"ESB call to {url} failed with status {status}")
        self.url = url
        self.status = status
        self.body = body


class EsbClient:
    def __init__(
        self,
        esb1_url: Optional[str] = None,
        esb2_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.base_urls = {
            "esb1": (esb1_url or CONFIG["esb1_url"]).rstrip("/"),
            "esb2": (esb2_url or CONFIG["esb2_url"]).rstrip("/"),
        }
        self.timeout_seconds = timeout_seconds or CONFIG["esb_timeout_seconds"]

    def url_for(self, endpoint: str) -> str:
        esb = ENDPOINT_ROUTES.get(endpoint)
        if esb is None:
            raise UnknownEndpointError(endpoint)
        return f"{self.base_urls[esb]}{endpoint}"

    async def call(self, endpoint: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """POST ``data`` to the ESB serving ``endpoint`` and return its JSON envelope."""
        url = self.url_for(endpoint)
        print(f"[ESB Client] Calling {url}")
        print(f"[ESB Client] Request data: {json.dumps(data, default=str)}")

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json=data) as resp:
                    if resp.status >= 400:
                        body = await resp.text()
                        raise EsbError(url, resp.status, body)
                    result = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            _log(f"[ESB Client] Error calling {url}: {e}")
            raise

        print(f"[ESB Client] Response: {json.dumps(result, default=str)}")
        return result

    async def check_health(self, esb: str) -> Dict[str, Any]:
        """Health of ``esb1``/``esb2``; failures are reported, never raised."""
        base = self.base_urls.get(esb)
        if base is None:
            return {"status": "unhealthy", "error": f"Unknown ESB: {esb}"}
        timeout = aiohttp.ClientTimeout(total=CONFIG.get("esb_health_timeout_seconds", 5.0))
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(f"{base}/health") as resp:
                    if resp.status >= 400:
                        return {"status": "unhealthy", "error": f"HTTP {resp.status}"}
                    return await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            return {"status": "unhealthy", "error": str(e) or type(e).__name__}
