"""Tests for the ESB1/ESB2 FastAPI transform routes."""

import pytest
from httpx import ASGITransport, AsyncClient

from deptflow.adapters.esb import esb1, esb2
from deptflow.config import CONFIG


def _client(app):
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestEsb1:
    @pytest.mark.asyncio
    async def test_health(self):
        async with _client(esb1.app) as client:
            resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy", "esb": "ESB1", "port": CONFIG["esb1_port"]}

    @pytest.mark.asyncio
    async def test_identify_products(self):
        async with _client(esb1.app) as client:
            resp = await client.post(
                "/api/identify-products",
                json={"productIds": "p1, p2", "reason": "overstock", "urgency": "low"},
            )
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["original"] == {"productIds": ["p1", "p2"], "reason": "overstock", "urgency": "low"}
        transformed = data["transformed"]
        assert transformed["normalizedIds"] == ["P1", "P2"]
        assert transformed["analysisScore"] == 39
        assert transformed["priority"] == "low"
        assert transformed["esb"] == "ESB1"
        assert transformed["endpoint"] == "identify-products"

    @pytest.mark.asyncio
    async def test_evaluate_profitability(self):
        async with _client(esb1.app) as client:
            resp = await client.post(
                "/api/evaluate-profitability",
                json={"margin": "25", "revenueImpact": "+5%", "riskLevel": "low", "approved": "yes"},
            )
        transformed = resp.json()["transformed"]
        assert transformed["riskCategory"] == "LOW_RISK"
        assert transformed["recommendation"] == "PROCEED_IMMEDIATELY"
        assert transformed["financialScore"] == 15

    @pytest.mark.asyncio
    async def test_compute_replenishment(self):
        async with _client(esb1.app) as client:
            resp = await client.post(
                "/api/compute-replenishment",
                json={"productId": "SKU-1", "currentStock": "20", "avgDailySales": "10",
                      "leadTimeDays": "7", "safetyStockDays": "5"},
            )
        data = resp.json()
        assert data["original"]["productId"] == "SKU-1"
        assert data["transformed"]["reorderPoint"] == 120
        assert data["transformed"]["recommendedQuantity"] == 240
        assert data["transformed"]["urgencyLevel"] == "high"

    @pytest.mark.asyncio
    async def test_compute_replenishment_infinite_sales(self):
        async with _client(esb1.app) as client:
            resp = await client.post("/api/compute-replenishment", json={"currentStock": "20", "avgDailySales": "1e400"})
        assert resp.status_code == 200
        assert resp.json()["transformed"]["recommendedQuantity"] == 240

    @pytest.mark.asyncio
    async def test_transform_error_is_flat_message(self):
        async with _client(esb1.app) as client:
            resp = await client.post("/api/compute-replenishment", json={"avgDailySales": "1e308"})
        assert resp.status_code == 500
        data = resp.json()
        assert data["success"] is False
        assert "out of range" in data["error"]

    @pytest.mark.asyncio
    async def test_analyze_replenishment_empty_body(self):
        async with _client(esb1.app) as client:
            resp = await client.post("/api/analyze-replenishment", json={})
        transformed = resp.json()["transformed"]
        assert transformed["totalOrderCost"] == 1000
        assert transformed["withinBudget"] is True
        assert transformed["recommendation"] == "ORDER_REJECTED"

    @pytest.mark.asyncio
    async def test_extra_fields_accepted(self):
        async with _client(esb1.app) as client:
            resp = await client.post("/api/identify-products", json={"productIds": "A", "jobKey": "1"})
        assert resp.status_code == 200
        assert "jobKey" not in resp.json()["original"]

    @pytest.mark.asyncio
    async def test_stock_endpoint_not_on_esb1(self):
        async with _client(esb1.app) as client:
            resp = await client.post("/api/verify-stock", json={})
        assert resp.status_code == 404


class TestEsb2:
    @pytest.mark.asyncio
    async def test_health(self):
        async with _client(esb2.app) as client:
            resp = await client.get("/health")
        assert resp.json()["esb"] == "ESB2"

    @pytest.mark.asyncio
    async def test_propose_promotion(self):
        async with _client(esb2.app) as client:
            resp = await client.post("/api/propose-promotion", json={"discount": "30", "durationDays": "7"})
        data = resp.json()
        assert data["original"]["discount"] == "30"
        assert data["transformed"]["promotionCode"].startswith("PROMO30")
        assert data["transformed"]["esb"] == "ESB2"

    @pytest.mark.asyncio
    async def test_propose_promotion_long_duration(self):
        async with _client(esb2.app) as client:
            resp = await client.post("/api/propose-promotion", json={"durationDays": "3000000"})
        assert resp.status_code == 200
        transformed = resp.json()["transformed"]
        assert transformed["durationDays"] == 3000000
        assert transformed["endDateISO"].startswith("9999-12-31")

    @pytest.mark.asyncio
    async def test_prepare_instore_parses_store_ids(self):
        async with _client(esb2.app) as client:
            resp = await client.post("/api/prepare-instore", json={"storeIds": "1,S002", "labelsReady": "yes"})
        data = resp.json()
        assert data["original"]["storeIds"] == ["1", "S002"]
        assert [s["id"] for s in data["transformed"]["validatedStores"]] == ["S001", "S002"]

    @pytest.mark.asyncio
    async def test_update_prices(self):
        async with _client(esb2.app) as client:
            resp = await client.post(
                "/api/update-prices",
                json={"posUpdated": "yes", "erpUpdated": "yes", "ecomUpdated": "yes", "inventoryUpdated": "no"},
            )
        assert resp.json()["transformed"]["summary"]["syncPercentage"] == "75%"

    @pytest.mark.asyncio
    async def test_stock_endpoints_omit_original(self):
        async with _client(esb2.app) as client:
            resp = await client.post("/api/check-delivery", json={"receivedQty": "100", "damagedQty": "4"})
        data = resp.json()
        assert "original" not in data
        assert data["transformed"]["quantityAccepted"] == 96
        assert data["transformed"]["endpoint"] == "check-delivery"

    @pytest.mark.asyncio
    async def test_update_stock_systems(self):
        async with _client(esb2.app) as client:
            resp = await client.post(
                "/api/update-stock-systems",
                json={"erpUpdated": "yes", "previousStock": 18, "quantityAdded": 95, "newStockLevel": 113},
            )
        transformed = resp.json()["transformed"]
        assert transformed["systemsUpdated"] == {"erp": "updated", "wms": "pending", "pos": "pending"}
        assert transformed["stockLevels"]["newStockLevel"] == 113
