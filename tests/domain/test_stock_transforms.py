"""Tests for the stock replenishment transforms."""

import random
import re

import pytest

from deptflow.domain.stock import (
    CALCULATION_METHOD,
    analyze_replenishment,
    check_delivery,
    compute_replenishment,
    create_replenishment,
    handle_return,
    plan_replenishment,
    process_replenishment,
    update_stock_systems,
    verify_stock,
)


class TestPlanReplenishment:
    def test_formula(self):
        plan = plan_replenishment(20, 10, 7, 5)
        assert plan.reorder_point_units == 120
        assert plan.recommended_quantity == 240
        assert plan.projected_days_of_stock == 2
        assert plan.urgency == "high"

    def test_defaults(self):
        plan = plan_replenishment(None, None, None, None)
        assert plan.daily_sales == 10.0
        assert plan.lead_time_days == 7
        assert plan.safety_stock_days == 5
        assert plan.recommended_quantity == 260
        assert plan.projected_days_of_stock == 0

    def test_zero_lead_time_uses_default(self):
        assert plan_replenishment(0, 10, "0", 5).lead_time_days == 7

    def test_overstocked(self):
        plan = plan_replenishment(1000, 10, 7, 5)
        assert plan.recommended_quantity == 0
        assert plan.urgency == "low"

    def test_medium_urgency(self):
        assert plan_replenishment(150, 10, 7, 5).urgency == "medium"

    def test_fractional_sales_round_up(self):
        plan = plan_replenishment("0", "2.5", "3", "2")
        assert plan.reorder_point_units == 13
        assert plan.recommended_quantity == 48

    def test_infinite_sales_use_default(self):
        plan = plan_replenishment("20", "1e400", "7", "5")
        assert plan.daily_sales == 10.0
        assert plan.recommended_quantity == 240

    def test_quantity_out_of_range(self):
        with pytest.raises(ValueError, match="out of range"):
            plan_replenishment("0", "1e308", "7", "5")


class TestComputeReplenishment:
    def test_wire_shape(self, now):
        out = compute_replenishment(
            {"productId": "SKU-1", "currentStock": "20", "avgDailySales": "10", "leadTimeDays": "7", "safetyStockDays": "5"},
            now,
        )
        assert out == {
            "productId": "SKU-1",
            "reorderPoint": 120,
            "recommendedQuantity": 240,
            "calculationMethod": CALCULATION_METHOD,
            "projectedDaysOfStock": 2,
            "urgencyLevel": "high",
            "calculatedAt": "2026-01-05T10:00:00.123Z",
        }

    def test_unknown_product(self, now):
        assert compute_replenishment({}, now)["productId"] == "SKU-UNKNOWN"


class TestAnalyzeReplenishment:
    def test_over_budget(self, now):
        out = analyze_replenishment(
            {"unitCost": "12.5", "orderQuantity": 100, "budget": "1000", "approved": "yes"}, now
        )
        assert out["totalOrderCost"] == 1250
        assert out["budgetRemaining"] == -250
        assert out["withinBudget"] is False
        assert out["financialScore"] == "UNFAVORABLE"
        assert out["recommendation"] == "PROCEED_WITH_ORDER"

    def test_defaults_within_budget(self, now):
        out = analyze_replenishment({}, now)
        assert out["totalOrderCost"] == 1000
        assert out["budgetRemaining"] == 9000
        assert out["withinBudget"] is True
        assert out["financialScore"] == "FAVORABLE"

    def test_no_string_is_rejection(self, now):
        assert analyze_replenishment({"approved": "no"}, now)["recommendation"] == "ORDER_REJECTED"


class TestStockRecords:
    def test_create(self, now):
        out = create_replenishment({"productId": "SKU-1", "orderQuantity": "240"}, now)
        assert re.fullmatch(r"REQ-\d+", out["requestId"])
        assert out["orderQuantity"] == 240
        assert out["priority"] == "medium"
        assert out["status"] == "pending_verification"

    def test_verify(self, now):
        out = verify_stock({"physicalCount": "80", "currentStock": 100, "verified": "yes"}, now)
        assert out["stockVerified"] is True
        assert out["discrepancy"] == 20
        assert out["stockLocation"] == "Warehouse A"

    def test_process(self, now):
        out = process_replenishment({}, now, random.Random(7))
        assert re.fullmatch(r"TRK-[0-9A-Z]{9}", out["trackingNumber"])
        assert re.fullmatch(r"PO-\d+", out["purchaseOrderNumber"])
        assert out["estimatedDeliveryDate"] == "2026-01-12"
        assert out["supplierName"] == "Default Supplier"
        assert out["poStatus"] == "issued"

    def test_process_keeps_supplied_values(self, now):
        out = process_replenishment({"supplier": "Acme", "estimatedDelivery": "2026-02-01"}, now)
        assert out["supplierName"] == "Acme"
        assert out["estimatedDeliveryDate"] == "2026-02-01"

    def test_check_delivery(self, now):
        out = check_delivery({"receivedQty": "100", "damagedQty": "5", "conforming": "yes"}, now)
        assert out["quantityAccepted"] == 95
        assert out["qualityScore"] == 8
        assert out["deliveryConforming"] is True

    def test_handle_return_defaults(self, now):
        out = handle_return({}, now)
        assert out["returnReason"] == "quality"
        assert out["returnStatus"] == "initiated"
        assert out["quantityReturned"] == 0

    @pytest.mark.parametrize(
        "flags,expected",
        [
            ({"erpUpdated": "yes", "wmsUpdated": "yes", "posUpdated": "yes"}, ("updated", "updated", "synchronized")),
            ({}, ("pending", "pending", "pending")),
        ],
    )
    def test_update_stock_systems(self, now, flags, expected):
        out = update_stock_systems(dict(flags, previousStock="18", quantityAdded=95, newStockLevel="113"), now)
        systems = out["systemsUpdated"]
        assert (systems["erp"], systems["wms"], systems["pos"]) == expected
        assert out["stockLevels"] == {"previousStock": 18, "quantityAdded": 95, "newStockLevel": 113}
