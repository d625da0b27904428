"""Stock replenishment transforms."""

import math
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from deptflow.domain.parsing import (
    BASE36,
    as_number,
    days_from,
    epoch_ms,
    float_or,
    int_or,
    iso,
    random_code,
    to_bool,
)

DEFAULT_DAILY_SALES = 10.0
DEFAULT_LEAD_TIME_DAYS = 7
DEFAULT_SAFETY_STOCK_DAYS = 5
BUFFER_DAYS = 14
CALCULATION_METHOD = "Safety Stock + Lead Time + 2-Week Buffer"

DEFAULT_UNIT_COST = 10.0
DEFAULT_ORDER_QUANTITY = 100
DEFAULT_BUDGET = 10000.0


@dataclass
class ReplenishmentPlan:
    daily_sales: float
    lead_time_days: int
    safety_stock_days: int
    current_stock: int
    reorder_point: float
    recommended_quantity: int

    @property
    def reorder_point_units(self) -> int:
        return math.ceil(self.reorder_point)

    @property
    def projected_days_of_stock(self) -> int:
        if self.current_stock <= 0:
            return 0
        return math.ceil(self.current_stock / self.daily_sales)

    @property
    def urgency(self) -> str:
        if self.current_stock < self.reorder_point:
            return "high"
        if self.current_stock < self.reorder_point * 1.5:
            return "medium"
        return "low"


def plan_replenishment(
    current_stock: Any,
    avg_daily_sales: Any,
    lead_time_days: Any,
    safety_stock_days: Any,
) -> ReplenishmentPlan:
    """Reorder point covers lead time plus safety stock; the order adds a two-week buffer.

    recommended = max(0, ceil(sales * (lead + safety) - current + sales * 14))
    """
    daily_sales = float_or(avg_daily_sales, DEFAULT_DAILY_SALES)
    lead_time = int_or(lead_time_days, DEFAULT_LEAD_TIME_DAYS)
    safety_days = int_or(safety_stock_days, DEFAULT_SAFETY_STOCK_DAYS)
    current = int_or(current_stock, 0)

    reorder_point = daily_sales * (lead_time + safety_days)
    shortfall = reorder_point - current + daily_sales * BUFFER_DAYS
    if not math.isfinite(shortfall):
        raise ValueError(f"replenishment quantity out of range for {daily_sales} units/day")
    recommended = max(0, math.ceil(shortfall))
    return ReplenishmentPlan(
        daily_sales=daily_sales,
        lead_time_days=lead_time,
        safety_stock_days=safety_days,
        current_stock=current,
        reorder_point=reorder_point,
        recommended_quantity=recommended,
    )


def compute_replenishment(payload: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    plan = plan_replenishment(
        payload.get("currentStock"),
        payload.get("avgDailySales"),
        payload.get("leadTimeDays"),
        payload.get("safetyStockDays"),
    )
    return {
        "productId": payload.get("productId") or "SKU-UNKNOWN",
        "reorderPoint": plan.reorder_point_units,
        "recommendedQuantity": plan.recommended_quantity,
        "calculationMethod": CALCULATION_METHOD,
        "projectedDaysOfStock": plan.projected_days_of_stock,
        "urgencyLevel": plan.urgency,
        "calculatedAt": iso(now),
    }


def order_cost(unit_cost: Any, quantity: Any, budget: Any) -> Dict[str, Any]:
    cost = float_or(unit_cost, DEFAULT_UNIT_COST)
    qty = int_or(quantity, DEFAULT_ORDER_QUANTITY)
    available = float_or(budget, DEFAULT_BUDGET)
    total = cost * qty
    return {
        "unitCost": as_number(cost),
        "quantity": qty,
        "totalOrderCost": as_number(total),
        "availableBudget": as_number(available),
        "budgetRemaining": as_number(available - total),
        "withinBudget": total <= available,
    }


def analyze_replenishment(payload: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    costs = order_cost(payload.get("unitCost"), payload.get("orderQuantity"), payload.get("budget"))
    return {
        "totalOrderCost": costs["totalOrderCost"],
        "budgetRemaining": costs["budgetRemaining"],
        "withinBudget": costs["withinBudget"],
        "financialScore": "FAVORABLE" if costs["withinBudget"] else "UNFAVORABLE",
        "recommendation": "PROCEED_WITH_ORDER" if to_bool(payload.get("approved")) else "ORDER_REJECTED",
        "analyzedAt": iso(now),
    }


def create_replenishment(payload: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    return {
        "requestId": f"REQ-{epoch_ms(now)}",
        "productId": payload.get("productId"),
        "productName": payload.get("productName"),
        "orderQuantity": int_or(payload.get("orderQuantity"), DEFAULT_ORDER_QUANTITY),
        "priority": payload.get("priority") or "medium",
        "status": "pending_verification",
        "createdAt": iso(now),
    }


def verify_stock(payload: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    physical = int_or(payload.get("physicalCount"), 0)
    system = int_or(payload.get("currentStock"), 0)
    return {
        "stockVerified": to_bool(payload.get("verified")),
        "physicalStockCount": physical,
        "systemStockCount": system,
        "discrepancy": abs(physical - system),
        "stockLocation": payload.get("location") or "Warehouse A",
        "verifiedAt": iso(now),
    }


def tracking_number(rng: Optional[random.Random] = None) -> str:
    return f"TRK-{random_code(9, BASE36, rng)}"


def default_delivery_date(now: datetime) -> str:
    return days_from(now, 7).date().isoformat()


def process_replenishment(
    payload: Mapping[str, Any],
    now: datetime,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    return {
        "purchaseOrderNumber": f"PO-{epoch_ms(now)}",
        "trackingNumber": tracking_number(rng),
        "supplierId": payload.get("supplierId") or "SUP-001",
        "supplierName": payload.get("supplier") or "Default Supplier",
        "poStatus": "issued",
        "shippingMethod": payload.get("shippingMethod") or "standard",
        "estimatedDeliveryDate": payload.get("estimatedDelivery") or default_delivery_date(now),
        "issuedAt": iso(now),
    }


def check_delivery(payload: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    received = int_or(payload.get("receivedQty"), 0)
    damaged = int_or(payload.get("damagedQty"), 0)
    return {
        "deliveryConforming": to_bool(payload.get("conforming")),
        "quantityReceived": received,
        "quantityAccepted": received - damaged,
        "quantityDamaged": damaged,
        "qualityScore": int_or(payload.get("qualityScore"), 8),
        "inspectedAt": iso(now),
    }


def handle_return(payload: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    return {
        "rmaNumber": f"RMA-{epoch_ms(now)}",
        "returnReason": payload.get("returnReason") or "quality",
        "refundRequested": to_bool(payload.get("refundRequested")),
        "replacementRequested": to_bool(payload.get("replacementRequested")),
        "quantityReturned": int_or(payload.get("quantityReturned"), 0),
        "returnStatus": "initiated",
        "processedAt": iso(now),
    }


def update_stock_systems(payload: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    return {
        "systemUpdateStatus": "success",
        "systemsUpdated": {
            "erp": "updated" if to_bool(payload.get("erpUpdated")) else "pending",
            "wms": "updated" if to_bool(payload.get("wmsUpdated")) else "pending",
            "pos": "synchronized" if to_bool(payload.get("posUpdated")) else "pending",
        },
        "stockLevels": {
            "previousStock": int_or(payload.get("previousStock"), 0),
            "quantityAdded": int_or(payload.get("quantityAdded"), 0),
            "newStockLevel": int_or(payload.get("newStockLevel"), 0),
        },
        "syncTimestamp": iso(now),
    }
