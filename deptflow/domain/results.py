"""Task result builders.

A builder turns the job variables plus the answers a department gave for a
task into the variables the job completes with. Answers arrive as loose
strings (terminal input, form fields) or as already-typed values (simulated
defaults), so every read goes through the lenient parsers.

Each task also has an ESB payload builder producing the request body for its
transform endpoint.
"""

import random
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

from deptflow.domain.parsing import (
    as_number,
    days_from,
    epoch_ms,
    float_or,
    int_or,
    iso,
    split_csv,
    to_bool,
)
from deptflow.domain.stock import (
    CALCULATION_METHOD,
    default_delivery_date,
    plan_replenishment,
    tracking_number,
)

Vars = Mapping[str, Any]
ResultBuilder = Callable[[Vars, Vars, str, datetime, Optional[random.Random]], Dict[str, Any]]
PayloadBuilder = Callable[[Vars, Vars], Dict[str, Any]]


def _status(flag: Any, done: str = "updated") -> str:
    return done if to_bool(flag) else "pending"


# ── Promotion workflow ─────────────────────────────────


def identify_products(variables, inputs, actor, now, rng=None):
    rng = rng or random
    products = split_csv(inputs.get("productIds"))
    reason = inputs.get("reason") or "General promotion"
    return {
        "targetProducts": products,
        "productDetails": [
            {
                "id": product.upper(),
                "name": f"Product {product}",
                "reason": reason,
                "currentStock": rng.randint(50, 249),
            }
            for product in products
        ],
        "analysisTimestamp": iso(now),
        "urgency": inputs.get("urgency") or "medium",
        "department": "Data & Analysis",
        "analyst": actor,
    }


def propose_promotion(variables, inputs, actor, now, rng=None):
    discount = int_or(inputs.get("discount"), 30)
    duration = int_or(inputs.get("durationDays"), 7)
    return {
        "discountPercentage": discount,
        "promotionText": inputs.get("promoText") or f"{discount}% OFF!",
        "promotionType": "percentage_discount",
        "validFrom": iso(now),
        "validUntil": iso(days_from(now, duration)),
        "durationDays": duration,
        "department": "Commercial & Purchasing",
    }


def prepare_instore_update(variables, inputs, actor, now, rng=None):
    ready = to_bool(inputs.get("labelsReady"))
    stores = split_csv(inputs.get("storeIds"))
    return {
        "preparationStatus": "ready" if ready else "pending",
        "labelsGenerated": ready,
        "storesNotified": stores or ["Store-001", "Store-002"],
        "preparationTimestamp": iso(now),
        "department": "Commercial & Purchasing",
    }


def update_physical_prices(variables, inputs, actor, now, rng=None):
    return {
        "physicalUpdateStatus": "labels updated" if to_bool(inputs.get("allStoresCompleted")) else "in progress",
        "updatedLabels": int_or(inputs.get("labelsUpdated"), 0),
        "storesCompleted": variables.get("storesNotified") or [],
        "updateTimestamp": iso(now),
        "department": "Commercial & Purchasing",
    }


def evaluate_profitability(variables, inputs, actor, now, rng=None):
    approved = to_bool(inputs.get("approved"))
    if approved:
        summary = "Promotion approved by Finance department. Proceed with marketing and implementation."
    else:
        summary = "Promotion rejected by Finance department. Financial metrics do not meet requirements."
    return {
        "approved": approved,
        "marginAfterPromo": as_number(float_or(inputs.get("margin"), 18.5 if approved else -2.3)),
        "originalMargin": 35.0,
        "revenueImpact": inputs.get("revenueImpact") or ("+12%" if approved else "-5%"),
        "riskLevel": inputs.get("riskLevel") or "medium",
        "financialSummary": summary,
        "analysisTimestamp": iso(now),
        "department": "Finance & Accounting",
        "approvedBy": actor,
    }


def prepare_promotion_material(variables, inputs, actor, now, rng=None):
    posters = int_or(inputs.get("posterQty"), 50)
    return {
        "communicationStatus": "published",
        "channels": {
            "flyers": {
                "status": "printed",
                "quantity": int_or(inputs.get("flyerQty"), 1000),
                "distributionDate": iso(days_from(now, 1)),
            },
            "digital": {
                "status": "live",
                "platforms": split_csv(inputs.get("digitalChannels")) or ["website", "email"],
                "impressions": 0,
            },
            "inStore": {
                "status": "deployed",
                "posters": posters,
                "shelfTalkers": posters * 2,
            },
        },
        "campaignId": f"PROMO-{epoch_ms(now)}",
        "headline": inputs.get("headline") or variables.get("promotionText") or "Special Promotion!",
        "publishTimestamp": iso(now),
        "department": "Marketing",
    }


def update_system_prices(variables, inputs, actor, now, rng=None):
    products = variables.get("targetProducts") or []
    pos_updated = to_bool(inputs.get("posUpdated"))
    terminals = int_or(inputs.get("terminalCount"), 0) if pos_updated else 0
    return {
        "systemUpdateStatus": "success",
        "systemsUpdated": {
            "pos": {
                "status": _status(pos_updated),
                "terminalsAffected": terminals,
                "updateTime": "0.3s",
            },
            "erp": {
                "status": _status(inputs.get("erpUpdated")),
                "module": "SAP_MM",
                "priceListVersion": f"PL-{epoch_ms(now)}",
            },
            "ecommerce": {
                "status": _status(inputs.get("ecomUpdated")),
                "platforms": ["website", "mobile_app"],
                "productsUpdated": len(products),
            },
            "inventory": {
                "status": _status(inputs.get("inventoryUpdated")),
                "flaggedForPromotion": len(products),
                "alertsConfigured": True,
            },
        },
        "productsUpdated": products,
        "newDiscount": f"{variables.get('discountPercentage') or 0}%",
        "updateTimestamp": iso(now),
        "department": "IT",
    }


# ── Stock replenishment workflow ───────────────────────


def compute_replenishment_quantity(variables, inputs, actor, now, rng=None):
    plan = plan_replenishment(
        inputs.get("currentStock"),
        inputs.get("avgDailySales"),
        inputs.get("leadTimeDays"),
        inputs.get("safetyStockDays"),
    )
    return {
        "productId": inputs.get("productId") or variables.get("productId") or "SKU-UNKNOWN",
        "productName": inputs.get("productName") or "Unknown Product",
        "currentStock": plan.current_stock,
        "averageDailySales": as_number(plan.daily_sales),
        "leadTimeDays": plan.lead_time_days,
        "safetyStockDays": plan.safety_stock_days,
        "reorderPoint": plan.reorder_point_units,
        "recommendedQuantity": plan.recommended_quantity,
        "calculationMethod": CALCULATION_METHOD,
        "analysisTimestamp": iso(now),
        "department": "Data & Analytics",
    }


def create_replenishment_request(variables, inputs, actor, now, rng=None):
    return {
        "requestId": f"REQ-{epoch_ms(now)}",
        "productId": variables.get("productId"),
        "productName": variables.get("productName"),
        "orderQuantity": int_or(inputs.get("orderQuantity"), variables.get("recommendedQuantity") or 100),
        "priority": inputs.get("priority") or "medium",
        "notes": inputs.get("notes") or "",
        "requestedBy": "Merchandising Department",
        "requestTimestamp": iso(now),
        "status": "pending_verification",
        "department": "Merchandising",
    }


def verify_stock(variables, inputs, actor, now, rng=None):
    verified = to_bool(inputs.get("verified"))
    physical = int_or(inputs.get("physicalCount"), 0)
    if verified:
        notes = "Stock verified below threshold. Replenishment approved to proceed."
    else:
        notes = "Stock level adequate or discrepancy found. Replenishment not needed."
    return {
        "stockVerified": verified,
        "physicalStockCount": physical,
        "stockLocation": inputs.get("location") or "Warehouse A",
        "verificationTimestamp": iso(now),
        "verifiedBy": "Merchandising Team",
        "discrepancy": abs(physical - int_or(variables.get("currentStock"), 0)),
        "verificationNotes": notes,
        "department": "Merchandising",
    }


def analyze_replenishment(variables, inputs, actor, now, rng=None):
    approved = to_bool(inputs.get("approved"))
    cost = float_or(inputs.get("unitCost"), 10.0)
    qty = int_or(variables.get("orderQuantity"), 100)
    total = cost * qty
    budget = float_or(inputs.get("budget"), 10000.0)
    if approved:
        notes = "Replenishment approved. Budget allocated and PO authorized."
    else:
        notes = "Replenishment rejected. Budget constraints or financial concerns."
    return {
        "financeApproved": approved,
        "unitCost": as_number(cost),
        "totalOrderCost": as_number(total),
        "availableBudget": as_number(budget),
        "withinBudget": total <= budget,
        "minimumOrderQuantity": int_or(inputs.get("moq"), 1),
        "paymentTerms": inputs.get("paymentTerms") or "Net 30",
        "financialAnalysis": {
            "costPerUnit": as_number(cost),
            "quantity": qty,
            "subtotal": as_number(total),
            "budgetRemaining": as_number(budget - total),
        },
        "approvalNotes": notes,
        "analysisTimestamp": iso(now),
        "approvedBy": "Finance Department" if approved else None,
        "department": "Finance & Accounting",
    }


def process_replenishment(variables, inputs, actor, now, rng=None):
    return {
        "purchaseOrderNumber": f"PO-{epoch_ms(now)}",
        "supplierId": inputs.get("supplierId") or "SUP-001",
        "supplierName": inputs.get("supplier") or "Default Supplier Inc.",
        "orderQuantity": variables.get("orderQuantity"),
        "totalCost": variables.get("totalOrderCost"),
        "estimatedDeliveryDate": inputs.get("estimatedDelivery") or default_delivery_date(now),
        "shippingMethod": inputs.get("shippingMethod") or "standard",
        "trackingNumber": inputs.get("trackingNumber") or tracking_number(rng),
        "poStatus": "issued",
        "poIssuedTimestamp": iso(now),
        "department": "Logistics & Procurement",
    }


def check_delivery(variables, inputs, actor, now, rng=None):
    conforming = to_bool(inputs.get("conforming"))
    received = int_or(inputs.get("receivedQty"), 0)
    damaged = int_or(inputs.get("damagedQty"), 0)
    if conforming:
        notes = "Delivery accepted. Quality standards met."
    else:
        notes = "Delivery rejected. Quality issues or quantity discrepancy."
    return {
        "deliveryConforming": conforming,
        "quantityReceived": received,
        "quantityAccepted": received - damaged,
        "quantityDamaged": damaged,
        "qualityScore": int_or(inputs.get("qualityScore"), 8),
        "inspectionTimestamp": iso(now),
        "inspectedBy": "Logistics Team",
        "deliveryNotes": notes,
        "department": "Logistics & Procurement",
    }


def handle_return(variables, inputs, actor, now, rng=None):
    return {
        "rmaNumber": f"RMA-{epoch_ms(now)}",
        "returnReason": inputs.get("returnReason") or "quality",
        "refundRequested": to_bool(inputs.get("refundRequested")),
        "replacementRequested": to_bool(inputs.get("replacementRequested")),
        "quantityReturned": variables.get("quantityReceived") or 0,
        "returnStatus": "initiated",
        "returnNotes": inputs.get("notes") or "Non-conforming delivery returned to supplier.",
        "returnTimestamp": iso(now),
        "processedBy": "Logistics Team",
        "department": "Logistics & Procurement",
    }


def previous_stock(variables: Vars) -> int:
    return variables.get("physicalStockCount") or variables.get("currentStock") or 0


def update_stock_systems(variables, inputs, actor, now, rng=None):
    previous = previous_stock(variables)
    added = variables.get("quantityAccepted") or 0
    return {
        "systemUpdateStatus": "success",
        "systemsUpdated": {
            "erp": {
                "status": _status(inputs.get("erpUpdated")),
                "module": "Inventory Management",
                "transactionId": f"ERP-{epoch_ms(now)}",
            },
            "wms": {
                "status": _status(inputs.get("wmsUpdated")),
                "warehouseId": "WH-001",
                "binLocation": "A-15-03",
            },
            "pos": {
                "status": _status(inputs.get("posUpdated"), "synchronized"),
                "storesUpdated": 15,
                "syncTime": "< 1 second",
            },
        },
        "stockLevels": {
            "previousStock": previous,
            "quantityAdded": added,
            "newStockLevel": int_or(inputs.get("newStockLevel"), previous + added),
        },
        "productId": variables.get("productId"),
        "updateTimestamp": iso(now),
        "updatedBy": "IT Department",
        "department": "IT",
    }


# ── ESB payloads ───────────────────────────────────────


def passthrough_payload(variables: Vars, inputs: Vars) -> Dict[str, Any]:
    return dict(inputs)


def compute_replenishment_payload(variables: Vars, inputs: Vars) -> Dict[str, Any]:
    payload = dict(inputs)
    payload["productId"] = inputs.get("productId") or variables.get("productId")
    return payload


def physical_prices_payload(variables: Vars, inputs: Vars) -> Dict[str, Any]:
    payload = dict(inputs)
    payload["storeCount"] = len(variables.get("storesNotified") or [])
    return payload


def create_replenishment_payload(variables: Vars, inputs: Vars) -> Dict[str, Any]:
    payload = dict(inputs)
    payload["productId"] = variables.get("productId")
    payload["productName"] = variables.get("productName")
    payload["orderQuantity"] = int_or(inputs.get("orderQuantity"), variables.get("recommendedQuantity") or 100)
    return payload


def verify_stock_payload(variables: Vars, inputs: Vars) -> Dict[str, Any]:
    payload = dict(inputs)
    payload["currentStock"] = variables.get("currentStock")
    return payload


def analyze_replenishment_payload(variables: Vars, inputs: Vars) -> Dict[str, Any]:
    payload = dict(inputs)
    payload["orderQuantity"] = variables.get("orderQuantity")
    return payload


def process_replenishment_payload(variables: Vars, inputs: Vars) -> Dict[str, Any]:
    payload = dict(inputs)
    payload["orderQuantity"] = variables.get("orderQuantity")
    payload["totalCost"] = variables.get("totalOrderCost")
    return payload


def handle_return_payload(variables: Vars, inputs: Vars) -> Dict[str, Any]:
    payload = dict(inputs)
    payload["quantityReturned"] = variables.get("quantityReceived") or 0
    return payload


def update_stock_systems_payload(variables: Vars, inputs: Vars) -> Dict[str, Any]:
    payload = dict(inputs)
    payload["previousStock"] = previous_stock(variables)
    payload["quantityAdded"] = variables.get("quantityAccepted") or 0
    return payload
