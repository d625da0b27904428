"""The two BPMN processes and their start variables."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from deptflow.domain.parsing import iso

PROMOTION_PROCESS_ID = "ProductPromotionWorkflow"
STOCK_PROCESS_ID = "StockReplenishmentWorkflow"


@dataclass(frozen=True)
class Workflow:
    key: str
    process_id: str
    label: str


WORKFLOWS: Dict[str, Workflow] = {
    "promotion": Workflow("promotion", PROMOTION_PROCESS_ID, "Product Promotion"),
    "stock": Workflow("stock", STOCK_PROCESS_ID, "Stock Replenishment"),
}


def promotion_variables(
    now: datetime,
    initiator: str = "API Gateway",
    reason: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "initiator": initiator,
        "requestTimestamp": iso(now),
        "reason": reason or "Monthly promotion cycle",
    }


def stock_variables(
    now: datetime,
    product_id: Optional[str] = None,
    alert_source: Optional[str] = None,
    initiator: str = "Stock Management System",
    reason: Optional[str] = None,
) -> Dict[str, Any]:
    variables = {
        "productId": product_id or "SKU-UNKNOWN",
        "alertSource": alert_source or "manual",
        "initiator": initiator,
        "requestTimestamp": iso(now),
        "triggerReason": "Product out of stock detected",
    }
    if reason:
        variables["reason"] = reason
    return variables
