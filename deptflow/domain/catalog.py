"""Department task catalogue.

Every task type a department handles is described once here: what to ask,
which job variables to show, which ESB endpoint enriches it and how the
completion variables are built. Terminal workers, simulated workers and the
web dashboards all read from this table.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from deptflow.domain import results
from deptflow.domain.parsing import to_bool

PROMOTION = "promotion"
STOCK = "stock"

TEXT = "text"
NUMBER = "number"
YES_NO = "yesno"


@dataclass(frozen=True)
class Field:
    """One answer collected for a task."""

    name: str
    prompt: str
    default: str = ""
    kind: str = TEXT
    # Only asked when this earlier yes/no field was answered yes
    depends_on: Optional[str] = None
    # The answer drives a gateway in the process model
    decision: bool = False


@dataclass(frozen=True)
class TaskSpec:
    type: str
    title: str
    department: str
    workflow: str
    endpoint: str
    fields: Tuple[Field, ...]
    result: results.ResultBuilder
    payload: results.PayloadBuilder = results.passthrough_payload
    # (label, job variable) pairs shown to whoever handles the task
    shows: Tuple[Tuple[str, str], ...] = ()
    decision_variable: Optional[str] = None
    decision_question: Optional[str] = None

    @property
    def decision_field(self) -> Optional[Field]:
        for f in self.fields:
            if f.decision:
                return f
        return None


@dataclass(frozen=True)
class Department:
    key: str
    name: str
    icon: str
    task_types: Tuple[str, ...] = field(default_factory=tuple)


# ── Promotion workflow ─────────────────────────────────

_PROMOTION_TASKS = [
    TaskSpec(
        type="identify-products",
        title="Identify Products for Promotion",
        department="data-analysis",
        workflow=PROMOTION,
        endpoint="/api/identify-products",
        fields=(
            Field("productIds", "Enter product IDs to promote (comma-separated, e.g., P123,P456,P789)", "P123,P456,P789"),
            Field("reason", "Reason for promotion (e.g., expiring, low_sales, overstock)", "expiring"),
            Field("urgency", "Urgency level (low/medium/high)", "high"),
        ),
        result=results.identify_products,
        shows=(("Reason", "reason"), ("Initiator", "initiator")),
    ),
    TaskSpec(
        type="propose-promotion",
        title="Propose Discount/Promotion Strategy",
        department="commercial",
        workflow=PROMOTION,
        endpoint="/api/propose-promotion",
        fields=(
            Field("discount", "Enter discount percentage (e.g., 30)", "30", NUMBER),
            Field("promoText", 'Enter promotional text (e.g., "30% OFF THIS WEEK!")', "30% OFF THIS WEEK ONLY!"),
            Field("durationDays", "Promotion duration in days (e.g., 7)", "7", NUMBER),
        ),
        result=results.propose_promotion,
        shows=(("Products to promote", "targetProducts"),),
    ),
    TaskSpec(
        type="evaluate-profitability",
        title="Financial Feasibility Evaluation",
        department="finance",
        workflow=PROMOTION,
        endpoint="/api/evaluate-profitability",
        fields=(
            Field("margin", "Expected margin after promotion (%)", "18.5", NUMBER),
            Field("revenueImpact", "Expected revenue impact (e.g., +15% or -5%)", "+12%"),
            Field("riskLevel", "Risk level (low/medium/high)", "low"),
            Field("approved", "APPROVE this promotion? (yes/no)", "yes", YES_NO, decision=True),
        ),
        result=results.evaluate_profitability,
        shows=(
            ("Products", "targetProducts"),
            ("Discount (%)", "discountPercentage"),
            ("Promo Text", "promotionText"),
            ("Duration (days)", "durationDays"),
        ),
        decision_variable="approved",
        decision_question="Should we approve this promotion?",
    ),
    TaskSpec(
        type="prepare-promotion-material",
        title="Prepare & Publish Promotion Materials",
        department="marketing",
        workflow=PROMOTION,
        endpoint="/api/prepare-materials",
        fields=(
            Field("flyerQty", "Number of flyers to print", "5000", NUMBER),
            Field(
                "digitalChannels",
                "Digital channels (comma-separated, e.g., website,email,facebook,instagram)",
                "website,mobile_app,email,social_media",
            ),
            Field("posterQty", "Number of in-store posters", "150", NUMBER),
            Field("headline", "Campaign headline (or press Enter to use promo text)"),
        ),
        result=results.prepare_promotion_material,
        shows=(
            ("Text", "promotionText"),
            ("Discount (%)", "discountPercentage"),
            ("Products", "targetProducts"),
        ),
    ),
    TaskSpec(
        type="update-system-prices",
        title="Update System Prices",
        department="it",
        workflow=PROMOTION,
        endpoint="/api/update-prices",
        fields=(
            Field("posUpdated", "POS terminals updated? (yes/no)", "yes", YES_NO),
            Field("terminalCount", "Number of POS terminals", "45", NUMBER, depends_on="posUpdated"),
            Field("erpUpdated", "ERP system updated? (yes/no)", "yes", YES_NO),
            Field("ecomUpdated", "E-commerce platform updated? (yes/no)", "yes", YES_NO),
            Field("inventoryUpdated", "Inventory system updated? (yes/no)", "yes", YES_NO),
        ),
        result=results.update_system_prices,
        shows=(("Products", "targetProducts"), ("New Discount (%)", "discountPercentage")),
    ),
    TaskSpec(
        type="prepare-instore-update",
        title="Prepare In-Store Price Updates",
        department="commercial",
        workflow=PROMOTION,
        endpoint="/api/prepare-instore",
        fields=(
            Field(
                "storeIds",
                "Enter store IDs to notify (comma-separated, e.g., S001,S002,S003)",
                "Store-001,Store-002,Store-003",
            ),
            Field("labelsReady", "Are price labels printed and ready? (yes/no)", "yes", YES_NO),
        ),
        result=results.prepare_instore_update,
        shows=(("Products", "targetProducts"),),
    ),
    TaskSpec(
        type="update-physical-prices",
        title="Update Physical Price Labels",
        department="commercial",
        workflow=PROMOTION,
        endpoint="/api/update-physical-prices",
        fields=(
            Field("labelsUpdated", "Number of labels updated", "45", NUMBER),
            Field("allStoresCompleted", "All stores completed? (yes/no)", "yes", YES_NO),
        ),
        result=results.update_physical_prices,
        payload=results.physical_prices_payload,
        shows=(("Stores", "storesNotified"),),
    ),
]

# ── Stock replenishment workflow ───────────────────────

_STOCK_TASKS = [
    TaskSpec(
        type="compute-replenishment-quantity",
        title="Compute Optimal Replenishment Quantity",
        department="data-analysis",
        workflow=STOCK,
        endpoint="/api/compute-replenishment",
        fields=(
            Field("productId", "Product ID (e.g., SKU-12345)"),
            Field("productName", "Product Name", "Sample Product"),
            Field("currentStock", "Current Stock Level", "20", NUMBER),
            Field("avgDailySales", "Average Daily Sales", "10", NUMBER),
            Field("leadTimeDays", "Supplier Lead Time (days)", "7", NUMBER),
            Field("safetyStockDays", "Safety Stock (days of coverage)", "5", NUMBER),
        ),
        result=results.compute_replenishment_quantity,
        payload=results.compute_replenishment_payload,
        shows=(("Product ID", "productId"), ("Alert Source", "alertSource"), ("Trigger", "triggerReason")),
    ),
    TaskSpec(
        type="create-replenishment-request",
        title="Create Replenishment Request",
        department="merchandising",
        workflow=STOCK,
        endpoint="/api/create-replenishment",
        fields=(
            Field("orderQuantity", "Order Quantity (empty for the recommended quantity)", "", NUMBER),
            Field("priority", "Priority (low/medium/high/urgent)", "high"),
            Field("notes", "Additional notes (or press Enter to skip)"),
        ),
        result=results.create_replenishment_request,
        payload=results.create_replenishment_payload,
        shows=(
            ("Product", "productName"),
            ("Product ID", "productId"),
            ("Current Stock", "currentStock"),
            ("Recommended Quantity", "recommendedQuantity"),
            ("Reorder Point", "reorderPoint"),
        ),
    ),
    TaskSpec(
        type="verify-stock",
        title="Verify Stock Level",
        department="merchandising",
        workflow=STOCK,
        endpoint="/api/verify-stock",
        fields=(
            Field("physicalCount", "Physical stock count", "18", NUMBER),
            Field("location", "Stock location verified (e.g., Warehouse A, Shelf B3)", "Warehouse A"),
            Field(
                "verified",
                "Confirm stock is below threshold and needs replenishment? (yes/no)",
                "yes",
                YES_NO,
                decision=True,
            ),
        ),
        result=results.verify_stock,
        payload=results.verify_stock_payload,
        shows=(
            ("Request ID", "requestId"),
            ("Product", "productName"),
            ("System Stock", "currentStock"),
            ("Order Quantity", "orderQuantity"),
        ),
        decision_variable="stockVerified",
        decision_question="Does the stock need replenishment?",
    ),
    TaskSpec(
        type="analyze-replenishment",
        title="Financial Analysis of Replenishment Request",
        department="finance",
        workflow=STOCK,
        endpoint="/api/analyze-replenishment",
        fields=(
            Field("unitCost", "Unit cost ($)", "10", NUMBER),
            Field("budget", "Available budget ($)", "10000", NUMBER),
            Field("moq", "Minimum Order Quantity (MOQ)", "1", NUMBER),
            Field("paymentTerms", "Payment terms (e.g., Net 30, COD)", "Net 30"),
            Field("approved", "APPROVE this replenishment? (yes/no)", "yes", YES_NO, decision=True),
        ),
        result=results.analyze_replenishment,
        payload=results.analyze_replenishment_payload,
        shows=(
            ("Request ID", "requestId"),
            ("Product", "productName"),
            ("Order Quantity", "orderQuantity"),
            ("Priority", "priority"),
            ("Physical Stock", "physicalStockCount"),
        ),
        decision_variable="financeApproved",
        decision_question="Approve this replenishment order?",
    ),
    TaskSpec(
        type="process-replenishment",
        title="Process Replenishment Order",
        department="logistics",
        workflow=STOCK,
        endpoint="/api/process-replenishment",
        fields=(
            Field("supplier", "Supplier name", "Default Supplier Inc."),
            Field("supplierId", "Supplier ID", "SUP-001"),
            Field("estimatedDelivery", "Estimated delivery date (YYYY-MM-DD)"),
            Field("shippingMethod", "Shipping method (standard/express/freight)", "standard"),
            Field("trackingNumber", "Tracking number (or press Enter to generate)"),
        ),
        result=results.process_replenishment,
        payload=results.process_replenishment_payload,
        shows=(
            ("Request ID", "requestId"),
            ("Product", "productName"),
            ("Quantity", "orderQuantity"),
            ("Total Cost ($)", "totalOrderCost"),
            ("Payment Terms", "paymentTerms"),
        ),
    ),
    TaskSpec(
        type="check-delivery",
        title="Receive and Check Delivery",
        department="logistics",
        workflow=STOCK,
        endpoint="/api/check-delivery",
        fields=(
            Field("receivedQty", "Quantity received", "100", NUMBER),
            Field("damagedQty", "Damaged/defective items", "0", NUMBER),
            Field("qualityScore", "Quality score (1-10)", "9", NUMBER),
            Field("conforming", "Accept this delivery? (yes/no)", "yes", YES_NO, decision=True),
        ),
        result=results.check_delivery,
        shows=(
            ("PO Number", "purchaseOrderNumber"),
            ("Supplier", "supplierName"),
            ("Expected Quantity", "orderQuantity"),
            ("Tracking", "trackingNumber"),
        ),
        decision_variable="deliveryConforming",
        decision_question="Is the delivery conforming?",
    ),
    TaskSpec(
        type="handle-return",
        title="Process Return for Non-Conforming Delivery",
        department="logistics",
        workflow=STOCK,
        endpoint="/api/handle-return",
        fields=(
            Field("returnReason", "Return reason (quality/damage/wrong-item/quantity)", "quality"),
            Field("refundRequested", "Request refund? (yes/no)", "yes", YES_NO),
            Field("replacementRequested", "Request replacement? (yes/no)", "yes", YES_NO),
            Field("notes", "Additional notes"),
        ),
        result=results.handle_return,
        payload=results.handle_return_payload,
        shows=(
            ("PO Number", "purchaseOrderNumber"),
            ("Supplier", "supplierName"),
            ("Quality Score", "qualityScore"),
            ("Damaged Items", "quantityDamaged"),
        ),
    ),
    TaskSpec(
        type="update-stock-systems",
        title="Update Stock in Systems",
        department="it",
        workflow=STOCK,
        endpoint="/api/update-stock-systems",
        fields=(
            Field("erpUpdated", "ERP system updated? (yes/no)", "yes", YES_NO),
            Field("wmsUpdated", "WMS (Warehouse Management) updated? (yes/no)", "yes", YES_NO),
            Field("posUpdated", "POS systems synchronized? (yes/no)", "yes", YES_NO),
            Field("newStockLevel", "New total stock level (empty for previous + accepted)", "", NUMBER),
        ),
        result=results.update_stock_systems,
        payload=results.update_stock_systems_payload,
        shows=(
            ("Product", "productName"),
            ("Product ID", "productId"),
            ("PO Number", "purchaseOrderNumber"),
            ("Quantity Accepted", "quantityAccepted"),
            ("Physical Stock", "physicalStockCount"),
        ),
    ),
]

TASKS: Dict[str, TaskSpec] = {spec.type: spec for spec in _PROMOTION_TASKS + _STOCK_TASKS}

_DEPARTMENT_INFO = [
    ("data-analysis", "Data & Analysis", "📊"),
    ("commercial", "Commercial & Purchasing", "🛒"),
    ("finance", "Finance & Accounting", "💰"),
    ("marketing", "Marketing", "📣"),
    ("it", "IT", "💻"),
    ("logistics", "Logistics & Procurement", "🚚"),
    ("merchandising", "Merchandising", "🏷️"),
]

DEPARTMENTS: Dict[str, Department] = {
    key: Department(
        key=key,
        name=name,
        icon=icon,
        task_types=tuple(spec.type for spec in TASKS.values() if spec.department == key),
    )
    for key, name, icon in _DEPARTMENT_INFO
}


class UnknownDepartmentError(KeyError):
    pass


def get_department(key: str) -> Department:
    try:
        return DEPARTMENTS[key]
    except KeyError:
        raise UnknownDepartmentError(key) from None


def tasks_for(department: str) -> List[TaskSpec]:
    return [TASKS[t] for t in get_department(department).task_types]


def simulated_answers(spec: TaskSpec, approve: bool = True) -> Dict[str, str]:
    """Field defaults, with the decision field forced to ``approve``."""
    answers = {}
    for f in spec.fields:
        if f.depends_on and not to_bool(answers.get(f.depends_on)):
            continue
        answers[f.name] = ("yes" if approve else "no") if f.decision else f.default
    return answers
