"""ESB2: Commercial, Marketing, IT, Logistics & Merchandising transforms."""

from typing import Any, Optional

from fastapi import APIRouter

from deptflow.adapters.esb.server import EsbRequest, create_esb_app, declared_fields, envelope
from deptflow.config import CONFIG
from deptflow.domain import promotion, stock
from deptflow.domain.parsing import now_utc, split_csv

ESB_NAME = "ESB2"

router = APIRouter(prefix="/api")


# ── Promotion requests ─────────────────────────────────


class ProposePromotionRequest(EsbRequest):
    discount: Optional[Any] = None
    promoText: Optional[Any] = None
    durationDays: Optional[Any] = None


class PrepareInstoreRequest(EsbRequest):
    storeIds: Optional[Any] = None
    labelsReady: Optional[Any] = None


class UpdatePhysicalPricesRequest(EsbRequest):
    labelsUpdated: Optional[Any] = None
    allStoresCompleted: Optional[Any] = None
    storeCount: Optional[Any] = None


class PrepareMaterialsRequest(EsbRequest):
    flyerQty: Optional[Any] = None
    digitalChannels: Optional[Any] = None
    posterQty: Optional[Any] = None
    headline: Optional[Any] = None


class UpdatePricesRequest(EsbRequest):
    posUpdated: Optional[Any] = None
    erpUpdated: Optional[Any] = None
    ecomUpdated: Optional[Any] = None
    inventoryUpdated: Optional[Any] = None
    terminalCount: Optional[Any] = None


# ── Stock requests ─────────────────────────────────────


class CreateReplenishmentRequest(EsbRequest):
    productId: Optional[Any] = None
    productName: Optional[Any] = None
    orderQuantity: Optional[Any] = None
    priority: Optional[Any] = None
    notes: Optional[Any] = None


class VerifyStockRequest(EsbRequest):
    physicalCount: Optional[Any] = None
    currentStock: Optional[Any] = None
    location: Optional[Any] = None
    verified: Optional[Any] = None


class ProcessReplenishmentRequest(EsbRequest):
    supplier: Optional[Any] = None
    supplierId: Optional[Any] = None
    orderQuantity: Optional[Any] = None
    totalCost: Optional[Any] = None
    shippingMethod: Optional[Any] = None
    estimatedDelivery: Optional[Any] = None


class CheckDeliveryRequest(EsbRequest):
    receivedQty: Optional[Any] = None
    damagedQty: Optional[Any] = None
    qualityScore: Optional[Any] = None
    conforming: Optional[Any] = None


class HandleReturnRequest(EsbRequest):
    returnReason: Optional[Any] = None
    refundRequested: Optional[Any] = None
    replacementRequested: Optional[Any] = None
    quantityReturned: Optional[Any] = None
    notes: Optional[Any] = None


class UpdateStockSystemsRequest(EsbRequest):
    erpUpdated: Optional[Any] = None
    wmsUpdated: Optional[Any] = None
    posUpdated: Optional[Any] = None
    previousStock: Optional[Any] = None
    quantityAdded: Optional[Any] = None
    newStockLevel: Optional[Any] = None


# ── Promotion endpoints ────────────────────────────────


@router.post("/propose-promotion")
async def propose_promotion(request: ProposePromotionRequest):
    """Promotion code plus long-form and ISO validity dates."""
    transformed = promotion.propose_promotion(request.model_dump(), now_utc())
    return envelope(ESB_NAME, "propose-promotion", transformed, declared_fields(request))


@router.post("/prepare-instore")
async def prepare_instore(request: PrepareInstoreRequest):
    original = declared_fields(request)
    original["storeIds"] = split_csv(request.storeIds)
    transformed = promotion.prepare_instore(request.model_dump(), now_utc())
    return envelope(ESB_NAME, "prepare-instore", transformed, original)


@router.post("/update-physical-prices")
async def update_physical_prices(request: UpdatePhysicalPricesRequest):
    transformed = promotion.update_physical_prices(request.model_dump(), now_utc())
    return envelope(ESB_NAME, "update-physical-prices", transformed, declared_fields(request))


@router.post("/prepare-materials")
async def prepare_materials(request: PrepareMaterialsRequest):
    """Rank channels by estimated reach and issue a campaign id."""
    transformed = promotion.prepare_materials(request.model_dump(), now_utc())
    return envelope(ESB_NAME, "prepare-materials", transformed, declared_fields(request))


@router.post("/update-prices")
async def update_prices(request: UpdatePricesRequest):
    transformed = promotion.update_prices(request.model_dump(), now_utc())
    return envelope(ESB_NAME, "update-prices", transformed, declared_fields(request))


# ── Stock endpoints (no echo of the request) ───────────


@router.post("/create-replenishment")
async def create_replenishment(request: CreateReplenishmentRequest):
    return envelope(ESB_NAME, "create-replenishment", stock.create_replenishment(request.model_dump(), now_utc()))


@router.post("/verify-stock")
async def verify_stock(request: VerifyStockRequest):
    return envelope(ESB_NAME, "verify-stock", stock.verify_stock(request.model_dump(), now_utc()))


@router.post("/process-replenishment")
async def process_replenishment(request: ProcessReplenishmentRequest):
    return envelope(ESB_NAME, "process-replenishment", stock.process_replenishment(request.model_dump(), now_utc()))


@router.post("/check-delivery")
async def check_delivery(request: CheckDeliveryRequest):
    return envelope(ESB_NAME, "check-delivery", stock.check_delivery(request.model_dump(), now_utc()))


@router.post("/handle-return")
async def handle_return(request: HandleReturnRequest):
    return envelope(ESB_NAME, "handle-return", stock.handle_return(request.model_dump(), now_utc()))


@router.post("/update-stock-systems")
async def update_stock_systems(request: UpdateStockSystemsRequest):
    return envelope(ESB_NAME, "update-stock-systems", stock.update_stock_systems(request.model_dump(), now_utc()))


app = create_esb_app(ESB_NAME, CONFIG["esb2_port"], router, "Commercial, Marketing, IT, Logistics, Merch")
