"""ESB1: Data Analysis & Finance transforms."""

from typing import Any, Optional

from fastapi import APIRouter

from deptflow.adapters.esb.server import EsbRequest, create_esb_app, declared_fields, envelope
from deptflow.config import CONFIG
from deptflow.domain import promotion, stock
from deptflow.domain.parsing import now_utc, split_csv

ESB_NAME = "ESB1"

router = APIRouter(prefix="/api")


class IdentifyProductsRequest(EsbRequest):
    productIds: Optional[Any] = None
    reason: Optional[Any] = None
    urgency: Optional[Any] = None


class EvaluateProfitabilityRequest(EsbRequest):
    margin: Optional[Any] = None
    revenueImpact: Optional[Any] = None
    riskLevel: Optional[Any] = None
    approved: Optional[Any] = None


class ComputeReplenishmentRequest(EsbRequest):
    productId: Optional[Any] = None
    productName: Optional[Any] = None
    currentStock: Optional[Any] = None
    avgDailySales: Optional[Any] = None
    leadTimeDays: Optional[Any] = None
    safetyStockDays: Optional[Any] = None


class AnalyzeReplenishmentRequest(EsbRequest):
    unitCost: Optional[Any] = None
    budget: Optional[Any] = None
    moq: Optional[Any] = None
    orderQuantity: Optional[Any] = None
    paymentTerms: Optional[Any] = None
    approved: Optional[Any] = None


@router.post("/identify-products")
async def identify_products(request: IdentifyProductsRequest):
    """Uppercase product ids and score the promotion request."""
    original = declared_fields(request)
    original["productIds"] = split_csv(request.productIds)
    transformed = promotion.identify_products(request.model_dump(), now_utc())
    return envelope(ESB_NAME, "identify-products", transformed, original)


@router.post("/evaluate-profitability")
async def evaluate_profitability(request: EvaluateProfitabilityRequest):
    """Margin impact, risk category and recommendation."""
    transformed = promotion.evaluate_profitability(request.model_dump(), now_utc())
    return envelope(ESB_NAME, "evaluate-profitability", transformed, declared_fields(request))


@router.post("/compute-replenishment")
async def compute_replenishment(request: ComputeReplenishmentRequest):
    transformed = stock.compute_replenishment(request.model_dump(), now_utc())
    return envelope(ESB_NAME, "compute-replenishment", transformed, declared_fields(request))


@router.post("/analyze-replenishment")
async def analyze_replenishment(request: AnalyzeReplenishmentRequest):
    transformed = stock.analyze_replenishment(request.model_dump(), now_utc())
    return envelope(ESB_NAME, "analyze-replenishment", transformed, declared_fields(request))


app = create_esb_app(ESB_NAME, CONFIG["esb1_port"], router, "Data Analysis & Finance")
