"""Promotion workflow transforms.

Pure functions behind the ESB promotion endpoints. Each takes the request
payload (wire field names) and returns the ``transformed`` object.
"""

import random
import string
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from deptflow.domain.parsing import (
    BASE36,
    days_from,
    epoch_ms,
    float_or,
    format_long_date,
    int_or,
    iso,
    random_code,
    round_half_up,
    split_csv,
    to_bool,
)

URGENCY_SCORES = {"high": 30, "medium": 20, "low": 10}
REASON_SCORES = {"expiring": 40, "low_sales": 30, "overstock": 25, "seasonal": 20}
DEFAULT_SCORE = 15
MAX_ANALYSIS_SCORE = 100

BASELINE_MARGIN = 35.0

# Estimated audience per digital channel
CHANNEL_REACH = {
    "email": 5000,
    "social_media": 10000,
    "website": 3000,
    "mobile_app": 2000,
    "facebook": 8000,
    "instagram": 7000,
    "twitter": 4000,
}
DEFAULT_CHANNEL_REACH = 1000
REACH_PER_FLYER = 2
REACH_PER_POSTER = 50
LABELS_PER_STORE = 50


def _lower(value: Any) -> str:
    return str(value).lower() if value else ""


def analysis_score(product_count: int, reason: Any, urgency: Any) -> int:
    """Uncapped analysis score; callers cap it for display."""
    urgency_score = URGENCY_SCORES.get(_lower(urgency), DEFAULT_SCORE)
    reason_score = REASON_SCORES.get(_lower(reason), DEFAULT_SCORE)
    return urgency_score + reason_score + product_count * 2


def score_priority(score: int) -> str:
    if score > 60:
        return "high"
    if score > 40:
        return "medium"
    return "low"


def identify_products(payload: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    products = split_csv(payload.get("productIds"))
    normalized = [p.upper() for p in products]
    score = analysis_score(len(products), payload.get("reason"), payload.get("urgency"))
    return {
        "normalizedIds": normalized,
        "analysisScore": min(score, MAX_ANALYSIS_SCORE),
        "productCount": len(normalized),
        "priority": score_priority(score),
        "enrichedAt": iso(now),
    }


def risk_category(risk_level: Any, margin: float) -> str:
    risk = _lower(risk_level) or "medium"
    if risk == "high" or margin < 10:
        return "HIGH_RISK"
    if risk == "low" and margin > 20:
        return "LOW_RISK"
    return "MODERATE_RISK"


def recommendation(approved: bool, category: str) -> str:
    if not approved:
        return "PROMOTION_REJECTED"
    return {
        "LOW_RISK": "PROCEED_IMMEDIATELY",
        "MODERATE_RISK": "PROCEED_WITH_MONITORING",
    }.get(category, "PROCEED_WITH_CAUTION")


def evaluate_profitability(payload: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    margin = float_or(payload.get("margin"), 0.0)
    revenue_raw = str(payload.get("revenueImpact")).replace("%", "", 1).replace("+", "", 1)
    revenue = float_or(revenue_raw, 0.0)
    approved = to_bool(payload.get("approved"))
    category = risk_category(payload.get("riskLevel"), margin)
    margin_impact = (margin - BASELINE_MARGIN) / BASELINE_MARGIN * 100
    return {
        "marginImpact": f"{margin_impact:.2f}%",
        "riskCategory": category,
        "recommendation": recommendation(approved, category),
        "financialScore": round_half_up((margin + revenue) / 2),
        "approvalStatus": "APPROVED" if approved else "REJECTED",
        "evaluatedAt": iso(now),
    }


def promotion_code(discount: int, duration: int, rng: Optional[random.Random] = None) -> str:
    return f"PROMO{discount}{random_code(4, string.ascii_uppercase, rng)}{duration}D"


def propose_promotion(
    payload: Mapping[str, Any],
    now: datetime,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    discount = int_or(payload.get("discount"), 20)
    duration = int_or(payload.get("durationDays"), 7)
    end = days_from(now, duration)
    return {
        "promotionCode": promotion_code(discount, duration, rng),
        "discountPercentage": discount,
        "promotionText": payload.get("promoText") or f"{discount}% OFF!",
        "formattedStartDate": format_long_date(now),
        "formattedEndDate": format_long_date(end),
        "startDateISO": iso(now),
        "endDateISO": iso(end),
        "durationDays": duration,
        "generatedAt": iso(now),
    }


def normalize_store_id(store: str) -> str:
    normalized = store.upper()
    if normalized.startswith("S"):
        return normalized
    return "S" + normalized.rjust(3, "0")


def prepare_instore(payload: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    labels_ready = to_bool(payload.get("labelsReady"))
    stores = [
        {
            "id": normalize_store_id(store),
            "originalId": store,
            "valid": True,
            "status": "ready" if labels_ready else "pending",
        }
        for store in split_csv(payload.get("storeIds"))
    ]
    return {
        "validatedStores": stores,
        "storeCount": len(stores),
        "allValid": all(s["valid"] for s in stores),
        "labelsStatus": "READY" if labels_ready else "PENDING",
        "preparedAt": iso(now),
    }


def completion_rate(labels: int, stores: int, completed: bool) -> int:
    if completed:
        return 100
    return min(95, round_half_up(labels / (stores * LABELS_PER_STORE) * 100))


def completion_status(rate: int) -> str:
    if rate == 100:
        return "COMPLETE"
    if rate > 75:
        return "NEARLY_COMPLETE"
    return "IN_PROGRESS"


def update_physical_prices(payload: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    labels = int_or(payload.get("labelsUpdated"), 0)
    stores = int_or(payload.get("storeCount"), 10)
    rate = completion_rate(labels, stores, to_bool(payload.get("allStoresCompleted")))
    return {
        "updateSummary": {
            "totalLabelsUpdated": labels,
            "estimatedStores": stores,
            "averageLabelsPerStore": round_half_up(labels / stores) if stores > 0 else 0,
        },
        "completionRate": f"{rate}%",
        "completionStatus": completion_status(rate),
        "updatedAt": iso(now),
    }


def channel_priority(channels: List[str]) -> List[Dict[str, Any]]:
    ranked = sorted(
        ({"channel": ch, "reach": CHANNEL_REACH.get(ch, DEFAULT_CHANNEL_REACH)} for ch in channels),
        key=lambda item: -item["reach"],
    )
    return [dict(item, priority=idx + 1) for idx, item in enumerate(ranked)]


def prepare_materials(
    payload: Mapping[str, Any],
    now: datetime,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    channels = split_csv(payload.get("digitalChannels"), lower=True)
    flyers = int_or(payload.get("flyerQty"), 0)
    posters = int_or(payload.get("posterQty"), 0)
    flyer_reach = flyers * REACH_PER_FLYER
    poster_reach = posters * REACH_PER_POSTER
    digital_reach = sum(CHANNEL_REACH.get(ch, DEFAULT_CHANNEL_REACH) for ch in channels)
    return {
        "channelPriority": channel_priority(channels),
        "estimatedReach": {
            "total": flyer_reach + poster_reach + digital_reach,
            "breakdown": {
                "flyers": flyer_reach,
                "posters": poster_reach,
                "digital": digital_reach,
            },
        },
        "campaignId": f"CAMP-{epoch_ms(now)}-{random_code(4, BASE36, rng)}",
        "headline": payload.get("headline") or "Special Promotion!",
        "materialsSummary": {
            "flyerCount": flyers,
            "posterCount": posters,
            "digitalChannelCount": len(channels),
        },
        "preparedAt": iso(now),
    }


def update_prices(
    payload: Mapping[str, Any],
    now: datetime,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    systems = [
        ("POS", to_bool(payload.get("posUpdated"))),
        ("ERP", to_bool(payload.get("erpUpdated"))),
        ("E-Commerce", to_bool(payload.get("ecomUpdated"))),
        ("Inventory", to_bool(payload.get("inventoryUpdated"))),
    ]
    statuses = []
    for name, updated in systems:
        status = {"system": name, "status": "SYNCED" if updated else "PENDING"}
        if name == "POS":
            status["terminals"] = int_or(payload.get("terminalCount"), 0)
        statuses.append(status)

    updated_count = sum(1 for _, updated in systems if updated)
    total = len(systems)
    return {
        "syncTimestamp": iso(now),
        "batchId": f"BATCH-{epoch_ms(now)}-{random_code(6, BASE36, rng)}",
        "systemStatuses": statuses,
        "summary": {
            "totalSystems": total,
            "updatedSystems": updated_count,
            "pendingSystems": total - updated_count,
            "syncPercentage": f"{round_half_up(updated_count / total * 100)}%",
        },
    }
