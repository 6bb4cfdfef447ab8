# shopify_bridge/api/endpoints/interactions.py
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from shopify_bridge.api.responses import error_response, upstream_error_response
from shopify_bridge.dependencies import get_interaction_tracker
from shopify_bridge.models.interaction import InteractionEvent, TrackAddToCartRequest, TrackWishlistRequest
from shopify_bridge.services.interactions import InteractionTracker
from shopify_bridge.services.shopify import ShopifyServiceError

logger = logging.getLogger(__name__)
router = APIRouter()


async def _track(tracker: InteractionTracker, payload: TrackAddToCartRequest, event_type: Optional[str], error: str):
    if not payload.customerId and not payload.visitorId:
        return error_response(status.HTTP_400_BAD_REQUEST, "customerId or visitorId is required")

    event = InteractionEvent(
        eventType=event_type,
        productId=payload.productId,
        variantId=payload.variantId,
        customerId=payload.customerId or None,
        visitorId=payload.visitorId,
    )

    # Анонимные посетители не сохраняются: лог живет в метаполе покупателя
    if payload.customerId:
        try:
            await tracker.append_event(payload.customerId, event)
        except ShopifyServiceError as e:
            logger.error(f"Error tracking '{event_type}' for customer {payload.customerId}: {e.details or e.message}")
            return upstream_error_response(error, e)
    else:
        logger.debug(f"Skipping storage of '{event_type}' for anonymous visitor {payload.visitorId}")
    return {"success": True}


@router.post("/track-add-to-cart", summary="Записать добавление в корзину")
async def track_add_to_cart(
    payload: TrackAddToCartRequest,
    tracker: InteractionTracker = Depends(get_interaction_tracker),
):
    return await _track(tracker, payload, "add_to_cart", "Failed to track event")


@router.post("/track-wishlist", summary="Записать действие со списком желаний")
async def track_wishlist(
    payload: TrackWishlistRequest,
    tracker: InteractionTracker = Depends(get_interaction_tracker),
):
    return await _track(tracker, payload, payload.eventType, "Failed to track wishlist event")


@router.get("/user-interactions", summary="События покупателя, новые первыми")
async def get_user_interactions(
    customer_id: Optional[int] = Query(None, description="ID покупателя Shopify"),
    tracker: InteractionTracker = Depends(get_interaction_tracker),
):
    if not customer_id:
        return error_response(status.HTTP_400_BAD_REQUEST, "customer_id parameter is required")

    try:
        interactions = await tracker.list_interactions(customer_id)
    except ShopifyServiceError as e:
        logger.error(f"Error fetching user interactions for customer {customer_id}: {e.details or e.message}")
        return upstream_error_response("Failed to fetch interaction data", e)

    return {"success": True, "count": len(interactions), "interactions": interactions}
