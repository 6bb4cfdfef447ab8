# shopify_bridge/api/endpoints/favorites.py
import logging
from fastapi import APIRouter, Depends, status

from shopify_bridge.api.responses import error_response, upstream_error_response
from shopify_bridge.dependencies import get_favorite_service
from shopify_bridge.models.favorite import FavoriteOutcome, FavoriteToggleRequest
from shopify_bridge.services.favorites import FavoriteService, InvalidActionError
from shopify_bridge.services.shopify import ShopifyServiceError

logger = logging.getLogger(__name__)
router = APIRouter()

OUTCOME_MESSAGES = {
    FavoriteOutcome.ADDED: "Spa added to favorites",
    FavoriteOutcome.REMOVED: "Spa removed from favorites",
    FavoriteOutcome.NONE: "No favorite to remove",
}


@router.post("/spa-favorites/toggle", summary="Добавить или убрать избранный спа")
async def toggle_spa_favorite(
    payload: FavoriteToggleRequest,
    favorites: FavoriteService = Depends(get_favorite_service),
):
    if not payload.customer_id:
        return error_response(status.HTTP_401_UNAUTHORIZED, "Customer ID is required")
    if not payload.spa_id or not payload.action:
        return error_response(status.HTTP_400_BAD_REQUEST, "Spa ID and action are required")

    try:
        outcome = await favorites.set_favorite(payload.customer_id, payload.spa_id, payload.action)
    except InvalidActionError:
        return error_response(status.HTTP_400_BAD_REQUEST, 'Invalid action. Use "add" or "remove"')
    except ShopifyServiceError as e:
        logger.error(f"Error updating spa favorites for customer {payload.customer_id}: {e.details or e.message}")
        return upstream_error_response("Failed to update spa favorites", e)

    return {"success": True, "message": OUTCOME_MESSAGES[outcome], "action": outcome.value}


@router.get("/spa-favorites/{customer_id}", summary="Получить id избранного спа покупателя")
async def get_spa_favorite(
    customer_id: int,
    favorites: FavoriteService = Depends(get_favorite_service),
):
    try:
        favorite = await favorites.get_favorite(customer_id)
    except ShopifyServiceError as e:
        logger.error(f"Error getting spa favorites for customer {customer_id}: {e.details or e.message}")
        return upstream_error_response("Failed to get spa favorites", e)

    if not favorite:
        return {"success": True, "favorite_spa_id": None, "message": "No favorite spa found"}
    return {"success": True, "favorite_spa_id": favorite.spa_id, "gid": favorite.gid}


@router.get("/customer-favorite-spa/{customer_id}", summary="Избранный спа покупателя с деталями")
async def get_customer_favorite_spa(
    customer_id: int,
    favorites: FavoriteService = Depends(get_favorite_service),
):
    try:
        favorite, spa = await favorites.get_favorite_details(customer_id)
    except ShopifyServiceError as e:
        logger.error(f"Error getting customer favorite spa for {customer_id}: {e.details or e.message}")
        return upstream_error_response("Failed to get customer favorite spa", e)

    if not favorite:
        return {"success": True, "message": "No favorite spa found", "spa": None}
    if spa is None:
        # Ссылка указывает на удаленный метаобъект
        logger.warning(f"Favorite spa {favorite.spa_id} of customer {customer_id} no longer exists")
        return {"success": False, "message": "Error fetching spa details", "spa": None}
    return {"success": True, "spa": spa}
