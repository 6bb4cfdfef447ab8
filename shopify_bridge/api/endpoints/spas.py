# shopify_bridge/api/endpoints/spas.py
import logging
from fastapi import APIRouter, Depends, status

from shopify_bridge.api.responses import error_response, upstream_error_response
from shopify_bridge.dependencies import get_spa_directory
from shopify_bridge.services.shopify import ShopifyServiceError
from shopify_bridge.services.spas import SpaDirectory

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/spa-details/{spa_id}", summary="Детали спа по id метаобъекта")
async def get_spa_details(
    spa_id: str,
    spas: SpaDirectory = Depends(get_spa_directory),
):
    try:
        spa = await spas.get_spa(spa_id)
    except ShopifyServiceError as e:
        logger.error(f"Error getting spa details for {spa_id}: {e.details or e.message}")
        return upstream_error_response("Failed to get spa details", e)

    if spa is None:
        return error_response(status.HTTP_404_NOT_FOUND, "Spa not found")
    return {"success": True, "spa": spa}


@router.get("/spas", summary="Все спа плоским списком")
async def list_spas(spas: SpaDirectory = Depends(get_spa_directory)):
    try:
        records = await spas.list_spas()
    except ShopifyServiceError as e:
        logger.error(f"Error listing spas: {e.details or e.message}")
        return upstream_error_response("Failed to list spas", e)
    return {"success": True, "count": len(records), "spas": records}


@router.get("/spas/geojson", summary="Все спа как GeoJSON FeatureCollection")
async def list_spas_geojson(spas: SpaDirectory = Depends(get_spa_directory)):
    try:
        collection = await spas.list_spas_geojson()
    except ShopifyServiceError as e:
        logger.error(f"Error building spas GeoJSON: {e.details or e.message}")
        return upstream_error_response("Failed to list spas", e)
    return collection.model_dump()
