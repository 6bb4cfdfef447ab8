# shopify_bridge/dependencies.py
import logging
from fastapi import Request, HTTPException, status, Depends
from shopify_bridge.core.config import settings
from shopify_bridge.services.shopify import ShopifyService
from shopify_bridge.services.interactions import InteractionTracker
from shopify_bridge.services.favorites import FavoriteService
from shopify_bridge.services.spas import SpaDirectory
from shopify_bridge.services.customers import CustomerProfileService

logger = logging.getLogger(__name__)


async def get_shopify_service(request: Request) -> ShopifyService:
    service = getattr(request.app.state, 'shopify_service', None)
    if not service or not isinstance(service, ShopifyService):
        logger.error("Shopify service is not initialized in app.state")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Shopify service is unavailable."
        )
    return service

# Сервисы ниже дешевые обертки над ShopifyService, создаются на каждый запрос

async def get_interaction_tracker(shopify: ShopifyService = Depends(get_shopify_service)) -> InteractionTracker:
    return InteractionTracker(shopify)

async def get_spa_directory(shopify: ShopifyService = Depends(get_shopify_service)) -> SpaDirectory:
    return SpaDirectory(shopify, metaobject_type=settings.SPA_METAOBJECT_TYPE, page_size=settings.SPA_PAGE_SIZE)

async def get_favorite_service(
    shopify: ShopifyService = Depends(get_shopify_service),
    spas: SpaDirectory = Depends(get_spa_directory),
) -> FavoriteService:
    return FavoriteService(shopify, spas=spas)

async def get_customer_profile_service(shopify: ShopifyService = Depends(get_shopify_service)) -> CustomerProfileService:
    return CustomerProfileService(shopify)
