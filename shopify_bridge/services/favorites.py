# shopify_bridge/services/favorites.py
import logging
from typing import Any, Dict, Optional, Tuple, Union

from shopify_bridge.models.favorite import FavoriteAction, FavoriteOutcome, FavoriteReference
from shopify_bridge.models.metafield import Metafield, MetafieldType
from shopify_bridge.services.shopify import ShopifyService, ShopifyServiceError
from shopify_bridge.services.spas import SpaDirectory, strip_metaobject_gid, to_metaobject_gid

logger = logging.getLogger(__name__)

FAVORITE_NAMESPACE = "custom"
FAVORITE_KEY = "spa_favourite"


class InvalidActionError(ValueError):
    """Неизвестное действие для переключения избранного."""
    pass


class FavoriteService:
    """
    Один избранный спа на покупателя в метаполе custom.spa_favourite
    (ссылка на метаобъект, никогда не список).
    """

    def __init__(self, shopify: ShopifyService, spas: Optional[SpaDirectory] = None):
        self.shopify = shopify
        self.spas = spas or SpaDirectory(shopify)

    async def set_favorite(self, owner_id: Union[int, str], spa_id: Union[int, str], action: str) -> FavoriteOutcome:
        # Проверяем действие до любых запросов к Shopify
        try:
            action = FavoriteAction(action)
        except ValueError as e:
            raise InvalidActionError(f"Invalid action '{action}'. Use \"add\" or \"remove\"") from e

        existing = await self.shopify.get_metafield(owner_id, FAVORITE_NAMESPACE, FAVORITE_KEY)

        if action is FavoriteAction.ADD:
            desired = Metafield(
                id=existing.id if existing else None,
                namespace=FAVORITE_NAMESPACE,
                key=FAVORITE_KEY,
                type=MetafieldType.METAOBJECT_REFERENCE.value,
                value=to_metaobject_gid(spa_id),
            )
            await self.shopify.save_metafield(owner_id, desired)
            logger.info(f"Spa {spa_id} set as favorite for customer {owner_id}")
            return FavoriteOutcome.ADDED

        if not existing:
            logger.info(f"No favorite to remove for customer {owner_id}")
            return FavoriteOutcome.NONE

        try:
            await self.shopify.delete_metafield(existing.id)
        except ShopifyServiceError as e:
            if e.status_code != 404:
                raise
            logger.info(f"Favorite metafield {existing.id} of customer {owner_id} already deleted")
        logger.info(f"Favorite removed for customer {owner_id}")
        return FavoriteOutcome.REMOVED

    async def get_favorite(self, owner_id: Union[int, str]) -> Optional[FavoriteReference]:
        existing = await self.shopify.get_metafield(owner_id, FAVORITE_NAMESPACE, FAVORITE_KEY)
        if not existing or not existing.value:
            return None
        return FavoriteReference(spa_id=strip_metaobject_gid(existing.value), gid=existing.value)

    async def get_favorite_details(
        self, owner_id: Union[int, str]
    ) -> Tuple[Optional[FavoriteReference], Optional[Dict[str, Any]]]:
        """
        Избранный спа покупателя вместе с деталями метаобъекта.
        (None, None) если избранного нет, (ссылка, None) если метаобъект уже удален.
        """
        favorite = await self.get_favorite(owner_id)
        if not favorite:
            return None, None
        return favorite, await self.spas.get_spa(favorite.spa_id)
