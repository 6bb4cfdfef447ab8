# shopify_bridge/services/interactions.py
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from shopify_bridge.models.interaction import InteractionEvent
from shopify_bridge.models.metafield import Metafield, MetafieldType
from shopify_bridge.services.shopify import ShopifyService

logger = logging.getLogger(__name__)

INTERACTIONS_NAMESPACE = "custom"
INTERACTIONS_KEY = "customer_interactions"

# До Python 3.11 fromisoformat понимает только 3 или 6 цифр дробной части
_FRACTION_RE = re.compile(r"\.(\d+)")


def decode_interaction_log(raw: Optional[str], owner_id: Union[int, str, None] = None) -> List[Any]:
    """
    Декодирует сохраненный лог. Битый JSON логируется и считается пустым логом,
    одиночное значение оборачивается в список.
    """
    if not raw:
        return []
    try:
        decoded = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.error(f"Error parsing existing interactions for customer {owner_id}: {e}. Resetting log.")
        return []
    if not isinstance(decoded, list):
        return [decoded]
    return decoded


def plan_append(current: Optional[Metafield], event: Dict[str, Any], owner_id: Union[int, str, None] = None) -> Metafield:
    """
    Чистая функция: по текущему снимку метаполя строит желаемое.
    id снимка сохраняется, поэтому запись будет обновлением; без снимка получится создание.
    """
    log = decode_interaction_log(current.value if current else None, owner_id)
    log.append(event)
    return Metafield(
        id=current.id if current else None,
        namespace=INTERACTIONS_NAMESPACE,
        key=INTERACTIONS_KEY,
        type=MetafieldType.JSON.value,
        value=json.dumps(log),
    )


def _timestamp_sort_key(item: Any) -> float:
    ts = item.get('timestamp') if isinstance(item, dict) else None
    if not isinstance(ts, str):
        return float('-inf')
    try:
        normalized = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), ts.replace('Z', '+00:00'), count=1)
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return float('-inf')
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


class InteractionTracker:
    """Лог взаимодействий покупателя в JSON-метаполе custom.customer_interactions."""

    def __init__(self, shopify: ShopifyService):
        self.shopify = shopify

    async def append_event(self, owner_id: Union[int, str], event: InteractionEvent) -> bool:
        # Чтение и запись не атомарны: параллельные добавления для одного
        # покупателя могут потерять одно из событий.
        current = await self.shopify.get_metafield(owner_id, INTERACTIONS_NAMESPACE, INTERACTIONS_KEY)
        desired = plan_append(current, event.to_log_entry(), owner_id)
        await self.shopify.save_metafield(owner_id, desired)
        logger.info(f"Appended '{event.eventType}' event for customer {owner_id} ({'update' if current else 'create'})")
        return True

    async def list_interactions(self, owner_id: Union[int, str]) -> List[Any]:
        """Все события покупателя, новые первыми."""
        current = await self.shopify.get_metafield(owner_id, INTERACTIONS_NAMESPACE, INTERACTIONS_KEY)
        interactions = decode_interaction_log(current.value if current else None, owner_id)
        interactions.sort(key=_timestamp_sort_key, reverse=True)
        return interactions
