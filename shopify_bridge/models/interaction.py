# shopify_bridge/models/interaction.py
from datetime import datetime, timezone
from pydantic import BaseModel, Field
from typing import Optional, Union

# Shopify отдает id как числа, витрина иногда присылает строки
ProductRef = Optional[Union[int, str]]


def utc_timestamp() -> str:
    """ISO-8601 в UTC с миллисекундами и суффиксом Z."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class InteractionEvent(BaseModel):
    """Событие взаимодействия, которое дописывается в лог покупателя."""
    eventType: Optional[str]
    productId: ProductRef = None
    variantId: ProductRef = None
    customerId: ProductRef = None
    visitorId: ProductRef = None
    timestamp: str = Field(default_factory=utc_timestamp)

    def to_log_entry(self) -> dict:
        """Запись для лога: пустые поля опускаются, customerId пишется всегда (null, если нет)."""
        return {**self.model_dump(exclude_none=True), "customerId": self.customerId}


class TrackAddToCartRequest(BaseModel):
    productId: ProductRef = None
    variantId: ProductRef = None
    customerId: ProductRef = None
    visitorId: ProductRef = None


class TrackWishlistRequest(TrackAddToCartRequest):
    # wishlist_add / wishlist_remove, передается как есть
    eventType: Optional[str] = None
