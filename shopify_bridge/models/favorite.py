# shopify_bridge/models/favorite.py
from enum import Enum
from pydantic import BaseModel
from typing import Optional, Union


class FavoriteAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"


class FavoriteOutcome(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    NONE = "none"


class FavoriteToggleRequest(BaseModel):
    # Все поля опциональны: отсутствие проверяется в эндпоинте (401/400, а не 422)
    customer_id: Optional[Union[int, str]] = None
    spa_id: Optional[Union[int, str]] = None
    spa_handle: Optional[str] = None  # Принимается для совместимости с витриной, не используется
    action: Optional[str] = None


class FavoriteReference(BaseModel):
    """Избранный спа покупателя: числовой id и полный gid метаобъекта."""
    spa_id: str
    gid: str
