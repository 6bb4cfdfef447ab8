# shopify_bridge/models/metafield.py
from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import Optional


class MetafieldType(str, Enum):
    """Типы метаполей Shopify, которые использует сервис."""
    JSON = "json"
    DATE = "date"
    METAOBJECT_REFERENCE = "metaobject_reference"


class Metafield(BaseModel):
    """Метаполе покупателя. id появляется только после сохранения в Shopify."""
    model_config = ConfigDict(extra='ignore')

    id: Optional[int] = None
    namespace: str
    key: str
    type: str
    value: Optional[str] = None

    def to_create_payload(self) -> dict:
        return {
            "metafield": {
                "namespace": self.namespace,
                "key": self.key,
                "type": self.type,
                "value": self.value,
            }
        }
