# shopify_bridge/services/customers.py
import logging
from typing import Dict, Union

from shopify_bridge.models.customer import CustomerUpdate
from shopify_bridge.models.metafield import Metafield, MetafieldType
from shopify_bridge.services.shopify import ShopifyService

logger = logging.getLogger(__name__)

DOB_NAMESPACE = "custom"
DOB_KEY = "dob"


class CustomerProfileService:
    def __init__(self, shopify: ShopifyService):
        self.shopify = shopify

    async def update_profile(self, customer_id: Union[int, str], payload: CustomerUpdate) -> Dict:
        """
        Обновляет ФИО и email покупателя, затем дату рождения в метаполе custom.dob.
        Возвращает ответ Shopify на обновление покупателя.
        """
        updated = await self.shopify.update_customer(customer_id, payload.profile_fields())

        if payload.dob is not None:
            existing = await self.shopify.get_metafield(customer_id, DOB_NAMESPACE, DOB_KEY)
            dob_field = Metafield(
                id=existing.id if existing else None,
                namespace=DOB_NAMESPACE,
                key=DOB_KEY,
                type=MetafieldType.DATE.value,
                value=payload.dob.isoformat(),
            )
            await self.shopify.save_metafield(customer_id, dob_field)
            logger.info(f"Date of birth saved for customer {customer_id}")

        return updated
