# shopify_bridge/api/endpoints/customers.py
import logging
from fastapi import APIRouter, Depends

from shopify_bridge.api.responses import upstream_error_response
from shopify_bridge.dependencies import get_customer_profile_service
from shopify_bridge.models.customer import CustomerUpdate
from shopify_bridge.services.customers import CustomerProfileService
from shopify_bridge.services.shopify import ShopifyServiceError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.put(
    "/update-customer/{customer_id}",
    summary="Обновить данные покупателя",
    description="Обновляет имя, фамилию, email покупателя и дату рождения в метаполе custom.dob.",
)
async def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    profiles: CustomerProfileService = Depends(get_customer_profile_service),
):
    try:
        return await profiles.update_profile(customer_id, payload)
    except ShopifyServiceError as e:
        logger.error(f"Error updating customer {customer_id}: {e.details or e.message}")
        return upstream_error_response("Failed to update customer", e)
