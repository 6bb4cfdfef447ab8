# shopify_bridge/services/shopify.py
import httpx
import json
import logging
from typing import Dict, Optional, Any, Union
from pydantic import BaseModel
from shopify_bridge.core.config import Settings
from shopify_bridge.models.metafield import Metafield

logger = logging.getLogger(__name__)

class ShopifyServiceError(Exception):
    """Ошибка при обращении к Shopify Admin API (сеть, не-2xx ответ, ошибки GraphQL)."""
    def __init__(self, message="Ошибка при взаимодействии с Shopify Admin API", status_code=None, details=None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ShopifyService:
    """
    Асинхронный клиент Shopify Admin API: REST-метаполя покупателей,
    обновление покупателя и GraphQL-запросы.

    Каждый метод делает ровно один запрос, без повторов.
    """
    def __init__(self, config: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = config.SHOPIFY_ADMIN_URL
        headers = {
            "X-Shopify-Access-Token": config.SHOPIFY_ACCESS_TOKEN,
            "Content-Type": "application/json",
        }
        # Таймауты не задаем: используется поведение httpx по умолчанию
        self._client = httpx.AsyncClient(base_url=self.base_url, headers=headers, transport=transport)
        logger.info(f"ShopifyService initialized for URL: {self.base_url}")

    async def close_client(self):
        """Закрывает httpx клиент."""
        if hasattr(self, '_client') and self._client:
            await self._client.aclose()
            logger.info("Shopify HTTP client closed.")

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict] = None,
        json_data: Optional[Union[Dict, BaseModel]] = None
    ) -> Optional[Any]:
        """
        Внутренний метод для выполнения запросов к API с обработкой ошибок.
        Возвращает тело ответа при успехе или вызывает ShopifyServiceError.
        """
        payload_dict: Optional[Dict] = None
        if json_data is not None:
            if isinstance(json_data, BaseModel):
                payload_dict = json_data.model_dump(exclude_none=True)
            else:
                payload_dict = json_data

        logger.debug(f"Requesting {method} {endpoint} | Params: {params} | Payload: {payload_dict!r}")

        try:
            response = await self._client.request(method, endpoint, params=params, json=payload_dict)
            response.raise_for_status()

            if response.status_code == 204 or not response.content:
                logger.debug(f"Received {response.status_code} with empty body for {method} {endpoint}")
                return {}

            try:
                response_data = response.json()
            except json.JSONDecodeError as json_err:
                logger.error(f"Failed to decode JSON response for {method} {endpoint}. Status: {response.status_code}. Response text: {response.text[:500]}...")
                raise ShopifyServiceError("Ошибка декодирования JSON ответа от Shopify", status_code=response.status_code, details=response.text) from json_err
            logger.debug(f"Received {response.status_code} JSON response for {method} {endpoint}. Body sample: {str(response_data)[:200]}...")
            return response_data

        except httpx.HTTPStatusError as e:
            error_details: Any = e.response.text
            error_status_code = e.response.status_code
            error_message = f"HTTP ошибка {error_status_code} от Shopify API"

            try:
                shopify_error = e.response.json()
                # Shopify кладет ошибки в "errors" (строка, список или словарь по полям)
                if isinstance(shopify_error, dict) and "errors" in shopify_error:
                    error_details = shopify_error["errors"]
                else:
                    error_details = shopify_error
                logger.error(f"Shopify API error: {error_status_code} - {error_details} for {e.request.method} {e.request.url}")
            except json.JSONDecodeError:
                logger.error(f"HTTP error: {error_status_code} for {e.request.url}. Could not parse error response as JSON. Response text: {e.response.text[:500]}...")

            raise ShopifyServiceError(
                message=error_message,
                status_code=error_status_code,
                details=error_details
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"Request timeout: {e} for {method} {endpoint}")
            raise ShopifyServiceError("Превышен таймаут запроса к Shopify API", details=str(e)) from e
        except httpx.RequestError as e:
            logger.error(f"Network error: {e} for {method} {endpoint}")
            raise ShopifyServiceError("Ошибка сети при подключении к Shopify API", details=str(e)) from e

    # --- Метаполя покупателя ---

    async def get_metafield(self, owner_id: Union[int, str], namespace: str, key: str) -> Optional[Metafield]:
        """Первое метаполе покупателя с заданными namespace/key или None."""
        params = {'namespace': namespace, 'key': key}
        logger.info(f"Fetching metafield {namespace}.{key} for customer {owner_id}")
        data = await self._request("GET", f"customers/{owner_id}/metafields.json", params=params)

        for item in (data or {}).get('metafields', []):
            # Фильтруем и на своей стороне: API может игнорировать параметры
            if item.get('namespace') == namespace and item.get('key') == key:
                return Metafield.model_validate(item)
        logger.debug(f"No metafield {namespace}.{key} for customer {owner_id}")
        return None

    async def create_metafield(self, owner_id: Union[int, str], metafield: Metafield) -> Metafield:
        logger.info(f"Creating metafield {metafield.namespace}.{metafield.key} for customer {owner_id}")
        data = await self._request(
            "POST", f"customers/{owner_id}/metafields.json", json_data=metafield.to_create_payload()
        )
        created = (data or {}).get('metafield')
        if not isinstance(created, dict):
            raise ShopifyServiceError("Не удалось создать метаполе: неожиданный ответ от API", details=data)
        return Metafield.model_validate(created)

    async def update_metafield(self, metafield_id: int, value: str, type: str) -> Metafield:
        logger.info(f"Updating metafield {metafield_id}")
        payload = {"metafield": {"id": metafield_id, "value": value, "type": type}}
        data = await self._request("PUT", f"metafields/{metafield_id}.json", json_data=payload)
        updated = (data or {}).get('metafield')
        if not isinstance(updated, dict):
            raise ShopifyServiceError(f"Не удалось обновить метаполе {metafield_id}: неожиданный ответ от API", details=data)
        return Metafield.model_validate(updated)

    async def delete_metafield(self, metafield_id: int) -> None:
        """
        Удаляет метаполе. Повторное удаление дает ShopifyServiceError со status_code=404,
        вызывающий код сам решает, считать ли это успехом.
        """
        logger.info(f"Deleting metafield {metafield_id}")
        await self._request("DELETE", f"metafields/{metafield_id}.json")

    async def save_metafield(self, owner_id: Union[int, str], metafield: Metafield) -> Metafield:
        """Обновляет метаполе, если у него есть id, иначе создает новое."""
        if metafield.id is not None:
            return await self.update_metafield(metafield.id, metafield.value, metafield.type)
        return await self.create_metafield(owner_id, metafield)

    # --- Покупатели ---

    async def update_customer(self, customer_id: Union[int, str], data_to_update: Dict) -> Dict:
        """Обновляет поля профиля покупателя. Возвращает тело ответа Shopify."""
        logger.info(f"Attempting to update customer {customer_id}")
        payload = {"customer": {"id": customer_id, **data_to_update}}
        updated = await self._request("PUT", f"customers/{customer_id}.json", json_data=payload)
        logger.info(f"Customer {customer_id} updated successfully.")
        return updated

    # --- GraphQL ---

    async def graphql(self, query: str, variables: Optional[Dict] = None) -> Dict:
        """Выполняет GraphQL-запрос и возвращает поле data."""
        body = await self._request("POST", "graphql.json", json_data={"query": query, "variables": variables or {}})
        if not isinstance(body, dict):
            raise ShopifyServiceError("Неожиданный ответ GraphQL от Shopify", details=body)
        errors = body.get('errors')
        if errors:
            first = errors[0].get('message') if isinstance(errors, list) and errors and isinstance(errors[0], dict) else str(errors)
            logger.error(f"Shopify GraphQL error: {first}")
            raise ShopifyServiceError(f"Ошибка GraphQL: {first}", details=errors)
        return body.get('data') or {}
