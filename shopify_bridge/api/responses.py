# shopify_bridge/api/responses.py
from typing import Any, Optional
from fastapi.responses import JSONResponse
from shopify_bridge.services.shopify import ShopifyServiceError


def error_response(status_code: int, error: str, details: Optional[Any] = None) -> JSONResponse:
    """Единый формат ошибки: {"success": false, "error": ..., "details": ...}."""
    content = {"success": False, "error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def upstream_error_response(error: str, exc: ShopifyServiceError) -> JSONResponse:
    # 404 от Shopify (нет такой записи) пробрасывается, остальное отдаем как 500.
    # Исходная ошибка Shopify уходит в details для диагностики
    status_code = 404 if exc.status_code == 404 else 500
    return error_response(status_code, error, details=exc.details if exc.details is not None else exc.message)
