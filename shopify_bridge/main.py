# shopify_bridge/main.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from shopify_bridge.api.router import api_router
from shopify_bridge.core.config import settings
from shopify_bridge.services.shopify import ShopifyService

# --- Настройка логирования ---
log_level = settings.LOGGING_LEVEL.upper()
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)
logger.info(f"Starting application with log level: {log_level}")


# --- Lifespan для управления ресурсами ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup: Initializing resources...")
    shopify_service = ShopifyService(config=settings)
    app.state.shopify_service = shopify_service
    logger.info("Shopify service initialized in current worker.")

    try:
        yield
    finally:
        logger.info("Application shutdown in this worker: Cleaning up resources...")
        await shopify_service.close_client()
        logger.info("Resources cleaned up successfully in this worker.")


# --- Создание экземпляра FastAPI ---
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Прослойка над Shopify Admin API: профиль покупателя, избранные спа, события витрины.",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Настройка CORS ---
# Origins задаются через CORS_ORIGINS в .env, без завершающего '/'
origins = [origin.strip('/# ') for origin in settings.CORS_ORIGINS]
logger.info(f"Allowed CORS origins: {origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# --- Обработчики ошибок ---
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Request validation error: {exc.errors()} for {request.method} {request.url}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"success": False, "error": "Invalid request data", "details": jsonable_errors(exc)},
    )

@app.exception_handler(ValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: ValidationError):
    logger.error(f"Pydantic model validation error: {exc.errors()} for {request.method} {request.url}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Data validation error", "details": jsonable_errors(exc)},
    )

@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception: {exc} for {request.method} {request.url}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )


def jsonable_errors(exc) -> list:
    # ctx может содержать исключения, которые не сериализуются в JSON
    return [{k: v for k, v in err.items() if k != 'ctx'} for err in exc.errors()]


# --- Подключение роутеров ---
app.include_router(api_router)

# --- Корневой эндпоинт ---
@app.get("/", tags=["Root"], summary="Health check")
async def read_root():
    """Простой эндпоинт для проверки работоспособности API."""
    return {"status": "ok", "project": settings.PROJECT_NAME}
