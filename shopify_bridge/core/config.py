# shopify_bridge/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from dotenv import load_dotenv
from pydantic import AliasChoices, Field, computed_field

load_dotenv()

class Settings(BaseSettings):
    PROJECT_NAME: str = "Shopify Customer Bridge"
    LOGGING_LEVEL: str = "INFO"
    PORT: int = 3000

    # --- Shopify Settings ---
    STORE_NAME: str
    SHOPIFY_ACCESS_TOKEN: str
    API_VERSION: str = "2024-01"

    # --- Метаобъекты спа ---
    SPA_METAOBJECT_TYPE: str = "spa"
    SPA_PAGE_SIZE: int = Field(50, ge=1, le=250)

    # --- CORS ---
    CORS_ORIGINS_STR: str = Field("", validation_alias=AliasChoices("CORS_ORIGINS_STR", "CORS_ORIGINS"))

    # --- Derived/Helper Settings ---
    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Преобразует строку origin'ов через запятую в список."""
        return [origin.strip() for origin in self.CORS_ORIGINS_STR.split(',') if origin.strip()]

    @computed_field(return_type=str)
    @property
    def SHOPIFY_ADMIN_URL(self) -> str:
        # Допускаем как 'my-store', так и 'my-store.myshopify.com'
        domain = self.STORE_NAME.strip().rstrip('/')
        if "." not in domain:
            domain = f"{domain}.myshopify.com"
        return f"https://{domain}/admin/api/{self.API_VERSION}"

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
        populate_by_name=True,
    )


settings = Settings()
# Проверка при старте
if not settings.SHOPIFY_ACCESS_TOKEN or "your-token" in settings.SHOPIFY_ACCESS_TOKEN:
    print("WARNING: SHOPIFY_ACCESS_TOKEN is not set. Please update it in your .env file.")
if not settings.CORS_ORIGINS:
    print("WARNING: CORS_ORIGINS is empty. Browser requests from other origins will be rejected.")
