"""Storefront Backend: Configuration via pydantic-settings."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database (empty → products kept in the local slot store)
    DATABASE_URL: str = ""
    LOCAL_STORE_DIR: str = "./data/store"

    # Security
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 60

    # Admin panel login (bcrypt hash, see passlib)
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD_HASH: str = ""

    # Shared secret for the direct product update endpoint
    ADMIN_SECRET: str = ""

    # Timezone
    TIMEZONE: str = "America/Argentina/Buenos_Aires"

    # Import / catalog
    IMPORT_BATCH_SIZE: int = 500
    FETCH_PAGE_SIZE: int = 1000
    STOCK_HEADER_ROW: int = 7  # 0-indexed: row 8 in Excel

    # Quote document
    COMPANY_NAME: str = "ALFONSA"
    COMPANY_TAGLINE: str = "DISTRIBUIDORA MAYORISTA"
    COMPANY_DESCRIPTION: str = "Bebidas y Artículos de Almacén"
    COMPANY_EMAIL: str = "ventas@alfonsa.com"
    SHARE_TITLE: str = "PEDIDO ALFONSA DISTRIBUIDORA"
    SHARE_BASE_URL: str = "https://wa.me/"

    # HTTP
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def remote_storage_enabled(self) -> bool:
        return bool(self.DATABASE_URL.strip())


@lru_cache
def get_settings() -> Settings:
    return Settings()
