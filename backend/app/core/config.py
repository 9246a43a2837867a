"""
Core configuration module for the Safar Air admin content API.
Settings are loaded from environment variables and an optional .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Defaults target a local SQLite-backed document store.
    """

    # Application
    app_name: str = "Safar Air Admin Content API"
    app_version: str = "1.0.0"
    environment: str = "production"
    debug: bool = False

    # Content store
    store_backend: str = "sql"  # "sql" or "firestore"
    database_url: str = "sqlite:///./content_store.db"
    database_pool_size: int = 10
    database_max_overflow: int = 20
    database_pool_recycle: int = 1800  # Recycle connections after 30 min
    database_pool_pre_ping: bool = True

    # Firestore (store_backend=firestore)
    firestore_project: Optional[str] = None
    firestore_database: Optional[str] = None
    firestore_credentials_file: Optional[str] = None

    # Connectivity guard and deadlines (seconds). A write that overruns
    # store_write_timeout keeps running in the background and may still land;
    # its late outcome is logged.
    network_enable_timeout: Optional[float] = 10.0
    store_write_timeout: Optional[float] = None

    # When the category read fails, addRecord still writes [record]
    write_on_read_failure: bool = True

    # API Configuration
    api_prefix: str = "/api/v1"
    api_host: str = "0.0.0.0"
    api_port: int = 8890
    api_workers: int = 1

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"

    # CORS - the admin panel origin(s)
    cors_origins: list = ["http://localhost:5173", "http://127.0.0.1:5173"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    cors_allow_headers: list = ["Content-Type", "Accept", "X-API-Key"]

    # Admin API key for mutating endpoints (MUST be set via .env in production)
    admin_api_key: str = "CHANGE-ME-IN-DOTENV"

    # Per-client rate limits (slowapi syntax)
    rate_limit_enabled: bool = True
    rate_limit_read: str = "300/minute"
    rate_limit_write: str = "60/minute"
    rate_limit_health: str = "1000/minute"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
