"""
NextShop Catalog — Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; invalid values fail the import.

Connection string resolution:
    1. MONGO_URI, when set, is used verbatim
    2. Otherwise DB_USER + DB_PASS are assembled into an Atlas SRV URI
       against DB_CLUSTER_HOST
    3. Otherwise a local mongod on the default port
"""

from typing import List
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

IMAGE_MODES = {"upload", "url"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local development.
    Attributes are grouped by concern.
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)

    # ── Database ──────────────────────────────────────────────────────────
    # Full connection string; takes precedence over the DB_USER/DB_PASS pair
    mongo_uri: str = Field(default="", description="MongoDB connection string")
    db_user: str = Field(default="")
    db_pass: str = Field(default="")
    db_cluster_host: str = Field(default="cluster0.cvrlul4.mongodb.net")
    db_name: str = Field(default="nextshop", min_length=1)

    # How long the driver waits for a reachable server before giving up
    mongo_server_selection_timeout_ms: int = Field(default=5000, ge=100, le=120_000)

    # ── Product Images ────────────────────────────────────────────────────
    # upload: `image` is a multipart file stored under uploads_dir
    # url:    `image` is a client-supplied URL stored verbatim
    image_mode: str = Field(default="upload")
    uploads_dir: str = Field(default="uploads")

    # Default: 5MB = 5 * 1024 * 1024
    max_file_size: int = Field(default=5_242_880, ge=1024, le=52_428_800)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins; "*" allows any origin
    cors_origins: str = Field(default="*")

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("image_mode")
    @classmethod
    def validate_image_mode(cls, v: str) -> str:
        lower = v.strip().lower()
        if lower not in IMAGE_MODES:
            raise ValueError(f"Invalid image_mode '{v}'. Must be one of: {sorted(IMAGE_MODES)}")
        return lower

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def mongo_connection_uri(self) -> str:
        """
        Resolve the MongoDB connection string.

        Credentials are URL-escaped so passwords containing '@', ':' or '/'
        do not corrupt the URI.
        """
        if self.mongo_uri:
            return self.mongo_uri
        if self.db_user and self.db_pass:
            return (
                f"mongodb+srv://{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}"
                f"@{self.db_cluster_host}/?retryWrites=true&w=majority&appName=Cluster0"
            )
        return "mongodb://localhost:27017"


# Singleton instance — imported throughout the application
settings = Settings()
