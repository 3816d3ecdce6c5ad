"""
Configuration module for Lifeline Records API service.
Uses Pydantic BaseSettings for validation - app fails fast on malformed config.
"""
import logging
from typing import List, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with validation.

    Every field maps to the upper-cased environment variable of the same
    name (DB_HOST, PORT, ...). Values in a local .env file are also read.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database Configuration
    db_host: str = Field(default="localhost", description="MySQL host")
    db_port: int = Field(default=3306, description="MySQL port")
    db_user: str = Field(default="root", description="MySQL user")
    db_password: str = Field(default="", description="MySQL password")
    db_name: str = Field(default="lifeline_db", description="Database name")
    db_url: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy URL; takes precedence over the DB_* parts",
    )
    db_pool_size: int = Field(default=10, ge=1, description="Connection pool size")
    db_max_overflow: int = Field(default=5, ge=0, description="Connections allowed beyond the pool size")
    db_pool_recycle: int = Field(default=300, description="Seconds before a pooled connection is recycled")
    db_use_stored_procedures: bool = Field(
        default=True,
        description="Call RegisterNewPatient/ScheduleNewTest/Delete* when the engine supports them",
    )

    # API Configuration
    host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(default=3001, description="API port")
    reload: bool = Field(default=False, description="Enable hot reload")
    cors_origins: str = Field(default="*", description="Allowed CORS origins (comma-separated)")

    # Frontend bundle
    static_dir: str = Field(default="public", description="Directory of the prebuilt frontend")

    @model_validator(mode="after")
    def warn_on_defaults(self) -> "Settings":
        """Flag configurations that almost certainly point at the wrong database."""
        if self.db_url is None and not self.db_password:
            logger.warning(
                "DB_PASSWORD is empty - connecting to MySQL without a password"
            )
        return self

    @property
    def database_url(self) -> str:
        """Get the SQLAlchemy URL, built from DB_* parts unless DB_URL is set."""
        if self.db_url:
            return self.db_url
        return URL.create(
            "mysql+pymysql",
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        ).render_as_string(hide_password=False)

    @property
    def cors_origin_list(self) -> List[str]:
        """Get the allowed CORS origins as a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Create global settings instance - fails fast if config is malformed
settings = Settings()

API_HOST = settings.host
API_PORT = settings.port
API_RELOAD = settings.reload
STATIC_DIR = settings.static_dir
