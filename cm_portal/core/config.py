"""
Application configuration.

Single pydantic-settings model read from the environment (and a `.env` file
next to the working directory). Use `get_config()` rather than instantiating
`AppConfig` directly so the instance is shared and easy to override in tests.
"""
from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Single source of truth for the portal API configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    environment: str = Field("development", alias="ENVIRONMENT")
    debug: bool = Field(False, alias="DEBUG")
    app_name: str = Field("CM Portal API", alias="APP_NAME")
    app_version: str = Field("1.0.0", alias="APP_VERSION")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Cosmos DB
    cosmos_endpoint: Optional[str] = Field(None, alias="AZURE_COSMOS_ENDPOINT")
    cosmos_key: Optional[str] = Field(None, alias="AZURE_COSMOS_KEY")
    cosmos_database: str = Field("CMPortalDB", alias="AZURE_COSMOS_DB")
    cosmos_prefix: str = Field("cm_", alias="AZURE_COSMOS_DB_PREFIX")

    # Azure Storage
    azure_storage_account_url: Optional[str] = Field(None, alias="AZURE_STORAGE_ACCOUNT_URL")
    azure_storage_key: Optional[str] = Field(None, alias="AZURE_STORAGE_KEY")
    azure_storage_evidence_container: str = Field("component-evidence", alias="AZURE_STORAGE_EVIDENCE_CONTAINER")

    # CORS - comma separated list of origins
    cors_origins: str = Field("http://localhost:3000", alias="CORS_ORIGINS")

    # Component versioning
    component_version_max_attempts: int = Field(3, alias="COMPONENT_VERSION_MAX_ATTEMPTS", ge=1)
    default_created_by: str = Field("1", alias="DEFAULT_CREATED_BY")
    default_cm_code: str = Field("DEFAULT_CM_CODE", alias="DEFAULT_CM_CODE")

    @property
    def cosmos_containers(self) -> Dict[str, str]:
        """Cosmos container names with the configured prefix."""
        return {
            "components": f"{self.cosmos_prefix}components",
            "component_mappings": f"{self.cosmos_prefix}component_mappings",
            "component_files": f"{self.cosmos_prefix}component_files",
            "component_audit_logs": f"{self.cosmos_prefix}component_audit_logs",
        }

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def cosmos_configured(self) -> bool:
        return bool(self.cosmos_endpoint)

    @property
    def blob_storage_configured(self) -> bool:
        return bool(self.azure_storage_account_url)


@lru_cache()
def get_config() -> AppConfig:
    """
    Get application configuration.

    Cached so every dependency sees the same instance; call
    `get_config.cache_clear()` in tests after changing the environment.
    """
    return AppConfig()
