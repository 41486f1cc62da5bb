"""
Health Router - configuration and persistence availability
"""
from datetime import datetime, timezone
from typing import Dict

import logging
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...core.config import AppConfig
from ...core.dependencies import CosmosService, get_app_config, get_cosmos_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["system-health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    services: Dict[str, str]


@router.get("/health", response_model=HealthResponse)
async def get_system_health(
    config: AppConfig = Depends(get_app_config),
    cosmos_service: CosmosService = Depends(get_cosmos_service),
):
    """Report whether Cosmos DB and Blob Storage are configured. Never fails the request."""
    services = {
        "cosmos": "configured" if cosmos_service.is_available() else "not_configured",
        "blob_storage": "configured" if config.blob_storage_configured else "not_configured",
    }
    status = "healthy" if all(value == "configured" for value in services.values()) else "degraded"
    if status != "healthy":
        logger.debug("Health check degraded", extra={"services": services})

    return HealthResponse(
        status=status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=config.app_version,
        services=services,
    )
