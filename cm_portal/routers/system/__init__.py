"""
System Router Module - Central import and routing registration for system domain
"""
from fastapi import APIRouter
from .health import router as health_router

system_router = APIRouter(prefix="/api/system")

system_router.include_router(health_router, prefix="")

__all__ = [
    "system_router",
    "health_router",
]
