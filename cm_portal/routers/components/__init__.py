"""
Components Router Module - component details submission endpoints
"""
from fastapi import APIRouter
from .component_details import router as component_details_router

components_router = APIRouter()

components_router.include_router(component_details_router, prefix="")

__all__ = [
    "components_router",
    "component_details_router",
]
