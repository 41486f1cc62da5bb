"""
Browse Router Module - read-only CM listing, filter options and detail views
"""
from fastapi import APIRouter
from .cm_browse import router as cm_browse_router

browse_router = APIRouter()

browse_router.include_router(cm_browse_router, prefix="")

__all__ = [
    "browse_router",
    "cm_browse_router",
]
