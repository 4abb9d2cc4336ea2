"""API route registration for gitsheets."""

from fastapi import APIRouter

from . import meta, sheets

router = APIRouter()
router.include_router(meta.router)
router.include_router(sheets.router)

__all__ = ["router"]
