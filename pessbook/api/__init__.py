"""API v1 router initialization."""
from fastapi import APIRouter

from .collections import router as collections_router
from .face_search import router as face_search_router
from .people import router as people_router
from .storage import router as storage_router

# Create v1 router
router = APIRouter()

router.include_router(
    face_search_router,
    prefix="/face-search",
    tags=["face-search"]
)
router.include_router(
    people_router,
    prefix="/people",
    tags=["people"]
)
router.include_router(
    storage_router,
    prefix="/storage",
    tags=["storage"]
)
router.include_router(
    collections_router,
    prefix="/collections",
    tags=["collections"]
)
