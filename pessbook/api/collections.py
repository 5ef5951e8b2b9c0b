"""Face collection API endpoints."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from pessbook.api.models.face import COLLECTION_ID_PATTERN
from pessbook.core.exceptions import (
    CollectionNotFoundError,
    RecognitionProviderError,
    StorageError,
)
from pessbook.core.logging import get_logger
from pessbook.infrastructure.dependencies import get_collection_service
from pessbook.services.collections import CollectionService
from pessbook.services.models import CollectionFace, CollectionInfo, CollectionSummary

logger = get_logger(__name__)
router = APIRouter(
    responses={
        404: {"description": "Collection not found"},
        500: {"description": "Internal server error"}
    }
)


@router.get("", response_model=List[CollectionSummary], summary="List face collections")
async def list_collections(
    service: CollectionService = Depends(get_collection_service)
) -> List[CollectionSummary]:
    try:
        return await service.list_collections()
    except RecognitionProviderError as e:
        logger.error("Failed to list collections", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to list collections")


@router.get(
    "/{collection_id}",
    response_model=CollectionInfo,
    summary="Describe a collection",
    description="Face count of the collection and image counts per folder under its root folder.",
)
async def get_collection_info(
    collection_id: str = Path(..., min_length=1, max_length=255, pattern=COLLECTION_ID_PATTERN),
    service: CollectionService = Depends(get_collection_service)
) -> CollectionInfo:
    try:
        return await service.collection_info(collection_id)
    except CollectionNotFoundError as e:
        logger.warning("Collection not found", collection_id=collection_id)
        raise HTTPException(status_code=404, detail=str(e))
    except (StorageError, RecognitionProviderError) as e:
        logger.error("Failed to describe collection", collection_id=collection_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to describe collection")


@router.get(
    "/{collection_id}/faces",
    response_model=List[CollectionFace],
    summary="List the faces of a collection",
)
async def list_collection_faces(
    collection_id: str = Path(..., min_length=1, max_length=255, pattern=COLLECTION_ID_PATTERN),
    max_results: int = Query(100, ge=1, le=4096, description="Maximum number of faces to list"),
    service: CollectionService = Depends(get_collection_service)
) -> List[CollectionFace]:
    try:
        return await service.list_faces(collection_id, max_results)
    except CollectionNotFoundError as e:
        logger.warning("Collection not found", collection_id=collection_id)
        raise HTTPException(status_code=404, detail=str(e))
    except RecognitionProviderError as e:
        logger.error("Failed to list faces", collection_id=collection_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to list faces")
