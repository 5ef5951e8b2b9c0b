"""Read-only image storage API endpoints."""
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from pessbook.core.exceptions import StorageError
from pessbook.core.logging import get_logger
from pessbook.infrastructure.dependencies import get_s3_service
from pessbook.services.aws.s3 import S3Service

logger = get_logger(__name__)
router = APIRouter()


class FolderListResponse(BaseModel):
    folders: List[str] = Field(..., description="Sub-folder prefixes, each ending in '/'")


class StoredImage(BaseModel):
    key: str
    last_modified: Optional[datetime] = None


class ImageListResponse(BaseModel):
    images: List[StoredImage]


class ImageUrlResponse(BaseModel):
    url: str


class FolderStatsResponse(BaseModel):
    folder_counts: Dict[str, int] = Field(
        ..., description="Image count per folder, \"\" standing for the bucket root")
    total_images: int


@router.get("/folders", response_model=FolderListResponse, summary="List sub-folders")
async def list_folders(
    prefix: str = Query("", description="Parent folder, empty for the bucket root"),
    s3_service: S3Service = Depends(get_s3_service),
) -> FolderListResponse:
    try:
        return FolderListResponse(folders=await s3_service.list_folders(prefix))
    except StorageError as e:
        raise HTTPException(status_code=500, detail="Failed to list folders") from e


@router.get("/images", response_model=ImageListResponse, summary="List images under a folder")
async def list_images(
    prefix: str = Query("", description="Folder to list, sub-folders included"),
    s3_service: S3Service = Depends(get_s3_service),
) -> ImageListResponse:
    try:
        images = await s3_service.list_images(prefix)
    except StorageError as e:
        raise HTTPException(status_code=500, detail="Failed to list images") from e
    return ImageListResponse(images=[StoredImage(**image) for image in images])


@router.get("/url", response_model=ImageUrlResponse, summary="Get a presigned image URL")
async def get_image_url(
    key: str = Query(..., min_length=1, description="S3 key of the image"),
    s3_service: S3Service = Depends(get_s3_service),
) -> ImageUrlResponse:
    try:
        url = await s3_service.resolve_display_url(key)
    except StorageError as e:
        logger.warning("Failed to generate image URL", key=key, error=str(e))
        raise HTTPException(
            status_code=404, detail="Image not found or URL could not be generated") from e
    return ImageUrlResponse(url=url)


@router.get("/folder-stats", response_model=FolderStatsResponse, summary="Count images per folder")
async def folder_stats(
    prefix: str = Query("", description="Folder to walk, empty for the whole bucket"),
    s3_service: S3Service = Depends(get_s3_service),
) -> FolderStatsResponse:
    try:
        counts = await s3_service.folder_stats(prefix)
    except StorageError as e:
        raise HTTPException(status_code=500, detail="Failed to count images") from e
    return FolderStatsResponse(folder_counts=counts, total_images=sum(counts.values()))
