"""Face search and indexing API endpoints."""
from fastapi import APIRouter, Depends, HTTPException

from pessbook.api.models.face import (
    FaceDetectionRequest,
    FaceDetectionResponse,
    FaceIndexingRequest,
    FaceIndexingResponse,
    FaceSearchRequest,
    FaceSearchResponse,
)
from pessbook.core.exceptions import (
    CollectionNotFoundError,
    InvalidImageError,
    RecognitionProviderError,
    StorageError,
)
from pessbook.core.logging import get_logger
from pessbook.core.utils.image import decode_base64_image
from pessbook.infrastructure.dependencies import (
    get_face_indexing_service,
    get_face_search_service,
)
from pessbook.services.face_indexing import FaceIndexingService
from pessbook.services.face_search import FaceSearchService

logger = get_logger(__name__)
router = APIRouter(
    responses={
        400: {"description": "Invalid request"},
        500: {"description": "Internal server error"}
    }
)


@router.post(
    "/search",
    response_model=FaceSearchResponse,
    summary="Search a collection by image",
    description="Finds faces similar to the query image and resolves each match "
                "to its stored image, name and folder.",
    responses={
        200: {
            "description": "Search completed, possibly without matches",
            "content": {
                "application/json": {
                    "example": {
                        "collection_id": "PNG",
                        "searched_face_bounding_box": {
                            "left": 0.31, "top": 0.2, "width": 0.4, "height": 0.52
                        },
                        "searched_face_confidence": 99.9,
                        "face_matches": [
                            {
                                "face_id": "f123abcd-5e6f-4a1b-9c2d-0e1f2a3b4c5d",
                                "similarity": 91.2,
                                "external_image_id": "PNG:Momase:Madang:John_Doe.jpg",
                                "image_src": "https://facerecog-app-storage.s3.amazonaws.com/PNG/Momase/Madang/John_Doe.jpg?X-Amz-Signature=...",
                                "folder": "PNG/Momase/Madang",
                                "display_name": "John Doe",
                                "person_info": None,
                            }
                        ],
                    }
                }
            },
        },
        404: {
            "description": "Collection not found",
            "content": {
                "application/json": {"example": {"detail": "Collection not found: PNG"}}
            },
        },
    },
)
async def search_faces(
    request: FaceSearchRequest,
    service: FaceSearchService = Depends(get_face_search_service)
) -> FaceSearchResponse:
    """Search a collection with a base64 encoded image.

    Args:
        request: Query image and search parameters
        service: Face search service provided by dependency injection

    Returns:
        FaceSearchResponse with one entry per match, in ranking order

    Raises:
        HTTPException: If the request is invalid or the search fails
    """
    try:
        image_bytes = decode_base64_image(request.image)
    except ValueError as e:
        logger.warning("Invalid search image payload", error=str(e))
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = await service.search(
            image_bytes,
            collection_id=request.collection_id,
            max_candidates=request.max_faces,
            similarity_threshold=request.face_match_threshold,
        )
        return FaceSearchResponse.from_service_response(result)

    except InvalidImageError as e:
        logger.error("Invalid image format", error=str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except CollectionNotFoundError as e:
        logger.error("Collection not found", collection_id=request.collection_id)
        raise HTTPException(status_code=404, detail=str(e))
    except (StorageError, RecognitionProviderError) as e:
        logger.error("Error searching faces", error=str(e))
        raise HTTPException(status_code=500, detail="Error searching faces")
    except Exception as e:
        logger.error("Unexpected error during face search",
                     error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Error searching faces")


@router.post(
    "/index",
    response_model=FaceIndexingResponse,
    summary="Index faces of a stored image",
    description="Indexes the faces of an S3 image, tagged with the external image id "
                "derived from its key.",
)
async def index_faces(
    request: FaceIndexingRequest,
    service: FaceIndexingService = Depends(get_face_indexing_service)
) -> FaceIndexingResponse:
    """Index faces in an image stored in S3.

    Args:
        request: Image location and indexing parameters
        service: Face indexing service provided by dependency injection

    Returns:
        FaceIndexingResponse containing indexed face records

    Raises:
        HTTPException: If the request is invalid or processing fails
    """
    try:
        result = await service.index_stored_image(
            key=request.key,
            collection_id=request.collection_id,
            max_faces=request.max_faces,
        )
        return FaceIndexingResponse.from_service_response(result)

    except InvalidImageError as e:
        logger.error("Invalid image format", error=str(e))
        raise HTTPException(
            status_code=400,
            detail="Invalid image format. Only JPEG and PNG are supported."
        )
    except StorageError as e:
        logger.error("Failed to retrieve image from S3", error=str(e))
        raise HTTPException(status_code=404, detail="Image not found or inaccessible")
    except CollectionNotFoundError as e:
        logger.error("Collection not found", collection_id=request.collection_id)
        raise HTTPException(status_code=404, detail=str(e))
    except RecognitionProviderError as e:
        logger.error("Failed to index faces", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to index faces")
    except Exception as e:
        logger.error("Unexpected error during face indexing",
                     error=str(e), exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred while processing the request"
        )


@router.post(
    "/detect",
    response_model=FaceDetectionResponse,
    summary="Detect faces in an image",
    description="Finds the faces in an image without searching or indexing them.",
)
async def detect_faces(
    request: FaceDetectionRequest,
    service: FaceSearchService = Depends(get_face_search_service)
) -> FaceDetectionResponse:
    try:
        image_bytes = decode_base64_image(request.image)
    except ValueError as e:
        logger.warning("Invalid detection image payload", error=str(e))
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = await service.detect_faces(image_bytes)
        return FaceDetectionResponse.from_service_response(result)

    except InvalidImageError as e:
        logger.error("Invalid image format", error=str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except RecognitionProviderError as e:
        logger.error("Error detecting faces", error=str(e))
        raise HTTPException(status_code=500, detail="Error detecting faces")
