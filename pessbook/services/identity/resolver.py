"""Reconciliation of face matches with the images they were indexed from."""
import asyncio
from typing import List, Optional, Sequence

from pessbook.core.config import settings
from pessbook.core.logging import get_logger
from pessbook.domain.entities.identity import BlobEntry, EnrichedMatch, FaceMatchCandidate
from pessbook.domain.interfaces.storage.blob_store import BlobStore
from pessbook.services.identity.index import BlobIndex, build_blob_index
from pessbook.services.identity.naming import derive_display_name, parse_person_info
from pessbook.services.identity.strategies import DEFAULT_STRATEGIES, Resolution, Strategy

logger = get_logger(__name__)


def resolve_candidate(
    candidate: FaceMatchCandidate,
    root_path: str,
    index: BlobIndex,
    placeholder_image: str,
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
) -> EnrichedMatch:
    """Resolve one candidate with the first strategy that places it.

    The image source is left at the placeholder; turning the matched key
    into a URL is done by IdentityResolver.
    """
    person_info = parse_person_info(candidate.external_id)

    resolution: Optional[Resolution] = None
    for strategy in strategies:
        resolution = strategy(candidate, person_info, index)
        if resolution is not None:
            break

    return EnrichedMatch(
        face_id=candidate.face_id,
        similarity=candidate.similarity,
        external_id=candidate.external_id,
        image_src=placeholder_image,
        folder=(resolution.folder if resolution else None) or root_path,
        display_name=derive_display_name(candidate.external_id, person_info),
        person_info=person_info,
        matched_key=resolution.key if resolution else None,
        resolved_by=resolution.strategy if resolution else None,
    )


def resolve_candidates(
    candidates: Sequence[FaceMatchCandidate],
    root_path: str,
    known_blobs: Sequence[BlobEntry],
    placeholder_image: Optional[str] = None,
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
) -> List[EnrichedMatch]:
    """Resolve every candidate against the known images, keeping input order."""
    placeholder_image = placeholder_image or settings.PLACEHOLDER_IMAGE
    index = build_blob_index(known_blobs)
    return [
        resolve_candidate(candidate, root_path, index, placeholder_image, strategies)
        for candidate in candidates
    ]


class IdentityResolver:
    """Maps face matches to stored images, names and folders.

    Resolution never fails a search: candidates that cannot be placed come
    back with the placeholder image, a derived or "Unknown" name and the
    search root as folder.

    Example:
        ```python
        resolver = IdentityResolver(blob_store=S3Service())
        known_blobs = await blob_store.list_all_blobs("PNG")
        matches = await resolver.resolve_identities(candidates, "PNG", known_blobs)
        ```
    """

    def __init__(
        self,
        blob_store: BlobStore,
        placeholder_image: Optional[str] = None,
        max_concurrency: Optional[int] = None,
        strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    ) -> None:
        """Initialize the resolver.

        Args:
            blob_store: Store used to turn matched keys into display URLs
            placeholder_image: Image shown for unresolved matches
            max_concurrency: Maximum concurrent display URL requests
            strategies: Resolution strategies, tried in order
        """
        self.blob_store = blob_store
        self.placeholder_image = placeholder_image or settings.PLACEHOLDER_IMAGE
        self.max_concurrency = max_concurrency or settings.URL_RESOLUTION_CONCURRENCY
        self.strategies = list(strategies)

    def resolve_candidates(
        self,
        candidates: Sequence[FaceMatchCandidate],
        root_path: str,
        known_blobs: Sequence[BlobEntry],
    ) -> List[EnrichedMatch]:
        """Resolve candidates without contacting the blob store."""
        return resolve_candidates(
            candidates, root_path, known_blobs, self.placeholder_image, self.strategies)

    async def resolve_identities(
        self,
        candidates: Sequence[FaceMatchCandidate],
        root_path: str,
        known_blobs: Sequence[BlobEntry],
    ) -> List[EnrichedMatch]:
        """Resolve candidates and fetch a display URL for every matched image.

        Args:
            candidates: Matches in provider ranking order
            root_path: S3 folder the known images were listed from
            known_blobs: Recursive listing of root_path

        Returns:
            One EnrichedMatch per candidate, in the same order
        """
        matches = self.resolve_candidates(candidates, root_path, known_blobs)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        # gather returns results in argument order regardless of completion order
        resolved = await asyncio.gather(
            *(self._attach_display_url(match, semaphore) for match in matches)
        )

        logger.info(
            "Resolved face matches",
            root_path=root_path,
            candidates_count=len(resolved),
            matched_count=sum(1 for match in resolved if match.matched_key),
            known_blobs_count=len(known_blobs)
        )
        return list(resolved)

    async def _attach_display_url(
        self,
        match: EnrichedMatch,
        semaphore: asyncio.Semaphore
    ) -> EnrichedMatch:
        if not match.matched_key:
            return match

        try:
            async with semaphore:
                url = await self.blob_store.resolve_display_url(match.matched_key)
        except Exception as e:
            logger.warning(
                "Failed to resolve display URL, keeping placeholder",
                face_id=match.face_id,
                key=match.matched_key,
                error=str(e)
            )
            return match

        if not url:
            return match
        return match.model_copy(update={"image_src": url})
