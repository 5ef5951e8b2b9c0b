"""Strategies mapping a face match to a known image.

Each strategy is a pure function of the candidate, its decoded person
metadata and the blob index. It returns a Resolution when it can place the
candidate, or None to let the next strategy try.
"""
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional

from pessbook.core.utils.paths import (
    EXTERNAL_ID_SEPARATOR,
    PATH_SEPARATOR,
    external_id_to_s3_path,
    parent_folder,
)
from pessbook.domain.entities.identity import FaceMatchCandidate
from pessbook.services.identity.index import BlobIndex

FACE_ID_PREFIX_LENGTH = 8


class Resolution(NamedTuple):
    """Image a candidate was resolved to."""
    key: str
    folder: Optional[str]  # None keeps the search root
    strategy: str


PersonInfo = Optional[Dict[str, Any]]
Strategy = Callable[[FaceMatchCandidate, PersonInfo, BlobIndex], Optional[Resolution]]


def resolve_from_person_info(
    candidate: FaceMatchCandidate,
    person_info: PersonInfo,
    index: BlobIndex
) -> Optional[Resolution]:
    """Use the S3 key embedded in JSON person metadata, without the index."""
    if not person_info:
        return None
    key = person_info.get("s3Key")
    if not isinstance(key, str) or not key:
        return None

    folder = person_info.get("s3Folder")
    if not isinstance(folder, str) or not folder:
        folder = parent_folder(key)
    return Resolution(key=key, folder=folder, strategy="person_info")


def _colon_path_variants(external_id: str) -> Iterator[str]:
    path = external_id.replace(EXTERNAL_ID_SEPARATOR, PATH_SEPARATOR)
    yield path
    # Folder names were indexed with spaces turned into underscores
    display_path = external_id_to_s3_path(external_id)
    if display_path != path:
        yield display_path


def resolve_from_colon_path(
    candidate: FaceMatchCandidate,
    person_info: PersonInfo,
    index: BlobIndex
) -> Optional[Resolution]:
    """Read a colon-delimited external id as an S3 path and look it up."""
    external_id = candidate.external_id
    if not external_id or EXTERNAL_ID_SEPARATOR not in external_id:
        return None

    for path in _colon_path_variants(external_id):
        entry = index.find_path(path)
        if entry is not None:
            return Resolution(key=entry.key, folder=parent_folder(entry.key), strategy="colon_path")
    return None


def resolve_from_direct_lookup(
    candidate: FaceMatchCandidate,
    person_info: PersonInfo,
    index: BlobIndex
) -> Optional[Resolution]:
    """Look the raw external id up in the index."""
    if not candidate.external_id:
        return None
    entry = index.get(candidate.external_id)
    if entry is None:
        return None
    return Resolution(key=entry.key, folder=parent_folder(entry.key), strategy="direct_lookup")


def resolve_from_face_id_prefix(
    candidate: FaceMatchCandidate,
    person_info: PersonInfo,
    index: BlobIndex
) -> Optional[Resolution]:
    """Last resort: first lookup key containing the start of the face id.

    Loose by nature, unrelated images can share the prefix. The folder is
    left at the search root.
    """
    prefix = candidate.face_id[:FACE_ID_PREFIX_LENGTH]
    if not prefix:
        return None
    for lookup_key, entry in index.items():
        if prefix in lookup_key:
            return Resolution(key=entry.key, folder=None, strategy="face_id_prefix")
    return None


DEFAULT_STRATEGIES: List[Strategy] = [
    resolve_from_person_info,
    resolve_from_colon_path,
    resolve_from_direct_lookup,
    resolve_from_face_id_prefix,
]
