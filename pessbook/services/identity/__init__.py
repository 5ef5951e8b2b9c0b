"""Face match to identity reconciliation."""
from .index import BlobIndex, build_blob_index
from .naming import UNKNOWN_NAME, derive_display_name, parse_person_info
from .resolver import IdentityResolver, resolve_candidate, resolve_candidates

__all__ = [
    "BlobIndex",
    "IdentityResolver",
    "UNKNOWN_NAME",
    "build_blob_index",
    "derive_display_name",
    "parse_person_info",
    "resolve_candidate",
    "resolve_candidates",
]
