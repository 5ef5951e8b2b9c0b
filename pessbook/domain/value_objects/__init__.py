"""Value objects package."""
from .recognition import (
    CollectionDescription,
    DetectionResult,
    IdentitySearchResult,
    IndexResult,
    SearchResult,
)

__all__ = [
    "CollectionDescription",
    "DetectionResult",
    "IdentitySearchResult",
    "IndexResult",
    "SearchResult",
]
