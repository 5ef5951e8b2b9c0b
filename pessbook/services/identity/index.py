"""Lookup index over the known images of a collection."""
from typing import Dict, Iterable, Iterator, Optional, Tuple

from pessbook.core.utils.paths import PATH_SEPARATOR
from pessbook.domain.entities.identity import BlobEntry


class BlobIndex:
    """Known images keyed by external image id, or by S3 key when they have none.

    Built once per search request and only read afterwards. Iteration
    follows the original listing order; when two entries share a lookup key
    the later one replaces the earlier one.
    """

    def __init__(self, entries: Dict[str, BlobEntry]) -> None:
        self._entries = entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, lookup_key: object) -> bool:
        return lookup_key in self._entries

    def get(self, lookup_key: str) -> Optional[BlobEntry]:
        """Get the entry stored under a lookup key."""
        return self._entries.get(lookup_key)

    def items(self) -> Iterator[Tuple[str, BlobEntry]]:
        """Iterate over (lookup key, entry) pairs in index order."""
        return iter(self._entries.items())

    def find_path(self, path: str) -> Optional[BlobEntry]:
        """Find the entry stored at an S3 path.

        Tries the path as a lookup key first, then scans for an entry whose
        key is the path or ends with it, so paths missing the root prefix
        still match.
        """
        entry = self._entries.get(path)
        if entry is not None:
            return entry

        suffix = PATH_SEPARATOR + path
        for entry in self._entries.values():
            if entry.key == path or entry.key.endswith(suffix):
                return entry
        return None


def build_blob_index(entries: Iterable[BlobEntry]) -> BlobIndex:
    """Build a BlobIndex from a listing, last entry wins on duplicate lookup keys."""
    index: Dict[str, BlobEntry] = {}
    for entry in entries:
        index[entry.lookup_key] = entry
    return BlobIndex(index)
