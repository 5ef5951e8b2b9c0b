"""Blob store interface for stored images."""
from abc import ABC, abstractmethod
from typing import List, Optional

from ...entities.identity import BlobEntry


class BlobStore(ABC):
    """Interface for the hierarchical store holding the image files."""

    @abstractmethod
    async def list_all_blobs(self, root: str) -> List[BlobEntry]:
        """
        List every blob under a root folder, recursively.

        Args:
            root: Folder to list, e.g. "PNG"

        Returns:
            Entries in listing order

        Raises:
            StorageError: If the listing fails
        """
        pass

    @abstractmethod
    async def resolve_display_url(self, key: str) -> Optional[str]:
        """
        Get a URL a browser can fetch the blob from.

        Args:
            key: Full key of the blob

        Returns:
            The URL, or None if the blob cannot be presented

        Raises:
            StorageError: If the URL cannot be generated
        """
        pass
