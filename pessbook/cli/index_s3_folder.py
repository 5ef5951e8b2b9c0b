#!/usr/bin/env python
"""
Index S3 Folder Faces

This script indexes faces from every image under an S3 folder into a
recognition collection. Each face is tagged with the external image id
derived from its image's key, so search results can be resolved back to
the stored image.

Usage:
    python -m pessbook.cli.index_s3_folder --prefix <folder> --collection <collection_id>
"""
import argparse
import asyncio
import time
from typing import Dict, List, Optional

from tqdm import tqdm

from pessbook.core.config import settings
from pessbook.core.exceptions import FaceRecognitionError
from pessbook.core.logging import get_logger, setup_logging
from pessbook.services.aws.rekognition import RekognitionService
from pessbook.services.aws.s3 import S3Service
from pessbook.services.face_indexing import FaceIndexingService

logger = get_logger(__name__)


class S3FolderIndexer:
    """Indexes faces from S3 folder images into a collection."""

    def __init__(
        self,
        prefix: str,
        collection_id: str,
        bucket: Optional[str] = None,
        max_faces_per_image: int = 5,
        max_images: int = 1000,
        s3_service: Optional[S3Service] = None,
        indexing_service: Optional[FaceIndexingService] = None,
    ):
        """Initialize the indexer.

        Args:
            prefix: S3 folder to index, sub-folders included
            collection_id: Collection ID to index faces into
            bucket: S3 bucket name, the configured bucket if omitted
            max_faces_per_image: Maximum number of faces to index per image
            max_images: Maximum number of objects to inspect
        """
        self.prefix = prefix
        self.collection_id = collection_id
        self.max_faces_per_image = max_faces_per_image
        self.max_images = max_images

        self.s3_service = s3_service or S3Service(bucket_name=bucket)
        self.indexing_service = indexing_service or FaceIndexingService(
            s3_service=self.s3_service,
            recognition_provider=RekognitionService(),
        )

        # Stats
        self.stats: Dict[str, float] = {
            "total_images": 0,
            "processed_images": 0,
            "skipped_images": 0,
            "indexed_faces": 0,
            "failed_images": 0,
            "total_time": 0.0,
        }

    async def list_images(self) -> List[str]:
        """List image keys under the folder."""
        prefix = f"{self.prefix.rstrip('/')}/" if self.prefix else ""
        images = await self.s3_service.list_images(prefix, max_keys=self.max_images)
        return [image["key"] for image in images]

    async def index_image(self, image_key: str) -> int:
        """Index faces from an image.

        Returns:
            Number of faces indexed
        """
        result = await self.indexing_service.index_stored_image(
            image_key,
            self.collection_id,
            max_faces=self.max_faces_per_image,
        )
        return len(result.faces)

    async def index_folder(self) -> Dict[str, float]:
        """Index all images in the folder.

        Returns:
            Statistics about the indexing process
        """
        image_keys = await self.list_images()
        self.stats["total_images"] = len(image_keys)

        if not image_keys:
            print(f"No images found under {self.prefix or 'bucket root'}")
            return self.stats

        print(f"Found {len(image_keys)} images under {self.prefix or 'bucket root'}")

        start_time = time.time()

        for image_key in tqdm(image_keys, desc=f"Indexing {self.prefix or 'bucket'}"):
            try:
                faces_indexed = await self.index_image(image_key)
            except FaceRecognitionError as e:
                logger.warning("Failed to index image", key=image_key, error=str(e))
                self.stats["failed_images"] += 1
                continue

            self.stats["processed_images"] += 1
            self.stats["indexed_faces"] += faces_indexed
            if faces_indexed == 0:
                self.stats["skipped_images"] += 1

        self.stats["total_time"] = time.time() - start_time

        return self.stats

    def print_stats(self) -> None:
        """Print statistics about the indexing process."""
        print("\n===== Indexing Statistics =====")
        print(f"Folder: {self.prefix or '(bucket root)'}")
        print(f"Collection: {self.collection_id}")
        print(f"Total images: {self.stats['total_images']}")
        print(f"Processed images: {self.stats['processed_images']}")
        print(f"Skipped images (no faces): {self.stats['skipped_images']}")
        print(f"Failed images: {self.stats['failed_images']}")
        print(f"Faces indexed: {self.stats['indexed_faces']}")
        print(f"Total time: {self.stats['total_time']:.2f} seconds")

        if self.stats["processed_images"] > 0:
            print(f"Average time per image: "
                  f"{self.stats['total_time'] / self.stats['processed_images']:.2f} seconds")

        print("===============================")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Index faces from an S3 folder")
    parser.add_argument("--prefix", default=settings.DEFAULT_ROOT_FOLDER,
                        help="S3 folder to index")
    parser.add_argument("--collection", default=settings.DEFAULT_COLLECTION_ID,
                        help="Collection ID")
    parser.add_argument("--bucket", help="S3 bucket name")
    parser.add_argument("--max-faces", type=int, default=settings.MAX_FACES_PER_IMAGE,
                        help="Maximum faces per image")
    parser.add_argument("--max-images", type=int, default=1000,
                        help="Maximum number of objects to inspect")
    return parser


async def main(args: argparse.Namespace) -> None:
    """Main entry point."""
    indexer = S3FolderIndexer(
        prefix=args.prefix,
        collection_id=args.collection,
        bucket=args.bucket,
        max_faces_per_image=args.max_faces,
        max_images=args.max_images,
    )

    await indexer.index_folder()

    indexer.print_stats()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main(build_parser().parse_args()))
