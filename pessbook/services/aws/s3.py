"""
S3 service for image storage operations using aioboto3.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

import aioboto3
from botocore.exceptions import ClientError, NoCredentialsError

from pessbook.core.config import settings
from pessbook.core.exceptions import StorageError
from pessbook.core.logging import get_logger
from pessbook.core.utils.paths import parent_folder
from pessbook.domain.entities.identity import BlobEntry
from pessbook.domain.interfaces.storage.blob_store import BlobStore

logger = get_logger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif")

# User metadata key holding the external image id of an indexed object
EXTERNAL_ID_METADATA_KEY = "external-image-id"


class S3Service(BlobStore):
    """Service for interacting with AWS S3 using aioboto3."""

    def __init__(
        self,
        bucket_name: Optional[str] = None,
        region_name: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        read_external_ids: Optional[bool] = None,
    ):
        """Store configuration, clients are opened per operation."""
        self.bucket_name = bucket_name or settings.AWS_S3_BUCKET
        self.region_name = region_name or settings.AWS_REGION
        self.access_key_id = access_key_id or settings.AWS_ACCESS_KEY_ID
        self.secret_access_key = secret_access_key or settings.AWS_SECRET_ACCESS_KEY
        self.read_external_ids = (
            settings.S3_READ_EXTERNAL_IDS if read_external_ids is None else read_external_ids
        )
        self._session = aioboto3.Session()

    @asynccontextmanager
    async def _get_client(self) -> AsyncGenerator[Any, None]:
        """Async context manager yielding an S3 client."""
        client_args = {'region_name': self.region_name or "us-east-1"}
        if self.access_key_id and self.secret_access_key:
            client_args['aws_access_key_id'] = self.access_key_id
            client_args['aws_secret_access_key'] = self.secret_access_key

        try:
            async with self._session.client("s3", **client_args) as s3:
                yield s3
        except NoCredentialsError as e:
            logger.error("AWS credentials not found for S3", error=str(e))
            raise StorageError("AWS credentials not found or configured correctly.") from e

    async def list_all_blobs(self, root: str) -> List[BlobEntry]:
        """
        List every object under a root folder, recursively.

        Folder marker objects (keys ending in "/") are skipped. When
        ``read_external_ids`` is enabled each object's external image id
        is read from its user metadata.

        Args:
            root: Folder to list, with or without a trailing slash

        Returns:
            Blob entries in listing order

        Raises:
            StorageError: If the listing fails
        """
        prefix = f"{root.rstrip('/')}/" if root else ""
        keys = [obj['Key'] for obj in await self._list_objects(prefix)]

        if not self.read_external_ids:
            entries = [BlobEntry(key=key) for key in keys]
        else:
            external_ids = await self._read_external_ids(keys)
            entries = [
                BlobEntry(key=key, external_id=external_id)
                for key, external_id in zip(keys, external_ids)
            ]

        logger.debug("Listed blobs", root=root, count=len(entries))
        return entries

    async def _list_objects(
        self,
        prefix: str,
        max_keys: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """List objects under a prefix, folder markers skipped, every page unless max_keys is set."""
        pagination: Dict[str, Any] = {'MaxItems': max_keys} if max_keys else {}
        objects: List[Dict[str, Any]] = []
        try:
            async with self._get_client() as s3:
                paginator = s3.get_paginator('list_objects_v2')
                async for page in paginator.paginate(
                    Bucket=self.bucket_name,
                    Prefix=prefix,
                    PaginationConfig=pagination
                ):
                    for obj in page.get('Contents', []):
                        if not obj['Key'].endswith('/'):
                            objects.append(obj)
            return objects
        except StorageError:
            raise
        except ClientError as e:
            logger.error("Failed to list objects in S3 due to client error",
                         prefix=prefix, error=str(e), exc_info=True)
            raise StorageError(
                f"Failed to list objects with prefix '{prefix}': {e}") from e
        except Exception as e:
            logger.error("Unexpected error listing objects in S3",
                         prefix=prefix, error=str(e), exc_info=True)
            raise StorageError(
                f"Unexpected error listing objects with prefix '{prefix}': {e}") from e

    async def _read_external_ids(self, keys: List[str]) -> List[Optional[str]]:
        semaphore = asyncio.Semaphore(settings.S3_METADATA_CONCURRENCY)
        try:
            async with self._get_client() as s3:
                return list(await asyncio.gather(
                    *(self._read_external_id(s3, key, semaphore) for key in keys)
                ))
        except StorageError:
            raise
        except Exception as e:
            logger.error("Unexpected error reading object metadata from S3",
                         error=str(e), exc_info=True)
            raise StorageError(f"Unexpected error reading object metadata: {e}") from e

    async def _read_external_id(
        self,
        s3: Any,
        key: str,
        semaphore: asyncio.Semaphore
    ) -> Optional[str]:
        async with semaphore:
            try:
                response = await s3.head_object(Bucket=self.bucket_name, Key=key)
            except ClientError as e:
                # An unreadable tag only costs this entry its external id
                logger.warning("Failed to read object metadata", key=key, error=str(e))
                return None
        return response.get('Metadata', {}).get(EXTERNAL_ID_METADATA_KEY) or None

    async def resolve_display_url(self, key: str) -> Optional[str]:
        """Get a presigned URL for an image."""
        return await self.get_file_url(key, expiration=settings.PRESIGNED_URL_EXPIRATION)

    async def get_file_url(self, key: str, expiration: int = 3600) -> str:
        """
        Generate a presigned URL asynchronously.

        Args:
            key: S3 object key
            expiration: URL expiration time in seconds

        Returns:
            Presigned URL for the object
        """
        try:
            async with self._get_client() as s3:
                url = await s3.generate_presigned_url(
                    'get_object',
                    Params={'Bucket': self.bucket_name, 'Key': key},
                    ExpiresIn=expiration
                )
            logger.debug("Generated presigned URL",
                         key=key, bucket=self.bucket_name)
            return url
        except StorageError:
            raise
        except ClientError as e:
            logger.error("Failed to generate presigned URL due to client error",
                         key=key, error=str(e), exc_info=True)
            raise StorageError(
                f"Failed to generate presigned URL for '{key}': {e}") from e
        except Exception as e:
            logger.error("Unexpected error generating presigned URL",
                         key=key, error=str(e), exc_info=True)
            raise StorageError(
                f"Unexpected error generating presigned URL for '{key}': {e}") from e

    async def list_folders(self, prefix: str = '') -> List[str]:
        """
        List the immediate sub-folders of a prefix.

        Args:
            prefix: Parent folder, "" for the bucket root

        Returns:
            Folder prefixes, each ending in "/"
        """
        folders: List[str] = []
        try:
            async with self._get_client() as s3:
                paginator = s3.get_paginator('list_objects_v2')
                async for page in paginator.paginate(
                    Bucket=self.bucket_name,
                    Prefix=prefix,
                    Delimiter='/'
                ):
                    for prefix_data in page.get('CommonPrefixes', []):
                        folder = prefix_data['Prefix']
                        if folder != prefix:
                            folders.append(folder)
            logger.debug("Listed folders", prefix=prefix, count=len(folders))
            return folders
        except StorageError:
            raise
        except ClientError as e:
            logger.error("Failed to list folders in S3 due to client error",
                         prefix=prefix, error=str(e), exc_info=True)
            raise StorageError(f"Failed to list folders under '{prefix}': {e}") from e
        except Exception as e:
            logger.error("Unexpected error listing folders in S3",
                         prefix=prefix, error=str(e), exc_info=True)
            raise StorageError(f"Unexpected error listing folders under '{prefix}': {e}") from e

    async def list_images(self, prefix: str = '', max_keys: int = 1000) -> List[Dict[str, Any]]:
        """
        List image objects under a prefix, sub-folders included.

        Args:
            prefix: Key prefix to filter objects
            max_keys: Maximum number of objects to inspect

        Returns:
            List of {"key", "last_modified"} dicts for image files only
        """
        images = [
            {'key': obj['Key'], 'last_modified': obj.get('LastModified')}
            for obj in await self._list_objects(prefix, max_keys=max_keys)
            if obj['Key'].lower().endswith(IMAGE_EXTENSIONS)
        ]
        logger.debug("Listed images", prefix=prefix, count=len(images))
        return images

    async def folder_stats(self, prefix: str = '') -> Dict[str, int]:
        """
        Count the images directly inside every folder under a prefix.

        Args:
            prefix: Folder to walk, "" for the whole bucket

        Returns:
            Mapping of folder path (no trailing slash) to image count,
            "" standing for the bucket root
        """
        counts: Dict[str, int] = {}
        for obj in await self._list_objects(prefix):
            key = obj['Key']
            if key.lower().endswith(IMAGE_EXTENSIONS):
                folder = parent_folder(key)
                counts[folder] = counts.get(folder, 0) + 1
        logger.debug("Counted images per folder", prefix=prefix, folders=len(counts))
        return counts

    async def upload_image(
        self,
        image_bytes: bytes,
        folder: str,
        filename: str,
        external_id: Optional[str] = None,
    ) -> str:
        """
        Upload a JPEG image into a folder.

        Args:
            image_bytes: Raw image data
            folder: Destination folder, "" for the bucket root
            filename: Object name inside the folder
            external_id: External image id stored in the object metadata

        Returns:
            The S3 key of the uploaded image
        """
        key = f"{folder.strip('/')}/{filename}" if folder.strip('/') else filename
        put_args: Dict[str, Any] = {
            'Bucket': self.bucket_name,
            'Key': key,
            'Body': image_bytes,
            'ContentType': 'image/jpeg',
        }
        if external_id:
            put_args['Metadata'] = {EXTERNAL_ID_METADATA_KEY: external_id}

        try:
            async with self._get_client() as s3:
                await s3.put_object(**put_args)
            logger.info("Successfully uploaded image to S3",
                        key=key, bucket=self.bucket_name)
            return key
        except StorageError:
            raise
        except ClientError as e:
            logger.error("Failed to upload image to S3 due to client error",
                         key=key, error=str(e), exc_info=True)
            raise StorageError(f"Failed to upload image '{key}' to S3: {e}") from e
        except Exception as e:
            logger.error("Unexpected error uploading image to S3",
                         key=key, error=str(e), exc_info=True)
            raise StorageError(f"Unexpected error uploading image '{key}': {e}") from e

    async def get_file(self, key: str) -> bytes:
        """
        Get file contents from S3 asynchronously.

        Args:
            key: S3 object key

        Returns:
            File contents as bytes

        Raises:
            StorageError: If file cannot be retrieved (e.g., not found, access denied)
        """
        try:
            async with self._get_client() as s3:
                response = await s3.get_object(Bucket=self.bucket_name, Key=key)
                async with response['Body'] as body:
                    return await body.read()
        except StorageError:
            raise
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code')
            if error_code == 'NoSuchKey':
                logger.warning("File not found in S3", bucket=self.bucket_name, key=key)
                raise StorageError(f"File not found: {key}") from e
            elif error_code == 'NoSuchBucket':
                logger.error("Bucket does not exist", bucket=self.bucket_name)
                raise StorageError(f"Bucket not found: {self.bucket_name}") from e
            elif error_code in ('403', 'AccessDenied'):
                logger.error("Access denied when getting file", bucket=self.bucket_name, key=key)
                raise StorageError(f"Access denied for file: {key}") from e
            else:
                logger.error("Failed to get file from S3 due to client error",
                             key=key, error=str(e), exc_info=True)
                raise StorageError(
                    f"Failed to retrieve file '{key}' due to S3 error: {e}") from e
        except Exception as e:
            logger.error("Unexpected error getting file from S3",
                         key=key, error=str(e), exc_info=True)
            raise StorageError(f"Unexpected error retrieving file: {key}") from e
