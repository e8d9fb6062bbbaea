"""
Media Storage Service für DSP E-Learning Platform

Uploads and deletes binary course assets (thumbnails, lecture videos,
avatars) in the S3-compatible object storage (Wasabi).

Every upload returns a ``StoredMedia`` with the public URL that is
persisted on the model and the storage key needed to delete or replace
the object later.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
import mimetypes
import os
import uuid
from dataclasses import dataclass
from typing import BinaryIO, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings

logger = logging.getLogger(__name__)


class MediaStorageError(Exception):
    """Upload or deletion in the object storage failed."""


@dataclass
class StoredMedia:
    """Repräsentiert eine hochgeladene Datei im Object Storage."""

    url: str
    key: str
    content_type: str
    size: Optional[int] = None


class MediaStorageService:
    """
    Service für Upload und Löschen von Medien im Object Storage.

    Configuration comes from the MEDIA_STORAGE_* settings.
    """

    def __init__(self, client=None):
        self.bucket_name = settings.MEDIA_STORAGE_BUCKET
        self.endpoint_url = settings.MEDIA_STORAGE_ENDPOINT_URL
        self.public_base_url = settings.MEDIA_STORAGE_PUBLIC_URL or (
            f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}"
        )
        self.client = client or boto3.client(
            "s3",
            aws_access_key_id=settings.MEDIA_STORAGE_ACCESS_KEY_ID,
            aws_secret_access_key=settings.MEDIA_STORAGE_SECRET_ACCESS_KEY,
            region_name=settings.MEDIA_STORAGE_REGION,
            endpoint_url=self.endpoint_url,
        )

    def build_key(self, folder: str, filename: str) -> str:
        extension = os.path.splitext(filename or "")[1].lower()
        return f"{folder.strip('/')}/{uuid.uuid4().hex}{extension}"

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url.rstrip('/')}/{key}"

    def upload(
        self,
        file_obj: BinaryIO,
        folder: str,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> StoredMedia:
        """
        Upload a file object and return its locator.

        Args:
            file_obj: Readable binary file (e.g. Django UploadedFile)
            folder: Key prefix such as ``thumbnails`` or ``lectures/12``
            filename: Original file name, used for the extension
            content_type: MIME type, guessed from the file name if omitted

        Raises:
            MediaStorageError: if the storage rejects the upload
        """
        filename = filename or getattr(file_obj, "name", "") or ""
        content_type = (
            content_type
            or getattr(file_obj, "content_type", None)
            or mimetypes.guess_type(filename)[0]
            or "application/octet-stream"
        )
        key = self.build_key(folder, filename)

        try:
            self.client.upload_fileobj(
                file_obj,
                self.bucket_name,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Upload von %s fehlgeschlagen: %s", key, e)
            raise MediaStorageError(f"Upload failed: {e}") from e

        logger.info("Uploaded media %s (%s)", key, content_type)
        return StoredMedia(
            url=self.public_url(key),
            key=key,
            content_type=content_type,
            size=getattr(file_obj, "size", None),
        )

    def delete(self, key: str) -> None:
        """
        Delete an object by its storage key.

        Raises:
            MediaStorageError: if the storage rejects the deletion
        """
        if not key:
            return
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error("Löschen von %s fehlgeschlagen: %s", key, e)
            raise MediaStorageError(f"Delete failed: {e}") from e
        logger.info("Deleted media %s", key)

    def delete_quietly(self, key: str) -> bool:
        """Best-effort cleanup used when an old asset is replaced."""
        try:
            self.delete(key)
        except MediaStorageError:
            logger.warning("Could not delete replaced media %s", key)
            return False
        return True
