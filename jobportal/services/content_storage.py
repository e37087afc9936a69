"""
Content Storage Service - object storage for resume files.

The rest of the app only talks to ContentStorageService:
    upload(directive, file) -> {"storage_id": ..., "url": ...}
    delete(storage_id)

S3ContentStorage is the production backend. A directive with a page renders
that page of the PDF to the target image format before the upload; the
object is stored under the target format's extension and content type. The
directive is also kept as object metadata (resource-kind / target-format / page).
"""

import mimetypes
import uuid
from abc import ABC, abstractmethod
from typing import BinaryIO, Optional, Tuple, Union

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from jobportal.core.config import Settings, get_settings
from jobportal.core.errors import StorageServiceError
from jobportal.core.logger import get_logger
from jobportal.schemas.schemas import UploadDirective
from jobportal.utils.file_upload import IncomingFile, get_file_extension, render_pdf_page

logger = get_logger(__name__)


class ContentStorageService(ABC):
    """Opaque object store contract."""

    @abstractmethod
    def upload(self, directive: UploadDirective, file: IncomingFile) -> dict:
        """Store the file; returns {"storage_id", "url"}. Raises StorageServiceError."""

    @abstractmethod
    def delete(self, storage_id: str) -> None:
        """Remove a stored object. Raises StorageServiceError."""


class S3ContentStorage(ContentStorageService):
    """Content storage backed by an S3 bucket."""

    def __init__(self, settings: Settings = None, client=None):
        self.settings = settings or get_settings()
        self.bucket = self.settings.s3_bucket_name
        self.folder = self.settings.resume_folder.strip("/")
        self.s3_client = client if client is not None else boto3.client(
            "s3",
            region_name=self.settings.aws_region,
            aws_access_key_id=self.settings.aws_access_key_id,
            aws_secret_access_key=self.settings.aws_secret_access_key,
            config=BotoConfig(
                connect_timeout=self.settings.storage_connect_timeout,
                read_timeout=self.settings.storage_read_timeout,
                retries={"max_attempts": self.settings.storage_max_attempts, "mode": "standard"},
            ),
        )

    def build_key(self, directive: UploadDirective, filename: str) -> str:
        extension = directive.target_format or get_file_extension(filename)
        return f"{self.folder}/{uuid.uuid4().hex}.{extension}"

    @staticmethod
    def directive_metadata(directive: UploadDirective) -> dict:
        metadata = {"resource-kind": directive.resource_kind.value}
        if directive.target_format:
            metadata["target-format"] = directive.target_format
        if directive.page is not None:
            metadata["page"] = str(directive.page)
        return metadata

    def object_url(self, key: str) -> str:
        return f"{self.settings.storage_base_url}/{key}"

    def prepare_body(self, directive: UploadDirective, file: IncomingFile) -> Tuple[Union[bytes, BinaryIO], str]:
        """Object body and content type for a directive."""
        if directive.page is None:
            return file.stream, file.content_type

        body = render_pdf_page(file.stream.read(), directive.page, directive.target_format)
        content_type = mimetypes.types_map.get(f".{directive.target_format}", "application/octet-stream")
        logger.info(f"Rendered page {directive.page} of '{file.filename}' as {directive.target_format} ({len(body)} bytes)")
        return body, content_type

    def upload(self, directive: UploadDirective, file: IncomingFile) -> dict:
        key = self.build_key(directive, file.filename)
        body, content_type = self.prepare_body(directive, file)
        logger.info(f"S3: uploading resume '{file.filename}' ({file.size} bytes) as {key}")
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
                Metadata=self.directive_metadata(directive),
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 error uploading {key} to bucket {self.bucket}: {e}")
            raise StorageServiceError("Failed to upload resume.") from e

        return {"storage_id": key, "url": self.object_url(key)}

    def delete(self, storage_id: str) -> None:
        try:
            self.s3_client.delete_object(Bucket=self.bucket, Key=storage_id)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 error deleting {storage_id}: {e}")
            raise StorageServiceError(f"Failed to delete stored resume {storage_id}.") from e
        logger.info(f"S3: deleted {storage_id} from bucket {self.bucket}")


# Singleton instance
_content_storage: Optional[ContentStorageService] = None


def get_content_storage() -> ContentStorageService:
    """Get or create the content storage backend (singleton pattern)"""
    global _content_storage
    if _content_storage is None:
        _content_storage = S3ContentStorage()
    return _content_storage
