"""
Resume Ingestion Router

classify() turns a declared file name into an UploadDirective; it never looks
at the file's bytes and has no side effects. ResumeIngestionRouter executes a
directive against the content storage service.

| extension      | resource kind | target format | page |
|----------------|---------------|---------------|------|
| jpg/jpeg/png   | image         | extension     | -    |
| pdf            | image         | jpg           | 1    |
| doc/docx       | raw           | -             | -    |
"""

from typing import Optional

from jobportal.core.errors import StorageServiceError, UnsupportedFormatError
from jobportal.core.logger import get_logger
from jobportal.schemas.schemas import ResourceKind, ResumeReference, UploadDirective
from jobportal.services.content_storage import ContentStorageService, get_content_storage
from jobportal.utils.file_upload import IncomingFile, get_file_extension

logger = get_logger(__name__)

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png")
DOCUMENT_EXTENSIONS = ("doc", "docx")


def classify(filename: str) -> UploadDirective:
    """
    Build the upload directive for a resume file name.

    Raises:
        UnsupportedFormatError: extension has no directive
    """
    extension = get_file_extension(filename)

    if extension in IMAGE_EXTENSIONS:
        return UploadDirective(resource_kind=ResourceKind.image, target_format=extension)
    if extension == "pdf":
        # first page rendered as a still image
        return UploadDirective(resource_kind=ResourceKind.image, target_format="jpg", page=1)
    if extension in DOCUMENT_EXTENSIONS:
        return UploadDirective(resource_kind=ResourceKind.raw)

    raise UnsupportedFormatError(extension)


class ResumeIngestionRouter:
    """
    Sends classified resume files to content storage.

    No retries here: a failed upload is reported to the caller, which must not
    persist anything for it.
    """

    def __init__(self, storage: ContentStorageService = None):
        self.storage = storage if storage is not None else get_content_storage()

    def ingest(self, directive: UploadDirective, file: IncomingFile) -> ResumeReference:
        """
        Upload one file under the given directive.

        Raises:
            StorageServiceError: transport/validation failure or unusable response
        """
        response = self.storage.upload(directive, file)
        storage_id = response.get("storage_id") if response else None
        url = response.get("url") if response else None
        if not storage_id or not url:
            logger.error(f"Content storage returned no usable reference for '{file.filename}': {response}")
            raise StorageServiceError("Failed to upload resume.")

        return ResumeReference(storage_id=storage_id, url=url)

    def ingest_file(self, file: IncomingFile) -> ResumeReference:
        """classify() + ingest() for an uploaded file."""
        directive = classify(file.filename)
        logger.info(
            f"Routing resume '{file.filename}' as {directive.resource_kind.value}"
            f" (format={directive.target_format}, page={directive.page})"
        )
        return self.ingest(directive, file)

    def discard(self, reference: Optional[ResumeReference]) -> bool:
        """
        Best-effort removal of a stored resume that is no longer referenced.

        Failures are logged and swallowed: the caller's record is already
        consistent, the worst case is an orphaned object in storage.
        """
        if reference is None:
            return False
        try:
            self.storage.delete(reference.storage_id)
            return True
        except StorageServiceError as e:
            logger.warning(f"Could not delete superseded resume {reference.storage_id}: {e}")
            return False


# Singleton instance
_resume_router: ResumeIngestionRouter = None


def get_resume_router() -> ResumeIngestionRouter:
    """Get or create the resume ingestion router (singleton pattern)"""
    global _resume_router
    if _resume_router is None:
        _resume_router = ResumeIngestionRouter()
    return _resume_router
