"""
File Upload Utility - scoped access to an uploaded resume file.

The handle is closed on every exit path of the request, including
validation errors raised before anything is uploaded. PDF pages are rendered
to images with PyMuPDF.

Max file size: MAX_RESUME_SIZE_MB (default 5MB)
"""

import mimetypes
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional

import pymupdf
from fastapi import UploadFile

from jobportal.core.config import get_settings
from jobportal.core.errors import FileTooLargeError, ValidationError


@dataclass
class IncomingFile:
    """An uploaded file as the storage layer sees it."""
    filename: str
    stream: BinaryIO
    content_type: str
    size: int


def get_file_extension(filename: str) -> str:
    """Lowercase text after the last dot (the whole name if there is no dot)."""
    return filename.rsplit('.', 1)[-1].lower()


def render_pdf_page(content: bytes, page: int = 1, image_format: str = "jpg", dpi: int = 150) -> bytes:
    """
    Render one page (1-based) of a PDF to image bytes.

    Raises:
        ValidationError: not a readable PDF, or it has no such page
    """
    try:
        with pymupdf.open(stream=content, filetype="pdf") as doc:
            if page < 1 or page > doc.page_count:
                raise ValidationError(f"Resume PDF has no page {page}.")
            pixmap = doc[page - 1].get_pixmap(dpi=dpi)
            return pixmap.tobytes(output=image_format)
    except ValidationError:
        raise
    except Exception as e:
        raise ValidationError(f"Error reading PDF: {str(e)}") from e


def guess_content_type(filename: str, declared: Optional[str] = None) -> str:
    if declared and declared != "application/octet-stream":
        return declared
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or "application/octet-stream"


def _stream_size(stream: BinaryIO) -> int:
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(0)
    return size


@contextmanager
def open_upload(file: Optional[UploadFile], max_bytes: Optional[int] = None) -> Iterator[Optional[IncomingFile]]:
    """
    Wrap a FastAPI UploadFile for the duration of a request.

    Yields None when no file was attached (browsers send an empty part with
    an empty filename when the file input is left blank).

    Raises:
        ValidationError: empty file
        FileTooLargeError: file above the configured limit
    """
    if file is None:
        yield None
        return

    try:
        if not file.filename:
            yield None
            return

        limit = max_bytes if max_bytes is not None else get_settings().max_resume_size_bytes
        size = _stream_size(file.file)
        if size == 0:
            raise ValidationError("Uploaded resume file is empty.")
        if size > limit:
            raise FileTooLargeError(
                f"File too large. Maximum size: {limit // (1024 * 1024)}MB"
            )

        yield IncomingFile(
            filename=file.filename,
            stream=file.file,
            content_type=guess_content_type(file.filename, file.content_type),
            size=size,
        )
    finally:
        file.file.close()
