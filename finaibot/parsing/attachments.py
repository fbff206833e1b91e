"""Attachment preprocessing for chat submissions.

Each uploaded file yields two things: a short context string for the model
and a renderable preview reference for the transcript. Only text-like files
contribute their content; images, PDFs and other binaries are described by
metadata alone.
"""

import base64
import io
import logging
from enum import Enum
from pathlib import PurePath

from PIL import Image
from pydantic import BaseModel, Field
from pypdf import PdfReader

from finaibot.models.schemas import AttachmentRef

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".csv", ".json", ".txt", ".md"}
PDF_MAGIC_BYTES = b"%PDF"
DEFAULT_MAX_INLINE_CHARS = 200_000
PLACEHOLDER_PREVIEW_URL = "data:application/octet-stream;base64," + base64.b64encode(
    b"Preview not available"
).decode("ascii")


class AttachmentKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    PDF = "pdf"
    OTHER = "other"


class UploadedFile(BaseModel):
    """A file picked by the user, before preprocessing."""

    name: str
    mime_type: str = "application/octet-stream"
    content: bytes = b""


class ProcessedAttachment(BaseModel):
    """Result of preprocessing one file.

    Attributes:
        context: Descriptive string sent to the model.
        preview: Reference shown in the transcript.
        failed: Whether processing failed and placeholders were substituted.
    """

    context: str
    preview: AttachmentRef
    failed: bool = Field(default=False)


class AttachmentProcessingError(Exception):
    """Raised when a file cannot be turned into context."""

    pass


def classify(name: str, mime_type: str) -> AttachmentKind:
    suffix = PurePath(name).suffix.lower()
    if suffix in TEXT_EXTENSIONS or mime_type.startswith("text/"):
        return AttachmentKind.TEXT
    if mime_type.startswith("image/"):
        return AttachmentKind.IMAGE
    if mime_type == "application/pdf" or suffix == ".pdf":
        return AttachmentKind.PDF
    return AttachmentKind.OTHER


def format_size(size_bytes: int) -> str:
    """Format a byte count for display (e.g. ``12.3 KB``)."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def _data_url(mime_type: str, data: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def _text_context(file: UploadedFile, max_inline_chars: int) -> str:
    text = file.content.decode("utf-8", errors="replace")
    if len(text) > max_inline_chars:
        dropped = len(text) - max_inline_chars
        logger.info(f"Truncating {file.name}: {dropped} characters over inline limit")
        text = f"{text[:max_inline_chars]}\n[... truncated {dropped} characters]"
    return text


def _image_context(file: UploadedFile) -> str:
    try:
        with Image.open(io.BytesIO(file.content)) as image:
            width, height = image.size
    except Exception as e:
        raise AttachmentProcessingError(f"Unreadable image {file.name}: {e}") from e
    return f"[Image: {file.name}, {width}x{height}, {format_size(len(file.content))}]"


def _pdf_page_count(data: bytes) -> int | None:
    if not data.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        return None
    try:
        return len(PdfReader(io.BytesIO(data)).pages)
    except Exception as e:
        logger.warning(f"Failed to count PDF pages: {e}")
        return None


def _pdf_context(file: UploadedFile) -> str:
    details = [file.name, format_size(len(file.content))]
    pages = _pdf_page_count(file.content)
    if pages is not None:
        details.append(f"{pages} pages")
    return f"[PDF Document: {', '.join(details)}]"


def _other_context(file: UploadedFile) -> str:
    return (
        f"[File: {file.name}, type: {file.mime_type}, "
        f"size: {format_size(len(file.content))}]"
    )


def placeholder_attachment(file: UploadedFile) -> ProcessedAttachment:
    """Substitute placeholders for a file that could not be processed."""
    return ProcessedAttachment(
        context=f"[File: {file.name} - Error processing file]",
        preview=AttachmentRef(
            name=file.name,
            mime_type=file.mime_type,
            size_bytes=len(file.content),
            url=PLACEHOLDER_PREVIEW_URL,
        ),
        failed=True,
    )


def process_attachment(
    file: UploadedFile,
    max_inline_chars: int = DEFAULT_MAX_INLINE_CHARS,
) -> ProcessedAttachment:
    """Derive the model context and preview reference for one file.

    Args:
        file: The uploaded file.
        max_inline_chars: Upper bound on inlined text characters.

    Returns:
        ProcessedAttachment. Failures are returned as placeholders, never raised.
    """
    try:
        kind = classify(file.name, file.mime_type)
        size_bytes = len(file.content)

        if kind == AttachmentKind.TEXT:
            context = _text_context(file, max_inline_chars)
            url = _data_url(file.mime_type or "text/plain", context.encode("utf-8"))
        elif kind == AttachmentKind.IMAGE:
            context = _image_context(file)
            url = _data_url(file.mime_type, file.content)
        elif kind == AttachmentKind.PDF:
            context = _pdf_context(file)
            url = PLACEHOLDER_PREVIEW_URL
        else:
            context = _other_context(file)
            url = PLACEHOLDER_PREVIEW_URL

        preview = AttachmentRef(
            name=file.name,
            mime_type=file.mime_type,
            size_bytes=size_bytes,
            url=url,
        )
        return ProcessedAttachment(context=context, preview=preview)

    except Exception as e:
        logger.warning(f"Failed to process attachment {file.name}: {e}")
        return placeholder_attachment(file)


def process_attachments(
    files: list[UploadedFile],
    max_inline_chars: int = DEFAULT_MAX_INLINE_CHARS,
) -> list[ProcessedAttachment]:
    """Process a batch of files; one bad file never affects the others."""
    return [process_attachment(file, max_inline_chars) for file in files]
