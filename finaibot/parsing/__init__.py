"""Attachment processing for chat submissions.

Turns uploaded files into model context and transcript previews.

Responsibilities:
    - File classification (text, image, PDF, other)
    - Image dimension extraction with Pillow
    - PDF page counting with pypdf
    - Per-type formatting of context blocks for the prompt

Failures are isolated per file and replaced with placeholders.
"""

from finaibot.parsing.attachments import (
    AttachmentKind,
    ProcessedAttachment,
    UploadedFile,
    process_attachment,
    process_attachments,
)
from finaibot.parsing.file_context import format_file_content

__all__ = [
    "AttachmentKind",
    "ProcessedAttachment",
    "UploadedFile",
    "format_file_content",
    "process_attachment",
    "process_attachments",
]
