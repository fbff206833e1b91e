"""Formatting of attachment context strings for the model prompt."""

import json
import logging

logger = logging.getLogger(__name__)

CSV_SAMPLE_ROWS = 5


def _format_json(content: str, file_name: str) -> str:
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        return f"JSON file {file_name} (unparseable):\n{content}"
    return f"JSON file {file_name}:\n{json.dumps(parsed, indent=2)}"


def _format_csv(content: str, file_name: str) -> str:
    if "," not in content or "\n" not in content:
        return f"CSV file {file_name} (possibly malformed):\n{content}"

    lines = [line for line in content.split("\n") if line.strip()]
    if not lines:
        return f"CSV file {file_name} (empty or invalid):\n{content}"

    headers = [h.strip() for h in lines[0].split(",")]
    formatted = (
        f"CSV file {file_name}:\n\nHeaders: {', '.join(headers)}\n\n"
        f"Data Rows: {len(lines) - 1}"
    )

    sample_rows = lines[1 : CSV_SAMPLE_ROWS + 1]
    if sample_rows:
        formatted += "\n\nSample rows:\n"
        formatted += "".join(f"Row {i}: {row}\n" for i, row in enumerate(sample_rows, start=1))

    return formatted + f"\n\nFull CSV content:\n{content}"


def format_file_content(content: str | None, file_name: str) -> str:
    """Format one attachment's context string for the model.

    JSON is pretty-printed, CSV summarised ahead of its full content, and
    PDF/image metadata annotated with what the model can and cannot see.

    Args:
        content: Context string produced by attachment preprocessing.
        file_name: Original filename.

    Returns:
        Formatted block. Never raises.
    """
    if not content or content in ("undefined", "null"):
        return f"[File: {file_name} - No valid content could be processed]"

    try:
        stripped = content.strip()
        lower_name = file_name.lower()

        if lower_name.endswith(".json") or (stripped.startswith("{") and stripped.endswith("}")):
            return _format_json(content, file_name)

        if lower_name.endswith(".csv") or ("," in content and len(content.split("\n")) > 1):
            return _format_csv(content, file_name)

        if lower_name.endswith(".pdf") or "[PDF Document:" in content:
            return (
                f"PDF file information: {content}\n"
                "Note: This is metadata only as the PDF content could not be extracted directly."
            )

        if "[Image:" in content:
            return (
                f"Image file information: {content}\n"
                "Note: This is image metadata. If the user asks about analyzing this image, "
                "explain that you can only read text-based financial data, but you'd be happy "
                "to provide guidance on what to look for in the image if they describe its contents."
            )

        return f"File {file_name}:\n{content}"

    except Exception as e:
        logger.error(f"Error formatting file content for {file_name}: {e}")
        return f"[File: {file_name} - Error formatting content]"
