"""File validation — type checking, encoding detection, text extraction.

Uses `filetype` for magic-byte validation (don't trust extensions),
`charset-normalizer` for detecting the encoding of CSV/TSV/text uploads,
and `striprtf` to flatten RTF documents to plain text.
"""

import logging

import filetype as ft
from charset_normalizer import from_bytes
from striprtf.striprtf import rtf_to_text

log = logging.getLogger("clubhouse.file_validation")

# Extensions accepted by the text import
TEXT_IMPORT_EXTENSIONS = (".txt", ".csv", ".json", ".tsv", ".pdf", ".rtf")

# Image extension → data-URL subtype for the vision import; anything else is sent as jpeg
IMAGE_FORMATS = {".png": "png", ".gif": "gif", ".webp": "webp"}

_FORMAT_LABELS = {
    ".csv": ("CSV (comma-separated values)", "CSV"),
    ".tsv": ("TSV (tab-separated values)", "TSV"),
    ".json": ("JSON", "JSON"),
}


def check_size(content: bytes, max_size: int) -> str | None:
    """Reason the upload is refused on size, or None when it is acceptable."""
    if not content:
        return "Empty file"
    if len(content) > max_size:
        mb = len(content) / 1024 / 1024
        return (
            f"File too large ({mb:.1f}MB). Maximum size is {max_size // (1024 * 1024)}MB. "
            "Please split your file into smaller parts or extract just the pages you need."
        )
    return None


def validate_import_file(content: bytes, filename: str) -> tuple[bool, str]:
    """Validate an upload for the text import.

    Returns (True, extension) or (False, reason).
    """
    ext = _get_extension(filename)
    if ext not in TEXT_IMPORT_EXTENSIONS:
        return False, (
            f"Unsupported file type. Please upload one of: {', '.join(TEXT_IMPORT_EXTENSIONS)}"
        )

    kind = ft.guess(content)
    if ext == ".pdf":
        if kind is None or kind.mime != "application/pdf":
            return False, "File claims to be .pdf but is not a PDF document"
        return True, ext

    # Text formats: a binary signature means the extension is lying
    if kind is not None and kind.mime != "application/rtf":
        return False, f"File claims to be {ext} but detected as {kind.mime}"
    return True, ext


def validate_image(content: bytes, filename: str) -> tuple[bool, str]:
    """Validate an upload for the vision import. Returns (True, format) or (False, reason)."""
    kind = ft.guess(content)
    if kind is not None and not kind.mime.startswith("image/"):
        return False, f"Expected an image but detected {kind.mime}"
    return True, image_format(filename)


def image_format(filename: str) -> str:
    return IMAGE_FORMATS.get(_get_extension(filename), "jpeg")


def detect_encoding(content: bytes) -> str:
    """Detect text encoding using charset-normalizer, defaulting to utf-8."""
    best = from_bytes(content).best()
    if best:
        log.debug(f"Detected encoding: {best.encoding}")
        return best.encoding
    return "utf-8"


def decode_text(content: bytes, encoding: str | None = None) -> str:
    """Decode bytes to string using detected or specified encoding."""
    enc = encoding or detect_encoding(content)
    return content.decode(enc, errors="replace")


def extract_text(content: bytes, filename: str) -> str:
    """Plain text of a non-PDF import file. RTF markup is stripped."""
    text = decode_text(content)
    if _get_extension(filename) == ".rtf":
        text = rtf_to_text(text).strip()
        log.info(f"Extracted {len(text)} characters from RTF")
    return text


def format_labels(filename: str) -> tuple[str, str]:
    """(long, short) human label for a file's format, used in extraction prompts."""
    return _FORMAT_LABELS.get(_get_extension(filename), ("Plain text", "text"))


def _get_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if not filename:
        return ""
    parts = filename.lower().rsplit(".", 1)
    return f".{parts[-1]}" if len(parts) > 1 else ""
