"""
Small lookup helpers shared by request builders and validators.
"""

from pathlib import Path
from typing import Optional, Tuple

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".tiff": "image/tiff",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
}

# First extension wins for MIME types shared by several extensions (.jpg/.jpeg).
EXTENSIONS = {}
for _extension, _mime_type in MIME_TYPES.items():
    EXTENSIONS.setdefault(_mime_type, _extension)

DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(file_extension: str) -> str:
    """Return the MIME type for a file extension (with or without the dot)."""
    if not file_extension or not file_extension.strip():
        raise ValueError("File extension cannot be empty")

    extension = file_extension.strip().lower()
    if not extension.startswith("."):
        extension = "." + extension

    if extension not in MIME_TYPES:
        raise ValueError(f"Unsupported file extension: {extension}")
    return MIME_TYPES[extension]


def get_file_extension(mime_type: str) -> str:
    """Return the canonical file extension for an image MIME type."""
    if not mime_type or not mime_type.strip():
        raise ValueError("MIME type cannot be empty")

    extension = EXTENSIONS.get(mime_type.strip().lower())
    if extension is None:
        raise ValueError(f"Unsupported MIME type: {mime_type}")
    return extension


def guess_mime_type(filename: Optional[str]) -> str:
    """MIME type for a filename, falling back to a generic binary type."""
    if not filename:
        return DEFAULT_MIME_TYPE
    suffix = Path(filename).suffix
    if suffix.lower() not in MIME_TYPES:
        return DEFAULT_MIME_TYPE
    return MIME_TYPES[suffix.lower()]


def parse_size(size: str) -> Optional[Tuple[int, int]]:
    """
    Parse a ``WIDTHxHEIGHT`` token (case-insensitive separator).

    Returns None when the token is malformed or either dimension is not a
    positive integer.
    """
    if not size or not size.strip():
        return None

    parts = size.strip().lower().split("x")
    if len(parts) != 2:
        return None

    width, height = parts
    if not (width.isdigit() and height.isdigit()):
        return None

    width_px, height_px = int(width), int(height)
    if width_px <= 0 or height_px <= 0:
        return None
    return width_px, height_px
