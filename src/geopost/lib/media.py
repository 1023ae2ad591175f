"""Media kind classification by file extension."""

import os

from ..models import MediaKind

MEDIA_TYPES: dict[str, MediaKind] = {
    ".jpeg": MediaKind.IMAGE,
    ".jpg": MediaKind.IMAGE,
    ".gif": MediaKind.IMAGE,
    ".png": MediaKind.IMAGE,
    ".mov": MediaKind.VIDEO,
    ".mp4": MediaKind.VIDEO,
    ".avi": MediaKind.VIDEO,
    ".flv": MediaKind.VIDEO,
    ".wmv": MediaKind.VIDEO,
}


def classify(file_name: str | None) -> MediaKind:
    """Map a file name to its coarse media kind.

    Matching is case-insensitive on the final extension; names without a
    known extension are ``unknown``. The file content is never inspected.
    """
    if not file_name:
        return MediaKind.UNKNOWN
    _, ext = os.path.splitext(file_name)
    return MEDIA_TYPES.get(ext.lower(), MediaKind.UNKNOWN)
