"""Filename and content-type checks for uploaded assets."""

import os
from typing import Optional

from common.constants import ALLOWED_EXTENSIONS, DEFAULT_CONTENT_TYPE
from diary.exceptions import InvalidExtensionError


def file_extension(filename: str) -> str:
    """
    Get the lowercased extension of a filename, without the dot.

    Only the base name is considered, so directory parts sent by some
    clients ("photos/a.JPG") do not matter.
    """
    base = os.path.basename((filename or "").replace("\\", "/"))
    _, ext = os.path.splitext(base)
    return ext[1:].lower()


def validate_extension(filename: str, index: Optional[int] = None) -> None:
    """
    Check a filename's extension against the allow-list.

    Args:
        filename: Name as sent by the client
        index: Position of the file in its batch, used in the error message

    Raises:
        InvalidExtensionError: If the extension is missing or not allowed
    """
    if file_extension(filename) not in ALLOWED_EXTENSIONS:
        raise InvalidExtensionError(filename, index)


def content_type(declared: Optional[str]) -> str:
    """Return the declared content type, or the generic binary type."""
    if declared and declared.strip():
        return declared.strip()
    return DEFAULT_CONTENT_TYPE
