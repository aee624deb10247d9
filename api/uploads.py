"""
uploads.py

Admission checks for the ``image`` upload on POST /predict.

Checks run in a fixed order: MIME type, then file extension, then size. The
first failing check decides the error message returned to the client.
"""

from __future__ import annotations

import os
from typing import Iterable, List, Optional

from fastapi import UploadFile


class UploadError(ValueError):
    """Base class for client-side upload problems (answered with HTTP 400)."""


class MissingFileError(UploadError):
    default_message = "No file uploaded"

    def __init__(self, message: str = default_message) -> None:
        super().__init__(message)


class UploadValidationError(UploadError):
    """Wrong MIME type, wrong extension or oversized file."""


def _describe_extensions(extensions: List[str]) -> str:
    """[".jpg", ".jpeg", ".png"] -> "JPG, JPEG, and PNG"."""
    names = [e.lstrip(".").upper() for e in extensions]
    if len(names) <= 2:
        return " and ".join(names)
    return ", ".join(names[:-1]) + ", and " + names[-1]


def validate_upload(
    filename: Optional[str],
    content_type: Optional[str],
    allowed_extensions: Iterable[str],
) -> None:
    if not (content_type or "").startswith("image/"):
        raise UploadValidationError("Only image files are allowed!")

    allowed = [e.lower() for e in allowed_extensions]
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in allowed:
        raise UploadValidationError(f"Only {_describe_extensions(allowed)} files are allowed!")


async def read_upload(file: UploadFile, max_bytes: int) -> bytes:
    """Read at most ``max_bytes`` from the upload; anything larger is rejected."""
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise UploadValidationError("File too large")
    return content
