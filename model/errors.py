"""
errors.py

Failure kinds raised by the model layer.

ModelLoadError is fatal at startup. ImageProcessingError covers anything that
goes wrong between receiving an image buffer and reading the probability back.
"""

from __future__ import annotations


class ModelLoadError(RuntimeError):
    """The remote model artifact could not be fetched or opened."""


class ImageProcessingError(RuntimeError):
    """Decoding, preprocessing or inference failed for one image."""

    default_message = "Error processing image for prediction."

    def __init__(self, message: str = default_message) -> None:
        super().__init__(message)
