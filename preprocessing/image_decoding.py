"""
image_decoding.py

Turn an uploaded image buffer into a dense (H, W, C) uint8 pixel array.

Only two encodings are accepted. The first four bytes decide which decoder
runs: the PNG signature selects the PNG decoder and everything else is handed
to the JPEG decoder, which rejects buffers that are not JPEG. This is a cheap
dispatch, not a validation step.
"""

from __future__ import annotations

from io import BytesIO

import numpy as np
from PIL import Image

from model.errors import ImageProcessingError


PNG_SIGNATURE = bytes([137, 80, 78, 71])


def is_png(buffer: bytes) -> bool:
    return buffer[:4] == PNG_SIGNATURE


# ----------------------------
# Decoders
# ----------------------------

def decode_png(buffer: bytes) -> np.ndarray:
    """
    Decode a PNG buffer to RGBA. Returns shape (H, W, 4).

    16-bit greyscale PNGs open in one of Pillow's "I" modes, where a direct
    RGBA conversion clips at 255. Those samples are scaled down to 8 bits first.
    """
    with Image.open(BytesIO(buffer), formats=["PNG"]) as img:
        if img.mode.startswith("I"):
            wide = np.asarray(img).astype(np.uint32)
            img = Image.fromarray((wide >> 8).astype(np.uint8))
        rgba = img.convert("RGBA")
    return np.asarray(rgba, dtype=np.uint8)


def decode_jpeg(buffer: bytes) -> np.ndarray:
    """
    Decode a JPEG buffer to interleaved samples and infer the channel count
    from the sample total. Greyscale and CMYK sources are converted to RGB.
    """
    with Image.open(BytesIO(buffer), formats=["JPEG"]) as img:
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGB")
        width, height = img.size
        samples = np.frombuffer(img.tobytes(), dtype=np.uint8)
    return interleaved_to_tensor(samples, width, height)


def interleaved_to_tensor(samples: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Reshape a flat sample buffer to (H, W, C) with C = samples / (W * H).

    Sample counts that do not divide evenly, or that imply anything other
    than 3 or 4 channels, are rejected rather than guessed at.
    """
    pixels = width * height
    if pixels <= 0:
        raise ValueError(f"Image has no pixels ({width}x{height})")
    if samples.size % pixels != 0:
        raise ValueError(
            f"Sample count {samples.size} is not a multiple of {width}x{height} pixels"
        )

    channels = samples.size // pixels
    if channels not in (3, 4):
        raise ValueError(f"Unsupported channel count: {channels}")
    return samples.reshape(height, width, channels)


def decode_image(buffer: bytes) -> np.ndarray:
    """
    Decode a PNG or JPEG buffer.

    Raises:
        ImageProcessingError: if the buffer cannot be decoded. The decoder
        error is kept as ``__cause__``.
    """
    try:
        if is_png(buffer):
            return decode_png(buffer)
        return decode_jpeg(buffer)
    except Exception as e:
        raise ImageProcessingError() from e
