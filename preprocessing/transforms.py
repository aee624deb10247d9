"""
transforms.py

Tensor preprocessing between the decoder and the classifier:

  1) drop the alpha channel (RGBA -> RGB)
  2) bilinear resize to a fixed square resolution
  3) add the batch dimension and rescale to [0, 1]

The resize is TensorFlow's classic ``resize_bilinear`` (align_corners=False,
no half-pixel centres): output pixel ``i`` samples source coordinate
``i * in / out`` and the neighbour index is clamped to the last row/column.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
import tensorflow as tf


DEFAULT_IMAGE_SIZE = 224


def drop_alpha(pixels: np.ndarray) -> np.ndarray:
    """Keep the first three channels of an RGBA array. Other arrays pass through."""
    if pixels.shape[-1] == 4:
        return pixels[:, :, :3]
    return pixels


def resize_bilinear(pixels: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """
    Args:
        pixels: array of shape (H, W, C), any numeric dtype
        size: (out_height, out_width)

    Returns:
        float32 array of shape (out_height, out_width, C)
    """
    if pixels.ndim != 3:
        raise ValueError(f"Expected (H, W, C) array, got shape {pixels.shape}")

    images = tf.convert_to_tensor(pixels[None], dtype=tf.float32)
    resized = tf.compat.v1.image.resize_bilinear(
        images,
        size,
        align_corners=False,
        half_pixel_centers=False,
    )
    return resized[0].numpy().astype(np.float32)


def preprocess(pixels: np.ndarray, image_size: int = DEFAULT_IMAGE_SIZE) -> np.ndarray:
    """
    Prepare a decoded image for the classifier.

    Args:
        pixels: (H, W, 3) or (H, W, 4) array of 8-bit samples

    Returns:
        float32 array of shape (1, image_size, image_size, 3) with values in [0, 1]
    """
    if pixels.ndim != 3:
        raise ValueError(f"Expected (H, W, C) array, got shape {pixels.shape}")

    rgb = drop_alpha(pixels)
    if rgb.shape[-1] != 3:
        raise ValueError(f"Expected 3 channels after dropping alpha, got {rgb.shape[-1]}")

    resized = resize_bilinear(rgb, (image_size, image_size))
    batch = np.expand_dims(resized, axis=0)
    return batch.astype(np.float32) / 255.0
