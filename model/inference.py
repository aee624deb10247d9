"""
inference.py

Binary cancer / non-cancer classification of a single uploaded image.

Pipeline for one image buffer:

1) decode (PNG or JPEG, picked by magic bytes)
2) preprocess to a (1, 224, 224, 3) float tensor in [0, 1]
3) one forward pass through the loaded model
4) threshold the sigmoid output

The model handle is created once at startup and passed in explicitly; nothing
in this module keeps model state of its own.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Tuple

import numpy as np

from model.errors import ImageProcessingError
from preprocessing.image_decoding import decode_image
from preprocessing.transforms import DEFAULT_IMAGE_SIZE, preprocess

logger = logging.getLogger(__name__)


# ----------------------------
# Types / Contracts
# ----------------------------

LABEL_CANCER = "Cancer"
LABEL_NON_CANCER = "Non-cancer"

SUGGESTIONS = {
    LABEL_CANCER: "Segera periksa ke dokter!",
    LABEL_NON_CANCER: "Penyakit kanker tidak terdeteksi.",
}

DEFAULT_THRESHOLD = 0.5


@dataclass(frozen=True)
class ModelHandle:
    """
    A loaded classifier. ``model`` is any callable taking
    ``(batch, training=False)`` and returning a single sigmoid score per input.
    """

    model: Any
    source_url: str

    def predict_proba(self, batch: np.ndarray) -> float:
        output = self.model(batch, training=False)
        values = np.asarray(output, dtype=np.float32).reshape(-1)
        if values.size == 0:
            raise ValueError("Model returned an empty output")
        return float(values[0])


@dataclass(frozen=True)
class Prediction:
    label: str
    suggestion: str
    probability: float


# ----------------------------
# Classification
# ----------------------------

def classify(probability: float, threshold: float = DEFAULT_THRESHOLD) -> Tuple[str, str]:
    """
    Map a probability to (label, suggestion). Strictly greater than the
    threshold is "Cancer"; a score equal to the threshold is "Non-cancer".
    """
    label = LABEL_CANCER if probability > threshold else LABEL_NON_CANCER
    return label, SUGGESTIONS[label]


def infer(handle: ModelHandle, batch: np.ndarray) -> float:
    """Run one forward pass and read the first output value as the probability."""
    try:
        return handle.predict_proba(batch)
    except Exception as e:
        raise ImageProcessingError() from e


def prepare_image(buffer: bytes, image_size: int = DEFAULT_IMAGE_SIZE) -> np.ndarray:
    pixels = decode_image(buffer)
    try:
        return preprocess(pixels, image_size=image_size)
    except Exception as e:
        raise ImageProcessingError() from e


def predict_image(
    buffer: bytes,
    handle: ModelHandle,
    image_size: int = DEFAULT_IMAGE_SIZE,
    threshold: float = DEFAULT_THRESHOLD,
) -> Prediction:
    """
    Decode, preprocess, infer and classify one image buffer.

    Raises:
        ImageProcessingError: on any decode, preprocessing or inference failure
    """
    batch = prepare_image(buffer, image_size=image_size)
    probability = infer(handle, batch)
    label, suggestion = classify(probability, threshold=threshold)
    logger.debug("Probability %.4f -> %s", probability, label)
    return Prediction(label=label, suggestion=suggestion, probability=probability)


def main() -> None:
    from config.settings import get_settings
    from model.loader import load_model

    settings = get_settings()

    parser = argparse.ArgumentParser(description="Classify a single local image with the screening model.")
    parser.add_argument("--image", required=True, help="Path to a PNG/JPG image.")
    parser.add_argument("--model_url", default=settings.model_url, help="URL of a .keras/.h5 model.")
    parser.add_argument("--threshold", type=float, default=settings.threshold)
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    if not os.path.exists(args.image):
        raise FileNotFoundError(f"Image not found: {args.image}")

    with open(args.image, "rb") as f:
        buffer = f.read()

    handle = load_model(args.model_url, settings.model_cache_dir)
    pred = predict_image(
        buffer,
        handle,
        image_size=settings.image_size,
        threshold=args.threshold,
    )

    print(
        json.dumps(
            {
                "image": os.path.basename(args.image),
                "result": pred.label,
                "suggestion": pred.suggestion,
                "probability": round(pred.probability, 4),
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    main()
