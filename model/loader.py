"""
loader.py

Fetch the pretrained classifier from a remote URL and open it.

The artifact is a single-file Keras model (``.keras`` or ``.h5``). It is
downloaded into a local cache directory, keyed by URL, and loaded without
compiling. Any failure here is fatal for the service: the caller is expected
to let ``ModelLoadError`` abort startup.
"""

from __future__ import annotations

import hashlib
import logging
import time
from pathlib import Path
from typing import Any, Optional, Union
from urllib.parse import urlparse

from model.errors import ModelLoadError
from model.inference import ModelHandle

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".keras", ".h5")


def artifact_filename(url: str) -> str:
    """
    Cache file name for a model URL: a short URL digest plus the URL's
    base name, so two URLs ending in ``model.h5`` do not collide.
    """
    name = Path(urlparse(url).path).name
    suffix = Path(name).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ModelLoadError(
            f"Unsupported model artifact '{name or url}'. "
            f"Expected one of: {', '.join(SUPPORTED_SUFFIXES)}"
        )
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:12]
    return f"{digest}-{Path(name).stem}{suffix}"


def _open_keras_model(url: str, fname: str, cache_dir: Path) -> Any:
    from tensorflow import keras

    path = keras.utils.get_file(
        fname=fname,
        origin=url,
        cache_dir=str(cache_dir),
        cache_subdir="models",
    )
    return keras.models.load_model(path, compile=False)


def load_model(url: Optional[str], cache_dir: Union[str, Path]) -> ModelHandle:
    """
    Download and open the model at ``url``.

    Raises:
        ModelLoadError: no URL configured, unsupported artifact type, or the
        fetch/parse failed.
    """
    if not url:
        raise ModelLoadError("No model URL configured. Set CANCER_API_MODEL_URL.")

    fname = artifact_filename(url)
    logger.info("Loading model from: %s", url)
    started = time.perf_counter()

    try:
        model = _open_keras_model(url, fname, Path(cache_dir))
    except Exception as e:
        logger.error("Error loading model from %s: %s", url, e)
        raise ModelLoadError(f"Could not load model from {url}: {e}") from e

    logger.info("Model loaded successfully in %.2fs", time.perf_counter() - started)
    return ModelHandle(model=model, source_url=url)
