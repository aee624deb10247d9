"""
Pytest configuration and fixtures for the screening API tests
"""
import sys
from io import BytesIO
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Flat layout: make the top-level packages importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent))


class FakeModel:
    """Stand-in classifier returning a fixed sigmoid score."""

    def __init__(self, score=0.9):
        self.score = score
        self.batch_shapes = []

    def __call__(self, batch, training=False):
        self.batch_shapes.append(batch.shape)
        return np.array([[self.score]], dtype=np.float32)


class BrokenModel:
    def __call__(self, batch, training=False):
        raise RuntimeError("backend failure")


def _encode(img, fmt, **kwargs):
    buf = BytesIO()
    img.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


@pytest.fixture
def png_rgba_bytes():
    """40x30 RGBA PNG with a half-transparent orange fill"""
    return _encode(Image.new("RGBA", (40, 30), (200, 100, 50, 128)), "PNG")


@pytest.fixture
def png_rgb_bytes():
    return _encode(Image.new("RGB", (16, 16), (0, 128, 255)), "PNG")


@pytest.fixture
def jpeg_rgb_bytes():
    """64x48 RGB JPEG"""
    return _encode(Image.new("RGB", (64, 48), (10, 200, 30)), "JPEG", quality=95)


@pytest.fixture
def jpeg_grey_bytes():
    return _encode(Image.new("L", (20, 10), 90), "JPEG")


@pytest.fixture
def make_handle():
    """Factory for a ModelHandle wrapping a FakeModel with the given score"""
    from model.inference import ModelHandle

    def _make(score=0.9, model=None):
        return ModelHandle(model=model or FakeModel(score), source_url="memory://fake.h5")

    return _make


@pytest.fixture
def test_settings(tmp_path):
    from config.settings import Settings

    return Settings(model_url=None, model_cache_dir=tmp_path / "models")
