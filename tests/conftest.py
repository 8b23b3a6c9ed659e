"""
Shared fixtures for the face crop tests.
"""

import os

import numpy as np
import pytest

from face_crop.geometry import Rectangle


class FakeClassifier:
    """Stands in for cv2.CascadeClassifier; records detectMultiScale calls."""

    def __init__(self, rows=()):
        self.rows = np.array(rows, dtype=np.int32).reshape(-1, 4) if rows else ()
        self.calls = []

    def detectMultiScale(self, image, **kwargs):
        self.calls.append((image, kwargs))
        return self.rows


class FakeDetector:
    """Stands in for FaceDetector; returns a fixed list of rectangles."""

    def __init__(self, faces=None, error=None):
        self.faces = list(faces or [])
        self.error = error
        self.images = []

    def detect(self, image):
        self.images.append(image)
        if self.error is not None:
            raise self.error
        return list(self.faces)


@pytest.fixture
def bgr_image():
    """A 400x400 BGR image with a gradient so crops are distinguishable."""
    image = np.zeros((400, 400, 3), dtype=np.uint8)
    image[:, :, 0] = np.arange(400, dtype=np.uint16).reshape(1, -1) % 256
    image[:, :, 1] = np.arange(400, dtype=np.uint16).reshape(-1, 1) % 256
    return image


@pytest.fixture
def face():
    return Rectangle(x=10, y=10, width=100, height=100)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    """Keep FACE_CROP_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("FACE_CROP_"):
            monkeypatch.delenv(key, raising=False)
