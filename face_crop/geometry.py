"""
Geometry value types for the face crop pipeline.

This module defines Rectangle and ImageBounds — the plain data carried
between the detector, the selector, and the cropper. Both are frozen
and behavior-free apart from simple derived properties.

Non-goals:
    - No selection or padding logic (that belongs in selector).
    - No drawing or file I/O.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True, slots=True)
class Rectangle:
    """An axis-aligned rectangle in absolute pixel coordinates.

    Attributes:
        x: Left edge (origin top-left).
        y: Top edge.
        width: Width in pixels.
        height: Height in pixels.

    Used both for detected face boxes and for crop regions.
    """

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_xywh(cls, values: Sequence) -> "Rectangle":
        """Build a Rectangle from an (x, y, w, h) row as returned by OpenCV.

        Numpy integer scalars are converted to plain ints so the result
        is JSON-serializable.
        """
        x, y, w, h = (int(v) for v in values)
        return cls(x=x, y=y, width=w, height=h)

    @property
    def x2(self) -> int:
        """Exclusive right edge."""
        return self.x + self.width

    @property
    def y2(self) -> int:
        """Exclusive bottom edge."""
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True, slots=True)
class ImageBounds:
    """Dimensions of a source image.

    Valid pixel coordinates are [0, width) x [0, height).
    """

    width: int
    height: int

    @classmethod
    def from_image(cls, image: np.ndarray) -> "ImageBounds":
        """Read bounds from a numpy image of shape (H, W) or (H, W, C)."""
        h, w = image.shape[:2]
        return cls(width=int(w), height=int(h))

    def contains(self, rect: Rectangle) -> bool:
        """True if the rectangle lies entirely inside these bounds."""
        return (
            rect.x >= 0
            and rect.y >= 0
            and rect.width >= 0
            and rect.height >= 0
            and rect.x2 <= self.width
            and rect.y2 <= self.height
        )
