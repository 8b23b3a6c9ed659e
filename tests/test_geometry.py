"""
Tests for the geometry value types.
"""

import numpy as np

from face_crop.geometry import ImageBounds, Rectangle


def test_rectangle_from_opencv_row():
    """Numpy int32 rows become plain Python ints."""
    row = np.array([3, 4, 50, 60], dtype=np.int32)
    rect = Rectangle.from_xywh(row)

    assert rect == Rectangle(3, 4, 50, 60)
    assert type(rect.x) is int
    assert rect.x2 == 53
    assert rect.y2 == 64
    assert rect.area == 3000


def test_rectangle_to_dict():
    assert Rectangle(1, 2, 3, 4).to_dict() == {"x": 1, "y": 2, "width": 3, "height": 4}


def test_bounds_from_image():
    image = np.zeros((120, 200, 3), dtype=np.uint8)
    assert ImageBounds.from_image(image) == ImageBounds(width=200, height=120)


def test_bounds_contains():
    bounds = ImageBounds(100, 50)

    assert bounds.contains(Rectangle(0, 0, 100, 50))
    assert bounds.contains(Rectangle(10, 10, 5, 5))
    assert not bounds.contains(Rectangle(-1, 0, 10, 10))
    assert not bounds.contains(Rectangle(95, 0, 10, 10))
    assert not bounds.contains(Rectangle(0, 45, 10, 10))
