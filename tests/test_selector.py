"""
Tests for face selection and padded crop computation.
"""

import pytest

from face_crop.geometry import ImageBounds, Rectangle
from face_crop.selector import (
    compute_padded_crop,
    select_face,
    select_first,
    select_largest,
)


def test_select_largest_picks_max_area():
    """The larger of two candidates wins regardless of order."""
    small = Rectangle(0, 0, 50, 50)
    large = Rectangle(10, 10, 80, 80)

    assert select_largest([small, large]) == large
    assert select_largest([large, small]) == large


def test_select_largest_tie_goes_to_first():
    """Equal areas resolve to the earliest candidate."""
    a = Rectangle(0, 0, 40, 10)
    b = Rectangle(100, 100, 20, 20)
    c = Rectangle(5, 5, 10, 40)

    assert select_largest([a, b, c]) is a


def test_select_largest_empty():
    """No candidates means no selection."""
    assert select_largest([]) is None


def test_select_first():
    a = Rectangle(0, 0, 10, 10)
    b = Rectangle(0, 0, 90, 90)

    assert select_first([a, b]) is a
    assert select_first([]) is None


def test_select_face_strategies():
    a = Rectangle(0, 0, 10, 10)
    b = Rectangle(0, 0, 90, 90)

    assert select_face([a, b], "largest") is b
    assert select_face([a, b], "first") is a

    with pytest.raises(ValueError, match="selection strategy"):
        select_face([a, b], "smallest")


def test_padded_crop_example():
    """20% padding near the top-left corner clamps the origin to zero."""
    crop = compute_padded_crop(
        Rectangle(10, 10, 100, 100),
        ImageBounds(400, 400),
        0.2,
    )
    assert crop == Rectangle(0, 0, 140, 140)


def test_padded_crop_interior():
    """Padding expands symmetrically when there is room."""
    crop = compute_padded_crop(
        Rectangle(100, 100, 50, 60),
        ImageBounds(400, 400),
        0.2,
    )
    # padding = floor(50 * 0.2) = 10
    assert crop == Rectangle(90, 90, 70, 80)


def test_padded_crop_clamps_far_edges():
    """Padding never pushes the crop past the right or bottom edge."""
    bounds = ImageBounds(200, 150)
    crop = compute_padded_crop(Rectangle(150, 100, 50, 50), bounds, 0.5)

    assert crop.x == 125
    assert crop.y == 75
    assert crop.x2 == 200
    assert crop.y2 == 150
    assert bounds.contains(crop)


def test_padded_crop_padding_is_floored():
    """Fractional padding rounds down."""
    crop = compute_padded_crop(
        Rectangle(50, 50, 33, 33),
        ImageBounds(400, 400),
        0.1,
    )
    # padding = floor(3.3) = 3
    assert crop == Rectangle(47, 47, 39, 39)


def test_padded_crop_zero_fraction_is_identity():
    """No padding returns the face unchanged when it already fits."""
    face = Rectangle(30, 40, 120, 90)
    assert compute_padded_crop(face, ImageBounds(400, 300), 0.0) == face


def test_padded_crop_zero_size_face():
    """A degenerate face gets no padding."""
    face = Rectangle(20, 20, 0, 10)
    assert compute_padded_crop(face, ImageBounds(100, 100), 0.5) == face


def test_padded_crop_face_larger_than_image():
    """Crop is clamped even when the face already overflows the bounds."""
    bounds = ImageBounds(100, 80)
    crop = compute_padded_crop(Rectangle(0, 0, 120, 120), bounds, 0.2)

    assert crop == Rectangle(0, 0, 100, 80)
    assert bounds.contains(crop)


@pytest.mark.parametrize("fraction", [0.0, 0.1, 0.2, 0.5, 1.0, 3.0])
@pytest.mark.parametrize(
    "face",
    [
        Rectangle(0, 0, 10, 10),
        Rectangle(5, 190, 60, 10),
        Rectangle(250, 0, 50, 199),
        Rectangle(120, 80, 40, 40),
    ],
)
def test_padded_crop_always_within_bounds(face, fraction):
    bounds = ImageBounds(300, 200)
    assert bounds.contains(compute_padded_crop(face, bounds, fraction))


def test_padded_crop_negative_fraction():
    with pytest.raises(ValueError, match="padding_fraction"):
        compute_padded_crop(Rectangle(0, 0, 10, 10), ImageBounds(100, 100), -0.1)


def test_padded_crop_negative_dimensions():
    with pytest.raises(ValueError, match="non-negative"):
        compute_padded_crop(Rectangle(10, 10, -5, 20), ImageBounds(100, 100), 0.2)
