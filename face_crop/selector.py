"""
Face selection and crop-region computation.

Responsibility:
    Pick one face out of the detector's candidates and expand it into
    a padded crop rectangle that never leaves the source image.

Non-goals:
    - No detection, image decoding, or pixel access.

Hard-coded:
    - Padding is derived from the face width only and applied equally
      on all four sides.
"""

import math
from typing import Optional, Sequence

from face_crop.geometry import ImageBounds, Rectangle

SELECTION_STRATEGIES = ("largest", "first")


def select_largest(faces: Sequence[Rectangle]) -> Optional[Rectangle]:
    """Return the face with the largest area, or None if there are none.

    Ties go to the earliest rectangle in the sequence.
    """
    best: Optional[Rectangle] = None
    for face in faces:
        if best is None or face.area > best.area:
            best = face
    return best


def select_first(faces: Sequence[Rectangle]) -> Optional[Rectangle]:
    """Return the first detected face, or None if there are none."""
    for face in faces:
        return face
    return None


def select_face(faces: Sequence[Rectangle], strategy: str = "largest") -> Optional[Rectangle]:
    """Select a face using the named strategy ('largest' or 'first').

    Raises:
        ValueError: If the strategy is unknown.
    """
    if strategy == "largest":
        return select_largest(faces)
    if strategy == "first":
        return select_first(faces)
    raise ValueError(
        f"Unknown selection strategy: '{strategy}'. "
        f"Must be one of {SELECTION_STRATEGIES}."
    )


def compute_padded_crop(
    face: Rectangle,
    bounds: ImageBounds,
    padding_fraction: float,
) -> Rectangle:
    """Expand a face rectangle by a margin and clamp it to the image.

    A face with zero width or height gets no padding and is only clamped.

    Args:
        face: The selected face rectangle.
        bounds: Dimensions of the source image.
        padding_fraction: Fraction of the face width added on each side
                          (e.g. 0.2 for a 20% margin).

    Returns:
        A Rectangle fully contained in bounds.

    Raises:
        ValueError: If padding_fraction is negative, or the face has a
                    negative width or height.
    """
    if padding_fraction < 0:
        raise ValueError(
            f"padding_fraction must be non-negative, got {padding_fraction}."
        )

    if face.width < 0 or face.height < 0:
        raise ValueError(
            f"Face dimensions must be non-negative, got {face.width}x{face.height}."
        )

    if face.width == 0 or face.height == 0:
        padding = 0
    else:
        padding = math.floor(face.width * padding_fraction)

    new_x = max(0, face.x - padding)
    new_y = max(0, face.y - padding)
    new_width = max(0, min(bounds.width - new_x, face.width + 2 * padding))
    new_height = max(0, min(bounds.height - new_y, face.height + 2 * padding))

    return Rectangle(x=new_x, y=new_y, width=new_width, height=new_height)
