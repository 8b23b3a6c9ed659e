"""
Visualization for the face crop pipeline.

Responsibility:
    Draw every detection candidate, the selected face, and the padded
    crop region onto a copy of the source image. Pure rendering; no I/O.

Non-goals:
    - No file writing or window management.
    - No detection or selection logic.
"""

from typing import Optional, Sequence

import cv2
import numpy as np

from face_crop.config import VisualizationConfig
from face_crop.geometry import Rectangle

# Hard-coded rendering constants (cosmetic internals, not user-facing)
_FONT = cv2.FONT_HERSHEY_SIMPLEX
_FONT_SCALE = 0.5
_FONT_THICKNESS = 1
_LABEL_PADDING = 4


def _draw_box(
    image: np.ndarray,
    rect: Rectangle,
    color,
    thickness: int,
    label: Optional[str] = None,
) -> None:
    cv2.rectangle(
        image,
        (rect.x, rect.y),
        (rect.x2, rect.y2),
        color=color,
        thickness=thickness,
    )

    if label is None:
        return

    (_, text_h), _ = cv2.getTextSize(label, _FONT, _FONT_SCALE, _FONT_THICKNESS)

    # Above the box, or inside it when too close to the top edge
    label_y = rect.y - _LABEL_PADDING
    if label_y - text_h < 0:
        label_y = rect.y + text_h + _LABEL_PADDING

    cv2.putText(
        image,
        label,
        (rect.x + _LABEL_PADDING // 2, label_y),
        _FONT,
        _FONT_SCALE,
        color,
        _FONT_THICKNESS,
        cv2.LINE_AA,
    )


def draw_candidates(
    image: np.ndarray,
    candidates: Sequence[Rectangle],
    config: VisualizationConfig,
    selected: Optional[Rectangle] = None,
    crop: Optional[Rectangle] = None,
) -> np.ndarray:
    """Draw detection candidates and the chosen crop onto an image.

    Args:
        image: Input BGR image (not modified — a copy is returned).
        candidates: Every rectangle returned by the detector.
        config: Visualization parameters (colors, thickness).
        selected: The face chosen for cropping, highlighted.
        crop: The padded crop region, outlined.

    Returns:
        A new BGR numpy array with the annotations drawn.
    """
    annotated = image.copy()

    for idx, rect in enumerate(candidates):
        if rect == selected:
            continue
        _draw_box(annotated, rect, config.candidate_color, config.thickness, f"#{idx}")

    if crop is not None:
        _draw_box(annotated, crop, config.crop_color, config.thickness)

    if selected is not None:
        _draw_box(annotated, selected, config.selected_color, config.thickness, "face")

    return annotated
