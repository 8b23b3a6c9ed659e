"""
Preprocessing for the face crop pipeline.

Responsibility:
    Convert a raw BGR image into the single-channel image the cascade
    classifier consumes, optionally with histogram equalization to
    lift contrast on flat, evenly lit photos such as ID documents.

Non-goals:
    - No image acquisition or I/O.
    - No detection or coordinate mapping.
"""

import numpy as np
import cv2


def preprocess(image: np.ndarray, equalize: bool = True) -> np.ndarray:
    """Convert a BGR image to grayscale for cascade detection.

    Args:
        image: Input image as a BGR numpy array (H, W, 3). A 2-D array
               is treated as already grayscale.
        equalize: Apply cv2.equalizeHist to the grayscale result.

    Returns:
        A uint8 numpy array of shape (H, W).

    Raises:
        ValueError: If the image is None or empty.
    """
    if image is None or image.size == 0:
        raise ValueError(
            "Cannot preprocess an empty image. "
            "Ensure the input file decoded correctly."
        )

    if image.ndim == 2:
        gray = image
    else:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

    if equalize:
        gray = cv2.equalizeHist(gray)

    return gray
