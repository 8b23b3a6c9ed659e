"""
FaceDetector — Haar cascade face detection on a single image.

Public contract:
    FaceDetector.detect(image: np.ndarray) -> list[Rectangle]

Constraints:
    - Input must be a BGR numpy array (as returned by cv2.imread).
    - The method is stateless per call and deterministic.
    - Thread-safety is not guaranteed (single-threaded design).

Non-goals:
    - No file reading or writing.
    - No face selection or cropping (see selector).
"""

import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np

from face_crop.config import AppConfig, DetectionConfig, load_config
from face_crop.geometry import Rectangle
from face_crop.model_loader import load_cascade
from face_crop.preprocessor import preprocess

logger = logging.getLogger(__name__)

Size = Tuple[int, int]


def resolve_size(
    absolute: Optional[Size],
    ratio: Optional[float],
    image_width: int,
    image_height: int,
) -> Size:
    """Turn a configured size bound into pixels for one image.

    A ratio wins over an absolute size. (0, 0) means unbounded, which is
    how detectMultiScale reads an empty size.
    """
    if ratio is not None:
        return int(image_width * ratio), int(image_height * ratio)
    if absolute is not None:
        return int(absolute[0]), int(absolute[1])
    return 0, 0


class FaceDetector:
    """Frontal face detector backed by an OpenCV cascade classifier.

    Usage:
        detector = FaceDetector()                   # Uses safe defaults
        detector = FaceDetector(config=my_config)   # Custom config
        faces = detector.detect(image)              # BGR numpy array

    The classifier is loaded once in the constructor and reused by
    every detect() call.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        classifier: Optional[cv2.CascadeClassifier] = None,
    ) -> None:
        """Initialize the detector and load the classifier.

        Args:
            config: Application configuration. If None, defaults are used.
            classifier: Pre-loaded classifier. Skips loading from disk.

        Raises:
            FileNotFoundError: If the cascade file is missing.
            RuntimeError: If OpenCV cannot load the cascade.
        """
        if config is None:
            config = load_config()

        self._config = config
        self._classifier = classifier if classifier is not None else load_cascade(config.model)

        logger.info(
            "FaceDetector initialized (scale_factor=%.2f, min_neighbors=%d, equalize=%s)",
            config.detection.scale_factor,
            config.detection.min_neighbors,
            config.detection.equalize_histogram,
        )

    def detect(self, image: np.ndarray) -> List[Rectangle]:
        """Detect faces in a single BGR image.

        Args:
            image: A BGR image with shape (H, W, 3) and dtype uint8.

        Returns:
            Detected faces in classifier order. Empty if none were found.

        Raises:
            TypeError: If image is not a numpy ndarray.
            ValueError: If image has incorrect shape or is empty.
        """
        self._validate_image(image)

        det: DetectionConfig = self._config.detection
        gray = preprocess(image, equalize=det.equalize_histogram)

        h, w = gray.shape[:2]
        min_size = resolve_size(det.min_size, det.min_size_ratio, w, h)
        max_size = resolve_size(det.max_size, det.max_size_ratio, w, h)

        logger.debug(
            "Running detectMultiScale on %dx%d (min_size=%s, max_size=%s)",
            w, h, min_size, max_size,
        )

        raw = self._classifier.detectMultiScale(
            gray,
            scaleFactor=det.scale_factor,
            minNeighbors=det.min_neighbors,
            flags=0,
            minSize=min_size,
            maxSize=max_size,
        )

        return [Rectangle.from_xywh(row) for row in raw]

    @property
    def config(self) -> AppConfig:
        """Return the active configuration (read-only)."""
        return self._config

    @staticmethod
    def _validate_image(image: np.ndarray) -> None:
        """Validate that the input image meets the API contract.

        Raises:
            TypeError: If image is not a numpy ndarray.
            ValueError: If image is empty or has wrong dimensions.
        """
        if not isinstance(image, np.ndarray):
            raise TypeError(
                f"Expected image to be a numpy ndarray, "
                f"got {type(image).__name__}. "
                f"Use cv2.imread() to obtain images."
            )

        if image.size == 0:
            raise ValueError("Image is empty (zero size).")

        if image.ndim != 3:
            raise ValueError(
                f"Expected a 3-dimensional image (H, W, C), "
                f"got {image.ndim} dimensions with shape {image.shape}."
            )

        if image.shape[2] != 3:
            raise ValueError(
                f"Expected 3 channels (BGR), got {image.shape[2]} channels. "
                f"Input must be a BGR image as returned by OpenCV."
            )
