"""
Image input and output for the face crop tool.

Responsibility:
    Resolve an input source (single image or directory of images) into
    a list of files, decode images from disk, and encode crops back.

Non-goals:
    - No detection, cropping, or drawing.
    - No video or webcam sources.

Robustness:
    - Sources are validated up front.
    - Decode and encode failures are logged and reported through return
      values; they never raise.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Image extensions recognized by this module
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp"}


def collect_image_paths(source: PathLike) -> List[Path]:
    """Expand an input source into the image files it names.

    A file is returned as-is, whatever its extension; decoding decides
    whether it is an image. A directory yields every file with a
    recognized image extension, sorted by name.

    Raises:
        FileNotFoundError: If the source does not exist.
        ValueError: If a directory contains no images.
    """
    path = Path(source)

    if path.is_file():
        return [path]

    if path.is_dir():
        paths = sorted(
            p for p in path.iterdir()
            if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
        )
        if not paths:
            raise ValueError(
                f"No image files found in directory: '{path}'. "
                f"Supported extensions: {sorted(IMAGE_EXTENSIONS)}."
            )
        logger.info("Found %d images in directory: %s", len(paths), path)
        return paths

    raise FileNotFoundError(f"Input file does not exist: {path}")


def read_image(path: PathLike) -> Optional[np.ndarray]:
    """Decode an image from disk as BGR.

    Returns:
        The image, or None if the file is missing or cannot be decoded.
    """
    image = cv2.imread(str(path))
    if image is None:
        logger.error("Could not load image from %s", path)
        return None

    h, w = image.shape[:2]
    logger.info("Image dimensions: %d x %d", w, h)
    return image


def write_image(path: PathLike, image: np.ndarray) -> bool:
    """Encode an image to disk, creating parent directories as needed.

    The format is chosen by OpenCV from the file extension.

    Returns:
        True if the file was written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        written = cv2.imwrite(str(path), image)
    except (OSError, cv2.error) as e:
        logger.error("Failed to write image %s: %s", path, e)
        return False

    if not written:
        logger.error("Failed to write image %s", path)
        return False

    logger.debug("Wrote image %s", path)
    return True


def annotated_path(output_path: PathLike) -> Path:
    """Path of the annotated debug image that accompanies an output."""
    path = Path(output_path)
    return path.with_name(f"{path.stem}_annotated{path.suffix}")
