"""
OpenCV runtime setup and cascade classifier loading.

Responsibility:
    Perform the one-time OpenCV runtime initialization, resolve the
    Haar cascade file, and return a ready-to-use cv2.CascadeClassifier.

Non-goals:
    - No preprocessing, detection, or frame-level logic.
    - No automatic model downloading.

Failure behavior:
    - A cascade that cannot be found raises FileNotFoundError listing
      every location that was searched.
    - A cascade file that OpenCV cannot parse raises RuntimeError.
"""

import logging
from pathlib import Path
from typing import List, Optional

import cv2

from face_crop.config import ModelConfig, get_project_root

logger = logging.getLogger(__name__)

_initialized = False


def initialize(num_threads: Optional[int] = None) -> None:
    """Prepare the OpenCV runtime. Safe to call more than once.

    Only the first call has any effect; later calls return immediately.

    Args:
        num_threads: Thread count for OpenCV's parallel regions. None keeps
                     the library default.
    """
    global _initialized
    if _initialized:
        return

    if num_threads is not None:
        cv2.setNumThreads(num_threads)

    logger.info(
        "OpenCV %s initialized (threads=%d).",
        cv2.__version__,
        cv2.getNumThreads(),
    )
    _initialized = True


def _bundled_cascade_dir() -> Optional[Path]:
    """Directory of cascades shipped with the opencv-python wheel, if any."""
    data = getattr(cv2, "data", None)
    haarcascades = getattr(data, "haarcascades", None)
    if not haarcascades:
        return None
    return Path(haarcascades)


def resolve_cascade_path(cascade_path: str) -> Path:
    """Locate the cascade XML file.

    Absolute paths are used as given. Relative paths are tried against
    the current directory, the project root, and OpenCV's bundled
    cascade directory, in that order.

    Raises:
        FileNotFoundError: If no candidate location holds the file.
    """
    path = Path(cascade_path)
    candidates: List[Path] = []

    if path.is_absolute():
        candidates.append(path)
    else:
        candidates.append(Path.cwd() / path)
        candidates.append(get_project_root() / path)
        bundled = _bundled_cascade_dir()
        if bundled is not None:
            candidates.append(bundled / path.name)

    for candidate in candidates:
        if candidate.is_file():
            return candidate

    searched = "\n".join(f"    {c}" for c in candidates)
    raise FileNotFoundError(
        f"Cascade classifier not found: '{cascade_path}'.\n"
        f"  Searched:\n{searched}\n"
        f"  Provide the file or update 'model.cascade_path' in your config."
    )


def load_cascade(config: ModelConfig) -> cv2.CascadeClassifier:
    """Load the Haar cascade face classifier.

    Args:
        config: ModelConfig containing the cascade path.

    Returns:
        A non-empty cv2.CascadeClassifier.

    Raises:
        FileNotFoundError: If the cascade file does not exist.
        RuntimeError: If OpenCV fails to load the cascade.
    """
    path = resolve_cascade_path(config.cascade_path)

    logger.info("Loading cascade classifier: %s", path)
    classifier = cv2.CascadeClassifier()
    try:
        loaded = classifier.load(str(path))
    except cv2.error as e:
        raise RuntimeError(
            f"Could not load face cascade classifier from {path}.\n"
            f"  OpenCV error: {e}"
        ) from e

    if not loaded or classifier.empty():
        raise RuntimeError(
            f"Could not load face cascade classifier from {path}. "
            f"Ensure the file is a valid OpenCV cascade XML."
        )

    logger.info("Cascade classifier loaded successfully.")
    return classifier
