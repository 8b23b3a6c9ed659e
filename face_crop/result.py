"""
Result types returned by the face crop pipeline.

Every per-image outcome, including the failures, is reported as a
CropResult. Callers branch on CropResult.status instead of catching
exceptions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

from face_crop.geometry import Rectangle


class CropStatus(str, Enum):
    """Outcome of cropping a single image."""

    SUCCESS = "success"
    LOAD_FAILED = "load_failed"
    CLASSIFIER_FAILED = "classifier_failed"
    NO_FACE = "no_face"
    SAVE_FAILED = "save_failed"
    DETECTION_ERROR = "detection_error"


@dataclass
class CropResult:
    """Outcome of one crop attempt.

    Attributes:
        status: What happened.
        message: Human-readable summary, suitable for logs.
        input_path: Source image path, if the image came from disk.
        output_path: Written crop path, set only on success.
        candidates: Every rectangle the detector returned.
        face: The selected face, if any.
        crop: The padded, clamped crop region, if any.
        image: The cropped pixels. Not serialized.
    """

    status: CropStatus
    message: str = ""
    input_path: Optional[str] = None
    output_path: Optional[str] = None
    candidates: List[Rectangle] = field(default_factory=list)
    face: Optional[Rectangle] = None
    crop: Optional[Rectangle] = None
    image: Optional[np.ndarray] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.status is CropStatus.SUCCESS

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        return {
            "input_path": self.input_path,
            "output_path": self.output_path,
            "status": self.status.value,
            "message": self.message,
            "candidates": [c.to_dict() for c in self.candidates],
            "face": self.face.to_dict() if self.face is not None else None,
            "crop": self.crop.to_dict() if self.crop is not None else None,
        }
