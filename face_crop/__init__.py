"""
Face Crop — detect the main face in an image and save a padded crop.

Public API:
    - FaceCropper: Detect, select, pad, crop and save in one call.
    - FaceDetector: Cascade-based face detection on a BGR image.
    - CropResult, CropStatus: Outcome of a crop attempt.
    - Rectangle, ImageBounds: Geometry value types.
    - select_largest, compute_padded_crop: Face selection and crop math.
    - initialize: One-time OpenCV runtime setup.

Usage:
    from face_crop import FaceCropper, initialize

    initialize()
    result = FaceCropper().crop_file("photo.jpg", "face.jpg")
"""

from face_crop.cropper import FaceCropper
from face_crop.detector import FaceDetector
from face_crop.geometry import ImageBounds, Rectangle
from face_crop.model_loader import initialize
from face_crop.result import CropResult, CropStatus
from face_crop.selector import compute_padded_crop, select_largest

__all__ = [
    "FaceCropper",
    "FaceDetector",
    "CropResult",
    "CropStatus",
    "Rectangle",
    "ImageBounds",
    "compute_padded_crop",
    "select_largest",
    "initialize",
]
