"""
FaceCropper — detect, select, pad, crop, and save one face per image.

This is the programmatic entry point for cropping. It wires the detector,
selector, image I/O and visualizer together and reports every outcome
as a CropResult. Expected failures (unreadable input, missing classifier,
no face, unwritable output) never raise.

Usage:
    cropper = FaceCropper(config)
    result = cropper.crop_file("id.jpg", "face.jpg")
    if not result.ok:
        ...
"""

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np

from face_crop.config import AppConfig, load_config
from face_crop.detector import FaceDetector
from face_crop.geometry import ImageBounds
from face_crop.image_io import annotated_path, read_image, write_image
from face_crop.result import CropResult, CropStatus
from face_crop.selector import compute_padded_crop, select_face
from face_crop.visualizer import draw_candidates

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_NO_FACE_HINT = (
    "Try adjusting detection parameters or check if image contains a clear frontal face"
)


class FaceCropper:
    """Crops the selected face out of images.

    The detector (and its classifier) is created on first use and reused
    for every later image. Pass a detector explicitly to share one or to
    substitute a fake in tests.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        detector: Optional[FaceDetector] = None,
    ) -> None:
        if config is None:
            config = load_config()

        self._config = config
        self._detector = detector

    @property
    def config(self) -> AppConfig:
        """Return the active configuration (read-only)."""
        return self._config

    def _get_detector(self) -> FaceDetector:
        if self._detector is None:
            self._detector = FaceDetector(self._config)
        return self._detector

    def crop_image(self, image: np.ndarray) -> CropResult:
        """Run detection, selection and cropping on an in-memory image.

        Returns:
            A CropResult. On success, result.image holds the cropped pixels
            (a view into the source image).
        """
        try:
            detector = self._get_detector()
        except (FileNotFoundError, RuntimeError) as e:
            logger.error("Error: Could not load face cascade classifier: %s", e)
            return CropResult(status=CropStatus.CLASSIFIER_FAILED, message=str(e))

        try:
            candidates = detector.detect(image)

            logger.info("Number of faces detected: %d", len(candidates))
            if self._config.output.debug:
                for idx, rect in enumerate(candidates):
                    logger.info(
                        "Face %d: x=%d, y=%d, width=%d, height=%d",
                        idx, rect.x, rect.y, rect.width, rect.height,
                    )

            face = select_face(candidates, self._config.crop.selection)
            if face is None:
                logger.warning("No faces detected in the image. %s", _NO_FACE_HINT)
                return CropResult(
                    status=CropStatus.NO_FACE,
                    message=f"No faces detected in the image. {_NO_FACE_HINT}",
                    candidates=candidates,
                )

            logger.info(
                "Face detected at: x=%d, y=%d, width=%d, height=%d",
                face.x, face.y, face.width, face.height,
            )

            crop = compute_padded_crop(
                face,
                ImageBounds.from_image(image),
                self._config.crop.padding_fraction,
            )
            logger.debug("Crop region: %s", crop)

            pixels = image[crop.y:crop.y2, crop.x:crop.x2]

        except Exception as e:
            logger.exception("Error during face detection: %s", e)
            return CropResult(status=CropStatus.DETECTION_ERROR, message=str(e))

        return CropResult(
            status=CropStatus.SUCCESS,
            message="Face cropped.",
            candidates=candidates,
            face=face,
            crop=crop,
            image=pixels,
        )

    def crop_file(self, input_path: PathLike, output_path: PathLike) -> CropResult:
        """Crop the face from an image file and write it to output_path.

        When output.annotate is enabled, an annotated copy of the source is
        also written next to the output, whether or not a face was found.
        """
        input_str = str(input_path)
        output_str = str(output_path)

        image = read_image(input_path)
        if image is None:
            return CropResult(
                status=CropStatus.LOAD_FAILED,
                message=f"Could not load image from {input_str}",
                input_path=input_str,
            )

        result = self.crop_image(image)
        result.input_path = input_str

        if self._config.output.annotate and result.status in (
            CropStatus.SUCCESS, CropStatus.NO_FACE,
        ):
            self._write_annotation(image, result, output_path)

        if not result.ok:
            return result

        if not write_image(output_path, result.image):
            result.status = CropStatus.SAVE_FAILED
            result.message = f"Failed to save cropped face to {output_str}"
            logger.error("Error: Failed to save cropped face")
            return result

        result.output_path = output_str
        result.message = f"Face successfully saved to: {output_str}"
        logger.info(result.message)
        return result

    def _write_annotation(
        self,
        image: np.ndarray,
        result: CropResult,
        output_path: PathLike,
    ) -> None:
        annotated = draw_candidates(
            image,
            result.candidates,
            self._config.visualization,
            selected=result.face,
            crop=result.crop,
        )
        target = annotated_path(output_path)
        if write_image(target, annotated):
            logger.info("Annotated image saved to: %s", target)
