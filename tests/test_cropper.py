"""
Tests for the cropper pipeline.
"""

import cv2
import numpy as np

from face_crop import cropper as cropper_module
from face_crop.config import load_config
from face_crop.cropper import FaceCropper
from face_crop.geometry import Rectangle
from face_crop.result import CropStatus

from conftest import FakeDetector


def _write_png(path, image):
    assert cv2.imwrite(str(path), image)
    return path


def test_crop_image_largest_with_padding(bgr_image, face):
    """The largest face is padded by 20% and clamped to the image."""
    detector = FakeDetector([Rectangle(300, 300, 20, 20), face])
    result = FaceCropper(load_config(None), detector=detector).crop_image(bgr_image)

    assert result.ok
    assert result.face == face
    assert result.crop == Rectangle(0, 0, 140, 140)
    assert result.image.shape == (140, 140, 3)
    assert np.array_equal(result.image, bgr_image[0:140, 0:140])
    assert len(result.candidates) == 2


def test_crop_image_first_selection(bgr_image, face):
    """The basic preset crops the first face without padding."""
    first = Rectangle(300, 300, 20, 20)
    detector = FakeDetector([first, face])
    result = FaceCropper(load_config(None, preset="basic"), detector=detector).crop_image(bgr_image)

    assert result.ok
    assert result.face == first
    assert result.crop == first


def test_crop_image_no_face(bgr_image):
    result = FaceCropper(load_config(None), detector=FakeDetector([])).crop_image(bgr_image)

    assert result.status is CropStatus.NO_FACE
    assert not result.ok
    assert result.face is None
    assert "No faces detected" in result.message


def test_crop_image_unexpected_error(bgr_image):
    """Exceptions raised during detection become DETECTION_ERROR results."""
    detector = FakeDetector(error=RuntimeError("boom"))
    result = FaceCropper(load_config(None), detector=detector).crop_image(bgr_image)

    assert result.status is CropStatus.DETECTION_ERROR
    assert "boom" in result.message


def test_crop_image_classifier_failure(bgr_image):
    """A missing cascade is reported, not raised."""
    config = load_config(None, overrides={"model": {"cascade_path": "no_such_cascade.xml"}})
    result = FaceCropper(config).crop_image(bgr_image)

    assert result.status is CropStatus.CLASSIFIER_FAILED


def test_detector_built_once(monkeypatch, bgr_image, face):
    """The detector is created lazily and reused across images."""
    built = []

    def factory(config):
        built.append(config)
        return FakeDetector([face])

    monkeypatch.setattr(cropper_module, "FaceDetector", factory)
    cropper = FaceCropper(load_config(None))

    assert cropper.crop_image(bgr_image).ok
    assert cropper.crop_image(bgr_image).ok
    assert len(built) == 1


def test_crop_file_writes_output(tmp_path, bgr_image, face):
    src = _write_png(tmp_path / "in.png", bgr_image)
    dst = tmp_path / "out" / "face.png"

    result = FaceCropper(load_config(None), detector=FakeDetector([face])).crop_file(src, dst)

    assert result.ok
    assert result.input_path == str(src)
    assert result.output_path == str(dst)
    written = cv2.imread(str(dst))
    assert written.shape == (140, 140, 3)
    assert not (tmp_path / "out" / "face_annotated.png").exists()


def test_crop_file_annotated(tmp_path, bgr_image, face):
    src = _write_png(tmp_path / "in.png", bgr_image)
    dst = tmp_path / "face.png"
    config = load_config(None, overrides={"output": {"annotate": True}})

    result = FaceCropper(config, detector=FakeDetector([face])).crop_file(src, dst)

    assert result.ok
    annotated = cv2.imread(str(tmp_path / "face_annotated.png"))
    assert annotated.shape == bgr_image.shape


def test_crop_file_load_failure(tmp_path):
    result = FaceCropper(load_config(None), detector=FakeDetector()).crop_file(
        tmp_path / "missing.png", tmp_path / "out.png"
    )

    assert result.status is CropStatus.LOAD_FAILED
    assert not (tmp_path / "out.png").exists()


def test_crop_file_corrupt_input(tmp_path):
    src = tmp_path / "corrupt.jpg"
    src.write_bytes(b"not an image")

    result = FaceCropper(load_config(None), detector=FakeDetector()).crop_file(
        src, tmp_path / "out.png"
    )
    assert result.status is CropStatus.LOAD_FAILED


def test_crop_file_save_failure(tmp_path, bgr_image, face):
    """An output extension OpenCV cannot encode yields SAVE_FAILED."""
    src = _write_png(tmp_path / "in.png", bgr_image)

    result = FaceCropper(load_config(None), detector=FakeDetector([face])).crop_file(
        src, tmp_path / "face.unknownext"
    )

    assert result.status is CropStatus.SAVE_FAILED
    assert result.output_path is None
    assert result.crop == Rectangle(0, 0, 140, 140)


def test_crop_file_no_face_not_written(tmp_path, bgr_image):
    src = _write_png(tmp_path / "in.png", bgr_image)
    dst = tmp_path / "face.png"

    result = FaceCropper(load_config(None), detector=FakeDetector([])).crop_file(src, dst)

    assert result.status is CropStatus.NO_FACE
    assert not dst.exists()
