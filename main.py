"""
Face Crop CLI Entrypoint.

Usage:
    python main.py <input_image_path> <output_image_path> [--debug]

This module is the executable entry point. It should not be imported
by other modules; use face_crop.cli or face_crop.FaceCropper instead.
"""

import sys

from face_crop.cli import main


if __name__ == "__main__":
    sys.exit(main())
