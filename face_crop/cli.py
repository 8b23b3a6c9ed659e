"""
Face Crop CLI.

Responsibility:
    Parse command-line arguments, configure logging and the application,
    run the cropper over the input, and map the outcome to an exit status.

Usage:
    python main.py photo.jpg face.jpg
    python main.py photo.jpg face.jpg --debug --annotate
    python main.py scans/ faces/ --preset basic --report faces/report.json
    python main.py photo.jpg face.jpg --config my_config.yaml

Exit status:
    0  every image was cropped and saved
    1  configuration error, missing input, or any image failed
    2  invalid command line (printed by argparse)
"""

import argparse
import logging
import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import yaml

from face_crop.config import PRESETS, load_config
from face_crop.cropper import FaceCropper
from face_crop.image_io import collect_image_paths
from face_crop.model_loader import initialize
from face_crop.result import CropResult
from face_crop.selector import SELECTION_STRATEGIES
from face_crop.serializer import save_json

logger = logging.getLogger("face_crop")

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(debug: bool = False) -> None:
    """Configure root logging once for the process."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=_LOG_FORMAT, datefmt="%H:%M:%S")
    logging.getLogger().setLevel(level)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="face-crop",
        description="Detect the main face in an image and save a padded crop of it.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "input",
        help="Input image path, or a directory of images.",
    )
    parser.add_argument(
        "output",
        help="Output image path, or a directory when the input is a directory.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--preset",
        type=str,
        choices=sorted(PRESETS),
        help="Detection/crop parameter preset. Overrides config.",
    )
    parser.add_argument(
        "--scale-factor",
        type=float,
        help="Cascade pyramid scale factor (> 1.0). Overrides config.",
    )
    parser.add_argument(
        "--min-neighbors",
        type=int,
        help="Cascade minimum neighbor count. Overrides config.",
    )
    parser.add_argument(
        "--padding",
        type=float,
        help="Crop margin per side as a fraction of face width. Overrides config.",
    )
    parser.add_argument(
        "--selection",
        type=str,
        choices=SELECTION_STRATEGIES,
        help="Which detected face to crop. Overrides config.",
    )
    parser.add_argument(
        "--annotate",
        action="store_true",
        help="Also save '<name>_annotated' images showing all detections.",
    )
    parser.add_argument(
        "--report",
        type=str,
        help="Write a JSON report of all results to this path.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Verbose logging, including every detected candidate.",
    )

    return parser.parse_args(argv)


def _build_overrides(args: argparse.Namespace) -> dict:
    """Translate CLI arguments into config overrides. None means 'not given'."""
    return {
        "detection": {
            "scale_factor": args.scale_factor,
            "min_neighbors": args.min_neighbors,
        },
        "crop": {
            "padding_fraction": args.padding,
            "selection": args.selection,
        },
        "output": {
            "annotate": True if args.annotate else None,
            "report_path": args.report,
            "debug": True if args.debug else None,
        },
    }


def plan_jobs(input_path: Path, output_path: Path) -> List[Tuple[Path, Path]]:
    """Pair each input image with the path its crop is written to.

    Raises:
        FileNotFoundError: If the input does not exist.
        ValueError: If the input holds no usable images, or a directory
                    input is paired with an existing output file.
    """
    sources = collect_image_paths(input_path)

    if not input_path.is_dir():
        return [(sources[0], output_path)]

    if output_path.is_file():
        raise ValueError(
            f"Output must be a directory when the input is a directory: {output_path}"
        )
    return [(src, output_path / src.name) for src in sources]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the face crop tool. Returns the process exit status."""
    args = parse_args(argv)
    configure_logging(args.debug)

    # 1. Load Configuration (CLI args > ENV > YAML > Preset > Defaults)
    try:
        config = load_config(
            args.config,
            preset=args.preset,
            overrides=_build_overrides(args),
        )
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.error("Configuration error: %s", e)
        return 1

    if config.output.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    logger.info(
        "Preset '%s': scale_factor=%.2f, min_neighbors=%d, padding=%.2f, selection=%s",
        config.preset,
        config.detection.scale_factor,
        config.detection.min_neighbors,
        config.crop.padding_fraction,
        config.crop.selection,
    )

    # 2. Initialize runtime and resolve inputs
    initialize(config.model.num_threads)

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error("Error: Input file does not exist: %s", input_path)
        return 1

    try:
        jobs = plan_jobs(input_path, Path(args.output))
    except (FileNotFoundError, ValueError) as e:
        logger.error("Input error: %s", e)
        return 1

    # 3. Processing Loop
    cropper = FaceCropper(config)
    results: List[CropResult] = []
    start_time = time.perf_counter()

    try:
        for src, dst in jobs:
            logger.info("Processing %s", src)
            results.append(cropper.crop_file(src, dst))
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")

    elapsed = time.perf_counter() - start_time
    succeeded = sum(1 for r in results if r.ok)

    # 4. Report
    if config.output.report_path:
        try:
            save_json(results, config.output.report_path, config.preset)
        except OSError as e:
            logger.error("Failed to write report %s: %s", config.output.report_path, e)
            return 1

    logger.info(
        "Processing finished. %d/%d images cropped in %.2fs.",
        succeeded, len(jobs), elapsed,
    )

    if results and succeeded == len(jobs):
        logger.info("Face detection and cropping completed successfully!")
        return 0

    logger.error("Face detection and cropping failed!")
    return 1
