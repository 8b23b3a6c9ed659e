"""
Serialization for the face crop tool.

Responsibility:
    Export a run's crop results to a JSON report for downstream
    consumption or offline analysis.

Non-goals:
    - No rendering or detection logic.
    - No streaming output; the report is written once at the end of a run.
"""

import json
import logging
from pathlib import Path
from typing import Sequence

from face_crop.result import CropResult

logger = logging.getLogger(__name__)


def build_report(results: Sequence[CropResult], preset: str) -> dict:
    """Assemble the report payload.

    Output schema:
        {
            "preset": "id_document",
            "results": [
                {"input_path": ..., "output_path": ..., "status": ...,
                 "message": ..., "candidates": [...], "face": {...},
                 "crop": {...}}
            ],
            "total_images": N,
            "succeeded": M,
            "failed": N - M
        }
    """
    succeeded = sum(1 for r in results if r.ok)
    return {
        "preset": preset,
        "results": [r.to_dict() for r in results],
        "total_images": len(results),
        "succeeded": succeeded,
        "failed": len(results) - succeeded,
    }


def save_json(
    results: Sequence[CropResult],
    output_path: str,
    preset: str,
) -> None:
    """Write the JSON report for a run.

    Args:
        results: Crop results in processing order.
        output_path: Path to the output JSON file.
        preset: Name of the configuration preset used.

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    payload = build_report(results, preset)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info(
        "JSON report saved: %s (%d images, %d succeeded)",
        output_path, payload["total_images"], payload["succeeded"],
    )


def _ensure_parent_dir(path: str) -> None:
    """Create parent directories if they don't exist."""
    parent = Path(path).parent
    parent.mkdir(parents=True, exist_ok=True)
