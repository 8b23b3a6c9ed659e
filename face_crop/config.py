"""
Configuration management for the face crop tool.

Provides a layered configuration system with the following precedence
(highest to lowest):

    CLI arguments > Environment variables > YAML config file > Preset > Defaults

Presets bundle the detection and crop parameters for a use case:

    id_document  Strict detection tuned for ID photos (default).
    basic        Permissive detection, first face, no padding.

Design constraints:
    - The tool MUST run with zero configuration (safe defaults only).
    - Missing or invalid values fail early and loudly.
    - No detection logic, I/O, or model loading belongs here.

Non-goals:
    - No dynamic reloading.
    - No database-backed or remote configuration.
"""

import copy
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

import yaml

from face_crop.selector import SELECTION_STRATEGIES

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Project root resolution
# ---------------------------------------------------------------------------
# Resolved relative to this file's location: face_crop/config.py → repo root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def get_project_root() -> Path:
    """Return the resolved project root directory."""
    return _PROJECT_ROOT


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ModelConfig:
    """Cascade classifier and OpenCV runtime configuration.

    Attributes:
        cascade_path: Haar cascade XML file. Relative paths are looked up
                      under the project root, then in OpenCV's bundled
                      cascade directory.
        num_threads: Thread count handed to cv2.setNumThreads at start-up.
                     None leaves OpenCV's default in place.
    """

    cascade_path: str = "haarcascade_frontalface_alt.xml"
    num_threads: Optional[int] = None


@dataclass(frozen=True)
class DetectionConfig:
    """Parameters forwarded to CascadeClassifier.detectMultiScale.

    Attributes:
        scale_factor: Image pyramid step. Smaller is more thorough and slower.
        min_neighbors: Neighbor count a candidate needs to be kept.
                       Higher is stricter.
        min_size: Absolute minimum face size (width, height), or None.
        max_size: Absolute maximum face size (width, height), or None.
        min_size_ratio: Minimum face size as a fraction of the image
                        dimensions. Takes precedence over min_size, except that a
                        min_size set above the preset clears the
                        preset's ratio.
        max_size_ratio: Maximum face size as a fraction of the image
                        dimensions. Takes precedence over max_size, with the same
                        exception.
        equalize_histogram: Equalize the grayscale image before detection.
    """

    scale_factor: float = 1.05
    min_neighbors: int = 5
    min_size: Optional[Tuple[int, int]] = None
    max_size: Optional[Tuple[int, int]] = None
    min_size_ratio: Optional[float] = 0.2
    max_size_ratio: Optional[float] = 0.8
    equalize_histogram: bool = True


@dataclass(frozen=True)
class CropConfig:
    """Face selection and crop geometry.

    Attributes:
        padding_fraction: Margin added on each side, as a fraction of the
                          face width.
        selection: Which candidate to crop — 'largest' or 'first'.
    """

    padding_fraction: float = 0.2
    selection: str = "largest"


@dataclass(frozen=True)
class OutputConfig:
    """Output behavior configuration.

    Attributes:
        annotate: Also write '<stem>_annotated<suffix>' next to each
                  output, showing every candidate and the crop region.
        report_path: Optional JSON report path. None disables the report.
        debug: Log every candidate rectangle.
    """

    annotate: bool = False
    report_path: Optional[str] = None
    debug: bool = False


@dataclass(frozen=True)
class VisualizationConfig:
    """Rendering parameters for annotated debug images.

    Attributes:
        candidate_color: BGR color for rejected candidates.
        selected_color: BGR color for the selected face.
        crop_color: BGR color for the padded crop region.
        thickness: Line thickness in pixels.
    """

    candidate_color: Tuple[int, int, int] = (0, 0, 255)
    selected_color: Tuple[int, int, int] = (0, 255, 0)
    crop_color: Tuple[int, int, int] = (255, 0, 0)
    thickness: int = 2


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration.

    Aggregates all sub-configurations into a single, frozen object.
    """

    preset: str = "id_document"
    model: ModelConfig = field(default_factory=ModelConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    crop: CropConfig = field(default_factory=CropConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

DEFAULT_PRESET = "id_document"

PRESETS = {
    "id_document": {
        "detection": {
            "scale_factor": 1.05,
            "min_neighbors": 5,
            "min_size": None,
            "max_size": None,
            "min_size_ratio": 0.2,
            "max_size_ratio": 0.8,
            "equalize_histogram": True,
        },
        "crop": {
            "padding_fraction": 0.2,
            "selection": "largest",
        },
    },
    "basic": {
        "detection": {
            "scale_factor": 1.1,
            "min_neighbors": 3,
            "min_size": [30, 30],
            "max_size": None,
            "min_size_ratio": None,
            "max_size_ratio": None,
            "equalize_histogram": False,
        },
        "crop": {
            "padding_fraction": 0.0,
            "selection": "first",
        },
    },
}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _validate(config: AppConfig) -> None:
    """Validate configuration values. Raises ValueError on invalid state."""

    if config.preset not in PRESETS:
        raise ValueError(
            f"Invalid preset: '{config.preset}'. "
            f"Must be one of {sorted(PRESETS)}."
        )

    if not config.model.cascade_path:
        raise ValueError("model.cascade_path must not be empty.")

    if config.model.num_threads is not None and config.model.num_threads < 0:
        raise ValueError(
            f"model.num_threads must be non-negative or None, "
            f"got {config.model.num_threads}."
        )

    det = config.detection

    # detectMultiScale rejects scale factors <= 1
    if det.scale_factor <= 1.0:
        raise ValueError(
            f"detection.scale_factor must be greater than 1.0, "
            f"got {det.scale_factor}."
        )

    if det.min_neighbors < 0:
        raise ValueError(
            f"detection.min_neighbors must be non-negative, "
            f"got {det.min_neighbors}."
        )

    for name in ("min_size", "max_size"):
        size = getattr(det, name)
        if size is None:
            continue
        if not isinstance(size, tuple) or len(size) != 2 or any(d <= 0 for d in size):
            raise ValueError(
                f"detection.{name} must be a positive (width, height) pair "
                f"or None, got {size}."
            )

    for name in ("min_size_ratio", "max_size_ratio"):
        ratio = getattr(det, name)
        if ratio is not None and not (0.0 < ratio <= 1.0):
            raise ValueError(
                f"detection.{name} must be in (0.0, 1.0] or None, got {ratio}."
            )

    if (
        det.min_size_ratio is not None
        and det.max_size_ratio is not None
        and det.min_size_ratio > det.max_size_ratio
    ):
        raise ValueError(
            f"detection.min_size_ratio ({det.min_size_ratio}) must not exceed "
            f"detection.max_size_ratio ({det.max_size_ratio})."
        )

    if config.crop.padding_fraction < 0:
        raise ValueError(
            f"crop.padding_fraction must be non-negative, "
            f"got {config.crop.padding_fraction}."
        )

    if config.crop.selection not in SELECTION_STRATEGIES:
        raise ValueError(
            f"Invalid crop.selection: '{config.crop.selection}'. "
            f"Must be one of {SELECTION_STRATEGIES}."
        )

    if config.visualization.thickness <= 0:
        raise ValueError(
            f"visualization.thickness must be positive, "
            f"got {config.visualization.thickness}."
        )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

def _parse_tuple(value, expected_len: int, cast_type=float):
    """Convert a list from YAML into a tuple of the expected type and length."""
    if isinstance(value, (list, tuple)):
        if len(value) != expected_len:
            raise ValueError(
                f"Expected {expected_len} values, got {len(value)}: {value}"
            )
        return tuple(cast_type(v) for v in value)
    if isinstance(value, str) and "," in value:
        return _parse_tuple([v.strip() for v in value.split(",")], expected_len, cast_type)
    return value


def _parse_bool(value) -> bool:
    """Interpret YAML booleans and environment strings alike."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _optional(value, cast):
    """Apply cast unless the value is None (or the string 'none')."""
    if value is None or (isinstance(value, str) and value.strip().lower() in ("", "none", "null")):
        return None
    return cast(value)


def _build_model_config(raw: dict) -> ModelConfig:
    """Build ModelConfig from a raw YAML dict."""
    kwargs = {}
    if "cascade_path" in raw:
        kwargs["cascade_path"] = str(raw["cascade_path"])
    if "num_threads" in raw:
        kwargs["num_threads"] = _optional(raw["num_threads"], int)
    return ModelConfig(**kwargs)


def _build_detection_config(raw: dict) -> DetectionConfig:
    """Build DetectionConfig from a raw YAML dict."""
    kwargs = {}
    if "scale_factor" in raw:
        kwargs["scale_factor"] = float(raw["scale_factor"])
    if "min_neighbors" in raw:
        kwargs["min_neighbors"] = int(raw["min_neighbors"])
    for name in ("min_size", "max_size"):
        if name in raw:
            kwargs[name] = _optional(raw[name], lambda v: _parse_tuple(v, 2, int))
    for name in ("min_size_ratio", "max_size_ratio"):
        if name in raw:
            kwargs[name] = _optional(raw[name], float)
    if "equalize_histogram" in raw:
        kwargs["equalize_histogram"] = _parse_bool(raw["equalize_histogram"])
    return DetectionConfig(**kwargs)


def _build_crop_config(raw: dict) -> CropConfig:
    """Build CropConfig from a raw YAML dict."""
    kwargs = {}
    if "padding_fraction" in raw:
        kwargs["padding_fraction"] = float(raw["padding_fraction"])
    if "selection" in raw:
        kwargs["selection"] = str(raw["selection"]).lower()
    return CropConfig(**kwargs)


def _build_output_config(raw: dict) -> OutputConfig:
    """Build OutputConfig from a raw YAML dict."""
    kwargs = {}
    if "annotate" in raw:
        kwargs["annotate"] = _parse_bool(raw["annotate"])
    if "report_path" in raw:
        kwargs["report_path"] = _optional(raw["report_path"], str)
    if "debug" in raw:
        kwargs["debug"] = _parse_bool(raw["debug"])
    return OutputConfig(**kwargs)


def _build_visualization_config(raw: dict) -> VisualizationConfig:
    """Build VisualizationConfig from a raw YAML dict."""
    kwargs = {}
    for name in ("candidate_color", "selected_color", "crop_color"):
        if name in raw:
            kwargs[name] = _parse_tuple(raw[name], 3, int)
    if "thickness" in raw:
        kwargs["thickness"] = int(raw["thickness"])
    return VisualizationConfig(**kwargs)


def _merge(base: dict, override: dict) -> dict:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _is_set(value) -> bool:
    return _optional(value, lambda v: v) is not None


def _resolve_size_bounds(user: dict, merged: dict) -> None:
    """Let an absolute size set above the preset replace the preset's ratio.

    A ratio outranks an absolute size at detection time, so a user-supplied
    min_size would otherwise lose to the preset's min_size_ratio.

    Raises:
        ValueError: If the same bound is given both as a size and a ratio.
    """
    for bound in ("min", "max"):
        size_key = f"{bound}_size"
        ratio_key = f"{bound}_size_ratio"
        if not _is_set(user.get(size_key)):
            continue
        if _is_set(user.get(ratio_key)):
            raise ValueError(
                f"detection.{size_key} and detection.{ratio_key} are both set. "
                f"Configure one or the other."
            )
        merged[ratio_key] = None


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "FACE_CROP_"


def _apply_env_overrides(raw: dict) -> dict:
    """Apply environment variable overrides to the raw config dict.

    Environment variables follow the pattern:
        FACE_CROP_PRESET=basic
        FACE_CROP_DETECTION_SCALE_FACTOR=1.1
        FACE_CROP_CROP_PADDING_FRACTION=0.3
    """
    preset = os.environ.get(f"{_ENV_PREFIX}PRESET")
    if preset is not None:
        raw["preset"] = preset
        logger.debug("Config override from env: %sPRESET=%s", _ENV_PREFIX, preset)

    env_map = {
        f"{_ENV_PREFIX}MODEL_CASCADE_PATH": ("model", "cascade_path"),
        f"{_ENV_PREFIX}MODEL_NUM_THREADS": ("model", "num_threads"),
        f"{_ENV_PREFIX}DETECTION_SCALE_FACTOR": ("detection", "scale_factor"),
        f"{_ENV_PREFIX}DETECTION_MIN_NEIGHBORS": ("detection", "min_neighbors"),
        f"{_ENV_PREFIX}DETECTION_MIN_SIZE": ("detection", "min_size"),
        f"{_ENV_PREFIX}DETECTION_MAX_SIZE": ("detection", "max_size"),
        f"{_ENV_PREFIX}DETECTION_MIN_SIZE_RATIO": ("detection", "min_size_ratio"),
        f"{_ENV_PREFIX}DETECTION_MAX_SIZE_RATIO": ("detection", "max_size_ratio"),
        f"{_ENV_PREFIX}DETECTION_EQUALIZE_HISTOGRAM": ("detection", "equalize_histogram"),
        f"{_ENV_PREFIX}CROP_PADDING_FRACTION": ("crop", "padding_fraction"),
        f"{_ENV_PREFIX}CROP_SELECTION": ("crop", "selection"),
        f"{_ENV_PREFIX}OUTPUT_ANNOTATE": ("output", "annotate"),
        f"{_ENV_PREFIX}OUTPUT_REPORT_PATH": ("output", "report_path"),
        f"{_ENV_PREFIX}OUTPUT_DEBUG": ("output", "debug"),
    }

    for env_var, (section, key) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            raw.setdefault(section, {})[key] = value
            logger.debug("Config override from env: %s=%s", env_var, value)

    return raw


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def load_config(
    config_path: Optional[str] = None,
    preset: Optional[str] = None,
    overrides: Optional[dict] = None,
) -> AppConfig:
    """Load and validate application configuration.

    Precedence (highest → lowest):
        overrides > Environment variables > YAML file > Preset > Defaults

    Args:
        config_path: Path to a YAML configuration file. If None,
                     the tool runs entirely on defaults.
        preset: Preset name. Overrides any 'preset' key from YAML or env.
        overrides: Nested {section: {key: value}} dict, typically built
                   from CLI arguments. None values are ignored.

    Returns:
        A validated, frozen AppConfig instance.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If any configuration value is invalid.
        yaml.YAMLError: If the YAML file is malformed.
    """
    raw: dict = {}

    # --- Layer 1: YAML file ---
    if config_path is not None:
        resolved = Path(config_path)
        if not resolved.is_absolute() and not resolved.is_file():
            resolved = _PROJECT_ROOT / resolved

        if not resolved.is_file():
            raise FileNotFoundError(
                f"Configuration file not found: {resolved}. "
                f"Provide a valid path or omit to use defaults."
            )

        logger.info("Loading config from: %s", resolved)
        with open(resolved, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        if not isinstance(raw, dict):
            raise ValueError(
                f"Configuration file must contain a mapping, got {type(raw).__name__}."
            )

    # --- Layer 2: Environment variable overrides ---
    raw = _apply_env_overrides(raw)

    # --- Layer 3: Explicit overrides ---
    if overrides:
        for section, values in overrides.items():
            if not isinstance(values, dict):
                continue
            for key, value in values.items():
                if value is not None:
                    raw.setdefault(section, {})[key] = value

    # --- Resolve preset underneath everything else ---
    preset_name = str(preset or raw.get("preset") or DEFAULT_PRESET).lower()
    if preset_name not in PRESETS:
        raise ValueError(
            f"Invalid preset: '{preset_name}'. Must be one of {sorted(PRESETS)}."
        )
    user_detection = raw.get("detection", {})
    raw = _merge(PRESETS[preset_name], raw)
    _resolve_size_bounds(user_detection, raw.setdefault("detection", {}))

    # --- Build typed configs ---
    config = AppConfig(
        preset=preset_name,
        model=_build_model_config(raw.get("model", {})),
        detection=_build_detection_config(raw.get("detection", {})),
        crop=_build_crop_config(raw.get("crop", {})),
        output=_build_output_config(raw.get("output", {})),
        visualization=_build_visualization_config(raw.get("visualization", {})),
    )

    # --- Validate ---
    _validate(config)

    logger.debug("Configuration loaded: %s", config)
    return config
