"""Configuration defaults and YAML loading for mask building."""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "mask": {
        # Largest sample difference merged into one run by from_volume
        "value_tolerance": 0.0,
        "progress": False,
    },
    "threshold": {
        "lower_hu": -500.0,
        "upper_hu": None,
    },
    "hull": {
        "tolerance": 1e-9,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load configuration, overlaying a YAML file on the defaults.

    Args:
        path: Optional YAML file; missing sections fall back to DEFAULTS

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If ``path`` is given but does not exist
        ValueError: If the file does not contain a mapping
    """
    if path is None:
        return copy.deepcopy(DEFAULTS)

    with open(path) as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(loaded).__name__}")

    logger.info("Loaded config from %s", path)
    return _deep_merge(DEFAULTS, loaded)
