from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from env_utils import parse_float_env


_CONFIG_FILE = Path(__file__).parent / "pipeline.yaml"


def load_pipeline_config() -> dict[str, Any]:
    """Load the pipeline defaults shared by the classifier, extractor and dispatcher."""
    if not _CONFIG_FILE.exists():
        raise FileNotFoundError(f"Missing pipeline config: {_CONFIG_FILE}")
    with _CONFIG_FILE.open("r", encoding="utf-8") as stream:
        return yaml.safe_load(stream) or {}


def load_default_detector_config() -> dict[str, Any]:
    """Return the settings used when a detection request arrives without a model."""
    section = load_pipeline_config().get("default_detector", {})
    if isinstance(section, dict):
        return dict(section)
    return {}


def extraction_timeout_default() -> float:
    """Per-wait video extraction bound; ``MEDIA_EXTRACTION_TIMEOUT_S`` overrides pipeline.yaml."""
    configured = load_pipeline_config().get("video", {}).get("extraction_timeout_s", 10.0)
    return parse_float_env("MEDIA_EXTRACTION_TIMEOUT_S", float(configured))
