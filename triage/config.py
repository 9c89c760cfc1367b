"""Settings loading: packaged YAML defaults, overrides, schema validation."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import ValidationError

from triage.models import TriageSettings
from triage.utils import deep_merge, get_logger, load_yaml, validate_settings

logger = get_logger(__name__)

DEFAULT_SETTINGS_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "settings.yaml")


def load_defaults() -> Dict[str, Any]:
    return load_yaml(DEFAULT_SETTINGS_PATH)


def build_settings(raw: Dict[str, Any]) -> TriageSettings:
    validate_settings(raw)
    try:
        return TriageSettings.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Settings validation error: {e}") from e


def load_settings(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> TriageSettings:
    """Merge a YAML file and/or an overrides mapping over the defaults."""
    raw = load_defaults()
    if path:
        raw = deep_merge(raw, load_yaml(path))
        logger.info("settings file merged path=%s", path)
    if overrides:
        raw = deep_merge(raw, overrides)
    return build_settings(raw)


@lru_cache(maxsize=1)
def default_settings() -> TriageSettings:
    return build_settings(load_defaults())
