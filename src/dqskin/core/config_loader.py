"""JSON config file loading utilities."""

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

from dqskin.constants import CONFIG_DIR, EPSILON, MAX_INFLUENCES, SKINNING_CONFIG_NAME

logger = logging.getLogger(__name__)


@dataclass
class SkinningSettings:
    """Numeric settings shared by the skinning path."""
    epsilon: float = EPSILON  # clamp for degenerate norms
    max_influences: int = MAX_INFLUENCES  # bone influences per vertex

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "SkinningSettings":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            logger.warning("Ignoring unknown skinning settings: %s", ", ".join(unknown))
        settings = cls(**{k: v for k, v in d.items() if k in known})
        if settings.epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {settings.epsilon}")
        if settings.max_influences < 1:
            raise ValueError(f"max_influences must be >= 1, got {settings.max_influences}")
        return settings


def load_json(path: Path) -> Any:
    """Load and return parsed JSON from a file."""
    with open(path) as f:
        return json.load(f)


def load_config(name: str) -> Any:
    """Load a config file from assets/config/."""
    return load_json(CONFIG_DIR / name)


def load_skinning_settings(path: Optional[Path] = None) -> SkinningSettings:
    """Load skinning settings, falling back to defaults if the file is missing."""
    try:
        data = load_json(Path(path)) if path is not None else load_config(SKINNING_CONFIG_NAME)
    except FileNotFoundError:
        logger.warning("Skinning config not found, using defaults: %s",
                       path or CONFIG_DIR / SKINNING_CONFIG_NAME)
        return SkinningSettings()
    settings = SkinningSettings.from_dict(data)
    logger.debug("Loaded skinning settings: %s", settings)
    return settings
