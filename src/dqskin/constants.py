"""Shared constants and paths for DQSkin."""

from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
ASSETS_DIR = PROJECT_ROOT / "assets"
CONFIG_DIR = ASSETS_DIR / "config"
SKINNING_CONFIG_NAME = "skinning.json"

# Divisor clamp for degenerate norms (all-zero real part, zero rotation axis)
EPSILON = 1e-6

# Screw axis used when neither rotation nor translation defines one
DEFAULT_SCREW_AXIS = (0.0, 0.0, 1.0)

# Skinning defaults
MAX_INFLUENCES = 4  # bone influences per vertex
