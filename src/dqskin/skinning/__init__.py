"""Skinning subsystem -- dual quaternion linear blending, per point and per mesh."""

from dqskin.skinning.blending import (
    InvalidArgumentError,
    blend_weighted,
    transform_normal,
    transform_position,
)
from dqskin.skinning.dq_skinning import DualQuaternionSkinning, SkinBinding

__all__ = [
    "DualQuaternionSkinning",
    "InvalidArgumentError",
    "SkinBinding",
    "blend_weighted",
    "transform_normal",
    "transform_position",
]
