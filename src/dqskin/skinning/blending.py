"""Dual quaternion linear blending (DLB) for a single point."""

from __future__ import annotations

from typing import Sequence

from dqskin.core.dual_quaternion import DualQuaternion, dq_add, dq_scale
from dqskin.core.math_utils import Vec3
from dqskin.core.quaternion import quat_dot


class InvalidArgumentError(ValueError):
    """Bone transforms and weights that cannot be blended."""


def check_influences(n_transforms: int, n_weights: int) -> None:
    if n_transforms == 0:
        raise InvalidArgumentError("At least one bone transform is required")
    if n_transforms != n_weights:
        raise InvalidArgumentError(
            f"Got {n_transforms} bone transforms but {n_weights} weights"
        )


def blend_weighted(
    transforms: Sequence[DualQuaternion],
    weights: Sequence[float],
) -> DualQuaternion:
    """Weighted blend of bone transforms for one point.

    The first transform's rotation sets the reference sign.  Every later
    transform whose rotation has a non-positive dot product with it is added
    with a negated weight, so antipodal representations of a rotation
    reinforce instead of cancelling.  Terms are accumulated strictly left to
    right.

    The result is NOT normalized; ``DualQuaternion.transform`` does that.
    """
    check_influences(len(transforms), len(weights))

    q0 = transforms[0].real
    blend = dq_scale(transforms[0], weights[0])
    for dq, w in zip(transforms[1:], weights[1:]):
        if quat_dot(dq.real, q0) <= 0.0:
            w = -w
        blend = dq_add(blend, dq_scale(dq, w))
    return blend


def transform_position(
    p,
    transforms: Sequence[DualQuaternion],
    weights: Sequence[float],
) -> Vec3:
    """Skinned position of point ``p``."""
    return blend_weighted(transforms, weights).transform(p)


def transform_normal(
    n,
    transforms: Sequence[DualQuaternion],
    weights: Sequence[float],
) -> Vec3:
    """Skinned normal (or tangent) ``n``; translation does not apply."""
    return blend_weighted(transforms, weights).rotate(n)
