"""Screw-linear interpolation (ScLERP) of rigid transforms."""

from __future__ import annotations

from dataclasses import replace

from dqskin.core.dual_quaternion import DualQuaternion, dq_compose, dq_negate
from dqskin.core.screw import screw_from_dual_quaternion


def sclerp(a: DualQuaternion, b: DualQuaternion, t: float) -> DualQuaternion:
    """Constant-velocity screw motion from ``a`` (t=0) to ``b`` (t=1).

    Rotation angle and translation along the screw axis both advance
    linearly in ``t``; the path takes the shorter way round.
    """
    a = a.normalized()
    b = b.normalized()
    rel = dq_compose(a.inverse(), b)
    if rel.real.w < 0.0:
        rel = dq_negate(rel)

    screw = screw_from_dual_quaternion(rel)
    step = replace(screw, theta=screw.theta * t, d=screw.d * t).to_dual_quaternion()
    return dq_compose(a, step).normalized()


class DualQuaternionInterpolator:
    """Smoothly moves a rigid transform toward a target.

    Uses exponential decay (sclerp per frame) for natural-feeling transitions.
    """

    SPEED = 6.0

    def __init__(self, current: DualQuaternion | None = None):
        self.current = current if current is not None else DualQuaternion.identity()

    def interpolate(self, target: DualQuaternion, dt: float) -> DualQuaternion:
        """Advance toward ``target`` by one frame of length ``dt``."""
        t = min(1.0, self.SPEED * dt)
        if t > 0.0:
            self.current = sclerp(self.current, target, t)
        return self.current
