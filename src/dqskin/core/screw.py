"""Screw coordinates of a rigid transform.

A rigid transform is a rotation by ``theta`` about a line (Plücker
direction ``line`` + moment ``moment``) combined with a translation ``d``
along that same line.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from dqskin.constants import DEFAULT_SCREW_AXIS, EPSILON
from dqskin.core.dual_quaternion import DualQuaternion
from dqskin.core.math_utils import Vec3, vec3
from dqskin.core.quaternion import Quaternion, quat_vector_part

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ScrewCoordinates:
    """Angle, pitch and Plücker line of a screw motion.

    The vector fields are numpy arrays, so instances compare and hash by
    identity; compare fields with ``np.allclose`` instead.
    """
    theta: float  # rotation angle (radians)
    d: float  # translation along the axis
    line: Vec3  # unit axis direction
    moment: Vec3  # Plücker moment of the axis about the origin
    point: Vec3 = field(default_factory=vec3)  # always the origin

    @property
    def angle_deg(self) -> float:
        return math.degrees(self.theta)

    def to_dual_quaternion(self) -> DualQuaternion:
        """Normalized dual quaternion of this screw motion."""
        cos_half = math.cos(self.theta / 2.0)
        sin_half = math.sin(self.theta / 2.0)
        half_d = self.d / 2.0

        v_r = self.line * sin_half
        v_d = sin_half * self.moment + half_d * cos_half * self.line
        return DualQuaternion(
            Quaternion(float(v_r[0]), float(v_r[1]), float(v_r[2]), cos_half),
            Quaternion(float(v_d[0]), float(v_d[1]), float(v_d[2]), -half_d * sin_half),
        )


def screw_from_dual_quaternion(dq: DualQuaternion, eps: float = EPSILON) -> ScrewCoordinates:
    """Screw coordinates of a normalized dual quaternion.

    With no rotation (vector part of ``real`` shorter than ``eps``) the axis
    is undefined.  The transform is then described as a zero-angle screw
    along its own translation direction, or along ``DEFAULT_SCREW_AXIS``
    when the translation vanishes too; the moment is zero.

    Just above ``eps`` the axis may lie far from the origin, so ``moment``
    is large.  ``theta`` is taken from ``atan2`` to keep such small
    rotations accurate through the round trip.
    """
    real, dual = dq.real, dq.dual
    v_r = quat_vector_part(real)
    v_d = quat_vector_part(dual)
    v_r_len = float(np.linalg.norm(v_r))
    # 2*acos(w) for unit input
    theta = 2.0 * math.atan2(v_r_len, real.w)

    if v_r_len < eps:
        t = dq.translation_vector(eps)
        t_len = float(np.linalg.norm(t))
        if t_len < eps:
            line = np.array(DEFAULT_SCREW_AXIS, dtype=np.float64)
        else:
            line = t / t_len
        logger.debug("Screw axis undefined (|v_r|=%.3g), using %s", v_r_len, line)
        return ScrewCoordinates(theta=theta, d=t_len, line=line, moment=vec3())

    line = v_r / v_r_len
    d = -2.0 * dual.w / v_r_len
    moment = (v_d - line * d * real.w / 2.0) / v_r_len
    return ScrewCoordinates(theta=theta, d=d, line=line, moment=moment)
