"""Quaternion value type and its algebra.

Quaternions here are immutable: every function returns a new value.
Nothing assumes unit norm unless the docstring says so.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from dqskin.constants import EPSILON
from dqskin.core.math_utils import (
    Mat3,
    Mat4,
    QuatArray,
    Vec3,
    as_vec3,
    batch_mat3_to_quat,
    mat4_from_quaternion,
)


@dataclass(frozen=True)
class Quaternion:
    """A quaternion with vector part (x, y, z) and scalar part w."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0


def quat_identity() -> Quaternion:
    return Quaternion(0.0, 0.0, 0.0, 1.0)


def quat_from_array(a) -> Quaternion:
    """Build a Quaternion from an [x, y, z, w] sequence."""
    x, y, z, w = (float(c) for c in a)
    return Quaternion(x, y, z, w)


def quat_to_array(q: Quaternion) -> QuatArray:
    return np.array([q.x, q.y, q.z, q.w], dtype=np.float64)


def quat_norm(q: Quaternion) -> float:
    return math.sqrt(q.w * q.w + q.x * q.x + q.y * q.y + q.z * q.z)


def quat_scale(q: Quaternion, s: float) -> Quaternion:
    return Quaternion(q.x * s, q.y * s, q.z * s, q.w * s)


def quat_divide(q: Quaternion, d: float) -> Quaternion:
    """Divide every component by ``d``. The caller keeps ``d`` away from zero."""
    return quat_scale(q, 1.0 / d)


def quat_negate(q: Quaternion) -> Quaternion:
    return Quaternion(-q.x, -q.y, -q.z, -q.w)


def quat_normalize(q: Quaternion, eps: float = EPSILON) -> Quaternion:
    """Unit-length copy of ``q``; the norm is clamped to ``eps``."""
    return quat_divide(q, max(quat_norm(q), eps))


def quat_vector_part(q: Quaternion) -> Vec3:
    return np.array([q.x, q.y, q.z], dtype=np.float64)


def quat_from_vector(v) -> Quaternion:
    """Embed a 3-vector as a pure quaternion (w = 0)."""
    x, y, z = as_vec3(v)
    return Quaternion(float(x), float(y), float(z), 0.0)


def quat_to_vector(q: Quaternion, tol: float = EPSILON) -> Vec3:
    """Vector part of a quaternion that must be pure."""
    if abs(q.w) > tol:
        raise ValueError(f"Not a pure quaternion: w = {q.w}")
    return quat_vector_part(q)


def quat_add(q1: Quaternion, q2: Quaternion) -> Quaternion:
    return Quaternion(q1.x + q2.x, q1.y + q2.y, q1.z + q2.z, q1.w + q2.w)


def quat_dot(a: Quaternion, b: Quaternion) -> float:
    return a.x * b.x + a.y * b.y + a.z * b.z + a.w * b.w


def quat_conjugate(q: Quaternion) -> Quaternion:
    return Quaternion(-q.x, -q.y, -q.z, q.w)


def quat_multiply(lhs: Quaternion, rhs: Quaternion) -> Quaternion:
    """Hamilton product ``lhs * rhs``. Order matters."""
    lv = quat_vector_part(lhs)
    rv = quat_vector_part(rhs)
    w = lhs.w * rhs.w - float(np.dot(lv, rv))
    v = rhs.w * lv + lhs.w * rv + np.cross(lv, rv)
    return Quaternion(float(v[0]), float(v[1]), float(v[2]), w)


def quat_min(a: Quaternion, b: Quaternion) -> Quaternion:
    """Elementwise minimum.

    Only meaningful as a bounding-box style aggregate over components;
    the result is not a rotation of any kind.
    """
    return Quaternion(min(a.x, b.x), min(a.y, b.y), min(a.z, b.z), min(a.w, b.w))


def quat_max(a: Quaternion, b: Quaternion) -> Quaternion:
    """Elementwise maximum. Same caveat as :func:`quat_min`."""
    return Quaternion(max(a.x, b.x), max(a.y, b.y), max(a.z, b.z), max(a.w, b.w))


def quat_from_axis_angle(axis, angle: float) -> Quaternion:
    """Rotation of ``angle`` radians about ``axis`` (need not be unit)."""
    a = as_vec3(axis)
    n = np.linalg.norm(a)
    if n < EPSILON:
        return quat_identity()
    a = a / n
    s = math.sin(angle / 2.0)
    return Quaternion(float(a[0] * s), float(a[1] * s), float(a[2] * s), math.cos(angle / 2.0))


def quat_rotate_vec3(q: Quaternion, v) -> Vec3:
    """Rotate a vector by a unit quaternion."""
    qv = quat_vector_part(q)
    v = as_vec3(v)
    t = 2.0 * np.cross(qv, v)
    return v + q.w * t + np.cross(qv, t)


def mat3_to_quat(m: Mat3 | Mat4) -> Quaternion:
    """Rotation quaternion of the upper-left 3x3 block of ``m``."""
    r = np.asarray(m, dtype=np.float64)[:3, :3]
    return quat_from_array(batch_mat3_to_quat(r[np.newaxis])[0])


def quat_to_mat4(q: Quaternion) -> Mat4:
    """4x4 rotation matrix of ``q`` after normalizing it."""
    return mat4_from_quaternion(quat_to_array(quat_normalize(q)))
