"""Dual quaternion rigid transforms.

A ``DualQuaternion`` pairs a ``real`` quaternion (the rotation) with a
``dual`` quaternion (the translation, coupled to the rotation as
``dual = 0.5 * t * real``).  It is a rigid transform only while ``real``
has unit norm and ``dot(real, dual) == 0``.

Sums and scalar multiples (``dq_add``/``dq_scale``) are blending
primitives and are generally *not* normalized.  ``transform`` always
normalizes a copy first; ``to_matrix`` and ``rotate`` normalize the
rotation they use.  Composition (``dq_compose``) is only a rigid-transform
product for unit operands.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from dqskin.constants import EPSILON
from dqskin.core.math_utils import Mat4, Vec3, mat4_rigid
from dqskin.core.quaternion import (
    Quaternion,
    mat3_to_quat,
    quat_add,
    quat_conjugate,
    quat_divide,
    quat_dot,
    quat_from_array,
    quat_from_vector,
    quat_identity,
    quat_max,
    quat_min,
    quat_multiply,
    quat_negate,
    quat_norm,
    quat_normalize,
    quat_rotate_vec3,
    quat_scale,
    quat_to_array,
    quat_vector_part,
)


def _translation_from(real: Quaternion, dual: Quaternion) -> Vec3:
    # 2 * dual * conjugate(real), vector part, without the product
    vr = quat_vector_part(real)
    vd = quat_vector_part(dual)
    return 2.0 * (vd * real.w - vr * dual.w + np.cross(vr, vd))


@dataclass(frozen=True)
class DualQuaternion:
    """Rigid transform (rotation then translation) in dual quaternion form."""
    real: Quaternion
    dual: Quaternion

    # ── Construction ──

    @classmethod
    def identity(cls) -> DualQuaternion:
        return cls.from_rotation_translation(quat_identity(), (0.0, 0.0, 0.0))

    @classmethod
    def from_rotation_translation(cls, rotation: Quaternion, translation) -> DualQuaternion:
        """Transform that rotates by ``rotation`` and then translates.

        ``rotation`` is normalized first, so the result satisfies the
        orthogonality condition by construction.
        """
        real = quat_normalize(rotation)
        dual = quat_scale(quat_multiply(quat_from_vector(translation), real), 0.5)
        return cls(real, dual)

    @classmethod
    def from_translation(cls, translation) -> DualQuaternion:
        return cls.from_rotation_translation(quat_identity(), translation)

    @classmethod
    def from_matrix(cls, m: Mat4) -> DualQuaternion:
        """Dual quaternion of a 4x4 rotation + translation matrix."""
        m = np.asarray(m, dtype=np.float64)
        if m.shape != (4, 4):
            raise ValueError(f"Expected a 4x4 matrix, got shape {m.shape}")
        return cls.from_rotation_translation(mat3_to_quat(m), m[:3, 3])

    @classmethod
    def from_array(cls, a) -> DualQuaternion:
        """From the (8,) layout [real xyzw, dual xyzw]."""
        a = np.asarray(a, dtype=np.float64)
        if a.shape != (8,):
            raise ValueError(f"Expected 8 components, got shape {a.shape}")
        return cls(quat_from_array(a[:4]), quat_from_array(a[4:]))

    def to_array(self) -> np.ndarray:
        return np.concatenate([quat_to_array(self.real), quat_to_array(self.dual)])

    # ── Algebra ──

    def normalized(self, eps: float = EPSILON) -> DualQuaternion:
        """Copy with both parts divided by ``max(norm(real), eps)``."""
        norm = max(quat_norm(self.real), eps)
        return DualQuaternion(quat_divide(self.real, norm), quat_divide(self.dual, norm))

    def conjugate(self) -> DualQuaternion:
        return DualQuaternion(quat_conjugate(self.real), quat_conjugate(self.dual))

    def inverse(self) -> DualQuaternion:
        """Algebraic inverse; the geometric inverse only for unit input."""
        real_conj = quat_conjugate(self.real)
        dual_conj = quat_conjugate(self.dual)
        return DualQuaternion(
            real_conj,
            quat_add(dual_conj, quat_scale(real_conj, -2.0 * quat_dot(real_conj, dual_conj))),
        )

    # ── Geometry ──

    def translation_vector(self, eps: float = EPSILON) -> Vec3:
        """Translation encoded by a unit-norm dual quaternion (closed form)."""
        return _translation_from(self.real, self.dual) / max(quat_norm(self.real), eps)

    def translation(self) -> Vec3:
        """Translation as the explicit product ``2 * dual * conjugate(real)``."""
        t = quat_multiply(quat_scale(self.dual, 2.0), quat_conjugate(self.real))
        return quat_vector_part(t)

    def rotate(self, v) -> Vec3:
        """Rotate a vector (normal, tangent); translation is ignored."""
        return quat_rotate_vec3(quat_normalize(self.real), v)

    def transform(self, p) -> Vec3:
        """Rotate then translate a point.

        Blended dual quaternions are never assumed unit-norm, so this always
        works on a normalized copy.
        """
        n = self.normalized()
        return quat_rotate_vec3(n.real, p) + _translation_from(n.real, n.dual)

    def transform_unnormalized(self, p) -> Vec3:
        """``transform`` without normalizing. Only for diagnostics."""
        return quat_rotate_vec3(self.real, p) + _translation_from(self.real, self.dual)

    def to_matrix(self) -> Mat4:
        """4x4 rigid matrix (rotation block + translation column, no scale)."""
        n = self.normalized()
        return mat4_rigid(quat_to_array(n.real), _translation_from(n.real, n.dual))


# ── Blending primitives and products ──

def dq_normalize(dq: DualQuaternion, eps: float = EPSILON) -> DualQuaternion:
    return dq.normalized(eps)


def dq_add(a: DualQuaternion, b: DualQuaternion) -> DualQuaternion:
    """Elementwise sum of both parts. Not normalized."""
    return DualQuaternion(quat_add(a.real, b.real), quat_add(a.dual, b.dual))


def dq_scale(dq: DualQuaternion, s: float) -> DualQuaternion:
    """Both parts scaled by ``s``. Not normalized."""
    return DualQuaternion(quat_scale(dq.real, s), quat_scale(dq.dual, s))


def dq_negate(dq: DualQuaternion) -> DualQuaternion:
    """Antipodal representation of the same rigid transform."""
    return DualQuaternion(quat_negate(dq.real), quat_negate(dq.dual))


def dq_compose(lhs: DualQuaternion, rhs: DualQuaternion) -> DualQuaternion:
    """Apply ``rhs`` first, then ``lhs``. Both operands must be unit-norm."""
    return DualQuaternion(
        quat_multiply(lhs.real, rhs.real),
        quat_add(quat_multiply(lhs.real, rhs.dual), quat_multiply(lhs.dual, rhs.real)),
    )


def dq_dot(a: DualQuaternion, b: DualQuaternion) -> float:
    """Similarity of the rotational parts, used for sign disambiguation."""
    return quat_dot(a.real, b.real)


def dq_min(a: DualQuaternion, b: DualQuaternion) -> DualQuaternion:
    """Elementwise minimum over both parts (bounding aggregate, not a transform)."""
    return DualQuaternion(quat_min(a.real, b.real), quat_min(a.dual, b.dual))


def dq_max(a: DualQuaternion, b: DualQuaternion) -> DualQuaternion:
    """Elementwise maximum over both parts (bounding aggregate, not a transform)."""
    return DualQuaternion(quat_max(a.real, b.real), quat_max(a.dual, b.dual))
