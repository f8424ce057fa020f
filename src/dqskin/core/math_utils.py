"""NumPy-backed math utilities: Vec3, Mat4 and batch quaternion operations.

Provides the small vector/matrix layer the dual quaternion code sits on.
Vectors are plain numpy arrays; quaternion arrays are laid out [x, y, z, w].
Matrices are 4x4 numpy arrays with the translation in column 3.
"""

import numpy as np
from numpy.typing import NDArray

from dqskin.constants import EPSILON

# Type aliases
Vec3 = NDArray[np.float64]
Mat3 = NDArray[np.float64]
Mat4 = NDArray[np.float64]
QuatArray = NDArray[np.float64]  # [x, y, z, w]


def vec3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> Vec3:
    return np.array([x, y, z], dtype=np.float64)


def as_vec3(v) -> Vec3:
    """Coerce any 3-sequence to a float64 vector."""
    a = np.asarray(v, dtype=np.float64)
    if a.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {a.shape}")
    return a


def mat4_identity() -> Mat4:
    return np.eye(4, dtype=np.float64)


def mat4_translation(x: float, y: float, z: float) -> Mat4:
    m = np.eye(4, dtype=np.float64)
    m[:3, 3] = (x, y, z)
    return m


def mat4_rotation_x(angle_rad: float) -> Mat4:
    c, s = np.cos(angle_rad), np.sin(angle_rad)
    m = np.eye(4, dtype=np.float64)
    m[1, 1] = c
    m[1, 2] = -s
    m[2, 1] = s
    m[2, 2] = c
    return m


def mat4_rotation_y(angle_rad: float) -> Mat4:
    c, s = np.cos(angle_rad), np.sin(angle_rad)
    m = np.eye(4, dtype=np.float64)
    m[0, 0] = c
    m[0, 2] = s
    m[2, 0] = -s
    m[2, 2] = c
    return m


def mat4_rotation_z(angle_rad: float) -> Mat4:
    c, s = np.cos(angle_rad), np.sin(angle_rad)
    m = np.eye(4, dtype=np.float64)
    m[0, 0] = c
    m[0, 1] = -s
    m[1, 0] = s
    m[1, 1] = c
    return m


def mat4_from_quaternion(q: QuatArray) -> Mat4:
    """Convert a unit quaternion [x,y,z,w] to a 4x4 rotation matrix."""
    x, y, z, w = q
    m = np.eye(4, dtype=np.float64)
    m[0, 0] = 1 - 2 * (y * y + z * z)
    m[0, 1] = 2 * (x * y - z * w)
    m[0, 2] = 2 * (x * z + y * w)
    m[1, 0] = 2 * (x * y + z * w)
    m[1, 1] = 1 - 2 * (x * x + z * z)
    m[1, 2] = 2 * (y * z - x * w)
    m[2, 0] = 2 * (x * z - y * w)
    m[2, 1] = 2 * (y * z + x * w)
    m[2, 2] = 1 - 2 * (x * x + y * y)
    return m


def mat4_rigid(q: QuatArray, translation: Vec3) -> Mat4:
    """Compose a rotation + translation matrix (no scale, no shear)."""
    m = mat4_from_quaternion(q)
    m[:3, 3] = translation
    return m


# ── Batch (vectorized) quaternion operations ──────────────────────────

def batch_mat3_to_quat(R: NDArray) -> NDArray:
    """Convert (N, 3, 3) rotation matrices to (N, 4) quaternions [x, y, z, w].

    Trace-based extraction: each component is the square root of a clamped
    radicand, and the signs of x, y, z come from the skew terms.  Half-turns
    have vanishing skew terms; there the largest vector component is kept
    and the others are derived from it through the symmetric terms.
    """
    d0, d1, d2 = R[:, 0, 0], R[:, 1, 1], R[:, 2, 2]
    q = np.column_stack([
        np.sqrt(np.maximum(0.0, 1.0 + d0 - d1 - d2)) / 2.0,
        np.sqrt(np.maximum(0.0, 1.0 - d0 + d1 - d2)) / 2.0,
        np.sqrt(np.maximum(0.0, 1.0 - d0 - d1 + d2)) / 2.0,
        np.sqrt(np.maximum(0.0, 1.0 + d0 + d1 + d2)) / 2.0,
    ])

    skew = np.column_stack([
        R[:, 2, 1] - R[:, 1, 2],
        R[:, 0, 2] - R[:, 2, 0],
        R[:, 1, 0] - R[:, 0, 1],
    ])
    q[:, :3] *= np.where(skew >= 0.0, 1.0, -1.0)

    half_turn = (np.max(np.abs(skew), axis=1) < EPSILON) & (q[:, 3] < 0.5)
    if half_turn.any():
        # Off-diagonal of R + R^T: row k holds 4*q_k*q_i
        sym = R + np.swapaxes(R, 1, 2)
        for n in np.where(half_turn)[0]:
            k = int(np.argmax(np.abs(q[n, :3])))
            qk = abs(q[n, k])
            q[n, :3] = sym[n, k] / (4.0 * qk)
            q[n, k] = qk
            q[n, 3] = skew[n, k] / (4.0 * qk)

    return q


def batch_quat_multiply(a: NDArray, b: NDArray) -> NDArray:
    """Multiply (N, 4) quaternions [x, y, z, w]: result = a * b."""
    ax, ay, az, aw = a[:, 0], a[:, 1], a[:, 2], a[:, 3]
    bx, by, bz, bw = b[:, 0], b[:, 1], b[:, 2], b[:, 3]
    return np.column_stack([
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    ])


def batch_quat_rotate(q: NDArray, v: NDArray) -> NDArray:
    """Rotate (N, 3) vectors by (N, 4) unit quaternions [x, y, z, w]."""
    qx, qy, qz, qw = q[:, 0], q[:, 1], q[:, 2], q[:, 3]
    vx, vy, vz = v[:, 0], v[:, 1], v[:, 2]
    # t = 2 * cross(q.xyz, v)
    tx = 2.0 * (qy * vz - qz * vy)
    ty = 2.0 * (qz * vx - qx * vz)
    tz = 2.0 * (qx * vy - qy * vx)
    # result = v + qw * t + cross(q.xyz, t)
    return np.column_stack([
        vx + qw * tx + (qy * tz - qz * ty),
        vy + qw * ty + (qz * tx - qx * tz),
        vz + qw * tz + (qx * ty - qy * tx),
    ])


def batch_mat4_to_dual_quat(M: NDArray) -> NDArray:
    """Convert (N, 4, 4) rigid transform matrices to (N, 8) dual quaternions.

    Returns array where [:, 0:4] is the real part (unit rotation quaternion
    [x, y, z, w]) and [:, 4:8] is the dual part encoding translation.
    """
    R = M[:, :3, :3]  # (N, 3, 3)
    t = M[:, :3, 3]   # (N, 3)

    q_r = batch_mat3_to_quat(R)  # (N, 4) [x, y, z, w]
    norm_r = np.maximum(np.linalg.norm(q_r, axis=1, keepdims=True), EPSILON)
    q_r = q_r / norm_r

    # Dual part: q_d = 0.5 * pure_quat(t) * q_r
    N = len(M)
    t_quat = np.zeros((N, 4), dtype=np.float64)
    t_quat[:, :3] = t

    q_d = 0.5 * batch_quat_multiply(t_quat, q_r)

    return np.concatenate([q_r, q_d], axis=1)  # (N, 8)
