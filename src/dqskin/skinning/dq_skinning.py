"""Vectorized dual quaternion skinning for whole meshes.

The batch functions follow ``blending.blend_weighted`` and
``DualQuaternion.transform`` exactly (same reference sign, same ``<= 0``
flip, same left-to-right accumulation, same epsilon clamp), only over
(V, K) arrays of per-vertex influences instead of Python lists.
Dual quaternion arrays use the (.., 8) layout [real xyzw, dual xyzw].
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from dqskin.constants import EPSILON
from dqskin.core.config_loader import SkinningSettings, load_skinning_settings
from dqskin.core.math_utils import batch_mat4_to_dual_quat, batch_quat_rotate
from dqskin.skinning.blending import InvalidArgumentError, check_influences

logger = logging.getLogger(__name__)


def batch_blend_dual_quats(
    dq_stack: NDArray,
    joint_indices: NDArray,
    weights: NDArray,
) -> NDArray:
    """Blend (J, 8) bone dual quaternions with (V, K) influences -> (V, 8).

    Column 0 of ``joint_indices`` is each vertex's reference bone.  The
    result is not normalized.
    """
    joint_indices = np.asarray(joint_indices)
    weights = np.asarray(weights, dtype=np.float64)
    if joint_indices.ndim != 2:
        raise InvalidArgumentError(
            f"joint_indices must be (V, K), got shape {joint_indices.shape}"
        )
    check_influences(joint_indices.shape[1], weights.shape[1] if weights.ndim == 2 else 0)
    if weights.shape != joint_indices.shape:
        raise InvalidArgumentError(
            f"weights shape {weights.shape} != joint_indices shape {joint_indices.shape}"
        )
    J = len(dq_stack)
    if joint_indices.size and (joint_indices.min() < 0 or joint_indices.max() >= J):
        raise InvalidArgumentError(f"joint index out of range for {J} bones")

    dqs = dq_stack[joint_indices]  # (V, K, 8)

    # Shortest path: negate the weight when dot(real, reference real) <= 0
    ref = dqs[:, 0, :4]
    dot = np.sum(dqs[:, 1:, :4] * ref[:, np.newaxis, :], axis=2)  # (V, K-1)
    w = weights.copy()
    w[:, 1:] = np.where(dot <= 0.0, -w[:, 1:], w[:, 1:])

    blend = dqs[:, 0] * w[:, 0:1]
    for k in range(1, dqs.shape[1]):
        blend = blend + dqs[:, k] * w[:, k:k + 1]
    return blend


def batch_normalize_dual_quats(dq: NDArray, eps: float = EPSILON) -> NDArray:
    """Divide (N, 8) dual quaternions by their real-part norm (clamped)."""
    norm_r = np.linalg.norm(dq[:, :4], axis=1, keepdims=True)
    return dq / np.maximum(norm_r, eps)


def batch_translation(dq: NDArray) -> NDArray:
    """(N, 3) translations of unit (N, 8) dual quaternions."""
    vr, wr = dq[:, :3], dq[:, 3:4]
    vd, wd = dq[:, 4:7], dq[:, 7:8]
    return 2.0 * (vd * wr - vr * wd + np.cross(vr, vd))


def batch_transform_points(dq: NDArray, points: NDArray, eps: float = EPSILON) -> NDArray:
    """Rotate then translate (N, 3) points by (N, 8) possibly blended dual quaternions."""
    n = batch_normalize_dual_quats(dq, eps)
    return batch_quat_rotate(n[:, :4], points) + batch_translation(n)


def batch_rotate_vectors(dq: NDArray, vectors: NDArray, eps: float = EPSILON) -> NDArray:
    """Rotate (N, 3) normals/tangents by the rotation part of (N, 8) dual quaternions."""
    n = batch_normalize_dual_quats(dq, eps)
    return batch_quat_rotate(n[:, :4], vectors)


@dataclass
class SkinBinding:
    """Per-mesh skinning data: rest geometry + (V, K) bone influences."""
    name: str
    rest_positions: np.ndarray  # (V, 3)
    joint_indices: np.ndarray  # (V, K) bone index per influence, column 0 is the reference
    weights: np.ndarray  # (V, K)
    rest_normals: Optional[np.ndarray] = None  # (V, 3)
    # Deformed output, written by DualQuaternionSkinning.update()
    positions: Optional[np.ndarray] = None
    normals: Optional[np.ndarray] = None


class DualQuaternionSkinning:
    """Dual quaternion skinning system for registered meshes.

    Algorithm:
    1. set_rest_pose(): snapshot bind-pose bone matrices (optional)
    2. register(): store rest geometry and per-vertex influences
    3. update(): per-frame delta transform (current x restInv) -> dual
       quaternions -> per-vertex blend -> normalized point/normal transform,
       written into each binding's ``positions`` / ``normals``
    """

    def __init__(self, settings: Optional[SkinningSettings] = None):
        self.settings = settings if settings is not None else load_skinning_settings()
        self.bindings: list[SkinBinding] = []
        self._rest_inv: Optional[np.ndarray] = None  # (J, 4, 4)
        self._last_signature: Optional[bytes] = None

    def set_rest_pose(self, rest_matrices: NDArray) -> None:
        """Bind-pose world matrices of the bones, (J, 4, 4)."""
        rest = np.asarray(rest_matrices, dtype=np.float64)
        self._rest_inv = np.linalg.inv(rest)
        self._last_signature = None

    def register(
        self,
        name: str,
        rest_positions: NDArray,
        joint_indices: NDArray,
        weights: NDArray,
        rest_normals: Optional[NDArray] = None,
    ) -> SkinBinding:
        """Register a mesh for skinning and return its binding."""
        rest_positions = np.asarray(rest_positions, dtype=np.float64).reshape(-1, 3)
        joint_indices = np.asarray(joint_indices, dtype=np.intp)
        weights = np.asarray(weights, dtype=np.float64)
        if joint_indices.ndim == 1:
            joint_indices = joint_indices[:, np.newaxis]
            weights = weights.reshape(-1, 1)

        V = len(rest_positions)
        if joint_indices.shape[0] != V or weights.shape != joint_indices.shape:
            raise InvalidArgumentError(
                f"{name}: {V} vertices but influences {joint_indices.shape} / weights {weights.shape}"
            )
        K = joint_indices.shape[1]
        check_influences(K, weights.shape[1])
        if K > self.settings.max_influences:
            raise InvalidArgumentError(
                f"{name}: {K} influences per vertex exceeds max_influences="
                f"{self.settings.max_influences}"
            )
        if joint_indices.size and joint_indices.min() < 0:
            raise InvalidArgumentError(f"{name}: negative joint index")
        if (self._rest_inv is not None and joint_indices.size
                and joint_indices.max() >= len(self._rest_inv)):
            raise InvalidArgumentError(
                f"{name}: joint index {int(joint_indices.max())} out of range for "
                f"{len(self._rest_inv)} rest bones"
            )
        if rest_normals is not None:
            rest_normals = np.asarray(rest_normals, dtype=np.float64).reshape(-1, 3)

        unweighted = int(np.count_nonzero(np.all(weights == 0.0, axis=1)))
        if unweighted:
            logger.warning("%s: %d vertices have no bone weight and stay at rest", name, unweighted)

        binding = SkinBinding(
            name=name,
            rest_positions=rest_positions,
            joint_indices=joint_indices,
            weights=weights,
            rest_normals=rest_normals,
        )
        self.bindings.append(binding)
        self._last_signature = None
        logger.info("Registered %s: %d vertices, %d influences per vertex", name, V, K)
        return binding

    def update(self, bone_matrices: NDArray) -> None:
        """Deform every registered mesh for the given (J, 4, 4) bone matrices."""
        current = np.asarray(bone_matrices, dtype=np.float64)
        if self._rest_inv is not None:
            if len(self._rest_inv) != len(current):
                raise InvalidArgumentError(
                    f"Got {len(current)} bone matrices for {len(self._rest_inv)} rest bones"
                )
            deltas = current @ self._rest_inv
        else:
            deltas = current

        # Early exit when the pose has not changed
        sig = current.tobytes()
        if sig == self._last_signature:
            return

        dq_stack = batch_mat4_to_dual_quat(deltas)  # (J, 8)
        eps = self.settings.epsilon

        # Blend every binding before writing any, so a bad binding leaves all untouched
        blends = [
            batch_blend_dual_quats(dq_stack, binding.joint_indices, binding.weights)
            for binding in self.bindings
        ]
        for binding, dq_blend in zip(self.bindings, blends):
            binding.positions = batch_transform_points(dq_blend, binding.rest_positions, eps)
            if binding.rest_normals is not None:
                binding.normals = batch_rotate_vectors(dq_blend, binding.rest_normals, eps)

        self._last_signature = sig
        logger.debug("Skinned %d meshes with %d bones", len(self.bindings), len(dq_stack))
