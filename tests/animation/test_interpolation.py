"""Tests for screw-linear interpolation."""

import numpy as np
import pytest

from dqskin.animation.interpolation import DualQuaternionInterpolator, sclerp
from dqskin.core.dual_quaternion import DualQuaternion, dq_negate
from dqskin.core.math_utils import vec3
from dqskin.core.quaternion import quat_from_axis_angle


def _dq(axis, angle, t) -> DualQuaternion:
    return DualQuaternion.from_rotation_translation(quat_from_axis_angle(axis, angle), t)


def _same_transform(a: DualQuaternion, b: DualQuaternion) -> None:
    for p in (vec3(0, 0, 0), vec3(1, 0, 0), vec3(0, 1, 0), vec3(0, 0, 1)):
        np.testing.assert_allclose(a.transform(p), b.transform(p), atol=1e-9)


def test_endpoints():
    a = _dq(vec3(1, 0, 0), 0.3, vec3(1, 2, 3))
    b = _dq(vec3(0, 1, 1), 2.0, vec3(-1, 0, 4))
    _same_transform(sclerp(a, b, 0.0), a)
    _same_transform(sclerp(a, b, 1.0), b)


def test_midpoint_of_pure_rotation():
    a = DualQuaternion.identity()
    b = _dq(vec3(0, 0, 1), np.pi / 2, vec3(0, 0, 0))
    mid = sclerp(a, b, 0.5)
    s = np.sqrt(2.0) / 2.0
    np.testing.assert_allclose(mid.transform(vec3(1, 0, 0)), [s, s, 0], atol=1e-12)


def test_midpoint_of_pure_translation():
    a = DualQuaternion.from_translation(vec3(0, 0, 0))
    b = DualQuaternion.from_translation(vec3(2, 4, -6))
    np.testing.assert_allclose(sclerp(a, b, 0.25).translation_vector(), [0.5, 1, -1.5], atol=1e-12)


def test_screw_motion_advances_rotation_and_pitch_together():
    a = DualQuaternion.identity()
    b = _dq(vec3(0, 0, 1), np.pi, vec3(0, 0, 2))
    mid = sclerp(a, b, 0.5)
    np.testing.assert_allclose(mid.transform(vec3(1, 0, 0)), [0, 1, 1], atol=1e-9)


def test_takes_shortest_path():
    a = DualQuaternion.identity()
    b = _dq(vec3(0, 0, 1), np.pi / 2, vec3(0, 0, 0))
    mid = sclerp(a, dq_negate(b), 0.5)
    s = np.sqrt(2.0) / 2.0
    np.testing.assert_allclose(mid.transform(vec3(1, 0, 0)), [s, s, 0], atol=1e-12)


def test_result_is_unit():
    a = _dq(vec3(1, 1, 1), 0.4, vec3(1, 0, 0))
    b = _dq(vec3(1, -1, 0), 1.9, vec3(0, 3, 0))
    r = sclerp(a, b, 0.37)
    assert np.linalg.norm(r.to_array()[:4]) == pytest.approx(1.0)


def test_interpolator_converges():
    target = _dq(vec3(0, 1, 0), 1.0, vec3(1, 2, 3))
    interp = DualQuaternionInterpolator()
    for _ in range(400):
        interp.interpolate(target, 0.016)
    _same_transform(interp.current, target)


def test_interpolator_zero_dt():
    start = _dq(vec3(1, 0, 0), 0.5, vec3(0, 0, 0))
    interp = DualQuaternionInterpolator(start)
    assert interp.interpolate(DualQuaternion.identity(), 0.0) is start


def test_tiny_rotation_reaches_target():
    # |v_r| just above the degenerate-axis cutoff, axis far from the origin
    b = _dq(vec3(0, 0, 1), 2.5e-6, vec3(1, 2, 0.5))
    _same_transform(sclerp(DualQuaternion.identity(), b, 1.0), b)
