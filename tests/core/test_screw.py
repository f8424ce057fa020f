"""Tests for screw coordinate conversion."""

import numpy as np
import pytest

from dqskin.core.dual_quaternion import DualQuaternion
from dqskin.core.math_utils import vec3
from dqskin.core.quaternion import Quaternion, quat_from_axis_angle
from dqskin.core.screw import ScrewCoordinates, screw_from_dual_quaternion


@pytest.mark.parametrize("axis, angle, translation", [
    (vec3(1, 2, 3), 1.2, vec3(0.5, -1.0, 2.0)),
    (vec3(0, 0, 1), 0.4, vec3(0.0, 0.0, 0.0)),
    (vec3(-1, 0.5, 0), 4.0, vec3(3.0, 1.0, -2.0)),
    (vec3(0, 1, 0), np.pi, vec3(1.0, 1.0, 1.0)),
])
def test_roundtrip(axis, angle, translation):
    dq = DualQuaternion.from_rotation_translation(quat_from_axis_angle(axis, angle), translation)
    back = screw_from_dual_quaternion(dq).to_dual_quaternion()
    np.testing.assert_allclose(back.to_array(), dq.to_array(), atol=1e-5)


def test_pure_rotation_about_z():
    dq = DualQuaternion.from_rotation_translation(
        quat_from_axis_angle(vec3(0, 0, 1), np.pi / 2), vec3(0, 0, 0),
    )
    s = screw_from_dual_quaternion(dq)
    assert s.theta == pytest.approx(np.pi / 2)
    assert s.angle_deg == pytest.approx(90.0)
    assert s.d == pytest.approx(0.0, abs=1e-12)
    np.testing.assert_array_almost_equal(s.line, [0, 0, 1])
    np.testing.assert_array_almost_equal(s.moment, [0, 0, 0])
    np.testing.assert_array_equal(s.point, [0, 0, 0])


def test_rotation_about_offset_axis():
    # 90 deg about the Z axis through (1, 0, 0): translation = c - R c
    dq = DualQuaternion.from_rotation_translation(
        quat_from_axis_angle(vec3(0, 0, 1), np.pi / 2), vec3(1, -1, 0),
    )
    s = screw_from_dual_quaternion(dq)
    assert s.d == pytest.approx(0.0, abs=1e-12)
    np.testing.assert_array_almost_equal(s.line, [0, 0, 1])
    # moment = point_on_axis x direction
    np.testing.assert_array_almost_equal(s.moment, np.cross([1, 0, 0], [0, 0, 1]))


def test_pitch_along_axis():
    dq = DualQuaternion.from_rotation_translation(
        quat_from_axis_angle(vec3(0, 0, 1), np.pi), vec3(0, 0, 2),
    )
    s = screw_from_dual_quaternion(dq)
    assert s.theta == pytest.approx(np.pi)
    assert s.d == pytest.approx(2.0)


def test_pure_translation_uses_translation_direction():
    dq = DualQuaternion.from_translation(vec3(0, 3, 4))
    s = screw_from_dual_quaternion(dq)
    assert s.theta == pytest.approx(0.0)
    assert s.d == pytest.approx(5.0)
    np.testing.assert_array_almost_equal(s.line, [0, 0.6, 0.8])
    np.testing.assert_array_equal(s.moment, [0, 0, 0])
    np.testing.assert_allclose(s.to_dual_quaternion().to_array(), dq.to_array(), atol=1e-12)


def test_identity_falls_back_to_default_axis():
    s = screw_from_dual_quaternion(DualQuaternion.identity())
    np.testing.assert_array_equal(s.line, [0, 0, 1])
    assert s.d == 0.0
    assert np.all(np.isfinite(s.to_dual_quaternion().to_array()))


def test_w_drift_is_clamped():
    dq = DualQuaternion.from_rotation_translation(quat_from_axis_angle(vec3(1, 0, 0), 0.0), vec3(1, 0, 0))
    drifted = DualQuaternion(Quaternion(0.0, 0.0, 0.0, 1.0 + 1e-9), dq.dual)
    s = screw_from_dual_quaternion(drifted)
    assert np.isfinite(s.theta)


def test_to_dual_quaternion_is_normalized():
    s = ScrewCoordinates(theta=1.0, d=0.5, line=vec3(0, 1, 0), moment=vec3(0.2, 0, 0))
    dq = s.to_dual_quaternion()
    assert np.linalg.norm(dq.to_array()[:4]) == pytest.approx(1.0)


def test_tiny_rotation_roundtrip():
    dq = DualQuaternion.from_rotation_translation(
        quat_from_axis_angle(vec3(1, 1, 0), 3e-6), vec3(0.2, -0.4, 1.0),
    )
    s = screw_from_dual_quaternion(dq)
    assert s.theta == pytest.approx(3e-6, rel=1e-9)
    np.testing.assert_allclose(s.to_dual_quaternion().to_array(), dq.to_array(), atol=1e-12)


def test_screw_coordinates_are_hashable():
    dq = DualQuaternion.from_rotation_translation(
        quat_from_axis_angle(vec3(0, 0, 1), 0.5), vec3(1, 0, 0),
    )
    a = screw_from_dual_quaternion(dq)
    b = screw_from_dual_quaternion(dq)
    assert len({a, b}) == 2
    assert a == a
    assert a != b
    np.testing.assert_array_equal(a.moment, b.moment)
