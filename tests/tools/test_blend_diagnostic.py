"""Tests for the LBS vs DQS twist diagnostic."""

import json

import numpy as np

from tools.blend_diagnostic import build_cylinder, linear_blend, main, run_twist


def test_cylinder_weights_sum_to_one():
    positions, joint_indices, weights = build_cylinder(rings=5, segments=8)
    assert positions.shape == (40, 3)
    assert joint_indices.shape == weights.shape == (40, 2)
    np.testing.assert_allclose(weights.sum(axis=1), 1.0)


def test_linear_blend_identity():
    positions, joint_indices, weights = build_cylinder()
    mats = np.stack([np.eye(4), np.eye(4)])
    np.testing.assert_allclose(linear_blend(mats, positions, joint_indices, weights), positions)


def test_half_turn_collapses_lbs_only():
    result = run_twist(180.0)
    assert result.lbs_collapsed
    assert result.lbs_min_radius_ratio < 1e-6
    assert abs(result.dqs_min_radius_ratio - 1.0) < 1e-9


def test_no_twist_keeps_radius():
    result = run_twist(0.0)
    assert not result.lbs_collapsed
    assert abs(result.lbs_min_radius_ratio - 1.0) < 1e-12
    assert abs(result.dqs_min_radius_ratio - 1.0) < 1e-12


def test_main_writes_json(tmp_path, capsys):
    out = tmp_path / "twist.json"
    main(["--twist", "90", "180", "--segments", "6", "--output", str(out)])
    report = capsys.readouterr().out
    assert "collapsed" in report
    data = json.loads(out.read_text())
    assert [d["twist_deg"] for d in data] == [90.0, 180.0]
