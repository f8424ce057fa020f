"""Candy-wrapper diagnostic: linear blend vs dual quaternion skinning.

Builds a cylinder along X with two bones meeting at the origin, twists the
child bone about X and compares how well each blending method keeps the
cylinder's radius at the joint.

Usage::

    python -m tools.blend_diagnostic --twist 180
    python -m tools.blend_diagnostic --twist 90 150 180 --segments 16 --output twist.json
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

import numpy as np

from dqskin.core.math_utils import mat4_identity, mat4_rotation_x
from dqskin.skinning.dq_skinning import DualQuaternionSkinning

logger = logging.getLogger(__name__)


@dataclass
class TwistResult:
    """Joint radius preservation for one twist angle."""
    twist_deg: float
    lbs_min_radius_ratio: float
    dqs_min_radius_ratio: float

    @property
    def lbs_collapsed(self) -> bool:
        return self.lbs_min_radius_ratio < 0.5


def build_cylinder(
    radius: float = 1.0,
    half_length: float = 2.0,
    rings: int = 9,
    segments: int = 12,
    blend_width: float = 1.0,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Cylinder vertices with two-bone influences.

    Returns (positions (V, 3), joint_indices (V, 2), weights (V, 2)).
    Bone 0 is the parent (x < 0), bone 1 the child (x > 0); weights ramp
    linearly across ``[-blend_width, blend_width]``.
    """
    xs = np.linspace(-half_length, half_length, rings)
    angles = np.linspace(0.0, 2.0 * np.pi, segments, endpoint=False)
    xx, aa = np.meshgrid(xs, angles, indexing="ij")
    positions = np.column_stack([
        xx.ravel(),
        radius * np.cos(aa.ravel()),
        radius * np.sin(aa.ravel()),
    ])
    w_child = np.clip(0.5 + positions[:, 0] / (2.0 * blend_width), 0.0, 1.0)
    weights = np.column_stack([1.0 - w_child, w_child])
    joint_indices = np.tile([0, 1], (len(positions), 1))
    return positions, joint_indices, weights


def linear_blend(
    matrices: np.ndarray,
    positions: np.ndarray,
    joint_indices: np.ndarray,
    weights: np.ndarray,
) -> np.ndarray:
    """Classic matrix-palette linear blend skinning, for comparison."""
    blended = np.einsum("vk,vkij->vij", weights, matrices[joint_indices])
    ones = np.ones((len(positions), 1), dtype=np.float64)
    pos_h = np.concatenate([positions, ones], axis=1)
    return np.einsum("vij,vj->vi", blended, pos_h)[:, :3]


def _min_radius_ratio(deformed: np.ndarray, rest: np.ndarray, radius: float) -> float:
    joint_ring = np.abs(rest[:, 0]) < 1e-9
    r = np.linalg.norm(deformed[joint_ring, 1:], axis=1)
    return float(r.min() / radius)


def run_twist(twist_deg: float, segments: int = 12, radius: float = 1.0) -> TwistResult:
    """Twist the child bone by ``twist_deg`` and measure the joint ring."""
    positions, joint_indices, weights = build_cylinder(radius=radius, segments=segments)
    matrices = np.stack([mat4_identity(), mat4_rotation_x(np.radians(twist_deg))])

    lbs = linear_blend(matrices, positions, joint_indices, weights)

    skinning = DualQuaternionSkinning()
    binding = skinning.register("cylinder", positions, joint_indices, weights)
    skinning.update(matrices)

    result = TwistResult(
        twist_deg=twist_deg,
        lbs_min_radius_ratio=_min_radius_ratio(lbs, positions, radius),
        dqs_min_radius_ratio=_min_radius_ratio(binding.positions, positions, radius),
    )
    logger.debug("Twist %.1f deg: %s", twist_deg, result)
    return result


def _print_report(results: list[TwistResult]) -> None:
    print(f"{'twist':>8}  {'LBS radius':>10}  {'DQS radius':>10}")
    for r in results:
        flag = "  <- collapsed" if r.lbs_collapsed else ""
        print(f"{r.twist_deg:8.1f}  {r.lbs_min_radius_ratio:10.3f}  "
              f"{r.dqs_min_radius_ratio:10.3f}{flag}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compare joint volume preservation of LBS and DQS on a twisted cylinder.",
    )
    parser.add_argument(
        "--twist", type=float, nargs="+", default=[45.0, 90.0, 135.0, 180.0],
        metavar="DEG", help="Child bone twist angles in degrees",
    )
    parser.add_argument(
        "--segments", type=int, default=12,
        help="Vertices around the cylinder (default: 12)",
    )
    parser.add_argument("--output", type=Path, default=None, help="Write results to JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    if args.segments < 3:
        parser.error("--segments must be at least 3")

    results = [run_twist(t, segments=args.segments) for t in args.twist]
    _print_report(results)

    if args.output is not None:
        with open(args.output, "w") as f:
            json.dump([asdict(r) for r in results], f, indent=2)
        print(f"Results written to {args.output}")


if __name__ == "__main__":
    main()
