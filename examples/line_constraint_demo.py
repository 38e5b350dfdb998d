"""Line constraint demo - project random arm configurations onto a line."""

import logging

import numpy as np

from poseconstraints import (
    ConstraintConfig,
    ConstraintProjector,
    ConstraintsMessage,
    KinematicsPool,
    PositionConstraintMessage,
    ProjectionConfig,
    RegionPose,
    SerialChainKinematics,
    create_constraint,
)
from poseconstraints.core.factory import LINEAR_SYSTEM_CONSTRAINTS_NAME

logger = logging.getLogger(__name__)


def make_spatial_arm() -> SerialChainKinematics:
    """Six joint arm with a short tool offset."""
    return SerialChainKinematics.from_offsets(
        link_name="tool0",
        offsets=[
            [0.0, 0.0, 0.0],
            [0.0, 0.0, 0.3],
            [0.0, 0.0, 0.4],
            [0.0, 0.0, 0.35],
            [0.0, 0.0, 0.1],
            [0.0, 0.0, 0.1],
        ],
        axes=[
            [0.0, 0.0, 1.0],
            [0.0, 1.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
        ],
        tool_offset=(0.0, 0.0, 0.1)
    )


def make_line_constraints(
        *,
        start: tuple[float, float, float],
        end: tuple[float, float, float]
) -> ConstraintsMessage:
    """Keep tool0 on the segment from start to end."""
    return ConstraintsMessage(
        name=LINEAR_SYSTEM_CONSTRAINTS_NAME,
        position_constraints=[
            PositionConstraintMessage(
                link_name="tool0",
                dimensions=[0.0005, 0.0005, 1.0],
                primitive_poses=[RegionPose(position=start), RegionPose(position=end)]
            )
        ]
    )


def run_line_demo(*, n_samples: int = 20, random_seed: int = 42) -> None:
    """Sample joint values and project each one onto a line constraint."""
    logger.info("=" * 80)
    logger.info("LINE CONSTRAINT DEMO")
    logger.info("=" * 80)

    constraints = make_line_constraints(start=(0.3, -0.3, 0.6), end=(0.3, 0.3, 0.6))
    evaluator = create_constraint(
        constraints=constraints,
        num_joints=6,
        config=ConstraintConfig()
    ).unwrap()
    logger.info(f"Built {evaluator!r}")

    pool = KinematicsPool(factory=make_spatial_arm)
    projector = ConstraintProjector(
        evaluator=evaluator,
        config=ProjectionConfig(max_iterations=100)
    )

    rng = np.random.default_rng(seed=random_seed)
    seeds = rng.uniform(-1.0, 1.0, size=(n_samples, 6))

    n_success = 0
    for index, seed in enumerate(seeds):
        result = projector.project(joint_values=seed, kinematics=pool)
        n_success += int(result.success)
        position = pool.get().pose(joint_values=result.joint_values).position
        logger.info(
            f"  Sample {index:2d}: distance {result.distance:.2e} "
            f"iterations {result.num_iterations:3d} tool0 at {np.round(position, 4)}"
        )

    logger.info("\n" + "=" * 80)
    logger.info(f"DEMO COMPLETE: {n_success}/{n_samples} samples projected onto the line")
    logger.info("=" * 80)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_line_demo()
