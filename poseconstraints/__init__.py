"""poseconstraints: bounded link pose constraints for manifold-constrained planning.

Turns declarative position and orientation constraints on a robot link
into constraint functions F(q) = 0 and their Jacobians dF/dq.
"""

from poseconstraints.core import (
    ConstraintBuilt,
    ConstraintConfig,
    ConstraintEvaluator,
    ConstraintNotBuilt,
    ConstraintProjector,
    KinematicsPool,
    KinematicsProvider,
    ProjectionConfig,
    SerialChainKinematics,
    create_constraint,
)
from poseconstraints.data import (
    Bounds,
    ConstraintsMessage,
    OrientationConstraintMessage,
    PositionConstraintMessage,
    RegionPose,
)

__version__ = "0.1.0"

__all__ = [
    "Bounds",
    "ConstraintBuilt",
    "ConstraintConfig",
    "ConstraintEvaluator",
    "ConstraintNotBuilt",
    "ConstraintProjector",
    "ConstraintsMessage",
    "KinematicsPool",
    "KinematicsProvider",
    "OrientationConstraintMessage",
    "PositionConstraintMessage",
    "ProjectionConfig",
    "RegionPose",
    "SerialChainKinematics",
    "create_constraint",
]
