"""Core constraint evaluation for poseconstraints.

- config: Constraint tolerances and projection solver options
- kinematics: Kinematics providers and the per-thread pool
- rotation_math: Quaternion and rotation vector helpers
- pose_errors: Box, equality, on-a-line and orientation error models
- evaluator: Planner-facing function / jacobian contract
- factory: Build evaluators from constraint descriptions
- projection: Project joint values onto F(q) = 0 with pyceres

Usage:
    from poseconstraints.core import create_constraint

    result = create_constraint(constraints=message, num_joints=7)
    evaluator = result.unwrap()
    values = evaluator.function(joint_values=q, kinematics=provider)
"""

from .config import (
    ConstraintConfig,
    ProjectionConfig,
)
from .kinematics import (
    KinematicsPool,
    KinematicsProvider,
    LinkPose,
    SerialChainKinematics,
    resolve_provider,
)
from .rotation_math import (
    angular_velocity_to_rotation_vector_rate,
    normalize_quaternion,
    quaternion_to_rotation_matrix,
    rotation_matrix_to_quaternion,
    rotation_vector,
    skew_symmetric,
)
from .pose_errors import (
    BoundedPoseErrorModel,
    BoxPositionError,
    EqualityPositionError,
    ErrorModelType,
    LinearSystemPositionError,
    OrientationError,
    PoseErrorModel,
)
from .evaluator import ConstraintEvaluator
from .result import (
    ConstraintBuildResult,
    ConstraintBuilt,
    ConstraintNotBuilt,
    ProjectionResult,
)
from .factory import (
    EQUALITY_CONSTRAINTS_NAME,
    LINEAR_SYSTEM_CONSTRAINTS_NAME,
    build_box_error_model,
    build_equality_error_model,
    build_linear_system_error_model,
    build_orientation_error_model,
    create_constraint,
)
from .base_cost import BaseCostFunction
from .projection import (
    ConstraintProjector,
    ConstraintResidualCost,
)

__all__ = [
    # Configuration
    "ConstraintConfig",
    "ProjectionConfig",
    # Kinematics
    "KinematicsPool",
    "KinematicsProvider",
    "LinkPose",
    "SerialChainKinematics",
    "resolve_provider",
    # Rotation math
    "angular_velocity_to_rotation_vector_rate",
    "normalize_quaternion",
    "quaternion_to_rotation_matrix",
    "rotation_matrix_to_quaternion",
    "rotation_vector",
    "skew_symmetric",
    # Pose errors
    "BoundedPoseErrorModel",
    "BoxPositionError",
    "EqualityPositionError",
    "ErrorModelType",
    "LinearSystemPositionError",
    "OrientationError",
    "PoseErrorModel",
    # Evaluator
    "ConstraintEvaluator",
    # Results
    "ConstraintBuildResult",
    "ConstraintBuilt",
    "ConstraintNotBuilt",
    "ProjectionResult",
    # Factory
    "EQUALITY_CONSTRAINTS_NAME",
    "LINEAR_SYSTEM_CONSTRAINTS_NAME",
    "build_box_error_model",
    "build_equality_error_model",
    "build_linear_system_error_model",
    "build_orientation_error_model",
    "create_constraint",
    # Projection
    "BaseCostFunction",
    "ConstraintProjector",
    "ConstraintResidualCost",
]
