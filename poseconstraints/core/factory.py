"""Build constraint evaluators from declarative constraint descriptions.

Selection (first matching row wins):

| description                                   | outcome                    |
|-----------------------------------------------|----------------------------|
| position AND orientation constraints          | not built (unsupported)    |
| name "use_equality_constraints" + position    | EqualityPositionError      |
| name "linear_system_constraints" + position   | LinearSystemPositionError  |
| position                                      | BoxPositionError           |
| orientation only                              | OrientationError (experimental) |
| nothing                                       | not built                  |

Only the first constraint of the selected kind is used.
"""

import logging

from poseconstraints.core.config import ConstraintConfig
from poseconstraints.core.evaluator import ConstraintEvaluator
from poseconstraints.core.pose_errors import (
    BoxPositionError,
    EqualityPositionError,
    LinearSystemPositionError,
    OrientationError,
    PoseErrorModel,
)
from poseconstraints.core.result import (
    ConstraintBuildResult,
    ConstraintBuilt,
    ConstraintNotBuilt,
)
from poseconstraints.data.bounds import (
    Bounds,
    bounds_from_extents,
    bounds_from_tolerances,
)
from poseconstraints.data.constraint_messages import (
    ConstraintsMessage,
    OrientationConstraintMessage,
    PositionConstraintMessage,
)
from poseconstraints.data.validators import (
    find_equality_dimensions,
    validate_equality_dimensions,
    validate_line,
)

logger = logging.getLogger(__name__)

EQUALITY_CONSTRAINTS_NAME = "use_equality_constraints"
LINEAR_SYSTEM_CONSTRAINTS_NAME = "linear_system_constraints"

_AXIS_NAMES = ("x", "y", "z")


def position_constraint_to_bounds(
    *,
    position_constraint: PositionConstraintMessage,
    config: ConstraintConfig
) -> list[Bounds]:
    """Half box extents as bounds; marker extents become unbounded."""
    return bounds_from_extents(
        extents=position_constraint.get_dimensions(),
        unconstrained_marker=config.unconstrained_marker
    )


def orientation_constraint_to_bounds(
    *,
    orientation_constraint: OrientationConstraintMessage,
    config: ConstraintConfig
) -> list[Bounds]:
    """Per-axis tolerances as bounds; marker tolerances become unbounded."""
    return bounds_from_tolerances(
        tolerances=orientation_constraint.tolerances,
        unconstrained_marker=config.unconstrained_marker
    )


def build_box_error_model(
    *,
    position_constraint: PositionConstraintMessage,
    config: ConstraintConfig
) -> BoxPositionError:
    """Build a box position error model from the first region primitive."""
    logger.info("Parsing position constraint for constrained planning")
    bounds = position_constraint_to_bounds(position_constraint=position_constraint, config=config)
    for axis, bound in zip(_AXIS_NAMES, bounds):
        logger.info(f"Parsed {axis} constraints {bound}")

    target = position_constraint.get_primitive_pose(index=0)
    logger.info(f"Position constraints applied to link: {position_constraint.link_name}")
    return BoxPositionError(
        link_name=position_constraint.link_name,
        target_position=target.position,
        target_orientation=target.orientation,
        bounds=tuple(bounds)
    )


def _equality_flags(
    *,
    position_constraint: PositionConstraintMessage,
    config: ConstraintConfig
) -> tuple[list[Bounds], tuple[bool, ...]]:
    bounds = position_constraint_to_bounds(position_constraint=position_constraint, config=config)
    is_dim_constrained = find_equality_dimensions(
        bounds=bounds,
        equality_threshold=config.equality_threshold
    )
    for axis, constrained in zip(_AXIS_NAMES, is_dim_constrained):
        logger.info(f"{axis.upper()} dimension constrained? {constrained}")
    return bounds, is_dim_constrained


def build_equality_error_model(
    *,
    position_constraint: PositionConstraintMessage,
    config: ConstraintConfig
) -> EqualityPositionError:
    """Build an equality position error model.

    Raises:
        ValueError: If a constrained axis is narrower than the tolerance
    """
    logger.info("Parsing equality position constraint for constrained planning")
    bounds, is_dim_constrained = _equality_flags(
        position_constraint=position_constraint,
        config=config
    )
    validate_equality_dimensions(
        bounds=bounds,
        is_dim_constrained=is_dim_constrained,
        tolerance=config.tolerance,
        equality_threshold=config.equality_threshold
    )

    target = position_constraint.get_primitive_pose(index=0)
    logger.info(f"Position constraints applied to link: {position_constraint.link_name}")
    return EqualityPositionError(
        link_name=position_constraint.link_name,
        target_position=target.position,
        target_orientation=target.orientation,
        is_dim_constrained=is_dim_constrained
    )


def build_linear_system_error_model(
    *,
    position_constraint: PositionConstraintMessage,
    config: ConstraintConfig
) -> LinearSystemPositionError:
    """Build an on-a-line position error model.

    The first region pose is the line start and sets the frame, the
    second is the line end.
    """
    logger.info("Parsing linear system position constraint for constrained planning")
    _, is_dim_constrained = _equality_flags(
        position_constraint=position_constraint,
        config=config
    )

    start = position_constraint.get_primitive_pose(index=0)
    end = position_constraint.get_primitive_pose(index=1)
    validate_line(start=start.position, end=end.position)

    logger.info(f"Position constraints applied to link: {position_constraint.link_name}")
    return LinearSystemPositionError(
        link_name=position_constraint.link_name,
        target_position=start.position,
        target_orientation=start.orientation,
        start_position=start.position,
        end_position=end.position,
        is_dim_constrained=is_dim_constrained
    )


def build_orientation_error_model(
    *,
    orientation_constraint: OrientationConstraintMessage,
    config: ConstraintConfig
) -> OrientationError:
    """Build an orientation error model with per-axis tolerances."""
    logger.info("Parsing orientation constraints")
    bounds = orientation_constraint_to_bounds(orientation_constraint=orientation_constraint, config=config)
    for axis, bound in zip(("rx / roll", "ry / pitch", "rz / yaw"), bounds):
        logger.info(f"Parsed {axis} constraints {bound}")

    return OrientationError(
        link_name=orientation_constraint.link_name,
        target_position=(0.0, 0.0, 0.0),
        target_orientation=orientation_constraint.orientation,
        bounds=tuple(bounds),
        small_angle_threshold=config.small_angle_threshold
    )


def select_position_error_model(
    *,
    name: str,
    position_constraint: PositionConstraintMessage,
    config: ConstraintConfig
) -> PoseErrorModel:
    """Pick the position variant from the constraint set name."""
    logger.info(f"Constraint name: {name}")
    if name == EQUALITY_CONSTRAINTS_NAME:
        logger.info("Using equality position constraints.")
        return build_equality_error_model(position_constraint=position_constraint, config=config)
    elif name == LINEAR_SYSTEM_CONSTRAINTS_NAME:
        logger.info("Using position constraints from a linear system.")
        return build_linear_system_error_model(position_constraint=position_constraint, config=config)
    else:
        logger.info("Using bounded position constraints.")
        return build_box_error_model(position_constraint=position_constraint, config=config)


def create_constraint(
    *,
    constraints: ConstraintsMessage,
    num_joints: int,
    config: ConstraintConfig | None = None
) -> ConstraintBuildResult:
    """Create a constraint evaluator from a constraint description.

    Args:
        constraints: Declarative path constraints
        num_joints: Number of joint variables of the planning group
        config: Tolerances (defaults to ConstraintConfig())

    Returns:
        ConstraintBuilt with the evaluator, or ConstraintNotBuilt with the reason

    Raises:
        ValueError: If the selected constraint is missing required fields
            or describes a region that cannot be satisfied numerically
    """
    if config is None:
        config = ConstraintConfig()

    n_position = constraints.n_position_constraints
    n_orientation = constraints.n_orientation_constraints

    if n_position > 1:
        logger.warning("Only a single position constraint is supported. Using the first one.")
    if n_orientation > 1:
        logger.warning("Only a single orientation constraint is supported. Using the first one.")

    if n_position > 0 and n_orientation > 0:
        message = (
            "Combining position and orientation constraints is not supported "
            "for constrained planning."
        )
        logger.error(message)
        return ConstraintNotBuilt(reason="combined_position_orientation", message=message)

    if n_position > 0:
        error_model = select_position_error_model(
            name=constraints.name,
            position_constraint=constraints.position_constraints[0],
            config=config
        )
    elif n_orientation > 0:
        logger.warning("Orientation constraints are experimental and not yet supported by planners.")
        error_model = build_orientation_error_model(
            orientation_constraint=constraints.orientation_constraints[0],
            config=config
        )
    else:
        message = "No path constraints found in planning request."
        logger.error(message)
        return ConstraintNotBuilt(reason="no_constraints", message=message)

    evaluator = ConstraintEvaluator(error_model=error_model, num_joints=num_joints, config=config)
    logger.info(f"Built {evaluator!r}")
    return ConstraintBuilt(evaluator=evaluator)
