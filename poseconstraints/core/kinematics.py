"""Kinematics providers for constraint evaluation.

Constraint evaluators do not compute forward kinematics themselves.
They ask a KinematicsProvider for:
- pose(joint_values): position and rotation of the constrained link
- geometric_jacobian(joint_values): (6, N) Jacobian, translational rows
  first, rotational rows last, both expressed in the planning frame

Providers hold mutable scratch state (the last joint values and the
transforms computed from them), so one provider must never be used by
two threads at once. KinematicsPool hands every thread its own
provider instance.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Literal, Sequence

import numpy as np
from scipy.spatial.transform import Rotation

logger = logging.getLogger(__name__)

JointType = Literal["revolute", "prismatic"]


@dataclass(frozen=True)
class LinkPose:
    """Pose of a link in the planning frame.

    Attributes:
        position: (3,) link origin
        rotation: (3, 3) link orientation
    """

    position: np.ndarray
    rotation: np.ndarray


class KinematicsProvider(ABC):
    """Forward kinematics and geometric Jacobian for one link of a joint group."""

    @property
    @abstractmethod
    def link_name(self) -> str:
        """Name of the link whose pose is computed."""
        pass

    @property
    @abstractmethod
    def num_joints(self) -> int:
        """Number of joint variables in the group."""
        pass

    @abstractmethod
    def pose(self, *, joint_values: np.ndarray) -> LinkPose:
        """Compute the link pose for the given joint values."""
        pass

    @abstractmethod
    def geometric_jacobian(self, *, joint_values: np.ndarray) -> np.ndarray:
        """Compute the (6, num_joints) geometric Jacobian of the link origin."""
        pass


class SerialChainKinematics(KinematicsProvider):
    """Kinematics of a serial chain of revolute and prismatic joints.

    Each joint i is placed by a fixed transform from the previous joint
    frame, then moves about (revolute) or along (prismatic) its axis
    expressed in its own frame. The constrained link sits at a fixed
    tool transform after the last joint.

    Usage:
        chain = SerialChainKinematics.from_offsets(
            link_name="tool0",
            offsets=[[0, 0, 0.3], [0, 0, 0.4], [0, 0, 0.4]],
            axes=[[0, 0, 1], [0, 1, 0], [0, 1, 0]],
            tool_offset=[0, 0, 0.1],
        )
        pose = chain.pose(joint_values=np.zeros(3))
    """

    def __init__(
        self,
        *,
        link_name: str,
        joint_origins: Sequence[np.ndarray],
        joint_axes: Sequence[np.ndarray],
        joint_types: Sequence[JointType] | None = None,
        tool_transform: np.ndarray | None = None
    ) -> None:
        """Initialize serial chain.

        Args:
            link_name: Name of the link at the end of the chain
            joint_origins: (4, 4) transform from previous joint frame to each joint frame
            joint_axes: (3,) joint axis of each joint in its own frame
            joint_types: "revolute" or "prismatic" per joint (default: all revolute)
            tool_transform: (4, 4) transform from last joint frame to the link
        """
        if len(joint_origins) != len(joint_axes):
            raise ValueError(
                f"Got {len(joint_origins)} joint origins but {len(joint_axes)} joint axes"
            )
        if len(joint_origins) == 0:
            raise ValueError("A serial chain needs at least one joint")

        self._link_name = link_name
        self.joint_origins = [np.asarray(origin, dtype=np.float64) for origin in joint_origins]
        self.joint_axes = []
        for axis in joint_axes:
            axis = np.asarray(axis, dtype=np.float64)
            norm = np.linalg.norm(axis)
            if norm < 1e-12:
                raise ValueError("Joint axis has zero length")
            self.joint_axes.append(axis / norm)

        if joint_types is None:
            joint_types = ["revolute"] * len(joint_origins)
        if len(joint_types) != len(joint_origins):
            raise ValueError(
                f"Got {len(joint_types)} joint types for {len(joint_origins)} joints"
            )
        for joint_type in joint_types:
            if joint_type not in ("revolute", "prismatic"):
                raise ValueError(f"Unknown joint type: {joint_type}")
        self.joint_types: list[JointType] = list(joint_types)

        self.tool_transform = np.eye(4) if tool_transform is None else np.asarray(tool_transform, dtype=np.float64)

        # Scratch state
        self._joint_values: np.ndarray | None = None
        self._pose: LinkPose | None = None
        self._jacobian: np.ndarray | None = None

    @classmethod
    def from_offsets(
        cls,
        *,
        link_name: str,
        offsets: Sequence[Sequence[float]],
        axes: Sequence[Sequence[float]],
        joint_types: Sequence[JointType] | None = None,
        tool_offset: Sequence[float] = (0.0, 0.0, 0.0)
    ) -> "SerialChainKinematics":
        """Build a chain whose joint frames are pure translations of each other.

        Args:
            link_name: Name of the link at the end of the chain
            offsets: (N, 3) translation from previous joint frame to each joint
            axes: (N, 3) joint axes
            joint_types: Joint type per joint (default: all revolute)
            tool_offset: (3,) translation from last joint to the link

        Returns:
            SerialChainKinematics instance
        """
        origins = []
        for offset in offsets:
            origin = np.eye(4)
            origin[:3, 3] = offset
            origins.append(origin)
        tool = np.eye(4)
        tool[:3, 3] = tool_offset
        return cls(
            link_name=link_name,
            joint_origins=origins,
            joint_axes=[np.asarray(axis, dtype=np.float64) for axis in axes],
            joint_types=joint_types,
            tool_transform=tool
        )

    @classmethod
    def planar_arm(cls, *, link_name: str, link_lengths: Sequence[float]) -> "SerialChainKinematics":
        """Planar arm in the xy plane with revolute z joints."""
        offsets = [[0.0, 0.0, 0.0]] + [[length, 0.0, 0.0] for length in link_lengths[:-1]]
        return cls.from_offsets(
            link_name=link_name,
            offsets=offsets,
            axes=[[0.0, 0.0, 1.0]] * len(link_lengths),
            tool_offset=(link_lengths[-1], 0.0, 0.0)
        )

    @property
    def link_name(self) -> str:
        return self._link_name

    @property
    def num_joints(self) -> int:
        return len(self.joint_origins)

    def pose(self, *, joint_values: np.ndarray) -> LinkPose:
        self._update(joint_values=joint_values)
        return self._pose

    def geometric_jacobian(self, *, joint_values: np.ndarray) -> np.ndarray:
        self._update(joint_values=joint_values)
        return self._jacobian.copy()

    def _update(self, *, joint_values: np.ndarray) -> None:
        """Recompute pose and Jacobian unless joint_values match the scratch state."""
        joint_values = np.asarray(joint_values, dtype=np.float64)
        if joint_values.shape != (self.num_joints,):
            raise ValueError(
                f"Expected {self.num_joints} joint values, got shape {joint_values.shape}"
            )
        if self._joint_values is not None and np.array_equal(joint_values, self._joint_values):
            return

        transform = np.eye(4)
        joint_positions = []
        joint_axes_world = []

        for origin, axis, joint_type, value in zip(
            self.joint_origins, self.joint_axes, self.joint_types, joint_values
        ):
            transform = transform @ origin
            joint_positions.append(transform[:3, 3].copy())
            joint_axes_world.append(transform[:3, :3] @ axis)

            motion = np.eye(4)
            if joint_type == "revolute":
                motion[:3, :3] = Rotation.from_rotvec(axis * value).as_matrix()
            else:
                motion[:3, 3] = axis * value
            transform = transform @ motion

        transform = transform @ self.tool_transform
        position = transform[:3, 3].copy()

        jacobian = np.zeros((6, self.num_joints))
        for i, (joint_type, origin, axis) in enumerate(
            zip(self.joint_types, joint_positions, joint_axes_world)
        ):
            if joint_type == "revolute":
                jacobian[:3, i] = np.cross(axis, position - origin)
                jacobian[3:, i] = axis
            else:
                jacobian[:3, i] = axis

        rotation = transform[:3, :3].copy()
        # Shared with every caller until the joint values change
        position.setflags(write=False)
        rotation.setflags(write=False)

        self._joint_values = joint_values.copy()
        self._pose = LinkPose(position=position, rotation=rotation)
        self._jacobian = jacobian


class KinematicsPool:
    """Per-thread kinematics providers.

    Planner workers share one evaluator but each needs its own kinematics
    scratch. The pool creates a provider the first time a thread asks for
    one and returns that same provider to the thread afterwards.

    Usage:
        pool = KinematicsPool(factory=lambda: SerialChainKinematics.planar_arm(...))
        with ThreadPoolExecutor() as executor:
            executor.map(lambda q: evaluator.function(joint_values=q, kinematics=pool), samples)
    """

    def __init__(self, *, factory: Callable[[], KinematicsProvider]) -> None:
        """Initialize pool.

        Args:
            factory: Creates a new, independent provider
        """
        self.factory = factory
        self._local = threading.local()
        self._lock = threading.Lock()
        self._n_created = 0

    def get(self) -> KinematicsProvider:
        """Get the calling thread's provider, creating it on first use."""
        provider = getattr(self._local, "provider", None)
        if provider is None:
            provider = self.factory()
            self._local.provider = provider
            with self._lock:
                self._n_created += 1
            logger.debug(
                f"Created kinematics provider for thread {threading.current_thread().name}"
            )
        return provider

    @property
    def n_created(self) -> int:
        """Number of providers created so far (one per thread that asked)."""
        return self._n_created


def resolve_provider(*, kinematics: KinematicsProvider | KinematicsPool) -> KinematicsProvider:
    """Get a provider from either a provider or a per-thread pool."""
    if isinstance(kinematics, KinematicsPool):
        return kinematics.get()
    return kinematics
