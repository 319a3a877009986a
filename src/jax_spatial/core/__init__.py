"""Pose and rotation types for JAX Spatial.

This module provides the pose contract, its two concrete representations,
and the rotation values and constructors they consume.
"""

from .pose import LieAlgebraPose, Pose, PoseType
from .dual_quaternion import ImplicitDualQuaternion
from .isometry import IsometryPose
from .rotation import (
    AxisAngle,
    EulerAngles,
    Rotation,
    RotationConstructor,
    RotationMatrix,
    ScaledAxis,
    UnitQuaternion,
    construct_rotation,
)

__all__ = [
    "LieAlgebraPose",
    "Pose",
    "PoseType",
    "ImplicitDualQuaternion",
    "IsometryPose",
    "AxisAngle",
    "EulerAngles",
    "Rotation",
    "RotationConstructor",
    "RotationMatrix",
    "ScaledAxis",
    "UnitQuaternion",
    "construct_rotation",
]
