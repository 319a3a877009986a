"""
JAX Spatial: rigid-body poses for robotics and kinematics.

This library provides interchangeable SE(3) pose representations behind one
contract, with closed-form Lie algebra log/exp maps that stay accurate near
zero rotation and can be jitted and differentiated with JAX.
"""

import jax
jax.config.update("jax_enable_x64", True)

from . import transforms
from . import core
from . import io
from .config import DEFAULT_TOLERANCES, KernelTolerances
from .core import (
    AxisAngle,
    EulerAngles,
    ImplicitDualQuaternion,
    IsometryPose,
    LieAlgebraPose,
    Pose,
    PoseType,
    RotationMatrix,
    ScaledAxis,
    UnitQuaternion,
)

__version__ = "0.1.0"
__all__ = [
    "transforms",
    "core",
    "io",
    "DEFAULT_TOLERANCES",
    "KernelTolerances",
    "AxisAngle",
    "EulerAngles",
    "ImplicitDualQuaternion",
    "IsometryPose",
    "LieAlgebraPose",
    "Pose",
    "PoseType",
    "RotationMatrix",
    "ScaledAxis",
    "UnitQuaternion",
]
