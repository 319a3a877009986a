"""
Array-level transform math in JAX.

This module provides pure, JIT-compilable implementations of:
- unit quaternion algebra (quaternion module)
- SO(3) rotation matrices (so3 module)
- SE(3) logarithm / exponential maps (se3 module)
- homogeneous rigid transforms (Transform3d)
"""

from . import quaternion
from . import so3
from . import se3
from .transform import Transform3d

__all__ = [
    "quaternion",
    "so3",
    "se3",
    "Transform3d",
]
