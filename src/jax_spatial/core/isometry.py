"""Isometry pose backed by a homogeneous transform.

Composition, inversion and interpolation are delegated to
:class:`~jax_spatial.transforms.transform.Transform3d`. The transform has
no distance of its own, so ``dis`` reads the translation and quaternion back
out of the matrix and goes through :func:`~jax_spatial.transforms.se3.pose_ln`.
"""

from __future__ import annotations

from typing import Any

import jax
from jax.tree_util import register_pytree_node_class

from ..config import DEFAULT_TOLERANCES, KernelTolerances
from ..transforms import se3
from ..transforms.transform import Transform3d
from .pose import Pose, PoseType, Scalar
from .rotation import Rotation, UnitQuaternion, as_vector3, construct_rotation

Array = jax.Array


@register_pytree_node_class
class IsometryPose(Pose):
    """SE(3) pose stored as a 4x4 rigid transform."""

    rotation_type = UnitQuaternion

    def __init__(self, transform: Transform3d):
        self._transform = transform

    @classmethod
    def type_identifier(cls) -> PoseType:
        return PoseType.ISOMETRY

    # PyTree boiler-plate
    def tree_flatten(self):
        return (self._transform,), None

    @classmethod
    def tree_unflatten(cls, aux, children):
        (transform,) = children
        return cls(transform)

    @classmethod
    def from_parts(cls, translation: Any, rotation: UnitQuaternion) -> "IsometryPose":
        return cls(Transform3d.from_parts(as_vector3(translation), rotation.coords))

    @classmethod
    def from_translation_and_rotation(cls, translation: Any, rotation: Rotation) -> "IsometryPose":
        rotation = UnitQuaternion.from_scaled_axis_of_rotation(rotation.scaled_axis_of_rotation())
        return cls.from_parts(translation, rotation)

    @classmethod
    def from_translation_and_rotation_constructor(cls, translation: Any, constructor: Any) -> "IsometryPose":
        rotation = construct_rotation(constructor, UnitQuaternion)
        return cls.from_translation_and_rotation(translation, rotation)

    @property
    def transform(self) -> Transform3d:
        return self._transform

    @property
    def translation(self) -> Array:
        return self._transform.get_position()

    @property
    def rotation(self) -> UnitQuaternion:
        return UnitQuaternion(self._transform.get_quaternion())

    def update_translation(self, translation: Any) -> None:
        self._transform = self._transform.with_position(as_vector3(translation))

    def update_rotation_constructor(self, constructor: Any) -> None:
        self.update_rotation_native(construct_rotation(constructor, UnitQuaternion))

    def update_rotation_native(self, rotation: UnitQuaternion) -> None:
        self._transform = self._transform.with_quaternion(rotation.coords)

    def update_rotation_direct(self, rotation: Rotation) -> None:
        self.update_rotation_native(
            UnitQuaternion.from_scaled_axis_of_rotation(rotation.scaled_axis_of_rotation())
        )

    def mul(self, other: "IsometryPose") -> "IsometryPose":
        return IsometryPose(self._transform.compose(other._transform))

    def inverse(self) -> "IsometryPose":
        return IsometryPose(self._transform.inverse())

    def dis(self, other: "IsometryPose", tolerances: KernelTolerances = DEFAULT_TOLERANCES) -> Array:
        disp = self.displacement(other).transform
        return se3.pose_distance(disp.get_position(), disp.get_quaternion(), tolerances)

    def interpolate(
        self,
        to: "IsometryPose",
        t: Scalar,
        tolerances: KernelTolerances = DEFAULT_TOLERANCES,
    ) -> "IsometryPose":
        return IsometryPose(self._transform.interpolate(to._transform, t, tolerances.slerp_small_angle))
