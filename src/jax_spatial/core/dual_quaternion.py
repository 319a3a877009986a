"""Implicit dual quaternion pose: translation 3-vector plus unit quaternion.

This is the reference representation. Composition, inversion and
interpolation are written out directly and the SE(3) log/exp maps come from
:mod:`jax_spatial.transforms.se3`.
"""

from __future__ import annotations

from typing import Any

import jax
import jax.numpy as jnp
from jax.tree_util import register_pytree_node_class

from ..config import DEFAULT_TOLERANCES, KernelTolerances
from ..transforms import quaternion, se3
from .pose import LieAlgebraPose, PoseType, Scalar
from .rotation import Rotation, UnitQuaternion, as_vector3, construct_rotation

Array = jax.Array


@register_pytree_node_class
class ImplicitDualQuaternion(LieAlgebraPose):
    """SE(3) pose stored as (translation, unit quaternion).

    Not the full 8-parameter dual quaternion algebra: the pair is treated as
    the dual quaternion it implies only through ``ln`` and ``exp``.
    """

    rotation_type = UnitQuaternion

    def __init__(self, translation: Array, rotation: UnitQuaternion):
        self._translation = translation
        self._rotation = rotation

    @classmethod
    def type_identifier(cls) -> PoseType:
        return PoseType.IMPLICIT_DUAL_QUATERNION

    # PyTree boiler-plate
    def tree_flatten(self):
        return (self._translation, self._rotation), None

    @classmethod
    def tree_unflatten(cls, aux, children):
        return cls(*children)

    @classmethod
    def from_translation_and_rotation(cls, translation: Any, rotation: Rotation) -> "ImplicitDualQuaternion":
        return cls(
            as_vector3(translation),
            UnitQuaternion.from_scaled_axis_of_rotation(rotation.scaled_axis_of_rotation()),
        )

    @classmethod
    def from_translation_and_rotation_constructor(cls, translation: Any, constructor: Any) -> "ImplicitDualQuaternion":
        return cls(as_vector3(translation), construct_rotation(constructor, UnitQuaternion))

    @property
    def translation(self) -> Array:
        return self._translation

    @property
    def rotation(self) -> UnitQuaternion:
        return self._rotation

    def update_translation(self, translation: Any) -> None:
        self._translation = as_vector3(translation)

    def update_rotation_constructor(self, constructor: Any) -> None:
        self._rotation = construct_rotation(constructor, UnitQuaternion)

    def update_rotation_native(self, rotation: UnitQuaternion) -> None:
        self._rotation = rotation

    def update_rotation_direct(self, rotation: Rotation) -> None:
        self._rotation = UnitQuaternion.from_scaled_axis_of_rotation(rotation.scaled_axis_of_rotation())

    def mul(self, other: "ImplicitDualQuaternion") -> "ImplicitDualQuaternion":
        q1 = self._rotation.coords
        q = quaternion.normalize(quaternion.multiply(q1, other._rotation.coords))
        t = quaternion.rotate(q1, other._translation) + self._translation
        return ImplicitDualQuaternion(t, UnitQuaternion(q))

    def inverse(self) -> "ImplicitDualQuaternion":
        q_inv = quaternion.inverse(self._rotation.coords)
        t = quaternion.rotate(q_inv, -self._translation)
        return ImplicitDualQuaternion(t, UnitQuaternion(q_inv))

    def dis(self, other: "ImplicitDualQuaternion", tolerances: KernelTolerances = DEFAULT_TOLERANCES) -> Array:
        disp = self.displacement(other)
        return se3.pose_distance(disp._translation, disp._rotation.coords, tolerances)

    def interpolate(
        self,
        to: "ImplicitDualQuaternion",
        t: Scalar,
        tolerances: KernelTolerances = DEFAULT_TOLERANCES,
    ) -> "ImplicitDualQuaternion":
        t = jnp.asarray(t)
        q = quaternion.slerp(self._rotation.coords, to._rotation.coords, t, tolerances.slerp_small_angle)
        translation = (1.0 - t) * self._translation + t * to._translation
        return ImplicitDualQuaternion(translation, UnitQuaternion(q))

    def ln(self, tolerances: KernelTolerances = DEFAULT_TOLERANCES) -> Array:
        return se3.pose_ln(self._translation, self._rotation.coords, tolerances)

    @classmethod
    def exp(cls, twist: Array, tolerances: KernelTolerances = DEFAULT_TOLERANCES) -> "ImplicitDualQuaternion":
        twist = jnp.asarray(twist)
        if twist.shape != (6,):
            raise ValueError(f"twist must have shape (6,), got {twist.shape}")
        translation, rotation = se3.pose_exp(twist, tolerances)
        return cls(translation, UnitQuaternion(rotation))
