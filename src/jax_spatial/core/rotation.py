"""Rotation values and rotation constructors.

Poses never depend on a concrete rotation class. They consume rotations
through two small protocols:

* :class:`Rotation` – anything that can report its scaled axis of rotation
  (axis * angle). This is how foreign rotations are converted into a pose's
  native rotation type.
* :class:`RotationConstructor` – a deferred recipe that builds an instance of
  whatever rotation class the pose asks for.

Two concrete rotation values are provided, :class:`UnitQuaternion` and
:class:`RotationMatrix`. Both are immutable flax struct dataclasses and
therefore JAX pytrees.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, Type, TypeVar, Union, runtime_checkable

import jax
import jax.numpy as jnp
from flax import struct

from ..transforms import quaternion, so3

Array = jax.Array
Scalar = Union[float, Array]
R = TypeVar("R")


def as_vector3(values: Any) -> Array:
    """Convert a 3-sequence to a floating point (3,) array."""
    v = jnp.asarray(values)
    if v.shape != (3,):
        raise ValueError(f"expected 3 components, got shape {v.shape}")
    if not jnp.issubdtype(v.dtype, jnp.floating):
        v = v.astype(jnp.result_type(float))
    return v


@runtime_checkable
class Rotation(Protocol):
    """Capability every rotation value exposes to the pose layer."""

    def scaled_axis_of_rotation(self) -> Array:
        ...


@runtime_checkable
class RotationConstructor(Protocol):
    """Deferred construction of a rotation of a caller-chosen class."""

    def construct(self, rotation_cls: Type[R]) -> R:
        ...


def construct_rotation(constructor: Any, rotation_cls: Type[R]) -> R:
    """Run a rotation constructor for ``rotation_cls``.

    A bare 3-sequence (list, tuple or array) is read as a scaled axis.
    """
    if isinstance(constructor, RotationConstructor):
        return constructor.construct(rotation_cls)
    return rotation_cls.from_scaled_axis_of_rotation(as_vector3(constructor))


# Rotation values

@struct.dataclass
class UnitQuaternion:
    """Unit quaternion rotation, stored as (w, x, y, z)."""
    coords: Array

    @classmethod
    def identity(cls, dtype=None) -> "UnitQuaternion":
        return cls(quaternion.identity(dtype))

    @classmethod
    def from_coords(cls, coords: Sequence) -> "UnitQuaternion":
        """Wrap (w, x, y, z) components, renormalizing them."""
        coords = jnp.asarray(coords)
        if coords.shape != (4,):
            raise ValueError(f"expected 4 components, got shape {coords.shape}")
        if not jnp.issubdtype(coords.dtype, jnp.floating):
            coords = coords.astype(jnp.result_type(float))
        return cls(quaternion.normalize(coords))

    @classmethod
    def from_scaled_axis_of_rotation(cls, scaled_axis: Any) -> "UnitQuaternion":
        return cls(quaternion.from_scaled_axis(as_vector3(scaled_axis)))

    @classmethod
    def from_rotation(cls, rotation: Rotation) -> "UnitQuaternion":
        """Convert any rotation value through its scaled axis."""
        if isinstance(rotation, UnitQuaternion):
            return rotation
        return cls.from_scaled_axis_of_rotation(rotation.scaled_axis_of_rotation())

    @property
    def w(self) -> Array:
        return self.coords[0]

    @property
    def vector(self) -> Array:
        return self.coords[1:]

    def scaled_axis_of_rotation(self) -> Array:
        return quaternion.to_scaled_axis(self.coords)

    def angle(self) -> Array:
        return jnp.linalg.norm(self.scaled_axis_of_rotation())

    def mul(self, other: "UnitQuaternion") -> "UnitQuaternion":
        return UnitQuaternion(quaternion.multiply(self.coords, other.coords))

    def inverse(self) -> "UnitQuaternion":
        return UnitQuaternion(quaternion.inverse(self.coords))

    def rotate(self, v: Array) -> Array:
        return quaternion.rotate(self.coords, v)

    def slerp(self, other: "UnitQuaternion", t: Scalar, epsilon: float = 1e-6) -> "UnitQuaternion":
        return UnitQuaternion(quaternion.slerp(self.coords, other.coords, t, epsilon))

    def to_matrix(self) -> Array:
        return quaternion.to_matrix(self.coords)

    def __matmul__(self, other: "UnitQuaternion") -> "UnitQuaternion":
        return self.mul(other)


@struct.dataclass
class RotationMatrix:
    """3x3 rotation matrix rotation."""
    matrix: Array

    @classmethod
    def identity(cls, dtype=None) -> "RotationMatrix":
        return cls(jnp.eye(3, dtype=dtype))

    @classmethod
    def from_scaled_axis_of_rotation(cls, scaled_axis: Any) -> "RotationMatrix":
        return cls(so3.exp(as_vector3(scaled_axis)))

    @classmethod
    def from_rotation(cls, rotation: Rotation) -> "RotationMatrix":
        if isinstance(rotation, RotationMatrix):
            return rotation
        if isinstance(rotation, UnitQuaternion):
            return cls(rotation.to_matrix())
        return cls.from_scaled_axis_of_rotation(rotation.scaled_axis_of_rotation())

    def scaled_axis_of_rotation(self) -> Array:
        return so3.log(self.matrix)

    def to_unit_quaternion(self) -> UnitQuaternion:
        return UnitQuaternion(quaternion.from_matrix(self.matrix))

    def mul(self, other: "RotationMatrix") -> "RotationMatrix":
        return RotationMatrix(so3.multiply(self.matrix, other.matrix))

    def inverse(self) -> "RotationMatrix":
        return RotationMatrix(so3.inverse(self.matrix))

    def rotate(self, v: Array) -> Array:
        return so3.apply(self.matrix, v)

    def slerp(self, other: "RotationMatrix", t: Scalar, epsilon: float = 1e-6) -> "RotationMatrix":
        q = self.to_unit_quaternion().slerp(other.to_unit_quaternion(), t, epsilon)
        return RotationMatrix(q.to_matrix())

    def __matmul__(self, other: "RotationMatrix") -> "RotationMatrix":
        return self.mul(other)


# Rotation constructors

@struct.dataclass
class ScaledAxis:
    """Rotation given as axis * angle."""
    vector: Array

    def construct(self, rotation_cls: Type[R]) -> R:
        return rotation_cls.from_scaled_axis_of_rotation(self.vector)


@struct.dataclass
class AxisAngle:
    """Rotation of ``angle`` radians about ``axis`` (normalized on construct)."""
    axis: Array
    angle: Scalar

    def construct(self, rotation_cls: Type[R]) -> R:
        axis = as_vector3(self.axis)
        axis = axis / jnp.linalg.norm(axis)
        return rotation_cls.from_scaled_axis_of_rotation(axis * self.angle)


@struct.dataclass
class EulerAngles:
    """Roll, pitch, yaw in radians, applied in ZYX order (R = Rz·Ry·Rx)."""
    roll: Scalar
    pitch: Scalar
    yaw: Scalar

    def to_quaternion(self) -> Array:
        cr, sr = jnp.cos(self.roll / 2.0), jnp.sin(self.roll / 2.0)
        cp, sp = jnp.cos(self.pitch / 2.0), jnp.sin(self.pitch / 2.0)
        cy, sy = jnp.cos(self.yaw / 2.0), jnp.sin(self.yaw / 2.0)

        return jnp.stack([
            cr * cp * cy + sr * sp * sy,
            sr * cp * cy - cr * sp * sy,
            cr * sp * cy + sr * cp * sy,
            cr * cp * sy - sr * sp * cy,
        ])

    def construct(self, rotation_cls: Type[R]) -> R:
        q = UnitQuaternion.from_coords(self.to_quaternion())
        return rotation_cls.from_rotation(q)
