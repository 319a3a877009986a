"""The pose contract shared by every SE(3) representation.

A pose is a translation plus a rotation. Concrete representations subclass
:class:`Pose` and register themselves as JAX pytrees so that every operation
can run under ``jit``, ``vmap`` and ``grad``; the scalar type is whatever the
underlying arrays hold (float32, float64 or an autodiff tracer).

Composition uses right-multiplication semantics: ``a.mul(b)`` places ``b``'s
frame inside ``a``'s frame, so the result maps a point from ``b``'s frame
first through ``b`` and then through ``a``.
"""

from __future__ import annotations

import abc
import enum
from typing import Any, ClassVar, Type, TypeVar, Union

import jax

from ..config import DEFAULT_TOLERANCES, KernelTolerances
from .rotation import Rotation

Array = jax.Array
Scalar = Union[float, Array]
P = TypeVar("P", bound="Pose")


class PoseType(enum.Enum):
    """Identifies the concrete representation behind a pose."""

    IMPLICIT_DUAL_QUATERNION = "implicit_dual_quaternion"
    ISOMETRY = "isometry"


class Pose(abc.ABC):
    """Capability interface for SE(3) pose representations.

    Subclasses set ``rotation_type`` to their native rotation class. That
    class must provide ``from_scaled_axis_of_rotation`` and
    ``from_rotation`` classmethods.
    """

    rotation_type: ClassVar[type]

    @classmethod
    @abc.abstractmethod
    def type_identifier(cls) -> PoseType:
        ...

    # Construction
    @classmethod
    def identity(cls: Type[P]) -> P:
        """Zero translation, identity rotation."""
        return cls.from_translation_and_rotation_constructor([0.0, 0.0, 0.0], [0.0, 0.0, 0.0])

    @classmethod
    @abc.abstractmethod
    def from_translation_and_rotation(cls: Type[P], translation: Any, rotation: Rotation) -> P:
        """Pose from a 3-vector and any value exposing its scaled axis."""

    @classmethod
    @abc.abstractmethod
    def from_translation_and_rotation_constructor(cls: Type[P], translation: Any, constructor: Any) -> P:
        """Pose from a 3-vector and a rotation constructor (or a bare scaled axis)."""

    # Accessors
    @property
    @abc.abstractmethod
    def translation(self) -> Array:
        ...

    @property
    @abc.abstractmethod
    def rotation(self) -> Any:
        ...

    # In-place updates
    @abc.abstractmethod
    def update_translation(self, translation: Any) -> None:
        ...

    @abc.abstractmethod
    def update_rotation_constructor(self, constructor: Any) -> None:
        ...

    @abc.abstractmethod
    def update_rotation_native(self, rotation: Any) -> None:
        ...

    @abc.abstractmethod
    def update_rotation_direct(self, rotation: Rotation) -> None:
        """Replace the rotation with a foreign rotation via its scaled axis."""

    # Group operations
    @abc.abstractmethod
    def mul(self: P, other: P) -> P:
        ...

    @abc.abstractmethod
    def inverse(self: P) -> P:
        ...

    def displacement(self: P, other: P) -> P:
        """Relative transform taking ``self`` to ``other``: self⁻¹ · other."""
        return self.inverse().mul(other)

    @abc.abstractmethod
    def dis(self: P, other: P, tolerances: KernelTolerances = DEFAULT_TOLERANCES) -> Array:
        """Norm of the logarithm of ``self.displacement(other)``."""

    @abc.abstractmethod
    def interpolate(self: P, to: P, t: Scalar, tolerances: KernelTolerances = DEFAULT_TOLERANCES) -> P:
        """Slerp on rotation, linear on translation; t=0 is self, t=1 is ``to``."""

    def convert(self, pose_cls: Type[P]) -> P:
        """The same transform in another representation."""
        return pose_cls.from_translation_and_rotation(self.translation, self.rotation)

    def __matmul__(self: P, other: P) -> P:
        return self.mul(other)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(translation={self.translation!r}, "
            f"rotation={self.rotation.scaled_axis_of_rotation()!r})"
        )


class LieAlgebraPose(Pose):
    """A pose that exposes its SE(3) logarithm and exponential maps."""

    @abc.abstractmethod
    def ln(self, tolerances: KernelTolerances = DEFAULT_TOLERANCES) -> Array:
        """6D twist [rotation generator, translation generator]."""

    @classmethod
    @abc.abstractmethod
    def exp(cls: Type[P], twist: Array, tolerances: KernelTolerances = DEFAULT_TOLERANCES) -> P:
        ...
