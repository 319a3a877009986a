"""Homogeneous 4x4 rigid transforms.

``Transform3d`` is the storage behind :class:`~jax_spatial.core.isometry.IsometryPose`.
It composes by matrix product and inverts through the rotation block, so the
isometry pose never needs the SE(3) log/exp maps except to measure distance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

import jax
import jax.numpy as jnp
from jax.tree_util import register_pytree_node_class

from . import quaternion

Array = jax.Array
Scalar = Union[float, Array]


@register_pytree_node_class
@dataclass(frozen=True, eq=False)
class Transform3d:
    """Rigid transform [R t; 0 1], optionally batched over leading axes."""
    matrix: Array  # (..., 4, 4)

    @classmethod
    def from_matrix(cls, matrix: Array) -> "Transform3d":
        matrix = jnp.asarray(matrix)
        if matrix.shape[-2:] != (4, 4):
            raise ValueError(f"expected a (..., 4, 4) matrix, got shape {matrix.shape}")
        return cls(matrix)

    @classmethod
    def from_parts(cls, translation: Array, rotation: Array) -> "Transform3d":
        """Build from a (..., 3) translation and a (..., 4) unit quaternion."""
        translation = jnp.asarray(translation)
        rot = quaternion.to_matrix(jnp.asarray(rotation))
        batch_shape = jnp.broadcast_shapes(translation.shape[:-1], rot.shape[:-2])

        m = jnp.broadcast_to(jnp.eye(4, dtype=rot.dtype), batch_shape + (4, 4))
        m = m.at[..., :3, :3].set(jnp.broadcast_to(rot, batch_shape + (3, 3)))
        m = m.at[..., :3, 3].set(jnp.broadcast_to(translation, batch_shape + (3,)))
        return cls(m)

    @classmethod
    def identity(cls, batch_shape: Tuple[int, ...] = (), *, dtype=None) -> "Transform3d":
        return cls(jnp.broadcast_to(jnp.eye(4, dtype=dtype), tuple(batch_shape) + (4, 4)))

    # PyTree boiler-plate
    def tree_flatten(self):
        return (self.matrix,), None

    @classmethod
    def tree_unflatten(cls, aux, children):
        return cls(*children)

    def compose(self, other: "Transform3d") -> "Transform3d":
        """self · other: a point is mapped by ``other`` first."""
        return Transform3d(self.matrix @ other.matrix)

    __matmul__ = compose

    def inverse(self) -> "Transform3d":
        """[Rᵀ  -Rᵀt; 0 1]."""
        r_t = jnp.swapaxes(self.get_rotation_matrix(), -1, -2)
        t = jnp.einsum("...ij,...j->...i", r_t, self.get_position())
        m = self.matrix.at[..., :3, :3].set(r_t)
        return Transform3d(m.at[..., :3, 3].set(-t))

    def interpolate(self, other: "Transform3d", t: Scalar, epsilon: float = 1e-6) -> "Transform3d":
        """Linear blend of translations with slerp of rotations."""
        t = jnp.asarray(t)
        translation = (1.0 - t) * self.get_position() + t * other.get_position()
        rotation = quaternion.slerp(self.get_quaternion(), other.get_quaternion(), t, epsilon)
        return Transform3d.from_parts(translation, rotation)

    def with_position(self, translation: Array) -> "Transform3d":
        return Transform3d(self.matrix.at[..., :3, 3].set(translation))

    def with_quaternion(self, rotation: Array) -> "Transform3d":
        return Transform3d(self.matrix.at[..., :3, :3].set(quaternion.to_matrix(rotation)))

    def get_position(self) -> Array:
        return self.matrix[..., :3, 3]

    def get_rotation_matrix(self) -> Array:
        return self.matrix[..., :3, :3]

    def get_quaternion(self) -> Array:
        return quaternion.from_matrix(self.get_rotation_matrix())
