"""Rotation matrices: Rodrigues exponential, logarithm and group operations.

Used by :class:`~jax_spatial.core.rotation.RotationMatrix`. Matrices have
shape (..., 3, 3) and every function broadcasts over leading dimensions.
"""

import jax
import jax.numpy as jnp

from . import quaternion

Array = jax.Array


def skew_symmetric(v: Array) -> Array:
    """
    Cross-product matrix [v]× such that [v]× @ w == cross(v, w).

    Args:
        v: (..., 3) vector

    Returns:
        (..., 3, 3) skew-symmetric matrix
    """
    x, y, z = v[..., 0], v[..., 1], v[..., 2]
    o = jnp.zeros_like(x)
    rows = [
        jnp.stack([o, -z, y], axis=-1),
        jnp.stack([z, o, -x], axis=-1),
        jnp.stack([-y, x, o], axis=-1),
    ]
    return jnp.stack(rows, axis=-2)


def exp(scaled_axis: Array) -> Array:
    """
    Scaled axis to rotation matrix.

    Rodrigues' formula R = I + A·K + B·K² with K = [ω]×,
    A = sin(θ)/θ and B = (1 - cos(θ))/θ².

    Args:
        scaled_axis: (..., 3) axis * angle

    Returns:
        (..., 3, 3) rotation matrix
    """
    angle_sq = jnp.sum(scaled_axis * scaled_axis, axis=-1)[..., None, None]
    small = angle_sq < 1e-16
    safe_sq = jnp.where(small, 1.0, angle_sq)
    safe_angle = jnp.sqrt(safe_sq)

    A = jnp.where(small, 1.0 - angle_sq / 6.0, jnp.sin(safe_angle) / safe_angle)
    B = jnp.where(small, 0.5 - angle_sq / 24.0, (1.0 - jnp.cos(safe_angle)) / safe_sq)

    K = skew_symmetric(scaled_axis)
    I = jnp.broadcast_to(jnp.eye(3, dtype=K.dtype), K.shape)

    return I + A * K + B * jnp.matmul(K, K)


def log(R: Array) -> Array:
    """
    Rotation matrix to scaled axis, angle in [0, π].

    Goes through the quaternion so the near-π case needs no eigenvector
    search.
    """
    return quaternion.to_scaled_axis(quaternion.from_matrix(R))


def multiply(R1: Array, R2: Array) -> Array:
    """R1 @ R2: apply R2 first."""
    return R1 @ R2


def inverse(R: Array) -> Array:
    return jnp.swapaxes(R, -1, -2)


def apply(R: Array, v: Array) -> Array:
    """Rotate (..., 3) vectors."""
    return jnp.einsum("...ij,...j->...i", R, v)
