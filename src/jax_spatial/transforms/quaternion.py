"""Unit quaternion algebra in JAX.

Quaternions are stored as (..., 4) arrays in (w, x, y, z) order. Every
function is branch-free so it can be jitted, vmapped and differentiated.
"""

import jax
import jax.numpy as jnp
from typing import Union

# Type aliases
Array = jax.Array
Scalar = Union[float, Array]


def identity(dtype=None) -> Array:
    """Identity quaternion (1, 0, 0, 0)."""
    return jnp.array([1.0, 0.0, 0.0, 0.0], dtype=dtype)


def normalize(quaternions: Array) -> Array:
    """Normalize quaternions to unit length."""
    return quaternions / jnp.linalg.norm(quaternions, axis=-1, keepdims=True)


def conjugate(q: Array) -> Array:
    """Quaternion conjugate. Equal to the inverse for unit quaternions."""
    return q * jnp.array([1.0, -1.0, -1.0, -1.0], dtype=q.dtype)


def inverse(q: Array) -> Array:
    """Inverse of a unit quaternion."""
    return conjugate(q)


def multiply(q1: Array, q2: Array) -> Array:
    """
    Hamilton product q1 * q2.

    Args:
        q1: (..., 4) left quaternion
        q2: (..., 4) right quaternion

    Returns:
        (..., 4) product, applying q2 first and then q1 when used as rotations
    """
    w1, x1, y1, z1 = jnp.moveaxis(q1, -1, 0)
    w2, x2, y2, z2 = jnp.moveaxis(q2, -1, 0)

    return jnp.stack([
        w1*w2 - x1*x2 - y1*y2 - z1*z2,
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2,
    ], axis=-1)


def rotate(q: Array, v: Array) -> Array:
    """
    Rotate 3-vector(s) by a unit quaternion.

    Uses v' = v + 2w(u x v) + 2u x (u x v), with u the vector part of q.
    """
    w = q[..., 0:1]
    u = q[..., 1:]
    uv = jnp.cross(u, v)
    return v + 2.0 * w * uv + 2.0 * jnp.cross(u, uv)


def _safe_norm(v: Array) -> tuple:
    """Norm of v together with a denominator that is never zero.

    The plain sqrt has an infinite derivative at the origin; routing the zero
    case through a dummy value keeps reverse-mode gradients finite.
    """
    sq = jnp.sum(v * v, axis=-1, keepdims=True)
    nonzero = sq > 0.0
    safe = jnp.sqrt(jnp.where(nonzero, sq, 1.0))
    return jnp.where(nonzero, safe, 0.0), safe


def from_scaled_axis(scaled_axis: Array) -> Array:
    """
    Build unit quaternions from scaled axis (axis * angle) vectors.

    Args:
        scaled_axis: (..., 3) rotation vectors

    Returns:
        (..., 4) unit quaternions in (w, x, y, z) format
    """
    angle, safe_angle = _safe_norm(scaled_axis)
    half = 0.5 * angle

    # sin(θ/2)/θ ≈ 1/2 - θ²/48 + θ⁴/3840 near zero
    small = angle < 1e-8
    k = jnp.where(
        small,
        0.5 - angle**2 / 48.0 + angle**4 / 3840.0,
        jnp.sin(half) / safe_angle,
    )
    return jnp.concatenate([jnp.cos(half), k * scaled_axis], axis=-1)


def to_scaled_axis(q: Array) -> Array:
    """
    Extract the scaled axis (axis * angle) of unit quaternions.

    The returned angle lies in [0, π]: q and -q give the same vector. At
    exactly π the axis sign follows the vector part of q.

    Args:
        q: (..., 4) unit quaternions in (w, x, y, z) format

    Returns:
        (..., 3) rotation vectors
    """
    sign = jnp.where(q[..., 0:1] < 0.0, -1.0, 1.0)
    w = sign * q[..., 0:1]
    v = sign * q[..., 1:]

    s, safe_s = _safe_norm(v)
    angle = 2.0 * jnp.arctan2(s, w)

    # 2·atan2(s, w)/s → 2/w as s → 0
    small = s < 1e-8
    k = jnp.where(small, 2.0 / jnp.where(small, w, 1.0), angle / safe_s)
    return k * v


def slerp(q1: Array, q2: Array, t: Scalar, epsilon: float = 1e-6) -> Array:
    """
    Spherical linear interpolation along the shortest arc.

    When the two quaternions lie in opposite hemispheres q2 is negated
    first, so t=1 may return -q2 (the same rotation). Nearly parallel inputs
    fall back to normalized linear interpolation.

    Args:
        q1: (..., 4) start quaternion
        q2: (..., 4) end quaternion
        t: interpolation parameter, 0 gives q1 and 1 gives q2
        epsilon: sin(Ω) below which linear interpolation is used

    Returns:
        (..., 4) interpolated unit quaternion
    """
    t = jnp.asarray(t)[..., None]
    dot = jnp.sum(q1 * q2, axis=-1, keepdims=True)
    q2 = jnp.where(dot < 0.0, -q2, q2)
    dot = jnp.clip(jnp.abs(dot), 0.0, 1.0)

    # arccos is not differentiable at 1, keep the linear branch away from it
    parallel = (1.0 - dot * dot) < epsilon**2
    omega = jnp.arccos(jnp.where(parallel, 0.0, dot))
    safe_sin = jnp.where(parallel, 1.0, jnp.sin(omega))

    a = jnp.where(parallel, 1.0 - t, jnp.sin((1.0 - t) * omega) / safe_sin)
    b = jnp.where(parallel, t, jnp.sin(t * omega) / safe_sin)

    return normalize(a * q1 + b * q2)


def to_matrix(quaternions: Array) -> Array:
    """
    Convert quaternions to rotation matrices.

    Args:
        quaternions: (..., 4) array of quaternions in (w, x, y, z) format

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    quaternions = normalize(quaternions)

    w, x, y, z = jnp.moveaxis(quaternions, -1, 0)

    xx, yy, zz = x*x, y*y, z*z
    wx, wy, wz = w*x, w*y, w*z
    xy, xz, yz = x*y, x*z, y*z

    return jnp.stack([
        jnp.stack([1 - 2*(yy + zz), 2*(xy - wz), 2*(xz + wy)], axis=-1),
        jnp.stack([2*(xy + wz), 1 - 2*(xx + zz), 2*(yz - wx)], axis=-1),
        jnp.stack([2*(xz - wy), 2*(yz + wx), 1 - 2*(xx + yy)], axis=-1)
    ], axis=-2)


def from_matrix(matrix: Array) -> Array:
    """
    Convert rotation matrices to unit quaternions with w >= 0.

    Evaluates all four Shepperd candidates and selects by mask, which keeps
    the conversion batch-safe and JIT-friendly.

    Args:
        matrix: (..., 3, 3) array of rotation matrices

    Returns:
        (..., 4) array of quaternions in (w, x, y, z) format
    """
    m00, m01, m02 = matrix[..., 0, 0], matrix[..., 0, 1], matrix[..., 0, 2]
    m10, m11, m12 = matrix[..., 1, 0], matrix[..., 1, 1], matrix[..., 1, 2]
    m20, m21, m22 = matrix[..., 2, 0], matrix[..., 2, 1], matrix[..., 2, 2]

    trace = m00 + m11 + m22
    eps = jnp.finfo(matrix.dtype).eps

    candidates = [
        (jnp.stack([trace + 1.0, m21 - m12, m02 - m20, m10 - m01], axis=-1),
         1.0 + trace),
        (jnp.stack([m21 - m12, m00 - m11 - m22 + 1.0, m01 + m10, m02 + m20], axis=-1),
         1.0 + m00 - m11 - m22),
        (jnp.stack([m02 - m20, m01 + m10, m11 - m00 - m22 + 1.0, m12 + m21], axis=-1),
         1.0 + m11 - m00 - m22),
        (jnp.stack([m10 - m01, m02 + m20, m12 + m21, m22 - m00 - m11 + 1.0], axis=-1),
         1.0 + m22 - m00 - m11),
    ]
    scaled = [
        0.5 * q / jnp.sqrt(jnp.maximum(d, eps))[..., None] for q, d in candidates
    ]

    mask0 = trace > 0
    mask1 = (~mask0) & (m00 > m11) & (m00 > m22)
    mask2 = (~mask0) & (~mask1) & (m11 > m22)
    mask3 = (~mask0) & (~mask1) & (~mask2)

    quaternion = sum(
        jnp.where(mask[..., None], q, 0.0)
        for mask, q in zip((mask0, mask1, mask2, mask3), scaled)
    )

    quaternion = jnp.where(quaternion[..., 0:1] < 0, -quaternion, quaternion)
    return normalize(quaternion)
