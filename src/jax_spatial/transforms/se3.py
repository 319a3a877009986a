"""SE(3) logarithm and exponential maps in JAX.

Poses enter as a translation 3-vector and a unit quaternion (w, x, y, z);
the Lie algebra element is a 6-vector twist [ωx, ωy, ωz, vx, vy, vz] whose
first half is the rotation generator and second half the translation
generator. Both maps are the dual-quaternion closed forms: the rotation
generator has the magnitude of the *half* rotation angle.

Each map has removable singularities at zero rotation. These are replaced by
truncated Taylor series below a threshold, and the closed-form branch is
evaluated with a safe denominator so that ``jax.grad`` through the unused
branch stays finite. All functions are pure and JIT-able.
"""

import jax
import jax.numpy as jnp

from . import quaternion
from ..config import DEFAULT_TOLERANCES, KernelTolerances

Array = jax.Array


def pose_ln(
    translation: Array,
    rotation: Array,
    tolerances: KernelTolerances = DEFAULT_TOLERANCES,
) -> Array:
    """
    SE(3) logarithm: (translation, unit quaternion) to 6D twist.

    The quaternion is first moved to the w >= 0 hemisphere, so q and -q give
    the same twist and the half angle stays in [0, π/2]. ``pose_exp`` of the
    result may therefore return -q for an input q with w < 0.

    Args:
        translation: (3,) translation vector p
        rotation: (4,) unit quaternion q = (w, x, y, z)
        tolerances: small-angle thresholds

    Returns:
        (6,) twist [rotation generator, translation generator]
    """
    rotation = jnp.where(rotation[..., 0:1] < 0.0, -rotation, rotation)
    h = rotation[..., 1:]
    c = rotation[..., 0]

    sq = jnp.sum(h * h, axis=-1)
    nonzero = sq > 0.0
    safe_s = jnp.sqrt(jnp.where(nonzero, sq, 1.0))
    s = jnp.where(nonzero, safe_s, 0.0)
    phi = jnp.arctan2(s, c)

    # a = φ/s, zero for a pure translation
    a = jnp.where(nonzero, phi / safe_s, 0.0)
    rot_gen = a[..., None] * h

    threshold = tolerances.ln_small_angle
    phi_sq = phi * phi

    # μ_r = c·φ/s → 1 - φ²/3 - φ⁴/45
    small_s = s < threshold
    s_den = jnp.where(small_s, 1.0, s)
    mu_r = jnp.where(
        small_s,
        1.0 - phi_sq / 3.0 - phi_sq * phi_sq / 45.0,
        c * phi / s_den,
    )

    # μ_d = (1 - μ_r)/φ² → 1/3 + φ²/45 + 2φ⁴/945
    small_phi = phi < threshold
    phi_sq_den = jnp.where(small_phi, 1.0, phi_sq)
    mu_d = jnp.where(
        small_phi,
        1.0 / 3.0 + phi_sq / 45.0 + 2.0 * phi_sq * phi_sq / 945.0,
        (1.0 - mu_r) / phi_sq_den,
    )

    half_p = translation / 2.0
    gamma = jnp.sum(half_p * rot_gen, axis=-1)

    trans_gen = (
        (mu_d * gamma)[..., None] * rot_gen
        + mu_r[..., None] * half_p
        + jnp.cross(half_p, rot_gen)
    )

    return jnp.concatenate([rot_gen, trans_gen], axis=-1)


def pose_exp(
    twist: Array,
    tolerances: KernelTolerances = DEFAULT_TOLERANCES,
) -> tuple:
    """
    SE(3) exponential: 6D twist to (translation, unit quaternion).

    This is the inverse of :func:`pose_ln`.

    Args:
        twist: (6,) twist [rotation generator w, translation generator v]
        tolerances: small-angle thresholds

    Returns:
        Tuple of (3,) translation and (4,) unit quaternion (w, x, y, z)
    """
    w = twist[..., :3]
    v = twist[..., 3:]

    phi_sq = jnp.sum(w * w, axis=-1)
    nonzero = phi_sq > 0.0
    safe_phi = jnp.sqrt(jnp.where(nonzero, phi_sq, 1.0))
    phi = jnp.where(nonzero, safe_phi, 0.0)

    s = jnp.sin(phi)
    c = jnp.cos(phi)
    gamma = jnp.sum(w * v, axis=-1)

    small = phi < tolerances.exp_small_angle
    phi_den = jnp.where(small, 1.0, phi)

    # μ_r = sin(φ)/φ → 1 - φ²/6 + φ⁴/120
    mu_r = jnp.where(
        small,
        1.0 - phi_sq / 6.0 + phi_sq * phi_sq / 120.0,
        s / phi_den,
    )
    # μ_d = (2 - 2c·μ_r)/φ² → 4/3 - 4φ²/15 + 8φ⁴/315
    mu_d = jnp.where(
        small,
        4.0 / 3.0 - 4.0 * phi_sq / 15.0 + 8.0 * phi_sq * phi_sq / 315.0,
        (2.0 - c * (2.0 * mu_r)) / (phi_den * phi_den),
    )

    h = mu_r[..., None] * w
    rotation = quaternion.normalize(jnp.concatenate([c[..., None], h], axis=-1))

    translation = (
        (2.0 * mu_r)[..., None] * jnp.cross(h, v)
        + (2.0 * c * mu_r)[..., None] * v
        + (mu_d * gamma)[..., None] * w
    )

    return translation, rotation


def twist_norm(twist: Array) -> Array:
    """
    Euclidean norm of a twist, zero-safe for reverse-mode differentiation.

    The derivative at the zero twist is defined as zero.
    """
    sq = jnp.sum(twist * twist, axis=-1)
    nonzero = sq > 0.0
    return jnp.where(nonzero, jnp.sqrt(jnp.where(nonzero, sq, 1.0)), 0.0)


def pose_distance(
    translation: Array,
    rotation: Array,
    tolerances: KernelTolerances = DEFAULT_TOLERANCES,
) -> Array:
    """
    Norm of the SE(3) logarithm of a pose.

    Args:
        translation: (3,) translation vector
        rotation: (4,) unit quaternion (w, x, y, z)
        tolerances: small-angle thresholds

    Returns:
        Scalar distance
    """
    return twist_norm(pose_ln(translation, rotation, tolerances))
