"""Numerical configuration for the pose kernels.

The small-angle thresholds decide where the closed-form SE(3) coefficients
are replaced by their Taylor series. The defaults are fixed values tuned for
float64; ``KernelTolerances.for_dtype`` derives thresholds from a dtype's
machine epsilon instead.
"""

import jax.numpy as jnp
from flax import struct


@struct.dataclass
class KernelTolerances:
    """Small-angle switch points used by ``pose_ln``, ``pose_exp`` and slerp.

    Attributes:
        ln_small_angle: below this, ``pose_ln`` uses series for μ_r (compared
            against |h|) and μ_d (compared against φ).
        exp_small_angle: below this, ``pose_exp`` uses series for both
            coefficients.
        slerp_small_angle: sin(Ω) below which slerp falls back to a
            normalized linear blend.
    """
    ln_small_angle: float = struct.field(pytree_node=False, default=1e-14)
    exp_small_angle: float = struct.field(pytree_node=False, default=1e-8)
    slerp_small_angle: float = struct.field(pytree_node=False, default=1e-6)

    @classmethod
    def for_dtype(cls, dtype) -> "KernelTolerances":
        """Thresholds scaled to the precision of ``dtype``.

        At φ = eps^(1/4) the truncated series error (order φ⁶) and the
        cancellation error of the closed form (order eps/φ²) are both well
        below sqrt(eps).
        """
        eps = float(jnp.finfo(dtype).eps)
        threshold = eps ** 0.25
        return cls(
            ln_small_angle=threshold,
            exp_small_angle=threshold,
            slerp_small_angle=max(threshold, 1e-6),
        )


DEFAULT_TOLERANCES = KernelTolerances()
