"""Shared fixtures for pose tests."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from jax_spatial import ImplicitDualQuaternion, IsometryPose, UnitQuaternion
from jax_spatial.transforms import quaternion


@pytest.fixture(params=[ImplicitDualQuaternion, IsometryPose], ids=["dual_quaternion", "isometry"])
def pose_cls(request):
    """Each concrete pose representation."""
    return request.param


@pytest.fixture
def random_pose():
    """Factory building a random pose of a given class from a PRNG key.

    Translations are uniform in [-scale, scale]³, rotations uniform on SO(3).
    """

    def make(pose_cls, key, scale=100.0):
        key_t, key_r = jax.random.split(key)
        translation = jax.random.uniform(key_t, (3,), minval=-scale, maxval=scale, dtype=jnp.float64)
        q = jax.random.normal(key_r, (4,), dtype=jnp.float64)
        rotation = UnitQuaternion(q / jnp.linalg.norm(q))
        return pose_cls.from_translation_and_rotation(translation, rotation)

    return make


@pytest.fixture
def assert_same_rotation():
    """Check that two rotations agree, treating q and -q as equal."""

    def check(r1, r2, atol=1e-9):
        np.testing.assert_allclose(
            quaternion.to_matrix(r1.coords), quaternion.to_matrix(r2.coords), rtol=0, atol=atol
        )

    return check


@pytest.fixture
def assert_same_pose(assert_same_rotation):
    """Check that two poses have equal translation and rotation."""

    def check(p1, p2, atol=1e-9):
        np.testing.assert_allclose(p1.translation, p2.translation, rtol=0, atol=atol)
        assert_same_rotation(p1.rotation, p2.rotation, atol=atol)

    return check
