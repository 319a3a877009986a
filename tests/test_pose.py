"""Tests for the pose contract and its two representations."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from jax_spatial import (
    AxisAngle,
    EulerAngles,
    ImplicitDualQuaternion,
    IsometryPose,
    PoseType,
    RotationMatrix,
    ScaledAxis,
    UnitQuaternion,
)
from jax_spatial.transforms import quaternion, se3

# Fixtures are stateless factories, safe to reuse across hypothesis examples
fixture_settings = settings(
    deadline=None, max_examples=25, suppress_health_check=[HealthCheck.function_scoped_fixture]
)

Z_AXIS = jnp.array([0.0, 0.0, 1.0])


def z90_pose(pose_cls):
    return pose_cls.from_translation_and_rotation_constructor(
        [1.0, 0.0, 0.0], ScaledAxis(jnp.array([0.0, 0.0, np.pi / 2]))
    )


# Construction and accessors
def test_type_identifier():
    assert ImplicitDualQuaternion.type_identifier() is PoseType.IMPLICIT_DUAL_QUATERNION
    assert IsometryPose.type_identifier() is PoseType.ISOMETRY


def test_identity(pose_cls):
    p = pose_cls.identity()
    np.testing.assert_allclose(p.translation, jnp.zeros(3), atol=0)
    np.testing.assert_allclose(p.rotation.coords, quaternion.identity(), atol=0)


def test_from_translation_and_rotation_accepts_any_rotation(pose_cls, assert_same_rotation):
    """Rotations enter through their scaled axis, whatever their class."""
    scaled_axis = jnp.array([0.3, -0.5, 0.9])
    expected = UnitQuaternion.from_scaled_axis_of_rotation(scaled_axis)

    for rotation in (expected, RotationMatrix.from_scaled_axis_of_rotation(scaled_axis)):
        p = pose_cls.from_translation_and_rotation([1.0, 2.0, 3.0], rotation)
        np.testing.assert_allclose(p.translation, jnp.array([1.0, 2.0, 3.0]))
        assert_same_rotation(p.rotation, expected)


def test_from_constructor_variants(pose_cls, assert_same_rotation):
    """Bare scaled axes, ScaledAxis, AxisAngle and EulerAngles agree."""
    expected = UnitQuaternion.from_scaled_axis_of_rotation(jnp.array([0.0, 0.0, np.pi / 2]))
    constructors = [
        [0.0, 0.0, np.pi / 2],
        ScaledAxis(jnp.array([0.0, 0.0, np.pi / 2])),
        AxisAngle(jnp.array([0.0, 0.0, 2.0]), np.pi / 2),
        EulerAngles(0.0, 0.0, np.pi / 2),
    ]
    for constructor in constructors:
        p = pose_cls.from_translation_and_rotation_constructor([0.0, 0.0, 0.0], constructor)
        assert_same_rotation(p.rotation, expected, atol=1e-12)


def test_translation_shape_is_validated(pose_cls):
    with pytest.raises(ValueError):
        pose_cls.from_translation_and_rotation_constructor([1.0, 2.0], [0.0, 0.0, 0.0])
    p = pose_cls.identity()
    with pytest.raises(ValueError):
        p.update_translation([1.0, 2.0, 3.0, 4.0])


def test_integer_translation_is_promoted(pose_cls):
    p = pose_cls.from_translation_and_rotation_constructor([1, 2, 3], [0, 0, 0])
    assert jnp.issubdtype(p.translation.dtype, jnp.floating)


# In-place updates
def test_update_translation(pose_cls):
    p = pose_cls.identity()
    p.update_translation([4.0, 5.0, 6.0])
    np.testing.assert_allclose(p.translation, jnp.array([4.0, 5.0, 6.0]))
    np.testing.assert_allclose(p.rotation.coords, quaternion.identity(), atol=1e-15)


def test_update_rotation_variants(pose_cls, assert_same_rotation):
    expected = UnitQuaternion.from_scaled_axis_of_rotation(jnp.array([0.2, 0.4, -0.1]))
    p = pose_cls.from_translation_and_rotation_constructor([1.0, 1.0, 1.0], [0.0, 0.0, 0.0])

    p.update_rotation_constructor(ScaledAxis(jnp.array([0.2, 0.4, -0.1])))
    assert_same_rotation(p.rotation, expected)

    p.update_rotation_native(UnitQuaternion.identity())
    assert_same_rotation(p.rotation, UnitQuaternion.identity())

    p.update_rotation_direct(RotationMatrix.from_scaled_axis_of_rotation(jnp.array([0.2, 0.4, -0.1])))
    assert_same_rotation(p.rotation, expected)

    # translation untouched by rotation updates
    np.testing.assert_allclose(p.translation, jnp.ones(3), atol=1e-15)


def test_operations_do_not_mutate(pose_cls, random_pose):
    p = random_pose(pose_cls, jax.random.PRNGKey(0))
    q = random_pose(pose_cls, jax.random.PRNGKey(1))
    before = np.array(p.translation)

    p.mul(q)
    p.inverse()
    p.interpolate(q, 0.5)

    np.testing.assert_array_equal(p.translation, before)


# Group laws
@given(st.integers(min_value=0, max_value=10_000))
@fixture_settings
def test_identity_law(pose_cls, random_pose, assert_same_pose, seed):
    p = random_pose(pose_cls, jax.random.PRNGKey(seed))
    e = pose_cls.identity()

    assert_same_pose(p.mul(e), p)
    assert_same_pose(e.mul(p), p)


@given(st.integers(min_value=0, max_value=10_000))
@fixture_settings
def test_inverse_law(pose_cls, random_pose, assert_same_pose, seed):
    p = random_pose(pose_cls, jax.random.PRNGKey(seed))
    e = pose_cls.identity()

    assert_same_pose(p.mul(p.inverse()), e, atol=1e-9)
    assert_same_pose(p.inverse().mul(p), e, atol=1e-9)


@given(st.integers(min_value=0, max_value=10_000))
@fixture_settings
def test_associativity(pose_cls, random_pose, assert_same_pose, seed):
    k1, k2, k3 = jax.random.split(jax.random.PRNGKey(seed), 3)
    a, b, c = (random_pose(pose_cls, k) for k in (k1, k2, k3))

    assert_same_pose(a.mul(b).mul(c), a.mul(b.mul(c)), atol=1e-9)


def test_matmul_operator(pose_cls, random_pose, assert_same_pose):
    a = random_pose(pose_cls, jax.random.PRNGKey(3))
    b = random_pose(pose_cls, jax.random.PRNGKey(4))
    assert_same_pose(a @ b, a.mul(b), atol=0)


def test_displacement(pose_cls, random_pose, assert_same_pose):
    a = random_pose(pose_cls, jax.random.PRNGKey(5))
    b = random_pose(pose_cls, jax.random.PRNGKey(6))

    d = a.displacement(b)
    assert_same_pose(d, a.inverse().mul(b), atol=0)
    assert_same_pose(a.mul(d), b, atol=1e-9)


# Distance
@given(st.integers(min_value=0, max_value=10_000))
@fixture_settings
def test_distance_to_self_is_zero(pose_cls, random_pose, seed):
    p = random_pose(pose_cls, jax.random.PRNGKey(seed))
    np.testing.assert_allclose(p.dis(p), 0.0, atol=1e-9)


@given(st.integers(min_value=0, max_value=10_000))
@fixture_settings
def test_distance_is_log_of_displacement(pose_cls, random_pose, seed):
    """dis(a, b) is the twist norm of the displacement a⁻¹·b."""
    k1, k2 = jax.random.split(jax.random.PRNGKey(seed))
    a = random_pose(pose_cls, k1)
    b = random_pose(pose_cls, k2)

    d = a.dis(b)
    assert d >= 0.0
    assert d > 1e-6

    disp = a.displacement(b)
    q = disp.rotation.coords
    q = jnp.where(q[0] < 0.0, -q, q)
    np.testing.assert_allclose(d, jnp.linalg.norm(se3.pose_ln(disp.translation, q)), rtol=1e-9)


def test_distance_pure_translation(pose_cls):
    """A translation of length L is at distance L / 2 (half-angle twist)."""
    a = pose_cls.identity()
    b = pose_cls.from_translation_and_rotation_constructor([2.0, 0.0, 0.0], [0.0, 0.0, 0.0])
    np.testing.assert_allclose(a.dis(b), 1.0, atol=1e-12)


def test_distance_pure_rotation(pose_cls):
    """A rotation by θ is at distance θ / 2."""
    a = pose_cls.identity()
    b = pose_cls.from_translation_and_rotation_constructor([0.0, 0.0, 0.0], AxisAngle(Z_AXIS, 0.8))
    np.testing.assert_allclose(a.dis(b), 0.4, atol=1e-12)


def test_distance_ignores_quaternion_sign():
    a = ImplicitDualQuaternion.from_translation_and_rotation_constructor([1.0, 2.0, 3.0], [0.1, 0.2, 0.3])
    b = ImplicitDualQuaternion(a.translation, UnitQuaternion(-a.rotation.coords))
    np.testing.assert_allclose(a.dis(b), 0.0, atol=1e-12)


def test_distance_near_identity(pose_cls):
    """Tiny rotations use the series branch and give a finite, small distance."""
    a = pose_cls.identity()
    b = pose_cls.from_translation_and_rotation_constructor([0.0, 0.0, 0.0], AxisAngle(Z_AXIS, 1e-11))
    d = a.dis(b)
    assert jnp.isfinite(d)
    np.testing.assert_allclose(d, 5e-12, rtol=1e-3, atol=1e-15)


# Interpolation
@given(st.integers(min_value=0, max_value=10_000))
@fixture_settings
def test_interpolation_boundaries(pose_cls, random_pose, assert_same_pose, seed):
    k1, k2 = jax.random.split(jax.random.PRNGKey(seed))
    a = random_pose(pose_cls, k1)
    b = random_pose(pose_cls, k2)

    assert_same_pose(a.interpolate(b, 0.0), a, atol=1e-9)
    assert_same_pose(a.interpolate(b, 1.0), b, atol=1e-9)

    for t in np.linspace(0.0, 1.0, 7):
        r = a.interpolate(b, t).rotation.coords
        np.testing.assert_allclose(jnp.linalg.norm(r), 1.0, atol=1e-12)


def test_interpolation_midpoint(pose_cls, assert_same_rotation):
    a = pose_cls.identity()
    b = pose_cls.from_translation_and_rotation_constructor([2.0, 4.0, -2.0], AxisAngle(Z_AXIS, np.pi / 2))

    mid = a.interpolate(b, 0.5)

    np.testing.assert_allclose(mid.translation, jnp.array([1.0, 2.0, -1.0]), atol=1e-12)
    assert_same_rotation(mid.rotation, UnitQuaternion.from_scaled_axis_of_rotation(Z_AXIS * np.pi / 4))


# Concrete scenario: 90° about Z with a unit step along X
def test_compose_quarter_turn(pose_cls):
    p = z90_pose(pose_cls)
    pp = p.mul(p)

    np.testing.assert_allclose(pp.translation, jnp.array([1.0, 1.0, 0.0]), atol=1e-12)
    np.testing.assert_allclose(pp.rotation.to_matrix(), jnp.diag(jnp.array([-1.0, -1.0, 1.0])), atol=1e-12)
    np.testing.assert_allclose(pp.rotation.angle(), np.pi, atol=1e-7)

    recovered = p.inverse().mul(pp)
    np.testing.assert_allclose(p.dis(recovered), 0.0, atol=1e-12)


# Representations agree
@given(st.integers(min_value=0, max_value=10_000))
@fixture_settings
def test_representations_agree(random_pose, assert_same_pose, seed):
    k1, k2 = jax.random.split(jax.random.PRNGKey(seed))
    a_dq = random_pose(ImplicitDualQuaternion, k1)
    b_dq = random_pose(ImplicitDualQuaternion, k2)
    a_iso = a_dq.convert(IsometryPose)
    b_iso = b_dq.convert(IsometryPose)

    assert_same_pose(a_iso, a_dq)
    assert_same_pose(a_iso.mul(b_iso), a_dq.mul(b_dq), atol=1e-9)
    assert_same_pose(a_iso.inverse(), a_dq.inverse(), atol=1e-9)
    assert_same_pose(a_iso.interpolate(b_iso, 0.3), a_dq.interpolate(b_dq, 0.3), atol=1e-9)
    np.testing.assert_allclose(a_iso.dis(b_iso), a_dq.dis(b_dq), rtol=1e-9, atol=1e-9)


def test_convert_roundtrip(random_pose, assert_same_pose):
    p = random_pose(IsometryPose, jax.random.PRNGKey(11))
    assert_same_pose(p.convert(ImplicitDualQuaternion).convert(IsometryPose), p)


# Lie algebra surface
def test_dual_quaternion_ln_exp(random_pose, assert_same_pose):
    p = random_pose(ImplicitDualQuaternion, jax.random.PRNGKey(12))
    twist = p.ln()
    assert twist.shape == (6,)
    assert_same_pose(ImplicitDualQuaternion.exp(twist), p, atol=1e-9)


def test_dual_quaternion_ln_exp_full_turn(assert_same_pose):
    """Two half turns compose to w = -1."""
    a = ImplicitDualQuaternion.from_translation_and_rotation_constructor([1.0, 0.0, 0.0], [0.0, 0.0, np.pi])
    b = ImplicitDualQuaternion.from_translation_and_rotation_constructor([0.0, 0.0, 1.0], [0.0, 0.0, np.pi])
    p = a.mul(b)
    assert p.rotation.w < 0.0

    q = ImplicitDualQuaternion.exp(p.ln())
    np.testing.assert_allclose(q.translation, jnp.array([1.0, 0.0, 1.0]), atol=1e-12)
    assert_same_pose(q, p, atol=1e-12)


def test_dual_quaternion_mul_keeps_unit_norm():
    drifted = ImplicitDualQuaternion(
        jnp.array([1.0, 2.0, 3.0]),
        UnitQuaternion(quaternion.from_scaled_axis(jnp.array([0.3, -0.1, 0.2])) * (1.0 + 1e-6)),
    )
    p = ImplicitDualQuaternion.identity()
    for _ in range(50):
        p = p.mul(drifted)
    np.testing.assert_allclose(jnp.linalg.norm(p.rotation.coords), 1.0, atol=1e-12)


def test_dual_quaternion_exp_validates_shape():
    with pytest.raises(ValueError):
        ImplicitDualQuaternion.exp(jnp.zeros(5))


# JAX transformations
def test_pose_jit(pose_cls, random_pose):
    a = random_pose(pose_cls, jax.random.PRNGKey(20))
    b = random_pose(pose_cls, jax.random.PRNGKey(21))

    jitted = jax.jit(lambda x, y: x.dis(y))
    np.testing.assert_allclose(jitted(a, b), a.dis(b), rtol=1e-12)

    composed = jax.jit(lambda x, y: x.mul(y))(a, b)
    assert isinstance(composed, pose_cls)
    np.testing.assert_allclose(composed.translation, a.mul(b).translation, atol=1e-12)


def test_distance_gradient_wrt_translation(pose_cls):
    """d dis / d t for a pure translation offset is (t - t0) / (2 |t - t0|)."""
    target = pose_cls.from_translation_and_rotation_constructor([1.0, -2.0, 2.0], [0.0, 0.0, 0.0])

    def f(t):
        return pose_cls.from_translation_and_rotation_constructor(t, [0.0, 0.0, 0.0]).dis(target)

    t = jnp.array([0.0, 0.0, 0.0])
    grad = jax.grad(f)(t)
    diff = t - target.translation
    np.testing.assert_allclose(grad, diff / (2.0 * jnp.linalg.norm(diff)), atol=1e-12)


def test_distance_gradient_wrt_pose(pose_cls, random_pose):
    """Gradients flow through the pose pytree and match forward mode."""
    a = random_pose(pose_cls, jax.random.PRNGKey(30), scale=2.0)
    b = random_pose(pose_cls, jax.random.PRNGKey(31), scale=2.0)

    grad_pose = jax.grad(lambda x: x.dis(b))(a)
    assert isinstance(grad_pose, pose_cls)
    leaves = jax.tree_util.tree_leaves(grad_pose)
    assert all(bool(jnp.all(jnp.isfinite(leaf))) for leaf in leaves)

    def f(t):
        return pose_cls.from_translation_and_rotation(t, a.rotation).dis(b)

    tangent = jnp.array([0.3, -0.2, 0.5])
    _, forward = jax.jvp(f, (a.translation,), (tangent,))
    reverse = jnp.dot(jax.grad(f)(a.translation), tangent)
    np.testing.assert_allclose(forward, reverse, rtol=1e-9, atol=1e-12)


def test_interpolate_vmap(pose_cls):
    a = pose_cls.identity()
    b = pose_cls.from_translation_and_rotation_constructor([4.0, 0.0, 0.0], AxisAngle(Z_AXIS, 1.0))

    ts = jnp.linspace(0.0, 1.0, 5)
    translations = jax.vmap(lambda t: a.interpolate(b, t).translation)(ts)
    np.testing.assert_allclose(translations[:, 0], 4.0 * ts, atol=1e-12)
