"""
Tests for MLS weight kernels.
"""

import jax.numpy as jnp
import pytest

from mls_interp.exceptions import InvalidParameter
from mls_interp.kernels import (
    KernelType,
    WeightKernel,
    apply_weight,
    is_compact,
    make_kernel,
    support_radius,
    weight,
    weight_cubic_spline,
    weight_exponential,
    weight_gaussian,
    weight_inverse_distance,
    weight_linear,
    weight_polynomial,
    weight_power,
    weight_quartic,
)

COMPACT_KERNELS = [
    make_kernel("linear", support=1.5),
    make_kernel("cubic_spline", support=0.5),
    make_kernel("quartic", support=2.0),
    make_kernel("power", support=1.0, exponent=3),
    make_kernel("polynomial", support=0.8, exponent=2),
    make_kernel("polynomial", support=0.8, exponent=0),
]


class TestKernelFormulas:
    """Test individual kernel formulas."""

    def test_linear_values(self):
        """Linear kernel: 1 - q inside the support."""
        xi = jnp.array([0.0, 0.5, 1.0, 1.5])
        result = weight_linear(xi, 2.0)
        assert jnp.allclose(result, jnp.array([1.0, 0.75, 0.5, 0.25]))

    def test_gaussian_values(self):
        """Gaussian kernel: exp(-q²)."""
        xi = jnp.array([0.0, 1.0, 2.0])
        result = weight_gaussian(xi, 2.0)
        assert jnp.allclose(result, jnp.exp(-jnp.array([0.0, 0.25, 1.0])))

    def test_cubic_spline_at_zero(self):
        """Cubic spline should be 2/3 at xi=0."""
        result = weight_cubic_spline(jnp.array([0.0]), 1.0)
        assert jnp.allclose(result, 2.0 / 3.0)

    def test_cubic_spline_continuous_at_q1(self):
        """Both branches of the cubic spline meet at q=1 with value 1/6."""
        d = 1.0
        below = weight_cubic_spline(jnp.array([1.0 - 1e-12]), d)
        at = weight_cubic_spline(jnp.array([1.0]), d)
        assert jnp.allclose(at, 1.0 / 6.0)
        assert jnp.allclose(below, at, atol=1e-10)

    def test_cubic_spline_outer_branch(self):
        """Cubic spline between d and 2d is (2 - q)³ / 6."""
        result = weight_cubic_spline(jnp.array([1.5]), 1.0)
        assert jnp.allclose(result, 0.5**3 / 6.0)

    def test_quartic_at_zero(self):
        """Quartic (Wendland) kernel should be 1 at xi=0."""
        result = weight_quartic(jnp.array([0.0]), 1.0)
        assert jnp.allclose(result, 1.0)

    def test_quartic_value(self):
        """Quartic kernel at q=0.5: 0.5⁴ * 3."""
        result = weight_quartic(jnp.array([0.5]), 1.0)
        assert jnp.allclose(result, 0.0625 * 3.0)

    def test_exponential_values(self):
        """Exponential kernel: exp(-xi/d)."""
        xi = jnp.array([0.0, 1.0, 3.0])
        result = weight_exponential(xi, 2.0)
        assert jnp.allclose(result, jnp.exp(-xi / 2.0))

    def test_power_at_zero(self):
        """Power kernel should be 1 at xi=0 for any exponent."""
        for p in [1, 2, 5]:
            assert jnp.allclose(weight_power(jnp.array([0.0]), 1.0, p), 1.0)

    def test_polynomial_at_zero(self):
        """Polynomial kernel should be 1 at xi=0 for any degree."""
        for degree in [0, 1, 3]:
            assert jnp.allclose(weight_polynomial(jnp.array([0.0]), 1.0, degree), 1.0)

    def test_polynomial_degree_zero_is_indicator(self):
        """Degree 0 polynomial kernel is 1 inside the support and 0 outside."""
        xi = jnp.array([0.0, 0.5, 0.99, 1.0, 2.0])
        result = weight_polynomial(xi, 1.0, 0)
        assert jnp.array_equal(result, jnp.array([1.0, 1.0, 1.0, 0.0, 0.0]))

    def test_inverse_distance_coincident(self):
        """Coincident query gets weight 1/epsilon, not infinity."""
        result = weight_inverse_distance(jnp.array([0.0]), 1e-6)
        assert jnp.isfinite(result[0])
        assert jnp.allclose(result, 1e6)

    def test_inverse_distance_values(self):
        """Inverse distance kernel: 1 / (xi + eps)."""
        xi = jnp.array([1.0, 4.0])
        result = weight_inverse_distance(xi, 1e-6)
        assert jnp.allclose(result, 1.0 / (xi + 1e-6))


class TestCompactSupport:
    """Test exact zeros and monotonicity of compact kernels."""

    @pytest.mark.parametrize("kernel", COMPACT_KERNELS, ids=lambda k: k.kind.value)
    def test_exact_zero_outside_support(self, kernel):
        """Weight is exactly 0 at and beyond the support radius."""
        r = support_radius(kernel)
        xi = jnp.array([r, r * 1.0001, r * 2.0, r * 100.0])
        result = apply_weight(xi, kernel)
        assert jnp.all(result == 0.0)

    @pytest.mark.parametrize("kernel", COMPACT_KERNELS, ids=lambda k: k.kind.value)
    def test_non_increasing_inside_support(self, kernel):
        """Weight does not increase with distance on [0, r)."""
        r = support_radius(kernel)
        xi = jnp.linspace(0.0, r, 200, endpoint=False)
        result = apply_weight(xi, kernel)
        assert jnp.all(result[:-1] >= result[1:])

    @pytest.mark.parametrize("kernel", COMPACT_KERNELS, ids=lambda k: k.kind.value)
    def test_positive_inside_support(self, kernel):
        """Weight is strictly positive inside the support."""
        r = support_radius(kernel)
        xi = jnp.linspace(0.0, r, 50, endpoint=False)
        assert jnp.all(apply_weight(xi, kernel) > 0.0)

    @pytest.mark.parametrize(
        "kernel",
        [k for k in COMPACT_KERNELS if k.kind != KernelType.POLYNOMIAL or k.exponent > 0],
        ids=lambda k: k.kind.value,
    )
    def test_continuous_at_support(self, kernel):
        """Weight approaches 0 at the support radius."""
        r = support_radius(kernel)
        result = apply_weight(jnp.array([r * (1.0 - 1e-9)]), kernel)
        assert jnp.allclose(result, 0.0, atol=1e-8)

    def test_zero_keeps_float32(self):
        """Out-of-support zeros keep the precision of the distances."""
        xi = jnp.array([0.5, 3.0], dtype=jnp.float32)
        for kernel in COMPACT_KERNELS:
            assert apply_weight(xi, kernel).dtype == jnp.float32

    def test_support_radius(self):
        """Support radius is d, or 2d for the cubic spline."""
        assert support_radius(make_kernel("linear", support=1.5)) == 1.5
        assert support_radius(make_kernel("cubic_spline", support=1.5)) == 3.0
        assert support_radius(make_kernel("gaussian", support=1.5)) == float("inf")

    def test_is_compact(self):
        """Gaussian, exponential and inverse distance never vanish."""
        assert is_compact(make_kernel("quartic"))
        assert not is_compact(make_kernel("gaussian"))
        assert not is_compact(make_kernel("exponential"))
        assert not is_compact(make_kernel("inverse_distance"))


class TestNonCompactKernels:
    """Test kernels with global support."""

    @pytest.mark.parametrize("name", ["gaussian", "exponential", "inverse_distance"])
    def test_positive_far_away(self, name):
        """Weight is positive at moderate distances."""
        kernel = make_kernel(name, support=1.0)
        result = apply_weight(jnp.array([0.0, 1.0, 5.0]), kernel)
        assert jnp.all(result > 0.0)

    @pytest.mark.parametrize("name", ["gaussian", "exponential", "inverse_distance"])
    def test_decay(self, name):
        """Weight decreases monotonically with distance."""
        kernel = make_kernel(name, support=1.0)
        result = apply_weight(jnp.array([0.0, 0.5, 1.0, 2.0, 4.0]), kernel)
        assert jnp.all(result[:-1] > result[1:])


class TestMakeKernel:
    """Test kernel configuration and validation."""

    def test_returns_weight_kernel(self):
        """make_kernel should return a WeightKernel with the enum kind."""
        kernel = make_kernel("power", support=2.0, exponent=3)
        assert isinstance(kernel, WeightKernel)
        assert kernel.kind == KernelType.POWER
        assert kernel.support == 2.0
        assert kernel.exponent == 3

    @pytest.mark.parametrize("support", [0.0, -1.0, float("nan")])
    @pytest.mark.parametrize(
        "name", ["linear", "gaussian", "cubic_spline", "quartic", "exponential", "power", "polynomial"]
    )
    def test_non_positive_support_raises(self, name, support):
        """Support radius / decay parameter must be positive."""
        with pytest.raises(InvalidParameter, match="must be positive"):
            make_kernel(name, support=support)

    def test_power_exponent_must_be_positive(self):
        """Power kernel rejects p <= 0."""
        with pytest.raises(InvalidParameter, match="Power parameter"):
            make_kernel("power", exponent=0)

    def test_polynomial_degree_must_be_non_negative(self):
        """Polynomial kernel rejects negative degree but accepts 0."""
        with pytest.raises(InvalidParameter, match="non-negative"):
            make_kernel("polynomial", exponent=-1)
        assert make_kernel("polynomial", exponent=0).exponent == 0

    def test_non_integer_exponent_raises(self):
        """Exponents must be integers."""
        with pytest.raises(InvalidParameter, match="integer"):
            make_kernel("power", exponent=1.5)

    def test_epsilon_must_be_positive(self):
        """Inverse distance kernel rejects epsilon <= 0."""
        with pytest.raises(InvalidParameter, match="epsilon"):
            make_kernel("inverse_distance", epsilon=0.0)

    def test_unknown_kernel_raises(self):
        """Unknown kernel names raise InvalidParameter."""
        with pytest.raises(InvalidParameter, match="Unknown kernel"):
            make_kernel("invalid_kernel")

    def test_invalid_parameter_is_value_error(self):
        """InvalidParameter can be caught as ValueError."""
        with pytest.raises(ValueError):
            make_kernel("linear", support=-1.0)


class TestWeight:
    """Test the checked weight() entry point."""

    def test_dispatch_matches_formula(self):
        """weight() should dispatch to the configured kernel."""
        kernel = make_kernel("quartic", support=2.0)
        xi = jnp.array([0.0, 0.5, 1.0, 3.0])
        assert jnp.allclose(weight(xi, kernel), weight_quartic(xi, 2.0))

    def test_scalar_input(self):
        """weight() accepts a bare float."""
        kernel = make_kernel("linear", support=2.0)
        assert jnp.allclose(weight(1.0, kernel), 0.5)

    def test_integer_input(self):
        """Integer distances are promoted to floating point."""
        kernel = make_kernel("linear", support=4.0)
        result = weight(1, kernel)
        assert jnp.issubdtype(result.dtype, jnp.floating)
        assert jnp.allclose(result, 0.75)

    def test_negative_distance_raises(self):
        """Negative distances are a contract violation."""
        kernel = make_kernel("gaussian")
        with pytest.raises(ValueError, match="non-negative"):
            weight(jnp.array([0.5, -0.1]), kernel)


class TestKernelType:
    """Test KernelType enum."""

    def test_enum_values(self):
        """Test that enum values are correct."""
        assert KernelType.LINEAR == "linear"
        assert KernelType.CUBIC_SPLINE == "cubic_spline"
        assert KernelType.INVERSE_DISTANCE == "inverse_distance"

    def test_all_kernels_dispatch(self):
        """Every enum member is handled by the dispatcher."""
        xi = jnp.array([0.0, 0.5])
        for kind in KernelType:
            result = apply_weight(xi, make_kernel(kind))
            assert result.shape == xi.shape
            assert jnp.all(jnp.isfinite(result))
