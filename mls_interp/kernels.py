"""
MLS weight kernels and dispatcher.

Every kernel maps a non-negative distance xi to a non-negative weight.
With q = xi / d:

- Linear:           w = 1 - q                          (q < 1, else 0)
- Gaussian:         w = exp(-q²)
- Cubic spline:     w = 2/3 - q² + q³/2                (q < 1)
                    w = (2 - q)³ / 6                   (1 <= q < 2, else 0)
- Quartic Wendland: w = (1 - q)⁴ (1 + 4q)              (q < 1, else 0)
- Exponential:      w = exp(-xi / d)
- Power:            w = (1 - q)^p                      (q < 1, else 0)
- Inverse distance: w = 1 / (xi + eps)
- Polynomial:       w = (1 - q)^degree                 (q < 1, else 0)

Compactly supported kernels return an exact zero outside their support; the
engine relies on it to select the samples that take part in a local fit.
"""

import math
from enum import Enum
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from .exceptions import InvalidParameter


class KernelType(str, Enum):
    """Weight kernel types."""

    LINEAR = "linear"
    GAUSSIAN = "gaussian"
    CUBIC_SPLINE = "cubic_spline"
    QUARTIC = "quartic"
    EXPONENTIAL = "exponential"
    POWER = "power"
    INVERSE_DISTANCE = "inverse_distance"
    POLYNOMIAL = "polynomial"


# Support threshold as a multiple of d; None for kernels that never vanish
KERNEL_SUPPORT_FACTOR = {
    KernelType.LINEAR: 1.0,
    KernelType.GAUSSIAN: None,
    KernelType.CUBIC_SPLINE: 2.0,
    KernelType.QUARTIC: 1.0,
    KernelType.EXPONENTIAL: None,
    KernelType.POWER: 1.0,
    KernelType.INVERSE_DISTANCE: None,
    KernelType.POLYNOMIAL: 1.0,
}


class WeightKernel(NamedTuple):
    """Immutable kernel configuration. Build it with make_kernel()."""

    kind: KernelType = KernelType.QUARTIC
    support: float = 1.0  # Support radius / decay parameter d
    exponent: int = 2  # p for POWER, degree for POLYNOMIAL
    epsilon: float = 1e-6  # Regularizer for INVERSE_DISTANCE


def make_kernel(
    kind: str | KernelType = KernelType.QUARTIC,
    support: float = 1.0,
    exponent: int = 2,
    epsilon: float = 1e-6,
) -> WeightKernel:
    """
    Build a validated weight kernel configuration.

    Parameters
    ----------
    kind : str or KernelType
        Kernel name, e.g. 'linear', 'gaussian', 'cubic_spline'.
    support : float
        Support radius (compact kernels) or decay parameter (gaussian,
        exponential). Must be positive. Ignored by 'inverse_distance'.
    exponent : int
        Exponent p of the 'power' kernel (must be > 0) or degree of the
        'polynomial' kernel (must be >= 0). Ignored by other kernels.
    epsilon : float
        Regularizer of the 'inverse_distance' kernel. Must be positive; a
        query coinciding with a sample gets weight 1/epsilon.

    Returns
    -------
    WeightKernel
        Kernel configuration.

    Raises
    ------
    InvalidParameter
        If the kernel name is unknown or a parameter is out of range.
    """
    try:
        kind = KernelType(kind)
    except ValueError:
        raise InvalidParameter(f"Unknown kernel type: {kind!r}") from None

    if kind == KernelType.INVERSE_DISTANCE:
        if not epsilon > 0:
            raise InvalidParameter(f"Regularizer epsilon must be positive, got {epsilon}")
    elif not support > 0:
        name = "Decay parameter" if KERNEL_SUPPORT_FACTOR[kind] is None else "Support radius"
        raise InvalidParameter(f"{name} d must be positive, got {support}")

    if kind in (KernelType.POWER, KernelType.POLYNOMIAL):
        if isinstance(exponent, bool) or int(exponent) != exponent:
            raise InvalidParameter(f"Exponent must be an integer, got {exponent!r}")
        exponent = int(exponent)
        if kind == KernelType.POWER and exponent <= 0:
            raise InvalidParameter(f"Power parameter p must be positive, got {exponent}")
        if kind == KernelType.POLYNOMIAL and exponent < 0:
            raise InvalidParameter(f"Degree must be non-negative, got {exponent}")

    return WeightKernel(
        kind=kind,
        support=float(support),
        exponent=int(exponent),
        epsilon=float(epsilon),
    )


def support_radius(kernel: WeightKernel) -> float:
    """Distance at and beyond which the kernel is exactly zero (inf if never)."""
    factor = KERNEL_SUPPORT_FACTOR[kernel.kind]
    if factor is None:
        return math.inf
    return factor * kernel.support


def is_compact(kernel: WeightKernel) -> bool:
    """True if the kernel vanishes outside a finite radius."""
    return KERNEL_SUPPORT_FACTOR[kernel.kind] is not None


def weight_linear(xi: Array, d: float) -> Array:
    """Linear (tent) kernel, range [0, 1]."""
    q = xi / d
    return jnp.where(q < 1.0, 1.0 - q, jnp.zeros_like(q))


def weight_gaussian(xi: Array, d: float) -> Array:
    """Gaussian kernel exp(-(xi/d)²), range (0, 1]."""
    q = xi / d
    return jnp.exp(-(q**2))


def weight_cubic_spline(xi: Array, d: float) -> Array:
    """
    Cubic B-spline kernel with support 2d.

    Parameters
    ----------
    xi : Array
        Distances.
    d : float
        Smoothing length; the kernel vanishes for xi >= 2d.

    Returns
    -------
    Array
        Weights in [0, 2/3], same shape and dtype as xi.
    """
    q = xi / d
    inner = 2.0 / 3.0 - q**2 + 0.5 * q**3
    outer = (2.0 - q) ** 3 / 6.0
    return jnp.where(q < 1.0, inner, jnp.where(q < 2.0, outer, jnp.zeros_like(q)))


def weight_quartic(xi: Array, d: float) -> Array:
    """Wendland C2 kernel (1 - q)⁴ (1 + 4q), range [0, 1]."""
    q = xi / d
    return jnp.where(q < 1.0, (1.0 - q) ** 4 * (1.0 + 4.0 * q), jnp.zeros_like(q))


def weight_exponential(xi: Array, d: float) -> Array:
    """Exponential decay exp(-xi/d), range (0, 1]."""
    return jnp.exp(-xi / d)


def weight_power(xi: Array, d: float, p: int) -> Array:
    """Power kernel (1 - q)^p, range [0, 1]."""
    q = xi / d
    return jnp.where(q < 1.0, (1.0 - q) ** p, jnp.zeros_like(q))


def weight_inverse_distance(xi: Array, epsilon: float) -> Array:
    """
    Regularized inverse distance 1 / (xi + epsilon).

    Bounded by 1/epsilon, reached when the query coincides with a sample.
    """
    return 1.0 / (xi + epsilon)


def weight_polynomial(xi: Array, d: float, degree: int) -> Array:
    """Polynomial kernel (1 - q)^degree; degree 0 gives the indicator of q < 1."""
    q = xi / d
    return jnp.where(q < 1.0, (1.0 - q) ** degree, jnp.zeros_like(q))


def apply_weight(xi: Array, kernel: WeightKernel) -> Array:
    """
    Apply a weight kernel to an array of distances.

    Dispatcher over KernelType. No argument checking is done here so the
    function can be traced by jax.jit; use weight() for checked input.

    Parameters
    ----------
    xi : Array
        Non-negative distances, any shape.
    kernel : WeightKernel
        Kernel configuration from make_kernel().

    Returns
    -------
    Array
        Weights, same shape and dtype as xi.

    Raises
    ------
    InvalidParameter
        If the kernel type is not recognized.
    """
    kind = kernel.kind

    if kind == KernelType.LINEAR:
        return weight_linear(xi, kernel.support)
    elif kind == KernelType.GAUSSIAN:
        return weight_gaussian(xi, kernel.support)
    elif kind == KernelType.CUBIC_SPLINE:
        return weight_cubic_spline(xi, kernel.support)
    elif kind == KernelType.QUARTIC:
        return weight_quartic(xi, kernel.support)
    elif kind == KernelType.EXPONENTIAL:
        return weight_exponential(xi, kernel.support)
    elif kind == KernelType.POWER:
        return weight_power(xi, kernel.support, kernel.exponent)
    elif kind == KernelType.INVERSE_DISTANCE:
        return weight_inverse_distance(xi, kernel.epsilon)
    elif kind == KernelType.POLYNOMIAL:
        return weight_polynomial(xi, kernel.support, kernel.exponent)
    else:
        raise InvalidParameter(f"Unknown kernel type: {kind}")


def weight(xi, kernel: WeightKernel) -> Array:
    """
    Evaluate a kernel at one or more distances.

    Parameters
    ----------
    xi : float or array-like
        Distances. Must be non-negative.
    kernel : WeightKernel
        Kernel configuration from make_kernel().

    Returns
    -------
    Array
        Weights, same shape as xi.

    Raises
    ------
    ValueError
        If any distance is negative.
    """
    xi = jnp.asarray(xi)
    if not jnp.issubdtype(xi.dtype, jnp.floating):
        xi = xi.astype(jnp.result_type(float))
    if bool(jnp.any(xi < 0)):
        raise ValueError("Distances must be non-negative")
    return apply_weight(xi, kernel)
