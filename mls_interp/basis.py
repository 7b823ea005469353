"""
Monomial polynomial bases in 1, 2 and 3 dimensions.

Terms of total degree <= k are enumerated by nested loops over the exponents,
first axis outermost:

- 1D: [1, x, x², ..., x^k]
- 2D: x^i y^j for i in 0..k, j in 0..k-i
      -> degree 2: [1, y, y², x, xy, x²]
- 3D: x^i y^j z^l for i in 0..k, j in 0..k-i, l in 0..k-i-j

The ordering fixes which design-matrix column each coefficient belongs to and
must not change between the sample rows and the query row of a fit.
"""

from functools import lru_cache
from itertools import product
from math import comb

import jax.numpy as jnp
from jax import Array

from .exceptions import DimensionMismatch, InvalidParameter


def _check(dim: int, degree: int) -> None:
    if dim not in (1, 2, 3):
        raise InvalidParameter(f"Dimension must be 1, 2 or 3, got {dim}")
    if isinstance(degree, bool) or int(degree) != degree or degree < 0:
        raise InvalidParameter(f"Degree must be a non-negative integer, got {degree!r}")


@lru_cache(maxsize=None)
def _exponents(dim: int, degree: int) -> tuple[tuple[int, ...], ...]:
    if dim == 1:
        return tuple((i,) for i in range(degree + 1))
    if dim == 2:
        return tuple((i, j) for i in range(degree + 1) for j in range(degree - i + 1))
    return tuple(
        (i, j, l)
        for i in range(degree + 1)
        for j in range(degree - i + 1)
        for l in range(degree - i - j + 1)
    )


def monomial_exponents(dim: int, degree: int) -> tuple[tuple[int, ...], ...]:
    """
    Exponent tuples of the basis, in column order.

    Parameters
    ----------
    dim : int
        Spatial dimension (1, 2 or 3).
    degree : int
        Maximum total degree k >= 0.

    Returns
    -------
    tuple of tuple of int
        One exponent tuple of length dim per basis term.
    """
    _check(dim, degree)
    return _exponents(dim, int(degree))


def n_basis_terms(dim: int, degree: int) -> int:
    """Number of monomials of total degree <= degree in dim variables."""
    _check(dim, degree)
    return comb(int(degree) + dim, dim)


def build_basis_matrix(points: Array, degree: int) -> Array:
    """
    Evaluate the monomial basis at many points.

    Parameters
    ----------
    points : Array
        Coordinates, shape (n_points, dim) or (n_points,) for 1D.
    degree : int
        Maximum total degree. Must be a Python int, not a traced value.

    Returns
    -------
    Array
        Basis matrix, shape (n_points, n_terms), columns in
        monomial_exponents() order.
    """
    points = jnp.asarray(points)
    if not jnp.issubdtype(points.dtype, jnp.floating):
        points = points.astype(jnp.result_type(float))
    if points.ndim == 1:
        points = points[:, None]
    if points.ndim != 2:
        raise DimensionMismatch(f"Expected points of shape (n, dim), got {points.shape}")

    exponents = monomial_exponents(points.shape[1], degree)

    # Integer powers keep x**0 == 1 exactly and handle negative coordinates
    columns = []
    for powers in exponents:
        term = jnp.ones(points.shape[0], dtype=points.dtype)
        for axis, p in enumerate(powers):
            if p > 0:
                term = term * points[:, axis] ** p
        columns.append(term)

    return jnp.stack(columns, axis=1)


def monomial_basis(point, degree: int) -> Array:
    """
    Evaluate the monomial basis at a single point.

    Parameters
    ----------
    point : float or sequence of float
        Coordinate tuple of length 1, 2 or 3 (a bare float is 1D).
    degree : int
        Maximum total degree.

    Returns
    -------
    Array
        Monomial values, shape (n_terms,).
    """
    point = jnp.atleast_1d(jnp.asarray(point))
    if point.ndim != 1:
        raise DimensionMismatch(f"Expected a single coordinate tuple, got shape {point.shape}")
    return build_basis_matrix(point[None, :], degree)[0]


def shift_coefficients(coeffs: Array, origin, degree: int) -> Array:
    """
    Re-expand a polynomial in (x - origin) into the raw monomial basis.

    Each shifted monomial is expanded with the binomial theorem per axis:
    (x - o)^a = sum over b <= a of C(a, b) x^b (-o)^(a - b).

    Parameters
    ----------
    coeffs : Array
        Coefficients of the basis in (x - origin), shape (n_terms,) or
        (n_terms, n_components).
    origin : float or sequence of float
        Expansion point, length dim.
    degree : int
        Maximum total degree.

    Returns
    -------
    Array
        Coefficients of the basis in x, same shape as coeffs.
    """
    origin = jnp.atleast_1d(jnp.asarray(origin))
    exponents = monomial_exponents(origin.shape[0], degree)
    column = {powers: k for k, powers in enumerate(exponents)}

    # T[column of b, column of a] = prod_d C(a_d, b_d) (-o_d)^(a_d - b_d)
    rows = [[jnp.zeros((), dtype=origin.dtype)] * len(exponents) for _ in exponents]
    for a_col, a in enumerate(exponents):
        for b in product(*(range(p + 1) for p in a)):
            entry = jnp.ones((), dtype=origin.dtype)
            for axis, (p, r) in enumerate(zip(a, b)):
                if p > r:
                    entry = entry * comb(p, r) * (-origin[axis]) ** (p - r)
            rows[column[b]][a_col] = entry

    T = jnp.stack([jnp.stack(row) for row in rows])
    return T @ coeffs
