"""
Data structures for MLS interpolation.

All types are NamedTuples: immutable, and valid JAX pytrees.
"""

from typing import NamedTuple

from jax import Array

from .kernels import WeightKernel


class MLSConfig(NamedTuple):
    """Immutable fit configuration."""

    degree: int = 1  # Polynomial basis degree (0=constant, 1=linear, 2=quadratic, ...)
    rcond: float | None = None  # Relative singular value cutoff; None -> max(n, M) * eps
    centered: bool = False  # Report LocalFit coefficients in (x - query) instead of x
    solver: str = "qr"  # Local system solver: 'qr' or 'cholesky'


class MLSState(NamedTuple):
    """Immutable interpolant - samples plus configuration."""

    points: Array  # Sample coordinates (n_samples, dim)
    values: Array  # Sample values (n_samples,) or (n_samples, n_components)
    kernel: WeightKernel
    config: MLSConfig

    @property
    def dim(self) -> int:
        return int(self.points.shape[1])


class LocalFit(NamedTuple):
    """Weighted least-squares fit at one query point."""

    query: Array  # Query point (dim,)
    active: Array  # Indices of samples with positive weight (n_active,)
    weights: Array  # Weights of the active samples (n_active,)
    design: Array  # Basis rows of (x - query) / scale for the active samples (n_active, n_terms)
    rhs: Array  # Values of the active samples (n_active,) or (n_active, n_components)
    coeffs: Array  # Polynomial coefficients (n_terms,) or (n_terms, n_components)
    value: Array  # Fitted polynomial at the query, scalar or (n_components,)
    centered: bool  # True if coeffs refer to the basis in (x - query), else in x
    scale: Array  # Largest active distance, divides (x - query) in the design matrix


class BatchResult(NamedTuple):
    """Result of evaluating many query points, with per-query failures."""

    values: Array  # (n_queries,) or (n_queries, n_components); NaN where ok is False
    ok: Array  # Boolean mask (n_queries,)
    errors: dict  # Query index -> exception raised for that query

    @property
    def n_failed(self) -> int:
        return len(self.errors)
