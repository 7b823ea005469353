"""
Core MLS build and evaluation functions.

An interpolant is an immutable MLSState; every query point gets its own local
weighted least-squares fit:

1. distances from the query to all samples, weights from the kernel
2. active samples = those with strictly positive weight
3. basis rows of the active samples in (x - query) / scale -> design matrix P
4. solve (P^T W P) c = P^T W v
5. value = c[0], the fitted polynomial at the shifted origin
"""

import logging

import jax.numpy as jnp
import numpy as np
from jax import Array
from tqdm import tqdm

from .basis import build_basis_matrix, monomial_exponents, n_basis_terms, shift_coefficients
from .exceptions import DimensionMismatch, InsufficientSupport, InvalidParameter, MLSError
from .kernels import WeightKernel, apply_weight, make_kernel
from .point_sets import from_coords
from .solve import SolverType, solve_local_system
from .types import BatchResult, LocalFit, MLSConfig, MLSState

logger = logging.getLogger(__name__)

ON_ERROR_CHOICES = ("collect", "raise")


def _validate_config(config: MLSConfig, dim: int) -> MLSConfig:
    n_basis_terms(dim, config.degree)
    if config.rcond is not None and not config.rcond > 0:
        raise InvalidParameter(f"rcond must be positive, got {config.rcond}")
    try:
        solver = SolverType(config.solver)
    except ValueError:
        raise InvalidParameter(f"Unknown solver: {config.solver!r}") from None
    return config._replace(degree=int(config.degree), solver=solver.value)


def _normalize_values(values, n_samples: int, dtype) -> Array:
    """Ensure values is (n_samples,) or (n_samples, n_components) in the point dtype."""
    values = jnp.asarray(values, dtype=dtype)
    if values.ndim not in (1, 2):
        raise DimensionMismatch(
            f"Values must have shape (n,) or (n, n_components), got {values.shape}"
        )
    if values.shape[0] != n_samples:
        raise DimensionMismatch(
            f"Mismatch: {values.shape[0]} values vs {n_samples} points"
        )
    return values


def _normalize_query(query, dim: int, dtype) -> Array:
    """Ensure query is a (dim,) array in the point dtype."""
    query = jnp.atleast_1d(jnp.asarray(query, dtype=dtype))
    if query.shape != (dim,):
        raise DimensionMismatch(f"Expected a query point of shape ({dim},), got {query.shape}")
    return query


def build(
    points,
    values,
    kernel: WeightKernel | None = None,
    config: MLSConfig = MLSConfig(),
) -> MLSState:
    """
    Build an MLS interpolant.

    Parameters
    ----------
    points : PointSet1D, PointSet2D, PointSet3D or array-like
        Sample coordinates. Arrays are read as (n_samples, dim), or
        (n_samples,) for 1D.
    values : array-like
        Sample values, shape (n_samples,) or (n_samples, n_components).
    kernel : WeightKernel, optional
        Weight kernel from make_kernel(). Defaults to the quartic kernel
        with unit support.
    config : MLSConfig
        Fit configuration.

    Returns
    -------
    MLSState
        Immutable interpolant, safe to share between threads.

    Raises
    ------
    InvalidParameter
        If the degree, rcond or solver is invalid.
    DimensionMismatch
        If the number of values differs from the number of points.
    """
    if not hasattr(points, "coords"):
        points = from_coords(points)
    coords = points.coords()
    n_samples, dim = coords.shape

    kernel = make_kernel() if kernel is None else make_kernel(*kernel)
    config = _validate_config(config, dim)
    values = _normalize_values(values, n_samples, coords.dtype)

    logger.info(
        "Built %dD MLS interpolant: %d samples, %s kernel (d=%g), degree %d (%d terms)",
        dim,
        n_samples,
        kernel.kind.value,
        kernel.support,
        config.degree,
        n_basis_terms(dim, config.degree),
    )

    return MLSState(points=coords, values=values, kernel=kernel, config=config)


def sample_weights(state: MLSState, query: Array) -> tuple[Array, Array]:
    """
    Distances and kernel weights of all samples with respect to a query.

    Parameters
    ----------
    state : MLSState
        Interpolant from build().
    query : Array
        Query point, shape (dim,).

    Returns
    -------
    tuple[Array, Array]
        distances : shape (n_samples,)
        weights : shape (n_samples,)
    """
    diff = state.points - query[None, :]
    distances = jnp.sqrt(jnp.sum(diff**2, axis=1))
    return distances, apply_weight(distances, state.kernel)


def fit_local(state: MLSState, query) -> LocalFit:
    """
    Fit the local weighted polynomial at a query point.

    Parameters
    ----------
    state : MLSState
        Interpolant from build().
    query : float or array-like
        Query point, shape (dim,); a bare float is accepted in 1D.

    Returns
    -------
    LocalFit
        Active samples, their weights, the design matrix that was solved,
        the coefficients and the fitted value. Coefficients refer to the
        basis in x, or in (x - query) when the config is centered.

    Raises
    ------
    DimensionMismatch
        If the query does not have the interpolant's dimension.
    InsufficientSupport
        If fewer samples have positive weight than the basis has terms.
    SingularFit
        If the active samples do not determine the polynomial (e.g. all
        collinear for a 2D linear fit).
    """
    dim = state.dim
    degree = state.config.degree
    query = _normalize_query(query, dim, state.points.dtype)

    distances, weights = sample_weights(state, query)
    active = jnp.nonzero(weights > 0)[0]

    n_terms = n_basis_terms(dim, degree)
    if active.shape[0] < n_terms:
        raise InsufficientSupport(
            int(active.shape[0]), n_terms, query=tuple(float(q) for q in query)
        )

    # Solve in (x - query) / scale so the columns stay comparable in size
    # wherever the samples sit
    scale = jnp.max(distances[active])
    scale = jnp.where(scale > 0, scale, jnp.ones_like(scale))
    local_points = (state.points[active] - query[None, :]) / scale

    P = build_basis_matrix(local_points, degree)
    w = weights[active]
    v = state.values[active]

    scaled_coeffs = solve_local_system(P, w, v, state.config.rcond, state.config.solver)

    # The scaled basis at the query is (1, 0, ..., 0)
    value = scaled_coeffs[0]

    powers = jnp.array([sum(e) for e in monomial_exponents(dim, degree)])
    unscale = scale ** (-powers)
    if scaled_coeffs.ndim == 2:
        unscale = unscale[:, None]
    coeffs = scaled_coeffs * unscale
    if not state.config.centered:
        coeffs = shift_coefficients(coeffs, query, degree)

    return LocalFit(
        query=query,
        active=active,
        weights=w,
        design=P,
        rhs=v,
        coeffs=coeffs,
        value=value,
        centered=state.config.centered,
        scale=scale,
    )


def evaluate(state: MLSState, query) -> Array:
    """
    Evaluate the interpolant at a single query point.

    Returns
    -------
    Array
        Scalar, or shape (n_components,) for vector-valued samples.
    """
    return fit_local(state, query).value


def evaluate_many(
    state: MLSState,
    queries,
    on_error: str = "collect",
    verbose: bool = False,
) -> BatchResult:
    """
    Evaluate the interpolant at many query points.

    Each query is fitted independently. With on_error='collect' a failing
    query is recorded in BatchResult.errors, its value is NaN and its ok
    flag is False; the remaining queries are still evaluated.

    Parameters
    ----------
    state : MLSState
        Interpolant from build().
    queries : array-like
        Query points, shape (n_queries, dim), or (n_queries,) for 1D.
    on_error : str
        'collect' (default) or 'raise' to stop at the first failing query.
    verbose : bool
        Show progress bar.

    Returns
    -------
    BatchResult
        Values, success mask and per-query errors.
    """
    if on_error not in ON_ERROR_CHOICES:
        raise InvalidParameter(f"on_error must be one of {ON_ERROR_CHOICES}, got {on_error!r}")

    dim = state.dim
    queries = jnp.asarray(queries, dtype=state.points.dtype)
    if queries.ndim == 1 and dim == 1:
        queries = queries[:, None]
    if queries.ndim != 2 or queries.shape[1] != dim:
        raise DimensionMismatch(f"Expected queries of shape (n, {dim}), got {queries.shape}")

    n_queries = queries.shape[0]
    out_shape = (n_queries,) + state.values.shape[1:]
    values = np.full(out_shape, np.nan, dtype=state.values.dtype)
    ok = np.zeros(n_queries, dtype=bool)
    errors = {}

    iterator = tqdm(range(n_queries), desc="Evaluating MLS") if verbose else range(n_queries)
    for i in iterator:
        try:
            values[i] = np.asarray(evaluate(state, queries[i]))
        except MLSError as exc:
            if on_error == "raise":
                raise
            logger.debug("Query %d failed: %s", i, exc)
            errors[i] = exc
        else:
            ok[i] = True

    if errors:
        logger.warning("%d of %d MLS queries failed", len(errors), n_queries)
    else:
        logger.info("Evaluated %d MLS queries", n_queries)

    return BatchResult(values=jnp.asarray(values), ok=jnp.asarray(ok), errors=errors)
