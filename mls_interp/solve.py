"""
Weighted least-squares solvers for the local MLS system.

Both solvers return the minimizer c of sum_i w_i (P_i c - v_i)², i.e. the
solution of the normal equations (P^T W P) c = P^T W v:

- QR (default): factorizes sqrt(W) P directly, so the conditioning of the
  problem is cond(sqrt(W) P) rather than its square.
- Cholesky: assembles P^T W P and solves it with a Cholesky factorization.
  Cheaper for many samples, but squares the condition number.

Rank deficiency is detected from singular values and raised as SingularFit;
no pseudo-inverse solution is ever returned.
"""

from enum import Enum

import jax.numpy as jnp
import jax.scipy.linalg as jla
from jax import Array

from .exceptions import InvalidParameter, SingularFit


class SolverType(str, Enum):
    """Local system solvers."""

    QR = "qr"
    CHOLESKY = "cholesky"


def default_rcond(n_rows: int, n_cols: int, dtype) -> float:
    """Relative singular value cutoff, max(n_rows, n_cols) * eps."""
    return max(n_rows, n_cols) * float(jnp.finfo(dtype).eps)


def _check_rank(singular_values: Array, rcond: float) -> None:
    s_max = float(singular_values[0])
    s_min = float(singular_values[-1])
    if not (jnp.isfinite(s_max) and jnp.isfinite(s_min)):
        raise SingularFit("Local system contains non-finite entries")
    if s_max <= 0.0 or s_min <= rcond * s_max:
        cond = s_max / s_min if s_min > 0.0 else float("inf")
        raise SingularFit(
            f"Local system is rank deficient (condition number {cond:.3e}, "
            f"tolerance {1.0 / rcond:.3e})"
        )


def solve_weighted_lstsq_qr(
    P: Array,
    w: Array,
    v: Array,
    rcond: float | None = None,
) -> Array:
    """
    Solve the weighted least-squares problem by QR factorization.

    Parameters
    ----------
    P : Array
        Design matrix, shape (n_rows, n_terms), n_rows >= n_terms.
    w : Array
        Positive row weights, shape (n_rows,).
    v : Array
        Right-hand side, shape (n_rows,) or (n_rows, n_rhs).
    rcond : float | None
        Relative cutoff on the singular values of sqrt(W) P.

    Returns
    -------
    Array
        Coefficients, shape (n_terms,) or (n_terms, n_rhs).

    Raises
    ------
    SingularFit
        If sqrt(W) P is rank deficient to the given tolerance.
    """
    n_rows, n_terms = P.shape
    if rcond is None:
        rcond = default_rcond(n_rows, n_terms, P.dtype)

    sqrt_w = jnp.sqrt(w)
    A = sqrt_w[:, None] * P
    b = sqrt_w * v if v.ndim == 1 else sqrt_w[:, None] * v

    Q, R = jnp.linalg.qr(A, mode="reduced")  # R: (n_terms, n_terms)

    # Singular values of R are those of A
    _check_rank(jnp.linalg.svd(R, compute_uv=False), rcond)

    return jla.solve_triangular(R, Q.T @ b, lower=False)


def solve_normal_equations_cholesky(
    P: Array,
    w: Array,
    v: Array,
    rcond: float | None = None,
) -> Array:
    """
    Solve the weighted normal equations by Cholesky factorization.

    Parameters
    ----------
    P : Array
        Design matrix, shape (n_rows, n_terms).
    w : Array
        Positive row weights, shape (n_rows,).
    v : Array
        Right-hand side, shape (n_rows,) or (n_rows, n_rhs).
    rcond : float | None
        Relative cutoff on the eigenvalues of P^T W P. Eigenvalues are the
        squared singular values of sqrt(W) P, so the same cutoff accepts
        systems only up to roughly the square root of the QR solver's
        condition limit.

    Returns
    -------
    Array
        Coefficients, shape (n_terms,) or (n_terms, n_rhs).

    Raises
    ------
    SingularFit
        If P^T W P is singular to the given tolerance.
    """
    n_rows, n_terms = P.shape
    if rcond is None:
        rcond = default_rcond(n_rows, n_terms, P.dtype)

    WP = w[:, None] * P
    G = P.T @ WP  # (n_terms, n_terms), symmetric positive semi-definite
    rhs = WP.T @ v

    # eigvalsh returns ascending order
    _check_rank(jnp.linalg.eigvalsh(G)[::-1], rcond)

    cho_G = jla.cho_factor(G)
    return jla.cho_solve(cho_G, rhs)


def solve_local_system(
    P: Array,
    w: Array,
    v: Array,
    rcond: float | None = None,
    solver: str | SolverType = SolverType.QR,
) -> Array:
    """
    Solve the local weighted least-squares system.

    Dispatches to the QR or Cholesky solver.

    Raises
    ------
    InvalidParameter
        If the solver name is not recognized.
    SingularFit
        If the system is rank deficient.
    """
    try:
        solver_type = SolverType(solver)
    except ValueError:
        raise InvalidParameter(f"Unknown solver: {solver!r}") from None

    if solver_type == SolverType.QR:
        return solve_weighted_lstsq_qr(P, w, v, rcond)
    return solve_normal_equations_cholesky(P, w, v, rcond)
