"""
Exception hierarchy for MLS interpolation.

Configuration errors are raised when kernels, point sets or interpolants are
constructed. Fit errors are raised per query point by the engine.
"""


class MLSError(Exception):
    """Base class for all errors raised by mls_interp."""


class InvalidParameter(MLSError, ValueError):
    """Non-positive support radius/decay/exponent, negative degree, unknown kernel."""


class DimensionMismatch(MLSError, ValueError):
    """Coordinate or value sequences whose lengths (or dimensions) disagree."""


class TypeMismatch(MLSError, TypeError):
    """Coordinate sequences of different or non-floating numeric precision."""


class InsufficientSupport(MLSError, ArithmeticError):
    """Fewer active samples than basis terms at a query point."""

    def __init__(self, n_active: int, n_terms: int, query=None):
        self.n_active = n_active
        self.n_terms = n_terms
        self.query = query
        where = f" at {query}" if query is not None else ""
        super().__init__(
            f"Local fit{where} is under-determined: {n_active} active samples "
            f"for {n_terms} basis terms"
        )


class SingularFit(MLSError, ArithmeticError):
    """Weighted normal-equations matrix is rank deficient to the requested tolerance."""
