"""
mls_interp: Moving Least Squares interpolation of scattered data.

A JAX-based implementation for 1D, 2D and 3D samples with scalar or vector
values. Each query point gets its own distance-weighted polynomial fit.

Usage
-----
>>> import mls_interp
>>>
>>> points = mls_interp.point_set([0.0, 1.0, 2.0])
>>> kernel = mls_interp.make_kernel("linear", support=1.5)
>>> state = mls_interp.build(points, [0.0, 1.0, 4.0], kernel, mls_interp.MLSConfig(degree=2))
>>>
>>> # Single query
>>> value = mls_interp.evaluate(state, 1.0)
>>>
>>> # Batch, failing queries reported per index
>>> result = mls_interp.evaluate_many(state, [0.8, 1.2, 5.0])
>>> result.errors
{2: InsufficientSupport(...)}
"""

import jax

# Enable float64 for numerical stability of the local solves
jax.config.update("jax_enable_x64", True)

from .basis import (
    build_basis_matrix,
    monomial_basis,
    monomial_exponents,
    n_basis_terms,
    shift_coefficients,
)
from .core import build, evaluate, evaluate_many, fit_local, sample_weights
from .exceptions import (
    DimensionMismatch,
    InsufficientSupport,
    InvalidParameter,
    MLSError,
    SingularFit,
    TypeMismatch,
)
from .io import load_samples_csv, load_state, save_state
from .kernels import KernelType, WeightKernel, is_compact, make_kernel, support_radius, weight
from .point_sets import PointSet1D, PointSet2D, PointSet3D, from_coords, point_set
from .types import BatchResult, LocalFit, MLSConfig, MLSState

try:
    from importlib.metadata import version

    __version__ = version("mls_interp")
except Exception:
    __version__ = "unknown"

__all__ = [
    # Core functions
    "build",
    "evaluate",
    "evaluate_many",
    "fit_local",
    "sample_weights",
    # Kernels
    "KernelType",
    "WeightKernel",
    "make_kernel",
    "support_radius",
    "is_compact",
    "weight",
    # Basis
    "build_basis_matrix",
    "monomial_basis",
    "monomial_exponents",
    "n_basis_terms",
    "shift_coefficients",
    # Point sets
    "PointSet1D",
    "PointSet2D",
    "PointSet3D",
    "point_set",
    "from_coords",
    # Types
    "MLSConfig",
    "MLSState",
    "LocalFit",
    "BatchResult",
    # Errors
    "MLSError",
    "InvalidParameter",
    "DimensionMismatch",
    "TypeMismatch",
    "InsufficientSupport",
    "SingularFit",
    # I/O
    "load_samples_csv",
    "save_state",
    "load_state",
]
