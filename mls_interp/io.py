"""
File I/O utilities for MLS interpolation.

Uses NumPy for file operations.
"""

import pickle

import jax.numpy as jnp
import numpy as np

from .core import _validate_config
from .exceptions import DimensionMismatch
from .kernels import make_kernel
from .point_sets import PointSet, point_set
from .types import MLSConfig, MLSState


def load_samples_csv(
    filename: str,
    dim: int,
    value_cols: int | tuple[int, ...] | None = None,
    skiprows: int = 1,
    delimiter: str = ",",
) -> tuple[PointSet, np.ndarray]:
    """
    Load scattered samples from a CSV file.

    The first `dim` columns hold the coordinates.

    Parameters
    ----------
    filename : str
        CSV file.
    dim : int
        Spatial dimension (1, 2 or 3).
    value_cols : int or tuple, optional
        Column(s) holding the sample values. Defaults to all columns after
        the coordinates.
    skiprows : int
        Number of header rows to skip.
    delimiter : str
        Column separator.

    Returns
    -------
    tuple[PointSet, np.ndarray]
        Point set and values, shape (n_samples,) for a single value column
        or (n_samples, n_components) otherwise.
    """
    if dim not in (1, 2, 3):
        raise DimensionMismatch(f"Dimension must be 1, 2 or 3, got {dim}")

    data = np.loadtxt(filename, delimiter=delimiter, skiprows=skiprows, ndmin=2)
    if data.shape[1] <= dim:
        raise DimensionMismatch(
            f"{filename} has {data.shape[1]} columns, need {dim} coordinates plus values"
        )

    if value_cols is None:
        values = data[:, dim:]
    else:
        values = data[:, value_cols]
    if values.ndim == 2 and values.shape[1] == 1:
        values = values[:, 0]

    points = point_set(*(data[:, i] for i in range(dim)))
    return points, values


def save_state(filename: str, state: MLSState) -> None:
    """
    Save interpolant to file.

    Parameters
    ----------
    filename : str
        Output filename.
    state : MLSState
        Interpolant from build().
    """
    # Convert JAX arrays to NumPy for pickling
    state_dict = {
        "points": np.asarray(state.points),
        "values": np.asarray(state.values),
        "kernel": {
            "kind": state.kernel.kind.value,
            "support": float(state.kernel.support),
            "exponent": int(state.kernel.exponent),
            "epsilon": float(state.kernel.epsilon),
        },
        "config": {
            "degree": int(state.config.degree),
            "rcond": state.config.rcond,
            "centered": bool(state.config.centered),
            "solver": str(state.config.solver),
        },
    }
    with open(filename, "wb") as f:
        pickle.dump(state_dict, f)


def load_state(filename: str) -> MLSState:
    """
    Load interpolant from file.

    Parameters
    ----------
    filename : str
        Input filename.

    Returns
    -------
    MLSState
        Loaded interpolant with JAX arrays.

    Raises
    ------
    InvalidParameter
        If the stored kernel or fit configuration is invalid.
    """
    with open(filename, "rb") as f:
        state_dict = pickle.load(f)

    points = jnp.array(state_dict["points"])
    kernel = make_kernel(**state_dict["kernel"])
    config = _validate_config(MLSConfig(**state_dict["config"]), points.shape[1])

    return MLSState(
        points=points,
        values=jnp.array(state_dict["values"]),
        kernel=kernel,
        config=config,
    )
