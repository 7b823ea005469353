"""
Immutable containers of sample coordinates in 1, 2 or 3 dimensions.

Use point_set(*coords) to pick the variant from the number of coordinate
sequences:

>>> ps = point_set([1.0, 2.0, 3.0], [4.0, 5.0, 6.0])
>>> print(ps)
PointSet2D
 ├─ Number of points : 3
 ├─ Element type     : float64
 ├─ Point set x      : [1.000000, 2.000000, 3.000000]
 └─ Point set y      : [4.000000, 5.000000, 6.000000]
"""

from dataclasses import dataclass

import jax.numpy as jnp
import numpy as np
from jax import Array

from .exceptions import DimensionMismatch, TypeMismatch

AXIS_NAMES = ("x", "y", "z")
PREVIEW_LENGTH = 5


def _as_axis(values, name: str) -> np.ndarray:
    arr = np.asarray(values)
    if arr.ndim != 1:
        raise DimensionMismatch(f"{name} must be a 1D sequence, got shape {arr.shape}")
    if not np.issubdtype(arr.dtype, np.floating):
        raise TypeMismatch(f"{name} must hold floating-point values, got {arr.dtype}")
    return arr


def _validate_axes(*axes: tuple[str, object]) -> tuple[Array, ...]:
    """Check lengths and precisions of named coordinate sequences."""
    arrays = [_as_axis(values, name) for name, values in axes]
    names = [name for name, _ in axes]
    joined = names[0] if len(names) == 1 else ", ".join(names[:-1]) + f" and {names[-1]}"

    lengths = [len(a) for a in arrays]
    if len(set(lengths)) > 1:
        raise DimensionMismatch(
            f"{joined} must have the same length, got "
            + ", ".join(str(n) for n in lengths)
        )

    dtypes = [a.dtype for a in arrays]
    if len(set(dtypes)) > 1:
        raise TypeMismatch(
            f"{joined} must have the same element type, got "
            + ", ".join(str(t) for t in dtypes)
        )

    return tuple(jnp.asarray(a) for a in arrays)


def _format_axis(values: Array) -> str:
    if len(values) == 0:
        return "Empty"
    shown = [f"{float(v):.6f}" for v in np.asarray(values[:PREVIEW_LENGTH])]
    tail = ", ..." if len(values) > PREVIEW_LENGTH else ""
    return f"[{', '.join(shown)}{tail}]"


class _PointSetBase:
    """Shared read access for the fixed-dimension point sets."""

    dim: int = 0

    def axes(self) -> tuple[Array, ...]:
        return tuple(getattr(self, name) for name in AXIS_NAMES[: self.dim])

    def axis(self, i: int) -> Array:
        """Coordinates along axis i (0-based)."""
        if not 0 <= i < self.dim:
            raise IndexError(f"Axis {i} out of range for a {self.dim}D point set")
        return self.axes()[i]

    def coords(self) -> Array:
        """All coordinates as an (n_points, dim) array."""
        return jnp.stack(self.axes(), axis=1)

    def point(self, i: int) -> Array:
        """The i-th point, shape (dim,)."""
        return jnp.stack([a[i] for a in self.axes()])

    @property
    def dtype(self):
        return self.x.dtype

    def __len__(self) -> int:
        return int(self.x.shape[0])

    def __str__(self) -> str:
        lines = [
            type(self).__name__,
            f" ├─ Number of points : {len(self)}",
            f" ├─ Element type     : {self.dtype}",
        ]
        if len(self) == 0:
            lines.append(" └─ Point set        : Empty")
        elif self.dim == 1:
            lines.append(f" └─ Point set        : {_format_axis(self.x)}")
        else:
            for k, name in enumerate(AXIS_NAMES[: self.dim]):
                branch = "└─" if k == self.dim - 1 else "├─"
                lines.append(f" {branch} Point set {name}      : {_format_axis(getattr(self, name))}")
        return "\n".join(lines)

    __repr__ = __str__


@dataclass(frozen=True, eq=False, repr=False)
class PointSet1D(_PointSetBase):
    """Points on a line."""

    x: Array
    dim = 1

    def __post_init__(self):
        (x,) = _validate_axes(("x", self.x))
        object.__setattr__(self, "x", x)


@dataclass(frozen=True, eq=False, repr=False)
class PointSet2D(_PointSetBase):
    """Points in the plane. x and y must share length and dtype."""

    x: Array
    y: Array
    dim = 2

    def __post_init__(self):
        x, y = _validate_axes(("x", self.x), ("y", self.y))
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)


@dataclass(frozen=True, eq=False, repr=False)
class PointSet3D(_PointSetBase):
    """Points in space. x, y and z must share length and dtype."""

    x: Array
    y: Array
    z: Array
    dim = 3

    def __post_init__(self):
        x, y, z = _validate_axes(("x", self.x), ("y", self.y), ("z", self.z))
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)
        object.__setattr__(self, "z", z)


PointSet = PointSet1D | PointSet2D | PointSet3D

_VARIANTS = {1: PointSet1D, 2: PointSet2D, 3: PointSet3D}


def point_set(*coords) -> PointSet:
    """
    Build a point set from one, two or three coordinate sequences.

    Parameters
    ----------
    *coords : sequence of float
        x, (x, y) or (x, y, z) coordinates.

    Returns
    -------
    PointSet1D, PointSet2D or PointSet3D

    Raises
    ------
    DimensionMismatch
        If the number of sequences is not 1, 2 or 3, or lengths differ.
    TypeMismatch
        If the sequences are not floating point or their precisions differ.
    """
    variant = _VARIANTS.get(len(coords))
    if variant is None:
        raise DimensionMismatch(f"Expected 1, 2 or 3 coordinate sequences, got {len(coords)}")
    return variant(*coords)


def from_coords(coords) -> PointSet:
    """Build a point set from an (n_points, dim) array."""
    coords = np.asarray(coords)
    if coords.ndim == 1:
        return point_set(coords)
    if coords.ndim != 2:
        raise DimensionMismatch(f"Expected coordinates of shape (n, dim), got {coords.shape}")
    return point_set(*(coords[:, i] for i in range(coords.shape[1])))
