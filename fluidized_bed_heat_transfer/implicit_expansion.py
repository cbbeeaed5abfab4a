"""Implicit expansion of mixed scalar / array inputs.

Every multi-argument property and model function of the package accepts
scalars, vectors or N-dimensional arrays in any combination. This module
infers the common shape of such inputs and flattens them to equally long
1D arrays, so that the formulas can be written element-wise and the
result reshaped back at the end.

Shapes are aligned on their leading dimension: shorter shapes are padded
with trailing ones, i.e. a vector of length 3 behaves like a (3, 1) column
when combined with a matrix.

Module Summary:
- Exceptions:
    - ``IncompatibleShapesError``: Raised when two non-singleton extents disagree.
- Functions:
    - ``infer_shape(*arrays)``: Common shape after implicit expansion.
    - ``normalize(sz, *arrays)``: Expanded, flattened copies of the inputs.
    - ``K2C(T_K)`` / ``C2K(T_C)``: Handy temperature conversions.
"""

import numpy as np
from typing import List, Tuple


class IncompatibleShapesError(ValueError):
    """Arrays cannot be implicitly expanded to a common shape."""


def _pad_shape(dims: int, x: np.ndarray) -> Tuple[int, ...]:
    # Trailing singleton dimensions up to the required rank
    return tuple(np.shape(x)) + (1,)*(dims - np.ndim(x))


def infer_shape(*arrays) -> Tuple[int, ...]:
    """Calculate the shape of the result when the inputs are implicitly expanded.

    Args:
        *arrays: Scalars or array-likes of arbitrary dimensionality

    Returns:
        Common shape. Each extent is the maximum extent seen in that
        dimension, or 0 if any input is empty there.

    Raises:
        IncompatibleShapesError: If a dimension has more than one distinct
            extent other than 1.

    Example:
        >>> infer_shape(np.ones((3, 1)), np.ones((1, 4)))
        (3, 4)
    """
    if not arrays:
        return ()

    dims = max(np.ndim(x) for x in arrays)
    shapes = np.array([_pad_shape(dims, x) for x in arrays], dtype=int).reshape(len(arrays), dims)

    for k in range(dims):
        extents = set(shapes[shapes[:, k] != 1, k].tolist())
        if len(extents) > 1:
            raise IncompatibleShapesError(
                f"Arrays have incompatible sizes: {[tuple(s) for s in shapes.tolist()]}")

    sz = shapes.max(axis=0)
    sz[(shapes == 0).any(axis=0)] = 0
    return tuple(int(n) for n in sz)


def normalize(sz: Tuple[int, ...], *arrays) -> List[np.ndarray]:
    """Convert all inputs to flat float arrays of the expanded shape ``sz``.

    Args:
        sz: Target shape, usually from ``infer_shape``
        *arrays: Scalars or array-likes compatible with ``sz``

    Returns:
        One array per input. For a non-empty ``sz`` each is 1D with
        ``prod(sz)`` elements in row-major order, so ``x.reshape(sz)``
        restores the expanded array. For an empty ``sz`` each is an all-NaN
        array of shape ``sz``.
    """
    n = int(np.prod(sz))
    if n == 0:
        return [np.full(sz, np.nan) for _ in arrays]

    out = []
    for x in arrays:
        x = np.asarray(x, dtype=float)
        x = x.reshape(_pad_shape(len(sz), x))
        out.append(np.broadcast_to(x, sz).reshape(n).copy())
    return out


# Handy temperature conversions

# Kelvin to Celsius
K2C = lambda T_K: T_K - 273.15

# Celsius to Kelvin
C2K = lambda T_C: T_C + 273.15
