"""
CPU reference kernels for fixed-shape arrays (NumPy backend).

This module provides the array primitives consumed by the tape-recording
operations:

- `matmul`       : accumulate-in-place matrix product
- `transpose`    : 2D transpose
- `map_elems`    : elementwise map with a scalar function
- `reduce_inner` : pairwise accumulate along the trailing axis

Design notes
------------
- These implementations favor clarity over performance.
- `matmul` walks (row, inner, col) so the innermost update touches one
  contiguous output row; there is no blocking.
- All results are `DEFAULT_DTYPE` arrays.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from .._dtypes import DEFAULT_DTYPE


def matmul(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Multiply an (M, N) array by an (N, O) array.

    Parameters
    ----------
    x : np.ndarray
        Left-hand matrix of shape (M, N).
    y : np.ndarray
        Right-hand matrix of shape (N, O).

    Returns
    -------
    np.ndarray
        Product of shape (M, O).

    Raises
    ------
    ValueError
        If either operand is not 2D or the inner dimensions differ.
    """
    if x.ndim != 2 or y.ndim != 2:
        raise ValueError(f"matmul requires 2D arrays, got {x.shape} and {y.shape}")
    m, n = x.shape
    n2, o = y.shape
    if n != n2:
        raise ValueError(f"matmul inner dims differ: {x.shape} @ {y.shape}")

    result = np.zeros((m, o), dtype=DEFAULT_DTYPE)
    for i in range(m):
        row = result[i]
        for k in range(n):
            row += x[i, k] * y[k]
    return result


def transpose(x: np.ndarray) -> np.ndarray:
    """
    Return a contiguous copy of the transpose of a 2D array.
    """
    if x.ndim != 2:
        raise ValueError(f"transpose requires a 2D array, got {x.shape}")
    return np.ascontiguousarray(x.T, dtype=DEFAULT_DTYPE)


def map_elems(x: np.ndarray, fn: Callable[[float], float]) -> np.ndarray:
    """
    Apply a scalar function to every element of `x`.

    Parameters
    ----------
    x : np.ndarray
        Input array of any rank.
    fn : Callable[[float], float]
        Scalar function.

    Returns
    -------
    np.ndarray
        Array of the same shape holding `fn(x[i])`.
    """
    mapped = np.vectorize(fn, otypes=[DEFAULT_DTYPE])(x)
    return np.asarray(mapped, dtype=DEFAULT_DTYPE)


def reduce_inner(x: np.ndarray) -> np.ndarray:
    """
    Sum `x` along its trailing axis, dropping that axis.

    Parameters
    ----------
    x : np.ndarray
        Input array of rank >= 1.

    Returns
    -------
    np.ndarray
        Array of rank `x.ndim - 1`.
    """
    if x.ndim < 1:
        raise ValueError("reduce_inner requires an array of rank >= 1")
    return np.asarray(np.add.reduce(x, axis=-1), dtype=DEFAULT_DTYPE)
