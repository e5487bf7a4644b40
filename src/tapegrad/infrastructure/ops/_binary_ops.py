"""
Tape-recording binary operations.

Every operation in this module follows the same protocol:

1. validate operand shapes (and which operand may own a tape),
2. compute the forward result from both operands' data,
3. split the traced operand into its data and its tape-holder (a move),
4. take phantoms of the inputs and the result,
5. append one backward closure to the holder that reads the result's
   gradient, applies the local derivative and *adds* into each input's
   gradient entry,
6. return the result carrying the holder.

Implemented operations
----------------------
- `add`, `sub`, `mul`        : elementwise, identical shapes, traced operand
                               on either side
- `matmat_mul`               : (M, N) @ (N, O)
- `vecmat_mul`               : (N,) @ (N, O)
- `broadcast_outer_add`      : (M, N) + (N,), bias added to every row
- `broadcast_inner_sub`      : rank R - rank R-1, broadcast along the
                               trailing axis

For the last four, only the left-hand operand may own a tape; the right-hand
operand is borrowed and must be detached.
"""

from __future__ import annotations

import numpy as np

from ...domain._errors import (
    DetachedOperandRequiredError,
    ShapeMismatchError,
    TapeMergeError,
)
from ...domain._tape import IPhantom, ITapeHolder
from ..tape._gradient_tape import GradientTape
from ..tape._tape_holder import TapeMode
from ..tensor._tensor import Tensor, Tensor1D, Tensor2D
from ._array_cpu import map_elems, matmul, reduce_inner, transpose


def _accumulate(tape: GradientTape, phantom: IPhantom, d_grad: np.ndarray) -> None:
    grad = tape.mut_gradient(phantom)
    grad += d_grad


def _check_same_shape(op: str, lhs: Tensor, rhs: Tensor) -> None:
    if tuple(lhs.shape) != tuple(rhs.shape):
        raise ShapeMismatchError(op, lhs.shape, rhs.shape)


def _check_detached(op: str, t: Tensor) -> None:
    if t.tape_mode is TapeMode.OWNS_TAPE:
        raise DetachedOperandRequiredError(op)


def _split_traced(
    op: str, lhs: Tensor, rhs: Tensor
) -> tuple[Tensor, Tensor, ITapeHolder]:
    """
    Move the tape-holder out of whichever operand owns one.

    Returns
    -------
    tuple[Tensor, Tensor, ITapeHolder]
        Detached lhs, detached rhs, and the holder of the traced operand
        (a `NoTape` when neither operand is traced).

    Raises
    ------
    TapeMergeError
        If both operands own a tape. Nothing is moved in that case.
    """
    lhs_traced = lhs.tape_mode is TapeMode.OWNS_TAPE
    rhs_traced = rhs.tape_mode is TapeMode.OWNS_TAPE
    if lhs_traced and rhs_traced:
        raise TapeMergeError(op)
    if lhs_traced:
        lhs, tape_holder = lhs.split_tape_holder()
    else:
        rhs, tape_holder = rhs.split_tape_holder()
    return lhs, rhs, tape_holder


# ----------------------------------------------------------------------
# Elementwise
# ----------------------------------------------------------------------
def add(lhs: Tensor, rhs: Tensor) -> Tensor:
    """
    Elementwise addition ``lhs + rhs``.

    Parameters
    ----------
    lhs, rhs : Tensor
        Operands of identical shape. At most one may own a tape.

    Returns
    -------
    Tensor
        The sum, carrying the traced operand's tape-holder.

    Notes
    -----
    Backward: both inputs receive the output gradient unchanged.
    """
    _check_same_shape("add", lhs, rhs)

    result = Tensor._wrap(lhs.data + rhs.data)
    lhs, rhs, tape_holder = _split_traced("add", lhs, rhs)
    lhs_deriv = map_elems(lhs.data, lambda _: 1.0)
    rhs_deriv = map_elems(rhs.data, lambda _: 1.0)
    _lhs = lhs.phantom()
    _rhs = rhs.phantom()
    _result = result.phantom()

    def add_backward(tape: GradientTape) -> None:
        result_grad = tape.gradient(_result)
        _accumulate(tape, _lhs, lhs_deriv * result_grad)
        _accumulate(tape, _rhs, rhs_deriv * result_grad)

    tape_holder.add_operation(add_backward)
    return result.with_tape_holder(tape_holder)


def sub(lhs: Tensor, rhs: Tensor) -> Tensor:
    """
    Elementwise subtraction ``lhs - rhs``.

    Parameters
    ----------
    lhs, rhs : Tensor
        Operands of identical shape. At most one may own a tape.

    Returns
    -------
    Tensor
        The difference, carrying the traced operand's tape-holder.

    Notes
    -----
    Backward: lhs receives +grad, rhs receives -grad.
    """
    _check_same_shape("sub", lhs, rhs)

    result = Tensor._wrap(lhs.data - rhs.data)
    lhs, rhs, tape_holder = _split_traced("sub", lhs, rhs)
    lhs_deriv = map_elems(lhs.data, lambda _: 1.0)
    rhs_deriv = map_elems(rhs.data, lambda _: -1.0)
    _lhs = lhs.phantom()
    _rhs = rhs.phantom()
    _result = result.phantom()

    def sub_backward(tape: GradientTape) -> None:
        result_grad = tape.gradient(_result)
        _accumulate(tape, _lhs, lhs_deriv * result_grad)
        _accumulate(tape, _rhs, rhs_deriv * result_grad)

    tape_holder.add_operation(sub_backward)
    return result.with_tape_holder(tape_holder)


def mul(lhs: Tensor, rhs: Tensor) -> Tensor:
    """
    Elementwise product ``lhs * rhs``.

    Parameters
    ----------
    lhs, rhs : Tensor
        Operands of identical shape. At most one may own a tape.

    Returns
    -------
    Tensor
        The product, carrying the traced operand's tape-holder.

    Notes
    -----
    Backward (product rule): lhs receives ``rhs * grad`` and rhs receives
    ``lhs * grad``, using forward values captured before the move.
    """
    _check_same_shape("mul", lhs, rhs)

    result = Tensor._wrap(lhs.data * rhs.data)
    lhs_deriv = rhs.data.copy()
    rhs_deriv = lhs.data.copy()
    lhs, rhs, tape_holder = _split_traced("mul", lhs, rhs)
    _lhs = lhs.phantom()
    _rhs = rhs.phantom()
    _result = result.phantom()

    def mul_backward(tape: GradientTape) -> None:
        result_grad = tape.gradient(_result)
        _accumulate(tape, _lhs, lhs_deriv * result_grad)
        _accumulate(tape, _rhs, rhs_deriv * result_grad)

    tape_holder.add_operation(mul_backward)
    return result.with_tape_holder(tape_holder)


# ----------------------------------------------------------------------
# Matrix products
# ----------------------------------------------------------------------
def matmat_mul(lhs: Tensor, rhs: Tensor) -> Tensor2D:
    """
    Matrix product ``(M, N) @ (N, O) -> (M, O)``.

    Parameters
    ----------
    lhs : Tensor
        (M, N) operand; may own a tape.
    rhs : Tensor
        (N, O) detached operand.

    Returns
    -------
    Tensor2D
        The (M, O) product carrying lhs's tape-holder.

    Raises
    ------
    ShapeMismatchError
        If ranks or inner dimensions do not match.
    DetachedOperandRequiredError
        If rhs owns a tape.

    Notes
    -----
    Backward: ``d(lhs) = grad @ rhs^T`` and ``d(rhs) = lhs^T @ grad``. Both
    transposes are taken once from forward data, outside the closure.
    """
    if lhs.rank != 2 or rhs.rank != 2 or lhs.shape[1] != rhs.shape[0]:
        raise ShapeMismatchError("matmat_mul", lhs.shape, rhs.shape)
    _check_detached("matmat_mul", rhs)

    result = Tensor2D._wrap(matmul(lhs.data, rhs.data))
    lhs, tape_holder = lhs.split_tape_holder()

    lderiv = transpose(rhs.data)
    rderiv = transpose(lhs.data)
    _lhs = lhs.phantom()
    _rhs = rhs.phantom()
    _result = result.phantom()

    def matmat_mul_backward(tape: GradientTape) -> None:
        result_grad = tape.gradient(_result)
        d_grad_lhs = matmul(result_grad, lderiv)
        d_grad_rhs = matmul(rderiv, result_grad)
        _accumulate(tape, _lhs, d_grad_lhs)
        _accumulate(tape, _rhs, d_grad_rhs)

    tape_holder.add_operation(matmat_mul_backward)
    return result.with_tape_holder(tape_holder)


def vecmat_mul(lhs: Tensor, rhs: Tensor) -> Tensor1D:
    """
    Vector-matrix product ``(N,) @ (N, O) -> (O,)``.

    The vector is treated as a (1, N) matrix and the matrix product routine
    is reused.

    Parameters
    ----------
    lhs : Tensor
        (N,) operand; may own a tape.
    rhs : Tensor
        (N, O) detached operand.

    Returns
    -------
    Tensor1D
        The (O,) product carrying lhs's tape-holder.

    Notes
    -----
    Backward mirrors `matmat_mul` on the lifted operands:
    ``d(lhs) = (grad as 1xO) @ rhs^T`` reduced to (N,), and
    ``d(rhs) = (lhs as Nx1) @ (grad as 1xO)``.
    """
    if lhs.rank != 1 or rhs.rank != 2 or lhs.shape[0] != rhs.shape[0]:
        raise ShapeMismatchError("vecmat_mul", lhs.shape, rhs.shape)
    _check_detached("vecmat_mul", rhs)

    lhs_2d = lhs.data.reshape(1, -1)
    result = Tensor1D._wrap(matmul(lhs_2d, rhs.data)[0])
    lhs, tape_holder = lhs.split_tape_holder()

    lderiv = transpose(rhs.data)
    rderiv = transpose(lhs_2d)
    _lhs = lhs.phantom()
    _rhs = rhs.phantom()
    _result = result.phantom()

    def vecmat_mul_backward(tape: GradientTape) -> None:
        result_grad = tape.gradient(_result).reshape(1, -1)
        d_grad_lhs = matmul(result_grad, lderiv)[0]
        d_grad_rhs = matmul(rderiv, result_grad)
        _accumulate(tape, _lhs, d_grad_lhs)
        _accumulate(tape, _rhs, d_grad_rhs)

    tape_holder.add_operation(vecmat_mul_backward)
    return result.with_tape_holder(tape_holder)


# ----------------------------------------------------------------------
# Broadcasting
# ----------------------------------------------------------------------
def broadcast_outer_add(lhs: Tensor, rhs: Tensor) -> Tensor2D:
    """
    Add a per-column bias to every row: ``(M, N) + (N,) -> (M, N)``.

    Parameters
    ----------
    lhs : Tensor
        (M, N) operand; may own a tape.
    rhs : Tensor
        (N,) detached bias.

    Returns
    -------
    Tensor2D
        ``result[i] = lhs[i] + rhs`` for every row i.

    Notes
    -----
    Backward: lhs receives the output gradient; the bias receives it summed
    over the M rows, since each bias value feeds M outputs.
    """
    if lhs.rank != 2 or rhs.rank != 1 or lhs.shape[1] != rhs.shape[0]:
        raise ShapeMismatchError("broadcast_outer_add", lhs.shape, rhs.shape)
    _check_detached("broadcast_outer_add", rhs)

    m = lhs.shape[0]
    out = np.empty(lhs.shape, dtype=lhs.data.dtype)
    for i in range(m):
        out[i] = lhs.data[i] + rhs.data
    result = Tensor2D._wrap(out)
    lhs, tape_holder = lhs.split_tape_holder()

    lhs_deriv = map_elems(lhs.data, lambda _: 1.0)
    rhs_deriv = map_elems(rhs.data, lambda _: 1.0)
    _lhs = lhs.phantom()
    _rhs = rhs.phantom()
    _result = result.phantom()

    def broadcast_outer_add_backward(tape: GradientTape) -> None:
        result_grad = tape.gradient(_result)
        _accumulate(tape, _lhs, lhs_deriv * result_grad)

        d_grad_rhs = np.zeros(rhs_deriv.shape, dtype=rhs_deriv.dtype)
        for i in range(m):
            d_grad_rhs += rhs_deriv * result_grad[i]
        _accumulate(tape, _rhs, d_grad_rhs)

    tape_holder.add_operation(broadcast_outer_add_backward)
    return result.with_tape_holder(tape_holder)


def broadcast_inner_sub(lhs: Tensor, rhs: Tensor) -> Tensor:
    """
    Subtract a lower-rank tensor broadcast along the trailing axis.

    ``result[..., j] = lhs[..., j] - rhs[...]`` for every j.

    Parameters
    ----------
    lhs : Tensor
        Rank R operand (1 <= R <= 4); may own a tape.
    rhs : Tensor
        Detached operand of shape ``lhs.shape[:-1]`` (rank R-1), or of shape
        ``lhs.shape[:-1] + (1,)``.

    Returns
    -------
    Tensor
        Result of lhs's shape carrying lhs's tape-holder.

    Notes
    -----
    Backward: lhs receives the output gradient; rhs receives
    ``grad * -1`` summed across the trailing axis, reshaped to rhs's shape.
    """
    leading = tuple(lhs.shape[:-1])
    if lhs.rank < 1 or tuple(rhs.shape) not in (leading, leading + (1,)):
        raise ShapeMismatchError(
            "broadcast_inner_sub",
            lhs.shape,
            rhs.shape,
            "rhs must match lhs without its trailing axis",
        )
    _check_detached("broadcast_inner_sub", rhs)

    result = Tensor._wrap(lhs.data - rhs.data.reshape(leading + (1,)))
    lhs, tape_holder = lhs.split_tape_holder()

    lhs_deriv = map_elems(lhs.data, lambda _: 1.0)
    rhs_deriv = map_elems(rhs.data, lambda _: -1.0).reshape(leading + (1,))
    rhs_shape = tuple(rhs.shape)
    _lhs = lhs.phantom()
    _rhs = rhs.phantom()
    _result = result.phantom()

    def broadcast_inner_sub_backward(tape: GradientTape) -> None:
        result_grad = tape.gradient(_result)
        _accumulate(tape, _lhs, lhs_deriv * result_grad)

        d_grad_rhs = reduce_inner(result_grad * rhs_deriv)
        _accumulate(tape, _rhs, d_grad_rhs.reshape(rhs_shape))

    tape_holder.add_operation(broadcast_inner_sub_backward)
    return result.with_tape_holder(tape_holder)
