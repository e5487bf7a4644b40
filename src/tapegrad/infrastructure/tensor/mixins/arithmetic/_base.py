"""
Arithmetic mixin mapping Python operators onto the binary operation library.

This module declares :class:`TensorMixinArithmetic`, which gives tensors the
infix operators `+`, `-`, `*` and `@`. Each operator inspects the operand
shapes and routes to one of the tape-recording operations in
``tapegrad.infrastructure.ops``:

- same shape            : `add`, `sub`, `mul`
- (M, N) + (N,)         : `broadcast_outer_add` (either side)
- rank R - rank R-1     : `broadcast_inner_sub`
- (M, N) @ (N, O)       : `matmat_mul`
- (N,) @ (N, O)         : `vecmat_mul`

Operators are mirrored where the operation allows it, so the traced operand
may sit on either side of `+`, `-` and `*` as long as the other side is
detached.
"""

from __future__ import annotations

from abc import ABC

from .....domain._errors import ShapeMismatchError
from .....domain._tensor import ITensor


def _is_tensor(x: object) -> bool:
    return isinstance(x, TensorMixinArithmetic)


def _is_row_bias(matrix: ITensor, bias: ITensor) -> bool:
    return (
        len(matrix.shape) == 2
        and len(bias.shape) == 1
        and matrix.shape[1] == bias.shape[0]
    )


def _is_inner_broadcast(lhs: ITensor, rhs: ITensor) -> bool:
    if len(lhs.shape) < 1:
        return False
    leading = tuple(lhs.shape[:-1])
    return tuple(rhs.shape) in (leading, leading + (1,))


class TensorMixinArithmetic(ABC):
    """
    Mixin implementing tensor operators through the tape protocol.

    Notes
    -----
    - Shapes are checked here and again inside each operation; unsupported
      pairings raise `ShapeMismatchError`.
    - Non-tensor operands return `NotImplemented` so Python can try the
      reflected operator.
    """

    def __add__(self, other: ITensor) -> ITensor:
        """
        Elementwise or bias-broadcast addition.

        Backward rule
        -------------
        - same shape: both operands receive the output gradient.
        - (M, N) + (N,): the matrix receives the output gradient, the bias
          receives it summed over the M rows.
        """
        if not _is_tensor(other):
            return NotImplemented

        from ....ops._binary_ops import add, broadcast_outer_add

        if tuple(self.shape) == tuple(other.shape):
            return add(self, other)
        if _is_row_bias(self, other):
            return broadcast_outer_add(self, other)
        if _is_row_bias(other, self):
            return broadcast_outer_add(other, self)
        raise ShapeMismatchError("add", self.shape, other.shape)

    def __sub__(self, other: ITensor) -> ITensor:
        """
        Elementwise or rank-reducing subtraction.

        Backward rule
        -------------
        - same shape: lhs receives +grad, rhs receives -grad.
        - rank R - rank R-1: lhs receives +grad, rhs receives -grad summed
          across the trailing axis of lhs.
        """
        if not _is_tensor(other):
            return NotImplemented

        from ....ops._binary_ops import sub, broadcast_inner_sub

        if tuple(self.shape) == tuple(other.shape):
            return sub(self, other)
        if _is_inner_broadcast(self, other):
            return broadcast_inner_sub(self, other)
        raise ShapeMismatchError("sub", self.shape, other.shape)

    def __mul__(self, other: ITensor) -> ITensor:
        """
        Elementwise (Hadamard) product.

        Backward rule
        -------------
        Each operand receives the output gradient multiplied by the other
        operand's forward value.
        """
        if not _is_tensor(other):
            return NotImplemented

        from ....ops._binary_ops import mul

        if tuple(self.shape) == tuple(other.shape):
            return mul(self, other)
        raise ShapeMismatchError("mul", self.shape, other.shape)

    def __matmul__(self, other: ITensor) -> ITensor:
        """
        Matrix-matrix or vector-matrix product.

        The right-hand operand must be a detached 2D tensor.

        Backward rule
        -------------
        If out = A @ B, then dA = grad @ B^T and dB = A^T @ grad.
        """
        if not _is_tensor(other):
            return NotImplemented

        from ....ops._binary_ops import matmat_mul, vecmat_mul

        if len(self.shape) == 2:
            return matmat_mul(self, other)
        if len(self.shape) == 1:
            return vecmat_mul(self, other)
        raise ShapeMismatchError(
            "matmul", self.shape, other.shape, "lhs must be 1D or 2D"
        )
