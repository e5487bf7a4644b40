"""
Tape-recording full reductions.

`reduce_sum` and `reduce_mean` collapse a tensor of any rank into a
`Tensor0D`, which is what the backward pass consumes. They follow the same
move-and-record protocol as the binary operations.
"""

from __future__ import annotations

import numpy as np

from ..tape._gradient_tape import GradientTape
from ..tensor._tensor import Tensor, Tensor0D


def reduce_sum(t: Tensor) -> Tensor0D:
    """
    Sum every element of `t`.

    Parameters
    ----------
    t : Tensor
        Input tensor; may own a tape (it is moved).

    Returns
    -------
    Tensor0D
        Scalar sum carrying `t`'s tape-holder.

    Notes
    -----
    Backward: every element of `t` receives the scalar output gradient.
    """
    result = Tensor0D._wrap(np.sum(t.data))
    t, tape_holder = t.split_tape_holder()
    _t = t.phantom()
    _result = result.phantom()

    def sum_backward(tape: GradientTape) -> None:
        result_grad = tape.gradient(_result)
        grad = tape.mut_gradient(_t)
        grad += result_grad

    tape_holder.add_operation(sum_backward)
    return result.with_tape_holder(tape_holder)


def reduce_mean(t: Tensor) -> Tensor0D:
    """
    Average every element of `t`.

    Parameters
    ----------
    t : Tensor
        Input tensor; may own a tape (it is moved).

    Returns
    -------
    Tensor0D
        Scalar mean carrying `t`'s tape-holder.

    Notes
    -----
    Backward: every element of `t` receives the output gradient divided by
    the number of elements.
    """
    numel = t.numel()
    result = Tensor0D._wrap(np.mean(t.data))
    t, tape_holder = t.split_tape_holder()
    _t = t.phantom()
    _result = result.phantom()

    def mean_backward(tape: GradientTape) -> None:
        result_grad = tape.gradient(_result)
        grad = tape.mut_gradient(_t)
        grad += result_grad / numel

    tape_holder.add_operation(mean_backward)
    return result.with_tape_holder(tape_holder)
