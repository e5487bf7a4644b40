"""
Reduction mixin exposing `sum` and `mean` on tensors.

Both reductions collapse a tensor to a `Tensor0D`, the only rank accepted by
the backward pass, and record their backward closure on the tape like any
other operation.
"""

from __future__ import annotations

from abc import ABC

from .....domain._tensor import ITensor


class TensorMixinReduction(ABC):
    """
    Mixin defining full reductions for tensors.

    Notes
    -----
    Backward rules:

    - ``sum``  : every element receives the scalar output gradient.
    - ``mean`` : every element receives the output gradient divided by the
      number of elements.
    """

    def sum(self: ITensor) -> ITensor:
        """
        Sum every element into a scalar tensor.

        Returns
        -------
        ITensor
            A `Tensor0D` carrying the input's tape-holder.
        """
        from ....ops._reduce_ops import reduce_sum

        return reduce_sum(self)

    def mean(self: ITensor) -> ITensor:
        """
        Average every element into a scalar tensor.

        Returns
        -------
        ITensor
            A `Tensor0D` carrying the input's tape-holder.
        """
        from ....ops._reduce_ops import reduce_mean

        return reduce_mean(self)
