"""
Reduction mixin for Tensor.

The concrete reductions live in ``tapegrad.infrastructure.ops._reduce_ops``.
"""

from ._base import TensorMixinReduction

__all__ = [
    TensorMixinReduction.__name__,
]
