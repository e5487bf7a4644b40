"""
Arithmetic operator mixin for Tensor.

Only the mixin class is exported; the operations themselves live in
``tapegrad.infrastructure.ops``.
"""

from ._base import TensorMixinArithmetic

__all__ = [
    TensorMixinArithmetic.__name__,
]
