"""
Phantom tensors: identity and shape without data.

Backward closures capture `PhantomTensor` records instead of tensors. A
phantom is enough to read and accumulate gradients in a `GradientTape`
(keyed by id, zero-filled by shape) while the numeric payload of the
original tensor is not retained.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...domain._unique_id import UniqueId


@dataclass(frozen=True)
class PhantomTensor:
    """
    Identity and shape-type of a tensor with its data dropped.

    Attributes
    ----------
    id : UniqueId
        Identity token of the tensor the phantom was taken from.
    shape : tuple[int, ...]
        Fixed shape of that tensor.
    kind : type
        Concrete tensor class (e.g., `Tensor2D`), kept for diagnostics.
    """

    id: UniqueId
    shape: tuple[int, ...]
    kind: type

    @property
    def rank(self) -> int:
        return len(self.shape)

    def __repr__(self) -> str:
        return f"PhantomTensor({self.kind.__name__}, id={self.id}, shape={self.shape})"
