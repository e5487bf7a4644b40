"""
Tensor interface definitions.

This module defines the domain-level interface for fixed-shape tensors using
structural typing. A tensor is a rank-tagged container owning one array
value, a unique identity token and a tape-holder.

Notes
-----
The domain layer does not import NumPy; array values are typed as `Any` and
are NumPy ndarrays in the infrastructure implementation.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ._tape import IPhantom, ITapeHolder
from ._unique_id import UniqueId


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    An `ITensor` has a fixed rank (0 to 4) and fixed dimensions. Two tensors
    are shape-compatible only if their dimensions match exactly.
    """

    @property
    def id(self) -> UniqueId:
        """
        Return the identity token of this tensor.

        The token never changes when the tensor is moved into an operation
        and is never shared by two live tensors.
        """
        ...

    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the fixed shape of the tensor.
        """
        ...

    @property
    def data(self) -> Any:
        """
        Return the backing array value.
        """
        ...

    @property
    def tape_holder(self) -> ITapeHolder:
        """
        Return the tape-holder carried by this tensor.
        """
        ...

    def phantom(self) -> IPhantom:
        """
        Return the identity and shape of this tensor without its data.
        """
        ...

    def split_tape_holder(self) -> tuple["ITensor", ITapeHolder]:
        """
        Move the tape-holder out of this tensor.

        Returns
        -------
        tuple[ITensor, ITapeHolder]
            A detached tensor with the same identity and data, and the holder.
        """
        ...
