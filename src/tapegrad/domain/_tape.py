"""
Gradient-tape interface definitions.

This module defines the domain-level contracts for the tape that records
backward closures and for the tape-holder carried by every tensor.

A tape is an ordered ledger of deferred gradient-accumulation closures plus a
gradient store keyed by tensor identity. A tape-holder decides whether a
tensor value carries such a ledger:

- a *detached* holder ignores operations (no gradient tracking),
- an *attached* holder exclusively owns one tape and appends to it.

Notes
-----
The computation graph is never materialized as nodes. Closures only capture
identities (phantoms) and precomputed local derivatives, and replaying them
in reverse registration order is a valid reverse-topological order because
an operation can only consume tensors that already exist.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

from ._unique_id import UniqueId


@runtime_checkable
class IPhantom(Protocol):
    """
    Identity and shape of a tensor with its data dropped.

    Backward closures capture phantoms instead of tensors so they never retain
    the numeric payload of their inputs or outputs.
    """

    @property
    def id(self) -> UniqueId: ...

    @property
    def shape(self) -> tuple[int, ...]: ...


@runtime_checkable
class ITape(Protocol):
    """
    Tape interface.

    Implementations own a gradient store and an ordered list of backward
    closures. Closures receive the tape itself and accumulate into it.
    """

    def add_operation(self, operation: Callable[["ITape"], None]) -> None:
        """
        Append a backward closure in forward execution order.

        Parameters
        ----------
        operation : Callable[[ITape], None]
            Closure that reads the gradient of an operation's output and adds
            contributions into the gradients of its inputs.
        """
        ...

    def gradient(self, phantom: IPhantom) -> Any:
        """
        Return the gradient currently accumulated for `phantom`.

        Missing entries are created zero-filled with the phantom's shape.
        """
        ...

    def mut_gradient(self, phantom: IPhantom) -> Any:
        """
        Return the gradient entry for `phantom` for in-place accumulation.
        """
        ...

    def execute(self) -> Any:
        """
        Run every closure in reverse registration order, exactly once.
        """
        ...


@runtime_checkable
class ITapeHolder(Protocol):
    """
    Tape-holder interface.

    A tape-holder is either detached (no tape; operations are discarded) or
    attached (owns one tape; operations are appended).
    """

    @property
    def mode(self) -> Any:
        """
        Return the holder variant (detached or attached).
        """
        ...

    def add_operation(self, operation: Callable[[ITape], None]) -> None:
        """
        Record a backward closure, or discard it for detached holders.
        """
        ...
