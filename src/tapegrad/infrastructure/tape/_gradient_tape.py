"""
Gradient tape and completed gradient store (NumPy backend).

This module provides `GradientTape`, the mutable ledger recording one backward
closure per differentiable operation, and `Gradients`, the read-only result
handed back to callers once the tape has been drained.

Design notes
------------
- Gradients are keyed by tensor identity (`UniqueId`), never by tensor
  object, so closures only need phantoms.
- Gradient entries are created zero-filled on first access using the
  phantom's shape; closures always *add* into them.
- Closures are replayed exactly once, last registered first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Union

import numpy as np

from ...domain._errors import TapeConsumedError
from ...domain._tape import IPhantom
from ...domain._tensor import ITensor
from ...domain._unique_id import UniqueId
from .._dtypes import DEFAULT_DTYPE

logger = logging.getLogger(__name__)

BackwardOp = Callable[["GradientTape"], None]


@dataclass(frozen=True)
class Gradients:
    """
    Completed gradient store returned by the backward pass.

    Attributes
    ----------
    store : dict[UniqueId, np.ndarray]
        Accumulated gradient for every identity that received a contribution.

    Notes
    -----
    Lookups for an identity that never received a contribution return a
    zero-filled array instead of failing: a tensor may legitimately take no
    part in the gradient of the output.
    """

    store: dict[UniqueId, np.ndarray] = field(default_factory=dict)

    def gradient_for(self, uid: UniqueId, shape: tuple[int, ...] = ()) -> np.ndarray:
        """
        Return the gradient accumulated for `uid`.

        Parameters
        ----------
        uid : UniqueId
            Identity token of the tensor.
        shape : tuple[int, ...], optional
            Shape of the zero gradient returned when `uid` is unknown.
            Defaults to a scalar.

        Returns
        -------
        np.ndarray
            The accumulated gradient (read-only), or zeros of `shape`.
        """
        grad = self.store.get(uid)
        if grad is None:
            return np.zeros(shape, dtype=DEFAULT_DTYPE)
        return grad

    def gradient(self, t: Union[ITensor, IPhantom]) -> np.ndarray:
        """
        Return the gradient for a tensor or phantom, using its own shape as
        the zero default.
        """
        return self.gradient_for(t.id, tuple(t.shape))

    def __contains__(self, uid: object) -> bool:
        return uid in self.store

    def __len__(self) -> int:
        return len(self.store)

    def __iter__(self) -> Iterator[UniqueId]:
        return iter(self.store)


class GradientTape:
    """
    Ordered ledger of backward closures plus a gradient store.

    A tape is created when a leaf tensor is traced, travels from operation
    to operation inside an `OwnsTape` holder, and is consumed exactly once by
    `execute`.
    """

    def __init__(self) -> None:
        self._gradients: dict[UniqueId, np.ndarray] = {}
        self._operations: list[BackwardOp] = []
        self._consumed = False

    def __len__(self) -> int:
        return len(self._operations)

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else f"{len(self._operations)} ops"
        return f"GradientTape({state})"

    @property
    def consumed(self) -> bool:
        return self._consumed

    def _check_live(self, action: str) -> None:
        if self._consumed:
            raise TapeConsumedError(action)

    def add_operation(self, operation: BackwardOp) -> None:
        """
        Append a backward closure.

        Parameters
        ----------
        operation : Callable[[GradientTape], None]
            Closure invoked with this tape during `execute`.

        Raises
        ------
        TapeConsumedError
            If the tape was already executed.
        """
        self._check_live("add_operation")
        self._operations.append(operation)
        logger.debug(
            "recorded backward op %r (tape length %d)",
            getattr(operation, "__qualname__", operation),
            len(self._operations),
        )

    def gradient(self, phantom: IPhantom) -> np.ndarray:
        """
        Return the gradient accumulated so far for `phantom`.

        The entry is inserted zero-filled if absent. The returned array is the
        stored one; callers that only read must not mutate it.
        """
        return self.mut_gradient(phantom)

    def mut_gradient(self, phantom: IPhantom) -> np.ndarray:
        """
        Return the gradient entry for `phantom` for in-place accumulation.

        Parameters
        ----------
        phantom : IPhantom
            Identity and shape of the tensor.

        Returns
        -------
        np.ndarray
            Mutable gradient array of shape `phantom.shape`.
        """
        grad = self._gradients.get(phantom.id)
        if grad is None:
            grad = np.zeros(phantom.shape, dtype=DEFAULT_DTYPE)
            self._gradients[phantom.id] = grad
        return grad

    def execute(self) -> Gradients:
        """
        Replay every closure in reverse registration order and drain the tape.

        Returns
        -------
        Gradients
            The completed gradient store.

        Raises
        ------
        TapeConsumedError
            If the tape was already executed.
        """
        self._check_live("execute")
        self._consumed = True

        operations, self._operations = self._operations, []
        logger.debug("executing %d backward operations", len(operations))
        while operations:
            operation = operations.pop()
            operation(self)

        gradients, self._gradients = self._gradients, {}
        for grad in gradients.values():
            grad.flags.writeable = False
        return Gradients(store=gradients)
