"""
Concrete fixed-rank Tensor implementation (NumPy backend).

This module provides `Tensor`, a rank-tagged container owning one NumPy array,
a unique identity token and a tape-holder, together with the concrete rank
classes `Tensor0D` .. `Tensor4D` and small factories.

Design notes
------------
- A tensor's shape never changes. Rank is fixed by its class; dimensions are
  fixed at construction and checked at every operation boundary.
- Tensors are values: operations never mutate an operand's data.
- A tensor that owns a tape is *moved* when passed into an operation
  (`split_tape_holder`): its tape travels to the result and the input is left
  consumed. Any later use raises `TensorConsumedError`.
- Detached tensors are borrowed read-only and can be reused freely.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Optional, Sequence

import numpy as np
from typing_extensions import Self

from ...domain._errors import TapeError, TensorConsumedError
from ...domain._tape import ITapeHolder
from ...domain._tensor import ITensor
from ...domain._unique_id import UniqueId, unique_id
from .._dtypes import DEFAULT_DTYPE, MAX_RANK
from ..tape._tape_holder import NoTape, OwnsTape, TapeMode
from ._phantom import PhantomTensor
from .mixins.arithmetic import TensorMixinArithmetic
from .mixins.reduction import TensorMixinReduction

logger = logging.getLogger(__name__)


class Tensor(TensorMixinArithmetic, TensorMixinReduction, ITensor):
    """
    Fixed-shape float32 tensor with identity and tape-holder.

    Parameters
    ----------
    data : array-like
        Values of the tensor. Copied and converted to `DEFAULT_DTYPE`.
    tape_holder : ITapeHolder, optional
        Tape-holder to carry. Defaults to a detached `NoTape`.

    Raises
    ------
    ValueError
        If the data rank does not match the class rank, or exceeds `MAX_RANK`.

    Notes
    -----
    Calling `Tensor(data)` directly never yields a rankless instance: it
    returns the concrete rank class matching `data` (`Tensor0D` .. `Tensor4D`),
    as `Tensor.new` / `tensor` do.
    """

    RANK: ClassVar[Optional[int]] = None

    def __new__(
        cls, data: Any = None, tape_holder: Optional[ITapeHolder] = None
    ) -> "Tensor":
        # constructing the base class yields the rank class matching `data`
        if cls.RANK is None:
            cls = tensor_class_for_rank(np.ndim(data))
        return super().__new__(cls)

    def __init__(self, data: Any, tape_holder: Optional[ITapeHolder] = None) -> None:
        arr = np.array(data, dtype=DEFAULT_DTYPE)
        self._check_rank(arr.shape)
        self._init_fields(arr, tape_holder, unique_id())

    def _init_fields(
        self,
        arr: np.ndarray,
        tape_holder: Optional[ITapeHolder],
        uid: UniqueId,
    ) -> None:
        arr.flags.writeable = False
        self._data: Optional[np.ndarray] = arr
        self._shape: tuple[int, ...] = tuple(arr.shape)
        self._id = uid
        self._tape_holder: ITapeHolder = (
            tape_holder if tape_holder is not None else NoTape()
        )
        self._consumed = False

    @classmethod
    def _check_rank(cls, shape: Sequence[int]) -> None:
        ndim = len(shape)
        if ndim > MAX_RANK:
            raise ValueError(f"tensors support rank <= {MAX_RANK}, got shape {tuple(shape)}")
        if cls.RANK is not None and ndim != cls.RANK:
            raise ValueError(
                f"{cls.__name__} requires rank {cls.RANK}, got shape {tuple(shape)}"
            )

    @classmethod
    def _wrap(
        cls,
        arr: np.ndarray,
        tape_holder: Optional[ITapeHolder] = None,
        uid: Optional[UniqueId] = None,
    ) -> "Tensor":
        """
        Build a tensor around `arr` without copying it.

        The concrete class is chosen from `arr.ndim` when called on `Tensor`.
        `arr` must not be mutated afterwards.
        """
        arr = np.asarray(arr, dtype=DEFAULT_DTYPE)
        klass = cls if cls.RANK is not None else tensor_class_for_rank(arr.ndim)
        klass._check_rank(arr.shape)
        out = object.__new__(klass)
        out._init_fields(arr, tape_holder, uid if uid is not None else unique_id())
        return out

    @classmethod
    def new(cls, data: Any) -> "Tensor":
        """
        Create a detached tensor from array-like data.

        Parameters
        ----------
        data : array-like
            Values of the tensor.

        Returns
        -------
        Tensor
            Instance of the rank class matching `data` (or of `cls` when
            called on a rank class).
        """
        return cls._wrap(np.array(data, dtype=DEFAULT_DTYPE))

    # ------------------------------------------------------------------
    # Identity / shape / data
    # ------------------------------------------------------------------
    @property
    def id(self) -> UniqueId:
        return self._id

    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def rank(self) -> int:
        return len(self._shape)

    def numel(self) -> int:
        """
        Return the total number of elements.
        """
        n = 1
        for d in self._shape:
            n *= int(d)
        return n

    def _check_live(self) -> None:
        if self._consumed:
            raise TensorConsumedError(self._id)

    @property
    def data(self) -> np.ndarray:
        """
        Return the backing array (read-only).

        Raises
        ------
        TensorConsumedError
            If the tensor was moved into an operation.
        """
        self._check_live()
        return self._data

    def to_numpy(self) -> np.ndarray:
        """
        Return a writable copy of the tensor data.
        """
        return np.array(self.data, dtype=DEFAULT_DTYPE, copy=True)

    # ------------------------------------------------------------------
    # Tape-holder plumbing
    # ------------------------------------------------------------------
    @property
    def tape_holder(self) -> ITapeHolder:
        self._check_live()
        return self._tape_holder

    @property
    def tape_mode(self) -> TapeMode:
        return self.tape_holder.mode

    def is_traced(self) -> bool:
        """
        Return True if this tensor owns a gradient tape.
        """
        return self.tape_mode is TapeMode.OWNS_TAPE

    def phantom(self) -> PhantomTensor:
        """
        Return the identity and shape of this tensor without its data.
        """
        return PhantomTensor(self._id, self._shape, type(self))

    def trace(self) -> Self:
        """
        Start gradient tracking from this tensor.

        Returns
        -------
        Tensor
            A tensor with the same identity and data that owns a fresh
            `GradientTape`. `self` is left untouched.

        Raises
        ------
        TapeError
            If this tensor already owns a tape.
        """
        if self.is_traced():
            raise TapeError(f"Tensor(id={self._id}) is already traced.")
        logger.debug("tracing %s id=%d", type(self).__name__, self._id)
        return type(self)._wrap(self.data, OwnsTape(), uid=self._id)

    def split_tape_holder(self) -> tuple[Self, ITapeHolder]:
        """
        Move the tape-holder out of this tensor.

        Returns
        -------
        tuple[Tensor, ITapeHolder]
            A detached tensor with the same identity and data, and the holder.

        Notes
        -----
        If this tensor owned a tape it is consumed by the call. Detached
        tensors are only borrowed and remain usable.
        """
        holder = self.tape_holder
        detached = type(self)._wrap(self._data, NoTape(), uid=self._id)
        if holder.mode is TapeMode.OWNS_TAPE:
            self._consumed = True
            self._data = None
            self._tape_holder = NoTape()
        return detached, holder

    def with_tape_holder(self, tape_holder: ITapeHolder) -> Self:
        """
        Return this tensor's value carrying `tape_holder`.

        The returned tensor keeps the identity of `self`.
        """
        return type(self)._wrap(self.data, tape_holder, uid=self._id)

    def __repr__(self) -> str:
        if self._consumed:
            return f"{type(self).__name__}(id={self._id}, consumed)"
        return (
            f"{type(self).__name__}(id={self._id}, shape={self._shape}, "
            f"tape={self._tape_holder.mode.value}, data={self._data.tolist()})"
        )


class Tensor0D(Tensor):
    """Scalar tensor."""

    RANK = 0


class Tensor1D(Tensor):
    """Vector tensor of shape (N,)."""

    RANK = 1


class Tensor2D(Tensor):
    """Matrix tensor of shape (M, N)."""

    RANK = 2


class Tensor3D(Tensor):
    """Rank-3 tensor of shape (M, N, O)."""

    RANK = 3


class Tensor4D(Tensor):
    """Rank-4 tensor of shape (M, N, O, P)."""

    RANK = 4


_RANK_CLASSES: dict[int, type[Tensor]] = {
    0: Tensor0D,
    1: Tensor1D,
    2: Tensor2D,
    3: Tensor3D,
    4: Tensor4D,
}


def tensor_class_for_rank(rank: int) -> type[Tensor]:
    """
    Return the concrete tensor class for `rank`.

    Raises
    ------
    ValueError
        If `rank` is outside 0..4.
    """
    try:
        return _RANK_CLASSES[rank]
    except KeyError:
        raise ValueError(f"tensors support rank <= {MAX_RANK}, got rank {rank}") from None


def tensor(data: Any) -> Tensor:
    """
    Create a detached tensor of the rank matching `data`.
    """
    return Tensor.new(data)


def zeros(shape: Sequence[int]) -> Tensor:
    """
    Create a detached zero-filled tensor of `shape`.
    """
    return Tensor._wrap(np.zeros(tuple(shape), dtype=DEFAULT_DTYPE))


def ones(shape: Sequence[int]) -> Tensor:
    """
    Create a detached one-filled tensor of `shape`.
    """
    return Tensor._wrap(np.ones(tuple(shape), dtype=DEFAULT_DTYPE))


def randn(
    shape: Sequence[int], rng: Optional[np.random.Generator] = None
) -> Tensor:
    """
    Create a detached tensor of standard-normal samples.

    Parameters
    ----------
    shape : Sequence[int]
        Tensor shape.
    rng : numpy.random.Generator, optional
        Source of randomness. A fresh default generator is used when omitted.

    Returns
    -------
    Tensor
        Detached tensor of the rank class matching `shape`.
    """
    rng = rng if rng is not None else np.random.default_rng()
    return Tensor._wrap(np.asarray(rng.standard_normal(tuple(shape)), dtype=DEFAULT_DTYPE))
