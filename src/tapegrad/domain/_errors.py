"""
Tape- and shape-related exceptions for tapegrad.

This module defines the runtime errors raised by the gradient-tape subsystem.
They signal misuse of tape ownership (reusing a moved tensor, merging two
tapes, replaying a drained tape) and operand shapes that do not fit an
operation.

Every binary operation validates its operand shapes before touching any
tape state, so a rejected call leaves both operands usable.
"""

from typing import Sequence


class TapeError(RuntimeError):
    """
    Base class for gradient-tape ownership errors.

    Subclasses are raised when the single-owner discipline of a tape is
    violated. They are programming errors rather than recoverable conditions.
    """


class TapeConsumedError(TapeError):
    """
    Raised when a tape is used after it has been drained or moved away.

    A `GradientTape` is executed exactly once by the backward pass. Replaying
    it, appending to it afterwards, or taking it out of a holder twice raises
    this error.
    """

    def __init__(self, action: str) -> None:
        """
        Initialize the TapeConsumedError.

        Parameters
        ----------
        action : str
            The attempted action (e.g., "execute", "add_operation").
        """
        super().__init__(f"Cannot {action}: the gradient tape was already consumed.")
        self.action = action


class TensorConsumedError(TapeError):
    """
    Raised when a traced tensor is used after being moved into an operation.

    Passing a tensor that owns a tape into an operation transfers the tape to
    the result. The input is left empty and must not be used again.
    """

    def __init__(self, tensor_id: int) -> None:
        """
        Initialize the TensorConsumedError.

        Parameters
        ----------
        tensor_id : int
            Identity token of the consumed tensor.
        """
        super().__init__(
            f"Tensor(id={tensor_id}) was moved into an operation and cannot be reused."
        )
        self.tensor_id = tensor_id


class TapeMergeError(TapeError):
    """
    Raised when both operands of a binary operation own a tape.

    Two independent tapes cannot be merged; exactly one operand may be traced.
    """

    def __init__(self, op: str) -> None:
        super().__init__(
            f"{op} received two traced operands; exactly one operand may own a tape."
        )
        self.op = op


class DetachedOperandRequiredError(TapeError):
    """
    Raised when an operand required to be detached owns a tape.

    Operations such as `matmat_mul` and the broadcast variants only accept a
    traced left-hand operand; the right-hand operand is borrowed read-only.
    """

    def __init__(self, op: str) -> None:
        super().__init__(f"{op} requires a detached right-hand operand.")
        self.op = op


class ShapeMismatchError(ValueError):
    """
    Raised when operand shapes are incompatible for an operation.

    Attributes
    ----------
    op : str
        The operation name (e.g., "add", "matmat_mul").
    lhs : tuple[int, ...]
        Shape of the left-hand operand.
    rhs : tuple[int, ...]
        Shape of the right-hand operand.
    """

    def __init__(
        self,
        op: str,
        lhs: Sequence[int],
        rhs: Sequence[int],
        detail: str = "",
    ) -> None:
        """
        Initialize the ShapeMismatchError.

        Parameters
        ----------
        op : str
            The operation that rejected the operands.
        lhs : Sequence[int]
            Left-hand operand shape.
        rhs : Sequence[int]
            Right-hand operand shape.
        detail : str, optional
            Extra explanation appended to the message.
        """
        msg = f"{op}: incompatible shapes {tuple(lhs)} and {tuple(rhs)}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg + ".")
        self.op = op
        self.lhs = tuple(lhs)
        self.rhs = tuple(rhs)
