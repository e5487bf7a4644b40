"""
Tape-holder variants.

Every tensor carries a tape-holder deciding whether operations on it are
recorded:

- `NoTape` : detached. Used for constants and frozen parameters. Recording
  an operation is a no-op.
- `OwnsTape` : attached. Exclusively owns one `GradientTape` and appends
  every recorded operation to it.

Ownership of an `OwnsTape` moves from an operation's input to its output.
Once the tape has been taken out (by the backward pass), the holder refuses
further use.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

from ...domain._errors import TapeConsumedError
from ._gradient_tape import GradientTape


class TapeMode(Enum):
    """
    Enumeration of tape-holder variants.

    Attributes
    ----------
    NO_TAPE : TapeMode
        Detached holder; gradients are not tracked.
    OWNS_TAPE : TapeMode
        Attached holder owning a gradient tape.
    """

    NO_TAPE = "no_tape"
    OWNS_TAPE = "owns_tape"


class NoTape:
    """
    Detached tape-holder.

    Carries no state; all instances are interchangeable.
    """

    __slots__ = ()

    @property
    def mode(self) -> TapeMode:
        return TapeMode.NO_TAPE

    def add_operation(self, operation: Callable[[GradientTape], None]) -> None:
        return None

    def __repr__(self) -> str:
        return "NoTape()"


class OwnsTape:
    """
    Attached tape-holder exclusively owning one `GradientTape`.

    Parameters
    ----------
    tape : GradientTape, optional
        The tape to own. A fresh tape is created when omitted.
    """

    __slots__ = ("_tape",)

    def __init__(self, tape: Optional[GradientTape] = None) -> None:
        self._tape: Optional[GradientTape] = tape if tape is not None else GradientTape()

    @property
    def mode(self) -> TapeMode:
        return TapeMode.OWNS_TAPE

    @property
    def tape(self) -> GradientTape:
        """
        Return the owned tape.

        Raises
        ------
        TapeConsumedError
            If the tape was already taken out of this holder.
        """
        if self._tape is None:
            raise TapeConsumedError("access tape")
        return self._tape

    def add_operation(self, operation: Callable[[GradientTape], None]) -> None:
        self.tape.add_operation(operation)

    def take_tape(self) -> GradientTape:
        """
        Move the tape out of this holder, leaving the holder empty.

        Returns
        -------
        GradientTape
            The previously owned tape.

        Raises
        ------
        TapeConsumedError
            If the tape was already taken.
        """
        if self._tape is None:
            raise TapeConsumedError("take tape")
        tape, self._tape = self._tape, None
        return tape

    def __repr__(self) -> str:
        return f"OwnsTape({self._tape!r})"
