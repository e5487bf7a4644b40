"""
Backend-agnostic contracts of the gradient-tape subsystem.

This package contains the tensor and tape protocols, the identity token type
and the error taxonomy. It does not import NumPy.
"""

from ._errors import (
    DetachedOperandRequiredError,
    ShapeMismatchError,
    TapeConsumedError,
    TapeError,
    TapeMergeError,
    TensorConsumedError,
)
from ._tape import IPhantom, ITape, ITapeHolder
from ._tensor import ITensor
from ._unique_id import UniqueId, unique_id
