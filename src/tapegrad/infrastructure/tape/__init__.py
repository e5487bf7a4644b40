from ._gradient_tape import GradientTape, Gradients
from ._tape_holder import NoTape, OwnsTape, TapeMode

__all__ = [
    GradientTape.__name__,
    Gradients.__name__,
    NoTape.__name__,
    OwnsTape.__name__,
    TapeMode.__name__,
]
