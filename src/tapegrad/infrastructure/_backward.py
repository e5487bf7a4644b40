"""
Backward pass entry point.

`backward` takes a scalar tensor that owns a tape, seeds its gradient with
1.0, drains the tape (running every recorded closure last-in first-out) and
returns the completed `Gradients` store. The tensor and its tape are
consumed; a second call on either raises.
"""

from __future__ import annotations

import logging

from ..domain._errors import TapeError
from .tape._gradient_tape import Gradients
from .tape._tape_holder import OwnsTape
from .tensor._tensor import Tensor

logger = logging.getLogger(__name__)


def backward(t: Tensor) -> Gradients:
    """
    Compute gradients of the scalar `t` with respect to every traced input.

    Parameters
    ----------
    t : Tensor
        Rank-0 tensor owning a gradient tape. It is consumed.

    Returns
    -------
    Gradients
        Gradient store keyed by tensor identity.

    Raises
    ------
    ValueError
        If `t` is not a scalar.
    TapeError
        If `t` does not own a tape.
    TensorConsumedError
        If `t` was already moved (e.g., backward was already run on it).
    """
    if t.rank != 0:
        raise ValueError(f"backward requires a scalar tensor, got shape {t.shape}")

    t, tape_holder = t.split_tape_holder()
    if not isinstance(tape_holder, OwnsTape):
        raise TapeError(
            f"backward requires a traced tensor; Tensor(id={t.id}) carries no tape."
        )

    tape = tape_holder.take_tape()
    logger.debug("backward from id=%d over %d recorded ops", t.id, len(tape))
    tape.mut_gradient(t.phantom()).fill(1.0)
    gradients = tape.execute()
    logger.debug("backward produced %d gradients", len(gradients))
    return gradients
