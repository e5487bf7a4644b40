"""
Process-unique identity tokens for tensors.

Every tensor receives a `UniqueId` at construction. The id survives moves
(splitting a tensor from its tape keeps the id) and is the only information a
phantom carries into a backward closure, where it keys the gradient store.
"""

from itertools import count
from typing import NewType

UniqueId = NewType("UniqueId", int)

_ids = count(1)


def unique_id() -> UniqueId:
    """
    Return a fresh identity token.

    Tokens increase monotonically and are never reused within a process.

    Returns
    -------
    UniqueId
        New identity token.
    """
    return UniqueId(next(_ids))
