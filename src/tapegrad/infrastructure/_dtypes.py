"""
Library-wide numeric constants.

All tensor data and gradients are stored as `DEFAULT_DTYPE`. Ranks above
`MAX_RANK` are rejected by the tensor constructors.
"""

import numpy as np

DEFAULT_DTYPE = np.float32
"""Element type of every tensor and gradient array."""

MAX_RANK = 4
"""Highest supported tensor rank."""
