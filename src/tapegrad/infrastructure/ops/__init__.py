"""
Tape-recording operations and the NumPy kernels they are built on.
"""

from ._binary_ops import (
    add,
    broadcast_inner_sub,
    broadcast_outer_add,
    matmat_mul,
    mul,
    sub,
    vecmat_mul,
)
from ._reduce_ops import reduce_mean, reduce_sum
