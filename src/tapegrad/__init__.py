"""
tapegrad: reverse-mode automatic differentiation over fixed-shape tensors.

Typical usage::

    from tapegrad import Tensor2D, Tensor1D, backward

    w = Tensor2D([[1.0, 2.0], [3.0, 4.0]])
    b = Tensor1D([0.5, -0.5])
    x = Tensor2D([[1.0, 0.0], [0.0, 1.0]]).trace()

    loss = (x @ w + b).mean()
    grads = backward(loss)
    grads.gradient(x)
"""

from .domain._errors import (
    DetachedOperandRequiredError,
    ShapeMismatchError,
    TapeConsumedError,
    TapeError,
    TapeMergeError,
    TensorConsumedError,
)
from .domain._unique_id import UniqueId
from .infrastructure._backward import backward
from .infrastructure.ops import (
    add,
    broadcast_inner_sub,
    broadcast_outer_add,
    matmat_mul,
    mul,
    reduce_mean,
    reduce_sum,
    sub,
    vecmat_mul,
)
from .infrastructure.tape import GradientTape, Gradients, NoTape, OwnsTape, TapeMode
from .infrastructure.tensor import (
    PhantomTensor,
    Tensor,
    Tensor0D,
    Tensor1D,
    Tensor2D,
    Tensor3D,
    Tensor4D,
    ones,
    randn,
    tensor,
    zeros,
)

__version__ = "0.1.0"
