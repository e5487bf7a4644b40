from ._phantom import PhantomTensor
from ._tensor import (
    Tensor,
    Tensor0D,
    Tensor1D,
    Tensor2D,
    Tensor3D,
    Tensor4D,
    ones,
    randn,
    tensor,
    tensor_class_for_rank,
    zeros,
)
