import unittest
import numpy as np

from tapegrad.infrastructure._backward import backward
from tapegrad.infrastructure.ops._reduce_ops import reduce_mean, reduce_sum
from tapegrad.infrastructure.tensor._tensor import Tensor0D, Tensor3D, tensor


class TestReduceOps(unittest.TestCase):

    def test_sum_forward_and_backward(self) -> None:
        x = Tensor3D(np.arange(24, dtype=np.float32).reshape(2, 3, 4))

        r = reduce_sum(x.trace())
        self.assertIsInstance(r, Tensor0D)
        self.assertEqual(float(r.data), float(np.arange(24).sum()))

        grads = backward(r)
        np.testing.assert_array_equal(grads.gradient(x), np.ones((2, 3, 4)))

    def test_mean_forward_and_backward(self) -> None:
        x = tensor([[1.0, 2.0], [3.0, 6.0]])

        r = reduce_mean(x.trace())
        self.assertAlmostEqual(float(r.data), 3.0)

        grads = backward(r)
        np.testing.assert_allclose(grads.gradient(x), np.full((2, 2), 0.25))

    def test_methods_route_to_reductions(self) -> None:
        x = tensor([1.0, 2.0, 3.0])
        self.assertEqual(float(x.sum().data), 6.0)
        self.assertEqual(float(x.mean().data), 2.0)

    def test_reduction_of_scalar(self) -> None:
        x = Tensor0D(5.0)
        grads = backward(x.trace().sum())
        self.assertEqual(float(grads.gradient(x)), 1.0)

    def test_ops_namespace_leaves_builtins_unshadowed(self) -> None:
        import tapegrad
        import tapegrad.infrastructure.ops as ops

        for namespace in (ops, tapegrad):
            with self.subTest(namespace=namespace.__name__):
                self.assertNotIn("sum", vars(namespace))
                self.assertNotIn("mean", vars(namespace))
        self.assertIs(ops.reduce_sum, reduce_sum)
        self.assertIs(ops.reduce_mean, reduce_mean)


if __name__ == "__main__":
    unittest.main()
