import unittest
import numpy as np

from tapegrad.domain._errors import DetachedOperandRequiredError, ShapeMismatchError
from tapegrad.infrastructure._backward import backward
from tapegrad.infrastructure.ops._binary_ops import matmat_mul, vecmat_mul
from tapegrad.infrastructure.tensor._tensor import Tensor1D, Tensor2D

from ._grad_check_utils import finite_diff_grad


class TestMatmatMul(unittest.TestCase):

    def setUp(self) -> None:
        rng = np.random.default_rng(7)
        self.a_np = rng.standard_normal((3, 4)).astype(np.float32)
        self.b_np = rng.standard_normal((4, 2)).astype(np.float32)

    def test_forward_matches_numpy(self) -> None:
        r = matmat_mul(Tensor2D(self.a_np), Tensor2D(self.b_np))
        self.assertIsInstance(r, Tensor2D)
        self.assertEqual(r.shape, (3, 2))
        np.testing.assert_allclose(r.data, self.a_np @ self.b_np, rtol=1e-5, atol=1e-5)

    def test_gradients_closed_form(self) -> None:
        a = Tensor2D(self.a_np)
        b = Tensor2D(self.b_np)

        grads = backward(matmat_mul(a.trace(), b).sum())

        g = np.ones((3, 2), dtype=np.float32)
        np.testing.assert_allclose(
            grads.gradient(a), g @ self.b_np.T, rtol=1e-5, atol=1e-5
        )
        np.testing.assert_allclose(
            grads.gradient(b), self.a_np.T @ g, rtol=1e-5, atol=1e-5
        )

    def test_gradients_match_finite_difference(self) -> None:
        a = Tensor2D(self.a_np)
        b = Tensor2D(self.b_np)

        grads = backward(matmat_mul(a.trace(), b).mean())

        b64 = self.b_np.astype(np.float64)
        a64 = self.a_np.astype(np.float64)
        expected_a = finite_diff_grad(lambda v: float(np.mean(v @ b64)), a64)
        expected_b = finite_diff_grad(lambda v: float(np.mean(a64 @ v)), b64)
        np.testing.assert_allclose(grads.gradient(a), expected_a, rtol=1e-3, atol=1e-4)
        np.testing.assert_allclose(grads.gradient(b), expected_b, rtol=1e-3, atol=1e-4)

    def test_traced_rhs_rejected(self) -> None:
        with self.assertRaises(DetachedOperandRequiredError):
            matmat_mul(Tensor2D(self.a_np), Tensor2D(self.b_np).trace())

    def test_inner_dimension_mismatch(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            matmat_mul(Tensor2D(self.a_np), Tensor2D(self.a_np))

    def test_rank_mismatch(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            matmat_mul(Tensor1D([1.0, 2.0, 3.0, 4.0]), Tensor2D(self.b_np))


class TestVecmatMul(unittest.TestCase):

    def setUp(self) -> None:
        rng = np.random.default_rng(11)
        self.v_np = rng.standard_normal(3).astype(np.float32)
        self.m_np = rng.standard_normal((3, 5)).astype(np.float32)

    def test_forward_matches_numpy(self) -> None:
        r = vecmat_mul(Tensor1D(self.v_np), Tensor2D(self.m_np))
        self.assertIsInstance(r, Tensor1D)
        self.assertEqual(r.shape, (5,))
        np.testing.assert_allclose(r.data, self.v_np @ self.m_np, rtol=1e-5, atol=1e-5)

    def test_gradients_closed_form(self) -> None:
        v = Tensor1D(self.v_np)
        m = Tensor2D(self.m_np)

        grads = backward(vecmat_mul(v.trace(), m).sum())

        g = np.ones(5, dtype=np.float32)
        np.testing.assert_allclose(
            grads.gradient(v), self.m_np @ g, rtol=1e-5, atol=1e-5
        )
        np.testing.assert_allclose(
            grads.gradient(m), np.outer(self.v_np, g), rtol=1e-5, atol=1e-5
        )

    def test_gradients_match_finite_difference(self) -> None:
        v = Tensor1D(self.v_np)
        m = Tensor2D(self.m_np)

        grads = backward(vecmat_mul(v.trace(), m).mean())

        v64 = self.v_np.astype(np.float64)
        m64 = self.m_np.astype(np.float64)
        expected_v = finite_diff_grad(lambda x: float(np.mean(x @ m64)), v64)
        expected_m = finite_diff_grad(lambda x: float(np.mean(v64 @ x)), m64)
        np.testing.assert_allclose(grads.gradient(v), expected_v, rtol=1e-3, atol=1e-4)
        np.testing.assert_allclose(grads.gradient(m), expected_m, rtol=1e-3, atol=1e-4)

    def test_traced_rhs_rejected(self) -> None:
        with self.assertRaises(DetachedOperandRequiredError):
            vecmat_mul(Tensor1D(self.v_np), Tensor2D(self.m_np).trace())

    def test_length_mismatch(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            vecmat_mul(Tensor1D([1.0, 2.0]), Tensor2D(self.m_np))


if __name__ == "__main__":
    unittest.main()
