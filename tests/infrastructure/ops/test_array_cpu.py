import unittest
import numpy as np

from tapegrad.infrastructure.ops._array_cpu import (
    map_elems,
    matmul,
    reduce_inner,
    transpose,
)


class TestMatmulCpu(unittest.TestCase):

    def test_matches_numpy(self) -> None:
        rng = np.random.default_rng(0)
        x = rng.standard_normal((3, 5)).astype(np.float32)
        y = rng.standard_normal((5, 2)).astype(np.float32)

        out = matmul(x, y)

        self.assertEqual(out.shape, (3, 2))
        self.assertEqual(out.dtype, np.float32)
        np.testing.assert_allclose(out, x @ y, rtol=1e-5, atol=1e-5)

    def test_small_known_product(self) -> None:
        x = np.array([[1.0, 2.0], [3.0, 4.0]], dtype=np.float32)
        y = np.array([[5.0, 6.0], [7.0, 8.0]], dtype=np.float32)
        np.testing.assert_array_equal(matmul(x, y), [[19.0, 22.0], [43.0, 50.0]])

    def test_inner_dim_mismatch_raises(self) -> None:
        with self.assertRaises(ValueError):
            matmul(np.zeros((2, 3)), np.zeros((2, 3)))

    def test_non_2d_raises(self) -> None:
        with self.assertRaises(ValueError):
            matmul(np.zeros(3), np.zeros((3, 2)))


class TestTransposeCpu(unittest.TestCase):

    def test_transpose_is_contiguous_copy(self) -> None:
        x = np.arange(6, dtype=np.float32).reshape(2, 3)
        xt = transpose(x)

        self.assertEqual(xt.shape, (3, 2))
        self.assertTrue(xt.flags["C_CONTIGUOUS"])
        np.testing.assert_array_equal(xt, x.T)
        xt[0, 0] = 42.0
        self.assertEqual(x[0, 0], 0.0)

    def test_rejects_non_2d(self) -> None:
        with self.assertRaises(ValueError):
            transpose(np.zeros(3))


class TestMapElems(unittest.TestCase):

    def test_constant_map_keeps_shape(self) -> None:
        x = np.arange(24, dtype=np.float32).reshape(2, 3, 4)
        out = map_elems(x, lambda _: -1.0)
        self.assertEqual(out.shape, x.shape)
        np.testing.assert_array_equal(out, -np.ones_like(x))

    def test_map_sees_each_value(self) -> None:
        x = np.array([1.0, 2.0, 3.0], dtype=np.float32)
        np.testing.assert_array_equal(map_elems(x, lambda v: v * v), [1.0, 4.0, 9.0])

    def test_result_is_fresh_float32_array(self) -> None:
        x = np.arange(6, dtype=np.float64).reshape(2, 3)
        out = map_elems(x, lambda v: v * 2.0)

        self.assertEqual(out.dtype, np.float32)
        self.assertFalse(np.shares_memory(out, x))
        np.testing.assert_array_equal(out, x * 2.0)

    def test_empty_input(self) -> None:
        out = map_elems(np.zeros((0, 3), dtype=np.float32), lambda _: 1.0)
        self.assertEqual(out.shape, (0, 3))
        self.assertEqual(out.dtype, np.float32)

    def test_scalar_input(self) -> None:
        out = map_elems(np.array(2.0, dtype=np.float32), lambda v: v + 1.0)
        self.assertEqual(out.shape, ())
        self.assertEqual(float(out), 3.0)


class TestReduceInner(unittest.TestCase):

    def test_sums_trailing_axis(self) -> None:
        x = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]], dtype=np.float32)
        out = reduce_inner(x)
        self.assertEqual(out.shape, (2,))
        np.testing.assert_array_equal(out, [6.0, 15.0])

    def test_vector_reduces_to_scalar(self) -> None:
        out = reduce_inner(np.array([1.0, 2.0, 3.0], dtype=np.float32))
        self.assertEqual(out.shape, ())
        self.assertEqual(float(out), 6.0)

    def test_rank_four(self) -> None:
        x = np.ones((2, 3, 4, 5), dtype=np.float32)
        out = reduce_inner(x)
        self.assertEqual(out.shape, (2, 3, 4))
        np.testing.assert_array_equal(out, np.full((2, 3, 4), 5.0))

    def test_scalar_rejected(self) -> None:
        with self.assertRaises(ValueError):
            reduce_inner(np.array(1.0))


if __name__ == "__main__":
    unittest.main()
