import unittest

from tapegrad.domain._unique_id import unique_id


class TestUniqueId(unittest.TestCase):

    def test_ids_are_distinct(self) -> None:
        ids = [unique_id() for _ in range(100)]
        self.assertEqual(len(set(ids)), len(ids))

    def test_ids_increase(self) -> None:
        a = unique_id()
        b = unique_id()
        self.assertLess(a, b)


if __name__ == "__main__":
    unittest.main()
