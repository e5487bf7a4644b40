import unittest

from tapegrad.domain._errors import TapeConsumedError
from tapegrad.domain._tape import ITapeHolder
from tapegrad.infrastructure.tape._gradient_tape import GradientTape
from tapegrad.infrastructure.tape._tape_holder import NoTape, OwnsTape, TapeMode


class TestNoTape(unittest.TestCase):

    def test_mode_is_no_tape(self) -> None:
        self.assertIs(NoTape().mode, TapeMode.NO_TAPE)

    def test_add_operation_is_discarded(self) -> None:
        calls = []
        holder = NoTape()
        holder.add_operation(lambda tape: calls.append(tape))
        self.assertEqual(calls, [])

    def test_satisfies_holder_protocol(self) -> None:
        self.assertIsInstance(NoTape(), ITapeHolder)


class TestOwnsTape(unittest.TestCase):

    def test_creates_fresh_tape_by_default(self) -> None:
        holder = OwnsTape()
        self.assertIs(holder.mode, TapeMode.OWNS_TAPE)
        self.assertIsInstance(holder.tape, GradientTape)
        self.assertEqual(len(holder.tape), 0)

    def test_add_operation_appends_to_owned_tape(self) -> None:
        tape = GradientTape()
        holder = OwnsTape(tape)

        holder.add_operation(lambda t: None)
        holder.add_operation(lambda t: None)

        self.assertEqual(len(tape), 2)

    def test_take_tape_moves_ownership(self) -> None:
        tape = GradientTape()
        holder = OwnsTape(tape)

        self.assertIs(holder.take_tape(), tape)
        with self.assertRaises(TapeConsumedError):
            holder.take_tape()
        with self.assertRaises(TapeConsumedError):
            holder.add_operation(lambda t: None)

    def test_satisfies_holder_protocol(self) -> None:
        self.assertIsInstance(OwnsTape(), ITapeHolder)


if __name__ == "__main__":
    unittest.main()
