"""Unit tests for the fontmatrix exception hierarchy."""

import unittest

from fontmatrix.errors import (
    ConfigurationError,
    DegenerateInputError,
    FontInvalidError,
    FontIOError,
    FontMatrixError,
    FontNotLoadedError,
    SolverDidNotConvergeError,
)


class TestHierarchy(unittest.TestCase):
    """Every error is a FontMatrixError and its closest builtin."""

    def test_base_class(self):
        for cls in (ConfigurationError, DegenerateInputError, FontInvalidError,
                    FontIOError, FontNotLoadedError, SolverDidNotConvergeError):
            self.assertTrue(issubclass(cls, FontMatrixError), cls)

    def test_builtin_bases(self):
        self.assertTrue(issubclass(FontNotLoadedError, KeyError))
        self.assertTrue(issubclass(FontInvalidError, ValueError))
        self.assertTrue(issubclass(ConfigurationError, ValueError))
        self.assertTrue(issubclass(FontIOError, OSError))
        self.assertTrue(issubclass(DegenerateInputError, ValueError))
        self.assertTrue(issubclass(SolverDidNotConvergeError, RuntimeError))


class TestFontNotLoadedError(unittest.TestCase):

    def test_message_not_loaded(self):
        err = FontNotLoadedError('abc')
        self.assertEqual(err.key, 'abc')
        self.assertFalse(err.pending)
        self.assertEqual(str(err), "Font 'abc' is not loaded")

    def test_message_pending(self):
        err = FontNotLoadedError('abc', pending=True)
        self.assertTrue(err.pending)
        self.assertIn("still loading", str(err))

    def test_caught_as_key_error(self):
        with self.assertRaises(KeyError):
            raise FontNotLoadedError('missing')


class TestSolverDidNotConvergeError(unittest.TestCase):

    def test_attributes(self):
        err = SolverDidNotConvergeError(20, 64, 12.5)
        self.assertEqual(err.target, 20)
        self.assertEqual(err.iterations, 64)
        self.assertEqual(err.last_size, 12.5)
        self.assertIn("64 iterations", str(err))


if __name__ == '__main__':
    unittest.main()
