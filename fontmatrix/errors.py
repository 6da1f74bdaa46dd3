"""Exception hierarchy for fontmatrix.

Every failure surfaced by the package derives from FontMatrixError so callers
can catch the whole family at once, while the concrete classes also inherit
from the closest builtin (KeyError, ValueError, OSError, RuntimeError) to keep
ordinary ``except`` clauses working.

Classes:
    FontMatrixError: Base class.
    FontNotLoadedError: A cache key was used before its font finished loading.
    FontInvalidError: Font bytes could not be parsed or lack required tables.
    ConfigurationError: Conflicting or out-of-range options.
    FontIOError: Reading a font file failed.
    DegenerateInputError: An operation needs a non-empty render.
    SolverDidNotConvergeError: The size solver hit its iteration cap.
"""


class FontMatrixError(Exception):
    """Base class for all fontmatrix errors."""


class FontNotLoadedError(FontMatrixError, KeyError):
    """Raised when a font key is unknown or its load has not completed."""

    def __init__(self, key: str, pending: bool = False):
        self.key = key
        self.pending = pending
        state = "still loading" if pending else "not loaded"
        super().__init__(f"Font {key!r} is {state}")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return self.args[0]


class FontInvalidError(FontMatrixError, ValueError):
    """Raised when font data cannot be parsed or is missing metric tables."""


class ConfigurationError(FontMatrixError, ValueError):
    """Raised for conflicting or invalid options."""


class FontIOError(FontMatrixError, OSError):
    """Raised when a font file cannot be read."""


class DegenerateInputError(FontMatrixError, ValueError):
    """Raised when an operation requires a render with non-zero extent."""


class SolverDidNotConvergeError(FontMatrixError, RuntimeError):
    """Raised when the size solver exceeds its iteration budget.

    Attributes:
        target: The pixel height that was requested.
        iterations: Number of measurements performed.
        last_size: The last font size probed.
    """

    def __init__(self, target: float, iterations: int, last_size: float):
        self.target = target
        self.iterations = iterations
        self.last_size = last_size
        super().__init__(
            f"Could not find a font size for height {target} "
            f"after {iterations} iterations (last size {last_size:.4f})"
        )
