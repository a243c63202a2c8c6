"""Error types raised by the mutbench core.

All errors subclass ValueError so callers that already guard pipeline
steps with `except ValueError` keep working.
"""

from typing import Optional, Tuple


class MutbenchError(ValueError):
    """Base class for benchmark errors."""


class MalformedInputError(MutbenchError):
    """Sequences of unequal length, an empty table, or missing columns."""


class OutOfRangeError(MutbenchError):
    """Percentile bounds or sampling sizes outside what the table allows."""

    def __init__(self, message: str, bounds: Optional[Tuple] = None):
        super().__init__(message)
        self.bounds = bounds


class InsufficientCandidatesError(MutbenchError):
    """A mutant strategy was asked for more mutants than it can produce."""

    def __init__(self, strategy: str, requested: int, available: int):
        super().__init__(
            f"{strategy}: requested {requested} mutants but only "
            f"{available} candidates are available"
        )
        self.strategy = strategy
        self.requested = requested
        self.available = available
