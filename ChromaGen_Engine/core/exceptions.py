"""
Exception classes for ChromaGen operations.

Provides a small hierarchy of exceptions so callers can distinguish malformed
input, missing training data and incompatible model state, or catch all
engine failures through the common base class.
"""

from typing import Any, Optional


class ChromaGenError(Exception):
    """
    Base exception for ChromaGen operations.

    All engine-related exceptions inherit from this class, allowing
    for catch-all error handling when needed.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInputFormatError(ChromaGenError, ValueError):
    """
    Raised when input cannot be parsed at the boundary.

    Covers malformed hex colors, palettes with too few colors, unknown
    method names and malformed import blobs. Subclasses ValueError so code
    that already guards parsing with ``except ValueError`` keeps working.
    """

    def __init__(self, message: str, value: Optional[Any] = None) -> None:
        """
        Initialize input format error.

        Args:
            message: Error description
            value: The offending input value, if available
        """
        self.value = value
        super().__init__(message)


class InsufficientDataError(ChromaGenError):
    """
    Raised when an operation needs more samples than are available.

    Attributes:
        required: Minimum number of samples needed
        available: Number of samples actually available
    """

    def __init__(self, message: str, required: int = 0, available: int = 0) -> None:
        self.required = required
        self.available = available
        super().__init__(message)


class ModelStateMismatchError(ChromaGenError):
    """
    Raised when imported model data disagrees with the live network topology.

    Attributes:
        expected: Description of the live structure (e.g. layer count or shape)
        actual: Description of the imported structure
    """

    def __init__(
        self, message: str, expected: Optional[Any] = None, actual: Optional[Any] = None
    ) -> None:
        self.expected = expected
        self.actual = actual
        error_msg = message
        if expected is not None or actual is not None:
            error_msg = f"{message} (expected: {expected}, got: {actual})"
        super().__init__(error_msg)
