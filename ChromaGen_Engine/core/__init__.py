"""
Core components for ChromaGen.

Modules:
    exceptions: Error hierarchy shared by every component
    types: Color value objects, enumerations and result dataclasses

Only the exceptions are re-exported here; import value types from
``ChromaGen_Engine.core.types``.
"""

from .exceptions import (
    ChromaGenError,
    InsufficientDataError,
    InvalidInputFormatError,
    ModelStateMismatchError,
)

__all__ = [
    "ChromaGenError",
    "InsufficientDataError",
    "InvalidInputFormatError",
    "ModelStateMismatchError",
]
