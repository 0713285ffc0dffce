"""
Data persistence for ChromaGen.

Modules:
    checkpoint: joblib-backed storage of the preference learner state
"""

from .checkpoint import PreferenceCheckpoint

__all__ = ["PreferenceCheckpoint"]
