"""
Persistence for the preference learner.

This module saves and restores the learner's export blob (network weights,
samples, configuration and state) so a learner can resume where it left off.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import joblib


class PreferenceCheckpoint:
    """
    Manages preference checkpoints using joblib for atomic, compressed saves.

    Attributes:
        checkpoint_path: Path to checkpoint file
        logger: Logger instance

    Example:
        checkpoint = PreferenceCheckpoint('checkpoints/preferences.pkl')
        checkpoint.save(learner.export())
        data = checkpoint.load()
        learner.import_data(data['blob'])
    """

    def __init__(self, checkpoint_path: str):
        """
        Initialize checkpoint manager.

        Args:
            checkpoint_path: Path to checkpoint file (will be created if needed)
        """
        self.checkpoint_path = Path(checkpoint_path)
        self.logger = logging.getLogger(self.__class__.__name__)

    def save(self, blob: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Save a learner export blob with compression.

        Creates the parent directory if it doesn't exist.

        Args:
            blob: Learner export ({"model", "samples", "config", "state"})
            metadata: Optional metadata dictionary (e.g., timestamp, version)

        Raises:
            IOError: If checkpoint save fails
        """
        try:
            self.checkpoint_path.parent.mkdir(parents=True, exist_ok=True)

            checkpoint_data = {"blob": blob, "metadata": metadata or {}}
            joblib.dump(checkpoint_data, self.checkpoint_path, compress=3)

            self.logger.info(
                f"Checkpoint saved: {len(blob.get('samples', []))} samples"
            )

        except Exception as e:
            self.logger.error(f"Failed to save checkpoint: {e}")
            raise IOError(f"Checkpoint save failed: {e}") from e

    def load(self) -> Optional[Dict[str, Any]]:
        """
        Load the checkpoint.

        Returns:
            Dictionary with keys:
            - 'blob': Learner export blob
            - 'metadata': Metadata dictionary

            Returns None if checkpoint doesn't exist or is corrupted.
        """
        if not self.exists():
            self.logger.info("No checkpoint found")
            return None

        try:
            checkpoint_data = joblib.load(self.checkpoint_path)
            blob = checkpoint_data["blob"]
            metadata = checkpoint_data.get("metadata", {})

            self.logger.info(f"Checkpoint loaded: {len(blob.get('samples', []))} samples")
            return {"blob": blob, "metadata": metadata}

        except Exception as e:
            self.logger.error(f"Failed to load checkpoint: {e}")
            self.logger.warning("Starting fresh due to corrupted checkpoint")
            return None

    def clear(self) -> None:
        """
        Delete checkpoint file.

        Safe to call even if the checkpoint doesn't exist.
        """
        if self.exists():
            try:
                self.checkpoint_path.unlink()
                self.logger.info("Checkpoint cleared")
            except OSError as e:
                self.logger.warning(f"Failed to clear checkpoint: {e}")

    def exists(self) -> bool:
        return self.checkpoint_path.exists()
