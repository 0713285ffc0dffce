"""
Preference learning orchestrator.

``PreferenceLearner`` keeps a bounded, deduplicated store of labelled color
samples, trains the preference network on them and answers preference
queries for hex colors. It is the only component of the package that owns
long-lived mutable state; callers sharing one learner must serialize calls
that add samples, train or reset.
"""

import json
import logging
import time
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Union

from ..color.conversion import ColorSpaceConverter
from ..config import LearningConfig, serialize_config
from ..core.exceptions import ChromaGenError, InsufficientDataError, InvalidInputFormatError
from ..core.types import PreferenceClass, SampleSource, coerce_enum
from ..data.checkpoint import PreferenceCheckpoint
from ..utils.validation import normalize_hex_color
from .features import hex_to_vector
from .layers import Activation
from .network import EpochRecord, NeuralNetwork, TrainingConfig, TrainingSample

HIDDEN_UNITS = (32, 16, 8)
UNTRAINED_SCORE = 0.5
FULL_CONFIDENCE_SAMPLES = 100


def _now_ms() -> float:
    return time.time() * 1000.0


@dataclass(frozen=True)
class PreferenceSample:
    """
    One labelled color.

    Attributes:
        hex: Lower-case ``#rrggbb`` color, the deduplication key
        is_preferred: True for liked colors, False for disliked ones
        timestamp: Milliseconds since the epoch; newer samples win on collision
        source: Where the sample came from
    """

    hex: str
    is_preferred: bool
    timestamp: float
    source: SampleSource

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hex": self.hex,
            "isPreferred": self.is_preferred,
            "timestamp": self.timestamp,
            "source": self.source.value,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "PreferenceSample":
        """
        Parse a sample from its exported form.

        Raises:
            InvalidInputFormatError: If any field is missing or malformed
        """
        if not isinstance(data, dict):
            raise InvalidInputFormatError(f"Sample must be an object, got {data!r}", data)
        try:
            hex_color = "#" + normalize_hex_color(data["hex"])
            is_preferred = data["isPreferred"]
            timestamp = data["timestamp"]
            source = coerce_enum(SampleSource, data.get("source", "explicit"), "sample source")
        except KeyError as e:
            raise InvalidInputFormatError(f"Sample is missing field {e}", data) from e

        if not isinstance(is_preferred, bool):
            raise InvalidInputFormatError("Sample isPreferred must be a boolean", data)
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise InvalidInputFormatError("Sample timestamp must be a number", data)
        return cls(hex_color, is_preferred, float(timestamp), source)


@dataclass(frozen=True)
class ModelState:
    """
    Snapshot of the learner, derived from the sample store and the last training run.

    Attributes:
        is_trained: Whether the network has been trained (or a trained model imported)
        samples_count: Samples currently stored
        preferred_count: Stored samples labelled preferred
        disliked_count: Stored samples labelled disliked
        last_training_accuracy: Validation accuracy of the last run (training
            accuracy when nothing was held out)
        last_training_loss: Matching loss of the last run
        last_trained_at: Millisecond timestamp of the last successful run
        last_training_error: Message of the last failed automatic run, if any
    """

    is_trained: bool = False
    samples_count: int = 0
    preferred_count: int = 0
    disliked_count: int = 0
    last_training_accuracy: float = 0.0
    last_training_loss: float = 0.0
    last_trained_at: Optional[float] = None
    last_training_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isTrained": self.is_trained,
            "samplesCount": self.samples_count,
            "preferredCount": self.preferred_count,
            "dislikedCount": self.disliked_count,
            "lastTrainingAccuracy": self.last_training_accuracy,
            "lastTrainingLoss": self.last_training_loss,
            "lastTrainedAt": self.last_trained_at,
            "lastTrainingError": self.last_training_error,
        }


@dataclass(frozen=True)
class _TrainingOutcome:
    is_trained: bool = False
    accuracy: float = 0.0
    loss: float = 0.0
    trained_at: Optional[float] = None
    error: Optional[str] = None


class PreferenceLearner:
    """
    Learns a user's color preferences from labelled samples.

    Samples are keyed by lower-cased hex. When two samples share a key the
    one with the larger timestamp is kept, whatever its label. Once the store
    exceeds ``max_stored_samples`` the oldest samples are evicted. Whenever
    the sample count reaches a multiple of ``auto_train_threshold`` the
    network is retrained synchronously; a failure of that run is logged and
    recorded in ``model_state`` but never raised to the caller adding the
    sample.

    Attributes:
        config: Current learning configuration (frozen)
        network: The preference network
        checkpoint: Optional on-disk persistence
    """

    def __init__(self, config: Optional[LearningConfig] = None,
                 checkpoint: Optional[PreferenceCheckpoint] = None):
        """
        Initialize the learner.

        Args:
            config: Learning configuration; defaults are used when omitted
            checkpoint: Persistence target. When omitted and
                ``config.storage_path`` is set, a checkpoint at that path is used.
                An existing checkpoint is restored immediately.
        """
        self.config = config or LearningConfig()
        self.logger = logging.getLogger(self.__class__.__name__)
        self.converter = ColorSpaceConverter()
        self.network = self._build_network()
        self._samples: Dict[str, PreferenceSample] = {}
        self._outcome = _TrainingOutcome()
        self._last_timestamp = 0.0

        if checkpoint is None and self.config.storage_path:
            checkpoint = PreferenceCheckpoint(self.config.storage_path)
        self.checkpoint = checkpoint
        if self.checkpoint is not None:
            self._restore()

    def _build_network(self) -> NeuralNetwork:
        hidden = tuple(
            (units, Activation.LEAKY_RELU, rate)
            for units, rate in zip(HIDDEN_UNITS, self.config.dropout_rates)
        )
        return NeuralNetwork(
            input_size=6,
            hidden_layers=hidden,
            output_size=1,
            output_activation=Activation.SIGMOID,
            seed=self.config.random_seed,
        )

    # Sample store

    def _next_timestamp(self) -> float:
        """Current time in ms, forced strictly above every earlier timestamp."""
        now = _now_ms()
        if now <= self._last_timestamp:
            now = self._last_timestamp + 1.0
        self._last_timestamp = now
        return now

    def _store(self, sample: PreferenceSample) -> None:
        existing = self._samples.get(sample.hex)
        if existing is None or sample.timestamp > existing.timestamp:
            self._samples[sample.hex] = sample
        self._last_timestamp = max(self._last_timestamp, sample.timestamp)

    def _evict_oldest(self) -> None:
        overflow = len(self._samples) - self.config.max_stored_samples
        if overflow <= 0:
            return
        newest_first = sorted(self._samples.values(), key=lambda s: s.timestamp, reverse=True)
        keep = {s.hex for s in newest_first[: self.config.max_stored_samples]}
        self._samples = {key: s for key, s in self._samples.items() if key in keep}
        self.logger.debug(f"Evicted {overflow} oldest samples")

    def add_sample(
        self,
        hex_color: str,
        is_preferred: bool,
        source: Union[SampleSource, str] = SampleSource.EXPLICIT,
        timestamp: Optional[float] = None,
    ) -> None:
        """
        Add one labelled color to the store.

        Args:
            hex_color: Color as ``#RRGGBB`` or ``RRGGBB`` (any case)
            is_preferred: Label
            source: Origin of the sample
            timestamp: Milliseconds since the epoch; now when omitted

        Raises:
            InvalidInputFormatError: If hex_color or source is invalid
        """
        key = "#" + normalize_hex_color(hex_color)
        source = coerce_enum(SampleSource, source, "sample source")
        timestamp = self._next_timestamp() if timestamp is None else float(timestamp)

        self._store(PreferenceSample(key, bool(is_preferred), timestamp, source))
        self._evict_oldest()
        self._persist()
        self._maybe_auto_train()

    def add_preferred_color(self, hex_color: str,
                            source: Union[SampleSource, str] = SampleSource.SAVED) -> None:
        self.add_sample(hex_color, True, source)

    def add_preferred_colors(self, hex_colors: Sequence[str],
                             source: Union[SampleSource, str] = SampleSource.SAVED) -> None:
        for hex_color in hex_colors:
            self.add_preferred_color(hex_color, source)

    def add_disliked_color(self, hex_color: str,
                           source: Union[SampleSource, str] = SampleSource.ANTI_PALETTE) -> None:
        self.add_sample(hex_color, False, source)

    def add_disliked_colors(self, hex_colors: Sequence[str],
                            source: Union[SampleSource, str] = SampleSource.ANTI_PALETTE) -> None:
        for hex_color in hex_colors:
            self.add_disliked_color(hex_color, source)

    def record_interaction(self, hex_color: str, positive: bool = True) -> None:
        """Record a click on a color as an implicit (by default positive) sample."""
        self.add_sample(hex_color, positive, SampleSource.CLICKED)

    @property
    def samples(self) -> tuple:
        """Stored samples in insertion order."""
        return tuple(self._samples.values())

    # Training

    def _maybe_auto_train(self) -> None:
        count = len(self._samples)
        threshold = self.config.auto_train_threshold
        if count < threshold or count % threshold != 0:
            return

        self.logger.info(f"Auto-training triggered at {count} samples")
        try:
            self.train()
        except Exception as e:
            self._outcome = replace(self._outcome, error=str(e))
            self.logger.exception(f"Auto-training failed: {e}")

    def train(self, verbose: bool = False) -> List[EpochRecord]:
        """
        Train the network on every stored sample.

        Args:
            verbose: Log each epoch at INFO instead of DEBUG

        Returns:
            Per-epoch history, including epochs run before an early stop

        Raises:
            InsufficientDataError: If fewer than ``min_samples_for_training``
                samples are stored
        """
        available = len(self._samples)
        required = self.config.min_samples_for_training
        if available < required:
            raise InsufficientDataError(
                f"Not enough samples. Need at least {required}, have {available}",
                required=required,
                available=available,
            )

        training_samples = [
            TrainingSample(hex_to_vector(s.hex, self.converter), 1.0 if s.is_preferred else 0.0)
            for s in self._samples.values()
        ]
        training_config = TrainingConfig(
            epochs=self.config.training_epochs,
            batch_size=self.config.batch_size,
            learning_rate=self.config.learning_rate,
            l2_lambda=self.config.l2_lambda,
            validation_split=self.config.validation_split,
            early_stopping_patience=self.config.early_stopping_patience,
            min_delta=self.config.min_delta,
            verbose=verbose,
        )

        self.logger.info(f"Training on {available} samples")
        history = self.network.train(training_samples, training_config)

        last = history[-1]
        has_validation = int(available * self.config.validation_split) > 0
        self._outcome = _TrainingOutcome(
            is_trained=True,
            accuracy=last.val_accuracy if has_validation else last.train_accuracy,
            loss=last.val_loss if has_validation else last.train_loss,
            trained_at=_now_ms(),
            error=None,
        )
        self.logger.info(
            f"Training finished after {len(history)} epochs: "
            f"accuracy {self._outcome.accuracy:.1%}, loss {self._outcome.loss:.4f}"
        )
        self._persist()
        return history

    # Queries

    @property
    def is_trained(self) -> bool:
        return self._outcome.is_trained

    @property
    def model_state(self) -> ModelState:
        preferred = sum(1 for s in self._samples.values() if s.is_preferred)
        return ModelState(
            is_trained=self._outcome.is_trained,
            samples_count=len(self._samples),
            preferred_count=preferred,
            disliked_count=len(self._samples) - preferred,
            last_training_accuracy=self._outcome.accuracy,
            last_training_loss=self._outcome.loss,
            last_trained_at=self._outcome.trained_at,
            last_training_error=self._outcome.error,
        )

    @property
    def confidence(self) -> float:
        """min(1, samples / 100) * last accuracy; 0 while untrained."""
        if not self._outcome.is_trained:
            return 0.0
        return min(1.0, len(self._samples) / FULL_CONFIDENCE_SAMPLES) * self._outcome.accuracy

    def predict_preference(self, hex_color: str) -> float:
        """
        Predicted probability that the user likes hex_color.

        Returns 0.5 until the network has been trained.

        Raises:
            InvalidInputFormatError: If hex_color is not a valid hex color
        """
        features = hex_to_vector(hex_color, self.converter)
        if not self._outcome.is_trained:
            return UNTRAINED_SCORE
        return self.network.predict(features)

    def predict_preferences(self, hex_colors: Sequence[str]) -> Dict[str, float]:
        return {hex_color: self.predict_preference(hex_color) for hex_color in hex_colors}

    def classify_score(self, score: float) -> PreferenceClass:
        """Map a score onto preferred / neutral / disliked with symmetric thresholds."""
        threshold = self.config.confidence_threshold
        if score >= threshold:
            return PreferenceClass.PREFERRED
        if score <= 1.0 - threshold:
            return PreferenceClass.DISLIKED
        return PreferenceClass.NEUTRAL

    def classify_color(self, hex_color: str) -> PreferenceClass:
        return self.classify_score(self.predict_preference(hex_color))

    def filter_by_preference(self, hex_colors: Sequence[str], kind: str = "all") -> List[str]:
        """
        Keep the colors classified as kind ("preferred", "disliked" or "all").

        Returns the input unchanged while the network is untrained.
        """
        if kind not in ("preferred", "disliked", "all"):
            raise InvalidInputFormatError(
                f"Unknown preference filter: {kind!r}. Must be one of: preferred, disliked, all",
                kind,
            )
        if not self._outcome.is_trained or kind == "all":
            return list(hex_colors)
        wanted = PreferenceClass(kind)
        return [h for h in hex_colors if self.classify_color(h) is wanted]

    def sort_by_preference(self, hex_colors: Sequence[str], ascending: bool = False) -> List[str]:
        """Sort by predicted score, most liked first unless ascending."""
        scores = self.predict_preferences(hex_colors)
        return sorted(hex_colors, key=lambda h: scores[h], reverse=not ascending)

    def enhance_anti_palette_generation(self, candidate_hex_colors: Sequence[str]) -> List[str]:
        """Order anti-palette candidates most-disliked first once trained."""
        if not self._outcome.is_trained:
            return list(candidate_hex_colors)
        return self.sort_by_preference(candidate_hex_colors, ascending=True)

    def combined_score(self, hex_color: str, delta_e_score: float,
                       preference_weight: Optional[float] = None) -> float:
        """
        Blend a distance score with the learned dislike score.

        Returns:
            (1 - w) * delta_e_score + w * (1 - predicted preference)
        """
        weight = self.config.preference_weight if preference_weight is None else preference_weight
        dislike = 1.0 - self.predict_preference(hex_color)
        return (1.0 - weight) * delta_e_score + weight * dislike

    # Configuration and lifecycle

    def get_config(self) -> LearningConfig:
        return self.config

    def update_config(self, **updates: Any) -> None:
        """
        Merge updates into the configuration.

        Changing ``dropout_rates`` or ``random_seed`` rebuilds the network
        with fresh weights, which marks the learner untrained. Learning rate
        and L2 strength take effect at the next training run.

        Raises:
            ValueError: If the merged configuration is invalid
        """
        new_config = replace(self.config, **updates)
        rebuild = (
            new_config.dropout_rates != self.config.dropout_rates
            or new_config.random_seed != self.config.random_seed
        )
        if new_config.storage_path != self.config.storage_path:
            self.checkpoint = (
                PreferenceCheckpoint(new_config.storage_path) if new_config.storage_path else None
            )

        self.config = new_config
        if rebuild:
            self.network = self._build_network()
            self._outcome = _TrainingOutcome()
            self.logger.info("Network rebuilt after configuration change")
        self._evict_oldest()
        self._persist()

    def reset(self) -> None:
        """Drop every sample and reinitialize the network."""
        self._samples = {}
        self.network = self._build_network()
        self._outcome = _TrainingOutcome()
        if self.checkpoint is not None:
            self.checkpoint.clear()
        self.logger.info("Preference learner reset")

    # Export / import

    def export(self) -> Dict[str, Any]:
        """Full learner state as one JSON-compatible object."""
        return {
            "model": self.network.export(),
            "samples": [s.to_dict() for s in self._samples.values()],
            "config": serialize_config(self.config),
            "state": self.model_state.to_dict(),
        }

    def export_json(self) -> str:
        return json.dumps(self.export())

    def import_data(self, blob: Union[Dict[str, Any], str]) -> None:
        """
        Replace the learner state with an exported blob.

        The blob is validated completely before anything changes. The network
        is replaced wholesale, so optimizer state starts over. The blob's
        ``config`` section is informational and is not applied.

        Args:
            blob: Output of export() or export_json()

        Raises:
            InvalidInputFormatError: If the blob is malformed
            ModelStateMismatchError: If its layers disagree with the live topology
        """
        self._import(blob)
        self._persist()

    def _import(self, blob: Union[Dict[str, Any], str]) -> None:
        if isinstance(blob, str):
            try:
                blob = json.loads(blob)
            except json.JSONDecodeError as e:
                raise InvalidInputFormatError(f"Invalid model data: {e}", blob) from e
        if not isinstance(blob, dict):
            raise InvalidInputFormatError("Model data must be a JSON object", blob)

        layers = self.network.build_layers(blob["model"]) if "model" in blob else None

        raw_samples = blob.get("samples", [])
        if not isinstance(raw_samples, list):
            raise InvalidInputFormatError("samples must be a list", raw_samples)
        samples = [PreferenceSample.from_dict(s) for s in raw_samples]

        outcome = self._outcome
        state = blob.get("state")
        if state is not None:
            outcome = self._outcome_from_state(state)

        if layers is not None:
            self.network.layers = layers
        self._samples = {}
        self._last_timestamp = 0.0
        for sample in samples:
            self._store(sample)
        self._evict_oldest()
        self._outcome = outcome
        self.logger.info(f"Imported model with {len(self._samples)} samples")

    @staticmethod
    def _outcome_from_state(state: Any) -> _TrainingOutcome:
        if not isinstance(state, dict):
            raise InvalidInputFormatError("state must be an object", state)

        is_trained = state.get("isTrained", False)
        accuracy = state.get("lastTrainingAccuracy", 0.0)
        loss = state.get("lastTrainingLoss", 0.0)
        trained_at = state.get("lastTrainedAt")
        error = state.get("lastTrainingError")

        if not isinstance(is_trained, bool):
            raise InvalidInputFormatError("state.isTrained must be a boolean", state)
        for name, value in (("lastTrainingAccuracy", accuracy), ("lastTrainingLoss", loss)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidInputFormatError(f"state.{name} must be a number", state)
        if trained_at is not None and (
            isinstance(trained_at, bool) or not isinstance(trained_at, (int, float))
        ):
            raise InvalidInputFormatError("state.lastTrainedAt must be a number or null", state)

        return _TrainingOutcome(
            is_trained=is_trained,
            accuracy=float(accuracy),
            loss=float(loss),
            trained_at=None if trained_at is None else float(trained_at),
            error=error if isinstance(error, str) else None,
        )

    # Persistence

    def _persist(self) -> None:
        if self.checkpoint is None:
            return
        try:
            self.checkpoint.save(self.export(), metadata={"saved_at": _now_ms()})
        except IOError as e:
            self.logger.warning(f"Could not persist preferences: {e}")

    def _restore(self) -> None:
        data = self.checkpoint.load()
        if data is None:
            return
        try:
            self._import(data["blob"])
        except ChromaGenError as e:
            self.logger.warning(f"Ignoring incompatible checkpoint: {e}")
