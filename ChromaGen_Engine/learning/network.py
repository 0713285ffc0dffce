"""
Feed-forward binary classifier with mini-batch Adam training.

The default topology is 6 -> 32 -> 16 -> 8 -> 1 with leaky-ReLU hidden
layers and a sigmoid output, matching the 6-dimensional color features.
"""

import logging
import math
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..core.exceptions import InsufficientDataError, InvalidInputFormatError, ModelStateMismatchError
from ..utils.math import format_time_duration
from .layers import Activation, AdamOptimizer, DenseLayer
from .tensor import Matrix, Vector, as_batch

EPSILON = 1e-15

# (units, activation, dropout) per hidden layer
DEFAULT_HIDDEN_LAYERS: Tuple[Tuple[int, Activation, float], ...] = (
    (32, Activation.LEAKY_RELU, 0.1),
    (16, Activation.LEAKY_RELU, 0.1),
    (8, Activation.LEAKY_RELU, 0.0),
)


def binary_cross_entropy(predicted: np.ndarray, target: np.ndarray) -> np.ndarray:
    """Elementwise BCE with predictions clamped to [1e-15, 1 - 1e-15]."""
    p = np.clip(predicted, EPSILON, 1 - EPSILON)
    return -(target * np.log(p) + (1 - target) * np.log(1 - p))


def binary_cross_entropy_derivative(predicted: np.ndarray, target: np.ndarray) -> np.ndarray:
    """Derivative of BCE with respect to the predicted probability."""
    p = np.clip(predicted, EPSILON, 1 - EPSILON)
    return (p - target) / (p * (1 - p) + EPSILON)


@dataclass(frozen=True)
class TrainingSample:
    """A feature vector with its binary target (1.0 preferred, 0.0 disliked)."""

    features: Vector
    target: float


@dataclass(frozen=True)
class TrainingConfig:
    """Hyperparameters for one call to NeuralNetwork.train()."""

    epochs: int = 100
    batch_size: int = 16
    learning_rate: float = 0.001
    l2_lambda: float = 1e-4
    validation_split: float = 0.2
    early_stopping_patience: int = 10
    min_delta: float = 0.001
    verbose: bool = False


@dataclass(frozen=True)
class EpochRecord:
    """
    Metrics recorded after one training epoch.

    Attributes:
        epoch: 1-based epoch number
        train_loss: BCE over the training subset in inference mode
        val_loss: BCE over the validation subset (0 when it is empty)
        train_accuracy: Fraction of training samples classified correctly
        val_accuracy: Fraction of validation samples classified correctly
        batch_loss: Mean of the mini-batch losses (including L2) seen during the epoch
    """

    epoch: int
    train_loss: float
    val_loss: float
    train_accuracy: float
    val_accuracy: float
    batch_loss: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class NeuralNetwork:
    """
    Fully-connected network for binary classification.

    Attributes:
        layers: Hidden layers followed by the output layer
        input_size: Width of the input vector
        optimizer: Adam optimizer shared by all layers
    """

    def __init__(
        self,
        input_size: int = 6,
        hidden_layers: Sequence[Tuple[int, Activation, float]] = DEFAULT_HIDDEN_LAYERS,
        output_size: int = 1,
        output_activation: Activation = Activation.SIGMOID,
        seed: Optional[int] = None,
    ):
        """
        Build the network with freshly initialized weights.

        Args:
            input_size: Width of the input vector
            hidden_layers: (units, activation, dropout) per hidden layer
            output_size: Number of output units
            output_activation: Activation of the output layer
            seed: Seed for weight initialization, dropout and shuffling
        """
        self.input_size = input_size
        self.rng = np.random.default_rng(seed)
        self.optimizer = AdamOptimizer()
        self.logger = logging.getLogger(self.__class__.__name__)

        self.layers: List[DenseLayer] = []
        current_size = input_size
        for units, activation, dropout in hidden_layers:
            self.layers.append(
                DenseLayer(current_size, units, activation, dropout, rng=self.rng)
            )
            current_size = units
        self.layers.append(
            DenseLayer(current_size, output_size, output_activation, 0.0, rng=self.rng)
        )

    @property
    def topology(self) -> List[int]:
        """Layer widths from input to output."""
        return [self.input_size] + [layer.output_size for layer in self.layers]

    def _forward(self, inputs: Matrix, training: bool) -> Matrix:
        current = as_batch(inputs)
        for layer in self.layers:
            current = layer.forward(current, training)
        return current

    def predict_batch(self, inputs: Matrix) -> Vector:
        """Inference-mode outputs of the first output unit for each row."""
        return self._forward(inputs, training=False)[:, 0]

    def predict(self, features: Vector) -> float:
        """Inference-mode output for a single feature vector."""
        return float(self.predict_batch(as_batch(features))[0])

    def train_batch(self, batch: Sequence[TrainingSample], learning_rate: float,
                    l2_lambda: float = 0.0) -> float:
        """
        One optimizer step on a mini-batch.

        Returns:
            (sum of sample losses + sum of per-layer L2 penalties) / batch size
        """
        inputs = np.stack([s.features for s in batch])
        targets = np.array([[s.target] for s in batch], dtype=np.float64)

        predicted = self._forward(inputs, training=True)
        total_loss = float(np.sum(binary_cross_entropy(predicted, targets)))

        gradient = binary_cross_entropy_derivative(predicted, targets)
        layer_gradients = []
        for layer in reversed(self.layers):
            gradient, gradients = layer.backward(gradient)
            layer_gradients.append(gradients)
        layer_gradients.reverse()

        for layer, gradients in zip(self.layers, layer_gradients):
            if l2_lambda > 0:
                total_loss += layer.l2_penalty(l2_lambda)
            layer.apply_gradients(gradients, self.optimizer, learning_rate, l2_lambda)

        return total_loss / len(batch)

    def evaluate(self, samples: Sequence[TrainingSample]) -> Tuple[float, float]:
        """
        Inference-mode loss and accuracy.

        Returns:
            Tuple of (mean BCE, accuracy); (0.0, 0.0) for no samples
        """
        if not samples:
            return 0.0, 0.0

        inputs = np.stack([s.features for s in samples])
        targets = np.array([s.target for s in samples], dtype=np.float64)
        predicted = self.predict_batch(inputs)

        loss = float(np.mean(binary_cross_entropy(predicted, targets)))
        accuracy = float(np.mean((predicted >= 0.5).astype(np.float64) == targets))
        return loss, accuracy

    def train(self, samples: Sequence[TrainingSample],
              config: Optional[TrainingConfig] = None) -> List[EpochRecord]:
        """
        Train with a held-out validation split and early stopping.

        The samples are shuffled once and the first ``validation_split``
        fraction is held out. Each epoch reshuffles the training subset and
        takes one optimizer step per mini-batch. Training stops early once
        the validation loss has failed to improve by more than ``min_delta``
        for ``early_stopping_patience`` consecutive epochs.

        Args:
            samples: Training data
            config: Hyperparameters; defaults when omitted

        Returns:
            One EpochRecord per epoch run, including the epoch that
            triggered early stopping

        Raises:
            InsufficientDataError: If no samples are given
        """
        config = config or TrainingConfig()
        if not samples:
            raise InsufficientDataError("Cannot train on an empty sample set", 1, 0)

        start_time = time.perf_counter()
        shuffled = [samples[i] for i in self.rng.permutation(len(samples))]
        val_size = int(math.floor(len(shuffled) * config.validation_split))
        val_data = shuffled[:val_size]
        train_data = shuffled[val_size:]

        history: List[EpochRecord] = []
        best_val_loss = math.inf
        patience_counter = 0
        log = self.logger.info if config.verbose else self.logger.debug

        for epoch in range(config.epochs):
            epoch_data = [train_data[i] for i in self.rng.permutation(len(train_data))]
            batch_losses = [
                self.train_batch(
                    epoch_data[i:i + config.batch_size], config.learning_rate, config.l2_lambda
                )
                for i in range(0, len(epoch_data), config.batch_size)
            ]

            train_loss, train_accuracy = self.evaluate(train_data)
            val_loss, val_accuracy = self.evaluate(val_data)
            record = EpochRecord(
                epoch=epoch + 1,
                train_loss=train_loss,
                val_loss=val_loss,
                train_accuracy=train_accuracy,
                val_accuracy=val_accuracy,
                batch_loss=float(np.mean(batch_losses)) if batch_losses else 0.0,
            )
            history.append(record)
            log(
                f"Epoch {record.epoch}/{config.epochs} - loss: {train_loss:.4f} - "
                f"acc: {train_accuracy:.1%} - val_loss: {val_loss:.4f} - "
                f"val_acc: {val_accuracy:.1%}"
            )

            if val_data:
                if val_loss < best_val_loss - config.min_delta:
                    best_val_loss = val_loss
                    patience_counter = 0
                else:
                    patience_counter += 1
                    if patience_counter >= config.early_stopping_patience:
                        log(f"Early stopping at epoch {record.epoch}")
                        break

        self.logger.info(
            f"Trained {len(history)} epochs on {len(train_data)} samples "
            f"({len(val_data)} held out) in "
            f"{format_time_duration(time.perf_counter() - start_time)}"
        )
        return history

    def export(self) -> Dict[str, Any]:
        """Exact weights and biases per layer as JSON-compatible data."""
        return {
            "topology": self.topology,
            "layers": [layer.export_state() for layer in self.layers],
        }

    def import_state(self, data: Dict[str, Any]) -> None:
        """
        Replace every layer with the weights in data.

        The blob is validated completely before any layer is replaced.
        Optimizer moments and step counters start over.

        Raises:
            InvalidInputFormatError: If data is not a model export
            ModelStateMismatchError: If the layer count or a layer shape
                differs from the live topology
        """
        self.layers = self.build_layers(data)

    def build_layers(self, data: Dict[str, Any]) -> List[DenseLayer]:
        """
        Validate a model export against the live topology and build its layers.

        Raises:
            InvalidInputFormatError: If data is not a model export
            ModelStateMismatchError: If the structure differs from the live one
        """
        if not isinstance(data, dict) or not isinstance(data.get("layers"), list):
            raise InvalidInputFormatError("Model data must contain a 'layers' list", data)

        imported = data["layers"]
        if len(imported) != len(self.layers):
            raise ModelStateMismatchError(
                "Layer count mismatch", expected=len(self.layers), actual=len(imported)
            )

        new_layers = []
        for index, (live, state) in enumerate(zip(self.layers, imported)):
            try:
                weights = np.array(state["weights"], dtype=np.float64)
                biases = np.array(state["biases"], dtype=np.float64)
            except (KeyError, TypeError, ValueError) as e:
                raise InvalidInputFormatError(f"Malformed layer {index}: {e}", state) from e

            if weights.shape != live.weights.shape or biases.shape != live.biases.shape:
                raise ModelStateMismatchError(
                    f"Layer {index} shape mismatch",
                    expected=(live.weights.shape, live.biases.shape),
                    actual=(weights.shape, biases.shape),
                )
            if not (np.all(np.isfinite(weights)) and np.all(np.isfinite(biases))):
                raise InvalidInputFormatError(f"Layer {index} contains non-finite values")

            new_layers.append(
                DenseLayer(
                    live.input_size,
                    live.output_size,
                    live.activation,
                    live.dropout_rate,
                    rng=self.rng,
                    weights=weights,
                    biases=biases,
                )
            )
        return new_layers
