"""
Fully-connected layers, activations and the Adam optimizer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np

from .tensor import Matrix, Parameter, Vector, as_batch, batch_outer_mean, zeros

LEAKY_RELU_ALPHA = 0.01
SIGMOID_CLIP = 500.0


class Activation(Enum):
    """Activation functions supported by DenseLayer."""

    RELU = "relu"
    LEAKY_RELU = "leaky_relu"
    SIGMOID = "sigmoid"
    TANH = "tanh"
    LINEAR = "linear"


def sigmoid(z: np.ndarray) -> np.ndarray:
    # Clip to avoid overflow in exp
    z = np.clip(z, -SIGMOID_CLIP, SIGMOID_CLIP)
    return 1.0 / (1.0 + np.exp(-z))


def activate(kind: Activation, z: np.ndarray) -> np.ndarray:
    """Apply an activation elementwise."""
    if kind is Activation.RELU:
        return np.maximum(0.0, z)
    if kind is Activation.LEAKY_RELU:
        return np.where(z > 0, z, LEAKY_RELU_ALPHA * z)
    if kind is Activation.SIGMOID:
        return sigmoid(z)
    if kind is Activation.TANH:
        return np.tanh(z)
    return z


def activation_derivative(kind: Activation, z: np.ndarray) -> np.ndarray:
    """Derivative of an activation, evaluated at the pre-activation z."""
    if kind is Activation.RELU:
        return (z > 0).astype(z.dtype)
    if kind is Activation.LEAKY_RELU:
        return np.where(z > 0, 1.0, LEAKY_RELU_ALPHA)
    if kind is Activation.SIGMOID:
        s = sigmoid(z)
        return s * (1.0 - s)
    if kind is Activation.TANH:
        return 1.0 - np.tanh(z) ** 2
    return np.ones_like(z)


@dataclass
class LayerGradients:
    """Batch-averaged gradients for one layer."""

    weights: Matrix
    biases: Vector


class AdamOptimizer:
    """
    Adam with bias-corrected moment estimates.

    The step counter lives on each layer, so layers replaced on import start
    their bias correction from scratch.
    """

    def __init__(self, beta1: float = 0.9, beta2: float = 0.999, epsilon: float = 1e-8):
        self.beta1 = beta1
        self.beta2 = beta2
        self.epsilon = epsilon

    def update(self, param: Parameter, gradient: np.ndarray, learning_rate: float, step: int) -> None:
        """
        Apply one Adam step to param in place.

        Args:
            param: Parameter whose value and moments are updated
            gradient: Gradient with the same shape as param.value
            learning_rate: Step size
            step: 1-based step count used for bias correction
        """
        param.first_moment = self.beta1 * param.first_moment + (1 - self.beta1) * gradient
        param.second_moment = self.beta2 * param.second_moment + (1 - self.beta2) * gradient**2

        m_hat = param.first_moment / (1 - self.beta1**step)
        v_hat = param.second_moment / (1 - self.beta2**step)
        param.value -= learning_rate * m_hat / (np.sqrt(v_hat) + self.epsilon)


class DenseLayer:
    """
    Fully-connected layer ``activation(W x + b)`` with optional inverted dropout.

    Weights have shape (outputs, inputs). ReLU-family layers use He
    initialization, all others Xavier; biases start at zero. The forward pass
    caches its input, pre-activation and dropout mask for the paired
    backward call.

    Attributes:
        weights: Weight matrix parameter
        biases: Bias vector parameter
        activation: Activation function
        dropout_rate: Fraction of units dropped in training mode
        step: Number of optimizer steps taken
    """

    def __init__(
        self,
        input_size: int,
        output_size: int,
        activation: Activation = Activation.LINEAR,
        dropout_rate: float = 0.0,
        rng: Optional[np.random.Generator] = None,
        weights: Optional[np.ndarray] = None,
        biases: Optional[np.ndarray] = None,
    ):
        """
        Initialize the layer.

        Args:
            input_size: Number of inputs
            output_size: Number of units
            activation: Activation function
            dropout_rate: Dropout rate in [0, 1)
            rng: Generator for initialization and dropout masks
            weights: Explicit (output_size, input_size) weights, skipping
                random initialization
            biases: Explicit (output_size,) biases
        """
        self.input_size = input_size
        self.output_size = output_size
        self.activation = Activation(activation)
        self.dropout_rate = float(dropout_rate)
        self.rng = rng if rng is not None else np.random.default_rng()

        if weights is None:
            if self.activation in (Activation.RELU, Activation.LEAKY_RELU):
                weights = self.rng.normal(
                    0.0, np.sqrt(2.0 / input_size), (output_size, input_size)
                )
            else:
                limit = np.sqrt(6.0 / (input_size + output_size))
                weights = self.rng.uniform(-limit, limit, (output_size, input_size))

        self.weights = Parameter(np.array(weights, dtype=np.float64))
        self.biases = Parameter(
            zeros(output_size) if biases is None else np.array(biases, dtype=np.float64)
        )
        self.step = 0

        self._last_input: Optional[Matrix] = None
        self._last_pre_activation: Optional[Matrix] = None
        self._dropout_mask: Optional[Matrix] = None

    def forward(self, inputs: Matrix, training: bool = False) -> Matrix:
        """
        Forward pass over a batch.

        Args:
            inputs: (batch, input_size) matrix or a single input vector
            training: Apply dropout with a fresh mask when True

        Returns:
            (batch, output_size) activations
        """
        inputs = as_batch(inputs)
        pre_activation = inputs @ self.weights.value.T + self.biases.value
        output = activate(self.activation, pre_activation)

        if training and self.dropout_rate > 0:
            keep = self.rng.random(output.shape) > self.dropout_rate
            mask = keep / (1.0 - self.dropout_rate)
        else:
            mask = np.ones_like(output)

        self._last_input = inputs
        self._last_pre_activation = pre_activation
        self._dropout_mask = mask
        return output * mask

    def backward(self, output_gradient: Matrix) -> tuple[Matrix, LayerGradients]:
        """
        Backward pass for the batch cached by the last forward call.

        Args:
            output_gradient: (batch, output_size) gradient of the loss with
                respect to this layer's output

        Returns:
            Tuple of (gradient with respect to the layer input, batch-averaged
            parameter gradients)
        """
        if self._last_input is None:
            raise RuntimeError("backward() called before forward()")

        gradient = output_gradient * self._dropout_mask
        gradient = gradient * activation_derivative(self.activation, self._last_pre_activation)

        gradients = LayerGradients(
            weights=batch_outer_mean(gradient, self._last_input),
            biases=gradient.mean(axis=0),
        )
        input_gradient = gradient @ self.weights.value
        return input_gradient, gradients

    def l2_penalty(self, l2_lambda: float) -> float:
        return float(l2_lambda * np.sum(self.weights.value**2) / 2.0)

    def apply_gradients(
        self,
        gradients: LayerGradients,
        optimizer: AdamOptimizer,
        learning_rate: float,
        l2_lambda: float = 0.0,
    ) -> None:
        """Add the L2 term to the weight gradient and take one optimizer step."""
        weight_gradient = gradients.weights
        if l2_lambda > 0:
            weight_gradient = weight_gradient + l2_lambda * self.weights.value

        self.step += 1
        optimizer.update(self.weights, weight_gradient, learning_rate, self.step)
        optimizer.update(self.biases, gradients.biases, learning_rate, self.step)

    def export_state(self) -> Dict[str, Any]:
        return {
            "weights": self.weights.to_list(),
            "biases": self.biases.to_list(),
            "activation": self.activation.value,
            "dropout": self.dropout_rate,
        }
