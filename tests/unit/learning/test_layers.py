"""
Unit tests for activations, dense layers and the Adam optimizer.

Gradients are checked against central finite differences.
"""

import numpy as np
import pytest

pytestmark = [pytest.mark.unit, pytest.mark.learning]
from ChromaGen_Engine.learning.layers import (
    Activation,
    AdamOptimizer,
    DenseLayer,
    LayerGradients,
    activate,
    activation_derivative,
    sigmoid,
)
from ChromaGen_Engine.learning.tensor import Parameter, batch_outer_mean


class TestActivations:
    """Test activation functions and derivatives."""

    def test_relu(self):
        """Test ReLU zeroes negatives."""
        z = np.array([-2.0, 0.0, 3.0])
        np.testing.assert_array_equal(activate(Activation.RELU, z), [0.0, 0.0, 3.0])
        np.testing.assert_array_equal(activation_derivative(Activation.RELU, z), [0.0, 0.0, 1.0])

    def test_leaky_relu(self):
        """Test leaky ReLU keeps a 0.01 slope for negatives."""
        z = np.array([-2.0, 3.0])
        np.testing.assert_allclose(activate(Activation.LEAKY_RELU, z), [-0.02, 3.0])
        np.testing.assert_allclose(activation_derivative(Activation.LEAKY_RELU, z), [0.01, 1.0])

    def test_sigmoid_clipped(self):
        """Test sigmoid stays finite for extreme inputs."""
        values = sigmoid(np.array([-1e6, 0.0, 1e6]))
        assert np.all(np.isfinite(values))
        assert values[1] == 0.5
        assert values[0] == pytest.approx(0.0)
        assert values[2] == pytest.approx(1.0)

    @pytest.mark.parametrize("kind", list(Activation))
    def test_derivatives_match_finite_differences(self, kind):
        """Test each derivative against a central difference away from kinks."""
        z = np.array([-1.3, -0.4, 0.7, 2.1])
        h = 1e-6
        numeric = (activate(kind, z + h) - activate(kind, z - h)) / (2 * h)
        np.testing.assert_allclose(activation_derivative(kind, z), numeric, atol=1e-6)


class TestAdamOptimizer:
    """Test the Adam update rule."""

    def test_first_step(self):
        """Test the bias-corrected first step moves by about the learning rate."""
        param = Parameter(np.array([1.0]))
        AdamOptimizer().update(param, np.array([0.5]), learning_rate=0.1, step=1)
        assert param.value[0] == pytest.approx(0.9, abs=1e-6)
        assert param.first_moment[0] == pytest.approx(0.05)
        assert param.second_moment[0] == pytest.approx(0.00025)

    def test_reset_moments(self):
        """Test moment buffers can be cleared."""
        param = Parameter(np.array([1.0, 2.0]))
        AdamOptimizer().update(param, np.array([1.0, 1.0]), 0.1, 1)
        param.reset_moments()
        np.testing.assert_array_equal(param.first_moment, [0.0, 0.0])
        np.testing.assert_array_equal(param.second_moment, [0.0, 0.0])


class TestDenseLayer:
    """Test the dense layer."""

    def test_initialization_shapes(self):
        """Test weights are (outputs, inputs) and biases start at zero."""
        layer = DenseLayer(6, 32, Activation.LEAKY_RELU, rng=np.random.default_rng(0))
        assert layer.weights.shape == (32, 6)
        np.testing.assert_array_equal(layer.biases.value, np.zeros(32))
        assert layer.step == 0

    def test_he_and_xavier_scales(self):
        """Test ReLU layers use He init and sigmoid layers Xavier."""
        rng = np.random.default_rng(1)
        he = DenseLayer(200, 200, Activation.RELU, rng=rng)
        xavier = DenseLayer(200, 200, Activation.SIGMOID, rng=rng)
        assert np.std(he.weights.value) == pytest.approx(np.sqrt(2 / 200), rel=0.05)
        limit = np.sqrt(6 / 400)
        assert np.abs(xavier.weights.value).max() <= limit

    def test_forward_inference(self):
        """Test the affine map and activation."""
        layer = DenseLayer(
            2, 1, Activation.LINEAR, weights=np.array([[2.0, -1.0]]), biases=np.array([0.5])
        )
        output = layer.forward(np.array([1.0, 3.0]))
        np.testing.assert_allclose(output, [[-0.5]])

    def test_inference_ignores_dropout(self):
        """Test dropout only applies in training mode."""
        layer = DenseLayer(4, 50, Activation.LINEAR, 0.5, rng=np.random.default_rng(2))
        inputs = np.ones((1, 4))
        np.testing.assert_array_equal(layer.forward(inputs), layer.forward(inputs))

    def test_inverted_dropout_scaling(self):
        """Test kept units are scaled by 1 / (1 - rate) and dropped units are zero."""
        layer = DenseLayer(
            1,
            200,
            Activation.LINEAR,
            0.5,
            rng=np.random.default_rng(3),
            weights=np.ones((200, 1)),
        )
        output = layer.forward(np.ones((1, 1)), training=True)
        assert set(np.unique(output)) <= {0.0, 2.0}
        assert 0 < np.count_nonzero(output) < 200

    def test_weight_gradient_matches_finite_differences(self):
        """Test backward() against numeric gradients of a weighted output sum."""
        rng = np.random.default_rng(4)
        layer = DenseLayer(3, 2, Activation.TANH, rng=rng)
        inputs = rng.normal(size=(5, 3))
        upstream = rng.normal(size=(5, 2))

        def loss():
            return float(np.sum(layer.forward(inputs) * upstream) / inputs.shape[0])

        layer.forward(inputs)
        _, gradients = layer.backward(upstream)

        numeric = np.zeros_like(layer.weights.value)
        h = 1e-6
        for index in np.ndindex(*numeric.shape):
            original = layer.weights.value[index]
            layer.weights.value[index] = original + h
            plus = loss()
            layer.weights.value[index] = original - h
            minus = loss()
            layer.weights.value[index] = original
            numeric[index] = (plus - minus) / (2 * h)

        np.testing.assert_allclose(gradients.weights, numeric, atol=1e-6)

    def test_batch_gradient_is_mean_of_sample_gradients(self):
        """Test batched gradients equal the average of single-sample gradients."""
        rng = np.random.default_rng(5)
        layer = DenseLayer(4, 3, Activation.LEAKY_RELU, rng=rng)
        inputs = rng.normal(size=(6, 4))
        upstream = rng.normal(size=(6, 3))

        layer.forward(inputs)
        batch_input_grad, batch = layer.backward(upstream)

        weight_grads, bias_grads, input_grads = [], [], []
        for i in range(6):
            layer.forward(inputs[i])
            input_grad, single = layer.backward(upstream[i : i + 1])
            weight_grads.append(single.weights)
            bias_grads.append(single.biases)
            input_grads.append(input_grad[0])

        np.testing.assert_allclose(batch.weights, np.mean(weight_grads, axis=0))
        np.testing.assert_allclose(batch.biases, np.mean(bias_grads, axis=0))
        np.testing.assert_allclose(batch_input_grad, np.array(input_grads))

    def test_backward_before_forward(self):
        """Test backward without a cached forward pass fails loudly."""
        with pytest.raises(RuntimeError):
            DenseLayer(2, 2).backward(np.ones((1, 2)))

    def test_apply_gradients_increments_step(self):
        """Test each update advances the step counter."""
        layer = DenseLayer(2, 2, rng=np.random.default_rng(6))
        gradients = LayerGradients(np.ones((2, 2)), np.ones(2))
        before = layer.weights.value.copy()
        layer.apply_gradients(gradients, AdamOptimizer(), 0.01, l2_lambda=0.1)
        assert layer.step == 1
        assert np.all(layer.weights.value < before)

    def test_l2_penalty(self):
        """Test the penalty is lambda * sum(W^2) / 2."""
        layer = DenseLayer(2, 1, weights=np.array([[3.0, 4.0]]))
        assert layer.l2_penalty(0.1) == pytest.approx(0.1 * 25 / 2)

    def test_export_state(self):
        """Test exported state holds exact values."""
        layer = DenseLayer(
            2, 1, Activation.SIGMOID, 0.25, weights=np.array([[0.1, 0.2]]), biases=np.array([0.3])
        )
        assert layer.export_state() == {
            "weights": [[0.1, 0.2]],
            "biases": [0.3],
            "activation": "sigmoid",
            "dropout": 0.25,
        }


class TestTensorHelpers:
    """Test tensor helpers."""

    def test_batch_outer_mean(self):
        """Test the averaged outer product."""
        gradients = np.array([[1.0], [3.0]])
        inputs = np.array([[2.0, 0.0], [0.0, 2.0]])
        np.testing.assert_allclose(batch_outer_mean(gradients, inputs), [[1.0, 3.0]])
