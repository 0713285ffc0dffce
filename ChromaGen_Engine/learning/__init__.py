"""
On-device preference learning for ChromaGen.

Modules:
    tensor: numpy vector/matrix helpers and trainable parameters
    layers: Activations, dense layers and the Adam optimizer
    network: Feed-forward binary classifier with early-stopping training
    features: Six-dimensional LAB + HSV color features
    preference: PreferenceLearner, the sample store and query API
"""

from .features import ColorFeatures, extract_features, hex_to_vector
from .layers import Activation, AdamOptimizer, DenseLayer
from .network import EpochRecord, NeuralNetwork, TrainingConfig, TrainingSample
from .preference import ModelState, PreferenceLearner, PreferenceSample

__all__ = [
    "Activation",
    "AdamOptimizer",
    "ColorFeatures",
    "DenseLayer",
    "EpochRecord",
    "ModelState",
    "NeuralNetwork",
    "PreferenceLearner",
    "PreferenceSample",
    "TrainingConfig",
    "TrainingSample",
    "extract_features",
    "hex_to_vector",
]
