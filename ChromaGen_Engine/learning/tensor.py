"""
Minimal tensor layer over numpy.

The network code only talks to ``Vector``/``Matrix`` arrays and
``Parameter`` objects from this module, so the numeric backend can be swapped
without touching the training loop. Batches are matrices with one sample
per row.
"""

from dataclasses import dataclass, field
from typing import Sequence, Union

import numpy as np
from typing_extensions import TypeAlias

Vector: TypeAlias = np.ndarray
Matrix: TypeAlias = np.ndarray

DTYPE = np.float64


def as_batch(values: Union[Sequence[float], Sequence[Sequence[float]], np.ndarray]) -> Matrix:
    """Coerce a single sample or a batch of samples into a 2-D float matrix."""
    return np.atleast_2d(np.asarray(values, dtype=DTYPE))


def zeros(*shape: int) -> np.ndarray:
    return np.zeros(shape, dtype=DTYPE)


def batch_outer_mean(gradients: Matrix, inputs: Matrix) -> Matrix:
    """
    Mean over the batch of the per-sample outer products gradient x input.

    Args:
        gradients: (batch, outputs) gradients at a layer's pre-activation
        inputs: (batch, inputs) cached layer inputs

    Returns:
        (outputs, inputs) averaged weight gradient
    """
    return gradients.T @ inputs / gradients.shape[0]


@dataclass
class Parameter:
    """
    A trainable array with its Adam moment buffers.

    Attributes:
        value: Current parameter values
        first_moment: Exponential average of gradients
        second_moment: Exponential average of squared gradients
    """

    value: np.ndarray
    first_moment: np.ndarray = field(init=False, repr=False)
    second_moment: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        self.value = np.asarray(self.value, dtype=DTYPE)
        self.reset_moments()

    def reset_moments(self) -> None:
        self.first_moment = np.zeros_like(self.value)
        self.second_moment = np.zeros_like(self.value)

    @property
    def shape(self) -> tuple:
        return self.value.shape

    def to_list(self) -> list:
        """Exact values as nested Python floats."""
        return self.value.tolist()
