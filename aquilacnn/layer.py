"""Weight bookkeeping and the common behaviour of network layers."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field

import numpy as np

from aquilacnn.activations import apply_activation, identity
from aquilacnn.util import FLOAT, block_range, format_layer_name


class SizeMismatchError(ValueError):
    """A layer received an input of the wrong length."""

    def __init__(self, actual, expected):
        super().__init__(f"input size does not match: {actual}/{expected}")
        self.actual = actual
        self.expected = expected


@dataclass
class Controller:
    """Hands out consecutive slices of a flat weight buffer to layers as they are built."""

    weights: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=FLOAT))
    total_cpus: int = 1
    hart_id: int = 0
    offset: int = 0

    def __post_init__(self):
        self.weights = np.asarray(self.weights, dtype=FLOAT).ravel()
        if self.total_cpus < 1:
            raise ValueError(f"total_cpus must be at least 1, got {self.total_cpus}")

    def take(self, count):
        """Return the next ``count`` weights and advance past them."""
        if count < 0:
            raise ValueError(f"cannot take a negative number of weights: {count}")
        end = self.offset + count
        if end > self.weights.size:
            raise ValueError(
                f"weight buffer exhausted: need {end} values, have {self.weights.size}"
            )
        chunk = self.weights[self.offset:end]
        self.offset = end
        return chunk


class Layer:
    """A layer with weights, a bias and an activation.

    On its own it only applies the activation; subclasses add their computation.
    """

    name_format = "layer%d"
    _names = itertools.count()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._names = itertools.count()

    def __init__(
        self,
        controller,
        activation,
        in_size,
        out_size,
        weight_size=0,
        bias_size=0,
        padding_size=0,
    ):
        self.activation = activation
        self.in_size = in_size
        self.out_size = out_size
        self.padding_size = padding_size
        self.total_cpus = controller.total_cpus
        self.hart_id = controller.hart_id
        self.weights = controller.take(weight_size)
        self.bias = controller.take(bias_size)
        self.output = None
        self.name = format_layer_name(type(self).name_format, next(type(self)._names))

    def check_input(self, data):
        """Flatten ``data`` and make sure it has ``in_size`` elements."""
        flat = np.asarray(data, dtype=FLOAT).ravel()
        if flat.size != self.in_size:
            raise SizeMismatchError(flat.size, self.in_size)
        return flat

    def _block(self, total):
        rows = block_range(total, self.total_cpus, self.hart_id)
        return slice(rows.start, max(rows.start, rows.stop))

    def _finish(self, pre_activation):
        """Activate this worker's share of ``pre_activation`` and keep it as the output."""
        activated = apply_activation(self.activation, pre_activation)
        out = np.zeros(pre_activation.size, dtype=FLOAT)
        share = self._block(pre_activation.size)
        out[share] = activated[share]
        self.output = out
        return out

    def forward(self, data):
        """Apply the activation to the input."""
        return self._finish(self.check_input(data))

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r}, {self.in_size}->{self.out_size})"


class DummyHeadLayer(Layer):
    """First layer of a network: passes the image through untouched."""

    name_format = "head%d"

    def __init__(self, controller, activation=identity, image_size=0):
        super().__init__(controller, activation, image_size, image_size)

    def forward(self, data):
        """Return the input as a flat array."""
        self.output = np.asarray(data, dtype=FLOAT).ravel()
        return self.output