"""An ordered chain of layers run one after another."""

from __future__ import annotations

import numpy as np

from aquilacnn.util import FLOAT


class Network:
    """Layers evaluated in insertion order, each fed the previous output."""

    def __init__(self, layers=()):
        self._layers = list(layers)

    def append(self, layer):
        """Add ``layer`` at the end and return it."""
        self._layers.append(layer)
        return layer

    def predict(self, data):
        """Run ``data`` through every layer and return the final output."""
        current = np.asarray(data, dtype=FLOAT).ravel()
        for layer in self._layers:
            current = layer.forward(current)
        return current

    def __iter__(self):
        return iter(self._layers)

    def __len__(self):
        return len(self._layers)