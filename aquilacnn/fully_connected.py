"""Dense layer: every output is a weighted sum of all inputs."""

from __future__ import annotations

import logging

import numpy as np

from aquilacnn.layer import Layer
from aquilacnn.util import FLOAT

log = logging.getLogger(__name__)


class FullyConnectedLayer(Layer):
    """Dense layer with a row-major ``out_dim x in_dim`` weight matrix and optional bias."""

    name_format = "fc%d"

    def __init__(self, controller, activation, in_dim, out_dim, has_bias=True):
        super().__init__(
            controller,
            activation,
            in_dim,
            out_dim,
            weight_size=in_dim * out_dim,
            bias_size=out_dim if has_bias else 0,
        )
        self.has_bias = bool(has_bias)
        self.matrix = self.weights.reshape(out_dim, in_dim)

    def forward(self, data):
        """Compute this worker's rows of ``W @ x + b`` and activate them."""
        x = self.check_input(data)
        log.debug("[%s] forward %d -> %d", self.name, self.in_size, self.out_size)
        pre = np.zeros(self.out_size, dtype=FLOAT)
        rows = self._block(self.out_size)
        pre[rows] = self.matrix[rows] @ x
        if self.has_bias:
            pre[rows] += self.bias[rows]
        return self._finish(pre)