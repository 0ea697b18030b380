"""Residual block: two layer paths from one input, summed and rectified."""

from __future__ import annotations

import logging

import numpy as np

from aquilacnn.activations import relu
from aquilacnn.layer import Layer, SizeMismatchError
from aquilacnn.util import FLOAT

log = logging.getLogger(__name__)


class ResidualBlock(Layer):
    """Runs two paths on the same input and returns ``max(path0 + path1, 0)``.

    An empty path passes the block's input through unchanged. The output size
    is fixed by :meth:`finalize`, called once both paths are filled.
    """

    name_format = "residual%d"

    def __init__(self, controller, activation=relu):
        super().__init__(controller, activation, 0, 0)
        self.paths = ([], [])

    def add(self, layer, path):
        """Append ``layer`` to path 0 or 1 and return it."""
        if path not in (0, 1):
            raise ValueError(f"unsupported path: {path}")
        self.paths[path].append(layer)
        return layer

    def finalize(self, previous, controller):
        """Fix the output size from the paths and the layer before the block."""
        first, second = self.paths
        if not first and not second:
            out_size = previous.out_size
        elif not first or not second:
            last = (second or first)[-1]
            if last.out_size != previous.out_size:
                raise SizeMismatchError(last.out_size, previous.out_size)
            out_size = last.out_size
        else:
            if second[-1].out_size != first[-1].out_size:
                raise SizeMismatchError(second[-1].out_size, first[-1].out_size)
            out_size = second[-1].out_size
        self.in_size = previous.out_size
        self.out_size = out_size
        self.total_cpus = controller.total_cpus
        self.hart_id = controller.hart_id
        return self

    @staticmethod
    def _run(path, data):
        current = data
        for layer in path:
            current = layer.forward(current)
        return np.asarray(current, dtype=FLOAT).ravel()

    def forward(self, data):
        """Run both paths, add them and clamp negatives for this worker's share."""
        x = np.asarray(data, dtype=FLOAT).ravel()
        first = self._run(self.paths[0], x)
        second = self._run(self.paths[1], x)
        if first.size != second.size:
            raise SizeMismatchError(first.size, second.size)
        if first.size != self.out_size:
            raise SizeMismatchError(first.size, self.out_size)
        out = np.zeros(self.out_size, dtype=FLOAT)
        share = self._block(self.out_size)
        total = (first[share] + second[share]).astype(FLOAT)
        out[share] = np.where(total < 0, FLOAT(0), total)
        log.debug("[%s] summed %d values", self.name, self.out_size)
        self.output = out
        return out