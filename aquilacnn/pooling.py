"""Average and max pooling over channel-major tensors."""

from __future__ import annotations

import logging

import numpy as np

from aquilacnn.layer import Layer
from aquilacnn.util import FLOAT, Index3D, block_range

log = logging.getLogger(__name__)


def pool_out_dim(in_size, pooling_size, stride):
    """Number of pooling window positions along one side of length ``in_size``."""
    if stride < 1:
        raise ValueError(f"stride must be at least 1, got {stride}")
    span = FLOAT(in_size) - FLOAT(pooling_size)
    return int(FLOAT(span) / FLOAT(stride)) + 1


def _pool_windows(src, out_shape, pooling_size, stride, initial, combine):
    """Reduce every window of ``src`` (depth x height x width) into an output grid.

    Windows start at multiples of ``stride`` and are clipped at the far edges of
    the input. Elements are folded in row-major order within each window.
    """
    depth, height, width = src.shape
    grid = np.full((out_shape.depth, out_shape.height, out_shape.width), initial, dtype=FLOAT)
    y_starts = np.arange(out_shape.height) * stride
    x_starts = np.arange(out_shape.width) * stride
    channels = np.arange(depth)
    for dy in range(pooling_size):
        rows = y_starts + dy
        row_ok = np.flatnonzero(rows < height)
        if row_ok.size == 0:
            continue
        for dx in range(pooling_size):
            cols = x_starts + dx
            col_ok = np.flatnonzero(cols < width)
            if col_ok.size == 0:
                continue
            target = np.ix_(channels, row_ok, col_ok)
            values = src[np.ix_(channels, rows[row_ok], cols[col_ok])]
            grid[target] = combine(grid[target], values)
    return grid


def _add(current, value):
    return (current + value).astype(FLOAT)


def _larger(current, value):
    return np.where(current > value, current, value).astype(FLOAT)


class AveragePoolingLayer(Layer):
    """Average pooling without padding.

    Each window sum is scaled by ``1 / pooling_size**2`` even where the window
    is clipped at the input edge.
    """

    name_format = "avg_pool%d"

    def __init__(self, controller, activation, in_width, in_height, in_channels, pooling_size, stride):
        out_width = pool_out_dim(in_width, pooling_size, stride)
        out_height = pool_out_dim(in_height, pooling_size, stride)
        super().__init__(
            controller,
            activation,
            in_width * in_height * in_channels,
            out_width * out_height * in_channels,
        )
        self.scale_factor = FLOAT(1) / FLOAT(pooling_size * pooling_size)
        self.stride = stride
        self.pooling_size = pooling_size
        self.in_shape = Index3D(in_width, in_height, in_channels)
        self.out_shape = Index3D(out_width, out_height, in_channels)

    def forward(self, data):
        """Average this worker's share of output elements and activate them."""
        x = self.check_input(data)
        src = x.reshape(self.in_shape.depth, self.in_shape.height, self.in_shape.width)
        log.debug("[%s] average pooling %d -> %d", self.name, self.in_size, self.out_size)
        sums = _pool_windows(src, self.out_shape, self.pooling_size, self.stride, FLOAT(0), _add)
        scaled = (sums.ravel() * self.scale_factor).astype(FLOAT)
        pre = np.zeros(self.out_size, dtype=FLOAT)
        share = self._block(self.out_size)
        pre[share] = scaled[share]
        return self._finish(pre)


class MaxPoolingLayer(Layer):
    """Max pooling with an optional zero border of ``padding_size`` on every side."""

    name_format = "max_pool%d"

    def __init__(
        self,
        controller,
        activation,
        in_width,
        in_height,
        in_channels,
        pooling_size,
        stride,
        padding_size=0,
    ):
        padded = Index3D(in_width + 2 * padding_size, in_height + 2 * padding_size, in_channels)
        out_width = pool_out_dim(padded.width, pooling_size, stride)
        out_height = pool_out_dim(padded.height, pooling_size, stride)
        super().__init__(
            controller,
            activation,
            in_width * in_height * in_channels,
            out_width * out_height * in_channels,
            padding_size=padded.size() if padding_size else 0,
        )
        self.stride = stride
        self.pooling_size = pooling_size
        self.border = padding_size
        self.in_shape = Index3D(in_width, in_height, in_channels)
        self.in_padded = padded
        self.out_shape = Index3D(out_width, out_height, in_channels)

    def pad_input(self, data):
        """Return the input inside a zero border, as a flat array.

        Only this worker's share of input rows (counted over all channels) is
        copied into the padded buffer; without padding the input is used whole.
        """
        x = self.check_input(data)
        if not self.border:
            return x.copy()
        src = x.reshape(self.in_shape.depth * self.in_shape.height, self.in_shape.width)
        padded = np.zeros(
            (self.in_padded.depth, self.in_padded.height, self.in_padded.width), dtype=FLOAT
        )
        rows = block_range(src.shape[0], self.total_cpus, self.hart_id)
        left = self.border
        for row in rows:
            channel, y = divmod(row, self.in_shape.height)
            padded[channel, self.border + y, left:left + self.in_shape.width] = src[row]
        return padded.ravel()

    def forward(self, data):
        """Take window maxima for this worker's share of outputs and activate them."""
        padded = self.pad_input(data).reshape(
            self.in_padded.depth, self.in_padded.height, self.in_padded.width
        )
        log.debug("[%s] max pooling %d -> %d", self.name, self.in_size, self.out_size)
        maxima = _pool_windows(
            padded, self.out_shape, self.pooling_size, self.stride, FLOAT(-np.inf), _larger
        )
        pre = np.zeros(self.out_size, dtype=FLOAT)
        share = self._block(self.out_size)
        pre[share] = maxima.ravel()[share]
        return self._finish(pre)