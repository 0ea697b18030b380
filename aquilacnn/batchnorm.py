"""Batch normalisation with a bisection square root."""

from __future__ import annotations

import logging

import numpy as np

from aquilacnn.layer import Layer
from aquilacnn.util import FLOAT, Index3D

log = logging.getLogger(__name__)

EPSILON = 0.00001
"""Added to each variance before taking its square root."""

_BISECTION_STEPS = 100


def _root_all(values):
    """Element-wise square root by range reduction and bisection in single precision."""
    n = np.atleast_1d(np.asarray(values, dtype=FLOAT)).ravel()
    if np.any(n < 0):
        raise ValueError("square root of a negative number")
    with np.errstate(over="ignore", invalid="ignore", under="ignore"):
        lo = np.where(FLOAT(1) < n, FLOAT(1), n).astype(FLOAT)
        hi = np.where(FLOAT(1) > n, FLOAT(1), n).astype(FLOAT)

        while True:
            grow = FLOAT(100) * lo * lo < n
            if not grow.any():
                break
            lo = np.where(grow, lo * FLOAT(10), lo).astype(FLOAT)

        n_wide = n.astype(np.float64)
        while True:
            hi_wide = hi.astype(np.float64)
            shrink = 0.01 * hi_wide * hi_wide > n_wide
            if not shrink.any():
                break
            hi = np.where(shrink, (hi_wide * 0.1).astype(FLOAT), hi).astype(FLOAT)

        mid = lo.copy()
        done = np.zeros(n.shape, dtype=bool)
        for _ in range(_BISECTION_STEPS):
            active = ~done
            if not active.any():
                break
            mid = np.where(active, (lo + hi) / FLOAT(2), mid).astype(FLOAT)
            square = mid * mid
            hit = active & (square == n)
            done |= hit
            above = active & ~hit & (square > n)
            below = active & ~hit & ~(square > n)
            hi = np.where(above, mid, hi).astype(FLOAT)
            lo = np.where(below, mid, lo).astype(FLOAT)
    return mid


def root(n):
    """Square root of ``n`` found by bisection in single precision."""
    return FLOAT(_root_all(n)[0])


class BatchNormLayer(Layer):
    """Per-channel ``gamma * (x - mean) / sqrt(var + eps) + beta`` followed by the activation.

    The weight slice holds four rows of ``channels`` values: gamma, beta,
    running mean and running variance.
    """

    name_format = "norm%d"

    def __init__(self, controller, activation, channels, in_width, in_height):
        size = in_width * in_height * channels
        super().__init__(controller, activation, size, size, weight_size=4 * channels)
        self.in_shape = Index3D(in_width, in_height, channels)
        self._params = self.weights.reshape(4, channels)
        self._inverse_std = None
        if channels:
            log.debug(
                "[%s] weights [%f, ..., %f]",
                self.name,
                self.weights[0],
                self.weights[-1],
            )

    def gamma(self, channel):
        """Scale of ``channel``."""
        return FLOAT(self._params[0][channel])

    def beta(self, channel):
        """Shift of ``channel``."""
        return FLOAT(self._params[1][channel])

    def mean(self, channel):
        """Running mean of ``channel``."""
        return FLOAT(self._params[2][channel])

    def invstd(self, channel):
        """Reciprocal of the standard deviation of ``channel``."""
        return FLOAT(self._inverse_stds()[channel])

    def _inverse_stds(self):
        if self._inverse_std is None:
            shifted = (self._params[3].astype(np.float64) + EPSILON).astype(FLOAT)
            with np.errstate(divide="ignore"):
                self._inverse_std = (FLOAT(1) / _root_all(shifted)).astype(FLOAT)
        return self._inverse_std

    def forward(self, data):
        """Normalise this worker's share of spatial positions and activate."""
        x = self.check_input(data)
        depth = self.in_shape.depth
        plane = self.in_shape.width * self.in_shape.height
        src = x.reshape(depth, plane)
        gamma, beta, mean = (row[:, None] for row in self._params[:3])
        invstd = self._inverse_stds()[:, None]
        log.debug("[%s] normalising %d channels of %d", self.name, depth, plane)
        with np.errstate(over="ignore", invalid="ignore"):
            normalised = (gamma * (src - mean) * invstd + beta).astype(FLOAT)
        pre = np.zeros((depth, plane), dtype=FLOAT)
        columns = self._block(plane)
        pre[:, columns] = normalised[:, columns]
        return self._finish(pre.ravel())