"""Two-dimensional convolution over channel-major tensors."""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from aquilacnn.layer import Layer
from aquilacnn.util import FLOAT, Index3D

log = logging.getLogger(__name__)


class Padding(Enum):
    """How the input border is treated."""

    VALID = 0
    SAME = 1


def padded_length(length, padding_size, pad_type):
    """Length of one input side after padding."""
    return length + 2 * padding_size if pad_type is Padding.SAME else length


def conv_out_length(in_length, window_size, padding_size, stride, pad_type):
    """Number of window positions along one side.

    The padded formula is used for every padding type, so ``pad_type`` does not
    change the result.
    """
    if stride < 1:
        raise ValueError(f"stride must be at least 1, got {stride}")
    span = FLOAT(FLOAT(in_length) + FLOAT(2 * padding_size)) - FLOAT(window_size)
    return int(FLOAT(span) / FLOAT(stride)) + 1


class ConvolutionalLayer(Layer):
    """Convolution with per-(output, input) channel kernels.

    Weights are laid out as ``out_channels x in_channels x window_height x
    window_width``. A bias, when present, is taken from the weight buffer but
    not added, and the activation is recorded but not applied: the output is
    the raw convolution sum.
    """

    name_format = "conv%d"

    def __init__(
        self,
        controller,
        activation,
        in_width,
        in_height,
        window_width,
        window_height,
        in_channels,
        out_channels,
        pad_type=Padding.SAME,
        has_bias=False,
        w_stride=1,
        h_stride=1,
        w_padding=0,
        h_padding=0,
        delete_input=False,
    ):
        pad_type = Padding(pad_type)
        out_width = conv_out_length(in_width, window_width, w_padding, w_stride, pad_type)
        out_height = conv_out_length(in_height, window_height, h_padding, h_stride, pad_type)
        in_padded = Index3D(
            padded_length(in_width, w_padding, pad_type),
            padded_length(in_height, h_padding, pad_type),
            in_channels,
        )
        if out_width < 1 or out_height < 1:
            raise ValueError(
                f"window {window_width}x{window_height} does not fit input "
                f"{in_width}x{in_height}"
            )
        if (out_width - 1) * w_stride + window_width > in_padded.width or (
            out_height - 1
        ) * h_stride + window_height > in_padded.height:
            raise ValueError(
                "output positions reach beyond the input; "
                "padding is only honoured with Padding.SAME"
            )

        super().__init__(
            controller,
            activation,
            in_width * in_height * in_channels,
            out_width * out_height * out_channels,
            weight_size=window_width * window_height * in_channels * out_channels,
            bias_size=out_channels if has_bias else 0,
            padding_size=in_padded.size() if pad_type is Padding.SAME else 0,
        )
        self.in_shape = Index3D(in_width, in_height, in_channels)
        self.in_padded = in_padded
        self.out_shape = Index3D(out_width, out_height, out_channels)
        self.weight_shape = Index3D(window_width, window_height, in_channels * out_channels)
        self.padding = Index3D(w_padding, h_padding, 0)
        self.pad_type = pad_type
        self.w_stride = w_stride
        self.h_stride = h_stride
        self.has_bias = bool(has_bias)
        self.delete_input = bool(delete_input)
        self.kernels = self.weights.reshape(
            out_channels, in_channels, window_height, window_width
        )

    def pad_input(self, data):
        """Return the input placed inside a zero border, as a flat array."""
        x = self.check_input(data)
        src = x.reshape(self.in_shape.depth, self.in_shape.height, self.in_shape.width)
        if self.pad_type is not Padding.SAME:
            return src.ravel().copy()
        padded = np.zeros(
            (self.in_padded.depth, self.in_padded.height, self.in_padded.width),
            dtype=FLOAT,
        )
        top, left = self.padding.height, self.padding.width
        padded[:, top:top + self.in_shape.height, left:left + self.in_shape.width] = src
        return padded.ravel()

    def forward(self, data):
        """Convolve this worker's share of output channels."""
        padded = self.pad_input(data).reshape(
            self.in_padded.depth, self.in_padded.height, self.in_padded.width
        )
        out = self.out_shape
        window_h, window_w = self.weight_shape.height, self.weight_shape.width
        windows = sliding_window_view(padded, (window_h, window_w), axis=(1, 2))
        windows = windows[:, :: self.h_stride, :: self.w_stride][:, : out.height, : out.width]

        result = np.zeros((out.depth, out.height, out.width), dtype=FLOAT)
        channels = self._block(out.depth)
        log.debug(
            "[%s] output channels %d..%d of %d",
            self.name,
            channels.start,
            channels.stop,
            out.depth,
        )
        if channels.stop > channels.start:
            result[channels] = np.tensordot(
                self.kernels[channels], windows, axes=([1, 2, 3], [0, 3, 4])
            ).astype(FLOAT)
        self.output = result.ravel()
        return self.output