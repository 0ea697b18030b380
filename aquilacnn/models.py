"""AlexNet assembly and ranking of classifier outputs."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from aquilacnn.activations import identity, relu, softmax
from aquilacnn.convolution import ConvolutionalLayer, Padding
from aquilacnn.fully_connected import FullyConnectedLayer
from aquilacnn.layer import DummyHeadLayer
from aquilacnn.network import Network
from aquilacnn.pooling import MaxPoolingLayer
from aquilacnn.util import FLOAT

log = logging.getLogger(__name__)

IMAGE_SIZE = 224 * 224 * 3
"""Number of values in one input image (3 channels of 224 x 224)."""

CLASS_COUNT = 1000
"""Number of classifier outputs."""

_RULE = "=" * 46
_DASHES = "-" * 46


@dataclass(frozen=True)
class Prediction:
    """One ranked classifier output."""

    index: int
    value: float
    name: str


def build_alexnet(controller):
    """Build AlexNet, taking its weights from ``controller`` in layer order."""
    net = Network()
    net.append(DummyHeadLayer(controller, identity, IMAGE_SIZE))
    net.append(ConvolutionalLayer(controller, relu, 224, 224, 11, 11, 3, 64,
                                  Padding.SAME, True, 4, 4, 2, 2))
    net.append(MaxPoolingLayer(controller, identity, 55, 55, 64, 3, 2, 0))

    net.append(ConvolutionalLayer(controller, relu, 27, 27, 5, 5, 64, 192,
                                  Padding.SAME, True, 1, 1, 5 // 2, 5 // 2))
    net.append(MaxPoolingLayer(controller, identity, 27, 27, 192, 3, 2, 0))

    net.append(ConvolutionalLayer(controller, relu, 13, 13, 3, 3, 192, 384,
                                  Padding.SAME, True, 1, 1, 3 // 2, 3 // 2))
    net.append(ConvolutionalLayer(controller, relu, 13, 13, 3, 3, 384, 256,
                                  Padding.SAME, True, 1, 1, 3 // 2, 3 // 2))
    net.append(ConvolutionalLayer(controller, relu, 13, 13, 3, 3, 256, 256,
                                  Padding.SAME, True, 1, 1, 3 // 2, 3 // 2))
    net.append(MaxPoolingLayer(controller, identity, 13, 13, 256, 3, 2, 0))

    net.append(FullyConnectedLayer(controller, relu, 9216, 4096, True))
    net.append(FullyConnectedLayer(controller, relu, 4096, 4096, True))
    net.append(FullyConnectedLayer(controller, softmax, 4096, CLASS_COUNT, True))
    log.debug("weights used: %d of %d", controller.offset, controller.weights.size)
    return net


def top_predictions(scores, names, count=4):
    """The ``count`` highest scores, best first, with their indices and names.

    Equal scores keep their original order.
    """
    if count < 0:
        raise ValueError(f"count must not be negative, got {count}")
    values = np.asarray(scores, dtype=FLOAT).ravel()
    names = list(names)
    if len(names) < values.size:
        raise ValueError(f"{values.size} scores but only {len(names)} names")
    order = sorted(range(values.size), key=lambda i: values[i], reverse=True)
    return [Prediction(i, float(values[i]), names[i]) for i in order[:count]]


def format_report(predictions):
    """Render ranked predictions as the results table."""
    lines = [
        _RULE,
        " idx | possibility(%) | class name",
        _DASHES,
        *(f" {p.index:3d} |       {p.value:8.5f} | {p.name}" for p in predictions),
        _RULE,
    ]
    return "\n".join(lines) + "\n"