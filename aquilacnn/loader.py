"""Readers for weight blobs, class-name lists and MNIST image/label files."""

from __future__ import annotations

import struct
from pathlib import Path

import numpy as np

from aquilacnn.util import FLOAT

MNIST_MEAN = 0.1307
"""Mean used to normalise MNIST pixels."""

MNIST_STD = 0.3081
"""Standard deviation used to normalise MNIST pixels."""

_IMAGE_HEADER = struct.Struct(">4I")
_LABEL_HEADER_SIZE = 8


def load_floats(path):
    """Read a whole file as little-endian 32-bit floats.

    Trailing bytes that do not make up a full float are ignored.
    """
    data = Path(path).read_bytes()
    usable = len(data) - len(data) % 4
    return np.frombuffer(data[:usable], dtype="<f4").astype(FLOAT)


def read_class_names(path, count=1000, width=40):
    """Read ``count`` newline-terminated class names from a text file.

    A name is looked for within the next ``width`` bytes. A line that fills
    the whole field is cut to ``width - 1`` bytes and the rest is read as the
    next name. When no line end is found in the field the name is empty and
    the read position does not move. Line terminators are dropped.
    """
    if width < 2:
        raise ValueError(f"width must be at least 2, got {width}")
    data = Path(path).read_bytes()
    position = 0
    names = []
    for _ in range(count):
        newline = data.find(b"\n", position, position + width)
        if newline < 0:
            names.append("")
            continue
        length = min(newline - position + 1, width - 1)
        chunk = data[position:position + length]
        position += length
        names.append(chunk.rstrip(b"\r\n").decode("utf-8", errors="replace"))
    return names


def read_mnist_images(path, padding=0):
    """Read an MNIST image file into an ``(n, rows, cols)`` float array.

    Each image gets a zero border of ``padding`` pixels, pixels are scaled to
    [0, 1] and the whole image, border included, is normalised with
    ``(p - MNIST_MEAN) / MNIST_STD``.
    """
    if padding < 0:
        raise ValueError(f"padding must not be negative, got {padding}")
    data = Path(path).read_bytes()
    if len(data) < _IMAGE_HEADER.size:
        raise ValueError(f"image file too short for its header: {len(data)} bytes")
    _, n_images, n_rows, n_cols = _IMAGE_HEADER.unpack_from(data)
    pixel_count = n_images * n_rows * n_cols
    if len(data) - _IMAGE_HEADER.size < pixel_count:
        raise ValueError(
            f"image file truncated: need {pixel_count} pixels, "
            f"have {len(data) - _IMAGE_HEADER.size}"
        )
    pixels = np.frombuffer(
        data, dtype=np.uint8, count=pixel_count, offset=_IMAGE_HEADER.size
    ).reshape(n_images, n_rows, n_cols)

    images = np.zeros(
        (n_images, n_rows + 2 * padding, n_cols + 2 * padding), dtype=FLOAT
    )
    images[:, padding:padding + n_rows, padding:padding + n_cols] = (
        pixels / 255.0
    ).astype(FLOAT)
    return ((images.astype(np.float64) - MNIST_MEAN) / MNIST_STD).astype(FLOAT)


def read_mnist_labels(path):
    """Read an MNIST label file and return its labels as a uint8 array."""
    data = Path(path).read_bytes()
    if len(data) < _LABEL_HEADER_SIZE:
        raise ValueError(f"label file too short for its header: {len(data)} bytes")
    return np.frombuffer(data, dtype=np.uint8, offset=_LABEL_HEADER_SIZE).copy()