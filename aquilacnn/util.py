"""Index arithmetic, work partitioning and small helpers shared by the layers."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

FLOAT = np.float32
"""Element type of every tensor handled by the network."""

_LLONG_MAX = 2**63 - 1
_LLONG_MIN = -(2**63)


@dataclass(frozen=True)
class Index3D:
    """Shape of a channel-major tensor: ``depth`` planes of ``height`` rows of ``width``."""

    width: int
    height: int
    depth: int

    def index(self, x, y, channel):
        """Flat offset of element (x, y) in plane ``channel``."""
        return (self.height * channel + y) * self.width + x

    def size(self):
        """Total number of elements."""
        return self.width * self.height * self.depth


def compute_block_size(size, total_cpus):
    """Number of items each of ``total_cpus`` workers handles, rounded up."""
    if total_cpus < 1:
        raise ValueError(f"total_cpus must be at least 1, got {total_cpus}")
    return -(-size // total_cpus)


def block_range(total_size, total_cpus, hart_id):
    """Range of item indices that worker ``hart_id`` is responsible for."""
    block = compute_block_size(total_size, total_cpus)
    start = block * hart_id
    return range(start, min(block * (hart_id + 1), total_size))


def format_layer_name(fmt, value):
    """Expand ``%d`` and ``%%`` in ``fmt``; other specifiers are copied verbatim."""
    pieces = []
    chars = iter(fmt)
    for ch in chars:
        if ch != "%":
            pieces.append(ch)
            continue
        spec = next(chars, "")
        if spec == "d":
            pieces.append(str(int(value)))
        elif spec == "%":
            pieces.append("%")
        else:
            pieces.append("%" + spec)
    return "".join(pieces)


def no_math_ceil(x):
    """Ceiling guarded by an integer range test.

    The range test can never hold, so ``x`` is returned unchanged.
    """
    if _LLONG_MAX <= x < _LLONG_MIN:
        truncated = int(x)
        if truncated < 0 or x == truncated:
            return float(truncated)
        return truncated + 1.0
    return float(x)