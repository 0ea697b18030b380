"""Element-wise activation functions evaluated in single precision."""

from __future__ import annotations

import numpy as np

from aquilacnn.util import FLOAT

SOFTMAX_TERMS = 35
"""Number of series terms used for the exponential inside softmax."""


def identity(values, index):
    """Return the element unchanged."""
    return FLOAT(values[index])


def relu(values, index):
    """Rectified linear unit."""
    value = FLOAT(values[index])
    return FLOAT(0) if 0 > value else value


def bounded_relu(values, index):
    """ReLU clipped to the interval [0, 1]."""
    value = FLOAT(values[index])
    upper = FLOAT(1) if 1 < value else value
    return FLOAT(0) if 0 > upper else upper


def my_exp_fp32(x):
    """Fourth-order polynomial approximation of exp; returns x itself outside [-10, 10]."""
    x = FLOAT(x)
    result = FLOAT(1) + x * (
        FLOAT(1) + x * (FLOAT(0.5) + x * (FLOAT(0.166666667) + x * FLOAT(0.041666667)))
    )
    if x > 10 or x < -10:
        return x
    return FLOAT(result)


def taylor_exp(x, terms):
    """Exponential from the first ``terms`` terms of its Taylor series.

    Works on a scalar or element-wise on an array.
    """
    x = FLOAT(x) if np.ndim(x) == 0 else np.asarray(x, dtype=FLOAT)
    with np.errstate(over="ignore", invalid="ignore"):
        result = x * FLOAT(0) + FLOAT(1)
        term = x * FLOAT(0) + FLOAT(1)
        for i in range(1, terms):
            term = term * (x / FLOAT(i))
            result = result + term
    return result


def _softmax_all(values):
    exps = taylor_exp(values, SOFTMAX_TERMS)
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        return (exps / exps.sum(dtype=FLOAT)).astype(FLOAT)


def softmax(values, index):
    """Softmax of one element, normalised over all of ``values``."""
    values = np.asarray(values, dtype=FLOAT)
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        numer = taylor_exp(values[index], SOFTMAX_TERMS)
        denom = taylor_exp(values, SOFTMAX_TERMS).sum(dtype=FLOAT)
        return FLOAT(numer / denom)


def _relu_all(values):
    return np.where(values < 0, FLOAT(0), values).astype(FLOAT)


def _bounded_relu_all(values):
    upper = np.where(values > 1, FLOAT(1), values)
    return np.where(upper < 0, FLOAT(0), upper).astype(FLOAT)


_VECTORISED = {
    identity: lambda values: values.copy(),
    relu: _relu_all,
    bounded_relu: _bounded_relu_all,
    softmax: _softmax_all,
}


def apply_activation(activation, values):
    """Apply ``activation`` to every element of ``values``, returning a new array."""
    values = np.asarray(values, dtype=FLOAT).ravel()
    vectorised = _VECTORISED.get(activation)
    if vectorised is not None:
        return vectorised(values)
    return np.fromiter(
        (activation(values, i) for i in range(values.size)),
        dtype=FLOAT,
        count=values.size,
    )