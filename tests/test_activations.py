import math

import numpy as np
import pytest

from aquilacnn.activations import (
    apply_activation,
    bounded_relu,
    identity,
    my_exp_fp32,
    relu,
    softmax,
    taylor_exp,
)

VALUES = np.array([-2.0, -0.5, 0.0, 0.25, 0.75, 3.0], dtype=np.float32)


def test_identity_returns_element():
    assert identity(VALUES, 3) == VALUES[3]


def test_relu_clips_negative():
    assert relu(VALUES, 0) == 0
    assert relu(VALUES, 5) == VALUES[5]


def test_bounded_relu_clips_both_sides():
    assert bounded_relu(VALUES, 0) == 0
    assert bounded_relu(VALUES, 4) == VALUES[4]
    assert bounded_relu(VALUES, 5) == 1


def test_taylor_exp_at_zero_and_one_term():
    assert taylor_exp(0.0, 35) == 1
    assert taylor_exp(5.0, 1) == 1


@pytest.mark.parametrize("x", [-1.0, 0.5, 1.0, 2.0])
def test_taylor_exp_matches_exp(x):
    assert float(taylor_exp(x, 35)) == pytest.approx(math.exp(x), rel=1e-5)


def test_taylor_exp_elementwise():
    xs = np.array([0.0, 1.0, -1.0], dtype=np.float32)
    result = taylor_exp(xs, 35)
    assert [float(v) for v in result] == [float(taylor_exp(x, 35)) for x in xs]


def test_my_exp_fp32_outside_range_returns_input():
    assert my_exp_fp32(20.0) == 20.0
    assert my_exp_fp32(-20.0) == -20.0


def test_my_exp_fp32_near_zero():
    assert my_exp_fp32(0.0) == 1
    assert float(my_exp_fp32(0.1)) == pytest.approx(math.exp(0.1), rel=1e-4)


def test_softmax_sums_to_one():
    total = sum(float(softmax(VALUES, i)) for i in range(VALUES.size))
    assert total == pytest.approx(1.0, rel=1e-5)


def test_softmax_preserves_order():
    probs = [float(softmax(VALUES, i)) for i in range(VALUES.size)]
    assert probs == sorted(probs)


@pytest.mark.parametrize("activation", [identity, relu, bounded_relu, softmax])
def test_apply_activation_matches_scalar(activation):
    result = apply_activation(activation, VALUES)
    expected = [float(activation(VALUES, i)) for i in range(VALUES.size)]
    assert result.tolist() == pytest.approx(expected, rel=1e-5)


def test_apply_activation_generic_function():
    doubled = apply_activation(lambda values, i: values[i] * 2, VALUES)
    assert doubled.tolist() == pytest.approx((VALUES * 2).tolist())


def test_apply_activation_does_not_modify_input():
    original = VALUES.copy()
    apply_activation(relu, VALUES)
    assert VALUES.tolist() == original.tolist()