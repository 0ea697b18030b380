import numpy as np
import pytest

from aquilacnn.activations import identity, relu, softmax
from aquilacnn.fully_connected import FullyConnectedLayer
from aquilacnn.layer import Controller, SizeMismatchError


def _identity_weights(n, bias):
    eye = np.eye(n, dtype=np.float32).ravel()
    return np.concatenate([eye, np.asarray(bias, dtype=np.float32)])


def test_identity_matrix_reproduces_input():
    ctrl = Controller(weights=_identity_weights(3, [0.0, 0.0, 0.0]))
    layer = FullyConnectedLayer(ctrl, identity, 3, 3, True)
    data = [1.5, -2.0, 4.0]
    assert layer.forward(data).tolist() == data


def test_bias_is_added():
    bias = [0.5, -1.0, 2.0]
    data = [1.0, 2.0, 3.0]
    with_bias = FullyConnectedLayer(
        Controller(weights=_identity_weights(3, bias)), identity, 3, 3, True
    ).forward(data)
    without = FullyConnectedLayer(
        Controller(weights=np.eye(3, dtype=np.float32).ravel()), identity, 3, 3, False
    ).forward(data)
    assert (with_bias - without).tolist() == pytest.approx(bias)


def test_weight_consumption():
    ctrl = Controller(weights=np.zeros(20, dtype=np.float32))
    FullyConnectedLayer(ctrl, identity, 3, 4, True)
    assert ctrl.offset == 3 * 4 + 4
    ctrl2 = Controller(weights=np.zeros(20, dtype=np.float32))
    FullyConnectedLayer(ctrl2, identity, 3, 4, False)
    assert ctrl2.offset == 3 * 4


def test_weight_layout_is_row_major():
    weights = np.arange(6, dtype=np.float32)
    layer = FullyConnectedLayer(Controller(weights=weights), identity, 3, 2, False)
    assert layer.forward([1.0, 0.0, 0.0]).tolist() == [weights[0], weights[3]]
    assert layer.forward([0.0, 0.0, 1.0]).tolist() == [weights[2], weights[5]]


def test_relu_activation():
    ctrl = Controller(weights=_identity_weights(3, [0.0, 0.0, 0.0]))
    layer = FullyConnectedLayer(ctrl, relu, 3, 3, True)
    assert layer.forward([-1.0, 2.0, -3.0]).tolist() == [0.0, 2.0, 0.0]


def test_softmax_output_is_distribution():
    rng = np.random.default_rng(0)
    weights = rng.normal(size=4 * 5 + 5).astype(np.float32)
    layer = FullyConnectedLayer(Controller(weights=weights), softmax, 4, 5, True)
    out = layer.forward(rng.normal(size=4))
    assert float(out.sum()) == pytest.approx(1.0, rel=1e-5)
    assert (out > 0).all()


def test_second_worker_computes_only_its_rows():
    weights = _identity_weights(4, [0.0] * 4)
    data = [1.0, 2.0, 3.0, 4.0]
    layer = FullyConnectedLayer(
        Controller(weights=weights, total_cpus=2, hart_id=1), identity, 4, 4, True
    )
    assert layer.forward(data).tolist() == [0.0, 0.0, 3.0, 4.0]


def test_size_mismatch():
    layer = FullyConnectedLayer(
        Controller(weights=np.zeros(6, dtype=np.float32)), identity, 3, 2, False
    )
    with pytest.raises(SizeMismatchError):
        layer.forward([1.0, 2.0])


def test_names_use_fc_prefix():
    layer = FullyConnectedLayer(Controller(), identity, 0, 0, False)
    assert layer.name.startswith("fc")