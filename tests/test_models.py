import numpy as np
import pytest

from aquilacnn.convolution import ConvolutionalLayer
from aquilacnn.fully_connected import FullyConnectedLayer
from aquilacnn.layer import Controller, DummyHeadLayer
from aquilacnn.models import (
    CLASS_COUNT,
    IMAGE_SIZE,
    Prediction,
    build_alexnet,
    format_report,
    top_predictions,
)
from aquilacnn.pooling import MaxPoolingLayer


@pytest.fixture(scope="module")
def built():
    controller = Controller(weights=np.zeros(70_000_000, dtype=np.float32))
    return build_alexnet(controller), controller.offset


def test_alexnet_layer_kinds(built):
    net, _ = built
    kinds = [type(layer) for layer in net]
    assert kinds == [
        DummyHeadLayer,
        ConvolutionalLayer,
        MaxPoolingLayer,
        ConvolutionalLayer,
        MaxPoolingLayer,
        ConvolutionalLayer,
        ConvolutionalLayer,
        ConvolutionalLayer,
        MaxPoolingLayer,
        FullyConnectedLayer,
        FullyConnectedLayer,
        FullyConnectedLayer,
    ]


def test_alexnet_sizes_chain(built):
    net, _ = built
    layers = list(net)
    assert layers[0].out_size == IMAGE_SIZE
    assert layers[-1].out_size == CLASS_COUNT
    for before, after in zip(layers, layers[1:]):
        assert after.in_size == before.out_size


def test_alexnet_exact_weight_buffer(built):
    _, used = built
    controller = Controller(weights=np.zeros(used, dtype=np.float32))
    build_alexnet(controller)
    assert controller.offset == used


def test_alexnet_too_few_weights(built):
    _, used = built
    with pytest.raises(ValueError):
        build_alexnet(Controller(weights=np.zeros(used - 1, dtype=np.float32)))


def test_top_predictions_order():
    scores = [0.1, 0.7, 0.05, 0.9, 0.3]
    names = ["a", "b", "c", "d", "e"]
    ranked = top_predictions(scores, names, 3)
    assert [p.index for p in ranked] == [3, 1, 4]
    assert [p.name for p in ranked] == ["d", "b", "e"]
    assert ranked[0].value == pytest.approx(0.9)


def test_top_predictions_ties_keep_order():
    ranked = top_predictions([0.5, 0.5, 0.5], ["x", "y", "z"], 3)
    assert [p.index for p in ranked] == [0, 1, 2]


def test_top_predictions_count_larger_than_scores():
    ranked = top_predictions([2.0, 1.0], ["p", "q"], 10)
    assert len(ranked) == 2


def test_top_predictions_missing_names():
    with pytest.raises(ValueError):
        top_predictions([1.0, 2.0, 3.0], ["only"], 2)


def test_top_predictions_negative_count():
    with pytest.raises(ValueError):
        top_predictions([1.0], ["a"], -1)


def test_format_report_layout():
    report = format_report([Prediction(7, 0.5, "cock"), Prediction(8, 0.25, "hen")])
    lines = report.splitlines()
    assert lines[0] == lines[-1]
    assert set(lines[0]) == {"="}
    assert lines[1] == " idx | possibility(%) | class name"
    assert set(lines[2]) == {"-"}
    assert lines[3] == "   7 |        0.50000 | cock"
    assert lines[4].endswith("| hen")
    assert report.endswith("\n")