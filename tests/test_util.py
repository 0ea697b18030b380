import itertools

import pytest

from aquilacnn.util import (
    Index3D,
    block_range,
    compute_block_size,
    format_layer_name,
    no_math_ceil,
)


def test_index_enumerates_all_offsets_in_order():
    shape = Index3D(width=4, height=3, depth=2)
    offsets = [
        shape.index(x, y, c)
        for c, y, x in itertools.product(range(2), range(3), range(4))
    ]
    assert offsets == list(range(shape.size()))


def test_index_corners():
    shape = Index3D(width=5, height=7, depth=3)
    assert shape.index(0, 0, 0) == 0
    assert shape.index(4, 6, 2) == shape.size() - 1


def test_size_is_product():
    shape = Index3D(width=224, height=224, depth=3)
    assert shape.size() == 224 * 224 * 3


def test_compute_block_size_rounds_up():
    assert compute_block_size(9, 3) == 3
    assert compute_block_size(10, 3) == 4
    assert compute_block_size(5, 1) == 5


def test_compute_block_size_rejects_zero_workers():
    with pytest.raises(ValueError):
        compute_block_size(10, 0)


@pytest.mark.parametrize("total,cpus", [(10, 3), (1000, 4), (7, 7), (3, 5), (0, 2)])
def test_block_ranges_partition_the_work(total, cpus):
    covered = [i for hart in range(cpus) for i in block_range(total, cpus, hart)]
    assert covered == list(range(total))


def test_single_worker_gets_everything():
    assert block_range(64, 1, 0) == range(0, 64)


def test_format_layer_name_integer():
    assert format_layer_name("conv%d", 3) == "conv3"
    assert format_layer_name("fc%d", 0) == "fc0"


def test_format_layer_name_negative_and_percent():
    assert format_layer_name("n%d", -5) == "n-5"
    assert format_layer_name("a%%b", 1) == "a%b"


def test_format_layer_name_unknown_specifier_is_kept():
    assert format_layer_name("x%s", 1) == "x%s"


@pytest.mark.parametrize("value", [2.5, -1.25, 0.0, 7.0])
def test_no_math_ceil_returns_input(value):
    assert no_math_ceil(value) == value