"""Tests for multi-index tables and their shared cache."""

import numpy as np
import pytest

from jaxfse.errors import DimensionMismatch, InvalidConfiguration, OutOfRange
from jaxfse.operators.multiindex import (
    MultiIndexEnumerator,
    clear_multiindex_cache,
    get_multiindex_enumerator,
    multiindex_table_size,
)


@pytest.mark.parametrize("order,dim", [(0, 1), (1, 1), (2, 3), (3, 2), (1, 4)])
def test_table_size_matches_mixed_radix_count(order, dim):
    enumerator = MultiIndexEnumerator(order, dim)

    assert enumerator.size == (2 * order + 1) ** dim
    assert len(enumerator) == enumerator.size
    assert enumerator.table.shape == (enumerator.size, dim)
    assert multiindex_table_size(order, dim) == enumerator.size


@pytest.mark.parametrize("order,dim", [(0, 2), (1, 3), (2, 3), (3, 2)])
def test_linear_index_round_trip(order, dim):
    enumerator = MultiIndexEnumerator(order, dim)

    for i in range(enumerator.size):
        assert enumerator.multiindex_to_linear(enumerator.get_multiindex(i)) == i


def test_shifted_base_encoding_matches_table_order():
    order, dim = 2, 3
    enumerator = MultiIndexEnumerator(order, dim)

    for i in range(enumerator.size):
        number = 0
        for component in enumerator.get_multiindex(i):
            number = (2 * order + 1) * number + (component + order)
        assert number == i


def test_last_component_varies_fastest():
    enumerator = MultiIndexEnumerator(2, 3)

    assert enumerator.get_multiindex(0) == (-2, -2, -2)
    assert enumerator.get_multiindex(1) == (-2, -2, -1)
    assert enumerator.get_multiindex(5) == (-2, -1, -2)
    assert enumerator.get_multiindex(62) == (0, 0, 0)
    assert enumerator.get_multiindex(124) == (2, 2, 2)


def test_order_zero_is_single_zero_tuple():
    enumerator = MultiIndexEnumerator(0, 4)

    assert enumerator.size == 1
    assert enumerator.get_multiindex(0) == (0, 0, 0, 0)


def test_table_entries_are_unique_and_bounded():
    enumerator = MultiIndexEnumerator(3, 2)
    rows = {tuple(row) for row in enumerator.table.tolist()}

    assert len(rows) == enumerator.size
    assert np.all(np.abs(enumerator.table) <= 3)


def test_table_is_read_only():
    enumerator = MultiIndexEnumerator(1, 2)

    with pytest.raises(ValueError):
        enumerator.table[0, 0] = 5
    with pytest.raises(ValueError):
        enumerator.max_norms[0] = 5


@pytest.mark.parametrize("order,dim", [(-1, 2), (2, 0), (2, -3), (1.5, 2), (1, "3")])
def test_invalid_configuration_is_rejected(order, dim):
    with pytest.raises(InvalidConfiguration):
        MultiIndexEnumerator(order, dim)


def test_get_multiindex_out_of_range():
    enumerator = MultiIndexEnumerator(1, 2)

    with pytest.raises(OutOfRange):
        enumerator.get_multiindex(-1)
    with pytest.raises(OutOfRange):
        enumerator.get_multiindex(enumerator.size)


def test_multiindex_to_linear_rejects_bad_tuples():
    enumerator = MultiIndexEnumerator(2, 3)

    with pytest.raises(OutOfRange):
        enumerator.multiindex_to_linear((3, 0, 0))
    with pytest.raises(OutOfRange):
        enumerator.multiindex_to_linear((0, -3, 0))
    with pytest.raises(DimensionMismatch):
        enumerator.multiindex_to_linear((0, 0))


def test_order_mask_selects_lower_order_block():
    enumerator = MultiIndexEnumerator(2, 3)

    mask = enumerator.order_mask(1)
    assert int(mask.sum()) == 27
    assert np.all(np.abs(enumerator.table[mask]) <= 1)
    assert enumerator.order_mask(2).all()
    assert int(enumerator.order_mask(0).sum()) == 1

    with pytest.raises(InvalidConfiguration):
        enumerator.order_mask(3)


def test_cache_shares_instances_per_order_and_dim():
    clear_multiindex_cache()
    first = get_multiindex_enumerator(2, 3)

    assert get_multiindex_enumerator(2, 3) is first
    assert get_multiindex_enumerator(2, 2) is not first

    clear_multiindex_cache()
    rebuilt = get_multiindex_enumerator(2, 3)
    assert rebuilt is not first
    assert np.array_equal(rebuilt.table, first.table)


def test_cache_validates_before_building():
    with pytest.raises(InvalidConfiguration):
        get_multiindex_enumerator(-1, 3)


def test_order_mask_rejects_non_integer_orders():
    enumerator = MultiIndexEnumerator(2, 2)

    with pytest.raises(InvalidConfiguration):
        enumerator.order_mask(1.5)
    with pytest.raises(InvalidConfiguration):
        enumerator.order_mask(False)
    assert enumerator.order_mask(np.int32(1)).sum() == 9
