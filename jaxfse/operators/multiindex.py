"""Multi-index tables for truncated multi-dimensional Fourier series.

A table of order ``p`` in ``d`` dimensions holds every integer tuple with
components in ``[-p, p]``, i.e. ``(2p + 1) ** d`` entries. Linear positions
follow a mixed-radix encoding with base ``2p + 1`` where every component is
first shifted by ``+p``:

    number = 0
    for component in multiindex:
        number = (2p + 1) * number + (component + p)

Component 0 is therefore the most significant digit (it varies slowest) and
the last component varies fastest. Tables are immutable and shared through
:func:`get_multiindex_enumerator`.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Sequence, Tuple

import numpy as np

from ..errors import DimensionMismatch, InvalidConfiguration, OutOfRange
from ..runtime.dtypes import INDEX_DTYPE

logger = logging.getLogger(__name__)


def _validate_order_dim(order: object, dim: object) -> Tuple[int, int]:
    if isinstance(order, bool) or not isinstance(order, (int, np.integer)):
        raise InvalidConfiguration(f"order must be an integer, got {order!r}")
    if isinstance(dim, bool) or not isinstance(dim, (int, np.integer)):
        raise InvalidConfiguration(f"dim must be an integer, got {dim!r}")
    if order < 0:
        raise InvalidConfiguration("order must be >= 0")
    if dim <= 0:
        raise InvalidConfiguration("dim must be >= 1")
    return int(order), int(dim)


def validate_partial_order(order: object, max_order: int) -> int:
    """Return ``order`` as an ``int`` in ``[0, max_order]``.

    Non-integer orders are rejected rather than truncated.
    """
    if isinstance(order, bool) or not isinstance(order, (int, np.integer)):
        raise InvalidConfiguration(f"order must be an integer, got {order!r}")
    if order < 0 or order > max_order:
        raise InvalidConfiguration(f"order must lie in [0, {max_order}], got {order}")
    return int(order)


def multiindex_table_size(order: int, dim: int) -> int:
    """Return ``(2 * order + 1) ** dim``."""
    order, dim = _validate_order_dim(order, dim)
    return (2 * order + 1) ** dim


def _build_table(order: int, dim: int) -> np.ndarray:
    base = 2 * order + 1
    # C-order ``np.indices`` makes the last axis vary fastest, which is the
    # counting order of the encoding above.
    digits = np.indices((base,) * dim, dtype=INDEX_DTYPE).reshape(dim, -1).T
    table = np.ascontiguousarray(digits - order)
    table.setflags(write=False)
    return table


class MultiIndexEnumerator:
    """Immutable bijection between linear positions and multi-indices."""

    __slots__ = ("_order", "_dim", "_base", "_table", "_max_norms")

    def __init__(self, order: int, dim: int):
        order, dim = _validate_order_dim(order, dim)
        table = _build_table(order, dim)
        max_norms = np.max(np.abs(table), axis=1)
        max_norms.setflags(write=False)

        self._order = order
        self._dim = dim
        self._base = 2 * order + 1
        self._table = table
        self._max_norms = max_norms

    @property
    def order(self: "MultiIndexEnumerator") -> int:
        return self._order

    @property
    def dim(self: "MultiIndexEnumerator") -> int:
        return self._dim

    @property
    def size(self: "MultiIndexEnumerator") -> int:
        return int(self._table.shape[0])

    @property
    def table(self: "MultiIndexEnumerator") -> np.ndarray:
        """Read-only ``(size, dim)`` array of multi-indices."""
        return self._table

    @property
    def max_norms(self: "MultiIndexEnumerator") -> np.ndarray:
        """Largest absolute component of every multi-index."""
        return self._max_norms

    def __len__(self: "MultiIndexEnumerator") -> int:
        return self.size

    def __repr__(self: "MultiIndexEnumerator") -> str:
        return f"MultiIndexEnumerator(order={self._order}, dim={self._dim})"

    def get_multiindex(self: "MultiIndexEnumerator", linear_index: int) -> Tuple[int, ...]:
        """Return the multi-index stored at ``linear_index``."""
        index = int(linear_index)
        if index < 0 or index >= self.size:
            raise OutOfRange(
                f"linear index {index} out of range for table of size {self.size}"
            )
        return tuple(int(c) for c in self._table[index])

    def multiindex_to_linear(self: "MultiIndexEnumerator", multiindex: Sequence[int]) -> int:
        """Return the linear position of ``multiindex``."""
        components = [int(c) for c in multiindex]
        if len(components) != self._dim:
            raise DimensionMismatch(
                f"multi-index has {len(components)} components, expected {self._dim}"
            )
        number = 0
        for component in components:
            if component < -self._order or component > self._order:
                raise OutOfRange(
                    f"component {component} outside [-{self._order}, {self._order}]"
                )
            number = self._base * number + (component + self._order)
        return number

    def order_mask(self: "MultiIndexEnumerator", order: int) -> np.ndarray:
        """Boolean mask selecting multi-indices with every ``|m_k| <= order``."""
        return self._max_norms <= validate_partial_order(order, self._order)


@lru_cache(maxsize=None)
def _cached_enumerator(order: int, dim: int) -> MultiIndexEnumerator:
    logger.debug("building multi-index table for order=%d dim=%d", order, dim)
    return MultiIndexEnumerator(order, dim)


def get_multiindex_enumerator(order: int, dim: int) -> MultiIndexEnumerator:
    """Return the shared enumerator for ``(order, dim)``, building it lazily."""
    order, dim = _validate_order_dim(order, dim)
    return _cached_enumerator(order, dim)


def clear_multiindex_cache() -> None:
    """Drop all cached enumerators."""
    _cached_enumerator.cache_clear()


__all__ = [
    "MultiIndexEnumerator",
    "clear_multiindex_cache",
    "get_multiindex_enumerator",
    "multiindex_table_size",
    "validate_partial_order",
]
