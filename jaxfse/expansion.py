"""Fourier-series expansion facade for jaxfse.

A :class:`FourierExpansion` owns a center and a complex coefficient buffer
and holds a non-owning reference to its kernel auxiliary. Coefficients are
only meaningful for the center and auxiliary they were built with; moving
the center produces a new expansion instead of mutating this one.

``accumulate_coeffs`` and ``add_expansion`` mutate the buffer and need
external synchronization when shared across threads; every other method is
read-only.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional

import jax.numpy as jnp
import numpy as np
from jaxtyping import Array, ArrayLike

from .config import DEFAULT_ACCUMULATE_CHUNK_SIZE, ExpansionConfig, build_kernel_aux
from .downward.field import evaluate_field, evaluate_field_batch
from .errors import DimensionMismatch, InvalidConfiguration, OutOfRange
from .kernel_aux import FourierKernelAux
from .runtime.dtypes import complex_dtype_for_real, real_dtype_for
from .upward.coefficients import (
    accumulate_coefficients_chunked,
    translate_coefficients,
    zero_coefficients,
)

logger = logging.getLogger(__name__)


class FourierExpansionState(NamedTuple):
    """Snapshot of an expansion, suitable for caching by the caller."""

    center: Array
    coefficients: Array
    integral_truncation_limit: float


def _as_array(value: ArrayLike, name: str) -> Array:
    # Ragged nested sequences fail inside ``jnp.asarray``.
    try:
        return jnp.asarray(value)
    except (TypeError, ValueError) as exc:
        raise DimensionMismatch(f"{name} is not a rectangular numeric array") from exc


def _as_center(center: ArrayLike, dim: int) -> Array:
    center = _as_array(center, "center")
    if center.ndim != 1:
        raise DimensionMismatch("center must be a vector")
    if center.shape[0] != dim:
        raise DimensionMismatch(
            f"center has dimension {center.shape[0]}, kernel auxiliary expects {dim}"
        )
    return center.astype(real_dtype_for(center))


class FourierExpansion:
    """Truncated Fourier-series expansion of a weighted kernel sum.

    Parameters
    ----------
    center:
        Expansion center, a length-``dim`` vector. Its floating dtype sets the
        working precision (``complex128`` coefficients for ``float64``).
    kernel_aux:
        Kernel auxiliary providing the table, wave vectors and weights. It
        must outlive the expansion.
    chunk_size:
        Maximum number of points processed per accumulation step.
    """

    def __init__(
        self,
        center: ArrayLike,
        kernel_aux: FourierKernelAux,
        *,
        chunk_size: int = DEFAULT_ACCUMULATE_CHUNK_SIZE,
    ):
        if int(chunk_size) <= 0:
            raise InvalidConfiguration("chunk_size must be positive")
        center = _as_center(center, kernel_aux.dim)
        dtype = center.dtype

        self._center = center
        self._kernel_aux = kernel_aux
        self._chunk_size = int(chunk_size)
        self._integral_truncation_limit = kernel_aux.integral_truncation_limit
        self._frequencies = kernel_aux.frequencies(dtype=dtype)
        self._scales = kernel_aux.coefficient_scales(dtype=dtype)
        self._normalization = kernel_aux.normalization_factors(dtype=dtype)
        self._coeffs = zero_coefficients(kernel_aux.enumerator.size, dtype)

    @classmethod
    def from_config(
        cls: type["FourierExpansion"],
        center: ArrayLike,
        config: ExpansionConfig,
    ) -> "FourierExpansion":
        """Build a fresh auxiliary from ``config`` and an expansion using it."""

        return cls(
            center,
            build_kernel_aux(config),
            chunk_size=config.accumulate_chunk_size,
        )

    # Properties -------------------------------------------------------

    @property
    def center(self: "FourierExpansion") -> Array:
        return self._center

    @property
    def kernel_aux(self: "FourierExpansion") -> FourierKernelAux:
        return self._kernel_aux

    @property
    def order(self: "FourierExpansion") -> int:
        return self._kernel_aux.order

    @property
    def dim(self: "FourierExpansion") -> int:
        return self._kernel_aux.dim

    def get_coeffs(self: "FourierExpansion") -> Array:
        """Current coefficients, one per multi-index table entry."""
        return self._coeffs

    # Internal checks --------------------------------------------------

    def _check_valid(self) -> None:
        if self._kernel_aux.integral_truncation_limit != self._integral_truncation_limit:
            raise InvalidConfiguration(
                "integral truncation limit changed after the expansion was "
                "created; rebuild the expansion"
            )

    def _mask(self, order: Optional[int]) -> Array:
        if order is None:
            order = self.order
        return jnp.asarray(self._kernel_aux.enumerator.order_mask(order))

    def _compatible(self, other: "FourierExpansion") -> bool:
        mine, theirs = self._kernel_aux, other._kernel_aux
        return (
            type(mine) is type(theirs)
            and mine.bandwidth == theirs.bandwidth
            and mine.order == theirs.order
            and mine.dim == theirs.dim
            and self._integral_truncation_limit == other._integral_truncation_limit
        )

    # Accumulation -----------------------------------------------------

    def accumulate_coeffs(
        self: "FourierExpansion",
        points: ArrayLike,
        weights: ArrayLike,
        begin: int = 0,
        end: Optional[int] = None,
        order: Optional[int] = None,
    ) -> None:
        """Add the contribution of ``points[begin:end]`` to the coefficients.

        Parameters
        ----------
        points, weights:
            ``(N, dim)`` reference points and their ``(N,)`` weights.
        begin, end:
            Half-open range of points to consume; ``end`` defaults to ``N``.
        order:
            Fill only multi-indices with every ``|m_k| <= order``; defaults
            to the auxiliary's order. Lower orders support incremental
            refinement.
        """

        points = _as_array(points, "points")
        weights = _as_array(weights, "weights")
        if points.ndim != 2 or points.shape[1] != self.dim:
            raise DimensionMismatch(
                f"points must have shape (N, {self.dim}), got {tuple(points.shape)}"
            )
        num_points = int(points.shape[0])
        if weights.shape != (num_points,):
            raise DimensionMismatch(
                f"weights must have shape ({num_points},), got {tuple(weights.shape)}"
            )
        begin = int(begin)
        end = num_points if end is None else int(end)
        if begin < 0 or end > num_points or begin > end:
            raise OutOfRange(
                f"point range [{begin}, {end}) invalid for {num_points} points"
            )
        mask = self._mask(order)
        self._check_valid()
        if begin == end:
            return

        dtype = self._center.dtype
        logger.debug(
            "accumulating %d points into expansion of order %d",
            end - begin,
            self.order if order is None else int(order),
        )
        self._coeffs = accumulate_coefficients_chunked(
            self._coeffs,
            points[begin:end].astype(dtype),
            weights[begin:end].astype(dtype),
            self._center,
            self._frequencies,
            self._scales,
            mask,
            chunk_size=self._chunk_size,
        )

    def add_expansion(self: "FourierExpansion", other: "FourierExpansion") -> None:
        """Add ``other``'s coefficients, re-centered onto this expansion."""

        if not self._compatible(other):
            raise InvalidConfiguration(
                "expansions must share kernel family, bandwidth, order, "
                "dimension and truncation limit"
            )
        self._check_valid()
        other._check_valid()
        delta = self._center - other._center.astype(self._center.dtype)
        translated = translate_coefficients(
            other._coeffs.astype(self._coeffs.dtype),
            self._frequencies,
            delta,
        )
        self._coeffs = self._coeffs + translated

    # Evaluation -------------------------------------------------------

    def evaluate_field(
        self: "FourierExpansion",
        query_point: ArrayLike,
        dim: Optional[int] = None,
        *,
        order: Optional[int] = None,
    ) -> float:
        """Approximate kernel sum at ``query_point``.

        ``dim``, when given, must match the expansion's dimension. ``order``
        restricts the series to multi-indices with every ``|m_k| <= order``.
        """

        query = _as_array(query_point, "query")
        if dim is not None and int(dim) != self.dim:
            raise DimensionMismatch(f"dim {dim} does not match expansion dimension {self.dim}")
        if query.ndim != 1 or query.shape[0] != self.dim:
            raise DimensionMismatch(
                f"query must have shape ({self.dim},), got {tuple(query.shape)}"
            )
        mask = self._mask(order)
        self._check_valid()
        value = evaluate_field(
            self._coeffs,
            query.astype(self._center.dtype),
            self._center,
            self._frequencies,
            self._normalization,
            mask,
        )
        return float(value)

    def evaluate_fields(
        self: "FourierExpansion",
        query_points: ArrayLike,
        *,
        order: Optional[int] = None,
    ) -> Array:
        """Approximate kernel sums for every row of ``query_points``."""

        queries = _as_array(query_points, "queries")
        if queries.ndim != 2 or queries.shape[1] != self.dim:
            raise DimensionMismatch(
                f"queries must have shape (Q, {self.dim}), got {tuple(queries.shape)}"
            )
        mask = self._mask(order)
        self._check_valid()
        return evaluate_field_batch(
            self._coeffs,
            queries.astype(self._center.dtype),
            self._center,
            self._frequencies,
            self._normalization,
            mask,
        )

    # Re-centering and snapshots ---------------------------------------

    def translate_to(self: "FourierExpansion", new_center: ArrayLike) -> "FourierExpansion":
        """Return a new expansion about ``new_center`` with shifted coefficients."""

        self._check_valid()
        target = FourierExpansion(
            _as_center(new_center, self.dim).astype(self._center.dtype),
            self._kernel_aux,
            chunk_size=self._chunk_size,
        )
        target._coeffs = translate_coefficients(
            self._coeffs,
            self._frequencies,
            target._center - self._center,
        )
        return target

    def state(self: "FourierExpansion") -> FourierExpansionState:
        return FourierExpansionState(
            center=self._center,
            coefficients=self._coeffs,
            integral_truncation_limit=self._integral_truncation_limit,
        )

    @classmethod
    def from_state(
        cls: type["FourierExpansion"],
        state: FourierExpansionState,
        kernel_aux: FourierKernelAux,
        *,
        chunk_size: int = DEFAULT_ACCUMULATE_CHUNK_SIZE,
    ) -> "FourierExpansion":
        """Rebuild an expansion from :meth:`state` output."""

        if state.integral_truncation_limit != kernel_aux.integral_truncation_limit:
            raise InvalidConfiguration(
                "snapshot was taken with a different integral truncation limit"
            )
        expansion = cls(state.center, kernel_aux, chunk_size=chunk_size)
        coeffs = _as_array(state.coefficients, "coefficients")
        if coeffs.shape != expansion._coeffs.shape:
            raise DimensionMismatch(
                f"expected {expansion._coeffs.shape[0]} coefficients, got {coeffs.shape}"
            )
        expansion._coeffs = coeffs.astype(complex_dtype_for_real(expansion._center.dtype))
        return expansion

    def __repr__(self: "FourierExpansion") -> str:
        center = np.asarray(self._center).tolist()
        return (
            f"FourierExpansion(center={center}, order={self.order}, "
            f"dim={self.dim}, aux={self._kernel_aux!r})"
        )


__all__ = ["FourierExpansion", "FourierExpansionState"]
