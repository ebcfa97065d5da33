"""Kernel-family auxiliaries for Fourier-series expansions.

An auxiliary bundles a kernel formula with everything the kernel-agnostic
expansion needs to know about it: the bandwidth, the expansion order and
dimension, the shared multi-index table, the integral truncation limit ``T``
and the per-multi-index weights derived from the kernel's Fourier transform.

The series treats the kernel as periodic with period ``2T`` along every
axis. By Poisson summation the Fourier coefficient of the periodized kernel
for wave vector ``k = (pi / T) * m`` equals ``K_hat(k) / (2T) ** dim`` where
``K_hat`` is the kernel's continuous Fourier transform, so two error sources
remain: the periodization (aliasing) error, small when displacements stay well
inside ``[-T, T]``, and the truncation error of dropping ``|m_k| > order``.
"""

from __future__ import annotations

import abc
import logging
import math
from typing import Optional, Sequence

import jax.numpy as jnp
import numpy as np
from jaxtyping import Array, ArrayLike, DTypeLike

from .errors import InvalidConfiguration
from .kernels import GaussianKernel, Kernel
from .operators.fourier_basis import fourier_frequencies
from .operators.multiindex import (
    MultiIndexEnumerator,
    get_multiindex_enumerator,
    validate_partial_order,
)

logger = logging.getLogger(__name__)


def _validate_positive(name: str, value: object) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"{name} must be a real number") from exc
    if not math.isfinite(out) or out <= 0.0:
        raise InvalidConfiguration(f"{name} must be a positive finite number")
    return out


class FourierKernelAux(abc.ABC):
    """Kernel-specific constants shared by every expansion of one family.

    Parameters
    ----------
    bandwidth:
        Kernel scale parameter ``h``.
    order:
        Largest absolute multi-index component kept in the series.
    dim:
        Dimensionality of points, centers and queries.
    integral_truncation_limit:
        Half-period ``T`` of the series. Defaults to
        :meth:`default_integral_truncation_limit`.
    """

    def __init__(
        self,
        bandwidth: float,
        order: int,
        dim: int,
        *,
        integral_truncation_limit: Optional[float] = None,
    ):
        bandwidth = _validate_positive("bandwidth", bandwidth)
        kernel = self._make_kernel(bandwidth)
        enumerator = get_multiindex_enumerator(order, dim)
        if integral_truncation_limit is None:
            limit = self._default_limit(bandwidth, enumerator.order)
        else:
            limit = _validate_positive(
                "integral_truncation_limit",
                integral_truncation_limit,
            )

        self._bandwidth = bandwidth
        self._kernel = kernel
        self._enumerator = enumerator
        self._integral_truncation_limit = limit
        logger.debug(
            "%s: bandwidth=%g order=%d dim=%d truncation_limit=%g",
            type(self).__name__,
            bandwidth,
            enumerator.order,
            enumerator.dim,
            limit,
        )

    # Family hooks -----------------------------------------------------

    @abc.abstractmethod
    def _make_kernel(self, bandwidth: float) -> Kernel:
        ...

    @abc.abstractmethod
    def _default_limit(self, bandwidth: float, order: int) -> float:
        ...

    @abc.abstractmethod
    def multiindex_weights(self: "FourierKernelAux", table: np.ndarray) -> np.ndarray:
        """Fourier-series weight of every row of ``table`` (float64, host)."""

    def normalization_weights(self: "FourierKernelAux", table: np.ndarray) -> np.ndarray:
        """Evaluation-time factor of every row of ``table``.

        The product of :meth:`multiindex_weights` and this factor must equal
        the kernel's Fourier-series coefficient. The default places the whole
        weight in the accumulation stage.
        """
        return np.ones((np.asarray(table).shape[0],), dtype=np.float64)

    # Configuration ----------------------------------------------------

    @property
    def bandwidth(self: "FourierKernelAux") -> float:
        return self._bandwidth

    @property
    def order(self: "FourierKernelAux") -> int:
        return self._enumerator.order

    @property
    def dim(self: "FourierKernelAux") -> int:
        return self._enumerator.dim

    @property
    def kernel(self: "FourierKernelAux") -> Kernel:
        return self._kernel

    @property
    def enumerator(self: "FourierKernelAux") -> MultiIndexEnumerator:
        return self._enumerator

    @property
    def integral_truncation_limit(self: "FourierKernelAux") -> float:
        return self._integral_truncation_limit

    def default_integral_truncation_limit(self: "FourierKernelAux") -> float:
        """Truncation limit used when none is given explicitly."""
        return self._default_limit(self._bandwidth, self.order)

    def set_integral_truncation_limit(self: "FourierKernelAux", value: float) -> None:
        """Override the half-period ``T`` of the series.

        Expansions created before the override are invalidated and refuse
        further accumulation or evaluation.
        """
        self._integral_truncation_limit = _validate_positive(
            "integral_truncation_limit",
            value,
        )

    # Kernel evaluation ------------------------------------------------

    def evaluate_unnormalized(self: "FourierKernelAux", squared_distance: ArrayLike) -> Array:
        return self._kernel.evaluate_unnormalized(squared_distance)

    # Per-multi-index constants ----------------------------------------

    def base_frequency(self: "FourierKernelAux") -> float:
        """Angular frequency ``pi / T`` of multi-index component one."""
        return math.pi / self._integral_truncation_limit

    def frequencies(self: "FourierKernelAux", dtype: Optional[DTypeLike] = None) -> Array:
        """Wave vectors of the whole table, shape ``(size, dim)``."""
        return fourier_frequencies(
            self._enumerator.table,
            self._integral_truncation_limit,
            dtype=dtype,
        )

    def coefficient_scales(self: "FourierKernelAux", dtype: Optional[DTypeLike] = None) -> Array:
        """Accumulation weights of the whole table, shape ``(size,)``."""
        return jnp.asarray(self.multiindex_weights(self._enumerator.table), dtype=dtype)

    def normalization_factors(self: "FourierKernelAux", dtype: Optional[DTypeLike] = None) -> Array:
        """Evaluation factors of the whole table, shape ``(size,)``."""
        return jnp.asarray(
            self.normalization_weights(self._enumerator.table),
            dtype=dtype,
        )

    def scale(self: "FourierKernelAux", multiindex: Sequence[int]) -> float:
        """Accumulation weight of a single multi-index."""
        self._enumerator.multiindex_to_linear(multiindex)
        row = np.asarray([list(multiindex)], dtype=np.int64)
        return float(self.multiindex_weights(row)[0])

    def normalization(self: "FourierKernelAux", multiindex: Sequence[int]) -> float:
        """Evaluation factor of a single multi-index."""
        self._enumerator.multiindex_to_linear(multiindex)
        row = np.asarray([list(multiindex)], dtype=np.int64)
        return float(self.normalization_weights(row)[0])

    def _resolve_order(self, order: Optional[int]) -> int:
        if order is None:
            return self.order
        return validate_partial_order(order, self.order)

    def __repr__(self: "FourierKernelAux") -> str:
        return (
            f"{type(self).__name__}(bandwidth={self._bandwidth!r}, "
            f"order={self.order}, dim={self.dim}, "
            f"integral_truncation_limit={self._integral_truncation_limit!r})"
        )


class GaussianKernelFourierAux(FourierKernelAux):
    """Fourier auxiliary for ``exp(-r**2 / (2 h**2))``.

    The Gaussian factorizes over axes, so every weight is a product of 1-D
    weights ``beta * exp(-a * m_k**2)`` with ``beta = h * sqrt(2 pi) / (2T)``
    and ``a = (pi h / T)**2 / 2``.
    """

    def _make_kernel(self, bandwidth: float) -> Kernel:
        return GaussianKernel(bandwidth)

    def _default_limit(self, bandwidth: float, order: int) -> float:
        # Balances exp(-T**2 / 2h**2) against exp(-(pi h p / T)**2 / 2).
        return bandwidth * math.sqrt(math.pi * max(order, 1))

    def _beta_and_a(self) -> tuple[float, float]:
        h = self._bandwidth
        limit = self._integral_truncation_limit
        beta = h * math.sqrt(2.0 * math.pi) / (2.0 * limit)
        a = 0.5 * (math.pi * h / limit) ** 2
        return beta, a

    def multiindex_weights(self: "GaussianKernelFourierAux", table: np.ndarray) -> np.ndarray:
        beta, a = self._beta_and_a()
        table = np.asarray(table, dtype=np.float64)
        dim = table.shape[1]
        return (beta**dim) * np.exp(-a * np.sum(table * table, axis=1))

    def truncation_error_bound(
        self: "GaussianKernelFourierAux",
        total_weight: float,
        order: Optional[int] = None,
    ) -> float:
        """Bound on the error of dropping components with ``|m_k| > order``.

        ``total_weight`` is the sum of absolute reference weights.
        """
        p = self._resolve_order(order)
        weight = abs(float(total_weight))
        if weight == 0.0:
            return 0.0
        beta, a = self._beta_and_a()
        ks = np.arange(-p, p + 1, dtype=np.float64)
        partial = beta * float(np.sum(np.exp(-a * ks * ks)))
        # Integral bound on sum_{|k| > p} beta * exp(-a k**2).
        tail = beta * math.sqrt(math.pi / a) * math.erfc(math.sqrt(a) * p)
        try:
            return weight * ((partial + tail) ** self.dim - partial**self.dim)
        except OverflowError:
            return math.inf

    def aliasing_error_bound(
        self: "GaussianKernelFourierAux",
        total_weight: float,
        max_displacement: float,
    ) -> float:
        """Bound on the periodization error.

        ``max_displacement`` bounds every per-axis query/reference
        displacement ``D`` and must be smaller than ``2T``. Per axis the
        image sum ``2 * sum_{n >= 1} exp(-(2nT - D)**2 / (2 h**2))`` is
        bounded by its first term plus the integral of the rest, so the cost
        does not depend on ``T / h``.
        """
        limit = self._integral_truncation_limit
        displacement = abs(float(max_displacement))
        if displacement >= 2.0 * limit:
            raise InvalidConfiguration(
                "max_displacement must be smaller than twice the integral truncation limit"
            )
        weight = abs(float(total_weight))
        if weight == 0.0:
            return 0.0
        h = self._bandwidth
        gap = 2.0 * limit - displacement
        first = math.exp(-(gap * gap) / (2.0 * h * h))
        tail = (
            h * math.sqrt(2.0 * math.pi) / (4.0 * limit)
            * math.erfc(gap / (math.sqrt(2.0) * h))
        )
        per_axis = 2.0 * (first + tail)
        try:
            return weight * math.expm1(self.dim * math.log1p(per_axis))
        except OverflowError:
            return math.inf

    def error_bound(
        self: "GaussianKernelFourierAux",
        total_weight: float,
        max_displacement: float = 0.0,
        order: Optional[int] = None,
    ) -> float:
        """Combined truncation and aliasing bound."""
        return self.truncation_error_bound(total_weight, order) + self.aliasing_error_bound(
            total_weight,
            max_displacement,
        )


__all__ = [
    "FourierKernelAux",
    "GaussianKernelFourierAux",
]
