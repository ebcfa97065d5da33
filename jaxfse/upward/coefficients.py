"""Helpers for accumulating Fourier coefficients from weighted points."""

from __future__ import annotations

import logging

import jax
import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, DTypeLike, jaxtyped

from ..errors import InvalidConfiguration
from ..operators.fourier_basis import fourier_basis_batch, translation_phase
from ..runtime.dtypes import complex_dtype_for_real

logger = logging.getLogger(__name__)


def zero_coefficients(size: int, real_dtype: DTypeLike) -> Array:
    """Zero coefficient buffer of the complex dtype paired with ``real_dtype``."""
    return jnp.zeros((int(size),), dtype=complex_dtype_for_real(real_dtype))


@jax.jit
@jaxtyped(typechecker=beartype)
def accumulate_coefficients_batch(
    points: Array,
    weights: Array,
    center: Array,
    frequencies: Array,
    scales: Array,
    mask: Array,
) -> Array:
    """Coefficients contributed by one batch of points.

    Parameters
    ----------
    points, weights:
        ``(N, dim)`` reference points and their ``(N,)`` weights.
    center:
        Expansion center.
    frequencies, scales:
        Wave vectors ``(size, dim)`` and accumulation weights ``(size,)``.
    mask:
        ``(size,)`` boolean selection of the multi-indices to fill.

    Returns an independent ``(size,)`` buffer; buffers of disjoint batches
    combine by addition.
    """

    displacements = points - center[None, :]
    basis = fourier_basis_batch(frequencies, displacements)
    moments = jnp.einsum("n,nm->m", weights.astype(basis.dtype), basis)
    return jnp.where(mask, moments * scales, jnp.zeros_like(moments))


@jax.jit
@jaxtyped(typechecker=beartype)
def accumulate_coefficients(
    coefficients: Array,
    points: Array,
    weights: Array,
    center: Array,
    frequencies: Array,
    scales: Array,
    mask: Array,
) -> Array:
    """Return ``coefficients`` plus the contribution of ``points``."""

    contribution = accumulate_coefficients_batch(
        points,
        weights,
        center,
        frequencies,
        scales,
        mask,
    )
    return coefficients + contribution.astype(coefficients.dtype)


def accumulate_coefficients_chunked(
    coefficients: Array,
    points: Array,
    weights: Array,
    center: Array,
    frequencies: Array,
    scales: Array,
    mask: Array,
    *,
    chunk_size: int,
) -> Array:
    """Accumulate ``points`` in host-side chunks of at most ``chunk_size``.

    Bounds the ``(chunk, size)`` basis matrix materialized per step.
    """
    if chunk_size <= 0:
        raise InvalidConfiguration("chunk_size must be positive")
    num_points = int(points.shape[0])
    for start in range(0, num_points, chunk_size):
        stop = min(start + chunk_size, num_points)
        logger.debug("accumulating points [%d, %d)", start, stop)
        coefficients = accumulate_coefficients(
            coefficients,
            points[start:stop],
            weights[start:stop],
            center,
            frequencies,
            scales,
            mask,
        )
    return coefficients


@jax.jit
@jaxtyped(typechecker=beartype)
def translate_coefficients(
    coefficients: Array,
    frequencies: Array,
    delta: Array,
) -> Array:
    """Move coefficients from center ``c`` to ``c + delta``.

    The shift is exact for a Fourier basis: only the phase changes.
    """
    return coefficients * translation_phase(frequencies, delta).astype(coefficients.dtype)


__all__ = [
    "accumulate_coefficients",
    "accumulate_coefficients_batch",
    "accumulate_coefficients_chunked",
    "translate_coefficients",
    "zero_coefficients",
]
