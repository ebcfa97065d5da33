"""Complex exponential basis of the truncated Fourier series.

With a per-axis period of ``2T`` the base angular frequency is
``omega = pi / T`` and multi-index ``m`` carries the wave vector
``omega * m``. The accumulation basis is ``exp(-i omega m . x)`` and the
evaluation basis is its complex conjugate, so a product of the two for a
reference displacement ``x_ref`` and a query displacement ``x_query`` gives
``exp(i omega m . (x_query - x_ref))``.
"""

from __future__ import annotations

import math
from typing import Optional

import jax
import jax.numpy as jnp
import numpy as np
from beartype import beartype
from jaxtyping import Array, DTypeLike, jaxtyped

from ..runtime.dtypes import complex_dtype_for_real


def fourier_frequencies(
    table: np.ndarray,
    truncation_limit: float,
    *,
    dtype: Optional[DTypeLike] = None,
) -> Array:
    """Return the ``(size, dim)`` wave vectors ``(pi / T) * m``."""
    omega = math.pi / float(truncation_limit)
    return jnp.asarray(np.asarray(table, dtype=np.float64) * omega, dtype=dtype)


@jaxtyped(typechecker=beartype)
def fourier_basis(frequencies: Array, displacement: Array) -> Array:
    """Accumulation basis ``exp(-i k . x)`` for one displacement."""
    phase = frequencies @ displacement
    cdtype = complex_dtype_for_real(phase.dtype)
    return jnp.exp(-1j * phase.astype(cdtype))


@jaxtyped(typechecker=beartype)
def conjugate_fourier_basis(frequencies: Array, displacement: Array) -> Array:
    """Evaluation basis ``exp(+i k . x)`` for one displacement."""
    return jnp.conjugate(fourier_basis(frequencies, displacement))


@jaxtyped(typechecker=beartype)
def fourier_basis_batch(frequencies: Array, displacements: Array) -> Array:
    """Accumulation basis for ``(N, dim)`` displacements, shape ``(N, size)``."""
    return jax.vmap(fourier_basis, in_axes=(None, 0))(frequencies, displacements)


@jaxtyped(typechecker=beartype)
def translation_phase(frequencies: Array, delta: Array) -> Array:
    """Phase factors moving coefficients to a center shifted by ``delta``.

    Coefficients about ``c`` become coefficients about ``c + delta`` after an
    element-wise product with ``exp(+i k . delta)``.
    """
    return conjugate_fourier_basis(frequencies, delta)


__all__ = [
    "conjugate_fourier_basis",
    "fourier_basis",
    "fourier_basis_batch",
    "fourier_frequencies",
    "translation_phase",
]
