"""Evaluation of truncated Fourier series at query points."""

from __future__ import annotations

import jax
import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, jaxtyped

from ..operators.fourier_basis import conjugate_fourier_basis


@jax.jit
@jaxtyped(typechecker=beartype)
def evaluate_field(
    coefficients: Array,
    query: Array,
    center: Array,
    frequencies: Array,
    normalization: Array,
    mask: Array,
) -> Array:
    """Real part of ``sum_m c_m * exp(i k_m . (query - center)) * n_m``.

    Multi-indices outside ``mask`` are skipped.
    """
    basis = conjugate_fourier_basis(frequencies, query - center)
    terms = coefficients * basis * normalization
    return jnp.real(jnp.sum(jnp.where(mask, terms, jnp.zeros_like(terms))))


@jax.jit
@jaxtyped(typechecker=beartype)
def evaluate_field_batch(
    coefficients: Array,
    queries: Array,
    center: Array,
    frequencies: Array,
    normalization: Array,
    mask: Array,
) -> Array:
    """Vectorized :func:`evaluate_field` over ``(Q, dim)`` queries."""
    return jax.vmap(
        lambda q: evaluate_field(
            coefficients,
            q,
            center,
            frequencies,
            normalization,
            mask,
        ),
        in_axes=0,
        out_axes=0,
    )(queries)


__all__ = ["evaluate_field", "evaluate_field_batch"]
