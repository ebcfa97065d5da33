"""Centralized dtypes for multi-index tables and coefficient buffers.

Keep a single source of truth for the index dtype so the codebase can be
switched between 32-bit and 64-bit indices easily.
"""

import jax.numpy as jnp
import numpy as np
from jaxtyping import DTypeLike

# Host-side multi-index tables are small; 64-bit avoids overflow when the
# table size (2 * order + 1) ** dim is large.
INDEX_DTYPE = np.int64


def real_dtype_for(x: object) -> jnp.dtype:
    """Return the floating dtype JAX would use for ``x``."""

    dtype = jnp.asarray(x).dtype
    if jnp.issubdtype(dtype, jnp.floating):
        return dtype
    return jnp.asarray(0.0).dtype


def complex_dtype_for_real(real_dtype: DTypeLike) -> jnp.dtype:
    """Return complex dtype paired with a real floating dtype."""

    dtype = jnp.asarray(0, dtype=real_dtype).dtype
    if dtype == jnp.float64:
        return jnp.dtype(jnp.complex128)
    return jnp.dtype(jnp.complex64)


__all__ = ["INDEX_DTYPE", "complex_dtype_for_real", "real_dtype_for"]
