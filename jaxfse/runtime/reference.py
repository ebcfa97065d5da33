"""Brute-force reference sums used to check expansion accuracy."""

from __future__ import annotations

from typing import Callable

import jax
import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, ArrayLike, jaxtyped

from ..errors import DimensionMismatch
from ..kernels import Kernel, squared_euclidean_distance

Metric = Callable[[Array, Array], Array]


def _check_shapes(points: Array, weights: Array, query_dim: int) -> None:
    if points.ndim != 2:
        raise DimensionMismatch("points must have shape (N, dim)")
    if weights.shape != (points.shape[0],):
        raise DimensionMismatch("weights must have shape (N,)")
    if points.shape[1] != query_dim:
        raise DimensionMismatch(
            f"query has dimension {query_dim}, points have {points.shape[1]}"
        )


@jaxtyped(typechecker=beartype)
def direct_kernel_sum(
    kernel: Kernel,
    points: ArrayLike,
    weights: ArrayLike,
    query: ArrayLike,
    *,
    metric: Metric = squared_euclidean_distance,
) -> Array:
    """Compute ``sum_i w_i * kernel(metric(query, x_i))`` in O(N)."""

    points = jnp.asarray(points)
    weights = jnp.asarray(weights)
    query = jnp.asarray(query)
    if query.ndim != 1:
        raise DimensionMismatch("query must be a vector")
    _check_shapes(points, weights, query.shape[0])

    squared = jax.vmap(lambda x: metric(query, x))(points)
    return jnp.sum(weights * kernel.evaluate_unnormalized(squared))


@jaxtyped(typechecker=beartype)
def direct_kernel_sums(
    kernel: Kernel,
    points: ArrayLike,
    weights: ArrayLike,
    queries: ArrayLike,
    *,
    metric: Metric = squared_euclidean_distance,
) -> Array:
    """Compute :func:`direct_kernel_sum` for every row of ``queries``."""

    points = jnp.asarray(points)
    weights = jnp.asarray(weights)
    queries = jnp.asarray(queries)
    if queries.ndim != 2:
        raise DimensionMismatch("queries must have shape (Q, dim)")
    _check_shapes(points, weights, queries.shape[1])

    def sum_at(query: Array) -> Array:
        squared = jax.vmap(lambda x: metric(query, x))(points)
        return jnp.sum(weights * kernel.evaluate_unnormalized(squared))

    return jax.vmap(sum_at)(queries)


__all__ = ["Metric", "direct_kernel_sum", "direct_kernel_sums"]
