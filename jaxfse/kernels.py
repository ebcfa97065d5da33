"""Radial kernel formulas and the squared-distance metric.

Kernels are consumed only through :meth:`Kernel.evaluate_unnormalized`, which
maps a squared distance to a non-negative value that never increases with
distance. Swapping the kernel never touches the expansion machinery; only the
matching kernel auxiliary knows the kernel's Fourier weights.
"""

from __future__ import annotations

import abc
import math

import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, ArrayLike, jaxtyped

from .errors import InvalidConfiguration


class Kernel(abc.ABC):
    """Capability interface for radial kernels evaluated on squared distance."""

    @abc.abstractmethod
    def evaluate_unnormalized(
        self: "Kernel",
        squared_distance: ArrayLike,
    ) -> Array:
        """Return the kernel value for ``squared_distance``."""


class GaussianKernel(Kernel):
    """Unnormalized Gaussian ``exp(-r**2 / (2 h**2))`` with bandwidth ``h``."""

    def __init__(self, bandwidth: float):
        bandwidth = float(bandwidth)
        if not math.isfinite(bandwidth) or bandwidth <= 0.0:
            raise InvalidConfiguration("bandwidth must be a positive finite number")
        self.bandwidth = bandwidth
        self.neg_inv_bandwidth_2sq = -1.0 / (2.0 * bandwidth * bandwidth)

    def evaluate_unnormalized(
        self: "GaussianKernel",
        squared_distance: ArrayLike,
    ) -> Array:
        return jnp.exp(jnp.asarray(squared_distance) * self.neg_inv_bandwidth_2sq)

    def __repr__(self: "GaussianKernel") -> str:
        return f"GaussianKernel(bandwidth={self.bandwidth!r})"


@jaxtyped(typechecker=beartype)
def squared_euclidean_distance(a: ArrayLike, b: ArrayLike) -> Array:
    """Squared Euclidean distance along the last axis."""
    diff = jnp.asarray(a) - jnp.asarray(b)
    return jnp.sum(diff * diff, axis=-1)


__all__ = ["GaussianKernel", "Kernel", "squared_euclidean_distance"]
