"""Error kinds raised by jaxfse.

All of them signal caller misuse and are raised before any numeric work is
dispatched, so a failed call never leaves a partially built object behind.
"""

from __future__ import annotations


class JaxfseError(Exception):
    """Base class for jaxfse errors."""


class InvalidConfiguration(JaxfseError, ValueError):
    """Invalid order, dimension, bandwidth or truncation limit."""


class OutOfRange(JaxfseError, IndexError):
    """Index or index range outside the multi-index table or point batch."""


class DimensionMismatch(JaxfseError, ValueError):
    """Point, query or weight shapes disagree with the configured dimension."""


__all__ = [
    "DimensionMismatch",
    "InvalidConfiguration",
    "JaxfseError",
    "OutOfRange",
]
