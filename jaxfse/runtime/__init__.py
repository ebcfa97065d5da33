"""Runtime helpers: dtypes and brute-force reference sums."""

from . import dtypes, reference

__all__ = ["dtypes", "reference"]
