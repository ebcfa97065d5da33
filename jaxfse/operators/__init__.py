"""Operator namespace for multi-index tables and the Fourier basis."""

from . import fourier_basis, multiindex

__all__ = ["fourier_basis", "multiindex"]
