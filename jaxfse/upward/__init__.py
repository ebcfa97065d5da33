"""Coefficient accumulation (point-to-expansion) helpers."""
