"""Shared pytest configuration for jaxfse."""

import jax

# Error-versus-order checks need double precision.
jax.config.update("jax_enable_x64", True)
