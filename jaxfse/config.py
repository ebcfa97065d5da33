"""Configuration model for jaxfse."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Optional, Type

from .errors import InvalidConfiguration
from .kernel_aux import FourierKernelAux, GaussianKernelFourierAux

KernelFamily = Literal["gaussian"]

DEFAULT_ACCUMULATE_CHUNK_SIZE = 4096

_KERNEL_AUX_FAMILIES: Dict[str, Type[FourierKernelAux]] = {
    "gaussian": GaussianKernelFourierAux,
}


@dataclass(frozen=True)
class ExpansionConfig:
    """Caller-supplied parameters of a family of Fourier expansions.

    The engine never picks ``order`` or ``bandwidth`` on its own;
    ``integral_truncation_limit`` falls back to the kernel family's default
    when left as ``None``.
    """

    bandwidth: float
    order: int
    dim: int
    kernel: KernelFamily = "gaussian"
    integral_truncation_limit: Optional[float] = None
    accumulate_chunk_size: int = DEFAULT_ACCUMULATE_CHUNK_SIZE


def build_kernel_aux(config: ExpansionConfig) -> FourierKernelAux:
    """Instantiate the kernel auxiliary described by ``config``."""

    family = str(config.kernel).strip().lower()
    aux_cls = _KERNEL_AUX_FAMILIES.get(family)
    if aux_cls is None:
        known = ", ".join(sorted(_KERNEL_AUX_FAMILIES))
        raise InvalidConfiguration(
            f"Unknown kernel family '{config.kernel}'. Known families: {known}"
        )
    if int(config.accumulate_chunk_size) <= 0:
        raise InvalidConfiguration("accumulate_chunk_size must be positive")
    return aux_cls(
        config.bandwidth,
        config.order,
        config.dim,
        integral_truncation_limit=config.integral_truncation_limit,
    )


__all__ = [
    "DEFAULT_ACCUMULATE_CHUNK_SIZE",
    "ExpansionConfig",
    "KernelFamily",
    "build_kernel_aux",
]
