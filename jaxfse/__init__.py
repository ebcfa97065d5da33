"""jaxfse: truncated Fourier-series expansions for fast kernel sums in JAX."""

from ._typecheck import enable_runtime_typecheck

enable_runtime_typecheck()

from .config import ExpansionConfig, KernelFamily, build_kernel_aux
from .errors import DimensionMismatch, InvalidConfiguration, JaxfseError, OutOfRange
from .expansion import FourierExpansion, FourierExpansionState
from .kernel_aux import FourierKernelAux, GaussianKernelFourierAux
from .kernels import GaussianKernel, Kernel, squared_euclidean_distance
from .operators.multiindex import (
    MultiIndexEnumerator,
    clear_multiindex_cache,
    get_multiindex_enumerator,
)
from .runtime.reference import direct_kernel_sum, direct_kernel_sums

__all__ = [
    "DimensionMismatch",
    "ExpansionConfig",
    "FourierExpansion",
    "FourierExpansionState",
    "FourierKernelAux",
    "GaussianKernel",
    "GaussianKernelFourierAux",
    "InvalidConfiguration",
    "JaxfseError",
    "Kernel",
    "KernelFamily",
    "MultiIndexEnumerator",
    "OutOfRange",
    "build_kernel_aux",
    "clear_multiindex_cache",
    "direct_kernel_sum",
    "direct_kernel_sums",
    "get_multiindex_enumerator",
    "squared_euclidean_distance",
]
