"""Opt-in runtime type checking for jaxfse.

Setting ``JAXFSE_RUNTIME_TYPECHECK`` to anything but an off value before the
first ``import jaxfse`` instruments every jaxfse submodule imported afterwards
with ``jaxtyped(typechecker=beartype)``. The pure kernels in ``upward``,
``downward`` and ``operators`` carry the decorator explicitly and are always
checked; the hook extends checking to the expansion facade, the kernel
auxiliaries and the configuration helpers.
"""

from __future__ import annotations

import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

_ENV_VAR = "JAXFSE_RUNTIME_TYPECHECK"
_OFF_VALUES = frozenset({"", "0", "false", "no", "off"})
_TYPECHECK_HOOK: Any = None


def _runtime_typecheck_enabled() -> bool:
    return os.getenv(_ENV_VAR, "0").strip().lower() not in _OFF_VALUES


def enable_runtime_typecheck() -> bool:
    """Install the jaxtyping import hook for ``jaxfse`` once, if requested."""
    global _TYPECHECK_HOOK

    if _TYPECHECK_HOOK is not None:
        return True
    if not _runtime_typecheck_enabled():
        return False

    from jaxtyping import install_import_hook

    _TYPECHECK_HOOK = install_import_hook("jaxfse", typechecker="beartype.beartype")
    logger.debug("runtime type checking enabled for jaxfse via %s", _ENV_VAR)
    return True


__all__ = ["enable_runtime_typecheck"]
