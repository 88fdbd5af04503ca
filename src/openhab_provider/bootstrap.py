from __future__ import annotations

import importlib
import sys
from typing import Iterable


BUILTIN_RESOURCE_MODULES: tuple[str, ...] = (
    "openhab_provider.resources.item",
    "openhab_provider.resources.link",
)


_LOADED = False


def load_builtin_resources(*, reload: bool = False, modules: Iterable[str] = BUILTIN_RESOURCE_MODULES) -> None:
    """Import built-in resource modules so their decorators register them.

    In production, call with reload=False (default) so imports are cheap.
    In tests, call with reload=True after clearing the registry to re-run decorators.
    """

    global _LOADED

    if _LOADED and not reload:
        return

    if reload:
        from openhab_provider.framework.registry import ResourceRegistry

        ResourceRegistry.clear()

    for module_name in modules:
        if reload:
            sys.modules.pop(module_name, None)
        importlib.import_module(module_name)

    _LOADED = True
