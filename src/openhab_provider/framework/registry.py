from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, List, Optional, Type

from openhab_provider.core.exceptions import ResourceRegistryError


class ResourceRegistry:
    _registry: ClassVar[Dict[str, Type[Any]]] = {}

    @classmethod
    def register(
        cls,
        *,
        type_name: str,
        resource_class: Type[Any],
        overwrite: bool = False,
    ) -> None:
        if not overwrite and type_name in cls._registry:
            existing = cls._registry[type_name]
            raise ResourceRegistryError(f"Resource already registered for type_name={type_name!r}: {existing}")
        cls._registry[type_name] = resource_class

    @classmethod
    def get(cls, type_name: str) -> Type[Any]:
        try:
            return cls._registry[type_name]
        except KeyError as exc:
            raise ResourceRegistryError(f"No resource registered for type_name={type_name!r}") from exc

    @classmethod
    def try_get(cls, type_name: str) -> Optional[Type[Any]]:
        return cls._registry.get(type_name)

    @classmethod
    def names(cls) -> List[str]:
        return sorted(cls._registry)

    @classmethod
    def clear(cls) -> None:
        cls._registry.clear()


def register_resource(
    *,
    type_name: str,
    overwrite: bool = False,
) -> Callable[[Type[Any]], Type[Any]]:
    def decorator(resource_class: Type[Any]) -> Type[Any]:
        resource_class.type_name = type_name
        ResourceRegistry.register(
            type_name=type_name,
            resource_class=resource_class,
            overwrite=overwrite,
        )
        return resource_class

    return decorator
