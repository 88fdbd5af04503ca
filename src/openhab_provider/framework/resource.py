from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, Mapping, Optional, Protocol, Type, TypeVar

from openhab_provider.core.diagnostics import Diagnostics
from openhab_provider.core.values import AttributeValue
from openhab_provider.framework.schema import Schema

D = TypeVar("D", bound="ResourceData")


@dataclass
class ResourceData:
    """Base class for the typed attribute set of one resource instance.

    Subclasses declare one dataclass field per schema attribute, named like the
    attribute, each holding a tri-state value.
    """

    @classmethod
    def from_values(cls: Type[D], values: Mapping[str, AttributeValue]) -> D:
        return cls(**{f.name: values[f.name] for f in fields(cls)})

    def to_values(self) -> Dict[str, AttributeValue]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class ResourceResponse:
    """What a resource handler hands back: new state (or removal) plus diagnostics."""

    state: Optional[ResourceData] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    removed: bool = False

    def set_state(self, state: ResourceData) -> None:
        self.state = state
        self.removed = False

    def remove_resource(self) -> None:
        self.state = None
        self.removed = True


class Resource(Protocol):
    type_name: ClassVar[str]
    data_class: ClassVar[Type[ResourceData]]

    def __init__(self, context: Any) -> None:
        ...

    @classmethod
    def schema(cls) -> Schema:
        ...

    def create(self, data: Any, resp: ResourceResponse) -> None:
        ...

    def read(self, data: Any, resp: ResourceResponse) -> None:
        ...

    def update(self, data: Any, resp: ResourceResponse) -> None:
        ...

    def delete(self, data: Any, resp: ResourceResponse) -> None:
        ...

    def import_state(self, import_id: str, resp: ResourceResponse) -> None:
        ...
