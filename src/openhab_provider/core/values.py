"""Tri-state attribute values.

Every configurable attribute is either present with data, explicitly null, or
unknown (not yet resolved by the configuration evaluator). Values are decoded
once at the framework boundary into one of the concrete capabilities below, so
validators and converters only ever see a narrowed type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union


class ValueState(Enum):
    PRESENT = "present"
    NULL = "null"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class StringValue:
    state: ValueState
    value: Optional[str] = None

    @classmethod
    def of(cls, value: str) -> "StringValue":
        return cls(ValueState.PRESENT, value)

    @classmethod
    def null(cls) -> "StringValue":
        return cls(ValueState.NULL)

    @classmethod
    def unknown(cls) -> "StringValue":
        return cls(ValueState.UNKNOWN)

    @property
    def is_null(self) -> bool:
        return self.state is ValueState.NULL

    @property
    def is_unknown(self) -> bool:
        return self.state is ValueState.UNKNOWN

    @property
    def is_present(self) -> bool:
        return self.state is ValueState.PRESENT


@dataclass(frozen=True)
class ListValue:
    state: ValueState
    elements: Tuple[StringValue, ...] = ()

    @classmethod
    def of(cls, elements) -> "ListValue":
        return cls(ValueState.PRESENT, tuple(elements))

    @classmethod
    def null(cls) -> "ListValue":
        return cls(ValueState.NULL)

    @classmethod
    def unknown(cls) -> "ListValue":
        return cls(ValueState.UNKNOWN)

    @property
    def is_null(self) -> bool:
        return self.state is ValueState.NULL

    @property
    def is_unknown(self) -> bool:
        return self.state is ValueState.UNKNOWN

    @property
    def is_present(self) -> bool:
        return self.state is ValueState.PRESENT


@dataclass(frozen=True)
class MapValue:
    state: ValueState
    elements: Dict[str, StringValue] = field(default_factory=dict)

    @classmethod
    def of(cls, elements) -> "MapValue":
        return cls(ValueState.PRESENT, dict(elements))

    @classmethod
    def null(cls) -> "MapValue":
        return cls(ValueState.NULL)

    @classmethod
    def unknown(cls) -> "MapValue":
        return cls(ValueState.UNKNOWN)

    @property
    def is_null(self) -> bool:
        return self.state is ValueState.NULL

    @property
    def is_unknown(self) -> bool:
        return self.state is ValueState.UNKNOWN

    @property
    def is_present(self) -> bool:
        return self.state is ValueState.PRESENT


AttributeValue = Union[StringValue, ListValue, MapValue]
