from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from openhab_provider.core.exceptions import ConversionError
from openhab_provider.core.values import ListValue, MapValue, StringValue


def string_to_value(v: Optional[str]) -> StringValue:
    if v is None:
        return StringValue.null()
    return StringValue.of(v)


def value_to_string(v: StringValue) -> Optional[str]:
    # An unresolved value cannot be sent to openHAB, so unknown collapses to absent.
    if v.is_unknown or v.is_null:
        return None
    return v.value


def string_list_to_value(v: Optional[Sequence[str]]) -> ListValue:
    if v is None:
        return ListValue.null()
    return ListValue.of(string_to_value(item) for item in v)


def value_to_string_list(v: ListValue) -> Optional[List[str]]:
    if v.is_unknown or v.is_null:
        return None
    return [_element_to_string(item, where=f"list index {i}") for i, item in enumerate(v.elements)]


def string_map_to_value(v: Optional[Mapping[str, str]]) -> MapValue:
    if v is None:
        return MapValue.null()
    return MapValue.of((k, string_to_value(item)) for k, item in v.items())


def value_to_string_map(v: MapValue) -> Optional[Dict[str, str]]:
    if v.is_unknown or v.is_null:
        return None
    return {k: _element_to_string(item, where=f"map key {k!r}") for k, item in v.elements.items()}


def _element_to_string(item: object, *, where: str) -> str:
    if not isinstance(item, StringValue):
        raise ConversionError(f"Expected a string element at {where}, got {type(item).__name__}")
    if not item.is_present:
        raise ConversionError(f"Expected a known, non-null string at {where}, got {item.state.value}")
    return item.value
