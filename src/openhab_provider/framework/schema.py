"""Attribute schemas and the decode/validate boundary.

Raw configuration (plain JSON-like data) is turned into tri-state values here and
nowhere else. A raw ``None`` or a missing key decodes to null; the marker
``{"unknown": true}`` decodes to unknown, which is how a plugin host hands over
values that are only known after apply.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Protocol, Tuple

from openhab_provider.core.diagnostics import Diagnostics
from openhab_provider.core.values import AttributeValue, ListValue, MapValue, StringValue, ValueState

AttributeKind = Literal["string", "list", "map"]

USE_STATE_FOR_UNKNOWN = "use_state_for_unknown"
REQUIRES_REPLACE = "requires_replace"
PlanModifier = Literal["use_state_for_unknown", "requires_replace"]

UNKNOWN_MARKER: Dict[str, bool] = {"unknown": True}

_VALUE_TYPES = {"string": StringValue, "list": ListValue, "map": MapValue}


class AttributeValidator(Protocol):
    def description(self) -> str:
        ...

    def markdown_description(self) -> str:
        ...

    def validate(self, value: Any, path: str, diagnostics: Diagnostics) -> None:
        ...


@dataclass(frozen=True)
class Attribute:
    kind: AttributeKind
    markdown_description: str = ""
    required: bool = False
    optional: bool = False
    computed: bool = False
    validators: Tuple[AttributeValidator, ...] = ()
    plan_modifiers: Tuple[PlanModifier, ...] = ()

    def null_value(self) -> AttributeValue:
        return _VALUE_TYPES[self.kind].null()

    def unknown_value(self) -> AttributeValue:
        return _VALUE_TYPES[self.kind].unknown()

    def has_modifier(self, modifier: PlanModifier) -> bool:
        return modifier in self.plan_modifiers

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "type": self.kind,
            "description": self.markdown_description,
            "required": self.required,
            "optional": self.optional,
            "computed": self.computed,
        }
        if self.validators:
            out["validators"] = [v.description() for v in self.validators]
        if self.plan_modifiers:
            out["plan_modifiers"] = list(self.plan_modifiers)
        return out


@dataclass(frozen=True)
class Schema:
    attributes: Dict[str, Attribute] = field(default_factory=dict)
    markdown_description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.markdown_description,
            "attributes": {name: attr.to_dict() for name, attr in self.attributes.items()},
        }


def _is_unknown_marker(raw: Any) -> bool:
    return isinstance(raw, dict) and raw == UNKNOWN_MARKER


def _type_error(diagnostics: Diagnostics, path: str, expected: str, raw: Any) -> None:
    diagnostics.add_attribute_error(
        path,
        "Incorrect attribute value type",
        f"Expected {expected}, got {type(raw).__name__}.",
    )


def decode_value(attribute: Attribute, raw: Any, path: str, diagnostics: Diagnostics) -> AttributeValue:
    """Decode one raw value into the tri-state capability declared by ``attribute``.

    On a shape mismatch an attribute error is recorded and null is returned so
    decoding of the remaining attributes can continue.
    """
    if raw is None:
        return attribute.null_value()
    if _is_unknown_marker(raw):
        return attribute.unknown_value()

    if attribute.kind == "string":
        if not isinstance(raw, str):
            _type_error(diagnostics, path, "a string", raw)
            return attribute.null_value()
        return StringValue.of(raw)

    if attribute.kind == "list":
        if not isinstance(raw, (list, tuple)):
            _type_error(diagnostics, path, "a list of strings", raw)
            return attribute.null_value()
        elements = []
        for i, item in enumerate(raw):
            if not isinstance(item, str):
                _type_error(diagnostics, f"{path}[{i}]", "a string", item)
                return attribute.null_value()
            elements.append(StringValue.of(item))
        return ListValue.of(elements)

    if attribute.kind == "map":
        if not isinstance(raw, dict):
            _type_error(diagnostics, path, "a map of strings", raw)
            return attribute.null_value()
        elements = {}
        for key, item in raw.items():
            if not isinstance(item, str):
                _type_error(diagnostics, f"{path}[{key!r}]", "a string", item)
                return attribute.null_value()
            elements[key] = StringValue.of(item)
        return MapValue.of(elements)

    raise ValueError(f"Unsupported attribute kind: {attribute.kind!r}")


def decode_config(schema: Schema, raw: Mapping[str, Any]) -> Tuple[Dict[str, AttributeValue], Diagnostics]:
    diagnostics = Diagnostics()

    for name in raw:
        if name not in schema.attributes:
            diagnostics.add_attribute_error(
                name,
                "Unsupported argument",
                f"An argument named '{name}' is not expected here.",
            )

    values = {
        name: decode_value(attr, raw.get(name), name, diagnostics)
        for name, attr in schema.attributes.items()
    }
    return values, diagnostics


def validate_config(schema: Schema, values: Mapping[str, AttributeValue]) -> Diagnostics:
    """Check required/read-only attributes, then run every attribute validator."""
    diagnostics = Diagnostics()

    for name, attr in schema.attributes.items():
        value = values.get(name, attr.null_value())

        if attr.required and value.is_null:
            diagnostics.add_attribute_error(
                name,
                "Missing required argument",
                f"The argument '{name}' is required, but no definition was found.",
            )
            continue

        if attr.computed and not (attr.required or attr.optional) and not value.is_null:
            diagnostics.add_attribute_error(
                name,
                "Invalid configuration for read-only attribute",
                "Cannot set value for this attribute as the provider has marked it as read-only. "
                "Remove the configuration line setting the value.",
            )
            continue

        for validator in attr.validators:
            validator.validate(value, name, diagnostics)

    return diagnostics


def encode_value(value: AttributeValue) -> Any:
    if value.state is ValueState.NULL:
        return None
    if value.state is ValueState.UNKNOWN:
        return dict(UNKNOWN_MARKER)
    if isinstance(value, StringValue):
        return value.value
    if isinstance(value, ListValue):
        return [encode_value(item) for item in value.elements]
    return {key: encode_value(item) for key, item in value.elements.items()}


def encode_state(values: Mapping[str, AttributeValue]) -> Dict[str, Any]:
    return {name: encode_value(value) for name, value in values.items()}
