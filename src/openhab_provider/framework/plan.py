from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Mapping, Optional

from openhab_provider.core.values import AttributeValue
from openhab_provider.framework.schema import REQUIRES_REPLACE, USE_STATE_FOR_UNKNOWN, Schema

PlanAction = Literal["create", "update", "replace", "noop", "delete"]


@dataclass
class PlannedChange:
    action: PlanAction
    planned: Optional[Dict[str, AttributeValue]] = None
    changed_paths: List[str] = field(default_factory=list)
    replace_paths: List[str] = field(default_factory=list)


def plan_resource(
    schema: Schema,
    config: Optional[Mapping[str, AttributeValue]],
    prior_state: Optional[Mapping[str, AttributeValue]],
) -> PlannedChange:
    """Work out what apply has to do to move ``prior_state`` towards ``config``.

    Computed attributes left null in config become unknown, unless they carry
    ``use_state_for_unknown`` and a prior value exists. A change on an attribute
    with ``requires_replace`` turns an update into a replace.
    """
    if config is None:
        if prior_state is None:
            return PlannedChange(action="noop")
        return PlannedChange(action="delete")

    planned: Dict[str, AttributeValue] = {}
    for name, attr in schema.attributes.items():
        value = config.get(name, attr.null_value())
        if attr.computed and value.is_null:
            value = attr.unknown_value()

        if value.is_unknown and prior_state is not None and attr.has_modifier(USE_STATE_FOR_UNKNOWN):
            prior = prior_state.get(name)
            if prior is not None and not prior.is_null:
                value = prior

        planned[name] = value

    if prior_state is None:
        return PlannedChange(action="create", planned=planned)

    changed = [
        name
        for name, attr in schema.attributes.items()
        if planned[name] != prior_state.get(name, attr.null_value())
    ]
    replace = [name for name in changed if schema.attributes[name].has_modifier(REQUIRES_REPLACE)]

    if replace:
        action: PlanAction = "replace"
    elif changed:
        action = "update"
    else:
        action = "noop"

    return PlannedChange(action=action, planned=planned, changed_paths=changed, replace_paths=replace)
