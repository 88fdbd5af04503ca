from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class ResourceConfig(BaseModel):
    """One resource block, e.g. ``{"type": "openhab_item", "name": "kitchen_light", "attributes": {...}}``.

    ``attributes`` stays raw here; the resource schema decodes it into tri-state values.
    """

    type: str
    name: str
    attributes: Dict[str, Any] = Field(default_factory=dict)

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"


class ConfigDocument(BaseModel):
    # Optional so `validate` works without credentials; configure() falls back to the environment.
    provider: Optional[Dict[str, Any]] = None
    resources: List[ResourceConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_unique_addresses(self) -> "ConfigDocument":
        seen = set()
        for resource in self.resources:
            if resource.address in seen:
                raise ValueError(f"Duplicate resource address: {resource.address}")
            seen.add(resource.address)
        return self
