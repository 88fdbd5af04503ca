"""Request and response bodies of the openHAB REST API.

Field names follow the Python convention; the camelCase wire names are kept as
aliases. Every field is optional so absent values are simply left out of the
request body (``exclude_none``) and missing response fields decode to ``None``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _OpenhabModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ItemDTO(_OpenhabModel):
    """Body of ``PUT /items/{itemname}``."""

    type: Optional[str] = None
    name: Optional[str] = None
    label: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    group_names: Optional[List[str]] = Field(default=None, alias="groupNames")


class EnrichedItemDTO(ItemDTO):
    """Item as returned by ``GET /items/{itemname}`` and by create/update."""

    link: Optional[str] = None
    state: Optional[str] = None
    transformed_state: Optional[str] = Field(default=None, alias="transformedState")
    editable: Optional[bool] = None


class ItemChannelLinkDTO(_OpenhabModel):
    """Body of ``PUT /links/{itemName}/{channelUID}``."""

    item_name: Optional[str] = Field(default=None, alias="itemName")
    channel_uid: Optional[str] = Field(default=None, alias="channelUID")
    configuration: Optional[Dict[str, Any]] = None


class EnrichedItemChannelLinkDTO(ItemChannelLinkDTO):
    """Link as returned by ``GET /links/{itemName}/{channelUID}``."""

    editable: Optional[bool] = None
