from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

import httpx

from openhab_provider.api.helper import read_response_body, status_text
from openhab_provider.api.models import EnrichedItemDTO, ItemDTO
from openhab_provider.core.conversion import (
    string_list_to_value,
    string_to_value,
    value_to_string,
    value_to_string_list,
)
from openhab_provider.core.exceptions import ResponseDecodeError
from openhab_provider.core.logger import get_logger
from openhab_provider.core.values import ListValue, StringValue
from openhab_provider.framework.registry import register_resource
from openhab_provider.framework.resource import ResourceData, ResourceResponse
from openhab_provider.framework.schema import REQUIRES_REPLACE, USE_STATE_FOR_UNKNOWN, Attribute, Schema
from openhab_provider.validators.item_type import ItemTypeValidator

if TYPE_CHECKING:
    from openhab_provider.provider import ProviderContext

logger = get_logger(__name__)


@dataclass
class ItemResourceData(ResourceData):
    id: StringValue

    # required
    name: StringValue
    label: StringValue
    type: StringValue

    # optional
    category: StringValue
    tags: ListValue
    group_names: ListValue


@register_resource(type_name="openhab_item")
class ItemResource:
    data_class = ItemResourceData

    def __init__(self, context: "ProviderContext"):
        self.client = context.client

    @classmethod
    def schema(cls) -> Schema:
        return Schema(
            markdown_description="OpenHAB Item",
            attributes={
                "id": Attribute(
                    "string",
                    markdown_description="Resource ID",
                    computed=True,
                    plan_modifiers=(USE_STATE_FOR_UNKNOWN,),
                ),
                "name": Attribute(
                    "string",
                    markdown_description="Item name",
                    required=True,
                    plan_modifiers=(USE_STATE_FOR_UNKNOWN, REQUIRES_REPLACE),
                ),
                "type": Attribute(
                    "string",
                    markdown_description="Item type",
                    required=True,
                    validators=(ItemTypeValidator(),),
                    plan_modifiers=(USE_STATE_FOR_UNKNOWN,),
                ),
                "label": Attribute(
                    "string",
                    markdown_description="Item label",
                    required=True,
                    plan_modifiers=(USE_STATE_FOR_UNKNOWN,),
                ),
                "category": Attribute(
                    "string",
                    markdown_description="Item category (often used as the icon)",
                    optional=True,
                    plan_modifiers=(USE_STATE_FOR_UNKNOWN,),
                ),
                "tags": Attribute(
                    "list",
                    markdown_description="Item tags",
                    optional=True,
                    plan_modifiers=(USE_STATE_FOR_UNKNOWN,),
                ),
                "group_names": Attribute(
                    "list",
                    markdown_description="Item groups",
                    optional=True,
                    plan_modifiers=(USE_STATE_FOR_UNKNOWN,),
                ),
            },
        )

    def create(self, data: ItemResourceData, resp: ResourceResponse) -> None:
        name = value_to_string(data.name)
        try:
            api_resp = self.client.add_or_update_item(name, data_to_item(data))
        except httpx.HTTPError as e:
            resp.diagnostics.add_error("Client Error", f"Unable to create item, got error: {e}")
            return

        if api_resp.status_code == 200:
            resp.diagnostics.add_warning("Create Item Warning", f"Item {name} was not created, but updated")
        elif api_resp.status_code != 201:
            resp.diagnostics.add_error("Create Item Error", f"Unable to create item, got status: {status_text(api_resp)}")
            return

        try:
            item = read_response_body(api_resp, EnrichedItemDTO)
        except ResponseDecodeError as e:
            resp.diagnostics.add_error(
                "Create Item Error",
                f"Unable to read response of create item action, got error: {e}",
            )
            return

        logger.info(f"created an Item resource, name={name}")
        resp.set_state(enriched_item_to_data(item, data))

    def read(self, data: ItemResourceData, resp: ResourceResponse) -> None:
        name = value_to_string(data.name)
        try:
            api_resp = self.client.get_item(name)
        except httpx.HTTPError as e:
            resp.diagnostics.add_error("Read Item Error", f"Unable to read item, got error: {e}")
            return

        if api_resp.status_code == 404:
            logger.debug(f"Item not found, will be removed from state, name={name}")
            resp.remove_resource()
            return
        if api_resp.status_code != 200:
            resp.diagnostics.add_error("Read Item Error", f"Unknown error reading item, got status: {status_text(api_resp)}")
            return

        try:
            item = read_response_body(api_resp, EnrichedItemDTO)
        except ResponseDecodeError as e:
            resp.diagnostics.add_error(
                "Read Item Error",
                f"Unable to read response of read item action, got error: {e}",
            )
            return

        resp.set_state(enriched_item_to_data(item, data))

    def update(self, data: ItemResourceData, resp: ResourceResponse) -> None:
        name = value_to_string(data.name)
        try:
            api_resp = self.client.add_or_update_item(name, data_to_item(data))
        except httpx.HTTPError as e:
            resp.diagnostics.add_error("Client Error", f"Unable to update item, got error: {e}")
            return

        if api_resp.status_code == 201:
            resp.diagnostics.add_warning("Update Item Warning", f"Item {name} was not updated, but created")
        elif api_resp.status_code != 200:
            resp.diagnostics.add_error("Update Item Error", f"Unable to update item, got status: {status_text(api_resp)}")
            return

        try:
            item = read_response_body(api_resp, EnrichedItemDTO)
        except ResponseDecodeError as e:
            resp.diagnostics.add_error(
                "Update Item Error",
                f"Unable to read response of update item action, got error: {e}",
            )
            return

        logger.info(f"updated an Item resource, name={name}")
        resp.set_state(enriched_item_to_data(item, data))

    def delete(self, data: ItemResourceData, resp: ResourceResponse) -> None:
        name = value_to_string(data.name)
        try:
            api_resp = self.client.remove_item(name)
        except httpx.HTTPError as e:
            resp.diagnostics.add_error("Client Error", f"Unable to delete item, got error: {e}")
            return

        if api_resp.status_code == 404:
            logger.debug(f"Planned to remove an item, but it was already removed, name={name}")
        elif api_resp.status_code != 200:
            resp.diagnostics.add_error("Delete Item Error", f"Unable to delete item, got status: {status_text(api_resp)}")
            return

        resp.remove_resource()

    def import_state(self, import_id: str, resp: ResourceResponse) -> None:
        # The import id is the item name; the following read fills in the rest.
        resp.set_state(
            ItemResourceData(
                id=StringValue.null(),
                name=StringValue.of(import_id),
                label=StringValue.null(),
                type=StringValue.null(),
                category=StringValue.null(),
                tags=ListValue.null(),
                group_names=ListValue.null(),
            )
        )


def data_to_item(data: ItemResourceData) -> ItemDTO:
    return ItemDTO(
        name=value_to_string(data.name),
        label=value_to_string(data.label),
        type=value_to_string(data.type),
        category=value_to_string(data.category),
        tags=value_to_string_list(data.tags),
        group_names=value_to_string_list(data.group_names),
    )


def enriched_item_to_data(item: EnrichedItemDTO, prior: Optional[ItemResourceData] = None) -> ItemResourceData:
    return ItemResourceData(
        id=string_to_value(item.name),
        name=string_to_value(item.name),
        label=string_to_value(item.label),
        type=string_to_value(item.type),
        category=string_to_value(item.category),
        tags=_list_keeping_null(item.tags, prior.tags if prior else None),
        group_names=_list_keeping_null(item.group_names, prior.group_names if prior else None),
    )


def _list_keeping_null(values: Optional[List[str]], prior: Optional[ListValue]) -> ListValue:
    # openHAB always answers with [] for unset lists; keep null if that is what was configured.
    if not values and prior is not None and prior.is_null:
        return ListValue.null()
    return string_list_to_value(values)
