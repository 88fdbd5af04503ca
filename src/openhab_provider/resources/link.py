from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

import httpx

from openhab_provider.api.helper import read_response_body, status_text
from openhab_provider.api.models import EnrichedItemChannelLinkDTO, ItemChannelLinkDTO
from openhab_provider.core.conversion import string_map_to_value, string_to_value, value_to_string, value_to_string_map
from openhab_provider.core.exceptions import ResponseDecodeError
from openhab_provider.core.logger import get_logger
from openhab_provider.core.values import MapValue, StringValue
from openhab_provider.framework.registry import register_resource
from openhab_provider.framework.resource import ResourceData, ResourceResponse
from openhab_provider.framework.schema import REQUIRES_REPLACE, USE_STATE_FOR_UNKNOWN, Attribute, Schema

if TYPE_CHECKING:
    from openhab_provider.provider import ProviderContext

logger = get_logger(__name__)

# openHAB item names are limited to [A-Za-z0-9_], so the first '-' always ends the item name.
LINK_ID_SEPARATOR = "-"


@dataclass
class LinkResourceData(ResourceData):
    id: StringValue

    # required
    item_name: StringValue
    channel_uid: StringValue

    # optional
    configuration: MapValue


def generate_link_resource_id(item_name: str, channel_uid: str) -> str:
    return f"{item_name}{LINK_ID_SEPARATOR}{channel_uid}"


def parse_link_resource_id(link_id: str) -> Optional[Tuple[str, str]]:
    item_name, sep, channel_uid = link_id.partition(LINK_ID_SEPARATOR)
    if not sep or not item_name or not channel_uid:
        return None
    return item_name, channel_uid


@register_resource(type_name="openhab_link")
class LinkResource:
    data_class = LinkResourceData

    def __init__(self, context: "ProviderContext"):
        self.client = context.client

    @classmethod
    def schema(cls) -> Schema:
        return Schema(
            markdown_description="OpenHAB Link between an Item and a Channel.",
            attributes={
                "id": Attribute(
                    "string",
                    markdown_description="Resource ID",
                    computed=True,
                    plan_modifiers=(USE_STATE_FOR_UNKNOWN,),
                ),
                "item_name": Attribute(
                    "string",
                    markdown_description="Item name",
                    required=True,
                    plan_modifiers=(USE_STATE_FOR_UNKNOWN, REQUIRES_REPLACE),
                ),
                "channel_uid": Attribute(
                    "string",
                    markdown_description="Channel UID",
                    required=True,
                    plan_modifiers=(USE_STATE_FOR_UNKNOWN, REQUIRES_REPLACE),
                ),
                "configuration": Attribute(
                    "map",
                    markdown_description="Link configuration",
                    optional=True,
                    plan_modifiers=(USE_STATE_FOR_UNKNOWN, REQUIRES_REPLACE),
                ),
            },
        )

    def create(self, data: LinkResourceData, resp: ResourceResponse) -> None:
        item_name = value_to_string(data.item_name)
        channel_uid = value_to_string(data.channel_uid)

        configuration = value_to_string_map(data.configuration)
        body = ItemChannelLinkDTO(item_name=item_name, channel_uid=channel_uid, configuration=configuration)
        try:
            api_resp = self.client.link_item_to_channel(item_name, channel_uid, body)
        except httpx.HTTPError as e:
            resp.diagnostics.add_error("Create Link Error", f"Unable to create link, got error: {e}")
            return

        if api_resp.status_code != 200:
            resp.diagnostics.add_error("Create Link Error", f"Unable to create link, got status: {status_text(api_resp)}")
            return

        logger.info(f"created a Link resource, item_name={item_name}, channel_uid={channel_uid}")
        resp.set_state(
            LinkResourceData(
                id=StringValue.of(generate_link_resource_id(item_name, channel_uid)),
                item_name=string_to_value(item_name),
                channel_uid=string_to_value(channel_uid),
                configuration=string_map_to_value(configuration),
            )
        )

    def read(self, data: LinkResourceData, resp: ResourceResponse) -> None:
        item_name = value_to_string(data.item_name)
        channel_uid = value_to_string(data.channel_uid)
        try:
            api_resp = self.client.get_item_link(item_name, channel_uid)
        except httpx.HTTPError as e:
            resp.diagnostics.add_error("Read Link Error", f"Unable to read link, got error: {e}")
            return

        if api_resp.status_code == 404:
            logger.debug(f"Link not found, will be removed from state, item_name={item_name}, channel_uid={channel_uid}")
            resp.remove_resource()
            return
        if api_resp.status_code != 200:
            resp.diagnostics.add_error("Read Link Error", f"Unknown error reading link, got status: {status_text(api_resp)}")
            return

        try:
            link = read_response_body(api_resp, EnrichedItemChannelLinkDTO)
        except ResponseDecodeError as e:
            resp.diagnostics.add_error(
                "Read Link Error",
                f"Unable to read response of read link action, got error: {e}",
            )
            return

        if link.item_name is None or link.channel_uid is None:
            resp.diagnostics.add_error("Read Link Error", "Link response is missing itemName or channelUID")
            return

        resp.set_state(enriched_item_channel_link_to_data(link, data))

    def update(self, data: LinkResourceData, resp: ResourceResponse) -> None:
        # Every attribute requires replace, so a plan never asks for an in-place update.
        resp.diagnostics.add_error("Update Link Error", "Updating links is not supported")

    def delete(self, data: LinkResourceData, resp: ResourceResponse) -> None:
        item_name = value_to_string(data.item_name)
        channel_uid = value_to_string(data.channel_uid)
        try:
            api_resp = self.client.unlink_item_from_channel(item_name, channel_uid)
        except httpx.HTTPError as e:
            resp.diagnostics.add_error("Delete Link Error", f"Unable to delete link, got error: {e}")
            return

        if api_resp.status_code == 404:
            logger.debug(
                f"Planned to remove a link, but it was already removed, item_name={item_name}, channel_uid={channel_uid}"
            )
        elif api_resp.status_code != 200:
            resp.diagnostics.add_error("Delete Link Error", f"Unable to delete link, got status: {status_text(api_resp)}")
            return

        resp.remove_resource()

    def import_state(self, import_id: str, resp: ResourceResponse) -> None:
        parsed = parse_link_resource_id(import_id)
        if parsed is None:
            resp.diagnostics.add_error(
                "Import Link Error",
                f"Expected an import id of the form '<item_name>-<channel_uid>', got '{import_id}'",
            )
            return

        item_name, channel_uid = parsed
        resp.set_state(
            LinkResourceData(
                id=StringValue.of(import_id),
                item_name=StringValue.of(item_name),
                channel_uid=StringValue.of(channel_uid),
                configuration=MapValue.null(),
            )
        )


def _configuration_to_strings(configuration: Optional[Dict[str, Any]]) -> Optional[Dict[str, str]]:
    if configuration is None:
        return None
    # Link configuration values are typed on the server; state keeps their JSON text.
    return {k: v if isinstance(v, str) else json.dumps(v) for k, v in configuration.items()}


def enriched_item_channel_link_to_data(
    link: EnrichedItemChannelLinkDTO,
    prior: Optional[LinkResourceData] = None,
) -> LinkResourceData:
    configuration = _configuration_to_strings(link.configuration)
    # openHAB answers with {} for links created without configuration; keep null if configured so.
    if not configuration and prior is not None and prior.configuration.is_null:
        configuration = None

    link_id = generate_link_resource_id(link.item_name, link.channel_uid)
    return LinkResourceData(
        id=string_to_value(link_id),
        item_name=string_to_value(link.item_name),
        channel_uid=string_to_value(link.channel_uid),
        configuration=string_map_to_value(configuration),
    )
