from __future__ import annotations

from typing import Optional
from urllib.parse import quote

import httpx

from openhab_provider.api.auth import build_auth_headers
from openhab_provider.api.models import ItemChannelLinkDTO, ItemDTO
from openhab_provider.api.types import ApiConnection
from openhab_provider.core.logger import get_logger

logger = get_logger(__name__)


def _path_param(value: str) -> str:
    # Channel UIDs are colon separated (binding:thing-type:thing:channel); keep ':' readable.
    return quote(value, safe=":")


class OpenhabClient:
    """Thin client for the item and link endpoints of the openHAB REST API.

    Methods return the raw ``httpx.Response``; deciding what a status code means
    is left to the resource handlers.
    """

    def __init__(
        self,
        connection: ApiConnection,
        *,
        client: Optional[httpx.Client] = None,
    ):
        self.connection = connection

        headers = {"Accept": "application/json"}
        headers.update(connection.headers)
        headers.update(build_auth_headers(connection.auth))

        self._client = client or httpx.Client(
            base_url=connection.base_url,
            timeout=connection.timeout_seconds,
            headers=headers,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "OpenhabClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    def add_or_update_item(self, item_name: str, body: ItemDTO) -> httpx.Response:
        """PUT /items/{itemname}: 201 when created, 200 when an existing item was updated."""
        logger.debug(f"PUT item {item_name}")
        return self._client.request("PUT", f"/items/{_path_param(item_name)}", json=body.to_body())

    def get_item(self, item_name: str) -> httpx.Response:
        logger.debug(f"GET item {item_name}")
        return self._client.request("GET", f"/items/{_path_param(item_name)}", params={"recursive": "false"})

    def remove_item(self, item_name: str) -> httpx.Response:
        logger.debug(f"DELETE item {item_name}")
        return self._client.request("DELETE", f"/items/{_path_param(item_name)}")

    # -------------------------------------------------------------------------
    # Links
    # -------------------------------------------------------------------------

    def link_item_to_channel(self, item_name: str, channel_uid: str, body: ItemChannelLinkDTO) -> httpx.Response:
        logger.debug(f"PUT link {item_name} -> {channel_uid}")
        return self._client.request(
            "PUT",
            f"/links/{_path_param(item_name)}/{_path_param(channel_uid)}",
            json=body.to_body(),
        )

    def get_item_link(self, item_name: str, channel_uid: str) -> httpx.Response:
        logger.debug(f"GET link {item_name} -> {channel_uid}")
        return self._client.request("GET", f"/links/{_path_param(item_name)}/{_path_param(channel_uid)}")

    def unlink_item_from_channel(self, item_name: str, channel_uid: str) -> httpx.Response:
        logger.debug(f"DELETE link {item_name} -> {channel_uid}")
        return self._client.request("DELETE", f"/links/{_path_param(item_name)}/{_path_param(channel_uid)}")
