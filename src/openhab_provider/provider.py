from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Type

import httpx
from pydantic import ValidationError

from openhab_provider.api.client import OpenhabClient
from openhab_provider.bootstrap import load_builtin_resources
from openhab_provider.core.diagnostics import Diagnostics
from openhab_provider.core.logger import get_logger
from openhab_provider.framework.registry import ResourceRegistry
from openhab_provider.models.provider_config import ProviderConfig
from openhab_provider.wiring.provider_wiring import build_api_connection

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProviderContext:
    """Everything a resource handler needs, built once by ``OpenhabProvider.configure``."""

    client: OpenhabClient
    version: str

    def close(self) -> None:
        self.client.close()


class OpenhabProvider:
    """
    Entry point of the provider.

    ``configure`` turns the provider block into a ``ProviderContext`` which is then
    handed to every resource instance; the provider object itself holds no client.

    Example:
        >>> provider = OpenhabProvider(version="dev")
        >>> context, diags = provider.configure({"endpoint": "http://openhab:8080/rest", "api_token": "oh.x"})
        >>> resource = provider.new_resource("openhab_item", context)
    """

    type_name = "openhab"

    def __init__(self, version: str = "dev"):
        # "dev" when run locally, "test" under tests, the package version on release.
        self.version = version

    def schema(self) -> Dict[str, Any]:
        return ProviderConfig.model_json_schema()

    def configure(
        self,
        raw: Optional[Mapping[str, Any]],
        *,
        http_client: Optional[httpx.Client] = None,
    ) -> Tuple[Optional[ProviderContext], Diagnostics]:
        diagnostics = Diagnostics()

        try:
            cfg = ProviderConfig.model_validate(dict(raw or {}))
        except ValidationError as e:
            for err in e.errors():
                path = ".".join(str(part) for part in err["loc"]) or "provider"
                diagnostics.add_attribute_error(path, "Invalid provider configuration", err["msg"])
            return None, diagnostics

        try:
            client = OpenhabClient(build_api_connection(cfg), client=http_client)
        except (ValueError, httpx.InvalidURL) as e:
            diagnostics.add_error("Client Error", f"Unable to create client, got error: {e}")
            return None, diagnostics

        logger.info(f"Configured provider for endpoint {cfg.endpoint}")
        return ProviderContext(client=client, version=self.version), diagnostics

    def resources(self) -> Dict[str, Type[Any]]:
        load_builtin_resources()
        return {name: ResourceRegistry.get(name) for name in ResourceRegistry.names()}

    def new_resource(self, type_name: str, context: Optional[ProviderContext]) -> Tuple[Optional[Any], Diagnostics]:
        diagnostics = Diagnostics()
        load_builtin_resources()

        resource_class = ResourceRegistry.try_get(type_name)
        if resource_class is None:
            diagnostics.add_error(
                "Invalid resource type",
                f"The provider does not support resource type '{type_name}'.",
            )
            return None, diagnostics

        if context is None:
            diagnostics.add_error(
                "Unconfigured Provider",
                f"While creating resource '{type_name}', the provider had not been configured. "
                "This is always a bug in the provider code and should be reported to the provider developers.",
            )
            return None, diagnostics

        return resource_class(context), diagnostics
