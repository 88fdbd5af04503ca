from __future__ import annotations

from typing import Dict

from openhab_provider.api.types import ApiAuth, ApiConnection
from openhab_provider.models.provider_config import ProviderConfig


def _headers_from_provider(cfg: ProviderConfig) -> Dict[str, str]:
    return dict(cfg.headers)


def _auth_from_provider(cfg: ProviderConfig) -> ApiAuth:
    return ApiAuth(api_token=cfg.api_token)


def build_api_connection(cfg: ProviderConfig) -> ApiConnection:
    # This wiring module is the only layer allowed to read the Pydantic provider config.
    return ApiConnection(
        base_url=cfg.endpoint,
        timeout_seconds=float(cfg.timeout_seconds),
        headers=_headers_from_provider(cfg),
        auth=_auth_from_provider(cfg),
    )
