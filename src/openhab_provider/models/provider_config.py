from __future__ import annotations

import os
from typing import Any, Dict

from pydantic import BaseModel, Field, PositiveFloat, field_validator, model_validator

ENDPOINT_ENV = "OPENHAB_ENDPOINT"
API_TOKEN_ENV = "OPENHAB_API_TOKEN"


class ProviderConfig(BaseModel):
    """Provider block: where the openHAB server lives and how to authenticate."""

    endpoint: str = Field(
        description="API endpoint of the target openHAB server, usually the URL with `/rest` suffix, "
        "e.g. `https://openhab:8080/rest`",
    )
    api_token: str = Field(
        repr=False,
        json_schema_extra={"sensitive": True},
        description="API token used to authenticate against the openHAB server",
    )
    timeout_seconds: PositiveFloat = 30.0
    headers: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _fill_from_environment(cls, data: Any) -> Any:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("endpoint") is None and os.environ.get(ENDPOINT_ENV):
            data["endpoint"] = os.environ[ENDPOINT_ENV]
        if data.get("api_token") is None and os.environ.get(API_TOKEN_ENV):
            data["api_token"] = os.environ[API_TOKEN_ENV]
        return data

    @field_validator("endpoint")
    @classmethod
    def _validate_endpoint(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("endpoint must be an http:// or https:// URL")
        return value.rstrip("/")

    @field_validator("api_token")
    @classmethod
    def _validate_api_token(cls, value: str) -> str:
        if not value:
            raise ValueError("api_token must not be empty")
        return value
