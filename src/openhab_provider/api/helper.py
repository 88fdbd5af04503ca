from __future__ import annotations

from typing import Any, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from openhab_provider.core.exceptions import ResponseDecodeError

M = TypeVar("M", bound=BaseModel)


def status_text(resp: httpx.Response) -> str:
    """Status line as shown to users, e.g. ``404 Not Found``."""
    return f"{resp.status_code} {resp.reason_phrase}".strip()


def read_response_body(resp: httpx.Response, target: Type[M]) -> M:
    """Parse the body of ``resp`` as JSON and validate it into ``target``."""
    try:
        data: Any = resp.json()
    except ValueError as e:
        content_type = resp.headers.get("content-type", "unknown")
        raise ResponseDecodeError(
            f"Failed to parse openHAB response as JSON (Content-Type: {content_type})",
            status_code=resp.status_code,
            preview=resp.text[:500],
        ) from e

    try:
        return target.model_validate(data)
    except ValidationError as e:
        raise ResponseDecodeError(
            f"Unexpected {target.__name__} payload: {e.error_count()} validation error(s)",
            status_code=resp.status_code,
            preview=resp.text[:500],
        ) from e
