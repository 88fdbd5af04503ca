from __future__ import annotations

import base64
from typing import Dict

from openhab_provider.api.types import ApiAuth


def _basic(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def build_auth_headers(auth: ApiAuth) -> Dict[str, str]:
    # openHAB API tokens are sent as the basic-auth user name with an empty password.
    if not auth.api_token:
        raise ValueError("api_token auth requires api_token")
    return {"Authorization": _basic(auth.api_token, "")}
