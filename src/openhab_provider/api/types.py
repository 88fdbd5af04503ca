from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class ApiAuth:
    api_token: str


@dataclass(frozen=True)
class ApiConnection:
    base_url: str
    timeout_seconds: float
    headers: Dict[str, str]
    auth: ApiAuth
