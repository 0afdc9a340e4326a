from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests


@dataclass(frozen=True)
class HttpClient:
    base_url: str
    token: str | None = None
    timeout_s: float = 10.0
    # Anything with a requests-style .get(); defaults to the requests module.
    session: Any = None

    def get(self, path: str, *, params: dict | None = None) -> requests.Response:
        url = self.base_url.rstrip("/") + "/" + path.lstrip("/")
        headers = {
            "Accept": "application/json",
            "User-Agent": "grocery-compare/0.1",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return (self.session or requests).get(
            url,
            params=params,
            headers=headers,
            timeout=self.timeout_s,
        )
