from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx


class HttpClient:
    def __init__(
        self,
        base_headers: Optional[Mapping[str, str]] = None,
        timeout_seconds: float = 20.0,
    ) -> None:
        self._client = httpx.Client(
            timeout=timeout_seconds,
            headers=dict(base_headers or {}),
            follow_redirects=True,
            max_redirects=10
        )

    def get_json(self, url: str, headers: Optional[Mapping[str, str]] = None) -> dict:
        data = self._get(url, headers)
        if not isinstance(data, dict):
            raise TypeError("HttpClient invariant violated: expected JSON object")
        return data

    def get_json_list(self, url: str, headers: Optional[Mapping[str, str]] = None) -> list:
        data = self._get(url, headers)
        if not isinstance(data, list):
            raise TypeError("HttpClient invariant violated: expected JSON array")
        return data

    def post_json(self, url: str, payload: dict, headers: Optional[Mapping[str, str]] = None) -> dict:
        resp = self._client.post(url, json=payload, headers=headers)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise TypeError("HttpClient invariant violated: expected JSON object")
        return data

    def _get(self, url: str, headers: Optional[Mapping[str, str]]) -> Any:
        resp = self._client.get(url, headers=headers)
        resp.raise_for_status()
        return resp.json()

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
