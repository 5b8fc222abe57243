# erp_client/api/client.py
from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import API_BASE_URL, REQUEST_TIMEOUT
from ..errors import ApiError, DomainError

_log = logging.getLogger(__name__)

__all__ = ["ApiClient", "ApiError", "DomainError"]


def _extract_message(body: Any, status: int) -> str:
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            val = body.get(key)
            if isinstance(val, str) and val.strip():
                return val
            if isinstance(val, list) and val:
                return "; ".join(str(v) for v in val)
    if isinstance(body, str) and body.strip() and len(body) < 300:
        return body.strip()
    return f"HTTP {status}"


class ApiClient:
    """
    Thin async JSON client over httpx.

    Returns decoded JSON (or None for an empty body) and raises ApiError for
    everything else, so callers only ever catch one exception type.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---- Core -------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict | None = None,
    ) -> Any:
        _log.debug("%s %s params=%s", method, path, params)
        try:
            resp = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            raise ApiError(f"Network error: {e}") from e

        body = self._decode(resp)
        if resp.is_error:
            raise ApiError(_extract_message(body, resp.status_code), status=resp.status_code, payload=body)
        return body

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    # ---- Verbs ------------------------------------------------------------

    async def get(self, path: str, *, params: dict | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, payload: Any = None) -> Any:
        return await self.request("POST", path, json=payload)

    async def put(self, path: str, payload: Any = None, *, params: dict | None = None) -> Any:
        return await self.request("PUT", path, json=payload, params=params)

    async def delete(self, path: str, *, params: dict | None = None) -> Any:
        return await self.request("DELETE", path, params=params)
