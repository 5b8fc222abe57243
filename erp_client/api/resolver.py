"""
erp_client/api/resolver.py

Business-key addressing for documents whose preferred key is a human
number (INV-0001, PO-003, ...) rather than the backend `_id`.

Resolution order for an update or delete of number `n`:
  1. each number sub-route in turn (e.g. /sale-invoice/{n}, /sale-invoice/number/{n})
  2. the query-parameter form (e.g. /sale-invoice?invoiceNumber={n})
  3. fetch the whole collection, find the record by business key and
     operate on /<id route>/{_id}

A 404 moves to the next step. Any other failure is raised immediately.
The outcome is reported as a tagged Resolution instead of an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import quote

from ..errors import ApiError
from ..state.adapters import first_of, record_id
from ..state.loader import normalize_response

_log = logging.getLogger(__name__)

FOUND_BY_NUMBER = "found-by-number"
FOUND_BY_ID = "found-by-id"
NOT_FOUND = "not-found"


@dataclass(frozen=True)
class Resolution:
    kind: str
    data: Any = None
    record_id: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.kind != NOT_FOUND


@dataclass(frozen=True)
class BusinessKeyRoutes:
    collection: str
    key_field: str
    number_paths: tuple = ()
    query_param: Optional[str] = None
    id_path: Optional[str] = None
    alt_key_fields: tuple = field(default_factory=tuple)

    @property
    def key_fields(self) -> tuple:
        return (self.key_field,) + tuple(self.alt_key_fields)

    def id_url(self, rid: str) -> str:
        template = self.id_path or f"{self.collection}/{{id}}"
        return template.format(id=quote(str(rid), safe=""))

    def number_urls(self, number: str) -> list[str]:
        n = quote(str(number), safe="")
        return [p.format(n=n) for p in self.number_paths]


def record_number(record: Any, routes: BusinessKeyRoutes) -> Optional[str]:
    v = first_of(record, routes.key_fields)
    return None if v is None else str(v)


def find_by_number(records: list, routes: BusinessKeyRoutes, number: str) -> Optional[dict]:
    target = str(number).strip()
    for rec in records:
        if isinstance(rec, dict) and (record_number(rec, routes) or "").strip() == target:
            return rec
    return None


async def _attempt(api, method: str, url: str, payload: Any, params: dict | None) -> tuple[bool, Any]:
    try:
        data = await api.request(method, url, json=payload, params=params)
    except ApiError as e:
        if e.not_found:
            _log.debug("resolver: %s %s -> 404", method, url)
            return False, None
        raise
    return True, data


async def resolve_and_send(
    api,
    routes: BusinessKeyRoutes,
    method: str,
    number: str,
    payload: Any = None,
) -> Resolution:
    """Run `method` against the record numbered `number` through the fallback chain."""
    for url in routes.number_urls(number):
        ok, data = await _attempt(api, method, url, payload, None)
        if ok:
            return Resolution(FOUND_BY_NUMBER, data)

    if routes.query_param:
        ok, data = await _attempt(api, method, routes.collection, payload, {routes.query_param: str(number)})
        if ok:
            return Resolution(FOUND_BY_NUMBER, data)

    records = normalize_response(await api.get(routes.collection))
    match = find_by_number(records, routes, number)
    rid = record_id(match)
    if rid is None:
        _log.info("resolver: %s %s not found in %s", method, number, routes.collection)
        return Resolution(NOT_FOUND)

    data = await api.request(method, routes.id_url(rid), json=payload)
    return Resolution(FOUND_BY_ID, data, rid)


async def update_by_number(api, routes: BusinessKeyRoutes, number: str, payload: Any) -> Resolution:
    return await resolve_and_send(api, routes, "PUT", number, payload)


async def delete_by_number(api, routes: BusinessKeyRoutes, number: str) -> Resolution:
    return await resolve_and_send(api, routes, "DELETE", number)
