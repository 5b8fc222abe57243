# erp_client/state/loader.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from ..errors import ApiError, DomainError
from ..utils.helpers import error_message

_log = logging.getLogger(__name__)


def normalize_response(payload: Any) -> list:
    """
    Coerce a backend list response into a list.

    Accepted shapes:
      - a bare list                       -> returned as is
      - {"data": [...]}                   -> the "data" list
      - any dict with a list-valued field -> the first such list (insertion order)
    Anything else (None, scalars, dicts without lists) yields [].
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, list):
            return data
        for value in payload.values():
            if isinstance(value, list):
                return value
    return []


def describe_shape(name: str, payload: Any) -> Optional[str]:
    """
    Return a warning string when `payload` is not a bare list, else None.
    Used by the backend refresh to report endpoints drifting from the array contract.
    """
    if isinstance(payload, list):
        return None
    if isinstance(payload, dict):
        for key, value in payload.items():
            if isinstance(value, list):
                return f"{name}: expected an array, got an object (using '{key}')"
        return f"{name}: expected an array, got an object without a list field"
    return f"{name}: expected an array, got {type(payload).__name__}"


class LoaderCoordinator:
    """
    Per-key in-flight de-duplication plus the lazy "load once" policy.

    - share(key, factory): at most one running task per key; concurrent callers
      await the same task and receive the same result. The slot is cleared when
      the task finishes, whether it succeeded or not.
    - load(key, fetch, ...): skip the fetch when the store already holds a
      loaded collection for `key` (unless refresh=True); otherwise fetch,
      normalize, adapt and publish into the store. Never raises: failures set
      the resource error, emit a notification and resolve to [].
    """

    def __init__(self, store, notifier=None):
        self.store = store
        self.notifier = notifier
        self._inflight: dict[str, asyncio.Task] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    async def share(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._guarded(key, factory))
            self._inflight[key] = task
        else:
            _log.debug("loader: reusing in-flight request for %s", key)
        return await asyncio.shield(task)

    async def _guarded(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await factory()
        finally:
            self._inflight.pop(key, None)

    async def load(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        *,
        adapt: Optional[Callable[[Any], Any]] = None,
        label: Optional[str] = None,
        refresh: bool = False,
    ) -> list:
        if not refresh and self.store.is_loaded(key) and not self.in_flight(key):
            return self.store.items(key)
        return await self.share(key, lambda: self._fetch_into_store(key, fetch, adapt, label or key))

    async def _fetch_into_store(self, key, fetch, adapt, label) -> list:
        self.store.set_loading(key, True)
        try:
            raw = await fetch()
            rows = normalize_response(raw)
            if adapt is not None:
                rows = [r for r in (adapt(x) for x in rows) if r is not None]
            self.store.set_items(key, rows)
            self.store.mark_loaded(key)
            return self.store.items(key)
        except (ApiError, DomainError) as e:
            msg = error_message(e, f"Failed to load {label}")
            _log.warning("loader: %s failed: %s", key, msg)
            self.store.set_error(key, msg)
            if self.notifier is not None:
                self.notifier.error(f"Load {label.title()} Failed", msg)
            return []
        finally:
            self.store.set_loading(key, False)
