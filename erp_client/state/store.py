# erp_client/state/store.py
from __future__ import annotations

import copy
import logging
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Optional

from PySide6.QtCore import QObject, Signal

from ..config import ACTION_LOG_LIMIT
from ..constants import RESOURCE_KEYS

_log = logging.getLogger(__name__)

Predicate = Callable[[dict], bool]


@dataclass(frozen=True)
class ResourceState:
    items: tuple = ()
    loading: bool = False
    error: Optional[str] = None
    loaded: bool = False


@dataclass(frozen=True)
class StoreAction:
    key: str
    kind: str
    size: int
    detail: dict = field(default_factory=dict)


class ResourceStore(QObject):
    """
    Single process-wide store of entity collections.

    Every collection change goes through one of the typed actions below,
    which replace the collection (never mutate it in place), append a
    StoreAction to `actions` and emit `changed(key)`. Records handed out by
    `items()` are the stored dicts: treat them as read-only and use the
    actions (`replace_where`, `update_items`, ...) to change them.
    """

    changed = Signal(str)

    def __init__(self, keys: Iterable[str] = RESOURCE_KEYS, parent: QObject | None = None):
        super().__init__(parent)
        self._states: dict[str, ResourceState] = {k: ResourceState() for k in keys}
        self._actions: deque[StoreAction] = deque(maxlen=ACTION_LOG_LIMIT)

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    @property
    def keys(self) -> tuple:
        return tuple(self._states)

    @property
    def actions(self) -> list[StoreAction]:
        return list(self._actions)

    def state(self, key: str) -> ResourceState:
        try:
            return self._states[key]
        except KeyError:
            raise KeyError(f"Unknown resource: {key}") from None

    def items(self, key: str) -> list:
        return list(self.state(key).items)

    def is_loaded(self, key: str) -> bool:
        return self.state(key).loaded

    def is_loading(self, key: str) -> bool:
        return self.state(key).loading

    def error(self, key: str) -> Optional[str]:
        return self.state(key).error

    def find(self, key: str, predicate: Predicate) -> Optional[dict]:
        for rec in self.state(key).items:
            if predicate(rec):
                return rec
        return None

    def snapshot(self, key: str) -> list:
        """Deep copy of the collection, for restore() after a failed write."""
        return copy.deepcopy(list(self.state(key).items))

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #

    def _dispatch(self, key: str, kind: str, new_state: ResourceState, **detail: Any) -> None:
        self._states[key] = new_state
        self._actions.append(StoreAction(key, kind, len(new_state.items), detail))
        _log.debug("store: %s %s (%d items)", key, kind, len(new_state.items))
        self.changed.emit(key)

    def set_items(self, key: str, items: Iterable[Any]) -> None:
        self._dispatch(key, "set_items", replace(self.state(key), items=tuple(items), error=None))

    def update_items(self, key: str, fn: Callable[[list], Iterable[Any]]) -> None:
        """Replace the collection with fn(current_items)."""
        new_items = tuple(fn(self.items(key)))
        self._dispatch(key, "update_items", replace(self.state(key), items=new_items))

    def prepend(self, key: str, record: Any) -> None:
        st = self.state(key)
        self._dispatch(key, "prepend", replace(st, items=(record,) + st.items))

    def replace_where(self, key: str, predicate: Predicate, fn: Callable[[dict], dict]) -> int:
        """Swap every matching record for fn(record). Returns the match count."""
        st = self.state(key)
        count = 0
        out = []
        for rec in st.items:
            if predicate(rec):
                out.append(fn(rec))
                count += 1
            else:
                out.append(rec)
        self._dispatch(key, "replace_where", replace(st, items=tuple(out)), matched=count)
        return count

    def remove_where(self, key: str, predicate: Predicate) -> int:
        st = self.state(key)
        kept = tuple(rec for rec in st.items if not predicate(rec))
        removed = len(st.items) - len(kept)
        self._dispatch(key, "remove_where", replace(st, items=kept), removed=removed)
        return removed

    def restore(self, key: str, items: Iterable[Any]) -> None:
        self._dispatch(key, "restore", replace(self.state(key), items=tuple(items)))

    def set_loading(self, key: str, loading: bool) -> None:
        self._dispatch(key, "set_loading", replace(self.state(key), loading=loading))

    def set_error(self, key: str, message: Optional[str]) -> None:
        self._dispatch(key, "set_error", replace(self.state(key), error=message))

    def mark_loaded(self, key: str) -> None:
        self._dispatch(key, "mark_loaded", replace(self.state(key), loaded=True))

    def invalidate(self, key: str) -> None:
        """Forget the loaded flag so the next load() fetches again."""
        self._dispatch(key, "invalidate", replace(self.state(key), loaded=False))
