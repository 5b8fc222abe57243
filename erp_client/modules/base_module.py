# erp_client/modules/base_module.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from PySide6.QtCore import QObject

from ..api.resolver import record_number
from ..api.resources import NUMBERED_ROUTES, ResourceApi
from ..constants import COLOR_SUCCESS
from ..domain.numbering import SERIES
from ..domain.totals import NET, payload_amounts, recalc_document
from ..errors import DomainError
from ..state.adapters import LINE_ITEM_FIELDS, adapt_record, record_id
from ..state.loader import LoaderCoordinator
from ..state.store import ResourceStore
from ..utils.helpers import error_message, temp_key
from ..utils.loggers import get_event_logger, log_event
from ..utils.notifications import Notifier
from ..utils.validators import is_missing_id

_log = logging.getLogger(__name__)


@dataclass
class ModuleContext:
    """Shared collaborators handed to every controller."""
    store: ResourceStore
    apis: dict
    loader: LoaderCoordinator
    notifier: Notifier


def unwrap_record(response: Any) -> dict:
    """The saved record from a write response ({...}, {"data": {...}} or empty)."""
    if isinstance(response, dict):
        data = response.get("data")
        if isinstance(data, dict):
            return data
        return response
    return {}


class BaseModule(QObject):
    """
    Common load/mutate plumbing for one store collection.

    load() is lazy and de-duplicated through the LoaderCoordinator and never
    raises. Writes go through _submit(), which snapshots the touched
    collections, runs the backend call, applies the result to the store and
    notifies. On failure every snapshot is restored, the resource error is
    set, an error notification is shown and the exception is re-raised so
    the form that started the write can stay open.
    """

    resource: str = ""
    label: str = ""
    noun: str = ""
    adapt = staticmethod(adapt_record)

    def __init__(self, ctx: ModuleContext):
        super().__init__()
        self.ctx = ctx
        self.store = ctx.store
        self.loader = ctx.loader
        self.notifier = ctx.notifier
        self.api: ResourceApi = ctx.apis[self.resource]
        self._events = get_event_logger()

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    @property
    def items(self) -> list:
        return self.store.items(self.resource)

    @property
    def loading(self) -> bool:
        return self.store.is_loading(self.resource)

    @property
    def error(self) -> Optional[str]:
        return self.store.error(self.resource)

    async def load(self, refresh: bool = False) -> list:
        return await self.loader.load(
            self.resource,
            self.api.fetch,
            adapt=self.adapt,
            label=self.label or self.resource,
            refresh=refresh,
        )

    async def reload(self) -> list:
        return await self.load(refresh=True)

    async def _load_other(self, key: str, adapt: Callable = adapt_record, label: str | None = None) -> list:
        """Lazy-load a related collection (inventory, suppliers, ...)."""
        return await self.loader.load(key, self.ctx.apis[key].fetch, adapt=adapt, label=label or key)

    # ------------------------------------------------------------------ #
    # Write plumbing
    # ------------------------------------------------------------------ #

    def _require_id(self, value: Any, title: str) -> str:
        if is_missing_id(value):
            msg = f"Invalid {self.noun.lower() or 'record'} id"
            self.notifier.error(title, msg)
            log_event(self._events, f"{self.resource}.validate", "failure", msg, level=logging.WARNING)
            raise DomainError(msg)
        return str(value).strip()

    async def _submit(
        self,
        op: str,
        call: Callable[[], Awaitable[Any]],
        apply: Optional[Callable[[Any], Any]] = None,
        *,
        ok_title: str,
        ok_message: str,
        fail_title: str,
        ok_color: str = COLOR_SUCCESS,
        optimistic: Optional[Callable[[], None]] = None,
        touches: tuple = (),
        extra: Optional[dict] = None,
    ) -> Any:
        keys = (self.resource,) + tuple(k for k in touches if k != self.resource)
        snapshots = {k: self.store.snapshot(k) for k in keys}
        event = f"{self.resource}.{op}"
        log_event(self._events, event, "submit", ok_title, extra)
        try:
            if optimistic is not None:
                optimistic()
            result = await call()
            outcome = apply(result) if apply is not None else result
        except Exception as e:
            for k, snap in snapshots.items():
                self.store.restore(k, snap)
            msg = error_message(e, fail_title)
            self.store.set_error(self.resource, msg)
            self.notifier.error(fail_title, msg)
            log_event(self._events, event, "failure", msg, extra, level=logging.ERROR)
            raise
        self.notifier.notify(ok_title, ok_message, ok_color)
        log_event(self._events, event, "success", ok_message, extra)
        return outcome

    def _non_fatal(self, name: str, fn: Callable[[], Any]) -> bool:
        """
        Run a follow-up effect of a write that already succeeded.

        Returns True when it ran, False when it failed; failures are only
        logged so they never undo or fail the primary operation.
        """
        try:
            fn()
        except Exception:
            _log.warning("%s failed (ignored)", name, exc_info=True)
            log_event(self._events, f"{self.resource}.{name}", "failure", "side effect failed", level=logging.WARNING)
            return False
        return True


class IdModule(BaseModule):
    """Collections addressed by backend id (products, customers, suppliers, categories)."""

    def to_api(self, payload: dict) -> dict:
        return dict(payload)

    def _is(self, rid: str) -> Callable[[dict], bool]:
        return lambda rec: record_id(rec) == rid

    def get(self, rid: Any) -> Optional[dict]:
        if is_missing_id(rid):
            return None
        return self.store.find(self.resource, self._is(str(rid)))

    async def create(self, payload: dict) -> dict:
        body = self.to_api(payload)

        def apply(resp):
            rec = self.adapt({**body, **unwrap_record(resp)})
            if record_id(rec) is None:
                rec["_id"] = temp_key(self.resource)
            self.store.prepend(self.resource, rec)
            return rec

        return await self._submit(
            "create",
            lambda: self.api.create(body),
            apply,
            ok_title=f"{self.noun} Created",
            ok_message=f"{self.noun} saved",
            fail_title=f"Create {self.noun} Failed",
        )

    async def update(self, rid: Any, changes: dict) -> dict:
        rid = self._require_id(rid, f"Update {self.noun} Failed")
        body = self.to_api(changes)
        saved: dict = {}

        def apply(resp):
            def merge(old):
                saved.update(self.adapt({**old, **body, **unwrap_record(resp)}))
                return dict(saved)
            if self.store.replace_where(self.resource, self._is(rid), merge) == 0:
                saved.update(self.adapt({"_id": rid, **body, **unwrap_record(resp)}))
            return dict(saved)

        return await self._submit(
            "update",
            lambda: self.api.update(rid, body),
            apply,
            ok_title=f"{self.noun} Updated",
            ok_message=f"{self.noun} updated",
            fail_title=f"Update {self.noun} Failed",
            extra={"id": rid},
        )

    async def delete(self, rid: Any) -> bool:
        rid = self._require_id(rid, f"Delete {self.noun} Failed")
        await self._submit(
            "delete",
            lambda: self.api.delete(rid),
            lambda _resp: self.store.remove_where(self.resource, self._is(rid)),
            ok_title=f"{self.noun} Deleted",
            ok_message=f"{self.noun} removed",
            fail_title=f"Delete {self.noun} Failed",
            extra={"id": rid},
        )
        return True


class NumberedModule(BaseModule):
    """
    Documents addressed by a business number (INV-0001, PO-003, ...).

    create() assigns the next number from the series when the payload has
    none; update/delete go through the number -> query -> id fallback chain.
    """

    def __init__(self, ctx: ModuleContext):
        super().__init__(ctx)
        self.series = SERIES[self.resource]
        self.routes = NUMBERED_ROUTES[self.resource]

    @property
    def key_field(self) -> str:
        return self.routes.key_field

    def number_of(self, rec: Any) -> Optional[str]:
        return record_number(rec, self.routes)

    def _is(self, number: str) -> Callable[[dict], bool]:
        number = str(number).strip()
        return lambda rec: (self.number_of(rec) or "").strip() == number

    def get(self, number: Any) -> Optional[dict]:
        if is_missing_id(number):
            return None
        return self.store.find(self.resource, self._is(number))

    def peek_next_number(self) -> str:
        return self.series.next_number(self.items)

    async def next_number(self) -> str:
        await self.load()
        return self.peek_next_number()

    use_length = False
    amount_basis = NET

    def prepare(self, payload: dict) -> dict:
        """
        Outbound payload for create/update: line items recomputed and totals
        re-summed when the payload carries lines, money fields floored.
        """
        body = dict(payload)
        if any(f in body for f in LINE_ITEM_FIELDS):
            body = recalc_document(body, use_length=self.use_length, amount_basis=self.amount_basis)
        return payload_amounts(body)

    async def create(self, payload: dict) -> dict:
        body = self.prepare(payload)
        if is_missing_id(body.get(self.key_field)):
            body[self.key_field] = await self.next_number()
        number = body[self.key_field]

        def apply(resp):
            rec = self.adapt({**body, **unwrap_record(resp)})
            if is_missing_id(rec.get(self.key_field)):
                rec[self.key_field] = temp_key(self.resource)
            self.store.prepend(self.resource, rec)
            return rec

        return await self._submit(
            "create",
            lambda: self.api.create(body),
            apply,
            ok_title=f"{self.noun} Created",
            ok_message=f"{self.noun} {number} saved",
            fail_title=f"Create {self.noun} Failed",
            extra={"number": number},
        )

    async def _resolve(self, op: str, number: str, payload: Optional[dict] = None):
        if op == "update":
            res = await self.api.update_by_number(number, payload or {})
        else:
            res = await self.api.delete_by_number(number)
        if not res.found:
            raise DomainError(f"{self.noun} {number} not found")
        return res

    async def update(self, number: Any, changes: dict) -> dict:
        number = self._require_id(number, f"Update {self.noun} Failed")
        body = self.prepare(changes)
        saved: dict = {}

        def apply(res):
            def merge(old):
                saved.update(self.adapt({**old, **body, **unwrap_record(res.data)}))
                return dict(saved)
            if self.store.replace_where(self.resource, self._is(number), merge) == 0:
                saved.update(self.adapt({self.key_field: number, **body, **unwrap_record(res.data)}))
            return dict(saved)

        return await self._submit(
            "update",
            lambda: self._resolve("update", number, body),
            apply,
            ok_title=f"{self.noun} Updated",
            ok_message=f"{self.noun} {number} updated",
            fail_title=f"Update {self.noun} Failed",
            extra={"number": number},
        )

    async def delete(self, number: Any) -> bool:
        number = self._require_id(number, f"Delete {self.noun} Failed")
        await self._submit(
            "delete",
            lambda: self._resolve("delete", number),
            lambda _res: self.store.remove_where(self.resource, self._is(number)),
            ok_title=f"{self.noun} Deleted",
            ok_message=f"{self.noun} {number} removed",
            fail_title=f"Delete {self.noun} Failed",
            extra={"number": number},
        )
        return True
