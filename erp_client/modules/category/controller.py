from __future__ import annotations

import logging
from typing import Optional

from ...constants import CATEGORIES, COLOR_INFO, COLOR_WARNING, INVENTORY
from ...errors import DomainError
from ...state.adapters import adapt_category, category_name, record_id
from ..base_module import IdModule

_log = logging.getLogger(__name__)


def _item_category(item: dict) -> str:
    """Category of an inventory item, given as a name or a {name} object; anything else is blank."""
    return category_name(item.get("category"))


class CategoryController(IdModule):
    """
    Product categories, kept as {"_id", "name"}.

    Create and rename re-fetch the list afterwards so the store mirrors the
    backend. Deleting by name looks the id up server side, deletes it when
    found and clears the category from local inventory items either way.
    """

    resource = CATEGORIES
    label = "categories"
    noun = "Category"
    adapt = staticmethod(adapt_category)

    def names(self) -> list[str]:
        return [c["name"] for c in self.items]

    def for_select(self) -> list[dict]:
        return [{"value": n, "label": n} for n in self.names()]

    def find_by_name(self, name: str, records: Optional[list] = None) -> Optional[dict]:
        target = (name or "").strip().lower()
        for c in self.items if records is None else records:
            if c and c.get("name", "").strip().lower() == target:
                return c
        return None

    async def create_category(self, name: str) -> Optional[dict]:
        v = (name or "").strip()
        if not v:
            return None
        resp = await self._submit(
            "create",
            lambda: self.api.create({"name": v}),
            ok_title="Category Added",
            ok_message=f"Category '{v}' added",
            fail_title="Category Creation Failed",
        )
        await self.reload()
        return self.find_by_name(v) or adapt_category(resp if isinstance(resp, dict) else v)

    async def rename(self, old_name: str, new_name: str) -> None:
        v = (new_name or "").strip()
        if not v:
            return
        await self.load()
        current = self.find_by_name(old_name)
        rid = record_id(current)
        if rid is None:
            msg = f"Category '{old_name}' not found"
            self.notifier.error("Category Rename Failed", msg)
            raise DomainError(msg)

        old = current["name"]
        await self._submit(
            "rename",
            lambda: self.api.update(rid, {"name": v}),
            lambda _resp: self.store.replace_where(
                INVENTORY, lambda p: _item_category(p) == old, lambda p: {**p, "category": v}
            ),
            ok_title="Renamed",
            ok_message=f"Category renamed to '{v}'",
            fail_title="Category Rename Failed",
            ok_color=COLOR_INFO,
            touches=(INVENTORY,),
        )
        await self.reload()

    async def delete_by_name(self, name: str) -> None:
        v = (name or "").strip()

        async def call():
            remote = [c for c in (adapt_category(x) for x in await self.api.list()) if c]
            hit = self.find_by_name(v, remote)
            rid = record_id(hit)
            if rid is not None:
                await self.api.delete(rid)
            else:
                _log.warning("category '%s' has no backend id; clearing locally", v)

        target = v.lower()

        def apply(_resp):
            self.store.replace_where(
                INVENTORY,
                lambda p: _item_category(p).lower() == target,
                lambda p: {**p, "category": ""},
            )
            self.store.remove_where(self.resource, lambda c: c.get("name", "").strip().lower() == target)

        await self._submit(
            "delete",
            call,
            apply,
            ok_title="Category Deleted",
            ok_message=f"Category '{v}' removed",
            fail_title="Category Deletion Failed",
            ok_color=COLOR_WARNING,
            touches=(INVENTORY,),
        )
        await self.reload()
