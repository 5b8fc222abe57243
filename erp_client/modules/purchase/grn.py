from __future__ import annotations

from ...constants import GRNS, PURCHASES
from ...domain.consistency import apply_grn_to_inventory, update_purchase_from_grn
from ...domain.numbering import SERIES
from ...utils.helpers import temp_key
from ...utils.validators import is_missing_id
from ..base_module import BaseModule, ModuleContext, unwrap_record
from ..inventory.controller import InventoryController


class GrnController(BaseModule):
    """
    Goods received notes (GRN-NNNN). Create-only.

    Applying a GRN adds the received quantities to inventory (sku vs
    itemName or id) and, for a GRN linked to a purchase order, raises
    `received` on that order's matching lines. Both steps are best-effort.
    """

    resource = GRNS
    label = "GRNs"
    noun = "GRN"

    def __init__(self, ctx: ModuleContext, inventory: InventoryController):
        super().__init__(ctx)
        self.inventory = inventory
        self.series = SERIES[GRNS]

    async def next_number(self) -> str:
        await self.load()
        return self.series.next_number(self.items)

    async def create(self, payload: dict) -> dict:
        body = dict(payload)
        if is_missing_id(body.get("grnNumber")):
            body["grnNumber"] = await self.next_number()
        number = body["grnNumber"]

        def apply(resp):
            rec = self.adapt({**body, **unwrap_record(resp)})
            if is_missing_id(rec.get("grnNumber")):
                rec["grnNumber"] = temp_key(self.resource)
            self.store.prepend(self.resource, rec)
            return rec

        rec = await self._submit(
            "create",
            lambda: self.api.create(body),
            apply,
            ok_title="GRN Created",
            ok_message=f"GRN {number} saved",
            fail_title="Create GRN Failed",
            extra={"number": number},
        )
        self.apply_grn(rec)
        return rec

    def apply_grn(self, grn: dict) -> tuple[bool, bool]:
        """Returns (stock_ok, po_ok); False marks a side effect that failed."""
        stock_ok = self._non_fatal(
            "inventory-increment",
            lambda: self.inventory.apply_adjustment(apply_grn_to_inventory(self.inventory.items, grn)),
        )
        po_ok = self._non_fatal("po-received", lambda: self._update_linked_po(grn))
        return stock_ok, po_ok

    def _update_linked_po(self, grn: dict) -> None:
        purchases, touched = update_purchase_from_grn(self.store.items(PURCHASES), grn)
        if touched:
            self.store.update_items(PURCHASES, lambda _old: purchases)
