from __future__ import annotations

from ...constants import INVENTORY, PURCHASE_RETURNS, PURCHASES, SUPPLIER_CREDITS
from ...domain.consistency import ReturnOutcome, process_purchase_return
from .controller import StockInDocumentController


class PurchaseReturnController(StockInDocumentController):
    """
    Purchase returns (PRET-NNNN).

    Creating a return also processes it: stock goes down, the linked
    purchase order's `received` goes down and a supplier credit is recorded.
    A return that matches nothing in inventory is reported as not applied.
    """

    resource = PURCHASE_RETURNS
    label = "purchase returns"
    noun = "Purchase Return"

    async def create(self, payload: dict) -> dict:
        await self._ensure_suppliers(payload)
        # Skip the stock-in step of the base class; returns take stock out.
        rec = await super(StockInDocumentController, self).create(payload)
        self._non_fatal("apply-return", lambda: self.process_return(rec))
        return rec

    def process_return(self, ret: dict) -> ReturnOutcome:
        outcome = process_purchase_return(self.inventory.items, self.store.items(PURCHASES), ret)
        if not outcome.applied:
            self.notifier.error("Return Not Applied", outcome.message)
            return outcome
        self.store.update_items(INVENTORY, lambda _old: outcome.inventory)
        self.store.update_items(PURCHASES, lambda _old: outcome.purchases)
        if outcome.credit is not None:
            self.store.prepend(SUPPLIER_CREDITS, outcome.credit)
        self.notifier.success("Return Applied", outcome.message)
        return outcome

    def supplier_credits(self, supplier_id: str | None = None) -> list:
        credits = self.store.items(SUPPLIER_CREDITS)
        if supplier_id is None:
            return credits
        return [c for c in credits if str(c.get("supplierId") or "") == str(supplier_id)]
