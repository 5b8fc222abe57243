from __future__ import annotations

from ...constants import PURCHASES, SUPPLIERS
from ...domain.consistency import apply_purchase_to_inventory
from ...domain.references import attach_supplier
from ...domain.totals import GROSS
from ...state.adapters import adapt_supplier
from ..base_module import ModuleContext, NumberedModule
from ..inventory.controller import InventoryController


class StockInDocumentController(NumberedModule):
    """
    Buy-side documents that add stock when created.

    A payload naming its supplier only through supplierId gets the full
    supplier record embedded before it is sent.
    """

    def __init__(self, ctx: ModuleContext, inventory: InventoryController):
        super().__init__(ctx)
        self.inventory = inventory

    def prepare(self, payload: dict) -> dict:
        body = attach_supplier(payload, self.store.items(SUPPLIERS))
        return super().prepare(body)

    async def _ensure_suppliers(self, payload: dict) -> None:
        if payload.get("supplierId") and not isinstance(payload.get("supplier"), dict):
            await self._load_other(SUPPLIERS, adapt_supplier, "suppliers")

    async def create(self, payload: dict) -> dict:
        await self._ensure_suppliers(payload)
        rec = await super().create(payload)
        self._non_fatal(
            "inventory-increment",
            lambda: self.inventory.apply_adjustment(apply_purchase_to_inventory(self.inventory.items, rec)),
        )
        return rec

    async def update(self, number, changes: dict) -> dict:
        await self._ensure_suppliers(changes)
        return await super().update(number, changes)


class PurchaseOrderController(StockInDocumentController):
    """Purchase orders (PO-NNN); id fallback goes through /purchases/{id}."""

    resource = PURCHASES
    label = "purchases"
    noun = "Purchase"
    use_length = True
    amount_basis = GROSS
