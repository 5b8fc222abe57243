from __future__ import annotations

from ...constants import SALE_RETURNS
from ...domain.consistency import apply_sale_return_to_inventory
from ...domain.references import customer_for_api
from ...state.adapters import adapt_sale
from ..base_module import ModuleContext, NumberedModule
from ..inventory.controller import InventoryController


class SaleReturnController(NumberedModule):
    """Sale returns (SR-NNNN); a created return puts its quantities back in stock."""

    resource = SALE_RETURNS
    label = "sale returns"
    noun = "Sale Return"
    adapt = staticmethod(adapt_sale)

    def __init__(self, ctx: ModuleContext, inventory: InventoryController):
        super().__init__(ctx)
        self.inventory = inventory

    def prepare(self, payload: dict) -> dict:
        return customer_for_api(super().prepare(payload))

    async def create(self, payload: dict) -> dict:
        rec = await super().create(payload)
        self._non_fatal(
            "inventory-restock",
            lambda: self.inventory.apply_adjustment(apply_sale_return_to_inventory(self.inventory.items, rec)),
        )
        return rec
