from __future__ import annotations

import copy

from ...constants import SALES
from ...domain.consistency import apply_sale_to_inventory
from ...domain.references import customer_for_api
from ...errors import DomainError
from ...state.adapters import adapt_sale, line_items
from ...utils.helpers import today_str
from ..base_module import ModuleContext, NumberedModule
from ..inventory.controller import InventoryController


class SalesController(NumberedModule):
    """
    Sale invoices (INV-NNNN).

    Key behavior:
      - The customer is sent as a single object and stored as a list of one
        with customerName alongside.
      - A created sale takes its quantities out of local inventory. That step
        is best-effort: a failure there is logged and the sale still stands.
      - import_quotation() turns a quotation into a sale and marks the
        quotation converted.
    """

    resource = SALES
    label = "sales"
    noun = "Sale"
    adapt = staticmethod(adapt_sale)

    def __init__(self, ctx: ModuleContext, inventory: InventoryController, quotations=None):
        super().__init__(ctx)
        self.inventory = inventory
        self.quotations = quotations

    def prepare(self, payload: dict) -> dict:
        return customer_for_api(super().prepare(payload))

    async def create(self, payload: dict) -> dict:
        rec = await super().create(payload)
        self._non_fatal(
            "inventory-decrement",
            lambda: self.inventory.apply_adjustment(apply_sale_to_inventory(self.inventory.items, rec)),
        )
        return rec

    # ------------------------------------------------------------------ #
    # Quotation import
    # ------------------------------------------------------------------ #

    async def import_quotation(self, quotation_number: str) -> dict:
        if self.quotations is None:
            raise DomainError("Quotations are not available")
        await self.quotations.load()
        quote = self.quotations.get(quotation_number)
        if quote is None:
            msg = f"Quotation {quotation_number} not found"
            self.notifier.error("Import Failed", msg)
            raise DomainError(msg)
        if quote.get("status") == "converted":
            msg = f"Quotation {quotation_number} was already converted to {quote.get('convertedInvoiceId')}"
            self.notifier.error("Import Failed", msg)
            raise DomainError(msg)

        payload = {
            "invoiceNumber": await self.next_number(),
            "invoiceDate": today_str(),
            "customer": copy.deepcopy(quote.get("customer")),
            "customerName": quote.get("customerName", ""),
            "items": copy.deepcopy(line_items(quote)),
            "remarks": quote.get("remarks", ""),
            "metadata": {"source": "quotation-import", "quotationNumber": quotation_number},
        }
        sale = await self.create(payload)
        self.quotations.mark_converted(quotation_number, sale.get("invoiceNumber"))
        return sale

