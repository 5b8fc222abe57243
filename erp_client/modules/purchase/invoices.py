from __future__ import annotations

from ...constants import PURCHASE_INVOICES
from .controller import StockInDocumentController


class PurchaseInvoiceController(StockInDocumentController):
    resource = PURCHASE_INVOICES
    label = "purchase invoices"
    noun = "Purchase Invoice"
    use_length = True
