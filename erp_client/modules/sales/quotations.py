from __future__ import annotations

from ...constants import QUOTATIONS
from ...domain.references import customer_for_api
from ...state.adapters import adapt_quotation
from ...utils.helpers import now_iso
from ..base_module import NumberedModule


class QuotationController(NumberedModule):
    """Quotations (Quo-NNNN); numbers freed by a delete are reused."""

    resource = QUOTATIONS
    label = "quotations"
    noun = "Quotation"
    adapt = staticmethod(adapt_quotation)

    def prepare(self, payload: dict) -> dict:
        return customer_for_api(super().prepare(payload))

    def mark_converted(self, number: str, invoice_number: str) -> bool:
        stamped = now_iso()
        count = self.store.replace_where(
            self.resource,
            self._is(number),
            lambda q: {**q, "status": "converted", "convertedInvoiceId": invoice_number, "convertedAt": stamped},
        )
        return count > 0
