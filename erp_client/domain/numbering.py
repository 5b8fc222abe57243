"""
erp_client/domain/numbering.py

Next-number derivation for each document series (INV-0001, PO-001, ...).

The next number is computed from the records currently in memory. Nothing
is reserved server side, so two clients can produce the same number; the
backend copy wins on the next reload.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .. import constants as C
from ..state.adapters import first_of

MAX_PLUS_ONE = "max+1"
FILL_GAP = "fill-gap"


@dataclass(frozen=True)
class NumberSeries:
    prefix: str
    width: int
    field: str
    alt_fields: tuple = ()
    policy: str = MAX_PLUS_ONE
    ignore_case: bool = False
    # Only digits at the end of the key matter (prefix text is ignored).
    trailing_digits: bool = False

    @property
    def fields(self) -> tuple:
        return (self.field,) + tuple(self.alt_fields)

    def _pattern(self) -> re.Pattern:
        flags = re.IGNORECASE if self.ignore_case else 0
        if self.trailing_digits:
            return re.compile(r"(\d+)$")
        return re.compile(rf"^{re.escape(self.prefix)}-(\d+)$", flags)

    def parse(self, value) -> Optional[int]:
        if value is None:
            return None
        m = self._pattern().search(str(value).strip())
        return int(m.group(1)) if m else None

    def format(self, n: int) -> str:
        return f"{self.prefix}-{n:0{self.width}d}"

    def used_numbers(self, records: Iterable) -> set[int]:
        used = set()
        for rec in records or ():
            n = self.parse(first_of(rec, self.fields))
            if n is not None and n > 0:
                used.add(n)
        return used

    def next_number(self, records: Iterable) -> str:
        used = self.used_numbers(records)
        if self.policy == FILL_GAP:
            n = 1
            while n in used:
                n += 1
        else:
            n = max(used, default=0) + 1
        return self.format(n)


SERIES = {
    C.SALES: NumberSeries("INV", 4, "invoiceNumber", alt_fields=("id",)),
    C.SALE_RETURNS: NumberSeries("SR", 4, "invoiceNumber", alt_fields=("returnNumber",)),
    # Quotations reuse freed numbers after a delete.
    C.QUOTATIONS: NumberSeries(
        "Quo", 4, "quotationNumber", alt_fields=("docNo",), policy=FILL_GAP, trailing_digits=True
    ),
    C.PURCHASES: NumberSeries("PO", 3, "poNumber"),
    C.PURCHASE_INVOICES: NumberSeries("PINV", 4, "purchaseInvoiceNumber"),
    C.GRNS: NumberSeries("GRN", 4, "grnNumber"),
    C.PURCHASE_RETURNS: NumberSeries("PRET", 4, "returnNumber", ignore_case=True),
    C.EXPENSES: NumberSeries("EXP", 4, "expenseNumber"),
    C.RECEIPT_VOUCHERS: NumberSeries("RV", 4, "voucherNumber"),
    C.PAYMENT_VOUCHERS: NumberSeries("PV", 4, "voucherNumber"),
}


def next_number(key: str, records: Iterable) -> str:
    return SERIES[key].next_number(records)
