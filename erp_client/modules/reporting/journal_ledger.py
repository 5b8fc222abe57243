"""
erp_client/modules/reporting/journal_ledger.py

Customer/supplier journal ledger derived from the store.

Entries
-------
- Sale Invoice      debit  (sale total, to the customer)
- Purchase Invoice  credit (purchase order total, from the supplier)
- Receipt           credit (receipt voucher amount, from receivedFrom)
- Payment           debit  (payment voucher amount, to paidTo)

Entries are sorted by date (undated last), filtered, then given a running
balance (debit - credit) seeded from the selected party's signed opening
balance.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, Optional

from PySide6.QtCore import QObject

from ...domain.references import opening_balance, resolve_party
from ...state.adapters import party_display_name, record_id
from ...utils.validators import to_number
from .profit_loss import in_range, parse_day, purchase_invoice_total, sale_total

SALE_INVOICE = "Sale Invoice"
PURCHASE_INVOICE = "Purchase Invoice"
RECEIPT = "Receipt"
PAYMENT = "Payment"
DOCUMENT_TYPES = (SALE_INVOICE, PURCHASE_INVOICE, RECEIPT, PAYMENT)

CUSTOMER = "customer"
SUPPLIER = "supplier"

# Scopes (which side of the ledger to show)
ALL = "all"
CUSTOMERS = "customers"
SUPPLIERS = "suppliers"
SCOPE_DOCUMENTS = {
    ALL: DOCUMENT_TYPES,
    CUSTOMERS: (SALE_INVOICE, RECEIPT),
    SUPPLIERS: (PURCHASE_INVOICE, PAYMENT),
}


@dataclass(frozen=True)
class LedgerEntry:
    key: str
    day: Optional[date]
    document_type: str
    document_number: str
    particulars: str
    debit: float = 0.0
    credit: float = 0.0
    party: str = ""
    party_id: str = ""
    balance: float = 0.0


@dataclass
class JournalLedger:
    entries: list
    opening_balance: float = 0.0

    @property
    def total_debit(self) -> float:
        return sum(e.debit for e in self.entries)

    @property
    def total_credit(self) -> float:
        return sum(e.credit for e in self.entries)

    @property
    def closing_balance(self) -> float:
        return self.entries[-1].balance if self.entries else self.opening_balance


# ---- Entry building --------------------------------------------------------

def _party(doc: dict, parties: Iterable[dict], field: str, id_field: str) -> tuple[str, str]:
    hit = resolve_party(doc, parties, field, id_field)
    return party_display_name(hit), record_id(hit) or ""


def _number(doc: dict, field: str) -> str:
    return str(doc.get(field) or record_id(doc) or "").strip()


def ledger_entries(
    sales: Iterable[dict],
    purchases: Iterable[dict],
    receipts: Iterable[dict],
    payments: Iterable[dict],
    customers: Iterable[dict] = (),
    suppliers: Iterable[dict] = (),
) -> list[LedgerEntry]:
    """All ledger entries, date-ordered. A document seen twice is listed once."""
    customers = list(customers)
    suppliers = list(suppliers)
    entries: list[LedgerEntry] = []
    seen: set[str] = set()

    def add(key: str, **fields) -> None:
        if key in seen:
            return
        seen.add(key)
        entries.append(LedgerEntry(key=key, **fields))

    for s in sales:
        number = _number(s, "invoiceNumber")
        name, pid = _party(s, customers, "customer", "customerId")
        name = name or "Unknown Customer"
        add(
            f"sale-{record_id(s) or number}",
            day=parse_day(s.get("invoiceDate") or s.get("date")),
            document_type=SALE_INVOICE,
            document_number=number,
            particulars=f"Sale to {name}",
            debit=sale_total(s),
            party=name,
            party_id=pid,
        )

    for p in purchases:
        number = _number(p, "poNumber")
        name, pid = _party(p, suppliers, "supplier", "supplierId")
        name = name or "Unknown Supplier"
        add(
            f"purchase-{record_id(p) or number}",
            day=parse_day(p.get("poDate") or p.get("date")),
            document_type=PURCHASE_INVOICE,
            document_number=number,
            particulars=f"Purchase from {name}",
            credit=purchase_invoice_total(p),
            party=name,
            party_id=pid,
        )

    for r in receipts:
        number = _number(r, "voucherNumber")
        name, pid = _party({"party": r.get("receivedFrom")}, customers, "party", "partyId")
        name = name or "Unknown Customer"
        add(
            f"receipt-{record_id(r) or number}",
            day=parse_day(r.get("voucherDate") or r.get("date")),
            document_type=RECEIPT,
            document_number=number,
            particulars=f"Receipt from {name}",
            credit=to_number(r.get("amount")),
            party=name,
            party_id=pid,
        )

    for v in payments:
        number = _number(v, "voucherNumber")
        name, pid = _party({"party": v.get("paidTo")}, suppliers, "party", "partyId")
        name = name or "Unknown Supplier"
        add(
            f"payment-{record_id(v) or number}",
            day=parse_day(v.get("voucherDate") or v.get("date")),
            document_type=PAYMENT,
            document_number=number,
            particulars=f"Payment to {name}",
            debit=to_number(v.get("amount")),
            party=name,
            party_id=pid,
        )

    entries.sort(key=lambda e: (e.day is None, e.day or date.min))
    return entries


# ---- Filtering & balances --------------------------------------------------

def filter_entries(
    entries: Iterable[LedgerEntry],
    *,
    scope: str = ALL,
    party_id: Optional[str] = None,
    party_name: Optional[str] = None,
    document_types: Optional[Iterable[str]] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    search: Optional[str] = None,
) -> list[LedgerEntry]:
    """
    Narrow the ledger. A party matches on its id or on its name
    (case-insensitive); vouchers only carry a name. Date bounds are inclusive.
    """
    allowed = set(SCOPE_DOCUMENTS[scope])
    if document_types:
        allowed &= set(document_types)
    wanted_name = (party_name or "").strip().lower()
    term = (search or "").strip().lower()

    out = []
    for e in entries:
        if e.document_type not in allowed:
            continue
        if party_id or wanted_name:
            by_id = bool(party_id) and e.party_id == party_id
            by_name = bool(wanted_name) and e.party.lower() == wanted_name
            if not (by_id or by_name):
                continue
        if not in_range(e.day, start, end):
            continue
        if term and not any(term in s.lower() for s in (e.document_number, e.particulars, e.party)):
            continue
        out.append(e)
    return out


def with_running_balance(entries: Iterable[LedgerEntry], opening: float = 0.0) -> list[LedgerEntry]:
    balance = opening
    out = []
    for e in entries:
        balance += e.debit - e.credit
        out.append(replace(e, balance=balance))
    return out


def build_journal_ledger(
    sales: Iterable[dict],
    purchases: Iterable[dict],
    receipts: Iterable[dict],
    payments: Iterable[dict],
    customers: Iterable[dict] = (),
    suppliers: Iterable[dict] = (),
    *,
    party_type: Optional[str] = None,
    party_id: Optional[str] = None,
    opening: Optional[float] = None,
    scope: str = ALL,
    document_types: Optional[Iterable[str]] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    search: Optional[str] = None,
) -> JournalLedger:
    """
    Ledger for everyone, or for one customer/supplier when party_type and
    party_id are given. The opening balance defaults to that party's signed
    opening amount.
    """
    customers = list(customers)
    suppliers = list(suppliers)
    entries = ledger_entries(sales, purchases, receipts, payments, customers, suppliers)

    party_name = None
    if party_id:
        if party_type not in (CUSTOMER, SUPPLIER):
            raise ValueError(f"Unknown party type: {party_type!r}")
        parties = customers if party_type == CUSTOMER else suppliers
        party = next((p for p in parties if record_id(p) == str(party_id)), None)
        party_name = party_display_name(party) or None
        if opening is None:
            opening = opening_balance(party)

    filtered = filter_entries(
        entries,
        scope=scope,
        party_id=str(party_id) if party_id else None,
        party_name=party_name,
        document_types=document_types,
        start=start,
        end=end,
        search=search,
    )
    opening = opening or 0.0
    return JournalLedger(with_running_balance(filtered, opening), opening)


class JournalLedgerController(QObject):
    """Loads the six collections the ledger needs, then builds it."""

    def __init__(self, sales, purchases, receipt_vouchers, payment_vouchers, customers, suppliers):
        super().__init__()
        self.sales = sales
        self.purchases = purchases
        self.receipt_vouchers = receipt_vouchers
        self.payment_vouchers = payment_vouchers
        self.customers = customers
        self.suppliers = suppliers

    async def generate(
        self,
        party_type: Optional[str] = None,
        party_id: Optional[str] = None,
        **filters,
    ) -> JournalLedger:
        sales = await self.sales.load()
        purchases = await self.purchases.load()
        receipts = await self.receipt_vouchers.load()
        payments = await self.payment_vouchers.load()
        customers = await self.customers.load()
        suppliers = await self.suppliers.load()

        opening = None
        if party_id and party_type == CUSTOMER:
            opening = self.customers.balance(party_id)
        elif party_id and party_type == SUPPLIER:
            opening = self.suppliers.balance(party_id)

        return build_journal_ledger(
            sales,
            purchases,
            receipts,
            payments,
            customers,
            suppliers,
            party_type=party_type,
            party_id=party_id,
            opening=opening,
            **filters,
        )
