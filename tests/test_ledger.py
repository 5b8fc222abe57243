"""
Customer/supplier journal ledger.

Suite A builds the ledger from plain lists (entry mapping, party
resolution, ordering, filters, running balance seeded from the signed
opening balance). Suite B runs the controller against the fake backend.
"""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from erp_client.domain.references import opening_balance
from erp_client.modules.reporting.journal_ledger import (
    CUSTOMER,
    CUSTOMERS,
    PAYMENT,
    SUPPLIER,
    build_journal_ledger,
    ledger_entries,
)

CUSTOMER_ROWS = [
    {"_id": "c1", "name": "Ann", "openingAmount": 100, "paymentType": "Credit"},
    {"_id": "c2", "name": "Bob"},
]
SUPPLIER_ROWS = [
    {"_id": "s1", "name": "Acme Supplies", "openingAmount": 500, "paymentType": "Debit"},
]


@pytest.fixture()
def books():
    sale = {"_id": "x1", "invoiceNumber": "INV-0001", "invoiceDate": "2024-01-05",
            "customer": [{"_id": "c1", "name": "Ann"}], "total": 300}
    sales = [
        sale,
        {"_id": "x2", "invoiceNumber": "INV-0002", "invoiceDate": "2024-01-20",
         "customerName": "Bob", "totalNetAmount": 80},
        dict(sale),
    ]
    purchases = [{"_id": "po1", "poNumber": "PO-001", "poDate": "2024-01-10", "supplierId": "s1", "total": 400}]
    receipts = [{"_id": "rv1", "voucherNumber": "RV-0001", "voucherDate": "2024-01-15",
                 "receivedFrom": "ann", "amount": 120}]
    payments = [
        {"_id": "pv1", "voucherNumber": "PV-0001", "voucherDate": "2024-01-25",
         "paidTo": "Acme Supplies", "amount": 250},
        {"_id": "pv2", "voucherNumber": "PV-0002", "paidTo": "Stranger", "amount": 10},
    ]
    return sales, purchases, receipts, payments


def _ledger(books, **kw):
    return build_journal_ledger(*books, CUSTOMER_ROWS, SUPPLIER_ROWS, **kw)


# ---------------------------------------------------------------------------
# Suite A – building the ledger
# ---------------------------------------------------------------------------

def test_a1_entries_are_mapped_resolved_and_ordered(books) -> None:
    """A1: one entry per document, date order with undated last, parties resolved."""
    entries = ledger_entries(*books, CUSTOMER_ROWS, SUPPLIER_ROWS)
    assert [(e.document_number, e.debit, e.credit) for e in entries] == [
        ("INV-0001", 300, 0),
        ("PO-001", 0, 400),
        ("RV-0001", 0, 120),
        ("INV-0002", 80, 0),
        ("PV-0001", 250, 0),
        ("PV-0002", 10, 0),
    ]
    assert [e.party_id for e in entries] == ["c1", "s1", "c1", "c2", "s1", ""]
    assert entries[2].particulars == "Receipt from Ann"
    assert entries[1].document_type == "Purchase Invoice"
    assert entries[-1].day is None and entries[-1].party == "Stranger"


def test_a2_running_balance_over_everything(books) -> None:
    """A2: balance accumulates debit - credit from zero; totals add up."""
    ledger = _ledger(books)
    assert [e.balance for e in ledger.entries] == [300, -100, -220, -140, 110, 120]
    assert ledger.total_debit == 640
    assert ledger.total_credit == 520
    assert ledger.closing_balance == 120


def test_a3_customer_ledger_starts_from_opening_amount(books) -> None:
    """A3: one customer's ledger is seeded from their signed opening balance."""
    ledger = _ledger(books, party_type=CUSTOMER, party_id="c1")
    assert ledger.opening_balance == 100
    assert [e.document_number for e in ledger.entries] == ["INV-0001", "RV-0001"]
    assert [e.balance for e in ledger.entries] == [400, 280]
    assert (ledger.total_debit, ledger.total_credit, ledger.closing_balance) == (300, 120, 280)


def test_a4_debit_opening_is_negative(books) -> None:
    """A4: a Debit opening balance seeds the running balance negatively."""
    ledger = _ledger(books, party_type=SUPPLIER, party_id="s1")
    assert ledger.opening_balance == -500
    assert [e.balance for e in ledger.entries] == [-900, -650]


def test_a5_scope_range_search_and_types(books) -> None:
    """A5: scope, inclusive date range, search and document types narrow the list."""
    ledger = _ledger(books, scope=CUSTOMERS, start=date(2024, 1, 10), end=date(2024, 1, 20))
    assert [e.document_number for e in ledger.entries] == ["RV-0001", "INV-0002"]
    assert [e.document_number for e in _ledger(books, search="stranger").entries] == ["PV-0002"]
    assert len(_ledger(books, document_types=[PAYMENT]).entries) == 2


def test_a6_empty_ledger_closes_at_opening(books) -> None:
    """A6: with nothing in range the closing balance is the opening balance."""
    ledger = _ledger(books, party_type=CUSTOMER, party_id="c1", start=date(2030, 1, 1))
    assert ledger.entries == []
    assert ledger.closing_balance == 100


def test_a7_unknown_party_type(books) -> None:
    """A7: party filters need a customer or supplier type."""
    with pytest.raises(ValueError):
        _ledger(books, party_type="employee", party_id="c1")


@pytest.mark.parametrize("party, expected", [
    ({"openingAmount": 40, "paymentType": "credit"}, 40),
    ({"openingAmount": "40", "paymentType": "DEBIT"}, -40),
    ({"openingBalance": 15}, 15),
    ({"opening_amount": 7, "paymentType": "Debit"}, -7),
    (None, 0),
])
def test_a8_opening_balance_sign(party, expected) -> None:
    """A8: Debit balances are negative; older field names are read too."""
    assert opening_balance(party) == expected


# ---------------------------------------------------------------------------
# Suite B – controller
# ---------------------------------------------------------------------------

def test_b1_generate_uses_party_balances(erp, backend, books) -> None:
    """B1: generate() loads six collections once and seeds from the party balance."""
    sales, purchases, receipts, payments = books
    backend.on("GET", "/sale-invoice", 200, sales)
    backend.on("GET", "/purchaseorder", 200, purchases)
    backend.on("GET", "/reciept-voucher", 200, receipts)
    backend.on("GET", "/payment-voucher", 200, {"data": payments})
    backend.on("GET", "/customers", 200, CUSTOMER_ROWS)
    backend.on("GET", "/suppliers", 200, SUPPLIER_ROWS)

    async def scenario():
        ann = await erp.journal_ledger.generate(CUSTOMER, "c1")
        acme = await erp.journal_ledger.generate(SUPPLIER, "s1")
        everyone = await erp.journal_ledger.generate()
        return ann, acme, everyone

    ann, acme, everyone = asyncio.run(scenario())
    assert erp.customers.balance("c1") == 100
    assert erp.suppliers.balance("s1") == -500
    assert ann.closing_balance == 280
    assert acme.closing_balance == -650
    assert everyone.closing_balance == 120
    for path in ("/sale-invoice", "/purchaseorder", "/reciept-voucher", "/payment-voucher", "/customers", "/suppliers"):
        assert backend.count("GET", path) == 1
