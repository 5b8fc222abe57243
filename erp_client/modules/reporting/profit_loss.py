# erp_client/modules/reporting/profit_loss.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Optional

from PySide6.QtCore import QObject

from ...constants import DEFAULT_EXPENSE_CATEGORY
from ...state.adapters import line_items
from ...utils.validators import to_number


@dataclass
class MonthBucket:
    month: str
    sales: float = 0.0
    purchases: float = 0.0


@dataclass
class ProfitLossReport:
    sales_total: float = 0.0
    purchases_total: float = 0.0
    expenses_total: float = 0.0
    monthly: list[MonthBucket] = field(default_factory=list)
    expenses_by_category: dict[str, float] = field(default_factory=dict)

    @property
    def gross_profit(self) -> float:
        return self.sales_total - self.purchases_total

    @property
    def net_profit(self) -> float:
        return self.gross_profit - self.expenses_total


# ---- Amount rules ----------------------------------------------------------

def sale_total(rec: dict) -> float:
    """total, else totalNetAmount, else totalGrossAmount (first non-zero)."""
    for f in ("total", "totalNetAmount", "totalGrossAmount"):
        v = to_number(rec.get(f))
        if v:
            return v
    return 0.0


def purchase_invoice_total(rec: dict) -> float:
    """total > 0, else subTotal > 0, else sum of line amount (or quantity * rate)."""
    for f in ("total", "subTotal"):
        v = to_number(rec.get(f))
        if v > 0:
            return v
    return sum(
        to_number(ln.get("amount")) or to_number(ln.get("quantity")) * to_number(ln.get("rate"))
        for ln in line_items(rec)
        if isinstance(ln, dict)
    )


# ---- Dates -----------------------------------------------------------------

def parse_day(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def in_range(day: Optional[date], start: Optional[date], end: Optional[date]) -> bool:
    if start is None and end is None:
        return True
    if day is None:
        return False
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


def build_profit_loss(
    sales: Iterable[dict],
    purchase_invoices: Iterable[dict],
    expenses: Iterable[dict],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> ProfitLossReport:
    """
    Profit and loss over the given collections, optionally limited to an
    inclusive date range. Records without a usable date are dropped when a
    range is given and left out of the monthly buckets either way.
    """
    report = ProfitLossReport()
    months: dict[str, MonthBucket] = {}

    def bucket(day: date) -> MonthBucket:
        key = day.strftime("%Y-%m")
        if key not in months:
            months[key] = MonthBucket(key)
        return months[key]

    for s in sales:
        day = parse_day(s.get("invoiceDate") or s.get("date"))
        if not in_range(day, start, end):
            continue
        amount = sale_total(s)
        report.sales_total += amount
        if day is not None:
            bucket(day).sales += amount

    for p in purchase_invoices:
        day = parse_day(p.get("invoiceDate"))
        if not in_range(day, start, end):
            continue
        amount = purchase_invoice_total(p)
        report.purchases_total += amount
        if day is not None:
            bucket(day).purchases += amount

    for e in expenses:
        if not in_range(parse_day(e.get("date")), start, end):
            continue
        amount = to_number(e.get("amount"))
        report.expenses_total += amount
        cat = e.get("categoryType") or DEFAULT_EXPENSE_CATEGORY
        report.expenses_by_category[cat] = report.expenses_by_category.get(cat, 0.0) + amount

    report.monthly = [months[k] for k in sorted(months)]
    return report


class ProfitLossController(QObject):
    """Loads sales, purchase invoices and expenses, then builds the report."""

    def __init__(self, sales, purchase_invoices, expenses):
        super().__init__()
        self.sales = sales
        self.purchase_invoices = purchase_invoices
        self.expenses = expenses

    async def generate(self, start: Optional[date] = None, end: Optional[date] = None) -> ProfitLossReport:
        sales = await self.sales.load()
        invoices = await self.purchase_invoices.load()
        expenses = await self.expenses.load()
        return build_profit_loss(sales, invoices, expenses, start, end)
