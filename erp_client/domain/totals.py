"""
erp_client/domain/totals.py

Line-item and document totals.

Line rules:
  grossAmount    = quantity * rate (* length when the series uses it and length > 0)
  discountAmount = grossAmount * percent / 100, or entered directly, in which
                   case percent = discountAmount / grossAmount * 100 (0 when gross is 0)
  netAmount      = max(0, grossAmount - discountAmount)
  amount         = netAmount (or grossAmount for gross-basis documents)

Document totals are always re-summed from the lines, never patched.
`subTotal` and `total` are both the sum of line `amount`s.
Monetary values are floored to integers only when building the payload.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from ..state.adapters import line_items, line_items_field
from ..utils.helpers import floor_money
from ..utils.validators import non_negative, to_number

NET = "net"
GROSS = "gross"

EDITABLE_FIELDS = ("quantity", "rate", "length", "percent", "discountAmount")

LINE_MONEY_FIELDS = ("rate", "grossAmount", "discountAmount", "netAmount", "amount")
DOC_MONEY_FIELDS = (
    "subTotal",
    "totalGrossAmount",
    "totalDiscountAmount",
    "totalDiscount",
    "totalNetAmount",
    "total",
    "amount",
    "paidAmount",
)


def recalc_line(
    line: dict,
    edited: Optional[str] = None,
    *,
    use_length: bool = False,
    amount_basis: str = NET,
) -> dict:
    """
    Return a copy of `line` with every derived field recomputed.

    `edited` names the field the user just changed. "discountAmount" makes the
    amount authoritative and back-computes percent; anything else derives the
    amount from percent. With no edit hint, a line that carries an amount but
    no percent keeps its amount.
    """
    out = dict(line)
    qty = non_negative(line.get("quantity"))
    rate = non_negative(line.get("rate"))
    gross = qty * rate
    if use_length:
        length = to_number(line.get("length"))
        if length > 0:
            gross *= length

    pct = non_negative(line.get("percent"))
    disc = non_negative(line.get("discountAmount"))
    amount_wins = edited == "discountAmount" or (edited is None and pct == 0 and disc > 0)
    if amount_wins:
        pct = (disc / gross * 100) if gross > 0 else 0.0
    else:
        disc = gross * pct / 100

    net = max(0.0, gross - disc)
    out.update(
        quantity=qty,
        rate=rate,
        percent=pct,
        discountAmount=disc,
        grossAmount=gross,
        netAmount=net,
        amount=gross if amount_basis == GROSS else net,
    )
    return out


def compute_totals(lines: Iterable[dict]) -> dict:
    gross = disc = net = sub = 0.0
    for ln in lines:
        gross += to_number(ln.get("grossAmount"))
        disc += to_number(ln.get("discountAmount"))
        net += to_number(ln.get("netAmount"))
        sub += to_number(ln.get("amount"))
    return {
        "subTotal": sub,
        "total": sub,
        "totalGrossAmount": gross,
        "totalDiscountAmount": disc,
        "totalDiscount": disc,
        "totalNetAmount": net,
    }


def edit_line(
    lines: list,
    index: int,
    field: str,
    value: Any,
    *,
    use_length: bool = False,
    amount_basis: str = NET,
) -> list:
    """Apply one user edit to lines[index] and return the recomputed list."""
    if field not in EDITABLE_FIELDS:
        raise ValueError(f"'{field}' is not an editable line field")
    out = list(lines)
    edited = dict(out[index])
    edited[field] = value
    out[index] = recalc_line(edited, field, use_length=use_length, amount_basis=amount_basis)
    return out


def recalc_document(doc: dict, *, use_length: bool = False, amount_basis: str = NET) -> dict:
    """Copy of `doc` with every line recomputed and the totals re-summed."""
    out = dict(doc)
    key = line_items_field(doc)
    lines = [
        recalc_line(ln, use_length=use_length, amount_basis=amount_basis)
        for ln in line_items(doc)
        if isinstance(ln, dict)
    ]
    out[key] = lines
    out.update(compute_totals(lines))
    return out


def with_line_edit(doc: dict, index: int, field: str, value: Any, **opts) -> dict:
    """Edit one line of a document and re-sum its totals."""
    out = dict(doc)
    key = line_items_field(doc)
    lines = edit_line(line_items(doc), index, field, value, **opts)
    out[key] = lines
    out.update(compute_totals(lines))
    return out


def payload_amounts(doc: dict) -> dict:
    """
    Floor monetary fields for persistence. Line fields are floored first and
    document totals are re-summed from the floored lines when the document
    has line items.
    """
    out = dict(doc)
    key = line_items_field(doc)
    raw_lines = line_items(doc)
    if raw_lines:
        lines = []
        for ln in raw_lines:
            ln = dict(ln)
            for f in LINE_MONEY_FIELDS:
                if f in ln:
                    ln[f] = floor_money(ln[f])
            lines.append(ln)
        out[key] = lines
        totals = compute_totals(lines)
        for f, v in totals.items():
            out[f] = floor_money(v)
    for f in DOC_MONEY_FIELDS:
        if f in out:
            out[f] = floor_money(out[f])
    return out
