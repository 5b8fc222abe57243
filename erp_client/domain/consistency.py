"""
erp_client/domain/consistency.py

Local, optimistic propagation of one document onto related collections:
stock levels on inventory items and `received` quantities on purchase
order lines. Every function is pure: it takes collections and returns new
ones, leaving the inputs untouched.

Inventory items carry three near-synonymous stock fields (openingStock,
stock, quantity); any adjustment writes the same value to all three.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ..state.adapters import first_of, line_items, line_items_field, party_display_name, record_id
from ..utils.helpers import floor_money, now_iso
from ..utils.validators import to_number

_log = logging.getLogger(__name__)

STOCK_FIELDS = ("openingStock", "stock", "quantity")


@dataclass(frozen=True)
class MatchRule:
    """How a document line finds its inventory item."""
    key_fields: tuple
    quantity_fields: tuple
    name_field: Optional[str] = "productName"


SALE_MATCH = MatchRule(("_id", "id", "sku", "productId", "itemName"), ("quantity",))
PURCHASE_MATCH = MatchRule(("inventoryId", "id", "_id", "productName", "productId"), ("quantity", "received"))
GRN_MATCH = MatchRule(("sku",), ("received", "quantity"), name_field=None)
RETURN_MATCH = MatchRule(("inventoryId", "productId", "_id", "id", "sku", "productName"), ("quantity",))


@dataclass(frozen=True)
class StockAdjustment:
    items: list
    matched: int = 0
    unmatched: tuple = ()

    @property
    def changed(self) -> bool:
        return self.matched > 0


@dataclass(frozen=True)
class ReturnOutcome:
    applied: bool
    message: str
    inventory: list = field(default_factory=list)
    purchases: list = field(default_factory=list)
    credit: Optional[dict] = None


# ---- Stock helpers ---------------------------------------------------------

def current_stock(item: dict) -> float:
    for f in STOCK_FIELDS:
        if item.get(f) is not None:
            return to_number(item.get(f))
    return 0.0


def with_stock(item: dict, value: float) -> dict:
    out = dict(item)
    for f in STOCK_FIELDS:
        out[f] = value
    return out


def _name(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def find_inventory_index(inventory: list, line: dict, rule: MatchRule) -> Optional[int]:
    """
    Match order: line key vs item id, then line key vs itemName, then the
    line's product name vs itemName.
    """
    key = first_of(line, rule.key_fields)
    key_s = _name(key)
    if key_s:
        for i, inv in enumerate(inventory):
            if record_id(inv) == key_s:
                return i
        for i, inv in enumerate(inventory):
            if _name(inv.get("itemName")) == key_s:
                return i
    if rule.name_field:
        pname = _name(line.get(rule.name_field))
        if pname:
            for i, inv in enumerate(inventory):
                if _name(inv.get("itemName")) == pname:
                    return i
    return None


def line_quantity(line: dict, rule: MatchRule) -> float:
    return to_number(first_of(line, rule.quantity_fields))


def adjust_stock(inventory: Iterable[dict], lines: Iterable[dict], sign: int, rule: MatchRule) -> StockAdjustment:
    """
    Add sign * quantity of every matched line to its inventory item.
    Unmatched lines are reported and otherwise ignored.
    """
    items = [dict(i) for i in inventory]
    matched = 0
    unmatched = []
    for ln in lines:
        if not isinstance(ln, dict):
            continue
        idx = find_inventory_index(items, ln, rule)
        if idx is None:
            unmatched.append(_name(first_of(ln, rule.key_fields + ("productName",), "?")))
            continue
        qty = line_quantity(ln, rule)
        items[idx] = with_stock(items[idx], current_stock(items[idx]) + sign * qty)
        matched += 1
    if unmatched:
        _log.info("stock adjustment: %d line(s) without inventory match: %s", len(unmatched), unmatched)
    return StockAdjustment(items, matched, tuple(unmatched))


# ---- Document effects ------------------------------------------------------

def apply_sale_to_inventory(inventory: Iterable[dict], sale: dict) -> StockAdjustment:
    return adjust_stock(inventory, line_items(sale), -1, SALE_MATCH)


def apply_sale_return_to_inventory(inventory: Iterable[dict], sale_return: dict) -> StockAdjustment:
    return adjust_stock(inventory, line_items(sale_return), +1, SALE_MATCH)


def apply_purchase_to_inventory(inventory: Iterable[dict], purchase: dict) -> StockAdjustment:
    """Purchase orders and purchase invoices both add stock."""
    return adjust_stock(inventory, line_items(purchase), +1, PURCHASE_MATCH)


def apply_grn_to_inventory(inventory: Iterable[dict], grn: dict) -> StockAdjustment:
    return adjust_stock(inventory, line_items(grn), +1, GRN_MATCH)


def _po_matches(po: dict, linked_id: str) -> bool:
    return linked_id in {record_id(po), _name(po.get("poNumber"))}


def _line_keys(line: dict) -> set:
    return {
        k for k in (
            _name(line.get("productName")),
            _name(line.get("productId")),
            _name(line.get("_id")),
            _name(line.get("id")),
        ) if k
    }


def _adjust_received(purchases: Iterable[dict], linked_id: str, deltas: dict, sign: int) -> tuple[list, int]:
    out = []
    touched = 0
    for po in purchases:
        if not _po_matches(po, linked_id):
            out.append(po)
            continue
        po = dict(po)
        key = line_items_field(po)
        new_lines = []
        for ln in line_items(po):
            hit = next((deltas[k] for k in _line_keys(ln) if k in deltas), None)
            if hit is None:
                new_lines.append(ln)
                continue
            ln = dict(ln)
            ln["received"] = max(0.0, to_number(ln.get("received")) + sign * hit)
            new_lines.append(ln)
            touched += 1
        po[key] = new_lines
        out.append(po)
    return out, touched


def update_purchase_from_grn(purchases: Iterable[dict], grn: dict) -> tuple[list, int]:
    """
    Increment `received` on the lines of the PO named by grn.linkedPoId.
    GRN lines match PO lines by sku vs productName/productId/id. Returns
    (purchases, lines_touched); unlinked GRNs leave purchases as they were.
    """
    purchases = list(purchases)
    linked = _name(grn.get("linkedPoId"))
    if not linked:
        return purchases, 0
    deltas: dict[str, float] = {}
    for ln in line_items(grn):
        sku = _name(ln.get("sku"))
        if sku:
            deltas[sku] = deltas.get(sku, 0.0) + line_quantity(ln, GRN_MATCH)
    return _adjust_received(purchases, linked, deltas, +1)


def return_total(ret: dict) -> float:
    for f in ("totalNetAmount", "total", "subTotal"):
        v = to_number(ret.get(f))
        if v > 0:
            return v
    return sum(
        to_number(ln.get("amount")) or to_number(ln.get("quantity")) * to_number(ln.get("rate"))
        for ln in line_items(ret)
    )


def process_purchase_return(inventory: Iterable[dict], purchases: Iterable[dict], ret: dict) -> ReturnOutcome:
    """
    Apply a purchase return: take the returned quantities out of stock,
    reduce `received` on the linked PO (floored at 0) and build a supplier
    credit for the returned value.

    "Not applied" is a normal outcome (nothing matched) and leaves every
    collection as it was.
    """
    inventory = list(inventory)
    purchases = list(purchases)
    lines = line_items(ret)
    number = _name(first_of(ret, ("returnNumber", "_id", "id"), ""))
    if not lines:
        return ReturnOutcome(False, f"Return {number} has no items", inventory, purchases)

    adj = adjust_stock(inventory, lines, -1, RETURN_MATCH)
    if not adj.changed:
        return ReturnOutcome(False, f"No items on return {number} match inventory", inventory, purchases)

    linked = _name(ret.get("linkedPoId"))
    touched = 0
    if linked:
        deltas: dict[str, float] = {}
        for ln in lines:
            for k in _line_keys(ln):
                deltas[k] = deltas.get(k, 0.0) + line_quantity(ln, RETURN_MATCH)
        purchases, touched = _adjust_received(purchases, linked, deltas, -1)

    credit = {
        "returnNumber": number,
        "supplierId": ret.get("supplierId") or record_id(ret.get("supplier") if isinstance(ret.get("supplier"), dict) else None),
        "supplierName": party_display_name(ret.get("supplier")) or _name(ret.get("supplierName")),
        "linkedPoId": linked or None,
        "amount": floor_money(return_total(ret)),
        "createdAt": now_iso(),
    }
    msg = f"Return {number} applied to {adj.matched} item(s)"
    if linked:
        msg += f"; {touched} PO line(s) updated"
    return ReturnOutcome(True, msg, adj.items, purchases, credit)
