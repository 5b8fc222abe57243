"""
Tests for the cross-entity consistency rules: stock adjustments from
sales, purchases and GRNs, PO `received` tracking, and purchase returns.
These exercise the pure functions; controller-level flows live in
test_mutations.py.
"""

from __future__ import annotations

import copy

from erp_client.domain.consistency import (
    adjust_stock,
    apply_grn_to_inventory,
    apply_purchase_to_inventory,
    apply_sale_to_inventory,
    current_stock,
    process_purchase_return,
    update_purchase_from_grn,
    SALE_MATCH,
)


def _stock(items, rid):
    return next(current_stock(i) for i in items if i["_id"] == rid)


# ---------------------------------------------------------------------------
# Suite A – stock adjustments
# ---------------------------------------------------------------------------

def test_a1_sale_then_purchase_round_trips_stock(inventory_rows) -> None:
    """A1: selling q then buying q of the same item restores its stock."""
    sale = {"items": [{"productId": "p1", "productName": "Widget", "quantity": 4, "rate": 120}]}
    purchase = {"items": [{"productId": "p1", "productName": "Widget", "quantity": 4, "rate": 90}]}

    after_sale = apply_sale_to_inventory(inventory_rows, sale)
    assert after_sale.matched == 1
    assert _stock(after_sale.items, "p1") == 6

    after_purchase = apply_purchase_to_inventory(after_sale.items, purchase)
    assert _stock(after_purchase.items, "p1") == 10


def test_a2_all_three_stock_fields_stay_in_sync(inventory_rows) -> None:
    """A2: openingStock, stock and quantity carry the same value after a change."""
    adj = apply_sale_to_inventory(inventory_rows, {"items": [{"_id": "p2", "quantity": 1}]})
    item = next(i for i in adj.items if i["_id"] == "p2")
    assert item["openingStock"] == item["stock"] == item["quantity"] == 1


def test_a3_match_by_name_and_product_name(inventory_rows) -> None:
    """A3: key vs itemName and productName vs itemName both match."""
    by_key_name = apply_sale_to_inventory(inventory_rows, {"items": [{"itemName": "Gadget", "quantity": 1}]})
    assert _stock(by_key_name.items, "p2") == 1
    by_product_name = apply_sale_to_inventory(
        inventory_rows, {"items": [{"productId": "legacy-9", "productName": "Widget", "quantity": 2}]}
    )
    assert _stock(by_product_name.items, "p1") == 8


def test_a4_unmatched_lines_are_left_alone(inventory_rows) -> None:
    """A4: unknown products are reported and nothing else changes."""
    original = copy.deepcopy(inventory_rows)
    adj = apply_sale_to_inventory(inventory_rows, {"items": [{"productName": "Nope", "quantity": 1}]})
    assert not adj.changed
    assert adj.unmatched == ("Nope",)
    assert adj.items == original
    assert inventory_rows == original


def test_a5_purchase_uses_received_when_quantity_missing(inventory_rows) -> None:
    """A5: purchase lines fall back to `received` for the quantity."""
    adj = apply_purchase_to_inventory(inventory_rows, {"products": [{"inventoryId": "p2", "received": 5}]})
    assert _stock(adj.items, "p2") == 7


def test_a6_same_item_on_two_lines(inventory_rows) -> None:
    """A6: two lines for one product both count."""
    lines = [{"_id": "p1", "quantity": 1}, {"_id": "p1", "quantity": 2}]
    adj = adjust_stock(inventory_rows, lines, -1, SALE_MATCH)
    assert adj.matched == 2
    assert _stock(adj.items, "p1") == 7


# ---------------------------------------------------------------------------
# Suite B – GRNs
# ---------------------------------------------------------------------------

def test_b1_grn_matches_sku_to_name_or_id(inventory_rows) -> None:
    """B1: GRN sku matches itemName or _id and adds the received quantity."""
    grn = {"items": [{"sku": "Widget", "quantity": 3}, {"sku": "p2", "received": 4, "quantity": 10}]}
    adj = apply_grn_to_inventory(inventory_rows, grn)
    assert _stock(adj.items, "p1") == 13
    assert _stock(adj.items, "p2") == 6


def test_b2_linked_po_lines_get_received() -> None:
    """B2: only the linked PO's matching lines gain `received`."""
    purchases = [
        {"_id": "po-a", "poNumber": "PO-001", "items": [
            {"productName": "Widget", "quantity": 10, "received": 2},
            {"productName": "Gadget", "quantity": 5},
        ]},
        {"_id": "po-b", "poNumber": "PO-002", "items": [{"productName": "Widget", "quantity": 1}]},
    ]
    grn = {"linkedPoId": "po-a", "items": [{"sku": "Widget", "quantity": 3}]}
    updated, touched = update_purchase_from_grn(purchases, grn)

    assert touched == 1
    assert updated[0]["items"][0]["received"] == 5
    assert "received" not in updated[0]["items"][1]
    assert updated[1] is purchases[1]
    assert purchases[0]["items"][0]["received"] == 2


def test_b3_grn_links_by_po_number_too() -> None:
    """B3: linkedPoId may carry the PO number instead of the id."""
    purchases = [{"_id": "x", "poNumber": "PO-004", "items": [{"productId": "p1", "quantity": 2}]}]
    updated, touched = update_purchase_from_grn(purchases, {"linkedPoId": "PO-004", "items": [{"sku": "p1", "quantity": 2}]})
    assert touched == 1
    assert updated[0]["items"][0]["received"] == 2


def test_b4_unlinked_grn_leaves_orders() -> None:
    """B4: no linkedPoId, no change."""
    purchases = [{"_id": "x", "items": []}]
    updated, touched = update_purchase_from_grn(purchases, {"items": [{"sku": "p1", "quantity": 2}]})
    assert touched == 0
    assert updated == purchases


# ---------------------------------------------------------------------------
# Suite C – purchase returns
# ---------------------------------------------------------------------------

def test_c1_return_reduces_stock_received_and_credits_supplier(inventory_rows) -> None:
    """C1: an applied return moves stock, PO received and produces a credit."""
    purchases = [{"_id": "po-a", "poNumber": "PO-001", "items": [
        {"productName": "Widget", "quantity": 10, "received": 10},
    ]}]
    ret = {
        "returnNumber": "PRET-0001",
        "linkedPoId": "po-a",
        "supplier": {"_id": "s1", "name": "Acme Supplies"},
        "items": [{"productName": "Widget", "quantity": 3, "rate": 50.5}],
    }
    outcome = process_purchase_return(inventory_rows, purchases, ret)

    assert outcome.applied
    assert _stock(outcome.inventory, "p1") == 7
    assert outcome.purchases[0]["items"][0]["received"] == 7
    assert outcome.credit["supplierId"] == "s1"
    assert outcome.credit["supplierName"] == "Acme Supplies"
    assert outcome.credit["amount"] == 151
    assert "PRET-0001" in outcome.message


def test_c2_received_never_goes_below_zero(inventory_rows) -> None:
    """C2: returning more than was received floors PO received at 0."""
    purchases = [{"_id": "po-a", "items": [{"productId": "p1", "quantity": 2, "received": 1}]}]
    ret = {"linkedPoId": "po-a", "items": [{"productId": "p1", "quantity": 5}]}
    outcome = process_purchase_return(inventory_rows, purchases, ret)
    assert outcome.purchases[0]["items"][0]["received"] == 0


def test_c3_unmatched_return_is_not_applied(inventory_rows) -> None:
    """C3: 'not applied' is a result, and collections are returned untouched."""
    ret = {"returnNumber": "PRET-0002", "items": [{"productName": "Ghost", "quantity": 1}]}
    outcome = process_purchase_return(inventory_rows, [], ret)
    assert outcome.applied is False
    assert outcome.credit is None
    assert outcome.inventory == inventory_rows
    assert "PRET-0002" in outcome.message


def test_c4_empty_return_is_not_applied(inventory_rows) -> None:
    """C4: a return without lines reports itself as not applied."""
    outcome = process_purchase_return(inventory_rows, [], {"returnNumber": "PRET-0003"})
    assert not outcome.applied
    assert "no items" in outcome.message
