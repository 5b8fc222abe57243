from __future__ import annotations

from ...constants import INVENTORY
from ...domain.consistency import STOCK_FIELDS, StockAdjustment, current_stock, with_stock
from ...state.adapters import adapt_inventory
from ...utils.helpers import floor_money
from ...utils.validators import to_number
from ..base_module import IdModule


class InventoryController(IdModule):
    """
    Products / inventory items.

    Key behavior:
      - Any write that touches one of openingStock/stock/quantity sends the
        same value in all three.
      - salesRate is floored before it is persisted.
      - apply_adjustment() publishes a StockAdjustment computed by the
        consistency rules (sales, purchases, GRNs, returns).
    """

    resource = INVENTORY
    label = "inventory"
    noun = "Product"
    adapt = staticmethod(adapt_inventory)

    def to_api(self, payload: dict) -> dict:
        body = dict(payload)
        present = [f for f in STOCK_FIELDS if body.get(f) is not None]
        if present:
            body = with_stock(body, to_number(body[present[0]]))
        if "salesRate" in body:
            body["salesRate"] = floor_money(body["salesRate"])
        if isinstance(body.get("itemName"), str):
            body["itemName"] = body["itemName"].strip()
        return body

    # ------------------------------------------------------------------ #
    # Stock
    # ------------------------------------------------------------------ #

    def stock_of(self, rid: str) -> float:
        item = self.get(rid)
        return current_stock(item) if item else 0.0

    def low_stock(self) -> list:
        """In stock but under a set minimumStockLevel (0 < stock < minimum)."""
        out = []
        for item in self.items:
            stock = current_stock(item)
            minimum = to_number(item.get("minimumStockLevel"))
            if stock > 0 and minimum > 0 and stock < minimum:
                out.append(item)
        return out

    def negative_stock(self) -> list:
        return [item for item in self.items if current_stock(item) < 0]

    def apply_adjustment(self, adj: StockAdjustment) -> bool:
        if not adj.changed:
            return False
        self.store.update_items(self.resource, lambda _old: adj.items)
        return True
