from __future__ import annotations

from ...constants import SUPPLIERS
from ...domain.references import opening_balance
from ...state.adapters import adapt_supplier, party_display_name, payment_type_to_api, record_id
from ...utils.helpers import floor_money
from ..base_module import IdModule


class SupplierController(IdModule):
    resource = SUPPLIERS
    label = "suppliers"
    noun = "Supplier"
    adapt = staticmethod(adapt_supplier)

    def to_api(self, payload: dict) -> dict:
        body = dict(payload)
        if "paymentType" in body:
            body["paymentType"] = payment_type_to_api(body["paymentType"])
        if "openingAmount" in body:
            body["openingAmount"] = floor_money(body["openingAmount"])
        return body

    def balance(self, rid: str) -> float:
        return opening_balance(self.get(rid))

    def for_select(self) -> list[dict]:
        """[{value, label}] options for supplier pickers; unnamed rows are skipped."""
        out = []
        for s in self.items:
            name = party_display_name(s)
            rid = record_id(s)
            if name and rid:
                out.append({"value": rid, "label": name})
        return out
