from __future__ import annotations

from ...constants import CUSTOMERS
from ...domain.references import opening_balance
from ...state.adapters import adapt_customer, payment_type_to_api
from ...utils.helpers import floor_money
from ..base_module import IdModule


class CustomerController(IdModule):
    """
    Customers.

    paymentType travels lowercase ("credit"/"debit") and is shown as
    Credit/Debit; snake_case balance fields from older endpoints are read
    through the customer adapter.
    """

    resource = CUSTOMERS
    label = "customers"
    noun = "Customer"
    adapt = staticmethod(adapt_customer)

    def to_api(self, payload: dict) -> dict:
        body = dict(payload)
        if "paymentType" in body:
            body["paymentType"] = payment_type_to_api(body["paymentType"])
        for f in ("openingAmount", "creditLimit"):
            if f in body:
                body[f] = floor_money(body[f])
        return body

    def balance(self, rid: str) -> float:
        """Signed opening balance: Debit is negative."""
        return opening_balance(self.get(rid))
