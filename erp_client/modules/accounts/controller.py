from __future__ import annotations

from ...constants import PAYMENT_VOUCHERS, RECEIPT_VOUCHERS
from ...utils.validators import to_number
from ..base_module import NumberedModule


class VoucherController(NumberedModule):
    """Accounting vouchers addressed by voucherNumber."""

    def total(self) -> float:
        return sum(to_number(v.get("amount")) for v in self.items)


class ReceiptVoucherController(VoucherController):
    resource = RECEIPT_VOUCHERS
    label = "receipt vouchers"
    noun = "Receipt Voucher"


class PaymentVoucherController(VoucherController):
    resource = PAYMENT_VOUCHERS
    label = "payment vouchers"
    noun = "Payment Voucher"
