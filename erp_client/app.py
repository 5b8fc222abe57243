"""
erp_client/app.py

Composition root: one store, one notifier, one API client and every
controller wired together. Views hold an ErpData and call its controllers.
"""

from __future__ import annotations

from typing import Optional

import httpx
from PySide6.QtCore import QObject, Signal

from .api.client import ApiClient
from .api.resources import build_resource_apis
from .config import API_BASE_URL
from .constants import CATEGORIES
from .errors import ApiError
from .modules.accounts.controller import PaymentVoucherController, ReceiptVoucherController
from .modules.base_module import ModuleContext
from .modules.category.controller import CategoryController
from .modules.customer.controller import CustomerController
from .modules.expense.controller import ExpenseController
from .modules.inventory.controller import InventoryController
from .modules.purchase.controller import PurchaseOrderController
from .modules.purchase.grn import GrnController
from .modules.purchase.invoices import PurchaseInvoiceController
from .modules.purchase.returns import PurchaseReturnController
from .modules.reporting.journal_ledger import JournalLedgerController
from .modules.reporting.profit_loss import ProfitLossController
from .modules.sales.controller import SalesController
from .modules.sales.quotations import QuotationController
from .modules.sales.returns import SaleReturnController
from .modules.supplier.controller import SupplierController
from .state.adapters import adapt_category
from .state.loader import LoaderCoordinator, describe_shape, normalize_response
from .state.store import ResourceStore
from .utils.helpers import error_message
from .utils.loggers import get_logger
from .utils.notifications import Notifier

_REFRESH_KEY = "__backend_refresh__"


class ErpData(QObject):
    backendAvailabilityChanged = Signal(bool)

    def __init__(self, client: ApiClient, store: Optional[ResourceStore] = None, notifier: Optional[Notifier] = None):
        super().__init__()
        self.log = get_logger()
        self.client = client
        self.store = store or ResourceStore()
        self.notifier = notifier or Notifier()
        self.apis = build_resource_apis(client)
        self.loader = LoaderCoordinator(self.store, self.notifier)
        self.ctx = ModuleContext(self.store, self.apis, self.loader, self.notifier)

        self.backend_available = False
        self.api_warnings: list[str] = []

        # ----- master data -----
        self.inventory = InventoryController(self.ctx)
        self.customers = CustomerController(self.ctx)
        self.suppliers = SupplierController(self.ctx)
        self.categories = CategoryController(self.ctx)

        # ----- sales side -----
        self.quotations = QuotationController(self.ctx)
        self.sales = SalesController(self.ctx, self.inventory, self.quotations)
        self.sale_returns = SaleReturnController(self.ctx, self.inventory)

        # ----- purchase side -----
        self.purchases = PurchaseOrderController(self.ctx, self.inventory)
        self.purchase_invoices = PurchaseInvoiceController(self.ctx, self.inventory)
        self.grns = GrnController(self.ctx, self.inventory)
        self.purchase_returns = PurchaseReturnController(self.ctx, self.inventory)

        # ----- accounts & reports -----
        self.expenses = ExpenseController(self.ctx)
        self.receipt_vouchers = ReceiptVoucherController(self.ctx)
        self.payment_vouchers = PaymentVoucherController(self.ctx)
        self.profit_loss = ProfitLossController(self.sales, self.purchase_invoices, self.expenses)
        self.journal_ledger = JournalLedgerController(
            self.sales,
            self.purchases,
            self.receipt_vouchers,
            self.payment_vouchers,
            self.customers,
            self.suppliers,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    # ------------------------------------------------------------------ #
    # Backend refresh
    # ------------------------------------------------------------------ #

    async def refresh_from_backend(self) -> bool:
        """
        Check the backend by re-reading categories. Concurrent calls share one
        request. Sets backend_available and api_warnings; never raises.
        """
        return await self.loader.share(_REFRESH_KEY, self._refresh)

    async def _refresh(self) -> bool:
        try:
            raw = await self.apis[CATEGORIES].fetch()
        except ApiError as e:
            msg = error_message(e, "Backend unavailable")
            self.log.warning("backend refresh failed: %s", msg)
            self._set_available(False)
            self.notifier.error("Backend Unavailable", msg)
            return False

        warning = describe_shape("categories", raw)
        self.api_warnings = [warning] if warning else []
        for w in self.api_warnings:
            self.log.warning("api shape: %s", w)

        rows = [c for c in (adapt_category(x) for x in normalize_response(raw)) if c]
        self.store.set_items(CATEGORIES, rows)
        self.store.mark_loaded(CATEGORIES)
        self._set_available(True)
        return True

    def _set_available(self, value: bool) -> None:
        changed = value != self.backend_available
        self.backend_available = value
        if changed:
            self.backendAvailabilityChanged.emit(value)


def create_erp_data(
    base_url: Optional[str] = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    notifier: Optional[Notifier] = None,
) -> ErpData:
    client = ApiClient(base_url or API_BASE_URL, transport=transport)
    return ErpData(client, notifier=notifier)
