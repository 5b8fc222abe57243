# erp_client/api/resources.py
from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

from .. import constants as C
from ..state.loader import normalize_response
from .client import ApiClient
from .resolver import BusinessKeyRoutes, Resolution, delete_by_number, update_by_number

# Collections addressed by backend id only
ID_COLLECTIONS = {
    C.INVENTORY: "/products",
    C.CUSTOMERS: "/customers",
    C.SUPPLIERS: "/suppliers",
    C.CATEGORIES: "/categories",
    C.GRNS: "/grns",
}

# Collections addressed by business number first, id as a fallback
NUMBERED_ROUTES = {
    C.SALES: BusinessKeyRoutes(
        collection="/sale-invoice",
        key_field="invoiceNumber",
        number_paths=("/sale-invoice/{n}", "/sale-invoice/number/{n}"),
        query_param="invoiceNumber",
        alt_key_fields=("id",),
    ),
    C.SALE_RETURNS: BusinessKeyRoutes(
        collection="/sale-return",
        key_field="invoiceNumber",
        number_paths=("/sale-return/{n}",),
        query_param="invoiceNumber",
        alt_key_fields=("returnNumber",),
    ),
    C.QUOTATIONS: BusinessKeyRoutes(
        collection="/quotations",
        key_field="quotationNumber",
        number_paths=("/quotations/number/{n}",),
        query_param="quotationNumber",
        alt_key_fields=("quotation_no", "docNo"),
    ),
    C.PURCHASES: BusinessKeyRoutes(
        collection="/purchaseorder",
        key_field="poNumber",
        number_paths=("/purchaseorder/{n}",),
        query_param="poNumber",
        id_path="/purchases/{id}",
    ),
    C.PURCHASE_INVOICES: BusinessKeyRoutes(
        collection="/purchase-invoice",
        key_field="purchaseInvoiceNumber",
        number_paths=("/purchase-invoice/{n}",),
        query_param="purchaseInvoiceNumber",
        alt_key_fields=("invoiceNumber",),
    ),
    C.PURCHASE_RETURNS: BusinessKeyRoutes(
        collection="/purchase-returns",
        key_field="returnNumber",
        number_paths=("/purchase-returns/{n}",),
        query_param="returnNumber",
    ),
    C.EXPENSES: BusinessKeyRoutes(
        collection="/expenses",
        key_field="expenseNumber",
        number_paths=("/expenses/{n}",),
        query_param="expenseNumber",
    ),
    C.RECEIPT_VOUCHERS: BusinessKeyRoutes(
        collection="/reciept-voucher",
        key_field="voucherNumber",
        number_paths=("/reciept-voucher/{n}",),
        query_param="voucherNumber",
    ),
    C.PAYMENT_VOUCHERS: BusinessKeyRoutes(
        collection="/payment-voucher",
        key_field="voucherNumber",
        number_paths=("/payment-voucher/{n}",),
        query_param="voucherNumber",
    ),
}


class ResourceApi:
    """
    Endpoint bundle for one backend collection.

    Id-addressed operations (update/delete) always exist; the *_by_number
    variants need `routes` and go through the business-key resolver.
    """

    def __init__(self, client: ApiClient, collection: str, routes: Optional[BusinessKeyRoutes] = None):
        self.client = client
        self.collection = collection
        self.routes = routes

    def _id_url(self, record_id: Any) -> str:
        if self.routes is not None:
            return self.routes.id_url(str(record_id))
        return f"{self.collection}/{quote(str(record_id), safe='')}"

    async def fetch(self) -> Any:
        """Raw list response; normalization is the loader's job."""
        return await self.client.get(self.collection)

    async def list(self) -> list:
        return normalize_response(await self.fetch())

    async def create(self, payload: dict) -> Any:
        return await self.client.post(self.collection, payload)

    async def update(self, record_id: Any, payload: dict) -> Any:
        return await self.client.put(self._id_url(record_id), payload)

    async def delete(self, record_id: Any) -> Any:
        return await self.client.delete(self._id_url(record_id))

    async def update_by_number(self, number: str, payload: dict) -> Resolution:
        return await update_by_number(self.client, self._require_routes(), number, payload)

    async def delete_by_number(self, number: str) -> Resolution:
        return await delete_by_number(self.client, self._require_routes(), number)

    def _require_routes(self) -> BusinessKeyRoutes:
        if self.routes is None:
            raise TypeError(f"{self.collection} has no business-key routes")
        return self.routes


def build_resource_apis(client: ApiClient) -> dict[str, ResourceApi]:
    apis = {key: ResourceApi(client, path) for key, path in ID_COLLECTIONS.items()}
    for key, routes in NUMBERED_ROUTES.items():
        apis[key] = ResourceApi(client, routes.collection, routes)
    return apis
