"""
erp_client/state/adapters.py

Per-resource adapters that turn whatever the backend returned into one
canonical dict shape before it reaches the store.

The fallback field lists live in the lookup tables below. Each canonical
field is read from the first source field that carries a usable value.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from ..constants import DEFAULT_EXPENSE_CATEGORY, EXPENSE_CATEGORIES, PAYMENT_TYPES
from ..utils.validators import is_missing_id, to_number

# ---- Lookup tables ---------------------------------------------------------

ID_FIELDS = ("_id", "id")

CATEGORY_NAME_FIELDS = ("name", "title", "category", "label", "value")

CUSTOMER_FIELDS = {
    "openingAmount": ("openingAmount", "opening_amount"),
    "creditLimit": ("creditLimit", "credit_limit"),
    "createdAt": ("createdAt", "created_at"),
}

QUOTATION_FIELDS = {
    "quotationNumber": ("quotationNumber", "quotation_no", "docNo"),
    "quotationDate": ("quotationDate", "date", "docDate"),
    "remarks": ("remarks", "note"),
    "subTotal": ("subTotal", "sub_total", "total"),
    "totalDiscount": ("totalDiscount", "discount"),
}

LINE_ITEM_FIELDS = ("items", "products")

PARTY_NAME_FIELDS = ("name", "customerName", "supplierName", "title")


# ---- Generic helpers -------------------------------------------------------

def _usable(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def first_of(record: Any, fields: Iterable[str], default: Any = None) -> Any:
    """Value of the first field in `fields` that is present and non-blank."""
    if not isinstance(record, dict):
        return default
    for f in fields:
        v = record.get(f)
        if _usable(v):
            return v
    return default


def record_id(record: Any) -> Optional[str]:
    """Backend identity (`_id`, else `id`) as a string, or None."""
    rid = first_of(record, ID_FIELDS)
    return None if is_missing_id(rid) else str(rid)


def line_items(doc: Any) -> list:
    """Line items of a document, wherever the endpoint put them."""
    if not isinstance(doc, dict):
        return []
    for f in LINE_ITEM_FIELDS:
        v = doc.get(f)
        if isinstance(v, list):
            return v
    return []


def line_items_field(doc: dict) -> str:
    for f in LINE_ITEM_FIELDS:
        if isinstance(doc.get(f), list):
            return f
    return LINE_ITEM_FIELDS[0]


def adapt_record(raw: Any) -> Optional[dict]:
    """Copy a record and make sure `_id` is populated from `id` when missing."""
    if not isinstance(raw, dict):
        return None
    out = dict(raw)
    if not _usable(out.get("_id")) and _usable(out.get("id")):
        out["_id"] = out["id"]
    return out


# ---- Parties ---------------------------------------------------------------

def party_display_name(value: Any) -> str:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        return str(first_of(value, PARTY_NAME_FIELDS, "")).strip()
    if isinstance(value, str):
        return value.strip()
    return ""


def normalize_customer_field(doc: dict) -> dict:
    """
    Canonical sale/quotation customer: `customer` is a list of one dict and
    `customerName` mirrors its name. Accepts a list, a dict, a bare string
    or only `customerName`.
    """
    out = dict(doc)
    raw = out.get("customer")
    if isinstance(raw, list):
        raw = raw[0] if raw else None

    if isinstance(raw, dict):
        cust = dict(raw)
    elif isinstance(raw, str) and raw.strip():
        cust = {"name": raw.strip()}
    elif _usable(out.get("customerName")):
        cust = {"name": str(out["customerName"]).strip()}
    else:
        cust = None

    if cust is None:
        out["customer"] = []
        out.setdefault("customerName", "")
        return out

    name = party_display_name(cust) or str(out.get("customerName") or "").strip()
    if name and not cust.get("name"):
        cust["name"] = name
    out["customer"] = [cust]
    out["customerName"] = name
    return out


def payment_type_from_api(value: Any) -> str:
    credit, debit = PAYMENT_TYPES
    return debit if str(value or "").strip().lower() == debit.lower() else credit


def payment_type_to_api(value: Any) -> str:
    return payment_type_from_api(value).lower()


# ---- Resource adapters -----------------------------------------------------

def adapt_inventory(raw: Any) -> Optional[dict]:
    return adapt_record(raw)


def adapt_customer(raw: Any) -> Optional[dict]:
    out = adapt_record(raw)
    if out is None:
        return None
    for canonical, sources in CUSTOMER_FIELDS.items():
        v = first_of(out, sources)
        if v is not None:
            out[canonical] = v
    out["openingAmount"] = to_number(out.get("openingAmount"))
    out["paymentType"] = payment_type_from_api(out.get("paymentType"))
    return out


def adapt_supplier(raw: Any) -> Optional[dict]:
    out = adapt_record(raw)
    if out is None:
        return None
    if "paymentType" in out:
        out["paymentType"] = payment_type_from_api(out.get("paymentType"))
    return out


def category_name(raw: Any) -> str:
    if isinstance(raw, str):
        return raw.strip()
    if isinstance(raw, dict):
        name = first_of(raw, CATEGORY_NAME_FIELDS)
        if isinstance(name, str):
            return name.strip()
        rid = first_of(raw, ("id", "_id"))
        return "" if rid is None else str(rid).strip()
    return ""


def adapt_category(raw: Any) -> Optional[dict]:
    """Categories become {"_id", "name"}; blank names are dropped."""
    name = category_name(raw)
    if not name:
        return None
    return {"_id": record_id(raw) if isinstance(raw, dict) else None, "name": name}


def adapt_sale(raw: Any) -> Optional[dict]:
    out = adapt_record(raw)
    if out is None:
        return None
    return normalize_customer_field(out)


def adapt_quotation(raw: Any) -> Optional[dict]:
    out = adapt_record(raw)
    if out is None:
        return None
    for canonical, sources in QUOTATION_FIELDS.items():
        v = first_of(out, sources)
        if v is not None:
            out[canonical] = v
    out.setdefault("status", "draft")
    return normalize_customer_field(out)


def expense_category(value: Any) -> str:
    v = str(value or "").strip()
    for cat in EXPENSE_CATEGORIES:
        if v.lower() == cat.lower():
            return cat
    return DEFAULT_EXPENSE_CATEGORY


def adapt_expense(raw: Any) -> Optional[dict]:
    out = adapt_record(raw)
    if out is None:
        return None
    out["categoryType"] = expense_category(out.get("categoryType"))
    out["amount"] = to_number(out.get("amount"))
    return out
