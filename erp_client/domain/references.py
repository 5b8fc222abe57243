# erp_client/domain/references.py
from __future__ import annotations

from typing import Any, Iterable, Optional

from ..state.adapters import (
    first_of,
    normalize_customer_field,
    party_display_name,
    payment_type_from_api,
    record_id,
)
from ..utils.validators import is_missing_id, to_number


def _by_id(parties: Iterable[dict], rid: Any) -> Optional[dict]:
    if is_missing_id(rid):
        return None
    rid = str(rid).strip()
    for p in parties:
        if record_id(p) == rid:
            return p
    return None


def _by_name(parties: Iterable[dict], name: str) -> Optional[dict]:
    name = name.strip().lower()
    if not name:
        return None
    for p in parties:
        if party_display_name(p).lower() == name:
            return p
    return None


def resolve_party(
    doc: dict,
    parties: Iterable[dict],
    field: str = "supplier",
    id_field: str = "supplierId",
) -> Optional[dict]:
    """
    Resolve a document's counterparty against the known parties.

    `doc[field]` may be an embedded object (or a list of one), a bare id or
    a bare name. Order:
      1. the embedded object's `_id`/`id`
      2. the sibling `doc[id_field]`
      3. the value itself, as an id and then as a name
    When nothing matches, the value is returned as a name-only object so
    callers can still display it.
    """
    parties = list(parties or ())
    value = doc.get(field)
    if isinstance(value, list):
        value = value[0] if value else None

    if isinstance(value, dict):
        hit = _by_id(parties, record_id(value))
        if hit is not None:
            return hit

    hit = _by_id(parties, doc.get(id_field))
    if hit is not None:
        return hit

    if isinstance(value, str) and value.strip():
        hit = _by_id(parties, value) or _by_name(parties, value)
        return hit if hit is not None else {"name": value.strip()}

    if isinstance(value, dict):
        name = party_display_name(value)
        hit = _by_name(parties, name) if name else None
        return hit if hit is not None else value

    fallback = doc.get(f"{field}Name")
    if isinstance(fallback, str) and fallback.strip():
        return _by_name(parties, fallback) or {"name": fallback.strip()}
    return None


def party_name(
    doc: dict,
    parties: Iterable[dict],
    field: str = "supplier",
    id_field: str = "supplierId",
    default: str = "",
) -> str:
    party = resolve_party(doc, parties, field, id_field)
    return party_display_name(party) or default


def attach_supplier(doc: dict, suppliers: Iterable[dict]) -> dict:
    """
    When a document names its supplier only through `supplierId`, embed the
    full supplier record (the denormalized snapshot the backend expects).
    """
    out = dict(doc)
    if isinstance(out.get("supplier"), dict):
        return out
    hit = _by_id(list(suppliers or ()), out.get("supplierId"))
    if hit is not None:
        out["supplier"] = dict(hit)
        out.setdefault("supplierName", party_display_name(hit))
    return out


def customer_for_api(doc: dict) -> dict:
    """
    Outbound customer shape: a single object plus customerName. The stored
    copy keeps the list-of-one form produced by the sale/quotation adapters.
    Documents that do not mention a customer are returned unchanged.
    """
    if "customer" not in doc and "customerName" not in doc:
        return dict(doc)
    out = normalize_customer_field(doc)
    if out["customer"]:
        out["customer"] = out["customer"][0]
    else:
        out.pop("customer")
    return out


OPENING_BALANCE_FIELDS = ("openingAmount", "openingBalance", "opening_amount")


def opening_balance(party: Any) -> float:
    """Signed opening balance of a customer/supplier: Debit is negative."""
    if not isinstance(party, dict):
        return 0.0
    amount = to_number(first_of(party, OPENING_BALANCE_FIELDS))
    return -amount if payment_type_from_api(party.get("paymentType")) == "Debit" else amount
