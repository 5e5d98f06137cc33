"""
Build an ``InvoiceData`` from raw form state.

The form state is the nested dict kept in the Streamlit session (and stored
as a draft), so any part of it may be missing or half-typed. Assembly never
fails on bad values: text becomes an empty string, numbers go through the
calculation clamps, and every derived amount is recomputed here.
"""

from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional

from .banking import banking_fields
from .calculations import non_negative, normalize_rate
from .currency import CURRENCY_INFO, DEFAULT_CURRENCY
from .models import (
    BANKING_MODELS,
    DEFAULT_PAYMENT_TERMS,
    InvoiceData,
    PaymentMethod,
)
from .utils import clean_str, generate_invoice_number, to_bool, to_date

_PARTY_FIELDS = ("name", "address", "phone", "email")
_METHODS = {m.value for m in PaymentMethod}


def form_section(form: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = form.get(key)
    return value if isinstance(value, Mapping) else {}


def _party(raw: Mapping[str, Any]) -> Dict[str, str]:
    return {f: clean_str(raw.get(f)) for f in _PARTY_FIELDS}


def _items(raw_items: Any) -> List[Dict[str, Any]]:
    items = []
    for i, it in enumerate(raw_items or [], start=1):
        if not isinstance(it, Mapping):
            continue
        items.append({
            "id": clean_str(it.get("id")) or f"item-{i}",
            "description": clean_str(it.get("description")),
            "quantity": non_negative(it.get("quantity")),
            "unit_price": non_negative(it.get("unit_price")),
        })
    return items


def collect_banking(raw: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Banking fields for the selected country, or None when nothing was entered."""
    country = clean_str(raw.get("country")).strip().upper()
    if country not in BANKING_MODELS:
        return None
    values = {f: clean_str(raw.get(f)).strip() for f in banking_fields(country)}
    if not any(values.values()):
        return None
    return {"country": country, **values}


def collect_payment_links(raw: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Payment links block, or None when no link is enabled."""
    links = []
    for i, link in enumerate(raw.get("links") or [], start=1):
        if not isinstance(link, Mapping):
            continue
        method = clean_str(link.get("method")).strip().lower()
        if method not in _METHODS:
            continue
        links.append({
            "id": clean_str(link.get("id")) or f"payment-link-{i}",
            "method": method,
            "url": clean_str(link.get("url")).strip(),
            "display_name": clean_str(link.get("display_name")) or None,
            "is_enabled": to_bool(link.get("is_enabled")),
            "instructions": clean_str(link.get("instructions")) or None,
        })
    if not any(link["is_enabled"] for link in links):
        return None
    return {
        "links": links,
        "global_instructions": clean_str(raw.get("global_instructions")) or None,
    }


def assemble_invoice(form: Optional[Mapping[str, Any]]) -> InvoiceData:
    """Document model for the current form state; calling it twice gives equal results."""
    form = form or {}
    details = form_section(form, "details")
    currency = clean_str(form.get("currency")).strip().upper()

    return InvoiceData.model_validate({
        "business": _party(form_section(form, "business")),
        "customer": _party(form_section(form, "customer")),
        "details": {
            "invoice_number": clean_str(details.get("invoice_number")).strip(),
            "issue_date": to_date(details.get("issue_date")),
            "due_date": to_date(details.get("due_date")),
            "payment_terms": clean_str(details.get("payment_terms")) or DEFAULT_PAYMENT_TERMS,
            "notes": clean_str(details.get("notes")),
        },
        "items": _items(form.get("items")),
        "tax": {"rate": normalize_rate(form_section(form, "tax").get("rate"))},
        "banking_info": collect_banking(form_section(form, "banking")),
        "payment_links": collect_payment_links(form_section(form, "payment_links")),
        "currency": currency if currency in CURRENCY_INFO else DEFAULT_CURRENCY,
    })


def empty_item(item_id: str, quantity: float = 1) -> Dict[str, Any]:
    return {"id": item_id, "description": "", "quantity": quantity, "unit_price": 0.0}


def default_form_state(settings=None, today: Optional[date] = None) -> Dict[str, Any]:
    """A fresh form: one empty item, net 30 terms, due 30 days after today."""
    today = today or date.today()
    currency = getattr(settings, "default_currency", DEFAULT_CURRENCY)
    terms = getattr(settings, "default_payment_terms", DEFAULT_PAYMENT_TERMS)
    return {
        "business": {f: "" for f in _PARTY_FIELDS},
        "customer": {f: "" for f in _PARTY_FIELDS},
        "details": {
            "invoice_number": generate_invoice_number(),
            "issue_date": today,
            "due_date": today + timedelta(days=30),
            "payment_terms": terms,
            "notes": "",
        },
        "items": [empty_item("1")],
        "tax": {"rate": 0.0},
        "currency": currency,
        "banking": {"country": ""},
        "payment_links": {"links": [], "global_instructions": ""},
    }
