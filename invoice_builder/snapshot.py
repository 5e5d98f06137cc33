"""
Form snapshot embedded in exported PDFs.

The form state is stored in the PDF keywords as ``INVOICER_V2:<payload>``
where the payload is base64 of zlib-compressed JSON. Uploading an exported
invoice restores the form with the next invoice number and fresh dates.
"""

import base64
import binascii
import io
import json
import zlib
from datetime import date, timedelta
from typing import Any, Dict, Mapping, Optional

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from .assembly import default_form_state, form_section
from .logs import logger
from .utils import json_default, next_invoice_number, to_date

log = logger(__name__)

INVOICER_META_TAG = "INVOICER_V2"


def encode_snapshot(form: Mapping[str, Any]) -> str:
    raw = json.dumps(form, default=json_default, separators=(",", ":")).encode("utf-8")
    payload = base64.urlsafe_b64encode(zlib.compress(raw, 9)).decode("ascii")
    return f"{INVOICER_META_TAG}:{payload}"


def decode_snapshot(keywords: Optional[str]) -> Optional[Dict[str, Any]]:
    """Form dict from a keywords string, or None when there is no readable snapshot."""
    if not keywords:
        return None
    tag = f"{INVOICER_META_TAG}:"
    start = keywords.find(tag)
    if start < 0:
        return None
    rest = keywords[start + len(tag):].split()
    payload = rest[0] if rest else ""
    try:
        data = json.loads(zlib.decompress(base64.urlsafe_b64decode(payload.encode("ascii"))))
    except (binascii.Error, zlib.error, ValueError) as e:
        log.warning("Ignoring unreadable invoice snapshot: %s", e)
        return None
    return data if isinstance(data, dict) else None


def extract_snapshot(pdf_bytes: bytes) -> Optional[Dict[str, Any]]:
    """Read the embedded form back from an exported PDF."""
    try:
        meta = PdfReader(io.BytesIO(pdf_bytes)).metadata
    except (PdfReadError, ValueError, OSError) as e:
        log.warning("Could not read PDF metadata: %s", e)
        return None
    if not meta:
        return None
    return decode_snapshot(meta.get("/Keywords"))


def prefill_from_snapshot(snapshot: Mapping[str, Any], settings=None, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Form state for a new invoice based on a previous one.

    Parties, items, tax, currency and payment details are kept; the invoice
    number is incremented and the dates move to ``today`` keeping the same
    payment window.
    """
    today = today or date.today()
    form = default_form_state(settings, today=today)
    for key in ("business", "customer", "tax", "banking", "payment_links"):
        section = form_section(snapshot, key)
        if section:
            form[key] = dict(section)
    if isinstance(snapshot.get("items"), list) and snapshot["items"]:
        form["items"] = [dict(it) for it in snapshot["items"] if isinstance(it, Mapping)] or form["items"]
    if snapshot.get("currency"):
        form["currency"] = snapshot["currency"]

    details = form_section(snapshot, "details")
    issued, due = to_date(details.get("issue_date")), to_date(details.get("due_date"))
    window = (due - issued).days if issued and due and due >= issued else 30
    form["details"].update({
        "invoice_number": next_invoice_number(str(details.get("invoice_number") or "")),
        "issue_date": today,
        "due_date": today + timedelta(days=window),
        "payment_terms": details.get("payment_terms") or form["details"]["payment_terms"],
        "notes": details.get("notes") or "",
    })
    return form
