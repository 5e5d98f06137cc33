"""Small helpers shared by the form, the preview and the PDF."""

import random
import re
import time
import uuid
from datetime import date, datetime
from typing import Any, Optional


def generate_invoice_number() -> str:
    """``INV-<epoch ms>-<3 digits>``."""
    return f"INV-{int(time.time() * 1000)}-{random.randint(0, 999):03d}"


def generate_id(prefix: str = "item") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def next_invoice_number(s: str) -> str:
    """
    Increment the trailing number while preserving any prefix and zero padding.
    e.g., 'INV-00209' -> 'INV-00210', '2025-9' -> '2025-10'.
    If no trailing digits, append '-1'.
    """
    if not s:
        return "INV-1"
    m = re.search(r'(.*?)(\d+)$', s)
    if not m:
        return f"{s}-1"
    prefix, digits = m.group(1), m.group(2)
    n = int(digits) + 1
    return f"{prefix}{n:0{len(digits)}d}"


def to_date(x: Any) -> Optional[date]:
    """Accept a date, datetime or ISO string (as stored in drafts); anything else is None."""
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    if isinstance(x, str) and x.strip():
        s = x.strip()
        try:
            return date.fromisoformat(s[:10])
        except ValueError:
            return None
    return None


def format_date(d: Optional[date]) -> str:
    """``January 5, 2026``; a missing date renders as ``--``."""
    if not isinstance(d, date):
        return "--"
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def to_bool(x: Any) -> bool:
    if isinstance(x, bool):
        return x
    s = str(x or "").strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


def clean_str(x: Any) -> str:
    return "" if x is None else str(x)


def json_default(o: Any) -> Any:
    """``json.dumps`` hook for form state: dates become ISO strings."""
    if isinstance(o, (date, datetime)):
        return o.isoformat()
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")
