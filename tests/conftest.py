"""Shared fixtures for the invoice builder tests."""

import copy
from datetime import date
from typing import Any, Dict

import pytest

from invoice_builder.assembly import assemble_invoice
from invoice_builder.models import InvoiceData
from invoice_builder.pdf.layout import LayoutContext
from invoice_builder.pdf.surface import RecordingSurface

ISSUE = date(2026, 1, 5)
DUE = date(2026, 2, 4)


@pytest.fixture
def sample_form() -> Dict[str, Any]:
    """A complete, valid form: one consulting item at 10% tax."""
    return {
        "business": {
            "name": "Acme Studio",
            "address": "1 Main Street\nSpringfield",
            "phone": "555-0100",
            "email": "billing@acme.test",
        },
        "customer": {"name": "Globex", "address": "9 Side Road", "phone": "", "email": "ap@globex.test"},
        "details": {
            "invoice_number": "INV-00209",
            "issue_date": ISSUE,
            "due_date": DUE,
            "payment_terms": "net_30",
            "notes": "",
        },
        "items": [{"id": "1", "description": "Consulting", "quantity": 2, "unit_price": 100}],
        "tax": {"rate": 10},
        "currency": "USD",
        "banking": {"country": ""},
        "payment_links": {"links": [], "global_instructions": ""},
    }


@pytest.fixture
def form_factory(sample_form):
    """Deep copy of the sample form with top-level sections overridden."""
    def make(**sections) -> Dict[str, Any]:
        form = copy.deepcopy(sample_form)
        form.update(sections)
        return form
    return make


@pytest.fixture
def invoice(sample_form) -> InvoiceData:
    return assemble_invoice(sample_form)


@pytest.fixture
def us_banking() -> Dict[str, Any]:
    return {
        "country": "US",
        "bank_name": "First Bank",
        "routing_number": "123456789",
        "account_number": "000123456",
        "account_holder_name": "Acme Studio LLC",
        "bank_address": "",
    }


@pytest.fixture
def stripe_link() -> Dict[str, Any]:
    return {
        "id": "payment-1",
        "method": "stripe",
        "url": "https://pay.example.com/inv-209",
        "display_name": "",
        "is_enabled": True,
        "instructions": "Card payments accepted",
    }


@pytest.fixture
def ctx() -> LayoutContext:
    return LayoutContext()


@pytest.fixture
def surface(ctx) -> RecordingSurface:
    return RecordingSurface(ctx)
