"""Unit tests for assembling the document model from form state."""

from datetime import date

import pytest

from invoice_builder.assembly import assemble_invoice, collect_banking, collect_payment_links, default_form_state
from invoice_builder.config import Settings
from invoice_builder.models import USBankingInfo


def test_worked_example(invoice) -> None:
    """Consulting 2 x 100 at 10% gives 200 / 20 / 220."""
    assert invoice.items[0].total == 200
    assert invoice.calculations.subtotal == 200
    assert invoice.calculations.tax_amount == pytest.approx(20)
    assert invoice.calculations.total == pytest.approx(220)
    assert invoice.details.issue_date == date(2026, 1, 5)


def test_assembly_is_idempotent(sample_form) -> None:
    """The same form always produces an equal document."""
    assert assemble_invoice(sample_form) == assemble_invoice(sample_form)


def test_empty_form() -> None:
    """Missing sections produce an empty but valid document."""
    data = assemble_invoice({})
    assert data.items == []
    assert data.calculations.total == 0
    assert data.banking_info is None
    assert data.payment_links is None
    assert data.currency == "USD"


def test_half_typed_numbers(form_factory) -> None:
    """Invalid numbers in items count as zero instead of failing."""
    form = form_factory(items=[
        {"id": "a", "description": "x", "quantity": "", "unit_price": "12"},
        {"description": "y", "quantity": "-1", "unit_price": "abc"},
        "not an item",
    ])
    data = assemble_invoice(form)
    assert [it.total for it in data.items] == [0, 0]
    assert data.items[1].id == "item-2"


def test_iso_dates_from_drafts(form_factory, sample_form) -> None:
    """Dates stored as ISO strings are parsed back."""
    details = dict(sample_form["details"], issue_date="2026-01-05", due_date="bad")
    data = assemble_invoice(form_factory(details=details))
    assert data.details.issue_date == date(2026, 1, 5)
    assert data.details.due_date is None


def test_unknown_currency_falls_back(form_factory) -> None:
    """Unsupported currency codes use the default currency."""
    assert assemble_invoice(form_factory(currency="xyz")).currency == "USD"
    assert assemble_invoice(form_factory(currency="eur")).currency == "EUR"


class TestBanking:
    """Conditional inclusion of wire transfer details."""

    def test_included_when_filled(self, form_factory, us_banking) -> None:
        """A country with entered fields yields the matching variant."""
        data = assemble_invoice(form_factory(banking=us_banking))
        assert isinstance(data.banking_info, USBankingInfo)
        assert data.banking_info.routing_number == "123456789"

    def test_omitted_without_country(self, us_banking) -> None:
        """No selected country means no banking block."""
        assert collect_banking(dict(us_banking, country="")) is None

    def test_omitted_when_blank(self) -> None:
        """A country with only blank fields is omitted."""
        assert collect_banking({"country": "UK", "bank_name": "  "}) is None

    def test_other_country_fields_dropped(self, us_banking) -> None:
        """Only the selected country's fields are kept."""
        block = collect_banking(dict(us_banking, iban="DE89370400440532013000"))
        assert "iban" not in block


class TestPaymentLinks:
    """Conditional inclusion of online payment links."""

    def test_included_when_enabled(self, form_factory, stripe_link) -> None:
        """An enabled link produces a payment links block."""
        data = assemble_invoice(form_factory(payment_links={"links": [stripe_link], "global_instructions": "Thanks"}))
        assert data.payment_links.enabled_links()[0].url == "https://pay.example.com/inv-209"
        assert data.payment_links.global_instructions == "Thanks"
        assert data.has_payment_section()

    def test_omitted_when_all_disabled(self, stripe_link) -> None:
        """Disabled links alone do not create a block."""
        assert collect_payment_links({"links": [dict(stripe_link, is_enabled=False)]}) is None

    def test_unknown_methods_skipped(self, stripe_link) -> None:
        """Links with an unsupported method are ignored."""
        block = collect_payment_links({"links": [dict(stripe_link, method="bitcoin"), stripe_link]})
        assert [link["method"] for link in block["links"]] == ["stripe"]


def test_default_form_state() -> None:
    """A new form has one empty item and a 30 day payment window."""
    today = date(2026, 3, 1)
    form = default_form_state(Settings(default_currency="EUR"), today=today)
    assert len(form["items"]) == 1
    assert form["items"][0]["quantity"] == 1
    assert form["details"]["due_date"] == date(2026, 3, 31)
    assert form["details"]["payment_terms"] == "net_30"
    assert form["details"]["invoice_number"].startswith("INV-")
    assert form["currency"] == "EUR"
