"""Tests for the HTML preview."""

from invoice_builder.assembly import assemble_invoice
from invoice_builder.preview import items_table_preview_html, payment_preview_html, render_preview_html


def test_sections_in_document_order(invoice) -> None:
    """Header, billing, items, totals, footer appear in PDF order."""
    html = render_preview_html(invoice)
    order = ["INVOICE", "Acme Studio", "Invoice #: INV-00209", "Bill To:", "Globex", "Description",
             "Consulting", "Subtotal:", "Total:", "Payment Instructions:", "Thank you for your business!"]
    positions = [html.index(marker) for marker in order]
    assert positions == sorted(positions)
    assert "Due Date: February 4, 2026" in html
    assert "Terms: Net 30" in html


def test_tax_row_only_with_rate(invoice, form_factory) -> None:
    """The tax row shows for a positive rate only."""
    assert "Tax (10%):" in render_preview_html(invoice)
    assert "Tax (" not in render_preview_html(assemble_invoice(form_factory(tax={"rate": 0})))


def test_payment_block_conditional(invoice, form_factory, us_banking, stripe_link) -> None:
    """No payment markup without options; banking and links when present."""
    assert payment_preview_html(invoice) == ""
    assert "Payment Information:" not in render_preview_html(invoice)

    form = form_factory(banking=us_banking, payment_links={"links": [stripe_link], "global_instructions": ""})
    html = payment_preview_html(assemble_invoice(form))
    assert html.index("Wire Transfer:") < html.index("Online Payment Options:")
    assert 'href="https://pay.example.com/inv-209"' in html
    assert "Pay with Stripe" in html
    assert "Card payments accepted" in html


def test_disabled_link_hidden(form_factory, stripe_link) -> None:
    """Links turned off for the invoice are not previewed."""
    link = dict(stripe_link, is_enabled=False)
    form = form_factory(payment_links={"links": [link], "global_instructions": ""})
    assert payment_preview_html(assemble_invoice(form)) == ""


def test_user_text_escaped(form_factory, sample_form) -> None:
    """Markup typed into the form is shown literally."""
    business = dict(sample_form["business"], name="<b>Acme & Sons</b>")
    html = render_preview_html(assemble_invoice(form_factory(business=business)))
    assert "&lt;b&gt;Acme &amp; Sons&lt;/b&gt;" in html
    assert "<b>Acme" not in html


def test_placeholder_row() -> None:
    """An invoice with no items previews the placeholder row."""
    html = items_table_preview_html(assemble_invoice({}))
    assert "Item description" in html
    assert "$0.00" in html


def test_notes_and_contact(form_factory, sample_form) -> None:
    """Notes are listed line by line and the contact uses the business email."""
    details = dict(sample_form["details"], notes="Line one\nLine two")
    html = render_preview_html(assemble_invoice(form_factory(details=details)))
    assert "Notes:" in html
    assert "Line one<br/>Line two" in html
    assert "please contact billing@acme.test." in html
