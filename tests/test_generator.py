"""End-to-end tests for PDF generation."""

import io

import pytest
from pdfminer.high_level import extract_text
from PyPDF2 import PdfReader

from invoice_builder.assembly import assemble_invoice
from invoice_builder.pdf.generator import PDFGenerationOptions, PdfResult, generate_invoice_pdf
from invoice_builder.snapshot import extract_snapshot


def _text(result: PdfResult) -> str:
    return extract_text(io.BytesIO(result.content))


def test_generates_pdf(invoice) -> None:
    """The sample invoice becomes a one page PDF with its content."""
    result = generate_invoice_pdf(invoice)
    assert result.content.startswith(b"%PDF")
    assert result.filename == "invoice-INV-00209.pdf"
    assert result.page_count == 1
    assert len(PdfReader(io.BytesIO(result.content)).pages) == 1

    text = _text(result)
    for expected in ("INVOICE", "Acme Studio", "Bill To:", "Globex", "Consulting", "Tax (10%):", "$220.00",
                     "Thank you for your business!"):
        assert expected in text
    assert "Page 1 of" not in text


def test_filename_override(invoice) -> None:
    """An explicit filename wins over the invoice number."""
    result = generate_invoice_pdf(invoice, PDFGenerationOptions(filename="custom.pdf"))
    assert result.filename == "custom.pdf"


def test_metadata(invoice) -> None:
    """Title and author come from the invoice."""
    meta = PdfReader(io.BytesIO(generate_invoice_pdf(invoice).content)).metadata
    assert meta.title == "INV-00209"
    assert meta.author == "Acme Studio"


def test_multi_page_has_page_numbers(form_factory) -> None:
    """Long invoices paginate and every page is labelled."""
    items = [{"id": str(i), "description": f"Service {i}", "quantity": 1, "unit_price": 10} for i in range(90)]
    result = generate_invoice_pdf(assemble_invoice(form_factory(items=items)))
    reader = PdfReader(io.BytesIO(result.content))
    assert result.page_count > 1
    assert len(reader.pages) == result.page_count
    for number, page in enumerate(reader.pages, start=1):
        assert f"Page {number} of {result.page_count}" in page.extract_text()


def test_empty_document_still_renders() -> None:
    """An empty document renders placeholders rather than failing."""
    text = _text(generate_invoice_pdf(assemble_invoice({})))
    assert "Your Business Name" in text
    assert "Customer Name" in text
    assert "Item description" in text


def test_letter_page_size(invoice) -> None:
    """The page size option changes the media box."""
    result = generate_invoice_pdf(invoice, PDFGenerationOptions(page_size="LETTER"))
    box = PdfReader(io.BytesIO(result.content)).pages[0].mediabox
    assert float(box.width) == pytest.approx(612, abs=1)


def test_snapshot_embedded(invoice, sample_form) -> None:
    """The form can be embedded and read back from the keywords."""
    result = generate_invoice_pdf(invoice, PDFGenerationOptions(embed_snapshot=sample_form))
    snapshot = extract_snapshot(result.content)
    assert snapshot["details"]["invoice_number"] == "INV-00209"
    assert snapshot["details"]["issue_date"] == "2026-01-05"


@pytest.mark.parametrize("bad", [None, {}, "invoice"])
def test_rejects_non_document(bad) -> None:
    """Anything but an assembled document is a programming error."""
    with pytest.raises(TypeError):
        generate_invoice_pdf(bad)
