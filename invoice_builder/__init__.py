"""Invoice builder core: calculations, document model, PDF layout and drafts."""

from .assembly import assemble_invoice, default_form_state
from .calculations import grand_total, line_total, subtotal, tax_amount
from .errors import InvoiceBuilderError, InvoiceGenerationError
from .models import InvoiceData, invoice_totals
from .pdf.generator import PDFGenerationOptions, generate_invoice_pdf

__all__ = [
    "InvoiceBuilderError",
    "InvoiceData",
    "InvoiceGenerationError",
    "PDFGenerationOptions",
    "assemble_invoice",
    "default_form_state",
    "generate_invoice_pdf",
    "grand_total",
    "invoice_totals",
    "line_total",
    "subtotal",
    "tax_amount",
]

__version__ = "0.3.0"
