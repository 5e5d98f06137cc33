"""Run the render stages on a ReportLab canvas and return the finished PDF."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..logs import logger
from ..models import InvoiceData
from ..snapshot import encode_snapshot
from .layout import LayoutContext
from .renderers import draw_page_number, render_invoice
from .surface import CanvasSurface

log = logger(__name__)

PDF_CREATOR = "Invoice Builder"


@dataclass
class PDFGenerationOptions:
    filename: Optional[str] = None
    page_size: str = "A4"
    # Form state to embed in the PDF keywords so the invoice can be re-imported.
    embed_snapshot: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class PdfResult:
    content: bytes
    filename: str
    page_count: int


def invoice_filename(data: InvoiceData) -> str:
    return f"invoice-{data.details.invoice_number}.pdf"


def generate_invoice_pdf(data: InvoiceData, options: Optional[PDFGenerationOptions] = None) -> PdfResult:
    """
    Draw ``data`` as a PDF.

    ``data`` must already be assembled; anything else is a programming error
    and raises ``TypeError`` before any drawing starts. Page labels are only
    stamped when the invoice runs over more than one page.
    """
    if not isinstance(data, InvoiceData):
        raise TypeError(f"generate_invoice_pdf expects InvoiceData, got {type(data).__name__}")
    options = options or PDFGenerationOptions()

    ctx = LayoutContext.for_page_size(options.page_size)
    keywords = encode_snapshot(options.embed_snapshot) if options.embed_snapshot is not None else ""
    surface = CanvasSurface(
        ctx,
        title=data.details.invoice_number or "Invoice",
        author=data.business.name or PDF_CREATOR,
        subject="Invoice",
        creator=PDF_CREATOR,
        keywords=keywords,
    )
    render_invoice(surface, data, ctx)
    pages = surface.page_count
    content = surface.finish(draw_page_number if pages > 1 else None)

    filename = options.filename or invoice_filename(data)
    log.info("Generated %s: %d page(s), %d bytes", filename, pages, len(content))
    return PdfResult(content=content, filename=filename, page_count=pages)
