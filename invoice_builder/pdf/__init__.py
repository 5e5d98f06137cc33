"""PDF export: layout context, drawing surfaces, section stages and the generator."""

from .generator import PDFGenerationOptions, PdfResult, generate_invoice_pdf
from .layout import LayoutContext
from .surface import CanvasSurface, RecordingSurface

__all__ = [
    "CanvasSurface",
    "LayoutContext",
    "PDFGenerationOptions",
    "PdfResult",
    "RecordingSurface",
    "generate_invoice_pdf",
]
