"""
Layout constants and the layout context threaded through the render stages.

All distances are millimetres, measured down from the top edge of the page.
Tweak spacing here rather than in the stage functions.
"""

from dataclasses import dataclass, field
from typing import Tuple

from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.units import mm

PAGE_SIZES = {"A4": A4, "LETTER": LETTER}

# Table columns as fractions of the content width: description, qty, price, total
TABLE_COLUMNS: Tuple[float, float, float, float] = (0.5, 0.15, 0.175, 0.175)

Color = Tuple[int, int, int]

BLACK: Color = (0, 0, 0)
GREY: Color = (100, 100, 100)
DARK_GREY: Color = (60, 60, 60)
MID_GREY: Color = (80, 80, 80)
LINK_BLUE: Color = (0, 100, 200)
SEPARATOR: Color = (220, 220, 220)
TABLE_RULE: Color = (240, 240, 240)
TOTALS_RULE: Color = (200, 200, 200)


@dataclass(frozen=True)
class Margins:
    top: float = 15
    bottom: float = 15
    left: float = 15
    right: float = 15


@dataclass(frozen=True)
class Spacing:
    # Page-break thresholds: minimum room a stage needs before it starts.
    billing_min: float = 25
    table_min: float = 25
    row_min: float = 6
    totals_min: float = 20
    footer_min: float = 20
    separator_min: float = 10

    # Header
    title_gap: float = 8
    business_name_gap: float = 5
    detail_line: float = 4
    after_header: float = 20
    details_column_width: float = 80

    # Bill to
    bill_to_gap: float = 6
    customer_line: float = 4
    after_billing: float = 6

    # Separators
    after_separator: float = 6

    # Payment information
    payment_heading_gap: float = 15
    payment_subheading_gap: float = 8
    banking_line: float = 5
    after_banking: float = 8
    link_line: float = 6
    link_detail_line: float = 5
    after_link: float = 3
    global_instructions_gap: float = 8
    after_payment: float = 15
    payment_indent: float = 5

    # Item table
    before_table: float = 8
    above_header: float = 4
    after_header_row: float = 6
    after_header_rule: float = 4
    after_row_rule: float = 4
    row_height: float = 4
    before_bottom_rule: float = 2
    after_table: float = 6
    cell_padding: float = 2

    # Totals
    totals_width: float = 70
    totals_value_inset: float = 5
    totals_line: float = 5
    after_totals_rule: float = 4
    after_totals: float = 6

    # Footer
    footer_heading_gap: float = 4
    footer_line: float = 3
    footer_block_gap: float = 4
    notes_line: float = 3
    after_notes: float = 3
    before_thank_you: float = 6
    page_number_offset: float = 10


@dataclass(frozen=True)
class LayoutContext:
    """Page geometry, margins, spacing and fonts; shared read-only by every stage."""

    page_width: float = A4[0] / mm
    page_height: float = A4[1] / mm
    margins: Margins = field(default_factory=Margins)
    spacing: Spacing = field(default_factory=Spacing)
    font: str = "Helvetica"
    bold_font: str = "Helvetica-Bold"
    italic_font: str = "Helvetica-Oblique"

    @classmethod
    def for_page_size(cls, name: str = "A4", **kwargs) -> "LayoutContext":
        width, height = PAGE_SIZES[name.upper()]
        return cls(page_width=width / mm, page_height=height / mm, **kwargs)

    @property
    def left(self) -> float:
        return self.margins.left

    @property
    def right(self) -> float:
        return self.page_width - self.margins.right

    @property
    def content_width(self) -> float:
        return self.right - self.left

    @property
    def bottom_limit(self) -> float:
        return self.page_height - self.margins.bottom

    def remaining(self, y: float) -> float:
        return self.bottom_limit - y

    def columns(self) -> Tuple[float, ...]:
        """Left edge of each table column followed by the table's right edge."""
        edges = [self.left]
        for fraction in TABLE_COLUMNS:
            edges.append(edges[-1] + self.content_width * fraction)
        return tuple(edges)


def ensure_space(surface, ctx: LayoutContext, y: float, required: float) -> float:
    """Start a new page when fewer than ``required`` mm remain below ``y``."""
    if ctx.remaining(y) < required:
        surface.add_page()
        return ctx.margins.top
    return y
