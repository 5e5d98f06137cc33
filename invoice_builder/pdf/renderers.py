"""
Section stages of the invoice PDF.

Each stage takes the surface, the document, the layout context and the
current cursor, draws its section and returns the new cursor. Stages run in
the order of ``STAGES``; a stage starts a new page itself when the room left
is below its threshold.
"""

from typing import Callable, List, Tuple

from ..banking import format_banking_info
from ..currency import format_currency_pdf, format_quantity
from ..models import InvoiceData, LineItem
from ..utils import format_date
from .layout import (
    BLACK,
    DARK_GREY,
    GREY,
    LINK_BLUE,
    MID_GREY,
    SEPARATOR,
    TABLE_RULE,
    TOTALS_RULE,
    Color,
    LayoutContext,
    ensure_space,
)
from .surface import Surface, TextStyle

Stage = Callable[[Surface, InvoiceData, LayoutContext, float], float]

PLACEHOLDER_ITEM = LineItem(id="1", description="Item description", quantity=1, unit_price=0)


def _normal(ctx: LayoutContext, size: float, color: Color = BLACK) -> TextStyle:
    return TextStyle(ctx.font, size, color)


def _bold(ctx: LayoutContext, size: float, color: Color = BLACK) -> TextStyle:
    return TextStyle(ctx.bold_font, size, color)


def _italic(ctx: LayoutContext, size: float, color: Color = BLACK) -> TextStyle:
    return TextStyle(ctx.italic_font, size, color)


def _separator(surface: Surface, ctx: LayoutContext, y: float) -> float:
    y = ensure_space(surface, ctx, y, ctx.spacing.separator_min)
    surface.line(ctx.left, y, ctx.right, y, SEPARATOR, 0.3)
    return y + ctx.spacing.after_separator


def _party_lines(party) -> List[str]:
    lines = [ln.strip() for ln in (party.address or "").splitlines() if ln.strip()]
    if party.phone:
        lines.append(f"Phone: {party.phone}")
    if party.email:
        lines.append(f"Email: {party.email}")
    return lines


# ---- Header ----

def render_header(surface: Surface, data: InvoiceData, ctx: LayoutContext, y: float) -> float:
    sp = ctx.spacing
    left_y = y
    surface.text(ctx.left, left_y, "INVOICE", _bold(ctx, 20))
    left_y += sp.title_gap
    text_width = ctx.content_width - sp.details_column_width
    name_style = _bold(ctx, 11)
    surface.text(ctx.left, left_y, surface.fit_text(data.business.name or "Your Business Name", name_style, text_width),
                 name_style)
    left_y += sp.business_name_gap
    for line in _party_lines(data.business):
        surface.text(ctx.left, left_y, surface.fit_text(line, _normal(ctx, 9), text_width), _normal(ctx, 9))
        left_y += sp.detail_line

    d = data.details
    right_y = y
    details = [
        (f"Invoice #: {d.invoice_number}", _bold(ctx, 9)),
        (f"Issue Date: {format_date(d.issue_date)}", _normal(ctx, 9)),
        (f"Due Date: {format_date(d.due_date)}", _normal(ctx, 9)),
        (f"Terms: {d.payment_terms_label}", _normal(ctx, 9)),
    ]
    for text, style in details:
        surface.text(ctx.right, right_y, text, style, align="right")
        right_y += sp.detail_line

    # Long business blocks push the next section down instead of overlapping it.
    return max(y + sp.after_header, left_y + sp.detail_line, right_y + sp.detail_line)


# ---- Bill to ----

def render_billing(surface: Surface, data: InvoiceData, ctx: LayoutContext, y: float) -> float:
    sp = ctx.spacing
    y = ensure_space(surface, ctx, y, sp.billing_min)
    surface.text(ctx.left, y, "Bill To:", _bold(ctx, 10))
    y += sp.bill_to_gap

    name_style = _bold(ctx, 9)
    surface.text(ctx.left, y, surface.fit_text(data.customer.name or "Customer Name", name_style, ctx.content_width),
                 name_style)
    y += sp.customer_line
    for line in _party_lines(data.customer):
        surface.text(ctx.left, y, surface.fit_text(line, _normal(ctx, 9), ctx.content_width), _normal(ctx, 9))
        y += sp.customer_line
    return y + sp.after_billing


# ---- Payment information ----

def _render_banking(surface: Surface, data: InvoiceData, ctx: LayoutContext, y: float) -> float:
    sp = ctx.spacing
    y = ensure_space(surface, ctx, y, sp.payment_subheading_gap + sp.banking_line)
    surface.text(ctx.left, y, "Wire Transfer:", _bold(ctx, 12))
    y += sp.payment_subheading_gap
    for line in format_banking_info(data.banking_info):
        y = ensure_space(surface, ctx, y, sp.row_min)
        surface.text(ctx.left + sp.payment_indent, y, line, _normal(ctx, 10))
        y += sp.banking_line
    return y + sp.after_banking


def _render_links(surface: Surface, data: InvoiceData, ctx: LayoutContext, y: float) -> float:
    sp = ctx.spacing
    x = ctx.left + sp.payment_indent
    width = ctx.content_width - sp.payment_indent
    y = ensure_space(surface, ctx, y, sp.payment_subheading_gap + sp.link_line)
    surface.text(ctx.left, y, "Online Payment Options:", _bold(ctx, 12))
    y += sp.payment_subheading_gap

    for link in data.payment_links.enabled_links():
        y = ensure_space(surface, ctx, y, sp.link_line + sp.link_detail_line)
        label = f"• {link.label}"
        label_style = _bold(ctx, 10, LINK_BLUE)
        surface.text(x, y, label, label_style)
        if link.url:
            surface.link(link.url, x, y - 4, surface.text_width(label, label_style), 6)
        y += sp.link_line

        url_style = _normal(ctx, 9, GREY)
        surface.text(x, y, surface.fit_text(f"   {link.url}", url_style, width), url_style)
        y += sp.link_detail_line

        if link.instructions:
            style = _italic(ctx, 9, MID_GREY)
            for line in surface.wrap_text(link.instructions, style, width - 5):
                y = ensure_space(surface, ctx, y, sp.row_min)
                surface.text(x, y, f"   {line}", style)
                y += sp.link_detail_line
        y += sp.after_link
    return y


def render_payment(surface: Surface, data: InvoiceData, ctx: LayoutContext, y: float) -> float:
    """Wire transfer details and online payment links; draws nothing when neither is present."""
    if not data.has_payment_section():
        return y

    sp = ctx.spacing
    y = _separator(surface, ctx, y)
    y = ensure_space(surface, ctx, y, sp.payment_heading_gap + sp.banking_line)
    surface.text(ctx.left, y, "Payment Information:", _bold(ctx, 14))
    y += sp.payment_heading_gap

    if data.banking_info is not None:
        y = _render_banking(surface, data, ctx, y)
    links = data.payment_links
    if links is not None and links.enabled_links():
        y = _render_links(surface, data, ctx, y)
    if links is not None and links.global_instructions:
        style = _italic(ctx, 10, DARK_GREY)
        x = ctx.left + sp.payment_indent
        for line in surface.wrap_text(links.global_instructions, style, ctx.content_width - sp.payment_indent):
            y = ensure_space(surface, ctx, y, sp.row_min)
            surface.text(x, y, line, style)
            y += sp.banking_line
        y += sp.global_instructions_gap - sp.banking_line
    return y + sp.after_payment


# ---- Item table ----

def _cell_positions(ctx: LayoutContext) -> Tuple[float, float, float, float]:
    """x and alignment anchor of each column: description, qty (centre), price, total (right)."""
    edges = ctx.columns()
    pad = ctx.spacing.cell_padding
    return edges[0], (edges[1] + edges[2]) / 2, edges[3] - pad, edges[4] - pad


def _table_rule(surface: Surface, ctx: LayoutContext, y: float) -> None:
    surface.line(ctx.left, y, ctx.right, y, TABLE_RULE, 0.2)


def render_table(surface: Surface, data: InvoiceData, ctx: LayoutContext, y: float) -> float:
    sp = ctx.spacing
    y = ensure_space(surface, ctx, y, sp.table_min)
    y += sp.before_table + sp.above_header

    desc_x, qty_x, price_x, total_x = _cell_positions(ctx)
    header = _bold(ctx, 9)
    surface.text(desc_x, y, "Description", header)
    surface.text(qty_x, y, "Qty", header, align="center")
    surface.text(price_x, y, "Price", header, align="right")
    surface.text(total_x, y, "Total", header, align="right")
    y += sp.after_header_row
    _table_rule(surface, ctx, y)
    y += sp.after_header_rule

    edges = ctx.columns()
    desc_width = edges[1] - edges[0] - sp.cell_padding
    row = _normal(ctx, 8)
    items = data.items or [PLACEHOLDER_ITEM]
    for i, item in enumerate(items):
        y = ensure_space(surface, ctx, y, sp.row_min)
        if i > 0:
            _table_rule(surface, ctx, y)
            y += sp.after_row_rule
        surface.text(desc_x, y, surface.fit_text(item.description, row, desc_width), row)
        surface.text(qty_x, y, format_quantity(item.quantity), row, align="center")
        surface.text(price_x, y, format_currency_pdf(item.unit_price, data.currency), row, align="right")
        surface.text(total_x, y, format_currency_pdf(item.total, data.currency), row, align="right")
        y += sp.row_height

    y += sp.before_bottom_rule
    _table_rule(surface, ctx, y)
    return y + sp.after_table


# ---- Totals ----

def render_totals(surface: Surface, data: InvoiceData, ctx: LayoutContext, y: float) -> float:
    sp = ctx.spacing
    y = ensure_space(surface, ctx, y, sp.totals_min)
    label_x = ctx.right - sp.totals_width
    value_x = ctx.right - sp.totals_value_inset
    calc = data.calculations

    rows = [("Subtotal:", calc.subtotal)]
    if data.tax.rate > 0:
        rows.append((f"Tax ({format_quantity(data.tax.rate)}%):", calc.tax_amount))
    for label, amount in rows:
        surface.text(label_x, y, label, _normal(ctx, 9))
        surface.text(value_x, y, format_currency_pdf(amount, data.currency), _normal(ctx, 9), align="right")
        y += sp.totals_line

    surface.line(label_x, y, value_x, y, TOTALS_RULE, 0.3)
    y += sp.after_totals_rule
    surface.text(label_x, y, "Total:", _bold(ctx, 10))
    surface.text(value_x, y, format_currency_pdf(calc.total, data.currency), _bold(ctx, 10), align="right")
    return y + sp.after_totals


# ---- Footer ----

def render_footer(surface: Surface, data: InvoiceData, ctx: LayoutContext, y: float) -> float:
    sp = ctx.spacing
    y = ensure_space(surface, ctx, y, sp.footer_min)
    surface.line(ctx.left, y, ctx.right, y, SEPARATOR, 0.3)
    y += sp.after_separator

    surface.text(ctx.left, y, "Payment Instructions:", _bold(ctx, 9))
    y += sp.footer_heading_gap
    body = _normal(ctx, 8)
    surface.text(ctx.left, y, "Please remit payment by the due date specified above.", body)
    y += sp.footer_line
    contact = data.business.email or "your business email"
    surface.text(ctx.left, y, f"For questions regarding this invoice, please contact {contact}.", body)
    y += sp.footer_block_gap

    if data.details.notes:
        y = ensure_space(surface, ctx, y, sp.row_min)
        surface.text(ctx.left, y, "Notes:", _bold(ctx, 8))
        y += sp.notes_line
        for line in surface.wrap_text(data.details.notes, body, ctx.content_width):
            y = ensure_space(surface, ctx, y, sp.row_min)
            surface.text(ctx.left, y, line, body)
            y += sp.notes_line
        y += sp.after_notes

    y = ensure_space(surface, ctx, y + sp.before_thank_you, sp.row_min)
    surface.text(ctx.page_width / 2, y, "Thank you for your business!", _normal(ctx, 8, GREY), align="center")
    return y


STAGES: Tuple[Stage, ...] = (
    render_header,
    render_billing,
    render_payment,
    render_table,
    render_totals,
    render_footer,
)


def render_invoice(surface: Surface, data: InvoiceData, ctx: LayoutContext) -> float:
    """Run every stage from the top margin of the first page; returns the final cursor."""
    y = ctx.margins.top
    for stage in STAGES:
        y = stage(surface, data, ctx, y)
    return y


def draw_page_number(surface: Surface, number: int, total: int) -> None:
    ctx = surface.ctx
    surface.text(ctx.right, ctx.page_height - ctx.spacing.page_number_offset,
                 f"Page {number} of {total}", _normal(ctx, 8, GREY), align="right")
