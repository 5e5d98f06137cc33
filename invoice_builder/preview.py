"""HTML preview of an ``InvoiceData``, laid out in the same order as the PDF."""

import html
from typing import List

from .banking import format_banking_info
from .currency import format_currency, format_quantity
from .models import InvoiceData
from .pdf.renderers import PLACEHOLDER_ITEM
from .utils import format_date

CELL = "padding:6px; border-bottom:1px solid #f0f0f0;"


def _lines(*values: str) -> str:
    return "<br/>".join(html.escape(v) for v in values if v)


def _party_html(party) -> List[str]:
    lines = [ln.strip() for ln in (party.address or "").splitlines() if ln.strip()]
    if party.phone:
        lines.append(f"Phone: {party.phone}")
    if party.email:
        lines.append(f"Email: {party.email}")
    return lines


def items_table_preview_html(data: InvoiceData) -> str:
    cur = data.currency
    rows = []
    for it in data.items or [PLACEHOLDER_ITEM]:
        rows.append(f"""
        <tr>
            <td style="{CELL}">{html.escape(it.description)}</td>
            <td style="{CELL} text-align:center;">{format_quantity(it.quantity)}</td>
            <td style="{CELL} text-align:right;">{html.escape(format_currency(it.unit_price, cur))}</td>
            <td style="{CELL} text-align:right;">{html.escape(format_currency(it.total, cur))}</td>
        </tr>
        """)
    return f"""
    <table style="border-collapse:collapse; width:100%; font-size:12px;">
        <thead>
            <tr style="border-bottom:1px solid #f0f0f0;">
                <th style="padding:6px; text-align:left; width:50%;">Description</th>
                <th style="padding:6px; text-align:center; width:15%;">Qty</th>
                <th style="padding:6px; text-align:right; width:17.5%;">Price</th>
                <th style="padding:6px; text-align:right; width:17.5%;">Total</th>
            </tr>
        </thead>
        <tbody>{''.join(rows)}</tbody>
    </table>
    """


def payment_preview_html(data: InvoiceData) -> str:
    """Payment information block; empty when there is nothing to show."""
    if not data.has_payment_section():
        return ""
    parts = ['<hr style="border:none; border-top:1px solid #dcdcdc;"/>',
             '<div style="font-size:16px; font-weight:bold; margin:8px 0;">Payment Information:</div>']
    if data.banking_info is not None:
        parts.append('<div style="font-weight:bold; margin-top:6px;">Wire Transfer:</div>')
        parts.append(f'<div style="padding-left:12px;">{_lines(*format_banking_info(data.banking_info))}</div>')
    links = data.payment_links
    if links is not None and links.enabled_links():
        parts.append('<div style="font-weight:bold; margin-top:8px;">Online Payment Options:</div>')
        for link in links.enabled_links():
            url = html.escape(link.url, quote=True)
            parts.append(f"""
            <div style="padding-left:12px; margin-bottom:6px;">
              <a href="{url}" target="_blank" style="color:#0064c8; font-weight:bold;">&bull; {html.escape(link.label)}</a><br/>
              <span style="color:#646464; font-size:11px;">{html.escape(link.url)}</span>
              {f'<br/><em style="color:#505050; font-size:11px;">{html.escape(link.instructions)}</em>' if link.instructions else ''}
            </div>
            """)
    if links is not None and links.global_instructions:
        parts.append(f'<div style="padding-left:12px; color:#3c3c3c;"><em>{html.escape(links.global_instructions)}</em></div>')
    return "\n".join(parts)


def render_preview_html(data: InvoiceData) -> str:
    d = data.details
    calc = data.calculations
    cur = data.currency

    header_html = f"""
    <div style="display:flex; justify-content:space-between; gap:20px; align-items:flex-start;">
      <div style="flex:1;">
        <div style="font-size:26px; font-weight:bold;">INVOICE</div>
        <div style="font-weight:bold;">{html.escape(data.business.name or 'Your Business Name')}</div>
        <div style="font-size:12px;">{_lines(*_party_html(data.business))}</div>
      </div>
      <div style="text-align:right; min-width:220px; font-size:12px;">
        <div><strong>Invoice #: {html.escape(d.invoice_number)}</strong></div>
        <div>Issue Date: {format_date(d.issue_date)}</div>
        <div>Due Date: {format_date(d.due_date)}</div>
        <div>Terms: {html.escape(d.payment_terms_label)}</div>
      </div>
    </div>
    <div style="margin-top:16px;">
      <div><strong>Bill To:</strong></div>
      <div style="font-weight:bold; font-size:12px;">{html.escape(data.customer.name or 'Customer Name')}</div>
      <div style="font-size:12px;">{_lines(*_party_html(data.customer))}</div>
    </div>
    """

    totals_rows = [
        f"<tr><td style='padding:4px;'>Subtotal:</td>"
        f"<td style='padding:4px; text-align:right;'>{html.escape(format_currency(calc.subtotal, cur))}</td></tr>"
    ]
    if data.tax.rate > 0:
        totals_rows.append(
            f"<tr><td style='padding:4px;'>Tax ({format_quantity(data.tax.rate)}%):</td>"
            f"<td style='padding:4px; text-align:right;'>{html.escape(format_currency(calc.tax_amount, cur))}</td></tr>"
        )
    totals_rows.append(
        f"<tr style='border-top:1px solid #c8c8c8;'><td style='padding:4px; font-weight:bold;'>Total:</td>"
        f"<td style='padding:4px; text-align:right; font-weight:bold;'>{html.escape(format_currency(calc.total, cur))}</td></tr>"
    )
    totals_html = f"""
    <table style="border-collapse:collapse; width:100%; max-width:280px; float:right; font-size:12px;">
        <tbody>
            {''.join(totals_rows)}
        </tbody>
    </table>
    <div style="clear:both;"></div>
    """

    notes_html = ""
    if d.notes:
        notes_html = f"<div style='margin-top:6px;'><strong>Notes:</strong><br/>{_lines(*d.notes.splitlines())}</div>"
    contact = data.business.email or "your business email"
    footer_html = f"""
    <hr style="border:none; border-top:1px solid #dcdcdc;"/>
    <div style="font-size:11px;">
      <strong>Payment Instructions:</strong><br/>
      Please remit payment by the due date specified above.<br/>
      For questions regarding this invoice, please contact {html.escape(contact)}.
      {notes_html}
    </div>
    <div style="text-align:center; color:#646464; font-size:11px; margin-top:16px;">Thank you for your business!</div>
    """

    return f"""
    <div style="font-family: Arial, sans-serif; font-size:14px; color:#000;">
      {header_html}
      {payment_preview_html(data)}
      <br/>
      {items_table_preview_html(data)}
      <br/>
      {totals_html}
      {footer_html}
    </div>
    """
