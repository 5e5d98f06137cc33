# invoicer.py
# Streamlit Invoice Builder: live form, HTML preview, PDF export and draft autosave

import streamlit as st
import streamlit.components.v1 as components
import time
import uuid
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from invoice_builder.assembly import assemble_invoice, default_form_state, empty_item
from invoice_builder.banking import BANKING_FIELD_LABELS, BANKING_REQUIREMENTS, banking_fields
from invoice_builder.calculations import line_total
from invoice_builder.config import get_settings
from invoice_builder.currency import all_currencies, format_currency
from invoice_builder.errors import InvoiceGenerationError
from invoice_builder.logs import logger, set_level
from invoice_builder.models import (
    COUNTRY_NAMES,
    DEFAULT_PAYMENT_CONFIGS,
    PAYMENT_METHOD_NAMES,
    PAYMENT_TERMS_OPTIONS,
    PaymentMethod,
)
from invoice_builder.pdf.generator import PDFGenerationOptions, generate_invoice_pdf
from invoice_builder.preview import render_preview_html
from invoice_builder.snapshot import extract_snapshot, prefill_from_snapshot
from invoice_builder.storage import DraftAutosaver, FileStore, FormStorage, MemoryStore, cleanup_expired
from invoice_builder.utils import generate_id, to_date
from invoice_builder.validation import prepare_export, validate_form

settings = get_settings()
set_level(settings.log_level)
log = logger("invoicer")

# ---- Persistence (drafts keyed by user key) ----

@st.cache_resource
def get_store():
    store = FileStore(settings.storage_dir) if settings.storage_dir else MemoryStore()
    cleanup_expired(store, settings.draft_expiration_hours)
    return store

def get_storage(userkey: str) -> FormStorage:
    return FormStorage(
        get_store(), userkey,
        expiration_hours=settings.draft_expiration_hours,
        max_size=settings.draft_max_size,
    )

def get_autosaver() -> Optional[DraftAutosaver]:
    userkey = st.session_state.get("userkey", "").strip()
    if not userkey:
        return None
    saver = st.session_state.get("_autosaver")
    if saver is None or saver.storage.key != get_storage(userkey).key:
        saver = DraftAutosaver(get_storage(userkey), debounce_seconds=settings.autosave_debounce_seconds)
        st.session_state._autosaver = saver
    return saver

def hydrate_form(stored: Dict[str, Any]) -> Dict[str, Any]:
    """Stored drafts keep dates as ISO strings; bring them back to ``date`` for the widgets."""
    form = default_form_state(settings)
    for key in form:
        if key in stored and stored[key] is not None:
            form[key] = stored[key]
    details = dict(form.get("details") or {})
    today = date.today()
    details["issue_date"] = to_date(details.get("issue_date")) or today
    details["due_date"] = to_date(details.get("due_date")) or details["issue_date"] + timedelta(days=30)
    form["details"] = details
    return form

def replace_form(form: Dict[str, Any]):
    st.session_state.form = form
    st.session_state.form_rev += 1
    st.session_state.pdf_result = None

# ---- Utilities ----

def _k(name: str) -> str:
    # widget keys change whenever the whole form is replaced so widgets pick up the new values
    return f"{name}__{st.session_state.form_rev}"

def ensure_session():
    if "userkey" not in st.session_state:
        st.session_state.userkey = ""
    if "entered" not in st.session_state:
        st.session_state.entered = False
    if "form" not in st.session_state:
        st.session_state.form = default_form_state(settings)
    if "form_rev" not in st.session_state:
        st.session_state.form_rev = 0
    if "show_errors" not in st.session_state:
        st.session_state.show_errors = False
    if "pdf_result" not in st.session_state:
        st.session_state.pdf_result = None

def current_errors() -> Dict[str, List[str]]:
    if not st.session_state.show_errors:
        return {}
    return validate_form(st.session_state.form)

def show_errors(errors: Dict[str, List[str]], path: str):
    for msg in errors.get(path, []):
        st.caption(f":red[{msg}]")

# ---- Form sections ----

def party_inputs(section: Dict[str, Any], prefix: str, label: str, errors):
    section["name"] = st.text_input(f"{label} Name *", section.get("name", ""), key=_k(f"{prefix}_name"))
    show_errors(errors, f"{prefix}.name")
    section["address"] = st.text_area(f"{label} Address", section.get("address", ""), key=_k(f"{prefix}_address"), height=80)
    show_errors(errors, f"{prefix}.address")
    c1, c2 = st.columns(2)
    with c1:
        section["phone"] = st.text_input("Phone", section.get("phone", ""), key=_k(f"{prefix}_phone"))
        show_errors(errors, f"{prefix}.phone")
    with c2:
        section["email"] = st.text_input("Email", section.get("email", ""), key=_k(f"{prefix}_email"))
        show_errors(errors, f"{prefix}.email")

def details_section(form: Dict[str, Any], errors):
    details = form["details"]
    details["invoice_number"] = st.text_input("Invoice Number *", details.get("invoice_number", ""), key=_k("invoice_number"))
    show_errors(errors, "details.invoice_number")

    c1, c2, c3 = st.columns(3)
    with c1:
        details["issue_date"] = st.date_input("Issue Date *", to_date(details.get("issue_date")) or date.today(), key=_k("issue_date"))
        show_errors(errors, "details.issue_date")
    with c2:
        details["due_date"] = st.date_input("Due Date *", to_date(details.get("due_date")) or date.today(), key=_k("due_date"))
        show_errors(errors, "details.due_date")
    with c3:
        keys = list(PAYMENT_TERMS_OPTIONS)
        current = details.get("payment_terms") or settings.default_payment_terms
        details["payment_terms"] = st.selectbox(
            "Payment Terms *", keys,
            index=keys.index(current) if current in keys else keys.index(settings.default_payment_terms),
            format_func=PAYMENT_TERMS_OPTIONS.get, key=_k("payment_terms"),
        )
        show_errors(errors, "details.payment_terms")

def items_section(form: Dict[str, Any], errors):
    items = form["items"]
    currency = form.get("currency") or settings.default_currency
    for idx, it in enumerate(items):
        item_id = it.get("id") or str(idx)
        cA, cB, cC, cD, cE = st.columns([4, 1.3, 1.6, 1.6, 0.8])
        it["description"] = cA.text_input("Description", it.get("description", ""), key=_k(f"desc_{item_id}"),
                                          placeholder="Description of item or service")
        it["quantity"] = cB.number_input("Qty", min_value=0.0, value=float(it.get("quantity") or 0.0),
                                         step=1.0, key=_k(f"qty_{item_id}"))
        it["unit_price"] = cC.number_input("Unit Price", min_value=0.0, value=float(it.get("unit_price") or 0.0),
                                           step=1.0, format="%.2f", key=_k(f"price_{item_id}"))
        cD.markdown("<div style='height: 1.95rem'></div>", unsafe_allow_html=True)
        cD.write(format_currency(line_total(it["quantity"], it["unit_price"]), currency))
        cE.markdown("<div style='height: 1.95rem'></div>", unsafe_allow_html=True)
        if len(items) > 1 and cE.button("✕", key=_k(f"rm_{item_id}"), help="Remove item"):
            items.pop(idx)
            st.rerun()
        for field in ("description", "quantity", "unit_price"):
            show_errors(errors, f"items.{idx}.{field}")
    show_errors(errors, "items")

    if st.button("Add Item"):
        items.append(empty_item(generate_id()))
        st.rerun()

def tax_currency_section(form: Dict[str, Any], errors):
    c1, c2 = st.columns(2)
    with c1:
        rate = form["tax"].get("rate") or 0.0
        form["tax"]["rate"] = st.number_input("Tax Rate (%)", min_value=0.0, max_value=100.0,
                                              value=min(max(float(rate), 0.0), 100.0), step=0.5, key=_k("tax_rate"))
        show_errors(errors, "tax.rate")
    with c2:
        codes = [c.code for c in all_currencies()]
        names = {c.code: f"{c.code} ({c.symbol}) {c.name}" for c in all_currencies()}
        current = form.get("currency") or settings.default_currency
        form["currency"] = st.selectbox("Currency", codes, index=codes.index(current) if current in codes else 0,
                                        format_func=names.get, key=_k("currency"))

def banking_section(form: Dict[str, Any], errors):
    banking = form.setdefault("banking", {"country": ""})
    countries = [""] + list(COUNTRY_NAMES)
    current = banking.get("country") or ""
    banking["country"] = st.selectbox(
        "Bank Country", countries, index=countries.index(current) if current in countries else 0,
        format_func=lambda c: COUNTRY_NAMES.get(c, "No wire transfer details"), key=_k("bank_country"),
    )
    country = banking["country"]
    if not country:
        return
    required = set(BANKING_REQUIREMENTS[country]["required"])
    labels = BANKING_FIELD_LABELS[country]
    for field in banking_fields(country):
        label = labels[field] + (" *" if field in required else "")
        banking[field] = st.text_input(label, banking.get(field, ""), key=_k(f"bank_{country}_{field}"))
        show_errors(errors, f"banking.{field}")

def _link_for(links: List[Dict[str, Any]], method: str) -> Optional[Dict[str, Any]]:
    return next((l for l in links if l.get("method") == method), None)

def payment_links_section(form: Dict[str, Any], errors):
    block = form.setdefault("payment_links", {"links": [], "global_instructions": ""})
    links = block.setdefault("links", [])
    for method in PaymentMethod:
        m = method.value
        link = _link_for(links, m)
        added = st.checkbox(f"Offer {PAYMENT_METHOD_NAMES[m]}", value=link is not None, key=_k(f"pm_add_{m}"))
        if added and link is None:
            link = {"id": generate_id("payment"), "method": m, "url": "", **DEFAULT_PAYMENT_CONFIGS[m]}
            links.append(link)
        elif not added and link is not None:
            links.remove(link)
            link = None
        if link is None:
            continue
        i = links.index(link)
        with st.container(border=True):
            link["is_enabled"] = st.toggle("Show on invoice", value=bool(link.get("is_enabled")), key=_k(f"pm_on_{m}"))
            if not link["is_enabled"]:
                continue
            link["url"] = st.text_input("Payment URL *", link.get("url", ""), key=_k(f"pm_url_{m}"))
            show_errors(errors, f"payment_links.links.{i}.url")
            link["display_name"] = st.text_input("Display Name", link.get("display_name") or "", key=_k(f"pm_name_{m}"))
            show_errors(errors, f"payment_links.links.{i}.display_name")
            link["instructions"] = st.text_input("Instructions", link.get("instructions") or "", key=_k(f"pm_instr_{m}"))
            show_errors(errors, f"payment_links.links.{i}.instructions")
    if any(l.get("is_enabled") for l in links):
        block["global_instructions"] = st.text_area("General Payment Instructions", block.get("global_instructions") or "",
                                                    key=_k("pm_global"), height=80)
        show_errors(errors, "payment_links.global_instructions")

# ---- Screens ----

def access_screen():
    st.header("Enter a User Key")
    st.caption("Your draft is saved under this key for 24 hours. Keep it private.")
    col1, col2 = st.columns([3, 1])
    with col1:
        st.session_state.userkey = st.text_input("Enter a User Key", st.session_state.get("userkey", ""))
    with col2:
        st.markdown("<div style='height: 1.95rem'></div>", unsafe_allow_html=True)
        if st.button("Generate"):
            st.session_state.userkey = str(uuid.uuid4())
            st.rerun()

    if st.button("Continue"):
        key = st.session_state.get("userkey", "").strip()
        if not key:
            st.error("Please enter a user key (or generate one).")
            return
        stored = get_storage(key).load()
        if isinstance(stored, dict):
            replace_form(hydrate_form(stored))
            get_autosaver().mark_saved(st.session_state.form)
            st.session_state.restored_notice = True
            log.info("Restored draft with %d item(s)", len(st.session_state.form.get("items") or []))
        st.session_state.entered = True
        st.rerun()

def prefill_expander():
    with st.expander("Start from a previous invoice (optional)"):
        st.caption("Upload a PDF exported by this app to copy its details into a new invoice.")
        uploaded = st.file_uploader("Previous invoice PDF", type=["pdf"], key=_k("prefill_pdf"))
        if uploaded is not None and st.button("Apply"):
            snap = extract_snapshot(uploaded.read())
            if snap is None:
                st.warning("No embedded invoice data found in this PDF.")
            else:
                replace_form(prefill_from_snapshot(snap, settings))
                st.rerun()

def export_controls(form: Dict[str, Any]):
    c1, c2 = st.columns(2)
    if c1.button("Clear Form"):
        key = st.session_state.userkey.strip()
        if key:
            get_storage(key).clear()
        replace_form(default_form_state(settings))
        st.session_state.show_errors = False
        saver = get_autosaver()
        if saver is not None:
            saver.mark_saved(st.session_state.form)
        st.rerun()

    if c2.button("Generate Invoice", type="primary"):
        saver = get_autosaver()
        if saver is not None:
            saver.update(form)
            saver.flush()
        st.session_state.show_errors = True
        st.session_state.pdf_result = None
        try:
            data = prepare_export(form)
            with st.spinner("Generating PDF..."):
                time.sleep(settings.export_delay_seconds)
                st.session_state.pdf_result = generate_invoice_pdf(
                    data, PDFGenerationOptions(page_size=settings.page_size, embed_snapshot=form)
                )
            st.success(f"Invoice {data.details.invoice_number} generated successfully!")
        except InvoiceGenerationError as e:
            # also covers field errors, which show inline once show_errors is set
            st.error(str(e))

    result = st.session_state.pdf_result
    if result is not None:
        st.download_button("Download PDF", data=result.content, file_name=result.filename, mime="application/pdf")

def builder_screen():
    form = st.session_state.form
    if st.session_state.pop("restored_notice", False):
        st.info("Restored your saved draft.")
    prefill_expander()
    errors = current_errors()

    st.subheader("Your Business")
    party_inputs(form["business"], "business", "Business", errors)
    st.subheader("Bill To")
    party_inputs(form["customer"], "customer", "Customer", errors)
    st.subheader("Invoice Details")
    details_section(form, errors)
    st.subheader("Items")
    items_section(form, errors)
    st.subheader("Tax & Currency")
    tax_currency_section(form, errors)
    st.subheader("Wire Transfer")
    banking_section(form, errors)
    st.subheader("Online Payments")
    payment_links_section(form, errors)
    st.subheader("Notes")
    form["details"]["notes"] = st.text_area("Notes", form["details"].get("notes", ""), key=_k("notes"), height=100)
    show_errors(errors, "details.notes")

    st.write("---")
    export_controls(form)

    st.write("---")
    st.subheader("Preview")
    html_doc = render_preview_html(assemble_invoice(form))
    components.html(f"""<!doctype html><html><head><meta charset="utf-8"><title>Invoice</title></head>
    <body>{html_doc}</body></html>""", height=1000, scrolling=True)

    saver = get_autosaver()
    if saver is not None:
        saver.update(form)

# ---- Main ----

def main():
    st.set_page_config(page_title="Invoice Builder", layout="centered")
    ensure_session()
    st.title("Invoice Builder")

    if not st.session_state.entered:
        access_screen()
        st.stop()

    builder_screen()

if __name__ == "__main__":
    main()
