"""
Form validation.

Field rules live on a Pydantic schema mirroring the form; failures come back
as ``{"details.due_date": ["..."]}`` so the UI can show them next to the
field. Nothing here raises for bad input except :func:`prepare_export`,
which is the gate in front of PDF generation.
"""
from __future__ import annotations

import math
import re
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from .assembly import assemble_invoice, collect_banking, form_section
from .banking import BANKING_FIELD_LABELS, BANKING_FORMAT_MESSAGES, BANKING_REQUIREMENTS, validate_banking_field
from .calculations import to_number
from .errors import FormValidationError, InvoiceGenerationError
from .logs import logger
from .models import InvoiceData
from .utils import clean_str, to_bool, to_date

FormErrors = Dict[str, List[str]]

log = logger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _fail(message: str):
    raise PydanticCustomError("invoice_form", message)


def _text(v: Any, max_len: int, too_long: str, required: Optional[str] = None) -> str:
    s = clean_str(v).strip()
    if required and not s:
        _fail(required)
    if len(s) > max_len:
        _fail(too_long)
    return s


def _email(v: Any) -> str:
    s = _text(v, 100, "Email too long")
    if s and not EMAIL_RE.match(s):
        _fail("Invalid email address")
    return s


def _number(v: Any, label: str) -> float:
    value = to_number(v)
    if math.isnan(value):
        _fail(f"{label} must be a number")
    return value


class _Form(BaseModel):
    model_config = ConfigDict(extra="ignore", validate_default=True)


class BusinessForm(_Form):
    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return _text(v, 100, "Business name too long", required="Business name is required")

    @field_validator("address", mode="before")
    @classmethod
    def _address(cls, v):
        return _text(v, 200, "Address too long")

    @field_validator("phone", mode="before")
    @classmethod
    def _phone(cls, v):
        return _text(v, 20, "Phone number too long")

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v):
        return _email(v)


class CustomerForm(BusinessForm):
    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return _text(v, 100, "Customer name too long", required="Customer name is required")


class DetailsForm(_Form):
    invoice_number: str = ""
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_terms: str = ""
    notes: str = ""

    @field_validator("invoice_number", mode="before")
    @classmethod
    def _invoice_number(cls, v):
        return _text(v, 50, "Invoice number too long", required="Invoice number is required")

    @field_validator("issue_date", mode="before")
    @classmethod
    def _issue_date(cls, v):
        d = to_date(v)
        if d is None:
            _fail("Issue date is required")
        return d

    @field_validator("due_date", mode="before")
    @classmethod
    def _due_date(cls, v, info: ValidationInfo):
        d = to_date(v)
        if d is None:
            _fail("Due date is required")
        issued = info.data.get("issue_date")
        if issued is not None and d < issued:
            _fail("Due date must be on or after the issue date")
        return d

    @field_validator("payment_terms", mode="before")
    @classmethod
    def _payment_terms(cls, v):
        return _text(v, 50, "Payment terms too long", required="Payment terms are required")

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, v):
        return _text(v, 500, "Notes too long")


class ItemForm(_Form):
    description: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        return _text(v, 200, "Description too long", required="Item description is required")

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity(cls, v):
        q = _number(v, "Quantity")
        if q < 0.01:
            _fail("Quantity must be greater than 0")
        if q > 999999:
            _fail("Quantity too large")
        return q

    @field_validator("unit_price", mode="before")
    @classmethod
    def _unit_price(cls, v):
        p = _number(v, "Unit price")
        if p < 0:
            _fail("Unit price cannot be negative")
        if p > 999999.99:
            _fail("Unit price too large")
        return p


class TaxForm(_Form):
    rate: float = 0.0

    @field_validator("rate", mode="before")
    @classmethod
    def _rate(cls, v):
        if clean_str(v).strip() == "":
            return 0.0
        r = _number(v, "Tax rate")
        if r < 0:
            _fail("Tax rate cannot be negative")
        if r > 100:
            _fail("Tax rate cannot exceed 100%")
        return r


class InvoiceForm(_Form):
    business: BusinessForm
    customer: CustomerForm
    details: DetailsForm
    items: List[ItemForm] = Field(default_factory=list)
    tax: TaxForm

    @field_validator("items")
    @classmethod
    def _at_least_one(cls, v):
        if not v:
            _fail("At least one item is required")
        return v


def _path(loc) -> str:
    return ".".join(str(part) for part in loc)


def _add(errors: FormErrors, path: str, message: str) -> None:
    errors.setdefault(path, []).append(message)


def _banking_errors(form: Mapping[str, Any], errors: FormErrors) -> None:
    block = collect_banking(form_section(form, "banking"))
    if block is None:
        return
    country = block["country"]
    labels = BANKING_FIELD_LABELS[country]
    for field in BANKING_REQUIREMENTS[country]["required"]:
        value = block.get(field, "")
        if not value:
            _add(errors, f"banking.{field}", f"{labels[field]} is required")
        elif not validate_banking_field(country, field, value):
            _add(errors, f"banking.{field}", BANKING_FORMAT_MESSAGES[country][field])
    if len(block.get("bank_address", "")) > 200:
        _add(errors, "banking.bank_address", "Bank address too long")


def _payment_link_errors(form: Mapping[str, Any], errors: FormErrors) -> None:
    raw = form_section(form, "payment_links")
    for i, link in enumerate(raw.get("links") or []):
        if not isinstance(link, Mapping) or not to_bool(link.get("is_enabled")):
            continue
        prefix = f"payment_links.links.{i}"
        if not clean_str(link.get("url")).strip():
            _add(errors, f"{prefix}.url", "Payment link is required for enabled payment methods")
        if len(clean_str(link.get("display_name"))) > 50:
            _add(errors, f"{prefix}.display_name", "Display name too long")
        if len(clean_str(link.get("instructions"))) > 200:
            _add(errors, f"{prefix}.instructions", "Instructions too long")
    if len(clean_str(raw.get("global_instructions"))) > 500:
        _add(errors, "payment_links.global_instructions", "Instructions too long")


def validate_form(form: Optional[Mapping[str, Any]]) -> FormErrors:
    """Field errors for ``form``; an empty dict means the form can be exported."""
    form = form or {}
    errors: FormErrors = {}
    payload = {
        "business": form_section(form, "business"),
        "customer": form_section(form, "customer"),
        "details": form_section(form, "details"),
        "items": [it if isinstance(it, Mapping) else {} for it in (form.get("items") or [])],
        "tax": form_section(form, "tax"),
    }
    try:
        InvoiceForm.model_validate(payload)
    except ValidationError as e:
        for err in e.errors():
            _add(errors, _path(err["loc"]), err["msg"])
    _banking_errors(form, errors)
    _payment_link_errors(form, errors)
    return errors


def check_exportable(data: InvoiceData) -> None:
    """Last check before drawing; the message is shown to the user verbatim."""
    if not data.business.name.strip():
        raise InvoiceGenerationError("Business name is required")
    if not data.customer.name.strip():
        raise InvoiceGenerationError("Customer name is required")
    if not data.items or not data.items[0].description.strip():
        raise InvoiceGenerationError("Item description is required")


def prepare_export(form: Optional[Mapping[str, Any]]) -> InvoiceData:
    """Validate ``form`` and assemble it for export, or raise without side effects."""
    errors = validate_form(form)
    if errors:
        log.info("Export blocked by %d invalid field(s): %s", len(errors), ", ".join(sorted(errors)))
        raise FormValidationError(errors)
    data = assemble_invoice(form)
    check_exportable(data)
    return data
