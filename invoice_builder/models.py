"""Document model: the immutable snapshot handed to the preview and PDF renderers."""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .calculations import grand_total, line_total, non_negative, normalize_rate, subtotal, tax_amount


# ---- Reference tables ----

class Country(str, Enum):
    US = "US"
    EU = "EU"
    UK = "UK"
    CA = "CA"
    AU = "AU"


COUNTRY_NAMES: Dict[str, str] = {
    Country.US.value: "United States",
    Country.EU.value: "European Union",
    Country.UK.value: "United Kingdom",
    Country.CA.value: "Canada",
    Country.AU.value: "Australia",
}


class PaymentMethod(str, Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    SQUARE = "square"
    CUSTOM = "custom"


PAYMENT_METHOD_NAMES: Dict[str, str] = {
    PaymentMethod.STRIPE.value: "Stripe",
    PaymentMethod.PAYPAL.value: "PayPal",
    PaymentMethod.SQUARE.value: "Square",
    PaymentMethod.CUSTOM.value: "Custom",
}

PAYMENT_METHOD_DISPLAY_TEXTS: Dict[str, str] = {
    PaymentMethod.STRIPE.value: "Pay with Stripe",
    PaymentMethod.PAYPAL.value: "Pay with PayPal",
    PaymentMethod.SQUARE.value: "Pay with Square",
    PaymentMethod.CUSTOM.value: "Pay Online",
}

# Prefilled values when a payment method is added to the form.
DEFAULT_PAYMENT_CONFIGS: Dict[str, Dict[str, Any]] = {
    PaymentMethod.STRIPE.value: {
        "display_name": PAYMENT_METHOD_DISPLAY_TEXTS["stripe"],
        "is_enabled": False,
        "instructions": "Secure payment processing via Stripe",
    },
    PaymentMethod.PAYPAL.value: {
        "display_name": PAYMENT_METHOD_DISPLAY_TEXTS["paypal"],
        "is_enabled": False,
        "instructions": "Pay securely with your PayPal account",
    },
    PaymentMethod.SQUARE.value: {
        "display_name": PAYMENT_METHOD_DISPLAY_TEXTS["square"],
        "is_enabled": False,
        "instructions": "Quick and secure payment via Square",
    },
    PaymentMethod.CUSTOM.value: {
        "display_name": PAYMENT_METHOD_DISPLAY_TEXTS["custom"],
        "is_enabled": False,
        "instructions": "Click to complete your payment online",
    },
}

PAYMENT_TERMS_OPTIONS: Dict[str, str] = {
    "due_on_receipt": "Due on Receipt",
    "net_15": "Net 15",
    "net_30": "Net 30",
    "net_60": "Net 60",
    "net_90": "Net 90",
}

DEFAULT_PAYMENT_TERMS = "net_30"


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# ---- Parties ----

class BusinessInfo(_Snapshot):
    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""


class CustomerInfo(_Snapshot):
    name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""


# ---- Items, details, tax ----

class LineItem(_Snapshot):
    id: str
    description: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0
    total: float = 0.0

    @field_validator("quantity", "unit_price", mode="before")
    @classmethod
    def _clamp(cls, v: Any) -> float:
        return non_negative(v)

    @model_validator(mode="before")
    @classmethod
    def _derive_total(cls, data: Any) -> Any:
        # A supplied total is never trusted.
        if isinstance(data, dict):
            data = dict(data)
            data["total"] = line_total(data.get("quantity"), data.get("unit_price"))
        return data


class InvoiceDetails(_Snapshot):
    invoice_number: str = ""
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_terms: str = DEFAULT_PAYMENT_TERMS
    notes: str = ""

    @property
    def payment_terms_label(self) -> str:
        if self.payment_terms in PAYMENT_TERMS_OPTIONS:
            return PAYMENT_TERMS_OPTIONS[self.payment_terms]
        return self.payment_terms or PAYMENT_TERMS_OPTIONS[DEFAULT_PAYMENT_TERMS]


class TaxInfo(_Snapshot):
    rate: float = 0.0
    amount: float = 0.0

    @field_validator("rate", mode="before")
    @classmethod
    def _normalize_rate(cls, v: Any) -> float:
        return normalize_rate(v)


class InvoiceCalculations(_Snapshot):
    subtotal: float = 0.0
    tax_amount: float = 0.0
    total: float = 0.0

    @classmethod
    def from_items(cls, items: List[Any], rate: Any = 0) -> "InvoiceCalculations":
        sub = subtotal(items)
        tax = tax_amount(sub, rate)
        return cls(subtotal=sub, tax_amount=tax, total=grand_total(sub, tax))


def invoice_totals(items: List[Any], rate: Any = 0) -> InvoiceCalculations:
    """Subtotal, tax and total for ``items`` at ``rate`` percent."""
    return InvoiceCalculations.from_items(items, rate)


# ---- Banking (one variant per country, selected by ``country``) ----

class _BankingBase(_Snapshot):
    bank_name: str = ""
    account_holder_name: str = ""
    bank_address: str = ""


class USBankingInfo(_BankingBase):
    country: Literal["US"] = "US"
    routing_number: str = ""
    account_number: str = ""


class EUBankingInfo(_BankingBase):
    country: Literal["EU"] = "EU"
    iban: str = ""
    bic_swift_code: str = ""


class UKBankingInfo(_BankingBase):
    country: Literal["UK"] = "UK"
    sort_code: str = ""
    account_number: str = ""


class CABankingInfo(_BankingBase):
    country: Literal["CA"] = "CA"
    institution_number: str = ""
    transit_number: str = ""
    account_number: str = ""


class AUBankingInfo(_BankingBase):
    country: Literal["AU"] = "AU"
    bsb_number: str = ""
    account_number: str = ""


CountryBankingInfo = Annotated[
    Union[USBankingInfo, EUBankingInfo, UKBankingInfo, CABankingInfo, AUBankingInfo],
    Field(discriminator="country"),
]

BANKING_MODELS = {
    Country.US.value: USBankingInfo,
    Country.EU.value: EUBankingInfo,
    Country.UK.value: UKBankingInfo,
    Country.CA.value: CABankingInfo,
    Country.AU.value: AUBankingInfo,
}


# ---- Online payment links ----

class PaymentLinkConfig(_Snapshot):
    id: str
    method: PaymentMethod
    url: str = ""
    display_name: Optional[str] = None
    is_enabled: bool = False
    instructions: Optional[str] = None

    @property
    def label(self) -> str:
        return (self.display_name or "").strip() or PAYMENT_METHOD_DISPLAY_TEXTS[self.method.value]


class PaymentLinksData(_Snapshot):
    links: List[PaymentLinkConfig] = Field(default_factory=list)
    global_instructions: Optional[str] = None

    def enabled_links(self) -> List[PaymentLinkConfig]:
        return [link for link in self.links if link.is_enabled]


# ---- Root document ----

def _raw_item_total(item: Any) -> Dict[str, float]:
    if isinstance(item, LineItem):
        return {"total": item.total}
    if isinstance(item, Mapping):
        return {"total": line_total(item.get("quantity"), item.get("unit_price"))}
    return {"total": 0.0}


class InvoiceData(_Snapshot):
    business: BusinessInfo = Field(default_factory=BusinessInfo)
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    details: InvoiceDetails = Field(default_factory=InvoiceDetails)
    items: List[LineItem] = Field(default_factory=list)
    tax: TaxInfo = Field(default_factory=TaxInfo)
    calculations: InvoiceCalculations = Field(default_factory=InvoiceCalculations)
    banking_info: Optional[CountryBankingInfo] = None
    payment_links: Optional[PaymentLinksData] = None
    currency: str = "USD"

    @model_validator(mode="before")
    @classmethod
    def _derive_calculations(cls, data: Any) -> Any:
        # Tax amount and calculations always follow the items and the rate.
        if not isinstance(data, dict):
            return data
        items = data.get("items") or []
        if not isinstance(items, (list, tuple)):
            return data
        tax = data.get("tax")
        if isinstance(tax, TaxInfo):
            rate = tax.rate
        else:
            rate = normalize_rate(tax.get("rate") if isinstance(tax, Mapping) else None)
        calc = InvoiceCalculations.from_items([_raw_item_total(it) for it in items], rate)
        data = dict(data)
        data["tax"] = {"rate": rate, "amount": calc.tax_amount}
        data["calculations"] = calc
        return data

    def has_payment_section(self) -> bool:
        """True when the payment information block is drawn at all."""
        if self.banking_info is not None:
            return True
        return bool(self.payment_links and self.payment_links.enabled_links())
