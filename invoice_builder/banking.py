"""Country-specific wire transfer fields: requirements, patterns, labels and display lines."""

import re
from typing import Dict, List

from .models import Country

# required and optional fields per country
BANKING_REQUIREMENTS: Dict[str, Dict[str, List[str]]] = {
    Country.US.value: {
        "required": ["bank_name", "routing_number", "account_number", "account_holder_name"],
        "optional": ["bank_address"],
    },
    Country.EU.value: {
        "required": ["bank_name", "iban", "bic_swift_code", "account_holder_name"],
        "optional": ["bank_address"],
    },
    Country.UK.value: {
        "required": ["bank_name", "sort_code", "account_number", "account_holder_name"],
        "optional": ["bank_address"],
    },
    Country.CA.value: {
        "required": ["bank_name", "institution_number", "transit_number", "account_number", "account_holder_name"],
        "optional": ["bank_address"],
    },
    Country.AU.value: {
        "required": ["bank_name", "bsb_number", "account_number", "account_holder_name"],
        "optional": ["bank_address"],
    },
}

BANKING_PATTERNS = {
    "US_ROUTING_NUMBER": re.compile(r"^\d{9}$"),
    "US_ACCOUNT_NUMBER": re.compile(r"^[0-9]+$"),
    "EU_IBAN": re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{4}[0-9]{7}([A-Z0-9]?){0,16}$"),
    "EU_BIC_SWIFT": re.compile(r"^[A-Z]{6}[A-Z0-9]{2}([A-Z0-9]{3})?$"),
    "UK_SORT_CODE": re.compile(r"^(\d{2}-?\d{2}-?\d{2}|\d{6})$"),
    "UK_ACCOUNT_NUMBER": re.compile(r"^[0-9]{6,8}$"),
    "CA_INSTITUTION_NUMBER": re.compile(r"^\d{3}$"),
    "CA_TRANSIT_NUMBER": re.compile(r"^\d{5}$"),
    "CA_ACCOUNT_NUMBER": re.compile(r"^[0-9]+$"),
    "AU_BSB_NUMBER": re.compile(r"^(\d{3}-?\d{3}|\d{6})$"),
    "AU_ACCOUNT_NUMBER": re.compile(r"^[0-9]+$"),
}

BANKING_FORMAT_MESSAGES: Dict[str, Dict[str, str]] = {
    Country.US.value: {
        "routing_number": "Must be exactly 9 digits (e.g., 123456789)",
        "account_number": "Must contain only numbers",
    },
    Country.EU.value: {
        "iban": "Must be a valid IBAN format (e.g., DE89370400440532013000)",
        "bic_swift_code": "Must be 8 or 11 characters (e.g., DEUTDEFF or DEUTDEFF500)",
    },
    Country.UK.value: {
        "sort_code": "Must be 6 digits, optionally with dashes (e.g., 12-34-56 or 123456)",
        "account_number": "Must be 6-8 digits",
    },
    Country.CA.value: {
        "institution_number": "Must be exactly 3 digits (e.g., 001)",
        "transit_number": "Must be exactly 5 digits (e.g., 12345)",
        "account_number": "Must contain only numbers",
    },
    Country.AU.value: {
        "bsb_number": "Must be 6 digits, optionally with dash (e.g., 123-456 or 123456)",
        "account_number": "Must contain only numbers",
    },
}

_COMMON_LABELS = {
    "bank_name": "Bank Name",
    "account_holder_name": "Account Holder Name",
    "bank_address": "Bank Address",
}

BANKING_FIELD_LABELS: Dict[str, Dict[str, str]] = {
    Country.US.value: {**_COMMON_LABELS, "routing_number": "Routing Number", "account_number": "Account Number"},
    Country.EU.value: {**_COMMON_LABELS, "iban": "IBAN", "bic_swift_code": "BIC/SWIFT Code"},
    Country.UK.value: {**_COMMON_LABELS, "sort_code": "Sort Code", "account_number": "Account Number"},
    Country.CA.value: {
        **_COMMON_LABELS,
        "institution_number": "Institution Number",
        "transit_number": "Transit Number",
        "account_number": "Account Number",
    },
    Country.AU.value: {**_COMMON_LABELS, "bsb_number": "BSB Number", "account_number": "Account Number"},
}

# (pattern key, value normaliser) per country and field
_FIELD_RULES = {
    (Country.US.value, "routing_number"): ("US_ROUTING_NUMBER", None),
    (Country.US.value, "account_number"): ("US_ACCOUNT_NUMBER", None),
    (Country.EU.value, "iban"): ("EU_IBAN", lambda v: re.sub(r"\s", "", v).upper()),
    (Country.EU.value, "bic_swift_code"): ("EU_BIC_SWIFT", str.upper),
    (Country.UK.value, "sort_code"): ("UK_SORT_CODE", lambda v: re.sub(r"\s", "", v)),
    (Country.UK.value, "account_number"): ("UK_ACCOUNT_NUMBER", None),
    (Country.CA.value, "institution_number"): ("CA_INSTITUTION_NUMBER", None),
    (Country.CA.value, "transit_number"): ("CA_TRANSIT_NUMBER", None),
    (Country.CA.value, "account_number"): ("CA_ACCOUNT_NUMBER", None),
    (Country.AU.value, "bsb_number"): ("AU_BSB_NUMBER", lambda v: re.sub(r"\s", "", v)),
    (Country.AU.value, "account_number"): ("AU_ACCOUNT_NUMBER", None),
}


def banking_fields(country: str) -> List[str]:
    """All fields of ``country`` in form order (required first)."""
    req = BANKING_REQUIREMENTS.get(country)
    if not req:
        return []
    return req["required"] + req["optional"]


def validate_banking_field(country: str, field: str, value: str) -> bool:
    """Check ``value`` against the country's format; fields without a rule always pass."""
    rule = _FIELD_RULES.get((country, field))
    if rule is None:
        return True
    pattern, normalise = rule
    value = value or ""
    if normalise:
        value = normalise(value)
    return bool(BANKING_PATTERNS[pattern].match(value))


def format_banking_field(country: str, field: str, value: str) -> str:
    """Display form: UK sort code ``12-34-56``, AU BSB ``123-456``, IBAN in groups of four."""
    value = value or ""
    if country == Country.UK.value and field == "sort_code" and len(value) == 6:
        return f"{value[0:2]}-{value[2:4]}-{value[4:6]}"
    if country == Country.AU.value and field == "bsb_number" and len(value) == 6:
        return f"{value[0:3]}-{value[3:6]}"
    if country == Country.EU.value and field == "iban":
        return re.sub(r"(.{4})", r"\1 ", value).strip()
    return value


def format_banking_info(info) -> List[str]:
    """Lines shown under "Wire Transfer" for a ``CountryBankingInfo``."""
    c = info.country
    lines = [f"Bank: {info.bank_name}"]
    if c == Country.US.value:
        lines += [f"Routing Number: {info.routing_number}", f"Account Number: {info.account_number}"]
    elif c == Country.EU.value:
        lines += [f"IBAN: {format_banking_field(c, 'iban', info.iban)}", f"BIC/SWIFT: {info.bic_swift_code}"]
    elif c == Country.UK.value:
        lines += [f"Sort Code: {format_banking_field(c, 'sort_code', info.sort_code)}",
                  f"Account Number: {info.account_number}"]
    elif c == Country.CA.value:
        lines += [f"Institution Number: {info.institution_number}",
                  f"Transit Number: {info.transit_number}",
                  f"Account Number: {info.account_number}"]
    elif c == Country.AU.value:
        lines += [f"BSB Number: {format_banking_field(c, 'bsb_number', info.bsb_number)}",
                  f"Account Number: {info.account_number}"]
    else:
        return []
    lines.append(f"Account Holder: {info.account_holder_name}")
    # CA lines omit the bank address.
    if info.bank_address and c != Country.CA.value:
        lines.append(f"Bank Address: {info.bank_address}")
    return lines
