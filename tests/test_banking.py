"""Unit tests for wire transfer field rules and display lines."""

import pytest

from invoice_builder.banking import banking_fields, format_banking_field, format_banking_info, validate_banking_field
from invoice_builder.models import AUBankingInfo, CABankingInfo, EUBankingInfo, UKBankingInfo, USBankingInfo


@pytest.mark.parametrize("country, field, value, ok", [
    ("US", "routing_number", "123456789", True),
    ("US", "routing_number", "12345678", False),
    ("US", "account_number", "12ab", False),
    ("EU", "iban", "de89 3704 0044 0532 0130 00", True),
    ("EU", "iban", "DE89", False),
    ("EU", "bic_swift_code", "deutdeff", True),
    ("EU", "bic_swift_code", "DEUTDEFF500", True),
    ("EU", "bic_swift_code", "DEUT", False),
    ("UK", "sort_code", "12-34-56", True),
    ("UK", "sort_code", "123456", True),
    ("UK", "sort_code", "12345", False),
    ("UK", "account_number", "12345678", True),
    ("UK", "account_number", "12345", False),
    ("CA", "institution_number", "001", True),
    ("CA", "transit_number", "1234", False),
    ("AU", "bsb_number", "123-456", True),
    ("AU", "bsb_number", "12-3456", False),
    ("US", "bank_name", "anything", True),
])
def test_validate_banking_field(country, field, value, ok) -> None:
    """Each country's formats are enforced; free text fields always pass."""
    assert validate_banking_field(country, field, value) is ok


def test_banking_fields_order() -> None:
    """Required fields come first, then optional ones."""
    assert banking_fields("UK") == ["bank_name", "sort_code", "account_number", "account_holder_name", "bank_address"]
    assert banking_fields("XX") == []


def test_format_banking_field() -> None:
    """Sort codes, BSBs and IBANs are grouped for display."""
    assert format_banking_field("UK", "sort_code", "123456") == "12-34-56"
    assert format_banking_field("AU", "bsb_number", "123456") == "123-456"
    assert format_banking_field("EU", "iban", "DE89370400440532013000") == "DE89 3704 0044 0532 0130 00"
    assert format_banking_field("US", "account_number", "42") == "42"


class TestFormatBankingInfo:
    """Lines shown under "Wire Transfer"."""

    def test_us(self) -> None:
        """US lines include routing and account numbers and the bank address."""
        info = USBankingInfo(bank_name="First Bank", routing_number="123456789", account_number="42",
                             account_holder_name="Acme", bank_address="1 Bank St")
        assert format_banking_info(info) == [
            "Bank: First Bank",
            "Routing Number: 123456789",
            "Account Number: 42",
            "Account Holder: Acme",
            "Bank Address: 1 Bank St",
        ]

    def test_eu_groups_iban(self) -> None:
        """EU lines show a grouped IBAN and the BIC."""
        info = EUBankingInfo(bank_name="B", iban="DE89370400440532013000", bic_swift_code="DEUTDEFF",
                             account_holder_name="Acme")
        lines = format_banking_info(info)
        assert "IBAN: DE89 3704 0044 0532 0130 00" in lines
        assert "BIC/SWIFT: DEUTDEFF" in lines
        assert not any(line.startswith("Bank Address") for line in lines)

    def test_uk_sort_code(self) -> None:
        """UK sort codes are shown with dashes."""
        info = UKBankingInfo(bank_name="B", sort_code="123456", account_number="12345678", account_holder_name="A")
        assert "Sort Code: 12-34-56" in format_banking_info(info)

    def test_ca_omits_address(self) -> None:
        """Canadian details never show the bank address."""
        info = CABankingInfo(bank_name="B", institution_number="001", transit_number="12345",
                             account_number="9", account_holder_name="A", bank_address="Somewhere")
        lines = format_banking_info(info)
        assert lines[1:4] == ["Institution Number: 001", "Transit Number: 12345", "Account Number: 9"]
        assert not any("Somewhere" in line for line in lines)

    def test_au_bsb(self) -> None:
        """Australian BSB numbers are shown with a dash."""
        info = AUBankingInfo(bank_name="B", bsb_number="123456", account_number="9", account_holder_name="A")
        assert "BSB Number: 123-456" in format_banking_info(info)
