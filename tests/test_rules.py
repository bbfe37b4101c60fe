from datetime import date
from decimal import Decimal

import pytest

from orderclean.rules import (
    canonicalize_country,
    clean_amount,
    clean_customer_name,
    clean_email,
    is_iso_date,
    parse_order_date,
)


def test_email_accepts_and_lowercases() -> None:
    assert clean_email("john.doe@example.com") == ("john.doe@example.com", None)
    assert clean_email(" jane.smith@Example.Com ") == ("jane.smith@example.com", None)


@pytest.mark.parametrize(
    "raw",
    ["ana.lopez@@example.com", "robert@example", "@example.com", "john@.example.com", "john@example..com", "john@example.c"],
)
def test_email_rejects_malformed(raw: str) -> None:
    assert clean_email(raw) == (None, "INVALID_EMAIL")


def test_email_empty_is_missing() -> None:
    assert clean_email("") == (None, "MISSING_EMAIL")
    assert clean_email("   ") == (None, "MISSING_EMAIL")


def test_amount_parses_fixed_point() -> None:
    assert clean_amount("100.50") == (Decimal("100.50"), None)
    value, reason = clean_amount("42")
    assert reason is None
    assert value == Decimal("42.00")
    assert str(value) == "42.00"
    assert clean_amount(" 55.5 ") == (Decimal("55.50"), None)


def test_amount_parse_is_idempotent() -> None:
    first, _ = clean_amount("55.5")
    second, _ = clean_amount(str(first))
    assert first == second
    assert str(second) == "55.50"


@pytest.mark.parametrize(
    ("raw", "reason"),
    [
        ("one hundred", "INVALID_AMOUNT"),
        ("-25.00", "NEGATIVE_AMOUNT"),
        ("", "MISSING_AMOUNT"),
        ("12.345", "INVALID_AMOUNT"),
        ("1e3", "INVALID_AMOUNT"),
        ("-abc", "INVALID_AMOUNT"),
    ],
)
def test_amount_rejections(raw: str, reason: str) -> None:
    assert clean_amount(raw) == (None, reason)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2023-07-10", date(2023, 7, 10)),
        ("07/11/2023", date(2023, 7, 11)),
        ("2023/07/12", date(2023, 7, 12)),
        ("14-07-2023", date(2023, 7, 14)),
    ],
)
def test_date_formats(raw: str, expected: date) -> None:
    assert parse_order_date(raw) == (expected, None)


def test_date_out_of_range_is_not_guessed() -> None:
    assert parse_order_date("2023-13-07") == (None, "INVALID_DATE")
    assert parse_order_date("last tuesday") == (None, "INVALID_DATE")


def test_date_empty_is_missing() -> None:
    assert parse_order_date("") == (None, "MISSING_DATE")


def test_customer_name_capitalizes_first_letter_only() -> None:
    assert clean_customer_name("  jane smith ") == ("Jane smith", None)
    assert clean_customer_name("Ana-María López") == ("Ana-maría lópez", None)
    assert clean_customer_name("") == (None, "MISSING_NAME")


@pytest.mark.parametrize("raw", ["usa", "US", "U.S.A.", "United States", " united states "])
def test_country_united_states_variants(raw: str) -> None:
    assert canonicalize_country(raw) == ("United States", None)


def test_country_other_canonical_values() -> None:
    assert canonicalize_country("CANADA") == ("Canada", None)
    assert canonicalize_country("México") == ("Mexico", None)
    assert canonicalize_country("mexico") == ("Mexico", None)


def test_country_unmapped_falls_back_to_title_case() -> None:
    assert canonicalize_country("Brazil") == ("Brazil", None)
    assert canonicalize_country(" new zealand ") == ("New Zealand", None)
    assert canonicalize_country("") == (None, "MISSING_COUNTRY")


def test_is_iso_date() -> None:
    assert is_iso_date("2023-07-10")
    assert not is_iso_date("07/11/2023")
    assert not is_iso_date("2023-13-07")
