from datetime import date, datetime
from decimal import Decimal
import re

from orderclean.schemas import (
    INVALID_AMOUNT,
    INVALID_DATE,
    INVALID_EMAIL,
    MISSING_AMOUNT,
    MISSING_COUNTRY,
    MISSING_DATE,
    MISSING_EMAIL,
    MISSING_NAME,
    NEGATIVE_AMOUNT,
)


EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@(?:[A-Za-z0-9-]+\.)+[A-Za-z]{2,}$")
AMOUNT_PATTERN = re.compile(r"^[0-9]+(\.[0-9]{1,2})?$")
CENTS = Decimal("0.01")

# Tried in order; the first format that parses wins.
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d", "%d-%m-%Y")

COUNTRY_ALIASES: dict[str, str] = {
    "usa": "United States",
    "us": "United States",
    "u.s.a.": "United States",
    "united states": "United States",
    "canada": "Canada",
    "mexico": "Mexico",
    "méxico": "Mexico",
}


def clean_email(raw: str) -> tuple[str | None, str | None]:
    value = raw.strip()
    if not value:
        return None, MISSING_EMAIL
    if not EMAIL_PATTERN.match(value):
        return None, INVALID_EMAIL
    return value.lower(), None


def clean_amount(raw: str) -> tuple[Decimal | None, str | None]:
    value = raw.strip()
    if not value:
        return None, MISSING_AMOUNT
    if AMOUNT_PATTERN.match(value):
        return Decimal(value).quantize(CENTS), None
    if value.startswith("-") and AMOUNT_PATTERN.match(value[1:]):
        return None, NEGATIVE_AMOUNT
    return None, INVALID_AMOUNT


def parse_order_date(raw: str) -> tuple[date | None, str | None]:
    value = raw.strip()
    if not value:
        return None, MISSING_DATE
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date(), None
        except ValueError:
            continue
    return None, INVALID_DATE


def clean_customer_name(raw: str) -> tuple[str | None, str | None]:
    value = raw.strip()
    if not value:
        return None, MISSING_NAME
    return value[0].upper() + value[1:].lower(), None


def canonicalize_country(raw: str) -> tuple[str | None, str | None]:
    value = raw.strip()
    if not value:
        return None, MISSING_COUNTRY
    canonical = COUNTRY_ALIASES.get(value.lower())
    if canonical is not None:
        return canonical, None
    return value.title(), None


def is_iso_date(raw: str) -> bool:
    try:
        datetime.strptime(raw.strip(), DATE_FORMATS[0])
    except ValueError:
        return False
    return True
