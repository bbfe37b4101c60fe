from collections import Counter
from collections.abc import Iterable, Sequence

from orderclean.rules import AMOUNT_PATTERN, is_iso_date
from orderclean.schemas import CleanRecord, RawProfile, RawRecord


AMOUNT_VALID = "Valid"
AMOUNT_MISSING = "Missing"
AMOUNT_INVALID = "Invalid"


def count_unique_customers(raw_records: Iterable[RawRecord]) -> int:
    return len(
        {f"{raw.customer_name.strip().lower()}|{raw.email.strip().lower()}" for raw in raw_records}
    )


def country_distribution(raw_records: Iterable[RawRecord]) -> list[tuple[str, int]]:
    counts = Counter(raw.country for raw in raw_records)
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def amount_status_counts(raw_records: Iterable[RawRecord]) -> dict[str, int]:
    counts = {AMOUNT_VALID: 0, AMOUNT_MISSING: 0, AMOUNT_INVALID: 0}
    for raw in raw_records:
        # Untrimmed, so padded amounts show up here as Invalid.
        if AMOUNT_PATTERN.match(raw.amount):
            counts[AMOUNT_VALID] += 1
        elif not raw.amount:
            counts[AMOUNT_MISSING] += 1
        else:
            counts[AMOUNT_INVALID] += 1
    return counts


def non_iso_dates(raw_records: Iterable[RawRecord]) -> list[tuple[int, str]]:
    return [(raw.order_id, raw.order_date) for raw in raw_records if not is_iso_date(raw.order_date)]


def rows_needing_review(records: Iterable[CleanRecord]) -> list[CleanRecord]:
    return [
        record
        for record in records
        if record.amount is None or record.email is None or record.order_date is None or record.customer_name is None
    ]


def profile_raw_records(raw_records: Sequence[RawRecord]) -> RawProfile:
    return RawProfile(
        total_rows=len(raw_records),
        unique_customers=count_unique_customers(raw_records),
        country_distribution=country_distribution(raw_records),
        amount_status=amount_status_counts(raw_records),
        non_iso_dates=non_iso_dates(raw_records),
    )
