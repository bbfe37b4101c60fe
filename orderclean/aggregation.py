from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from orderclean.schemas import (
    CleanRecord,
    CountrySales,
    CustomerSpend,
    DailySales,
    DuplicateGroup,
    RawRecord,
    RevenueSummary,
)


ZERO = Decimal("0.00")


def _has_amount(record: CleanRecord) -> bool:
    return record.amount is not None and record.amount >= 0


def total_revenue(records: Sequence[CleanRecord]) -> RevenueSummary:
    paid = [record.amount for record in records if _has_amount(record)]
    return RevenueSummary(
        total_revenue=sum(paid, ZERO),
        valid_amount_orders=len(paid),
        total_orders=len(records),
    )


def sales_by_country(records: Iterable[CleanRecord]) -> list[CountrySales]:
    counts: Counter[str] = Counter()
    sales: dict[str, Decimal] = {}
    for record in records:
        if record.country is None:
            continue
        counts[record.country] += 1
        sales.setdefault(record.country, ZERO)
        if _has_amount(record):
            sales[record.country] += record.amount

    summary = [CountrySales(country, counts[country], sales[country]) for country in counts]
    return sorted(summary, key=lambda row: (-row.total_sales, row.country))


def top_customers(records: Iterable[CleanRecord], limit: int = 5) -> list[CustomerSpend]:
    # Orders without an amount, or without both name and email, are not ranked.
    if limit < 0:
        raise ValueError("limit must be non-negative")

    groups: dict[tuple[str, str], list[CleanRecord]] = {}
    for record in records:
        if not _has_amount(record):
            continue
        if record.customer_name is None and record.email is None:
            continue
        key = ((record.customer_name or "").lower(), (record.email or "").lower())
        groups.setdefault(key, []).append(record)

    ranked: list[CustomerSpend] = []
    for members in groups.values():
        first = members[0]
        ranked.append(
            CustomerSpend(
                customer_name=first.customer_name,
                email=first.email,
                order_count=len(members),
                total_spent=sum((member.amount for member in members), ZERO),
            )
        )
    ranked.sort(key=lambda row: (-row.total_spent, (row.customer_name or "").lower(), row.email or ""))
    return ranked[:limit]


def sales_by_date(records: Iterable[CleanRecord]) -> list[DailySales]:
    counts: Counter[date] = Counter()
    sales: dict[date, Decimal] = {}
    for record in records:
        if record.order_date is None:
            continue
        counts[record.order_date] += 1
        sales.setdefault(record.order_date, ZERO)
        if _has_amount(record):
            sales[record.order_date] += record.amount

    return [DailySales(day, counts[day], sales[day]) for day in sorted(counts)]


def find_duplicate_order_ids(raw_records: Iterable[RawRecord]) -> list[DuplicateGroup]:
    # Surfaced for a human to resolve; nothing is merged or dropped.
    counts = Counter(raw.order_id for raw in raw_records)
    return [DuplicateGroup(order_id, count) for order_id, count in sorted(counts.items()) if count > 1]
