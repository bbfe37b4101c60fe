from datetime import date
from decimal import Decimal

import pytest

from orderclean.aggregation import find_duplicate_order_ids, sales_by_country, sales_by_date, top_customers, total_revenue
from orderclean.normalizer import normalize_records
from orderclean.sample_data import SAMPLE_ORDERS
from orderclean.schemas import DateOverride, RawRecord


@pytest.fixture()
def sample_result():
    raw_records = [RawRecord(**row) for row in SAMPLE_ORDERS]
    overrides = [DateOverride(order_id=1004, order_date=date(2023, 7, 13))]
    return normalize_records(raw_records, overrides)


def test_total_revenue_skips_absent_amounts(sample_result) -> None:
    summary = total_revenue(sample_result.records)

    assert summary.total_revenue == Decimal("526.64")
    assert summary.valid_amount_orders == 7
    assert summary.total_orders == 10


def test_total_revenue_of_empty_batch() -> None:
    summary = total_revenue([])
    assert summary.total_revenue == Decimal("0")
    assert summary.valid_amount_orders == 0


def test_sales_by_country_counts_rows_without_amount(sample_result) -> None:
    rows = sales_by_country(sample_result.records)

    assert [(row.country, row.order_count, row.total_sales) for row in rows] == [
        ("United States", 7, Decimal("458.75")),
        ("Canada", 2, Decimal("67.89")),
        ("Mexico", 1, Decimal("0.00")),
    ]


def test_top_customers_groups_case_insensitively(sample_result) -> None:
    rows = top_customers(sample_result.records, limit=5)

    assert [(row.customer_name, row.email, row.total_spent) for row in rows] == [
        ("John doe", "john.doe@example.com", Decimal("201.00")),
        ("Jane smith", "jane.smith@example.com", Decimal("85.00")),
        ("Alex murphy", "alex.murphy@example.com", Decimal("75.25")),
        ("Emily zhang", "emily.zhang@example.com", Decimal("67.89")),
        (None, "no.email@example.com", Decimal("55.50")),
    ]
    assert rows[0].order_count == 2


def test_top_customers_limit(sample_result) -> None:
    assert len(top_customers(sample_result.records, limit=2)) == 2
    assert top_customers(sample_result.records, limit=0) == []
    with pytest.raises(ValueError):
        top_customers(sample_result.records, limit=-1)


def test_sales_by_date_is_chronological(sample_result) -> None:
    rows = sales_by_date(sample_result.records)

    assert [row.order_date for row in rows] == sorted(row.order_date for row in rows)
    by_day = {row.order_date: row for row in rows}
    assert by_day[date(2023, 7, 10)].order_count == 2
    assert by_day[date(2023, 7, 10)].total_sales == Decimal("201.00")
    # 1005 has no amount but still counts on its day.
    assert by_day[date(2023, 7, 14)].order_count == 2
    assert by_day[date(2023, 7, 14)].total_sales == Decimal("67.89")
    assert by_day[date(2023, 7, 13)].total_sales == Decimal("0.00")


def test_sales_by_date_excludes_rows_without_date() -> None:
    raw_records = [RawRecord(**row) for row in SAMPLE_ORDERS]
    result = normalize_records(raw_records)

    rows = sales_by_date(result.records)
    assert sum(row.order_count for row in rows) == 9
    assert date(2023, 7, 13) not in {row.order_date for row in rows}


def test_duplicate_order_ids_are_reported_not_resolved(raw_factory) -> None:
    batch = [raw_factory(1001), raw_factory(1002), raw_factory(1001, amount="5.00")]

    groups = find_duplicate_order_ids(batch)

    assert len(groups) == 1
    assert groups[0].order_id == 1001
    assert groups[0].count == 2
    assert len(normalize_records(batch).records) == 3


def test_no_duplicates_in_sample_batch() -> None:
    assert find_duplicate_order_ids(RawRecord(**row) for row in SAMPLE_ORDERS) == []


def test_blank_country_is_left_out_of_country_rows(raw_factory) -> None:
    batch = [raw_factory(1, country="USA"), raw_factory(2, country="   ", amount="5.00")]
    result = normalize_records(batch)

    rows = sales_by_country(result.records)

    assert [(row.country, row.order_count, row.total_sales) for row in rows] == [("United States", 1, Decimal("10.00"))]
    summary = total_revenue(result.records)
    assert summary.total_orders == 2
    assert summary.total_revenue == Decimal("15.00")
