from collections.abc import Sequence
from datetime import date
from decimal import Decimal
import json
from pathlib import Path

from orderclean.aggregation import find_duplicate_order_ids, sales_by_country, sales_by_date, top_customers, total_revenue
from orderclean.profiling import profile_raw_records, rows_needing_review
from orderclean.schemas import CleaningResult, RawRecord


def build_report(raw_records: Sequence[RawRecord], result: CleaningResult, *, top_n: int = 5) -> dict[str, object]:
    revenue = total_revenue(result.records)
    profile = profile_raw_records(raw_records)

    return {
        "raw_profile": {
            "total_rows": profile.total_rows,
            "unique_customers": profile.unique_customers,
            "country_distribution": [{"country": country, "count": count} for country, count in profile.country_distribution],
            "amount_status": profile.amount_status,
            "non_iso_dates": [{"order_id": order_id, "order_date": raw} for order_id, raw in profile.non_iso_dates],
        },
        "duplicate_order_ids": [
            {"order_id": group.order_id, "count": group.count} for group in find_duplicate_order_ids(raw_records)
        ],
        "revenue": {
            "total_revenue": revenue.total_revenue,
            "valid_amount_orders": revenue.valid_amount_orders,
            "total_orders": revenue.total_orders,
        },
        "sales_by_country": [
            {"country": row.country, "order_count": row.order_count, "total_sales": row.total_sales}
            for row in sales_by_country(result.records)
        ],
        "top_customers": [
            {
                "customer_name": row.customer_name,
                "email": row.email,
                "order_count": row.order_count,
                "total_spent": row.total_spent,
            }
            for row in top_customers(result.records, limit=top_n)
        ],
        "sales_by_date": [
            {"order_date": row.order_date, "order_count": row.order_count, "total_sales": row.total_sales}
            for row in sales_by_date(result.records)
        ],
        "rows_needing_review": [record.order_id for record in rows_needing_review(result.records)],
        "rejection_count": len(result.rejections),
    }


def _json_default(value: object) -> object:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_jsonl(path: Path, rows: list[dict[str, object]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as outfile:
        for row in rows:
            outfile.write(json.dumps(row, sort_keys=True, default=_json_default))
            outfile.write("\n")


def write_json(path: Path, payload: dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as outfile:
        json.dump(payload, outfile, indent=2, sort_keys=True, default=_json_default)
        outfile.write("\n")
