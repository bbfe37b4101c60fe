import csv
import json
from pathlib import Path

from orderclean.schemas import RAW_FIELDS


# Demonstration batch: duplicate customer, malformed emails, mixed date
# formats, garbage amounts and country spellings.
SAMPLE_ORDERS: list[dict[str, object]] = [
    {"order_id": 1001, "customer_name": "John Doe", "email": "john.doe@example.com", "order_date": "2023-07-10", "amount": "100.50", "country": "USA"},
    {"order_id": 1002, "customer_name": "jane smith", "email": "jane.smith@Example.Com", "order_date": "07/11/2023", "amount": "85.00", "country": "usa"},
    {"order_id": 1003, "customer_name": "Mike O'Conner", "email": "", "order_date": "2023/07/12", "amount": "42", "country": "United States"},
    {"order_id": 1004, "customer_name": "Ana-María López", "email": "ana.lopez@@example.com", "order_date": "2023-13-07", "amount": "", "country": "México"},
    {"order_id": 1005, "customer_name": "Robert", "email": "robert@example", "order_date": "2023-07-14", "amount": "-25.00", "country": "Canada"},
    {"order_id": 1006, "customer_name": "Emily Zhang", "email": "emily.zhang@example.com", "order_date": "14-07-2023", "amount": "67.89", "country": "CANADA"},
    {"order_id": 1007, "customer_name": "John Doe", "email": "john.doe@example.com", "order_date": "2023-07-10", "amount": "100.50", "country": "USA"},
    {"order_id": 1008, "customer_name": "Sarah Parker", "email": "sarah.parker@example.com", "order_date": "2023-07-15", "amount": "one hundred", "country": "US"},
    {"order_id": 1009, "customer_name": "", "email": "no.email@example.com", "order_date": "2023-07-16", "amount": "55.5", "country": "U.S.A."},
    {"order_id": 1010, "customer_name": "Alex Murphy", "email": "alex.murphy@example.com", "order_date": "2023-07-17", "amount": "75.25", "country": "United States"},
]

# 2023-13-07 was checked by hand and corrected.
SAMPLE_DATE_OVERRIDES: dict[str, str] = {"1004": "2023-07-13"}


def write_sample_batch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as outfile:
        writer = csv.DictWriter(outfile, fieldnames=list(RAW_FIELDS))
        writer.writeheader()
        writer.writerows(SAMPLE_ORDERS)


def write_sample_overrides(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as outfile:
        json.dump(SAMPLE_DATE_OVERRIDES, outfile, indent=2, sort_keys=True)
        outfile.write("\n")
