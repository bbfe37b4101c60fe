from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


# Rejection reasons attached to a field left absent during normalization.
MISSING_NAME = "MISSING_NAME"
MISSING_EMAIL = "MISSING_EMAIL"
INVALID_EMAIL = "INVALID_EMAIL"
MISSING_AMOUNT = "MISSING_AMOUNT"
INVALID_AMOUNT = "INVALID_AMOUNT"
NEGATIVE_AMOUNT = "NEGATIVE_AMOUNT"
MISSING_DATE = "MISSING_DATE"
INVALID_DATE = "INVALID_DATE"
MISSING_COUNTRY = "MISSING_COUNTRY"

RAW_FIELDS = ("order_id", "customer_name", "email", "order_date", "amount", "country")


@dataclass(frozen=True)
class RawRecord:
    order_id: int
    customer_name: str
    email: str
    order_date: str
    amount: str
    country: str


@dataclass(frozen=True)
class CleanRecord:
    order_id: int
    customer_name: str | None
    email: str | None
    order_date: date | None
    amount: Decimal | None
    country: str | None

    def to_dict(self) -> dict[str, object]:
        return {
            "order_id": self.order_id,
            "customer_name": self.customer_name,
            "email": self.email,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "amount": str(self.amount) if self.amount is not None else None,
            "country": self.country,
        }


@dataclass(frozen=True)
class FieldRejection:
    order_id: int
    field: str
    reason: str
    raw_value: str

    def to_dict(self) -> dict[str, object]:
        return {
            "order_id": self.order_id,
            "field": self.field,
            "reason": self.reason,
            "raw_value": self.raw_value,
        }


@dataclass(frozen=True)
class DateOverride:
    order_id: int
    order_date: date


@dataclass(frozen=True)
class CleaningResult:
    records: list[CleanRecord]
    rejections: list[FieldRejection]

    def rejections_for(self, order_id: int) -> list[FieldRejection]:
        return [rejection for rejection in self.rejections if rejection.order_id == order_id]

    @property
    def flagged_order_count(self) -> int:
        return len({rejection.order_id for rejection in self.rejections})


@dataclass(frozen=True)
class RevenueSummary:
    total_revenue: Decimal
    valid_amount_orders: int
    total_orders: int


@dataclass(frozen=True)
class CountrySales:
    country: str
    order_count: int
    total_sales: Decimal


@dataclass(frozen=True)
class CustomerSpend:
    customer_name: str | None
    email: str | None
    order_count: int
    total_spent: Decimal


@dataclass(frozen=True)
class DailySales:
    order_date: date
    order_count: int
    total_sales: Decimal


@dataclass(frozen=True)
class DuplicateGroup:
    order_id: int
    count: int


@dataclass(frozen=True)
class RawProfile:
    total_rows: int
    unique_customers: int
    country_distribution: list[tuple[str, int]]
    amount_status: dict[str, int]
    non_iso_dates: list[tuple[int, str]] = field(default_factory=list)


@dataclass(frozen=True)
class PipelineResult:
    run_id: int
    run_key: str
    run_date: date
    trigger_source: str
    status: str
    total_records: int
    clean_records: int
    flagged_records: int
    report_path: str | None
    reused_existing_run: bool
