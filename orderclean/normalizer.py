from collections.abc import Iterable, Sequence
import logging

from orderclean.rules import (
    canonicalize_country,
    clean_amount,
    clean_customer_name,
    clean_email,
    parse_order_date,
)
from orderclean.schemas import CleaningResult, CleanRecord, DateOverride, FieldRejection, RawRecord


logger = logging.getLogger(__name__)


def normalize_record(
    raw: RawRecord,
    overrides: dict[int, DateOverride] | None = None,
) -> tuple[CleanRecord, list[FieldRejection]]:
    rejections: list[FieldRejection] = []

    def check(field_name: str, outcome: tuple[object, str | None]):
        value, reason = outcome
        if reason is not None:
            rejections.append(FieldRejection(raw.order_id, field_name, reason, getattr(raw, field_name)))
        return value

    customer_name = check("customer_name", clean_customer_name(raw.customer_name))
    email = check("email", clean_email(raw.email))
    amount = check("amount", clean_amount(raw.amount))
    country = check("country", canonicalize_country(raw.country))

    override = overrides.get(raw.order_id) if overrides else None
    if override is not None:
        order_date = override.order_date
        logger.info(
            "order date overridden",
            extra={"order_id": raw.order_id, "raw_order_date": raw.order_date, "order_date": order_date.isoformat()},
        )
    else:
        order_date = check("order_date", parse_order_date(raw.order_date))

    record = CleanRecord(
        order_id=raw.order_id,
        customer_name=customer_name,
        email=email,
        order_date=order_date,
        amount=amount,
        country=country,
    )
    return record, rejections


def normalize_records(
    batch: Sequence[RawRecord],
    overrides: Iterable[DateOverride] | None = None,
) -> CleaningResult:
    override_map = {override.order_id: override for override in overrides or ()}

    known_ids = {raw.order_id for raw in batch}
    for order_id in sorted(set(override_map) - known_ids):
        logger.warning("date override ignored, order not in batch", extra={"order_id": order_id})

    records: list[CleanRecord] = []
    rejections: list[FieldRejection] = []
    for raw in batch:
        record, record_rejections = normalize_record(raw, override_map)
        records.append(record)
        rejections.extend(record_rejections)

    logger.info(
        "batch normalized",
        extra={
            "total_records": len(records),
            "rejections": len(rejections),
            "overrides_applied": len(known_ids & set(override_map)),
        },
    )
    return CleaningResult(records=records, rejections=rejections)
