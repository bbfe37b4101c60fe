from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from orderclean.db_models import CleanedOrder, CleaningRun, FieldRejectionRow, RawOrder, StepRun, utc_now
from orderclean.schemas import CleanRecord, FieldRejection, RawRecord


def get_run_by_key(db: Session, run_key: str) -> CleaningRun | None:
    stmt = select(CleaningRun).where(CleaningRun.run_key == run_key)
    return db.execute(stmt).scalar_one_or_none()


def create_or_get_run(db: Session, *, run_key: str, run_date: date, trigger_source: str) -> tuple[CleaningRun, bool]:
    run = CleaningRun(run_key=run_key, run_date=run_date, trigger_source=trigger_source, status="queued")
    db.add(run)
    try:
        db.commit()
    except IntegrityError:
        # run_key is unique, so a second create for the same key lands here.
        db.rollback()
        existing = get_run_by_key(db, run_key)
        if existing:
            return existing, False
        raise

    db.refresh(run)
    return run, True


def reset_failed_run_state(db: Session, run: CleaningRun) -> None:
    for model in (StepRun, RawOrder, CleanedOrder, FieldRejectionRow):
        db.execute(delete(model).where(model.run_id == run.id))

    run.status = "queued"
    run.error = None
    run.completed_at = None
    run.total_records = 0
    run.clean_records = 0
    run.flagged_records = 0
    db.commit()


def mark_run_running(db: Session, run: CleaningRun) -> None:
    run.status = "running"
    run.started_at = utc_now()
    run.error = None
    db.commit()


def mark_run_succeeded(db: Session, run: CleaningRun, *, total_records: int, flagged_records: int) -> None:
    run.status = "succeeded"
    run.total_records = total_records
    run.clean_records = total_records - flagged_records
    run.flagged_records = flagged_records
    run.completed_at = utc_now()
    run.error = None
    db.commit()


def mark_run_failed(
    db: Session,
    run: CleaningRun,
    *,
    error: str,
    total_records: int = 0,
    flagged_records: int = 0,
) -> None:
    run.status = "failed"
    run.error = error
    run.total_records = total_records
    run.clean_records = max(total_records - flagged_records, 0)
    run.flagged_records = flagged_records
    run.completed_at = utc_now()
    db.commit()


def create_step_attempt(db: Session, *, run_id: int, step_name: str, attempt: int) -> StepRun:
    step = StepRun(run_id=run_id, step_name=step_name, attempt=attempt, status="started", started_at=utc_now())
    db.add(step)
    db.commit()
    db.refresh(step)
    return step


def _finish_step(db: Session, step: StepRun, status: str, error: str | None) -> None:
    finished_at = utc_now()
    step.status = status
    step.completed_at = finished_at
    step.duration_ms = (finished_at - step.started_at).total_seconds() * 1000
    step.error = error
    db.commit()


def finish_step_success(db: Session, step: StepRun) -> None:
    _finish_step(db, step, "succeeded", None)


def finish_step_failure(db: Session, step: StepRun, error: str) -> None:
    _finish_step(db, step, "failed", error)


def _replace_rows(db: Session, model, run_id: int, rows: list) -> None:
    # A retried publish rewrites the run's rows instead of appending.
    db.execute(delete(model).where(model.run_id == run_id))
    db.add_all(rows)
    db.commit()


def store_raw_orders(db: Session, *, run_id: int, raw_records: list[RawRecord]) -> None:
    rows = [
        RawOrder(
            run_id=run_id,
            record_index=index,
            order_id=raw.order_id,
            customer_name=raw.customer_name,
            email=raw.email,
            order_date=raw.order_date,
            amount=raw.amount,
            country=raw.country,
        )
        for index, raw in enumerate(raw_records)
    ]
    _replace_rows(db, RawOrder, run_id, rows)


def store_cleaned_orders(db: Session, *, run_id: int, records: list[CleanRecord]) -> None:
    rows = [
        CleanedOrder(
            run_id=run_id,
            record_index=index,
            order_id=record.order_id,
            customer_name=record.customer_name,
            email=record.email,
            order_date=record.order_date,
            amount=record.amount,
            country=record.country,
        )
        for index, record in enumerate(records)
    ]
    _replace_rows(db, CleanedOrder, run_id, rows)


def store_rejections(db: Session, *, run_id: int, rejections: list[FieldRejection]) -> None:
    rows = [
        FieldRejectionRow(
            run_id=run_id,
            order_id=rejection.order_id,
            field=rejection.field,
            reason=rejection.reason,
            raw_value=rejection.raw_value,
        )
        for rejection in rejections
    ]
    _replace_rows(db, FieldRejectionRow, run_id, rows)
