from datetime import date
import logging
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from orderclean.config import Settings
from orderclean.db_models import CleaningRun, StepRun
from orderclean.errors import CleaningError
from orderclean.ingest import ingest_records, load_date_overrides
from orderclean.normalizer import normalize_records
from orderclean.reporting import build_report, write_json, write_jsonl
from orderclean.retry import RetryExhaustedError, run_with_retries
from orderclean.run_store import (
    create_or_get_run,
    create_step_attempt,
    finish_step_failure,
    finish_step_success,
    mark_run_failed,
    mark_run_running,
    mark_run_succeeded,
    reset_failed_run_state,
    store_cleaned_orders,
    store_raw_orders,
    store_rejections,
)
from orderclean.schemas import CleaningResult, DateOverride, PipelineResult, RawRecord


logger = logging.getLogger(__name__)

INPUT_SUFFIXES = (".csv", ".jsonl")


class PipelineRunner:
    def __init__(self, settings: Settings, session_factory: sessionmaker[Session]) -> None:
        self.settings = settings
        self.session_factory = session_factory

    def run(self, *, run_date: date, run_key: str, trigger_source: str = "manual") -> PipelineResult:
        with self.session_factory() as db:
            run, created = create_or_get_run(
                db,
                run_key=run_key,
                run_date=run_date,
                trigger_source=trigger_source,
            )
            if not created:
                if run.status == "failed":
                    logger.info("retrying previously failed run", extra={"run_key": run_key})
                    reset_failed_run_state(db, run)
                else:
                    logger.info("idempotent run reused", extra={"run_key": run_key, "status": run.status})
                    return self._result_from_run(run, reused_existing_run=True)

            mark_run_running(db, run)

            total_records = 0
            flagged_records = 0

            try:
                raw_records, overrides = self._run_step(db, run, "ingest", lambda: self._ingest(run_date))
                total_records = len(raw_records)

                result: CleaningResult = self._run_step(
                    db,
                    run,
                    "normalize",
                    lambda: normalize_records(raw_records, overrides),
                )
                flagged_records = result.flagged_order_count

                report = self._run_step(
                    db,
                    run,
                    "aggregate",
                    lambda: build_report(raw_records, result, top_n=self.settings.top_customers_limit),
                )

                self._run_step(
                    db,
                    run,
                    "publish_report",
                    lambda: self._publish_outputs(
                        db,
                        run_id=run.id,
                        run_key=run_key,
                        run_date=run_date,
                        raw_records=raw_records,
                        result=result,
                        report=report,
                    ),
                )

                mark_run_succeeded(db, run, total_records=total_records, flagged_records=flagged_records)
            except Exception as exc:
                mark_run_failed(
                    db,
                    run,
                    error=str(exc),
                    total_records=total_records,
                    flagged_records=flagged_records,
                )
                logger.exception("cleaning run failed", extra={"run_key": run_key})
                return self._result_from_run(run, reused_existing_run=False)

            logger.info(
                "cleaning run succeeded",
                extra={"run_key": run_key, "total_records": total_records, "flagged_records": flagged_records},
            )
            return self._result_from_run(run, reused_existing_run=False)

    def _run_step(self, db: Session, run: CleaningRun, step_name: str, fn):
        def execute_once(attempt: int):
            # Each attempt gets its own row so retries stay auditable.
            step = create_step_attempt(db, run_id=run.id, step_name=step_name, attempt=attempt)
            try:
                result = fn()
                finish_step_success(db, step)
                return result
            except Exception as exc:
                db.rollback()
                finish_step_failure(db, step, str(exc))
                raise

        try:
            return run_with_retries(
                lambda: execute_once(self._next_attempt(db, run.id, step_name)),
                max_retries=self.settings.max_step_retries,
                backoff_seconds=self.settings.retry_backoff_seconds,
                should_retry=lambda exc: self._is_retryable(step_name, exc),
                label=f"step '{step_name}'",
            )
        except RetryExhaustedError as exc:
            raise RuntimeError(f"step '{step_name}' failed after {exc.attempts} attempt(s): {exc.__cause__}") from exc

    def _next_attempt(self, db: Session, run_id: int, step_name: str) -> int:
        stmt = (
            select(StepRun.attempt)
            .where(StepRun.run_id == run_id, StepRun.step_name == step_name)
            .order_by(StepRun.attempt.desc())
            .limit(1)
        )
        current = db.execute(stmt).scalar_one_or_none()
        if current is not None:
            return current + 1
        return 1

    def _is_retryable(self, step_name: str, exc: Exception) -> bool:
        # Bad or missing input stays bad on retry.
        if step_name == "ingest" and isinstance(exc, (FileNotFoundError, CleaningError)):
            return False
        return True

    def input_path(self, run_date: date) -> Path:
        input_dir = Path(self.settings.input_dir)
        candidates = [input_dir / f"orders-{run_date.isoformat()}{suffix}" for suffix in INPUT_SUFFIXES]
        for candidate in candidates:
            if candidate.exists():
                return candidate
        return candidates[0]

    def _ingest(self, run_date: date) -> tuple[list[RawRecord], list[DateOverride]]:
        raw_records = ingest_records(self.input_path(run_date))
        overrides = load_date_overrides(Path(self.settings.date_overrides_path))
        return raw_records, overrides

    def _publish_outputs(
        self,
        db: Session,
        *,
        run_id: int,
        run_key: str,
        run_date: date,
        raw_records: list[RawRecord],
        result: CleaningResult,
        report: dict[str, object],
    ) -> None:
        output_root = Path(self.settings.output_dir)
        cleaned_path = output_root / "cleaned" / f"{run_key}.jsonl"
        rejections_path = output_root / "rejections" / f"{run_key}.jsonl"

        write_jsonl(cleaned_path, [record.to_dict() for record in result.records])
        write_jsonl(rejections_path, [rejection.to_dict() for rejection in result.rejections])
        write_json(
            Path(self._report_path(run_key)),
            {
                "run_key": run_key,
                "run_date": run_date.isoformat(),
                "cleaned_output": str(cleaned_path),
                "rejections_output": str(rejections_path),
                **report,
            },
        )

        store_raw_orders(db, run_id=run_id, raw_records=raw_records)
        store_cleaned_orders(db, run_id=run_id, records=result.records)
        store_rejections(db, run_id=run_id, rejections=result.rejections)

    def _report_path(self, run_key: str) -> str:
        return str(Path(self.settings.output_dir) / "reports" / f"{run_key}.json")

    def _result_from_run(self, run: CleaningRun, reused_existing_run: bool) -> PipelineResult:
        return PipelineResult(
            run_id=run.id,
            run_key=run.run_key,
            run_date=run.run_date,
            trigger_source=run.trigger_source,
            status=run.status,
            total_records=run.total_records,
            clean_records=run.clean_records,
            flagged_records=run.flagged_records,
            report_path=self._report_path(run.run_key),
            reused_existing_run=reused_existing_run,
        )
