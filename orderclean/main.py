import argparse
from datetime import date
import logging
from pathlib import Path

from orderclean.config import get_settings
from orderclean.database import build_session_factory
from orderclean.pipeline import PipelineRunner
from orderclean.sample_data import write_sample_batch, write_sample_overrides
from orderclean.scheduler import start_scheduler


logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Clean and report on raw order batches")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="clean one batch of orders")
    run_parser.add_argument("--run-date", required=True, help="Run date in YYYY-MM-DD format")
    run_parser.add_argument("--run-key", required=False, help="Idempotency key for this run")
    run_parser.add_argument(
        "--trigger-source",
        default="manual",
        choices=["manual", "scheduled"],
        help="Metadata label for how this run was triggered",
    )

    schedule_parser = subparsers.add_parser("schedule", help="start daily scheduler")
    schedule_parser.add_argument("--run-now", action="store_true", help="also run once immediately")

    seed_parser = subparsers.add_parser("seed", help="write the demonstration batch to the input directory")
    seed_parser.add_argument("--run-date", default=None, help="Batch date in YYYY-MM-DD format (default: today)")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if args.command == "seed":
        run_date = date.fromisoformat(args.run_date) if args.run_date else date.today()
        batch_path = Path(settings.input_dir) / f"orders-{run_date.isoformat()}.csv"
        overrides_path = Path(settings.date_overrides_path)
        write_sample_batch(batch_path)
        write_sample_overrides(overrides_path)
        logger.info("sample batch written", extra={"path": str(batch_path)})
        print(f"batch={batch_path} overrides={overrides_path}")
        return

    session_factory = build_session_factory(settings.database_url)
    if args.command == "schedule":
        start_scheduler(settings, session_factory, run_now=args.run_now)
        return

    run_date = date.fromisoformat(args.run_date)
    run_key = args.run_key or run_date.isoformat()

    runner = PipelineRunner(settings, session_factory)
    result = runner.run(
        run_date=run_date,
        run_key=run_key,
        trigger_source=args.trigger_source,
    )

    print(
        "run_id={run_id} run_key={run_key} trigger={trigger} status={status} total={total} clean={clean} flagged={flagged} reused={reused} report={report}".format(
            run_id=result.run_id,
            run_key=result.run_key,
            trigger=result.trigger_source,
            status=result.status,
            total=result.total_records,
            clean=result.clean_records,
            flagged=result.flagged_records,
            reused=result.reused_existing_run,
            report=result.report_path,
        )
    )
    if result.status == "failed":
        raise SystemExit(1)


if __name__ == "__main__":
    main()
