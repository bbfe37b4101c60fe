from collections.abc import Generator
from pathlib import Path

import pytest

from orderclean.config import Settings
from orderclean.database import build_session_factory
from orderclean.pipeline import PipelineRunner
from orderclean.schemas import RawRecord


@pytest.fixture()
def temp_workspace(tmp_path: Path) -> Path:
    (tmp_path / "data" / "input").mkdir(parents=True, exist_ok=True)
    (tmp_path / "outputs").mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture()
def test_settings(temp_workspace: Path) -> Settings:
    return Settings(
        app_name="orderclean",
        database_url=f"sqlite:///{temp_workspace / 'test.db'}",
        log_level="INFO",
        input_dir=str(temp_workspace / "data" / "input"),
        output_dir=str(temp_workspace / "outputs"),
        date_overrides_path=str(temp_workspace / "data" / "date_overrides.json"),
        top_customers_limit=5,
        max_step_retries=1,
        retry_backoff_seconds=0,
        schedule_hour_utc=2,
        schedule_minute_utc=0,
    )


@pytest.fixture()
def runner(test_settings: Settings) -> Generator[PipelineRunner, None, None]:
    session_factory = build_session_factory(test_settings.database_url)
    yield PipelineRunner(test_settings, session_factory)


def make_raw(order_id: int = 1, **fields: str) -> RawRecord:
    values = {
        "customer_name": "Ada Lovelace",
        "email": "ada@example.com",
        "order_date": "2023-07-10",
        "amount": "10.00",
        "country": "USA",
    }
    values.update(fields)
    return RawRecord(order_id=order_id, **values)


@pytest.fixture()
def raw_factory():
    return make_raw
