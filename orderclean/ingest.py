import csv
from datetime import date
import json
from pathlib import Path
import re

from orderclean.errors import IngestionError, OverrideError
from orderclean.schemas import RAW_FIELDS, DateOverride, RawRecord


TEXT_FIELDS = RAW_FIELDS[1:]
ORDER_ID_PATTERN = re.compile(r"[0-9]+")


def ingest_records(input_path: Path) -> list[RawRecord]:
    # Every row is checked before anything is returned.
    if not input_path.exists():
        raise FileNotFoundError(f"input file not found: {input_path}")

    suffix = input_path.suffix.lower()
    if suffix == ".csv":
        rows = _read_csv_rows(input_path)
    elif suffix == ".jsonl":
        rows = _read_jsonl_rows(input_path)
    else:
        raise IngestionError(f"unsupported input format: {input_path.name}")

    return [_to_raw_record(line_no, row) for line_no, row in rows]


def _read_csv_rows(input_path: Path) -> list[tuple[int, dict[str, object]]]:
    try:
        with input_path.open("r", encoding="utf-8-sig", newline="") as infile:
            reader = csv.DictReader(infile)
            missing = [name for name in RAW_FIELDS if name not in (reader.fieldnames or [])]
            if missing:
                raise IngestionError(f"{input_path.name}: missing required columns: {', '.join(missing)}")
            # Header is line 1.
            return [(index + 2, dict(row)) for index, row in enumerate(reader)]
    except UnicodeDecodeError as exc:
        raise IngestionError(f"{input_path.name}: CSV must be UTF-8 encoded") from exc
    except csv.Error as exc:
        raise IngestionError(f"{input_path.name}: invalid CSV format: {exc}") from exc


def _read_jsonl_rows(input_path: Path) -> list[tuple[int, dict[str, object]]]:
    rows: list[tuple[int, dict[str, object]]] = []
    try:
        with input_path.open("r", encoding="utf-8-sig") as infile:
            lines = list(infile)
    except UnicodeDecodeError as exc:
        raise IngestionError(f"{input_path.name}: JSONL must be UTF-8 encoded") from exc

    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            row = json.loads(line)
        except json.JSONDecodeError as exc:
            raise IngestionError(f"{input_path.name}:{line_no}: invalid JSON: {exc}") from exc
        if not isinstance(row, dict):
            raise IngestionError(f"{input_path.name}:{line_no}: expected a JSON object")
        missing = [name for name in RAW_FIELDS if name not in row]
        if missing:
            raise IngestionError(f"{input_path.name}:{line_no}: missing required columns: {', '.join(missing)}")
        rows.append((line_no, row))
    return rows


def _to_raw_record(line_no: int, row: dict[str, object]) -> RawRecord:
    order_id = row.get("order_id")
    if isinstance(order_id, str) and ORDER_ID_PATTERN.fullmatch(order_id.strip()):
        order_id = int(order_id.strip())
    if isinstance(order_id, bool) or not isinstance(order_id, int):
        raise IngestionError(f"line {line_no}: order_id must be an integer, got {order_id!r}")

    text: dict[str, str] = {}
    for name in TEXT_FIELDS:
        value = row.get(name)
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise IngestionError(f"line {line_no}: {name} must be text, got {type(value).__name__}")
        text[name] = value

    return RawRecord(order_id=order_id, **text)


def load_date_overrides(path: Path) -> list[DateOverride]:
    # {"1004": "2023-07-13"}; no file means no overrides.
    if not path.exists():
        return []

    try:
        with path.open("r", encoding="utf-8-sig") as infile:
            payload = json.load(infile)
    except UnicodeDecodeError as exc:
        raise OverrideError(f"{path.name}: must be UTF-8 encoded") from exc
    except json.JSONDecodeError as exc:
        raise OverrideError(f"{path.name}: invalid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise OverrideError(f"{path.name}: expected an object of order_id -> date")

    overrides: list[DateOverride] = []
    for key, value in payload.items():
        if not ORDER_ID_PATTERN.fullmatch(key.strip()):
            raise OverrideError(f"{path.name}: bad order id {key!r}")
        try:
            overrides.append(DateOverride(order_id=int(key.strip()), order_date=date.fromisoformat(str(value))))
        except ValueError as exc:
            raise OverrideError(f"{path.name}: bad override {key!r}: {value!r}") from exc
    return overrides
