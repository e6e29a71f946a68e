"""Loading input records from JSON files."""

import json
from pathlib import Path

from loguru import logger

from hashrelay.exceptions import InputError
from hashrelay.scheme import Record

REQUIRED_FIELDS = ("password", "passes", "salt")


def parse_record(raw: dict, position: int) -> Record:
    """
    Build a Record from one decoded JSON object.

    Args:
        raw: Decoded JSON object
        position: Position of the object in the input array, used in errors

    Raises:
        InputError: If a field is missing or has the wrong type
    """
    if not isinstance(raw, dict):
        raise InputError(f"Record {position} must be an object, got {type(raw).__name__}")

    missing = [name for name in REQUIRED_FIELDS if name not in raw]
    if missing:
        raise InputError(f"Record {position} is missing fields: {', '.join(missing)}")

    password, passes, salt = raw["password"], raw["passes"], raw["salt"]
    if not isinstance(password, str):
        raise InputError(f"Record {position}: password must be a string")
    for name, value in (("passes", passes), ("salt", salt)):
        # bool is an int subclass but never a valid count
        if isinstance(value, bool) or not isinstance(value, int):
            raise InputError(f"Record {position}: {name} must be an integer")

    return Record(password=password, passes=passes, salt=salt)


def load_records(path: str | Path) -> list[Record]:
    """
    Read a JSON array of ``{"password", "passes", "salt"}`` objects.

    Args:
        path: Path to the JSON input file

    Returns:
        Records in file order

    Raises:
        InputError: If the file cannot be read or does not hold a valid array
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Cannot read input file {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InputError(f"Input file {path} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise InputError(f"Input file {path} must contain a JSON array")

    records = [parse_record(raw, i) for i, raw in enumerate(data)]
    logger.bind(
        component_name="loader",
        operation="load_records",
        outcome="success",
        relevant_metadata={"path": str(path), "count": len(records)},
    ).info(f"Loaded {len(records)} records")
    return records
