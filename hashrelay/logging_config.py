import dataclasses
import datetime
import enum
import json
import sys
from pathlib import Path
from typing import Any, Dict

from loguru import logger


class SafeJsonEncoder(json.JSONEncoder):
    """Custom JSON encoder for records, enums and other Python objects"""
    def default(self, obj):
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        elif isinstance(obj, enum.Enum):
            return obj.name
        elif isinstance(obj, Path):
            return str(obj)
        elif isinstance(obj, (set, frozenset)):
            return list(obj)
        elif isinstance(obj, type):
            return str(obj)
        elif isinstance(obj, (datetime.datetime, datetime.date)):
            return obj.isoformat()
        try:
            return super().default(obj)
        except TypeError:
            return str(obj)

def flatten_extra(extra: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten nested extras to avoid nesting issues."""
    if not isinstance(extra, dict):
        return extra

    flattened = {}
    for key, value in extra.items():
        if key == 'extra' and isinstance(value, dict):
            # If we find a nested 'extra', merge it with the top level
            nested_extra = flatten_extra(value)
            for nested_key, nested_value in nested_extra.items():
                flattened[nested_key] = nested_value
        else:
            flattened[key] = value
    return flattened

def custom_format(record):
    """Process record into a formatted string for both console and file logging."""
    timestamp = record["time"].strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    level = record["level"].name
    message = record["message"]

    log_entry = {
        "timestamp": timestamp,
        "level": level,
        "message": message,
        "logger": record["name"],
        "file": record["file"].name,
        "line": record["line"],
        "function": record["function"]
    }

    raw_extra = record.get("extra", {})
    extra = flatten_extra(raw_extra)

    if extra:
        for key, value in extra.items():
            if key not in log_entry:  # Avoid overwriting standard fields
                log_entry[key] = value

    if record["exception"]:
        log_entry["exception"] = str(record["exception"])

    # For console output, create a readable format
    component = extra.get("component_name", "")
    operation = extra.get("operation", "")
    outcome = extra.get("outcome", "")

    console_msg = f"{timestamp} - {level} - "

    if component:
        console_msg += f"{component}"
        if operation:
            console_msg += f".{operation}"
        if outcome:
            console_msg += f" ({outcome})"
        console_msg += " - "

    console_msg += message

    # Truncate long metadata on the console; the JSON log keeps all of it
    if "relevant_metadata" in extra:
        metadata = str(extra["relevant_metadata"])
        if len(metadata) > 100:
            metadata = metadata[:97] + "..."
        console_msg += f" - Meta: {metadata}"

    json_msg = json.dumps(log_entry, cls=SafeJsonEncoder)

    return console_msg, json_msg

def setup_logging(logger_name=None, default_level="INFO", log_file="hashrelay.log"):
    """Configure the logger with a console sink and an optional JSON-lines file sink."""
    logger.remove()

    def console_sink(message):
        console_format, _ = custom_format(message.record)
        print(console_format, file=sys.stderr)

    logger.add(console_sink, level=default_level, format="{message}")

    if log_file:
        log_path = Path(log_file)

        def file_sink(message):
            _, json_format = custom_format(message.record)
            with open(log_path, "a") as f:
                f.write(json_format + "\n")

        logger.add(file_sink, level=default_level, format="{message}")

    if logger_name:
        return logger.bind(name=logger_name)
    return logger
