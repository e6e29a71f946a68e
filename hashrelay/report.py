"""
Fixed-width report rendering.

The layout is kept bit-exact with existing result files: four right-justified
columns of widths 30/20/20/50 and a rule of 120 dashes under the header.
"""

from collections.abc import Iterable
from pathlib import Path

from hashrelay.exceptions import SinkOpenError, SinkWriteError
from hashrelay.scheme import CollectedEntry

PASSWORD_WIDTH = 30
PASSES_WIDTH = 20
SALT_WIDTH = 20
VALUE_WIDTH = 50
RULE_WIDTH = 120


def format_header() -> str:
    """Return the header row followed by the dash rule."""
    return (
        "Password".rjust(PASSWORD_WIDTH)
        + "Passes".rjust(PASSES_WIDTH)
        + "Salt".rjust(SALT_WIDTH)
        + "Hash".rjust(VALUE_WIDTH)
        + "\n"
        + "-" * RULE_WIDTH
        + "\n"
    )


def format_row(entry: CollectedEntry) -> str:
    """Return one data row. Values wider than their column are not truncated."""
    record = entry.record
    return (
        record.password.rjust(PASSWORD_WIDTH)
        + str(record.passes).rjust(PASSES_WIDTH)
        + str(record.salt).rjust(SALT_WIDTH)
        + entry.value.rjust(VALUE_WIDTH)
        + "\n"
    )


def write_report(path: str | Path, entries: Iterable[CollectedEntry]) -> int:
    """
    Write the report for ``entries`` to ``path``, in the order given.

    Args:
        path: Output file; created or truncated
        entries: Collected entries to render

    Returns:
        Number of data rows written

    Raises:
        SinkOpenError: If the file cannot be opened
        SinkWriteError: If a write fails after the file was opened
    """
    try:
        sink = open(path, "w", encoding="utf-8")
    except OSError as e:
        raise SinkOpenError(f"Couldn't open {path} for writing: {e}") from e

    rows = 0
    with sink:
        try:
            sink.write(format_header())
            for entry in entries:
                sink.write(format_row(entry))
                rows += 1
            sink.flush()
        except OSError as e:
            raise SinkWriteError(f"Write to {path} failed after {rows} rows: {e}") from e
    return rows
