"""
PrinterActor: renders the final collected sequence into the report file.
"""

from pathlib import Path

import xoscar as xo
from loguru import logger

from hashrelay.exceptions import ReportError
from hashrelay.report import write_report
from hashrelay.scheme import CollectedEntry


class PrinterActor(xo.Actor):
    """
    Owns the report sink and writes it exactly once per run.

    Rows appear in the order of the sequence handed over, i.e. the order in
    which accepted results reached the collector. That order is a
    presentation detail only.

    Attributes:
        output_path: File the report is written to
        rendered: Whether render() has already run
    """

    def __init__(self, output_path: str | Path):
        self.output_path = Path(output_path)
        self.rendered = False
        self._log = logger.bind(component_name="Printer")

    async def render(self, entries: tuple[CollectedEntry, ...]) -> int:
        """
        Write the report for ``entries``.

        Returns:
            Number of data rows written

        Raises:
            SinkOpenError: If the output file cannot be opened
            SinkWriteError: If writing the output file fails
        """
        if self.rendered:
            self._log.bind(operation="render", outcome="ignored").warning(
                "Report already rendered, ignoring repeated render"
            )
            return 0
        self.rendered = True

        try:
            rows = write_report(self.output_path, entries)
        except ReportError as e:
            self._log.bind(operation="render", outcome="failed").error(str(e))
            raise

        self._log.bind(
            operation="render",
            outcome="success",
            relevant_metadata={"path": str(self.output_path), "rows": rows},
        ).info(f"Wrote {rows} rows to {self.output_path}")
        return rows
