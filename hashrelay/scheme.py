"""
Message and record types exchanged between the relay actors.

Everything here is a frozen dataclass: records and results are copied between
actors and never mutated after they are sent.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Record:
    """
    One input item.

    Attributes:
        password: Text fed to the transform
        passes: Pass count, combined with ``salt`` by the default transform
        salt: Salt value
    """

    password: str
    passes: int
    salt: int


@dataclass(frozen=True)
class WorkItem:
    """
    A record tagged with its routing information.

    Created by the distributor at dispatch time and consumed by exactly one
    worker.

    Attributes:
        record: The submitted record
        index: 0-based submission index of the record
        worker_index: Index of the worker the record was routed to
    """

    record: Record
    index: int
    worker_index: int


@dataclass(frozen=True)
class Accepted:
    """Transform result that passed the filter."""

    value: str
    item: WorkItem


@dataclass(frozen=True)
class Rejected:
    """Transform result that was filtered out."""

    item: WorkItem


@dataclass(frozen=True)
class Failed:
    """The transform raised; ``error`` holds its description."""

    item: WorkItem
    error: str


@dataclass(frozen=True)
class Done:
    """End-of-stream acknowledgment from one worker."""

    worker_index: int


WorkerResult = Accepted | Rejected | Failed | Done


@dataclass(frozen=True)
class CollectedEntry:
    """A transformed value paired with the record it came from."""

    value: str
    record: Record


@dataclass(frozen=True)
class RunSummary:
    """
    Outcome of one relay run, as reported by the distributor.

    Attributes:
        worker_count: Size of the worker pool
        dispatched: Number of records routed to workers
        accepted: Number of ``Accepted`` results received
        rejected: Number of ``Rejected`` results received
        failed: Number of ``Failed`` results received
        workers_done: Number of ``Done`` signals received
        flush_count: How many times the collector flush was requested
        assignments: Worker index -> submission indices reported by that worker
        entries: Collected entries in the order the printer rendered them
        rows_written: Data rows written to the report (header excluded)
        report_exit_code: Exit code of a report failure, 0 when the report
            was written
        report_error: Description of the report failure, if any
    """

    worker_count: int
    dispatched: int
    accepted: int
    rejected: int
    failed: int
    workers_done: int
    flush_count: int
    assignments: dict[int, tuple[int, ...]]
    entries: tuple[CollectedEntry, ...]
    rows_written: int = 0
    report_exit_code: int = 0
    report_error: str | None = None

    @property
    def classified(self) -> int:
        """Total number of per-record results received."""
        return self.accepted + self.rejected + self.failed
