"""
DistributorActor: orchestrates the worker pool, the collector and the printer.

This module provides the actor that receives records from the submitter,
routes them round-robin across its workers, detects the end of the stream by
counting worker ``Done`` reports and hands the collected sequence to the
printer.
"""

from pathlib import Path

import xoscar as xo
from loguru import logger

from hashrelay.actors.collector_actor import CollectorActor
from hashrelay.actors.printer_actor import PrinterActor
from hashrelay.actors.worker_actor import WorkerActor
from hashrelay.exceptions import ProtocolViolation, ReportError, SinkWriteError
from hashrelay.scheme import Accepted, CollectedEntry, Done, Failed, Record, Rejected, RunSummary, WorkerResult
from hashrelay.state import (
    DistributorPhase,
    DistributorState,
    apply_result,
    begin,
    complete_flush,
    dispatch_record,
    end_of_input,
)
from hashrelay.transforms import Transform, password_hash


class DistributorActor(xo.Actor):
    """
    Orchestrator of one relay run.

    Phases: INITIALIZING -> DISPATCHING -> DRAINING -> FLUSHING -> DONE.

    The end signal is broadcast to the workers only after every record has
    been dispatched. Since each worker handles its mailbox in arrival order,
    a worker's ``Done`` report follows the results of everything assigned to
    it, so the collector flush is requested once ``Done`` has arrived from
    every worker. Accepted results are forwarded to the collector before that
    flush request over the same sender/recipient channel, so they are all
    collected before the flush.

    Messages that are not valid in the current phase are logged and ignored.

    Attributes:
        transform: Transform handed to every worker
        output_path: Report file handed to the printer
        run_id: Prefix of the uids of the child actors
        state: Current DistributorState
        workers: Worker references, indexed by worker index
        collector: Collector reference
        printer: Printer reference

    Example:
        >>> distributor = await xo.create_actor(
        ...     DistributorActor, password_hash, "result.txt",
        ...     address="127.0.0.1:13527", uid="relay_distributor"
        ... )
        >>> await distributor.begin(2)
        >>> for record in records:
        ...     await distributor.receive_record.tell(record)
        >>> await distributor.receive_end_of_input.tell()
    """

    def __init__(
        self,
        transform: Transform = password_hash,
        output_path: str | Path = "result.txt",
        run_id: str = "relay",
    ):
        if not callable(transform):
            raise TypeError(f"transform must be callable, got {type(transform)}")

        self.transform = transform
        self.output_path = Path(output_path)
        self.run_id = run_id
        self.state = DistributorState()
        self.workers: list[xo.ActorRef] = []
        self.collector: xo.ActorRef | None = None
        self.printer: xo.ActorRef | None = None

        self.assignments: dict[int, list[int]] = {}
        self.entries: tuple[CollectedEntry, ...] = ()
        self.rows_written = 0
        self.report_exit_code = 0
        self.report_error: str | None = None
        self._log = logger.bind(component_name="Distributor", run_id=run_id)

    async def __pre_destroy__(self):
        await self._destroy_children()

    def _ignore(self, operation: str, error: ProtocolViolation) -> None:
        self._log.bind(operation=operation, outcome="ignored").warning(f"Protocol error: {error}")

    async def begin(self, worker_count: int) -> None:
        """
        Create the worker pool, the collector and the printer.

        Raises:
            ConfigurationError: If worker_count is less than 1
        """
        try:
            next_state = begin(self.state, worker_count)
        except ProtocolViolation as e:
            self._ignore("begin", e)
            return

        self.collector = await xo.create_actor(
            CollectorActor, self.ref(), address=self.address, uid=f"{self.run_id}_collector"
        )
        self.printer = await xo.create_actor(
            PrinterActor, self.output_path, address=self.address, uid=f"{self.run_id}_printer"
        )
        for i in range(worker_count):
            worker = await xo.create_actor(
                WorkerActor,
                i,
                self.ref(),
                self.transform,
                address=self.address,
                uid=f"{self.run_id}_worker_{i}",
            )
            self.workers.append(worker)

        self.assignments = {i: [] for i in range(worker_count)}
        self.state = next_state
        self._log.bind(
            operation="begin",
            outcome="dispatching",
            relevant_metadata={"worker_count": worker_count},
        ).info(f"Started {worker_count} workers")

    async def receive_record(self, record: Record) -> None:
        """Route one record to the next worker in round-robin order."""
        try:
            self.state, item = dispatch_record(self.state, record)
        except ProtocolViolation as e:
            self._ignore("receive_record", e)
            return

        await self.workers[item.worker_index].receive_work_item.tell(item)

    async def receive_end_of_input(self) -> None:
        """Broadcast the end signal to every worker."""
        try:
            self.state = end_of_input(self.state)
        except ProtocolViolation as e:
            self._ignore("receive_end_of_input", e)
            return

        self._log.bind(
            operation="receive_end_of_input",
            outcome="draining",
            relevant_metadata={"dispatched": self.state.dispatched},
        ).info(f"All {self.state.dispatched} records dispatched, signalling workers")
        for worker in self.workers:
            await worker.receive_end_signal.tell()

    async def receive_worker_result(self, result: WorkerResult) -> None:
        """Account for a worker result and request the flush once all workers are done."""
        try:
            self.state, flush_now = apply_result(self.state, result)
        except ProtocolViolation as e:
            self._ignore("receive_worker_result", e)
            return

        match result:
            case Accepted(value=value, item=item):
                self.assignments[item.worker_index].append(item.index)
                await self.collector.receive_accepted.tell(value, item.record)
            case Rejected(item=item):
                self.assignments[item.worker_index].append(item.index)
            case Failed(item=item, error=error):
                self.assignments[item.worker_index].append(item.index)
                self._log.bind(
                    operation="receive_worker_result",
                    outcome="failed",
                    relevant_metadata={"index": item.index, "worker": item.worker_index},
                ).warning(f"Record {item.index} failed: {error}")
            case Done(worker_index=worker_index):
                self._log.bind(operation="receive_worker_result", outcome="worker_done").debug(
                    f"Worker {worker_index} done "
                    f"({self.state.workers_done}/{self.state.worker_count})"
                )

        if flush_now:
            self._log.bind(operation="receive_worker_result", outcome="flushing").info(
                "All workers done, requesting collected sequence"
            )
            await self.collector.receive_flush_request.tell()

    async def receive_collected_sequence(self, entries: tuple[CollectedEntry, ...]) -> None:
        """Forward the collected sequence to the printer and finish the run."""
        try:
            next_state = complete_flush(self.state)
        except ProtocolViolation as e:
            self._ignore("receive_collected_sequence", e)
            return

        self.entries = tuple(entries)
        try:
            self.rows_written = await self.printer.render(self.entries)
        except ReportError as e:
            self.report_exit_code = e.exit_code
            self.report_error = str(e)
            self._log.bind(operation="receive_collected_sequence", outcome="report_failed").error(
                f"Report failed: {e}"
            )
        except Exception as e:
            # Anything else the printer raises still ends the run as a write failure
            self.report_exit_code = SinkWriteError.exit_code
            self.report_error = f"{type(e).__name__}: {e}"
            self._log.bind(operation="receive_collected_sequence", outcome="report_failed").exception(
                "Printer failed unexpectedly"
            )
        self.state = next_state

        self._log.bind(
            operation="receive_collected_sequence",
            outcome="done",
            relevant_metadata={
                "accepted": self.state.accepted,
                "rejected": self.state.rejected,
                "failed": self.state.failed,
            },
        ).info("Run complete")

    def get_phase(self) -> DistributorPhase:
        return self.state.phase

    def get_state(self) -> DistributorState:
        return self.state

    def is_done(self) -> bool:
        """Check if the report has been handed to the printer."""
        return self.state.phase is DistributorPhase.DONE

    def get_summary(self) -> RunSummary:
        """
        Summarize the run so far.

        Returns:
            RunSummary with counters, per-worker assignments and the collected
            entries (empty until the collector has flushed)
        """
        return RunSummary(
            worker_count=self.state.worker_count,
            dispatched=self.state.dispatched,
            accepted=self.state.accepted,
            rejected=self.state.rejected,
            failed=self.state.failed,
            workers_done=self.state.workers_done,
            flush_count=self.state.flush_count,
            assignments={i: tuple(indices) for i, indices in self.assignments.items()},
            entries=self.entries,
            rows_written=self.rows_written,
            report_exit_code=self.report_exit_code,
            report_error=self.report_error,
        )

    async def _destroy_children(self) -> None:
        children = [*self.workers, self.collector, self.printer]
        for ref in children:
            if ref is None:
                continue
            try:
                await xo.destroy_actor(ref)
            except Exception as e:
                self._log.bind(operation="destroy", outcome="failed").warning(
                    f"Error destroying child actor: {e}"
                )
        self.workers = []
        self.collector = None
        self.printer = None
