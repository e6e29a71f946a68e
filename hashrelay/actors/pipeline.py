"""
RelayPipeline for actor-based record distribution.

This module provides the RelayPipeline class that owns the xoscar actor pool,
submits a batch of records to a DistributorActor and waits for the run to
finish.
"""

import asyncio
import uuid
from collections.abc import Iterable
from pathlib import Path

import xoscar as xo
from loguru import logger

from hashrelay.actors.distributor_actor import DistributorActor
from hashrelay.config import DEFAULT_ADDRESS, default_worker_count
from hashrelay.exceptions import ActorError, ReportError
from hashrelay.scheme import Record, RunSummary
from hashrelay.transforms import Transform, password_hash


class RelayPipeline:
    """
    Manages one actor pool and the relay runs executed on it.

    The submitter side of the protocol: every record is told to the
    distributor in order, followed by a single end-of-input signal. The
    pipeline then polls the distributor until it reports DONE and returns
    the run summary.

    Attributes:
        transform: Per-record transform applied by the workers
        output_path: Report file written by the printer
        n_workers: Worker pool size, or None to derive it from the record count
        address: xoscar actor pool address
        poll_interval: Seconds between completion checks

    Example:
        >>> pipeline = RelayPipeline(output_path="result.txt", n_workers=4)
        >>> await pipeline.initialize()
        >>> summary = await pipeline.run(records)
        >>> print(f"{summary.accepted} records accepted")
        >>> await pipeline.shutdown()
    """

    def __init__(
        self,
        transform: Transform = password_hash,
        output_path: str | Path = "result.txt",
        n_workers: int | None = None,
        address: str = DEFAULT_ADDRESS,
        poll_interval: float = 0.01,
    ):
        """
        Initialize RelayPipeline.

        Raises:
            ValueError: If n_workers is less than 1 or poll_interval is not positive
            TypeError: If transform is not callable
        """
        if n_workers is not None and n_workers < 1:
            raise ValueError(f"n_workers must be at least 1, got {n_workers}")

        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")

        if not callable(transform):
            raise TypeError(f"transform must be callable, got {type(transform)}")

        self.transform = transform
        self.output_path = Path(output_path)
        self.n_workers = n_workers
        self.address = address
        self.poll_interval = poll_interval
        self.pool = None
        self.distributors: list[xo.ActorRef] = []
        self._initialized = False

        self._log = logger.bind(component_name="RelayPipeline")
        self._log.info(
            f"RelayPipeline created with "
            f"{n_workers if n_workers is not None else 'auto'} workers, output={self.output_path}"
        )

    async def initialize(self) -> None:
        """
        Create the actor pool.

        Raises:
            ActorError: If already initialized
        """
        if self._initialized:
            raise ActorError("RelayPipeline already initialized")

        self._log.info(f"Initializing RelayPipeline with address {self.address}")
        self.pool = await xo.create_actor_pool(address=self.address, n_process=0)
        self._initialized = True

    async def run(self, records: Iterable[Record]) -> RunSummary:
        """
        Distribute ``records`` across the workers and wait for the report.

        Args:
            records: Records to submit, in submission order

        Returns:
            RunSummary of the completed run

        Raises:
            ActorError: If the pipeline is not initialized
            ConfigurationError: If the worker count is invalid
            SinkOpenError: If the printer could not open the report file
            SinkWriteError: If the printer failed while writing the report
        """
        if not self._initialized:
            raise ActorError("RelayPipeline not initialized. Call initialize() first.")

        records = list(records)
        worker_count = self.n_workers or default_worker_count(len(records))
        run_id = f"relay_{uuid.uuid4().hex[:8]}"

        distributor = await xo.create_actor(
            DistributorActor,
            self.transform,
            self.output_path,
            run_id,
            address=self.address,
            uid=f"{run_id}_distributor",
        )
        self.distributors.append(distributor)

        await distributor.begin(worker_count)
        for record in records:
            await distributor.receive_record.tell(record)
        await distributor.receive_end_of_input.tell()

        while not await distributor.is_done():
            await asyncio.sleep(self.poll_interval)

        summary = await distributor.get_summary()
        if summary.report_exit_code:
            raise ReportError.from_exit_code(summary.report_exit_code, summary.report_error or "")

        self._log.bind(
            operation="run",
            outcome="success",
            relevant_metadata={
                "records": len(records),
                "accepted": summary.accepted,
                "rejected": summary.rejected,
                "failed": summary.failed,
            },
        ).info(f"Run {run_id} finished, {summary.rows_written} rows written")
        return summary

    async def shutdown(self) -> None:
        """
        Destroy the distributors (and with them their children) and stop the pool.

        Raises:
            ActorError: If the pipeline is not initialized
        """
        if not self._initialized:
            raise ActorError("RelayPipeline not initialized")

        self._log.info("Shutting down RelayPipeline")
        for distributor in self.distributors:
            try:
                await xo.destroy_actor(distributor)
            except Exception as e:
                self._log.warning(f"Error destroying distributor: {e}")
        self.distributors.clear()

        await self.pool.stop()
        self.pool = None
        self._initialized = False

    def is_initialized(self) -> bool:
        return self._initialized

    def get_pipeline_info(self) -> dict:
        """
        Get information about the pipeline configuration.

        Returns:
            Dictionary with the pipeline settings and status
        """
        return {
            "initialized": self._initialized,
            "n_workers": self.n_workers,
            "address": self.address,
            "output_path": str(self.output_path),
            "transform": getattr(self.transform, "__name__", repr(self.transform)),
            "runs": len(self.distributors),
        }


async def relay_records(
    records: Iterable[Record],
    output_path: str | Path,
    transform: Transform = password_hash,
    n_workers: int | None = None,
    address: str = DEFAULT_ADDRESS,
) -> RunSummary:
    """Run one relay over ``records`` on a fresh actor pool."""
    pipeline = RelayPipeline(
        transform=transform, output_path=output_path, n_workers=n_workers, address=address
    )
    await pipeline.initialize()
    try:
        return await pipeline.run(records)
    finally:
        await pipeline.shutdown()
