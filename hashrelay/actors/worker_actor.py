"""
WorkerActor: applies the transform and the digit-prefix filter to one record
at a time and reports each classification back to the distributor.
"""

import inspect

import xoscar as xo
from loguru import logger

from hashrelay.scheme import Accepted, Done, Failed, Rejected, WorkerResult, WorkItem
from hashrelay.transforms import Transform, is_rejected


class WorkerActor(xo.Actor):
    """
    Stateless worker in the relay pool.

    A worker holds no state across messages beyond its identity. Because
    xoscar handles the messages of one actor strictly one after another, the
    end signal is processed only after every work item queued before it,
    which is what lets the distributor detect completion by counting ``Done``
    reports.

    Attributes:
        worker_index: 0-based position of the worker in the pool
        parent: Reference to the distributor results are reported to
        transform: Callable producing the transformed value for a record

    Example:
        >>> worker = await xo.create_actor(
        ...     WorkerActor, 0, distributor_ref, password_hash,
        ...     address="127.0.0.1:13527", uid="relay_worker_0"
        ... )
        >>> await worker.receive_work_item.tell(item)
        >>> await worker.receive_end_signal.tell()
    """

    def __init__(self, worker_index: int, parent: xo.ActorRef, transform: Transform):
        if worker_index < 0:
            raise ValueError(f"worker_index must be non-negative, got {worker_index}")
        if not callable(transform):
            raise TypeError(f"transform must be callable, got {type(transform)}")

        self.worker_index = worker_index
        self.parent = parent
        self.transform = transform
        self._log = logger.bind(component_name=f"Worker[{worker_index}]")

    async def classify(self, item: WorkItem) -> WorkerResult:
        """
        Run the transform on ``item`` and classify the value.

        Returns:
            ``Rejected`` when the value starts with an ASCII digit,
            ``Accepted`` otherwise, ``Failed`` if the transform raised
        """
        try:
            value = self.transform(item.record)
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            self._log.bind(
                operation="transform",
                outcome="failed",
                relevant_metadata={"index": item.index},
            ).warning(f"Transform failed for record {item.index}: {e}")
            return Failed(item=item, error=f"{type(e).__name__}: {e}")

        if not isinstance(value, str):
            return Failed(item=item, error=f"transform returned {type(value).__name__}, expected str")

        if is_rejected(value):
            return Rejected(item=item)
        return Accepted(value=value, item=item)

    async def receive_work_item(self, item: WorkItem) -> None:
        """Classify one record and report the result to the distributor."""
        result = await self.classify(item)
        self._log.bind(operation="receive_work_item", outcome=type(result).__name__.lower()).debug(
            f"Record {item.index} classified"
        )
        await self.parent.receive_worker_result.tell(result)

    async def receive_end_signal(self) -> None:
        """Report ``Done``; every earlier work item has already been handled."""
        self._log.bind(operation="receive_end_signal", outcome="done").debug("End signal received")
        await self.parent.receive_worker_result.tell(Done(worker_index=self.worker_index))
