"""
Explicit state for the stateful relay actors.

The distributor and collector keep their state in frozen dataclasses. Each
message handler calls one of the transition functions below, which validate
the message against the current phase and return the next state; the actor
only swaps the returned state in and performs the messaging side effects.
Transitions that are not valid in the current phase raise ProtocolViolation
and leave the state untouched.
"""

from dataclasses import dataclass, replace
from enum import Enum

from hashrelay.exceptions import ConfigurationError, ProtocolViolation
from hashrelay.scheme import Accepted, CollectedEntry, Done, Failed, Record, Rejected, WorkerResult, WorkItem


class DistributorPhase(Enum):
    """Lifecycle phases of the distributor."""

    INITIALIZING = "initializing"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    FLUSHING = "flushing"
    DONE = "done"


@dataclass(frozen=True)
class DistributorState:
    """
    Distributor bookkeeping.

    Invariants:
        0 <= workers_done <= worker_count
        0 <= next_worker_index < worker_count once dispatching has begun
        flush_count becomes 1 exactly when workers_done first reaches
        worker_count, and never changes afterwards
    """

    worker_count: int = 0
    workers_done: int = 0
    next_worker_index: int = 0
    end_of_input_received: bool = False
    phase: DistributorPhase = DistributorPhase.INITIALIZING
    done_workers: frozenset[int] = frozenset()
    dispatched: int = 0
    accepted: int = 0
    rejected: int = 0
    failed: int = 0
    flush_count: int = 0


def _expect_phase(state: DistributorState, message: str, *phases: DistributorPhase) -> None:
    if state.phase not in phases:
        expected = "/".join(p.name for p in phases)
        raise ProtocolViolation(f"{message} received in {state.phase.name}, expected {expected}")


def begin(state: DistributorState, worker_count: int) -> DistributorState:
    """INITIALIZING -> DISPATCHING with fresh counters."""
    if worker_count < 1:
        raise ConfigurationError(f"worker_count must be at least 1, got {worker_count}")
    _expect_phase(state, "begin", DistributorPhase.INITIALIZING)
    return DistributorState(worker_count=worker_count, phase=DistributorPhase.DISPATCHING)


def dispatch_record(state: DistributorState, record: Record) -> tuple[DistributorState, WorkItem]:
    """
    Route ``record`` to the next worker in round-robin order.

    Returns:
        The next state and the work item addressed to worker
        ``state.next_worker_index``
    """
    _expect_phase(state, "record", DistributorPhase.DISPATCHING)
    item = WorkItem(record=record, index=state.dispatched, worker_index=state.next_worker_index)
    next_state = replace(
        state,
        next_worker_index=(state.next_worker_index + 1) % state.worker_count,
        dispatched=state.dispatched + 1,
    )
    return next_state, item


def end_of_input(state: DistributorState) -> DistributorState:
    """DISPATCHING -> DRAINING. Valid once."""
    _expect_phase(state, "end of input", DistributorPhase.DISPATCHING)
    return replace(state, end_of_input_received=True, phase=DistributorPhase.DRAINING)


def apply_result(state: DistributorState, result: WorkerResult) -> tuple[DistributorState, bool]:
    """
    Account for one worker result.

    Per-record results are tolerated while still dispatching; ``Done`` is
    only valid once the end signal has been broadcast.

    Returns:
        The next state and whether the collector flush must be requested
        now. The flag is True for exactly one call per run: the one where
        ``workers_done`` reaches ``worker_count``.
    """
    match result:
        case Accepted():
            _expect_phase(state, "result", DistributorPhase.DISPATCHING, DistributorPhase.DRAINING)
            return replace(state, accepted=state.accepted + 1), False
        case Rejected():
            _expect_phase(state, "result", DistributorPhase.DISPATCHING, DistributorPhase.DRAINING)
            return replace(state, rejected=state.rejected + 1), False
        case Failed():
            _expect_phase(state, "result", DistributorPhase.DISPATCHING, DistributorPhase.DRAINING)
            return replace(state, failed=state.failed + 1), False
        case Done(worker_index=worker_index):
            _expect_phase(state, "done signal", DistributorPhase.DRAINING)
            if worker_index in state.done_workers:
                raise ProtocolViolation(f"Duplicate done signal from worker {worker_index}")
            if not 0 <= worker_index < state.worker_count:
                raise ProtocolViolation(f"Done signal from unknown worker {worker_index}")
            workers_done = state.workers_done + 1
            next_state = replace(
                state,
                workers_done=workers_done,
                done_workers=state.done_workers | {worker_index},
            )
            if workers_done == state.worker_count:
                return replace(next_state, phase=DistributorPhase.FLUSHING, flush_count=1), True
            return next_state, False
        case _:
            raise ProtocolViolation(f"Unknown worker result {result!r}")


def complete_flush(state: DistributorState) -> DistributorState:
    """FLUSHING -> DONE, on receipt of the collected sequence."""
    _expect_phase(state, "collected sequence", DistributorPhase.FLUSHING)
    return replace(state, phase=DistributorPhase.DONE)


@dataclass(frozen=True)
class CollectorState:
    """
    Accepted entries in arrival order.

    The sequence is append-only until the first flush and frozen afterwards.
    """

    entries: tuple[CollectedEntry, ...] = ()
    flushed: bool = False


def append_entry(state: CollectorState, entry: CollectedEntry) -> CollectorState:
    """Append ``entry``; rejected once the sequence has been flushed."""
    if state.flushed:
        raise ProtocolViolation("Accepted entry received after flush")
    return replace(state, entries=state.entries + (entry,))


def flush(state: CollectorState) -> tuple[CollectorState, tuple[CollectedEntry, ...]]:
    """Freeze the sequence and return it. Repeated flushes return the same snapshot."""
    return replace(state, flushed=True), state.entries
