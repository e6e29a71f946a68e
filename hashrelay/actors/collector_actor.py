"""
CollectorActor: accumulates accepted results and hands them back to the
distributor on request.
"""

import xoscar as xo
from loguru import logger

from hashrelay.exceptions import ProtocolViolation
from hashrelay.scheme import CollectedEntry, Record
from hashrelay.state import CollectorState, append_entry, flush


class CollectorActor(xo.Actor):
    """
    Append-only store of accepted entries.

    Entries are kept in the order they reach the collector, which depends on
    how fast each worker completes and is not the submission order. The first
    flush request freezes the sequence; later requests resend the same
    snapshot. Requests are serialized by the actor's mailbox, so two flushes
    can never interleave.

    Attributes:
        parent: Reference to the distributor the snapshot is sent to
        state: Current CollectorState
    """

    def __init__(self, parent: xo.ActorRef):
        self.parent = parent
        self.state = CollectorState()
        self._log = logger.bind(component_name="Collector")

    async def receive_accepted(self, value: str, record: Record) -> None:
        """Append one accepted ``(value, record)`` pair."""
        try:
            self.state = append_entry(self.state, CollectedEntry(value=value, record=record))
        except ProtocolViolation as e:
            self._log.bind(operation="receive_accepted", outcome="ignored").warning(str(e))

    async def receive_flush_request(self) -> None:
        """Send the current snapshot of the sequence to the distributor."""
        if self.state.flushed:
            self._log.bind(operation="receive_flush_request", outcome="repeated").warning(
                "Flush requested again, resending the frozen sequence"
            )
        self.state, entries = flush(self.state)
        self._log.bind(
            operation="receive_flush_request",
            outcome="flushed",
            relevant_metadata={"entries": len(entries)},
        ).info(f"Flushing {len(entries)} collected entries")
        await self.parent.receive_collected_sequence.tell(entries)

    def get_entries(self) -> tuple[CollectedEntry, ...]:
        """Return the entries collected so far."""
        return self.state.entries

    def is_flushed(self) -> bool:
        return self.state.flushed
