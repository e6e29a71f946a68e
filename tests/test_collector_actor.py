"""Tests for CollectorActor."""

import pytest
import xoscar as xo
from hashrelay.actors.collector_actor import CollectorActor
from hashrelay.scheme import CollectedEntry, Record

pytestmark = pytest.mark.asyncio


class SequenceSink(xo.Actor):
    """Stands in for the distributor and records the flushed sequences."""

    def __init__(self):
        self.sequences = []

    async def receive_collected_sequence(self, entries):
        self.sequences.append(tuple(entries))

    def get_sequences(self):
        return list(self.sequences)


def record(i: int) -> Record:
    return Record(password=f"pw{i}", passes=i, salt=i * 10)


async def test_collector_appends_in_arrival_order():
    collector = CollectorActor(None)
    for i in (2, 0, 1):
        await collector.receive_accepted(f"v{i}", record(i))

    assert collector.get_entries() == (
        CollectedEntry(value="v2", record=record(2)),
        CollectedEntry(value="v0", record=record(0)),
        CollectedEntry(value="v1", record=record(1)),
    )
    assert collector.is_flushed() is False


async def test_flush_sends_snapshot(actor_pool, wait_until):
    sink = await xo.create_actor(SequenceSink, address=actor_pool, uid="sink")
    collector = await xo.create_actor(CollectorActor, sink, address=actor_pool, uid="collector")

    await collector.receive_accepted.tell("v0", record(0))
    await collector.receive_accepted.tell("v1", record(1))
    await collector.receive_flush_request.tell()

    sequences = await wait_until(sink.get_sequences, lambda s: len(s) == 1)
    assert sequences[0] == (
        CollectedEntry(value="v0", record=record(0)),
        CollectedEntry(value="v1", record=record(1)),
    )
    assert await collector.is_flushed() is True


async def test_repeated_flush_resends_frozen_sequence(actor_pool, wait_until):
    sink = await xo.create_actor(SequenceSink, address=actor_pool, uid="sink")
    collector = await xo.create_actor(CollectorActor, sink, address=actor_pool, uid="collector")

    await collector.receive_accepted.tell("v0", record(0))
    await collector.receive_flush_request.tell()
    # Arrives after the flush and is dropped
    await collector.receive_accepted.tell("late", record(9))
    await collector.receive_flush_request.tell()

    sequences = await wait_until(sink.get_sequences, lambda s: len(s) == 2)
    assert sequences[0] == sequences[1] == (CollectedEntry(value="v0", record=record(0)),)


async def test_flush_of_empty_collector(actor_pool, wait_until):
    sink = await xo.create_actor(SequenceSink, address=actor_pool, uid="sink")
    collector = await xo.create_actor(CollectorActor, sink, address=actor_pool, uid="collector")

    await collector.receive_flush_request.tell()

    sequences = await wait_until(sink.get_sequences, lambda s: len(s) == 1)
    assert sequences == [()]
