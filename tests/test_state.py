import pytest
from hashrelay.exceptions import ConfigurationError, ProtocolViolation
from hashrelay.scheme import Accepted, CollectedEntry, Done, Failed, Record, Rejected
from hashrelay.state import (
    CollectorState,
    DistributorPhase,
    DistributorState,
    append_entry,
    apply_result,
    begin,
    complete_flush,
    dispatch_record,
    end_of_input,
    flush,
)


def make_record(i: int) -> Record:
    return Record(password=f"pw{i}", passes=i, salt=i)


def drain(state: DistributorState) -> DistributorState:
    return end_of_input(state)


class TestDistributorState:
    def test_initial_state(self):
        state = DistributorState()
        assert state.phase is DistributorPhase.INITIALIZING
        assert state.workers_done == 0
        assert state.flush_count == 0

    def test_begin(self):
        state = begin(DistributorState(), 3)
        assert state.phase is DistributorPhase.DISPATCHING
        assert state.worker_count == 3
        assert state.next_worker_index == 0

    def test_begin_invalid_worker_count(self):
        with pytest.raises(ConfigurationError):
            begin(DistributorState(), 0)

    def test_begin_twice_is_protocol_error(self):
        state = begin(DistributorState(), 2)
        with pytest.raises(ProtocolViolation):
            begin(state, 2)

    @pytest.mark.parametrize("worker_count", [1, 2, 3, 5])
    def test_round_robin(self, worker_count):
        state = begin(DistributorState(), worker_count)
        for i in range(13):
            state, item = dispatch_record(state, make_record(i))
            assert item.index == i
            assert item.worker_index == i % worker_count
            assert 0 <= state.next_worker_index < worker_count
        assert state.dispatched == 13

    def test_dispatch_before_begin(self):
        with pytest.raises(ProtocolViolation):
            dispatch_record(DistributorState(), make_record(0))

    def test_dispatch_after_end_of_input(self):
        state = drain(begin(DistributorState(), 2))
        with pytest.raises(ProtocolViolation):
            dispatch_record(state, make_record(0))

    def test_end_of_input_only_once(self):
        state = drain(begin(DistributorState(), 2))
        assert state.phase is DistributorPhase.DRAINING
        assert state.end_of_input_received is True
        with pytest.raises(ProtocolViolation):
            end_of_input(state)

    def test_results_tallied(self):
        state = begin(DistributorState(), 2)
        state, a = dispatch_record(state, make_record(0))
        state, b = dispatch_record(state, make_record(1))
        state, c = dispatch_record(state, make_record(2))

        # Results may arrive before the end of input
        state, flush_now = apply_result(state, Accepted(value="x", item=a))
        assert flush_now is False
        state = drain(state)
        state, _ = apply_result(state, Rejected(item=b))
        state, _ = apply_result(state, Failed(item=c, error="boom"))

        assert (state.accepted, state.rejected, state.failed) == (1, 1, 1)

    def test_flush_fires_exactly_once(self):
        state = drain(begin(DistributorState(), 3))
        flushes = []
        for worker_index in (2, 0, 1):
            state, flush_now = apply_result(state, Done(worker_index=worker_index))
            flushes.append(flush_now)

        assert flushes == [False, False, True]
        assert state.phase is DistributorPhase.FLUSHING
        assert state.workers_done == state.worker_count
        assert state.flush_count == 1

        # Anything after the crossing point is ignored by the caller
        with pytest.raises(ProtocolViolation):
            apply_result(state, Done(worker_index=0))
        assert state.flush_count == 1

    def test_duplicate_done_rejected(self):
        state = drain(begin(DistributorState(), 2))
        state, _ = apply_result(state, Done(worker_index=0))
        with pytest.raises(ProtocolViolation):
            apply_result(state, Done(worker_index=0))
        assert state.workers_done == 1

    def test_done_from_unknown_worker(self):
        state = drain(begin(DistributorState(), 2))
        with pytest.raises(ProtocolViolation):
            apply_result(state, Done(worker_index=7))

    def test_done_before_end_of_input(self):
        state = begin(DistributorState(), 2)
        with pytest.raises(ProtocolViolation):
            apply_result(state, Done(worker_index=0))

    def test_complete_flush(self):
        state = drain(begin(DistributorState(), 1))
        with pytest.raises(ProtocolViolation):
            complete_flush(state)

        state, flush_now = apply_result(state, Done(worker_index=0))
        assert flush_now is True
        state = complete_flush(state)
        assert state.phase is DistributorPhase.DONE

        with pytest.raises(ProtocolViolation):
            complete_flush(state)


class TestCollectorState:
    def test_append_preserves_arrival_order(self):
        state = CollectorState()
        entries = [CollectedEntry(value=f"v{i}", record=make_record(i)) for i in (3, 1, 2)]
        for entry in entries:
            state = append_entry(state, entry)
        assert state.entries == tuple(entries)

    def test_flush_freezes_sequence(self):
        entry = CollectedEntry(value="v", record=make_record(0))
        state = append_entry(CollectorState(), entry)

        state, snapshot = flush(state)
        assert snapshot == (entry,)
        assert state.flushed is True

        with pytest.raises(ProtocolViolation):
            append_entry(state, CollectedEntry(value="late", record=make_record(1)))

        state, again = flush(state)
        assert again == snapshot

    def test_flush_empty(self):
        state, snapshot = flush(CollectorState())
        assert snapshot == ()
        assert state.flushed is True
