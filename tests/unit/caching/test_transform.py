"""Tests for transform() (async).

Covers ordering, invalidation and held-error behaviour of the two-stage
cache pipeline.
"""

import asyncio
import logging

import pytest

from diskcached.core.caching import Cached, transform
from diskcached.core.errors import (
    CacheInconsistencyError,
    InvalidationError,
    StoreWriteError,
)
from tests.fixtures.stores import CountingProducer, RecordingStore, StallingStore, drain


def accept(_policy: object) -> bool:
    return True


def reject(_policy: object) -> bool:
    return False


def make_policy(value: str) -> str:
    return f"policy-for-{value}"


class TestColdCache:
    """Tests for keys with nothing stored."""

    async def test_emits_only_fresh_entry(self, store: RecordingStore, producer: CountingProducer):
        """Test cold cache emits exactly one fresh entry."""
        entries, error = await drain(transform(producer, "k", store, make_policy, accept))

        assert error is None
        assert entries == [Cached(value="fresh", policy="policy-for-fresh", from_cache=False)]
        assert producer.calls == 1

    async def test_persists_value_and_policy(
        self, store: RecordingStore, producer: CountingProducer
    ):
        """Test cold cache leaves value and policy in the store."""
        await drain(transform(producer, "k", store, make_policy, accept))

        assert store.snapshot() == {"k": "fresh", "k_policy": "policy-for-fresh"}

    async def test_does_not_delete_anything(
        self, store: RecordingStore, producer: CountingProducer
    ):
        """Test absent policy is a silent miss, not an invalidation."""
        await drain(transform(producer, "k", store, make_policy, accept))

        assert store.ops_named("delete") == []
        assert store.ops_named("read") == ["k_policy"]


class TestCacheHit:
    """Tests for stored entries whose policy validates."""

    async def test_emits_cached_then_fresh(self, producer: CountingProducer):
        """Test valid cache emits cached entry followed by fresh entry."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})

        entries, error = await drain(transform(producer, "k", store, make_policy, accept))

        assert error is None
        assert entries == [
            Cached(value="v0", policy="p0", from_cache=True),
            Cached(value="fresh", policy="policy-for-fresh", from_cache=False),
        ]

    async def test_fresh_entry_overwrites_cached(self, producer: CountingProducer):
        """Test fresh value replaces the stored one."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})

        await drain(transform(producer, "k", store, make_policy, accept))

        assert store.snapshot() == {"k": "fresh", "k_policy": "policy-for-fresh"}

    async def test_cached_entry_yielded_before_producer_runs(self, producer: CountingProducer):
        """Test consumer receives cached entry before the producer is invoked."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})
        entries = transform(producer, "k", store, make_policy, accept)

        first = await anext(entries)

        assert first.from_cache
        assert producer.calls == 0

        second = await anext(entries)
        assert not second.from_cache
        assert producer.calls == 1

        with pytest.raises(StopAsyncIteration):
            await anext(entries)

    async def test_validator_receives_stored_policy(self, producer: CountingProducer):
        """Test validator is applied to the stored policy object."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})
        seen: list[object] = []

        def validator(policy: object) -> bool:
            seen.append(policy)
            return True

        await drain(transform(producer, "k", store, make_policy, validator))

        assert seen == ["p0"]

    async def test_logs_cache_hit(self, producer: CountingProducer, caplog):
        """Test cache hit is logged at DEBUG."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})

        with caplog.at_level(logging.DEBUG, logger="diskcached"):
            await drain(transform(producer, "k", store, make_policy, accept))

        assert "Cache hit: 'k'" in caplog.text


class TestInvalidPolicy:
    """Tests for stored policies that fail validation."""

    async def test_emits_only_fresh_entry(self, producer: CountingProducer):
        """Test invalid policy yields only the fresh entry, without error."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})

        entries, error = await drain(transform(producer, "k", store, make_policy, reject))

        assert error is None
        assert [e.from_cache for e in entries] == [False]

    async def test_deletes_both_keys_before_fresh_write(self, producer: CountingProducer):
        """Test stale value and policy are deleted before the fresh write."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})

        await drain(transform(producer, "k", store, make_policy, reject))

        deletes = [i for i, (op, _) in enumerate(store.ops) if op == "delete"]
        writes = [i for i, (op, _) in enumerate(store.ops) if op == "write"]
        assert sorted(store.ops_named("delete")) == ["k", "k_policy"]
        assert max(deletes) < min(writes)

    async def test_stale_value_never_read(self, producer: CountingProducer):
        """Test value behind an invalid policy is not read."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})

        await drain(transform(producer, "k", store, make_policy, reject))

        assert store.ops_named("read") == ["k_policy"]

    async def test_raising_validator_treated_as_invalid(self, producer: CountingProducer):
        """Test validator exception takes the invalidation path."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})

        def broken(_policy: object) -> bool:
            raise KeyError("expires_at")

        entries, error = await drain(transform(producer, "k", store, make_policy, broken))

        assert error is None
        assert [e.from_cache for e in entries] == [False]
        assert sorted(store.ops_named("delete")) == ["k", "k_policy"]

    async def test_raising_validator_logs_policy_type(self, producer: CountingProducer, caplog):
        """Test the warning names the runtime type the validator was given."""
        store = RecordingStore({"k": "v0", "k_policy": {"ok": True}})

        with caplog.at_level(logging.WARNING, logger="diskcached"):
            await drain(transform(producer, "k", store, make_policy, lambda p: p.ok))

        assert "on a dict policy" in caplog.text
        assert "pass policy_type" in caplog.text

    async def test_logs_cache_invalid(self, producer: CountingProducer, caplog):
        """Test invalidation is logged at INFO."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})

        with caplog.at_level(logging.INFO, logger="diskcached"):
            await drain(transform(producer, "k", store, make_policy, reject))

        assert "Cache invalid: 'k'" in caplog.text

    async def test_invalidation_failure_held_until_fresh_entry(self, producer: CountingProducer):
        """Test failed invalidation surfaces after the fresh entry."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})
        store.fail_on("delete", "k")

        entries, error = await drain(transform(producer, "k", store, make_policy, reject))

        assert [e.from_cache for e in entries] == [False]
        assert isinstance(error, InvalidationError)
        assert error.key == "k"
        # The policy deletion was still attempted
        assert "k_policy" in store.ops_named("delete")


class TestInconsistentState:
    """Tests for a valid policy without its paired value."""

    async def test_fresh_entry_then_inconsistency_error(self, producer: CountingProducer):
        """Test missing value is reported after the fresh entry."""
        store = RecordingStore({"k_policy": "p0"})

        entries, error = await drain(transform(producer, "k", store, make_policy, accept))

        assert entries == [Cached(value="fresh", policy="policy-for-fresh", from_cache=False)]
        assert isinstance(error, CacheInconsistencyError)
        assert error.key == "k"
        assert producer.calls == 1

    async def test_invalidates_both_keys(self, producer: CountingProducer):
        """Test both keys are deleted before the fresh write."""
        store = RecordingStore({"k_policy": "p0"})

        await drain(transform(producer, "k", store, make_policy, accept))

        assert sorted(store.ops_named("delete")) == ["k", "k_policy"]
        assert store.snapshot() == {"k": "fresh", "k_policy": "policy-for-fresh"}

    async def test_read_error_reraised_after_cleanup(self, producer: CountingProducer):
        """Test a failing value read propagates the original error."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})
        read_error = OSError("disk unplugged")
        store.fail_on("read", "k", read_error)

        entries, error = await drain(transform(producer, "k", store, make_policy, accept))

        assert [e.from_cache for e in entries] == [False]
        assert error is read_error
        assert sorted(store.ops_named("delete")) == ["k", "k_policy"]

    async def test_policy_read_error_reraised_after_cleanup(self, producer: CountingProducer):
        """Test a failing policy read invalidates and propagates."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})
        read_error = OSError("permission denied")
        store.fail_on("read", "k_policy", read_error)

        entries, error = await drain(transform(producer, "k", store, make_policy, accept))

        assert [e.from_cache for e in entries] == [False]
        assert error is read_error
        assert sorted(store.ops_named("delete")) == ["k", "k_policy"]

    async def test_original_error_wins_over_cleanup_failure(self, producer: CountingProducer):
        """Test cleanup failure is attached to, not substituted for, the original error."""
        store = RecordingStore({"k_policy": "p0"})
        store.fail_on("delete", "k_policy")

        entries, error = await drain(transform(producer, "k", store, make_policy, accept))

        assert isinstance(error, CacheInconsistencyError)
        assert any("Invalidation of 'k' also failed" in note for note in error.__notes__)
        assert [e.from_cache for e in entries] == [False]


class TestProducerFailure:
    """Tests for failing producers."""

    async def test_producer_error_surfaces_without_writes(self, store: RecordingStore):
        """Test producer failure writes nothing and propagates."""
        boom = RuntimeError("upstream 503")
        producer = CountingProducer(error=boom)

        entries, error = await drain(transform(producer, "k", store, make_policy, accept))

        assert entries == []
        assert error is boom
        assert store.ops_named("write") == []

    async def test_cached_entry_still_emitted_first(self):
        """Test valid cached entry precedes the producer error."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})
        boom = RuntimeError("upstream 503")

        entries, error = await drain(
            transform(CountingProducer(error=boom), "k", store, make_policy, accept)
        )

        assert entries == [Cached(value="v0", policy="p0", from_cache=True)]
        assert error is boom
        assert store.snapshot() == {"k": "v0", "k_policy": "p0"}

    async def test_policy_creator_error_writes_nothing(
        self, store: RecordingStore, producer: CountingProducer
    ):
        """Test policy creator failure is a fresh stage error with no writes."""

        def broken_creator(_value: str) -> str:
            raise ValueError("no clock")

        entries, error = await drain(transform(producer, "k", store, broken_creator, accept))

        assert entries == []
        assert isinstance(error, ValueError)
        assert store.ops_named("write") == []

    async def test_none_value_rejected_before_writes(self, store: RecordingStore):
        """Test a producer returning None fails without a half-written entry."""
        entries, error = await drain(
            transform(CountingProducer(None), "k", store, make_policy, accept)
        )

        assert entries == []
        assert isinstance(error, ValueError)
        assert store.ops_named("write") == []

    async def test_both_stages_failing_raises_group(self):
        """Test cached and fresh errors are both surfaced."""
        store = RecordingStore({"k_policy": "p0"})
        boom = RuntimeError("upstream 503")

        entries, error = await drain(
            transform(CountingProducer(error=boom), "k", store, make_policy, accept)
        )

        assert entries == []
        assert isinstance(error, ExceptionGroup)
        assert isinstance(error.exceptions[0], CacheInconsistencyError)
        assert error.exceptions[1] is boom


class TestStoreWriteFailure:
    """Tests for failures persisting the fresh entry."""

    async def test_write_failure_suppresses_fresh_entry(self, producer: CountingProducer):
        """Test fresh entry is not emitted when persisting failed."""
        store = RecordingStore()
        store.fail_on("write", "k_policy")

        entries, error = await drain(transform(producer, "k", store, make_policy, accept))

        assert entries == []
        assert isinstance(error, StoreWriteError)
        assert isinstance(error.__cause__, OSError)

    async def test_both_writes_attempted(self, producer: CountingProducer):
        """Test value write still happens when the policy write fails."""
        store = RecordingStore()
        store.fail_on("write", "k_policy")

        await drain(transform(producer, "k", store, make_policy, accept))

        assert sorted(store.ops_named("write")) == ["k", "k_policy"]

    async def test_both_write_failures_aggregated(self, producer: CountingProducer):
        """Test both write failures are carried by one error."""
        store = RecordingStore()
        store.fail_on("write", "k")
        store.fail_on("write", "k_policy")

        _, error = await drain(transform(producer, "k", store, make_policy, accept))

        assert isinstance(error, StoreWriteError)
        assert len(error.errors) == 2


class TestCancellation:
    """Tests for cancelling a running pipeline."""

    async def test_cancel_during_producer_writes_nothing(self, store: RecordingStore):
        """Test cancellation propagates and skips persistence."""
        started = asyncio.Event()

        async def slow_producer() -> str:
            started.set()
            await asyncio.Event().wait()
            return "never"

        task = asyncio.create_task(drain(transform(slow_producer, "k", store, make_policy, accept)))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert store.ops_named("write") == []

    async def test_cancel_during_cached_read_writes_nothing(self, producer: CountingProducer):
        """Test cancelling while the policy read is pending skips both stages."""
        store = StallingStore("read", {"k": "v0", "k_policy": "p0"})

        task = asyncio.create_task(drain(transform(producer, "k", store, make_policy, accept)))
        await store.stalled.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert producer.calls == 0
        assert store.ops_named("write") == []

    async def test_cancel_during_invalidation_writes_nothing(self, producer: CountingProducer):
        """Test cancelling while invalid entries are being deleted skips the fresh stage."""
        store = StallingStore("delete", {"k": "v0", "k_policy": "p0"})

        task = asyncio.create_task(drain(transform(producer, "k", store, make_policy, reject)))
        await store.stalled.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert producer.calls == 0
        assert store.ops_named("write") == []

    async def test_closing_after_cached_entry_skips_producer(self, producer: CountingProducer):
        """Test closing the sequence early stops before the fresh stage."""
        store = RecordingStore({"k": "v0", "k_policy": "p0"})
        entries = transform(producer, "k", store, make_policy, accept)

        first = await anext(entries)
        await entries.aclose()

        assert first.from_cache
        assert producer.calls == 0


class TestConcurrentCalls:
    """Tests for concurrent calls on the same key."""

    async def test_calls_are_not_deduplicated(self, store: RecordingStore):
        """Test each concurrent call runs its own producer."""
        producer = CountingProducer("fresh")

        results = await asyncio.gather(
            drain(transform(producer, "k", store, make_policy, accept)),
            drain(transform(producer, "k", store, make_policy, accept)),
        )

        assert producer.calls == 2
        assert all(error is None for _, error in results)
