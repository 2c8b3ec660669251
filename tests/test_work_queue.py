"""Tests for the work queue policies."""

from __future__ import annotations

import pickle
import queue
import random
import threading
import time

import pytest

from wordsift.scan.work_queue import (
    EXHAUSTED,
    FilespecProducer,
    PullQueue,
    StaticPartitionQueue,
    partition,
)


def _drain(work_queue) -> list:
    items = []
    while (item := work_queue.next()) is not EXHAUSTED:
        items.append(item)
    return items


class TestPartition:
    """Test partition function."""

    def test_exactly_n_batches_of_ceil_size(self) -> None:
        """Should cut 10 files into 3 batches of 4, 4 and 2."""
        filespecs = [f"f{i}" for i in range(10)]

        batches = partition(filespecs, 3, random.Random(1))

        assert [len(batch) for batch in batches] == [4, 4, 2]
        assert sorted(f for batch in batches for f in batch) == sorted(filespecs)

    def test_fewer_files_than_workers(self) -> None:
        """Should pad with empty batches so every worker gets one."""
        batches = partition(["a", "b"], 4, random.Random(0))

        assert len(batches) == 4
        assert sum(len(batch) for batch in batches) == 2

    def test_empty_input(self) -> None:
        """Should give every worker an empty batch."""
        assert partition([], 3) == [[], [], []]

    def test_shuffle_is_seeded(self) -> None:
        """Should shuffle deterministically for a fixed seed."""
        filespecs = [f"f{i}" for i in range(50)]

        first = partition(filespecs, 5, random.Random(42))
        second = partition(filespecs, 5, random.Random(42))

        assert first == second
        assert [f for batch in first for f in batch] != filespecs

    def test_does_not_mutate_input(self) -> None:
        filespecs = ["a", "b", "c"]
        partition(filespecs, 2, random.Random(3))
        assert filespecs == ["a", "b", "c"]

    def test_invalid_count(self) -> None:
        with pytest.raises(ValueError):
            partition(["a"], 0)


class TestStaticPartitionQueue:
    """Test StaticPartitionQueue."""

    def test_serves_batch_then_exhausted(self) -> None:
        work_queue = StaticPartitionQueue(["a", "b"])

        assert _drain(work_queue) == ["a", "b"]
        assert work_queue.next() is EXHAUSTED
        assert work_queue.next() is EXHAUSTED

    def test_empty_batch(self) -> None:
        assert StaticPartitionQueue([]).next() is EXHAUSTED


class TestPullQueue:
    """Test PullQueue and FilespecProducer together."""

    def test_single_consumer_sees_everything_in_order(self) -> None:
        channel: queue.Queue = queue.Queue(maxsize=2)
        producer = FilespecProducer(["a", "b", "c"], channel, consumers=1)
        producer.start()

        assert _drain(PullQueue(channel)) == ["a", "b", "c"]
        producer.join()
        assert producer.sent == 3

    def test_exhausted_is_sticky(self) -> None:
        """Should not block on the channel again after exhaustion."""
        channel: queue.Queue = queue.Queue()
        channel.put(EXHAUSTED)
        work_queue = PullQueue(channel)

        assert work_queue.next() is EXHAUSTED
        assert work_queue.next() is EXHAUSTED
        assert channel.empty()

    def test_each_filespec_taken_once(self) -> None:
        """Should hand every filespec to exactly one of several consumers."""
        filespecs = [f"f{i}" for i in range(200)]
        channel: queue.Queue = queue.Queue(maxsize=4)
        producer = FilespecProducer(filespecs, channel, consumers=4)
        taken: list[list[str]] = [[] for _ in range(4)]

        def consume(index: int) -> None:
            taken[index].extend(_drain(PullQueue(channel)))

        threads = [threading.Thread(target=consume, args=(i,)) for i in range(4)]
        for thread in threads:
            thread.start()
        producer.run()
        for thread in threads:
            thread.join(timeout=10)

        flat = [f for items in taken for f in items]
        assert sorted(flat) == sorted(filespecs)
        assert len(flat) == len(set(flat))

    def test_progress_callback(self) -> None:
        """Should report the final count."""
        channel: queue.Queue = queue.Queue()
        calls: list[tuple[int, int]] = []
        producer = FilespecProducer(
            ["a", "b"], channel, consumers=1, progress_interval=0, on_progress=lambda s, t: calls.append((s, t))
        )

        producer.run()

        assert calls[0] == (0, 2)
        assert calls[-1] == (2, 2)

    def test_sentinel_survives_pickling(self) -> None:
        """Should keep identity across process boundaries."""
        assert pickle.loads(pickle.dumps(EXHAUSTED)) is EXHAUSTED


class TestProducerStop:
    """Test FilespecProducer.stop and the producer log."""

    def test_stop_unblocks_full_channel(self) -> None:
        channel: queue.Queue = queue.Queue(maxsize=2)
        producer = FilespecProducer([f"f{i}" for i in range(10)], channel, consumers=2, put_interval=0.01)
        producer.start()

        while not channel.full():
            time.sleep(0.01)
        producer.stop()
        producer.join(5)

        assert producer.stopped
        assert producer._thread is not None and not producer._thread.is_alive()
        assert producer.sent == 2

    def test_log_lists_sent_filespecs(self, tmp_path) -> None:
        channel: queue.Queue = queue.Queue()
        log_path = tmp_path / "logs" / "producer.log"

        FilespecProducer(["a", "b", "c"], channel, consumers=1, log_path=log_path).run()

        assert log_path.read_text() == "a\nb\nc\n"
