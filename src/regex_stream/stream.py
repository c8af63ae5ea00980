"""
RegexTransform - push text fragments in, pull structured records out.

Usage:
    from regex_stream import RegexTransform

    rt = RegexTransform(r"person:\\s*(\\w+)\\s*,\\s*(\\d+)", ["name", "age"])
    rt.on_record(print)            # called as soon as each record is final

    for chunk in ("person: al", "ice, 30 ", "person: bob, 5"):
        rt.feed(chunk)
    rt.finish()

    records = rt.collect()
    # [{"name": "alice", "age": "30"}, {"name": "bob", "age": "5"}]

    # Or lazily, over any iterable of fragments:
    for record in iter_records(pattern, sock_reader(), schema):
        ...

One instance handles one stream: feed() any number of times, then finish()
exactly once. Calls are synchronous and must not run concurrently.
"""

import logging
from collections import deque
from typing import Any, Callable, Iterable, Iterator, Optional

from .exceptions import StreamStateError
from .matcher import IncrementalMatcher, MatcherConfig, PatternInput
from .record_builder import Record

logger = logging.getLogger(__name__)

RecordListener = Callable[[Record], None]


class RegexTransform:
    """
    Single-use, single-pass stream adapter around IncrementalMatcher.

    Records are delivered three ways, all in input order:
        - returned by the feed()/finish() call that produced them
        - passed to every listener registered with on_record()
        - queued for records() / collect(), unless keep_records=False

    Push-only consumers (listeners or feed() return values) on long-lived
    streams should pass keep_records=False; otherwise every record stays
    queued until it is pulled.
    """

    def __init__(
        self,
        pattern: PatternInput,
        schema: Any = None,
        config: Optional[MatcherConfig] = None,
        keep_records: bool = True,
    ):
        self._matcher = IncrementalMatcher(pattern, schema, config)
        self._keep_records = keep_records
        self._pending: deque = deque()
        self._listeners: list[RecordListener] = []
        self._finished = False
        self._failed = False
        self.record_count = 0

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def pattern(self):
        return self._matcher.pattern

    @property
    def schema(self):
        return self._matcher.schema

    @property
    def buffer(self) -> str:
        return self._matcher.buffer

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def failed(self) -> bool:
        return self._failed

    @property
    def keep_records(self) -> bool:
        return self._keep_records

    @property
    def pending_count(self) -> int:
        """Records queued for records() and not yet pulled."""
        return len(self._pending)

    # =========================================================================
    # LISTENERS
    # =========================================================================

    def on_record(self, listener: RecordListener) -> RecordListener:
        """Registers a callback run for each emitted record. Usable as a decorator."""
        self._listeners.append(listener)
        return listener

    def remove_listener(self, listener: RecordListener):
        self._listeners.remove(listener)

    # =========================================================================
    # PUSH
    # =========================================================================

    def feed(self, fragment: str) -> list[Record]:
        """
        Appends a fragment and emits every match that is now final.

        Returns:
            Records emitted by this call
        """
        self._ensure_open("feed")
        if not isinstance(fragment, str):
            raise TypeError(f"Expected fragment to be str, got {type(fragment).__name__}")

        self._matcher.append(fragment)
        return self._run(is_final_pass=False)

    def finish(self) -> list[Record]:
        """
        Signals end-of-input and flushes matches touching the buffer end.

        Returns:
            Records emitted by this call
        """
        self._ensure_open("finish")
        emitted = self._run(is_final_pass=True)
        self._finished = True

        logger.info(
            f"Stream finished: {self.record_count} records, "
            f"{len(self.buffer)} trailing chars unmatched"
        )
        return emitted

    # =========================================================================
    # PULL
    # =========================================================================

    def records(self) -> Iterator[Record]:
        """
        Yields queued records in order, each exactly once.

        Before finish() only the records finalized so far are available;
        after finish() the sequence is complete.

        Raises:
            StreamStateError: the engine was built with keep_records=False
        """
        if not self._keep_records:
            raise StreamStateError(
                "records() is unavailable: this stream was built with keep_records=False",
                state="push-only",
            )
        return self._drain()

    def collect(self) -> list[Record]:
        """Drains every record not yet pulled. Requires finish()."""
        if not self._finished:
            raise StreamStateError("collect() requires finish() to have been called", state="open")
        return list(self.records())

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _ensure_open(self, operation: str):
        if self._failed:
            raise StreamStateError(
                f"Cannot {operation}(): a previous pass failed, discard this instance",
                state="failed",
            )
        if self._finished:
            raise StreamStateError(f"Cannot {operation}(): stream already finished", state="finished")

    def _drain(self) -> Iterator[Record]:
        while self._pending:
            yield self._pending.popleft()

    def _emit(self, record: Record, batch: list[Record]):
        batch.append(record)
        if self._keep_records:
            self._pending.append(record)
        self.record_count += 1
        for listener in list(self._listeners):
            listener(record)

    def _run(self, is_final_pass: bool) -> list[Record]:
        batch: list[Record] = []
        try:
            self._matcher.process_buffer(is_final_pass, lambda record: self._emit(record, batch))
        except Exception:
            self._failed = True
            raise
        return batch


def iter_records(
    pattern: PatternInput,
    fragments: Iterable[str],
    schema: Any = None,
    config: Optional[MatcherConfig] = None,
) -> Iterator[Record]:
    """
    Lazily maps an iterable of fragments to records.

    The engine is built before iteration starts, so invalid patterns or
    schemas raise here rather than on the first next().
    """
    transform = RegexTransform(pattern, schema, config)

    def generate() -> Iterator[Record]:
        for fragment in fragments:
            transform.feed(fragment)
            yield from transform.records()
        transform.finish()
        yield from transform.records()

    return generate()


def collect_all(
    pattern: PatternInput,
    fragments: Iterable[str],
    schema: Any = None,
    config: Optional[MatcherConfig] = None,
) -> list[Record]:
    """Feeds every fragment, finishes, and returns all records in order."""
    return list(iter_records(pattern, fragments, schema, config))
