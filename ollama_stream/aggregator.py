"""
Stream aggregator: newline-delimited JSON records -> typed records.

Two modes share one record pipeline (StreamAggregator.records):
- collect():  buffered, returns an AggregatedResult once the stream ends
- dispatch(): push, hands each record to a caller handler as soon as it is
              delimited

Error records never stop a stream. They are kept (buffered) or delivered
(push) like any other record and reported to the on_record_error observer.
A final unterminated fragment that does not parse is logged and dropped;
an invalid newline-terminated line fails the stream.
"""

import inspect
import json
import logging
from typing import AsyncIterable, AsyncIterator, Awaitable, Callable, Optional, Union

from pydantic import ValidationError

from ollama_stream.errors import MalformedStreamError, ProtocolRecordError
from ollama_stream.framing import Frame, Line, LineScanner
from ollama_stream.schema import AggregatedResult, ErrorRecord, StreamRecord, parse_record

logger = logging.getLogger(__name__)

RecordErrorObserver = Callable[[ProtocolRecordError], None]
RecordHandler = Callable[[StreamRecord], Union[None, Awaitable[None]]]


def log_record_error(error: ProtocolRecordError) -> None:
    """Default observer: log and move on."""
    logger.warning("Record %s reported an error: %s", error.index, error.message)


def parse_line(line: Line) -> StreamRecord:
    """Decode one complete line into a record or raise MalformedStreamError."""
    try:
        text = line.data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedStreamError(
            line.data.decode("utf-8", errors="replace"), line.offset, line.line_number, str(e)
        ) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedStreamError(text, line.offset, line.line_number, e.msg) from e

    if not isinstance(data, dict):
        raise MalformedStreamError(
            text, line.offset, line.line_number, f"expected an object, got {type(data).__name__}"
        )

    try:
        return parse_record(data)
    except ValidationError as e:
        raise MalformedStreamError(text, line.offset, line.line_number, str(e)) from e


class StreamAggregator:
    """
    Turns a frame source into records.

    Holds no per-stream state: scanner, message list and text buffer live
    inside each call, so one aggregator can serve concurrent streams.
    """

    def __init__(self, on_record_error: Optional[RecordErrorObserver] = None):
        self._on_record_error = on_record_error or log_record_error

    async def records(self, frames: AsyncIterable[Frame]) -> AsyncIterator[StreamRecord]:
        """Yield records in arrival order, reporting error records on the way."""
        scanner = LineScanner()
        index = 0

        async for frame in frames:
            for line in scanner.feed(frame):
                if line.is_blank():
                    continue
                record = parse_line(line)
                self._report(record, index)
                index += 1
                yield record

        tail = scanner.finish()
        if tail is not None and not tail.is_blank():
            try:
                record = parse_line(tail)
            except MalformedStreamError as e:
                # truncated final fragment, dropped
                logger.warning("Dropping unparseable trailing data at byte %d: %r", e.offset, e.text[:80])
                return
            self._report(record, index)
            index += 1
            yield record

        logger.debug("Stream ended after %d records", index)

    async def collect(self, frames: AsyncIterable[Frame]) -> AggregatedResult:
        """Buffered mode: consume the whole stream, then return the result."""
        messages: list[StreamRecord] = []
        parts: list[str] = []

        async for record in self.records(frames):
            messages.append(record)
            if not isinstance(record, ErrorRecord):
                parts.append(record.text)

        return AggregatedResult(messages=messages, final="".join(parts))

    async def dispatch(self, frames: AsyncIterable[Frame], handler: RecordHandler) -> None:
        """
        Push mode: call handler(record) once per record, in order.

        Coroutine handlers are awaited before the next record is read. Any
        exception from the frame source, the parser or the handler ends
        delivery and propagates.
        """
        async for record in self.records(frames):
            result = handler(record)
            if inspect.isawaitable(result):
                await result

    def _report(self, record: StreamRecord, index: int) -> None:
        if isinstance(record, ErrorRecord):
            self._on_record_error(ProtocolRecordError(record.error, record=record, index=index))
