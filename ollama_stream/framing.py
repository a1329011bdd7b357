"""
Incremental newline scanner over raw byte frames.

Frames arrive with no alignment to record or character boundaries. The
scanner works on bytes: 0x0A never occurs inside a multi-byte UTF-8
sequence, so a line is only decoded once it is complete and a character
split across two frames is reassembled for free.
"""

from dataclasses import dataclass
from typing import Optional, Union

Frame = Union[bytes, bytearray, memoryview, str]


@dataclass(frozen=True)
class Line:
    """One complete line, without its terminator."""
    data: bytes
    offset: int       # byte offset of the first byte in the whole body
    line_number: int  # 1-based

    def is_blank(self) -> bool:
        return not self.data.strip()


class LineScanner:
    """
    Carry-over buffer that splits a byte stream on ``\\n``.

    feed() returns the lines completed by a frame; finish() returns the
    residual after the last newline, if any. One scanner per stream.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._buffer_offset = 0  # body offset of _buffer[0]
        self._scan_from = 0      # bytes before this index hold no newline
        self._line_number = 0
        self._finished = False

    def feed(self, frame: Frame) -> list[Line]:
        if self._finished:
            raise RuntimeError("feed() called after finish()")
        if isinstance(frame, str):
            frame = frame.encode("utf-8")
        self._buffer.extend(frame)

        lines = []
        start = 0
        while True:
            newline = self._buffer.find(b"\n", max(start, self._scan_from))
            if newline == -1:
                break
            lines.append(self._make_line(start, newline))
            start = newline + 1

        if start:
            del self._buffer[:start]
            self._buffer_offset += start
        self._scan_from = len(self._buffer)
        return lines

    def finish(self) -> Optional[Line]:
        """Flush the unterminated tail at end-of-stream."""
        self._finished = True
        if not self._buffer:
            return None
        line = self._make_line(0, len(self._buffer))
        self._buffer_offset += len(self._buffer)
        self._buffer.clear()
        return line

    def _make_line(self, start: int, end: int) -> Line:
        data = bytes(self._buffer[start:end])
        if data.endswith(b"\r"):
            data = data[:-1]
        self._line_number += 1
        return Line(data=data, offset=self._buffer_offset + start, line_number=self._line_number)
