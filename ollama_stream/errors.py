"""
Error taxonomy for ollama-stream.

Transport and parse failures are fatal and propagate to the caller.
ProtocolRecordError is the exception: inside a stream it is only reported,
outside a stream (single JSON body) it is raised like the others.
"""

from typing import Any, Optional


class OllamaStreamError(Exception):
    """Base class for every error raised by this package."""
    pass


class NetworkError(OllamaStreamError):
    """Connection-level failure (refused, reset, timed out)."""
    pass


class HttpError(OllamaStreamError):
    """Server answered with a status code outside 200-299."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"Failed with status code: {status_code}{detail}")


class MalformedStreamError(OllamaStreamError):
    """A newline-delimited record could not be parsed."""

    def __init__(self, text: str, offset: int, line_number: int, reason: str = ""):
        self.text = text
        self.offset = offset
        self.line_number = line_number
        self.reason = reason
        preview = text if len(text) <= 80 else text[:77] + "..."
        message = f"Malformed record at line {line_number} (byte {offset}): {preview!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class MalformedResponseError(OllamaStreamError):
    """A non-streaming response body is not valid JSON."""

    def __init__(self, text: str, reason: str = ""):
        self.text = text
        self.reason = reason
        super().__init__(f"Response is not valid JSON: {reason or text[:200]!r}")


class ProtocolRecordError(OllamaStreamError):
    """Server sent a well-formed record carrying an ``error`` field."""

    def __init__(self, message: str, record: Any = None, index: Optional[int] = None):
        self.message = message
        self.record = record
        self.index = index
        super().__init__(f"Error: {message}")
