"""
Record types found in a newline-delimited response body.

Every record is one of a closed set of variants, chosen by key presence
when the record is parsed (see parse_record). Records are frozen once built.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    @property
    def text(self) -> str:
        """Fragment this record contributes to the aggregated output."""
        return ""


class GenerateMessage(_Record):
    """One mid-stream generation step."""
    model: str = ""
    created_at: str = ""
    response: str = ""
    done: bool = False

    @property
    def text(self) -> str:
        return self.response


class GenerateComplete(GenerateMessage):
    """Terminal generation record with usage counters."""
    done: bool = True
    context: list[int] = []
    total_duration: Optional[int] = None
    load_duration: Optional[int] = None
    prompt_eval_count: Optional[int] = None
    prompt_eval_duration: Optional[int] = None
    eval_count: Optional[int] = None
    eval_duration: Optional[int] = None


class ErrorRecord(_Record):
    """A record the server used to report an error mid-stream."""
    error: str


class StatusRecord(_Record):
    """Progress line from pull, push and create."""
    status: str
    digest: Optional[str] = None
    total: Optional[int] = None
    completed: Optional[int] = None


class EmbeddingRecord(_Record):
    """Body of the embed target."""
    embedding: list[float]


StreamRecord = Union[GenerateMessage, GenerateComplete, ErrorRecord, StatusRecord, EmbeddingRecord]

COMPLETION_KEYS = frozenset({
    "context",
    "total_duration",
    "load_duration",
    "prompt_eval_count",
    "prompt_eval_duration",
    "eval_count",
    "eval_duration",
})


def parse_record(data: dict[str, Any]) -> StreamRecord:
    """
    Build the record variant for a decoded JSON object.

    Raises pydantic.ValidationError when a recognised field has the wrong type.
    """
    if data.get("error") is not None:
        error = data["error"]
        if isinstance(error, dict):
            error = error.get("message") or str(error)
        return ErrorRecord.model_validate({**data, "error": str(error)})
    if "embedding" in data:
        return EmbeddingRecord.model_validate(data)
    if "status" in data and "response" not in data:
        return StatusRecord.model_validate(data)
    if data.get("done") is True and COMPLETION_KEYS & data.keys():
        return GenerateComplete.model_validate(data)
    return GenerateMessage.model_validate(data)


@dataclass
class AggregatedResult:
    """Buffered-mode output: every record in arrival order plus the joined text."""
    messages: list[StreamRecord] = field(default_factory=list)
    final: str = ""

    @property
    def errors(self) -> list[ErrorRecord]:
        return [m for m in self.messages if isinstance(m, ErrorRecord)]

    @property
    def completion(self) -> Optional[GenerateComplete]:
        for message in reversed(self.messages):
            if isinstance(message, GenerateComplete):
                return message
        return None

    @property
    def embedding(self) -> Optional[list[float]]:
        for message in self.messages:
            if isinstance(message, EmbeddingRecord):
                return list(message.embedding)
        return None

    @property
    def done(self) -> bool:
        return any(getattr(m, "done", False) is True for m in self.messages)
