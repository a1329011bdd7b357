"""
ollama-stream: async client for a local model server.

Transport issues the request; StreamAggregator turns the newline-delimited
JSON body into records, either buffered (AggregatedResult) or pushed to a
handler one record at a time.
"""

from .aggregator import StreamAggregator, log_record_error
from .client import (
    OllamaClient,
    request_delete,
    request_list,
    request_post,
    request_show_info,
    streaming_post,
)
from .config import GenerateRequest, GenerationOptions, RequestOptions
from .errors import (
    HttpError,
    MalformedResponseError,
    MalformedStreamError,
    NetworkError,
    OllamaStreamError,
    ProtocolRecordError,
)
from .schema import (
    AggregatedResult,
    EmbeddingRecord,
    ErrorRecord,
    GenerateComplete,
    GenerateMessage,
    StatusRecord,
    StreamRecord,
)
from .transport import Transport

__all__ = [
    "AggregatedResult",
    "EmbeddingRecord",
    "ErrorRecord",
    "GenerateComplete",
    "GenerateMessage",
    "GenerateRequest",
    "GenerationOptions",
    "HttpError",
    "MalformedResponseError",
    "MalformedStreamError",
    "NetworkError",
    "OllamaClient",
    "OllamaStreamError",
    "ProtocolRecordError",
    "RequestOptions",
    "StatusRecord",
    "StreamAggregator",
    "StreamRecord",
    "Transport",
    "log_record_error",
    "request_delete",
    "request_list",
    "request_post",
    "request_show_info",
    "streaming_post",
]
