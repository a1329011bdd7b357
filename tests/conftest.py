"""Shared test fixtures for ollama-stream tests."""

import json

import pytest

from ollama_stream.aggregator import StreamAggregator


# ─────────────────────────────────────────────────────────────────────
# MOCK DATA
# ─────────────────────────────────────────────────────────────────────

MOCK_HOSTNAME = "ollama.test"
MOCK_PORT = 11434
MOCK_BASE_URL = f"http://{MOCK_HOSTNAME}:{MOCK_PORT}"

MOCK_MODEL = "llama2"

MOCK_GENERATE_RECORDS = [
    {"model": MOCK_MODEL, "created_at": "2023-08-04T08:52:19.385406455Z", "response": "The", "done": False},
    {"model": MOCK_MODEL, "created_at": "2023-08-04T08:52:19.405406455Z", "response": " sky", "done": False},
    {"model": MOCK_MODEL, "created_at": "2023-08-04T08:52:19.425406455Z", "response": " is blue.", "done": False},
    {
        "model": MOCK_MODEL,
        "created_at": "2023-08-04T19:22:45.499127Z",
        "response": "",
        "done": True,
        "context": [1, 2, 3],
        "total_duration": 5589157167,
        "load_duration": 3013701500,
        "prompt_eval_count": 46,
        "prompt_eval_duration": 1160282000,
        "eval_count": 113,
        "eval_duration": 1325948000,
    },
]

MOCK_TAGS_RESPONSE = {
    "models": [
        {"name": "llama2:latest", "modified_at": "2023-08-02T17:02:23Z", "size": 3791730596},
        {"name": "mistral:latest", "modified_at": "2023-08-03T10:11:12Z", "size": 4109865159},
    ]
}


def ndjson(*records: dict, trailing_newline: bool = True) -> str:
    """Build a newline-delimited JSON body."""
    body = "\n".join(json.dumps(r) for r in records)
    if records and trailing_newline:
        body += "\n"
    return body


async def frame_source(*chunks):
    """Async frame source over in-memory chunks."""
    for chunk in chunks:
        yield chunk


async def aggregate_text(body, **kwargs):
    """Buffered aggregation of a body that is already in memory."""
    return await StreamAggregator(**kwargs).collect(frame_source(body))


# ─────────────────────────────────────────────────────────────────────
# FIXTURES
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture
def generate_records():
    """Return a copy of a complete generate stream."""
    return [dict(r) for r in MOCK_GENERATE_RECORDS]


@pytest.fixture
def generate_body(generate_records):
    """Return the generate stream as a newline-delimited body."""
    return ndjson(*generate_records)


@pytest.fixture
def generate_options():
    """RequestOptions for the generate endpoint on the mock host."""
    from ollama_stream.config import RequestOptions
    return RequestOptions.for_target("generate", MOCK_HOSTNAME, MOCK_PORT)


@pytest.fixture
def error_collector():
    """Observer that records every reported ProtocolRecordError."""
    errors = []

    def observer(error):
        errors.append(error)

    observer.errors = errors
    return observer
