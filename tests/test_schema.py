"""Tests for ollama_stream.schema module."""

import pytest
from pydantic import ValidationError

from ollama_stream.schema import (
    AggregatedResult,
    EmbeddingRecord,
    ErrorRecord,
    GenerateComplete,
    GenerateMessage,
    StatusRecord,
    parse_record,
)


class TestParseRecord:
    """Variant is chosen by key presence."""

    def test_incremental_message(self):
        record = parse_record({"model": "m", "created_at": "t1", "response": "Hel", "done": False})

        assert type(record) is GenerateMessage
        assert record.text == "Hel"

    def test_completion_record(self, generate_records):
        record = parse_record(generate_records[-1])

        assert isinstance(record, GenerateComplete)
        assert record.done is True
        assert record.eval_count == 113
        assert record.context == [1, 2, 3]

    def test_done_without_counters_stays_incremental(self):
        record = parse_record({"model": "m", "created_at": "t2", "response": "lo", "done": True})

        assert type(record) is GenerateMessage
        assert record.done is True

    def test_error_record(self):
        record = parse_record({"error": "model 'nope' not found"})

        assert isinstance(record, ErrorRecord)
        assert record.error == "model 'nope' not found"
        assert record.text == ""

    def test_error_wins_over_response(self):
        record = parse_record({"response": "ignored", "error": "boom"})

        assert isinstance(record, ErrorRecord)

    def test_nested_error_message(self):
        record = parse_record({"error": {"message": "out of memory"}})

        assert record.error == "out of memory"

    def test_null_error_treated_as_absent(self):
        record = parse_record({"response": "kept", "done": False, "error": None})

        assert type(record) is GenerateMessage
        assert record.text == "kept"

    def test_status_record(self):
        record = parse_record({"status": "downloading", "digest": "sha256:abc", "total": 10, "completed": 4})

        assert isinstance(record, StatusRecord)
        assert record.completed == 4
        assert record.text == ""

    def test_embedding_record(self):
        record = parse_record({"embedding": [0.1, 0.2]})

        assert isinstance(record, EmbeddingRecord)
        assert record.embedding == [0.1, 0.2]

    def test_unknown_fields_retained(self):
        record = parse_record({"response": "x", "done": False, "message": {"role": "assistant"}})

        assert record.model_extra["message"] == {"role": "assistant"}

    def test_wrong_type_raises_validation_error(self):
        with pytest.raises(ValidationError):
            parse_record({"response": ["not", "a", "string"], "done": False})

    def test_records_are_frozen(self):
        record = parse_record({"response": "x", "done": False})

        with pytest.raises(ValidationError):
            record.response = "y"


class TestAggregatedResult:
    """Convenience accessors on the buffered result."""

    def test_empty_defaults(self):
        result = AggregatedResult()

        assert result.messages == []
        assert result.final == ""
        assert result.completion is None
        assert result.embedding is None
        assert result.done is False

    def test_accessors(self, generate_records):
        records = [parse_record(r) for r in generate_records]
        records.insert(1, parse_record({"error": "warning"}))
        result = AggregatedResult(messages=records, final="The sky is blue.")

        assert [e.error for e in result.errors] == ["warning"]
        assert result.completion is records[-1]
        assert result.done is True
