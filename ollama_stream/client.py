"""
Endpoint operations: Transport + StreamAggregator composed per target.

Module-level functions take explicit RequestOptions. OllamaClient is the
convenience wrapper that fills options in from hostname/port.
"""

import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from ollama_stream.aggregator import RecordErrorObserver, RecordHandler, StreamAggregator
from ollama_stream.config import (
    POST_TARGETS,
    REQUEST_MODELS,
    GenerateRequest,
    GenerationOptions,
    RequestOptions,
)
from ollama_stream.errors import ProtocolRecordError
from ollama_stream.schema import AggregatedResult
from ollama_stream.transport import Transport

logger = logging.getLogger(__name__)

RequestBody = Union[BaseModel, Mapping[str, Any]]


def build_body(target: str, body: RequestBody) -> dict[str, Any]:
    """Validate a request body against the target's model and serialize it."""
    if target not in POST_TARGETS:
        raise ValueError(f"Unknown target: {target!r}. Expected one of {sorted(POST_TARGETS)}")
    model = REQUEST_MODELS[target]
    if not isinstance(body, model):
        data = body.model_dump() if isinstance(body, BaseModel) else dict(body)
        try:
            body = model.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid body for target {target!r}: {e}") from e
    return body.model_dump(exclude_none=True)


def _raise_on_error_body(data: Any) -> Any:
    if isinstance(data, dict) and data.get("error") is not None:
        raise ProtocolRecordError(str(data["error"]), record=data)
    return data


# ─────────────────────────────────────────────────────────────────────
# NON-STREAMING
# ─────────────────────────────────────────────────────────────────────

async def request_list(options: RequestOptions, transport: Optional[Transport] = None) -> Any:
    """List local models."""
    transport = transport or Transport()
    return _raise_on_error_body(await transport.request_json(options))


async def request_show_info(
    options: RequestOptions, model: str, transport: Optional[Transport] = None
) -> Any:
    """Return model details (modelfile, parameters, template)."""
    transport = transport or Transport()
    return _raise_on_error_body(await transport.request_json(options, {"name": model}))


async def request_delete(
    options: RequestOptions, model: str, transport: Optional[Transport] = None
) -> Any:
    """Delete a model. The server usually answers with an empty body (None)."""
    transport = transport or Transport()
    return _raise_on_error_body(await transport.request_json(options, {"name": model}))


# ─────────────────────────────────────────────────────────────────────
# STREAMING
# ─────────────────────────────────────────────────────────────────────

async def request_post(
    target: str,
    options: RequestOptions,
    body: RequestBody,
    *,
    transport: Optional[Transport] = None,
    on_record_error: Optional[RecordErrorObserver] = None,
) -> AggregatedResult:
    """
    Buffered streaming call.

    Returns the complete AggregatedResult, or raises. A failed call never
    returns a partial result.
    """
    payload = build_body(target, body)
    transport = transport or Transport()
    aggregator = StreamAggregator(on_record_error=on_record_error)

    async with transport.stream(options, payload) as frames:
        result = await aggregator.collect(frames)

    logger.debug("%s: %d records, %d chars", target, len(result.messages), len(result.final))
    return result


async def streaming_post(
    target: str,
    options: RequestOptions,
    body: RequestBody,
    handler: RecordHandler,
    *,
    transport: Optional[Transport] = None,
    on_record_error: Optional[RecordErrorObserver] = None,
) -> None:
    """
    Push-mode streaming call: handler(record) per record, in arrival order.

    Returns None at normal end-of-stream.
    """
    payload = build_body(target, body)
    transport = transport or Transport()
    aggregator = StreamAggregator(on_record_error=on_record_error)

    async with transport.stream(options, payload) as frames:
        await aggregator.dispatch(frames, handler)


# ─────────────────────────────────────────────────────────────────────
# CLIENT
# ─────────────────────────────────────────────────────────────────────

class OllamaClient:
    """
    Convenience wrapper bound to one server.

    Usage:
        client = OllamaClient(hostname="127.0.0.1", port=11434)
        result = await client.generate("llama2", "Why is the sky blue?")
        print(result.final)

        # or push mode
        await client.generate("llama2", "Hi", handler=lambda r: print(r.text, end=""))
    """

    def __init__(
        self,
        hostname: Optional[str] = None,
        port: Optional[int] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
        on_record_error: Optional[RecordErrorObserver] = None,
        transport: Optional[Transport] = None,
    ):
        self.hostname = hostname
        self.port = port
        self.headers = dict(headers or {})
        self.transport = transport or Transport(timeout=timeout)
        self.on_record_error = on_record_error

    def options(self, target: str) -> RequestOptions:
        return RequestOptions.for_target(target, self.hostname, self.port, self.headers)

    async def _post(
        self, target: str, body: RequestBody, handler: Optional[RecordHandler] = None
    ) -> Optional[AggregatedResult]:
        if handler is None:
            return await request_post(
                target, self.options(target), body,
                transport=self.transport, on_record_error=self.on_record_error,
            )
        await streaming_post(
            target, self.options(target), body, handler,
            transport=self.transport, on_record_error=self.on_record_error,
        )
        return None

    async def list_models(self) -> Any:
        return await request_list(self.options("list"), self.transport)

    async def show(self, model: str) -> Any:
        return await request_show_info(self.options("show"), model, self.transport)

    async def delete(self, model: str) -> Any:
        return await request_delete(self.options("delete"), model, self.transport)

    async def generate(
        self,
        model: str,
        prompt: str,
        *,
        system: Optional[str] = None,
        template: Optional[str] = None,
        options: Optional[Union[GenerationOptions, Mapping[str, Any]]] = None,
        context: Optional[list[int]] = None,
        handler: Optional[RecordHandler] = None,
    ) -> Optional[AggregatedResult]:
        """Buffered when handler is None, push mode otherwise."""
        if options is not None and not isinstance(options, GenerationOptions):
            options = GenerationOptions.model_validate(dict(options))
        body = GenerateRequest(
            model=model,
            prompt=prompt,
            system=system,
            template=template,
            options=options,
            context=context,
        )
        return await self._post("generate", body, handler)

    async def embed(self, model: str, prompt: str) -> Optional[list[float]]:
        result = await self._post("embed", {"model": model, "prompt": prompt})
        return result.embedding

    async def create(
        self, name: str, path: str, handler: Optional[RecordHandler] = None
    ) -> Optional[AggregatedResult]:
        return await self._post("create", {"name": name, "path": path}, handler)

    async def pull(self, name: str, handler: Optional[RecordHandler] = None) -> Optional[AggregatedResult]:
        return await self._post("pull", {"name": name}, handler)

    async def push(self, name: str, handler: Optional[RecordHandler] = None) -> Optional[AggregatedResult]:
        return await self._post("push", {"name": name}, handler)

    async def copy(self, source: str, destination: str) -> AggregatedResult:
        return await self._post("copy", {"source": source, "destination": destination})
