"""
HTTP transport: one request per call, no retries, no pooling.

Every call opens its own httpx.AsyncClient inside ``async with`` so the
connection is released on success, error and cancellation alike.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx

from ollama_stream.config import RequestOptions, get_timeout_seconds
from ollama_stream.errors import HttpError, MalformedResponseError, NetworkError

logger = logging.getLogger(__name__)


def parse_error_message(body: bytes) -> str:
    """Extract a readable message from an error response body."""
    text = body.decode("utf-8", errors="replace")
    try:
        data = json.loads(text)
    except ValueError:
        return text[:200]
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or error)
        if error:
            return str(error)
    return text[:200]


def _is_success(status_code: int) -> bool:
    return 200 <= status_code <= 299


class Transport:
    """
    Thin wrapper around httpx for the two response shapes the API uses.

    Args:
        timeout: Seconds per request. Defaults to OLLAMA_TIMEOUT_SECONDS.
        headers: Headers sent with every request, merged under the
            per-request headers from RequestOptions.
        http_transport: Optional httpx transport, e.g. httpx.MockTransport.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        headers: Optional[dict[str, str]] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else get_timeout_seconds()
        self.headers = dict(headers or {})
        self.http_transport = http_transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.http_transport)

    def _headers(self, options: RequestOptions) -> dict[str, str]:
        return {"Content-Type": "application/json", **self.headers, **options.headers}

    async def request_json(self, options: RequestOptions, body: Optional[Any] = None) -> Any:
        """
        Send a request and return the decoded JSON body.

        Returns None for an empty body.

        Raises:
            HttpError: status outside 200-299
            MalformedResponseError: body is not JSON
            NetworkError: connection-level failure
        """
        logger.debug("%s %s", options.method, options.url)
        try:
            async with self._client() as client:
                response = await client.request(
                    options.method,
                    options.url,
                    json=body,
                    headers=self._headers(options),
                )
        except httpx.TransportError as e:
            raise NetworkError(f"Request to {options.url} failed: {e}") from e

        if not _is_success(response.status_code):
            raise HttpError(response.status_code, parse_error_message(response.content))

        text = response.text
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except ValueError as e:
            raise MalformedResponseError(text, str(e)) from e

    @asynccontextmanager
    async def stream(
        self, options: RequestOptions, body: Optional[Any] = None
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """
        Open a streaming request and yield its body as raw byte frames.

        Usage:
            async with transport.stream(options, body) as frames:
                async for frame in frames:
                    ...

        Raises HttpError on entry for a non-2xx status. NetworkError is
        raised on entry or while iterating frames.
        """
        logger.debug("%s %s (stream)", options.method, options.url)
        async with self._client() as client:
            request = client.build_request(
                options.method,
                options.url,
                json=body,
                headers=self._headers(options),
            )
            try:
                response = await client.send(request, stream=True)
            except httpx.TransportError as e:
                raise NetworkError(f"Stream from {options.url} failed: {e}") from e

            try:
                if not _is_success(response.status_code):
                    try:
                        error_body = await response.aread()
                    except httpx.TransportError as e:
                        raise NetworkError(f"Stream from {options.url} failed: {e}") from e
                    raise HttpError(response.status_code, parse_error_message(error_body))
                yield self._frames(response)
            finally:
                await response.aclose()

    @staticmethod
    async def _frames(response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_bytes():
                if chunk:
                    yield chunk
        except httpx.TransportError as e:
            raise NetworkError(f"Stream from {response.request.url} interrupted: {e}") from e
