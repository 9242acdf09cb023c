"""HTTP transport shared by the vendor language models.

Requests are JSON ``POST``s.  Streaming responses use server-sent events;
every ``data:`` payload is parsed as JSON and handed on as one chunk.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from unillm.api.errors import APICallError, JSONParseError
from unillm.providers.config import ProviderConfig

logger = logging.getLogger(__name__)

_DONE = "[DONE]"


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise JSONParseError(text, exc) from exc


def _error_message(status_code: int, body: str) -> str:
    """Pull the vendor's error message out of *body* when it has one."""
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        return f"HTTP {status_code}: {body}" if body else f"HTTP {status_code}"
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return f"HTTP {status_code}: {error['message']}"
    return f"HTTP {status_code}: {body}"


class SSEChunkSource:
    """Decoded ``data:`` payloads of an open event-stream response.

    Closing the source closes the HTTP response.  Iteration ends at the
    end of the body or at a ``[DONE]`` sentinel.
    """

    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self._lines: AsyncIterator[str] = response.aiter_lines()
        self._closed = False

    def __aiter__(self) -> SSEChunkSource:
        return self

    async def __anext__(self) -> dict[str, Any]:
        data: list[str] = []
        while True:
            try:
                line = await self._lines.__anext__()
            except StopAsyncIteration:
                if data:
                    return self._chunk(data)
                await self.aclose()
                raise
            except httpx.HTTPError as exc:
                await self.aclose()
                raise APICallError(str(exc), str(self._response.url)) from exc

            if not line:
                if data:
                    return self._chunk(data)
                continue
            if line.startswith(":"):
                continue
            field, _, value = line.partition(":")
            if field == "data":
                data.append(value.removeprefix(" "))

    def _chunk(self, data: list[str]) -> dict[str, Any]:
        text = "\n".join(data)
        if text == _DONE:
            raise StopAsyncIteration
        return _parse_json(text)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._response.aclose()


class HTTPTransport:
    """JSON-over-HTTP client for one vendor API.

    Pass *client* to share a connection pool; otherwise the transport
    creates its own :class:`httpx.AsyncClient` on first use and closes it in
    :meth:`aclose`.

    Usage::

        async with HTTPTransport(OpenAIConfig()) as transport:
            raw = await transport.send("/responses", body)
    """

    def __init__(self, config: ProviderConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> HTTPTransport:
        self._http()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def url(self, path: str) -> str:
        return self.config.base_url.rstrip("/") + "/" + path.lstrip("/")

    def _build(self, path: str, body: dict[str, Any], headers: dict[str, str] | None) -> httpx.Request:
        merged = {**self.config.request_headers(), **(headers or {})}
        return self._http().build_request("POST", self.url(path), json=body, headers=merged)

    async def send(
        self, path: str, body: dict[str, Any], headers: dict[str, str] | None = None
    ) -> dict[str, Any]:
        """POST *body* and return the decoded JSON response.

        Raises:
            APICallError: On transport failures and non-2xx statuses.
            JSONParseError: If the response body is not JSON.
        """
        request = self._build(path, body, headers)
        logger.debug("POST %s", request.url)
        try:
            response = await self._http().send(request)
        except httpx.HTTPError as exc:
            raise APICallError(str(exc), str(request.url)) from exc

        if response.is_error:
            raise APICallError(
                _error_message(response.status_code, response.text),
                str(request.url),
                status_code=response.status_code,
                response_body=response.text,
            )
        return _parse_json(response.text)

    async def stream(
        self, path: str, body: dict[str, Any], headers: dict[str, str] | None = None
    ) -> SSEChunkSource:
        """POST *body* and return the open event stream.

        The status is checked before this returns, so HTTP errors raise
        here rather than inside the stream.
        """
        request = self._build(path, body, headers)
        request.headers["Accept"] = "text/event-stream"
        logger.debug("POST %s (stream)", request.url)
        try:
            response = await self._http().send(request, stream=True)
        except httpx.HTTPError as exc:
            raise APICallError(str(exc), str(request.url)) from exc

        if response.is_error:
            text = (await response.aread()).decode("utf-8", errors="replace")
            await response.aclose()
            raise APICallError(
                _error_message(response.status_code, text),
                str(request.url),
                status_code=response.status_code,
                response_body=text,
            )
        return SSEChunkSource(response)
