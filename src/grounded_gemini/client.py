"""Async client driving a grounded streaming generation call."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import aclosing
from typing import Any

import httpx

from grounded_gemini.credentials import CredentialResolver, parse_credential, resolve_credential
from grounded_gemini.errors import HttpError, StreamError
from grounded_gemini.providers import ProviderConfig, ProviderRegistry, default_registry
from grounded_gemini.sse import FrameParser
from grounded_gemini.types import AccumulatedResult, BuiltRequest, ModelDescriptor, StreamFrame, StreamUpdate

NO_ANSWER = "No answer available."

# Statuses for which a response has no body to stream.
_NULL_BODY_STATUSES = frozenset({204, 205})

UpdateCallback = Callable[[StreamUpdate], None]


class GroundedClient:
    """Issues one streaming request per call and folds the stream into a result."""

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        credentials: CredentialResolver,
        registry: ProviderRegistry | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout_s: float | None = None,
    ) -> None:
        self._credentials = credentials
        self._registry = registry or default_registry()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    def config_for(self, model: ModelDescriptor) -> ProviderConfig:
        """Return the provider config used for ``model``."""
        return self._registry.resolve(model)

    async def prepare(self, model: ModelDescriptor, body: dict[str, Any]) -> BuiltRequest:
        """Resolve credentials and build the authenticated request for ``model``."""
        credential = parse_credential(model, await resolve_credential(self._credentials, model))
        request = self.config_for(model).build_request(model, body, credential.project_id)
        request.headers[credential.header] = credential.value
        return request

    async def execute(
        self,
        model: ModelDescriptor,
        body: dict[str, Any],
        on_update: UpdateCallback | None = None,
    ) -> AccumulatedResult:
        """Run the call to completion, reporting the growing text to ``on_update``."""
        result = AccumulatedResult()
        async with aclosing(self.stream(model, body)) as updates:
            async for update in updates:
                if update.result is not None:
                    result = update.result
                elif on_update is not None:
                    on_update(update)
        return result

    def stream(self, model: ModelDescriptor, body: dict[str, Any]) -> AsyncGenerator[StreamUpdate, None]:
        """Yield a streaming update per text part, then one final update carrying the result.

        Each streaming update holds the full text so far, which only ever
        grows, so consumers can render the latest value alone.
        """

        async def _gen() -> AsyncGenerator[StreamUpdate, None]:
            request = await self.prepare(model, body)
            self._logger.debug("POST %s (%s)", request.url, self.config_for(model).name)

            async with self._client.stream(
                "POST",
                request.url,
                headers=request.headers,
                json=request.body,
            ) as response:
                if not response.is_success:
                    raw = await response.aread()
                    raise HttpError(response.status_code, raw.decode("utf-8", errors="replace"))
                if response.status_code in _NULL_BODY_STATUSES:
                    raise StreamError()

                result = AccumulatedResult()
                parser = FrameParser()
                async for chunk in response.aiter_bytes():
                    for frame in parser.feed(chunk):
                        for text in self._fold(result, frame):
                            yield StreamUpdate(text=text)

            if not result.text:
                result.text = NO_ANSWER
            if result.grounding_metadata and result.grounding_metadata.web_search_queries:
                self._logger.info("Grounding search queries: %s", result.grounding_metadata.web_search_queries)
            self._logger.debug("Stream finished with %d characters", len(result.text))
            yield StreamUpdate(text=result.text, streaming=False, result=result)

        return _gen()

    @staticmethod
    def _fold(result: AccumulatedResult, frame: StreamFrame) -> list[str]:
        """Apply ``frame`` to ``result`` and return the text after each appended part."""
        snapshots: list[str] = []
        for part in frame.text_parts:
            result.text += part
            snapshots.append(result.text)
        # last frame carrying metadata wins, no merging
        if frame.grounding_metadata is not None:
            result.grounding_metadata = frame.grounding_metadata
        if frame.url_context_metadata is not None:
            result.url_context_metadata = frame.url_context_metadata
        return snapshots
