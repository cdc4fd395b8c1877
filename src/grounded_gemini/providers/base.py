"""Provider-agnostic request building interfaces."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

from grounded_gemini.types import BuiltRequest, ModelDescriptor

STREAM_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "text/event-stream",
}

# Compact separators so the header matches what the upstream clients send.
CLIENT_METADATA = json.dumps(
    {"ideType": "IDE_UNSPECIFIED", "platform": "PLATFORM_UNSPECIFIED", "pluginType": "GEMINI"},
    separators=(",", ":"),
)


class ProviderConfig(ABC):
    """Tool naming and request shape for one deployment variant."""

    name: str
    search_tool: str
    url_context_tool: str

    @abstractmethod
    def build_request(
        self,
        model: ModelDescriptor,
        body: dict[str, Any],
        project_id: str | None = None,
    ) -> BuiltRequest:
        """Return url, headers and body for a streaming call. Must not attach auth."""
        raise NotImplementedError


class InternalEndpointConfig(ProviderConfig):
    """Variants served from ``v1internal`` that wrap the caller's body."""

    user_agent: str

    def build_request(
        self,
        model: ModelDescriptor,
        body: dict[str, Any],
        project_id: str | None = None,
    ) -> BuiltRequest:
        headers = {
            **STREAM_HEADERS,
            "User-Agent": self.user_agent,
            "X-Goog-Api-Client": "gl-node/22.17.0",
            "Client-Metadata": CLIENT_METADATA,
        }
        return BuiltRequest(
            url=f"{model.base_url}/v1internal:streamGenerateContent?alt=sse",
            headers=headers,
            body=self._envelope(model, body, project_id),
        )

    def _envelope(
        self,
        model: ModelDescriptor,
        body: dict[str, Any],
        project_id: str | None,
    ) -> dict[str, Any]:
        return {"project": project_id, "model": model.id, "request": body}
