"""Public Generative Language API, authenticated with an API key."""

from __future__ import annotations

from typing import Any

from grounded_gemini.providers.base import STREAM_HEADERS, ProviderConfig
from grounded_gemini.types import BuiltRequest, ModelDescriptor


class GenerativeAIConfig(ProviderConfig):
    """Default variant: body is sent verbatim to the model endpoint."""

    name = "google-generative-ai"
    search_tool = "google_search"
    url_context_tool = "url_context"

    def build_request(
        self,
        model: ModelDescriptor,
        body: dict[str, Any],
        project_id: str | None = None,
    ) -> BuiltRequest:
        return BuiltRequest(
            url=f"{model.base_url}/models/{model.id}:streamGenerateContent?alt=sse",
            headers=dict(STREAM_HEADERS),
            body=body,
        )
