"""Request, stream and grounding models shared by the engine."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

URL_RETRIEVAL_SUCCESS = "URL_RETRIEVAL_STATUS_SUCCESS"

_logger = logging.getLogger(__name__)


def _alias(*names: str) -> Any:
    # first name is used when dumping by alias, every name is accepted on input
    return Field(default=None, alias=names[0], validation_alias=AliasChoices(*names))


class _WireModel(BaseModel):
    """Lenient base for payloads coming back from the provider."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ModelDescriptor(BaseModel):
    """Identity and endpoint of one deployed model variant."""

    model_config = ConfigDict(frozen=True)

    id: str
    provider: str
    api: str
    base_url: str


class BuiltRequest(BaseModel):
    """Outbound request produced by a provider config."""

    url: str
    headers: dict[str, str]
    body: dict[str, Any]


class WebSource(_WireModel):
    uri: str | None = None
    title: str | None = None


class GroundingChunk(_WireModel):
    """One retrieved source as reported by the provider."""

    web: WebSource | None = None


class Segment(_WireModel):
    start_index: int | None = _alias("startIndex", "start_index")
    end_index: int | None = _alias("endIndex", "end_index")
    text: str | None = None


class GroundingSupport(_WireModel):
    """A span of generated text backed by one or more grounding chunks."""

    segment: Segment | None = None
    grounding_chunk_indices: list[int] | None = _alias("groundingChunkIndices", "grounding_chunk_indices")


class GroundingMetadata(_WireModel):
    grounding_chunks: list[GroundingChunk] | None = _alias("groundingChunks", "grounding_chunks")
    grounding_supports: list[GroundingSupport] | None = _alias("groundingSupports", "grounding_supports")
    web_search_queries: list[str] | None = _alias("webSearchQueries", "web_search_queries")

    @classmethod
    def coerce(cls, value: Any) -> GroundingMetadata:
        """Return ``value`` as metadata, degrading to an empty instance when unusable."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls()
        try:
            return cls.model_validate(value)
        except ValidationError as exc:
            _logger.debug("Ignoring malformed grounding metadata: %s", exc)
            return cls()


class UrlMetadata(_WireModel):
    retrieved_url: str | None = _alias("retrievedUrl", "retrieved_url", "url")
    url_retrieval_status: str | None = _alias("urlRetrievalStatus", "url_retrieval_status")

    @property
    def succeeded(self) -> bool:
        return self.url_retrieval_status == URL_RETRIEVAL_SUCCESS


class UrlContextMetadata(_WireModel):
    url_metadata: list[UrlMetadata] | None = _alias("urlMetadata", "url_metadata")


class Candidate(_WireModel):
    """Leading candidate of a streamed response chunk.

    Only field names are normalized here. Each field is validated on its own
    so that bad metadata cannot cost a frame its text.
    """

    content: Any = None
    grounding_metadata: Any = _alias("groundingMetadata", "grounding_metadata")
    url_context_metadata: Any = _alias("urlContextMetadata", "url_context_metadata")


class StreamFrame(BaseModel):
    """Normalized view of one decoded ``data:`` line."""

    text_parts: list[str] = Field(default_factory=list)
    grounding_metadata: GroundingMetadata | None = None
    url_context_metadata: UrlContextMetadata | None = None


class AccumulatedResult(BaseModel):
    """Text and metadata gathered over a whole response stream."""

    text: str = ""
    grounding_metadata: GroundingMetadata | None = None
    url_context_metadata: UrlContextMetadata | None = None


class StreamUpdate(BaseModel):
    """Incremental update emitted while a response streams in."""

    text: str
    streaming: bool = True
    # set only on the closing update of ``GroundedClient.stream``; tool progress
    # messages are non-streaming updates without a result
    result: AccumulatedResult | None = None


class Source(BaseModel):
    title: str
    url: str


class CitedText(BaseModel):
    """Display text with inline citation markers and its numbered sources."""

    text: str
    sources: list[Source] = Field(default_factory=list)


class ToolResult(BaseModel):
    """Outcome of a tool operation, ready for an agent to display."""

    text: str
    details: dict[str, Any] = Field(default_factory=dict)
