"""Agent-facing tools: web search, URL analysis and YouTube video analysis."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Annotated, Any

import httpx
from pydantic import BaseModel, Field

from grounded_gemini.citations import apply_citations, format_sources
from grounded_gemini.client import GroundedClient
from grounded_gemini.errors import GroundedGeminiError
from grounded_gemini.providers import API_KEY_API
from grounded_gemini.selection import select_model
from grounded_gemini.types import (
    AccumulatedResult,
    ModelDescriptor,
    Source,
    StreamUpdate,
    ToolResult,
    UrlContextMetadata,
)

DEFAULT_MAX_LINES = 2000
DEFAULT_MAX_BYTES = 50 * 1024
MAX_URLS = 20

_OAUTH_PROVIDERS = ("google-gemini-cli", "google-antigravity")

YOUTUBE_REGEX = re.compile(
    r"^(?:https?://)?(?:www\.)?(?:youtube\.com/(?:watch\?v=|embed/)|youtu\.be/)([a-zA-Z0-9_-]{11})"
)

_logger = logging.getLogger(__name__)

UpdateCallback = Callable[[StreamUpdate], None]


class WebSearchParams(BaseModel):
    query: str = Field(description="The search query or question to answer")
    urls: Annotated[list[str], Field(max_length=MAX_URLS)] | None = Field(
        default=None,
        description="Additional URLs to analyze along with search (up to 20)",
    )


class UrlContextParams(BaseModel):
    query: str = Field(description="Question or task to perform on the URLs")
    urls: list[str] = Field(
        min_length=1,
        max_length=MAX_URLS,
        description="Public URLs to analyze (web pages, documents, images, YouTube videos, etc).",
    )


class YoutubeVideoParams(BaseModel):
    video_url: str = Field(description="YouTube video URL")
    query: str = Field(description="Question or task about the video")
    start_offset: str | None = Field(default=None, description="Start time (e.g., '120s' or '2:00')")
    end_offset: str | None = Field(default=None, description="End time (e.g., '300s' or '5:00')")


@dataclass
class ToolContext:
    """What a tool needs from its host: a client and the models it may use."""

    client: GroundedClient
    models: Sequence[ModelDescriptor] = field(default_factory=tuple)
    # the model the agent itself is running on, used for error messages only
    current_model: ModelDescriptor | None = None


# --- formatting -----------------------------------------------------------


def truncate_head(
    text: str,
    max_lines: int = DEFAULT_MAX_LINES,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> tuple[str, bool]:
    """Keep whole leading lines within both limits. Returns ``(content, truncated)``."""
    lines = text.split("\n")
    kept: list[str] = []
    size = 0
    for line in lines[:max_lines]:
        line_size = len(line.encode("utf-8")) + (1 if kept else 0)
        if size + line_size > max_bytes:
            break
        kept.append(line)
        size += line_size
    return "\n".join(kept), len(kept) < len(lines)


def format_result(text: str, details: dict[str, Any]) -> ToolResult:
    content, truncated = truncate_head(text)
    if truncated:
        content += "\n\n[Truncated]"
    return ToolResult(text=content, details=details)


def missing_config_result(ctx: ToolContext) -> ToolResult:
    current = ctx.current_model
    if current is not None and current.provider in _OAUTH_PROVIDERS:
        msg = f"Provider {current.provider} requires valid OAuth credentials."
    else:
        msg = "No Google Gemini configuration found. Please configure GEMINI_API_KEY."
    return ToolResult(text=f"Failed: {msg}", details={"error": "missing_config"})


def error_result(exc: Exception) -> ToolResult:
    return ToolResult(text=f"Error: {exc}", details={"error": True})


def summarize_url_metadata(
    metadata: UrlContextMetadata | None,
) -> tuple[list[str | None], list[dict[str, str | None]]]:
    """Split URL retrieval results into retrieved urls and failures."""
    entries = metadata.url_metadata if metadata and metadata.url_metadata else []
    retrieved = [m.retrieved_url for m in entries if m.succeeded]
    failed = [
        {"url": m.retrieved_url, "status": m.url_retrieval_status}
        for m in entries
        if not m.succeeded
    ]
    return retrieved, failed


def _compose_summary(
    text: str,
    sources: list[Source],
    retrieved: list[Any],
    failed: list[dict[str, Any]],
    keep_model_sources: bool = False,
) -> str:
    summary = text
    if failed:
        summary += f"\n\n## URL Status\n✅ Retrieved: {len(retrieved)}\n❌ Failed: {len(failed)}"
        for f in failed:
            summary += f"\n- {f['url']}: {f['status']}"
    # the model sometimes writes its own sources section
    if sources and not (keep_model_sources and "## Sources" in summary):
        summary += "\n\n" + format_sources(sources)
    return summary


def _progress(on_update: UpdateCallback | None, text: str) -> None:
    if on_update is not None:
        on_update(StreamUpdate(text=text, streaming=False))


def _user_contents(parts: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [{"role": "user", "parts": parts}]


def _video_part(url: str) -> dict[str, Any]:
    return {"file_data": {"file_uri": url, "mime_type": "video/mp4"}}


# --- tools ----------------------------------------------------------------


async def web_search(
    ctx: ToolContext,
    params: WebSearchParams,
    signal: Any = None,
    on_update: UpdateCallback | None = None,
) -> ToolResult:
    """Answer ``params.query`` with Google Search grounding, optionally reading extra URLs.

    ``signal`` is accepted for interface compatibility and is not wired
    into the request.
    """
    model = select_model(ctx.models)
    if model is None:
        return missing_config_result(ctx)

    urls = params.urls or []
    if urls:
        _progress(on_update, f"Searching and analyzing {len(urls)} URL(s)...")
    else:
        _progress(on_update, f'Searching for "{params.query}"...')

    try:
        config = ctx.client.config_for(model)
        prompt = params.query
        tools: list[dict[str, Any]] = [{config.search_tool: {}}]
        if urls:
            prompt += "\n\nAlso analyze these URLs:\n" + "\n".join(urls)
            tools.append({config.url_context_tool: {}})

        result = await ctx.client.execute(
            model,
            {"contents": _user_contents([{"text": prompt}]), "tools": tools},
            on_update,
        )
    except (GroundedGeminiError, httpx.HTTPError) as exc:
        _logger.warning("web_search failed: %s", exc)
        return error_result(exc)

    cited = apply_citations(result.text, result.grounding_metadata)
    retrieved, failed = summarize_url_metadata(result.url_context_metadata)
    summary = _compose_summary(cited.text, cited.sources, retrieved, failed)

    queries = result.grounding_metadata.web_search_queries if result.grounding_metadata else None
    return format_result(
        summary,
        {
            "sources": [s.model_dump() for s in cited.sources],
            "searchQueries": queries,
            "retrieved": retrieved or None,
            "failed": failed or None,
            "model": model.id,
            "grounded": bool(cited.sources),
        },
    )


def _url_contents(model: ModelDescriptor, query: str, urls: list[str]) -> list[dict[str, Any]]:
    # only the key-based API accepts YouTube links as native video parts
    if model.api == API_KEY_API:
        videos = [u for u in urls if YOUTUBE_REGEX.search(u)]
        others = [u for u in urls if not YOUTUBE_REGEX.search(u)]
        if videos:
            prompt = query
            if others:
                prompt += "\n\nURLs:\n" + "\n".join(others)
            return _user_contents([*(_video_part(u) for u in videos), {"text": prompt}])

    return _user_contents([{"text": f"{query}\n\nURLs:\n" + "\n".join(urls)}])


async def url_context(
    ctx: ToolContext,
    params: UrlContextParams,
    signal: Any = None,
    on_update: UpdateCallback | None = None,
) -> ToolResult:
    """Analyze up to 20 public URLs with the url-context tool."""
    model = select_model(ctx.models)
    if model is None:
        return missing_config_result(ctx)

    count = len(params.urls)
    _progress(on_update, f"Analyzing {count} URL{'s' if count > 1 else ''}...")

    try:
        config = ctx.client.config_for(model)
        result = await ctx.client.execute(
            model,
            {
                "contents": _url_contents(model, params.query, params.urls),
                "tools": [{config.url_context_tool: {}}],
            },
            on_update,
        )
    except (GroundedGeminiError, httpx.HTTPError) as exc:
        _logger.warning("url_context failed: %s", exc)
        return error_result(exc)

    cited = apply_citations(result.text, result.grounding_metadata)
    retrieved, failed = summarize_url_metadata(result.url_context_metadata)
    summary = _compose_summary(cited.text, cited.sources, retrieved, failed, keep_model_sources=True)

    return format_result(
        summary,
        {"retrieved": retrieved, "failed": failed or None, "model": model.id},
    )


def _clipping_note(start: str | None, end: str | None) -> str:
    note = "\n\nFocus on the video section"
    if start:
        note += f" from {start}"
    if end:
        note += f" to {end}"
    return note + "."


async def youtube_video(
    ctx: ToolContext,
    params: YoutubeVideoParams,
    signal: Any = None,
    on_update: UpdateCallback | None = None,
) -> ToolResult:
    """Ask a question about a YouTube video, optionally restricted to a clip."""
    model = select_model(ctx.models)
    if model is None:
        return missing_config_result(ctx)

    clipped = bool(params.start_offset or params.end_offset)

    if model.api != API_KEY_API:
        query = params.query
        if clipped:
            query += _clipping_note(params.start_offset, params.end_offset)
        return await url_context(
            ctx,
            UrlContextParams(query=query, urls=[params.video_url]),
            signal,
            on_update,
        )

    _progress(on_update, "Analyzing YouTube video...")

    video_part = _video_part(params.video_url)
    if clipped:
        video_metadata: dict[str, str] = {}
        if params.start_offset:
            video_metadata["start_offset"] = params.start_offset
        if params.end_offset:
            video_metadata["end_offset"] = params.end_offset
        video_part["video_metadata"] = video_metadata

    try:
        result: AccumulatedResult = await ctx.client.execute(
            model,
            {"contents": _user_contents([video_part, {"text": params.query}])},
            on_update,
        )
    except (GroundedGeminiError, httpx.HTTPError) as exc:
        _logger.warning("youtube_video failed: %s", exc)
        return error_result(exc)

    return format_result(
        result.text,
        {
            "videoUrl": params.video_url,
            "clipping": {"start": params.start_offset, "end": params.end_offset} if clipped else None,
            "model": model.id,
        },
    )
