"""Byte-offset citation splicing for grounded responses."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NamedTuple

from grounded_gemini.types import CitedText, GroundingMetadata, Source


class Insertion(NamedTuple):
    offset: int
    marker: str


def extract_sources(metadata: GroundingMetadata) -> list[Source]:
    """Project web grounding chunks to sources; list position is the citation number minus one."""
    return [
        Source(title=chunk.web.title or "Unknown", url=chunk.web.uri or "")
        for chunk in metadata.grounding_chunks or []
        if chunk.web is not None
    ]


def build_insertions(metadata: GroundingMetadata) -> list[Insertion]:
    """Return insertions ordered by offset, rightmost first."""
    insertions = [
        Insertion(
            offset=support.segment.end_index,
            marker="".join(f"[{i + 1}]" for i in support.grounding_chunk_indices),
        )
        for support in metadata.grounding_supports or []
        if support.segment is not None
        and support.segment.end_index is not None
        and support.grounding_chunk_indices
    ]
    # sorted() is stable with reverse=True, equal offsets keep their input order
    return sorted(insertions, key=lambda ins: ins.offset, reverse=True)


def splice(text: str, insertions: list[Insertion]) -> str:
    """Insert markers at UTF-8 byte offsets, processing right to left.

    ``insertions`` must already be sorted by descending offset. Offsets
    past the current right boundary are clamped to it.
    """
    data = text.encode("utf-8")
    parts: list[bytes] = []
    boundary = len(data)

    for ins in insertions:
        pos = max(0, min(ins.offset, boundary))
        if pos < boundary:
            parts.append(data[pos:boundary])
        parts.append(ins.marker.encode("utf-8"))
        boundary = pos
    if boundary > 0:
        parts.append(data[:boundary])

    # parts were collected right to left
    return b"".join(reversed(parts)).decode("utf-8", errors="replace")


def apply_citations(
    text: str,
    grounding_metadata: GroundingMetadata | Mapping[str, Any] | None,
) -> CitedText:
    """Splice ``[n]`` markers into ``text`` and return it with its sources.

    Never raises: missing or malformed metadata leaves the text untouched.
    """
    metadata = GroundingMetadata.coerce(grounding_metadata)
    sources = extract_sources(metadata)
    if not metadata.grounding_supports or not sources:
        return CitedText(text=text, sources=sources)

    return CitedText(text=splice(text, build_insertions(metadata)), sources=sources)


def format_sources(sources: list[Source]) -> str:
    """Render a numbered markdown ``## Sources`` section."""
    lines = [f"{i}. [{s.title}]({s.url})" for i, s in enumerate(sources, start=1)]
    return "## Sources\n" + "\n".join(lines)
