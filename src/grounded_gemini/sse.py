"""Incremental decoder for ``streamGenerateContent?alt=sse`` responses."""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any, TypeVar

from pydantic import ValidationError

from grounded_gemini.types import Candidate, GroundingMetadata, StreamFrame, UrlContextMetadata

_DATA_PREFIX = "data:"

_M = TypeVar("_M", GroundingMetadata, UrlContextMetadata)


class FrameParser:
    """Reassembles ``data:`` lines split across byte chunks into frames.

    One parser belongs to one response stream. Bytes are decoded
    incrementally, so a multi-byte character cut by a chunk boundary is
    held back together with the unterminated tail of the last line.
    """

    _logger = logging.getLogger(__name__)

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes) -> list[StreamFrame]:
        """Consume one chunk and return the frames completed by it."""
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")

        frames: list[StreamFrame] = []
        for line in lines:
            frame = self._parse_line(line)
            if frame is not None:
                frames.append(frame)
        return frames

    def _parse_line(self, line: str) -> StreamFrame | None:
        if not line.startswith(_DATA_PREFIX):
            return None
        data_str = line[len(_DATA_PREFIX) :].strip()
        if not data_str:
            return None

        try:
            event = json.loads(data_str)
        except json.JSONDecodeError:
            self._logger.debug("Skipping non-JSON streaming chunk: %s", data_str)
            return None

        return self._to_frame(event)

    def _to_frame(self, event: Any) -> StreamFrame | None:
        if not isinstance(event, dict):
            return None
        # internal endpoints wrap the payload as {"response": {...}}
        data = event.get("response")
        if not isinstance(data, dict):
            data = event

        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            return StreamFrame()
        candidate = Candidate.model_validate(candidates[0])

        return StreamFrame(
            text_parts=_text_parts(candidate.content),
            grounding_metadata=self._metadata(GroundingMetadata, candidate.grounding_metadata),
            url_context_metadata=self._metadata(UrlContextMetadata, candidate.url_context_metadata),
        )

    def _metadata(self, model: type[_M], value: Any) -> _M | None:
        # a malformed field is treated as absent, the rest of the frame still counts
        if value is None:
            return None
        try:
            return model.model_validate(value)
        except ValidationError as exc:
            self._logger.debug("Ignoring malformed %s: %s", model.__name__, exc)
            return None


def _text_parts(content: Any) -> list[str]:
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return []
    return [
        part["text"]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str) and part["text"]
    ]
