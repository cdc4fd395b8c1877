"""Antigravity deployment of the Cloud Code Assist endpoint."""

from __future__ import annotations

import random
import string
import time
from typing import Any

from grounded_gemini.providers.base import InternalEndpointConfig
from grounded_gemini.types import ModelDescriptor

_TOKEN_ALPHABET = string.digits + string.ascii_lowercase


def new_request_id() -> str:
    """Return ``agent-<epoch millis>-<9 char base36 token>``."""
    token = "".join(random.choices(_TOKEN_ALPHABET, k=9))
    return f"agent-{int(time.time() * 1000)}-{token}"


class AntigravityConfig(InternalEndpointConfig):
    """Like the Gemini CLI variant, but every call is tagged as an agent request."""

    name = "google-antigravity"
    search_tool = "googleSearch"
    url_context_tool = "urlContext"
    user_agent = "antigravity/1.15.8 darwin/arm64"

    def _envelope(
        self,
        model: ModelDescriptor,
        body: dict[str, Any],
        project_id: str | None,
    ) -> dict[str, Any]:
        envelope = super()._envelope(model, body, project_id)
        envelope.update(
            requestType="agent",
            userAgent="antigravity",
            requestId=new_request_id(),
        )
        return envelope
