"""Pick the preferred grounding-capable model from what is configured."""

from __future__ import annotations

import re
from collections.abc import Iterable

from grounded_gemini.types import ModelDescriptor

# Newest flash family first.
FLASH_PATTERNS = (
    re.compile(r"gemini-3.*flash", re.IGNORECASE),
    re.compile(r"gemini-2\.5.*flash", re.IGNORECASE),
    re.compile(r"gemini-2\.0.*flash", re.IGNORECASE),
    re.compile(r"gemini.*flash", re.IGNORECASE),
)

PROVIDER_PRIORITY = (
    "google-gemini-cli",
    "google-antigravity",
    "google",
    "google-generative-ai",
)

_SUPPORTED_APIS = ("google-generative-ai", "google-gemini-cli")


def is_google_model(model: ModelDescriptor) -> bool:
    return model.provider in PROVIDER_PRIORITY or model.api in _SUPPORTED_APIS


def _by_provider_priority(models: list[ModelDescriptor]) -> ModelDescriptor | None:
    for provider in PROVIDER_PRIORITY:
        for model in models:
            if model.provider == provider:
                return model
    return None


def select_model(models: Iterable[ModelDescriptor]) -> ModelDescriptor | None:
    """Return the best available model, preferring flash models then provider priority."""
    candidates = [m for m in models if is_google_model(m)]

    for pattern in FLASH_PATTERNS:
        matching = [m for m in candidates if pattern.search(m.id)]
        if matching:
            return _by_provider_priority(matching) or matching[0]

    return _by_provider_priority(candidates) or (candidates[0] if candidates else None)
