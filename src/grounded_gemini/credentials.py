"""Credential resolution for the supported provider variants."""

from __future__ import annotations

import inspect
import json
import os
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, NamedTuple

from grounded_gemini.errors import AuthError
from grounded_gemini.providers import API_KEY_API
from grounded_gemini.types import ModelDescriptor

CredentialResolver = Callable[[ModelDescriptor], str | None | Awaitable[str | None]]

_DEFAULT_ENV_VARS = {
    API_KEY_API: "GEMINI_API_KEY",
    "google-gemini-cli": "GOOGLE_GEMINI_CLI_CREDENTIALS",
    "google-antigravity": "GOOGLE_ANTIGRAVITY_CREDENTIALS",
}


class Credential(NamedTuple):
    """Parsed credential: which header to send and the project it is bound to."""

    header: str
    value: str
    project_id: str | None = None


class EnvCredentialResolver:
    """Reads credentials from environment variables keyed by provider (then api) tag."""

    def __init__(
        self,
        env_vars: Mapping[str, str] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._env_vars = dict(env_vars or _DEFAULT_ENV_VARS)
        self._environ = environ if environ is not None else os.environ

    def __call__(self, model: ModelDescriptor) -> str | None:
        var = self._env_vars.get(model.provider) or self._env_vars.get(model.api)
        if var is None:
            return None
        return self._environ.get(var) or None


async def resolve_credential(resolver: CredentialResolver, model: ModelDescriptor) -> str:
    """Call ``resolver`` and await it if needed. Missing credentials become ``""``."""
    raw = resolver(model)
    if inspect.isawaitable(raw):
        raw = await raw
    return raw or ""


def parse_credential(model: ModelDescriptor, raw: str) -> Credential:
    """Interpret ``raw`` according to the model's auth style.

    Key-based models use the string verbatim as an API key. Every other
    model expects JSON of the form ``{"token": ..., "projectId": ...}``.
    """
    if model.api == API_KEY_API:
        return Credential(header="x-goog-api-key", value=raw)

    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise AuthError(model.provider, "expected a JSON credential") from exc
    if not isinstance(parsed, dict) or not parsed.get("token"):
        raise AuthError(model.provider, "credential has no token")

    return Credential(
        header="Authorization",
        value=f"Bearer {parsed['token']}",
        project_id=parsed.get("projectId"),
    )
