"""Provider variant configs and the registry that resolves them."""

from __future__ import annotations

from collections.abc import Iterable

from grounded_gemini.types import ModelDescriptor

from .antigravity import AntigravityConfig
from .base import ProviderConfig
from .gemini_cli import GeminiCLIConfig
from .generative_ai import GenerativeAIConfig

# Models served through this api authenticate with a raw API key.
API_KEY_API = GenerativeAIConfig.name


class ProviderRegistry:
    """Maps provider or api tags to a config, falling back to a default."""

    def __init__(self, configs: Iterable[ProviderConfig], *, default: str) -> None:
        self._configs: dict[str, ProviderConfig] = {c.name: c for c in configs}
        if default not in self._configs:
            raise ValueError(f"Default provider '{default}' is not registered.")
        self._default = default

    def resolve(self, model: ModelDescriptor) -> ProviderConfig:
        """Return the config for ``model``: provider tag, then api tag, then default."""
        return (
            self._configs.get(model.provider)
            or self._configs.get(model.api)
            or self._configs[self._default]
        )


def default_registry() -> ProviderRegistry:
    return ProviderRegistry(
        [GenerativeAIConfig(), GeminiCLIConfig(), AntigravityConfig()],
        default=GenerativeAIConfig.name,
    )


__all__ = [
    "API_KEY_API",
    "AntigravityConfig",
    "GeminiCLIConfig",
    "GenerativeAIConfig",
    "ProviderConfig",
    "ProviderRegistry",
    "default_registry",
]
