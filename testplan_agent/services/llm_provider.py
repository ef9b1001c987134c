"""
LLM provider abstraction.

Two interchangeable backends implement ``LLMProvider``: Groq (cloud) and
Ollama (local). ``build_provider`` picks one by ``ProviderKind`` and hands it
the typed configuration parsed from the settings store.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from ..schemas.settings import ConnectionStatus
from .settings_store import (
    CloudProviderConfig,
    LocalProviderConfig,
    ProviderKind,
    SettingsStore,
)


@dataclass
class GenerationMetadata:
    tokens_used: int = 0
    generation_time_ms: int = 0


@dataclass
class GenerationResult:
    """Text produced by a provider plus usage figures"""

    content: str
    model: str
    provider: ProviderKind
    metadata: GenerationMetadata = field(default_factory=GenerationMetadata)


class LLMProvider(ABC):
    """Abstract base for LLM providers."""

    kind: ProviderKind

    @abstractmethod
    async def generate(self, prompt: str, system_prompt: str) -> GenerationResult:
        """Send prompt and return the completion"""
        ...

    @abstractmethod
    async def list_models(self) -> List[str]:
        """Identifiers of the models the backend can serve"""
        ...

    @abstractmethod
    async def test_connection(self) -> ConnectionStatus:
        """Probe the backend; never raises"""
        ...

    @abstractmethod
    async def close(self):
        """Close HTTP client"""
        ...


async def build_provider(kind: ProviderKind, store: SettingsStore) -> LLMProvider:
    """Return the provider implementation for ``kind``"""
    if kind is ProviderKind.OLLAMA:
        from .ollama_provider import OllamaProvider

        return OllamaProvider(await LocalProviderConfig.load(store))

    from .groq_provider import GroqProvider

    return GroqProvider(await CloudProviderConfig.load(store))
