"""Ollama (local) chat provider"""

import time
from typing import List, Optional

import httpx

from ..schemas.settings import ConnectionStatus
from .errors import PAYLOAD_ERRORS, UpstreamAPIError
from .llm_provider import GenerationMetadata, GenerationResult, LLMProvider
from .log_service import log_service
from .settings_store import LocalProviderConfig, ProviderKind


class OllamaProvider(LLMProvider):
    """Local Ollama server; no credentials needed"""

    kind = ProviderKind.OLLAMA

    def __init__(
        self, config: LocalProviderConfig, client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config
        self.client = client or httpx.AsyncClient()

    async def generate(self, prompt: str, system_prompt: str) -> GenerationResult:
        payload = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
                "num_predict": self.config.max_tokens,
            },
        }

        start = time.monotonic()
        try:
            response = await self.client.post(
                f"{self.config.base_url}/api/chat",
                json=payload,
                timeout=self.config.generate_timeout,
            )
        except httpx.HTTPError as e:
            raise UpstreamAPIError(
                f"Cannot reach Ollama at {self.config.base_url}: {e}"
            ) from e

        if response.is_error:
            raise UpstreamAPIError(
                f"Ollama error ({response.status_code}): {response.text}",
                upstream_status=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamAPIError(f"Ollama returned invalid JSON: {e}") from e
        elapsed_ms = int((time.monotonic() - start) * 1000)

        try:
            content = (data.get("message") or {}).get("content") or ""
            tokens = (data.get("prompt_eval_count") or 0) + (data.get("eval_count") or 0)
        except PAYLOAD_ERRORS as e:
            raise UpstreamAPIError(f"Ollama returned an unexpected payload: {e!r}") from e

        log_service.generation("Ollama", self.config.model, tokens, elapsed_ms)

        return GenerationResult(
            content=content,
            model=self.config.model,
            provider=self.kind,
            metadata=GenerationMetadata(
                tokens_used=tokens, generation_time_ms=elapsed_ms
            ),
        )

    async def _get_tags(self) -> dict:
        response = await self.client.get(
            f"{self.config.base_url}/api/tags", timeout=self.config.probe_timeout
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise UpstreamAPIError("Ollama returned an unexpected model list")
        return data

    async def list_models(self) -> List[str]:
        try:
            data = await self._get_tags()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamAPIError(
                f"Cannot reach Ollama at {self.config.base_url}: {e}"
            ) from e
        try:
            return [model["name"] for model in data.get("models") or [] if model.get("name")]
        except PAYLOAD_ERRORS as e:
            raise UpstreamAPIError(f"Ollama returned an unexpected model list: {e!r}") from e

    async def test_connection(self) -> ConnectionStatus:
        try:
            models = await self.list_models()
            return ConnectionStatus(
                connected=True, message=f"Connected. {len(models)} models available."
            )
        except UpstreamAPIError as e:
            return ConnectionStatus(connected=False, message=e.message)
        except Exception as e:
            return ConnectionStatus(connected=False, message=f"Cannot reach Ollama: {e}")

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()
