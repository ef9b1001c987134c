"""Groq (cloud) chat-completion provider"""

import time
from typing import Dict, List, Optional

import httpx

from ..schemas.settings import ConnectionStatus
from .errors import (
    PAYLOAD_ERRORS,
    NotConfiguredError,
    UpstreamAPIError,
    UpstreamAuthError,
)
from .llm_provider import GenerationMetadata, GenerationResult, LLMProvider
from .log_service import log_service
from .settings_store import CloudProviderConfig, ProviderKind


class GroqProvider(LLMProvider):
    """OpenAI-compatible Groq REST API"""

    kind = ProviderKind.GROQ

    def __init__(
        self, config: CloudProviderConfig, client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config
        self.client = client or httpx.AsyncClient(timeout=config.timeout)

    def _headers(self) -> Dict[str, str]:
        if self.config.api_key is None:
            raise NotConfiguredError(
                "Groq API key not configured. Please set it in Settings."
            )
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, endpoint: str, **kwargs) -> Dict:
        """Make request to the Groq API"""
        headers = self._headers()
        url = f"{self.config.base_url}/{endpoint}"

        try:
            response = await self.client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamAPIError(f"Cannot reach Groq: {e}") from e

        if response.status_code == 401:
            raise UpstreamAuthError(
                "Groq authentication failed. Please check your API key."
            )
        if response.is_error:
            raise UpstreamAPIError(
                f"Groq API error ({response.status_code}): {response.text}",
                upstream_status=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamAPIError(f"Groq returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamAPIError("Groq returned an unexpected payload")
        return data

    async def generate(self, prompt: str, system_prompt: str) -> GenerationResult:
        payload = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

        start = time.monotonic()
        data = await self._request("POST", "chat/completions", json=payload)
        elapsed_ms = int((time.monotonic() - start) * 1000)

        try:
            choices = data.get("choices") or [{}]
            content = (choices[0].get("message") or {}).get("content") or ""
            tokens = (data.get("usage") or {}).get("total_tokens") or 0
        except PAYLOAD_ERRORS as e:
            raise UpstreamAPIError(f"Groq returned an unexpected payload: {e!r}") from e

        log_service.generation("Groq", self.config.model, tokens, elapsed_ms)

        return GenerationResult(
            content=content,
            model=self.config.model,
            provider=self.kind,
            metadata=GenerationMetadata(
                tokens_used=tokens, generation_time_ms=elapsed_ms
            ),
        )

    async def list_models(self) -> List[str]:
        data = await self._request("GET", "models")
        try:
            return [model["id"] for model in data.get("data") or [] if model.get("id")]
        except PAYLOAD_ERRORS as e:
            raise UpstreamAPIError(f"Groq returned an unexpected model list: {e!r}") from e

    async def test_connection(self) -> ConnectionStatus:
        if self.config.api_key is None:
            return ConnectionStatus(connected=False, message="Groq API key not configured")

        try:
            models = await self.list_models()
            return ConnectionStatus(
                connected=True, message=f"Connected. {len(models)} models available."
            )
        except Exception as e:
            return ConnectionStatus(connected=False, message=f"Connection failed: {e}")

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()
