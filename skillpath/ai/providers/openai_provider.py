from __future__ import annotations

from openai import AsyncOpenAI, OpenAIError

from skillpath.ai.config import AIConfig
from skillpath.core.errors import TransportError


class OpenAIProvider:
    """Prompt in, text out over the OpenAI chat completions API."""

    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: str | None = None,
        timeout_s: float = 30.0,
        max_retries: int = 2,
        temperature: float = 0.2,
        max_output_tokens: int = 2500,
    ):
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY is missing")
        self.model = model
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_s,
            max_retries=max_retries,
        )

    async def generate(self, prompt: str) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
                max_tokens=self._max_output_tokens,
            )
        except OpenAIError as exc:
            raise TransportError(f"OpenAI request failed: {exc}", code=type(exc).__name__) from exc
        content = response.choices[0].message.content if response.choices else ""
        return content or ""


def from_config(cfg: AIConfig) -> OpenAIProvider:
    return OpenAIProvider(
        model=cfg.model,
        api_key=cfg.api_key,
        base_url=cfg.base_url,
        timeout_s=cfg.timeout_s,
        max_retries=cfg.max_retries,
    )
