# teach/providers.py
"""
Text generators
──────────────────────────────────────────────────────────────────
One `Generator` interface, one variant per backend:

- OpenAIGenerator    → AsyncOpenAI chat completions
- OllamaGenerator    → same client, pointed at Ollama's OpenAI-compatible API
- AnthropicGenerator → AsyncAnthropic messages

SDK exceptions never leave this module: they are mapped onto the
taxonomy in `teach.errors`.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import AsyncIterator, Dict, List, Optional

import anthropic
import openai
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from teach import config
from teach.errors import (
    GenerationError, GenerationTimeout, ModelNotFound,
    ProviderUnavailable, RateLimited,
)


class Generator(ABC):
    name: str = "generator"

    def __init__(self, model: str):
        self.model = model

    @abstractmethod
    async def generate(self, system_prompt: str, user_prompt: str, *,
                       temperature: float = 0.7, max_tokens: int = 500) -> str:
        ...

    @abstractmethod
    def stream(self, system_prompt: str, messages: List[Dict[str, str]], *,
               temperature: float = 0.7, max_tokens: int = 500) -> AsyncIterator[str]:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} model={self.model!r}>"


def _classify(exc: Exception, sdk, provider: str, model: str) -> GenerationError:
    if isinstance(exc, sdk.RateLimitError):
        return RateLimited(f"{provider} rate limit hit", provider=provider)
    if isinstance(exc, sdk.NotFoundError):
        return ModelNotFound(f"Model '{model}' not found on {provider}", provider=provider)
    if isinstance(exc, sdk.APITimeoutError):
        return GenerationTimeout(f"{provider} request timed out", provider=provider)
    if isinstance(exc, sdk.APIConnectionError):
        return ProviderUnavailable(f"{provider} is not reachable", provider=provider)
    if isinstance(exc, sdk.APIStatusError):
        return ProviderUnavailable(f"{provider} returned HTTP {exc.status_code}", provider=provider)
    return ProviderUnavailable(f"{provider} error: {exc}", provider=provider)


# ===============================================================
# OpenAI (and anything speaking its API)
# ===============================================================
class OpenAIGenerator(Generator):
    name = "openai"

    def __init__(self, api_key: Optional[str] = None, model: str = config.OPENAI_MODEL,
                 base_url: Optional[str] = None, client: Optional[AsyncOpenAI] = None):
        super().__init__(model)
        self.client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)

    def _error(self, exc: Exception) -> GenerationError:
        return _classify(exc, openai, self.name, self.model)

    async def generate(self, system_prompt, user_prompt, *, temperature=0.7, max_tokens=500):
        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user",   "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APIError as e:
            raise self._error(e) from e
        if not resp.choices:
            return ""
        return (resp.choices[0].message.content or "").strip()

    async def stream(self, system_prompt, messages, *, temperature=0.7, max_tokens=500):
        try:
            stream = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "system", "content": system_prompt}] + list(messages),
                stream=True,
                temperature=temperature,
                max_tokens=max_tokens,
            )
            async for chunk in stream:
                token = chunk.choices[0].delta.content if chunk.choices else None
                if token:
                    yield token
        except openai.APIError as e:
            raise self._error(e) from e


class OllamaGenerator(OpenAIGenerator):
    name = "ollama"

    def __init__(self, base_url: str = config.OLLAMA_BASE_URL, model: str = config.OLLAMA_MODEL,
                 client: Optional[AsyncOpenAI] = None):
        # Ollama ignores the key, the SDK just refuses to start without one
        super().__init__(api_key="ollama", model=model, base_url=base_url, client=client)

    def _error(self, exc: Exception) -> GenerationError:
        err = super()._error(exc)
        if isinstance(err, ModelNotFound):
            err.message = f"Model '{self.model}' not found. Pull it with: ollama pull {self.model}"
            err.args = (err.message,)
        elif type(err) is ProviderUnavailable and isinstance(exc, openai.APIConnectionError):
            err.message = "Ollama is not running. Please start Ollama and try again."
            err.args = (err.message,)
        return err


# ===============================================================
# Anthropic
# ===============================================================
class AnthropicGenerator(Generator):
    name = "anthropic"

    def __init__(self, api_key: Optional[str] = None, model: str = config.ANTHROPIC_MODEL,
                 client: Optional[AsyncAnthropic] = None):
        super().__init__(model)
        self.client = client or AsyncAnthropic(api_key=api_key)

    def _error(self, exc: Exception) -> GenerationError:
        return _classify(exc, anthropic, self.name, self.model)

    async def generate(self, system_prompt, user_prompt, *, temperature=0.7, max_tokens=500):
        try:
            resp = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except anthropic.APIError as e:
            raise self._error(e) from e
        return "".join(b.text for b in resp.content if b.type == "text").strip()

    async def stream(self, system_prompt, messages, *, temperature=0.7, max_tokens=500):
        try:
            async with self.client.messages.stream(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=list(messages),
            ) as stream:
                async for text in stream.text_stream:
                    if text:
                        yield text
        except anthropic.APIError as e:
            raise self._error(e) from e


# ───────── provider selection ─────────
def build_generator(provider: Optional[str] = None) -> Generator:
    """
    Pick the backend once, at startup. `auto` prefers OpenAI, then Anthropic;
    Ollama has to be asked for explicitly. Raises ProviderUnavailable when
    the chosen backend has no credentials.
    """
    provider = (provider or config.AI_PROVIDER).strip().lower()

    if provider == "auto":
        if config.OPENAI_API_KEY:
            provider = "openai"
        elif config.ANTHROPIC_API_KEY:
            provider = "anthropic"
        else:
            raise ProviderUnavailable(
                "No AI provider configured: set OPENAI_API_KEY, ANTHROPIC_API_KEY or AI_PROVIDER=ollama")

    if provider == "openai":
        if not config.OPENAI_API_KEY:
            raise ProviderUnavailable("OPENAI_API_KEY is not set", provider="openai")
        return OpenAIGenerator(api_key=config.OPENAI_API_KEY, model=config.OPENAI_MODEL)
    if provider == "anthropic":
        if not config.ANTHROPIC_API_KEY:
            raise ProviderUnavailable("ANTHROPIC_API_KEY is not set", provider="anthropic")
        return AnthropicGenerator(api_key=config.ANTHROPIC_API_KEY, model=config.ANTHROPIC_MODEL)
    if provider == "ollama":
        return OllamaGenerator(base_url=config.OLLAMA_BASE_URL, model=config.OLLAMA_MODEL)

    raise ProviderUnavailable(f"Unknown AI provider '{provider}'")
