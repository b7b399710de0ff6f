"""
OpenAI-compatible (chat completions) model clients

Covers OpenAI itself, xAI (Grok) and LMStudio, which share the same API shape
and differ only in endpoint, credentials and token-limit parameter name.
"""

import os
import time

from openai import AsyncOpenAI

from best_of_n.domain.constants import DEFAULT_MAX_TOKENS
from best_of_n.domain.value_objects import ModelResponse
from best_of_n.infrastructure.model_clients.base import ModelClient


class OpenAICompatibleClient(ModelClient):
    """Client for any OpenAI-compatible chat completions endpoint"""

    base_url_env: str | None = None
    default_base_url: str | None = None
    api_key_env: str = "OPENAI_API_KEY"
    default_api_key: str | None = None
    model_prefix: str = ""
    token_param: str = "max_tokens"

    def __init__(
        self,
        model_name: str,
        base_url: str | None = None,
        api_key: str | None = None,
        max_retries: int = 2,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        reasoning: bool = False,
        timeout_seconds: float | None = None,
    ):
        """
        Args:
            model_name: Model name (a provider prefix such as lmstudio/ is stripped)
            base_url: API endpoint (falls back to the class's environment variable, then its default)
            api_key: API key (falls back to the class's environment variable)
            max_retries: SDK retry count (default: 2)
            max_tokens: Default output token limit
            reasoning: Reasoning models reject custom temperatures, so none is sent
            timeout_seconds: SDK request timeout (SDK default if not specified)
        """
        self.model_name = model_name
        self.api_model_name = model_name.removeprefix(self.model_prefix) if self.model_prefix else model_name
        self.max_tokens = max_tokens
        self.reasoning = reasoning

        # Configuration priority: argument > environment variable > default value
        env_base_url = os.environ.get(self.base_url_env) if self.base_url_env else None
        self.base_url = base_url or env_base_url or self.default_base_url
        api_key = api_key or os.environ.get(self.api_key_env) or self.default_api_key
        if not api_key:
            raise ValueError(f"{self.api_key_env} is not set")

        client_kwargs: dict = {"api_key": api_key, "max_retries": max_retries}
        if self.base_url:
            client_kwargs["base_url"] = self.base_url
        if timeout_seconds is not None:
            client_kwargs["timeout"] = timeout_seconds
        self.client = AsyncOpenAI(**client_kwargs)

    async def close(self) -> None:
        await self.client.close()

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ModelResponse:
        """Send a prompt and retrieve the response"""
        request: dict = {
            "model": self.api_model_name,
            "messages": [{"role": "user", "content": prompt}],
            self.token_param: max_tokens or self.max_tokens,
        }
        if temperature is not None and not self.reasoning:
            request["temperature"] = temperature

        start_time = time.time()
        response = await self.client.chat.completions.create(**request)
        end_time = time.time()

        latency_ms = int((end_time - start_time) * 1000)
        output = (response.choices[0].message.content or "").strip()

        # Retrieve token usage
        input_tokens = 0
        output_tokens = 0
        if response.usage:
            input_tokens = response.usage.prompt_tokens or 0
            output_tokens = response.usage.completion_tokens or 0

        return ModelResponse(
            output=output,
            latency_ms=latency_ms,
            model_name=self.model_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )


class OpenAIClient(OpenAICompatibleClient):
    """OpenAI API (api.openai.com)"""
    api_key_env = "OPENAI_API_KEY"
    token_param = "max_completion_tokens"


class XAIClient(OpenAICompatibleClient):
    """xAI API (Grok models)"""
    base_url_env = "XAI_BASE_URL"
    default_base_url = "https://api.x.ai/v1"
    api_key_env = "XAI_API_KEY"


class LMStudioClient(OpenAICompatibleClient):
    """Local LMStudio server (API key usually not required)"""
    base_url_env = "LMSTUDIO_BASE_URL"
    default_base_url = "http://localhost:1234/v1"
    api_key_env = "LMSTUDIO_API_KEY"
    default_api_key = "lm-studio"
    model_prefix = "lmstudio/"
