"""
Anthropic Claude model client
"""

import os
import time

from anthropic import AsyncAnthropic

from best_of_n.domain.constants import DEFAULT_MAX_TOKENS
from best_of_n.domain.value_objects import ModelResponse
from best_of_n.infrastructure.model_clients.base import ModelClient

# Room left for the visible answer when extended thinking is on
_MIN_ANSWER_TOKENS = 1024


class ClaudeClient(ModelClient):
    """Claude client using the Anthropic API"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        max_retries: int = 2,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        thinking_budget_tokens: int | None = None,
        timeout_seconds: float | None = None,
    ):
        """
        Args:
            model_name: Model name (e.g. claude-sonnet-4-5-20250929)
            api_key: Anthropic API key (falls back to environment variable if not specified)
            max_retries: SDK retry count (default: 2)
            max_tokens: Default output token limit
            thinking_budget_tokens: Enables extended thinking with this budget when set
            timeout_seconds: SDK request timeout (SDK default if not specified)
        """
        self.model_name = model_name
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.max_tokens = max_tokens
        self.thinking_budget_tokens = thinking_budget_tokens

        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")

        client_kwargs: dict = {"api_key": self.api_key, "max_retries": max_retries}
        if timeout_seconds is not None:
            client_kwargs["timeout"] = timeout_seconds
        self.client = AsyncAnthropic(**client_kwargs)

    async def close(self) -> None:
        await self.client.close()

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ModelResponse:
        """
        Send a prompt and retrieve the response

        With extended thinking enabled the API only accepts the default
        temperature, so the requested one is not sent.
        """
        request: dict = {
            "model": self.model_name,
            "max_tokens": max_tokens or self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if self.thinking_budget_tokens:
            request["thinking"] = {"type": "enabled", "budget_tokens": self.thinking_budget_tokens}
            request["max_tokens"] = max(
                request["max_tokens"], self.thinking_budget_tokens + _MIN_ANSWER_TOKENS
            )
        elif temperature is not None:
            request["temperature"] = temperature

        start_time = time.time()
        response = await self.client.messages.create(**request)
        end_time = time.time()

        latency_ms = int((end_time - start_time) * 1000)
        # Thinking blocks precede the answer; keep only text blocks
        output = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        ).strip()

        # Retrieve token usage
        input_tokens = getattr(response.usage, "input_tokens", 0) or 0
        output_tokens = getattr(response.usage, "output_tokens", 0) or 0

        return ModelResponse(
            output=output,
            latency_ms=latency_ms,
            model_name=self.model_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
