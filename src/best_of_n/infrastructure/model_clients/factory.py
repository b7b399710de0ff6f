"""
Model client factory

Creates the appropriate client instance for a provider kind, and maps catalog
model identifiers to invocable clients.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from best_of_n.domain.constants import (
    ASYNC_ONLY_PROVIDERS,
    DEFAULT_MAX_TOKENS,
    PROVIDER_ANTHROPIC,
    PROVIDER_GOOGLE,
    PROVIDER_LMSTUDIO,
    PROVIDER_OPENAI,
    PROVIDER_XAI,
    SYNC_PROVIDERS,
    THINKING_BUDGET_TOKENS,
)
from best_of_n.harness_config import HarnessConfig, load_config
from best_of_n.infrastructure.model_clients.base import ModelClient
from best_of_n.infrastructure.model_clients.claude import ClaudeClient
from best_of_n.infrastructure.model_clients.gemini import GeminiClient
from best_of_n.infrastructure.model_clients.openai_compat import (
    LMStudioClient,
    OpenAIClient,
    XAIClient,
)

if TYPE_CHECKING:
    from best_of_n.model_catalog import ModelCatalog

logger = logging.getLogger(__name__)


def create_client(
    provider: str,
    model_id: str,
    *,
    reasoning: bool = False,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    max_retries: int = 2,
    timeout_seconds: float | None = None,
    thinking_budget_tokens: int | None = None,
) -> ModelClient:
    """
    Create the appropriate client for a provider kind

    Args:
        provider: Provider kind (openai, google, xai, anthropic, lmstudio)
        model_id: Provider-side model identifier
        reasoning: Whether the model is a reasoning model
        max_tokens: Default output token limit
        max_retries: SDK retry count
        timeout_seconds: SDK request timeout
        thinking_budget_tokens: Anthropic extended thinking budget
            (defaults to THINKING_BUDGET_TOKENS for reasoning Claude models)

    Returns:
        ModelClient: The appropriate client instance

    Raises:
        ValueError: Unknown provider, or missing credentials
    """
    if provider == PROVIDER_ANTHROPIC:
        if thinking_budget_tokens is None and reasoning:
            thinking_budget_tokens = THINKING_BUDGET_TOKENS
        return ClaudeClient(
            model_id,
            max_retries=max_retries,
            max_tokens=max_tokens,
            thinking_budget_tokens=thinking_budget_tokens,
            timeout_seconds=timeout_seconds,
        )
    elif provider == PROVIDER_GOOGLE:
        return GeminiClient(model_id, max_tokens=max_tokens, timeout_seconds=timeout_seconds)
    elif provider == PROVIDER_OPENAI:
        return OpenAIClient(
            model_id,
            max_retries=max_retries,
            max_tokens=max_tokens,
            reasoning=reasoning,
            timeout_seconds=timeout_seconds,
        )
    elif provider == PROVIDER_XAI:
        return XAIClient(
            model_id,
            max_retries=max_retries,
            max_tokens=max_tokens,
            reasoning=reasoning,
            timeout_seconds=timeout_seconds,
        )
    elif provider == PROVIDER_LMSTUDIO:
        return LMStudioClient(
            model_id,
            max_retries=max_retries,
            max_tokens=max_tokens,
            timeout_seconds=timeout_seconds,
        )
    raise ValueError(f"Unknown provider: {provider}")


def resolve(
    model_name: str,
    catalog: ModelCatalog,
    config: HarnessConfig | None = None,
) -> ModelClient | None:
    """
    Map a catalog model identifier to an invocable client

    Returns None (never raises) for an unknown identifier, a browser-only
    model, or an asynchronous deep-research provider. Client construction may
    still raise ValueError when credentials are missing.

    Args:
        model_name: Catalog model identifier
        catalog: Model catalog
        config: HarnessConfig (loads from env if not provided)

    Returns:
        ModelClient | None
    """
    descriptor = catalog.get_model(model_name)
    if descriptor is None:
        logger.error("Unknown model: %s", model_name)
        return None
    if descriptor.browser_only:
        logger.debug("Model %s is browser-only; not invocable", model_name)
        return None
    if descriptor.deep_research or descriptor.provider in ASYNC_ONLY_PROVIDERS:
        logger.debug("Model %s is an asynchronous deep-research model; not invocable", model_name)
        return None

    if descriptor.provider not in SYNC_PROVIDERS:
        logger.error("Unknown provider: %s (model %s)", descriptor.provider, model_name)
        return None

    if config is None:
        config = load_config()

    return create_client(
        descriptor.provider,
        descriptor.model_id,
        reasoning=descriptor.reasoning,
        max_tokens=catalog.max_tokens_for(model_name),
        max_retries=config.sampling.max_retries,
    )
