"""
Cross-model synthesis

Combines one representative output per successful model into a final report
using a high-capability model with extended thinking.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from best_of_n.domain.constants import NOTHING_TO_SYNTHESISE
from best_of_n.harness_config import SynthesisConfig
from best_of_n.infrastructure.model_clients.base import ModelClient
from best_of_n.infrastructure.model_clients.factory import create_client
from best_of_n.prompt_builder import (
    RepresentativeOutput,
    build_brainstorm_cross_model_prompt,
    build_cross_model_prompt,
)

logger = logging.getLogger(__name__)


class CrossModelSynthesiser:
    """Synthesises the representative outputs of several models"""

    def __init__(
        self,
        client: ModelClient,
        *,
        max_tokens: int = 16000,
        timeout_seconds: float | None = 600,
    ) -> None:
        self._client = client
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

    @property
    def model_name(self) -> str:
        return self._client.model_name

    async def synthesise(
        self,
        original_prompt: str,
        outputs: list[RepresentativeOutput],
        brainstorm: bool = False,
    ) -> str:
        """
        Run cross-model synthesis

        Args:
            original_prompt: The user's prompt
            outputs: One representative output per model
            brainstorm: Build a master idea list instead of a consensus report

        Returns:
            The synthesis text, or NOTHING_TO_SYNTHESISE when no output is
            non-empty (no request is made then)

        Raises:
            Exception: Whatever the synthesis request raises (handled by the caller)
        """
        usable = [o for o in outputs if o.response]
        if not usable:
            return NOTHING_TO_SYNTHESISE

        if brainstorm:
            prompt = build_brainstorm_cross_model_prompt(original_prompt, usable)
        else:
            prompt = build_cross_model_prompt(original_prompt, usable)

        logger.info("Running cross-model synthesis with %s (%d outputs)", self.model_name, len(usable))
        call = self._client.generate(prompt, max_tokens=self.max_tokens)
        if self.timeout_seconds:
            response = await asyncio.wait_for(call, timeout=self.timeout_seconds)
        else:
            response = await call
        return response.output


def create_synthesiser(
    synthesis_config: SynthesisConfig,
    create_client_fn: Callable[..., ModelClient] = create_client,
) -> CrossModelSynthesiser:
    """
    Build the synthesiser from harness settings

    Raises:
        ValueError: Missing credentials or unknown provider
    """
    client = create_client_fn(
        synthesis_config.provider,
        synthesis_config.model,
        reasoning=True,
        max_tokens=synthesis_config.max_tokens,
        thinking_budget_tokens=synthesis_config.thinking_budget_tokens,
    )
    return CrossModelSynthesiser(
        client,
        max_tokens=synthesis_config.max_tokens,
        timeout_seconds=synthesis_config.timeout_seconds,
    )
