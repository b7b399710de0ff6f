"""
Per-model judge

Reduces one model's successful samples to a representative output, either by
selecting the best sample (selection mode) or by merging every distinct idea
(brainstorm mode).

Both modes walk the same chain: primary judge model, secondary judge model,
then a deterministic fallback that needs no model at all (longest response /
concatenation). A model with at least one successful sample therefore always
gets a result.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from best_of_n.domain.entities import SampleResult
from best_of_n.domain.value_objects import BrainstormMerge, ComparisonVerdict
from best_of_n.harness_config import HarnessConfig, JudgeConfig
from best_of_n.infrastructure.model_clients.base import ModelClient
from best_of_n.infrastructure.model_clients.factory import create_client
from best_of_n.judging.extraction import parse_comparison, split_brainstorm_response
from best_of_n.prompt_builder import build_brainstorm_prompt, build_comparison_prompt

logger = logging.getLogger(__name__)

SINGLE_SAMPLE_COMPARISON = "## Comparison notes\n\nOnly one sample, no comparison needed.\n"
SINGLE_SAMPLE_EXTRACTION = "## Extraction notes\n\nOnly one sample, no merging needed.\n"
LONGEST_FALLBACK_REASON = "Fallback: selected longest response (comparison model unavailable)"
GENERIC_EXTRACTION_NOTE = "## Extraction notes\n\nIdeas extracted and merged across all samples.\n"
CONCATENATION_NOTE = (
    "## Extraction notes\n\nFallback: concatenated all samples (extraction model unavailable).\n"
)


@dataclass
class ComparisonResult:
    """Outcome of selection mode (best_index is a position within the samples given)"""
    best_index: int
    comparison_markdown: str
    consistent_points: list[str] = field(default_factory=list)
    unique_points: list[str] = field(default_factory=list)
    contradictions: list[str] = field(default_factory=list)
    judged_by: str | None = None  # None when no model verdict was used


def format_comparison_markdown(
    best_index: int,
    sample_count: int,
    reasoning: str,
    consistent_points: list[str],
    unique_points: list[str],
    contradictions: list[str],
    judged_by: str | None = None,
) -> str:
    """Render a verdict as the markdown comparison report"""
    md = "## Comparison notes\n\n"
    md += f"**Best response:** Sample {best_index + 1} of {sample_count}\n\n"
    md += f"**Why:** {reasoning}\n\n"

    sections = (
        ("Consistent across samples (high confidence)", consistent_points),
        ("Unique to one sample (verify independently)", unique_points),
        ("Contradictions between samples", contradictions),
    )
    for title, points in sections:
        if points:
            md += f"### {title}\n\n"
            for point in points:
                md += f"- {point}\n"
            md += "\n"
    if judged_by:
        md += f"_Judged by {judged_by}_\n"
    return md


def longest_response_index(samples: list[SampleResult]) -> int:
    """Position of the longest response (first one wins ties)"""
    longest_idx = 0
    longest_len = -1
    for position, sample in enumerate(samples):
        if sample.response_length > longest_len:
            longest_len = sample.response_length
            longest_idx = position
    return longest_idx


def concatenate_samples(samples: list[SampleResult]) -> str:
    """Every sample verbatim, labelled with its originating ordinal"""
    return "\n\n---\n\n".join(
        f"**From sample {sample.index + 1}:**\n\n{sample.response}" for sample in samples
    )


class SampleJudge:
    """
    Judge that compares or merges the samples of a single model

    Clients are tried in order; a request failure or an unusable answer moves
    on to the next client, and the deterministic fallback follows the last one.
    """

    def __init__(
        self,
        clients: list[ModelClient],
        *,
        max_tokens: int = 2000,
        brainstorm_max_tokens: int = 4000,
        timeout_seconds: float | None = 120,
    ) -> None:
        self._clients = list(clients)
        self.max_tokens = max_tokens
        self.brainstorm_max_tokens = brainstorm_max_tokens
        self.timeout_seconds = timeout_seconds

    async def _ask(self, client: ModelClient, prompt: str, max_tokens: int) -> str:
        call = client.generate(prompt, max_tokens=max_tokens)
        if self.timeout_seconds:
            response = await asyncio.wait_for(call, timeout=self.timeout_seconds)
        else:
            response = await call
        return response.output

    async def compare(
        self,
        model_name: str,
        original_prompt: str,
        samples: list[SampleResult],
    ) -> ComparisonResult:
        """
        Pick the best of a model's successful samples

        Args:
            model_name: Name shown to the judge
            original_prompt: The prompt the samples answer
            samples: Successful samples (at least one)

        Returns:
            ComparisonResult

        Raises:
            ValueError: If samples is empty
        """
        if not samples:
            raise ValueError(f"No samples to compare for {model_name}")

        if len(samples) == 1:
            return ComparisonResult(best_index=0, comparison_markdown=SINGLE_SAMPLE_COMPARISON)

        prompt = build_comparison_prompt(model_name, original_prompt, samples)

        for client in self._clients:
            logger.info(
                "Comparing %d samples for %s (%s)", len(samples), model_name, client.model_name
            )
            try:
                raw = await self._ask(client, prompt, self.max_tokens)
            except Exception as e:
                logger.warning("Judge %s failed for %s: %s", client.model_name, model_name, e)
                continue
            try:
                verdict = parse_comparison(raw, len(samples))
            except Exception as e:
                logger.warning(
                    "Could not use comparison from %s for %s: %s", client.model_name, model_name, e
                )
                continue
            return self._from_verdict(verdict, len(samples), client.model_name)

        logger.warning("No usable comparison for %s. Falling back to longest response.", model_name)
        best = longest_response_index(samples)
        return ComparisonResult(
            best_index=best,
            comparison_markdown=format_comparison_markdown(
                best, len(samples), LONGEST_FALLBACK_REASON, [], [], []
            ),
        )

    @staticmethod
    def _from_verdict(verdict: ComparisonVerdict, sample_count: int, judge_name: str) -> ComparisonResult:
        return ComparisonResult(
            best_index=verdict.best_index,
            comparison_markdown=format_comparison_markdown(
                verdict.best_index,
                sample_count,
                verdict.reasoning,
                verdict.consistent_points,
                verdict.unique_points,
                verdict.contradictions,
                judge_name,
            ),
            consistent_points=verdict.consistent_points,
            unique_points=verdict.unique_points,
            contradictions=verdict.contradictions,
            judged_by=judge_name,
        )

    async def brainstorm(
        self,
        model_name: str,
        original_prompt: str,
        samples: list[SampleResult],
    ) -> BrainstormMerge:
        """
        Merge every distinct idea across a model's successful samples

        Raises:
            ValueError: If samples is empty
        """
        if not samples:
            raise ValueError(f"No samples for brainstorm extraction from {model_name}")

        if len(samples) == 1:
            return BrainstormMerge(
                merged_ideas=samples[0].response or "",
                comparison_markdown=SINGLE_SAMPLE_EXTRACTION,
            )

        prompt = build_brainstorm_prompt(model_name, original_prompt, samples)

        for client in self._clients:
            logger.info(
                "Extracting ideas from %d samples for %s (%s)",
                len(samples), model_name, client.model_name,
            )
            try:
                raw = await self._ask(client, prompt, self.brainstorm_max_tokens)
            except Exception as e:
                logger.warning("Extraction with %s failed for %s: %s", client.model_name, model_name, e)
                continue
            if not raw.strip():
                logger.warning("Extraction with %s returned nothing for %s", client.model_name, model_name)
                continue

            merged, note = split_brainstorm_response(raw)
            if note is None:
                return BrainstormMerge(merged_ideas=merged, comparison_markdown=GENERIC_EXTRACTION_NOTE)
            return BrainstormMerge(
                merged_ideas=merged,
                comparison_markdown=f"## Extraction notes\n\n{note}\n",
            )

        logger.warning("No extraction model available for %s. Using concatenation fallback.", model_name)
        return BrainstormMerge(
            merged_ideas=concatenate_samples(samples),
            comparison_markdown=CONCATENATION_NOTE,
        )


def build_judge_clients(
    judge_config: JudgeConfig,
    create_client_fn: Callable[..., ModelClient] = create_client,
) -> list[ModelClient]:
    """
    Create the primary and secondary judge clients

    A client that cannot be constructed (e.g. missing credentials) is skipped,
    which is the same as its request failing.
    """
    clients: list[ModelClient] = []
    for provider, model_id in (
        (judge_config.primary_provider, judge_config.primary_model),
        (judge_config.secondary_provider, judge_config.secondary_model),
    ):
        try:
            clients.append(create_client_fn(provider, model_id, max_tokens=judge_config.max_tokens))
        except ValueError as e:
            logger.warning("Judge model %s unavailable: %s", model_id, e)
    return clients


def create_judge(
    config: HarnessConfig,
    create_client_fn: Callable[..., ModelClient] = create_client,
) -> SampleJudge:
    """Build a SampleJudge from harness settings"""
    return SampleJudge(
        build_judge_clients(config.judge, create_client_fn),
        max_tokens=config.judge.max_tokens,
        brainstorm_max_tokens=config.judge.brainstorm_max_tokens,
        timeout_seconds=config.judge.timeout_seconds,
    )
