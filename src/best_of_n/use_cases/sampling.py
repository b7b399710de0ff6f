"""
Sampling

Single-sample queries and the per-model fan-out that issues N of them
concurrently.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from best_of_n.domain.constants import SAMPLE_STAGGER_SECONDS
from best_of_n.domain.entities import RunConfiguration, SampleResult
from best_of_n.domain.value_objects import SampleOutcome, SampleStatus
from best_of_n.infrastructure.model_clients.base import ModelClient
from best_of_n.progress import ProgressTracker

logger = logging.getLogger(__name__)

ResolveFn = Callable[[str], ModelClient | None]


def _elapsed_ms(start: float) -> int:
    return int((time.time() - start) * 1000)


async def query_single(
    model_id: str,
    prompt: str,
    timeout_seconds: float,
    temperature: float,
    *,
    resolve_fn: ResolveFn,
) -> SampleOutcome:
    """
    Issue one generation request with its own timeout

    Never raises: every failure mode comes back as a tagged outcome.

    Args:
        model_id: Catalog model identifier
        prompt: Prompt text
        timeout_seconds: Timeout for this request only
        temperature: Sampling temperature (reasoning backends may ignore it)
        resolve_fn: Maps a model identifier to a client (None if not invocable)

    Returns:
        SampleOutcome
    """
    start = time.time()

    try:
        client = resolve_fn(model_id)
    except Exception as e:
        return SampleOutcome(SampleStatus.ERROR, _elapsed_ms(start), error=str(e))
    if client is None:
        return SampleOutcome(
            SampleStatus.ERROR,
            _elapsed_ms(start),
            error=f"Could not create model instance for {model_id}",
        )

    try:
        response = await asyncio.wait_for(
            client.generate(prompt, temperature=temperature),
            timeout=timeout_seconds,
        )
    except asyncio.TimeoutError:
        return SampleOutcome(
            SampleStatus.TIMEOUT,
            _elapsed_ms(start),
            error=f"Timeout after {int(timeout_seconds * 1000)}ms",
        )
    except Exception as e:
        logger.debug("Request to %s failed: %s", model_id, e)
        return SampleOutcome(SampleStatus.ERROR, _elapsed_ms(start), error=str(e) or type(e).__name__)

    if not response.output:
        return SampleOutcome(SampleStatus.ERROR, _elapsed_ms(start), error="Empty response")

    return SampleOutcome(
        SampleStatus.SUCCESS,
        _elapsed_ms(start),
        response=response.output,
        tokens_used=response.total_tokens,
    )


async def sample_model(
    model_id: str,
    config: RunConfiguration,
    *,
    resolve_fn: ResolveFn,
    timeout_seconds: float | None = None,
    stagger_seconds: float = SAMPLE_STAGGER_SECONDS,
    tracker: ProgressTracker | None = None,
) -> list[SampleResult]:
    """
    Issue config.num_samples queries to one model concurrently

    Sample i starts i * stagger_seconds after the batch; the calls still run
    concurrently. Each completion is reported to the tracker as it happens.

    Args:
        model_id: Catalog model identifier
        config: Run configuration (prompt, N, temperature or range)
        resolve_fn: Maps a model identifier to a client (called once; the
            client is shared by every sample and closed afterwards)
        timeout_seconds: Per-call timeout (default: config.timeout_seconds)
        stagger_seconds: Start offset between consecutive ordinals
        tracker: Progress tracker to notify per sample

    Returns:
        list[SampleResult]: All N results (success or not), ordered by ordinal
    """
    timeout = timeout_seconds or config.timeout_seconds

    # One client per model, shared by its N samples
    client: ModelClient | None = None
    resolve_error: Exception | None = None
    try:
        client = resolve_fn(model_id)
    except Exception as e:
        resolve_error = e

    def resolved(_model_id: str) -> ModelClient | None:
        if resolve_error is not None:
            raise resolve_error
        return client

    async def run_sample(index: int) -> SampleResult:
        if stagger_seconds > 0 and index > 0:
            await asyncio.sleep(index * stagger_seconds)
        temperature = config.temperature_for_sample(index)
        outcome = await query_single(
            model_id, config.prompt, timeout, temperature, resolve_fn=resolved
        )
        if tracker is not None:
            tracker.sample_complete(model_id, outcome.succeeded)
        if not outcome.succeeded:
            logger.debug("Sample %d of %s: %s (%s)", index + 1, model_id, outcome.status.value, outcome.error)
        return SampleResult(
            index=index,
            status=outcome.status,
            latency_ms=outcome.latency_ms,
            response=outcome.response,
            error=outcome.error,
            tokens_used=outcome.tokens_used,
            temperature=temperature,
        )

    tasks = [asyncio.create_task(run_sample(i)) for i in range(config.num_samples)]
    try:
        return list(await asyncio.gather(*tasks))
    finally:
        if isinstance(client, ModelClient):
            try:
                await client.close()
            except Exception as e:
                logger.warning("Could not close client for %s: %s", model_id, e)
