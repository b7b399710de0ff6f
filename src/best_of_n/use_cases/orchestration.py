"""
Run orchestration

Drives one best-of-N run: every selected model is sampled and judged in its
own concurrent pipeline, successful models are synthesised across, and the
artifact tree is written at the end.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from functools import partial
from typing import Callable, TextIO

from best_of_n.domain.entities import ModelResult, RunConfiguration, RunReport
from best_of_n.harness_config import HarnessConfig
from best_of_n.infrastructure.model_clients.factory import resolve
from best_of_n.judging.per_model import SampleJudge, create_judge
from best_of_n.judging.synthesis import CrossModelSynthesiser, create_synthesiser
from best_of_n.live_document import LiveDocument, render_failure_section, render_model_section
from best_of_n.model_catalog import ModelCatalog
from best_of_n.notify import DesktopNotifier
from best_of_n.persistence import default_output_dir, save_results
from best_of_n.progress import ProgressTracker
from best_of_n.prompt_builder import RepresentativeOutput
from best_of_n.use_cases.sampling import ResolveFn, sample_model

logger = logging.getLogger(__name__)


def representative_outputs(model_results: list[ModelResult]) -> list[RepresentativeOutput]:
    """One synthesis input per successful model"""
    return [
        RepresentativeOutput(
            model_id=mr.model_id,
            display_name=mr.display_name,
            response=mr.representative_output,
            sample_count=len(mr.samples),
            best_index=mr.best_index,
        )
        for mr in model_results
    ]


async def process_model(
    model_id: str,
    config: RunConfiguration,
    catalog: ModelCatalog,
    *,
    resolve_fn: ResolveFn,
    judge: SampleJudge,
    stagger_seconds: float,
    tracker: ProgressTracker | None = None,
    live_document: LiveDocument | None = None,
) -> ModelResult | None:
    """
    Sample one model, then select its best sample or merge its ideas

    Returns:
        ModelResult, or None when every sample failed
    """
    descriptor = catalog.get_model(model_id)
    display_name = catalog.display_name(model_id)
    timeout = (
        descriptor.timeout_seconds
        if descriptor is not None and descriptor.timeout_seconds
        else config.timeout_seconds
    )

    results = await sample_model(
        model_id,
        config,
        resolve_fn=resolve_fn,
        timeout_seconds=timeout,
        stagger_seconds=stagger_seconds,
        tracker=tracker,
    )
    samples = [r for r in results if r.succeeded]
    errors = [r.error for r in results if r.error]

    if not samples:
        logger.warning(
            "All %d samples failed for %s: %s", config.num_samples, model_id, "; ".join(errors)
        )
        if tracker is not None:
            tracker.set_comparison_done(model_id)
        if live_document is not None:
            await live_document.update_model_section(
                model_id, render_failure_section(config.num_samples, errors)
            )
        return None

    if tracker is not None:
        tracker.set_comparing(model_id)

    if config.brainstorm:
        merge = await judge.brainstorm(model_id, config.prompt, samples)
        result = ModelResult(
            model_id=model_id,
            display_name=display_name,
            samples=samples,
            attempted=len(results),
            comparison_markdown=merge.comparison_markdown,
            merged_ideas=merge.merged_ideas,
            errors=errors,
        )
    else:
        comparison = await judge.compare(model_id, config.prompt, samples)
        result = ModelResult(
            model_id=model_id,
            display_name=display_name,
            samples=samples,
            attempted=len(results),
            best_index=comparison.best_index,
            comparison_markdown=comparison.comparison_markdown,
            errors=errors,
            consistent_points=comparison.consistent_points,
            unique_points=comparison.unique_points,
            contradictions=comparison.contradictions,
            judged_by=comparison.judged_by,
        )

    if tracker is not None:
        tracker.set_comparison_done(model_id)
    if live_document is not None:
        await live_document.update_model_section(
            model_id, render_model_section(result, config.num_samples)
        )
    return result


async def run_query(
    config: RunConfiguration,
    catalog: ModelCatalog,
    settings: HarnessConfig,
    *,
    resolve_fn: ResolveFn | None = None,
    judge: SampleJudge | None = None,
    synthesiser_factory: Callable[[], CrossModelSynthesiser] | None = None,
    notifier: DesktopNotifier | None = None,
    tracker: ProgressTracker | None = None,
    stream: TextIO | None = None,
    now: datetime | None = None,
) -> RunReport:
    """
    Execute one best-of-N run

    Per-model failures and synthesis failures are recorded in the report
    rather than raised; the artifact tree is always written.

    Args:
        config: Resolved run configuration
        catalog: Model catalog (display names, per-model overrides)
        settings: Harness settings (judge, synthesis, sampling, output)
        resolve_fn: Model id -> client (default: catalog resolution)
        judge: Per-model judge (default: built from settings)
        synthesiser_factory: Builds the synthesiser when synthesis runs
        notifier: Desktop notifier (default: enabled per settings)
        tracker: Progress tracker (default: renders to `stream`)
        stream: Progress output (default: stdout)
        now: Run timestamp (live document header, output dir name)

    Returns:
        RunReport
    """
    now = now or datetime.now()
    if resolve_fn is None:
        resolve_fn = partial(resolve, catalog=catalog, config=settings)
    if judge is None:
        judge = create_judge(settings)
    if synthesiser_factory is None:
        synthesiser_factory = partial(create_synthesiser, settings.synthesis)
    if notifier is None:
        notifier = DesktopNotifier(enabled=settings.output.notify)

    display_names = {m: catalog.display_name(m) for m in config.models}
    if tracker is None:
        tracker = ProgressTracker(display_names, config.num_samples, stream=stream)

    live_document = None
    if config.live_file is not None:
        live_document = LiveDocument.create(config.live_file, config, display_names, now=now)

    tracker.start()
    try:
        outcomes = await asyncio.gather(*(
            process_model(
                model_id,
                config,
                catalog,
                resolve_fn=resolve_fn,
                judge=judge,
                stagger_seconds=settings.sampling.stagger_seconds,
                tracker=tracker,
                live_document=live_document,
            )
            for model_id in config.models
        ))
    finally:
        await tracker.stop()

    # gather keeps selection order regardless of completion order
    model_results = [r for r in outcomes if r is not None]
    failed_models = [m for m, r in zip(config.models, outcomes) if r is None]

    synthesis = None
    synthesis_error = None
    if config.synthesise and model_results:
        try:
            synthesiser = synthesiser_factory()
            synthesis = await synthesiser.synthesise(
                config.prompt,
                representative_outputs(model_results),
                brainstorm=config.brainstorm,
            )
        except Exception as e:
            synthesis_error = str(e) or type(e).__name__
            logger.warning("Cross-model synthesis failed: %s", synthesis_error)
            notifier.error("Cross-model synthesis failed")
        else:
            if live_document is not None:
                await live_document.set_synthesis(synthesis)

    output_dir = config.output_dir or default_output_dir(
        settings.output.output_root, config.prompt, now
    )
    save_results(output_dir, config, model_results, failed_models, synthesis, now=now)
    logger.info("Results saved to %s", output_dir)

    if live_document is not None:
        notifier.complete(len(model_results), config.num_samples, str(live_document.path))

    return RunReport(
        config=config,
        model_results=model_results,
        failed_models=failed_models,
        synthesis=synthesis,
        synthesis_error=synthesis_error,
        output_dir=output_dir,
    )


def format_summary(report: RunReport) -> str:
    """Per-model result lines plus the failed models"""
    lines = ["Results Summary", ""]
    for mr in report.model_results:
        if mr.is_brainstorm:
            lines.append(f"  ✓ {mr.display_name}: merged {len(mr.samples)} samples")
        else:
            best = mr.best_sample
            lines.append(
                f"  ✓ {mr.display_name}: best = sample {best.index + 1} of {len(mr.samples)} "
                f"({best.latency_ms / 1000:.1f}s)"
            )
    if report.failed_models:
        lines.append(f"  ✗ Failed: {', '.join(report.failed_models)}")
    if report.synthesis_error:
        lines.append(f"  ! Synthesis failed: {report.synthesis_error}")
    return "\n".join(lines)
