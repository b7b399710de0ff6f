"""
best-of-n CLI Runner

Query each model N times, pick the best response per model, then synthesise
across models.

Usage:
    python -m best_of_n.runner query "What causes inflation?"
    python -m best_of_n.runner "What causes inflation?" -n 3 -m gpt-5.2,claude-4.5-sonnet
    python -m best_of_n.runner query "Names for a bakery" --preset ultra-creative -l live.md
    python -m best_of_n.runner presets
    python -m best_of_n.runner models

`query` is the default subcommand.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from best_of_n import __version__
from best_of_n.domain.entities import RunConfiguration
from best_of_n.harness_config import HarnessConfig, load_config
from best_of_n.model_catalog import (
    ConfigurationError,
    ModelCatalog,
    format_models,
    format_presets,
    load_catalog,
    resolve_run_configuration,
)
from best_of_n.use_cases.orchestration import format_summary, run_query

SUBCOMMANDS = ("query", "presets", "models")

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="best-of-n",
        description="Best-of-N sampling: query each model N times, pick the best response, then synthesise",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        help="Directory containing a config.json catalog override (default: $BON_CONFIG_DIR or .)",
    )
    subparsers = parser.add_subparsers(dest="command")

    query = subparsers.add_parser("query", help="Run a best-of-N query")
    query.add_argument("prompt", help="The prompt to send to models")
    query.add_argument("-n", "--num-samples", type=int, default=None, help="Samples per model")
    query.add_argument("-T", "--temperature", type=float, default=None, help="Temperature for all runs")
    query.add_argument("-m", "--models", default=None, help="Comma-separated model IDs")
    query.add_argument("-p", "--preset", default=None, help="Preset name (see `presets`)")
    query.add_argument("-t", "--timeout", type=int, default=None, help="Timeout per call in seconds")
    query.add_argument("-l", "--live-file", default=None, help="Markdown file to update live")
    query.add_argument(
        "--no-synthesise",
        dest="synthesise",
        action="store_false",
        help="Skip cross-model synthesis",
    )
    query.add_argument(
        "-B",
        "--brainstorm",
        action="store_true",
        default=None,
        help="Brainstorm mode: merge all unique ideas instead of picking one best",
    )
    query.add_argument("-o", "--output", default=None, help="Output directory")

    subparsers.add_parser("presets", help="List available presets (eligible models only)")
    subparsers.add_parser("models", help="List models eligible for best-of-N")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments, treating a bare prompt as the `query` subcommand"""
    argv = list(sys.argv[1:] if argv is None else argv)

    # Skip top-level options; the first other token is a subcommand or the start of a query
    i = 0
    while i < len(argv):
        if argv[i] == "--config":
            i += 2
        elif argv[i].startswith("--config=") or argv[i] in ("--version", "-h", "--help"):
            i += 1
        else:
            break
    if i < len(argv) and argv[i] not in SUBCOMMANDS:
        argv.insert(i, "query")

    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.error("a prompt or a subcommand is required")
    return args


def _setup_logging() -> None:
    level_name = os.environ.get("BON_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def print_banner(config: RunConfiguration, catalog: ModelCatalog) -> None:
    mode = "Brainstorm" if config.brainstorm else "Best-of-N"
    print(
        f"\n{mode}: {len(config.models)} models × {config.num_samples} samples "
        f"= {config.total_calls} API calls"
    )
    print(f"Temperature: {config.temperature_label()} | Timeout: {config.timeout_seconds}s per call")

    slow = [m for m in config.models if catalog.get_model(m) and catalog.get_model(m).slow]
    if slow:
        print(f"Warning: slow models selected ({', '.join(slow)}); this run may take a while")
    print()


def prepare_query(args: argparse.Namespace, catalog: ModelCatalog) -> tuple[RunConfiguration, HarnessConfig]:
    """Resolve the run configuration from CLI flags, preset and environment"""
    settings = load_config()
    models = [m.strip() for m in args.models.split(",")] if args.models else None

    config = resolve_run_configuration(
        catalog,
        args.prompt,
        sampling=settings.sampling,
        models=models,
        preset=args.preset,
        num_samples=args.num_samples,
        temperature=args.temperature,
        timeout_seconds=args.timeout,
        brainstorm=args.brainstorm,
        synthesise=args.synthesise,
        live_file=args.live_file,
        output_dir=args.output,
    )
    return config, settings


def run_query_command(config: RunConfiguration, catalog: ModelCatalog, settings: HarnessConfig) -> int:
    print_banner(config, catalog)
    if config.live_file:
        print(f"Live file: {config.live_file}\n")

    report = asyncio.run(run_query(config, catalog, settings))

    print()
    if report.synthesis_error:
        print(f"Warning: cross-model synthesis failed: {report.synthesis_error}")
    print(f"Results saved to: {report.output_dir}\n")
    print(format_summary(report))
    print()
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    _setup_logging()
    args = parse_args(argv)

    try:
        catalog = load_catalog(override_dir=args.config)
        if args.command == "presets":
            print(format_presets(catalog))
            return EXIT_OK
        if args.command == "models":
            print(format_models(catalog))
            return EXIT_OK
        config, settings = prepare_query(args, catalog)
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except ValueError as e:
        # invalid BON_* environment value
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        return run_query_command(config, catalog, settings)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
