#!/usr/bin/env python3
"""TrendGenius: Autonomous trend-to-article pipeline powered by PydanticAI agents.

This CLI tool discovers trending topics for a category, researches SEO/AEO
keywords, drafts grounded articles and scores them. It drives the same
orchestrator a dashboard would, printing session state as JSON.

Commands:
    discover    Scan for trends in a category
    generate    Discover, then turn one trend into an article
    autopilot   Discover on a fixed interval until interrupted
    status      Show effective configuration

Examples:
    python main.py discover --category ai
    python main.py generate --pick 2          # Full pipeline on the 2nd trend
    python main.py generate --simple          # Single-stage draft
    python main.py generate --publish
    python main.py autopilot --interval 120

Environment:
    GEMINI_API_KEY: Required for Gemini models
    See config.py for all configuration options
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from config import Config
from models.category import ALL_CATEGORIES
from observability.logging import setup_logging

logger = logging.getLogger(__name__)


def _dump(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def cmd_discover(args: argparse.Namespace, config: Config) -> int:
    """Run one discovery and print the trends and sources.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    from pipeline import Pipeline

    async def discover() -> int:
        async with Pipeline(config) as pipeline:
            trends = await pipeline.start_discovery(args.category)
            if trends is None:
                print(f"Discovery failed: {pipeline.store.last_error}", file=sys.stderr)
                return 1
            snapshot = pipeline.store.snapshot()
            _dump({
                "category": snapshot.category.value,
                "message": snapshot.message,
                "trends": [t.model_dump(mode="json") for t in snapshot.trends],
                "sources": [s.model_dump(mode="json") for s in snapshot.sources],
            })
            return 0

    return asyncio.run(discover())


def cmd_generate(args: argparse.Namespace, config: Config) -> int:
    """Discover trends, then generate an article from the selected one.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    from pipeline import Pipeline

    async def generate() -> int:
        async with Pipeline(config) as pipeline:
            trends = await pipeline.start_discovery(args.category)
            if not trends:
                reason = pipeline.store.last_error or "no trends found"
                print(f"Nothing to generate: {reason}", file=sys.stderr)
                return 1

            if not 1 <= args.pick <= len(trends):
                print(f"Error: --pick must be between 1 and {len(trends)}", file=sys.stderr)
                return 1
            trend = trends[args.pick - 1]
            logger.info("Trend selected | topic=%s relevance=%d", trend.topic, trend.relevance)

            if args.simple:
                content = await pipeline.generate_draft(trend)
            else:
                content = await pipeline.run_full_pipeline(trend)
            if content is None:
                print(f"Generation failed: {pipeline.store.last_error}", file=sys.stderr)
                return 1

            if args.publish:
                content = pipeline.publish(content.id)

            _dump({
                "content": content.model_dump(mode="json"),
                "stats": pipeline.store.stats().to_dict(),
            })
            return 0

    return asyncio.run(generate())


def cmd_autopilot(args: argparse.Namespace, config: Config) -> int:
    """Run autopilot discoveries until interrupted.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success, 130 on Ctrl+C)
    """
    from pipeline import Pipeline
    from models.status import PipelineStatus

    if args.interval:
        config.autopilot_interval_seconds = args.interval

    def on_status(status: PipelineStatus, message: str) -> None:
        print(f"[{status.value}] {message}", flush=True)

    async def autopilot() -> None:
        async with Pipeline(config) as pipeline:
            if args.category:
                pipeline.set_category(args.category)
            pipeline.store.subscribe(on_status)
            pipeline.set_autopilot(True)
            # Runs until cancelled by Ctrl+C
            await asyncio.Event().wait()

    logger.info(
        "Starting autopilot | category=%s interval=%ss",
        args.category or config.default_category, config.autopilot_interval_seconds,
    )
    try:
        asyncio.run(autopilot())
    except KeyboardInterrupt:
        logger.info("Stopped by user (Ctrl+C)")
        return 130  # Standard exit code for SIGINT
    return 0


def cmd_status(args: argparse.Namespace, config: Config) -> int:
    """Display effective configuration.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    status = {
        "config": {
            "default_category": config.default_category.value,
            "discovery_model": config.discovery_model,
            "seo_model": config.seo_model,
            "writer_model": config.writer_model,
            "generator_model": config.generator_model,
            "search_grounding": config.search_grounding,
            "max_trends": config.max_trends,
            "max_article_sources": config.max_article_sources,
            "relevance_band": [config.relevance_floor, config.relevance_ceiling],
            "agent_timeout_seconds": config.agent_timeout_seconds,
            "autopilot_interval_seconds": config.autopilot_interval_seconds,
            "enable_logfire": config.enable_logfire,
            "api_key_set": bool(config.gemini_api_key),
        },
        "categories": [c.value for c in ALL_CATEGORIES],
        "validation_error": config.validate(),
    }
    _dump(status)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all commands."""
    parser = argparse.ArgumentParser(
        description="TrendGenius: Autonomous trend-to-article pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # discover command
    discover_parser = subparsers.add_parser("discover", help="Scan for trends in a category")
    discover_parser.add_argument(
        "--category",
        help="Category to scan (default: config DEFAULT_CATEGORY)",
    )

    # generate command
    generate_parser = subparsers.add_parser("generate", help="Discover and generate an article")
    generate_parser.add_argument(
        "--category",
        help="Category to scan (default: config DEFAULT_CATEGORY)",
    )
    generate_parser.add_argument(
        "--pick",
        type=int,
        default=1,
        help="1-based index of the trend to write about (default: 1)",
    )
    generate_parser.add_argument(
        "--simple",
        action="store_true",
        help="Single-stage draft instead of the full SEO/draft/fact-check pipeline",
    )
    generate_parser.add_argument(
        "--publish",
        action="store_true",
        help="Mark the generated article as published",
    )

    # autopilot command
    autopilot_parser = subparsers.add_parser("autopilot", help="Discover on an interval until interrupted")
    autopilot_parser.add_argument(
        "--category",
        help="Category to scan (default: config DEFAULT_CATEGORY)",
    )
    autopilot_parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between discoveries (default: config AUTOPILOT_INTERVAL_SECONDS)",
    )

    # status command
    subparsers.add_parser("status", help="Show configuration")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # Load configuration
    try:
        config = Config.load()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    # Setup logging
    setup_logging(config, verbose=args.verbose)

    # Validate configuration for commands that call the model
    if args.command in ("discover", "generate", "autopilot"):
        error = config.validate()
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            return 1
        # The google-gla provider reads its key from GOOGLE_API_KEY
        if config.gemini_api_key:
            os.environ.setdefault("GOOGLE_API_KEY", config.gemini_api_key)

    # Route to command handler
    commands = {
        "discover": cmd_discover,
        "generate": cmd_generate,
        "autopilot": cmd_autopilot,
        "status": cmd_status,
    }

    if args.command in commands:
        try:
            return commands[args.command](args, config)
        except ValueError as e:
            # Unknown category names and similar user input errors
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except Exception as e:
            logger.error("Command failed | cmd=%s error=%s", args.command, e, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
