"""
Command-line entry point.

    shotscript run <url> [breakdown|rewrite] [--force-refresh]
    shotscript clear-cache [--url URL | --key KEY]
    shotscript ping
"""

import argparse
import asyncio
import sys
from typing import List, Optional
from loguru import logger
from pydantic import ValidationError as SettingsError

from shotscript.cache import ContentCache
from shotscript.config import ShotScriptConfig
from shotscript.diagnostics import measure_response_times
from shotscript.exceptions import ShotScriptException
from shotscript.pipeline import build_pipeline
from shotscript.providers import ProviderFactory
from shotscript.script import MarkdownWriter, ScriptComposer
from shotscript.utils.error_handler import log_exceptions
from shotscript.utils.helper import get_url_hash
from shotscript.utils.logging_config import log_manager

COMMANDS = ("breakdown", "rewrite")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shotscript",
        description="Turn a short-video URL into a shot-by-shot breakdown script.",
    )
    subparsers = parser.add_subparsers(dest="action")

    run_parser = subparsers.add_parser("run", help="Analyse a video and write its script")
    run_parser.add_argument("url", nargs="?", help="Video URL")
    run_parser.add_argument("command", nargs="?", default="breakdown", choices=COMMANDS,
                            help="breakdown (default) or rewrite")
    run_parser.add_argument("--force-refresh", action="store_true",
                            help="Ignore cached media, keyframes and analysis results")

    clear_parser = subparsers.add_parser("clear-cache", help="Delete cached artifacts")
    target = clear_parser.add_mutually_exclusive_group()
    target.add_argument("--url", help="Clear the entry for this URL")
    target.add_argument("--key", help="Clear the entry for this cache key")

    subparsers.add_parser("ping", help="Measure response times of the configured text model")
    return parser


@log_exceptions(log_level="DEBUG", custom_message="Run failed")
async def run_script(config: ShotScriptConfig, url: str, command: str, force_refresh: bool) -> str:
    pipeline = build_pipeline(config)
    llm_provider = None
    try:
        llm_provider = ProviderFactory.create_llm_provider(config.ai)
        context = await pipeline(url, force_refresh=force_refresh)
        composer = ScriptComposer(llm_provider, prompts_dir=config.pipeline.prompts_dir)
        breakdown = await composer.compose_breakdown(context)
        rewrite = None
        if command == "rewrite":
            rewrite = await composer.compose_rewrite(context, breakdown)
        return MarkdownWriter(config.cache.output_dir).write(context, breakdown, rewrite)
    finally:
        await pipeline.close()
        if llm_provider is not None:
            await llm_provider.close()


async def run_ping(config: ShotScriptConfig) -> int:
    config.validate_runtime()
    llm_provider = ProviderFactory.create_llm_provider(config.ai)
    try:
        logger.info(f"Probing {config.ai.provider} ({config.ai.text_model}) at {config.ai.base_url}")
        report = await measure_response_times(llm_provider)
    finally:
        await llm_provider.close()
    for line in report.summary_lines():
        print(line)
    return 0 if report.successes else 1


def clear_cache(config: ShotScriptConfig, url: Optional[str], key: Optional[str]) -> int:
    cache = ContentCache(config.cache.root)
    if url:
        key = get_url_hash(url)
    cache.clear(key)
    print(f"Cleared {'entry ' + key if key else 'entire cache'} at {cache.root}")
    return 0


def main(argv: Optional[List[str]] = None, config: Optional[ShotScriptConfig] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.action is None:
        parser.print_help(sys.stderr)
        return 1
    if args.action == "run" and not args.url:
        print("error: a video URL is required, e.g. shotscript run <url> [breakdown|rewrite]", file=sys.stderr)
        return 1

    try:
        config = config or ShotScriptConfig()
        log_manager.configure(config.logging)

        if args.action == "clear-cache":
            return clear_cache(config, args.url, args.key)
        if args.action == "ping":
            return asyncio.run(run_ping(config))

        path = asyncio.run(run_script(config, args.url, args.command, args.force_refresh))
        print(path)
        return 0
    except ShotScriptException as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except SettingsError as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
