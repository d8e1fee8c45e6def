"""Command-line entry point for the event-ingestion pipeline.

    stagelog-ingest run --actor <user-id> [--adapter caveat]
    stagelog-ingest preview [--adapter caveat]
    stagelog-ingest inspect [--adapter caveat] [--static]
    stagelog-ingest schedule --actor <user-id>
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from stagelog.adapters.registry import get_adapter, list_adapter_keys
from stagelog.config import settings
from stagelog.database import init_db
from stagelog.errors import RenderError
from stagelog.logging_config import configure_logging
from stagelog.services.pipeline import build_pipeline, build_renderer, run_ingestion

logger = logging.getLogger(__name__)


async def _run(args: argparse.Namespace) -> int:
    await init_db()
    result = await run_ingestion(args.actor, args.adapter)
    print(json.dumps(result.to_report(), indent=2))
    return 1 if result.errors and not result.performances_created else 0


async def _preview(args: argparse.Namespace) -> int:
    pipeline = build_pipeline(args.adapter, static=args.static)
    try:
        events = await pipeline.preview()
    except RenderError as e:
        logger.error("Preview failed: %s", e)
        return 1
    print(json.dumps([e.model_dump(mode="json") for e in events], indent=2, sort_keys=True))
    return 0


async def _inspect(args: argparse.Namespace) -> int:
    """Report how many nodes each container selector matches on the live page."""
    adapter = get_adapter(args.adapter or settings.default_adapter)
    renderer = build_renderer(adapter, static=args.static)
    try:
        snapshot = await renderer.render(
            adapter.url, wait_until_idle=adapter.WAIT_UNTIL_IDLE, timeout_ms=adapter.TIMEOUT_MS
        )
    except RenderError as e:
        logger.error("Inspect failed: %s", e)
        return 1

    extractor = adapter.build_extractor()
    counts = extractor.describe(snapshot)
    candidates = extractor.extract(snapshot)
    print(json.dumps({
        "url": snapshot.url,
        "selectors": counts,
        "candidates": len(candidates),
        "samples": [c.text[:120] for c in candidates[:10]],
    }, indent=2))
    return 0


async def _schedule(args: argparse.Namespace) -> int:
    from stagelog.services.scheduler import start_scheduler, stop_scheduler

    await init_db()
    start_scheduler(args.actor, args.adapter)
    try:
        await asyncio.Event().wait()
    finally:
        stop_scheduler()
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stagelog-ingest", description="Ingest venue listings into the performance catalog"
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    adapter_help = f"Venue adapter key (default: {settings.default_adapter}; known: {', '.join(list_adapter_keys())})"

    run = sub.add_parser("run", help="Scrape and write new performances")
    run.add_argument("--actor", default=settings.system_actor_id, help="User id recorded as the author")
    run.add_argument("--adapter", default=None, help=adapter_help)
    run.set_defaults(handler=_run)

    preview = sub.add_parser("preview", help="Print normalised events without writing")
    preview.add_argument("--adapter", default=None, help=adapter_help)
    preview.add_argument("--static", action="store_true", help="Fetch with httpx instead of a browser")
    preview.set_defaults(handler=_preview)

    inspect = sub.add_parser("inspect", help="Show container selector matches for the source page")
    inspect.add_argument("--adapter", default=None, help=adapter_help)
    inspect.add_argument("--static", action="store_true", help="Fetch with httpx instead of a browser")
    inspect.set_defaults(handler=_inspect)

    schedule = sub.add_parser("schedule", help=f"Run daily at {settings.run_schedule}")
    schedule.add_argument("--actor", default=settings.system_actor_id, help="User id recorded as the author")
    schedule.add_argument("--adapter", default=None, help=adapter_help)
    schedule.set_defaults(handler=_schedule)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return asyncio.run(args.handler(args))
    except KeyError as e:
        logger.error("%s", e.args[0] if e.args else e)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
