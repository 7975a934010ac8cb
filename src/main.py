# src/main.py — v3
"""CLI entry point: inspect and clear persisted section envelopes.

Usage:
    sectioncache inspect [--backend json] [--root DIR] [--key KEY]
    sectioncache clear [--backend json] [--root DIR] [--key KEY]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone

from sectioncache.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="sectioncache",
        description=f"sectioncache v{__version__} - sectioned TTL cache tools",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    p_inspect = subparsers.add_parser(
        "inspect", help="Show cached sections, their age and staleness",
    )
    _add_store_arguments(p_inspect)
    p_inspect.add_argument(
        "--ttl", type=float, default=None,
        help="TTL in seconds (default: CACHE_TTL_SECONDS)",
    )
    p_inspect.add_argument(
        "--json", dest="as_json", action="store_true",
        help="Print the raw envelope as JSON",
    )
    p_inspect.set_defaults(func=_cmd_inspect)

    p_clear = subparsers.add_parser(
        "clear", help="Delete the persisted envelope",
    )
    _add_store_arguments(p_clear)
    p_clear.set_defaults(func=_cmd_clear)

    return parser


def _add_store_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--backend", choices=["json", "sqlite", "redis"], default=None,
        help="Store backend (default: CACHE_BACKEND)",
    )
    parser.add_argument("--root", default=None, help="Cache root directory")
    parser.add_argument("--key", default=None, help="Envelope storage key")
    parser.add_argument("--redis-url", default=None, help="Redis URL")


def _settings_from_args(args: argparse.Namespace):
    """Load settings with CLI overrides and apply its LOG_* fields."""
    from sectioncache.config.settings import load_settings
    from sectioncache.logging.logger import setup_logging_from_settings

    overrides: dict[str, object] = {}
    if args.backend:
        overrides["cache_backend"] = args.backend
    if args.root:
        overrides["cache_root"] = args.root
    if args.key:
        overrides["cache_key"] = args.key
    if args.redis_url:
        overrides["cache_redis_url"] = args.redis_url
    if getattr(args, "ttl", None) is not None:
        overrides["cache_ttl_seconds"] = args.ttl
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    settings = load_settings(**overrides)
    setup_logging_from_settings(settings)
    return settings


async def _cmd_inspect(args: argparse.Namespace) -> int:
    """Print every cached section with its age and staleness."""
    from sectioncache.cache.cache_factory import create_section_store
    from sectioncache.cache.errors import StorageError
    from sectioncache.cache.staleness import TtlPolicy

    settings = _settings_from_args(args)
    store = create_section_store(settings)
    try:
        envelope = await store.load()
    except StorageError as exc:
        logger.error("Cannot read envelope '%s': %s", store.key, exc)
        return 1
    finally:
        _close_store(store)

    if envelope is None or envelope.is_empty():
        print(f"No cached envelope under '{store.key}'")
        return 1

    if args.as_json:
        print(envelope.model_dump_json(indent=2))
        return 0

    policy = TtlPolicy(default=settings.ttl, overrides=settings.ttl_overrides_map)
    now = datetime.now(timezone.utc)
    print(f"\nEnvelope '{store.key}' ({settings.cache_backend}):")
    for section in sorted(envelope.data):
        fetched_at = envelope.timestamps.get(section)
        if fetched_at is None:
            age = "never"
        else:
            age = f"{(now - fetched_at).total_seconds():.0f}s ago"
        state = "stale" if policy.is_expired(section, fetched_at, now) else "fresh"
        payload = json.dumps(envelope.data[section], default=str)
        print(f"  {section:14s} {state:6s} {age:>12s}  {payload}")
    return 0


async def _cmd_clear(args: argparse.Namespace) -> int:
    """Delete the persisted envelope."""
    from sectioncache.cache.cache_factory import create_section_store

    store = create_section_store(_settings_from_args(args))
    try:
        await store.clear()
    finally:
        _close_store(store)
    print(f"Cleared envelope '{store.key}'")
    return 0


def _close_store(store) -> None:
    close = getattr(store, "close", None)
    if close is not None:
        close()


if __name__ == "__main__":
    sys.exit(main())
