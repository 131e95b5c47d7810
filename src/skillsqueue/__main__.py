"""Command line entry point.

``skillsqueue serve`` runs the HTTP/WebSocket server with the auto-dequeue
engine; ``skillsqueue scrape`` fetches the skills table once and prints it.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys

from aiohttp import web

from skillsqueue.config import AppConfig
from skillsqueue.exceptions import ScrapeError
from skillsqueue.scraper import SkillsScraper
from skillsqueue.web import build_app


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="skillsqueue", description="Robotics skills queue kiosk server")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the queue server and auto-dequeue engine")
    serve.add_argument("--host", help="Bind address (env HOST)")
    serve.add_argument("--port", type=int, help="HTTP port (env PORT, default 3000)")
    serve.add_argument("--data-dir", help="Directory for queue/settings JSON (env SKILLSQUEUE_DATA_DIR)")
    serve.add_argument("--base-url", help="Tournament manager base URL (env VEX_TM_BASE_URL)")
    serve.add_argument("--offline", action="store_true", help="Disable auto-dequeue (env OFFLINE_MODE)")

    scrape = sub.add_parser("scrape", help="Fetch the skills table once and print it")
    scrape.add_argument("--base-url", help="Tournament manager base URL (env VEX_TM_BASE_URL)")
    scrape.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")

    return parser.parse_args(argv)


def _config_from_args(args: argparse.Namespace) -> AppConfig:
    overrides: dict[str, object] = {}
    if getattr(args, "host", None):
        overrides["host"] = args.host
    if getattr(args, "port", None):
        overrides["port"] = args.port
    if getattr(args, "data_dir", None):
        overrides["data_dir"] = args.data_dir
    config = AppConfig.from_env(**overrides)

    engine_overrides: dict[str, object] = {}
    if getattr(args, "base_url", None):
        engine_overrides["base_url"] = args.base_url
    if getattr(args, "offline", False):
        engine_overrides["offline_mode"] = True
    if engine_overrides:
        config = dataclasses.replace(
            config,
            auto_dequeue=dataclasses.replace(config.auto_dequeue, **engine_overrides),
        )
    return config


async def _scrape(config: AppConfig, json_mode: bool) -> int:
    base_url = config.auto_dequeue.base_url
    if not base_url:
        print("No base URL configured", file=sys.stderr)
        return 2

    async with SkillsScraper(timeout=config.auto_dequeue.request_timeout) as scraper:
        try:
            rows = await scraper.fetch_skills_table(base_url)
        except ScrapeError as exc:
            print(f"Scrape failed: {exc}", file=sys.stderr)
            return 1

    if json_mode:
        print(json.dumps([dataclasses.asdict(row) for row in rows], indent=2))
    else:
        print(f"{'TEAM':<10} {'AUTO':>5} {'DRIVE':>5}")
        for row in rows:
            print(f"{row.team_id:<10} {row.autonomous:>5} {row.driving:>5}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = _config_from_args(args)

    if args.command == "scrape":
        return asyncio.run(_scrape(config, args.json_mode))

    web.run_app(build_app(config), host=config.host, port=config.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
