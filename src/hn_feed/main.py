#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .app import FeedApp
from .config import CONFIG_PATH, FeedConfig, load_config, setup_logging
from .feed import FeedView

logger = logging.getLogger("hn_feed")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Hacker News top stories")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config", default=CONFIG_PATH, help=f"Config file (default: {CONFIG_PATH})"
    )
    parser.add_argument("--interval", type=float, help="Seconds between refreshes")
    parser.add_argument("--count", type=int, help="Number of top stories to track")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Print the current top stories after the first refresh and exit",
    )
    return parser


def print_once(feed: FeedView, timeout: float) -> int:
    if not feed.wait_for_refresh(timeout):
        print("Timed out waiting for Hacker News.", file=sys.stderr)
        return 1
    for rank, item in enumerate(feed.items(), start=1):
        print(f"{rank:>3}. {item.title}\n     {item.link}")
    return 0


# --- Entrypoint ---
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    debug_path = setup_logging(args.debug)
    if debug_path:
        print(f"Debug logging enabled: {debug_path}", file=sys.stderr)

    settings = load_config(args.config)
    if args.interval is not None:
        settings["poll_interval"] = args.interval
    if args.count is not None:
        settings["item_count"] = args.count
    try:
        config = FeedConfig.from_dict(settings)
    except (TypeError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    with FeedView(config) as feed:
        if args.once:
            return print_once(feed, timeout=config.fetch_timeout * 3)

        try:
            FeedApp(feed).run()
        except Exception as e:
            logger.exception("Application crashed: %s", e)
            print(f"Application crashed: {e}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
