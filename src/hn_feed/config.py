from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Dict, Optional

# --- Configuration ---
HN_API_BASE = "https://hacker-news.firebaseio.com/v0"
HN_DISCUSSION_URL = "https://news.ycombinator.com/item?id="
UPSTREAM_MAX_ITEMS = 500

DEFAULT_POLL_INTERVAL = 30.0
DEFAULT_ITEM_COUNT = 60
DEFAULT_FETCH_TIMEOUT = 5.0
DEFAULT_MAX_WORKERS = 8
DEFAULT_HIDDEN_LIMIT = 1000

CONFIG_PATH = os.path.expanduser("~/.config/hn_feed/config.json")

REQUEST_HEADERS = {
    "User-Agent": "hn-feed/0.1 (+https://github.com/HackerNews/API)",
    "Accept": "application/json",
}

# --- Logging ---
logger = logging.getLogger("hn_feed")


def setup_logging(debug: bool = False) -> Optional[str]:
    """Configure logging."""
    if not debug:
        logging.basicConfig(level=logging.CRITICAL, handlers=[logging.NullHandler()])
        return None

    ts = datetime.now().strftime("%Y%m%dT%H%M%S")
    pid = os.getpid()
    debug_path = f"/tmp/hn_feed_debug_{ts}_{pid}.log"

    logging.basicConfig(
        level=logging.DEBUG,
        filename=debug_path,
        filemode="a",
        format="%(asctime)s - %(levelname)s - %(name)s - %(threadName)s - %(message)s",
    )

    logger.debug("Debug logging enabled to %s", debug_path)
    return debug_path


@dataclass
class FeedConfig:
    poll_interval: float = DEFAULT_POLL_INTERVAL
    item_count: int = DEFAULT_ITEM_COUNT
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS
    hidden_limit: int = DEFAULT_HIDDEN_LIMIT
    publish_partial: bool = False
    reuse_details: bool = False
    base_url: str = HN_API_BASE

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")
        if not 1 <= self.item_count <= UPSTREAM_MAX_ITEMS:
            raise ValueError(
                f"item_count must be between 1 and {UPSTREAM_MAX_ITEMS}, got {self.item_count}"
            )
        if self.fetch_timeout <= 0:
            raise ValueError(f"fetch_timeout must be positive, got {self.fetch_timeout}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.hidden_limit < self.item_count:
            raise ValueError("hidden_limit must not be smaller than item_count")
        self.base_url = self.base_url.rstrip("/")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeedConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})


def load_config(path: str = CONFIG_PATH) -> Dict[str, Any]:
    """Load the configuration file, or an empty dict if it is missing or unreadable."""
    if not os.path.exists(path):
        logger.debug("No config file at %s, using defaults", path)
        return {}
    try:
        with open(path, "r") as f:
            config = json.load(f)
    except (IOError, json.JSONDecodeError) as e:
        logger.error("Failed to load config from %s: %s", path, e)
        return {}
    if not isinstance(config, dict):
        logger.error("Config file %s does not contain an object", path)
        return {}
    logger.info("Loaded config from %s", path)
    return config
