from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_WORKERS,
    HN_API_BASE,
    REQUEST_HEADERS,
    FeedConfig,
)
from .datamodels import ItemRecord
from .exceptions import FetchCancelled, FetchError, NetworkError, ParseError, PartialFailure

logger = logging.getLogger("hn_feed")


class RemoteFetcher:
    """One round-trip to the HN API: the ranked id list, then each item's details."""

    def __init__(
        self,
        base_url: str = HN_API_BASE,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        max_workers: int = DEFAULT_MAX_WORKERS,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_workers = max_workers
        self.session = session or self._create_session()

    @classmethod
    def from_config(cls, config: FeedConfig) -> "RemoteFetcher":
        return cls(
            base_url=config.base_url,
            timeout=config.fetch_timeout,
            max_workers=config.max_workers,
        )

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        # Failed requests wait for the next scheduler tick.
        retries = Retry(total=0, raise_on_status=False)
        adapter = HTTPAdapter(
            pool_connections=1, pool_maxsize=self.max_workers, max_retries=retries
        )
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        return s

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "RemoteFetcher":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _get_json(self, url: str) -> Any:
        try:
            logger.debug("Fetching %s", url)
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise ParseError(f"Malformed JSON from {url}: {e}") from e

    def fetch_top_ids(self, n: int) -> List[int]:
        payload = self._get_json(f"{self.base_url}/topstories.json")
        if not isinstance(payload, list):
            raise ParseError(f"Expected a list of ids, got {type(payload).__name__}")
        ids = payload[:n]
        for item_id in ids:
            if not isinstance(item_id, int) or isinstance(item_id, bool):
                raise ParseError(f"Non-integer item id in top list: {item_id!r}")
        return ids

    def fetch_item(self, item_id: int) -> ItemRecord:
        payload = self._get_json(f"{self.base_url}/item/{item_id}.json")
        if payload is None:
            raise ParseError(f"Item {item_id} does not exist")
        record = ItemRecord.from_json(payload)
        if record.id != item_id:
            raise ParseError(f"Requested item {item_id}, got {record.id}")
        return record

    def _fetch_item_unless_cancelled(
        self, item_id: int, cancel: Optional[threading.Event]
    ) -> ItemRecord:
        if cancel is not None and cancel.is_set():
            raise FetchCancelled(f"Fetch of item {item_id} cancelled")
        return self.fetch_item(item_id)

    def fetch_top(
        self,
        n: int,
        known: Optional[Mapping[int, ItemRecord]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> List[ItemRecord]:
        """Return up to `n` top stories in upstream rank order.

        Ids present in `known` reuse that record instead of being re-fetched.
        Raises PartialFailure with the successful subset when some item fetches
        fail, or the highest-ranked item's error when all of them fail.
        Once `cancel` is set, item requests not yet started are skipped and
        FetchCancelled is raised.
        """
        ids = self.fetch_top_ids(n)
        if cancel is not None and cancel.is_set():
            raise FetchCancelled("Refresh cancelled after fetching top ids")
        known = known or {}
        slots: List[Optional[ItemRecord]] = [None] * len(ids)
        pending = []
        for idx, item_id in enumerate(ids):
            if item_id in known:
                slots[idx] = known[item_id].copy()
            else:
                pending.append((idx, item_id))

        failures: Dict[int, FetchError] = {}
        if pending:
            workers = min(self.max_workers, len(pending))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hn-item") as executor:
                future_to_slot = {
                    executor.submit(self._fetch_item_unless_cancelled, item_id, cancel): (idx, item_id)
                    for idx, item_id in pending
                }
                for future in as_completed(future_to_slot):
                    if cancel is not None and cancel.is_set():
                        executor.shutdown(wait=True, cancel_futures=True)
                        break
                    idx, item_id = future_to_slot[future]
                    try:
                        slots[idx] = future.result()
                    except FetchError as e:
                        logger.debug("Failed to fetch item %d: %s", item_id, e)
                        failures[item_id] = e

        if cancel is not None and cancel.is_set():
            raise FetchCancelled("Refresh cancelled while fetching items")

        items = [record for record in slots if record is not None]
        if failures:
            if not items:
                first_failed = next(item_id for item_id in ids if item_id in failures)
                raise failures[first_failed]
            raise PartialFailure(items, failures)
        logger.debug("Fetched %d top items (%d reused)", len(items), len(ids) - len(pending))
        return items
