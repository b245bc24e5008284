from __future__ import annotations

import enum
import logging
import threading
from typing import Dict, Optional

from .config import FeedConfig
from .datamodels import ItemRecord
from .exceptions import FetchCancelled, FetchError, PartialFailure
from .fetcher import RemoteFetcher
from .state import SharedFeedState

logger = logging.getLogger("hn_feed")


class SchedulerState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PUBLISHING = "publishing"
    BACKOFF = "backoff"
    STOPPED = "stopped"


class RefreshScheduler:
    """Background loop that fetches the top stories every `poll_interval` seconds.

    Every fetch error is logged and otherwise ignored: the previously published
    list stays current and the next tick tries again.
    """

    def __init__(self, fetcher: RemoteFetcher, state: SharedFeedState, config: FeedConfig):
        self.fetcher = fetcher
        self.shared = state
        self.config = config
        self.state = SchedulerState.IDLE
        self.last_error: Optional[BaseException] = None
        self.consecutive_failures = 0
        self._stop = threading.Event()
        self._published = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._start_lock = threading.Lock()
        self._tick_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._start_lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(
                target=self._run, name="hn-feed-refresh", daemon=True
            )
            self._thread.start()
        logger.info("Refresh scheduler started (every %.1fs)", self.config.poll_interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the loop to exit and wait for its thread.

        A tick in flight stops issuing item requests once signalled, so the
        wait is bounded by the requests already running.
        """
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Refresh thread still busy after %.1fs", timeout or 0)
                return
        self.state = SchedulerState.STOPPED
        logger.info("Refresh scheduler stopped")

    def wait_for_refresh(self, timeout: Optional[float] = None) -> bool:
        """Block until something has been published; False on timeout."""
        return self._published.wait(timeout)

    def _run(self) -> None:
        while not self._stop.is_set():
            self.run_once()
            if self._stop.wait(self.config.poll_interval):
                break
        self.state = SchedulerState.STOPPED

    def _known_records(self) -> Dict[int, ItemRecord]:
        if not self.config.reuse_details:
            return {}
        return {record.id: record for record in self.shared.snapshot().items}

    def run_once(self) -> bool:
        """Run a single tick. Returns True if a new list was published."""
        with self._tick_lock:
            return self._tick()

    def _tick(self) -> bool:
        self.state = SchedulerState.FETCHING
        try:
            items = self.fetcher.fetch_top(
                self.config.item_count, known=self._known_records(), cancel=self._stop
            )
        except FetchCancelled:
            logger.debug("Refresh abandoned for shutdown")
            self.state = SchedulerState.IDLE
            return False
        except PartialFailure as e:
            if not self.config.publish_partial:
                return self._backoff(e)
            logger.warning("Publishing partial result: %s", e)
            items = e.items
        except FetchError as e:
            return self._backoff(e)
        except Exception as e:
            logger.exception("Unexpected error during refresh")
            return self._backoff(e)

        self.state = SchedulerState.PUBLISHING
        self.shared.publish(items)
        self.last_error = None
        self.consecutive_failures = 0
        self._published.set()
        self.state = SchedulerState.IDLE
        return True

    def _backoff(self, error: BaseException) -> bool:
        self.state = SchedulerState.BACKOFF
        self.last_error = error
        self.consecutive_failures += 1
        logger.warning(
            "Refresh failed (%d in a row), keeping previous list: %s",
            self.consecutive_failures,
            error,
        )
        self.state = SchedulerState.IDLE
        return False
