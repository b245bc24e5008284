from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterator, Optional, Union

from .config import FeedConfig
from .datamodels import ItemRecord
from .fetcher import RemoteFetcher
from .scheduler import RefreshScheduler
from .state import SharedFeedState

logger = logging.getLogger("hn_feed")


class FeedView:
    """Handle on a continuously refreshed list of Hacker News top stories.

    Constructing a FeedView starts a background thread that polls the API.
    Iterate with `items()` (or the view itself) to get the current stories in
    rank order, and call `hide()` to keep a story out of later passes::

        with FeedView(FeedConfig(item_count=30)) as hn:
            hn.wait_for_refresh(timeout=10)
            for item in hn.items():
                print(item.title, item.link)
    """

    def __init__(
        self,
        config: Optional[FeedConfig] = None,
        *,
        fetcher: Optional[RemoteFetcher] = None,
        start: bool = True,
    ):
        self.config = config or FeedConfig()
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or RemoteFetcher.from_config(self.config)
        self.state = SharedFeedState(hidden_limit=self.config.hidden_limit)
        self.scheduler = RefreshScheduler(self.fetcher, self.state, self.config)
        self._closed = False
        if start:
            self.scheduler.start()

    def items(self) -> Iterator[ItemRecord]:
        """Yield visible stories from the list current at call time."""
        snapshot = self.state.snapshot()
        return (record for record in snapshot.items if not record.hidden)

    def __iter__(self) -> Iterator[ItemRecord]:
        return self.items()

    def __len__(self) -> int:
        return len(self.state)

    def hide(self, item: Union[int, ItemRecord]) -> None:
        """Keep a story out of future passes, including after refreshes."""
        item_id = item.id if isinstance(item, ItemRecord) else item
        self.state.mark_hidden(item_id)

    @property
    def last_refresh(self) -> Optional[datetime]:
        return self.state.last_refresh

    def wait_for_refresh(self, timeout: Optional[float] = None) -> bool:
        return self.scheduler.wait_for_refresh(timeout)

    def refresh(self) -> bool:
        """Fetch and publish now, on the calling thread."""
        return self.scheduler.run_once()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.scheduler.stop()
        if self._owns_fetcher and not self.scheduler.is_running:
            self.fetcher.close()

    def __enter__(self) -> "FeedView":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
