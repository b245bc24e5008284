"""
hn_feed

Bindings for the Hacker News top-stories feed. A background thread refreshes
the top stories on a fixed interval; a FeedView hands them out in ranked order
as plain records and lets the application hide stories it is done with.

Example
-------
from hn_feed import FeedConfig, FeedView

with FeedView(FeedConfig(poll_interval=60, item_count=30)) as hn:
    hn.wait_for_refresh(timeout=10)
    for item in hn.items():
        print(item.id, item.title, item.link)
    first = next(iter(hn), None)
    if first is not None:
        hn.hide(first)
"""
from .config import FeedConfig
from .datamodels import ItemRecord
from .exceptions import FetchCancelled, FetchError, NetworkError, ParseError, PartialFailure
from .feed import FeedView
from .fetcher import RemoteFetcher
from .scheduler import RefreshScheduler, SchedulerState
from .state import FeedSnapshot, SharedFeedState

__all__ = [
    "FeedConfig",
    "FeedView",
    "FeedSnapshot",
    "FetchCancelled",
    "FetchError",
    "ItemRecord",
    "NetworkError",
    "ParseError",
    "PartialFailure",
    "RefreshScheduler",
    "RemoteFetcher",
    "SchedulerState",
    "SharedFeedState",
]
