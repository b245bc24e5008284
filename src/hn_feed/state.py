from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from .config import DEFAULT_HIDDEN_LIMIT
from .datamodels import ItemRecord

logger = logging.getLogger("hn_feed")


@dataclass(frozen=True)
class FeedSnapshot:
    """The ranked list as it was at one point in time."""

    items: Tuple[ItemRecord, ...]
    generation: int
    refreshed_at: Optional[datetime]

    def __len__(self) -> int:
        return len(self.items)

    def visible(self) -> List[ItemRecord]:
        return [record for record in self.items if not record.hidden]


class SharedFeedState:
    """Latest ranked list plus the hidden ids, shared by the scheduler and readers.

    The ranked list is an immutable tuple swapped under the lock, so a reader
    sees either the old list or the new one. Hiding an item replaces the tuple
    as well rather than editing records in place.
    """

    def __init__(self, hidden_limit: int = DEFAULT_HIDDEN_LIMIT):
        self.hidden_limit = hidden_limit
        self._lock = threading.Lock()
        self._ranked: Tuple[ItemRecord, ...] = ()
        # id -> None, oldest first
        self._hidden: "OrderedDict[int, None]" = OrderedDict()
        self._generation = 0
        self._refreshed_at: Optional[datetime] = None

    def publish(self, new_list: Iterable[ItemRecord]) -> None:
        with self._lock:
            ranked = []
            for record in new_list:
                copy = record.copy()
                copy.hidden = copy.id in self._hidden
                ranked.append(copy)
            self._ranked = tuple(ranked)
            self._generation += 1
            self._refreshed_at = datetime.now(timezone.utc)
            generation = self._generation
        logger.info("Published %d items (generation %d)", len(ranked), generation)

    def mark_hidden(self, item_id: int) -> None:
        with self._lock:
            if item_id in self._hidden:
                return
            self._hidden[item_id] = None
            self._prune_hidden(keep=item_id)
            if any(record.id == item_id for record in self._ranked):
                self._ranked = tuple(
                    ItemRecord(record.id, record.title, record.url, True)
                    if record.id == item_id
                    else record
                    for record in self._ranked
                )
                self._generation += 1
        logger.debug("Hid item %d", item_id)

    def _prune_hidden(self, keep: int) -> None:
        # Caller holds the lock. `keep` is the id just hidden and is never evicted.
        excess = len(self._hidden) - self.hidden_limit
        if excess <= 0:
            return
        ranked_ids = {record.id for record in self._ranked}
        candidates = [item_id for item_id in self._hidden if item_id != keep]
        evict = [item_id for item_id in candidates if item_id not in ranked_ids][:excess]
        if len(evict) < excess:
            remaining = [item_id for item_id in candidates if item_id not in evict]
            evict.extend(remaining[: excess - len(evict)])
        for item_id in evict:
            del self._hidden[item_id]
        logger.debug("Evicted %d ids from the hidden set", len(evict))

    def snapshot(self) -> FeedSnapshot:
        with self._lock:
            ranked = self._ranked
            generation = self._generation
            refreshed_at = self._refreshed_at
        return FeedSnapshot(
            items=tuple(record.copy() for record in ranked),
            generation=generation,
            refreshed_at=refreshed_at,
        )

    def is_hidden(self, item_id: int) -> bool:
        with self._lock:
            return item_id in self._hidden

    def hidden_ids(self) -> List[int]:
        with self._lock:
            return list(self._hidden)

    @property
    def last_refresh(self) -> Optional[datetime]:
        with self._lock:
            return self._refreshed_at

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def __len__(self) -> int:
        with self._lock:
            return len(self._ranked)
