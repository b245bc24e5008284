from __future__ import annotations

from typing import List

import pytest

from hn_feed.datamodels import ItemRecord


def make_items(*pairs) -> List[ItemRecord]:
    return [ItemRecord(id=item_id, title=title, url=f"https://example.com/{item_id}") for item_id, title in pairs]


class FakeFetcher:
    """Stands in for RemoteFetcher; returns (or raises) queued results in order.

    The most recent result repeats once the queue is empty.
    """

    def __init__(self, *results):
        self.results = list(results)
        self.last = None
        self.calls = []
        self.closed = False

    def queue(self, result) -> None:
        self.results.append(result)

    def fetch_top(self, n, known=None, cancel=None):
        self.calls.append((n, known))
        if self.results:
            self.last = self.results.pop(0)
        result = self.last
        if isinstance(result, BaseException):
            raise result
        return [record.copy() for record in result][:n]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def items():
    return make_items


@pytest.fixture
def fake_fetcher():
    return FakeFetcher
