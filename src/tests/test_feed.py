from __future__ import annotations

import threading
import time
import types
from unittest.mock import MagicMock, patch

import pytest
import requests

from hn_feed.config import FeedConfig
from hn_feed.datamodels import ItemRecord
from hn_feed.exceptions import NetworkError
from hn_feed.feed import FeedView
from hn_feed.fetcher import RemoteFetcher


@pytest.fixture
def make_feed(fake_fetcher):
    feeds = []

    def _make(*results, **config):
        config.setdefault("item_count", 3)
        feed = FeedView(FeedConfig(**config), fetcher=fake_fetcher(*results), start=False)
        feeds.append(feed)
        return feed

    yield _make
    for feed in feeds:
        feed.close()


def _titles(records):
    return [r.title for r in records]


def test_hide_survives_reranking(make_feed, items):
    feed = make_feed(
        items((101, "A"), (102, "B"), (103, "C")),
        items((102, "B"), (104, "D"), (105, "E")),
    )
    feed.refresh()
    assert _titles(feed.items()) == ["A", "B", "C"]

    feed.hide(102)
    assert _titles(feed.items()) == ["A", "C"]

    feed.refresh()
    assert _titles(feed.items()) == ["D", "E"]
    assert len(feed) == 3


def test_items_before_first_refresh_is_empty(make_feed, items):
    feed = make_feed(items((1, "A")))
    assert list(feed.items()) == []
    assert feed.last_refresh is None
    assert len(feed) == 0


def test_items_never_yields_hidden_records(make_feed, items):
    feed = make_feed(items((1, "A"), (2, "B"), (3, "C")))
    feed.refresh()
    feed.hide(1)
    feed.hide(3)
    assert [r.id for r in feed.items()] == [2]
    assert all(not r.hidden for r in feed.items())


def test_items_length_bounded_by_item_count(make_feed, items):
    feed = make_feed(items(*((i, f"T{i}") for i in range(10))), item_count=5)
    feed.refresh()
    assert len(list(feed.items())) == 5

    feed.hide(0)
    feed.hide(42)
    assert len(list(feed.items())) == 4


def test_items_is_lazy_and_bound_to_call_time_snapshot(make_feed, items):
    feed = make_feed(items((1, "A"), (2, "B")), items((3, "C")))
    feed.refresh()

    sequence = feed.items()
    assert isinstance(sequence, types.GeneratorType)
    first = next(sequence)
    feed.hide(2)
    feed.refresh()

    assert first.title == "A"
    assert _titles(sequence) == ["B"]
    assert _titles(feed.items()) == ["C"]


def test_returned_records_are_copies(make_feed, items):
    feed = make_feed(items((1, "A"), (2, "B")))
    feed.refresh()

    record = next(feed.items())
    record.hidden = True
    record.title = "changed"

    assert _titles(feed.items()) == ["A", "B"]


def test_iterating_the_view(make_feed, items):
    feed = make_feed(items((1, "A"), (2, "B")))
    feed.refresh()
    assert _titles(feed) == ["A", "B"]


def test_hide_accepts_record(make_feed, items):
    feed = make_feed(items((1, "A"), (2, "B")))
    feed.refresh()
    feed.hide(next(iter(feed)))
    assert _titles(feed) == ["B"]


def test_hide_unknown_id_applies_on_later_refresh(make_feed, items):
    feed = make_feed(items((1, "A")), items((1, "A"), (9, "Z")))
    feed.refresh()
    feed.hide(9)
    assert _titles(feed) == ["A"]
    feed.refresh()
    assert _titles(feed) == ["A"]


def test_failed_refresh_leaves_items_untouched(make_feed, items):
    feed = make_feed(items((1, "A")), NetworkError("down"))
    feed.refresh()
    refreshed_at = feed.last_refresh

    assert feed.refresh() is False
    assert _titles(feed) == ["A"]
    assert feed.last_refresh == refreshed_at


def test_background_refresh(fake_fetcher, items):
    config = FeedConfig(item_count=2, poll_interval=3600)
    with FeedView(config, fetcher=fake_fetcher(items((1, "A"), (2, "B")))) as feed:
        assert feed.wait_for_refresh(timeout=2.0)
        assert _titles(feed) == ["A", "B"]
    assert not feed.scheduler.is_running


def test_close_only_closes_owned_fetcher(fake_fetcher, items):
    fetcher = fake_fetcher(items((1, "A")))
    feed = FeedView(FeedConfig(), fetcher=fetcher, start=False)
    feed.close()
    assert fetcher.closed is False


def test_default_fetcher_built_from_config():
    config = FeedConfig(base_url="http://mirror.test/v0", fetch_timeout=1.5, max_workers=2)
    with patch("hn_feed.feed.RemoteFetcher") as fetcher_cls:
        feed = FeedView(config, start=False)
        feed.close()
    fetcher_cls.from_config.assert_called_once_with(config)
    fetcher_cls.from_config.return_value.close.assert_called_once()


def test_close_is_idempotent(make_feed, items):
    feed = make_feed(items((1, "A")))
    feed.close()
    feed.close()
    assert isinstance(feed.state.snapshot().items, tuple)


def test_records_expose_links(make_feed):
    feed = make_feed([ItemRecord(id=5, title="Ask HN: anything?")])
    feed.refresh()
    assert next(feed.items()).link == "https://news.ycombinator.com/item?id=5"


def _slow_session(timeout, started):
    session = MagicMock()

    def get(url, timeout=None):
        if url.endswith("topstories.json"):
            resp = MagicMock()
            resp.json.return_value = list(range(1, 61))
            return resp
        started.set()
        time.sleep(1.9 * timeout)
        raise requests.Timeout("read timed out")

    session.get.side_effect = get
    return session


def test_close_waits_for_thread_during_slow_tick():
    started = threading.Event()
    config = FeedConfig(fetch_timeout=0.1, item_count=60, max_workers=8, poll_interval=3600)
    fetcher = RemoteFetcher(base_url=config.base_url, timeout=0.1, max_workers=8, session=_slow_session(0.1, started))

    with patch("hn_feed.feed.RemoteFetcher.from_config", return_value=fetcher):
        feed = FeedView(config)
    assert started.wait(2.0)

    began = time.monotonic()
    feed.close()

    assert not feed.scheduler.is_running
    # Only the item requests already in flight finish; the rest are skipped.
    assert time.monotonic() - began < 1.0
    assert fetcher.session.get.call_count <= 1 + 2 * 8
    fetcher.session.close.assert_called_once()
    assert feed.last_refresh is None


def test_hiding_first_item_of_empty_feed_is_a_no_op(make_feed):
    feed = make_feed([])
    feed.refresh()
    first = next(iter(feed), None)
    if first is not None:
        feed.hide(first)
    assert first is None
    assert feed.state.hidden_ids() == []
