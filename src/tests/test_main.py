from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from hn_feed.datamodels import ItemRecord
from hn_feed.main import main


@pytest.fixture
def feed_view():
    with patch("hn_feed.main.FeedView") as feed_cls:
        feed = MagicMock()
        feed_cls.return_value.__enter__.return_value = feed
        feed.wait_for_refresh.return_value = True
        feed.items.return_value = iter(
            [
                ItemRecord(id=1, title="Show HN: A thing", url="https://thing.example"),
                ItemRecord(id=2, title="Ask HN: Why?"),
            ]
        )
        yield feed_cls, feed


def test_once_prints_ranked_items(feed_view, tmp_path, capsys):
    feed_cls, _ = feed_view

    assert main(["--once", "--config", str(tmp_path / "missing.json")]) == 0

    out = capsys.readouterr().out
    assert "  1. Show HN: A thing" in out
    assert "https://thing.example" in out
    assert "  2. Ask HN: Why?" in out
    assert "https://news.ycombinator.com/item?id=2" in out
    feed_cls.return_value.__exit__.assert_called_once()


def test_once_times_out(feed_view, tmp_path, capsys):
    _, feed = feed_view
    feed.wait_for_refresh.return_value = False

    assert main(["--once", "--config", str(tmp_path / "missing.json")]) == 1
    assert "Timed out" in capsys.readouterr().err


def test_flags_override_config_file(feed_view, tmp_path):
    feed_cls, _ = feed_view
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"poll_interval": 120, "item_count": 30, "fetch_timeout": 2}))

    main(["--once", "--config", str(path), "--count", "10"])

    config = feed_cls.call_args.args[0]
    assert config.poll_interval == 120
    assert config.item_count == 10
    assert config.fetch_timeout == 2


def test_invalid_config_exits_with_error(feed_view, tmp_path, capsys):
    feed_cls, _ = feed_view
    assert main(["--once", "--config", str(tmp_path / "missing.json"), "--count", "0"]) == 2
    assert "Invalid configuration" in capsys.readouterr().err
    feed_cls.assert_not_called()


def test_runs_viewer_without_once(feed_view, tmp_path):
    _, feed = feed_view
    with patch("hn_feed.main.FeedApp") as app_cls:
        assert main(["--config", str(tmp_path / "missing.json")]) == 0
    app_cls.assert_called_once_with(feed)
    app_cls.return_value.run.assert_called_once()
