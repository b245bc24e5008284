from __future__ import annotations

import logging
import webbrowser
from typing import Any, List, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Header, ListView

from .datamodels import ItemRecord
from .feed import FeedView
from .widgets import HeadlineItem, StatusBar

logger = logging.getLogger("hn_feed")

KEYBINDING_HINT = "[b]h[/] hide  [b]o[/] open  [b]r[/] redraw  [b]q[/] quit"


class FeedApp(App):
    TITLE = "Hacker News"
    SUB_TITLE = "Top stories"

    CSS = """
    #headlines-list {
        height: 1fr;
    }
    .headline-container {
        height: auto;
    }
    .headline-rank {
        width: 5;
        text-style: dim;
    }
    .headline-title {
        width: 1fr;
    }
    .headline-domain {
        width: auto;
        text-style: dim;
    }
    StatusBar {
        dock: bottom;
        height: 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("h", "hide_item", "Hide"),
        Binding("o", "open_in_browser", "Open"),
        Binding("r", "redraw", "Redraw"),
    ]

    def __init__(self, feed: FeedView, redraw_interval: float = 1.0, **kwargs: Any):
        super().__init__(**kwargs)
        self.feed = feed
        self.redraw_interval = redraw_interval
        self.stories: List[ItemRecord] = []
        self._generation: Optional[int] = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield ListView(id="headlines-list")
        yield StatusBar()

    async def on_mount(self) -> None:
        self.query_one(StatusBar).set_keybindings(KEYBINDING_HINT)
        self.query_one("#headlines-list", ListView).focus()
        await self.refresh_headlines()
        self.set_interval(self.redraw_interval, self.refresh_headlines)

    def _update_status(self) -> None:
        refreshed_at = self.feed.last_refresh
        if refreshed_at is None:
            status = "Waiting for first refresh..."
        else:
            status = f"Updated {refreshed_at.astimezone():%H:%M:%S}"
        self.query_one(StatusBar).refresh_status = status

    async def refresh_headlines(self, force: bool = False) -> None:
        """Redraw the list when the feed has changed since the last draw."""
        self._update_status()
        generation = self.feed.state.generation
        if not force and generation == self._generation:
            return
        self._generation = generation

        headlines = self.query_one("#headlines-list", ListView)
        index = headlines.index or 0
        self.stories = list(self.feed.items())
        await headlines.clear()
        await headlines.extend(
            HeadlineItem(item, rank) for rank, item in enumerate(self.stories, start=1)
        )
        if self.stories:
            headlines.index = min(index, len(self.stories) - 1)
        logger.debug("Redrew %d headlines (generation %d)", len(self.stories), generation)

    def _highlighted(self) -> Optional[ItemRecord]:
        item = self.query_one("#headlines-list", ListView).highlighted_child
        if isinstance(item, HeadlineItem):
            return item.item
        return None

    async def action_hide_item(self) -> None:
        item = self._highlighted()
        if item is None:
            return
        self.feed.hide(item)
        await self.refresh_headlines(force=True)

    def action_open_in_browser(self) -> None:
        item = self._highlighted()
        if item is not None:
            webbrowser.open(item.link)

    async def action_redraw(self) -> None:
        await self.refresh_headlines(force=True)
