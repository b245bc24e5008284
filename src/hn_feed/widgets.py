from __future__ import annotations

from urllib.parse import urlparse

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.reactive import reactive
from textual.widgets import ListItem, Static

from .datamodels import ItemRecord


def _domain(item: ItemRecord) -> str:
    if not item.url:
        return "news.ycombinator.com"
    host = urlparse(item.url).netloc
    return host[4:] if host.startswith("www.") else host


# --- UI Widgets ---
class HeadlineItem(ListItem):
    def __init__(self, item: ItemRecord, rank: int):
        super().__init__()
        self.item = item
        self.rank = rank

    def compose(self) -> ComposeResult:
        with Horizontal(classes="headline-container"):
            yield Static(f"{self.rank:>3}.", classes="headline-rank")
            yield Static(self.item.title or "(untitled)", classes="headline-title", markup=False)
            yield Static(_domain(self.item), classes="headline-domain", markup=False)


class StatusBar(Static):
    refresh_status = reactive("")
    keybinding_hint = reactive("")

    def on_mount(self) -> None:
        self.update_display()

    def set_keybindings(self, hint: str) -> None:
        """Set the keybinding hint text."""
        self.keybinding_hint = hint

    def update_display(self) -> None:
        status_items = []
        if self.refresh_status:
            status_items.append(self.refresh_status)

        if self.keybinding_hint:
            status_items.append(self.keybinding_hint)

        self.update(" | ".join(status_items))

    def watch_refresh_status(self, refresh_status: str) -> None:
        self.update_display()

    def watch_keybinding_hint(self, keybinding_hint: str) -> None:
        self.update_display()
