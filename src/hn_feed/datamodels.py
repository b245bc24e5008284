from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from .config import HN_DISCUSSION_URL
from .exceptions import ParseError


# --- Data models ---
@dataclass
class ItemRecord:
    id: int
    title: str
    url: Optional[str] = None
    hidden: bool = False

    @property
    def discussion_url(self) -> str:
        return f"{HN_DISCUSSION_URL}{self.id}"

    @property
    def link(self) -> str:
        """External URL, or the HN comment page for stories without one."""
        return self.url or self.discussion_url

    def copy(self) -> "ItemRecord":
        return replace(self)

    @classmethod
    def from_json(cls, payload: Any) -> "ItemRecord":
        """Build a record from an upstream item object."""
        if not isinstance(payload, dict):
            raise ParseError(f"Expected item object, got {type(payload).__name__}")
        item_id = payload.get("id")
        if not isinstance(item_id, int) or isinstance(item_id, bool):
            raise ParseError(f"Item has no integer id: {item_id!r}")
        title = payload.get("title") or ""
        url = payload.get("url") or None
        if not isinstance(title, str) or (url is not None and not isinstance(url, str)):
            raise ParseError(f"Item {item_id} has malformed title/url fields")
        return cls(id=item_id, title=title, url=url)
