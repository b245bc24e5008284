from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List

if TYPE_CHECKING:
    from .datamodels import ItemRecord


class FetchError(Exception):
    """Base class for failures talking to the upstream API."""


class NetworkError(FetchError):
    """Raised on transport failures, timeouts and HTTP error statuses."""


class ParseError(FetchError):
    """Raised when an upstream payload cannot be parsed into expected fields."""


class PartialFailure(FetchError):
    """Raised when only some detail fetches succeeded.

    `items` holds the successful records in rank order, `failures` maps each
    failed id to its error.
    """

    def __init__(self, items: List["ItemRecord"], failures: Dict[int, FetchError]):
        self.items = items
        self.failures = failures
        super().__init__(
            f"{len(failures)} of {len(items) + len(failures)} item fetches failed"
        )


class FetchCancelled(FetchError):
    """Raised when a fetch is abandoned because shutdown was requested."""
