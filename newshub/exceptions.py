"""Exceptions raised by the newshub I/O adapters.

The scoring and matching core never raises: bad input degrades to a zero
score or an empty result. Everything here belongs to the layer that loads
lexicons, caches and stores.
"""

from pathlib import Path


class NewshubError(Exception):
    """Base class for newshub errors."""


class LexiconError(NewshubError):
    """Lexicon artifact is missing or malformed."""


class CacheFormatError(NewshubError):
    """
    Cache or digest document could not be read.

    Attributes:
        message: Error description
        path: File the document was read from, if any
    """

    def __init__(self, message: str, path: Path | None = None):
        self.message = message
        self.path = path
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)


class StoreError(NewshubError):
    """
    Content store read or write failed.

    Attributes:
        message: Error description
        item_id: Item the failing operation targeted, if any
    """

    def __init__(self, message: str, item_id: str | None = None):
        self.message = message
        self.item_id = item_id
        if item_id is not None:
            message = f"{message} [item {item_id}]"
        super().__init__(message)
