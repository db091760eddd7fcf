"""Content store interface and a JSON file-backed implementation."""

import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

import orjson

from .exceptions import StoreError
from .logging import get_logger

logger = get_logger(__name__)


class ContentStore(Protocol):
    """Generic content store the batch jobs read from and write back to."""

    async def fetch_items(self) -> list[dict[str, Any]]:
        """Return every stored item as a record with an ``id`` key."""
        ...

    async def update_importance(self, item_id: str, score: int, **fields: Any) -> None:
        """Persist an item's importance score and any extra columns."""
        ...


class JsonContentStore:
    """Content store kept in a JSON document, ``{"items": [...]}`` or a bare list.

    The document keeps its shape and any other top-level keys on write.

    Writes go through a temporary file and an atomic replace so a failed
    write never leaves a truncated document behind.
    """

    def __init__(self, path: str | Path, score_field: str = "importance_score"):
        self.path = Path(path)
        self.score_field = score_field
        self._document: Any = None
        self._items: list[dict[str, Any]] | None = None

    def _load(self) -> list[dict[str, Any]]:
        if self._items is None:
            try:
                document = orjson.loads(self.path.read_bytes())
            except FileNotFoundError as e:
                raise StoreError(f"Store file not found: {self.path}") from e
            except orjson.JSONDecodeError as e:
                raise StoreError(f"Store file is not valid JSON: {self.path}: {e}") from e

            items = document.get("items") if isinstance(document, dict) else document
            if not isinstance(items, list):
                raise StoreError(f"Store file has no item list: {self.path}")
            self._document = document
            self._items = items
        return self._items

    def _index(self, item_id: str) -> int:
        for index, item in enumerate(self._load()):
            if isinstance(item, dict) and str(item.get("id")) == str(item_id):
                return index
        raise StoreError("Unknown item", item_id=item_id)

    def _flush(self) -> None:
        items = self._load()
        document = {**self._document, "items": items} if isinstance(self._document, dict) else items
        payload = orjson.dumps(document, option=orjson.OPT_INDENT_2)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Failed to write store file {self.path}: {e}") from e

    async def fetch_items(self) -> list[dict[str, Any]]:
        return [dict(item) if isinstance(item, dict) else item for item in self._load()]

    async def update_importance(self, item_id: str, score: int, **fields: Any) -> None:
        index = self._index(item_id)
        self._items[index] = {**self._items[index], self.score_field: score, **fields}
        self._flush()
        logger.debug("Updated item score", item_id=item_id, score=score)
