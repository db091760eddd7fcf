"""File-based content cache loader.

The cache is a JSON document holding arrays of social posts, articles and
trending hashtags, e.g.::

    {"tweets": [{"content": "...", "url": "...", "impactScore": 812}],
     "articles": [{"title": "...", "summary": "...", "importance_score": 140}],
     "hashtags": [{"hashtag": "#GPT5", "impactScore": 950}]}
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import CacheFormatError
from ..logging import get_logger

logger = get_logger(__name__)


class CacheRecord(BaseModel):
    """Base for cached records; unknown fields are kept for round-tripping."""
    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class SocialPost(CacheRecord):
    """Social-media post (tweet) usable as a citation."""
    content: str | None = ""
    url: str | None = ""
    author: str = Field("", alias="authorUsername")
    impact_score: float | None = Field(None, alias="impactScore")

    def text_for_matching(self) -> str:
        return self.content or ""

    def precomputed_score(self) -> float | None:
        return self.impact_score


class ArticleRecord(CacheRecord):
    """News article usable as related content."""
    id: str | int | None = None
    title: str | None = ""
    summary: str | None = ""
    url: str | None = ""
    source_name: str = Field("", alias="source")
    importance_score: float | None = None

    def text_for_matching(self) -> str:
        return f"{self.title or ''} {self.summary or ''}"

    def precomputed_score(self) -> float | None:
        return self.importance_score


class Hashtag(CacheRecord):
    """Trending hashtag with its engagement score."""
    hashtag: str
    impact_score: float | None = Field(None, alias="impactScore")


@dataclass
class ContentCache:
    """Candidate pools loaded from a cache document."""
    tweets: list[SocialPost] = field(default_factory=list)
    articles: list[ArticleRecord] = field(default_factory=list)
    hashtags: list[Hashtag] = field(default_factory=list)

    @classmethod
    def from_document(cls, document: Any, path: Path | None = None) -> "ContentCache":
        if not isinstance(document, dict):
            raise CacheFormatError("Cache document must be a JSON object", path)

        try:
            return cls(
                tweets=[SocialPost.model_validate(t) for t in document.get("tweets") or []],
                articles=[ArticleRecord.model_validate(a) for a in document.get("articles") or []],
                hashtags=[Hashtag.model_validate(h) for h in document.get("hashtags") or []],
            )
        except (ValidationError, TypeError) as e:
            raise CacheFormatError(f"Invalid cache record: {e}", path) from e


def read_json(path: str | Path) -> Any:
    """Read a JSON document, raising CacheFormatError on failure."""
    path = Path(path)
    try:
        return orjson.loads(path.read_bytes())
    except FileNotFoundError as e:
        raise CacheFormatError("File not found", path) from e
    except orjson.JSONDecodeError as e:
        raise CacheFormatError(f"Invalid JSON: {e}", path) from e


def write_json(path: str | Path, document: Any) -> None:
    """Write a JSON document with indentation."""
    Path(path).write_bytes(orjson.dumps(document, option=orjson.OPT_INDENT_2))


def load_cache(path: str | Path) -> ContentCache:
    """Load candidate pools from a cache file.

    Args:
        path: Path to the cache JSON document

    Returns:
        Parsed content cache

    Raises:
        CacheFormatError: If the file is missing or malformed
    """
    path = Path(path)
    cache = ContentCache.from_document(read_json(path), path)
    logger.info(
        "Loaded content cache",
        path=str(path),
        tweets=len(cache.tweets),
        articles=len(cache.articles),
        hashtags=len(cache.hashtags),
    )
    return cache
