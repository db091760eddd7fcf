"""Batch jobs that drive the scoring and relevance engine over stored content."""

import asyncio
import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .config import Settings, get_settings
from .ingest.cache import ContentCache, Hashtag, SocialPost
from .logging import JobTimer, error_fields, get_logger
from .processing.relevance import RelevanceMatcher, boosted_score, social_boost
from .processing.scoring import ContentItem, ContentScorer
from .processing.text_utils import extract_keywords
from .store import ContentStore
from .utils import iter_batches, with_retries

logger = get_logger(__name__)

TOP_DETAILS = 10


@dataclass
class ScoreUpdateReport:
    """Outcome of a batch score update."""
    total: int = 0
    updated: int = 0
    failed: int = 0
    details: list[dict[str, Any]] = field(default_factory=list)
    failures: list[dict[str, Any]] = field(default_factory=list)

    @property
    def top(self) -> list[dict[str, Any]]:
        return sorted(self.details, key=lambda d: d["final_score"], reverse=True)[:TOP_DETAILS]

    def fail(self, item_id: str | None, error: BaseException, stage: str) -> None:
        logger.error("Item failed", **error_fields(error, stage, item_id))
        self.failed += 1
        self.failures.append({"id": item_id, "error": str(error)})


def _record_id(record: Any) -> str | None:
    if isinstance(record, Mapping) and record.get("id") is not None:
        return str(record["id"])
    return None


async def _write_score(store: ContentStore, item_id: str, score: int, settings: Settings,
                       semaphore: asyncio.Semaphore, **fields: Any) -> None:
    async with semaphore:
        await with_retries(
            lambda: store.update_importance(item_id, score, **fields),
            attempts=settings.retry_attempts,
            backoff=settings.backoff_factor,
            item_id=item_id,
        )


async def _write_all(store: ContentStore, writes: list[tuple[str, int, dict[str, Any]]],
                     settings: Settings, report: ScoreUpdateReport, stage: str) -> None:
    semaphore = asyncio.Semaphore(settings.global_parallel)
    results = await asyncio.gather(
        *(_write_score(store, item_id, score, settings, semaphore, **fields)
          for item_id, score, fields in writes),
        return_exceptions=True,
    )
    for (item_id, _, _), result in zip(writes, results, strict=True):
        if isinstance(result, Exception):
            report.fail(item_id, result, stage)
        else:
            report.updated += 1


async def update_importance_scores(
    store: ContentStore,
    scorer: ContentScorer | None = None,
    settings: Settings | None = None,
    dry_run: bool = False,
) -> ScoreUpdateReport:
    """Recompute and persist the importance score of every stored item.

    A record that cannot be read, scored or written is counted as failed;
    the rest of the batch still runs.

    Args:
        store: Content store to read items from and write scores to
        scorer: Scorer to use (defaults to the configured lexicon and policy)
        settings: Application settings
        dry_run: Score without writing anything back

    Returns:
        Report with success/failure counts and per-item score details
    """
    settings = settings or get_settings()
    scorer = scorer or ContentScorer()
    report = ScoreUpdateReport()

    with JobTimer("update_importance_scores", logger, report, dry_run=dry_run):
        items = await store.fetch_items()
        report.total = len(items)

        for batch in iter_batches(items, settings.batch_size):
            writes = []
            for record in batch:
                try:
                    item = ContentItem.from_record(record)
                    if item.item_id is None:
                        raise ValueError("Record has no id")
                    breakdown = scorer.score(item)
                except Exception as e:
                    report.fail(_record_id(record), e, "score")
                    continue

                writes.append((item.item_id, breakdown.final_score, {}))
                report.details.append({
                    "id": item.item_id,
                    "title": item.title,
                    "source": item.source_name,
                    "breakdown": breakdown.as_dict(),
                    "final_score": breakdown.final_score,
                })

            if not dry_run:
                await _write_all(store, writes, settings, report, "write")

    return report


def _citation_for_post(post: SocialPost) -> dict[str, Any]:
    return {"title": post.content, "url": post.url, "type": "x-post"}


def attach_citations(
    digest: dict[str, Any],
    pool: ContentCache,
    limit: int | None = None,
    matcher: RelevanceMatcher | None = None,
) -> dict[str, Any]:
    """Attach relevant social posts and articles to every digest topic.

    Existing ``article`` citations are kept and the top ``limit`` relevant
    posts become ``x-post`` citations. ``related_tweets`` and
    ``twitter_impact_score`` cover every relevant post; ``related_articles``
    holds the top ``limit`` articles. The input digest is not modified.

    Args:
        digest: Digest document with a ``topics`` list
        pool: Candidate posts and articles
        limit: Citations/articles attached per topic (defaults to settings)
        matcher: Relevance matcher to use

    Returns:
        New digest document
    """
    limit = limit if limit is not None else get_settings().citation_limit
    matcher = matcher or RelevanceMatcher()
    enriched = copy.deepcopy(digest)
    topics = enriched.get("topics") or []

    with JobTimer("attach_citations", logger, topics=len(topics)):
        for topic in topics:
            keywords = extract_keywords(f"{topic.get('title') or ''} {topic.get('summary') or ''}")

            posts = [m.candidate for m in matcher.rank(keywords, pool.tweets)]
            articles = [m.candidate for m in matcher.rank(keywords, pool.articles, limit)]
            cited = posts[:max(limit, 0)]

            kept = [c for c in topic.get("citations") or [] if c.get("type") == "article"]
            topic["citations"] = kept + [_citation_for_post(post) for post in cited]
            topic["related_tweets"] = [post.to_dict() for post in posts]
            topic["related_articles"] = [article.to_dict() for article in articles]
            topic["twitter_impact_score"] = sum(post.impact_score or 0 for post in posts)

            logger.debug("Attached citations", topic=topic.get("title"), keywords=len(keywords),
                         posts=len(posts), cited=len(cited), articles=len(articles))

    return enriched


def _hashtag_keyword(tag: Hashtag) -> str:
    return tag.hashtag.lstrip("#").lower()


def social_keywords(pool: ContentCache) -> set[str]:
    """Trending keywords from hashtags and post text."""
    keywords = {_hashtag_keyword(tag) for tag in pool.hashtags if _hashtag_keyword(tag)}
    for post in pool.tweets:
        keywords |= extract_keywords(post.text_for_matching())
    return keywords


def apply_social_boost(
    records: list[Any],
    pool: ContentCache,
    settings: Settings | None = None,
) -> list[dict[str, Any]]:
    """Boost importance scores of records that echo trending social keywords.

    Returns new records sorted by boosted score, each annotated with
    ``base_score``, ``social_match_count``, ``social_impact_score`` (summed
    engagement of matching hashtags), ``social_boost_percentage`` and
    ``new_score``. Records that are not mappings are skipped.
    """
    settings = settings or get_settings()
    keywords = social_keywords(pool)
    boosted = []

    for record in records:
        if not isinstance(record, Mapping):
            logger.warning("Skipping unreadable record", record_type=type(record).__name__)
            continue

        item = ContentItem.from_record(record)
        text = f"{item.title} {item.body}".lower()
        match_count, percentage = social_boost(
            text,
            keywords,
            per_match=settings.social_boost_per_match,
            cap=settings.social_boost_cap,
        )
        base = record.get("importance_score") or settings.default_base_score
        boosted.append({
            **record,
            "base_score": base,
            "social_match_count": match_count,
            "social_impact_score": sum(
                tag.impact_score or 0 for tag in pool.hashtags
                if _hashtag_keyword(tag) and _hashtag_keyword(tag) in text
            ),
            "social_boost_percentage": percentage,
            "new_score": boosted_score(base, percentage),
        })

    boosted.sort(key=lambda r: r["new_score"], reverse=True)
    logger.info("Social boost applied", keywords=len(keywords), records=len(boosted))
    return boosted


async def persist_social_boost(
    store: ContentStore,
    pool: ContentCache,
    settings: Settings | None = None,
    dry_run: bool = False,
) -> ScoreUpdateReport:
    """Apply the social boost to every stored item and write it back."""
    settings = settings or get_settings()
    report = ScoreUpdateReport()

    with JobTimer("persist_social_boost", logger, report, dry_run=dry_run):
        items = await store.fetch_items()
        report.total = len(items)
        records = apply_social_boost(items, pool, settings)
        for _ in range(len(items) - len(records)):
            report.fail(None, TypeError("Record is not a mapping"), "read")

        writes = []
        for record in records:
            report.details.append({
                "id": record.get("id"),
                "title": record.get("title"),
                "source": record.get("source_name") or record.get("source"),
                "final_score": record["new_score"],
                "social_boost_percentage": record["social_boost_percentage"],
            })
            if record.get("id") is None:
                report.fail(None, ValueError("Record has no id"), "read")
                continue
            writes.append((str(record["id"]), record["new_score"], {
                "social_boost_percentage": record["social_boost_percentage"],
                "social_match_count": record["social_match_count"],
                "social_impact_score": record["social_impact_score"],
            }))

        if not dry_run:
            await _write_all(store, writes, settings, report, "social_boost")

    return report
