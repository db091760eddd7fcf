import asyncio
import logging
import sys
from datetime import UTC, datetime

import click
import orjson

from .config import get_lexicon, get_settings, validate_config
from .exceptions import NewshubError
from .ingest.cache import load_cache, read_json
from .jobs import attach_citations, persist_social_boost, update_importance_scores
from .logging import get_logger, setup_logging
from .processing.lexicon import match_keywords
from .processing.scoring import ContentItem, ContentScorer
from .store import JsonContentStore
from .ui import init_ui

logger = get_logger(__name__)


def _configure_logging(log_level: str, verbose: bool) -> None:
    actual_log_level = "DEBUG" if verbose else log_level
    setup_logging(log_level=actual_log_level, json_logging=False)
    # basicConfig is a no-op once handlers exist, so set the level directly
    logging.getLogger().setLevel(getattr(logging, actual_log_level.upper()))


@click.group()
@click.option("--log-level", default="ERROR", help="Log level")
@click.option("--verbose", is_flag=True, help="Show detailed progress information")
@click.pass_context
def cli(ctx, log_level, verbose):
    """newshub - importance scoring and citation matching for AI news."""
    _configure_logging(log_level, verbose)
    ctx.obj = init_ui(verbose=verbose)


@cli.command()
@click.argument("store_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--dry-run", is_flag=True, help="Score items without writing scores back")
@click.option("--top", type=int, default=10, show_default=True, help="Rows shown in the summary table")
@click.pass_obj
def score(ui, store_file, dry_run, top):
    """Recompute importance scores for every item in STORE_FILE."""
    try:
        store = JsonContentStore(store_file)
        report = asyncio.run(update_importance_scores(store, dry_run=dry_run))
    except NewshubError as e:
        logger.error("Score update failed", error=str(e))
        ui.error(str(e))
        sys.exit(1)

    ui.show_score_table(report.top[:top])
    ui.show_update_summary(report.total, report.updated, report.failed, dry_run=dry_run)
    if report.failed:
        sys.exit(2)


@cli.command()
@click.argument("digest_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("cache_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.File("wb"),
    default="-",
    help="Output file (default: stdout)",
)
@click.option("--limit", type=int, help="Citations per topic")
@click.pass_obj
def cite(ui, digest_file, cache_file, output, limit):
    """Attach relevant posts and articles from CACHE_FILE to DIGEST_FILE topics."""
    try:
        digest = read_json(digest_file)
        if not isinstance(digest, dict):
            raise NewshubError(f"Digest must be a JSON object: {digest_file}")
        pool = load_cache(cache_file)
    except NewshubError as e:
        ui.error(str(e))
        sys.exit(1)

    enriched = attach_citations(digest, pool, limit=limit)
    output.write(orjson.dumps(enriched, option=orjson.OPT_INDENT_2))
    output.write(b"\n")
    ui.verbose_log(f"Processed {len(enriched.get('topics') or [])} topics")


@cli.command()
@click.argument("store_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("cache_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--dry-run", is_flag=True, help="Compute boosts without writing them back")
@click.pass_obj
def boost(ui, store_file, cache_file, dry_run):
    """Boost STORE_FILE scores using trending keywords from CACHE_FILE."""
    try:
        pool = load_cache(cache_file)
        store = JsonContentStore(store_file)
        report = asyncio.run(persist_social_boost(store, pool, dry_run=dry_run))
    except NewshubError as e:
        ui.error(str(e))
        sys.exit(1)

    ui.show_score_table(report.top, title="Top items after social boost")
    ui.show_update_summary(report.total, report.updated, report.failed, dry_run=dry_run)
    if report.failed:
        sys.exit(2)


@cli.command()
@click.argument("title")
@click.option("--summary", default="", help="Article summary")
@click.option("--source", default="", help="Source name")
@click.option("--published", help="Publication time (ISO 8601); defaults to now")
@click.pass_obj
def explain(ui, title, summary, source, published):
    """Show the score breakdown for a single TITLE."""
    item = ContentItem(
        title=title,
        body=summary,
        published_at=published or datetime.now(UTC),
        source_name=source,
    )
    lexicon = get_lexicon()
    breakdown = ContentScorer(lexicon).score(item)

    matched = [entry.phrase for entry in match_keywords(f"{title} {summary}", lexicon)]
    ui.info(f"Matched keywords: {', '.join(matched) if matched else 'none'}")
    ui.show_breakdown(breakdown.as_dict())
    click.echo(breakdown.final_score)


@cli.command("validate-config")
@click.pass_obj
def validate_config_command(ui):
    """Validate configuration and exit."""
    if validate_config(get_settings()):
        ui.success("Configuration is valid")
        sys.exit(0)
    ui.error("Configuration validation failed")
    sys.exit(1)


if __name__ == "__main__":
    cli()
