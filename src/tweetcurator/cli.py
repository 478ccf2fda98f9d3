"""CLI entry point for TweetCurator."""

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

import tweetcurator.config as config_mod
from tweetcurator.config import (
    SWIPE_QUEUE_DEFAULT_LIMIT,
    CuratorConfig,
    load_config,
    save_config,
)
from tweetcurator.llm.client import LLM_MODES, create_client as create_llm_client
from tweetcurator.search.filters import TweetFilters
from tweetcurator.search.query import QueryError, list_tweets, swipe_queue
from tweetcurator.storage.database import Database
from tweetcurator.storage.models import SWIPE_STATUSES, TAG_CATEGORIES
from tweetcurator.storage.repository import Repository

console = Console(force_terminal=True)

PREVIEW_CHARS = 80


def _get_config(ctx) -> CuratorConfig:
    return ctx.obj["config"]


def _llm_client(ctx):
    try:
        return create_llm_client(ctx.obj["llm_mode"], _get_config(ctx))
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


def _preview(text: str | None, width: int = PREVIEW_CHARS) -> str:
    text = " ".join((text or "").split())
    return text if len(text) <= width else text[: width - 1] + "…"


def _tweets_table(title: str, tweets: list[dict]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Date", style="dim", width=10)
    table.add_column("Type", width=9)
    table.add_column("♥", justify="right")
    table.add_column("Text")
    table.add_column("Tags", style="dim")
    for t in tweets:
        table.add_row(
            t["id"],
            (t.get("created_at") or "")[:10],
            t.get("tweet_type") or "",
            str(t.get("favorite_count") or 0),
            _preview(t.get("full_text")),
            ", ".join(tag["name"] for tag in t.get("tags", [])[:3]),
        )
    return table


@click.group()
@click.option(
    "--db",
    default=None,
    help="Database path (overrides curator.json / TWEETCURATOR_DB)",
    type=click.Path(),
)
@click.option(
    "--llm-mode",
    type=click.Choice(LLM_MODES),
    default="auto",
    help="LLM access mode",
)
@click.option("--model", default=None, help="Claude model to use")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db, llm_mode, model, verbose):
    """TweetCurator - Search, swipe and tag your Twitter/X archive."""
    ctx.ensure_object(dict)

    config = load_config()
    if db:
        config.db_path = Path(db)
    if model:
        config.model = model

    ctx.obj["config"] = config
    ctx.obj["db_path"] = config.db_path
    ctx.obj["llm_mode"] = llm_mode
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")


# ---------------------------------------------------------------------------
# Setup and Import
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--username", "-u", default=None, help="Archive owner's handle")
@click.option(
    "--archive-dir",
    default=None,
    type=click.Path(file_okay=False),
    help="Default archive data directory for import",
)
@click.option("--save", is_flag=True, help="Write these settings to curator.json")
@click.pass_context
def init(ctx, username, archive_dir, save):
    """Create the database and seed the default tags."""
    config = _get_config(ctx)
    if username:
        config.username = username
    if archive_dir:
        config.archive_dir = Path(archive_dir).resolve()
    config.ensure_dirs()
    with Database(config.db_path) as db:
        count = Repository(db).get_tweet_count()
    console.print(f"[green]Database ready:[/green] {config.db_path}")
    console.print(f"Tweets stored: [bold]{count}[/bold]")

    if save:
        config.db_path = config.db_path.resolve()
        save_config(config)
        console.print(f"Saved settings to {config_mod.CONFIG_JSON_PATH}")


@cli.command(name="import")
@click.argument("archive_dir", required=False, type=click.Path(exists=True, file_okay=False))
@click.option("--username", "-u", default=None, help="Archive owner's handle")
@click.pass_context
def import_cmd(ctx, archive_dir, username):
    """Import tweets.js (and note-tweet.js) from an archive data directory."""
    from tweetcurator.ingest.archive import import_archive

    config = _get_config(ctx)
    archive_path = Path(archive_dir) if archive_dir else config.archive_dir
    username = username or config.username

    try:
        with Database(config.db_path) as db:
            summary = import_archive(db, archive_path, username)
            total = Repository(db).get_tweet_count()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    console.print(f"[green]Done![/green] Imported {summary['imported']} tweets.")
    console.print(f"  Long tweets expanded: {summary['long_tweets']}")
    console.print(f"  Thread tweets: {summary['threads']}")
    if summary["skipped"]:
        console.print(f"  Skipped: {summary['skipped']}")
    console.print(f"Total tweets in database: [bold]{total}[/bold]")


# ---------------------------------------------------------------------------
# Browsing
# ---------------------------------------------------------------------------


@cli.command(name="list")
@click.option("--search", "-s", default="", help="Search text; quote phrases")
@click.option("--type", "tweet_type", default="", help="Tweet type, or thread-start")
@click.option("--length", default="", help="short, medium or long")
@click.option("--swipe", default="", help="Swipe status, or 'unreviewed'")
@click.option("--tag", "-t", multiple=True, help="Tag (repeat to require several)")
@click.option("--reviewed", type=click.Choice(["true", "false"]), default=None)
@click.option("--quality", default="", help="high, medium or low")
@click.option("--include-retweets", is_flag=True, help="Keep retweets")
@click.option("--include-replies", is_flag=True, help="Keep replies")
@click.option("--exclude-threads", is_flag=True, help="Hide thread continuations")
@click.option("--sort", default="created_at", help="Sort column")
@click.option("--order", type=click.Choice(["asc", "desc"]), default="desc")
@click.option("--page", default=1, type=int)
@click.option("--limit", default=20, type=int)
@click.option(
    "--output-format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.pass_context
def list_cmd(ctx, search, tweet_type, length, swipe, tag, reviewed, quality,
             include_retweets, include_replies, exclude_threads, sort, order,
             page, limit, output_format):
    """List tweets with the same filters as the web API."""
    filters = TweetFilters.from_params({
        "page": page,
        "limit": limit,
        "search": search,
        "type": tweet_type,
        "length": length,
        "swipe": swipe,
        "tag": ",".join(tag),
        "reviewed": reviewed,
        "quality": quality,
        "excludeRetweets": "false" if include_retweets else "true",
        "excludeReplies": "false" if include_replies else "true",
        "excludeThreads": "true" if exclude_threads else "false",
        "sort": sort,
        "order": order,
    })

    with Database(ctx.obj["db_path"]) as db:
        try:
            result = list_tweets(db, filters)
        except QueryError as e:
            console.print(f"[red]Query failed:[/red] {e}")
            raise SystemExit(1)

    if output_format == "json":
        click.echo(json.dumps(result, indent=2, ensure_ascii=False))
        return

    tweets = result["tweets"]
    pagination = result["pagination"]
    if not tweets:
        console.print("[yellow]No tweets found.[/yellow]")
        return

    console.print(_tweets_table(f"Tweets: {search}" if search else "Tweets", tweets))
    console.print(
        f"\n[dim]Page {pagination['page']} of {pagination['totalPages']} "
        f"({pagination['total']} matching)[/dim]"
    )


@cli.command()
@click.argument("tweet_id")
@click.pass_context
def show(ctx, tweet_id):
    """Show one tweet with its tags and curation state."""
    with Database(ctx.obj["db_path"]) as db:
        tweet = Repository(db).get_tweet(tweet_id)

    if tweet is None:
        console.print(f"[red]Tweet {tweet_id} not found.[/red]")
        raise SystemExit(1)

    console.print(f"\n[bold cyan]{tweet['id']}[/bold cyan]  [dim]{tweet['created_at']}[/dim]")
    console.print(
        f"[dim]{tweet['tweet_type']} | {tweet['length_category']} | "
        f"♥ {tweet['favorite_count']}  ⟲ {tweet['retweet_count']}[/dim]"
    )
    console.print(f"\n{tweet['full_text']}", markup=False)
    if tweet.get("quoted_text"):
        console.print(f"\n> {tweet['quoted_text']}", markup=False, style="italic")
    if tweet["tags"]:
        console.print(f"\nTags: {', '.join(t['name'] for t in tweet['tags'])}")
    console.print(
        f"Swipe: {tweet['swipe_status'] or '-'}  Quality: {tweet['quality_rating'] or '-'}"
    )
    if tweet.get("notes"):
        console.print(f"Notes: {tweet['notes']}", markup=False)
    if tweet.get("tweet_url"):
        console.print(f"[dim]{tweet['tweet_url']}[/dim]")


@cli.command()
@click.argument("tweet_id")
@click.pass_context
def thread(ctx, tweet_id):
    """Show the replies chained below a tweet."""
    with Database(ctx.obj["db_path"]) as db:
        replies = Repository(db).get_thread(tweet_id)

    if not replies:
        console.print("[yellow]No thread replies found.[/yellow]")
        return

    for i, t in enumerate(replies, 1):
        console.print(f"[bold]{i}.[/bold] [dim]{t['id']} {t['created_at']}[/dim]")
        console.print(t["full_text"], markup=False)
        console.print("─" * 60)


@cli.command()
@click.argument("question")
@click.option(
    "--output-format",
    type=click.Choice(["table", "json"]),
    default="table",
)
@click.pass_context
def ask(ctx, question, output_format):
    """Search in plain language; Claude picks the filters."""
    from tweetcurator.search.semantic import semantic_search

    llm = _llm_client(ctx)
    with Database(ctx.obj["db_path"]) as db:
        try:
            result = semantic_search(db, llm, question)
        except QueryError as e:
            console.print(f"[red]Query failed:[/red] {e}")
            raise SystemExit(1)

    if output_format == "json":
        click.echo(json.dumps(result, indent=2, ensure_ascii=False))
        return

    filters = ", ".join(f"{k}={v}" for k, v in result["interpreted"].items()) or "none"
    console.print(f"Filters: {filters}", style="dim", markup=False, highlight=False)
    if result["explanation"]:
        console.print(result["explanation"], style="dim", markup=False)
    if not result["tweets"]:
        console.print("[yellow]No tweets found.[/yellow]")
        return
    console.print(_tweets_table(f"Answers: {question}", result["tweets"]))


# ---------------------------------------------------------------------------
# Swiping
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--limit", default=SWIPE_QUEUE_DEFAULT_LIMIT, type=int)
@click.option("--length", default="", help="Comma-separated length categories")
@click.option("--tag", default="", help="Comma-separated tags (all required)")
@click.pass_context
def queue(ctx, limit, length, tag):
    """Show the next unswiped tweets."""
    with Database(ctx.obj["db_path"]) as db:
        result = swipe_queue(db, limit=limit, length=length, tag=tag)

    if not result["tweets"]:
        console.print("[green]Nothing left to swipe.[/green]")
        return
    console.print(_tweets_table("Swipe Queue", result["tweets"]))
    console.print(f"\n[dim]{result['remaining']} remaining[/dim]")


@cli.command()
@click.argument("tweet_id")
@click.argument("status", type=click.Choice(SWIPE_STATUSES))
@click.option("--notes", default=None, help="Attach a note")
@click.pass_context
def swipe(ctx, tweet_id, status, notes):
    """Record a swipe decision for a tweet."""
    changes = {"swipe_status": status}
    if notes is not None:
        changes["notes"] = notes

    with Database(ctx.obj["db_path"]) as db:
        repo = Repository(db)
        if not repo.update_tweet(tweet_id, changes):
            console.print(f"[red]Tweet {tweet_id} not found.[/red]")
            raise SystemExit(1)
        session = repo.get_today_session()

    console.print(f"[green]Swiped {status}[/green] on {tweet_id}")
    console.print(f"[dim]Today: {session['tweets_swiped']} swiped[/dim]")


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


@cli.group(name="tag")
def tag_group():
    """Manage tweet tags."""
    pass


@tag_group.command(name="add")
@click.argument("tweet_id")
@click.argument("name")
@click.option("--category", type=click.Choice(TAG_CATEGORIES), default="custom")
@click.pass_context
def tag_add(ctx, tweet_id, name, category):
    """Attach a tag to a tweet."""
    with Database(ctx.obj["db_path"]) as db:
        try:
            added = Repository(db).add_tag(tweet_id, name, category)
        except ValueError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)

    if not added:
        console.print(f"[red]Tweet {tweet_id} not found.[/red]")
        raise SystemExit(1)
    console.print(f"[green]Tagged[/green] {tweet_id} with {name.strip().lower()}")


@tag_group.command(name="remove")
@click.argument("tweet_id")
@click.argument("name")
@click.pass_context
def tag_remove(ctx, tweet_id, name):
    """Detach a tag from a tweet."""
    with Database(ctx.obj["db_path"]) as db:
        removed = Repository(db).remove_tag(tweet_id, name)

    if not removed:
        console.print(f"[red]Tag {name} not found.[/red]")
        raise SystemExit(1)
    console.print(f"Removed {name} from {tweet_id}")


@tag_group.command(name="list")
@click.pass_context
def tag_list(ctx):
    """List tags by category with usage counts."""
    with Database(ctx.obj["db_path"]) as db:
        grouped = Repository(db).list_tags()

    table = Table(title="Tags")
    table.add_column("Category", style="cyan")
    table.add_column("Tag", style="bold")
    table.add_column("Tweets", justify="right")
    for category, tags in grouped.items():
        for t in tags:
            table.add_row(category, t["name"], str(t["tweet_count"]))
    console.print(table)


# ---------------------------------------------------------------------------
# Stats and Export
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def stats(ctx):
    """Show archive and curation statistics."""
    with Database(ctx.obj["db_path"]) as db:
        result = Repository(db).get_stats()

    s = result["stats"]
    table = Table(title="Archive Stats")
    table.add_column("Metric", style="bold")
    table.add_column("Count", justify="right")
    for key, value in s.items():
        table.add_row(key.replace("_", " "), str(value))
    console.print(table)

    if result["topTags"]:
        console.print(
            "Top tags: " + ", ".join(f"{t['name']} ({t['count']})" for t in result["topTags"][:10])
        )
    today = result["todayStats"]
    console.print(f"Swiped today: [bold]{today['tweets_swiped']}[/bold]")


@cli.command(name="export")
@click.option("--format", "fmt", type=click.Choice(["json", "csv"]), default="json")
@click.option("--output", "-o", default=None, type=click.Path(), help="Output file")
@click.option("--quality", default="")
@click.option("--swipe", default="")
@click.option("--type", "tweet_type", default="")
@click.option("--length", default="")
@click.option("--tag", "-t", multiple=True)
@click.option("--include-retweets", is_flag=True)
@click.option("--include-replies", is_flag=True)
@click.pass_context
def export_cmd(ctx, fmt, output, quality, swipe, tweet_type, length, tag,
               include_retweets, include_replies):
    """Export matching tweets as JSON or CSV."""
    from tweetcurator.storage.export import export_to_file

    config = _get_config(ctx)
    path = Path(output) if output else config.exports_dir / f"tweets_export.{fmt}"
    filters = TweetFilters.from_params({
        "quality": quality,
        "swipe": swipe,
        "type": tweet_type,
        "length": length,
        "tag": ",".join(tag),
        "excludeRetweets": "false" if include_retweets else "true",
        "excludeReplies": "false" if include_replies else "true",
    })

    with Database(ctx.obj["db_path"]) as db:
        try:
            count = export_to_file(db, path, fmt, filters)
        except QueryError as e:
            console.print(f"[red]Export failed:[/red] {e}")
            raise SystemExit(1)

    console.print(f"[green]Exported {count} tweets to {path}[/green]")


# ---------------------------------------------------------------------------
# Tagging
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def autotag(ctx):
    """Re-tag all tweets with keyword and pattern heuristics."""
    from tweetcurator.tagging.heuristics import auto_tag

    with Database(ctx.obj["db_path"]) as db:
        links = auto_tag(db)
    console.print(f"[green]Done![/green] Added {links} heuristic tags.")


@cli.command(name="llm-tag")
@click.option("--batch-size", default=None, type=int, help="Tweets per LLM call")
@click.option("--limit", default=None, type=int, help="Only tag the top N tweets")
@click.option("--delay", default=None, type=float, help="Seconds between batches")
@click.option("--clear", is_flag=True, help="Remove existing ai tags first")
@click.pass_context
def llm_tag_cmd(ctx, batch_size, limit, delay, clear):
    """Tag tweets semantically with Claude."""
    from tweetcurator.config import LLM_TAG_BATCH_SIZE, LLM_TAG_DELAY_SECONDS
    from tweetcurator.tagging.llm import llm_tag

    llm = _llm_client(ctx)

    def progress(index, total):
        console.print(f"  Batch {index}/{total}...")

    with Database(ctx.obj["db_path"]) as db:
        summary = llm_tag(
            db,
            llm,
            batch_size=batch_size or LLM_TAG_BATCH_SIZE,
            delay=LLM_TAG_DELAY_SECONDS if delay is None else delay,
            limit=limit,
            clear_existing=clear,
            progress_callback=progress,
        )

    console.print(
        f"[green]Done![/green] Processed {summary['processed']} tweets, "
        f"added {summary['tagged']} tags."
    )
    if summary["errors"]:
        console.print(f"[yellow]{summary['errors']} batches failed (see log).[/yellow]")


# ---------------------------------------------------------------------------
# Web API
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", default="127.0.0.1")
@click.option("--port", default=3000, type=int)
@click.pass_context
def serve(ctx, host, port):
    """Run the JSON API with uvicorn."""
    import uvicorn

    from tweetcurator.web.app import create_app

    config = _get_config(ctx)
    try:
        llm = create_llm_client(ctx.obj["llm_mode"], config)
    except ValueError as e:
        console.print(f"[yellow]AI features disabled:[/yellow] {e}")
        llm = None

    app = create_app(config, llm_client=llm)
    console.print(f"Serving TweetCurator API on http://{host}:{port}/api")
    uvicorn.run(app, host=host, port=port)
