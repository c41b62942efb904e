"""Command line interface for the newsletter curation desk."""

import asyncio
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Tuple

import click

from curation_desk.clients.esp import get_esp_provider
from curation_desk.core.drafts import build_draft
from curation_desk.core.exceptions import CurationDeskError
from curation_desk.core.placement import PlacementStore
from curation_desk.core.publishing import IssuePublisher
from curation_desk.core.storage import SQLiteStorage
from curation_desk.core.utils import canonical_video_url, extract_youtube_id, format_duration
from curation_desk.models.content import ISSUE_TYPES, CuratedVideo, PublishOptions
from curation_desk.models.settings import Settings

logger = logging.getLogger(__name__)

ISSUE_TYPE = click.Choice(ISSUE_TYPES)
SEND_AT = click.DateTime(formats=["%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M:%S"])


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug mode")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Newsletter curation desk CLI.

    Places favorited podcast videos into the urgent and evergreen issues,
    builds curation drafts and publishes issues through the ESP.
    """
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    # Set up logging before any other logging calls
    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(level=log_level, force=True)
    logger.debug("Debug mode enabled")


def _settings(ctx: click.Context) -> Settings:
    return Settings(debug=ctx.obj.get("debug", False))


def _run(ctx: click.Context, operation: Callable[[], Awaitable[None]]) -> None:
    """Run one async command, turning curation errors into a non-zero exit."""
    try:
        asyncio.run(operation())
    except CurationDeskError as e:
        logger.error(f"❌ {e}")
        if ctx.obj.get("debug"):
            raise
        sys.exit(1)


async def _open_store(settings: Settings) -> Tuple[SQLiteStorage, PlacementStore]:
    storage = SQLiteStorage(settings.database_path)
    store = await PlacementStore.load(storage)
    return storage, store


@cli.command()
def config() -> None:
    """Show current configuration."""
    settings = Settings()

    click.echo("\n📋 Curation Desk Configuration\n")
    click.echo(f"Debug Mode: {settings.debug}")
    click.echo(f"Log Level: {settings.log_level}")
    click.echo(f"Database: {settings.database_path}")
    click.echo(f"ESP Provider: {settings.esp_provider}")

    click.echo("\n🔑 Mailchimp:")
    checks = {
        "API Key": settings.mailchimp_api_key,
        "Server Prefix": settings.mailchimp_server_prefix,
        "Audience ID": settings.mailchimp_list_id,
    }
    for label, value in checks.items():
        status = "✅ Configured" if value else "❌ Missing"
        click.echo(f"  {label}: {status}")
    click.echo(f"  From: {settings.mailchimp_from_name} <{settings.mailchimp_reply_to}>")


@cli.command()
@click.pass_context
def favorites(ctx: click.Context) -> None:
    """List favorited videos not yet placed in a draft issue."""

    async def _favorites():
        storage, store = await _open_store(_settings(ctx))
        available = store.available_favorites(await storage.list_favorited_videos())
        if not available:
            click.echo("No unplaced favorites.")
            return
        for video in available:
            duration = format_duration(video.duration_seconds)
            suffix = f" ({duration})" if duration else ""
            click.echo(f"{video.id}  {video.title} · {video.channel_name or '-'}{suffix}")

    _run(ctx, _favorites)


@cli.command()
@click.argument("issue_type", type=ISSUE_TYPE)
@click.pass_context
def show(ctx: click.Context, issue_type: str) -> None:
    """Show the draft issue of ISSUE_TYPE and its ordered items."""

    async def _show():
        _, store = await _open_store(_settings(ctx))
        issue = store.issue(issue_type)
        click.echo(f"\n📰 {issue.type.title()} issue {issue.id} ({issue.status})")
        click.echo(f"Date: {issue.issue_date or '-'}")
        click.echo(f"Subject: {issue.subject or '-'}")
        click.echo(f"Preview: {issue.preview_text or '-'}\n")
        items = store.items(issue.id)
        if not items:
            click.echo("No items in this issue yet.")
        for item in items:
            click.echo(f"{item.position}. [{item.id}] {item.video.title}")

    _run(ctx, _show)


@cli.command()
@click.argument("issue_type", type=ISSUE_TYPE)
@click.pass_context
def draft(ctx: click.Context, issue_type: str) -> None:
    """Print the curation draft of ISSUE_TYPE."""

    async def _draft():
        _, store = await _open_store(_settings(ctx))
        issue = store.issue(issue_type)
        click.echo(build_draft(issue, store.items(issue.id)))

    _run(ctx, _draft)


@cli.command()
@click.argument("issue_type", type=ISSUE_TYPE)
@click.argument("video_id")
@click.option("--position", type=int, default=None, help="Insert position (appends if omitted)")
@click.pass_context
def add(ctx: click.Context, issue_type: str, video_id: str, position: Optional[int]) -> None:
    """Place VIDEO_ID into the draft issue of ISSUE_TYPE."""

    async def _add():
        storage, store = await _open_store(_settings(ctx))
        video = await storage.get_video(video_id)
        if video is None:
            raise CurationDeskError(f"Video {video_id} not found")
        item = await store.add(store.issue(issue_type).id, video, position)
        click.echo(f"✅ Added '{video.title}' as item {item.id} at position {item.position}")

    _run(ctx, _add)


@cli.command()
@click.argument("item_id")
@click.pass_context
def remove(ctx: click.Context, item_id: str) -> None:
    """Remove ITEM_ID from its issue."""

    async def _remove():
        _, store = await _open_store(_settings(ctx))
        await store.remove(item_id)
        click.echo(f"✅ Removed item {item_id}")

    _run(ctx, _remove)


@cli.command()
@click.argument("issue_type", type=ISSUE_TYPE)
@click.argument("from_index", type=int)
@click.argument("to_index", type=int)
@click.pass_context
def reorder(ctx: click.Context, issue_type: str, from_index: int, to_index: int) -> None:
    """Move the item at FROM_INDEX to TO_INDEX within one issue."""

    async def _reorder():
        _, store = await _open_store(_settings(ctx))
        items = await store.reorder(store.issue(issue_type).id, from_index, to_index)
        for item in items:
            click.echo(f"{item.position}. [{item.id}] {item.video.title}")

    _run(ctx, _reorder)


@cli.command()
@click.argument("item_id")
@click.argument("issue_type", type=ISSUE_TYPE)
@click.argument("index", type=int)
@click.pass_context
def move(ctx: click.Context, item_id: str, issue_type: str, index: int) -> None:
    """Move ITEM_ID to INDEX of the draft issue of ISSUE_TYPE."""

    async def _move():
        _, store = await _open_store(_settings(ctx))
        item = await store.move(item_id, store.issue(issue_type).id, index)
        click.echo(f"✅ Moved item {item.id} to {issue_type} position {item.position}")

    _run(ctx, _move)


@cli.command("set-fields")
@click.argument("item_id")
@click.option("--podcast-name", default=None)
@click.option("--guest-name", default=None)
@click.option("--actor", default=None)
@click.option("--topics", default=None)
@click.option("--signal", "signals", multiple=True, help="Repeat for each signal")
@click.option("--nugget", "nuggets", multiple=True, help="Repeat for each nugget")
@click.option("--framework", default=None)
@click.option("--why-now", default=None)
@click.option("--why-compounds", default=None)
@click.option("--listen-if", default=None)
@click.option("--skip-if", default=None)
@click.option("--relevance-horizon", default=None)
@click.pass_context
def set_fields(ctx: click.Context, item_id: str, **options) -> None:
    """Update curation fields of ITEM_ID. Only the options given are changed."""
    partial = {}
    for name, value in options.items():
        if isinstance(value, tuple):
            if value:
                partial[name] = list(value)
        elif value is not None:
            partial[name] = value

    if not partial:
        click.echo("Nothing to update.")
        return

    async def _set_fields():
        _, store = await _open_store(_settings(ctx))
        await store.update_fields(item_id, partial)
        click.echo(f"✅ Updated {', '.join(sorted(partial))} on item {item_id}")

    _run(ctx, _set_fields)


@cli.command("set-issue")
@click.argument("issue_type", type=ISSUE_TYPE)
@click.option("--date", "issue_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--subject", default=None)
@click.option("--preview-text", default=None)
@click.pass_context
def set_issue(
    ctx: click.Context,
    issue_type: str,
    issue_date: Optional[datetime],
    subject: Optional[str],
    preview_text: Optional[str],
) -> None:
    """Update date, subject or preview text of the draft issue of ISSUE_TYPE."""
    changes = {}
    if issue_date is not None:
        changes["issue_date"] = issue_date.date()
    if subject is not None:
        changes["subject"] = subject
    if preview_text is not None:
        changes["preview_text"] = preview_text

    if not changes:
        click.echo("Nothing to update.")
        return

    async def _set_issue():
        _, store = await _open_store(_settings(ctx))
        issue = await store.update_issue_metadata(store.issue(issue_type).id, **changes)
        click.echo(f"✅ Updated {issue_type} issue {issue.id}")

    _run(ctx, _set_issue)


@cli.command()
@click.argument("issue_type", type=ISSUE_TYPE)
@click.option("--send-now", is_flag=True, help="Send immediately")
@click.option("--send-at", type=SEND_AT, default=None, help="Schedule time (UTC)")
@click.pass_context
def publish(
    ctx: click.Context, issue_type: str, send_now: bool, send_at: Optional[datetime]
) -> None:
    """Publish the draft issue of ISSUE_TYPE to the configured ESP."""

    async def _publish():
        settings = _settings(ctx)
        esp = get_esp_provider(settings)
        _, store = await _open_store(settings)
        issue = store.issue(issue_type)

        if send_at is not None:
            options = PublishOptions(send_at=send_at.replace(tzinfo=timezone.utc), send_now=send_now)
        else:
            options = PublishOptions(send_now=send_now)

        logger.info(f"🚀 Publishing {issue_type} issue via {esp.name}...")
        result = await IssuePublisher(store, esp).publish(issue.id, options)
        click.echo(
            f"✅ Issue {result.issue.id} is {result.issue.status} "
            f"(campaign {result.campaign.id}, action: {result.plan.action})"
        )
        if result.campaign.web_url:
            click.echo(f"🔗 {result.campaign.web_url}")

    _run(ctx, _publish)


@cli.command("add-video")
@click.argument("url")
@click.option("--title", required=True, help="Video title")
@click.option("--channel", default=None, help="Channel name")
@click.option("--thumbnail", default=None, help="Thumbnail URL")
@click.option("--duration", type=int, default=None, help="Duration in seconds")
@click.option("--published-at", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option(
    "--status",
    type=click.Choice(["new", "favorited", "archived"]),
    default="favorited",
    show_default=True,
)
@click.pass_context
def add_video(
    ctx: click.Context,
    url: str,
    title: str,
    channel: Optional[str],
    thumbnail: Optional[str],
    duration: Optional[int],
    published_at: Optional[datetime],
    status: str,
) -> None:
    """Add or update a video in the library from its YouTube URL."""

    async def _add_video():
        video_id = extract_youtube_id(url)
        if not video_id:
            raise CurationDeskError(f"Not a YouTube video URL: {url}")

        storage = SQLiteStorage(_settings(ctx).database_path)
        video = await storage.upsert_video(
            CuratedVideo(
                id=video_id,
                title=title,
                channel_name=channel,
                video_url=canonical_video_url(video_id),
                thumbnail_url=thumbnail or f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
                duration_seconds=duration,
                published_at=published_at or datetime.now(timezone.utc),
                status=status,
            )
        )
        click.echo(f"✅ Stored video {video.id}: {video.title}")

    _run(ctx, _add_video)


if __name__ == "__main__":
    cli()
