"""CLI entrypoint."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import wraps
from typing import Any

import click
import httpx
from pydantic import ValidationError

from . import operations
from .errors import JoplinApiError, JoplinError, JoplinNotFoundError, PaginationError
from .joplin_client import JoplinClient
from .models import ItemType
from .render import format_row, formats_for, render_table
from .session import open_session
from .settings import Settings, save_api_token

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AppContext:
    settings: Settings | None = None
    joplin: JoplinClient | None = None


def connect(ctx: click.Context) -> JoplinClient:
    """Resolve the endpoint session once and keep the client on the context."""
    app = ctx.ensure_object(AppContext)
    if app.joplin is not None:
        return app.joplin

    try:
        settings = app.settings or Settings()
    except ValidationError as exc:
        raise click.ClickException(f"Invalid settings: {exc}") from exc
    try:
        session = open_session(settings)
    except (JoplinError, httpx.HTTPError) as exc:
        raise click.ClickException(str(exc)) from exc

    if session.paired:
        path = save_api_token(session.token)
        logger.info("Saved API token to %s", path)

    app.settings = settings
    app.joplin = JoplinClient(session, timeout_seconds=settings.timeout_seconds)
    ctx.find_root().call_on_close(app.joplin.close)
    return app.joplin


def with_client(handler: Callable[..., Any]) -> Callable[..., Any]:
    """Inject the connected client and turn transport errors into CLI errors."""

    @wraps(handler)
    @click.pass_context
    def wrapper(ctx: click.Context, *args: Any, **kwargs: Any) -> Any:
        joplin = connect(ctx)
        try:
            return handler(joplin, *args, **kwargs)
        except JoplinApiError as exc:
            raise click.ClickException(str(exc)) from exc
        except httpx.HTTPError as exc:
            raise click.ClickException(f"Request error: {exc}") from exc

    return wrapper


def _echo_lines(lines: Sequence[str]) -> None:
    for line in lines:
        click.echo(line)


def _echo_error_row(kind: str, item_id: str, message: str) -> None:
    click.echo(format_row(formats_for(kind), [item_id, f"ERROR: {message}", ""]))


def _echo_listing(kind: str, fetch: Callable[[], Sequence[Any]]) -> None:
    """Print every row ``fetch`` returns; on a failed page print the partial rows first."""
    try:
        items = fetch()
    except PaginationError as exc:
        _echo_lines(render_table(kind, exc.items, header=False))
        raise click.ClickException(f"Listing incomplete: {exc.cause}") from exc
    _echo_lines(render_table(kind, items, header=False))


def _header(title: str, kind: str) -> None:
    click.echo(f"{title}:")
    _echo_lines(render_table(kind, [], header=True))


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Command-line access to the Joplin Data API."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(AppContext)


@cli.group("list")
def list_group() -> None:
    """Joplin list commands."""


@cli.group("delete")
def delete_group() -> None:
    """Joplin delete commands."""


@list_group.command("tags")
@click.option("--duplicates-only", is_flag=True, help="List only duplicate tags.")
@click.option("--order-by", help="Order by specified field.")
@click.option("--order-dir", help="Order by specified direction: ASC or DESC.")
@click.argument("ids", nargs=-1)
@with_client
def list_tags(
    joplin: JoplinClient,
    duplicates_only: bool,
    order_by: str | None,
    order_dir: str | None,
    ids: tuple[str, ...],
) -> None:
    """List tags, all of them or the ones with the given IDs."""
    if duplicates_only and ids:
        raise click.UsageError("--duplicates-only cannot be combined with tag IDs.")
    if duplicates_only:
        try:
            tags = operations.list_tags(joplin, order_by=order_by, order_dir=order_dir)
        except PaginationError as exc:
            raise click.ClickException(f"Listing incomplete: {exc.cause}") from exc
        by_title: dict[str, list[str]] = {}
        for tag in tags:
            by_title.setdefault(tag.title or "", []).append(tag.id or "")
        click.echo("Duplicate tags:")
        for title, tag_ids in by_title.items():
            if len(tag_ids) > 1:
                click.echo(f"{title}: {' '.join(tag_ids)}")
        return

    _header("Tags", "tag")
    if not ids:
        _echo_listing(
            "tag", lambda: operations.list_tags(joplin, order_by=order_by, order_dir=order_dir)
        )
        return

    for tag_id in ids:
        try:
            tag = operations.get_tag(joplin, tag_id)
        except JoplinNotFoundError:
            _echo_error_row("tag", tag_id, "tag not found")
        except JoplinApiError as exc:
            _echo_error_row("tag", tag_id, f"HTTP {exc.status_code}")
        else:
            _echo_lines(render_table("tag", [tag], header=False))


@list_group.command("notes")
@click.option(
    "--by",
    type=click.Choice(["id", "tag"], case_sensitive=False),
    default="id",
    show_default=True,
    help="Treat the given IDs as note IDs or tag IDs.",
)
@click.option("--order-by", help="Order by specified field.")
@click.option("--order-dir", help="Order by specified direction: ASC or DESC.")
@click.argument("ids", nargs=-1)
@with_client
def list_notes(
    joplin: JoplinClient,
    by: str,
    order_by: str | None,
    order_dir: str | None,
    ids: tuple[str, ...],
) -> None:
    """List notes, all of them, by note ID or by tag ID."""
    _header("Notes", "note")
    if not ids:
        _echo_listing(
            "note", lambda: operations.list_notes(joplin, order_by=order_by, order_dir=order_dir)
        )
        return

    for item_id in ids:
        if by.lower() == "tag":
            try:
                notes = operations.list_notes_by_tag(
                    joplin, item_id, order_by=order_by, order_dir=order_dir
                )
            except PaginationError as exc:
                _echo_lines(render_table("note", exc.items, header=False))
                message = "tag not found" if exc.not_found else str(exc.cause)
                _echo_error_row("note", item_id, message)
            else:
                _echo_lines(render_table("note", notes, header=False))
            continue

        try:
            note = operations.get_note(joplin, item_id)
        except JoplinNotFoundError:
            _echo_error_row("note", item_id, "note not found")
        except JoplinApiError as exc:
            _echo_error_row("note", item_id, f"HTTP {exc.status_code}")
        else:
            _echo_lines(render_table("note", [note], header=False))


@list_group.command("folders")
@click.option("--order-by", help="Order by specified field.")
@click.option("--order-dir", help="Order by specified direction: ASC or DESC.")
@with_client
def list_folders(joplin: JoplinClient, order_by: str | None, order_dir: str | None) -> None:
    """List folders (notebooks)."""
    _header("Folders", "folder")
    _echo_listing(
        "folder", lambda: operations.list_folders(joplin, order_by=order_by, order_dir=order_dir)
    )


@delete_group.command("tags")
@click.argument("ids", nargs=-1, required=True)
@with_client
def delete_tags(joplin: JoplinClient, ids: tuple[str, ...]) -> None:
    """Delete tags with the given IDs."""
    for tag_id in ids:
        try:
            operations.delete_tag(joplin, tag_id)
        except JoplinNotFoundError:
            click.echo(f"Could not find tag with ID '{tag_id}'")
        except JoplinApiError as exc:
            click.echo(f"Could not delete tag with ID '{tag_id}': HTTP {exc.status_code}")
        else:
            click.echo(f"Tag with ID '{tag_id}' deleted")


@delete_group.command("notes")
@click.argument("ids", nargs=-1, required=True)
@with_client
def delete_notes(joplin: JoplinClient, ids: tuple[str, ...]) -> None:
    """Delete notes with the given IDs."""
    for note_id in ids:
        try:
            operations.delete_note(joplin, note_id)
        except JoplinNotFoundError:
            click.echo(f"Could not find note with ID '{note_id}'")
        except JoplinApiError as exc:
            click.echo(f"Could not delete note with ID '{note_id}': HTTP {exc.status_code}")
        else:
            click.echo(f"Note with ID '{note_id}' deleted")


@cli.command("search")
@click.argument("query")
@click.option(
    "--type",
    "item_type",
    type=click.Choice([t.value for t in ItemType]),
    help="Only return items of this type.",
)
@click.option("--fields", help="Comma-separated fields to request.")
@with_client
def search(
    joplin: JoplinClient, query: str, item_type: str | None, fields: str | None
) -> None:
    """Full-text search."""
    _header("Results", "search")
    _echo_listing(
        "search",
        lambda: operations.search(joplin, query, item_type=item_type, fields=fields),
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
