"""CLI entry point for aichat-publish."""

import logging
import re
from datetime import timezone
from pathlib import Path
from typing import Optional

import click
import uvicorn

from .catalog import SessionCatalog
from .core import EmptySessionError, GistError, SessionInfo, SessionNotFoundError
from .export import export_session
from .publish import (
    create_gist,
    default_filename,
    gist_description,
    temp_markdown_path,
    write_markdown,
)

SESSION_ID_PATTERN = re.compile(r"^[a-f0-9-]{36}$")


class SessionGroup(click.Group):
    """Command group that accepts aliases and a bare session id."""

    aliases = {"ls": "list"}

    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))

    def resolve_command(self, ctx, args):
        # `aichat-publish <uuid>` is shorthand for `aichat-publish print <uuid>`
        if args and self.get_command(ctx, args[0]) is None and SESSION_ID_PATTERN.match(args[0]):
            return "print", self.get_command(ctx, "print"), args
        return super().resolve_command(ctx, args)


# ── Table formatting ─────────────────────────────────────────────


def format_date(session: SessionInfo) -> str:
    created = session.created
    if created is None:
        return "N/A"
    return created.astimezone(timezone.utc).date().isoformat()


def truncate(text: str, length: int) -> str:
    """Pad short text to ``length``; cut long text with an ellipsis."""
    if len(text) <= length:
        return text.ljust(length)
    return text[: length - 3] + "..."


def format_sessions_table(sessions: list[SessionInfo], show_session_id: bool = True) -> str:
    """Render sessions as a fixed-width text table."""
    lines = []

    if show_session_id:
        lines.append(
            f"{'#':<4}| {'Session ID':<38}| {'Project':<30}| {'Date':<12}| {'Msgs':<5}| Summary"
        )
        lines.append("-" * 130)
    else:
        lines.append(f"{'#':<4}| {'Project':<35}| {'Date':<12}| {'Msgs':<5}| Summary")
        lines.append("-" * 100)

    for index, session in enumerate(sessions, 1):
        summary = session.summary.replace("\n", " ")
        row = f"{str(index):<4}| "
        if show_session_id:
            row += f"{session.session_id:<38}| {truncate(session.project_path, 30)}| "
        else:
            row += f"{truncate(session.project_path, 35)}| "
        row += f"{format_date(session):<12}| {str(session.message_count):<5}| {summary}"
        lines.append(row)

    lines.append(f"\nTotal: {len(sessions)} sessions")
    return "\n".join(lines)


# ── Shared helpers ───────────────────────────────────────────────


def _render_or_fail(catalog: SessionCatalog, session_id: str) -> tuple[str, str]:
    try:
        return export_session(catalog, session_id)
    except SessionNotFoundError as e:
        raise click.ClickException(
            f"{e}\n\nUse 'aichat-publish list' to see available sessions."
        ) from e
    except EmptySessionError as e:
        raise click.ClickException(str(e)) from e


def _publish_gist(session_id: str, project_path: str, markdown: str, public: bool) -> str:
    temp_file = write_markdown(temp_markdown_path(session_id), markdown)
    try:
        return create_gist(temp_file, gist_description(project_path), public=public)
    except GistError as e:
        raise click.ClickException(
            f"Failed to create gist: {e}\nMake sure you have the gh CLI installed and authenticated."
        ) from e
    finally:
        temp_file.unlink(missing_ok=True)


def _cwd_filter(show_all: bool) -> Optional[str]:
    return None if show_all else str(Path.cwd())


# ── Commands ─────────────────────────────────────────────────────


@click.group(cls=SessionGroup, invoke_without_command=True)
@click.option("--all", "show_all", is_flag=True, help="Include sessions from all projects.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx, show_all: bool, verbose: bool):
    """Export Claude Code sessions to Markdown or GitHub gists.

    Run without a command to pick a session interactively.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["catalog"] = SessionCatalog()
    ctx.obj["show_all"] = show_all

    if ctx.invoked_subcommand is None:
        interactive(ctx.obj["catalog"], show_all)


@main.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include sessions from all projects.")
@click.pass_obj
def list_sessions(obj, show_all: bool):
    """List sessions (current directory by default)."""
    show_all = show_all or obj["show_all"]
    sessions = obj["catalog"].list_sessions(_cwd_filter(show_all))

    if not sessions:
        if show_all:
            click.echo("No sessions found.")
        else:
            click.echo("No sessions found in current directory.")
            click.echo("Use --all to show sessions from all projects.")
        return

    click.echo(format_sessions_table(sessions))


@main.command("print")
@click.argument("session_id")
@click.pass_obj
def print_session(obj, session_id: str):
    """Print a session to stdout as Markdown."""
    _, markdown = _render_or_fail(obj["catalog"], session_id)
    click.echo(markdown, nl=False)


@main.command("export")
@click.argument("session_id")
@click.argument("output_file", required=False)
@click.pass_obj
def export_cmd(obj, session_id: str, output_file: Optional[str]):
    """Export a session to a Markdown file."""
    _, markdown = _render_or_fail(obj["catalog"], session_id)
    path = write_markdown(output_file or default_filename(session_id), markdown)
    click.echo(f"Exported session to: {path}")


@main.command("gist")
@click.argument("session_id")
@click.option("--public", is_flag=True, help="Create a public gist (private by default).")
@click.pass_obj
def gist_cmd(obj, session_id: str, public: bool):
    """Publish a session as a GitHub gist (requires the gh CLI)."""
    project_path, markdown = _render_or_fail(obj["catalog"], session_id)
    url = _publish_gist(session_id, project_path, markdown, public)
    click.echo(f"Created gist: {url}")


@main.command()
@click.option("--port", default=8080, help="Port to serve on.")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
def serve(port: int, host: str):
    """Start the web interface."""
    click.echo(f"Starting aichat-publish on http://{host}:{port}")
    uvicorn.run("aichat_publish.server:app", host=host, port=port, reload=False)


# ── Interactive mode ─────────────────────────────────────────────


def _prompt_for_session(sessions: list[SessionInfo], can_show_all: bool) -> Optional[int]:
    """Ask for a 1-based session number; None means "show all projects"."""
    hint = ", or 'a' to show all projects" if can_show_all else ""
    question = f"Select a session (1-{len(sessions)}{hint})"

    while True:
        answer = click.prompt(question, default="", show_default=False).strip().lower()
        if can_show_all and answer == "a":
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(sessions):
            return int(answer)
        question = f"Please enter 1-{len(sessions)}{hint}"


def interactive(catalog: SessionCatalog, show_all: bool):
    """Pick a session from a table, then export it or publish it as a gist."""
    sessions = catalog.list_sessions(_cwd_filter(show_all))

    if not sessions:
        if show_all:
            click.echo("No sessions found.")
            return
        click.echo("No sessions found in current directory. Showing all sessions.\n")
        show_all = True
        sessions = catalog.list_sessions()
        if not sessions:
            click.echo("No sessions found.")
            return

    click.echo("\nClaude Code Sessions\n")
    click.echo(format_sessions_table(sessions, show_session_id=False))
    click.echo()

    selection = _prompt_for_session(sessions, can_show_all=not show_all)
    if selection is None:
        sessions = catalog.list_sessions()
        click.echo("\nAll Sessions\n")
        click.echo(format_sessions_table(sessions, show_session_id=False))
        click.echo()
        selection = _prompt_for_session(sessions, can_show_all=False)

    selected = sessions[selection - 1]
    click.echo(f"\nSelected: {selected.session_id}")
    click.echo(f"Project: {selected.project_path}")

    click.echo("\nWhat would you like to do?")
    click.echo("  1. Export to file")
    click.echo("  2. Create GitHub gist (private)")
    click.echo("  3. Create GitHub gist (public)")
    action = click.prompt("Choose an action (1-3)", type=click.IntRange(1, 3))

    project_path, markdown = _render_or_fail(catalog, selected.session_id)

    if action == 1:
        filename = click.prompt("Output file", default=default_filename(selected.session_id))
        path = write_markdown(filename, markdown)
        click.echo(f"\nExported session to: {path}")
    else:
        url = _publish_gist(selected.session_id, project_path, markdown, public=action == 3)
        click.echo(f"\nCreated gist: {url}")
