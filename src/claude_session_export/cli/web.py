"""Web session import command."""

import click
import httpx
import questionary

from ..api import fetch_session, fetch_sessions, format_session_for_display
from ..parsers import parse_session_bytes
from .utils import (
    export_session,
    http_error_message,
    normalize_repo_url,
    parse_or_fail,
    resolve_credentials,
    resolve_output_dir,
)


@click.command("web")
@click.argument("session_id", required=False)
@click.option(
    "-o",
    "--output",
    type=click.Path(),
    help="Output directory. If not specified, writes to temp dir and opens in browser.",
)
@click.option(
    "-a",
    "--output-auto",
    is_flag=True,
    help="Auto-name output subdirectory based on session ID (uses -o as parent, or current dir).",
)
@click.option("--token", help="API access token (auto-detected from keychain on macOS)")
@click.option(
    "--org-uuid", help="Organization UUID (auto-detected from ~/.claude.json)"
)
@click.option(
    "--repo",
    help="GitHub repo (owner/name) for commit links. Auto-detected from git push output if not specified.",
)
@click.option(
    "--gist",
    is_flag=True,
    help="Upload to GitHub Gist and output a gisthost.github.io URL.",
)
@click.option(
    "--json",
    "include_json",
    is_flag=True,
    help="Include the JSON session data in the output directory.",
)
@click.option(
    "--zip",
    "zip_output",
    is_flag=True,
    help="Also write a zip archive of the output directory.",
)
@click.option(
    "--open",
    "open_browser",
    is_flag=True,
    help="Open the generated index.html in your default browser (default if no -o specified).",
)
def web_cmd(
    session_id,
    output,
    output_auto,
    token,
    org_uuid,
    repo,
    gist,
    include_json,
    zip_output,
    open_browser,
):
    """Select and convert a web session from the Claude API to HTML.

    If SESSION_ID is not provided, displays an interactive picker to select a session.
    """
    token, org_uuid = resolve_credentials(token, org_uuid)

    if session_id is None:
        try:
            sessions = fetch_sessions(token, org_uuid)
        except httpx.HTTPError as e:
            raise click.ClickException(http_error_message(e))

        if not sessions:
            raise click.ClickException("No sessions found.")

        choices = [
            questionary.Choice(
                title=format_session_for_display(s), value=s.get("id", "unknown")
            )
            for s in sessions
        ]
        selected = questionary.select(
            "Select a session to import:",
            choices=choices,
        ).ask()

        if selected is None:
            raise click.ClickException("No session selected.")
        session_id = selected

    click.echo(f"Fetching session {session_id}...")
    try:
        data = fetch_session(token, org_uuid, session_id)
    except httpx.HTTPError as e:
        raise click.ClickException(http_error_message(e))

    session = parse_or_fail(parse_session_bytes, data, session_id)
    output, auto_open = resolve_output_dir(output, output_auto, session_id)
    export_session(
        session,
        output,
        auto_open=auto_open,
        repo_url=normalize_repo_url(repo),
        gist=gist,
        include_json=include_json,
        zip_output=zip_output,
        open_browser=open_browser,
        source_name=f"{session_id}.json",
        source_bytes=data,
    )
