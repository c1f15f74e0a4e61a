"""Local session selection and conversion command."""

import click
import questionary

from ..config import get_projects_dir
from ..parsers import find_local_sessions, load_session_summaries, parse_session_file
from .utils import (
    export_session,
    format_session_choice,
    normalize_repo_url,
    parse_or_fail,
    resolve_output_dir,
)


@click.command("local")
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
    help="Auto-name output subdirectory based on session filename (uses -o as parent, or current dir).",
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
    help="Include the original JSONL session file in the output directory.",
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
@click.option(
    "--limit",
    default=10,
    help="Maximum number of sessions to show (default: 10).",
)
def local_cmd(
    output, output_auto, repo, gist, include_json, zip_output, open_browser, limit
):
    """Select and convert a local Claude Code session to HTML."""
    projects_folder = get_projects_dir()

    if not projects_folder.exists():
        click.echo(f"Projects folder not found: {projects_folder}")
        click.echo("No local Claude Code sessions available.")
        return

    click.echo("Loading local sessions...")
    sessions = find_local_sessions(projects_folder, limit=limit)
    if not sessions:
        click.echo("No local sessions found.")
        return
    load_session_summaries(sessions)

    choices = [
        questionary.Choice(title=format_session_choice(info), value=info)
        for info in sessions
    ]
    selected = questionary.select(
        "Select a session to convert:",
        choices=choices,
    ).ask()

    if selected is None:
        click.echo("No session selected.")
        return

    session = parse_or_fail(parse_session_file, selected.path)
    output, auto_open = resolve_output_dir(output, output_auto, selected.path.stem)
    export_session(
        session,
        output,
        auto_open=auto_open,
        repo_url=normalize_repo_url(repo),
        gist=gist,
        include_json=include_json,
        zip_output=zip_output,
        open_browser=open_browser,
        source_path=selected.path,
    )
