"""Search local sessions and export a match."""

import click
import questionary

from ..config import get_projects_dir
from ..parsers import (
    format_project_name,
    load_session_summaries,
    parse_session_file,
    search_sessions,
)
from .utils import (
    export_session,
    format_session_choice,
    parse_or_fail,
    resolve_output_dir,
)


@click.command("search")
@click.argument("query")
@click.option(
    "-o",
    "--output",
    type=click.Path(),
    help="Output directory for the chosen session (default: temp dir, opened in browser).",
)
@click.option(
    "--include-agents",
    is_flag=True,
    help="Include agent-* session files (excluded by default).",
)
@click.option(
    "--max-matches",
    default=3,
    help="Snippets to show per session (default: 3).",
)
@click.option(
    "--no-export",
    is_flag=True,
    help="Only list matches, don't offer to export one.",
)
def search_cmd(query, output, include_agents, max_matches, no_export):
    """Find local sessions whose messages contain QUERY (case-insensitive)."""
    projects_folder = get_projects_dir()
    if not projects_folder.exists():
        raise click.ClickException(f"Projects folder not found: {projects_folder}")

    click.echo(f"Searching {projects_folder} for {query!r}...")
    results = search_sessions(query, projects_folder, include_agents=include_agents)
    if not results:
        click.echo("No matching sessions.")
        return

    load_session_summaries([r.session for r in results])
    click.echo(f"Found {len(results)} matching session(s)\n")
    for result in results:
        info = result.session
        click.echo(
            f"{format_project_name(info.project_name)} / {info.session_id}"
            f"  ({len(result.matches)} matches)"
        )
        for match in result.matches[:max_matches]:
            click.echo(f"  [{match.role}] {match.text}")

    if no_export:
        return

    choices = [
        questionary.Choice(title=format_session_choice(r.session), value=r.session)
        for r in results
    ]
    selected = questionary.select("Export a session?", choices=choices).ask()
    if selected is None:
        return

    session = parse_or_fail(parse_session_file, selected.path)
    output, auto_open = resolve_output_dir(output, False, selected.path.stem)
    export_session(session, output, auto_open=auto_open)
