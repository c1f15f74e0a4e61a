"""Batch conversion command for all sessions."""

import webbrowser
from datetime import datetime
from pathlib import Path

import click

from ..config import get_projects_dir
from ..export import generate_batch_html
from ..parsers import find_all_sessions


@click.command("all")
@click.option(
    "-s",
    "--source",
    type=click.Path(exists=True),
    help="Source directory containing Claude projects (default: ~/.claude/projects).",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(),
    default="./claude-archive",
    help="Output directory for the archive (default: ./claude-archive).",
)
@click.option(
    "--include-agents",
    is_flag=True,
    help="Include agent-* session files (excluded by default).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be converted without creating files.",
)
@click.option(
    "--open",
    "open_browser",
    is_flag=True,
    help="Open the generated archive in your default browser.",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Suppress all output except errors.",
)
def all_cmd(source, output, include_agents, dry_run, open_browser, quiet):
    """Convert all local Claude Code sessions to a browsable HTML archive.

    Writes a master index listing every project, an index per project, and
    one transcript directory per session.
    """
    source = Path(source) if source is not None else get_projects_dir()
    if not source.exists():
        raise click.ClickException(f"Source directory not found: {source}")

    output = Path(output)

    if not quiet:
        click.echo(f"Scanning {source}...")

    projects = find_all_sessions(source, include_agents=include_agents)
    if not projects:
        if not quiet:
            click.echo("No sessions found.")
        return

    total_sessions = sum(len(p.sessions) for p in projects)
    if not quiet:
        click.echo(f"Found {len(projects)} projects with {total_sessions} sessions")

    if dry_run:
        if not quiet:
            click.echo("\nDry run - would convert:")
            for project in projects:
                click.echo(
                    f"\n  {project.display_name} ({len(project.sessions)} sessions)"
                )
                for info in project.sessions[:3]:
                    mod_time = datetime.fromtimestamp(info.mtime)
                    click.echo(f"    - {info.session_id} ({mod_time:%Y-%m-%d})")
                if len(project.sessions) > 3:
                    click.echo(f"    ... and {len(project.sessions) - 3} more")
        return

    if not quiet:
        click.echo(f"\nGenerating archive in {output}...")

    def on_progress(project_name, session_id, current, total):
        if not quiet and current % 10 == 0:
            click.echo(f"  Processed {current}/{total} sessions...")

    stats = generate_batch_html(
        source,
        output,
        include_agents=include_agents,
        progress_callback=on_progress,
    )

    if stats["failed_sessions"]:
        click.echo(f"\nWarning: {len(stats['failed_sessions'])} session(s) failed:")
        for failure in stats["failed_sessions"]:
            click.echo(
                f"  {failure['project']}/{failure['session']}: {failure['error']}"
            )

    if not quiet:
        click.echo(
            f"\nGenerated archive with {stats['total_projects']} projects, "
            f"{stats['total_sessions']} sessions"
        )
        if stats["skipped_sessions"]:
            click.echo(
                f"Skipped {stats['skipped_sessions']} session(s) with no prompts"
            )
        click.echo(f"Output: {output.resolve()}")

    if open_browser:
        index_url = (output / "index.html").resolve().as_uri()
        webbrowser.open(index_url)
