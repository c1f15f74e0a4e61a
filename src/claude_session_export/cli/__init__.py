"""CLI commands for claude-session-export."""

import logging

import click
from click_default_group import DefaultGroup

from .all import all_cmd
from .json_cmd import json_cmd
from .local import local_cmd
from .open_cmd import open_cmd
from .search import search_cmd
from .utils import (
    export_session,
    normalize_repo_url,
    resolve_credentials,
    resolve_output_dir,
)
from .web import web_cmd


@click.group(cls=DefaultGroup, default="local", default_if_no_args=True)
@click.version_option(None, "-v", "--version", package_name="claude-session-export")
@click.option("--debug", is_flag=True, help="Log parsing and rendering details.")
def cli(debug):
    """Convert Claude Code sessions to paginated HTML transcripts.

    Export a single session from disk, a URL or the Claude API, search your
    local sessions, or batch export everything to a browsable archive.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register commands
cli.add_command(local_cmd, "local")
cli.add_command(json_cmd, "json")
cli.add_command(web_cmd, "web")
cli.add_command(search_cmd, "search")
cli.add_command(all_cmd, "all")
cli.add_command(open_cmd, "open")


def main():
    cli()


__all__ = [
    "cli",
    "main",
    "local_cmd",
    "json_cmd",
    "web_cmd",
    "search_cmd",
    "all_cmd",
    "open_cmd",
    "export_session",
    "normalize_repo_url",
    "resolve_credentials",
    "resolve_output_dir",
]
