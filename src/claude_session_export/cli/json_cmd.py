"""Convert a session file or URL."""

from pathlib import Path
from urllib.parse import urlparse

import click
import httpx

from ..api import fetch_url, is_url
from ..parsers import parse_session_bytes, parse_session_file
from .utils import (
    export_session,
    http_error_message,
    normalize_repo_url,
    parse_or_fail,
    resolve_output_dir,
)


@click.command("json")
@click.argument("file_or_url")
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
    help="Auto-name output subdirectory based on filename (uses -o as parent, or current dir).",
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
    help="Include the original session file in the output directory.",
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
def json_cmd(
    file_or_url,
    output,
    output_auto,
    repo,
    gist,
    include_json,
    zip_output,
    open_browser,
):
    """Convert a Claude Code session JSON or JSONL file (or URL) to HTML."""
    source_path = None
    source_bytes = None
    if is_url(file_or_url):
        click.echo(f"Fetching {file_or_url}...")
        try:
            source_bytes = fetch_url(file_or_url)
        except httpx.HTTPError as e:
            raise click.ClickException(http_error_message(e))
        source_name = Path(urlparse(file_or_url).path).name or "session.json"
        session = parse_or_fail(parse_session_bytes, source_bytes, file_or_url)
    else:
        source_path = Path(file_or_url)
        if not source_path.is_file():
            raise click.ClickException(f"File not found: {source_path}")
        source_name = source_path.name
        session = parse_or_fail(parse_session_file, source_path)

    output, auto_open = resolve_output_dir(output, output_auto, Path(source_name).stem)
    export_session(
        session,
        output,
        auto_open=auto_open,
        repo_url=normalize_repo_url(repo),
        gist=gist,
        include_json=include_json,
        zip_output=zip_output,
        open_browser=open_browser,
        source_path=source_path,
        source_name=source_name,
        source_bytes=source_bytes,
    )
