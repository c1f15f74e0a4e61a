"""Shared helpers for CLI commands."""

import re
import shutil
import tempfile
import webbrowser
from datetime import datetime
from pathlib import Path

import click
import httpx

from ..api import CredentialsError
from ..api import resolve_credentials as _resolve_credentials
from ..export import (
    GistError,
    NoConversationsError,
    create_gist,
    create_zip_archive,
    default_zip_name,
    generate_html,
    gist_preview_url,
    inject_gist_preview_js,
)
from ..parsers import SessionParseError

_OWNER_REPO = re.compile(r"^[\w.\-]+/[\w.\-]+$")


def normalize_repo_url(repo):
    """Turn ``owner/name`` or a GitHub URL into ``https://github.com/owner/name``.

    Returns None for an empty value.

    Raises:
        click.BadParameter: if the value is neither form.
    """
    if not repo:
        return None
    repo = repo.strip().rstrip("/")
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    for prefix in ("https://github.com/", "http://github.com/", "github.com/"):
        if repo.startswith(prefix):
            repo = repo[len(prefix) :]
            break
    if not _OWNER_REPO.match(repo):
        raise click.BadParameter(
            f"Expected owner/name or a github.com URL, got {repo!r}",
            param_hint="--repo",
        )
    return f"https://github.com/{repo}"


def resolve_output_dir(output, output_auto, name):
    """Work out where to write, and whether to open the result by default.

    With -a the output goes to ``<output or .>/<name>``; without -o it goes to
    a temp directory that is opened in the browser afterwards.

    Returns:
        Tuple of (output_dir, auto_open).
    """
    auto_open = output is None and not output_auto
    if output_auto:
        parent_dir = Path(output) if output else Path(".")
        return parent_dir / name, False
    if output is None:
        return Path(tempfile.gettempdir()) / f"claude-session-{name}", auto_open
    return Path(output), auto_open


def resolve_credentials(token, org_uuid):
    """resolve_credentials() with failures reported as click errors."""
    try:
        return _resolve_credentials(token, org_uuid)
    except CredentialsError as e:
        raise click.ClickException(str(e))


def http_error_message(error):
    """Readable text for an httpx error."""
    if isinstance(error, httpx.HTTPStatusError):
        return (
            f"API request failed: {error.response.status_code} {error.response.text}"
        )
    return f"Network error: {error}"


def format_session_choice(info):
    """Picker label for a local session: date, size, summary."""
    when = info.end_time.astimezone() if info.end_time else None
    if when is None:
        when = datetime.fromtimestamp(info.mtime)
    size_kb = info.size / 1024
    summary = info.summary or info.session_id
    return f"{when:%Y-%m-%d %H:%M}  {size_kb:6.0f} KB  {summary}"


def export_session(
    session,
    output,
    auto_open=False,
    repo_url=None,
    gist=False,
    include_json=False,
    zip_output=False,
    open_browser=False,
    source_path=None,
    source_name=None,
    source_bytes=None,
):
    """Render a parsed session and run the requested follow-up steps.

    Args:
        session: Parsed Session.
        output: Output directory.
        auto_open: Open the result when no output location was chosen.
        repo_url: GitHub repo URL for commit links, detected if None.
        gist: Upload the output as a gist and print the preview URL.
        include_json: Copy the source file into the output directory.
        zip_output: Also write a zip archive of the output next to it.
        open_browser: Open index.html in the default browser.
        source_path: Original session file, for include_json.
        source_name: File name to use for the copied session data.
        source_bytes: Raw session data to write instead of copying a file.
    """
    output = Path(output)
    click.echo(f"Generating HTML in {output}/...")
    try:
        result = generate_html(session, output, repo_url=repo_url)
    except NoConversationsError as e:
        raise click.ClickException(str(e))

    if result["repo_url"] and not repo_url:
        click.echo(f"Detected GitHub repo: {result['repo_url']}")
    click.echo(
        f"Output: {output.resolve()} "
        f"({result['total_prompts']} prompts, {result['total_pages']} pages)"
    )

    if include_json and (source_path is not None or source_bytes is not None):
        json_dest = output / (source_name or Path(source_path).name)
        if source_bytes is not None:
            json_dest.write_bytes(source_bytes)
        else:
            shutil.copy2(source_path, json_dest)
        json_size_kb = json_dest.stat().st_size / 1024
        click.echo(f"JSON: {json_dest} ({json_size_kb:.1f} KB)")

    if gist:
        inject_gist_preview_js(output)
        click.echo("Creating GitHub gist...")
        try:
            gist_id, gist_url = create_gist(output)
        except GistError as e:
            raise click.ClickException(str(e))
        click.echo(f"Gist: {gist_url}")
        click.echo(f"Preview: {gist_preview_url(gist_id)}")

    if zip_output:
        zip_path = output.parent / default_zip_name(session)
        count = create_zip_archive(output, zip_path)
        click.echo(f"Zip: {zip_path} ({count} files)")

    if open_browser or (auto_open and not gist):
        index_url = (output / "index.html").resolve().as_uri()
        webbrowser.open(index_url)

    return result


def parse_or_fail(parse, *args):
    """Call a parser, reporting SessionParseError as a click error."""
    try:
        return parse(*args)
    except SessionParseError as e:
        raise click.ClickException(str(e))
