"""Open a published gist in the preview host."""

import webbrowser

import click

from ..export import gist_id_from_url, gist_preview_url
from ..export.gist import is_gist_id


@click.command("open")
@click.argument("gist_url")
@click.option(
    "--print-only",
    is_flag=True,
    help="Print the preview URL instead of opening it.",
)
def open_cmd(gist_url, print_only):
    """Open GIST_URL (a gist URL or ID) on gisthost.github.io."""
    gist_id = gist_id_from_url(gist_url)
    if not is_gist_id(gist_id):
        raise click.ClickException(f"Not a gist URL or ID: {gist_url}")

    preview_url = gist_preview_url(gist_id)
    click.echo(f"Preview: {preview_url}")
    if not print_only:
        webbrowser.open(preview_url)
