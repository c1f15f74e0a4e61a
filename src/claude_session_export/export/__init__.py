"""Output formats for parsed sessions.

This package renders sessions to static HTML, builds the multi-project
archive, and packages output as a gist or a zip file.
"""

from .archive import create_zip_archive, default_zip_name
from .batch import generate_batch_html
from .gist import (
    GistError,
    create_gist,
    gist_id_from_url,
    gist_preview_url,
    inject_gist_preview_js,
)
from .html import NoConversationsError, generate_html, render_message

__all__ = [
    # HTML
    "NoConversationsError",
    "generate_html",
    "generate_batch_html",
    "render_message",
    # Gist
    "GistError",
    "create_gist",
    "gist_id_from_url",
    "gist_preview_url",
    "inject_gist_preview_js",
    # Zip
    "create_zip_archive",
    "default_zip_name",
]
