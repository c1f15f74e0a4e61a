"""Publish rendered transcripts as a GitHub gist.

Uploads go through the ``gh`` CLI. Gists are served as HTML by
gisthost.github.io, which loads files via ``?<gist_id>/<file>`` URLs, so
relative links between pages are rewritten client-side before upload.
"""

import re
import subprocess
from pathlib import Path

GIST_PREVIEW_BASE = "https://gisthost.github.io/"

_GIST_ID_PATTERN = re.compile(r"^[0-9a-fA-F]+$")

# Rewrites page-NNN.html / index.html links to ?<gist_id>/<file> form and
# re-scrolls to the #fragment once the dynamically loaded page is in place.
GIST_PREVIEW_JS = r"""
(function() {
    var hosts = ['gisthost.github.io', 'gistpreview.github.io'];
    if (hosts.indexOf(window.location.hostname) === -1) return;
    var match = window.location.search.match(/^\?([^/&]+)/);
    if (!match) return;
    var gistId = match[1];

    function rewrite(link) {
        var href = link.getAttribute('href');
        if (!href || href.charAt(0) === '?' || href.charAt(0) === '#') return;
        if (/^[a-z]+:/i.test(href) || href.indexOf('//') === 0) return;
        var hashAt = href.indexOf('#');
        var file = hashAt === -1 ? href : href.slice(0, hashAt);
        var hash = hashAt === -1 ? '' : href.slice(hashAt);
        link.setAttribute('href', '?' + gistId + '/' + file + hash);
    }

    function rewriteAll(root) {
        if (root.tagName === 'A') rewrite(root);
        root.querySelectorAll('a[href]').forEach(rewrite);
    }

    rewriteAll(document);
    new MutationObserver(function(mutations) {
        mutations.forEach(function(m) {
            m.addedNodes.forEach(function(node) { if (node.nodeType === 1) rewriteAll(node); });
        });
    }).observe(document.documentElement, { childList: true, subtree: true });

    var attempts = 0;
    (function scrollToHash() {
        if (!window.location.hash) return;
        var target = document.getElementById(window.location.hash.slice(1));
        if (target) { target.scrollIntoView({ block: 'start' }); return; }
        if (++attempts < 10) setTimeout(scrollToHash, 200);
    })();
})();
"""


class GistError(Exception):
    """Raised when a gist can't be created."""

    pass


def inject_gist_preview_js(output_dir):
    """Inject the gist preview script into every HTML file in output_dir."""
    output_dir = Path(output_dir)
    for html_file in sorted(output_dir.glob("*.html")):
        content = html_file.read_text(encoding="utf-8")
        if "</body>" not in content or GIST_PREVIEW_JS in content:
            continue
        content = content.replace(
            "</body>", f"<script>{GIST_PREVIEW_JS}</script>\n</body>", 1
        )
        html_file.write_text(content, encoding="utf-8")


def create_gist(output_dir, public=False):
    """Create a GitHub gist from the files in output_dir.

    Gists are flat, so only top-level files are uploaded.

    Returns:
        Tuple of (gist_id, gist_url).

    Raises:
        GistError: if there is nothing to upload, gh is missing, or gh fails.
    """
    output_dir = Path(output_dir)
    files = sorted(p for p in output_dir.iterdir() if p.is_file())
    if not any(p.suffix == ".html" for p in files):
        raise GistError(f"No HTML files found in {output_dir} to upload.")

    cmd = ["gh", "gist", "create"]
    cmd.extend(str(f) for f in files)
    if public:
        cmd.append("--public")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            timeout=120,
        )
    except subprocess.CalledProcessError as e:
        error_msg = e.stderr.strip() if e.stderr else str(e)
        raise GistError(f"Failed to create gist: {error_msg}") from e
    except subprocess.TimeoutExpired as e:
        raise GistError("Timed out waiting for gh gist create.") from e
    except FileNotFoundError as e:
        raise GistError(
            "gh CLI not found. Install it from https://cli.github.com/ and run 'gh auth login'."
        ) from e

    gist_url = ""
    for line in (result.stdout or "").splitlines():
        if "gist.github.com" in line:
            gist_url = line.strip()
    if not gist_url:
        gist_url = (result.stdout or "").strip()
    if not gist_url:
        raise GistError("gh gist create did not print a gist URL.")

    return gist_id_from_url(gist_url), gist_url


def gist_id_from_url(gist_url):
    """Extract the gist ID from a gist URL (or return a bare ID unchanged)."""
    gist_id = gist_url.strip().rstrip("/").split("/")[-1]
    return gist_id.split("#")[0].split("?")[0]


def gist_preview_url(gist_id, filename="index.html"):
    return f"{GIST_PREVIEW_BASE}?{gist_id}/{filename}"


def is_gist_id(value):
    return bool(_GIST_ID_PATTERN.match(value))
