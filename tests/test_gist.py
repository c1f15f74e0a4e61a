"""Tests for gist publishing."""

import subprocess

import pytest

from claude_session_export.export import (
    GistError,
    create_gist,
    gist_id_from_url,
    gist_preview_url,
    inject_gist_preview_js,
)
from claude_session_export.export.gist import GIST_PREVIEW_JS, is_gist_id


@pytest.fixture
def output_dir(tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    (out / "index.html").write_text("<html><body><p>hi</p></body></html>")
    (out / "page-001.html").write_text("<html><body><p>page</p></body></html>")
    (out / "nested").mkdir()
    (out / "nested" / "skip.txt").write_text("x")
    return out


class TestInjectGistPreviewJs:
    def test_injects_before_body_close(self, output_dir):
        inject_gist_preview_js(output_dir)
        content = (output_dir / "index.html").read_text()
        assert GIST_PREVIEW_JS in content
        assert content.index(GIST_PREVIEW_JS) < content.index("</body>")

    def test_idempotent(self, output_dir):
        inject_gist_preview_js(output_dir)
        inject_gist_preview_js(output_dir)
        content = (output_dir / "page-001.html").read_text()
        assert content.count("gisthost.github.io") == 1


class TestCreateGist:
    def test_runs_gh_and_parses_url(self, output_dir, monkeypatch):
        calls = []

        def mock_run(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(
                cmd, 0, stdout="https://gist.github.com/alice/abc123def\n", stderr=""
            )

        monkeypatch.setattr(subprocess, "run", mock_run)
        gist_id, gist_url = create_gist(output_dir)

        assert gist_id == "abc123def"
        assert gist_url == "https://gist.github.com/alice/abc123def"
        cmd = calls[0]
        assert cmd[:3] == ["gh", "gist", "create"]
        assert str(output_dir / "index.html") in cmd
        assert str(output_dir / "page-001.html") in cmd
        assert "--public" not in cmd
        assert not any("skip.txt" in arg for arg in cmd)

    def test_public_flag(self, output_dir, monkeypatch):
        calls = []

        def mock_run(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(
                cmd, 0, stdout="https://gist.github.com/abc\n", stderr=""
            )

        monkeypatch.setattr(subprocess, "run", mock_run)
        create_gist(output_dir, public=True)
        assert "--public" in calls[0]

    def test_gh_failure(self, output_dir, monkeypatch):
        def mock_run(cmd, **kwargs):
            raise subprocess.CalledProcessError(1, cmd, stderr="not logged in")

        monkeypatch.setattr(subprocess, "run", mock_run)
        with pytest.raises(GistError, match="not logged in"):
            create_gist(output_dir)

    def test_gh_missing(self, output_dir, monkeypatch):
        def mock_run(cmd, **kwargs):
            raise FileNotFoundError("gh")

        monkeypatch.setattr(subprocess, "run", mock_run)
        with pytest.raises(GistError, match="gh CLI not found"):
            create_gist(output_dir)

    def test_no_html(self, tmp_path):
        (tmp_path / "notes.txt").write_text("x")
        with pytest.raises(GistError):
            create_gist(tmp_path)


class TestGistUrls:
    def test_id_from_url(self):
        assert gist_id_from_url("https://gist.github.com/alice/abc123") == "abc123"
        assert gist_id_from_url("https://gist.github.com/abc123/") == "abc123"
        assert gist_id_from_url("abc123") == "abc123"

    def test_preview_url(self):
        assert gist_preview_url("abc123") == "https://gisthost.github.io/?abc123/index.html"
        assert (
            gist_preview_url("abc123", "page-002.html")
            == "https://gisthost.github.io/?abc123/page-002.html"
        )

    def test_is_gist_id(self):
        assert is_gist_id("abc123DEF")
        assert not is_gist_id("not-a-gist")
