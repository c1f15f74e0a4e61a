"""Tests for zip packaging of rendered transcripts."""

import zipfile
from datetime import datetime, timezone

from claude_session_export.export import create_zip_archive, default_zip_name
from claude_session_export.parsers import Session, SessionMetadata


class TestDefaultZipName:
    def test_uses_cwd_and_end_time(self):
        end = datetime(2025, 3, 4, 5, 6, tzinfo=timezone.utc)
        session = Session(metadata=SessionMetadata(cwd="/home/u/my-app", end_time=end))
        local = end.astimezone()
        assert default_zip_name(session) == f"my-app-{local:%Y-%m-%d-%H%M}.zip"

    def test_windows_path(self):
        session = Session(metadata=SessionMetadata(cwd="C:\\Users\\u\\proj\\"))
        now = datetime(2025, 1, 2, 3, 4)
        assert default_zip_name(session, now=now) == "proj-2025-01-02-0304.zip"

    def test_no_cwd(self):
        now = datetime(2025, 1, 2, 3, 4)
        assert default_zip_name(Session(), now=now) == "session-2025-01-02-0304.zip"


class TestCreateZipArchive:
    def test_zips_relative_paths(self, tmp_path):
        out = tmp_path / "out"
        out.mkdir()
        (out / "index.html").write_text("index")
        (out / "sub").mkdir()
        (out / "sub" / "page.html").write_text("page")

        zip_path = tmp_path / "dist" / "transcript.zip"
        count = create_zip_archive(out, zip_path)

        assert count == 2
        with zipfile.ZipFile(zip_path) as zf:
            assert sorted(zf.namelist()) == ["index.html", "sub/page.html"]
            assert zf.read("index.html") == b"index"

    def test_zip_inside_output_is_not_included(self, tmp_path):
        out = tmp_path / "out"
        out.mkdir()
        (out / "index.html").write_text("index")
        count = create_zip_archive(out, out / "self.zip")
        assert count == 1
