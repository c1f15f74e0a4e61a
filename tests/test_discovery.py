"""Tests for finding local sessions and summarizing them."""

import os

import pytest

from claude_session_export.config import PROJECTS_DIR_ENV, get_projects_dir
from claude_session_export.parsers import (
    SessionParseError,
    find_all_sessions,
    find_local_sessions,
    format_project_name,
    get_session_details,
    load_session_summaries,
)

from conftest import assistant_entry, user_entry, write_jsonl


class TestFindLocalSessions:
    def test_newest_first_and_limit(self, tmp_path):
        for i, name in enumerate(["a", "b", "c"]):
            path = write_jsonl(
                tmp_path / "proj" / f"{name}.jsonl",
                [user_entry(name), assistant_entry("ok")],
            )
            os.utime(path, (1_000_000 + i, 1_000_000 + i))

        sessions = find_local_sessions(tmp_path, limit=2)
        assert [s.session_id for s in sessions] == ["c", "b"]

    def test_limit_none_returns_all(self, projects_dir):
        assert len(find_local_sessions(projects_dir, limit=None)) == 2

    def test_agents_excluded_by_default(self, projects_dir):
        ids = {s.session_id for s in find_local_sessions(projects_dir, limit=0)}
        assert "agent-xyz" not in ids
        ids = {
            s.session_id
            for s in find_local_sessions(projects_dir, limit=0, include_agents=True)
        }
        assert "agent-xyz" in ids

    def test_missing_folder(self, tmp_path):
        assert find_local_sessions(tmp_path / "nope") == []


class TestFindAllSessions:
    def test_grouped_by_project(self, projects_dir):
        projects = find_all_sessions(projects_dir)
        names = {p.name for p in projects}
        assert names == {"-home-user-projects-demo", "-Users-jo-code-other-app"}
        for project in projects:
            assert len(project.sessions) == 1
            assert project.mtime == project.sessions[0].mtime

    def test_display_name(self, projects_dir):
        display = {p.display_name for p in find_all_sessions(projects_dir)}
        assert display == {"demo", "other-app"}


class TestSessionDetails:
    def test_summary_skips_boring_messages(self, tmp_path):
        path = write_jsonl(
            tmp_path / "s.jsonl",
            [
                user_entry("Warmup", timestamp="2025-01-01T09:00:00Z"),
                user_entry("<command-name>/clear</command-name>"),
                user_entry("This session is being continued from a previous one"),
                user_entry("Fix   the\nflaky   test", timestamp="2025-01-01T10:00:00Z"),
                assistant_entry("Done", timestamp="2025-01-01T11:00:00Z"),
            ],
        )
        details = get_session_details(path)
        assert details.summary == "Fix the flaky test"
        assert details.message_count == 5
        assert details.user_message_count == 4
        assert details.start_time.hour == 9
        assert details.end_time.hour == 11

    def test_long_summary_truncated(self, tmp_path):
        path = write_jsonl(
            tmp_path / "s.jsonl", [user_entry("z" * 200), assistant_entry("ok")]
        )
        assert get_session_details(path).summary == "z" * 80 + "..."

    def test_unreadable_file_raises(self, tmp_path):
        with pytest.raises(SessionParseError):
            get_session_details(tmp_path / "missing.jsonl")

    def test_load_summaries_sorts_by_activity(self, tmp_path):
        early = write_jsonl(
            tmp_path / "p" / "early.jsonl",
            [
                user_entry("early", timestamp="2025-01-01T10:00:00Z"),
                assistant_entry("ok", timestamp="2025-01-01T10:00:05Z"),
            ],
        )
        late = write_jsonl(
            tmp_path / "p" / "late.jsonl",
            [
                user_entry("late", timestamp="2025-02-01T10:00:00Z"),
                assistant_entry("ok", timestamp="2025-02-01T10:00:05Z"),
            ],
        )
        # File times disagree with message times
        os.utime(early, (3_000_000_000, 3_000_000_000))
        os.utime(late, (1_000_000, 1_000_000))

        sessions = load_session_summaries(find_local_sessions(tmp_path, limit=0))
        assert [s.summary for s in sessions] == ["late", "early"]


class TestFormatProjectName:
    @pytest.mark.parametrize(
        "folder,expected",
        [
            ("-home-user-projects-myproject", "myproject"),
            ("-Users-name-code-my-app", "my-app"),
            ("-home-user-myproject", "myproject"),
            ("-mnt-c-Users-name-repos-tool", "tool"),
            ("plain", "plain"),
            ("", "(no project)"),
        ],
    )
    def test_names(self, folder, expected):
        assert format_project_name(folder) == expected


class TestConfig:
    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv(PROJECTS_DIR_ENV, str(tmp_path))
        assert get_projects_dir() == tmp_path

    def test_default(self, monkeypatch):
        monkeypatch.delenv(PROJECTS_DIR_ENV, raising=False)
        assert get_projects_dir().parts[-2:] == (".claude", "projects")
