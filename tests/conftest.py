"""Pytest configuration and fixtures for claude-session-export tests."""

import json
import webbrowser

import pytest


@pytest.fixture(autouse=True)
def mock_webbrowser_open(monkeypatch):
    """Automatically mock webbrowser.open to prevent browsers opening during tests."""
    opened_urls = []

    def mock_open(url):
        opened_urls.append(url)
        return True

    # Patch the stdlib webbrowser.open directly
    monkeypatch.setattr(webbrowser, "open", mock_open)
    return opened_urls


def write_jsonl(path, entries):
    """Write entries as JSONL, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(json.dumps(e) for e in entries) + "\n", encoding="utf-8")
    return path


def user_entry(text, timestamp="2025-01-01T10:00:00Z", **extra):
    entry = {
        "timestamp": timestamp,
        "message": {"role": "user", "content": text},
    }
    entry.update(extra)
    return entry


def assistant_entry(content, timestamp="2025-01-01T10:00:05Z", **extra):
    if isinstance(content, str):
        content = [{"type": "text", "text": content}]
    entry = {
        "timestamp": timestamp,
        "message": {"role": "assistant", "content": content},
    }
    entry.update(extra)
    return entry


def tool_result_entry(tool_use_id, content, timestamp="2025-01-01T10:00:10Z"):
    return {
        "timestamp": timestamp,
        "message": {
            "role": "user",
            "content": [
                {"type": "tool_result", "tool_use_id": tool_use_id, "content": content}
            ],
        },
    }


@pytest.fixture
def sample_entries():
    """A short session: two prompts, a Bash call, a commit and a push."""
    return [
        user_entry(
            "Add a README",
            cwd="/home/user/projects/demo",
            gitBranch="main",
            version="2.0.1",
        ),
        assistant_entry(
            [
                {"type": "text", "text": "I'll commit the README."},
                {
                    "type": "tool_use",
                    "id": "toolu_1",
                    "name": "Bash",
                    "input": {"command": "git commit -am 'Add README'"},
                },
            ],
            timestamp="2025-01-01T10:00:05Z",
        ),
        tool_result_entry(
            "toolu_1",
            "[main abc1234] Add README\n 1 file changed",
            timestamp="2025-01-01T10:00:10Z",
        ),
        user_entry("Now push it", timestamp="2025-01-01T10:02:00Z"),
        assistant_entry(
            [
                {
                    "type": "tool_use",
                    "id": "toolu_2",
                    "name": "Bash",
                    "input": {"command": "git push"},
                }
            ],
            timestamp="2025-01-01T10:02:05Z",
        ),
        tool_result_entry(
            "toolu_2",
            "To github.com:acme/demo.git\n   1111111..abc1234  main -> main",
            timestamp="2025-01-01T10:02:10Z",
        ),
    ]


@pytest.fixture
def sample_session_file(tmp_path, sample_entries):
    return write_jsonl(tmp_path / "session-1.jsonl", sample_entries)


@pytest.fixture
def projects_dir(tmp_path, sample_entries):
    """A fake ~/.claude/projects folder with two projects."""
    root = tmp_path / "projects"
    write_jsonl(root / "-home-user-projects-demo" / "abc.jsonl", sample_entries)
    write_jsonl(
        root / "-home-user-projects-demo" / "agent-xyz.jsonl",
        [user_entry("agent work"), assistant_entry("Agent done")],
    )
    write_jsonl(
        root / "-Users-jo-code-other-app" / "def.jsonl",
        [user_entry("Fix the login bug"), assistant_entry("Done")],
    )
    return root
