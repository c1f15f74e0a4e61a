"""Tests for HTML rendering of sessions."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from claude_session_export.export import (
    NoConversationsError,
    generate_html,
    render_message,
)
from claude_session_export.export.html import (
    format_duration,
    format_model_name,
    format_timestamp,
    format_token_count,
    render_content_block,
    render_tool_use,
    session_metadata_rows,
)
from claude_session_export.parsers import (
    ImageBlock,
    Message,
    Session,
    SessionMetadata,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    UnknownBlock,
    parse_session_bytes,
    parse_session_file,
)

from conftest import assistant_entry, user_entry


class TestFormatting:
    def test_format_timestamp(self):
        ts = datetime(2024, 1, 2, 15, 4, tzinfo=timezone.utc)
        assert format_timestamp(ts) == "Jan 2, 2024 3:04 PM"
        assert format_timestamp(None) == ""

    def test_format_timestamp_midnight(self):
        ts = datetime(2024, 3, 9, 0, 30, tzinfo=timezone.utc)
        assert format_timestamp(ts) == "Mar 9, 2024 12:30 AM"

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(seconds=40), "40s"),
            (timedelta(minutes=12, seconds=5), "12m"),
            (timedelta(hours=2, minutes=5), "2h 5m"),
        ],
    )
    def test_format_duration(self, delta, expected):
        assert format_duration(delta) == expected

    def test_format_token_count(self):
        assert format_token_count(999) == "999"
        assert format_token_count(12_300) == "12.3k"
        assert format_token_count(2_500_000) == "2.5M"

    def test_format_model_name(self):
        assert format_model_name("claude-sonnet-4-5-20250929") == "sonnet-4-5"
        assert format_model_name("custom-model") == "custom-model"


class TestSessionMetadataRows:
    def test_all_rows(self):
        meta = SessionMetadata(
            cwd="/work/demo",
            git_branch="main",
            version="2.0.1",
            models=["claude-opus-4-20250514"],
            total_input_tokens=1500,
            total_output_tokens=20,
            total_cache_tokens=0,
            start_time=datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc),
            end_time=datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc),
            active_time=timedelta(minutes=15),
        )
        rows = {row["label"]: row for row in session_metadata_rows(meta)}
        assert rows["Duration"]["values"] == ["15m"]
        assert rows["Duration"]["note"] == "(2h 0m total)"
        assert rows["Models"]["values"] == ["opus-4"]
        assert rows["Tokens"]["values"] == ["1.5k in", "20 out"]
        assert rows["Directory"]["values"] == ["/work/demo"]
        assert rows["Branch"]["values"] == ["main"]
        assert rows["Version"]["values"] == ["2.0.1"]

    def test_empty_metadata(self):
        assert session_metadata_rows(SessionMetadata()) == []


class TestRenderContentBlock:
    def test_markdown_text(self):
        html = render_content_block(TextBlock(text="**bold**"))
        assert "<strong>bold</strong>" in html

    def test_thinking(self):
        html = render_content_block(ThinkingBlock(text="pondering"))
        assert 'class="thinking"' in html
        assert "pondering" in html

    def test_image(self):
        html = render_content_block(ImageBlock(media_type="image/jpeg", data="QUJD"))
        assert "data:image/jpeg;base64,QUJD" in html

    def test_unknown_and_empty_render_nothing(self):
        assert render_content_block(UnknownBlock(type="mystery")) == ""
        assert render_content_block(TextBlock(text="")) == ""

    def test_tool_result_commit_card_links_repo(self):
        block = ToolResultBlock(content="[main abc1234def] Fix bug")
        html = render_content_block(block, "https://github.com/acme/demo")
        assert 'href="https://github.com/acme/demo/commit/abc1234def"' in html
        assert "Fix bug" in html

    def test_tool_result_commit_without_repo(self):
        html = render_content_block(ToolResultBlock(content="[main abc1234] Fix"))
        assert "/commit/" not in html
        assert "abc1234" in html

    def test_tool_result_truncated(self):
        html = render_content_block(ToolResultBlock(content="x" * 5000))
        assert "x" * 2000 + "..." in html
        assert "x" * 2001 not in html

    def test_tool_result_error(self):
        html = render_content_block(ToolResultBlock(content="boom", is_error=True))
        assert 'class="tool-result error"' in html

    def test_tool_output_escaped(self):
        html = render_content_block(ToolResultBlock(content="<script>x</script>"))
        assert "<script>x</script>" not in html
        assert "&lt;script&gt;" in html


class TestRenderToolUse:
    def test_bash(self):
        block = ToolUseBlock(
            name="Bash", id="t1", input={"command": "ls -la", "description": "List"}
        )
        html = render_tool_use(block)
        assert "bash-tool" in html
        assert "ls -la" in html
        assert "List" in html

    def test_write_truncates_content(self):
        block = ToolUseBlock(
            name="Write", input={"file_path": "/a.py", "content": "y" * 3000}
        )
        html = render_tool_use(block)
        assert "/a.py" in html
        assert "(truncated)" in html

    def test_edit(self):
        block = ToolUseBlock(
            name="MultiEdit",
            input={"file_path": "/b.py", "old_string": "old", "new_string": "new"},
        )
        html = render_tool_use(block)
        assert "edit-tool" in html
        assert "diff-old" in html
        assert "diff-new" in html

    def test_grep(self):
        block = ToolUseBlock(name="Grep", input={"pattern": "TODO", "path": "src"})
        html = render_tool_use(block)
        assert "TODO" in html
        assert "src" in html

    def test_todo_write(self):
        block = ToolUseBlock(
            name="TodoWrite",
            input={
                "todos": [
                    {"content": "Write tests", "status": "completed"},
                    {"content": "Ship", "status": "in_progress"},
                ]
            },
        )
        html = render_tool_use(block)
        assert "todo-completed" in html
        assert "todo-in_progress" in html
        assert "✓" in html

    def test_generic_tool_shows_json(self):
        block = ToolUseBlock(name="WebFetch", input={"url": "https://example.com"})
        html = render_tool_use(block)
        assert "WebFetch" in html
        assert "https://example.com" in html

    def test_known_tool_with_bad_json_input_falls_back(self):
        block = ToolUseBlock(name="Bash", input="{not json")
        html = render_tool_use(block)
        assert "Bash" in html
        assert "bash-tool" not in html

    def test_known_tool_with_odd_input_shape(self):
        block = ToolUseBlock(name="Read", input=["not", "a", "dict"])
        assert "Unknown file" in render_tool_use(block)


class TestRenderMessage:
    def test_roles(self):
        user = Message(role="user", content=[TextBlock(text="hi")])
        reply = Message(role="user", content=[ToolResultBlock(content="out")])
        assistant = Message(role="assistant", content=[TextBlock(text="yo")])
        assert 'class="message user"' in render_message(user)
        assert 'class="message tool-reply"' in render_message(reply)
        assert 'class="message assistant"' in render_message(assistant)

    def test_empty_message(self):
        assert render_message(Message(role="assistant")) == ""
        assert 'id="msg-3"' in render_message(Message(role="user"), "msg-3")

    def test_timestamp(self):
        message = Message(
            role="user",
            content=[TextBlock(text="hi")],
            timestamp=datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc),
        )
        assert 'datetime="2025-01-01T10:00:00+00:00"' in render_message(message)


class TestGenerateHtml:
    def test_writes_index_and_pages(self, tmp_path, sample_session_file):
        session = parse_session_file(sample_session_file)
        output = tmp_path / "out"
        result = generate_html(session, output)

        assert result["total_prompts"] == 4
        assert result["total_pages"] == 1
        assert result["repo_url"] == "https://github.com/acme/demo"
        assert (output / "index.html").exists()
        assert (output / "page-001.html").exists()

        index = (output / "index.html").read_text()
        assert "4 prompts" in index
        assert "2 tool calls" in index
        assert "1 commits" in index
        assert 'href="page-001.html#msg-0"' in index
        assert "https://github.com/acme/demo/commit/abc1234" in index
        assert "Add a README" in index
        assert "/home/user/projects/demo" in index

        page = (output / "page-001.html").read_text()
        assert 'id="msg-0"' in page
        assert "git push" in page

    def test_pagination(self, tmp_path):
        entries = [user_entry(f"prompt {i}") for i in range(12)]
        session = parse_session_bytes("\n".join(json.dumps(e) for e in entries))
        result = generate_html(session, tmp_path / "out")
        assert result["total_pages"] == 3
        assert sorted(p.name for p in (tmp_path / "out").glob("page-*.html")) == [
            "page-001.html",
            "page-002.html",
            "page-003.html",
        ]
        page2 = (tmp_path / "out" / "page-002.html").read_text()
        assert 'id="msg-5"' in page2
        assert 'href="page-003.html"' in page2

    def test_explicit_repo_url_wins(self, tmp_path, sample_session_file):
        session = parse_session_file(sample_session_file)
        result = generate_html(
            session, tmp_path / "out", repo_url="https://github.com/other/fork"
        )
        assert result["repo_url"] == "https://github.com/other/fork"
        index = (tmp_path / "out" / "index.html").read_text()
        assert "https://github.com/other/fork/commit/abc1234" in index

    def test_no_conversations(self, tmp_path):
        session = Session(messages=[Message(role="assistant")])
        with pytest.raises(NoConversationsError):
            generate_html(session, tmp_path / "out")
        assert not (tmp_path / "out").exists()

    def test_copies_source(self, tmp_path, sample_session_file):
        session = parse_session_file(sample_session_file)
        generate_html(session, tmp_path / "out", source_path=sample_session_file)
        assert (tmp_path / "out" / sample_session_file.name).exists()

    def test_continuation_collapsed(self, tmp_path):
        entries = [
            user_entry("Summary of earlier work", isCompactSummary=True),
            assistant_entry("ok"),
        ]
        session = parse_session_bytes("\n".join(json.dumps(e) for e in entries))
        generate_html(session, tmp_path / "out")
        page = (tmp_path / "out" / "page-001.html").read_text()
        assert 'class="continuation"' in page
