"""HTML generation for Claude Code session transcripts.

This module renders a parsed Session as a set of static pages: ``index.html``
with session metadata and a chronological index of prompts and commits, and
``page-NNN.html`` files holding the full conversations, five per page.
"""

import json
import logging
import re
import shutil
from pathlib import Path

import markdown
from jinja2 import Environment, PackageLoader

from ..parsers import (
    PROMPTS_PER_PAGE,
    ImageBlock,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    build_index_items,
    detect_github_repo,
    extract_tool_result_text,
    format_tool_stats,
    group_conversations,
    parse_tool_input,
)
from ..parsers.analysis import analyze_conversation, find_commits, message_anchor

logger = logging.getLogger(__name__)

# Set up Jinja2 environment
_jinja_env = Environment(
    loader=PackageLoader("claude_session_export", "templates"),
    autoescape=True,
)

MAX_TRUNCATED_LENGTH = 2000

# Wall-clock span must exceed active time by this much before it is shown
_SPAN_NOTE_SLACK_SECONDS = 5 * 60

_MODEL_DATE_SUFFIX = re.compile(r"-\d{8}$")


CSS = """
:root { --bg: #f6f7f9; --card: #ffffff; --text: #1f2328; --muted: #6e7781; --accent: #0969da; --user-bg: #ddf4ff; --assistant-border: #8c959f; --thinking-bg: #fff8c5; --thinking-border: #d4a72c; --tool-bg: #fbefff; --tool-border: #8250df; --result-bg: #dafbe1; --result-border: #2da44e; --error-bg: #ffebe9; --error-border: #cf222e; --code-bg: #24292f; --code-text: #e6edf3; }
* { box-sizing: border-box; }
body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Helvetica, Arial, sans-serif; background: var(--bg); color: var(--text); margin: 0; padding: 16px; line-height: 1.55; }
.container { max-width: 860px; margin: 0 auto; }
h1 { font-size: 1.4rem; margin: 0 0 20px 0; padding-bottom: 8px; border-bottom: 2px solid var(--accent); }
.home-link { color: inherit; text-decoration: none; }
.header-row { display: flex; justify-content: space-between; align-items: center; flex-wrap: wrap; gap: 12px; border-bottom: 2px solid var(--accent); margin-bottom: 16px; }
.header-row h1 { border-bottom: none; margin: 0; padding-bottom: 8px; }
.stats { color: var(--muted); font-size: 0.9rem; }
.message { background: var(--card); margin-bottom: 14px; border-radius: 10px; overflow: hidden; box-shadow: 0 1px 2px rgba(0,0,0,0.08); border-left: 4px solid var(--assistant-border); }
.message.user { background: var(--user-bg); border-left-color: var(--accent); }
.message.tool-reply { border-left-color: var(--result-border); }
.message.other { border-left-color: var(--muted); }
.message:target { outline: 2px solid var(--accent); }
.message-header { display: flex; justify-content: space-between; align-items: center; padding: 6px 14px; background: rgba(0,0,0,0.03); font-size: 0.82rem; }
.role-label { font-weight: 600; text-transform: uppercase; letter-spacing: 0.4px; }
time { color: var(--muted); font-size: 0.8rem; }
.timestamp-link { color: inherit; text-decoration: none; }
.message-content { padding: 14px; }
.message-content pre, .tool-use pre, .tool-result pre { background: var(--code-bg); color: var(--code-text); padding: 10px 12px; border-radius: 6px; overflow-x: auto; font-size: 0.82rem; white-space: pre-wrap; word-wrap: break-word; margin: 8px 0 0 0; }
.message-content code { font-size: 0.9em; }
.message-content table { border-collapse: collapse; margin: 10px 0; }
.message-content th, .message-content td { border: 1px solid #d0d7de; padding: 6px 10px; }
.thinking { background: var(--thinking-bg); border: 1px solid var(--thinking-border); border-radius: 8px; padding: 10px 12px; margin: 10px 0; font-size: 0.9rem; color: var(--muted); }
.thinking-label { font-size: 0.72rem; font-weight: 600; text-transform: uppercase; margin-bottom: 6px; }
.tool-use { background: var(--tool-bg); border: 1px solid var(--tool-border); border-radius: 8px; padding: 10px 12px; margin: 10px 0; }
.tool-header { font-size: 0.88rem; }
.tool-name { font-weight: 600; color: var(--tool-border); }
.tool-description { color: var(--muted); font-style: italic; }
.file-path { font-family: ui-monospace, SFMono-Regular, Menlo, monospace; }
.diff-label { font-size: 0.72rem; font-weight: 600; text-transform: uppercase; margin-top: 8px; }
.diff-old pre { border-left: 4px solid var(--error-border); }
.diff-new pre { border-left: 4px solid var(--result-border); }
.search-pattern, .search-path { font-size: 0.85rem; margin-top: 4px; }
.todo-list { list-style: none; padding: 0; margin: 8px 0 0 0; }
.todo-item { padding: 3px 0; }
.todo-completed .todo-status { color: var(--result-border); }
.todo-in_progress .todo-status { color: var(--accent); }
.tool-result { background: var(--result-bg); border: 1px solid var(--result-border); border-radius: 8px; padding: 10px 12px; margin: 10px 0; }
.tool-result.error { background: var(--error-bg); border-color: var(--error-border); }
.truncatable { position: relative; }
.truncatable.truncated .truncatable-content { max-height: 240px; overflow: hidden; }
.expand-btn { display: none; margin-top: 6px; padding: 3px 8px; background: transparent; border: 1px solid var(--muted); border-radius: 4px; color: var(--muted); font-size: 0.78rem; cursor: pointer; }
.truncatable.truncated .expand-btn, .truncatable.expanded .expand-btn { display: inline-block; }
.commit-card, .index-item.commit-item { display: flex; align-items: center; gap: 8px; background: var(--code-bg); color: var(--code-text); border-radius: 8px; padding: 8px 12px; margin: 6px 0; }
.commit-hash { font-family: ui-monospace, SFMono-Regular, Menlo, monospace; color: #ff7b72; text-decoration: none; }
.commit-item time { margin-left: auto; color: #8b949e; }
.image-block img { max-width: 100%; height: auto; border-radius: 6px; }
details.continuation { margin-bottom: 14px; }
details.continuation summary { cursor: pointer; color: var(--muted); font-size: 0.88rem; padding: 6px 0; }
.pagination { display: flex; justify-content: center; flex-wrap: wrap; gap: 6px; margin: 20px 0; }
.page-link { padding: 6px 12px; border-radius: 6px; font-size: 0.88rem; text-decoration: none; border: 1px solid var(--accent); color: var(--accent); background: var(--card); }
.page-link.current { background: var(--accent); color: #fff; }
.page-link.disabled { border-color: #d0d7de; color: var(--muted); }
.session-meta { display: flex; flex-wrap: wrap; gap: 8px 20px; background: var(--card); border-radius: 8px; padding: 10px 14px; margin-bottom: 16px; font-size: 0.85rem; }
.meta-label { font-weight: 600; margin-right: 6px; color: var(--muted); }
.meta-value { margin-right: 6px; }
.meta-muted { color: var(--muted); }
.index-item { background: var(--card); border-radius: 8px; padding: 12px 14px; margin-bottom: 10px; box-shadow: 0 1px 2px rgba(0,0,0,0.08); }
.index-item-header { display: flex; justify-content: space-between; gap: 12px; }
.index-item-link { color: var(--text); text-decoration: none; font-weight: 500; }
.index-item-link:hover { color: var(--accent); }
.index-item-stats { margin-top: 6px; font-size: 0.8rem; color: var(--muted); }
.index-long-text { margin-top: 8px; padding: 8px; background: rgba(0,0,0,0.03); border-radius: 4px; font-size: 0.85rem; max-height: 110px; overflow: hidden; }
#search-box { display: flex; gap: 6px; padding-bottom: 8px; }
#search-input, #modal-search-input { padding: 6px 10px; border: 1px solid #d0d7de; border-radius: 6px; font-size: 0.9rem; }
#search-modal { border: none; border-radius: 10px; padding: 18px; width: 90vw; max-width: 640px; max-height: 80vh; }
#search-modal::backdrop { background: rgba(0,0,0,0.45); }
.search-modal-header { display: flex; gap: 6px; margin-bottom: 12px; }
.search-modal-header input { flex: 1; }
#search-status { color: var(--muted); font-size: 0.85rem; margin-bottom: 8px; }
#search-results { max-height: 55vh; overflow-y: auto; }
.search-result { display: block; padding: 8px 4px; border-bottom: 1px solid #eaeef2; color: var(--text); text-decoration: none; }
.search-result-page { font-size: 0.75rem; color: var(--muted); }
.session-list, .project-list { list-style: none; padding: 0; }
.session-item, .project-item { background: var(--card); border-radius: 8px; padding: 10px 14px; margin-bottom: 8px; display: flex; flex-direction: column; }
.session-meta-line { font-size: 0.8rem; color: var(--muted); }
@media (max-width: 600px) { body { padding: 8px; } .message-content { padding: 10px; } .header-row { flex-direction: column; align-items: stretch; } }
"""

JS = """
document.querySelectorAll('time[data-timestamp]').forEach(function(el) {
    var date = new Date(el.getAttribute('data-timestamp'));
    if (isNaN(date)) return;
    el.textContent = date.toLocaleDateString(undefined, { month: 'short', day: 'numeric', year: 'numeric' }) +
        ' ' + date.toLocaleTimeString(undefined, { hour: '2-digit', minute: '2-digit' });
});
document.querySelectorAll('.truncatable').forEach(function(wrapper) {
    var content = wrapper.querySelector('.truncatable-content');
    var btn = wrapper.querySelector('.expand-btn');
    if (!content || !btn || content.scrollHeight <= 260) return;
    wrapper.classList.add('truncated');
    btn.addEventListener('click', function() {
        var expand = wrapper.classList.contains('truncated');
        wrapper.classList.toggle('truncated', !expand);
        wrapper.classList.toggle('expanded', expand);
        btn.textContent = expand ? 'Show less' : 'Show more';
    });
});
"""

# Client-side search on the index page: fetches every page and scans messages.
# Results are built with textContent only.
SEARCH_JS = """
(function() {
    var input = document.getElementById('search-input');
    var modal = document.getElementById('search-modal');
    var modalInput = document.getElementById('modal-search-input');
    var status = document.getElementById('search-status');
    var results = document.getElementById('search-results');
    if (!input || !modal) return;

    function pageName(n) { return 'page-' + String(n).padStart(3, '0') + '.html'; }

    function snippet(text, query) {
        var idx = text.toLowerCase().indexOf(query.toLowerCase());
        var start = Math.max(0, idx - 60);
        var end = Math.min(text.length, idx + query.length + 60);
        return (start > 0 ? '...' : '') + text.slice(start, end).replace(/\\s+/g, ' ').trim() + (end < text.length ? '...' : '');
    }

    async function doSearch(query) {
        query = query.trim();
        results.textContent = '';
        if (!query) return;
        var found = 0;
        for (var page = 1; page <= TOTAL_PAGES; page++) {
            status.textContent = 'Searching page ' + page + ' of ' + TOTAL_PAGES + '...';
            try {
                var resp = await fetch(pageName(page));
                var doc = new DOMParser().parseFromString(await resp.text(), 'text/html');
                var lastAnchor = '';
                doc.querySelectorAll('.message').forEach(function(msg) {
                    if (msg.id) lastAnchor = msg.id;
                    var text = msg.querySelector('.message-content').textContent;
                    if (text.toLowerCase().indexOf(query.toLowerCase()) === -1) return;
                    found++;
                    var link = document.createElement('a');
                    link.className = 'search-result';
                    link.href = pageName(page) + (lastAnchor ? '#' + lastAnchor : '');
                    var label = document.createElement('div');
                    label.className = 'search-result-page';
                    label.textContent = 'Page ' + page;
                    var body = document.createElement('div');
                    body.textContent = snippet(text, query);
                    link.appendChild(label);
                    link.appendChild(body);
                    results.appendChild(link);
                });
            } catch (e) {
                console.error('Search failed for page', page, e);
            }
        }
        status.textContent = found + ' result' + (found === 1 ? '' : 's');
        history.replaceState(null, '', '#search=' + encodeURIComponent(query));
    }

    function openModal(query) {
        modalInput.value = query || '';
        modal.showModal();
        if (query) doSearch(query);
    }

    document.getElementById('search-btn').addEventListener('click', function() { openModal(input.value); });
    input.addEventListener('keydown', function(e) { if (e.key === 'Enter') openModal(input.value); });
    document.getElementById('modal-search-btn').addEventListener('click', function() { doSearch(modalInput.value); });
    modalInput.addEventListener('keydown', function(e) { if (e.key === 'Enter') doSearch(modalInput.value); });
    document.getElementById('modal-close-btn').addEventListener('click', function() { modal.close(); });

    if (location.hash.indexOf('#search=') === 0) {
        openModal(decodeURIComponent(location.hash.slice(8)));
    }
})();
"""

_jinja_env.globals.update(css=CSS, js=JS, search_js=SEARCH_JS)

# Load macros template and expose macros
_macros = _jinja_env.get_template("macros.html").module


class NoConversationsError(Exception):
    """Raised when a session has no user prompts to render."""

    pass


def get_template(name):
    """Get a Jinja2 template by name."""
    return _jinja_env.get_template(name)


def page_filename(page_num):
    return f"page-{page_num:03d}.html"


def render_markdown_text(text):
    if not text:
        return ""
    return markdown.markdown(text, extensions=["fenced_code", "tables"])


def truncate(text, limit=MAX_TRUNCATED_LENGTH):
    """Return (text, was_truncated), cutting text to limit characters."""
    if len(text) <= limit:
        return text, False
    return text[:limit], True


def format_json(obj):
    try:
        formatted = json.dumps(obj, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        formatted = str(obj)
    return formatted


def format_timestamp(ts):
    """Human-readable timestamp in the timestamp's own offset, "" for None."""
    if ts is None:
        return ""
    hour = ts.hour % 12 or 12
    suffix = "AM" if ts.hour < 12 else "PM"
    return f"{ts:%b} {ts.day}, {ts.year} {hour}:{ts.minute:02d} {suffix}"


def iso_timestamp(ts):
    return ts.isoformat() if ts is not None else ""


def format_duration(delta):
    """Format a timedelta as e.g. "2h 5m", "12m" or "40s"."""
    seconds = int(delta.total_seconds())
    if seconds < 60:
        return f"{max(seconds, 0)}s"
    minutes, _ = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_token_count(count):
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}k"
    return str(count)


def format_model_name(model):
    """Shorten a model id: claude-sonnet-4-5-20250929 -> sonnet-4-5."""
    name = _MODEL_DATE_SUFFIX.sub("", model)
    if name.startswith("claude-"):
        name = name[len("claude-") :]
    return name


def session_metadata_rows(meta):
    """Label/value rows for the metadata panel on the index page.

    Returns a list of dicts with ``label``, ``values`` (list of strings) and
    an optional ``note``. Rows with nothing to show are omitted.
    """
    rows = []

    if meta.start_time is not None and meta.end_time is not None:
        note = ""
        span = meta.end_time - meta.start_time
        if span.total_seconds() > (
            meta.active_time.total_seconds() + _SPAN_NOTE_SLACK_SECONDS
        ):
            note = f"({format_duration(span)} total)"
        rows.append(
            {
                "label": "Duration",
                "values": [format_duration(meta.active_time)],
                "note": note,
            }
        )

    if meta.models:
        rows.append(
            {"label": "Models", "values": [format_model_name(m) for m in meta.models]}
        )

    if meta.total_input_tokens or meta.total_output_tokens:
        values = [
            f"{format_token_count(meta.total_input_tokens)} in",
            f"{format_token_count(meta.total_output_tokens)} out",
        ]
        if meta.total_cache_tokens:
            values.append(f"{format_token_count(meta.total_cache_tokens)} cache")
        rows.append({"label": "Tokens", "values": values})

    for label, value in (
        ("Directory", meta.cwd),
        ("Branch", meta.git_branch),
        ("Version", meta.version),
    ):
        if value:
            rows.append({"label": label, "values": [value]})

    return rows


def render_bash_tool(block, tool_input):
    """Render Bash tool calls with command as plain text."""
    return _macros.bash_tool(tool_input.command, tool_input.description, block.id)


def render_write_tool(block, tool_input):
    """Render Write tool calls with file path header and content preview."""
    content, truncated = truncate(tool_input.content)
    return _macros.write_tool(tool_input.file_path, content, truncated, block.id)


def render_edit_tool(block, tool_input):
    """Render Edit and MultiEdit tool calls with an old/new display."""
    return _macros.edit_tool(
        block.name,
        tool_input.file_path,
        tool_input.old_string,
        tool_input.new_string,
        block.id,
    )


def render_read_tool(block, tool_input):
    return _macros.read_tool(tool_input.file_path, block.id)


def render_search_tool(block, tool_input):
    return _macros.search_tool(block.name, tool_input.pattern, tool_input.path, block.id)


def render_todo_write(block, tool_input):
    if not tool_input.todos:
        return ""
    return _macros.todo_list(tool_input.todos, block.id)


def render_generic_tool(block):
    """Fallback for tools without a dedicated renderer: show the input as JSON."""
    tool_input = block.input
    description = ""
    if isinstance(tool_input, dict):
        description = tool_input.get("description", "")
        if not isinstance(description, str):
            description = ""
        tool_input = {k: v for k, v in tool_input.items() if k != "description"}
    input_json = ""
    if tool_input not in (None, {}):
        input_json, truncated = truncate(format_json(tool_input))
        if truncated:
            input_json += "..."
    return _macros.tool_use(block.name or "Unknown tool", description, input_json, block.id)


TOOL_RENDERERS = {
    "Bash": render_bash_tool,
    "Write": render_write_tool,
    "Edit": render_edit_tool,
    "MultiEdit": render_edit_tool,
    "Read": render_read_tool,
    "Glob": render_search_tool,
    "Grep": render_search_tool,
    "TodoWrite": render_todo_write,
}


def render_tool_use(block):
    renderer = TOOL_RENDERERS.get(block.name)
    if renderer is None:
        return render_generic_tool(block)
    try:
        tool_input = parse_tool_input(block.input)
    except ValueError:
        return render_generic_tool(block)
    return renderer(block, tool_input)


def render_tool_result(block, repo_url=None):
    """Render a tool result, with a commit card for each git commit line."""
    text = extract_tool_result_text(block.content)
    commit_cards = "".join(
        _macros.commit_card(commit_hash, commit_message, repo_url)
        for commit_hash, commit_message in find_commits(text)
    )
    text, truncated = truncate(text)
    return _macros.tool_result(text, truncated, commit_cards, block.is_error)


def render_content_block(block, repo_url=None):
    """Render a single content block to HTML. Unknown blocks render nothing."""
    if isinstance(block, TextBlock):
        if not block.text:
            return ""
        return _macros.text_block(render_markdown_text(block.text))
    if isinstance(block, ThinkingBlock):
        if not block.text:
            return ""
        return _macros.thinking(render_markdown_text(block.text))
    if isinstance(block, ToolUseBlock):
        return render_tool_use(block)
    if isinstance(block, ToolResultBlock):
        return render_tool_result(block, repo_url)
    if isinstance(block, ImageBlock):
        if not block.data:
            return ""
        return _macros.image_block(block.media_type, block.data)
    return ""


def is_tool_result_message(message):
    """Check if a message contains only tool_result blocks."""
    return bool(message.content) and all(
        isinstance(block, ToolResultBlock) for block in message.content
    )


def _role_class_and_label(message):
    if message.role == "user":
        if is_tool_result_message(message):
            return "tool-reply", "Tool reply"
        return "user", "User"
    if message.role == "assistant":
        return "assistant", "Assistant"
    return "other", message.role.capitalize() or "Entry"


def render_message(message, anchor_id="", repo_url=None):
    """Render one message. Returns "" for a message with nothing to show,
    unless it carries an anchor the index links to."""
    content_html = "".join(
        render_content_block(block, repo_url) for block in message.content
    )
    if not content_html.strip() and not anchor_id:
        return ""
    role_class, role_label = _role_class_and_label(message)
    return _macros.message(
        role_class,
        role_label,
        anchor_id,
        iso_timestamp(message.timestamp),
        format_timestamp(message.timestamp),
        content_html,
    )


def render_conversation(conversation, conversation_index, repo_url=None):
    parts = []
    for i, message in enumerate(conversation.messages):
        anchor_id = message_anchor(conversation_index) if i == 0 else ""
        msg_html = render_message(message, anchor_id, repo_url)
        if not msg_html:
            continue
        if i == 0 and conversation.is_continuation:
            msg_html = _macros.continuation(msg_html)
        parts.append(msg_html)
    return "".join(parts)


def _render_index_item(item):
    if item.kind == "commit":
        return _macros.index_commit(
            item.commit_hash,
            item.commit_message,
            item.repo_url,
            iso_timestamp(item.timestamp),
            format_timestamp(item.timestamp),
        )
    long_texts_html = "".join(
        _macros.index_long_text(render_markdown_text(text)) for text in item.long_texts
    )
    return _macros.index_item(
        f"{page_filename(item.page_num)}#{item.message_id}",
        item.text,
        iso_timestamp(item.timestamp),
        format_timestamp(item.timestamp),
        format_tool_stats(item.stats),
        long_texts_html,
    )


def generate_html(session, output_dir, repo_url=None, source_path=None):
    """Render a session to ``index.html`` plus ``page-NNN.html`` files.

    Args:
        session: Parsed Session to render.
        output_dir: Directory to write into; created if missing.
        repo_url: https GitHub URL for commit links. Detected from the
            session's tool output when not given.
        source_path: If given, the original session file is copied next to
            the generated pages.

    Returns:
        Dict with output_dir, repo_url, total_prompts and total_pages.

    Raises:
        NoConversationsError: if the session has no user messages.
    """
    output_dir = Path(output_dir)

    if repo_url is None:
        repo_url = detect_github_repo(session.messages)
        if repo_url:
            logger.info("Auto-detected GitHub repo: %s", repo_url)
        else:
            logger.debug("No GitHub repo detected; commit links disabled")

    conversations = group_conversations(session)
    if not conversations:
        raise NoConversationsError("session contains no conversations")

    output_dir.mkdir(parents=True, exist_ok=True)

    total_convs = len(conversations)
    total_pages = (total_convs + PROMPTS_PER_PAGE - 1) // PROMPTS_PER_PAGE

    page_template = get_template("page.html")
    for page_num in range(1, total_pages + 1):
        start = (page_num - 1) * PROMPTS_PER_PAGE
        end = min(start + PROMPTS_PER_PAGE, total_convs)
        messages_html = "".join(
            render_conversation(conversations[i], i, repo_url)
            for i in range(start, end)
        )
        content = page_template.render(
            page_num=page_num,
            total_pages=total_pages,
            messages_html=messages_html,
        )
        (output_dir / page_filename(page_num)).write_text(content, encoding="utf-8")
        logger.debug("Generated %s", page_filename(page_num))

    index_items = build_index_items(conversations, repo_url)
    items_html = "".join(
        _render_index_item(item)
        for item in index_items
        if item.kind == "commit" or item.text.strip()
    )
    total_messages = sum(len(c.messages) for c in conversations)
    total_tool_calls = sum(analyze_conversation(c)[0].total for c in conversations)
    total_commits = sum(1 for item in index_items if item.kind == "commit")

    index_content = get_template("index.html").render(
        total_prompts=total_convs,
        total_messages=total_messages,
        total_tool_calls=total_tool_calls,
        total_commits=total_commits,
        total_pages=total_pages,
        metadata_rows=session_metadata_rows(session.metadata),
        index_items_html=items_html,
    )
    (output_dir / "index.html").write_text(index_content, encoding="utf-8")

    if source_path is not None:
        source_path = Path(source_path)
        shutil.copy2(source_path, output_dir / source_path.name)

    return {
        "output_dir": output_dir,
        "repo_url": repo_url,
        "total_prompts": total_convs,
        "total_pages": total_pages,
    }
