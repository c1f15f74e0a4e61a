"""Derive tool statistics, commits, the GitHub repo and index items from conversations."""

import re
from datetime import datetime, timezone

from .models import IndexItem, TextBlock, ToolResultBlock, ToolStats, ToolUseBlock

PROMPTS_PER_PAGE = 5
LONG_TEXT_THRESHOLD = (
    300  # Characters - text blocks at least this long are shown in index
)
INDEX_PROMPT_LENGTH = 200

# Regex to match git commit output: [branch hash] message
COMMIT_PATTERN = re.compile(r"\[[\w\-/]+\s+([a-f0-9]{7,})\]\s+(.+)")

# Regex to detect a GitHub remote in git output (ssh or https, optional .git)
GITHUB_REPO_PATTERN = re.compile(
    r"github\.com[:/]([^/\s\"'<>()]+)/([^/\s\"'<>()]+?)(?:\.git)?(?=[\s/\"'<>()]|$)"
)

# Bucket for each tool name; anything missing counts as "other"
TOOL_BUCKETS = {
    "Bash": "bash_count",
    "Read": "read_count",
    "Write": "write_count",
    "Edit": "edit_count",
    "MultiEdit": "edit_count",
    "Glob": "glob_count",
    "Grep": "grep_count",
}

_STAT_LABELS = (
    ("bash_count", "bash"),
    ("read_count", "read"),
    ("write_count", "write"),
    ("edit_count", "edit"),
    ("glob_count", "glob"),
    ("grep_count", "grep"),
    ("other_count", "other"),
)

_MIN_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)


def analyze_conversation(conversation):
    """Count tool calls and collect long text blocks in a conversation.

    Returns:
        Tuple of (ToolStats, list of long text strings).
    """
    stats = ToolStats()
    long_texts = []

    for message in conversation.messages:
        for block in message.content:
            if isinstance(block, ToolUseBlock):
                bucket = TOOL_BUCKETS.get(block.name, "other_count")
                setattr(stats, bucket, getattr(stats, bucket) + 1)
            elif isinstance(block, TextBlock):
                if len(block.text) >= LONG_TEXT_THRESHOLD:
                    long_texts.append(block.text)

    return stats, long_texts


def extract_tool_result_text(content):
    """Flatten tool_result content to text.

    Strings are returned as-is, a list of objects is joined from each
    object's ``text`` field, anything else is empty.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "\n".join(
            item["text"]
            for item in content
            if isinstance(item, dict) and isinstance(item.get("text"), str)
        )
    return ""


def _tool_result_texts(messages):
    for message in messages:
        for block in message.content:
            if isinstance(block, ToolResultBlock):
                yield message, extract_tool_result_text(block.content)


def find_commits(text):
    """Return (hash, message) pairs for each git commit line in text."""
    commits = []
    for line in text.split("\n"):
        match = COMMIT_PATTERN.search(line)
        if match:
            commits.append((match.group(1), match.group(2).strip()))
    return commits


def extract_commits(messages):
    """Find git commit output in tool results.

    Returns:
        List of (hash, message, timestamp) tuples, one per matching line.
    """
    commits = []
    for message, text in _tool_result_texts(messages):
        for commit_hash, commit_message in find_commits(text):
            commits.append((commit_hash, commit_message, message.timestamp))
    return commits


def github_repo_url(text):
    """Return the canonical https URL of the first GitHub remote in text, or None."""
    match = GITHUB_REPO_PATTERN.search(text)
    if not match:
        return None
    owner, repo = match.group(1), match.group(2).rstrip(".,")
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not repo:
        return None
    return f"https://github.com/{owner}/{repo}"


def detect_github_repo(messages):
    """
    Detect the GitHub repo from git output in tool results.

    Matches both ``git@github.com:owner/repo.git`` and
    ``https://github.com/owner/repo`` style references, including the
    ``github.com/owner/repo/pull/new/branch`` hint printed by git push.

    Returns the first detected repo as https://github.com/owner/repo, or None.
    """
    for _, text in _tool_result_texts(messages):
        url = github_repo_url(text)
        if url:
            return url
    return None


def truncate_text(text, max_length):
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def message_anchor(conversation_index):
    return f"msg-{conversation_index}"


def page_for_conversation(conversation_index):
    return conversation_index // PROMPTS_PER_PAGE + 1


def _sort_key(item):
    return item.timestamp or _MIN_TIMESTAMP


def build_index_items(conversations, repo_url=None):
    """Build the chronological index of prompts and commits.

    Items without a timestamp sort first; ties keep their original order.

    Args:
        conversations: Conversations in session order.
        repo_url: Optional https GitHub URL used to link commit items.

    Returns:
        List of IndexItem sorted by timestamp.
    """
    items = []
    for i, conversation in enumerate(conversations):
        stats, long_texts = analyze_conversation(conversation)
        items.append(
            IndexItem(
                kind="prompt",
                timestamp=conversation.timestamp,
                text=truncate_text(conversation.user_text, INDEX_PROMPT_LENGTH),
                page_num=page_for_conversation(i),
                message_id=message_anchor(i),
                stats=stats,
                long_texts=long_texts,
            )
        )

    for conversation in conversations:
        for commit_hash, commit_message, timestamp in extract_commits(
            conversation.messages
        ):
            items.append(
                IndexItem(
                    kind="commit",
                    timestamp=timestamp,
                    commit_hash=commit_hash,
                    commit_message=commit_message,
                    repo_url=repo_url,
                )
            )

    items.sort(key=_sort_key)
    return items


def format_tool_stats(stats):
    """Format tool counts into a concise summary string, busiest first."""
    if stats is None:
        return ""

    counts = [
        (getattr(stats, attr), label)
        for attr, label in _STAT_LABELS
        if getattr(stats, attr)
    ]
    counts.sort(key=lambda x: -x[0])
    return " · ".join(f"{count} {label}" for count, label in counts)
