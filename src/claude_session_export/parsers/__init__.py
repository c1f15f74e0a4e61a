"""Session and content parsing utilities.

This package turns raw session files into a typed Session model, groups
messages into conversations, derives statistics and index entries, and
discovers and searches sessions across projects.
"""

from .analysis import (
    COMMIT_PATTERN,
    GITHUB_REPO_PATTERN,
    LONG_TEXT_THRESHOLD,
    PROMPTS_PER_PAGE,
    analyze_conversation,
    build_index_items,
    detect_github_repo,
    extract_commits,
    extract_tool_result_text,
    format_tool_stats,
)
from .conversations import group_conversations
from .detect import JSON, JSONL, detect_format
from .discovery import (
    ProjectInfo,
    SessionInfo,
    find_all_sessions,
    find_local_sessions,
    format_project_name,
    get_session_details,
    load_session_summaries,
)
from .models import (
    Conversation,
    ImageBlock,
    IndexItem,
    Message,
    Session,
    SessionMetadata,
    TextBlock,
    ThinkingBlock,
    TodoItem,
    TokenUsage,
    ToolInput,
    ToolResultBlock,
    ToolStats,
    ToolUseBlock,
    UnknownBlock,
)
from .search import SearchMatch, SearchResult, extract_snippet, search_sessions
from .session import (
    SessionParseError,
    extract_text,
    parse_session_bytes,
    parse_session_file,
    parse_tool_input,
)

__all__ = [
    # Model
    "Conversation",
    "ImageBlock",
    "IndexItem",
    "Message",
    "Session",
    "SessionMetadata",
    "TextBlock",
    "ThinkingBlock",
    "TodoItem",
    "TokenUsage",
    "ToolInput",
    "ToolResultBlock",
    "ToolStats",
    "ToolUseBlock",
    "UnknownBlock",
    # Parsing
    "JSON",
    "JSONL",
    "SessionParseError",
    "detect_format",
    "extract_text",
    "parse_session_bytes",
    "parse_session_file",
    "parse_tool_input",
    # Grouping and analysis
    "COMMIT_PATTERN",
    "GITHUB_REPO_PATTERN",
    "LONG_TEXT_THRESHOLD",
    "PROMPTS_PER_PAGE",
    "analyze_conversation",
    "build_index_items",
    "detect_github_repo",
    "extract_commits",
    "extract_tool_result_text",
    "format_tool_stats",
    "group_conversations",
    # Discovery and search
    "ProjectInfo",
    "SearchMatch",
    "SearchResult",
    "SessionInfo",
    "extract_snippet",
    "find_all_sessions",
    "find_local_sessions",
    "format_project_name",
    "get_session_details",
    "load_session_summaries",
    "search_sessions",
]
