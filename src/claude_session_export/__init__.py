"""Convert Claude Code session JSON/JSONL to paginated, mobile-friendly HTML."""

from .parsers import (
    PROMPTS_PER_PAGE,
    Conversation,
    IndexItem,
    Message,
    Session,
    SessionParseError,
    build_index_items,
    detect_format,
    detect_github_repo,
    extract_commits,
    extract_snippet,
    extract_text,
    find_all_sessions,
    find_local_sessions,
    group_conversations,
    parse_session_bytes,
    parse_session_file,
    search_sessions,
)

from .export import (
    GistError,
    NoConversationsError,
    create_gist,
    create_zip_archive,
    generate_batch_html,
    generate_html,
    inject_gist_preview_js,
)

from .cli import cli, main

__all__ = [
    # Parsing
    "PROMPTS_PER_PAGE",
    "Conversation",
    "IndexItem",
    "Message",
    "Session",
    "SessionParseError",
    "build_index_items",
    "detect_format",
    "detect_github_repo",
    "extract_commits",
    "extract_snippet",
    "extract_text",
    "find_all_sessions",
    "find_local_sessions",
    "group_conversations",
    "parse_session_bytes",
    "parse_session_file",
    "search_sessions",
    # Export
    "GistError",
    "NoConversationsError",
    "create_gist",
    "create_zip_archive",
    "generate_batch_html",
    "generate_html",
    "inject_gist_preview_js",
    # CLI
    "cli",
    "main",
]
