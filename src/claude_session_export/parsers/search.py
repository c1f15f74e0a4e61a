"""Full-text search across local session files."""

import concurrent.futures
import logging
import re
from dataclasses import dataclass, field

from .discovery import find_local_sessions
from .session import SessionParseError, extract_text, parse_session_file

logger = logging.getLogger(__name__)

SNIPPET_CONTEXT_CHARS = 60

_WHITESPACE_RUN = re.compile(r" {2,}")


@dataclass
class SearchMatch:
    text: str  # snippet around the match
    role: str  # role of the message it was found in


@dataclass
class SearchResult:
    session: object  # SessionInfo
    matches: list = field(default_factory=list)


def extract_snippet(text, query, context_chars=SNIPPET_CONTEXT_CHARS):
    """Cut a one-line snippet around the first case-insensitive match of query.

    Up to ``context_chars`` characters are kept on each side of the match.
    An ellipsis marks each side where text was cut off. Returns "" if the
    query does not occur.
    """
    if not query:
        return ""
    match = re.search(re.escape(query), text, re.IGNORECASE)
    if not match:
        return ""

    start = max(match.start() - context_chars, 0)
    end = min(match.end() + context_chars, len(text))

    snippet = text[start:end].replace("\n", " ").replace("\t", " ")
    snippet = _WHITESPACE_RUN.sub(" ", snippet).strip()

    if start > 0:
        snippet = "..." + snippet
    if end < len(text):
        snippet = snippet + "..."
    return snippet


def search_session(session, query):
    """Return a SearchMatch for every message in a parsed Session containing query."""
    matches = []
    for message in session.messages:
        snippet = extract_snippet(extract_text(message), query)
        if snippet:
            matches.append(SearchMatch(text=snippet, role=message.role))
    return matches


def search_session_file(path, query):
    """Parse one session file and search it. Raises SessionParseError."""
    return search_session(parse_session_file(path), query)


def _search_one(info, query):
    try:
        return SearchResult(session=info, matches=search_session_file(info.path, query))
    except SessionParseError as e:
        logger.debug("Skipping %s: %s", info.path, e)
        return None


def search_sessions(query, folder, include_agents=False, max_workers=None):
    """Search every session under folder for query.

    Files are searched in parallel; files that fail to parse are skipped.

    Returns:
        List of SearchResult for sessions with at least one match, most
        recently modified session first.
    """
    sessions = find_local_sessions(folder, limit=None, include_agents=include_agents)
    if not sessions or not query:
        return []

    results = []
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(_search_one, info, query) for info in sessions]
        for future in futures:
            result = future.result()
            if result is not None and result.matches:
                results.append(result)

    results.sort(key=lambda r: r.session.mtime, reverse=True)
    return results
