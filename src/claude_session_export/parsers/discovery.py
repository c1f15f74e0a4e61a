"""Session discovery and project management utilities.

This module finds Claude Code session files under the projects folder
(``~/.claude/projects/<encoded-project>/<session-id>.jsonl``), groups them by
project and loads the short summaries shown in the interactive picker.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from .session import SessionParseError, extract_text, parse_session_file

logger = logging.getLogger(__name__)

SUMMARY_LENGTH = 80

_BORING_PREFIXES = (
    "<local-command-caveat>",
    "<command-name>",
    "This session is being continued",
)

_WHITESPACE_RUN = re.compile(r" {2,}")


@dataclass
class SessionInfo:
    """A session file on disk, plus details filled in by load_session_summaries()."""

    path: Path
    project_name: str
    session_id: str
    mtime: float
    size: int
    summary: str = ""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    message_count: int = 0
    user_message_count: int = 0


@dataclass
class ProjectInfo:
    name: str
    path: Path
    sessions: list = field(default_factory=list)
    mtime: float = 0.0

    @property
    def display_name(self):
        return format_project_name(self.name)


@dataclass
class SessionDetails:
    summary: str = ""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    message_count: int = 0
    user_message_count: int = 0


def _iter_session_files(folder, include_agents):
    folder = Path(folder)
    if not folder.exists():
        return
    for session_file in folder.glob("**/*.jsonl"):
        if not include_agents and session_file.name.startswith("agent-"):
            continue
        if not session_file.is_file():
            continue
        yield session_file


def session_info_for(path, folder):
    """Build a SessionInfo for a file, naming the project after its top folder."""
    path = Path(path)
    stat = path.stat()
    try:
        rel = path.relative_to(folder)
    except ValueError:
        rel = Path(path.name)
    project_name = rel.parts[0] if len(rel.parts) > 1 else ""
    return SessionInfo(
        path=path,
        project_name=project_name,
        session_id=path.stem,
        mtime=stat.st_mtime,
        size=stat.st_size,
    )


def find_local_sessions(folder, limit=10, include_agents=False):
    """Find recent JSONL session files in the given folder.

    Args:
        folder: Path to the projects folder
        limit: Maximum number of sessions to return (0 or None for all)
        include_agents: Include ``agent-*.jsonl`` sub-agent sessions

    Returns:
        List of SessionInfo sorted by modification time, newest first.
    """
    sessions = []
    for session_file in _iter_session_files(folder, include_agents):
        try:
            sessions.append(session_info_for(session_file, folder))
        except OSError as e:
            logger.debug("Skipping %s: %s", session_file, e)

    sessions.sort(key=lambda s: s.mtime, reverse=True)
    if limit:
        sessions = sessions[:limit]
    return sessions


def find_all_sessions(folder, include_agents=False):
    """Find all sessions in a Claude projects folder, grouped by project.

    Sessions are sorted by modification time (most recent first) within each
    project. Projects are sorted by their most recent session.

    Returns:
        List of ProjectInfo.
    """
    folder = Path(folder)
    projects = {}

    for session_file in _iter_session_files(folder, include_agents):
        try:
            info = session_info_for(session_file, folder)
        except OSError as e:
            logger.debug("Skipping %s: %s", session_file, e)
            continue

        project = projects.get(info.project_name)
        if project is None:
            project = ProjectInfo(name=info.project_name, path=session_file.parent)
            projects[info.project_name] = project
        project.sessions.append(info)
        project.mtime = max(project.mtime, info.mtime)

    for project in projects.values():
        project.sessions.sort(key=lambda s: s.mtime, reverse=True)

    result = list(projects.values())
    result.sort(key=lambda p: p.mtime, reverse=True)
    return result


def is_boring_message(text):
    """True for user messages that make poor summaries (warmups, command echoes, continuations)."""
    if text.strip().lower() == "warmup":
        return True
    return text.startswith(_BORING_PREFIXES)


def clean_summary(text, max_length=SUMMARY_LENGTH):
    text = text.replace("\n", " ").replace("\t", " ").strip()
    text = _WHITESPACE_RUN.sub(" ", text)
    if len(text) > max_length:
        text = text[:max_length] + "..."
    return text


def get_session_details(path):
    """Parse a session file and summarize it for display.

    The summary is the first user message that isn't boring, flattened onto
    one line and cut to 80 characters.

    Raises:
        SessionParseError: if the file can't be read or parsed.
    """
    session = parse_session_file(path)
    details = SessionDetails(message_count=len(session.messages))

    for message in session.messages:
        if message.timestamp is not None:
            if details.start_time is None:
                details.start_time = message.timestamp
            details.end_time = message.timestamp

        if message.role != "user":
            continue
        details.user_message_count += 1
        if not details.summary:
            text = extract_text(message)
            if text and not is_boring_message(text):
                details.summary = clean_summary(text)

    return details


def _recency(session):
    if session.end_time is not None:
        return session.end_time.timestamp()
    return session.mtime


def load_session_summaries(sessions):
    """Fill in summary and timing details, then re-sort newest activity first.

    Sessions that fail to parse keep their empty details. The list is sorted
    in place by last message time, falling back to the file mtime.
    """
    for session in sessions:
        try:
            details = get_session_details(session.path)
        except SessionParseError as e:
            logger.debug("Could not load summary for %s: %s", session.path, e)
            continue
        session.summary = details.summary
        session.start_time = details.start_time
        session.end_time = details.end_time
        session.message_count = details.message_count
        session.user_message_count = details.user_message_count

    sessions.sort(key=_recency, reverse=True)
    return sessions


def format_project_name(folder_name):
    """Convert an encoded project folder name to a readable project name.

    Claude Code stores projects in folders named after the working directory
    with separators replaced by dashes:
    - -home-user-projects-myproject -> myproject
    - -Users-name-code-my-app -> my-app

    Falls back to the last non-empty segment when no common root is found.
    """
    if not folder_name:
        return "(no project)"

    name = folder_name
    for prefix in ("-home-", "-mnt-c-Users-", "-Users-"):
        if name.lower().startswith(prefix.lower()):
            # Drop the user name segment as well
            name = name[len(prefix) :].split("-", 1)[-1]
            break

    parts = [p for p in name.split("-") if p]
    container_dirs = {"projects", "code", "repos", "src", "dev", "work", "documents"}
    for i in range(len(parts) - 1, -1, -1):
        if parts[i].lower() in container_dirs and i < len(parts) - 1:
            return "-".join(parts[i + 1 :])

    if parts:
        return parts[-1] if name.startswith("-") else "-".join(parts)
    return folder_name
