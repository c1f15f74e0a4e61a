"""Render every local session into a browsable archive."""

import logging
import re
from datetime import datetime
from pathlib import Path

from ..parsers import SessionParseError, find_all_sessions, load_session_summaries
from ..parsers.session import parse_session_file
from .html import NoConversationsError, generate_html, get_template

logger = logging.getLogger(__name__)

_UNSAFE_DIR_CHARS = re.compile(r"[^\w.\-]+")


def sanitize_dir_name(name):
    """Make a project name safe to use as a directory name."""
    cleaned = _UNSAFE_DIR_CHARS.sub("-", name).strip("-.")
    return cleaned or "unnamed"


def _format_mtime(mtime):
    return datetime.fromtimestamp(mtime).strftime("%Y-%m-%d %H:%M")


def generate_batch_html(
    source_folder,
    output_dir,
    include_agents=False,
    progress_callback=None,
):
    """Generate an HTML archive for all sessions in a Claude projects folder.

    Creates:
    - Master index.html listing all projects
    - Per-project directories with index.html listing sessions
    - Per-session directories with transcript pages

    Sessions without any conversation are skipped silently. Sessions that
    fail to parse are recorded in ``failed_sessions`` and the run continues.

    Args:
        source_folder: Path to the Claude projects folder
        output_dir: Path for output archive
        include_agents: Whether to include agent-* session files
        progress_callback: Optional callback(project_name, session_id, current, total)
            called after each session is processed

    Returns:
        Dict with total_projects, total_sessions, skipped_sessions,
        failed_sessions (list of dicts) and output_dir.
    """
    source_folder = Path(source_folder)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    projects = find_all_sessions(source_folder, include_agents=include_agents)

    total_session_count = sum(len(p.sessions) for p in projects)
    processed_count = 0
    successful_sessions = 0
    skipped_sessions = 0
    failed_sessions = []
    rendered_projects = []

    for project in projects:
        project_dir = output_dir / sanitize_dir_name(project.name)
        load_session_summaries(project.sessions)
        rendered = []

        for info in project.sessions:
            session_dir = project_dir / info.session_id
            try:
                session = parse_session_file(info.path)
                generate_html(session, session_dir)
                rendered.append(info)
                successful_sessions += 1
            except NoConversationsError:
                skipped_sessions += 1
            except (SessionParseError, OSError) as e:
                logger.warning("Failed to render %s: %s", info.path, e)
                failed_sessions.append(
                    {
                        "project": project.display_name,
                        "session": info.session_id,
                        "error": str(e),
                    }
                )

            processed_count += 1
            if progress_callback:
                progress_callback(
                    project.display_name,
                    info.session_id,
                    processed_count,
                    total_session_count,
                )

        if rendered:
            _generate_project_index(project.display_name, rendered, project_dir)
            rendered_projects.append((project, project_dir, rendered))

    _generate_master_index(rendered_projects, successful_sessions, output_dir)

    return {
        "total_projects": len(rendered_projects),
        "total_sessions": successful_sessions,
        "skipped_sessions": skipped_sessions,
        "failed_sessions": failed_sessions,
        "output_dir": output_dir,
    }


def _generate_project_index(project_name, sessions, project_dir):
    """Generate index.html for a single project."""
    sessions_data = [
        {
            "name": info.session_id,
            "link": f"{info.session_id}/index.html",
            "summary": info.summary,
            "date": _format_mtime(info.mtime),
            "size_kb": info.size / 1024,
        }
        for info in sessions
    ]
    content = get_template("project_index.html").render(
        project_name=project_name,
        sessions=sessions_data,
    )
    (project_dir / "index.html").write_text(content, encoding="utf-8")


def _generate_master_index(rendered_projects, total_sessions, output_dir):
    """Generate master index.html listing all projects."""
    projects_data = [
        {
            "name": project.display_name,
            "dir_name": project_dir.name,
            "session_count": len(sessions),
            "most_recent": _format_mtime(project.mtime),
        }
        for project, project_dir, sessions in rendered_projects
    ]
    content = get_template("master_index.html").render(
        projects=projects_data,
        total_sessions=total_sessions,
    )
    (output_dir / "index.html").write_text(content, encoding="utf-8")
