"""Filesystem locations, with environment variable overrides."""

import os
from pathlib import Path

PROJECTS_DIR_ENV = "CLAUDE_SESSION_EXPORT_PROJECTS_DIR"
CLAUDE_CONFIG_ENV = "CLAUDE_SESSION_EXPORT_CONFIG"


def get_projects_dir():
    """Folder holding local Claude Code sessions.

    Defaults to ~/.claude/projects; set CLAUDE_SESSION_EXPORT_PROJECTS_DIR
    to point elsewhere.
    """
    override = os.environ.get(PROJECTS_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".claude" / "projects"


def get_claude_config_path():
    """Claude Code's user config file (~/.claude.json), used for the org UUID."""
    override = os.environ.get(CLAUDE_CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".claude.json"
