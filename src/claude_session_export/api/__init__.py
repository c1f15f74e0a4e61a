"""Fetch sessions from the Claude API and from plain URLs.

Credentials come from the macOS keychain (access token) and from
~/.claude.json (organization UUID). All network calls use httpx and raise
httpx.HTTPError on failure.
"""

import json
import logging
import os
import platform
import subprocess

import httpx

from ..config import get_claude_config_path

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.anthropic.com/v1"
ANTHROPIC_VERSION = "2023-06-01"

KEYCHAIN_SERVICE = "Claude Code-credentials"


class CredentialsError(Exception):
    """Raised when credentials cannot be obtained."""

    pass


def is_url(path):
    """Check if a path is a URL (starts with http:// or https://)."""
    return path.startswith("http://") or path.startswith("https://")


def fetch_url(url, timeout=60.0):
    """Download a session file.

    Returns:
        The response body as bytes.

    Raises:
        httpx.HTTPError: on network errors or a non-2xx response.
    """
    response = httpx.get(url, timeout=timeout, follow_redirects=True)
    response.raise_for_status()
    return response.content


def get_access_token_from_keychain():
    """Get the Claude Code OAuth access token from the macOS keychain.

    Returns the access token, or None off macOS or when it isn't stored.
    """
    if platform.system() != "Darwin":
        return None

    try:
        result = subprocess.run(
            [
                "security",
                "find-generic-password",
                "-a",
                os.environ.get("USER", ""),
                "-s",
                KEYCHAIN_SERVICE,
                "-w",
            ],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("Keychain lookup failed: %s", e)
        return None
    if result.returncode != 0:
        return None

    try:
        creds = json.loads(result.stdout.strip())
    except json.JSONDecodeError:
        logger.debug("Keychain entry is not JSON")
        return None
    oauth = creds.get("claudeAiOauth") if isinstance(creds, dict) else None
    if not isinstance(oauth, dict):
        return None
    return oauth.get("accessToken")


def get_org_uuid_from_config(config_path=None):
    """Get the organization UUID from ~/.claude.json, or None if missing."""
    config_path = config_path or get_claude_config_path()
    try:
        with open(config_path, encoding="utf-8") as f:
            config = json.load(f)
    except FileNotFoundError:
        return None
    except (json.JSONDecodeError, OSError) as e:
        logger.debug("Could not read %s: %s", config_path, e)
        return None
    account = config.get("oauthAccount") if isinstance(config, dict) else None
    if not isinstance(account, dict):
        return None
    return account.get("organizationUuid")


def resolve_credentials(token=None, org_uuid=None):
    """Resolve token and org_uuid from arguments, falling back to auto-detection.

    Returns:
        Tuple of (token, org_uuid).

    Raises:
        CredentialsError: with a hint on how to provide what is missing.
    """
    if token is None:
        token = get_access_token_from_keychain()
        if token is None:
            if platform.system() == "Darwin":
                raise CredentialsError(
                    "Could not retrieve access token from macOS keychain. "
                    "Make sure you are logged into Claude Code, or provide --token."
                )
            raise CredentialsError(
                "On non-macOS platforms, you must provide --token with your access token."
            )

    if org_uuid is None:
        org_uuid = get_org_uuid_from_config()
        if org_uuid is None:
            raise CredentialsError(
                f"Could not find organization UUID in {get_claude_config_path()}. "
                "Provide --org-uuid with your organization UUID."
            )

    return token, org_uuid


def get_api_headers(token, org_uuid):
    """Build API request headers."""
    return {
        "Authorization": f"Bearer {token}",
        "anthropic-version": ANTHROPIC_VERSION,
        "Content-Type": "application/json",
        "x-organization-uuid": org_uuid,
    }


def fetch_sessions(token, org_uuid):
    """Fetch the list of remote sessions.

    Returns:
        List of session dicts (``id``, ``title``, ``created_at``, ...).
    """
    response = httpx.get(
        f"{API_BASE_URL}/sessions",
        headers=get_api_headers(token, org_uuid),
        timeout=30.0,
    )
    response.raise_for_status()
    data = response.json()
    if isinstance(data, dict):
        return data.get("data", [])
    return data


def fetch_session(token, org_uuid, session_id):
    """Fetch one remote session.

    Returns:
        The raw response body, a JSON object with a ``loglines`` list.
    """
    response = httpx.get(
        f"{API_BASE_URL}/session_ingress/session/{session_id}",
        headers=get_api_headers(token, org_uuid),
        timeout=60.0,
    )
    response.raise_for_status()
    return response.content


def format_session_for_display(session_data):
    """One-line label for a remote session in the picker."""
    session_id = session_data.get("id", "unknown")
    title = session_data.get("title") or "Untitled"
    created_at = session_data.get("created_at") or ""
    if len(title) > 60:
        title = title[:57] + "..."
    return f"{session_id}  {created_at[:19] if created_at else 'N/A':19}  {title}"
