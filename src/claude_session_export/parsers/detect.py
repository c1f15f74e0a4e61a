"""Decide whether a session buffer is a single JSON document or JSONL."""

import json

JSON = "json"
JSONL = "jsonl"

# Keys that mark a single-object session file
SESSION_LIST_KEYS = ("messages", "loglines")


def _as_text(data):
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def detect_format(data):
    """Classify raw session data.

    Returns JSON, JSONL, or None for empty input. The messages-key probe
    runs before line counting so a single-object session file that happens
    to span several ``{`` lines is never mistaken for JSONL.
    """
    text = _as_text(data).strip()
    if not text:
        return None

    if text[0] == "[":
        return JSON

    if text[0] == "{":
        try:
            obj = json.loads(text)
        except json.JSONDecodeError:
            obj = None
        if isinstance(obj, dict) and any(obj.get(k) for k in SESSION_LIST_KEYS):
            return JSON

    json_lines = 0
    for line in text.split("\n"):
        line = line.strip()
        if line.startswith("{"):
            json_lines += 1

    return JSONL if json_lines > 1 else JSON
