"""Session file parsing utilities.

Handles parsing of session files in both JSON and JSONL formats, and in both
message dialects: flat entries with ``role``/``content`` at the top level, and
nested entries that carry session metadata at the top level and the actual
message under a ``message`` key.
"""

import json
import logging
import re
from datetime import datetime, timedelta
from pathlib import Path

from .detect import JSONL, SESSION_LIST_KEYS, detect_format
from .models import (
    ImageBlock,
    Message,
    Session,
    SessionMetadata,
    TextBlock,
    ThinkingBlock,
    TodoItem,
    TokenUsage,
    ToolInput,
    ToolResultBlock,
    ToolUseBlock,
    UnknownBlock,
)

logger = logging.getLogger(__name__)

# Gaps between messages longer than this don't count towards active time
ACTIVE_GAP_THRESHOLD = timedelta(minutes=5)

_RFC3339_PATTERN = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)


class SessionParseError(ValueError):
    """Raised when a session file can't be read or isn't JSON/JSONL."""

    pass


def _str(value):
    return value if isinstance(value, str) else ""


def _int(value):
    if isinstance(value, bool):
        return 0
    return value if isinstance(value, int) else 0


def parse_timestamp(raw):
    """Parse an RFC 3339 timestamp, returning None if absent or unparseable.

    Only the RFC 3339 shape is accepted (basic ISO 8601 forms and naive
    times are rejected). Fractional seconds of any precision are accepted;
    digits beyond microseconds are dropped.
    """
    if not raw or not isinstance(raw, str):
        return None
    match = _RFC3339_PATTERN.match(raw.strip())
    if not match:
        logger.debug("Unparseable timestamp %r", raw)
        return None
    date, time, fraction, offset = match.groups()
    fraction = (fraction or "")[:6].ljust(6, "0")
    if offset in ("Z", "z"):
        offset = "+00:00"
    try:
        return datetime.fromisoformat(f"{date}T{time}.{fraction}{offset}")
    except ValueError:
        logger.debug("Out of range timestamp %r", raw)
        return None


def _decode_text(raw):
    return TextBlock(text=_str(raw.get("text")))


def _decode_thinking(raw):
    text = raw.get("thinking")
    if not isinstance(text, str):
        text = raw.get("text")
    return ThinkingBlock(text=_str(text))


def _decode_tool_use(raw):
    return ToolUseBlock(
        name=_str(raw.get("name")),
        id=_str(raw.get("id")),
        input=raw.get("input"),
    )


def _decode_tool_result(raw):
    return ToolResultBlock(
        tool_use_id=_str(raw.get("tool_use_id")),
        content=raw.get("content", ""),
        is_error=bool(raw.get("is_error", False)),
    )


def _decode_image(raw):
    source = raw.get("source")
    if not isinstance(source, dict):
        source = {}
    return ImageBlock(
        media_type=_str(source.get("media_type")) or "image/png",
        data=_str(source.get("data")),
    )


_BLOCK_DECODERS = {
    "text": _decode_text,
    "thinking": _decode_thinking,
    "tool_use": _decode_tool_use,
    "tool_result": _decode_tool_result,
    "image": _decode_image,
}


def decode_content_block(raw):
    """Decode one content block dict; unknown types become UnknownBlock."""
    if not isinstance(raw, dict):
        return UnknownBlock(raw=raw)
    block_type = raw.get("type")
    decoder = _BLOCK_DECODERS.get(block_type)
    if decoder is None:
        return UnknownBlock(type=_str(block_type), raw=raw)
    return decoder(raw)


def parse_content(raw):
    """Normalize message content into a list of content blocks.

    A bare string becomes a single text block, an array is decoded block by
    block. Anything else yields an empty list.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        return [TextBlock(text=raw)]
    if isinstance(raw, list):
        return [decode_content_block(block) for block in raw]
    logger.debug("Ignoring content of unexpected type %s", type(raw).__name__)
    return []


def _decode_usage(raw):
    if not isinstance(raw, dict):
        return None
    return TokenUsage(
        input_tokens=_int(raw.get("input_tokens")),
        output_tokens=_int(raw.get("output_tokens")),
        cache_read_tokens=_int(raw.get("cache_read_input_tokens")),
        cache_write_tokens=_int(raw.get("cache_creation_input_tokens")),
    )


def _decode_nested(entry):
    """Entries with the message nested under a ``message`` key."""
    nested = entry.get("message")
    if not isinstance(nested, dict):
        return None
    role = _str(nested.get("role"))
    if not role and entry.get("type") in ("user", "assistant"):
        role = entry["type"]
    return Message(
        role=role,
        content=parse_content(nested.get("content")),
        timestamp=parse_timestamp(entry.get("timestamp")),
        cwd=_str(entry.get("cwd")),
        git_branch=_str(entry.get("gitBranch")),
        version=_str(entry.get("version")),
        model=_str(nested.get("model")),
        usage=_decode_usage(nested.get("usage")),
        is_compact_summary=bool(entry.get("isCompactSummary")),
    )


def _decode_flat(entry):
    """Entries with ``role`` and ``content`` at the top level."""
    return Message(
        role=_str(entry.get("role")),
        content=parse_content(entry.get("content")),
        timestamp=parse_timestamp(entry.get("timestamp")),
        cwd=_str(entry.get("cwd")),
        git_branch=_str(entry.get("gitBranch")),
        version=_str(entry.get("version")),
        model=_str(entry.get("model")),
        usage=_decode_usage(entry.get("usage")),
        is_compact_summary=bool(entry.get("isCompactSummary")),
    )


# Tried in order; the first decoder that returns a Message wins
MESSAGE_DECODERS = (_decode_nested, _decode_flat)


def decode_message(entry):
    """Decode one entry into a Message, or None if it isn't an object."""
    if not isinstance(entry, dict):
        return None
    for decoder in MESSAGE_DECODERS:
        message = decoder(entry)
        if message is not None:
            return message
    return None


def _parse_json(text, source):
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SessionParseError(f"{source}: parsing JSON: {e}") from e

    entries = None
    if isinstance(data, dict):
        for key in SESSION_LIST_KEYS:
            value = data.get(key)
            if isinstance(value, list) and (value or entries is None):
                entries = value
                if value:
                    break
    elif isinstance(data, list):
        entries = data

    if entries is None:
        raise SessionParseError(
            f"{source}: expected a JSON array or an object with a 'messages' list"
        )

    messages = []
    for entry in entries:
        message = decode_message(entry)
        if message is not None:
            messages.append(message)
    return messages


def _parse_jsonl(text, source):
    messages = []
    for line_num, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError as e:
            logger.debug("Bad JSON at %s:%d: %s", source, line_num, e)
            continue
        if not isinstance(obj, dict):
            logger.debug("Skipping non-object at %s:%d", source, line_num)
            continue

        # Bookkeeping entries (summaries, snapshots) share the file
        if obj.get("type") not in (None, "", "message"):
            continue

        message = decode_message(obj)
        if message is not None:
            messages.append(message)
    return messages


def parse_session_bytes(data, source="<input>"):
    """Parse session data from bytes or str into a Session.

    Empty input yields an empty Session. Raises SessionParseError when the
    data is neither a JSON session nor JSONL.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")

    fmt = detect_format(data)
    if fmt is None:
        return Session()

    if fmt == JSONL:
        messages = _parse_jsonl(data, source)
    else:
        messages = _parse_json(data.strip(), source)

    return Session(messages=messages, metadata=compute_session_metadata(messages))


def parse_session_file(filepath):
    """Read and parse a session file (JSON or JSONL, detected from content)."""
    filepath = Path(filepath)
    try:
        data = filepath.read_bytes()
    except OSError as e:
        raise SessionParseError(f"reading {filepath}: {e}") from e
    return parse_session_bytes(data, source=str(filepath))


def compute_session_metadata(messages):
    """Fold per-message session fields into one SessionMetadata.

    cwd, git branch and version are first-seen-wins; models keep first-seen
    order; token counts are summed.
    """
    meta = SessionMetadata()
    previous = None

    for message in messages:
        if not meta.cwd and message.cwd:
            meta.cwd = message.cwd
        if not meta.git_branch and message.git_branch:
            meta.git_branch = message.git_branch
        if not meta.version and message.version:
            meta.version = message.version
        if message.model and message.model not in meta.models:
            meta.models.append(message.model)
        if message.usage is not None:
            meta.total_input_tokens += message.usage.input_tokens
            meta.total_output_tokens += message.usage.output_tokens
            meta.total_cache_tokens += (
                message.usage.cache_read_tokens + message.usage.cache_write_tokens
            )

        ts = message.timestamp
        if ts is None:
            continue
        if meta.start_time is None:
            meta.start_time = ts
        meta.end_time = ts
        if previous is not None:
            gap = ts - previous
            if timedelta(0) < gap <= ACTIVE_GAP_THRESHOLD:
                meta.active_time += gap
        previous = ts

    return meta


def extract_text(message):
    """Join the text blocks of a message with newlines.

    Thinking, tool use and tool results are excluded.
    """
    return "\n".join(
        block.text
        for block in message.content
        if isinstance(block, TextBlock) and block.text
    )


def parse_tool_input(raw):
    """Project a tool_use input onto ToolInput.

    Never fails on shape: fields that are missing or of the wrong type are
    left empty. Raises ValueError only when given malformed JSON text.
    """
    if isinstance(raw, (str, bytes)):
        raw = json.loads(raw)
    if not isinstance(raw, dict):
        return ToolInput()

    todos = []
    raw_todos = raw.get("todos")
    if isinstance(raw_todos, list):
        for item in raw_todos:
            if isinstance(item, dict):
                todos.append(
                    TodoItem(
                        content=_str(item.get("content")),
                        status=_str(item.get("status")),
                    )
                )

    return ToolInput(
        command=_str(raw.get("command")),
        description=_str(raw.get("description")),
        file_path=_str(raw.get("file_path")),
        content=_str(raw.get("content")),
        old_string=_str(raw.get("old_string")),
        new_string=_str(raw.get("new_string")),
        pattern=_str(raw.get("pattern")),
        path=_str(raw.get("path")),
        todos=todos,
    )
