"""Data model for parsed sessions.

Content blocks are a tagged variant: one dataclass per block type, with the
tag available as ``block.type``. Everything downstream of the decoder works
on these objects rather than on raw JSON dicts.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, ClassVar, Optional


@dataclass
class TextBlock:
    type: ClassVar[str] = "text"

    text: str = ""


@dataclass
class ThinkingBlock:
    type: ClassVar[str] = "thinking"

    text: str = ""


@dataclass
class ToolUseBlock:
    type: ClassVar[str] = "tool_use"

    name: str = ""
    id: str = ""
    input: Any = None  # opaque, see parse_tool_input()


@dataclass
class ToolResultBlock:
    type: ClassVar[str] = "tool_result"

    tool_use_id: str = ""
    content: Any = ""  # str, list of {"text": ...}, or anything else
    is_error: bool = False


@dataclass
class ImageBlock:
    type: ClassVar[str] = "image"

    media_type: str = "image/png"
    data: str = ""


@dataclass
class UnknownBlock:
    """A block with a type we don't render. Kept so nothing is lost."""

    type: str = ""
    raw: Any = None


@dataclass
class TodoItem:
    content: str = ""
    status: str = ""


@dataclass
class ToolInput:
    """Best-effort projection of a tool_use input onto the fields we render."""

    command: str = ""
    description: str = ""
    file_path: str = ""
    content: str = ""
    old_string: str = ""
    new_string: str = ""
    pattern: str = ""
    path: str = ""
    todos: list = field(default_factory=list)


@dataclass
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_write_tokens: int = 0


@dataclass
class Message:
    """A single turn in the transcript."""

    role: str = ""  # "user" | "assistant" | "" for tool/system entries
    content: list = field(default_factory=list)
    timestamp: Optional[datetime] = None
    cwd: str = ""
    git_branch: str = ""
    version: str = ""
    model: str = ""
    usage: Optional[TokenUsage] = None
    is_compact_summary: bool = False


@dataclass
class SessionMetadata:
    cwd: str = ""
    git_branch: str = ""
    version: str = ""
    models: list = field(default_factory=list)
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cache_tokens: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    active_time: timedelta = timedelta(0)


@dataclass
class Session:
    messages: list = field(default_factory=list)
    metadata: SessionMetadata = field(default_factory=SessionMetadata)


@dataclass
class Conversation:
    """A user prompt plus everything that followed it up to the next prompt."""

    user_text: str
    timestamp: Optional[datetime]
    messages: list = field(default_factory=list)
    is_continuation: bool = False


@dataclass
class ToolStats:
    bash_count: int = 0
    read_count: int = 0
    write_count: int = 0
    edit_count: int = 0
    glob_count: int = 0
    grep_count: int = 0
    other_count: int = 0

    @property
    def total(self):
        return (
            self.bash_count
            + self.read_count
            + self.write_count
            + self.edit_count
            + self.glob_count
            + self.grep_count
            + self.other_count
        )


@dataclass
class IndexItem:
    """An entry in the chronological index: a prompt or a commit."""

    kind: str  # "prompt" or "commit"
    timestamp: Optional[datetime] = None
    text: str = ""
    page_num: int = 0
    message_id: str = ""
    stats: Optional[ToolStats] = None
    long_texts: list = field(default_factory=list)
    commit_hash: str = ""
    commit_message: str = ""
    repo_url: Optional[str] = None
