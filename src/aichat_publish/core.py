"""Core data models for aichat-publish."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union


@dataclass
class TextBlock:
    """Plain text written by the user or the assistant."""

    text: str


@dataclass
class ThinkingBlock:
    """A reasoning trace emitted before an answer."""

    thinking: str


@dataclass
class ToolUseBlock:
    """A tool invocation requested by the assistant."""

    name: str
    input: Any = None
    id: str = ""


@dataclass
class ToolResultBlock:
    """Output of a tool invocation, sent back on the user side."""

    content: Union[str, list[str]]  # raw string or the text sub-blocks, in order
    tool_use_id: str = ""


ContentBlock = Union[TextBlock, ThinkingBlock, ToolUseBlock, ToolResultBlock]


@dataclass
class SessionMessage:
    """A single user or assistant record from a transcript."""

    type: str  # "user" | "assistant"
    content: Union[str, list[ContentBlock]]
    uuid: str = ""
    timestamp: str = ""
    session_id: str = ""
    cwd: str = ""
    is_meta: bool = False

    @property
    def is_user(self) -> bool:
        return self.type == "user"


@dataclass
class SessionInfo:
    """Listing entry for one transcript file."""

    session_id: str
    project_path: str
    file_path: Path
    date: str  # raw ISO timestamp, "" when the file has none
    message_count: int
    summary: str = ""

    @property
    def created(self) -> Optional[datetime]:
        return parse_iso(self.date)


@dataclass
class SessionLocation:
    """Where a session's transcript lives on disk."""

    session_id: str
    file_path: Path
    project_path: str


@dataclass
class RenderedMessage:
    """Display form of a message, split into visible and collapsible parts."""

    visible: str = ""
    hidden: str = ""
    labels: list[str] = field(default_factory=list)
    is_user: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.visible and not self.hidden


# Sort key for sessions without any timestamp
MIN_DATETIME = datetime.min.replace(tzinfo=timezone.utc)


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 datetime string; naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class PublishError(Exception):
    """Base class for errors surfaced to the caller."""


class SessionNotFoundError(PublishError):
    """No transcript file exists for the requested session id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class EmptySessionError(PublishError):
    """The transcript exists but holds no messages to render."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"No messages found in session: {session_id}")


class GistError(PublishError):
    """Publishing through the gh CLI failed."""
