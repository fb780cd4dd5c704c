"""Claude Code transcript reader.

A transcript is one .jsonl file per session. Each line is a JSON record:
- "user": user prompts. Content is a string or an array of blocks
  (text, tool_result).
- "assistant": AI responses. Content is an array of text, thinking and
  tool_use blocks. Streaming can write the same uuid more than once.
- "summary": a generated session title in the "summary" field.
- "file-history-snapshot": Skipped.
Other record types and lines that are not valid JSON are ignored.

The parsing functions take file content rather than a path; the ``get_*``
and ``load_session`` helpers read the file first.
"""

import json
import logging
from pathlib import Path
from typing import Iterator, Optional, Union

from .config import COMMAND_PREFIXES, SUMMARY_LENGTH
from .core import (
    ContentBlock,
    SessionMessage,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
)

logger = logging.getLogger(__name__)

MESSAGE_TYPES = ("user", "assistant")
SNAPSHOT_TYPE = "file-history-snapshot"
SUMMARY_TYPE = "summary"


def iter_records(content: str) -> Iterator[dict]:
    """Yield every JSON object in the transcript, skipping bad lines."""
    for line_num, line in enumerate(content.split("\n"), 1):
        line = line.strip()
        if not line:
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            logger.debug("Bad JSON at line %d: %s", line_num, e)
            continue
        if isinstance(record, dict):
            yield record


def _surviving_records(content: str) -> Iterator[dict]:
    """Yield conversation records in file order, first write wins per uuid."""
    seen_uuids: set[str] = set()

    for record in iter_records(content):
        record_type = record.get("type")
        if record_type == SNAPSHOT_TYPE:
            continue
        if record.get("isMeta"):
            continue
        if record_type not in MESSAGE_TYPES:
            continue

        uuid = record.get("uuid")
        if uuid and isinstance(uuid, str):
            if uuid in seen_uuids:
                continue
            seen_uuids.add(uuid)

        yield record


def parse_session(content: str) -> list[SessionMessage]:
    """Parse transcript content into the ordered list of session messages."""
    return [_record_to_message(record) for record in _surviving_records(content)]


def parse_content(raw: object) -> Union[str, list[ContentBlock]]:
    """Convert a record's message.content into a string or typed blocks."""
    if isinstance(raw, str):
        return raw
    if not isinstance(raw, list):
        return ""

    blocks = []
    for item in raw:
        if isinstance(item, str):
            blocks.append(TextBlock(text=item))
            continue
        if not isinstance(item, dict):
            continue
        block = _parse_block(item)
        if block is not None:
            blocks.append(block)
    return blocks


def _string(value: object, default: str = "") -> str:
    return value if value and isinstance(value, str) else default


def _parse_block(item: dict) -> Optional[ContentBlock]:
    block_type = item.get("type", "")

    if block_type == "text":
        return TextBlock(text=_string(item.get("text")))

    if block_type == "thinking":
        return ThinkingBlock(thinking=_string(item.get("thinking")))

    if block_type == "tool_use":
        return ToolUseBlock(
            name=_string(item.get("name"), "unknown"),
            input=item.get("input"),
            id=_string(item.get("id")),
        )

    if block_type == "tool_result":
        tool_content = item.get("content", "")
        if isinstance(tool_content, list):
            # Only text sub-blocks are kept; images and the like are dropped
            tool_content = [
                _string(sub.get("text"))
                for sub in tool_content
                if isinstance(sub, dict) and sub.get("type") == "text"
            ]
        elif not isinstance(tool_content, str):
            tool_content = ""
        return ToolResultBlock(content=tool_content, tool_use_id=_string(item.get("tool_use_id")))

    return None


def _record_to_message(record: dict) -> SessionMessage:
    msg_data = record.get("message")
    if not isinstance(msg_data, dict):
        msg_data = {}

    return SessionMessage(
        type=record["type"],
        content=parse_content(msg_data.get("content", "")),
        uuid=_string(record.get("uuid")),
        timestamp=_string(record.get("timestamp")),
        session_id=_string(record.get("sessionId")),
        cwd=_string(record.get("cwd")),
        is_meta=bool(record.get("isMeta")),
    )


def is_command_echo(text: str) -> bool:
    """True for slash-command echoes recorded as user messages."""
    return text.startswith(COMMAND_PREFIXES)


# ── Derived queries ──────────────────────────────────────────────


def first_timestamp(content: str) -> str:
    """Return the first timestamp found in any record, or ""."""
    for record in iter_records(content):
        timestamp = record.get("timestamp")
        if timestamp and isinstance(timestamp, str):
            return timestamp
    return ""


def count_messages(content: str) -> int:
    """Count the user/assistant records that survive filtering."""
    return sum(1 for _ in _surviving_records(content))


def session_summary(content: str) -> str:
    """Return a short human summary of the session.

    Prefers a dedicated summary record. Falls back to the first plain-text
    user prompt that is not a command echo, cut to SUMMARY_LENGTH characters.
    """
    records = list(iter_records(content))

    for record in records:
        if record.get("type") == SUMMARY_TYPE and record.get("summary"):
            return str(record["summary"])

    for record in records:
        if record.get("type") != "user" or record.get("isMeta"):
            continue
        msg_data = record.get("message")
        if not isinstance(msg_data, dict):
            continue
        text = msg_data.get("content")
        if not text or not isinstance(text, str):
            continue
        if is_command_echo(text):
            continue
        if len(text) > SUMMARY_LENGTH:
            return text[:SUMMARY_LENGTH] + "..."
        return text

    return ""


# ── File access ──────────────────────────────────────────────────


def read_transcript(path: Path) -> str:
    """Read a transcript file; unreadable files are treated as empty."""
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Failed to read JSONL %s: %s", path, e)
        return ""


def load_session(path: Path) -> list[SessionMessage]:
    return parse_session(read_transcript(path))


def get_session_date(path: Path) -> str:
    return first_timestamp(read_transcript(path))


def get_message_count(path: Path) -> int:
    return count_messages(read_transcript(path))


def get_session_summary(path: Path) -> str:
    return session_summary(read_transcript(path))
