"""Export chat sessions to Markdown."""

import logging
import re
from typing import TYPE_CHECKING, Optional

from .core import EmptySessionError, RenderedMessage, SessionMessage
from .render import render_message
from .transcript import parse_session, read_transcript, session_summary

if TYPE_CHECKING:
    from .catalog import SessionCatalog

logger = logging.getLogger(__name__)

SEPARATOR = "---"

_TRAILING_HEADING_CHARS = re.compile(r"[#\n]+$")


def session_title(session_id: str, summary: Optional[str] = None) -> str:
    """Build the document title, falling back to a short session id."""
    title = summary or f"Session {session_id[:8]}"
    title = _TRAILING_HEADING_CHARS.sub("", title)
    return title.replace("\n", " ").strip()


def escape_angle_brackets(text: str) -> str:
    return text.replace("<", "&lt;").replace(">", "&gt;")


def collapsible(labels: list[str], texts: list[str]) -> str:
    """Wrap hidden content in a <details> block summarised by its labels."""
    summary = escape_angle_brackets(", ".join(dict.fromkeys(labels)))
    body = escape_angle_brackets("\n\n".join(texts))
    return f"<details>\n<summary>{summary}</summary>\n\n{body}\n\n</details>"


def assemble_document(
    session_id: str,
    project_path: str,
    rendered: list[RenderedMessage],
    summary: Optional[str] = None,
) -> str:
    """Merge rendered messages into one document.

    Hidden content is buffered and emitted as a single collapsible section
    whenever the next visible text arrives, and once more at the end. A
    separator precedes every user turn after the first and the reply that
    follows a user turn.
    """
    blocks = [f"# {session_title(session_id, summary)}"]
    if project_path:
        blocks.append(f"**Project:** `{project_path}`")

    pending_texts: list[str] = []
    pending_labels: list[str] = []
    seen_user = False
    after_user = False

    def flush():
        if pending_texts:
            blocks.append(collapsible(pending_labels, pending_texts))
            pending_texts.clear()
            pending_labels.clear()

    for msg in rendered:
        if msg.is_empty:
            continue

        if not msg.visible:
            pending_texts.append(msg.hidden)
            pending_labels.extend(msg.labels)
            continue

        if msg.is_user:
            if seen_user:
                blocks.append(SEPARATOR)
            seen_user = True
        elif after_user:
            blocks.append(SEPARATOR)
        after_user = msg.is_user

        flush()
        blocks.append(msg.visible)
        # This message's own tool activity waits for the next visible boundary
        if msg.hidden:
            pending_texts.append(msg.hidden)
            pending_labels.extend(msg.labels)

    flush()

    return "\n\n".join(blocks) + "\n"


def session_to_markdown(
    session_id: str,
    project_path: str,
    messages: list[SessionMessage],
    summary: Optional[str] = None,
) -> str:
    """Render a parsed session as Markdown.

    Raises EmptySessionError when there are no messages at all.
    """
    if not messages:
        raise EmptySessionError(session_id)

    rendered = [render_message(msg) for msg in messages]
    return assemble_document(session_id, project_path, rendered, summary)


def export_session(catalog: "SessionCatalog", session_id: str) -> tuple[str, str]:
    """Locate, parse and render a session.

    Returns ``(project_path, markdown)``. Raises SessionNotFoundError or
    EmptySessionError.
    """
    location = catalog.find_session(session_id)
    content = read_transcript(location.file_path)
    messages = parse_session(content)
    logger.debug("Parsed %d messages from %s", len(messages), location.file_path)

    markdown = session_to_markdown(
        session_id,
        location.project_path,
        messages,
        summary=session_summary(content),
    )
    return location.project_path, markdown
