"""Turn transcript messages into markdown fragments.

Each content block renders to a display string plus a visibility flag: plain
text stays in the conversation flow, everything else (reasoning, tool calls,
tool output) is hidden and later folded into a collapsible section.
"""

import json
from dataclasses import dataclass
from typing import Optional

from .config import MAX_RESULT_LENGTH
from .core import (
    ContentBlock,
    RenderedMessage,
    SessionMessage,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
)
from .transcript import is_command_echo

FENCE = "```"
TRUNCATION_NOTICE = "\n... (truncated)"
RESULT_LABEL = "Result"
THINKING_LABEL = "Thinking"


@dataclass
class RenderedBlock:
    """Display form of one content block."""

    text: str
    hidden: bool = False
    label: Optional[str] = None


def truncate_result(text: str, limit: int = MAX_RESULT_LENGTH) -> str:
    """Cut text longer than ``limit`` characters and append a notice."""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_NOTICE


def escape_fences(text: str) -> str:
    """Space out triple backticks so they cannot close the enclosing fence."""
    return text.replace(FENCE, "` ` `")


def _fenced(text: str, lang: str = "") -> str:
    return f"{FENCE}{lang}\n{text}\n{FENCE}"


def _format_result_text(text: str) -> str:
    return _fenced(escape_fences(truncate_result(text)))


def render_block(block: ContentBlock) -> RenderedBlock:
    """Render a single content block."""
    if isinstance(block, TextBlock):
        return RenderedBlock(text=block.text)

    if isinstance(block, ThinkingBlock):
        return RenderedBlock(
            text=f"**{THINKING_LABEL}**\n\n{block.thinking}",
            hidden=True,
            label=THINKING_LABEL,
        )

    if isinstance(block, ToolUseBlock):
        tool_input = json.dumps(block.input, indent=2, ensure_ascii=False)
        return RenderedBlock(
            text=f"**{block.name}**\n{_fenced(tool_input, 'json')}",
            hidden=True,
            label=block.name,
        )

    if isinstance(block, ToolResultBlock):
        if isinstance(block.content, str):
            text = _format_result_text(block.content)
        else:
            text = "\n\n".join(_format_result_text(part) for part in block.content)
        return RenderedBlock(text=text, hidden=True, label=RESULT_LABEL)

    raise TypeError(f"Unsupported content block: {type(block).__name__}")


def blockquote(text: str) -> str:
    """Prefix every line with a blockquote marker."""
    return "\n".join(f"> {line}" if line else ">" for line in text.split("\n"))


def render_message(message: SessionMessage) -> RenderedMessage:
    """Split a message into visible text and hidden, labelled text.

    String content that echoes a slash command renders to nothing.
    """
    content = message.content
    visible_parts: list[str] = []
    hidden_parts: list[str] = []
    labels: list[str] = []

    if isinstance(content, str):
        if is_command_echo(content):
            return RenderedMessage(is_user=message.is_user)
        if content:
            visible_parts.append(content)
    else:
        for block in content:
            rendered = render_block(block)
            if not rendered.text:
                continue
            if rendered.hidden:
                hidden_parts.append(rendered.text)
                if rendered.label:
                    labels.append(rendered.label)
            else:
                visible_parts.append(rendered.text)

    visible = "\n\n".join(visible_parts)
    if visible and message.is_user:
        visible = blockquote(visible)

    return RenderedMessage(
        visible=visible,
        hidden="\n\n".join(hidden_parts),
        labels=labels,
        is_user=message.is_user,
    )
