"""Path resolution and display settings."""

import os
from pathlib import Path

# Tool results longer than this are cut off in the rendered document
MAX_RESULT_LENGTH = 500

# Length of the first-prompt fallback summary shown in listings
SUMMARY_LENGTH = 80

# Raw user content starting with one of these is a slash-command echo, not conversation
COMMAND_PREFIXES = ("<command-name>", "<local-command-stdout>")


def get_claude_code_path() -> Path:
    """Return the path to Claude Code's projects directory."""
    env = os.environ.get("AICHAT_CLAUDE_PATH")
    if env:
        return Path(env)

    return Path.home() / ".claude" / "projects"


def get_gh_executable() -> str:
    """Return the GitHub CLI executable used for publishing gists."""
    return os.environ.get("AICHAT_GH_BIN") or "gh"
