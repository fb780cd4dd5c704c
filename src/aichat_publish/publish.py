"""Write exported sessions to disk or publish them as GitHub gists."""

import logging
import subprocess
import tempfile
from datetime import date
from pathlib import Path
from typing import Optional

from .config import get_gh_executable
from .core import GistError

logger = logging.getLogger(__name__)


def default_filename(session_id: str) -> str:
    return f"session-{session_id}.md"


def temp_markdown_path(session_id: str) -> Path:
    """Return the scratch file a session is written to before upload."""
    return Path(tempfile.gettempdir()) / f"claude-session-{session_id}.md"


def write_markdown(path, markdown: str) -> Path:
    """Write a Markdown document as UTF-8 and return its path."""
    path = Path(path)
    path.write_text(markdown, encoding="utf-8")
    return path


def gist_description(project_path: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"Claude Code Session - {project_path} - {today.isoformat()}"


def create_gist(path, description: str, public: bool = False) -> str:
    """Upload a file with ``gh gist create`` and return the gist URL.

    Raises GistError with gh's stderr when the upload fails, or when the gh
    CLI is not installed.
    """
    gh = get_gh_executable()
    cmd = [gh, "gist", "create", str(path), "--desc", description]
    if public:
        cmd.append("--public")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        error_msg = e.stderr.strip() if e.stderr else f"{gh} exited with code {e.returncode}"
        raise GistError(error_msg) from e
    except FileNotFoundError as e:
        raise GistError(
            f"Failed to run {gh}: install it from https://cli.github.com/ and run 'gh auth login'."
        ) from e

    # gh prints the gist URL, e.g. https://gist.github.com/username/GIST_ID
    gist_url = result.stdout.strip()
    logger.info("Created gist %s", gist_url)
    return gist_url
