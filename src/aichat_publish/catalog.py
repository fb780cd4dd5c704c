"""Session discovery over Claude Code's projects directory.

Layout: <base>/<encoded project path>/<session-id>.jsonl. Files named
agent-*.jsonl hold sub-agent transcripts and are not listed.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional

from .config import get_claude_code_path
from .core import MIN_DATETIME, SessionInfo, SessionLocation, SessionNotFoundError
from .paths import decode_project_path, encode_project_path
from .transcript import get_message_count, get_session_date, get_session_summary

logger = logging.getLogger(__name__)

AGENT_PREFIX = "agent-"
MAX_WORKERS = 8


class SessionCatalog:
    """Lists and locates Claude Code sessions."""

    def __init__(self, path_exists: Callable[[str], bool] = os.path.exists):
        self.path_exists = path_exists

    def get_base_path(self) -> Path:
        return get_claude_code_path()

    def is_available(self) -> bool:
        return self.get_base_path().is_dir()

    def list_sessions(self, filter_path: Optional[str] = None) -> list[SessionInfo]:
        """Return every session, newest first.

        ``filter_path`` keeps only projects whose directory name starts with
        the encoded form of that path, so the comparison never depends on
        the lossy decode.
        """
        jobs = []
        for project_dir in self._project_dirs():
            if filter_path and not project_dir.name.startswith(encode_project_path(filter_path)):
                continue

            project_path = decode_project_path(project_dir.name, self.path_exists)
            for jsonl_file in sorted(project_dir.glob("*.jsonl")):
                if jsonl_file.name.startswith(AGENT_PREFIX):
                    continue
                jobs.append((jsonl_file, project_path))

        if not jobs:
            return []

        # Date, count and summary are independent full reads of each file
        with ThreadPoolExecutor(max_workers=MAX_WORKERS) as pool:
            futures = [
                (
                    jsonl_file,
                    project_path,
                    pool.submit(get_session_date, jsonl_file),
                    pool.submit(get_message_count, jsonl_file),
                    pool.submit(get_session_summary, jsonl_file),
                )
                for jsonl_file, project_path in jobs
            ]
            sessions = [
                SessionInfo(
                    session_id=jsonl_file.stem,
                    project_path=project_path,
                    file_path=jsonl_file,
                    date=date.result(),
                    message_count=count.result(),
                    summary=summary.result(),
                )
                for jsonl_file, project_path, date, count, summary in futures
            ]

        sessions.sort(key=lambda s: s.created or MIN_DATETIME, reverse=True)
        logger.info("Found %d sessions under %s", len(sessions), self.get_base_path())
        return sessions

    def find_session(self, session_id: str) -> SessionLocation:
        """Locate a session's transcript by id.

        Raises SessionNotFoundError when no project directory holds it.
        """
        if not session_id or "/" in session_id or os.sep in session_id:
            raise SessionNotFoundError(session_id)

        for project_dir in self._project_dirs():
            session_file = project_dir / f"{session_id}.jsonl"
            if session_file.is_file():
                return SessionLocation(
                    session_id=session_id,
                    file_path=session_file,
                    project_path=decode_project_path(project_dir.name, self.path_exists),
                )

        raise SessionNotFoundError(session_id)

    # ── Private helpers ──────────────────────────────────────────────

    def _project_dirs(self) -> list[Path]:
        base = self.get_base_path()
        if not base.is_dir():
            return []
        return sorted(d for d in base.iterdir() if d.is_dir())
