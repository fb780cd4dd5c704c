"""FastAPI web server for aichat-publish."""

import logging

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response

from .catalog import SessionCatalog
from .core import EmptySessionError, SessionInfo, SessionNotFoundError
from .export import export_session
from .publish import default_filename

logger = logging.getLogger(__name__)

app = FastAPI(title="aichat-publish", version="0.1.0")

# Catalog instance (created on first request)
_catalog: SessionCatalog | None = None


def _get_catalog() -> SessionCatalog:
    global _catalog
    if _catalog is None:
        _catalog = SessionCatalog()
        logger.info("Reading sessions from %s", _catalog.get_base_path())
    return _catalog


def _session_to_dict(session: SessionInfo) -> dict:
    """Convert a SessionInfo dataclass to a JSON-serializable dict."""
    return {
        "id": session.session_id,
        "project_path": session.project_path,
        "date": session.date or None,
        "message_count": session.message_count,
        "summary": session.summary,
    }


def _render(session_id: str) -> tuple[str, str]:
    try:
        return export_session(_get_catalog(), session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except EmptySessionError:
        raise HTTPException(status_code=422, detail="Session has no messages")


# ── Routes ───────────────────────────────────────────────────────


@app.get("/api/sessions")
async def get_sessions(
    project: str | None = Query(None, description="Filter by project path prefix"),
    search: str | None = Query(None, description="Search in summaries and paths"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    """Return sessions, newest first."""
    sessions = _get_catalog().list_sessions(filter_path=project)

    if search:
        search_lower = search.lower()
        sessions = [
            s for s in sessions
            if search_lower in s.summary.lower()
            or search_lower in s.project_path.lower()
        ]

    total = len(sessions)
    sessions = sessions[offset: offset + limit]

    return {
        "total": total,
        "sessions": [_session_to_dict(s) for s in sessions],
    }


@app.get("/api/session/{session_id}")
async def get_session(session_id: str):
    """Return a session rendered as Markdown."""
    project_path, markdown = _render(session_id)
    return {
        "session_id": session_id,
        "project_path": project_path,
        "markdown": markdown,
    }


@app.get("/api/export/{session_id}")
async def export_markdown(session_id: str):
    """Download a session as a Markdown file."""
    _, markdown = _render(session_id)
    return Response(
        content=markdown,
        media_type="text/markdown",
        headers={"Content-Disposition": f'attachment; filename="{default_filename(session_id)}"'},
    )
