"""Shared test fixtures for aichat-publish."""

import json

import pytest

FIRST_ID = "a3c97c84-8c6c-4e11-8634-8794688ba6e1"
SECOND_ID = "b41d2e90-1f2a-4c3b-9d4e-5f6a7b8c9d0e"
THIRD_ID = "c0ffee00-0000-4000-8000-000000000003"


def jsonl(*records) -> str:
    """Serialize records as one JSON object per line."""
    return "\n".join(r if isinstance(r, str) else json.dumps(r) for r in records) + "\n"


def user(uuid, content, timestamp="2025-01-20T10:00:00Z", **extra):
    record = {
        "type": "user",
        "message": {"role": "user", "content": content},
        "uuid": uuid,
        "timestamp": timestamp,
        "sessionId": FIRST_ID,
        "cwd": "/Users/testuser/dev/myapp",
    }
    record.update(extra)
    return record


def assistant(uuid, content, timestamp="2025-01-20T10:00:30Z", **extra):
    record = {
        "type": "assistant",
        "message": {"role": "assistant", "content": content},
        "uuid": uuid,
        "timestamp": timestamp,
        "sessionId": FIRST_ID,
        "cwd": "/Users/testuser/dev/myapp",
    }
    record.update(extra)
    return record


@pytest.fixture
def first_session_content():
    """A realistic transcript exercising every record and block kind.

    Surviving messages: uuid-001, 002, 003, 005, 006, 007.
    """
    return jsonl(
        # 1. Snapshot without a top-level timestamp (skipped)
        {"type": "file-history-snapshot", "messageId": "snap-1", "snapshot": {"files": []}},
        # 2. User prompt
        user("uuid-001", "Help me refactor the auth module"),
        # 3. Assistant text + tool_use in the same entry
        assistant("uuid-002", [
            {"type": "text", "text": "I'll help you refactor the auth module."},
            {"type": "tool_use", "id": "toolu_001", "name": "Read", "input": {"file_path": "/src/auth.ts"}},
        ]),
        # 4. Streaming duplicate of uuid-002 (skipped)
        assistant("uuid-002", [{"type": "text", "text": "duplicate streaming chunk"}]),
        # 5. Tool result with string content
        user("uuid-003", [
            {"type": "tool_result", "tool_use_id": "toolu_001",
             "content": "export function authenticate(token: string) {\n  return jwt.verify(token);\n}"},
        ], timestamp="2025-01-20T10:00:31Z"),
        # 6. Meta message (skipped)
        user("uuid-004", "<local-command-caveat>Caveat</local-command-caveat>", isMeta=True),
        # 7. Slash-command echo (kept by the reader, suppressed by the renderer)
        user("uuid-005", "<command-name>/clear</command-name>", timestamp="2025-01-20T10:01:00Z"),
        # 8. Assistant with thinking, text and a tool call
        assistant("uuid-006", [
            {"type": "thinking", "thinking": "Split validation from token refresh."},
            {"type": "text", "text": "Let me check the directory."},
            {"type": "tool_use", "id": "toolu_002", "name": "Bash", "input": {"command": "ls /src"}},
        ], timestamp="2025-01-20T10:01:30Z"),
        # 9. Tool result with text and image sub-blocks
        user("uuid-007", [
            {"type": "tool_result", "tool_use_id": "toolu_002", "content": [
                {"type": "text", "text": "auth.ts\nutils.ts"},
                {"type": "image", "source": {"type": "base64", "media_type": "image/png", "data": "iVBORw0KGgo="}},
            ]},
        ], timestamp="2025-01-20T10:01:31Z"),
        # 10. Truncated write (skipped)
        '{"type": "assistant", "message": ',
        # 11. Generated summary
        {"type": "summary", "summary": "Refactored auth module", "leafUuid": "uuid-007"},
    )


@pytest.fixture
def tmp_claude_code_dir(tmp_path, first_session_content):
    """Create a synthetic Claude Code projects directory.

    - -Users-testuser-dev-myapp: FIRST_ID (2025-01-20), an agent transcript, a stray file
    - -Users-testuser-dev-myapp-api: SECOND_ID (2025-03-01), no summary record
    - -Users-testuser-dev-other: THIRD_ID, no timestamps at all
    """
    projects = tmp_path / "projects"

    myapp = projects / "-Users-testuser-dev-myapp"
    myapp.mkdir(parents=True)
    (myapp / f"{FIRST_ID}.jsonl").write_text(first_session_content, encoding="utf-8")
    (myapp / "agent-1a2b3c4d.jsonl").write_text(
        jsonl(user("agent-001", "Sub-agent task", timestamp="2025-06-01T00:00:00Z")),
        encoding="utf-8",
    )
    (myapp / "notes.txt").write_text("not a transcript", encoding="utf-8")

    api = projects / "-Users-testuser-dev-myapp-api"
    api.mkdir()
    (api / f"{SECOND_ID}.jsonl").write_text(
        jsonl(
            user("api-001", [{"type": "text", "text": "block content is not a summary"}],
                 timestamp="2025-03-01T09:00:00Z"),
            user("api-002", "Write tests for the API", timestamp="2025-03-01T09:00:10Z"),
            assistant("api-003", [{"type": "text", "text": "Sure."}], timestamp="2025-03-01T09:00:20Z"),
        ),
        encoding="utf-8",
    )

    other = projects / "-Users-testuser-dev-other"
    other.mkdir()
    (other / f"{THIRD_ID}.jsonl").write_text(
        jsonl(
            {"type": "summary", "summary": "Scratch notes"},
            {"type": "user", "message": {"role": "user", "content": "hello"}, "uuid": "other-001"},
        ),
        encoding="utf-8",
    )

    (projects / "stray.txt").write_text("ignored", encoding="utf-8")

    return projects


@pytest.fixture
def claude_env(tmp_claude_code_dir, monkeypatch):
    """Point the configured projects directory at the synthetic one."""
    monkeypatch.setenv("AICHAT_CLAUDE_PATH", str(tmp_claude_code_dir))
    return tmp_claude_code_dir
