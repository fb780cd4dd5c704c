"""Conversion between project paths and Claude Code project directory names.

Claude Code stores each project's transcripts in a directory named after the
project path with every "/" replaced by "-", e.g. /Users/alice/dev/app becomes
-Users-alice-dev-app. The mapping is lossy: a "-" inside a directory name
cannot be told apart from an encoded separator, so decoding consults the
filesystem and falls back to the naive reading.
"""

import os
from typing import Callable

SEPARATOR = "/"
MARKER = "-"


def encode_project_path(path: str) -> str:
    """Flatten a project path into its directory-name form."""
    return path.replace(SEPARATOR, MARKER)


def decode_project_path(encoded: str, exists: Callable[[str], bool] = os.path.exists) -> str:
    """Best-effort reconstruction of the project path behind a directory name.

    ``exists`` is called with candidate paths; the first candidate that exists
    wins. When nothing on disk matches, every marker is read as a separator.

    Decoding does not always invert ``encode_project_path``. A dash-free path
    comes back unchanged when it exists or when no dashed alternative does,
    but an existing dashed candidate can shadow it: with only "/a-b" on disk,
    "/a/b" encodes to "-a-b" and decodes to "/a-b".
    """
    naive = encoded.replace(MARKER, SEPARATOR)
    if exists(naive):
        return naive

    path = ""
    for part in filter(None, encoded.split(MARKER)):
        with_separator = f"{path}{SEPARATOR}{part}"
        with_marker = f"{path}{MARKER}{part}"

        if exists(with_separator):
            path = with_separator
        elif path and exists(with_marker):
            path = with_marker
        else:
            path = with_separator

    return path or naive
