"""Map project paths to and from Claude's encoded project directory names.

Claude Code stores each project's logs under ``~/.claude/projects/<encoded>``
where the encoded name is the project path with every ``/`` replaced by
``-``: ``/Users/me/proj`` is stored as ``-Users-me-proj``.

That scheme cannot represent a ``-`` inside a path segment. ``encode_project_path``
therefore percent-escapes ``%`` and ``-`` before replacing separators, so
``decode_project_path`` recovers every path it produced. Names written by Claude
Code itself never contain ``%`` and decode the same way the plain scheme does.
"""

from __future__ import annotations

from urllib.parse import unquote

_SEPARATOR = "/"
_DELIMITER = "-"


def encode_project_path(path: str) -> str:
    """Encode ``/Users/me/my-proj`` as ``-Users-me-my%2Dproj``."""
    escaped = path.replace("%", "%25").replace(_DELIMITER, "%2D")
    return escaped.replace(_SEPARATOR, _DELIMITER)


def decode_project_path(encoded: str) -> str:
    """Decode an encoded directory name back to a filesystem path."""
    if not encoded:
        return ""
    return unquote(encoded.replace(_DELIMITER, _SEPARATOR))


def project_name_from_path(project_path: str) -> str:
    """Extract a human-readable project name from a project path."""
    parts = [part for part in project_path.split(_SEPARATOR) if part]
    return parts[-1] if parts else "Unknown"


def is_encoded_project_dir(name: str) -> bool:
    """Claude only writes absolute paths, so every project directory starts with ``-``."""
    return name.startswith(_DELIMITER)
