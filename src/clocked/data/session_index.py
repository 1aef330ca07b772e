"""Read one Claude project directory into validated session records."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

from result import Err, Ok, Result

from clocked.data.paths import decode_project_path, project_name_from_path
from clocked.data.transcript import list_transcripts, parse_timestamp, read_transcript
from clocked.models.sessions import Session

logger = logging.getLogger(__name__)

MANIFEST_NAME = "sessions-index.json"


@dataclass
class ProjectScan:
    """Sessions and errors read from one encoded project directory."""

    log_dir: str
    project_path: str
    project_name: str
    sessions: list[Session] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def read_project_dir(project_dir: Path) -> ProjectScan:
    """Read the session manifest of a project directory.

    Without a manifest the directory's transcripts are the session set. Bad
    manifests and bad records become error strings; they never raise.
    """
    decoded = decode_project_path(project_dir.name)
    scan = ProjectScan(
        log_dir=project_dir.name,
        project_path=decoded,
        project_name=project_name_from_path(decoded),
    )
    index_path = project_dir / MANIFEST_NAME
    if index_path.is_file():
        _read_manifest(index_path, scan)
    else:
        _read_transcripts(project_dir, scan)

    for error in scan.errors:
        logger.warning("%s", error)
    return scan


def _read_manifest(index_path: Path, scan: ProjectScan) -> None:
    try:
        content = index_path.read_bytes()
    except OSError as exc:
        scan.errors.append(f"Failed to read {index_path}: {exc}")
        return
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        scan.errors.append(f"Failed to parse JSON in {index_path}: {exc}")
        return

    entries = _manifest_entries(data)
    if entries is None:
        scan.errors.append(f"{index_path} does not contain an array")
        return

    canonical = _canonical_path(data, entries)
    if canonical:
        scan.project_path = canonical
        scan.project_name = project_name_from_path(canonical)

    by_id: dict[str, Session] = {}
    for index, entry in enumerate(entries):
        validated = _validate_entry(entry, index, index_path, scan.project_path)
        if isinstance(validated, Ok):
            by_id[validated.ok_value.id] = validated.ok_value
        else:
            scan.errors.append(validated.err_value)
    scan.sessions = list(by_id.values())


def _manifest_entries(data: object) -> list[object] | None:
    """Accept a bare array or the ``{"entries": [...]}`` form Claude Code writes."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        entries = data.get("entries")
        if isinstance(entries, list):
            return entries
    return None


def _canonical_path(data: object, entries: list[object]) -> str:
    if isinstance(data, dict):
        original = _as_str(data.get("originalPath")).strip()
        if original:
            return original
    for entry in entries:
        if isinstance(entry, dict):
            project_path = _as_str(_first(entry, "projectPath", "project_path")).strip()
            if project_path:
                return project_path
    return ""


def _validate_entry(
    entry: object,
    index: int,
    index_path: Path,
    project_path: str,
) -> Result[Session, str]:
    if not isinstance(entry, dict):
        return Err(f"Entry {index} in {index_path} is not an object, skipping")

    session_id = _as_str(_first(entry, "session_id", "sessionId"))
    created = _as_str(entry.get("created"))
    modified = _as_str(entry.get("modified"))

    if not session_id:
        return Err(f"Entry {index} in {index_path} missing session_id/sessionId, skipping")
    if not created:
        return Err(f"Session {session_id} missing created timestamp, skipping")
    if not modified:
        return Err(f"Session {session_id} missing modified timestamp, skipping")

    created_at = parse_timestamp(created)
    if created_at is None:
        return Err(f"Session {session_id} has invalid created date: {created}, skipping")
    modified_at = parse_timestamp(modified)
    if modified_at is None:
        return Err(f"Session {session_id} has invalid modified date: {modified}, skipping")

    return Ok(
        Session(
            id=session_id,
            project_path=project_path,
            created=format_timestamp(created_at),
            modified=format_timestamp(modified_at),
            duration=_duration_ms(created_at, modified_at),
            message_count=_int(_first(entry, "message_count", "messageCount")),
            summary=_as_optional_str(entry.get("summary")),
            first_prompt=_as_optional_str(_first(entry, "first_prompt", "firstPrompt")),
            git_branch=_as_optional_str(_first(entry, "git_branch", "gitBranch")),
        )
    )


def _read_transcripts(project_dir: Path, scan: ProjectScan) -> None:
    for path in list_transcripts(project_dir):
        try:
            transcript = read_transcript(path)
        except OSError as exc:
            scan.errors.append(f"Failed to read {path}: {exc}")
            continue
        if not transcript.events:
            scan.errors.append(f"Session {path.stem} has no timestamped messages, skipping")
            continue

        first = transcript.events[0].timestamp
        last = transcript.events[-1].timestamp
        scan.sessions.append(
            Session(
                id=transcript.session_id,
                project_path=scan.project_path,
                created=format_timestamp(first),
                modified=format_timestamp(last),
                duration=_duration_ms(first, last),
                message_count=len(transcript.events),
                git_branch=transcript.git_branch,
            )
        )


def format_timestamp(value: datetime) -> str:
    """Format as the millisecond UTC form Claude writes (``...T10:00:00.000Z``)."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _duration_ms(start: datetime, end: datetime) -> int:
    return (end - start) // timedelta(milliseconds=1)


def _first(entry: dict[str, object], *keys: str) -> object:
    for key in keys:
        value = entry.get(key)
        if value is not None:
            return value
    return None


def _as_str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _as_optional_str(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _int(val: object) -> int:
    if isinstance(val, bool):
        return int(val)
    if isinstance(val, int):
        return val
    if isinstance(val, str):
        try:
            val = float(val)
        except ValueError:
            return 0
    if isinstance(val, float):
        return int(val) if math.isfinite(val) else 0
    return 0
