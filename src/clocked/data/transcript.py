"""Stream timestamped message events out of Claude JSONL transcripts."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path

from clocked.models.transcripts import Role, Transcript, TranscriptEvent

logger = logging.getLogger(__name__)

_ROLES: dict[str, Role] = {
    "user": Role.HUMAN,
    "human": Role.HUMAN,
    "assistant": Role.ASSISTANT,
}


def iter_transcript_events(path: Path) -> Generator[TranscriptEvent]:
    """Stream-parse a transcript and yield its message events in file order.

    Only the role, timestamp and uuid of each message are kept. Blank lines,
    invalid JSON, meta records, API error records, records without a valid
    timestamp and repeated uuids are skipped.
    """
    for event in _scan(path, Transcript(session_id=path.stem)):
        yield event


def read_transcript(path: Path) -> Transcript:
    """Read a whole transcript into chronologically sorted events."""
    transcript = Transcript(session_id=path.stem)
    transcript.events = sorted(_scan(path, transcript), key=lambda e: e.timestamp)
    return transcript


def list_transcripts(project_dir: Path) -> list[Path]:
    """Transcript files of a project directory, sorted by name."""
    if not project_dir.is_dir():
        return []
    return sorted(p for p in project_dir.glob("*.jsonl") if p.is_file())


def _scan(path: Path, transcript: Transcript) -> Generator[TranscriptEvent]:
    seen_uuids: set[str] = set()
    # Undecodable bytes only spoil their own line, which then fails json.loads.
    with open(path, encoding="utf-8", errors="replace") as file:
        for line_num, line in enumerate(file, 1):
            line = line.strip()
            if not line:
                continue
            try:
                raw = json.loads(line)
            except json.JSONDecodeError:
                logger.debug("Invalid JSON at %s:%d", path, line_num)
                transcript.skipped_lines += 1
                continue
            if not isinstance(raw, dict):
                transcript.skipped_lines += 1
                continue

            branch = raw.get("gitBranch")
            if isinstance(branch, str) and branch and transcript.git_branch is None:
                transcript.git_branch = branch

            event = _event_from_record(raw)
            if event is None:
                continue
            if event.uuid:
                if event.uuid in seen_uuids:
                    continue
                seen_uuids.add(event.uuid)
            yield event


def _event_from_record(raw: dict[str, object]) -> TranscriptEvent | None:
    if raw.get("isMeta") is True or raw.get("isApiErrorMessage") is True:
        return None

    role = _role_of(raw)
    if role is None:
        return None

    timestamp = parse_timestamp(raw.get("timestamp"))
    if timestamp is None:
        return None

    uuid = raw.get("uuid")
    return TranscriptEvent(
        role=role,
        timestamp=timestamp,
        uuid=uuid if isinstance(uuid, str) else "",
    )


def _role_of(raw: dict[str, object]) -> Role | None:
    record_type = raw.get("type")
    if isinstance(record_type, str) and record_type in _ROLES:
        return _ROLES[record_type]
    # Typed records other than plain messages (summary, progress, ...) are not turns.
    if record_type is not None and record_type != "message":
        return None
    candidates: list[object] = [raw.get("role")]
    message = raw.get("message")
    if isinstance(message, dict):
        candidates.append(message.get("role"))
    for candidate in candidates:
        if isinstance(candidate, str) and candidate in _ROLES:
            return _ROLES[candidate]
    return None


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO 8601 timestamp into UTC; naive values are taken as UTC."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)
    except (ValueError, OverflowError):
        # Offsets that push the instant outside the datetime range.
        return None
