"""Tests for reading project directories into sessions."""

from __future__ import annotations

from pathlib import Path

from conftest import ManifestWriter, session_entry, transcript_line

from clocked.data.session_index import read_project_dir


class TestManifest:
    def test_valid_entries(self, write_manifest: ManifestWriter) -> None:
        project_dir = write_manifest(
            "/Users/me/proj",
            [
                session_entry(
                    "s1",
                    created="2026-01-15T10:00:00.000Z",
                    modified="2026-01-15T10:10:00.000Z",
                    message_count=10,
                    summary="Fix bug",
                    firstPrompt="please fix",
                    gitBranch="main",
                ),
            ],
        )
        scan = read_project_dir(project_dir)
        assert scan.errors == []
        assert scan.project_path == "/Users/me/proj"
        assert scan.project_name == "proj"
        assert scan.log_dir == "-Users-me-proj"
        [session] = scan.sessions
        assert session.id == "s1"
        assert session.project_path == "/Users/me/proj"
        assert session.duration == 600_000
        assert session.message_count == 10
        assert session.summary == "Fix bug"
        assert session.first_prompt == "please fix"
        assert session.git_branch == "main"

    def test_snake_case_fields(self, write_manifest: ManifestWriter) -> None:
        project_dir = write_manifest(
            "/p",
            [
                {
                    "session_id": "s1",
                    "created": "2026-01-15T10:00:00.000Z",
                    "modified": "2026-01-15T10:00:01.000Z",
                    "message_count": 3,
                    "first_prompt": "hi",
                    "git_branch": "dev",
                }
            ],
        )
        [session] = read_project_dir(project_dir).sessions
        assert session.message_count == 3
        assert session.first_prompt == "hi"
        assert session.git_branch == "dev"

    def test_entries_object_and_original_path(self, write_manifest: ManifestWriter) -> None:
        project_dir = write_manifest(
            "/Users/me/my/proj",
            {"version": 1, "originalPath": "/Users/me/my-proj", "entries": [session_entry("s1")]},
        )
        scan = read_project_dir(project_dir)
        assert scan.project_path == "/Users/me/my-proj"
        assert scan.project_name == "my-proj"
        assert scan.sessions[0].project_path == "/Users/me/my-proj"

    def test_invalid_entries_are_isolated(self, write_manifest: ManifestWriter) -> None:
        project_dir = write_manifest(
            "/p",
            [
                session_entry("good-1"),
                {"created": "2026-01-15T10:00:00.000Z", "modified": "2026-01-15T10:00:00.000Z"},
                session_entry("bad-date", created="not a date"),
                session_entry("good-2"),
            ],
        )
        scan = read_project_dir(project_dir)
        assert [s.id for s in scan.sessions] == ["good-1", "good-2"]
        assert len(scan.errors) == 2
        assert "missing session_id/sessionId" in scan.errors[0]
        assert "invalid created date" in scan.errors[1]

    def test_missing_created(self, write_manifest: ManifestWriter) -> None:
        project_dir = write_manifest(
            "/p", [{"sessionId": "s1", "modified": "2026-01-15T10:00:00.000Z"}]
        )
        scan = read_project_dir(project_dir)
        assert scan.sessions == []
        assert scan.errors == ["Session s1 missing created timestamp, skipping"]

    def test_duplicate_ids_last_wins(self, write_manifest: ManifestWriter) -> None:
        project_dir = write_manifest(
            "/p",
            [session_entry("s1", message_count=1), session_entry("s1", message_count=7)],
        )
        scan = read_project_dir(project_dir)
        assert [(s.id, s.message_count) for s in scan.sessions] == [("s1", 7)]

    def test_unparsable_manifest(
        self,
        write_manifest: ManifestWriter,
        write_transcript,  # type: ignore[no-untyped-def]
    ) -> None:
        project_dir = write_manifest("/p", "{ definitely not json")
        write_transcript("/p", "s1", [transcript_line("human", "2026-01-15T10:00:00Z")])
        scan = read_project_dir(project_dir)
        assert scan.sessions == []
        assert len(scan.errors) == 1
        assert "Failed to parse JSON" in scan.errors[0]

    def test_non_array_manifest(self, write_manifest: ManifestWriter) -> None:
        project_dir = write_manifest("/p", {"sessions": []})
        scan = read_project_dir(project_dir)
        assert scan.sessions == []
        assert len(scan.errors) == 1
        assert "does not contain an array" in scan.errors[0]

    def test_timestamps_normalised_to_utc(self, write_manifest: ManifestWriter) -> None:
        project_dir = write_manifest(
            "/p",
            [session_entry("s1", created="2026-01-15T12:00:00+02:00", modified="2026-01-15T10:30:00Z")],
        )
        [session] = read_project_dir(project_dir).sessions
        assert session.created == "2026-01-15T10:00:00.000Z"
        assert session.modified == "2026-01-15T10:30:00.000Z"
        assert session.duration == 1_800_000


class TestWithoutManifest:
    def test_transcripts_become_sessions(self, write_transcript, claude_dir: Path) -> None:  # type: ignore[no-untyped-def]
        write_transcript(
            "/Users/me/proj",
            "abc",
            [
                transcript_line("human", "2026-01-15T10:00:00Z", "u1", gitBranch="feat"),
                transcript_line("assistant", "2026-01-15T10:00:30Z", "a1"),
                transcript_line("human", "2026-01-15T10:02:00Z", "u2"),
            ],
        )
        write_transcript("/Users/me/proj", "empty", ["{}"])
        scan = read_project_dir(claude_dir / "projects" / "-Users-me-proj")

        [session] = scan.sessions
        assert session.id == "abc"
        assert session.created == "2026-01-15T10:00:00.000Z"
        assert session.modified == "2026-01-15T10:02:00.000Z"
        assert session.duration == 120_000
        assert session.message_count == 3
        assert session.git_branch == "feat"
        assert scan.errors == ["Session empty has no timestamped messages, skipping"]

    def test_undecodable_line_keeps_session(self, write_transcript, claude_dir: Path) -> None:  # type: ignore[no-untyped-def]
        path = write_transcript(
            "/p",
            "abc",
            [
                transcript_line("human", "2026-01-15T10:00:00Z", "u1"),
                transcript_line("assistant", "2026-01-15T10:05:00Z", "a1"),
            ],
        )
        with open(path, "ab") as file:
            file.write(b"\xff garbage line\n")
        scan = read_project_dir(claude_dir / "projects" / "-p")
        assert [(s.id, s.message_count) for s in scan.sessions] == [("abc", 2)]
        assert scan.errors == []

    def test_empty_directory(self, claude_dir: Path) -> None:
        project_dir = claude_dir / "projects" / "-p"
        project_dir.mkdir()
        scan = read_project_dir(project_dir)
        assert scan.sessions == []
        assert scan.errors == []


class TestMessageCounts:
    def test_non_finite_and_textual_counts(self, write_manifest: ManifestWriter) -> None:
        project_dir = write_manifest(
            "/p",
            '[{"sessionId": "a", "created": "2026-01-15T10:00:00Z", '
            '"modified": "2026-01-15T10:10:00Z", "messageCount": 1e999}, '
            '{"sessionId": "b", "created": "2026-01-15T10:00:00Z", '
            '"modified": "2026-01-15T10:10:00Z", "messageCount": NaN}]',
        )
        write_manifest(
            "/q",
            [
                session_entry("c", message_count="inf"),
                session_entry("d", message_count="12.0"),
                session_entry("e", message_count="many"),
            ],
        )
        scan = read_project_dir(project_dir)
        assert [(s.id, s.message_count) for s in scan.sessions] == [("a", 0), ("b", 0)]

        scan = read_project_dir(project_dir.parent / "-q")
        assert [(s.id, s.message_count) for s in scan.sessions] == [("c", 0), ("d", 12), ("e", 0)]
        assert scan.errors == []
