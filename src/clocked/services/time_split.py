"""Human vs. assistant time split derived from transcript timestamps.

Every pair of consecutive events is one gap. A gap longer than the idle
threshold is idle time. Any other gap is credited to whoever wrote the event
that closes it: a gap ending in an assistant message is Claude time, a gap
ending in a human message is human time.

Transcript timestamps mark when a message was finished, so streaming time is
compressed. The split is directional, not exact.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import timedelta

from clocked.config import DEFAULT_IDLE_THRESHOLD_MS
from clocked.models.analytics import TimeSplit
from clocked.models.transcripts import Role, TranscriptEvent
from clocked.services.cost import calculate_time_ratio

_ONE_MS = timedelta(milliseconds=1)

__all__ = [
    "DEFAULT_IDLE_THRESHOLD_MS",
    "aggregate_time_splits",
    "calculate_time_split",
    "format_duration",
    "format_time_split",
]


def calculate_time_split(
    events: Sequence[TranscriptEvent],
    idle_threshold_ms: int = DEFAULT_IDLE_THRESHOLD_MS,
) -> TimeSplit:
    """Compute the time split of chronologically sorted events.

    Fewer than two events give an all-zero split. Negative gaps (out of order
    events) count as walked pairs but contribute no time.
    """
    if len(events) < 2:
        return TimeSplit()

    human_time = 0
    claude_time = 0
    idle_time = 0
    gap_count = 0

    for prev, curr in zip(events, events[1:]):
        delta = _delta_ms(prev, curr)
        if delta < 0:
            continue
        if delta > idle_threshold_ms:
            idle_time += delta
            gap_count += 1
        elif curr.role is Role.ASSISTANT:
            claude_time += delta
        else:
            human_time += delta

    return _build(
        human_time=human_time,
        claude_time=claude_time,
        idle_time=idle_time,
        message_pair_count=len(events) - 1,
        gap_count=gap_count,
    )


def aggregate_time_splits(splits: Iterable[TimeSplit]) -> TimeSplit:
    """Sum splits; percentages are recomputed from the totals, never averaged."""
    human_time = claude_time = idle_time = pairs = gaps = 0
    for split in splits:
        human_time += split.human_time
        claude_time += split.claude_time
        idle_time += split.idle_time
        pairs += split.message_pair_count
        gaps += split.gap_count
    return _build(
        human_time=human_time,
        claude_time=claude_time,
        idle_time=idle_time,
        message_pair_count=pairs,
        gap_count=gaps,
    )


def format_duration(ms: int) -> str:
    """Format milliseconds as ``2h 5m`` or ``5m``."""
    hours, rest = divmod(max(ms, 0), 3_600_000)
    minutes = rest // 60_000
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_time_split(split: TimeSplit) -> str:
    """One-line summary, used for logging and the CLI."""
    return " | ".join(
        [
            f"Active: {format_duration(split.active_time)}",
            f"Human: {format_duration(split.human_time)} ({split.human_percentage}%)",
            f"Claude: {format_duration(split.claude_time)} ({split.claude_percentage}%)",
            f"Idle: {format_duration(split.idle_time)}",
            f"Pairs: {split.message_pair_count}, Gaps: {split.gap_count}",
        ]
    )


def _delta_ms(prev: TranscriptEvent, curr: TranscriptEvent) -> int:
    return (curr.timestamp - prev.timestamp) // _ONE_MS


def _build(
    *,
    human_time: int,
    claude_time: int,
    idle_time: int,
    message_pair_count: int,
    gap_count: int,
) -> TimeSplit:
    human_pct, claude_pct = calculate_time_ratio(human_time, claude_time)
    return TimeSplit(
        active_time=human_time + claude_time,
        human_time=human_time,
        claude_time=claude_time,
        idle_time=idle_time,
        human_percentage=human_pct,
        claude_percentage=claude_pct,
        message_pair_count=message_pair_count,
        gap_count=gap_count,
    )
