"""Timeline helpers: the data side of a subject's detail view.

Merges a subject's events and state changes into one newest-first list
and provides the small formatting helpers a presentation layer needs
(clock time of a record, relative creation age, record counts).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from blocwatch.records import EventRecord, Record, StateRecord


@dataclass(frozen=True, slots=True)
class SubjectSummary:
    """Counts and lifecycle facts for one subject.

    Attributes:
        name: Subject name.
        events: Number of retained event records (errors included).
        states: Number of retained state records.
        errors: Number of retained error records.
        created_at: Last creation time, or None if never created.
        active: True between create and close.

    """

    name: str
    events: int
    states: int
    errors: int
    created_at: datetime | None
    active: bool

    @property
    def label(self) -> str:
        """One-line count label, e.g. ``"3 events • 2 states"``."""
        return f"{self.events} events • {self.states} states"


def build_timeline(
    events: Sequence[EventRecord],
    states: Sequence[StateRecord],
    *,
    show_events: bool = True,
    show_states: bool = True,
) -> list[Record]:
    """Merge events and state changes, most recent first."""
    items: list[Record] = []
    if show_events:
        items.extend(events)
    if show_states:
        items.extend(states)
    items.sort(key=lambda r: (r.timestamp, r.sequence), reverse=True)
    return items


def format_time(timestamp: datetime) -> str:
    """Format as ``HH:MM:SS.mmm``."""
    return f"{timestamp:%H:%M:%S}.{timestamp.microsecond // 1000:03d}"


def format_age(created_at: datetime | None, now: datetime) -> str:
    """Relative creation time, e.g. ``"Created 2m ago"``."""
    if created_at is None:
        return "Creation time unknown"

    seconds = int((now - created_at).total_seconds())
    if seconds >= 86_400:
        return f"Created {seconds // 86_400}d ago"
    if seconds >= 3_600:
        return f"Created {seconds // 3_600}h ago"
    if seconds >= 60:
        return f"Created {seconds // 60}m ago"
    if seconds > 0:
        return f"Created {seconds}s ago"
    return "Created just now"
