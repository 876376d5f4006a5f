"""Observation records: immutable snapshots of subject activity.

All records are frozen dataclasses with:
- ``subject``: Name of the observed state machine
- ``timestamp``: Wall-clock time (timezone-aware) of the observation
- ``sequence``: Observer-wide counter, a total order when timestamps tie
- Descriptions computed when the record was built, so later mutation of
  a payload never changes what was recorded about it

Thread Safety:
    All records are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from datetime import datetime
from types import TracebackType
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    """Synthetic event payload recorded when a subject reports an error.

    Attributes:
        error: The reported error value, usually an exception.
        trace: Formatted traceback text (empty if none was available).

    """

    error: object
    trace: str = ""

    @classmethod
    def capture(
        cls,
        error: object,
        trace: TracebackType | str | None = None,
    ) -> ErrorEvent:
        """Wrap ``error``, formatting ``trace`` (or the error's own traceback).

        Tracebacks are only formatted for exceptions; any other error value
        keeps an empty trace unless one is passed as text.
        """
        if isinstance(trace, str):
            return cls(error=error, trace=trace)
        if not isinstance(error, BaseException):
            return cls(error=error)
        tb = trace if trace is not None else error.__traceback__
        if tb is None:
            return cls(error=error)
        return cls(error=error, trace="".join(traceback.format_exception(type(error), error, tb)))


@dataclass(frozen=True, slots=True)
class EventRecord:
    """An event dispatched to a subject (or an error it reported).

    Attributes:
        subject: Subject name.
        payload: The event value; an ``ErrorEvent`` for errors.
        timestamp: When the event was observed.
        sequence: Observer-wide ordering counter.
        description: Human-readable description of ``payload``.

    """

    subject: str
    payload: object
    timestamp: datetime
    sequence: int
    description: str

    @property
    def event_type(self) -> str:
        """Human-readable description of the payload."""
        return self.description

    @property
    def is_error(self) -> bool:
        """True if this record wraps a reported error."""
        return isinstance(self.payload, ErrorEvent)


@dataclass(frozen=True, slots=True)
class StateRecord:
    """A state change of a subject.

    Attributes:
        subject: Subject name.
        previous: State before the change.
        next: State after the change.
        timestamp: When the change was observed.
        sequence: Observer-wide ordering counter.
        previous_type: Human-readable description of ``previous``.
        next_type: Human-readable description of ``next``.

    """

    subject: str
    previous: object
    next: object
    timestamp: datetime
    sequence: int
    previous_type: str
    next_type: str


Record: TypeAlias = EventRecord | StateRecord


def now() -> datetime:
    """Return the current local time as a timezone-aware datetime."""
    return datetime.now().astimezone()
