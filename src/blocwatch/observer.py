"""Observer: central registry of observed state machines.

A host framework calls the lifecycle hooks (``on_create``, ``on_event``,
``on_change``, ``on_error``, ``on_close``) whenever a subject transitions.
The observer describes each payload, stores the record in the subject's
bounded event or state log and notifies registered listeners.  A
presentation layer reads it back through ``events``, ``states``,
``active_subjects`` and ``timeline``.

Hooks never raise on account of the observer itself: description, diff
and listener failures are recovered locally, logged, and kept in a
bounded failures log for inspection.

Thread Safety:
    Every operation holds one re-entrant lock across both the mutation and
    listener notification, so listeners always see fully-updated state and
    may call the read methods from inside the callback.

"""

from __future__ import annotations

import contextlib
import itertools
import logging
import threading
from typing import TYPE_CHECKING, Any

from blocwatch._errors import ListenerError, ObservationFailure
from blocwatch.config import WatchConfig
from blocwatch.describer import describe, type_name
from blocwatch.differ import StateDiff, diff_states
from blocwatch.log import BoundedEventLog
from blocwatch.records import ErrorEvent, EventRecord, StateRecord, now
from blocwatch.timeline import SubjectSummary, build_timeline

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from types import TracebackType

    from blocwatch._types import Listener, SubjectName
    from blocwatch.records import Record

logger = logging.getLogger(__name__)


def subject_name(subject: object) -> SubjectName:
    """Identifier for ``subject``: strings as-is, otherwise the runtime type name."""
    if isinstance(subject, str):
        return subject
    return type_name(subject)


class Observer:
    """Records lifecycle activity of observed subjects.

    Usage::

        observer = Observer(WatchConfig(max_records=50))
        observer.add_listener(refresh_view)

        observer.on_create("CounterBloc")
        observer.on_event("CounterBloc", Increment())
        observer.on_change("CounterBloc", 0, 1)

        for record in observer.states("CounterBloc"):
            print(observer.diff(record))

    Args:
        config: Observer configuration (defaults if None).
        clock: Source of record timestamps.

    """

    __slots__ = (
        "_active",
        "_clock",
        "_config",
        "_created",
        "_events",
        "_failures",
        "_listeners",
        "_lock",
        "_sequence",
        "_states",
    )

    def __init__(
        self,
        config: WatchConfig | None = None,
        *,
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._config = config if config is not None else WatchConfig()
        self._clock = clock
        self._lock = threading.RLock()
        self._sequence = itertools.count()
        self._active: set[str] = set()
        self._created: dict[str, datetime] = {}
        self._events: dict[str, BoundedEventLog[EventRecord]] = {}
        self._states: dict[str, BoundedEventLog[StateRecord]] = {}
        self._failures: BoundedEventLog[ObservationFailure] = BoundedEventLog(
            self._config.max_failures
        )
        self._listeners: list[Listener] = []

    @property
    def config(self) -> WatchConfig:
        """The configuration this observer was built with."""
        return self._config

    # ----- Lifecycle hooks -----

    def on_create(self, subject: object) -> None:
        """Register a subject as active and (re)stamp its creation time."""
        name = subject_name(subject)
        with self._lock:
            created = self._clock()
            self._active.add(name)
            self._created[name] = created
            logger.debug("Subject created: %s at %s", name, created.isoformat())
            self._notify()

    def on_event(self, subject: object, event: object) -> None:
        """Record an event dispatched to a subject."""
        name = subject_name(subject)
        with self._lock:
            self._append_event(name, event)
            logger.debug("Event: %s -> %s", name, type_name(event))
            self._notify()

    def on_change(self, subject: object, previous_state: object, next_state: object) -> None:
        """Record a state change of a subject."""
        name = subject_name(subject)
        with self._lock:
            record = StateRecord(
                subject=name,
                previous=previous_state,
                next=next_state,
                timestamp=self._clock(),
                sequence=next(self._sequence),
                previous_type=self._describe(previous_state),
                next_type=self._describe(next_state),
            )
            self._state_log(name).append(record)
            logger.debug(
                "State: %s -> %s -> %s", name, type_name(previous_state), type_name(next_state)
            )
            self._notify()

    def on_error(
        self,
        subject: object,
        error: object,
        trace: TracebackType | str | None = None,
    ) -> None:
        """Record an error reported by a subject as an ``ErrorEvent``."""
        name = subject_name(subject)
        with self._lock:
            self._append_event(name, ErrorEvent.capture(error, trace))
            logger.debug("Error: %s -> %r", name, error)
            self._notify()

    def on_transition(
        self,
        subject: object,
        event: object,
        previous_state: object,
        next_state: object,
    ) -> None:
        """Log a full transition.  Nothing is stored; ``on_change`` covers it."""
        logger.debug(
            "Transition: %s -> %s -> %s -> %s",
            subject_name(subject),
            type_name(event),
            type_name(previous_state),
            type_name(next_state),
        )

    def on_close(self, subject: object) -> None:
        """Mark a subject inactive.  Its recorded history is kept."""
        name = subject_name(subject)
        with self._lock:
            self._active.discard(name)
            logger.debug("Subject closed: %s", name)
            self._notify()

    # ----- Queries -----

    def events(self, name: SubjectName) -> list[EventRecord]:
        """Recorded events for a subject, oldest first (empty if unknown)."""
        with self._lock:
            log = self._events.get(name)
            return log.all() if log is not None else []

    def states(self, name: SubjectName) -> list[StateRecord]:
        """Recorded state changes for a subject, oldest first (empty if unknown)."""
        with self._lock:
            log = self._states.get(name)
            return log.all() if log is not None else []

    def active_subjects(self) -> list[SubjectName]:
        """Active subject names, most recently created first.

        Ties break by name.  Subjects without a creation time come last,
        ordered by name.
        """
        with self._lock:
            names = sorted(self._active)
            dated = [n for n in names if n in self._created]
            undated = [n for n in names if n not in self._created]
            # Stable sort keeps the name order among equal timestamps
            dated.sort(key=self._created.__getitem__, reverse=True)
            return dated + undated

    def subjects(self) -> list[SubjectName]:
        """Every subject with recorded activity or data, active or not, by name."""
        with self._lock:
            return sorted(
                self._created.keys() | self._active
                | self._events.keys() | self._states.keys()
            )

    def creation_time(self, name: SubjectName) -> datetime | None:
        """Last creation time of a subject, or None if it was never created."""
        with self._lock:
            return self._created.get(name)

    def is_active(self, name: SubjectName) -> bool:
        with self._lock:
            return name in self._active

    def failures(self) -> list[ObservationFailure]:
        """Recovered failures, oldest first."""
        return self._failures.all()

    def timeline(
        self,
        name: SubjectName,
        *,
        show_events: bool = True,
        show_states: bool = True,
    ) -> list[Record]:
        """Events and state changes of a subject merged, most recent first."""
        with self._lock:
            return build_timeline(
                self.events(name),
                self.states(name),
                show_events=show_events,
                show_states=show_states,
            )

    def summary(self, name: SubjectName) -> SubjectSummary:
        with self._lock:
            events = self.events(name)
            return SubjectSummary(
                name=name,
                events=len(events),
                states=len(self.states(name)),
                errors=sum(1 for e in events if e.is_error),
                created_at=self._created.get(name),
                active=name in self._active,
            )

    def diff(self, record: StateRecord) -> list[StateDiff]:
        """Field-level changes of a recorded state transition."""
        return diff_states(
            record.previous,
            record.next,
            limit=self._config.diff_value_limit,
            on_failure=self._record_failure,
        )

    def stats(self) -> dict[str, Any]:
        """Return summary statistics across all subjects."""
        with self._lock:
            return {
                "subjects": len(self.subjects()),
                "active": len(self._active),
                "events": sum(len(log) for log in self._events.values()),
                "states": sum(len(log) for log in self._states.values()),
                "evicted": sum(
                    log.evicted
                    for log in itertools.chain(self._events.values(), self._states.values())
                ),
                "failures": len(self._failures),
                "max_records": self._config.max_records,
            }

    # ----- Mutations -----

    def clear_subject(self, name: SubjectName) -> None:
        """Empty a subject's event and state logs."""
        with self._lock:
            if (log := self._events.get(name)) is not None:
                log.clear()
            if (log := self._states.get(name)) is not None:
                log.clear()
            self._notify()

    def clear_all(self) -> None:
        """Drop every log, the active set and all creation times."""
        with self._lock:
            self._events.clear()
            self._states.clear()
            self._active.clear()
            self._created.clear()
            self._failures.clear()
            self._notify()

    # ----- Listeners -----

    def add_listener(self, listener: Listener) -> None:
        """Register a no-argument callback run after every mutation."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        """Unregister a callback.  Unknown callbacks are ignored."""
        with self._lock, contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    # ----- Session -----

    def close(self) -> None:
        """End the monitoring session: clear all data, then drop listeners."""
        with self._lock:
            self.clear_all()
            self._listeners.clear()

    def __enter__(self) -> Observer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ----- Internals -----

    def _append_event(self, name: str, payload: object) -> None:
        record = EventRecord(
            subject=name,
            payload=payload,
            timestamp=self._clock(),
            sequence=next(self._sequence),
            description=self._describe(payload),
        )
        self._event_log(name).append(record)

    def _event_log(self, name: str) -> BoundedEventLog[EventRecord]:
        log = self._events.get(name)
        if log is None:
            log = self._events[name] = BoundedEventLog(self._config.max_records)
        return log

    def _state_log(self, name: str) -> BoundedEventLog[StateRecord]:
        log = self._states.get(name)
        if log is None:
            log = self._states[name] = BoundedEventLog(self._config.max_records)
        return log

    def _describe(self, value: object) -> str:
        return describe(value, on_failure=self._record_failure)

    def _record_failure(self, failure: ObservationFailure) -> None:
        self._failures.append(failure)

    def _notify(self) -> None:
        for listener in tuple(self._listeners):
            try:
                listener()
            except Exception as exc:
                failure = ListenerError(f"Listener {_label(listener)} failed: {exc}", exc)
                logger.warning("%s", failure)
                self._record_failure(failure)


def _label(listener: Listener) -> str:
    """Display name of a listener; never raises."""
    name = getattr(listener, "__qualname__", None)
    if isinstance(name, str):
        return name
    try:
        return repr(listener)
    except Exception:
        return type_name(listener)
