"""State differ: field-level diff between successive states.

Compares two state values of the same subject and reports, per field,
whether it was added, removed, or modified.  Fields come from
``describer.extract_fields``: real structure where the value exposes it,
``key: value`` pairs scanned from the textual form otherwise.

The differ never raises.  Extraction failures are reported as
``DiffError`` and degrade to a single whole-value comparison.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from blocwatch._errors import DiffError
from blocwatch._types import DiffKind
from blocwatch.describer import VALUE_LIMIT, extract_fields, truncate, type_name

logger = logging.getLogger(__name__)

# Field name used for whole-value changes
WHOLE_VALUE = "state"


@dataclass(frozen=True, slots=True)
class StateDiff:
    """A single field change between two states.

    Attributes:
        field: Name of the changed field (``"state"`` for whole-value changes).
        old_value: Previous text ("" when the field did not exist).
        new_value: Current text ("" when the field no longer exists).
        kind: "added", "removed" or "modified".

    """

    field: str
    old_value: str
    new_value: str
    kind: DiffKind


def diff_states(
    old: object,
    new: object,
    *,
    limit: int = VALUE_LIMIT,
    on_failure: Callable[[DiffError], None] | None = None,
) -> list[StateDiff]:
    """Diff two states field by field.

    Returns one ``StateDiff`` per changed field, sorted by field name.
    Identical references (including two ``None``) produce no changes.

    Algorithm:
        1. ``None`` on one side: a single added/removed whole-value entry.
        2. Extract fields from each side independently.
        3. Fields only in ``new`` are added, only in ``old`` removed,
           in both with different text modified.  Equal fields are skipped.
           Values that expose no fields therefore produce no changes.

    """
    if old is new:
        return []
    if old is None:
        return [StateDiff(WHOLE_VALUE, "", _text(new, limit), "added")]
    if new is None:
        return [StateDiff(WHOLE_VALUE, _text(old, limit), "", "removed")]

    try:
        old_fields = extract_fields(old, limit=limit)
        new_fields = extract_fields(new, limit=limit)
    except Exception as exc:
        failure = DiffError(
            f"Could not diff {type_name(old)} -> {type_name(new)}: {exc}", exc
        )
        logger.warning("%s", failure)
        if on_failure is not None:
            on_failure(failure)
        return _whole_value_diff(old, new, limit)

    changes: list[StateDiff] = []
    for name in sorted(old_fields.keys() | new_fields.keys()):
        old_value = old_fields.get(name)
        new_value = new_fields.get(name)
        if old_value is None:
            changes.append(StateDiff(name, "", new_value or "", "added"))
        elif new_value is None:
            changes.append(StateDiff(name, old_value, "", "removed"))
        elif old_value != new_value:
            changes.append(StateDiff(name, old_value, new_value, "modified"))
    return changes


def _whole_value_diff(old: object, new: object, limit: int) -> list[StateDiff]:
    old_text = _text(old, limit)
    new_text = _text(new, limit)
    if old_text == new_text:
        return []
    return [StateDiff(WHOLE_VALUE, old_text, new_text, "modified")]


def _text(value: object, limit: int) -> str:
    """Truncated textual form, falling back to the type name if ``str()`` fails."""
    try:
        return truncate(str(value), limit)
    except Exception as exc:
        logger.debug("str() failed for %s: %s", type_name(value), exc)
        return type_name(value)
