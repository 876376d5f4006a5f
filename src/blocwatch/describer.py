"""Object describer: short, display-safe strings for arbitrary payloads.

Event and state payloads share no common interface, so the only signal
guaranteed for every value is its textual form.  ``describe`` turns that
text into something short enough to show in a list, keeping structured
reprs such as ``CounterState(count: 3)`` intact and condensing long ones to
their first few ``key: value`` pairs.

``extract_fields`` is the field-level counterpart used by the differ.  It
prefers real structure (the ``Describable`` protocol, dataclasses,
mappings) and only falls back to scanning the textual form for values that
expose none.

Neither function raises.  Failures degrade to the type name (describe) and
are reported as ``DescriptionError`` through the optional ``on_failure``
callback and the module logger.

"""

from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Callable, Mapping
from typing import Protocol, TypeAlias, runtime_checkable

from blocwatch._errors import DescriptionError
from blocwatch.records import ErrorEvent

logger = logging.getLogger(__name__)

NONE_DESCRIPTION = "None"

STRUCTURED_LIMIT = 200
TEXT_LIMIT = 150
KEY_FIELD_COUNT = 3
VALUE_LIMIT = 80

# Upper bound on text handed to the regex scanners
SCAN_LIMIT = 2000

FIELD_PATTERN = re.compile(r"(\w+)\s*[:=]\s*([^,)}\]]+)")

_PLACEHOLDER = re.compile(r"<[\w.<>]+ object at 0x[0-9a-fA-F]+>")

_CLASS_NAME = re.compile(r"^(\w+)\(")

_CLASS_NAME_FALLBACKS = (
    re.compile(r"^(\w+)\s*\("),
    re.compile(r"^(\w*Event\w*)\("),
    re.compile(r"^(\w*State\w*)\("),
    re.compile(r"^([A-Z]\w*[A-Z]\w*)\("),
)

_STRUCTURED_SHAPES = (
    re.compile(r"[A-Z]\w*Event[A-Z]\w*\(.*\)"),
    re.compile(r"[A-Z]\w*State[A-Z]\w*\(.*\)"),
    re.compile(r"[A-Z][a-z]+[A-Z]\w*\(\w+\s*[:=]\s*[^,)]+.*\)"),
    re.compile(r"[A-Z]\w*(?:Event|State|Data|Model|Entity|Request|Response)\(.*\)"),
)

FailureHandler: TypeAlias = Callable[[DescriptionError], None]


@runtime_checkable
class Describable(Protocol):
    """Payloads that enumerate their own fields.

    Implement this on event/state types to get exact field-level diffs
    instead of the textual heuristic.
    """

    def describe_fields(self) -> Mapping[str, object]: ...


def truncate(text: str, limit: int = VALUE_LIMIT) -> str:
    """Cut ``text`` to ``limit`` characters, appending ``...`` when cut."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."


def type_name(value: object) -> str:
    """Return the bare runtime type name of ``value``."""
    return type(value).__name__


def describe(value: object, *, on_failure: FailureHandler | None = None) -> str:
    """Return a short human-readable description of ``value``.

    Never raises.  Any failure falls back to the bare type name.
    """
    if value is None:
        return NONE_DESCRIPTION
    try:
        return _describe(value)
    except Exception as exc:
        _report(
            DescriptionError(f"Could not describe {type_name(value)} value: {exc}", exc),
            on_failure,
        )
        return type_name(value)


def extract_fields(
    value: object,
    *,
    limit: int = VALUE_LIMIT,
) -> dict[str, str]:
    """Enumerate ``value``'s fields as ``{name: truncated text}``.

    Structural sources are tried first: ``Describable.describe_fields()``,
    dataclass fields, then mapping items.  Anything else is scanned for
    ``key: value`` pairs in its textual form.  May raise; callers own the
    fallback.
    """
    if isinstance(value, Describable):
        items = value.describe_fields().items()
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        items = ((f.name, getattr(value, f.name)) for f in dataclasses.fields(value))
    elif isinstance(value, Mapping):
        items = value.items()
    else:
        return scan_fields(str(value), limit=limit)
    return {str(k): truncate(str(v), limit) for k, v in items}


def scan_fields(text: str, *, limit: int = VALUE_LIMIT) -> dict[str, str]:
    """Scan ``text`` for ``key: value`` pairs.  Later keys overwrite earlier ones."""
    fields: dict[str, str] = {}
    for match in FIELD_PATTERN.finditer(text[:SCAN_LIMIT]):
        fields[match.group(1)] = truncate(match.group(2).strip(), limit)
    return fields


def looks_structured(text: str) -> bool:
    """True if ``text`` resembles ``Identifier(field: value, ...)``."""
    return any(pattern.fullmatch(text) for pattern in _STRUCTURED_SHAPES)


def _describe(value: object) -> str:
    if isinstance(value, ErrorEvent):
        return f"{type_name(value)}: {type_name(value.error)}"

    name = type_name(value)
    if isinstance(value, (str, int, float, bool)):
        return f"{name}: {value}"

    if _has_default_text(value):
        return name

    text = str(value)
    if _PLACEHOLDER.fullmatch(text):
        return name

    if len(text) <= STRUCTURED_LIMIT and looks_structured(text):
        return text
    if len(text) <= TEXT_LIMIT:
        return text

    return _key_fields(text[:SCAN_LIMIT]) or name


def _has_default_text(value: object) -> bool:
    cls = type(value)
    return cls.__str__ is object.__str__ and cls.__repr__ is object.__repr__


def _key_fields(text: str) -> str:
    """Rebuild ``ClassName(k: v, ...)`` from the first few fields of ``text``."""
    fields: list[str] = []
    for match in FIELD_PATTERN.finditer(text):
        fields.append(f"{match.group(1)}: {match.group(2).strip()}")
        if len(fields) >= KEY_FIELD_COUNT:
            break

    if not fields:
        return ""

    joined = ", ".join(fields)
    class_name = _class_name(text)
    return f"{class_name}({joined})" if class_name else joined


def _class_name(text: str) -> str:
    match = _CLASS_NAME.match(text)
    if match:
        return match.group(1)
    for pattern in _CLASS_NAME_FALLBACKS:
        match = pattern.match(text)
        # Single letters and two-letter prefixes are not meaningful names
        if match and len(match.group(1)) > 2:
            return match.group(1)
    return ""


def _report(failure: DescriptionError, on_failure: FailureHandler | None) -> None:
    logger.warning("%s", failure)
    if on_failure is not None:
        on_failure(failure)
