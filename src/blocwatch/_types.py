"""Shared type definitions for blocwatch."""

from collections.abc import Callable
from typing import Literal, TypeAlias

# Opaque identifier of an observed state machine
SubjectName: TypeAlias = str

# No-argument change callback registered on an Observer
Listener: TypeAlias = Callable[[], None]

# Classification of a per-field state change
DiffKind: TypeAlias = Literal["added", "removed", "modified"]
