"""Blocwatch error hierarchy.

All blocwatch-specific errors inherit from BlocwatchError for easy catching.

Only ``ConfigError`` is ever raised to callers.  The failure types below it
are *reported*, not raised: the observer hands them to its failures log and
to the module logger, so lifecycle hooks stay non-throwing while each
failure mode remains distinguishable.
"""


class BlocwatchError(Exception):
    """Base error for all blocwatch operations."""


class ConfigError(BlocwatchError):
    """Invalid or missing configuration."""


class ObservationFailure(BlocwatchError):
    """A recovered failure inside the observation engine.

    Attributes:
        cause: The exception that triggered the fallback.

    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
        self.__cause__ = cause


class DescriptionError(ObservationFailure):
    """Deriving a description from a payload failed; the type name was used."""


class DiffError(ObservationFailure):
    """Field-level diffing failed; a whole-value diff (or none) was used."""


class ListenerError(ObservationFailure):
    """A registered listener raised while being notified."""
