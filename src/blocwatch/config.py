"""Blocwatch configuration.

WatchConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass

from blocwatch._errors import ConfigError


@dataclass(frozen=True, slots=True)
class WatchConfig:
    """Configuration for an Observer.

    Attributes:
        max_records: Maximum records retained per subject, applied to the
            event log and the state log independently.
        max_failures: Maximum recovered failures retained for diagnostics.
        diff_value_limit: Length at which diff values are truncated
            (an ellipsis is appended beyond it).

    """

    max_records: int = 100
    max_failures: int = 100
    diff_value_limit: int = 80

    def __post_init__(self) -> None:
        for name in ("max_records", "max_failures", "diff_value_limit"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"{name} must be an integer, got {type(value).__name__}"
                raise ConfigError(msg)
            if value < 1:
                msg = f"{name} must be at least 1, got {value}"
                raise ConfigError(msg)
