"""Blocwatch: observation and diffing engine for state machines.

Intercepts lifecycle transitions of bloc/cubit-style state machines, keeps
a memory-bounded history per subject, and turns successive states into
readable field-level diffs.

Quick start::

    from blocwatch import Observer, WatchConfig

    observer = Observer(WatchConfig(max_records=100))
    observer.on_create("CounterBloc")
    observer.on_event("CounterBloc", "increment")
    observer.on_change("CounterBloc", "Counter(count: 0)", "Counter(count: 1)")

    record = observer.states("CounterBloc")[-1]
    observer.diff(record)   # [StateDiff(field='count', ...)]

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "BoundedEventLog",
    "Observer",
    "StateDiff",
    "WatchConfig",
    "__version__",
    "describe",
    "diff_states",
    "load_config",
]

_LAZY = {
    "BoundedEventLog": "blocwatch.log",
    "Observer": "blocwatch.observer",
    "StateDiff": "blocwatch.differ",
    "WatchConfig": "blocwatch.config",
    "describe": "blocwatch.describer",
    "diff_states": "blocwatch.differ",
    "load_config": "blocwatch.config_loader",
}


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import blocwatch`` fast while providing a clean top-level API.
    """
    module_name = _LAZY.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
