"""
Error types raised while discovering scenarios.

Per-module and per-provider failures (ModuleLoadError, InstantiationError,
SetupError) are caught at their boundary and logged; they never stop a run.
InvalidArgument is raised where a marker is declared. EngineError and
ConfigError are fatal to the CLI.
"""

from pathlib import Path
from typing import Any


class LoadScoutError(Exception):
    """Base class for loadscout errors."""


class InvalidArgument(LoadScoutError, ValueError):
    """A marker references a missing or non-conforming provider type."""


class ModuleLoadError(LoadScoutError):
    """A module path could not be loaded."""

    def __init__(self, path: str | Path, cause: BaseException | str):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Cannot load module {self.path!r}: {_describe(cause)}")


class InstantiationError(LoadScoutError):
    """A declared provider type could not be constructed with no arguments."""

    def __init__(self, provider: Any, cause: BaseException):
        self.provider = provider
        self.cause = cause
        super().__init__(f"Cannot instantiate {_type_name(provider)}: {_describe(cause)}")


class SetupError(LoadScoutError):
    """A provider failed while producing its scenarios."""

    def __init__(self, provider: Any, cause: BaseException):
        self.provider = provider
        self.cause = cause
        super().__init__(f"{_type_name(provider)}.setup() failed: {_describe(cause)}")


class EngineError(LoadScoutError):
    """The load-generation engine could not be resolved or built."""


class ConfigError(LoadScoutError):
    """The configuration file is unreadable or malformed."""


def _describe(cause: BaseException | str) -> str:
    if isinstance(cause, BaseException):
        text = str(cause)
        return f"{type(cause).__name__}: {text}" if text else type(cause).__name__
    return cause


def _type_name(tp: Any) -> str:
    if isinstance(tp, type):
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)
