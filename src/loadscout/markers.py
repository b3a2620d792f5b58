"""
Marker declarations attached to scenario modules.

A module advertises its providers through the module-level attribute
``__scenario_markers__``: a single SetupMarker or a list of them. The marker
validates its provider when it is constructed, so a malformed module fails
while it is being loaded instead of during discovery.

Two equivalent ways to declare a provider:

    __scenario_markers__ = [SetupMarker(Setup)]

    @setup_provider
    class Setup(ScenarioSetup):
        ...
"""

import logging
import sys
from dataclasses import dataclass
from types import ModuleType
from typing import Any, TypeVar

from .capability import ScenarioSetup, implements_setup
from .errors import InvalidArgument

logger = logging.getLogger(__name__)

MARKER_ATTR = "__scenario_markers__"

T = TypeVar("T", bound=type)


@dataclass(frozen=True)
class SetupMarker:
    """Names the provider type a module contributes scenarios through."""

    provider: type[ScenarioSetup]

    def __post_init__(self) -> None:
        if self.provider is None:
            raise InvalidArgument("provider must not be None")
        if not implements_setup(self.provider):
            raise InvalidArgument(
                f'"{_qualname(self.provider)}" does not implement '
                f"{ScenarioSetup.__module__}.{ScenarioSetup.__qualname__}"
            )

    @property
    def provider_name(self) -> str:
        return _qualname(self.provider)


def setup_provider(cls: T) -> T:
    """Class decorator: declare ``cls`` as a provider of the module defining it."""
    marker = SetupMarker(cls)
    module = sys.modules.get(cls.__module__)
    if module is None:
        raise InvalidArgument(f"module {cls.__module__!r} of {cls.__qualname__} is not loaded")
    existing = getattr(module, MARKER_ATTR, None)
    if existing is None:
        declared: list[SetupMarker] = []
    elif isinstance(existing, SetupMarker):
        declared = [existing]
    else:
        declared = list(existing)
    declared.append(marker)
    setattr(module, MARKER_ATTR, declared)
    return cls


def markers_of(module: ModuleType) -> list[SetupMarker]:
    """Return the markers declared on ``module`` in declaration order."""
    declared = getattr(module, MARKER_ATTR, None)
    if declared is None:
        return []
    if isinstance(declared, SetupMarker):
        return [declared]
    if not isinstance(declared, (list, tuple)):
        logger.warning(
            "Ignoring %s on %s: expected a SetupMarker or a list of them, got %s",
            MARKER_ATTR,
            module.__name__,
            type(declared).__name__,
        )
        return []
    markers: list[SetupMarker] = []
    for item in declared:
        if isinstance(item, SetupMarker):
            markers.append(item)
        else:
            logger.warning(
                "Ignoring non-marker entry %r in %s of %s", item, MARKER_ATTR, module.__name__
            )
    return markers


def _qualname(tp: Any) -> str:
    if isinstance(tp, type):
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)
