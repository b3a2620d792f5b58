"""
Hand aggregated scenarios to a load-generation engine.

An engine is anything with ``register_scenarios(scenarios)`` and ``run()``.
loadscout registers the whole ordered list once, triggers the run, and does
not look at what the engine does with it.

Engines are referenced by ``"package.module:attribute"`` or by the name of an
entry point in the ``loadscout.engines`` group, e.g. in a plugin's
pyproject.toml:

    [project.entry-points."loadscout.engines"]
    my-engine = "my_engine.adapter:Engine"
"""

import importlib
import logging
import os
from collections.abc import Iterable, Sequence
from enum import Enum
from functools import reduce
from importlib.metadata import entry_points
from typing import Any, Protocol, runtime_checkable

from .aggregator import Aggregator
from .errors import EngineError
from .loader import ModuleLoader
from .telemetry import start_span

logger = logging.getLogger(__name__)

ENGINE_ENTRY_POINT_GROUP = "loadscout.engines"
DEFAULT_ENGINE = "dry-run"


@runtime_checkable
class LoadEngine(Protocol):
    """The registration and execution entry points of a load-generation engine."""

    def register_scenarios(self, scenarios: Sequence[Any]) -> Any: ...

    def run(self) -> Any: ...


class RunOutcome(Enum):
    """Terminal outcome of a discovery run."""

    HANDED_OFF = "handed_off"
    NO_SCENARIOS = "no_scenarios"


def scenario_name(scenario: Any) -> str:
    """Best-effort display name for an opaque scenario description."""
    if isinstance(scenario, dict):
        name = scenario.get("name")
    else:
        name = getattr(scenario, "name", None)
        if name is None:
            name = getattr(scenario, "scenario_name", None)
    return str(name) if name is not None else repr(scenario)


class DryRunEngine:
    """Engine that lists what it was given instead of generating load."""

    def __init__(self) -> None:
        self.scenarios: list[Any] = []

    def register_scenarios(self, scenarios: Sequence[Any]) -> "DryRunEngine":
        self.scenarios.extend(scenarios)
        return self

    def run(self) -> int:
        total = len(self.scenarios)
        for index, scenario in enumerate(self.scenarios, start=1):
            logger.info("[%d/%d] dry run: %s", index, total, scenario_name(scenario))
        return total


BUILTIN_ENGINES: dict[str, Any] = {DEFAULT_ENGINE: DryRunEngine}


def _is_engine(obj: Any) -> bool:
    return not isinstance(obj, type) and isinstance(obj, LoadEngine)


def _import_target(ref: str) -> Any:
    module_name, _, attr_path = ref.partition(":")
    if not module_name or not attr_path:
        raise EngineError(f"Invalid engine reference {ref!r}; expected 'package.module:attribute'")
    try:
        module = importlib.import_module(module_name)
        return reduce(getattr, attr_path.split("."), module)
    except (ImportError, AttributeError) as exc:
        raise EngineError(f"Cannot import engine {ref!r}: {exc}") from exc


def _entry_point_target(name: str) -> Any:
    matches = list(entry_points(group=ENGINE_ENTRY_POINT_GROUP, name=name))
    if not matches:
        known = sorted(
            set(BUILTIN_ENGINES) | {ep.name for ep in entry_points(group=ENGINE_ENTRY_POINT_GROUP)}
        )
        raise EngineError(
            f"Unknown engine {name!r}; use 'package.module:attribute' or one of: {', '.join(known)}"
        )
    try:
        return matches[0].load()
    except Exception as exc:
        raise EngineError(f"Cannot load engine entry point {name!r}: {exc}") from exc


def resolve_engine(ref: str | None = None) -> LoadEngine:
    """
    Build the engine named by ``ref``.

    ``ref`` may be None (the dry-run engine), a built-in name, an entry point
    name, or ``"package.module:attribute"``. The target may be a class or a
    zero-argument factory, which is called, or an engine instance, which is
    used as is.

    Raises:
        EngineError: if the reference cannot be resolved, the factory raises,
            or the result lacks ``register_scenarios``/``run``.
    """
    ref = (ref or DEFAULT_ENGINE).strip()
    if ref in BUILTIN_ENGINES:
        target = BUILTIN_ENGINES[ref]
    elif ":" in ref:
        target = _import_target(ref)
    else:
        target = _entry_point_target(ref)

    if _is_engine(target):
        engine = target
    elif callable(target):
        try:
            engine = target()
        except Exception as exc:
            raise EngineError(f"Cannot build engine {ref!r}: {exc}") from exc
    else:
        raise EngineError(f"Engine {ref!r} is neither an engine nor a factory")

    if not _is_engine(engine):
        raise EngineError(f"Engine {ref!r} must provide register_scenarios() and run()")
    logger.debug("Using engine %s (%s)", ref, type(engine).__name__)
    return engine


def handoff(scenarios: Sequence[Any], engine: LoadEngine) -> Any:
    """
    Register ``scenarios`` with ``engine`` and trigger its run.

    Returns whatever the engine's ``run()`` returns.

    Raises:
        ValueError: if ``scenarios`` is empty; an empty run is reported by the
            caller instead of being handed off.
    """
    if not scenarios:
        raise ValueError("Cannot hand off an empty scenario list")
    with start_span(
        "loadscout.handoff",
        attributes={
            "loadscout.scenario_count": len(scenarios),
            "loadscout.engine": type(engine).__name__,
        },
    ):
        engine.register_scenarios(scenarios)
        return engine.run()


def run_scenarios(
    paths: Iterable[str | os.PathLike],
    engine: LoadEngine,
    loader: ModuleLoader | None = None,
) -> RunOutcome:
    """Aggregate ``paths`` and hand the result to ``engine`` unless it is empty."""
    scenarios = Aggregator(loader).aggregate(paths)
    if not scenarios:
        logger.warning("No scenarios found")
        return RunOutcome.NO_SCENARIOS
    handoff(scenarios, engine)
    return RunOutcome.HANDED_OFF
