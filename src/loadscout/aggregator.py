"""
Merge scenarios from many module paths into one ordered list.

Paths are processed strictly in the order given: load, discover, append. A
path that fails to load is logged and contributes nothing; the remaining
paths are still processed. An empty result is a normal outcome ("no
scenarios found"), not an error.
"""

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from opentelemetry.trace import Span

from .discovery import discover
from .errors import LoadScoutError, ModuleLoadError
from .loader import ModuleLoader
from .telemetry import mark_failed, start_span

logger = logging.getLogger(__name__)


@dataclass
class PathResult:
    """Outcome of one module path."""

    path: str
    scenario_count: int = 0
    loaded: bool = False


@dataclass
class DiscoveryReport:
    """What a single aggregation pass found and what it skipped."""

    scenarios: list[Any] = field(default_factory=list)
    paths: list[PathResult] = field(default_factory=list)
    failures: list[tuple[str, LoadScoutError]] = field(default_factory=list)

    @property
    def no_scenarios(self) -> bool:
        return not self.scenarios


class Aggregator:
    """Collect scenarios from module paths, in path order."""

    def __init__(self, loader: ModuleLoader | None = None):
        self.loader = loader or ModuleLoader()
        self.report = DiscoveryReport()

    def collect(self, paths: Iterable[str | os.PathLike]) -> Iterator[Any]:
        """
        Stream scenarios from every path in order.

        ``self.report`` is replaced when iteration starts and filled in as
        scenarios are produced.
        """
        path_list = [os.fspath(p) for p in paths]
        report = DiscoveryReport()
        self.report = report
        with start_span(
            "loadscout.aggregate", attributes={"loadscout.path_count": len(path_list)}
        ) as span:
            for path in path_list:
                yield from self._collect_path(path, span, report)
            span.set_attribute("loadscout.scenario_count", len(report.scenarios))

    def aggregate(self, paths: Iterable[str | os.PathLike]) -> list[Any]:
        """Return every scenario from ``paths`` as one ordered list (possibly empty)."""
        scenarios = list(self.collect(paths))
        report = self.report
        failed = len(report.failures)
        logger.info(
            "Discovered %d scenario(s) from %d path(s)%s",
            len(scenarios),
            len(report.paths),
            f", {failed} failure(s) skipped" if failed else "",
        )
        return scenarios

    def _collect_path(self, path: str, parent: Span, report: DiscoveryReport) -> Iterator[Any]:
        result = PathResult(path)
        report.paths.append(result)
        with start_span(
            "loadscout.load_module", parent, {"loadscout.module_path": path}
        ) as span:
            try:
                module = self.loader.load(path)
            except ModuleLoadError as exc:
                logger.error("%s", exc, exc_info=logger.isEnabledFor(logging.DEBUG))
                mark_failed(span, exc)
                report.failures.append((path, exc))
                return
            result.loaded = True

            def record(error: LoadScoutError) -> None:
                report.failures.append((path, error))

            for scenario in discover(module, span, on_error=record):
                result.scenario_count += 1
                report.scenarios.append(scenario)
                yield scenario
            span.set_attribute("loadscout.scenario_count", result.scenario_count)


def collect_scenarios(
    paths: Iterable[str | os.PathLike], loader: ModuleLoader | None = None
) -> Iterator[Any]:
    """Lazily stream scenarios from ``paths`` in order."""
    return Aggregator(loader).collect(paths)


def aggregate(paths: Iterable[str | os.PathLike], loader: ModuleLoader | None = None) -> list[Any]:
    """Collect scenarios from ``paths`` into one ordered list."""
    return Aggregator(loader).aggregate(paths)
