"""
Find the providers a loaded module declares and pull their scenarios.

For every marker on the module, in declaration order, a fresh provider
instance is built with no arguments and its ``setup()`` is drained. Scenarios
are streamed to the caller as they are produced. A provider that cannot be
built, or whose setup raises, is logged and skipped; the remaining markers
still run.
"""

import logging
from collections.abc import Callable, Iterator
from types import ModuleType
from typing import Any

from opentelemetry.trace import Span

from .capability import ScenarioSetup, iter_scenarios
from .errors import InstantiationError, LoadScoutError, SetupError
from .markers import SetupMarker, markers_of
from .telemetry import mark_failed, start_span

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[LoadScoutError], None]


def instantiate(marker: SetupMarker) -> ScenarioSetup:
    """
    Build a new provider instance for ``marker``.

    Raises:
        InstantiationError: if the provider cannot be constructed with no
            arguments (abstract, requires arguments, or its constructor raised).
    """
    try:
        return marker.provider()
    except (Exception, SystemExit) as exc:
        raise InstantiationError(marker.provider, exc) from exc


def discover_marker(
    marker: SetupMarker,
    parent: Span | None = None,
    on_error: ErrorHandler | None = None,
) -> Iterator[Any]:
    """Stream the scenarios of a single marker's provider.

    ``on_error`` is called with each InstantiationError or SetupError after it
    has been logged.
    """
    with start_span(
        "loadscout.discover_marker",
        parent,
        {"loadscout.provider": marker.provider_name},
    ) as span:
        try:
            instance = instantiate(marker)
        except InstantiationError as exc:
            logger.error("%s; skipping provider", exc, exc_info=_debug_traceback())
            mark_failed(span, exc)
            if on_error is not None:
                on_error(exc)
            return

        count = 0
        try:
            for scenario in iter_scenarios(instance.setup()):
                count += 1
                yield scenario
        except (Exception, SystemExit) as exc:
            error = SetupError(marker.provider, exc)
            logger.error(
                "%s; keeping %d scenario(s) produced before the failure",
                error,
                count,
                exc_info=_debug_traceback(),
            )
            mark_failed(span, error)
            if on_error is not None:
                on_error(error)
        finally:
            span.set_attribute("loadscout.scenario_count", count)

        logger.debug("%s produced %d scenario(s)", marker.provider_name, count)


def discover(
    module: ModuleType,
    parent: Span | None = None,
    on_error: ErrorHandler | None = None,
) -> Iterator[Any]:
    """
    Stream every scenario contributed by the markers declared on ``module``.

    Order is marker declaration order, then each provider's yield order. A
    module without markers contributes nothing.
    """
    markers = markers_of(module)
    if not markers:
        logger.warning("No scenario markers declared in %s", getattr(module, "__file__", module))
    for marker in markers:
        yield from discover_marker(marker, parent, on_error)


def _debug_traceback() -> bool:
    return logger.isEnabledFor(logging.DEBUG)
