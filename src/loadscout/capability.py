"""
The capability a scenario provider implements.

A provider exposes one operation, ``setup()``, which produces the scenario
descriptions it contributes. The result may be eager (a list or tuple),
lazy (a generator), asynchronous (an async generator) or an awaitable that
resolves to either. ``iter_scenarios`` turns any of those into a plain
iterator so the rest of the pipeline only deals with one shape.
"""

import asyncio
import inspect
from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, Iterable, Iterator
from typing import Any


class ScenarioSetup(ABC):
    """Base class for scenario providers.

    Subclass it and implement ``setup()``. A class that merely defines a
    ``setup`` method is also accepted, the same way ``collections.abc``
    recognises one-method protocols.

    Example:
        class Setup(ScenarioSetup):
            def setup(self):
                yield make_scenario("scenario_1")
                yield make_scenario("scenario_2")
    """

    @abstractmethod
    def setup(self) -> Iterable[Any] | AsyncIterable[Any]:
        """Produce scenario descriptions in the order they should run."""

    @classmethod
    def __subclasshook__(cls, subclass: type) -> Any:
        if cls is ScenarioSetup:
            for klass in subclass.__mro__:
                if "setup" in klass.__dict__:
                    return callable(klass.__dict__["setup"]) or isinstance(
                        klass.__dict__["setup"], (staticmethod, classmethod)
                    )
        return NotImplemented


def implements_setup(tp: Any) -> bool:
    """True when ``tp`` is a class conforming to ScenarioSetup."""
    return isinstance(tp, type) and issubclass(tp, ScenarioSetup)


def iter_scenarios(result: Any) -> Iterator[Any]:
    """
    Stream the elements of a ``setup()`` result one at a time.

    Sync iterables are consumed directly. Async iterables and awaitables are
    driven on a private event loop, one element per step, so elements are
    still forwarded as soon as they are produced. Must not be called from a
    thread that is already running an event loop.

    Raises:
        TypeError: if ``result`` is neither iterable nor awaitable.
    """
    if isinstance(result, AsyncIterable) or inspect.isawaitable(result):
        yield from _drain_async(result)
        return
    if isinstance(result, (str, bytes)) or not isinstance(result, Iterable):
        raise TypeError(
            f"setup() must return an iterable of scenarios, got {type(result).__name__}"
        )
    yield from result


def _drain_async(result: Any) -> Iterator[Any]:
    loop = asyncio.new_event_loop()
    try:
        if inspect.isawaitable(result):
            result = loop.run_until_complete(_resolve(result))
            if not isinstance(result, AsyncIterable):
                yield from iter_scenarios(result)
                return
        iterator = result.__aiter__()
        try:
            while True:
                try:
                    item = loop.run_until_complete(_next(iterator))
                except StopAsyncIteration:
                    return
                yield item
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                loop.run_until_complete(aclose())
    finally:
        try:
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            loop.close()


async def _resolve(awaitable: Any) -> Any:
    return await awaitable


async def _next(iterator: Any) -> Any:
    return await iterator.__anext__()
