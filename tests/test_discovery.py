"""Tests for provider instantiation and scenario discovery."""

import types

import pytest

from loadscout import InstantiationError, ScenarioSetup, SetupError, SetupMarker
from loadscout.discovery import discover, instantiate
from loadscout.markers import MARKER_ATTR


def _module(*providers: type) -> types.ModuleType:
    module = types.ModuleType("fake_scenarios")
    setattr(module, MARKER_ATTR, [SetupMarker(p) for p in providers])
    return module


class Alpha(ScenarioSetup):
    def setup(self):
        yield "a1"
        yield "a2"


class Beta(ScenarioSetup):
    def setup(self):
        return ["b1"]


class NeedsArgs(ScenarioSetup):
    def __init__(self, url):
        self.url = url

    def setup(self):
        return ["never"]


class ExplodingInit(ScenarioSetup):
    def __init__(self):
        raise RuntimeError("cannot connect")

    def setup(self):
        return ["never"]


class FailsHalfway(ScenarioSetup):
    def setup(self):
        yield "ok-1"
        raise RuntimeError("database unavailable")


class ExitsInInit(ScenarioSetup):
    def __init__(self):
        raise SystemExit(1)

    def setup(self):
        return ["never"]


class ExitsInSetup(ScenarioSetup):
    def setup(self):
        yield "before-exit"
        raise SystemExit("setup gave up")


class AsyncProvider(ScenarioSetup):
    async def setup(self):
        for name in ("async-1", "async-2"):
            yield name


def test_instantiate_returns_fresh_instances() -> None:
    marker = SetupMarker(Alpha)
    first, second = instantiate(marker), instantiate(marker)
    assert isinstance(first, Alpha)
    assert first is not second


def test_instantiate_requires_zero_argument_constructor() -> None:
    with pytest.raises(InstantiationError) as excinfo:
        instantiate(SetupMarker(NeedsArgs))
    assert isinstance(excinfo.value.cause, TypeError)
    assert excinfo.value.provider is NeedsArgs


def test_discover_concatenates_markers_in_declaration_order() -> None:
    assert list(discover(_module(Alpha, Beta))) == ["a1", "a2", "b1"]
    assert list(discover(_module(Beta, Alpha))) == ["b1", "a1", "a2"]


def test_discover_module_without_markers_yields_nothing() -> None:
    assert list(discover(types.ModuleType("bare"))) == []


def test_discover_skips_provider_that_cannot_be_built(caplog: pytest.LogCaptureFixture) -> None:
    """A failing constructor skips only that marker."""
    errors: list = []
    result = list(discover(_module(ExplodingInit, NeedsArgs, Beta), on_error=errors.append))
    assert result == ["b1"]
    assert [type(e) for e in errors] == [InstantiationError, InstantiationError]
    assert "cannot connect" in caplog.text


def test_discover_keeps_scenarios_yielded_before_setup_failure() -> None:
    errors: list = []
    result = list(discover(_module(FailsHalfway, Beta), on_error=errors.append))
    assert result == ["ok-1", "b1"]
    assert len(errors) == 1
    assert isinstance(errors[0], SetupError)
    assert "database unavailable" in str(errors[0])


def test_discover_drains_async_setup() -> None:
    assert list(discover(_module(AsyncProvider, Beta))) == ["async-1", "async-2", "b1"]


def test_discover_streams_without_running_later_markers() -> None:
    """Scenarios are forwarded before later providers are even built."""
    built: list[str] = []

    class First(ScenarioSetup):
        def __init__(self):
            built.append("first")

        def setup(self):
            yield "f1"

    class Second(ScenarioSetup):
        def __init__(self):
            built.append("second")

        def setup(self):
            yield "s1"

    stream = discover(_module(First, Second))
    assert next(stream) == "f1"
    assert built == ["first"]
    assert list(stream) == ["s1"]
    assert built == ["first", "second"]


def test_discover_contains_sys_exit_from_providers() -> None:
    """SystemExit from a provider is reported like any other provider failure."""
    errors: list = []
    result = list(discover(_module(ExitsInInit, ExitsInSetup, Beta), on_error=errors.append))
    assert result == ["before-exit", "b1"]
    assert [type(e) for e in errors] == [InstantiationError, SetupError]
    assert isinstance(errors[1].cause, SystemExit)
