"""Tests for engine resolution and the handoff to it."""

import logging
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from conftest import WriteModule, provider_module

from loadscout import DryRunEngine, EngineError, RunOutcome, handoff, resolve_engine, run_scenarios
from loadscout.engine import scenario_name


class RecordingEngine:
    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    def register_scenarios(self, scenarios):
        self.calls.append(("register", scenarios))
        return self

    def run(self):
        self.calls.append(("run", None))
        return "finished"


ENGINE_MODULE = """
class Engine:
    instances = 0

    def __init__(self):
        Engine.instances += 1
        self.scenarios = []

    def register_scenarios(self, scenarios):
        self.scenarios.extend(scenarios)

    def run(self):
        return len(self.scenarios)


def make_engine():
    return Engine()


def broken_factory():
    raise RuntimeError("license expired")


class Incomplete:
    def register_scenarios(self, scenarios):
        pass


ready = Engine()
NOT_CALLABLE = 3
"""


@pytest.fixture
def engine_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    (tmp_path / "fake_engine_mod.py").write_text(ENGINE_MODULE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, "fake_engine_mod", raising=False)
    return "fake_engine_mod"


def test_handoff_registers_then_runs() -> None:
    engine = RecordingEngine()
    scenarios = ["s1", "s2"]
    assert handoff(scenarios, engine) == "finished"
    assert engine.calls == [("register", scenarios), ("run", None)]
    assert engine.calls[0][1] is scenarios


def test_handoff_rejects_empty_list() -> None:
    engine = RecordingEngine()
    with pytest.raises(ValueError, match="empty"):
        handoff([], engine)
    assert engine.calls == []


def test_run_scenarios_hands_off_exact_list(write_module: WriteModule) -> None:
    """A provider yielding scenario_1 and scenario_2 reaches the engine unchanged."""
    path = write_module(
        "named.py",
        """
        from loadscout import ScenarioSetup, setup_provider

        @setup_provider
        class Setup(ScenarioSetup):
            def setup(self):
                yield {"name": "scenario_1"}
                yield {"name": "scenario_2"}
        """,
    )
    engine = RecordingEngine()
    assert run_scenarios([path], engine) is RunOutcome.HANDED_OFF
    assert engine.calls == [
        ("register", [{"name": "scenario_1"}, {"name": "scenario_2"}]),
        ("run", None),
    ]


def test_run_scenarios_without_scenarios_never_touches_engine(tmp_path: Path) -> None:
    engine = RecordingEngine()
    assert run_scenarios([tmp_path / "missing.py"], engine) is RunOutcome.NO_SCENARIOS
    assert run_scenarios([], engine) is RunOutcome.NO_SCENARIOS
    assert engine.calls == []


def test_run_scenarios_mixed_paths(write_module: WriteModule, tmp_path: Path) -> None:
    good = write_module("good.py", provider_module("only"))
    engine = RecordingEngine()
    assert run_scenarios([tmp_path / "bad.py", good], engine) is RunOutcome.HANDED_OFF
    assert engine.calls[0] == ("register", ["only"])


def test_resolve_default_engine() -> None:
    assert isinstance(resolve_engine(), DryRunEngine)
    assert isinstance(resolve_engine("dry-run"), DryRunEngine)


def test_resolve_engine_class_factory_and_instance(engine_module: str) -> None:
    by_class = resolve_engine(f"{engine_module}:Engine")
    by_factory = resolve_engine(f"{engine_module}:make_engine")
    by_instance = resolve_engine(f"{engine_module}:ready")
    assert type(by_class).__name__ == "Engine"
    assert type(by_factory).__name__ == "Engine"
    assert by_instance is sys.modules[engine_module].ready


@pytest.mark.parametrize(
    "ref, message",
    [
        ("no_such_module_xyz:Engine", "Cannot import"),
        ("fake_engine_mod:Missing", "Cannot import"),
        ("fake_engine_mod:broken_factory", "license expired"),
        ("fake_engine_mod:Incomplete", "must provide"),
        ("fake_engine_mod:NOT_CALLABLE", "neither"),
        ("fake_engine_mod:", "Invalid engine reference"),
        ("not-an-installed-engine", "Unknown engine"),
    ],
)
def test_resolve_engine_errors(engine_module: str, ref: str, message: str) -> None:
    with pytest.raises(EngineError, match=message):
        resolve_engine(ref)


def test_dry_run_engine_logs_each_scenario(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="loadscout")
    engine = DryRunEngine()
    engine.register_scenarios([{"name": "scenario_1"}, SimpleNamespace(name="scenario_2")])
    assert engine.run() == 2
    assert "[1/2] dry run: scenario_1" in caplog.text
    assert "[2/2] dry run: scenario_2" in caplog.text


def test_scenario_name_fallbacks() -> None:
    assert scenario_name({"name": "from-dict"}) == "from-dict"
    assert scenario_name(SimpleNamespace(name="from-attr")) == "from-attr"
    assert scenario_name(SimpleNamespace(scenario_name="alt")) == "alt"
    assert scenario_name("plain") == "'plain'"
