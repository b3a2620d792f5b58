"""Shared fixtures: write throwaway scenario modules and keep interpreter state clean."""

import logging
import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from loadscout.loader import MODULE_NAME_PREFIX
from loadscout.telemetry import shutdown_tracing

WriteModule = Callable[..., Path]


@pytest.fixture(autouse=True)
def _isolate_interpreter(monkeypatch: pytest.MonkeyPatch):
    """Undo sys.path entries and loaded scenario modules added by a test."""
    monkeypatch.setattr(sys, "path", list(sys.path))
    before = set(sys.modules)
    yield
    for name in set(sys.modules) - before:
        if name.startswith(MODULE_NAME_PREFIX):
            del sys.modules[name]
    shutdown_tracing()
    logging.getLogger("loadscout").setLevel(logging.NOTSET)


@pytest.fixture
def write_module(tmp_path: Path) -> WriteModule:
    """Return a helper writing ``source`` to ``tmp_path/<name>`` and returning its path."""

    def _write(name: str, source: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write


def provider_module(*scenarios: str, decorator: bool = True) -> str:
    """Source of a module whose single provider yields ``scenarios`` in order."""
    items = "".join(f"        yield {s!r}\n" for s in scenarios) or "        return []\n"
    if decorator:
        return (
            "from loadscout import ScenarioSetup, setup_provider\n\n\n"
            "@setup_provider\n"
            "class Setup(ScenarioSetup):\n"
            "    def setup(self):\n" + items
        )
    return (
        "from loadscout import ScenarioSetup, SetupMarker\n\n\n"
        "class Setup(ScenarioSetup):\n"
        "    def setup(self):\n" + items + "\n\n"
        "__scenario_markers__ = [SetupMarker(Setup)]\n"
    )
