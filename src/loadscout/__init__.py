"""
loadscout - Discover load-test scenarios in external modules.

Loads module files, finds the scenario providers they declare, collects
the scenarios those providers yield, and hands the ordered list to a
load-generation engine.
"""

from .aggregator import Aggregator, DiscoveryReport, aggregate, collect_scenarios
from .capability import ScenarioSetup
from .engine import DryRunEngine, LoadEngine, RunOutcome, handoff, resolve_engine, run_scenarios
from .errors import (
    ConfigError,
    EngineError,
    InstantiationError,
    InvalidArgument,
    LoadScoutError,
    ModuleLoadError,
    SetupError,
)
from .markers import MARKER_ATTR, SetupMarker, markers_of, setup_provider

__version__ = "1.0.0"

__all__ = [
    "MARKER_ATTR",
    "Aggregator",
    "ConfigError",
    "DiscoveryReport",
    "DryRunEngine",
    "EngineError",
    "InstantiationError",
    "InvalidArgument",
    "LoadEngine",
    "LoadScoutError",
    "ModuleLoadError",
    "RunOutcome",
    "ScenarioSetup",
    "SetupError",
    "SetupMarker",
    "aggregate",
    "collect_scenarios",
    "handoff",
    "markers_of",
    "resolve_engine",
    "run_scenarios",
    "setup_provider",
]
