"""
Sample scenario module.

Run it with the dry-run engine:

    loadscout examples/sample_scenarios.py

The scenario objects are whatever the target engine expects; this sample uses
a small dataclass of its own.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from loadscout import ScenarioSetup, setup_provider


@dataclass
class Simulation:
    kind: str
    rate: int
    interval: timedelta | None = None
    during: timedelta | None = None


@dataclass
class Scenario:
    name: str
    run: Callable[[dict[str, Any]], Awaitable[dict[str, Any]]] | None = None
    warm_up: bool = True
    load_simulations: list[Simulation] = field(default_factory=list)
    init: Callable[[dict[str, Any]], Awaitable[None]] | None = None
    clean: Callable[[dict[str, Any]], Awaitable[None]] | None = None


async def _step(name: str) -> str:
    await asyncio.sleep(1)
    return f"{name} response"


async def _two_steps(context: dict[str, Any]) -> dict[str, Any]:
    first = await _step("step_1")
    second = await _step("step_2")
    ok = first == "step_1 response" and second == "step_2 response"
    return {"ok": ok, "status_code": "200" if ok else "500"}


async def _single_delay(context: dict[str, Any]) -> dict[str, Any]:
    await asyncio.sleep(1)
    return {"ok": True}


async def _populate_db(context: dict[str, Any]) -> None:
    await asyncio.sleep(5)


async def _clean_db(context: dict[str, Any]) -> None:
    await asyncio.sleep(5)


@setup_provider
class Setup(ScenarioSetup):
    def setup(self):
        yield Scenario(
            "scenario_1",
            run=_two_steps,
            warm_up=False,
            load_simulations=[
                Simulation(
                    "inject",
                    rate=10,
                    interval=timedelta(seconds=1),
                    during=timedelta(seconds=20),
                ),
                Simulation("keep_constant", rate=50, during=timedelta(seconds=30)),
            ],
        )
        yield Scenario(
            "scenario_2",
            run=_single_delay,
            warm_up=False,
            load_simulations=[Simulation("keep_constant", rate=1, during=timedelta(seconds=10))],
        )
        yield Scenario("sc_3", init=_populate_db, clean=_clean_db)
