"""
Controller connecting a display loop (or a headless runner) to the simulation.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .particle_group import ParticleGroup, PopulationSnapshot


logger = logging.getLogger(__name__)


@dataclass
class SimulationController:
    group: "ParticleGroup"
    is_running: bool = False
    speed_multiplier: float = 1.0
    _step_accumulator: float = 0.0

    def toggle_running(self) -> None:
        self.is_running = not self.is_running
        logger.debug("Simulation %s", "running" if self.is_running else "paused")

    def step(self, ticks: int = 1) -> None:
        """Advance by ``ticks`` regardless of the running flag."""
        for _ in range(ticks):
            self.group.update()

    def reset(self) -> None:
        self.is_running = False
        self._step_accumulator = 0.0

    def update(self, dt_seconds: float) -> int:
        """
        Called once per frame. Runs as many whole ticks as the speed multiplier
        has accumulated and returns how many ran.

        ``dt_seconds`` is unused: a frame is worth ``speed_multiplier`` ticks
        however long it took, so a slow frame never makes bodies jump further.
        """
        if not self.is_running:
            return 0
        self._step_accumulator += self.speed_multiplier
        ticks = int(self._step_accumulator)
        if ticks >= 1:
            self.step(ticks)
            self._step_accumulator -= ticks
        return ticks

    def snapshot(self) -> "PopulationSnapshot":
        return self.group.snapshot()
