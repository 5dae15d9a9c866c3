# core/simulation.py — builds every subsystem and runs the frame loop

from __future__ import annotations
import logging
import random
from typing import Any, Iterable, Optional

import pygame

from agents.agent_manager import AgentManager
from agents.roster import AgentDef
from core.clock import SimClock
from core.event_bus import EventBus
from core.timers import TimerQueue
from core.world_state import WorldState
from delegation.floor_manager import FloorManager
from delegation.reinforcements import ReinforcementDispatcher
from delegation.task_logger import TaskLogger
from settings import DEFAULT_PRIORITY, FPS

logger = logging.getLogger(__name__)


class Simulation:
    """
    Top-level orchestrator. Creates the shared objects once and injects them.

    Initialization order:
      1. EventBus, WorldState, TimerQueue, SimClock, seeded RNG
      2. AgentManager (roster loaded separately via load_roster)
      3. TaskLogger + ReinforcementDispatcher (bus observers)
      4. One FloorManager per managed floor (add_floor)

    Per frame: the clock scales the real delta for the agents; the timer
    queue runs on real milliseconds so task progress ignores sim speed.
    """

    def __init__(self, seed: Optional[int] = None, speed_index: int = 1) -> None:
        self.bus = EventBus()
        self.world_state = WorldState(self.bus)
        self.timers = TimerQueue()
        self.clock = SimClock(speed_index)
        self.rng = random.Random(seed)

        self.agent_manager = AgentManager(self.bus, self.rng, self.world_state)
        self.task_logger = TaskLogger(self.bus, self.timers)
        self.reinforcements = ReinforcementDispatcher(self.agent_manager, self.bus)

        self.floor_managers: dict[int, FloorManager] = {}
        self._task_seq = 0
        self._running = False

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def load_roster(self, definitions: Iterable[AgentDef]) -> int:
        return self.agent_manager.load(definitions)

    def add_floor(self, floor: int, project: Optional[dict[str, Any]] = None) -> FloorManager:
        manager = FloorManager(
            floor,
            self.agent_manager,
            self.bus,
            self.timers,
            rng=self.rng,
            project=project,
            world_state=self.world_state,
        )
        self.floor_managers[floor] = manager
        return manager

    def submit_task(
        self,
        floor: int,
        title: str,
        description: str = "",
        priority: str = DEFAULT_PRIORITY,
        source_id: Optional[str] = None,
        task_id: Optional[str] = None,
    ) -> str:
        """Fire a task at a floor's channel, the way the command chain does."""
        if task_id is None:
            self._task_seq += 1
            task_id = f"TSK-{self._task_seq:05d}"
        self.bus.publish(f"floor:{floor}:task", {
            "task_id": task_id,
            "title": title,
            "description": description,
            "priority": priority,
            "source_id": source_id,
        })
        return task_id

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def update(self, dt_ms: float) -> None:
        dt = self.clock.tick(dt_ms)
        self.agent_manager.update(dt)
        self.timers.advance(dt_ms)

    def advance(self, seconds: float, step_ms: float = 1000.0 / FPS) -> int:
        """Run fixed-size frames without real-time pacing. Returns frame count."""
        frames = 0
        remaining = seconds * 1000.0
        while remaining > 0:
            dt_ms = min(step_ms, remaining)
            self.update(dt_ms)
            remaining -= dt_ms
            frames += 1
        return frames

    def run(self, seconds: Optional[float] = None, fps: int = FPS) -> None:
        """Real-time loop paced by pygame's clock; runs until stop() or seconds elapse."""
        pygame.init()
        pg_clock = pygame.time.Clock()
        elapsed_ms = 0.0
        self._running = True
        logger.info("Simulation running at %d fps", fps)

        while self._running:
            dt_ms = pg_clock.tick(fps)
            self.update(dt_ms)
            elapsed_ms += dt_ms
            if seconds is not None and elapsed_ms >= seconds * 1000.0:
                self._running = False

        pygame.quit()
        logger.info(
            "Simulation stopped after %.1fs real, %.1fs sim (%d frames)",
            elapsed_ms / 1000.0, self.clock.elapsed, self.clock.frame,
        )

    def stop(self) -> None:
        self._running = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def summary(self) -> dict[str, Any]:
        return {
            "agents": len(self.agent_manager),
            "states": self.agent_manager.state_counts(),
            "floors": [fm.get_info() for fm in self.floor_managers.values()],
            "tasks": self.task_logger.get_stats(),
            "sim_seconds": round(self.clock.elapsed, 2),
        }
