# delegation/floor_manager.py — per-floor task router

from __future__ import annotations
import logging
import random
from typing import Any, Optional, TYPE_CHECKING

from agents.agent import AgentState
from delegation.classifier import analyze_divisions, assess_complexity
from delegation.task import Assignment, Complexity, Strategy, Task
from settings import (
    DEFAULT_DIVISION, DEFAULT_PRIORITY, DEFAULT_TASK_SOURCE,
    MULTI_TASK_JITTER_MS, MULTI_TASK_MS_PER_DIVISION, PROGRESS_STEPS,
    SINGLE_TASK_JITTER_MS, SINGLE_TASK_MS, SPECIALTY_FLOORS,
    SWARM_TASK_JITTER_MS, SWARM_TASK_MS,
)

if TYPE_CHECKING:
    from agents.agent import Agent
    from agents.agent_manager import AgentManager
    from core.event_bus import EventBus
    from core.timers import TimerQueue
    from core.world_state import WorldState

logger = logging.getLogger(__name__)


class FloorManager:
    """
    Turns an incoming task into agent assignments on one floor.

    Data flow:
      "floor:<n>:task" → classify divisions + complexity →
        single  : one agent, idle preferred
        multi   : first agent of each matched division
        swarm   : every agent on the floor + reinforcement requests
      → interval timer emits "task:progress" ×10 → agents released →
      "task:completed"

    A floor with no agents fails the task with "task:failed". A task id that
    is still active here is turned away with "task:rejected" and never
    touches the running task's events.

    Reinforcements reported on "floor:<n>:swarm-response" are credited with a
    "task:swarmed" event only; they do not shorten the running task.
    """

    def __init__(
        self,
        floor: int,
        agent_manager: AgentManager,
        event_bus: EventBus,
        timers: TimerQueue,
        rng: Optional[random.Random] = None,
        project: Optional[dict[str, Any]] = None,
        world_state: Optional[WorldState] = None,
        specialty_floors: Optional[dict[str, int]] = None,
    ) -> None:
        self.floor = floor
        self.project = project or {}
        self._agents = agent_manager
        self._bus = event_bus
        self._timers = timers
        self._rng = rng or random.Random()
        self._world_state = world_state
        self._specialty_floors = specialty_floors or SPECIALTY_FLOORS

        self.id = f"fm-{self.project.get('id') or floor}"
        self.name = f"{self.project.get('name') or f'Floor {floor}'} Manager"

        self.active_tasks: dict[str, Assignment] = {}

        self._unsubscribe = [
            event_bus.subscribe(f"floor:{floor}:task", self._on_task),
            event_bus.subscribe(f"floor:{floor}:swarm-response", self._on_swarm_response),
        ]

    def close(self) -> None:
        """Stop listening on this floor's channels."""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

    # ------------------------------------------------------------------
    # Event bus callbacks
    # ------------------------------------------------------------------

    def _on_task(self, data: dict) -> None:
        self.receive_task(
            data["task_id"],
            data.get("title", ""),
            data.get("description", ""),
            data.get("priority", DEFAULT_PRIORITY),
            data.get("source_id"),
        )

    def _on_swarm_response(self, data: dict) -> None:
        self.handle_swarm_response(data["task_id"], data.get("agents") or [], data.get("from_floor"))

    # ------------------------------------------------------------------
    # Receive
    # ------------------------------------------------------------------

    def receive_task(
        self,
        task_id: str,
        title: str,
        description: str = "",
        priority: str = DEFAULT_PRIORITY,
        source_id: Optional[str] = None,
    ) -> Optional[Task]:
        if task_id in self.active_tasks:
            logger.warning("[%s] Rejected task %s: already active on floor %s", self.name, task_id, self.floor)
            self._bus.publish("task:rejected", {
                "task_id": task_id,
                "floor": self.floor,
                "reason": f"Task {task_id} is already active on floor {self.floor}",
            })
            return None

        task = Task(
            task_id=task_id,
            title=title or "",
            description=description or "",
            priority=priority or DEFAULT_PRIORITY,
            source_id=source_id or DEFAULT_TASK_SOURCE,
        )

        self._bus.publish("task:delegated", {
            "task_id": task_id,
            "from_id": task.source_id,
            "to_id": self.id,
            "floor": self.floor,
            "division": "management",
        })

        if not self._floor_agents():
            logger.warning("[%s] No agents available on floor %s", self.name, self.floor)
            self._fail(task_id, f"No agents on floor {self.floor}")
            return task

        task.divisions = analyze_divisions(task.title, task.description)
        task.complexity = assess_complexity(task.title, task.description, task.priority)

        logger.info(
            "[%s] Received task %s: %r -> divisions %s, complexity %s",
            self.name, task_id, task.title, task.divisions, task.complexity.value,
        )

        if task.complexity == Complexity.SWARM:
            self._initiate_swarm(task)
        elif len(task.divisions) > 1:
            self._delegate_multi(task)
        else:
            self._delegate_single(task, task.divisions[0] if task.divisions else DEFAULT_DIVISION)
        return task

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _floor_agents(self) -> list[Agent]:
        return self._agents.get_agents_by_floor(self.floor)

    def _delegate_single(self, task: Task, division: str) -> None:
        floor_agents = self._floor_agents()
        candidates = [a for a in floor_agents if a.division == division]
        if candidates:
            idle = [a for a in candidates if a.state == AgentState.IDLE]
            target = idle[0] if idle else candidates[0]
        else:
            target = self._rng.choice(floor_agents)

        self._assign(task.task_id, Strategy.SINGLE, target, division)
        self._simulate_progress(task.task_id, SINGLE_TASK_MS + self._rng.random() * SINGLE_TASK_JITTER_MS)

    def _delegate_multi(self, task: Task) -> None:
        subtasks = [
            {"parent_task_id": task.task_id, "subtask_index": i, "division": division}
            for i, division in enumerate(task.divisions)
        ]

        for sub in subtasks:
            matches = [a for a in self._floor_agents() if a.division == sub["division"]]
            if matches:
                self._assign(task.task_id, Strategy.MULTI, matches[0], sub["division"])

        duration = len(task.divisions) * MULTI_TASK_MS_PER_DIVISION + self._rng.random() * MULTI_TASK_JITTER_MS
        self._simulate_progress(task.task_id, duration)

    def _initiate_swarm(self, task: Task) -> None:
        logger.info("[%s] SWARM ACTIVATED for task %s", self.name, task.task_id)

        local_ids = []
        for agent in self._floor_agents():
            self._assign(task.task_id, Strategy.SWARM, agent, agent.division or "swarm", announce=False)
            local_ids.append(agent.agent_id)

        for floor in self.find_reinforcement_floors(task.divisions):
            self._bus.publish(f"floor:{floor}:swarm-request", {
                "task_id": task.task_id,
                "requesting_floor": self.floor,
                "requesting_manager": self.id,
                "needed_divisions": list(task.divisions),
                "priority": task.priority,
            })

        self._bus.publish("task:swarmed", {
            "task_id": task.task_id,
            "coordinator": self.id,
            "agents": local_ids,
            "floor": self.floor,
            "divisions": list(task.divisions),
        })

        self._simulate_progress(task.task_id, SWARM_TASK_MS + self._rng.random() * SWARM_TASK_JITTER_MS)

    def find_reinforcement_floors(self, divisions: list[str]) -> list[int]:
        floors: list[int] = []
        for division in divisions:
            floor = self._specialty_floors.get(division)
            if floor is not None and floor not in floors:
                floors.append(floor)
        return floors

    def handle_swarm_response(self, task_id: str, agents: list, from_floor: Optional[int]) -> None:
        if not agents:
            return

        logger.info(
            "[%s] Swarm reinforcements: %d agents from floor %s",
            self.name, len(agents), from_floor,
        )
        self._bus.publish("task:swarmed", {
            "task_id": task_id,
            "coordinator": self.id,
            "agents": [a["id"] if isinstance(a, dict) else a for a in agents],
            "floor": from_floor,
            "divisions": ["reinforcement"],
        })

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    def _assign(
        self,
        task_id: str,
        strategy: Strategy,
        agent: Agent,
        division: str,
        announce: bool = True,
    ) -> None:
        self._agents.assign(agent.agent_id, task_id)

        if announce:
            self._bus.publish("task:delegated", {
                "task_id": task_id,
                "from_id": self.id,
                "to_id": agent.agent_id,
                "floor": self.floor,
                "division": division,
            })

        assignment = self.active_tasks.get(task_id)
        if assignment is None:
            assignment = Assignment(task_id=task_id, strategy=strategy, start_time=self._timers.now)
            self.active_tasks[task_id] = assignment
        assignment.add(agent.agent_id, division)
        self._sync_world_state()

    def _fail(self, task_id: str, reason: str) -> None:
        self._bus.publish("task:failed", {"task_id": task_id, "reason": reason})

    # ------------------------------------------------------------------
    # Progress simulation
    # ------------------------------------------------------------------

    def _simulate_progress(self, task_id: str, total_ms: float) -> None:
        step_ms = total_ms / PROGRESS_STEPS
        step = 0

        def advance() -> None:
            nonlocal step
            step += 1
            progress = min(100, round(step / PROGRESS_STEPS * 100))

            self._bus.publish("task:progress", {
                "task_id": task_id,
                "progress": progress,
                "agent": self.id,
                "message": f"{self.name}: {progress}% complete",
            })

            if step >= PROGRESS_STEPS:
                timer.cancel()
                self._complete_task(task_id)

        timer = self._timers.set_interval(advance, step_ms)

    def _complete_task(self, task_id: str) -> None:
        assignment = self.active_tasks.pop(task_id, None)
        if assignment is not None:
            for agent_id in list(assignment.agent_ids):
                self._agents.release(agent_id, task_id)
        self._sync_world_state()

        self._bus.publish("task:completed", {
            "task_id": task_id,
            "agent": self.id,
            "result": f"Completed by {self.name}",
        })
        logger.info("[%s] Task %s COMPLETED", self.name, task_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_active_task_count(self) -> int:
        return len(self.active_tasks)

    def get_info(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "floor": self.floor,
            "project": self.project.get("id"),
            "active_tasks": len(self.active_tasks),
        }

    def _sync_world_state(self) -> None:
        if self._world_state is not None:
            self._world_state.update("floors", {self.floor: self.get_info()})
