# delegation/reinforcements.py — specialty floors lending agents to a swarm

from __future__ import annotations
import logging
from typing import Optional, TYPE_CHECKING

from agents.agent import AgentState
from settings import REINFORCEMENTS_PER_FLOOR, SPECIALTY_FLOORS

if TYPE_CHECKING:
    from agents.agent_manager import AgentManager
    from core.event_bus import EventBus

logger = logging.getLogger(__name__)


class ReinforcementDispatcher:
    """
    Answers "floor:<n>:swarm-request" for every specialty floor.

    Up to REINFORCEMENTS_PER_FLOOR free agents (idle or working, not pinned to
    a task) are reported back on "floor:<requesting>:swarm-response" and walk
    to the requesting floor. When the task completes or fails they walk home.
    Requests from a floor with no manager listening for the reply are ignored.
    """

    def __init__(
        self,
        agent_manager: AgentManager,
        event_bus: EventBus,
        floors: Optional[list[int]] = None,
        per_floor: int = REINFORCEMENTS_PER_FLOOR,
    ) -> None:
        self._agents = agent_manager
        self._bus = event_bus
        self._per_floor = per_floor
        self.floors = sorted(set(floors if floors is not None else SPECIALTY_FLOORS.values()))

        # task_id -> [(agent_id, home_floor)]
        self.loans: dict[str, list[tuple[str, Optional[int]]]] = {}

        for floor in self.floors:
            event_bus.subscribe(
                f"floor:{floor}:swarm-request",
                lambda data, floor=floor: self.dispatch_from(floor, data),
            )
        event_bus.subscribe("task:completed", self._on_task_finished)
        event_bus.subscribe("task:failed", self._on_task_finished)

    def dispatch_from(self, floor: int, data: dict) -> list[str]:
        requesting_floor = data["requesting_floor"]
        if self._bus.listener_count(f"floor:{requesting_floor}:swarm-response") == 0:
            logger.info("No manager on floor %s to receive reinforcements", requesting_floor)
            return []

        available = [
            a for a in self._agents.get_agents_by_floor(floor)
            if a.state in (AgentState.IDLE, AgentState.WORKING) and not a.is_pinned
        ]
        to_send = available[:self._per_floor]
        if not to_send:
            logger.info("Floor %s has no free agents for task %s", floor, data.get("task_id"))
            return []

        loans = self.loans.setdefault(data["task_id"], [])
        for agent in to_send:
            loans.append((agent.agent_id, agent.floor))
            self._agents.move_to_floor(agent.agent_id, requesting_floor)

        self._bus.publish(f"floor:{requesting_floor}:swarm-response", {
            "task_id": data["task_id"],
            "agents": [{"id": a.agent_id, "division": a.division} for a in to_send],
            "from_floor": floor,
        })
        return [a.agent_id for a in to_send]

    def _on_task_finished(self, data: dict) -> None:
        loans = self.loans.pop(data.get("task_id"), None)
        if not loans:
            return
        for agent_id, home_floor in loans:
            agent = self._agents.get_agent(agent_id)
            if agent is None or home_floor is None or agent.is_pinned:
                continue
            self._agents.move_to_floor(agent_id, home_floor)
        logger.info("Returned %d reinforcements for task %s", len(loans), data.get("task_id"))
