# agents/agent_manager.py — owns every agent and drives the behaviour state machine

from __future__ import annotations
import logging
import random
from collections import Counter
from typing import Iterable, Optional, TYPE_CHECKING, Union

from pygame.math import Vector3

from agents.agent import Agent, AgentState
from settings import (
    DEFAULT_FLOOR, DIVISION_ZONES, FALLBACK_STATE, FLOOR_HEIGHT,
    INITIAL_STATES, STATE_TIMINGS, TRANSITION_WEIGHTS, ZONE_JITTER,
)

if TYPE_CHECKING:
    from agents.roster import AgentDef
    from core.event_bus import EventBus
    from core.world_state import WorldState

logger = logging.getLogger(__name__)


def weighted_pick(weights: dict[str, float], rng: random.Random) -> str:
    """
    Pick a key with probability proportional to its weight.

    Weights need not sum to 1. If float error leaves the remainder positive
    after the last entry, the last entry is returned.
    """
    entries = list(weights.items())
    if not entries:
        raise ValueError("cannot pick from an empty weight table")

    total = sum(w for _, w in entries)
    r = rng.random() * total
    for state, w in entries:
        r -= w
        if r <= 0:
            return state
    return entries[-1][0]


class AgentManager:
    """
    Creates and ticks all Agent instances.

    Each non-moving agent counts down a sampled duration; when it runs out the
    next state is drawn from the transition weights of the current state.
    Moving agents skip the timer and transition on arrival using the
    "moving" row. Agents pinned to a task are left alone until released.

    The FloorManager reads the roster through the query methods and overrides
    states with assign() / release().
    """

    def __init__(
        self,
        event_bus: EventBus,
        rng: Optional[random.Random] = None,
        world_state: Optional[WorldState] = None,
        state_timings: Optional[dict[str, tuple[float, float]]] = None,
        transition_weights: Optional[dict[str, dict[str, float]]] = None,
    ) -> None:
        self._bus = event_bus
        self._rng = rng or random.Random()
        self._world_state = world_state
        self._timings = state_timings or STATE_TIMINGS
        self._weights = transition_weights or TRANSITION_WEIGHTS

        self._agents: dict[str, Agent] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self, definitions: Iterable[AgentDef]) -> int:
        for definition in definitions:
            self.add_agent(definition)

        count = len(self._agents)
        if self._world_state is not None:
            self._world_state.set("agents", {
                "count": count,
                "by_floor": dict(Counter(a.floor for a in self._agents.values())),
            })
        self._bus.publish("agents:ready", {"count": count})
        logger.info("Initialized %d agents", count)
        return count

    def add_agent(self, definition: AgentDef) -> Agent:
        if definition.agent_id in self._agents:
            raise ValueError(f"agent {definition.agent_id!r} already exists")

        position = self.floor_position(definition.floor, definition.division)
        agent = Agent(definition, position)
        initial = AgentState(self._rng.choice(INITIAL_STATES))
        agent.set_state(initial, self._sample_duration(initial))

        self._agents[agent.agent_id] = agent
        return agent

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, dt: float) -> None:
        """dt = sim seconds since the last frame."""
        for agent in list(self._agents.values()):
            if agent.is_moving:
                if agent.update_movement(dt):
                    self._transition(agent)
            elif agent.is_pinned:
                continue
            elif agent.tick_timer(dt):
                self._transition(agent)

    def _transition(self, agent: Agent) -> None:
        row = self._weights.get(agent.state.value) or self._weights[FALLBACK_STATE]
        next_state = AgentState(weighted_pick(row, self._rng))
        self._enter(agent, next_state)

    def _enter(self, agent: Agent, state: AgentState) -> None:
        if state == AgentState.MOVING:
            zone = self._rng.choice(list(DIVISION_ZONES))
            agent.begin_move(self.floor_position(agent.floor, zone))
        else:
            agent.set_state(state, self._sample_duration(state))

    def _sample_duration(self, state: AgentState) -> float:
        low, high = self._timings.get(state.value) or self._timings[FALLBACK_STATE]
        return self._rng.uniform(low, high)

    def floor_position(self, floor: Optional[int], division: Optional[str]) -> Vector3:
        """World position inside a division zone, jittered so agents don't stack."""
        y = (floor or DEFAULT_FLOOR) * FLOOR_HEIGHT + 0.05
        x, z = DIVISION_ZONES.get(division, (0.0, 0.0))
        jitter_x = (self._rng.random() - 0.5) * ZONE_JITTER
        jitter_z = (self._rng.random() - 0.5) * ZONE_JITTER
        return Vector3(x + jitter_x, y, z + jitter_z)

    # ------------------------------------------------------------------
    # Direct commands
    # ------------------------------------------------------------------

    def set_state(self, agent_id: str, state: Union[AgentState, str]) -> Agent:
        """Force a non-moving state and resample its duration."""
        agent = self._agents[agent_id]
        state = AgentState(state)
        agent.set_state(state, self._sample_duration(state))
        return agent

    def move_to(self, agent_id: str, destination: Vector3, floor: Optional[int] = None) -> Agent:
        agent = self._agents[agent_id]
        agent.begin_move(destination, floor)
        return agent

    def move_to_floor(self, agent_id: str, floor: int, division: Optional[str] = None) -> Agent:
        """Send an agent to another floor; its current floor changes on arrival."""
        agent = self._agents[agent_id]
        destination = self.floor_position(floor, division or agent.division)
        agent.begin_move(destination, floor)
        return agent

    def assign(self, agent_id: str, task_id: str) -> Agent:
        """Pin an agent to a task in the working state."""
        agent = self.set_state(agent_id, AgentState.WORKING)
        agent.task_id = task_id
        return agent

    def release(self, agent_id: str, task_id: Optional[str] = None) -> bool:
        """
        Unpin an agent and send it back to idle. With task_id, only release
        if the agent is still pinned to that task.
        """
        agent = self._agents.get(agent_id)
        if agent is None:
            return False
        if task_id is not None and agent.task_id != task_id:
            return False
        agent.task_id = None
        self.set_state(agent_id, AgentState.IDLE)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_agents_by_floor(self, floor: int) -> list[Agent]:
        return [a for a in self._agents.values() if a.floor is not None and a.floor == floor]

    def get_agents_by_division(self, division: str) -> list[Agent]:
        return [a for a in self._agents.values() if a.division is not None and a.division == division]

    def get_agent(self, agent_id: str) -> Optional[Agent]:
        return self._agents.get(agent_id)

    def get_all_agents(self) -> list[Agent]:
        return list(self._agents.values())

    def state_counts(self) -> dict[str, int]:
        counts = Counter(a.state.value for a in self._agents.values())
        return {state.value: counts.get(state.value, 0) for state in AgentState}

    def __len__(self) -> int:
        return len(self._agents)
