# agents/agent.py — one simulated worker: state, state timer and position

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from pygame.math import Vector3

from settings import AGENT_MOVE_SPEED, ARRIVAL_EPSILON

if TYPE_CHECKING:
    from agents.roster import AgentDef


class AgentState(Enum):
    WORKING    = "working"
    IDLE       = "idle"
    MEETING    = "meeting"
    NETWORKING = "networking"
    MOVING     = "moving"    # timer suspended, completes on arrival


@dataclass
class StateTimer:
    elapsed: float  = 0.0
    duration: float = 0.0

    @property
    def expired(self) -> bool:
        return self.elapsed >= self.duration


class Agent:
    """
    Simulated worker.

    The AgentManager decides *which* state comes next; the agent only holds
    the state, counts its timer and interpolates its position while moving.
    An agent pinned to a task (task_id set) keeps its state until released.
    """

    def __init__(self, definition: AgentDef, position: Vector3) -> None:
        self.agent_id = definition.agent_id
        self.division = definition.division
        self.title = definition.title
        self.home_floor: Optional[int] = definition.floor
        self.floor: Optional[int] = definition.floor

        self.position = Vector3(position)

        self.state: AgentState = AgentState.IDLE
        self.timer = StateTimer()
        self.task_id: Optional[str] = None

        # Movement
        self._move_origin: Optional[Vector3] = None
        self._move_target: Optional[Vector3] = None
        self._move_progress: float = 0.0
        self._move_floor: Optional[int] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def set_state(self, state: AgentState, duration: float) -> None:
        if state == AgentState.MOVING:
            raise ValueError("start movement with begin_move()")
        self._clear_move()
        self.state = state
        self.timer = StateTimer(0.0, duration)

    @property
    def is_moving(self) -> bool:
        return self.state == AgentState.MOVING

    @property
    def is_pinned(self) -> bool:
        return self.task_id is not None

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    def tick_timer(self, dt: float) -> bool:
        """Count dt against the state timer. Returns True once it has expired."""
        self.timer.elapsed += dt
        return self.timer.expired

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def begin_move(self, target: Vector3, floor: Optional[int] = None) -> None:
        """Start interpolating towards target; floor re-homes the agent on arrival."""
        self._move_origin = Vector3(self.position)
        self._move_target = Vector3(target)
        self._move_progress = 0.0
        self._move_floor = floor
        self.state = AgentState.MOVING
        self.timer = StateTimer()

    def update_movement(self, dt: float) -> bool:
        """Advance along the path. Returns True on arrival."""
        if self._move_target is None or self._move_origin is None:
            return True

        total = self._move_origin.distance_to(self._move_target)
        if total < ARRIVAL_EPSILON:
            self._arrive()
            return True

        self._move_progress += (AGENT_MOVE_SPEED * dt) / total
        if self._move_progress >= 1.0:
            self._arrive()
            return True

        self.position = self._move_origin.lerp(self._move_target, self._move_progress)
        return False

    def _arrive(self) -> None:
        self.position = Vector3(self._move_target)
        if self._move_floor is not None:
            self.floor = self._move_floor
        self._clear_move()

    def _clear_move(self) -> None:
        self._move_origin = None
        self._move_target = None
        self._move_progress = 0.0
        self._move_floor = None

    @property
    def destination(self) -> Optional[Vector3]:
        return Vector3(self._move_target) if self._move_target is not None else None

    def __repr__(self) -> str:
        return f"Agent({self.agent_id} {self.state.value} floor={self.floor} div={self.division})"
