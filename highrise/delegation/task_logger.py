# delegation/task_logger.py — ledger of every task seen on the bus

from __future__ import annotations
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Any, Optional, TYPE_CHECKING

from settings import MAX_TASK_LOG, MAX_TASK_MESSAGES

if TYPE_CHECKING:
    from core.event_bus import EventBus
    from core.timers import TimerQueue


@dataclass
class TaskEntry:
    task_id: str
    status: str                 = "delegated"   # delegated → in-progress → swarming → completed | failed
    delegation_chain: list      = field(default_factory=list)
    assigned_agents: list[str]  = field(default_factory=list)
    swarm_agents: list[str]     = field(default_factory=list)
    progress: int               = 0
    logs: deque                 = field(default_factory=lambda: deque(maxlen=MAX_TASK_MESSAGES))
    created_at: float           = 0.0
    completed_at: Optional[float] = None
    result: Optional[str]       = None

    @property
    def duration(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return self.completed_at - self.created_at


class TaskLogger:
    """
    Follows a task from hand-off through delegation to completion.

    Listens to the task:* events; publishes "tasklog:update" with fresh stats
    after every change. Finished entries leave the active table for a bounded
    completed log.
    """

    def __init__(self, event_bus: EventBus, timers: Optional[TimerQueue] = None) -> None:
        self._bus = event_bus
        self._timers = timers

        self.tasks: dict[str, TaskEntry] = {}
        self.completed_log: deque[TaskEntry] = deque(maxlen=MAX_TASK_LOG)

        event_bus.subscribe("task:delegated", self._on_delegated)
        event_bus.subscribe("task:swarmed", self._on_swarmed)
        event_bus.subscribe("task:progress", self._on_progress)
        event_bus.subscribe("task:completed", self._on_completed)
        event_bus.subscribe("task:failed", self._on_failed)

    # ------------------------------------------------------------------
    # Event callbacks
    # ------------------------------------------------------------------

    def _on_delegated(self, data: dict) -> None:
        entry = self._entry(data["task_id"])
        entry.delegation_chain.append({
            "from_id": data.get("from_id"),
            "to_id": data.get("to_id"),
            "floor": data.get("floor"),
            "division": data.get("division"),
            "timestamp": self._now(),
        })
        to_id = data.get("to_id")
        if data.get("division") != "management" and to_id and to_id not in entry.assigned_agents:
            entry.assigned_agents.append(to_id)
        self._log(entry, f"Delegated {data.get('from_id')} -> {to_id}")
        self._changed()

    def _on_swarmed(self, data: dict) -> None:
        entry = self._entry(data["task_id"])
        entry.status = "swarming"
        for agent_id in data.get("agents", []):
            if agent_id not in entry.swarm_agents:
                entry.swarm_agents.append(agent_id)
        self._log(entry, f"Swarm of {len(data.get('agents', []))} on floor {data.get('floor')}")
        self._changed()

    def _on_progress(self, data: dict) -> None:
        entry = self._entry(data["task_id"])
        if entry.status != "swarming":
            entry.status = "in-progress"
        entry.progress = data.get("progress", entry.progress)
        self._log(entry, data.get("message", f"{entry.progress}%"))
        self._changed()

    def _on_completed(self, data: dict) -> None:
        entry = self._entry(data["task_id"])
        entry.status = "completed"
        entry.progress = 100
        entry.result = data.get("result")
        self._finish(entry)

    def _on_failed(self, data: dict) -> None:
        entry = self._entry(data["task_id"])
        entry.status = "failed"
        entry.result = data.get("reason")
        self._finish(entry)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _entry(self, task_id: str) -> TaskEntry:
        entry = self.tasks.get(task_id)
        if entry is None:
            entry = TaskEntry(task_id=task_id, created_at=self._now())
            self.tasks[task_id] = entry
        return entry

    def _finish(self, entry: TaskEntry) -> None:
        entry.completed_at = self._now()
        self._log(entry, entry.result or entry.status)
        self.tasks.pop(entry.task_id, None)
        self.completed_log.append(entry)
        self._changed()

    def _log(self, entry: TaskEntry, message: str) -> None:
        entry.logs.append({"timestamp": self._now(), "message": message})

    def _now(self) -> float:
        return self._timers.now if self._timers is not None else 0.0

    def _changed(self) -> None:
        self._bus.publish("tasklog:update", self.get_stats())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_task(self, task_id: str) -> Optional[TaskEntry]:
        entry = self.tasks.get(task_id)
        if entry is not None:
            return entry
        for done in reversed(self.completed_log):
            if done.task_id == task_id:
                return done
        return None

    def get_stats(self) -> dict[str, Any]:
        finished = Counter(e.status for e in self.completed_log)
        return {
            "total": len(self.tasks) + len(self.completed_log),
            "active": len(self.tasks),
            "completed": finished["completed"],
            "failed": finished["failed"],
            "swarming": sum(1 for e in self.tasks.values() if e.status == "swarming"),
        }
