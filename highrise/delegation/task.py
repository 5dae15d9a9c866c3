# delegation/task.py — an incoming task and the live record of who is doing it

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


class Complexity(Enum):
    STANDARD = "standard"
    COMPLEX  = "complex"
    SWARM    = "swarm"


class Strategy(Enum):
    SINGLE = "single"
    MULTI  = "multi"
    SWARM  = "swarm"


@dataclass
class Task:
    """
    A unit of work handed to a floor. divisions and complexity are filled in
    by the classifier when the floor receives it.
    """
    task_id: str
    title: str             = ""
    description: str       = ""
    priority: str          = "normal"
    source_id: str         = ""

    divisions: list[str]   = field(default_factory=list)   # ranked, 1-3 entries
    complexity: Complexity = Complexity.STANDARD

    def __repr__(self) -> str:
        return f"Task({self.task_id} {self.complexity.value} divisions={self.divisions})"


@dataclass
class Assignment:
    """Active task on a floor. Sub-assignments share the parent task id."""
    task_id: str
    strategy: Strategy
    start_time: float                                   # timer-queue ms
    agent_ids: list[str] = field(default_factory=list)
    divisions: list[str] = field(default_factory=list)  # parallel to agent_ids

    def add(self, agent_id: str, division: str) -> None:
        if agent_id not in self.agent_ids:
            self.agent_ids.append(agent_id)
            self.divisions.append(division)

    @property
    def division(self) -> str:
        return self.divisions[0] if self.divisions else ""
