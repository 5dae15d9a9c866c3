# agents/roster.py — agent definitions supplied by the roster collaborator

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from settings import DIVISIONS, PHASE_FLOOR_MAP, VIRTUAL_DIVISIONS

logger = logging.getLogger(__name__)


class RosterError(ValueError):
    """A roster entry cannot be turned into an agent."""


@dataclass(frozen=True)
class AgentDef:
    """
    Static description of one agent. floor and division may be missing for
    malformed entries; such agents simply drop out of queries on that field.
    """
    agent_id: str
    floor: Optional[int] = None
    division: Optional[str] = None
    title: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AgentDef:
        agent_id = data.get("id")
        if not agent_id:
            raise RosterError(f"roster entry has no id: {data!r}")

        floor = data.get("floor")
        if floor is None and "phase" in data:
            try:
                phase = int(data["phase"])
            except (TypeError, ValueError):
                phase = None
            floor = PHASE_FLOOR_MAP.get(phase, PHASE_FLOOR_MAP[4])
        if floor is not None:
            try:
                floor = int(floor)
            except (TypeError, ValueError):
                floor = None

        division = data.get("division") or None
        if division is not None and division not in DIVISIONS and division not in VIRTUAL_DIVISIONS:
            logger.warning("Agent %s has unknown division %r", agent_id, division)
        return cls(
            agent_id=str(agent_id),
            floor=floor,
            division=division,
            title=data.get("title") or data.get("name") or "",
        )


def parse_roster(data: Union[list, dict]) -> list[AgentDef]:
    """
    Accept either a plain list of entries or the building format
    {"systemAgents": [...], "projectAgents": [...]}.
    """
    if isinstance(data, dict):
        entries: Iterable[dict] = [
            *data.get("systemAgents", []),
            *data.get("projectAgents", []),
            *data.get("agents", []),
        ]
    else:
        entries = data

    defs = [AgentDef.from_dict(entry) for entry in entries]
    seen: set[str] = set()
    for d in defs:
        if d.agent_id in seen:
            raise RosterError(f"duplicate agent id {d.agent_id!r}")
        seen.add(d.agent_id)
    return defs


def load_roster(path: Union[str, Path]) -> list[AgentDef]:
    with open(path, encoding="utf-8") as fh:
        return parse_roster(json.load(fh))
