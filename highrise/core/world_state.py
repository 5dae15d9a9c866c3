# core/world_state.py — shared mutable record of the building

from __future__ import annotations
import copy
from typing import Any, Callable, TYPE_CHECKING, Union

if TYPE_CHECKING:
    from core.event_bus import EventBus


def _initial_state() -> dict[str, Any]:
    return {
        "current_floor": None,
        "selected_agent": None,
        "selected_division": None,
        "agents": {},
        "floors": {},
        "resources": {
            "local":  {"cpu": 0, "ram": 0, "gpu": 0, "storage": 0},
            "server": {"cpu": 0, "ram": 0, "bandwidth": 0, "storage": 0},
        },
        "alerts": [],
    }


class WorldState:
    """
    Key/value store for state shared between components and collaborators.

    Every write re-publishes on the bus:
      "state:changed"  data: {"key", "value", "old"}
      "state:<key>"    data: {"value", "old"}
    """

    def __init__(self, event_bus: EventBus) -> None:
        self._bus = event_bus
        self._state = _initial_state()

    def get(self, key: str = None) -> Any:
        """Return one value, or a shallow copy of the whole record."""
        if key is None:
            return dict(self._state)
        return self._state.get(key)

    def set(self, key: str, value: Any) -> None:
        old = self._state.get(key)
        self._state[key] = value
        self._notify(key, value, old)

    def update(self, key: str, updater: Union[Callable[[Any], Any], dict]) -> Any:
        """
        Apply updater to the value under key.

        A callable receives the old value and returns the new one; a dict is
        merged into a copy of the old dict.
        """
        old = self._state.get(key)
        if callable(updater):
            value = updater(copy.copy(old))
        else:
            value = {**(old or {}), **updater}
        self._state[key] = value
        self._notify(key, value, old)
        return value

    def _notify(self, key: str, value: Any, old: Any) -> None:
        self._bus.publish("state:changed", {"key": key, "value": value, "old": old})
        self._bus.publish(f"state:{key}", {"value": value, "old": old})
