# core/event_bus.py — lightweight publish/subscribe event system

from collections import defaultdict
from typing import Callable


class EventBus:
    """
    Decouples modules by letting them communicate through named events.
    Any module can publish without knowing who is listening.

    Dispatch is synchronous and re-entrant: a callback may publish further
    events, and may subscribe or unsubscribe while a publish is running.

    Events used across the system:
      "agents:ready"               data: {"count": int}
      "state:changed"              data: {"key": str, "value": Any, "old": Any}
      "task:delegated"             data: {"task_id", "from_id", "to_id", "floor", "division"}
      "task:progress"              data: {"task_id", "progress", "agent", "message"}
      "task:completed"             data: {"task_id", "agent", "result"}
      "task:swarmed"               data: {"task_id", "coordinator", "agents", "floor", "divisions"}
      "task:failed"                data: {"task_id", "reason"}
      "task:rejected"              data: {"task_id", "floor", "reason"}
      "floor:<n>:task"             data: {"task_id", "title", "description", "priority", "source_id"}
      "floor:<n>:swarm-request"    data: {"task_id", "requesting_floor", "requesting_manager", "needed_divisions", "priority"}
      "floor:<n>:swarm-response"   data: {"task_id", "agents", "from_floor"}
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable]] = defaultdict(list)
        self._once: dict[str, list[Callable]] = defaultdict(list)

    def subscribe(self, event_type: str, callback: Callable) -> Callable[[], None]:
        """Register callback; returns a function that unsubscribes it."""
        self._listeners[event_type].append(callback)
        return lambda: self.unsubscribe(event_type, callback)

    def once(self, event_type: str, callback: Callable) -> None:
        self._once[event_type].append(callback)

    def unsubscribe(self, event_type: str, callback: Callable) -> None:
        listeners = self._listeners[event_type]
        if callback in listeners:
            listeners.remove(callback)

    def publish(self, event_type: str, data: dict = None) -> None:
        payload = data or {}
        for callback in list(self._listeners[event_type]):
            callback(payload)

        once = self._once.pop(event_type, None)
        if once:
            for callback in once:
                callback(payload)

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners[event_type]) + len(self._once[event_type])
