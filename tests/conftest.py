"""
Pytest configuration and shared fixtures for the Highrise simulation tests.
"""

import os
import random
import sys
from pathlib import Path

import pytest

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

# Add the application directory to path
app_root = Path(__file__).parent.parent / "highrise"
sys.path.insert(0, str(app_root))


@pytest.fixture
def bus():
    from core.event_bus import EventBus
    return EventBus()


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests"""
    return random.Random(42)


@pytest.fixture
def timers():
    from core.timers import TimerQueue
    return TimerQueue()


@pytest.fixture
def world_state(bus):
    from core.world_state import WorldState
    return WorldState(bus)


@pytest.fixture
def agent_manager(bus, rng, world_state):
    from agents.agent_manager import AgentManager
    return AgentManager(bus, rng, world_state)


@pytest.fixture
def recorder(bus):
    """Collects payloads for any event name: recorder("task:failed") -> list."""
    seen = {}

    def listen(event_type):
        if event_type not in seen:
            seen[event_type] = []
            bus.subscribe(event_type, seen[event_type].append)
        return seen[event_type]

    return listen


def make_defs(*entries):
    """Build AgentDefs from (id, floor, division) tuples."""
    from agents.roster import AgentDef
    return [AgentDef(agent_id=i, floor=f, division=d) for i, f, d in entries]


@pytest.fixture
def defs():
    return make_defs
