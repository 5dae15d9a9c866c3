"""
Unit tests for agents/roster.py, agents/agent.py and agents/agent_manager.py

Covers initial state assignment, timed weighted transitions, the moving
sub-state, direct commands and roster queries.
"""

import json
import random
from collections import Counter

import pytest
from pygame.math import Vector3

from agents.agent import AgentState
from agents.agent_manager import AgentManager, weighted_pick
from agents.roster import AgentDef, RosterError, load_roster, parse_roster
from settings import FLOOR_HEIGHT, STATE_TIMINGS, TRANSITION_WEIGHTS


class TestRoster:
    """Tests for roster parsing"""

    def test_plain_list(self):
        defs = parse_roster([{"id": "a", "floor": 3, "division": "legal", "title": "Counsel"}])
        assert defs == [AgentDef("a", 3, "legal", "Counsel")]

    def test_building_format_maps_phase_to_floor(self):
        defs = parse_roster({
            "systemAgents": [{"id": "a", "floor": 19, "division": "security"}],
            "projectAgents": [{"id": "p", "phase": 7, "division": "production"}],
        })
        assert [d.floor for d in defs] == [19, 13]

    def test_string_phase_maps_to_floor(self):
        defs = parse_roster({"projectAgents": [
            {"id": "p", "phase": "6"}, {"id": "q", "phase": "late"},
        ]})
        assert [d.floor for d in defs] == [14, 15]

    def test_malformed_entry_keeps_agent(self):
        (d,) = parse_roster([{"id": "x"}])
        assert d.floor is None
        assert d.division is None

    def test_unknown_division_is_kept_with_warning(self, caplog):
        (d,) = parse_roster([{"id": "x", "floor": 1, "division": "catering"}])
        assert d.division == "catering"
        assert "unknown division" in caplog.text

    def test_missing_id_raises(self):
        with pytest.raises(RosterError):
            parse_roster([{"floor": 1, "division": "legal"}])

    def test_duplicate_id_raises(self):
        with pytest.raises(RosterError):
            parse_roster([{"id": "a"}, {"id": "a"}])

    def test_load_roster_from_file(self, tmp_path):
        path = tmp_path / "agents.json"
        path.write_text(json.dumps([{"id": "a", "floor": 2, "division": "testing"}]))
        assert load_roster(path)[0].division == "testing"


class TestWeightedPick:
    """Tests for the weighted random choice"""

    def test_distribution_matches_relative_weights(self):
        rng = random.Random(7)
        weights = {"a": 2.0, "b": 1.0, "c": 1.0}   # not normalised
        n = 20000
        counts = Counter(weighted_pick(weights, rng) for _ in range(n))
        assert counts["a"] / n == pytest.approx(0.5, abs=0.02)
        assert counts["b"] / n == pytest.approx(0.25, abs=0.02)
        assert counts["c"] / n == pytest.approx(0.25, abs=0.02)

    def test_zero_weight_never_picked(self):
        rng = random.Random(1)
        row = TRANSITION_WEIGHTS["moving"]
        picks = {weighted_pick(row, rng) for _ in range(5000)}
        assert "moving" not in picks

    def test_falls_back_to_last_entry(self):
        class Top:
            # returns the top of [0, 1) so float drift can leave r > 0
            def random(self):
                return 1.0

        assert weighted_pick({"a": 0.1, "b": 0.2}, Top()) == "b"

    def test_empty_table_raises(self):
        with pytest.raises(ValueError):
            weighted_pick({}, random.Random())


class TestAgentManagerInit:
    """Tests for population load"""

    def test_initial_states_and_timers(self, agent_manager, defs):
        agent_manager.load(defs(*[(f"a{i}", 1, "testing") for i in range(200)]))

        states = Counter(a.state for a in agent_manager.get_all_agents())
        assert set(states) == {AgentState.WORKING, AgentState.IDLE}
        assert 60 < states[AgentState.WORKING] < 140

        for agent in agent_manager.get_all_agents():
            low, high = STATE_TIMINGS[agent.state.value]
            assert low <= agent.timer.duration <= high
            assert agent.timer.elapsed == 0.0

    def test_load_publishes_ready_and_records_state(self, agent_manager, defs, recorder, world_state):
        ready = recorder("agents:ready")
        agent_manager.load(defs(("a", 1, "legal"), ("b", 2, "legal")))
        assert ready == [{"count": 2}]
        assert world_state.get("agents")["count"] == 2

    def test_position_is_on_floor(self, agent_manager, defs):
        agent_manager.load(defs(("a", 4, "marketing")))
        agent = agent_manager.get_agent("a")
        assert agent.position.y == pytest.approx(4 * FLOOR_HEIGHT + 0.05)
        assert -8.75 - 1.25 <= agent.position.x <= -8.75 + 1.25

    def test_duplicate_agent_rejected(self, agent_manager, defs):
        agent_manager.load(defs(("a", 1, "legal")))
        with pytest.raises(ValueError):
            agent_manager.add_agent(AgentDef("a", 1, "legal"))


class TestAgentManagerUpdate:
    """Tests for timed transitions and movement"""

    def test_no_transition_before_duration(self, agent_manager, defs):
        agent_manager.load(defs(("a", 1, "testing")))
        agent = agent_manager.set_state("a", "working")
        agent_manager.update(agent.timer.duration / 2)
        assert agent.state == AgentState.WORKING
        assert agent.timer.elapsed == pytest.approx(agent.timer.duration / 2)

    def test_transition_distribution_converges(self, bus, defs):
        manager = AgentManager(bus, random.Random(2024))
        n = 4000
        manager.load(defs(*[(f"a{i}", 1, "testing") for i in range(n)]))
        for agent in manager.get_all_agents():
            manager.set_state(agent.agent_id, "working")

        # longest working duration is 30s, so every agent transitions exactly once
        manager.update(30.0)

        counts = Counter(a.state.value for a in manager.get_all_agents())
        row = TRANSITION_WEIGHTS["working"]
        total = sum(row.values())
        for state, weight in row.items():
            assert counts[state] / n == pytest.approx(weight / total, abs=0.03)

    def test_moving_agent_skips_timer(self, agent_manager, defs):
        agent_manager.load(defs(("a", 1, "testing")))
        agent = agent_manager.move_to("a", Vector3(100, 0, 100))
        agent_manager.update(5.0)
        assert agent.state == AgentState.MOVING
        assert agent.timer.elapsed == 0.0

    def test_movement_interpolates_then_transitions(self, bus, defs):
        manager = AgentManager(bus, random.Random(3))
        manager.load(defs(("a", 1, "testing")))
        agent = manager.get_agent("a")
        start = Vector3(agent.position)
        target = start + Vector3(3.0, 0, 0)
        manager.move_to("a", target)

        manager.update(1.0)     # 1.5 units of 3.0
        assert agent.state == AgentState.MOVING
        assert agent.position.x == pytest.approx(start.x + 1.5)

        manager.update(1.0)     # arrives, draws from the moving row
        assert agent.position.x == pytest.approx(target.x)
        assert agent.state != AgentState.MOVING
        assert agent.state.value in TRANSITION_WEIGHTS["moving"]

    def test_transition_to_moving_targets_same_floor(self, bus, defs):
        weights = {state: {"moving": 1.0} for state in TRANSITION_WEIGHTS}
        weights["moving"] = {"idle": 1.0}
        manager = AgentManager(bus, random.Random(5), transition_weights=weights)
        manager.load(defs(("a", 6, "legal")))
        agent = manager.get_agent("a")

        manager.update(31.0)
        assert agent.state == AgentState.MOVING
        assert agent.destination.y == pytest.approx(6 * FLOOR_HEIGHT + 0.05)

        manager.update(60.0)
        assert agent.state == AgentState.IDLE
        assert agent.floor == 6

    def test_unknown_state_row_uses_idle_row(self, bus, defs):
        weights = {"idle": {"meeting": 1.0}}
        manager = AgentManager(bus, random.Random(5), transition_weights=weights)
        manager.load(defs(("a", 1, "legal")))
        manager.set_state("a", "networking")
        manager.update(16.0)
        assert manager.get_agent("a").state == AgentState.MEETING

    def test_move_to_floor_rehomes_on_arrival(self, agent_manager, defs):
        agent_manager.load(defs(("a", 19, "security")))
        agent = agent_manager.move_to_floor("a", 15)
        assert agent.floor == 19
        agent_manager.update(100.0)
        assert agent.floor == 15
        assert agent.home_floor == 19


class TestDirectCommands:
    """Tests for state overrides used by the router"""

    def test_assign_pins_agent(self, agent_manager, defs):
        agent_manager.load(defs(("a", 1, "legal")))
        agent = agent_manager.assign("a", "T1")
        agent_manager.update(1000.0)
        assert agent.state == AgentState.WORKING
        assert agent.task_id == "T1"

    def test_release_returns_to_idle(self, agent_manager, defs):
        agent_manager.load(defs(("a", 1, "legal")))
        agent_manager.assign("a", "T1")
        assert agent_manager.release("a", "T1")
        agent = agent_manager.get_agent("a")
        assert agent.state == AgentState.IDLE
        assert agent.task_id is None

    def test_release_ignores_other_task(self, agent_manager, defs):
        agent_manager.load(defs(("a", 1, "legal")))
        agent_manager.assign("a", "T2")
        assert not agent_manager.release("a", "T1")
        assert agent_manager.get_agent("a").task_id == "T2"

    def test_assign_interrupts_movement(self, agent_manager, defs):
        agent_manager.load(defs(("a", 1, "legal")))
        agent_manager.move_to("a", Vector3(50, 0, 50))
        agent = agent_manager.assign("a", "T1")
        assert agent.state == AgentState.WORKING
        assert agent.destination is None

    def test_set_state_rejects_moving(self, agent_manager, defs):
        agent_manager.load(defs(("a", 1, "legal")))
        with pytest.raises(ValueError):
            agent_manager.set_state("a", "moving")

    def test_unknown_agent_raises(self, agent_manager):
        with pytest.raises(KeyError):
            agent_manager.set_state("ghost", "idle")


class TestQueries:
    """Tests for read-only roster queries"""

    def test_filters(self, agent_manager, defs):
        agent_manager.load(defs(
            ("a", 1, "legal"), ("b", 1, "security"), ("c", 2, "legal"),
            ("d", None, "legal"), ("e", 1, None),
        ))
        assert {a.agent_id for a in agent_manager.get_agents_by_floor(1)} == {"a", "b", "e"}
        assert {a.agent_id for a in agent_manager.get_agents_by_division("legal")} == {"a", "c", "d"}
        assert agent_manager.get_agent("c").floor == 2
        assert agent_manager.get_agent("zzz") is None
        assert len(agent_manager.get_all_agents()) == 5

    def test_state_counts_cover_all_states(self, agent_manager, defs):
        agent_manager.load(defs(("a", 1, "legal")))
        counts = agent_manager.state_counts()
        assert set(counts) == {s.value for s in AgentState}
        assert sum(counts.values()) == 1
