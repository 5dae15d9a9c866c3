"""
Unit tests for delegation/classifier.py
"""

from delegation.classifier import analyze_divisions, assess_complexity, score_divisions
from delegation.task import Complexity


class TestAnalyzeDivisions:
    """Tests for keyword-based division ranking"""

    def test_single_security_keyword(self):
        assert analyze_divisions("vulnerability", "") == ["security"]

    def test_default_is_production(self):
        assert analyze_divisions("Lunch order", "sandwiches") == ["production"]

    def test_ranked_by_score(self):
        divisions = analyze_divisions("Budget invoice", "and one brand refresh")
        assert divisions == ["accounting", "marketing"]

    def test_ties_keep_table_order(self):
        divisions = analyze_divisions("Launch campaign", "deploy build")
        assert divisions == ["marketing", "production"]

    def test_truncated_to_three(self):
        divisions = analyze_divisions(
            "brand research test build security legal budget", "",
        )
        assert len(divisions) == 3

    def test_substring_matching(self):
        """Plain containment: 'testingroom' still counts as testing"""
        assert "testing" in score_divisions("testingroom", "")

    def test_case_insensitive(self):
        assert analyze_divisions("FIREWALL", "") == ["security"]


class TestAssessComplexity:
    """Tests for standard / complex / swarm classification"""

    def test_standard(self):
        assert assess_complexity("Fix typo", "", "P2") == Complexity.STANDARD

    def test_complex_keyword(self):
        assert assess_complexity("Migrate database", "", "normal") == Complexity.COMPLEX

    def test_high_priority_is_complex(self):
        assert assess_complexity("Fix typo", "", "high") == Complexity.COMPLEX

    def test_swarm_keyword(self):
        assert assess_complexity("Cross-division review", "", "P1") == Complexity.SWARM

    def test_critical_priority_is_swarm(self):
        assert assess_complexity("Fix typo", "", "Critical") == Complexity.SWARM

    def test_swarm_wins_over_complex(self):
        assert assess_complexity("All hands rewrite", "", "high") == Complexity.SWARM

    def test_missing_priority(self):
        assert assess_complexity("Fix typo", None, None) == Complexity.STANDARD

    def test_non_string_priority(self):
        assert assess_complexity("Fix typo", "", 2) == Complexity.STANDARD
