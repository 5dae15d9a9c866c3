# delegation/classifier.py — keyword routing of task text to divisions and complexity

from __future__ import annotations
from typing import Any, Optional

from delegation.task import Complexity
from settings import (
    COMPLEX_KEYWORDS, DEFAULT_DIVISION, DIVISION_KEYWORDS, MAX_TASK_DIVISIONS,
    PRIORITY_CRITICAL, PRIORITY_HIGH, SWARM_KEYWORDS,
)

# Matching is plain substring containment on lower-cased text, so
# "test" also hits "testingroom".


def _task_text(title: str, description: str) -> str:
    return f"{title or ''} {description or ''}".lower()


def score_divisions(
    title: str,
    description: str,
    keywords: Optional[dict[str, list[str]]] = None,
) -> dict[str, int]:
    """Keyword hit count per division, for divisions with at least one hit."""
    text = _task_text(title, description)
    scores: dict[str, int] = {}
    for division, words in (keywords or DIVISION_KEYWORDS).items():
        score = sum(1 for kw in words if kw in text)
        if score > 0:
            scores[division] = score
    return scores


def analyze_divisions(
    title: str,
    description: str,
    keywords: Optional[dict[str, list[str]]] = None,
    limit: int = MAX_TASK_DIVISIONS,
) -> list[str]:
    """Top divisions by score (ties keep keyword-table order), or the default."""
    scores = score_divisions(title, description, keywords)
    if not scores:
        return [DEFAULT_DIVISION]
    ranked = sorted(scores, key=lambda d: scores[d], reverse=True)
    return ranked[:limit]


def assess_complexity(title: str, description: str, priority: Any) -> Complexity:
    text = _task_text(title, description)
    tier = str(priority or "").strip().lower()

    if any(kw in text for kw in SWARM_KEYWORDS) or tier == PRIORITY_CRITICAL:
        return Complexity.SWARM
    if any(kw in text for kw in COMPLEX_KEYWORDS) or tier == PRIORITY_HIGH:
        return Complexity.COMPLEX
    return Complexity.STANDARD
