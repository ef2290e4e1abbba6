"""Suspicion scoring rules and scorer."""

from vote_audit.scoring.rules import (
    CONCENTRATION_RULES,
    RULE_POLICIES,
    SLIDING_WINDOW_RULES,
    ScoringRule,
    rules_for_policy,
)
from vote_audit.scoring.scorer import SuspicionVerdict, is_exempt, score_candidate, score_candidates

__all__ = [
    "CONCENTRATION_RULES",
    "RULE_POLICIES",
    "SLIDING_WINDOW_RULES",
    "ScoringRule",
    "rules_for_policy",
    "SuspicionVerdict",
    "is_exempt",
    "score_candidate",
    "score_candidates",
]
