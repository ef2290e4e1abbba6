"""Apply suspicion rules to candidate features."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from vote_audit.features.extract import CandidateFeatures
from vote_audit.scoring.rules import CONCENTRATION_RULES, ScoringRule

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SuspicionVerdict:
    """Score and triggered reasons for one suspicious candidate."""

    candidate: str
    score: int
    reasons: tuple[str, ...]
    vote_count: int
    rules: tuple[str, ...] = field(default=())

    def as_dict(self) -> dict[str, object]:
        return {
            "candidate": self.candidate,
            "score": self.score,
            "reasons": list(self.reasons),
            "vote_count": self.vote_count,
            "rules": list(self.rules),
        }


def _normalize_exempt(exempt_names: Iterable[str] | None) -> frozenset[str]:
    if not exempt_names:
        return frozenset()
    return frozenset(name.strip().casefold() for name in exempt_names if name.strip())


def is_exempt(candidate: str, exempt_names: Iterable[str] | None) -> bool:
    """Case-insensitive membership test against the exemption set."""

    return candidate.strip().casefold() in _normalize_exempt(exempt_names)


def score_candidate(
    features: CandidateFeatures,
    rules: Sequence[ScoringRule] = CONCENTRATION_RULES,
) -> SuspicionVerdict:
    """Run every rule in order and accumulate points and reasons."""

    score = 0
    reasons: list[str] = []
    fired: list[str] = []
    settled_ladders: set[str] = set()

    for rule in rules:
        if rule.ladder is not None and rule.ladder in settled_ladders:
            continue
        if rule.only_if_unscored and score != 0:
            continue
        if not rule.predicate(features):
            continue
        if rule.ladder is not None:
            settled_ladders.add(rule.ladder)
        score += rule.points(features)
        reasons.append(rule.describe(features))
        fired.append(rule.name)

    return SuspicionVerdict(
        candidate=features.candidate,
        score=score,
        reasons=tuple(reasons),
        vote_count=features.total_votes,
        rules=tuple(fired),
    )


def score_candidates(
    features: dict[str, CandidateFeatures],
    rules: Sequence[ScoringRule] = CONCENTRATION_RULES,
    *,
    exempt_names: Iterable[str] | None = None,
    logger: logging.Logger | None = None,
) -> list[SuspicionVerdict]:
    """Score all candidates, keeping only nonzero verdicts in input order."""

    effective_logger = logger or LOGGER
    exempt = _normalize_exempt(exempt_names)
    verdicts: list[SuspicionVerdict] = []
    exempt_count = 0

    for candidate, candidate_features in features.items():
        if candidate.strip().casefold() in exempt:
            exempt_count += 1
            continue
        verdict = score_candidate(candidate_features, rules)
        if verdict.score > 0:
            verdicts.append(verdict)

    effective_logger.info(
        "scoring.done candidates=%s suspicious=%s exempt=%s",
        len(features),
        len(verdicts),
        exempt_count,
    )
    return verdicts
