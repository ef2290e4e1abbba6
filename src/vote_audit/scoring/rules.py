"""Ordered, weighted suspicion rules over candidate features."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Final, Union

from vote_audit.features.extract import CandidateFeatures

Predicate = Callable[[CandidateFeatures], bool]
Weight = Union[int, Callable[[CandidateFeatures], int]]
Reason = Union[str, Callable[[CandidateFeatures], str]]


@dataclass(frozen=True, slots=True)
class ScoringRule:
    """One additive rule.

    Rules sharing a `ladder` form an else-if chain: only the first matching
    rule of the ladder contributes. `only_if_unscored` rules fire only while
    the running score is still zero.
    """

    name: str
    predicate: Predicate
    weight: Weight
    reason: Reason
    ladder: str | None = None
    only_if_unscored: bool = False

    def points(self, features: CandidateFeatures) -> int:
        return int(self.weight(features)) if callable(self.weight) else int(self.weight)

    def describe(self, features: CandidateFeatures) -> str:
        return self.reason(features) if callable(self.reason) else self.reason


CONCENTRATION_RULES: Final[tuple[ScoringRule, ...]] = (
    ScoringRule(
        name="single_ip",
        predicate=lambda f: f.unique_ips == 1 and f.total_votes > 2,
        weight=1000,
        reason="all votes from single IP",
    ),
    ScoringRule(
        name="ip_dominant_share",
        predicate=lambda f: f.max_votes_from_single_ip > 0.8 * f.total_votes and f.total_votes > 10,
        weight=800,
        reason=lambda f: (
            f"{f.max_votes_from_single_ip} of {f.total_votes} votes from one IP"
        ),
        ladder="ip_concentration",
    ),
    ScoringRule(
        name="ip_heavy_count",
        predicate=lambda f: f.max_votes_from_single_ip > 50,
        weight=500,
        reason=lambda f: f"{f.max_votes_from_single_ip} votes from one IP",
        ladder="ip_concentration",
    ),
    ScoringRule(
        name="burst_120s",
        predicate=lambda f: f.total_votes > 20 and f.time_range_seconds < 120,
        weight=600,
        reason=lambda f: f"{f.total_votes} votes within {f.time_range_seconds:.0f}s",
        ladder="burst_rate",
    ),
    ScoringRule(
        name="burst_60s",
        predicate=lambda f: f.total_votes > 10 and f.time_range_seconds < 60,
        weight=400,
        reason=lambda f: f"{f.total_votes} votes within {f.time_range_seconds:.0f}s",
        ladder="burst_rate",
    ),
    ScoringRule(
        name="time_clustering",
        predicate=lambda f: f.time_clustering_ratio > 0.7 and f.total_votes > 15,
        weight=300,
        reason=lambda f: f"{f.time_clustering_ratio:.0%} of votes in densest time window",
    ),
    ScoringRule(
        name="votes_per_ip",
        predicate=lambda f: f.votes_per_ip > 30,
        weight=200,
        reason=lambda f: f"{f.votes_per_ip:.1f} votes per IP",
    ),
)

SLIDING_WINDOW_RULES: Final[tuple[ScoringRule, ...]] = (
    ScoringRule(
        name="dedicated_ips",
        predicate=lambda f: f.dedicated_ip_votes > 0,
        weight=lambda f: f.dedicated_ip_votes * 2,
        reason=lambda f: f"{f.dedicated_ip_votes} votes from IPs voting only for this candidate",
    ),
    ScoringRule(
        name="heavy_shared_ips",
        predicate=lambda f: f.shared_ip_load > 0,
        weight=lambda f: f.shared_ip_load,
        reason=lambda f: f"share of {f.shared_ip_load} votes from high-volume IPs",
    ),
    ScoringRule(
        name="few_ips_many_votes",
        predicate=lambda f: f.total_votes > 50 and 0 < f.unique_ips < 5,
        weight=lambda f: (f.total_votes // f.unique_ips) * 3,
        reason=lambda f: f"{f.total_votes} votes from {f.unique_ips} IPs",
    ),
    ScoringRule(
        name="window_burst",
        predicate=lambda f: f.max_votes_in_window > 20,
        weight=lambda f: f.max_votes_in_window * 5,
        reason=lambda f: f"{f.max_votes_in_window} votes inside one short window",
    ),
    ScoringRule(
        name="bulk_votes",
        predicate=lambda f: f.total_votes > 1000,
        weight=lambda f: f.total_votes // 10,
        reason=lambda f: f"{f.total_votes} votes with no other signal",
        only_if_unscored=True,
    ),
)

RULE_POLICIES: Final[dict[str, tuple[ScoringRule, ...]]] = {
    "concentration": CONCENTRATION_RULES,
    "sliding_window": SLIDING_WINDOW_RULES,
}


def rules_for_policy(policy: str) -> tuple[ScoringRule, ...]:
    """Return the rule tuple registered under `policy`."""

    try:
        return RULE_POLICIES[policy]
    except KeyError as exc:
        allowed = ",".join(sorted(RULE_POLICIES))
        raise ValueError(f"Unknown scoring policy {policy!r}; expected one of: {allowed}") from exc
