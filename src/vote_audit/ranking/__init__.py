"""Fraud selection and clean ranking."""

from vote_audit.ranking.selector import (
    BACKFILL_REASON,
    RankingOptions,
    RankingResult,
    rank_by_score,
    rank_by_votes,
    select_rankings,
)

__all__ = [
    "BACKFILL_REASON",
    "RankingOptions",
    "RankingResult",
    "rank_by_score",
    "rank_by_votes",
    "select_rankings",
]
