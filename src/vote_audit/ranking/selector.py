"""Fraud-candidate selection and the clean vote ranking."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from vote_audit.scoring.scorer import SuspicionVerdict, is_exempt

LOGGER = logging.getLogger(__name__)

BACKFILL_REASON = "backfilled from top vote-getters"


@dataclass(frozen=True, slots=True)
class RankingOptions:
    """How many fraud candidates to name and how long the clean ranking is."""

    fraud_count: int = 2
    ranking_size: int = 20
    backfill: bool = False


@dataclass(frozen=True, slots=True)
class RankingResult:
    """Selected fraud candidates and the clean ranking of everyone else."""

    fraud_candidates: tuple[SuspicionVerdict, ...]
    clean_ranking: tuple[tuple[str, int], ...]
    clean_candidates_total: int

    @property
    def fraud_names(self) -> list[str]:
        return [verdict.candidate for verdict in self.fraud_candidates]


def rank_by_score(verdicts: Sequence[SuspicionVerdict]) -> list[SuspicionVerdict]:
    """Sort verdicts by score descending; equal scores keep input order."""

    return sorted(verdicts, key=lambda verdict: -verdict.score)


def rank_by_votes(votes: Mapping[str, int]) -> list[tuple[str, int]]:
    """Sort candidates by votes descending; equal counts keep mapping order."""

    return sorted(votes.items(), key=lambda item: -item[1])


def select_rankings(
    verdicts: Sequence[SuspicionVerdict],
    corrected_votes: Mapping[str, int],
    options: RankingOptions | None = None,
    *,
    exempt_names: Iterable[str] | None = None,
    logger: logging.Logger | None = None,
) -> RankingResult:
    """Pick the top suspicious candidates and rank the remainder by votes."""

    effective_logger = logger or LOGGER
    ranking_options = options or RankingOptions()
    exempt = list(exempt_names or [])

    selected: list[SuspicionVerdict] = [
        verdict for verdict in rank_by_score(verdicts) if verdict.score > 0
    ][: ranking_options.fraud_count]

    if ranking_options.backfill and len(selected) < ranking_options.fraud_count:
        chosen = {verdict.candidate for verdict in selected}
        for candidate, votes in rank_by_votes(corrected_votes):
            if len(selected) >= ranking_options.fraud_count:
                break
            if candidate in chosen or is_exempt(candidate, exempt):
                continue
            selected.append(
                SuspicionVerdict(
                    candidate=candidate,
                    score=0,
                    reasons=(BACKFILL_REASON,),
                    vote_count=votes,
                )
            )
            chosen.add(candidate)

    fraud_names = {verdict.candidate for verdict in selected}
    clean_votes = {candidate: votes for candidate, votes in corrected_votes.items() if candidate not in fraud_names}
    ranking = rank_by_votes(clean_votes)

    effective_logger.info(
        "ranking.done fraud=%s clean_total=%s shown=%s backfill=%s",
        len(selected),
        len(ranking),
        min(len(ranking), ranking_options.ranking_size),
        ranking_options.backfill,
    )
    return RankingResult(
        fraud_candidates=tuple(selected),
        clean_ranking=tuple(ranking[: ranking_options.ranking_size]),
        clean_candidates_total=len(ranking),
    )
