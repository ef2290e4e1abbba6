"""Batch orchestration for one vote-log analysis run."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from uuid import uuid4

import polars as pl

from vote_audit.config import AppSettings
from vote_audit.consolidate.groups import Consolidation, ConsolidationMethod, consolidate_names
from vote_audit.features.extract import CandidateFeatures, FeatureParams, extract_features
from vote_audit.ingest.read_log import read_vote_log_with_rejects
from vote_audit.ranking.selector import RankingOptions, RankingResult, select_rankings
from vote_audit.records import RecordStore
from vote_audit.scoring.rules import CONCENTRATION_RULES, ScoringRule, rules_for_policy
from vote_audit.scoring.scorer import SuspicionVerdict, score_candidates
from vote_audit.transform.normalize import normalize_vote_rows
from vote_audit.utils.paths import write_json_atomically
from vote_audit.utils.time_utils import now_utc

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AnalysisOptions:
    """Every policy knob of the core pipeline in one place."""

    method: ConsolidationMethod = "edit_distance"
    max_edit_distance: int = 2
    max_length_gap: int = 2
    prefix_key_length: int = 8
    feature_params: FeatureParams = field(default_factory=FeatureParams)
    rules: tuple[ScoringRule, ...] = CONCENTRATION_RULES
    exempt_names: tuple[str, ...] = ()
    ranking: RankingOptions = field(default_factory=RankingOptions)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "AnalysisOptions":
        """Build options from loaded application settings."""

        return cls(
            method=settings.consolidation.method,
            max_edit_distance=settings.consolidation.max_edit_distance,
            max_length_gap=settings.consolidation.max_length_gap,
            prefix_key_length=settings.consolidation.prefix_key_length,
            feature_params=FeatureParams(
                cluster_window_fraction=settings.features.cluster_window_fraction,
                burst_window_seconds=settings.features.burst_window_seconds,
                burst_min_votes=settings.features.burst_min_votes,
                dedicated_ip_min_votes=settings.features.dedicated_ip_min_votes,
                heavy_ip_min_votes=settings.features.heavy_ip_min_votes,
            ),
            rules=rules_for_policy(settings.scoring.policy),
            exempt_names=tuple(settings.scoring.exempt_names),
            ranking=RankingOptions(
                fraud_count=settings.ranking.fraud_count,
                ranking_size=settings.ranking.ranking_size,
                backfill=settings.ranking.backfill,
            ),
        )


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Everything produced by one pass over a record store."""

    consolidation: Consolidation
    features: dict[str, CandidateFeatures]
    verdicts: tuple[SuspicionVerdict, ...]
    ranking: RankingResult

    @property
    def corrected_votes(self) -> dict[str, int]:
        return self.consolidation.corrected_votes


@dataclass(frozen=True, slots=True)
class AnalysisRunResult:
    """Return object for a file-backed analysis run."""

    run_id: str
    analysis: AnalysisResult
    rejects: pl.DataFrame
    summary: dict[str, Any]
    summary_path: Path | None


def analyze(
    store: RecordStore,
    options: AnalysisOptions | None = None,
    *,
    logger: logging.Logger | None = None,
) -> AnalysisResult:
    """Consolidate names, extract features, score, and rank."""

    effective_logger = logger or LOGGER
    run_options = options or AnalysisOptions()

    consolidation = consolidate_names(
        store.name_counts(),
        method=run_options.method,
        max_distance=run_options.max_edit_distance,
        max_length_gap=run_options.max_length_gap,
        key_length=run_options.prefix_key_length,
        logger=effective_logger,
    )
    features = extract_features(store, consolidation, run_options.feature_params, logger=effective_logger)
    verdicts = score_candidates(
        features,
        run_options.rules,
        exempt_names=run_options.exempt_names,
        logger=effective_logger,
    )
    ranking = select_rankings(
        verdicts,
        consolidation.corrected_votes,
        run_options.ranking,
        exempt_names=run_options.exempt_names,
        logger=effective_logger,
    )
    return AnalysisResult(
        consolidation=consolidation,
        features=features,
        verdicts=tuple(verdicts),
        ranking=ranking,
    )


def build_summary(
    run_id: str,
    analysis: AnalysisResult,
    *,
    input_file: Path | None,
    records_total: int,
    rejects: pl.DataFrame,
    duration_sec: float,
) -> dict[str, Any]:
    """Assemble the JSON-friendly run summary."""

    reject_counts: dict[str, int] = {}
    if rejects.height > 0:
        for reason, count in rejects.group_by("reason").agg(pl.len().alias("n")).sort("reason").iter_rows():
            reject_counts[str(reason)] = int(count)

    return {
        "run_id": run_id,
        "generated_ts": now_utc().isoformat(),
        "input_file": str(input_file) if input_file is not None else None,
        "records_total": records_total,
        "rejects_total": rejects.height,
        "reject_counts": reject_counts,
        "candidates_total": len(analysis.consolidation.groups),
        "name_groups": [
            {"canonical": group.canonical_name, "variants": list(group.variants)}
            for group in analysis.consolidation.groups
            if len(group.variants) > 1
        ],
        "fraud_candidates": [verdict.as_dict() for verdict in analysis.ranking.fraud_candidates],
        "clean_ranking": [
            {"rank": rank, "candidate": candidate, "votes": votes}
            for rank, (candidate, votes) in enumerate(analysis.ranking.clean_ranking, start=1)
        ],
        "suspicious_total": len(analysis.verdicts),
        "duration_sec": round(duration_sec, 3),
    }


def run_analysis(
    settings: AppSettings,
    *,
    input_file: Path | None = None,
    output_json: Path | None = None,
    logger: logging.Logger | None = None,
) -> AnalysisRunResult:
    """Read the vote log, analyze it, and optionally write a JSON summary.

    An unreadable input raises `InputUnavailableError` before anything is written.
    """

    effective_logger = logger or LOGGER
    source = input_file or settings.paths.input_file
    run_id = f"vote-audit-{uuid4().hex[:12]}"
    started_mono = time.monotonic()

    effective_logger.info("analysis_run.start run_id=%s input=%s", run_id, source)
    raw_result = read_vote_log_with_rejects(source, logger=effective_logger)
    normalized = normalize_vote_rows(raw_result.data)
    for row in normalized.rejects.iter_rows(named=True):
        effective_logger.warning(
            "normalize.rejected_line source=%s line=%s reason=%s",
            source,
            row["source_line_no"],
            row["reason"],
        )
    rejects = pl.concat([raw_result.rejects, normalized.rejects], how="vertical").sort("source_line_no")

    store = RecordStore(normalized.records)
    analysis = analyze(store, AnalysisOptions.from_settings(settings), logger=effective_logger)

    summary = build_summary(
        run_id,
        analysis,
        input_file=source,
        records_total=store.total_votes,
        rejects=rejects,
        duration_sec=time.monotonic() - started_mono,
    )
    summary_path = write_json_atomically(summary, output_json) if output_json is not None else None

    effective_logger.info(
        "analysis_run.done run_id=%s records=%s rejects=%s candidates=%s fraud=%s summary=%s",
        run_id,
        store.total_votes,
        rejects.height,
        summary["candidates_total"],
        analysis.ranking.fraud_names,
        summary_path,
    )
    return AnalysisRunResult(
        run_id=run_id,
        analysis=analysis,
        rejects=rejects,
        summary=summary,
        summary_path=summary_path,
    )
