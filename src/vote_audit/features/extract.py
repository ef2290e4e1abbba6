"""Per-candidate aggregate features from consolidated vote records."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np
import polars as pl

from vote_audit.consolidate.groups import Consolidation
from vote_audit.records import RecordStore

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FeatureParams:
    """Window sizes and IP thresholds used while extracting features."""

    cluster_window_fraction: float = 0.05
    burst_window_seconds: float = 60.0
    burst_min_votes: int = 10
    dedicated_ip_min_votes: int = 15
    heavy_ip_min_votes: int = 30

    def __post_init__(self) -> None:
        if not 0.0 < self.cluster_window_fraction <= 1.0:
            raise ValueError("cluster_window_fraction must be in (0, 1].")
        if self.burst_window_seconds <= 0:
            raise ValueError("burst_window_seconds must be positive.")


@dataclass(frozen=True, slots=True)
class CandidateFeatures:
    """Read-only aggregate snapshot for one canonical candidate."""

    candidate: str
    total_votes: int
    unique_ips: int
    votes_per_ip: float
    max_votes_from_single_ip: int
    time_range_seconds: float
    time_clustering_ratio: float
    ip_votes_count: dict[str | None, int] = field(default_factory=dict)
    max_votes_in_window: int = 0
    dedicated_ip_votes: int = 0
    shared_ip_load: int = 0

    def as_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload.pop("ip_votes_count")
        return payload


def time_clustering_ratio(seconds: np.ndarray, window_fraction: float = 0.05) -> float:
    """Share of votes inside the densest window of `window_fraction` x total range.

    Every timestamp is tried as a window start and the window `[t, t + w]` is
    closed on both ends.
    """

    n = int(seconds.shape[0])
    if n == 0:
        return 0.0
    ordered = np.sort(seconds)
    total_range = float(ordered[-1] - ordered[0])
    if total_range <= 0:
        return 1.0
    window = window_fraction * total_range
    ends = np.searchsorted(ordered, ordered + window, side="right")
    densest = int((ends - np.arange(n)).max())
    return densest / n


def max_votes_in_window(seconds: np.ndarray, window_seconds: float, min_votes: int = 1) -> int:
    """Largest number of votes whose timestamps fit in any span of `window_seconds`."""

    n = int(seconds.shape[0])
    if n == 0 or n < min_votes:
        return 0
    ordered = np.sort(seconds)
    starts = np.searchsorted(ordered, ordered - window_seconds, side="left")
    return int((np.arange(n) - starts + 1).max())


def _with_canonical(frame: pl.DataFrame, consolidation: Consolidation) -> pl.DataFrame:
    mapping = pl.DataFrame(
        {
            "candidate_raw": list(consolidation.canonical_by_variant.keys()),
            "candidate": list(consolidation.canonical_by_variant.values()),
        },
        schema={"candidate_raw": pl.String, "candidate": pl.String},
    )
    return frame.join(mapping, on="candidate_raw", how="left")


def _ip_breakdown(frame: pl.DataFrame) -> pl.DataFrame:
    """Votes per (candidate, ip) with the IP's overall totals attached."""

    return (
        frame.with_columns(
            [
                pl.len().over("ip").alias("ip_total"),
                pl.col("candidate").n_unique().over("ip").alias("ip_candidates"),
            ]
        )
        .group_by(["candidate", "ip"], maintain_order=True)
        .agg(
            [
                pl.len().alias("votes"),
                pl.col("ip_total").first(),
                pl.col("ip_candidates").first(),
            ]
        )
    )


def extract_features(
    store: RecordStore,
    consolidation: Consolidation,
    params: FeatureParams | None = None,
    *,
    logger: logging.Logger | None = None,
) -> dict[str, CandidateFeatures]:
    """Compute `CandidateFeatures` for every canonical group, in group order."""

    effective_logger = logger or LOGGER
    feature_params = params or FeatureParams()
    if store.is_empty:
        return {}

    frame = _with_canonical(store.frame, consolidation)
    unmapped = frame.filter(pl.col("candidate").is_null()).height
    if unmapped:
        raise ValueError(f"{unmapped} records have no consolidated candidate.")

    breakdown = _ip_breakdown(frame)
    ip_rows: dict[str, list[dict[str, Any]]] = {}
    for row in breakdown.iter_rows(named=True):
        ip_rows.setdefault(row["candidate"], []).append(row)

    seconds_by_candidate: dict[str, np.ndarray] = {}
    timestamps = frame.group_by("candidate").agg(
        (pl.col("timestamp").dt.epoch("us").cast(pl.Float64) / 1_000_000.0).alias("seconds")
    )
    for candidate, seconds in timestamps.iter_rows():
        seconds_by_candidate[candidate] = np.sort(np.asarray(seconds, dtype=np.float64))

    features: dict[str, CandidateFeatures] = {}
    for canonical in consolidation.canonical_names:
        rows = ip_rows.get(canonical, [])
        ip_votes_count = {row["ip"]: int(row["votes"]) for row in rows}
        total_votes = sum(ip_votes_count.values())
        unique_ips = len(ip_votes_count)
        seconds = seconds_by_candidate.get(canonical, np.empty(0, dtype=np.float64))
        time_range = float(seconds[-1] - seconds[0]) if seconds.shape[0] >= 2 else 0.0

        dedicated = sum(
            int(row["votes"])
            for row in rows
            if row["ip_candidates"] == 1 and row["ip_total"] > feature_params.dedicated_ip_min_votes
        )
        shared = sum(
            int(row["ip_total"]) // int(row["ip_candidates"])
            for row in rows
            if row["ip_total"] > feature_params.heavy_ip_min_votes
        )

        features[canonical] = CandidateFeatures(
            candidate=canonical,
            total_votes=total_votes,
            unique_ips=unique_ips,
            votes_per_ip=total_votes / unique_ips if unique_ips > 0 else 0.0,
            max_votes_from_single_ip=max(ip_votes_count.values(), default=0),
            time_range_seconds=time_range,
            time_clustering_ratio=time_clustering_ratio(seconds, feature_params.cluster_window_fraction),
            ip_votes_count=ip_votes_count,
            max_votes_in_window=max_votes_in_window(
                seconds,
                feature_params.burst_window_seconds,
                feature_params.burst_min_votes,
            ),
            dedicated_ip_votes=dedicated,
            shared_ip_load=shared,
        )

    effective_logger.info(
        "features.done candidates=%s records=%s",
        len(features),
        store.total_votes,
    )
    return features


def features_frame(features: dict[str, CandidateFeatures]) -> pl.DataFrame:
    """Flatten features into a frame for reporting, one row per candidate."""

    schema = {
        "candidate": pl.String,
        "total_votes": pl.Int64,
        "unique_ips": pl.Int64,
        "votes_per_ip": pl.Float64,
        "max_votes_from_single_ip": pl.Int64,
        "time_range_seconds": pl.Float64,
        "time_clustering_ratio": pl.Float64,
        "max_votes_in_window": pl.Int64,
        "dedicated_ip_votes": pl.Int64,
        "shared_ip_load": pl.Int64,
    }
    if not features:
        return pl.DataFrame(schema=schema)
    return pl.DataFrame([item.as_dict() for item in features.values()], schema=schema)
