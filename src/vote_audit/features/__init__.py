"""Per-candidate feature extraction."""

from vote_audit.features.extract import (
    CandidateFeatures,
    FeatureParams,
    extract_features,
    features_frame,
    max_votes_in_window,
    time_clustering_ratio,
)

__all__ = [
    "CandidateFeatures",
    "FeatureParams",
    "extract_features",
    "features_frame",
    "max_votes_in_window",
    "time_clustering_ratio",
]
