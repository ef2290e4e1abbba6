"""
Tests for per-candidate feature extraction.
"""

import numpy as np
import pytest

from vote_audit.consolidate.groups import consolidate_names
from vote_audit.features.extract import (
    FeatureParams,
    extract_features,
    features_frame,
    max_votes_in_window,
    time_clustering_ratio,
)
from vote_audit.records import RecordStore


def _features_for(store, **params):
    consolidation = consolidate_names(store.name_counts())
    return extract_features(store, consolidation, FeatureParams(**params) if params else None)


class TestTimeClusteringRatio:
    """Tests for the densest-window ratio."""

    def test_identical_timestamps(self):
        """All simultaneous votes give ratio 1."""
        assert time_clustering_ratio(np.array([5.0, 5.0, 5.0])) == 1.0

    def test_single_vote(self):
        """One vote has zero range, ratio 1."""
        assert time_clustering_ratio(np.array([42.0])) == 1.0

    def test_no_votes(self):
        """Empty input is guarded, not divided by zero."""
        assert time_clustering_ratio(np.array([])) == 0.0

    def test_evenly_spread(self):
        """Maximally spread votes reach the 1/n floor."""
        seconds = np.arange(10, dtype=float) * 100.0
        assert time_clustering_ratio(seconds) == pytest.approx(0.1)

    def test_clustered(self):
        """Nine votes in a burst and one straggler."""
        seconds = np.array([0, 1, 2, 3, 4, 5, 6, 7, 8, 1000], dtype=float)
        assert time_clustering_ratio(seconds) == pytest.approx(0.9)

    def test_bounds(self):
        """The ratio always stays within [0, 1]."""
        rng = np.random.default_rng(7)
        for _ in range(20):
            seconds = rng.uniform(0, 5000, size=int(rng.integers(1, 60)))
            ratio = time_clustering_ratio(seconds)
            assert 0.0 <= ratio <= 1.0

    def test_unsorted_input(self):
        """Order of input does not matter."""
        seconds = np.array([1000, 3, 0, 8, 2, 5, 1, 7, 6, 4], dtype=float)
        assert time_clustering_ratio(seconds) == pytest.approx(0.9)


class TestMaxVotesInWindow:
    """Tests for the fixed-width sliding window count."""

    def test_window_is_inclusive(self):
        """Votes exactly window-seconds apart share a window."""
        seconds = np.arange(11, dtype=float) * 10.0
        assert max_votes_in_window(seconds, 60.0) == 7

    def test_min_votes_guard(self):
        """Too few votes yields 0."""
        seconds = np.arange(5, dtype=float)
        assert max_votes_in_window(seconds, 60.0, min_votes=10) == 0

    def test_empty(self):
        assert max_votes_in_window(np.array([]), 60.0) == 0


class TestExtractFeatures:
    """Tests for per-group aggregates."""

    def test_single_ip_typo_scenario(self, make_store):
        """Three votes, one IP, two spellings: one candidate."""
        store = make_store(
            [
                ("1.1.1.1", "Jon Smith", 0),
                ("1.1.1.1", "Jon Smith", 1),
                ("1.1.1.1", "Jon Smyth", 2),
            ]
        )
        features = _features_for(store)
        assert list(features) == ["Jon Smith"]
        item = features["Jon Smith"]
        assert item.total_votes == 3
        assert item.unique_ips == 1
        assert item.max_votes_from_single_ip == 3
        assert item.votes_per_ip == pytest.approx(3.0)
        assert item.time_range_seconds == pytest.approx(2.0)
        assert item.time_clustering_ratio == pytest.approx(1 / 3)
        assert item.ip_votes_count == {"1.1.1.1": 3}

    def test_group_order_follows_consolidation(self, make_store):
        """Features come back in canonical-group order."""
        store = make_store(
            [
                ("a", "Boris Chen", 0),
                ("b", "Anna Lee", 1),
                ("c", "Anna Lee", 2),
            ]
        )
        assert list(_features_for(store)) == ["Anna Lee", "Boris Chen"]

    def test_single_record(self, make_store):
        """One record: zero range, ratio 1."""
        features = _features_for(make_store([("a", "Anna Lee", 0)]))
        item = features["Anna Lee"]
        assert item.time_range_seconds == 0.0
        assert item.time_clustering_ratio == 1.0

    def test_missing_ip_counts_as_one_value(self, make_store):
        """A null IP is still a distinct IP value."""
        features = _features_for(make_store([(None, "Anna Lee", 0), (None, "Anna Lee", 5), ("a", "Anna Lee", 9)]))
        item = features["Anna Lee"]
        assert item.unique_ips == 2
        assert item.ip_votes_count == {None: 2, "a": 1}

    def test_dedicated_and_shared_ips(self, make_store):
        """IP-level aggregates used by the sliding-window rules."""
        rows = [("9.9.9.9", "Alice Walker", i) for i in range(16)]
        rows += [("8.8.8.8", "Boris Chen", 100 + i) for i in range(20)]
        rows += [("8.8.8.8", "Gregory Novak", 200 + i) for i in range(11)]
        features = _features_for(make_store(rows))
        assert features["Alice Walker"].dedicated_ip_votes == 16
        assert features["Alice Walker"].shared_ip_load == 0
        assert features["Boris Chen"].dedicated_ip_votes == 0
        assert features["Boris Chen"].shared_ip_load == 15
        assert features["Gregory Novak"].shared_ip_load == 15

    def test_window_count(self, make_store):
        """Burst count respects the configured minimum."""
        rows = [(f"10.0.0.{i}", "Anna Lee", i) for i in range(12)]
        store = make_store(rows)
        assert _features_for(store)["Anna Lee"].max_votes_in_window == 12
        assert _features_for(store, burst_min_votes=20)["Anna Lee"].max_votes_in_window == 0

    def test_empty_store(self):
        """No records, no features."""
        store = RecordStore()
        assert extract_features(store, consolidate_names(store.name_counts())) == {}

    def test_invalid_params(self):
        """Window fraction must be a proper fraction."""
        with pytest.raises(ValueError):
            FeatureParams(cluster_window_fraction=0.0)

    def test_features_frame(self, make_store):
        """Frame has one row per candidate."""
        features = _features_for(make_store([("a", "Anna Lee", 0), ("b", "Boris Chen", 1)]))
        frame = features_frame(features)
        assert frame.height == 2
        assert frame["candidate"].to_list() == ["Anna Lee", "Boris Chen"]
        assert features_frame({}).height == 0
